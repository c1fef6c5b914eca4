"""
pytest 공통 fixture 정의

설정 파일, 임시 DB, Ledger 등 공용 fixture
"""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.mock.vault_repository import MockVaultRepository
from core.config.loader import Settings
from core.vault.ledger import VaultLedger
from core.vault.store import VaultStore


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (sandbox 모드)"""
    settings_content = f"""# 테스트용 settings.yaml
mode: sandbox

vault:
  default_name: "Cofre Teste"

web:
  host: "0.0.0.0"
  port: 8080
  default_user_id: "user-default"

database:
  path: "{(temp_dir / 'cofre_test.db').as_posix()}"
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_production(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (production 모드, 최소 설정)"""
    settings_path = temp_dir / "settings_prod.yaml"
    settings_path.write_text("mode: production\n", encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_invalid_mode(temp_dir: Path) -> Path:
    """잘못된 모드의 settings.yaml 파일 생성"""
    settings_path = temp_dir / "settings_invalid.yaml"
    settings_path.write_text("mode: staging\n", encoding="utf-8")
    return settings_path


@pytest.fixture
def reset_settings():
    """Settings 싱글턴 초기화 (테스트 전후)"""
    Settings.reset()
    yield
    Settings.reset()


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> SQLiteAdapter:
    """스키마가 초기화된 임시 SQLite DB"""
    adapter = SQLiteAdapter(tmp_path / "cofre_test.db")
    await adapter.connect()
    await init_schema(adapter)

    yield adapter

    await adapter.close()


@pytest.fixture
def store(db: SQLiteAdapter) -> VaultStore:
    """VaultStore 인스턴스"""
    return VaultStore(db)


@pytest.fixture
def mock_repo() -> MockVaultRepository:
    """인메모리 저장소"""
    return MockVaultRepository()


@pytest.fixture
def mock_ledger(mock_repo: MockVaultRepository) -> VaultLedger:
    """인메모리 저장소 기반 VaultLedger"""
    return VaultLedger(mock_repo)
