"""
설정 로더

settings.yaml 로드 및 모드별 DB 경로 결정
"""

from dataclasses import dataclass
from pathlib import Path

import yaml

from core.constants import Defaults, Paths
from core.types import AppMode


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    mode: AppMode
    default_vault_name: str = Defaults.VAULT_NAME
    web_host: str = Defaults.WEB_HOST
    web_port: int = Defaults.WEB_PORT
    default_user_id: str = Defaults.USER_ID
    db_path_override: Path | None = None


class SettingsLoadError(Exception):
    """settings.yaml 로드 실패 예외"""

    pass


def load_config(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
        ValueError: 유효하지 않은 mode인 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SettingsLoadError("settings.yaml이 비어 있습니다")

    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    mode_str = data.get("mode")
    if mode_str is None:
        raise SettingsLoadError("settings.yaml에 'mode' 필드가 없습니다")

    try:
        mode = AppMode(str(mode_str).lower())
    except ValueError as e:
        valid_modes = [m.value for m in AppMode]
        raise ValueError(
            f"유효하지 않은 mode입니다: '{mode_str}'. "
            f"유효한 값: {valid_modes}"
        ) from e

    vault_config = data.get("vault") or {}
    web_config = data.get("web") or {}
    db_config = data.get("database") or {}

    default_vault_name = str(vault_config.get("default_name") or Defaults.VAULT_NAME).strip()
    if not default_vault_name:
        raise SettingsLoadError("settings.yaml의 vault.default_name이 비어 있습니다")

    try:
        web_port = int(web_config.get("port", Defaults.WEB_PORT))
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"settings.yaml의 web.port가 올바르지 않습니다: {e}") from e

    db_path = db_config.get("path")

    return AppConfig(
        mode=mode,
        default_vault_name=default_vault_name,
        web_host=str(web_config.get("host", Defaults.WEB_HOST)),
        web_port=web_port,
        default_user_id=str(web_config.get("default_user_id", Defaults.USER_ID)),
        db_path_override=Path(db_path) if db_path else None,
    )


def get_db_path(config: AppConfig) -> Path:
    """모드에 따른 DB 경로 반환

    database.path가 지정되어 있으면 그 경로를 우선 사용.
    """
    if config.db_path_override is not None:
        return config.db_path_override
    if config.mode == AppMode.PRODUCTION:
        return Paths.PROD_DB
    return Paths.SANDBOX_DB


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공.
    파일이 없으면 sandbox 기본값으로 동작.
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            path = settings_path or Paths.SETTINGS_FILE
            if path.exists():
                self._config = load_config(path)
            else:
                self._config = AppConfig(mode=AppMode.SANDBOX)

    @property
    def mode(self) -> AppMode:
        """현재 실행 모드"""
        assert self._config is not None
        return self._config.mode

    @property
    def default_vault_name(self) -> str:
        """기본 금고 이름"""
        assert self._config is not None
        return self._config.default_vault_name

    @property
    def default_user_id(self) -> str:
        """X-User-Id 헤더가 없을 때 사용하는 사용자 ID"""
        assert self._config is not None
        return self._config.default_user_id

    @property
    def web_host(self) -> str:
        assert self._config is not None
        return self._config.web_host

    @property
    def web_port(self) -> int:
        assert self._config is not None
        return self._config.web_port

    @property
    def db_path(self) -> Path:
        """현재 모드의 DB 경로"""
        assert self._config is not None
        return get_db_path(self._config)

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
