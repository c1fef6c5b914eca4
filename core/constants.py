"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → cofre/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    VAULT_NAME: str = "Cofre Principal"
    USER_ID: str = "local"

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    # 이력 조회 기본/최대 개수
    PAGE_LIMIT: int = 100
    PAGE_LIMIT_MAX: int = 500

    # 금액 자릿수 한도 (합계가 Decimal 기본 정밀도 28자리 안에서 정확하도록)
    AMOUNT_MAX_SCALE: int = 8
    AMOUNT_MAX_INTEGER_DIGITS: int = 15


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"
    SCRIPTS_LOGS_DIR: Path = LOGS_DIR / "scripts"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    PROD_DB: Path = DATA_DIR / "cofre_prod.db"
    SANDBOX_DB: Path = DATA_DIR / "cofre_sandbox.db"
