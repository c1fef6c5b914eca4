"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from fastapi import Header, HTTPException

from core.config.loader import Settings, get_settings
from core.vault.errors import NotFoundError
from core.vault.ledger import VaultLedger
from core.vault.types import Movement, Vault


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


# =========================================================================
# VaultLedger (프로세스 공유)
# =========================================================================

# lifespan에서 설정되는 전역 VaultLedger 인스턴스
# 금고별 락이 요청 간에 공유되어야 하므로 요청마다 새로 만들지 않음
_vault_ledger: VaultLedger | None = None


def set_vault_ledger(ledger: VaultLedger | None) -> None:
    """VaultLedger 설정

    앱 시작 시 lifespan에서 호출 (종료 시 None).
    """
    global _vault_ledger
    _vault_ledger = ledger


def get_vault_ledger() -> VaultLedger:
    """VaultLedger 반환

    Raises:
        HTTPException: 초기화 전이면 503
    """
    if _vault_ledger is None:
        raise HTTPException(status_code=503, detail="Vault ledger is not initialized")
    return _vault_ledger


def get_current_user(x_user_id: str | None = Header(default=None)) -> str:
    """요청 사용자 ID

    인증은 외부(게이트웨이)에서 처리하고 X-User-Id 헤더로 전달받음.
    헤더가 없으면 settings.yaml의 web.default_user_id 사용.
    """
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return get_settings().default_user_id


async def require_owned_vault(ledger: VaultLedger, vault_id: str, user_id: str) -> Vault:
    """요청 사용자 소유 금고 조회

    다른 사용자의 금고는 존재 여부를 드러내지 않도록 NotFoundError로 처리.
    """
    vault = await ledger.get_vault(vault_id)
    if vault.user_id != user_id:
        raise NotFoundError("Vault", vault_id)
    return vault


async def require_owned_movement(ledger: VaultLedger, movement_id: str, user_id: str) -> Movement:
    """요청 사용자 소유 금고의 입출금 조회"""
    movement = await ledger.get_movement(movement_id)
    vault = await ledger.get_vault(movement.vault_id)
    if vault.user_id != user_id:
        raise NotFoundError("Movement", movement_id)
    return movement
