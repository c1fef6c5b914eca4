"""
입출금 API 라우트

개별 입출금 조회 / 수정 / 삭제 (잔액 자동 보정)
"""

from fastapi import APIRouter, Depends

from core.vault.ledger import VaultLedger
from web.dependencies import get_current_user, get_vault_ledger, require_owned_movement
from web.models.requests import MovementAmendRequest
from web.models.responses import (
    MovementMutationResponse,
    MovementRemovedResponse,
    MovementResponse,
    VaultResponse,
)

router = APIRouter(prefix="/api/movements", tags=["Movements"])


@router.get("/{movement_id}", response_model=MovementResponse)
async def get_movement(
    movement_id: str,
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> MovementResponse:
    """입출금 단건 조회"""
    movement = await require_owned_movement(ledger, movement_id, user_id)
    return MovementResponse(**movement.to_dict())


@router.patch("/{movement_id}", response_model=MovementMutationResponse)
async def amend_movement(
    movement_id: str,
    request: MovementAmendRequest,
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> MovementMutationResponse:
    """입출금 수정 (기존 기여분 역산 후 새 값 반영)"""
    await require_owned_movement(ledger, movement_id, user_id)

    movement = await ledger.amend(
        movement_id,
        kind=request.kind,
        magnitude=request.magnitude,
        description=request.description,
    )
    vault = await ledger.get_vault(movement.vault_id)

    return MovementMutationResponse(
        movement=MovementResponse(**movement.to_dict()),
        vault=VaultResponse(**vault.to_dict()),
    )


@router.delete("/{movement_id}", response_model=MovementRemovedResponse)
async def remove_movement(
    movement_id: str,
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> MovementRemovedResponse:
    """입출금 삭제 (기여분 역산)"""
    await require_owned_movement(ledger, movement_id, user_id)

    removed = await ledger.remove(movement_id)
    vault = await ledger.get_vault(removed.vault_id)

    return MovementRemovedResponse(
        removed=MovementResponse(**removed.to_dict()),
        vault=VaultResponse(**vault.to_dict()),
    )
