"""
금고 API 라우트

금고 CRUD, 입출금 기록/조회, 요약, 정합 점검/복구
"""

from fastapi import APIRouter, Depends, Query, status

from core.constants import Defaults
from core.vault.ledger import VaultLedger
from web.dependencies import get_current_user, get_vault_ledger, require_owned_vault
from web.models.requests import MovementRecordRequest, VaultCreateRequest
from web.models.responses import (
    DriftResponse,
    HistoryItemResponse,
    MovementMutationResponse,
    MovementResponse,
    VaultResponse,
    VaultSummaryResponse,
)

router = APIRouter(prefix="/api/vaults", tags=["Vaults"])


# =========================================================================
# 금고
# =========================================================================


@router.get("", response_model=list[VaultResponse])
async def list_vaults(
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> list[VaultResponse]:
    """금고 목록 (최신 생성순, 첫 번째가 기본 금고)"""
    vaults = await ledger.list_vaults(user_id)
    return [VaultResponse(**v.to_dict()) for v in vaults]


@router.post("", response_model=VaultResponse, status_code=status.HTTP_201_CREATED)
async def create_vault(
    request: VaultCreateRequest,
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> VaultResponse:
    """금고 생성"""
    vault = await ledger.create_vault(user_id, request.name, request.target_amount)
    return VaultResponse(**vault.to_dict())


@router.post("/default", response_model=VaultResponse)
async def ensure_default_vault(
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> VaultResponse:
    """기본 금고 반환 (없으면 생성)

    입출금 폼 제출 전에 호출.
    """
    vault = await ledger.ensure_default_vault(user_id)
    return VaultResponse(**vault.to_dict())


@router.get("/{vault_id}", response_model=VaultResponse)
async def get_vault(
    vault_id: str,
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> VaultResponse:
    """금고 조회"""
    vault = await require_owned_vault(ledger, vault_id, user_id)
    return VaultResponse(**vault.to_dict())


@router.delete("/{vault_id}")
async def delete_vault(
    vault_id: str,
    cascade: bool = Query(default=False, description="입출금도 함께 삭제"),
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> dict[str, str]:
    """금고 삭제

    입출금이 남아 있으면 cascade=true 없이는 422.
    """
    await require_owned_vault(ledger, vault_id, user_id)
    await ledger.delete_vault(vault_id, cascade=cascade)
    return {"message": f"Vault deleted: {vault_id}"}


# =========================================================================
# 입출금
# =========================================================================


@router.get("/{vault_id}/movements", response_model=list[MovementResponse])
async def list_movements(
    vault_id: str,
    limit: int = Query(default=Defaults.PAGE_LIMIT, ge=1, le=Defaults.PAGE_LIMIT_MAX),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> list[MovementResponse]:
    """입출금 목록 (최신순)"""
    await require_owned_vault(ledger, vault_id, user_id)
    movements = await ledger.list_movements(vault_id, limit=limit, offset=offset)
    return [MovementResponse(**m.to_dict()) for m in movements]


@router.post(
    "/{vault_id}/movements",
    response_model=MovementMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_movement(
    vault_id: str,
    request: MovementRecordRequest,
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> MovementMutationResponse:
    """입출금 기록 + 잔액 반영

    재시도 시 이중 반영되므로 클라이언트는 실패 응답 후 목록을 다시 조회해야 함.
    """
    await require_owned_vault(ledger, vault_id, user_id)

    movement = await ledger.record(
        vault_id,
        kind=request.kind,
        magnitude=request.magnitude,
        description=request.description,
        occurred_at=request.occurred_at,
    )
    vault = await ledger.get_vault(vault_id)

    return MovementMutationResponse(
        movement=MovementResponse(**movement.to_dict()),
        vault=VaultResponse(**vault.to_dict()),
    )


@router.get("/{vault_id}/history", response_model=list[HistoryItemResponse])
async def get_history(
    vault_id: str,
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> list[HistoryItemResponse]:
    """입출금 이력 + 건별 직후 잔액"""
    await require_owned_vault(ledger, vault_id, user_id)
    items = await ledger.history(vault_id)
    return [HistoryItemResponse(**item.to_dict()) for item in items]


@router.get("/{vault_id}/summary", response_model=VaultSummaryResponse)
async def get_summary(
    vault_id: str,
    month: str | None = Query(default=None, description="YYYY-MM (BRT 기준)"),
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> VaultSummaryResponse:
    """금고 요약 (입금/출금 합계, 순유입, 목표 달성률)"""
    await require_owned_vault(ledger, vault_id, user_id)
    summary = await ledger.summarize(vault_id, month)
    return VaultSummaryResponse(**summary.to_dict())


# =========================================================================
# 정합 점검 / 복구
# =========================================================================


@router.get("/{vault_id}/drift", response_model=DriftResponse)
async def check_drift(
    vault_id: str,
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> DriftResponse:
    """캐시 잔액과 입출금 합계 비교"""
    await require_owned_vault(ledger, vault_id, user_id)
    drift = await ledger.check_drift(vault_id)

    if drift is None:
        return DriftResponse(vault_id=vault_id, in_sync=True)
    return DriftResponse(in_sync=False, **drift.to_dict())


@router.post("/{vault_id}/recompute", response_model=DriftResponse)
async def recompute_balance(
    vault_id: str,
    user_id: str = Depends(get_current_user),
    ledger: VaultLedger = Depends(get_vault_ledger),
) -> DriftResponse:
    """입출금 합계로 잔액 재계산

    409(reconciliation) 응답을 받은 뒤 호출.
    응답은 복구 전 불일치 정보 (이미 일치했으면 in_sync=true).
    """
    await require_owned_vault(ledger, vault_id, user_id)
    drift = await ledger.recompute_balance(vault_id)

    if drift is None:
        return DriftResponse(vault_id=vault_id, in_sync=True)
    return DriftResponse(in_sync=False, **drift.to_dict())
