"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화 (금액은 문자열)
"""

from pydantic import BaseModel, Field


class VaultResponse(BaseModel):
    """금고 응답"""

    vault_id: str = Field(..., description="금고 ID")
    user_id: str = Field(..., description="소유자 ID")
    name: str = Field(..., description="금고 이름")
    target_amount: str | None = Field(default=None, description="목표 금액")
    current_balance: str = Field(..., description="현재 잔액")
    target_progress: str | None = Field(default=None, description="목표 달성률 (%)")
    created_at: str = Field(..., description="생성 시간")
    updated_at: str = Field(..., description="마지막 업데이트 시간")


class MovementResponse(BaseModel):
    """입출금 응답"""

    movement_id: str = Field(..., description="입출금 ID")
    vault_id: str = Field(..., description="금고 ID")
    kind: str = Field(..., description="deposit / withdrawal")
    magnitude: str = Field(..., description="금액 (양수)")
    description: str | None = Field(default=None, description="설명")
    occurred_at: str = Field(..., description="발생 시각 (UTC)")
    created_at: str = Field(..., description="생성 시간")
    updated_at: str = Field(..., description="마지막 업데이트 시간")


class MovementMutationResponse(BaseModel):
    """입출금 변경 결과 (변경 후 금고 잔액 포함)"""

    movement: MovementResponse
    vault: VaultResponse


class MovementRemovedResponse(BaseModel):
    """입출금 삭제 결과"""

    removed: MovementResponse
    vault: VaultResponse


class HistoryItemResponse(MovementResponse):
    """이력 항목 (직후 잔액 포함)"""

    balance_after: str = Field(..., description="이 입출금 직후 잔액")


class VaultSummaryResponse(BaseModel):
    """금고 요약 응답"""

    vault_id: str
    month: str | None = Field(default=None, description="집계 월 (YYYY-MM, 없으면 전체)")
    total_deposits: str
    total_withdrawals: str
    net_flow: str
    movement_count: int
    current_balance: str
    target_amount: str | None = None
    target_progress: str | None = None


class DriftResponse(BaseModel):
    """잔액 정합 점검 응답"""

    vault_id: str
    in_sync: bool
    cached: str | None = None
    expected: str | None = None
    difference: str | None = None
