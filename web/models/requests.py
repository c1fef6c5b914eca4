"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증
금액은 Decimal 정밀도 유지를 위해 문자열로 받음 (금액 / kind 검증은 VaultLedger에서 수행)
"""

from datetime import datetime

from pydantic import BaseModel, Field



class VaultCreateRequest(BaseModel):
    """금고 생성 요청"""

    name: str = Field(..., min_length=1, description="금고 이름")
    target_amount: str | None = Field(default=None, description="목표 금액 (선택)")

    model_config = {
        "coerce_numbers_to_str": True,
        "json_schema_extra": {
            "examples": [
                {"name": "Cofre Principal", "target_amount": None},
                {"name": "Reserva de emergência", "target_amount": "10000.00"},
            ]
        }
    }


class MovementRecordRequest(BaseModel):
    """입출금 기록 요청"""

    kind: str = Field(..., description="deposit 또는 withdrawal")
    magnitude: str = Field(..., description="금액 (양수)")
    description: str | None = Field(default=None, description="설명")
    occurred_at: datetime | None = Field(default=None, description="발생 시각 (기본: 현재)")

    model_config = {
        "coerce_numbers_to_str": True,
        "json_schema_extra": {
            "examples": [
                {"kind": "deposit", "magnitude": "500.00", "description": "initial"},
                {"kind": "withdrawal", "magnitude": "120.00", "description": "Sangria do caixa"},
            ]
        }
    }


class MovementAmendRequest(BaseModel):
    """입출금 수정 요청

    생략한 필드는 기존 값 유지. description을 빈 문자열로 보내면 삭제.
    """

    kind: str | None = Field(default=None, description="deposit 또는 withdrawal")
    magnitude: str | None = Field(default=None, description="금액 (양수)")
    description: str | None = Field(default=None, description="설명")

    model_config = {
        "coerce_numbers_to_str": True,
        "json_schema_extra": {
            "examples": [
                {"magnitude": "200.00"},
                {"kind": "deposit", "description": "Correção"},
            ]
        }
    }
