"""
금고 요약 집계

이미 조회된 Vault / Movement 목록 위에서 계산하는 순수 함수.
- 입금/출금 합계, 순유입 (월 필터 선택)
- 입출금별 직후 잔액 (running balance)
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable

from core.utils.timezone import month_key
from core.vault.errors import ValidationError
from core.vault.types import Movement, MovementKind, Vault

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def validate_month(month: str) -> str:
    """'YYYY-MM' 형식 검증

    Raises:
        ValidationError: 형식 불일치
    """
    if not MONTH_PATTERN.match(month):
        raise ValidationError(f"month는 YYYY-MM 형식이어야 합니다: '{month}'", field="month")
    return month


@dataclass(frozen=True)
class VaultSummary:
    """금고 요약 (대시보드 카드용)"""

    vault_id: str
    month: str | None
    total_deposits: Decimal
    total_withdrawals: Decimal
    movement_count: int
    current_balance: Decimal
    target_amount: Decimal | None
    target_progress: Decimal | None

    @property
    def net_flow(self) -> Decimal:
        """입금 - 출금"""
        return self.total_deposits - self.total_withdrawals

    def to_dict(self) -> dict[str, Any]:
        return {
            "vault_id": self.vault_id,
            "month": self.month,
            "total_deposits": str(self.total_deposits),
            "total_withdrawals": str(self.total_withdrawals),
            "net_flow": str(self.net_flow),
            "movement_count": self.movement_count,
            "current_balance": str(self.current_balance),
            "target_amount": str(self.target_amount) if self.target_amount is not None else None,
            "target_progress": str(self.target_progress) if self.target_progress is not None else None,
        }


@dataclass(frozen=True)
class HistoryItem:
    """입출금 1건 + 직후 잔액"""

    movement: Movement
    balance_after: Decimal

    def to_dict(self) -> dict[str, Any]:
        data = self.movement.to_dict()
        data["balance_after"] = str(self.balance_after)
        return data


def sum_deltas(movements: Iterable[Movement]) -> Decimal:
    """입출금 부호 합계 (잔액 재계산의 기준값)"""
    return sum((m.delta for m in movements), Decimal("0"))


def summarize(
    vault: Vault,
    movements: list[Movement],
    month: str | None = None,
) -> VaultSummary:
    """금고 요약 계산

    month가 주어지면 BRT 기준 해당 월의 입출금만 합산.
    current_balance는 월 필터와 무관하게 캐시 잔액.
    """
    if month is not None:
        validate_month(month)
        movements = [m for m in movements if month_key(m.occurred_at) == month]

    total_deposits = sum(
        (m.magnitude for m in movements if m.kind == MovementKind.DEPOSIT),
        Decimal("0"),
    )
    total_withdrawals = sum(
        (m.magnitude for m in movements if m.kind == MovementKind.WITHDRAWAL),
        Decimal("0"),
    )

    return VaultSummary(
        vault_id=vault.vault_id,
        month=month,
        total_deposits=total_deposits,
        total_withdrawals=total_withdrawals,
        movement_count=len(movements),
        current_balance=vault.current_balance,
        target_amount=vault.target_amount,
        target_progress=vault.target_progress,
    )


def running_history(movements: list[Movement]) -> list[HistoryItem]:
    """입출금별 직후 잔액 계산

    Args:
        movements: 최신순 입출금 목록 (list_movements 결과)

    Returns:
        최신순 HistoryItem 목록
    """
    balance = Decimal("0")
    items: list[HistoryItem] = []

    for movement in reversed(movements):
        balance += movement.delta
        items.append(HistoryItem(movement=movement, balance_after=balance))

    items.reverse()
    return items
