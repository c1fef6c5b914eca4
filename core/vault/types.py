"""
금고(Cofre) 타입 정의

MovementKind Enum 및 Vault / Movement 데이터 구조.
금액은 반드시 Decimal 사용 (float 금지).
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any

from core.constants import Defaults
from core.vault.errors import ValidationError


class MovementKind(str, Enum):
    """금고 입출금 유형

    잔액 부호 계산이 항상 두 경우 중 하나로 귀결되도록 닫힌 Enum으로 정의.
    str을 상속하여 JSON 직렬화 가능.
    """

    DEPOSIT = "deposit"  # 입금 (Entrada)
    WITHDRAWAL = "withdrawal"  # 출금 (Saída)


def parse_kind(value: MovementKind | str) -> MovementKind:
    """문자열을 MovementKind로 변환

    Raises:
        ValidationError: 알 수 없는 유형
    """
    if isinstance(value, MovementKind):
        return value
    try:
        return MovementKind(str(value).strip().lower())
    except ValueError as e:
        valid = [k.value for k in MovementKind]
        raise ValidationError(
            f"유효하지 않은 movement kind: '{value}'. 유효한 값: {valid}",
            field="kind",
        ) from e


def parse_amount(value: Decimal | str | int, field: str = "amount") -> Decimal:
    """금액을 Decimal로 변환하고 양수인지 검증

    float는 정밀도 손실 때문에 허용하지 않음.

    소수 자릿수와 정수부 자릿수를 제한하여 잔액 합계가 반올림 없이 정확하게 유지됨.

    Raises:
        ValidationError: 숫자가 아니거나 0 이하이거나 자릿수 한도 초과
    """
    if isinstance(value, float) or isinstance(value, bool):
        raise ValidationError(f"{field}는 float가 아닌 Decimal/문자열이어야 합니다", field=field)

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"{field} 형식이 올바르지 않습니다: '{value}'", field=field) from e

    if not amount.is_finite():
        raise ValidationError(f"{field}는 유한한 값이어야 합니다: '{value}'", field=field)

    if amount <= 0:
        raise ValidationError(f"{field}는 0보다 커야 합니다: {amount}", field=field)

    exponent = amount.as_tuple().exponent
    if exponent < 0 and -exponent > Defaults.AMOUNT_MAX_SCALE:
        raise ValidationError(
            f"{field}는 소수점 이하 {Defaults.AMOUNT_MAX_SCALE}자리까지 허용됩니다: '{value}'",
            field=field,
        )

    if amount.adjusted() + 1 > Defaults.AMOUNT_MAX_INTEGER_DIGITS:
        raise ValidationError(
            f"{field}는 정수부 {Defaults.AMOUNT_MAX_INTEGER_DIGITS}자리까지 허용됩니다: '{value}'",
            field=field,
        )

    return amount


def normalize_description(description: str | None) -> str | None:
    """설명 정리 (공백 제거, 빈 문자열은 None)"""
    if description is None:
        return None
    description = description.strip()
    return description or None


def signed_delta(kind: MovementKind, magnitude: Decimal) -> Decimal:
    """입출금 1건이 잔액에 기여하는 부호 있는 금액

    deposit → +magnitude, withdrawal → -magnitude
    """
    if kind == MovementKind.DEPOSIT:
        return magnitude
    return -magnitude


@dataclass(frozen=True)
class Vault:
    """금고

    current_balance는 모든 입출금의 부호 있는 합계를 캐시한 값.
    """

    vault_id: str
    user_id: str
    name: str
    target_amount: Decimal | None
    current_balance: Decimal
    created_at: str
    updated_at: str

    @property
    def target_progress(self) -> Decimal | None:
        """목표 대비 달성률 (%), 목표가 없으면 None"""
        if self.target_amount is None:
            return None
        # 작은 목표 대비 큰 잔액이면 기본 정밀도로는 quantize 불가
        with localcontext() as ctx:
            ctx.prec = 60
            return (self.current_balance / self.target_amount * 100).quantize(Decimal("0.01"))

    def to_dict(self) -> dict[str, Any]:
        """API 응답용 dict 변환 (금액은 문자열)"""
        return {
            "vault_id": self.vault_id,
            "user_id": self.user_id,
            "name": self.name,
            "target_amount": str(self.target_amount) if self.target_amount is not None else None,
            "current_balance": str(self.current_balance),
            "target_progress": str(self.target_progress) if self.target_progress is not None else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class Movement:
    """금고 입출금 1건

    magnitude는 항상 양수, 부호는 kind로 결정.
    """

    movement_id: str
    vault_id: str
    kind: MovementKind
    magnitude: Decimal
    description: str | None
    occurred_at: str
    created_at: str
    updated_at: str

    @property
    def delta(self) -> Decimal:
        """잔액 기여분"""
        return signed_delta(self.kind, self.magnitude)

    def to_dict(self) -> dict[str, Any]:
        """API 응답용 dict 변환 (금액은 문자열)"""
        return {
            "movement_id": self.movement_id,
            "vault_id": self.vault_id,
            "kind": self.kind.value,
            "magnitude": str(self.magnitude),
            "description": self.description,
            "occurred_at": self.occurred_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class BalanceDrift:
    """캐시 잔액과 입출금 합계의 불일치 정보"""

    vault_id: str
    cached: Decimal
    expected: Decimal

    @property
    def difference(self) -> Decimal:
        """cached - expected"""
        return self.cached - self.expected

    def to_dict(self) -> dict[str, Any]:
        return {
            "vault_id": self.vault_id,
            "cached": str(self.cached),
            "expected": str(self.expected),
            "difference": str(self.difference),
        }
