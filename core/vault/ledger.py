"""
금고 Ledger (잔액 정합 엔진)

Vault.current_balance == Σ(입출금 부호 금액) 불변식을 유지하는 유일한 경로.
record / amend / remove 모두 "기존 기여분 조회 → 역산 → 신규 반영 → 저장" 구조이며
잔액 변경은 _apply_delta() 한 곳에서만 수행.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from core.constants import Defaults
from core.utils.timezone import ensure_utc, now_utc, parse_iso
from core.vault.errors import NotFoundError, ReconciliationError, ValidationError
from core.vault.summary import HistoryItem, VaultSummary, running_history, sum_deltas, summarize
from core.vault.types import (
    BalanceDrift,
    Movement,
    MovementKind,
    Vault,
    normalize_description,
    parse_amount,
    parse_kind,
    signed_delta,
)

if TYPE_CHECKING:
    from adapters.interfaces import IVaultRepository

logger = logging.getLogger(__name__)


def normalize_occurred_at(value: datetime | str | None) -> str:
    """발생 시각을 UTC ISO 문자열로 정규화

    정렬이 문자열 비교로 이루어지므로 항상 마이크로초까지 포함.

    Raises:
        ValidationError: 파싱 불가
    """
    if value is None:
        dt = now_utc()
    elif isinstance(value, datetime):
        dt = ensure_utc(value)
    else:
        try:
            dt = parse_iso(value)
        except ValueError as e:
            raise ValidationError(
                f"occurred_at 형식이 올바르지 않습니다: '{value}'",
                field="occurred_at",
            ) from e
    return dt.isoformat(timespec="microseconds")


class VaultLedger:
    """금고 Ledger

    입출금 변경과 잔액 캐시 갱신을 묶어 처리.
    같은 금고에 대한 작업은 금고별 asyncio.Lock으로 직렬화
    (저장소의 원자적 increment와 함께 lost update 방지).
    재시도는 하지 않음 (record 재시도는 이중 반영 위험).

    Args:
        repository: IVaultRepository 구현체 (VaultStore, MockVaultRepository)
        default_vault_name: ensure_default_vault()가 생성하는 금고 이름
    """

    def __init__(
        self,
        repository: IVaultRepository,
        default_vault_name: str = Defaults.VAULT_NAME,
    ):
        self.repository = repository
        self.default_vault_name = default_vault_name
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def _lock_for(self, key: str) -> AsyncIterator[None]:
        """키별 락 획득

        대기 중이거나 보유 중인 작업이 없어지면 락을 맵에서 제거.
        """
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                del self._locks[key]

    async def _require_vault(self, vault_id: str) -> Vault:
        vault = await self.repository.get_vault(vault_id)
        if vault is None:
            raise NotFoundError("Vault", vault_id)
        return vault

    async def _require_movement(self, movement_id: str) -> Movement:
        movement = await self.repository.get_movement(movement_id)
        if movement is None:
            raise NotFoundError("Movement", movement_id)
        return movement

    async def _apply_delta(
        self,
        vault_id: str,
        delta: Decimal,
        operation: str,
        movement_id: str,
    ) -> Decimal:
        """잔액 캐시에 delta 반영

        입출금 쓰기가 이미 끝난 뒤 호출되므로 여기서의 실패는
        어떤 종류든 ReconciliationError로 올린다.
        """
        try:
            new_balance = await self.repository.increment_balance(vault_id, delta)
        except Exception as e:
            logger.error(
                f"잔액 반영 실패 - recompute 필요: vault={vault_id}",
                extra={
                    "operation": operation,
                    "movement_id": movement_id,
                    "delta": str(delta),
                    "error": str(e),
                },
            )
            raise ReconciliationError(
                vault_id=vault_id,
                operation=operation,
                movement_id=movement_id,
                cause=e,
            ) from e

        logger.debug(
            f"Balance updated: vault={vault_id} delta={delta} balance={new_balance}",
        )
        return new_balance

    # -------------------------------------------------------------------------
    # 입출금 (정합 연산)
    # -------------------------------------------------------------------------

    async def record(
        self,
        vault_id: str,
        kind: MovementKind | str,
        magnitude: Decimal | str | int,
        description: str | None = None,
        occurred_at: datetime | str | None = None,
    ) -> Movement:
        """입출금 기록 + 잔액 반영

        Returns:
            저장된 Movement

        Raises:
            ValidationError: magnitude <= 0, 잘못된 kind / occurred_at
            NotFoundError: 금고 없음
            ReconciliationError: 입출금은 저장됐지만 잔액 반영 실패
            DependencyError: 저장소 접근 실패 (변경 없음)
        """
        kind = parse_kind(kind)
        magnitude = parse_amount(magnitude, field="magnitude")
        description = normalize_description(description)
        occurred_at_iso = normalize_occurred_at(occurred_at)

        async with self._lock_for(vault_id):
            await self._require_vault(vault_id)

            movement = await self.repository.insert_movement(
                vault_id=vault_id,
                kind=kind,
                magnitude=magnitude,
                description=description,
                occurred_at=occurred_at_iso,
            )

            balance = await self._apply_delta(
                vault_id, movement.delta, "record", movement.movement_id
            )

        logger.info(
            f"입출금 기록: {kind.value} {magnitude} (vault={vault_id})",
            extra={"movement_id": movement.movement_id, "balance": str(balance)},
        )
        return movement

    async def amend(
        self,
        movement_id: str,
        kind: MovementKind | str | None = None,
        magnitude: Decimal | str | int | None = None,
        description: str | None = None,
    ) -> Movement:
        """입출금 수정 + 잔액 보정

        생략된 필드는 기존 값을 유지. description은 None이면 유지,
        빈 문자열이면 삭제.
        잔액은 (새 기여분 - 기존 기여분)만큼 보정.

        Returns:
            수정된 Movement

        Raises:
            ValidationError: magnitude <= 0, 잘못된 kind
            NotFoundError: 입출금 없음
            ReconciliationError: 입출금은 수정됐지만 잔액 보정 실패
        """
        new_kind = parse_kind(kind) if kind is not None else None
        new_magnitude = parse_amount(magnitude, field="magnitude") if magnitude is not None else None

        vault_id = (await self._require_movement(movement_id)).vault_id

        async with self._lock_for(vault_id):
            # 락 획득 전 다른 작업이 수정/삭제했을 수 있으므로 다시 조회
            current = await self._require_movement(movement_id)

            merged_kind = new_kind if new_kind is not None else current.kind
            merged_magnitude = new_magnitude if new_magnitude is not None else current.magnitude
            merged_description = (
                normalize_description(description) if description is not None else current.description
            )

            if (
                merged_kind == current.kind
                and merged_magnitude == current.magnitude
                and merged_description == current.description
            ):
                logger.debug(f"Amend no-op: {movement_id}")
                return current

            old_delta = current.delta
            new_delta = signed_delta(merged_kind, merged_magnitude)

            updated = await self.repository.update_movement(
                movement_id,
                kind=merged_kind,
                magnitude=merged_magnitude,
                description=merged_description,
            )
            if updated is None:
                raise NotFoundError("Movement", movement_id)

            adjustment = -old_delta + new_delta
            if adjustment != 0:
                await self._apply_delta(vault_id, adjustment, "amend", movement_id)

        logger.info(
            f"입출금 수정: {movement_id} (vault={vault_id})",
            extra={"old_delta": str(old_delta), "new_delta": str(new_delta)},
        )
        return updated

    async def remove(self, movement_id: str) -> Movement:
        """입출금 삭제 + 기여분 역산

        Returns:
            삭제된 Movement (확인용)

        Raises:
            NotFoundError: 입출금 없음
            ReconciliationError: 입출금은 삭제됐지만 잔액 역산 실패
        """
        vault_id = (await self._require_movement(movement_id)).vault_id

        async with self._lock_for(vault_id):
            current = await self._require_movement(movement_id)

            deleted = await self.repository.delete_movement(movement_id)
            if not deleted:
                raise NotFoundError("Movement", movement_id)

            balance = await self._apply_delta(vault_id, -current.delta, "remove", movement_id)

        logger.info(
            f"입출금 삭제: {movement_id} (vault={vault_id})",
            extra={"reversed": str(-current.delta), "balance": str(balance)},
        )
        return current

    # -------------------------------------------------------------------------
    # 정합 점검 / 복구
    # -------------------------------------------------------------------------

    async def check_drift(self, vault_id: str) -> BalanceDrift | None:
        """캐시 잔액과 입출금 합계 비교 (읽기 전용)

        Returns:
            BalanceDrift 또는 None (일치 시)
        """
        async with self._lock_for(vault_id):
            vault = await self._require_vault(vault_id)
            movements = await self.repository.list_movements(vault_id)

        expected = sum_deltas(movements)
        if vault.current_balance == expected:
            return None

        drift = BalanceDrift(vault_id=vault_id, cached=vault.current_balance, expected=expected)
        logger.warning(
            f"잔액 불일치 감지: vault={vault_id}",
            extra=drift.to_dict(),
        )
        return drift

    async def recompute_balance(self, vault_id: str) -> BalanceDrift | None:
        """입출금 합계로 잔액 캐시 재설정 (ReconciliationError 이후 복구용)

        Returns:
            복구한 BalanceDrift 또는 None (이미 일치)
        """
        async with self._lock_for(vault_id):
            vault = await self._require_vault(vault_id)
            movements = await self.repository.list_movements(vault_id)
            expected = sum_deltas(movements)

            if vault.current_balance == expected:
                return None

            await self.repository.set_vault_balance(vault_id, expected)

        drift = BalanceDrift(vault_id=vault_id, cached=vault.current_balance, expected=expected)
        logger.warning(
            f"잔액 재계산 완료: vault={vault_id} {vault.current_balance} → {expected}",
            extra=drift.to_dict(),
        )
        return drift

    # -------------------------------------------------------------------------
    # 금고
    # -------------------------------------------------------------------------

    async def create_vault(
        self,
        user_id: str,
        name: str,
        target_amount: Decimal | str | int | None = None,
    ) -> Vault:
        """금고 생성

        Raises:
            ValidationError: 이름 공백, target_amount <= 0
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("금고 이름은 비어 있을 수 없습니다", field="name")

        target = parse_amount(target_amount, field="target_amount") if target_amount is not None else None

        vault = await self.repository.create_vault(user_id, name, target)

        logger.info(f"금고 생성: {name} (user={user_id})", extra={"vault_id": vault.vault_id})
        return vault

    async def ensure_default_vault(self, user_id: str) -> Vault:
        """사용자의 기본 금고 반환 (없으면 생성)

        기본 금고 = 가장 최근에 생성된 금고.
        """
        async with self._lock_for(f"user:{user_id}"):
            vaults = await self.repository.list_vaults(user_id)
            if vaults:
                return vaults[0]

            return await self.create_vault(user_id, self.default_vault_name)

    async def get_vault(self, vault_id: str) -> Vault:
        """금고 조회

        Raises:
            NotFoundError: 금고 없음
        """
        return await self._require_vault(vault_id)

    async def list_vaults(self, user_id: str) -> list[Vault]:
        return await self.repository.list_vaults(user_id)

    async def delete_vault(self, vault_id: str, cascade: bool = False) -> None:
        """금고 삭제

        입출금이 있으면 cascade=True일 때만 함께 삭제.

        Raises:
            NotFoundError: 금고 없음
            ValidationError: 입출금이 남아 있고 cascade=False
        """
        async with self._lock_for(vault_id):
            await self._require_vault(vault_id)

            count = await self.repository.count_movements(vault_id)
            if count and not cascade:
                raise ValidationError(
                    f"금고에 입출금 {count}건이 남아 있습니다 (cascade=True로 함께 삭제)",
                    field="cascade",
                )

            if not await self.repository.delete_vault(vault_id):
                raise NotFoundError("Vault", vault_id)

        logger.info(f"금고 삭제: {vault_id}", extra={"movements_deleted": count})

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def list_movements(
        self,
        vault_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Movement]:
        """입출금 목록 (최신순)"""
        await self._require_vault(vault_id)
        return await self.repository.list_movements(vault_id, limit=limit, offset=offset)

    async def get_movement(self, movement_id: str) -> Movement:
        return await self._require_movement(movement_id)

    async def summarize(self, vault_id: str, month: str | None = None) -> VaultSummary:
        """금고 요약 (입금/출금 합계, 목표 달성률)"""
        vault = await self._require_vault(vault_id)
        movements = await self.repository.list_movements(vault_id)
        return summarize(vault, movements, month)

    async def history(self, vault_id: str) -> list[HistoryItem]:
        """입출금 이력 + 건별 직후 잔액 (최신순)"""
        await self._require_vault(vault_id)
        movements = await self.repository.list_movements(vault_id)
        return running_history(movements)
