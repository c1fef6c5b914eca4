"""
core/vault/ledger.py 테스트

MockVaultRepository 기반 VaultLedger 정합성 테스트
"""

import asyncio
from decimal import Decimal

import pytest

from adapters.mock.vault_repository import MockVaultRepository
from core.vault.errors import (
    DependencyError,
    NotFoundError,
    ReconciliationError,
    ValidationError,
)
from core.vault.ledger import VaultLedger, normalize_occurred_at
from core.vault.types import MovementKind


async def _balance(repo: MockVaultRepository, vault_id: str) -> Decimal:
    return repo.vaults[vault_id].current_balance


def _sum_of_movements(repo: MockVaultRepository, vault_id: str) -> Decimal:
    return sum(
        (m.delta for m in repo.movements.values() if m.vault_id == vault_id),
        Decimal("0"),
    )


class TestNormalizeOccurredAt:
    """normalize_occurred_at 테스트"""

    def test_offset_to_utc(self) -> None:
        assert normalize_occurred_at("2026-03-01T12:00:00-03:00") == "2026-03-01T15:00:00.000000+00:00"

    def test_none_uses_now(self) -> None:
        assert normalize_occurred_at(None).endswith("+00:00")

    def test_invalid(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize_occurred_at("ontem")

        assert exc_info.value.field == "occurred_at"


class TestRecord:
    """record 테스트"""

    @pytest.mark.asyncio
    async def test_deposit_increases_balance(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """입금은 잔액 증가"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")

        movement = await mock_ledger.record(vault.vault_id, "deposit", "500")

        assert movement.kind == MovementKind.DEPOSIT
        assert movement.magnitude == Decimal("500")
        assert await _balance(mock_repo, vault.vault_id) == Decimal("500")

    @pytest.mark.asyncio
    async def test_withdrawal_decreases_balance(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """출금은 잔액 감소 (음수 허용)"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")

        await mock_ledger.record(vault.vault_id, MovementKind.WITHDRAWAL, Decimal("75.50"))

        assert await _balance(mock_repo, vault.vault_id) == Decimal("-75.50")

    @pytest.mark.asyncio
    async def test_description_normalized(self, mock_ledger: VaultLedger) -> None:
        """공백 설명은 None"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")

        movement = await mock_ledger.record(vault.vault_id, "deposit", "10", description="   ")

        assert movement.description is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("magnitude", ["0", "-5", "abc", "NaN"])
    async def test_invalid_magnitude_rejected(
        self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository, magnitude: str
    ) -> None:
        """0 이하 / 숫자 아님 → ValidationError, 상태 변경 없음"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        await mock_ledger.record(vault.vault_id, "deposit", "100")

        with pytest.raises(ValidationError) as exc_info:
            await mock_ledger.record(vault.vault_id, "deposit", magnitude)

        assert exc_info.value.field == "magnitude"
        assert await _balance(mock_repo, vault.vault_id) == Decimal("100")
        assert len(mock_repo.movements) == 1

    @pytest.mark.asyncio
    async def test_invalid_kind_rejected(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """알 수 없는 kind"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")

        with pytest.raises(ValidationError):
            await mock_ledger.record(vault.vault_id, "transfer", "10")

        assert mock_repo.movements == {}

    @pytest.mark.asyncio
    async def test_validation_before_repository(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """검증 실패 시 저장소 호출 없음"""
        with pytest.raises(ValidationError):
            await mock_ledger.record("any-vault", "deposit", "0")

        assert mock_repo.calls == []

    @pytest.mark.asyncio
    async def test_unknown_vault(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """없는 금고 → NotFoundError"""
        with pytest.raises(NotFoundError):
            await mock_ledger.record("missing", "deposit", "10")

        assert mock_repo.movements == {}

    @pytest.mark.asyncio
    async def test_insert_failure_leaves_no_change(
        self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository
    ) -> None:
        """입출금 저장 실패 → DependencyError, 잔액 변경 없음"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        mock_repo.fail_on.add("insert_movement")

        with pytest.raises(DependencyError):
            await mock_ledger.record(vault.vault_id, "deposit", "10")

        assert await _balance(mock_repo, vault.vault_id) == Decimal("0")
        assert mock_repo.movements == {}

    @pytest.mark.asyncio
    async def test_balance_failure_raises_reconciliation(
        self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository
    ) -> None:
        """잔액 반영 실패 → ReconciliationError, recompute로 복구"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        mock_repo.fail_on.add("increment_balance")

        with pytest.raises(ReconciliationError) as exc_info:
            await mock_ledger.record(vault.vault_id, "deposit", "250")

        assert exc_info.value.vault_id == vault.vault_id
        assert exc_info.value.operation == "record"
        assert exc_info.value.movement_id in mock_repo.movements
        assert isinstance(exc_info.value.cause, DependencyError)

        mock_repo.fail_on.clear()
        drift = await mock_ledger.check_drift(vault.vault_id)
        assert drift is not None
        assert drift.difference == Decimal("-250")

        await mock_ledger.recompute_balance(vault.vault_id)
        assert await _balance(mock_repo, vault.vault_id) == Decimal("250")
        assert await mock_ledger.check_drift(vault.vault_id) is None


class TestAmend:
    """amend 테스트"""

    @pytest.mark.asyncio
    async def test_change_magnitude(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """금액 변경 → 차이만 반영"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        movement = await mock_ledger.record(vault.vault_id, "withdrawal", "120")

        updated = await mock_ledger.amend(movement.movement_id, magnitude="200")

        assert updated.magnitude == Decimal("200")
        assert updated.kind == MovementKind.WITHDRAWAL
        assert await _balance(mock_repo, vault.vault_id) == Decimal("-200")

    @pytest.mark.asyncio
    async def test_change_kind(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """입금 → 출금 전환은 2배 보정"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        movement = await mock_ledger.record(vault.vault_id, "deposit", "40")

        await mock_ledger.amend(movement.movement_id, kind="withdrawal")

        assert await _balance(mock_repo, vault.vault_id) == Decimal("-40")

    @pytest.mark.asyncio
    async def test_description_only(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """설명만 변경 → 잔액 갱신 호출 없음"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        movement = await mock_ledger.record(vault.vault_id, "deposit", "40", description="Reserva")
        mock_repo.calls.clear()

        updated = await mock_ledger.amend(movement.movement_id, description="Viagem")

        assert updated.description == "Viagem"
        assert updated.magnitude == Decimal("40")
        assert "increment_balance" not in mock_repo.calls
        assert await _balance(mock_repo, vault.vault_id) == Decimal("40")

    @pytest.mark.asyncio
    async def test_clear_description(self, mock_ledger: VaultLedger) -> None:
        """빈 문자열은 설명 삭제, None은 유지"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        movement = await mock_ledger.record(vault.vault_id, "deposit", "40", description="Reserva")

        kept = await mock_ledger.amend(movement.movement_id, magnitude="41")
        cleared = await mock_ledger.amend(movement.movement_id, description="")

        assert kept.description == "Reserva"
        assert cleared.description is None

    @pytest.mark.asyncio
    async def test_noop_writes_nothing(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """같은 값으로 수정 → 쓰기 없음"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        movement = await mock_ledger.record(vault.vault_id, "deposit", "40")
        mock_repo.calls.clear()

        result = await mock_ledger.amend(movement.movement_id, kind="deposit", magnitude="40.00")

        assert result == movement
        assert "update_movement" not in mock_repo.calls
        assert "increment_balance" not in mock_repo.calls

    @pytest.mark.asyncio
    async def test_composition(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """연속 수정 결과 == 최종 값 한 번 수정 결과"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        movement = await mock_ledger.record(vault.vault_id, "deposit", "10")

        await mock_ledger.amend(movement.movement_id, magnitude="30")
        await mock_ledger.amend(movement.movement_id, kind="withdrawal")
        await mock_ledger.amend(movement.movement_id, magnitude="5")

        assert await _balance(mock_repo, vault.vault_id) == Decimal("-5")

    @pytest.mark.asyncio
    async def test_invalid_magnitude(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """0 이하 금액 거부, 상태 유지"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        movement = await mock_ledger.record(vault.vault_id, "deposit", "10")

        with pytest.raises(ValidationError):
            await mock_ledger.amend(movement.movement_id, magnitude="0")

        assert mock_repo.movements[movement.movement_id].magnitude == Decimal("10")
        assert await _balance(mock_repo, vault.vault_id) == Decimal("10")

    @pytest.mark.asyncio
    async def test_unknown_movement(self, mock_ledger: VaultLedger) -> None:
        with pytest.raises(NotFoundError):
            await mock_ledger.amend("missing", magnitude="10")

    @pytest.mark.asyncio
    async def test_balance_failure(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """수정 후 잔액 보정 실패 → ReconciliationError"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        movement = await mock_ledger.record(vault.vault_id, "deposit", "10")
        mock_repo.fail_on.add("increment_balance")

        with pytest.raises(ReconciliationError) as exc_info:
            await mock_ledger.amend(movement.movement_id, magnitude="15")

        assert exc_info.value.operation == "amend"
        assert mock_repo.movements[movement.movement_id].magnitude == Decimal("15")


class TestRemove:
    """remove 테스트"""

    @pytest.mark.asyncio
    async def test_inverse_of_record(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """record 후 remove → 원래 잔액"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        await mock_ledger.record(vault.vault_id, "deposit", "33.33")
        before = await _balance(mock_repo, vault.vault_id)

        movement = await mock_ledger.record(vault.vault_id, "withdrawal", "12.34")
        removed = await mock_ledger.remove(movement.movement_id)

        assert removed.movement_id == movement.movement_id
        assert await _balance(mock_repo, vault.vault_id) == before
        assert movement.movement_id not in mock_repo.movements

    @pytest.mark.asyncio
    async def test_inverse_at_amount_limits(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """최소 단위 + 최대 금액 기록 후 최대 금액 삭제 → 잔액 == 입출금 합계"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        await mock_ledger.record(vault.vault_id, "deposit", "0.00000001")

        largest = await mock_ledger.record(vault.vault_id, "deposit", "999999999999999.99999999")
        await mock_ledger.remove(largest.movement_id)

        assert await _balance(mock_repo, vault.vault_id) == Decimal("0.00000001")
        assert await mock_ledger.check_drift(vault.vault_id) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("magnitude", ["0.00000000000000000000000000001", "1E+26", "1000000000000000"])
    async def test_amount_beyond_exact_range_rejected(
        self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository, magnitude: str
    ) -> None:
        """정확한 합계를 보장할 수 없는 금액은 저장 전에 거부"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")

        with pytest.raises(ValidationError) as exc_info:
            await mock_ledger.record(vault.vault_id, "deposit", magnitude)

        assert exc_info.value.field == "magnitude"
        assert "insert_movement" not in mock_repo.calls
        assert await _balance(mock_repo, vault.vault_id) == Decimal("0")

    @pytest.mark.asyncio
    async def test_unknown_movement(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        with pytest.raises(NotFoundError):
            await mock_ledger.remove("missing")

        assert "increment_balance" not in mock_repo.calls

    @pytest.mark.asyncio
    async def test_balance_failure(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """삭제 후 역산 실패 → ReconciliationError, recompute로 복구"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        movement = await mock_ledger.record(vault.vault_id, "deposit", "10")
        mock_repo.fail_on.add("increment_balance")

        with pytest.raises(ReconciliationError):
            await mock_ledger.remove(movement.movement_id)

        mock_repo.fail_on.clear()
        drift = await mock_ledger.recompute_balance(vault.vault_id)

        assert drift is not None
        assert drift.cached == Decimal("10")
        assert drift.expected == Decimal("0")
        assert await _balance(mock_repo, vault.vault_id) == Decimal("0")


class TestScenario:
    """대표 시나리오"""

    @pytest.mark.asyncio
    async def test_record_amend_remove_sequence(
        self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository
    ) -> None:
        """500 → 380 → 300 → -200"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")

        first = await mock_ledger.record(vault.vault_id, "deposit", "500")
        assert await _balance(mock_repo, vault.vault_id) == Decimal("500")

        second = await mock_ledger.record(vault.vault_id, "withdrawal", "120")
        assert await _balance(mock_repo, vault.vault_id) == Decimal("380")

        await mock_ledger.amend(second.movement_id, magnitude="200")
        assert await _balance(mock_repo, vault.vault_id) == Decimal("300")

        await mock_ledger.remove(first.movement_id)
        assert await _balance(mock_repo, vault.vault_id) == Decimal("-200")

        assert await _balance(mock_repo, vault.vault_id) == _sum_of_movements(mock_repo, vault.vault_id)

    @pytest.mark.asyncio
    async def test_vaults_are_independent(self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository) -> None:
        """다른 금고 잔액에 영향 없음"""
        a = await mock_ledger.create_vault("user-1", "A")
        b = await mock_ledger.create_vault("user-1", "B")

        await mock_ledger.record(a.vault_id, "deposit", "100")
        await mock_ledger.record(b.vault_id, "withdrawal", "7")

        assert await _balance(mock_repo, a.vault_id) == Decimal("100")
        assert await _balance(mock_repo, b.vault_id) == Decimal("-7")


class TestConcurrency:
    """동시성 테스트"""

    @pytest.mark.asyncio
    async def test_concurrent_deposits_no_lost_update(
        self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository
    ) -> None:
        """동시 입금 2건 → 두 건 모두 반영"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")

        await asyncio.gather(
            mock_ledger.record(vault.vault_id, "deposit", "50"),
            mock_ledger.record(vault.vault_id, "deposit", "50"),
        )

        assert await _balance(mock_repo, vault.vault_id) == Decimal("100")

    @pytest.mark.asyncio
    async def test_mixed_concurrent_operations(
        self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository
    ) -> None:
        """동시 record / amend / remove 후 불변식 유지"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        seeds = [await mock_ledger.record(vault.vault_id, "deposit", str(i + 1)) for i in range(5)]

        await asyncio.gather(
            *(mock_ledger.record(vault.vault_id, "withdrawal", "3") for _ in range(10)),
            mock_ledger.amend(seeds[0].movement_id, magnitude="100"),
            mock_ledger.remove(seeds[1].movement_id),
            mock_ledger.amend(seeds[2].movement_id, kind="withdrawal"),
        )

        assert await _balance(mock_repo, vault.vault_id) == _sum_of_movements(mock_repo, vault.vault_id)
        assert await mock_ledger.check_drift(vault.vault_id) is None

    @pytest.mark.asyncio
    async def test_locks_released_after_use(self, mock_ledger: VaultLedger) -> None:
        """작업이 끝나면 금고별 / 사용자별 락이 남지 않음"""
        vaults = [await mock_ledger.create_vault("user-1", f"Cofre {i}") for i in range(3)]

        await asyncio.gather(
            *(mock_ledger.record(v.vault_id, "deposit", "1") for v in vaults for _ in range(3)),
            mock_ledger.ensure_default_vault("user-2"),
            mock_ledger.ensure_default_vault("user-2"),
        )
        await mock_ledger.check_drift(vaults[0].vault_id)
        with pytest.raises(NotFoundError):
            await mock_ledger.recompute_balance("missing")

        assert mock_ledger._locks == {}
        assert mock_ledger._lock_users == {}
        assert len(await mock_ledger.list_vaults("user-2")) == 1

    @pytest.mark.asyncio
    async def test_repository_alone_loses_updates(self, mock_repo: MockVaultRepository) -> None:
        """Ledger 락 없이 저장소 increment만 동시에 호출하면 lost update 발생"""
        vault = await mock_repo.create_vault("user-1", "Cofre")

        await asyncio.gather(
            mock_repo.increment_balance(vault.vault_id, Decimal("50")),
            mock_repo.increment_balance(vault.vault_id, Decimal("50")),
        )

        assert await _balance(mock_repo, vault.vault_id) == Decimal("50")


class TestDrift:
    """check_drift / recompute_balance 테스트"""

    @pytest.mark.asyncio
    async def test_in_sync(self, mock_ledger: VaultLedger) -> None:
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        await mock_ledger.record(vault.vault_id, "deposit", "10")

        assert await mock_ledger.check_drift(vault.vault_id) is None
        assert await mock_ledger.recompute_balance(vault.vault_id) is None

    @pytest.mark.asyncio
    async def test_external_corruption_repaired(
        self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository
    ) -> None:
        """외부에서 잔액이 바뀐 경우 복구"""
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        await mock_ledger.record(vault.vault_id, "deposit", "10")
        await mock_repo.set_vault_balance(vault.vault_id, Decimal("999"))

        drift = await mock_ledger.check_drift(vault.vault_id)
        assert drift is not None
        assert drift.difference == Decimal("989")
        # check_drift는 읽기 전용
        assert await _balance(mock_repo, vault.vault_id) == Decimal("999")

        await mock_ledger.recompute_balance(vault.vault_id)
        assert await _balance(mock_repo, vault.vault_id) == Decimal("10")

    @pytest.mark.asyncio
    async def test_unknown_vault(self, mock_ledger: VaultLedger) -> None:
        with pytest.raises(NotFoundError):
            await mock_ledger.check_drift("missing")


class TestVaults:
    """금고 관리 테스트"""

    @pytest.mark.asyncio
    async def test_create_vault(self, mock_ledger: VaultLedger) -> None:
        vault = await mock_ledger.create_vault("user-1", "  Viagem  ", target_amount="5000")

        assert vault.name == "Viagem"
        assert vault.target_amount == Decimal("5000")
        assert vault.current_balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_create_vault_blank_name(self, mock_ledger: VaultLedger) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await mock_ledger.create_vault("user-1", "   ")

        assert exc_info.value.field == "name"

    @pytest.mark.asyncio
    async def test_create_vault_invalid_target(self, mock_ledger: VaultLedger) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await mock_ledger.create_vault("user-1", "Cofre", target_amount="-1")

        assert exc_info.value.field == "target_amount"

    @pytest.mark.asyncio
    async def test_ensure_default_vault_creates_once(
        self, mock_repo: MockVaultRepository
    ) -> None:
        """동시에 호출해도 기본 금고는 1개"""
        ledger = VaultLedger(mock_repo, default_vault_name="Cofre Padrão")

        first, second = await asyncio.gather(
            ledger.ensure_default_vault("user-1"),
            ledger.ensure_default_vault("user-1"),
        )

        assert first.vault_id == second.vault_id
        assert first.name == "Cofre Padrão"
        assert len(mock_repo.vaults) == 1

    @pytest.mark.asyncio
    async def test_ensure_default_vault_returns_newest(self, mock_ledger: VaultLedger) -> None:
        await mock_ledger.create_vault("user-1", "Antigo")
        newest = await mock_ledger.create_vault("user-1", "Novo")

        vault = await mock_ledger.ensure_default_vault("user-1")

        assert vault.vault_id == newest.vault_id

    @pytest.mark.asyncio
    async def test_list_vaults_per_user(self, mock_ledger: VaultLedger) -> None:
        await mock_ledger.create_vault("user-1", "A")
        await mock_ledger.create_vault("user-2", "B")

        vaults = await mock_ledger.list_vaults("user-1")

        assert [v.name for v in vaults] == ["A"]

    @pytest.mark.asyncio
    async def test_delete_empty_vault(self, mock_ledger: VaultLedger) -> None:
        vault = await mock_ledger.create_vault("user-1", "Cofre")

        await mock_ledger.delete_vault(vault.vault_id)

        with pytest.raises(NotFoundError):
            await mock_ledger.get_vault(vault.vault_id)

    @pytest.mark.asyncio
    async def test_delete_vault_with_movements_requires_cascade(
        self, mock_ledger: VaultLedger, mock_repo: MockVaultRepository
    ) -> None:
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        await mock_ledger.record(vault.vault_id, "deposit", "10")

        with pytest.raises(ValidationError) as exc_info:
            await mock_ledger.delete_vault(vault.vault_id)
        assert exc_info.value.field == "cascade"
        assert vault.vault_id in mock_repo.vaults

        await mock_ledger.delete_vault(vault.vault_id, cascade=True)
        assert mock_repo.vaults == {}
        assert mock_repo.movements == {}

    @pytest.mark.asyncio
    async def test_delete_unknown_vault(self, mock_ledger: VaultLedger) -> None:
        with pytest.raises(NotFoundError):
            await mock_ledger.delete_vault("missing")


class TestReads:
    """조회 테스트"""

    @pytest.mark.asyncio
    async def test_list_movements_newest_first(self, mock_ledger: VaultLedger) -> None:
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        await mock_ledger.record(vault.vault_id, "deposit", "1", occurred_at="2026-01-10T12:00:00+00:00")
        await mock_ledger.record(vault.vault_id, "deposit", "2", occurred_at="2026-03-10T12:00:00+00:00")
        await mock_ledger.record(vault.vault_id, "deposit", "3", occurred_at="2026-02-10T12:00:00+00:00")

        movements = await mock_ledger.list_movements(vault.vault_id)
        page = await mock_ledger.list_movements(vault.vault_id, limit=1, offset=1)

        assert [m.magnitude for m in movements] == [Decimal("2"), Decimal("3"), Decimal("1")]
        assert [m.magnitude for m in page] == [Decimal("3")]

    @pytest.mark.asyncio
    async def test_list_movements_unknown_vault(self, mock_ledger: VaultLedger) -> None:
        with pytest.raises(NotFoundError):
            await mock_ledger.list_movements("missing")

    @pytest.mark.asyncio
    async def test_get_movement(self, mock_ledger: VaultLedger) -> None:
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        movement = await mock_ledger.record(vault.vault_id, "deposit", "1")

        assert await mock_ledger.get_movement(movement.movement_id) == movement

        with pytest.raises(NotFoundError):
            await mock_ledger.get_movement("missing")

    @pytest.mark.asyncio
    async def test_summarize_month(self, mock_ledger: VaultLedger) -> None:
        vault = await mock_ledger.create_vault("user-1", "Cofre", target_amount="1000")
        await mock_ledger.record(vault.vault_id, "deposit", "500", occurred_at="2026-03-05T12:00:00+00:00")
        await mock_ledger.record(vault.vault_id, "withdrawal", "100", occurred_at="2026-03-20T12:00:00+00:00")
        await mock_ledger.record(vault.vault_id, "deposit", "50", occurred_at="2026-04-02T12:00:00+00:00")

        summary = await mock_ledger.summarize(vault.vault_id, month="2026-03")

        assert summary.total_deposits == Decimal("500")
        assert summary.total_withdrawals == Decimal("100")
        assert summary.net_flow == Decimal("400")
        assert summary.movement_count == 2
        assert summary.current_balance == Decimal("450")
        assert summary.target_progress == Decimal("45.00")

    @pytest.mark.asyncio
    async def test_history(self, mock_ledger: VaultLedger) -> None:
        vault = await mock_ledger.create_vault("user-1", "Cofre")
        await mock_ledger.record(vault.vault_id, "deposit", "500", occurred_at="2026-03-01T12:00:00+00:00")
        await mock_ledger.record(vault.vault_id, "withdrawal", "120", occurred_at="2026-03-02T12:00:00+00:00")

        items = await mock_ledger.history(vault.vault_id)

        assert [i.balance_after for i in items] == [Decimal("380"), Decimal("500")]

    @pytest.mark.asyncio
    async def test_summarize_large_progress(self, mock_ledger: VaultLedger) -> None:
        """아주 작은 목표 대비 큰 잔액 → 예외 없이 달성률 계산"""
        vault = await mock_ledger.create_vault("user-1", "Cofre", target_amount="0.00000001")
        for _ in range(11):
            await mock_ledger.record(vault.vault_id, "deposit", "999999999999999.99999999")

        summary = await mock_ledger.summarize(vault.vault_id)
        stored = await mock_ledger.get_vault(vault.vault_id)

        assert summary.current_balance == Decimal("10999999999999999.99999989")
        assert summary.target_progress == Decimal("109999999999999999999998900.00")
        assert stored.to_dict()["target_progress"] == "109999999999999999999998900.00"
