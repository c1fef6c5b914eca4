"""
Mock 금고 저장소

테스트용 인메모리 IVaultRepository 구현.
원격 저장소처럼 매 호출마다 이벤트 루프에 제어를 양보하고,
메서드 단위 실패 주입을 지원.
"""

import asyncio
import uuid
from dataclasses import replace
from decimal import Decimal

from core.utils.timezone import now_utc_iso
from core.vault.errors import DependencyError, NotFoundError
from core.vault.types import Movement, MovementKind, Vault


class MockVaultRepository:
    """Mock 금고 저장소

    IVaultRepository Protocol 구현.
    increment_balance는 의도적으로 read → await → write로 나뉘어 있어
    호출자가 직렬화하지 않으면 lost update가 재현됨.

    사용 예시:
    ```python
    repo = MockVaultRepository()
    vault = await repo.create_vault("user-1", "Cofre Principal")

    # 잔액 갱신 실패 주입
    repo.fail_on.add("increment_balance")
    ```
    """

    def __init__(self, fail_on: set[str] | None = None):
        """
        Args:
            fail_on: DependencyError를 발생시킬 메서드 이름 집합
        """
        self.fail_on: set[str] = set(fail_on or ())
        self.vaults: dict[str, Vault] = {}
        self.movements: dict[str, Movement] = {}
        self.calls: list[str] = []
        self._seq = 0
        self._order: dict[str, int] = {}

    async def _enter(self, method: str) -> None:
        self.calls.append(method)
        await asyncio.sleep(0)
        if method in self.fail_on:
            raise DependencyError(f"mock failure: {method}")

    # -------------------------------------------------------------------------
    # 금고
    # -------------------------------------------------------------------------

    async def create_vault(
        self,
        user_id: str,
        name: str,
        target_amount: Decimal | None = None,
    ) -> Vault:
        await self._enter("create_vault")
        now = now_utc_iso()
        self._seq += 1
        vault = Vault(
            vault_id=str(uuid.uuid4()),
            user_id=user_id,
            name=name,
            target_amount=target_amount,
            current_balance=Decimal("0"),
            created_at=now,
            updated_at=now,
        )
        self.vaults[vault.vault_id] = vault
        self._order[vault.vault_id] = self._seq
        return vault

    async def get_vault(self, vault_id: str) -> Vault | None:
        await self._enter("get_vault")
        return self.vaults.get(vault_id)

    async def list_vaults(self, user_id: str) -> list[Vault]:
        await self._enter("list_vaults")
        vaults = [v for v in self.vaults.values() if v.user_id == user_id]
        return sorted(vaults, key=lambda v: self._order[v.vault_id], reverse=True)

    async def delete_vault(self, vault_id: str) -> bool:
        await self._enter("delete_vault")
        if self.vaults.pop(vault_id, None) is None:
            return False
        for movement_id in [m.movement_id for m in self.movements.values() if m.vault_id == vault_id]:
            del self.movements[movement_id]
        return True

    # -------------------------------------------------------------------------
    # 잔액 캐시
    # -------------------------------------------------------------------------

    async def get_vault_balance(self, vault_id: str) -> Decimal | None:
        await self._enter("get_vault_balance")
        vault = self.vaults.get(vault_id)
        return vault.current_balance if vault else None

    async def increment_balance(self, vault_id: str, delta: Decimal) -> Decimal:
        await self._enter("increment_balance")
        vault = self.vaults.get(vault_id)
        if vault is None:
            raise NotFoundError("Vault", vault_id)

        current = vault.current_balance
        # 원격 저장소 왕복 지연 (read와 write 사이)
        await asyncio.sleep(0)

        new_balance = current + delta
        self.vaults[vault_id] = replace(
            self.vaults[vault_id], current_balance=new_balance, updated_at=now_utc_iso()
        )
        return new_balance

    async def set_vault_balance(self, vault_id: str, balance: Decimal) -> None:
        await self._enter("set_vault_balance")
        vault = self.vaults.get(vault_id)
        if vault is None:
            raise NotFoundError("Vault", vault_id)
        self.vaults[vault_id] = replace(vault, current_balance=balance, updated_at=now_utc_iso())

    # -------------------------------------------------------------------------
    # 입출금
    # -------------------------------------------------------------------------

    async def insert_movement(
        self,
        vault_id: str,
        kind: MovementKind,
        magnitude: Decimal,
        description: str | None,
        occurred_at: str,
    ) -> Movement:
        await self._enter("insert_movement")
        if vault_id not in self.vaults:
            raise NotFoundError("Vault", vault_id)

        now = now_utc_iso()
        self._seq += 1
        movement = Movement(
            movement_id=str(uuid.uuid4()),
            vault_id=vault_id,
            kind=kind,
            magnitude=magnitude,
            description=description,
            occurred_at=occurred_at,
            created_at=now,
            updated_at=now,
        )
        self.movements[movement.movement_id] = movement
        self._order[movement.movement_id] = self._seq
        return movement

    async def get_movement(self, movement_id: str) -> Movement | None:
        await self._enter("get_movement")
        return self.movements.get(movement_id)

    async def update_movement(
        self,
        movement_id: str,
        kind: MovementKind,
        magnitude: Decimal,
        description: str | None,
    ) -> Movement | None:
        await self._enter("update_movement")
        movement = self.movements.get(movement_id)
        if movement is None:
            return None
        updated = replace(
            movement,
            kind=kind,
            magnitude=magnitude,
            description=description,
            updated_at=now_utc_iso(),
        )
        self.movements[movement_id] = updated
        return updated

    async def delete_movement(self, movement_id: str) -> bool:
        await self._enter("delete_movement")
        return self.movements.pop(movement_id, None) is not None

    async def list_movements(
        self,
        vault_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Movement]:
        await self._enter("list_movements")
        movements = sorted(
            (m for m in self.movements.values() if m.vault_id == vault_id),
            key=lambda m: (m.occurred_at, self._order[m.movement_id]),
            reverse=True,
        )
        if limit is None:
            return movements
        return movements[offset:offset + limit]

    async def count_movements(self, vault_id: str) -> int:
        await self._enter("count_movements")
        return sum(1 for m in self.movements.values() if m.vault_id == vault_id)
