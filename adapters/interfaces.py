"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from decimal import Decimal
from typing import Protocol, runtime_checkable

from core.vault.types import Movement, MovementKind, Vault


@runtime_checkable
class IVaultRepository(Protocol):
    """금고 / 입출금 저장소 인터페이스

    VaultLedger가 사용하는 영속성 계약.
    금액은 반드시 Decimal 타입 사용.
    저장소 접근 실패는 DependencyError로 변환하여 발생시켜야 함.
    """

    # -------------------------------------------------------------------------
    # 금고
    # -------------------------------------------------------------------------

    async def create_vault(
        self,
        user_id: str,
        name: str,
        target_amount: Decimal | None = None,
    ) -> Vault:
        """금고 생성 (잔액 0)"""
        ...

    async def get_vault(self, vault_id: str) -> Vault | None:
        """금고 조회 (없으면 None)"""
        ...

    async def list_vaults(self, user_id: str) -> list[Vault]:
        """사용자의 금고 목록 (최신 생성순)"""
        ...

    async def delete_vault(self, vault_id: str) -> bool:
        """금고 및 소속 입출금 삭제

        Returns:
            삭제 여부 (없으면 False)
        """
        ...

    # -------------------------------------------------------------------------
    # 잔액 캐시
    # -------------------------------------------------------------------------

    async def get_vault_balance(self, vault_id: str) -> Decimal | None:
        """캐시 잔액 조회 (금고 없으면 None)"""
        ...

    async def increment_balance(self, vault_id: str, delta: Decimal) -> Decimal:
        """캐시 잔액에 delta를 원자적으로 더함

        Returns:
            갱신된 잔액

        Raises:
            NotFoundError: 금고 없음
        """
        ...

    async def set_vault_balance(self, vault_id: str, balance: Decimal) -> None:
        """캐시 잔액 덮어쓰기 (recompute 전용)"""
        ...

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
        """입출금 저장"""
        ...

    async def get_movement(self, movement_id: str) -> Movement | None:
        """입출금 단건 조회 (없으면 None)"""
        ...

    async def update_movement(
        self,
        movement_id: str,
        kind: MovementKind,
        magnitude: Decimal,
        description: str | None,
    ) -> Movement | None:
        """입출금 필드 갱신 (없으면 None)"""
        ...

    async def delete_movement(self, movement_id: str) -> bool:
        """입출금 삭제 (없으면 False)"""
        ...

    async def list_movements(
        self,
        vault_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Movement]:
        """금고의 입출금 목록 (occurred_at 최신순)"""
        ...

    async def count_movements(self, vault_id: str) -> int:
        """금고의 입출금 건수"""
        ...
