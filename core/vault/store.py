"""
금고 저장소

vaults / vault_movements 테이블 CRUD 및 잔액 캐시 갱신.
IVaultRepository Protocol의 SQLite 구현체.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import TYPE_CHECKING, Any, AsyncIterator

import aiosqlite

from core.utils.timezone import now_utc_iso
from core.vault.errors import DependencyError, NotFoundError
from core.vault.types import Movement, MovementKind, Vault

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_VAULT_COLUMNS = """
    vault_id, user_id, name, target_amount, current_balance, created_at, updated_at
"""

_MOVEMENT_COLUMNS = """
    movement_id, vault_id, kind, magnitude, description, occurred_at, created_at, updated_at
"""


def _row_to_vault(row: tuple[Any, ...]) -> Vault:
    return Vault(
        vault_id=row[0],
        user_id=row[1],
        name=row[2],
        target_amount=Decimal(row[3]) if row[3] is not None else None,
        current_balance=Decimal(row[4]),
        created_at=row[5],
        updated_at=row[6],
    )


def _row_to_movement(row: tuple[Any, ...]) -> Movement:
    return Movement(
        movement_id=row[0],
        vault_id=row[1],
        kind=MovementKind(row[2]),
        magnitude=Decimal(row[3]),
        description=row[4],
        occurred_at=row[5],
        created_at=row[6],
        updated_at=row[7],
    )


class VaultStore:
    """금고 저장소

    모든 쓰기는 저장소 단위 락 + 트랜잭션 안에서 수행.
    하나의 aiosqlite 연결을 여러 코루틴이 공유해도 트랜잭션이 섞이지 않음.
    aiosqlite.Error는 DependencyError로 변환.

    Args:
        db: SQLite 어댑터 (쓰기 가능)
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self._write_lock = asyncio.Lock()

    @asynccontextmanager
    async def _write(self, immediate: bool = False) -> AsyncIterator[None]:
        """쓰기 트랜잭션 (락 + 예외 변환)"""
        async with self._write_lock:
            try:
                async with self.db.transaction(immediate=immediate):
                    yield
            except (aiosqlite.Error, RuntimeError) as e:
                raise DependencyError(f"SQLite write failed: {e}") from e

    async def _fetchone(self, sql: str, parameters: tuple[Any, ...]) -> tuple[Any, ...] | None:
        try:
            return await self.db.fetchone(sql, parameters)
        except (aiosqlite.Error, RuntimeError) as e:
            raise DependencyError(f"SQLite read failed: {e}") from e

    async def _fetchall(self, sql: str, parameters: tuple[Any, ...]) -> list[tuple[Any, ...]]:
        try:
            return await self.db.fetchall(sql, parameters)
        except (aiosqlite.Error, RuntimeError) as e:
            raise DependencyError(f"SQLite read failed: {e}") from e

    # -------------------------------------------------------------------------
    # 금고
    # -------------------------------------------------------------------------

    async def create_vault(
        self,
        user_id: str,
        name: str,
        target_amount: Decimal | None = None,
    ) -> Vault:
        """금고 생성

        Returns:
            생성된 Vault (잔액 0)
        """
        vault_id = str(uuid.uuid4())
        now = now_utc_iso()

        async with self._write():
            await self.db.execute(
                """
                INSERT INTO vaults (
                    vault_id, user_id, name, target_amount, current_balance,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, '0', ?, ?)
                """,
                (
                    vault_id,
                    user_id,
                    name,
                    str(target_amount) if target_amount is not None else None,
                    now,
                    now,
                ),
            )

        logger.debug(f"Vault created: {vault_id}")

        return Vault(
            vault_id=vault_id,
            user_id=user_id,
            name=name,
            target_amount=target_amount,
            current_balance=Decimal("0"),
            created_at=now,
            updated_at=now,
        )

    async def get_vault(self, vault_id: str) -> Vault | None:
        row = await self._fetchone(
            f"SELECT {_VAULT_COLUMNS} FROM vaults WHERE vault_id = ?",
            (vault_id,),
        )
        return _row_to_vault(row) if row else None

    async def list_vaults(self, user_id: str) -> list[Vault]:
        """사용자의 금고 목록 (최신 생성순)"""
        rows = await self._fetchall(
            f"""
            SELECT {_VAULT_COLUMNS} FROM vaults
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC
            """,
            (user_id,),
        )
        return [_row_to_vault(row) for row in rows]

    async def list_all_vaults(self) -> list[Vault]:
        """전체 금고 목록 (유지보수 스크립트용)"""
        rows = await self._fetchall(
            f"SELECT {_VAULT_COLUMNS} FROM vaults ORDER BY created_at",
            (),
        )
        return [_row_to_vault(row) for row in rows]

    async def delete_vault(self, vault_id: str) -> bool:
        """금고 삭제 (입출금은 ON DELETE CASCADE)"""
        async with self._write():
            cursor = await self.db.execute(
                "DELETE FROM vaults WHERE vault_id = ?",
                (vault_id,),
            )
            deleted = cursor.rowcount > 0

        if deleted:
            logger.debug(f"Vault deleted: {vault_id}")

        return deleted

    # -------------------------------------------------------------------------
    # 잔액 캐시
    # -------------------------------------------------------------------------

    async def get_vault_balance(self, vault_id: str) -> Decimal | None:
        row = await self._fetchone(
            "SELECT current_balance FROM vaults WHERE vault_id = ?",
            (vault_id,),
        )
        return Decimal(row[0]) if row else None

    async def increment_balance(self, vault_id: str, delta: Decimal) -> Decimal:
        """잔액 캐시에 delta 반영

        BEGIN IMMEDIATE 트랜잭션 안에서 read-modify-write.
        SQLite에는 Decimal 덧셈이 없으므로 UPDATE ... + ? 대신 이 방식 사용.

        Raises:
            NotFoundError: 금고 없음
            DependencyError: DB 오류
        """
        async with self._write(immediate=True):
            row = await self.db.fetchone(
                "SELECT current_balance FROM vaults WHERE vault_id = ?",
                (vault_id,),
            )
            if row is None:
                raise NotFoundError("Vault", vault_id)

            new_balance = Decimal(row[0]) + delta

            await self.db.execute(
                """
                UPDATE vaults
                SET current_balance = ?, updated_at = ?
                WHERE vault_id = ?
                """,
                (str(new_balance), now_utc_iso(), vault_id),
            )

        return new_balance

    async def set_vault_balance(self, vault_id: str, balance: Decimal) -> None:
        """잔액 캐시 덮어쓰기

        Raises:
            NotFoundError: 금고 없음
        """
        async with self._write():
            cursor = await self.db.execute(
                """
                UPDATE vaults
                SET current_balance = ?, updated_at = ?
                WHERE vault_id = ?
                """,
                (str(balance), now_utc_iso(), vault_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("Vault", vault_id)

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
        """입출금 저장

        Raises:
            NotFoundError: 금고 없음 (외래 키 위반)
        """
        movement_id = str(uuid.uuid4())
        now = now_utc_iso()

        try:
            async with self._write():
                await self.db.execute(
                    """
                    INSERT INTO vault_movements (
                        movement_id, vault_id, kind, magnitude, description,
                        occurred_at, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        movement_id,
                        vault_id,
                        kind.value,
                        str(magnitude),
                        description,
                        occurred_at,
                        now,
                        now,
                    ),
                )
        except DependencyError as e:
            if isinstance(e.__cause__, aiosqlite.IntegrityError):
                raise NotFoundError("Vault", vault_id) from e
            raise

        return Movement(
            movement_id=movement_id,
            vault_id=vault_id,
            kind=kind,
            magnitude=magnitude,
            description=description,
            occurred_at=occurred_at,
            created_at=now,
            updated_at=now,
        )

    async def get_movement(self, movement_id: str) -> Movement | None:
        row = await self._fetchone(
            f"SELECT {_MOVEMENT_COLUMNS} FROM vault_movements WHERE movement_id = ?",
            (movement_id,),
        )
        return _row_to_movement(row) if row else None

    async def update_movement(
        self,
        movement_id: str,
        kind: MovementKind,
        magnitude: Decimal,
        description: str | None,
    ) -> Movement | None:
        """입출금 필드 갱신

        Returns:
            갱신된 Movement (없으면 None)
        """
        async with self._write():
            cursor = await self.db.execute(
                """
                UPDATE vault_movements
                SET kind = ?, magnitude = ?, description = ?, updated_at = ?
                WHERE movement_id = ?
                """,
                (kind.value, str(magnitude), description, now_utc_iso(), movement_id),
            )
            updated = cursor.rowcount > 0

        if not updated:
            return None

        return await self.get_movement(movement_id)

    async def delete_movement(self, movement_id: str) -> bool:
        async with self._write():
            cursor = await self.db.execute(
                "DELETE FROM vault_movements WHERE movement_id = ?",
                (movement_id,),
            )
            return cursor.rowcount > 0

    async def list_movements(
        self,
        vault_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Movement]:
        """금고의 입출금 목록

        occurred_at 최신순, 같은 시각이면 나중에 저장된 것이 먼저.
        """
        sql = f"""
            SELECT {_MOVEMENT_COLUMNS} FROM vault_movements
            WHERE vault_id = ?
            ORDER BY occurred_at DESC, seq DESC
        """
        parameters: tuple[Any, ...] = (vault_id,)

        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            parameters = (vault_id, limit, offset)

        rows = await self._fetchall(sql, parameters)
        return [_row_to_movement(row) for row in rows]

    async def count_movements(self, vault_id: str) -> int:
        row = await self._fetchone(
            "SELECT COUNT(*) FROM vault_movements WHERE vault_id = ?",
            (vault_id,),
        )
        return int(row[0]) if row else 0
