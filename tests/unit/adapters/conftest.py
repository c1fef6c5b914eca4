"""
어댑터 테스트 픽스처

공통 테스트 설정 및 픽스처 제공.
"""

from decimal import Decimal

import pytest_asyncio

from adapters.mock.vault_repository import MockVaultRepository
from core.vault.types import MovementKind, Vault


# -------------------------------------------------------------------------
# 공통 데이터 픽스처
# -------------------------------------------------------------------------

@pytest_asyncio.fixture
async def sample_vault(mock_repo: MockVaultRepository) -> Vault:
    """목표 금액이 있는 샘플 금고"""
    return await mock_repo.create_vault("user-1", "Cofre Principal", Decimal("1000"))


@pytest_asyncio.fixture
async def seeded_repo(mock_repo: MockVaultRepository, sample_vault: Vault) -> MockVaultRepository:
    """입출금 3건이 저장된 Mock 저장소 (잔액 캐시는 0 그대로)"""
    for kind, magnitude, occurred_at in (
        (MovementKind.DEPOSIT, "500", "2026-03-01T12:00:00.000000+00:00"),
        (MovementKind.WITHDRAWAL, "120", "2026-03-02T12:00:00.000000+00:00"),
        (MovementKind.DEPOSIT, "30", "2026-03-02T12:00:00.000000+00:00"),
    ):
        await mock_repo.insert_movement(
            vault_id=sample_vault.vault_id,
            kind=kind,
            magnitude=Decimal(magnitude),
            description=None,
            occurred_at=occurred_at,
        )
    mock_repo.calls.clear()
    return mock_repo
