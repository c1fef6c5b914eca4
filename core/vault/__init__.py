"""
금고(Cofre) Ledger

현금 금고의 입출금 기록과 잔액 캐시를 일관되게 유지.

사용 예시:
```python
from core.vault import VaultLedger, VaultStore

ledger = VaultLedger(VaultStore(db))

vault = await ledger.ensure_default_vault("user-1")
deposit = await ledger.record(vault.vault_id, "deposit", "500", "initial")
sangria = await ledger.record(vault.vault_id, "withdrawal", "120", "sangria")
await ledger.amend(sangria.movement_id, magnitude="200")
await ledger.remove(deposit.movement_id)

# ReconciliationError 이후 복구
await ledger.recompute_balance(vault.vault_id)
```
"""

from core.vault.errors import (
    DependencyError,
    NotFoundError,
    ReconciliationError,
    ValidationError,
    VaultError,
)
from core.vault.ledger import VaultLedger
from core.vault.store import VaultStore
from core.vault.summary import HistoryItem, VaultSummary
from core.vault.types import BalanceDrift, Movement, MovementKind, Vault, signed_delta

__all__ = [
    # 핵심 클래스
    "VaultLedger",
    "VaultStore",
    # 데이터
    "Vault",
    "Movement",
    "MovementKind",
    "BalanceDrift",
    "VaultSummary",
    "HistoryItem",
    "signed_delta",
    # 예외
    "VaultError",
    "ValidationError",
    "NotFoundError",
    "ReconciliationError",
    "DependencyError",
]
