"""
금고 Ledger 예외 정의

- ValidationError: 입력 검증 실패 (저장소 접근 전 거부)
- NotFoundError: 금고/입출금 없음 (상태 변경 없음)
- ReconciliationError: 입출금 기록과 잔액 캐시가 어긋남 (recompute 필요)
- DependencyError: 저장소 접근 불가 (상태 변경 없음)
"""


class VaultError(Exception):
    """금고 Ledger 예외 기본 클래스"""

    pass


class ValidationError(VaultError):
    """입력 검증 실패"""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(VaultError):
    """대상 엔티티 없음"""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ReconciliationError(VaultError):
    """입출금 기록과 잔액 캐시 불일치

    입출금 쓰기는 성공했지만 잔액 쓰기가 실패한 경우 (또는 그 반대).
    호출자는 recompute_balance()로 복구해야 함.
    """

    def __init__(
        self,
        vault_id: str,
        operation: str,
        movement_id: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(
            f"Vault {vault_id} balance out of sync after {operation}"
            f" (movement={movement_id}): {cause}"
        )
        self.vault_id = vault_id
        self.operation = operation
        self.movement_id = movement_id
        self.cause = cause


class DependencyError(VaultError):
    """저장소 접근 실패"""

    pass
