"""
Web API 스키마 (Pydantic)
"""

from web.models.requests import (
    MovementAmendRequest,
    MovementRecordRequest,
    VaultCreateRequest,
)
from web.models.responses import (
    DriftResponse,
    HistoryItemResponse,
    MovementMutationResponse,
    MovementRemovedResponse,
    MovementResponse,
    VaultResponse,
    VaultSummaryResponse,
)

__all__ = [
    "VaultCreateRequest",
    "MovementRecordRequest",
    "MovementAmendRequest",
    "VaultResponse",
    "MovementResponse",
    "MovementMutationResponse",
    "MovementRemovedResponse",
    "HistoryItemResponse",
    "VaultSummaryResponse",
    "DriftResponse",
]
