"""Local-to-remote sync after sign-in."""

from relcrm.sync.orchestrator import (
    SyncCounts,
    SyncOrchestrator,
    SyncState,
    SyncStateError,
)

__all__ = [
    "SyncCounts",
    "SyncOrchestrator",
    "SyncState",
    "SyncStateError",
]
