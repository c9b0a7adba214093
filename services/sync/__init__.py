"""
ARMVIZ Sync Service

Mirrors one arm's joint positions onto another in a background task.
"""

from .synchronizer import (
    DEFAULT_PERIOD_SEC,
    SyncResult,
    SyncSchedule,
    SyncSession,
    SyncState,
    Synchronizer,
)

__all__ = [
    "DEFAULT_PERIOD_SEC",
    "SyncResult",
    "SyncSchedule",
    "SyncSession",
    "SyncState",
    "Synchronizer",
]
