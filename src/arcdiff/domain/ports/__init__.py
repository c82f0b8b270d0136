"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import SourceFetcher, SourceFetchResult
from .persistence import SnapshotRepository, SnapshotUnitOfWork, SyncState

__all__ = [
    "SnapshotRepository",
    "SnapshotUnitOfWork",
    "SourceFetchResult",
    "SourceFetcher",
    "SyncState",
]
