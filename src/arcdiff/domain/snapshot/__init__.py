"""Locally persisted provider snapshots."""

from __future__ import annotations

from .links import (
    ItemLink,
    LinkRelation,
    SnapshotItemRow,
    SnapshotRecord,
    build_snapshot_records,
    extract_links,
)
from .service import SnapshotService, SnapshotSyncError

__all__ = [
    "ItemLink",
    "LinkRelation",
    "SnapshotItemRow",
    "SnapshotRecord",
    "SnapshotService",
    "SnapshotSyncError",
    "build_snapshot_records",
    "extract_links",
]
