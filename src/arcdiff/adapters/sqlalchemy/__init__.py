"""SQLAlchemy persistence of the provider snapshot store."""

from __future__ import annotations

from .mappings import item_links_table, items_table, metadata, sync_state_table
from .repositories import SqlAlchemySnapshotRepository
from .unit_of_work import (
    SnapshotDatabase,
    SqlAlchemySnapshotUnitOfWork,
    StartupError,
    create_snapshot_engine,
    startup,
)

__all__ = [
    "SnapshotDatabase",
    "SqlAlchemySnapshotRepository",
    "SqlAlchemySnapshotUnitOfWork",
    "StartupError",
    "create_snapshot_engine",
    "item_links_table",
    "items_table",
    "metadata",
    "startup",
    "sync_state_table",
]
