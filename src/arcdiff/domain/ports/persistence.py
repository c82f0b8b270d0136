"""Persistence ports for the provider snapshot store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from arcdiff.domain.snapshot.links import ItemLink, LinkRelation, SnapshotRecord


@dataclass(slots=True, frozen=True)
class SyncState:
    """Singleton bookkeeping row describing the last successful resync."""

    last_synced_at: datetime
    version: str
    item_count: int


class SnapshotRepository(Protocol):
    def sync_state(self) -> SyncState | None: ...

    def replace_all(self, records: Sequence[SnapshotRecord], *, state: SyncState) -> None: ...

    def read_items_raw(self) -> list[object]: ...

    def links_for(
        self, item_id: str, *, relation: LinkRelation | None = None
    ) -> list[ItemLink]: ...


class SnapshotUnitOfWork(Protocol):
    """Transactional boundary around the snapshot repository."""

    @property
    def snapshots(self) -> SnapshotRepository: ...

    def __enter__(self) -> SnapshotUnitOfWork: ...

    def __exit__(self, *args: object) -> bool | None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


__all__ = ["SnapshotRepository", "SnapshotUnitOfWork", "SyncState"]
