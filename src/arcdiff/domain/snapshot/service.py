"""Persisted snapshot of one slow provider with staleness-triggered resync."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from arcdiff.domain.ports.fetching import SourceFetchResult
from arcdiff.domain.ports.persistence import SyncState
from arcdiff.domain.reconciliation import normalize_source_fetch, resolve_canonical_items
from arcdiff.domain.types import (
    DiffDataResponse,
    SourceSummary,
    isoformat_utc,
    parse_iso_datetime,
    utc_now,
)

from .links import build_snapshot_records, object_item_count

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime, timedelta

    from arcdiff.domain.ports.fetching import SourceFetcher
    from arcdiff.domain.ports.persistence import SnapshotUnitOfWork

    from .links import ItemLink, LinkRelation

log = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"


class SnapshotSyncError(RuntimeError):
    """Raised when refreshing the snapshot fails; previously stored rows stay intact."""


class SnapshotService:
    """Read path over the snapshot store of a single provider.

    Resyncs are serialized by a per-service lock and written in one
    transaction, so readers only ever see a complete item set.
    """

    def __init__(
        self,
        *,
        fetcher: SourceFetcher,
        uow_factory: Callable[[], SnapshotUnitOfWork],
        sync_interval: timedelta,
        fuzzy_threshold: float,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._fetcher = fetcher
        self._uow_factory = uow_factory
        self._sync_interval = sync_interval
        self._fuzzy_threshold = fuzzy_threshold
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def source_id(self) -> str:
        return self._fetcher.source_id

    def sync_state(self) -> SyncState | None:
        with self._uow_factory() as uow:
            return uow.snapshots.sync_state()

    def is_stale(self, state: SyncState | None) -> bool:
        if state is None:
            return True
        return self._clock() - state.last_synced_at >= self._sync_interval

    async def ensure_fresh(self) -> bool:
        """Resync the store when it is empty or stale; return whether it did."""

        if not self.is_stale(self.sync_state()):
            return False
        async with self._lock:
            # another caller may have finished a resync while we waited
            if not self.is_stale(self.sync_state()):
                return False
            log.info("Snapshot for %s is stale, resyncing", self.source_id)
            try:
                result = await self._fetcher()
            except Exception as exc:
                log.warning("Snapshot fetch for %s failed: %s", self.source_id, exc)
                raise SnapshotSyncError(f"Fetching {self.source_id} failed: {exc}") from exc
            self._persist(result)
        return True

    def _persist(self, result: SourceFetchResult) -> None:
        records = build_snapshot_records(result)
        try:
            synced_at = parse_iso_datetime(result.fetched_at)
        except ValueError:
            synced_at = self._clock()
        state = SyncState(
            last_synced_at=synced_at,
            version=result.version_or_commit,
            item_count=object_item_count(result),
        )
        try:
            with self._uow_factory() as uow:
                uow.snapshots.replace_all(records, state=state)
                uow.commit()
        except Exception as exc:
            log.exception("Snapshot resync for %s rolled back", self.source_id)
            raise SnapshotSyncError(f"Persisting {self.source_id} snapshot failed") from exc
        log.info(
            "Snapshot for %s synced: %d items, version %s",
            self.source_id,
            len(records),
            state.version,
        )

    async def build_from_store(self) -> DiffDataResponse:
        """Refresh if needed, then resolve the stored payloads as a single-provider set."""

        await self.ensure_fresh()
        with self._uow_factory() as uow:
            state = uow.snapshots.sync_state()
            items_raw = uow.snapshots.read_items_raw()

        result = SourceFetchResult(
            source_id=self.source_id,
            fetched_at=isoformat_utc(state.last_synced_at if state else self._clock()),
            version_or_commit=state.version if state else UNKNOWN_VERSION,
            items_raw=items_raw,
        )
        normalized = normalize_source_fetch(result)
        canonical_items = resolve_canonical_items(
            {self.source_id: normalized}, [self.source_id], self._fuzzy_threshold
        )
        summary = SourceSummary(
            source_id=self.source_id,
            fetched_at=result.fetched_at,
            version_or_commit=result.version_or_commit,
            item_count=len(normalized),
        )
        return DiffDataResponse(
            generated_at=isoformat_utc(self._clock()),
            enabled_sources=(self.source_id,),
            source_summaries=(summary,),
            canonical_items=tuple(canonical_items),
        )

    def links_for(self, item_id: str, *, relation: LinkRelation | None = None) -> list[ItemLink]:
        with self._uow_factory() as uow:
            return uow.snapshots.links_for(item_id, relation=relation)
