"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from arcdiff.adapters.providers import build_fetchers, default_client_factory
from arcdiff.adapters.sqlalchemy.unit_of_work import startup
from arcdiff.common.cache import MemoizedCache
from arcdiff.config import (
    ConfigurationError,
    get_pipeline_config,
    get_sources_config,
    get_storage_config,
)
from arcdiff.domain.pipeline import build_diff_data
from arcdiff.domain.snapshot import SnapshotService
from arcdiff.domain.types import SourceId

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from arcdiff.adapters.http_resilience import ResilientClient
    from arcdiff.adapters.sqlalchemy.unit_of_work import SnapshotDatabase
    from arcdiff.config import PipelineConfig, ResilienceConfig, SourcesConfig
    from arcdiff.domain.ports.fetching import SourceFetcher
    from arcdiff.domain.snapshot import ItemLink, LinkRelation
    from arcdiff.domain.types import DiffDataResponse, ProviderId

log = getLogger(__name__)

DIFF_DATA_KEY: Final[str] = "diff-data"
SNAPSHOT_DATA_KEY: Final[str] = "metaforge-data"


@dataclass(slots=True)
class ReconciliationService:
    """Memoized access to the live diff and to the stored MetaForge snapshot."""

    pipeline: PipelineConfig
    fetchers: Mapping[ProviderId, SourceFetcher]
    snapshots: SnapshotService | None = None
    cache: MemoizedCache = field(default_factory=MemoizedCache)

    def _diff_key(self, sources: tuple[ProviderId, ...]) -> str:
        if sources == self.pipeline.enabled_sources:
            return DIFF_DATA_KEY
        return f"{DIFF_DATA_KEY}:{','.join(sources)}"

    async def diff_data(self, sources: Sequence[ProviderId] | None = None) -> DiffDataResponse:
        enabled = tuple(sources) if sources else self.pipeline.enabled_sources

        async def produce() -> DiffDataResponse:
            log.info("Building diff data for %s", ", ".join(enabled))
            return await build_diff_data(
                self.fetchers,
                enabled,
                fuzzy_threshold=self.pipeline.fuzzy_match_threshold,
            )

        return await self.cache.get_or_set(
            self._diff_key(enabled), self.pipeline.cache_ttl_seconds, produce
        )

    def _require_snapshots(self) -> SnapshotService:
        if self.snapshots is None:
            raise ConfigurationError("No snapshot store configured")
        return self.snapshots

    async def snapshot_data(self) -> DiffDataResponse:
        snapshots = self._require_snapshots()
        return await self.cache.get_or_set(
            SNAPSHOT_DATA_KEY, self.pipeline.cache_ttl_seconds, snapshots.build_from_store
        )

    async def item_links(
        self, item_id: str, *, relation: LinkRelation | None = None
    ) -> list[ItemLink]:
        snapshots = self._require_snapshots()
        await snapshots.ensure_fresh()
        return snapshots.links_for(item_id, relation=relation)


def build_service(
    *,
    pipeline: PipelineConfig | None = None,
    sources: SourcesConfig | None = None,
    database: SnapshotDatabase | None = None,
    client_factory: Callable[[ResilienceConfig], ResilientClient] = default_client_factory,
) -> ReconciliationService:
    """Wire configuration, provider fetchers and the snapshot store."""

    pipeline_config = pipeline or get_pipeline_config()
    if sources is None:
        storage = get_storage_config()
        sources = get_sources_config(http_cache_path=str(storage.http_cache_path()))
    fetchers = build_fetchers(sources, client_factory=client_factory)
    snapshot_database = database or startup()

    snapshots = SnapshotService(
        fetcher=fetchers[SourceId.METAFORGE.value],
        uow_factory=snapshot_database.unit_of_work,
        sync_interval=pipeline_config.metaforge_sync_interval,
        fuzzy_threshold=pipeline_config.fuzzy_match_threshold,
    )
    log.debug("Enabled providers: %s", ", ".join(pipeline_config.enabled_sources))
    return ReconciliationService(pipeline=pipeline_config, fetchers=fetchers, snapshots=snapshots)
