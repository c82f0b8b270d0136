from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from arcdiff.app import DIFF_DATA_KEY, ReconciliationService, build_service
from arcdiff.config import ConfigurationError, PipelineConfig, get_sources_config
from arcdiff.domain.snapshot import LinkRelation, SnapshotService
from arcdiff.domain.types import isoformat_utc, utc_now
from tests.helpers.items import FakeFetcher
from tests.helpers.metaforge import battery_payload

if TYPE_CHECKING:
    from arcdiff.adapters.sqlalchemy.unit_of_work import SnapshotDatabase


def _fetchers() -> dict[str, FakeFetcher]:
    return {
        "ardb": FakeFetcher("ardb", items=[{"id": "battery", "name": "Battery"}], delay=0.02),
        "metaforge": FakeFetcher("metaforge", items=[battery_payload()], delay=0.02),
        "raidtheory": FakeFetcher("raidtheory", items=[{"id": "wires", "name": "Wires"}]),
    }


def test_diff_data_is_memoized() -> None:
    fetchers = _fetchers()
    service = ReconciliationService(pipeline=PipelineConfig(), fetchers=fetchers)

    async def run() -> None:
        first, second = await asyncio.gather(service.diff_data(), service.diff_data())
        third = await service.diff_data()
        assert first is second is third

    asyncio.run(run())

    assert all(fetcher.calls == 1 for fetcher in fetchers.values())
    assert DIFF_DATA_KEY in service.cache


def test_provider_subset_uses_its_own_cache_entry() -> None:
    fetchers = _fetchers()
    service = ReconciliationService(pipeline=PipelineConfig(), fetchers=fetchers)

    async def run() -> None:
        full = await service.diff_data()
        subset = await service.diff_data(["ardb"])
        assert full.enabled_sources == ("ardb", "metaforge", "raidtheory")
        assert subset.enabled_sources == ("ardb",)

    asyncio.run(run())

    assert fetchers["ardb"].calls == 2
    assert fetchers["metaforge"].calls == 1
    assert f"{DIFF_DATA_KEY}:ardb" in service.cache


def test_failed_run_is_not_cached() -> None:
    fetchers = _fetchers()
    service = ReconciliationService(pipeline=PipelineConfig(), fetchers=fetchers)
    calls = 0

    async def failing_build(*_args: object, **_kwargs: object) -> None:
        nonlocal calls
        calls += 1
        raise RuntimeError("boom")

    async def run() -> None:
        with pytest.raises(RuntimeError):
            await service.cache.get_or_set(DIFF_DATA_KEY, 60, failing_build)
        response = await service.diff_data()
        assert response.enabled_sources

    asyncio.run(run())

    assert calls == 1


def test_snapshot_paths_need_a_snapshot_store() -> None:
    service = ReconciliationService(pipeline=PipelineConfig(), fetchers=_fetchers())

    with pytest.raises(ConfigurationError):
        asyncio.run(service.snapshot_data())
    with pytest.raises(ConfigurationError):
        asyncio.run(service.item_links("battery"))


def test_snapshot_data_and_links(snapshot_database: SnapshotDatabase) -> None:
    fetchers = _fetchers()
    fetchers["metaforge"].fetched_at = isoformat_utc(utc_now())
    snapshots = SnapshotService(
        fetcher=fetchers["metaforge"],
        uow_factory=snapshot_database.unit_of_work,
        sync_interval=timedelta(hours=6),
        fuzzy_threshold=0.93,
    )
    service = ReconciliationService(
        pipeline=PipelineConfig(), fetchers=fetchers, snapshots=snapshots
    )

    async def run() -> None:
        response = await service.snapshot_data()
        assert [item.display_name for item in response.canonical_items] == ["Battery"]
        links = await service.item_links("battery", relation=LinkRelation.USED_IN)
        assert [link.related_item_id for link in links] == ["power-cell"]

    asyncio.run(run())

    assert fetchers["metaforge"].calls == 1


def test_build_service_wires_every_provider(snapshot_database: SnapshotDatabase) -> None:
    service = build_service(
        pipeline=PipelineConfig(enabled_sources=("ardb", "mahcks")),
        sources=get_sources_config(),
        database=snapshot_database,
    )

    assert set(service.fetchers) == {"ardb", "metaforge", "raidtheory", "mahcks"}
    assert service.snapshots is not None
    assert service.snapshots.source_id == "metaforge"
    assert service.pipeline.enabled_sources == ("ardb", "mahcks")
