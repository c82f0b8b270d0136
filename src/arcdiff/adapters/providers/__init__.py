"""Fetchers for the third-party item providers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from arcdiff.domain.types import SourceId

from .ardb import ArdbFetcher
from .base import ProviderFetchError, default_client_factory
from .mahcks import MahcksFetcher
from .metaforge import MetaForgeFetcher
from .raidtheory import RaidTheoryFetcher

if TYPE_CHECKING:
    from collections.abc import Callable

    from arcdiff.adapters.http_resilience import ResilientClient
    from arcdiff.config.http_resilience import ResilienceConfig
    from arcdiff.config.sources import SourcesConfig
    from arcdiff.domain.ports.fetching import SourceFetcher
    from arcdiff.domain.types import ProviderId


def build_fetchers(
    config: SourcesConfig,
    *,
    client_factory: Callable[[ResilienceConfig], ResilientClient] = default_client_factory,
) -> dict[ProviderId, SourceFetcher]:
    """One fetcher per known provider, sharing ``client_factory``."""

    return {
        SourceId.ARDB.value: ArdbFetcher(config.ardb, client_factory=client_factory),
        SourceId.METAFORGE.value: MetaForgeFetcher(config.metaforge, client_factory=client_factory),
        SourceId.RAIDTHEORY.value: RaidTheoryFetcher(
            config.raidtheory, client_factory=client_factory
        ),
        SourceId.MAHCKS.value: MahcksFetcher(config.mahcks, client_factory=client_factory),
    }


__all__ = [
    "ArdbFetcher",
    "MahcksFetcher",
    "MetaForgeFetcher",
    "ProviderFetchError",
    "RaidTheoryFetcher",
    "build_fetchers",
    "default_client_factory",
]
