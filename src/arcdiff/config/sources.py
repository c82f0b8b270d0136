"""Endpoints and paging settings of the item providers."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_int, env_str
from .http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    get_http_cache_config,
    request_timeout_seconds,
)

DEFAULT_ARDB_ITEMS_URL = "https://ardb.app/api/items"
DEFAULT_METAFORGE_ITEMS_URL = "https://metaforge.app/api/arc-raiders/items"
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_MAHCKS_BASE_URL = "https://arcdata.mahcks.com"


@dataclass(frozen=True, slots=True)
class ArdbConfig:
    items_url: str
    resilience: ResilienceConfig


@dataclass(frozen=True, slots=True)
class MetaForgeConfig:
    items_url: str
    page_size: int
    include_components: bool
    resilience: ResilienceConfig


@dataclass(frozen=True, slots=True)
class RaidTheoryConfig:
    owner: str
    repo: str
    branch: str
    items_path: str
    concurrency: int
    max_items: int
    resilience: ResilienceConfig
    api_url: str = DEFAULT_GITHUB_API_URL


@dataclass(frozen=True, slots=True)
class MahcksConfig:
    base_url: str
    page_size: int
    resilience: ResilienceConfig


@dataclass(frozen=True, slots=True)
class SourcesConfig:
    ardb: ArdbConfig
    metaforge: MetaForgeConfig
    raidtheory: RaidTheoryConfig
    mahcks: MahcksConfig


def _resilience(
    name: str, *, cache: CacheConfig | None, ratelimit: RateLimit | None = None
) -> ResilienceConfig:
    return ResilienceConfig(
        name=name,
        timeout_seconds=request_timeout_seconds(),
        ratelimit=ratelimit,
        cache=cache,
    )


def get_sources_config(*, http_cache_path: str | None = None) -> SourcesConfig:
    cache = get_http_cache_config(sqlite_path=http_cache_path)
    return SourcesConfig(
        ardb=ArdbConfig(
            items_url=env_str("ARDB_ITEMS_URL", DEFAULT_ARDB_ITEMS_URL),
            resilience=_resilience("ardb", cache=cache),
        ),
        metaforge=MetaForgeConfig(
            items_url=env_str("METAFORGE_ITEMS_URL", DEFAULT_METAFORGE_ITEMS_URL),
            page_size=max(1, env_int("METAFORGE_PAGE_SIZE", 100)),
            include_components=env_bool("METAFORGE_INCLUDE_COMPONENTS", default=True),
            resilience=_resilience(
                "metaforge", cache=cache, ratelimit=RateLimit(max_calls=4, per_seconds=1.0)
            ),
        ),
        raidtheory=RaidTheoryConfig(
            owner=env_str("RAIDTHEORY_GITHUB_OWNER", "RaidTheory"),
            repo=env_str("RAIDTHEORY_GITHUB_REPO", "arcraiders-data"),
            branch=env_str("RAIDTHEORY_GITHUB_BRANCH", "main"),
            items_path=env_str("RAIDTHEORY_ITEMS_PATH", "items"),
            concurrency=max(1, env_int("RAIDTHEORY_CONCURRENCY", 20)),
            max_items=max(0, env_int("RAIDTHEORY_MAX_ITEMS", 0)),
            resilience=_resilience("raidtheory", cache=cache),
        ),
        mahcks=MahcksConfig(
            base_url=env_str("MAHCKS_BASE_URL", DEFAULT_MAHCKS_BASE_URL).rstrip("/"),
            page_size=max(1, env_int("MAHCKS_PAGE_SIZE", 45)),
            resilience=_resilience("mahcks", cache=cache),
        ),
    )
