"""Reconciliation pipeline settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Final

from arcdiff.domain.types import ProviderId, SourceId

from .env import env_float, env_int
from .errors import ConfigurationError

log = logging.getLogger(__name__)

KNOWN_SOURCES: Final[tuple[ProviderId, ...]] = tuple(source.value for source in SourceId)
DEFAULT_ENABLED_SOURCES: Final[tuple[ProviderId, ...]] = (
    SourceId.ARDB.value,
    SourceId.METAFORGE.value,
    SourceId.RAIDTHEORY.value,
)
DEFAULT_FUZZY_MATCH_THRESHOLD: Final[float] = 0.93
DEFAULT_CACHE_TTL_SECONDS: Final[int] = 10 * 60
DEFAULT_SYNC_INTERVAL_SECONDS: Final[int] = 6 * 60 * 60


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    enabled_sources: tuple[ProviderId, ...] = DEFAULT_ENABLED_SOURCES
    fuzzy_match_threshold: float = DEFAULT_FUZZY_MATCH_THRESHOLD
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    metaforge_sync_interval_seconds: float = DEFAULT_SYNC_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        if not 0.0 <= self.fuzzy_match_threshold <= 1.0:
            raise ConfigurationError(
                f"FUZZY_MATCH_THRESHOLD must lie in [0, 1], got {self.fuzzy_match_threshold}"
            )

    @property
    def metaforge_sync_interval(self) -> timedelta:
        return timedelta(seconds=self.metaforge_sync_interval_seconds)


def parse_enabled_sources(raw: str | None) -> tuple[ProviderId, ...]:
    """Parse a comma-separated provider list, dropping unknown and repeated ids."""

    if not raw:
        return DEFAULT_ENABLED_SOURCES
    parsed: list[ProviderId] = []
    for value in raw.split(","):
        candidate = value.strip().lower()
        if not candidate:
            continue
        if candidate not in KNOWN_SOURCES:
            log.warning("Ignoring unknown provider %r", candidate)
            continue
        if candidate not in parsed:
            parsed.append(candidate)
    return tuple(parsed) or DEFAULT_ENABLED_SOURCES


def get_pipeline_config() -> PipelineConfig:
    return PipelineConfig(
        enabled_sources=parse_enabled_sources(os.getenv("ENABLED_SOURCES")),
        fuzzy_match_threshold=env_float("FUZZY_MATCH_THRESHOLD", DEFAULT_FUZZY_MATCH_THRESHOLD),
        cache_ttl_seconds=env_int("CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS),
        metaforge_sync_interval_seconds=env_int(
            "METAFORGE_SYNC_INTERVAL_SECONDS", DEFAULT_SYNC_INTERVAL_SECONDS
        ),
    )
