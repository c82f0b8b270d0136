"""Concurrent fetch, normalize, resolve and diff of all enabled providers."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from arcdiff.domain.reconciliation import normalize_source_fetch, resolve_canonical_items
from arcdiff.domain.types import DiffDataResponse, SourceSummary, isoformat_utc, utc_now

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from datetime import datetime

    from arcdiff.domain.ports.fetching import SourceFetcher, SourceFetchResult
    from arcdiff.domain.types import ProviderId, SourceItem

log = logging.getLogger(__name__)

UNAVAILABLE_VERSION = "unavailable"


class MissingFetcherError(LookupError):
    """Raised for an enabled provider that has no registered fetcher."""


async def _fetch(source_id: ProviderId, fetcher: SourceFetcher | None) -> SourceFetchResult:
    if fetcher is None:
        raise MissingFetcherError(f"No fetcher registered for provider {source_id!r}")
    log.info("Fetching %s", source_id)
    result = await fetcher()
    log.info("Fetched %d raw items from %s", len(result.items_raw), source_id)
    return result


async def build_diff_data(
    fetchers: Mapping[ProviderId, SourceFetcher],
    enabled_sources: Sequence[ProviderId],
    *,
    fuzzy_threshold: float,
    clock: Callable[[], datetime] = utc_now,
) -> DiffDataResponse:
    """Fetch every enabled provider concurrently and reconcile the successful ones.

    A failing provider never aborts the others: it is reported in the source
    summaries with an ``error`` and contributes no records to the run.
    """

    outcomes = await asyncio.gather(
        *(_fetch(source_id, fetchers.get(source_id)) for source_id in enabled_sources),
        return_exceptions=True,
    )

    summaries: list[SourceSummary] = []
    normalized_by_source: dict[ProviderId, list[SourceItem]] = {}
    active_sources: list[ProviderId] = []

    for source_id, outcome in zip(enabled_sources, outcomes, strict=True):
        if isinstance(outcome, Exception):
            log.warning("Provider %s failed: %s", source_id, outcome)
            summaries.append(
                SourceSummary(
                    source_id=source_id,
                    fetched_at=isoformat_utc(clock()),
                    version_or_commit=UNAVAILABLE_VERSION,
                    item_count=0,
                    error=str(outcome) or type(outcome).__name__,
                )
            )
            continue
        if isinstance(outcome, BaseException):
            raise outcome

        normalized = normalize_source_fetch(outcome)
        normalized_by_source[source_id] = normalized
        active_sources.append(source_id)
        summaries.append(
            SourceSummary(
                source_id=source_id,
                fetched_at=outcome.fetched_at,
                version_or_commit=outcome.version_or_commit,
                item_count=len(normalized),
            )
        )

    canonical_items = resolve_canonical_items(normalized_by_source, active_sources, fuzzy_threshold)
    return DiffDataResponse(
        generated_at=isoformat_utc(clock()),
        enabled_sources=tuple(active_sources),
        source_summaries=tuple(summaries),
        canonical_items=tuple(canonical_items),
    )
