"""ARDB item catalog fetcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from arcdiff.domain.ports.fetching import SourceFetchResult
from arcdiff.domain.types import ProviderId, SourceId, isoformat_utc, utc_now

from .base import default_client_factory, latest_timestamp, parse_envelope
from .schema import ArdbEnvelope

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from arcdiff.adapters.http_resilience import ResilientClient
    from arcdiff.config.http_resilience import ResilienceConfig
    from arcdiff.config.sources import ArdbConfig

log = getLogger(__name__)


@dataclass(slots=True)
class ArdbFetcher:
    """Single GET of the full item list; the payload is a list or ``{"data": [...]}``."""

    config: ArdbConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )
    clock: Callable[[], datetime] = field(default=utc_now)
    source_id: ProviderId = field(default=SourceId.ARDB.value, init=False)

    async def __call__(self) -> SourceFetchResult:
        async with self.client_factory(self.config.resilience) as client:
            payload = await client.get_json(self.config.items_url)

        if isinstance(payload, list):
            items_raw: list[object] = list(payload)
        else:
            items_raw = list(parse_envelope(ArdbEnvelope, payload, source="ardb").data or [])

        log.debug("ardb returned %d items", len(items_raw))
        return SourceFetchResult(
            source_id=self.source_id,
            fetched_at=isoformat_utc(self.clock()),
            version_or_commit=latest_timestamp(items_raw, "updatedAt"),
            items_raw=items_raw,
        )
