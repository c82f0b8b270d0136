"""mahcks arcdata API fetcher (offset paging)."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from arcdiff.domain.ports.fetching import SourceFetchResult
from arcdiff.domain.types import ProviderId, SourceId, isoformat_utc, utc_now

from .base import UNKNOWN_VERSION, default_client_factory, parse_envelope
from .schema import MahcksInfo, MahcksPage

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from arcdiff.adapters.http_resilience import ResilientClient
    from arcdiff.config.http_resilience import ResilienceConfig
    from arcdiff.config.sources import MahcksConfig

log = getLogger(__name__)


@dataclass(slots=True)
class MahcksFetcher:
    config: MahcksConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )
    clock: Callable[[], datetime] = field(default=utc_now)
    source_id: ProviderId = field(default=SourceId.MAHCKS.value, init=False)

    async def __call__(self) -> SourceFetchResult:
        base_url = self.config.base_url
        items_raw: list[object] = []
        offset = 0

        async with self.client_factory(self.config.resilience) as client:
            info_payload = await client.get_json(f"{base_url}/v1")
            info = parse_envelope(MahcksInfo, info_payload, source="mahcks")
            while True:
                payload = await client.get_json(
                    f"{base_url}/v1/items",
                    params={"full": "true", "limit": self.config.page_size, "offset": offset},
                )
                page = parse_envelope(MahcksPage, payload, source="mahcks")
                page_items = page.items or []
                items_raw.extend(page_items)
                if not page.next or not page_items:
                    break
                offset += self.config.page_size

        version = f"api-{info.version}" if info.version not in (None, "") else UNKNOWN_VERSION
        log.debug("mahcks returned %d items", len(items_raw))
        return SourceFetchResult(
            source_id=self.source_id,
            fetched_at=isoformat_utc(self.clock()),
            version_or_commit=version,
            items_raw=items_raw,
        )
