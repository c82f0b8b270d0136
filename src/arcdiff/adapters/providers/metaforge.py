"""MetaForge paged item catalog fetcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from arcdiff.domain.ports.fetching import SourceFetchResult
from arcdiff.domain.types import ProviderId, SourceId, isoformat_utc, utc_now

from .base import default_client_factory, latest_timestamp, parse_envelope
from .schema import MetaForgePage

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from arcdiff.adapters.http_resilience import ResilientClient
    from arcdiff.config.http_resilience import ResilienceConfig
    from arcdiff.config.sources import MetaForgeConfig

log = getLogger(__name__)


@dataclass(slots=True)
class MetaForgeFetcher:
    config: MetaForgeConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )
    clock: Callable[[], datetime] = field(default=utc_now)
    source_id: ProviderId = field(default=SourceId.METAFORGE.value, init=False)

    def _params(self, page: int) -> dict[str, str | int]:
        params: dict[str, str | int] = {"limit": self.config.page_size, "page": page}
        if self.config.include_components:
            params["includeComponents"] = "true"
        return params

    async def __call__(self) -> SourceFetchResult:
        items_raw: list[object] = []
        page = 1
        total_pages = 1

        async with self.client_factory(self.config.resilience) as client:
            while page <= total_pages:
                payload = await client.get_json(self.config.items_url, params=self._params(page))
                response = parse_envelope(MetaForgePage, payload, source="metaforge")
                items_raw.extend(response.data or [])

                pagination = response.pagination
                total_pages = (
                    pagination.total_pages
                    if pagination is not None and pagination.total_pages is not None
                    else page
                )
                if pagination is not None and pagination.has_next_page is False:
                    break
                page += 1

        log.debug("metaforge returned %d items over %d pages", len(items_raw), page)
        return SourceFetchResult(
            source_id=self.source_id,
            fetched_at=isoformat_utc(self.clock()),
            version_or_commit=latest_timestamp(items_raw, "updated_at"),
            items_raw=items_raw,
        )
