"""RaidTheory fetcher: one JSON file per item in a GitHub repository."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from arcdiff.common.concurrency import map_with_concurrency
from arcdiff.domain.ports.fetching import SourceFetchResult
from arcdiff.domain.types import ProviderId, SourceId, isoformat_utc, utc_now

from .base import UNKNOWN_VERSION, ProviderFetchError, default_client_factory, parse_envelope
from .schema import GitHubCommit, GitHubContentEntry, GitHubError

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from arcdiff.adapters.http_resilience import ResilientClient
    from arcdiff.config.http_resilience import ResilienceConfig
    from arcdiff.config.sources import RaidTheoryConfig

log = getLogger(__name__)


@dataclass(slots=True)
class RaidTheoryFetcher:
    """Version is the latest commit sha of the configured branch."""

    config: RaidTheoryConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )
    clock: Callable[[], datetime] = field(default=utc_now)
    source_id: ProviderId = field(default=SourceId.RAIDTHEORY.value, init=False)

    @property
    def repo_url(self) -> str:
        return f"{self.config.api_url}/repos/{self.config.owner}/{self.config.repo}"

    async def __call__(self) -> SourceFetchResult:
        async with self.client_factory(self.config.resilience) as client:
            version = await self._latest_commit(client)
            urls = await self._item_urls(client)
            if self.config.max_items > 0:
                urls = urls[: self.config.max_items]

            async def download(url: str, _index: int) -> object:
                return await client.get_json(url)

            items_raw = await map_with_concurrency(urls, self.config.concurrency, download)

        log.debug("raidtheory returned %d item files at %s", len(items_raw), version)
        return SourceFetchResult(
            source_id=self.source_id,
            fetched_at=isoformat_utc(self.clock()),
            version_or_commit=version,
            items_raw=items_raw,
        )

    async def _latest_commit(self, client: ResilientClient) -> str:
        payload = await client.get_json(
            f"{self.repo_url}/commits", params={"sha": self.config.branch, "per_page": 1}
        )
        if not isinstance(payload, list) or not payload:
            return UNKNOWN_VERSION
        commit = parse_envelope(GitHubCommit, payload[0], source="github commit")
        return commit.sha or UNKNOWN_VERSION

    async def _item_urls(self, client: ResilientClient) -> list[str]:
        payload = await client.get_json(
            f"{self.repo_url}/contents/{self.config.items_path}",
            params={"ref": self.config.branch},
        )
        if not isinstance(payload, list):
            error = parse_envelope(GitHubError, payload, source="github contents")
            raise ProviderFetchError(error.message or "Unable to fetch RaidTheory items listing")

        urls: list[str] = []
        for raw_entry in payload:
            entry = parse_envelope(GitHubContentEntry, raw_entry, source="github contents")
            if entry.type == "file" and entry.download_url:
                urls.append(entry.download_url)
        return urls
