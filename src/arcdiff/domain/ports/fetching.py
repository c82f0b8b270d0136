"""Ports for fetching raw provider catalogs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from arcdiff.domain.types import ProviderId


@dataclass(slots=True, frozen=True)
class SourceFetchResult:
    """Raw item list returned by one provider fetch."""

    source_id: ProviderId
    fetched_at: str
    version_or_commit: str
    items_raw: Sequence[object]


@runtime_checkable
class SourceFetcher(Protocol):
    """Async callable returning one provider's full raw item list.

    Implementations raise on any unrecoverable error instead of returning a
    partial result.
    """

    source_id: ProviderId

    async def __call__(self) -> SourceFetchResult: ...


__all__ = ["SourceFetchResult", "SourceFetcher"]
