"""Catalog model shared by the reconciliation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

# Provider ids are plain strings; ``SourceId`` enumerates the providers we ship fetchers for.
type ProviderId = str


class SourceId(StrEnum):
    """Third-party providers with a hand-written field mapping."""

    ARDB = "ardb"
    METAFORGE = "metaforge"
    RAIDTHEORY = "raidtheory"
    MAHCKS = "mahcks"


class MatchMethod(StrEnum):
    """How a provider record was attached to its canonical item."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    NONE = "none"


@dataclass(slots=True, frozen=True)
class RecipePart:
    """One ingredient or output of a recipe."""

    amount: float = 1.0
    item_id: str | None = None
    name: str | None = None

    @property
    def sort_key(self) -> str:
        return (self.item_id or self.name or "").lower()


@dataclass(slots=True, frozen=True)
class SourceItem:
    """One provider's normalized view of one item.

    ``raw`` keeps the original payload for display and audit only; nothing in
    the resolver or the diff engine looks inside it.
    """

    source_id: ProviderId
    source_item_id: str | None = None
    name: str | None = None
    type: str | None = None
    rarity: str | None = None
    value: float | None = None
    weight: float | None = None
    inputs: tuple[RecipePart, ...] | None = None
    outputs: tuple[RecipePart, ...] | None = None
    raw: object = field(default=None, compare=False)


@dataclass(slots=True, frozen=True)
class MatchDetail:
    method: MatchMethod
    confidence: float


@dataclass(slots=True, frozen=True)
class FieldDiffers:
    name: bool = False
    type: bool = False
    rarity: bool = False
    value: bool = False
    weight: bool = False


@dataclass(slots=True, frozen=True)
class DiffReport:
    """Field-level and recipe-level disagreement for one canonical item."""

    missing_in: tuple[ProviderId, ...] = ()
    field_differs: FieldDiffers = field(default_factory=FieldDiffers)
    recipe_differs: bool = False
    severity: int = 0
    explanation: tuple[str, ...] = ()


@dataclass(slots=True)
class CanonicalItem:
    """A resolved entity holding at most one record per provider."""

    canonical_id: str
    name_key: str
    display_name: str
    by_source: dict[ProviderId, SourceItem] = field(default_factory=dict[ProviderId, SourceItem])
    match_details: dict[ProviderId, MatchDetail] = field(
        default_factory=dict[ProviderId, MatchDetail]
    )
    diff_report: DiffReport = field(default_factory=DiffReport)


@dataclass(slots=True, frozen=True)
class SourceSummary:
    """Per-provider metadata for one pipeline run."""

    source_id: ProviderId
    fetched_at: str
    version_or_commit: str
    item_count: int
    error: str | None = None


@dataclass(slots=True, frozen=True)
class DiffDataResponse:
    generated_at: str
    enabled_sources: tuple[ProviderId, ...]
    source_summaries: tuple[SourceSummary, ...]
    canonical_items: tuple[CanonicalItem, ...]


def isoformat_utc(value: datetime) -> str:
    """Render ``value`` as an ISO-8601 UTC timestamp with millisecond precision."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, assuming UTC for naive values."""

    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)
