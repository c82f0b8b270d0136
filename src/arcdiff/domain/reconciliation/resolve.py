"""Entity resolution across providers.

Providers are processed strictly in the given order and items in their given
order. Each item is matched against the canonical items built so far:

1) exact: the first canonical item indexed under the same name key that has
   no record from this provider yet
2) fuzzy: the highest bigram Dice score among canonical items without a
   record from this provider and without an id key; earlier items win ties
   and the best score must reach the threshold
3) otherwise a new canonical item is seeded from the record

Items whose names normalize to nothing get an id key and never take part in
fuzzy matching.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from arcdiff.domain.types import CanonicalItem, MatchDetail, MatchMethod

from .diff import build_diff_report
from .similarity import dice_similarity, id_key, is_id_key, normalize_name

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from arcdiff.domain.types import ProviderId, SourceItem

log = logging.getLogger(__name__)

CONFIDENCE_PRECISION = 3


def name_key_for(item: SourceItem, index: int) -> str:
    if item.name:
        normalized = normalize_name(item.name)
        if normalized:
            return normalized
    if item.source_item_id:
        return id_key(item.source_id, item.source_item_id.lower())
    return id_key(item.source_id, str(index))


def display_name_for(item: SourceItem, index: int) -> str:
    return item.name or item.source_item_id or f"{item.source_id}-item-{index}"


@dataclass(slots=True)
class _Match:
    index: int
    detail: MatchDetail


@dataclass(slots=True)
class _ResolutionState:
    fuzzy_threshold: float
    items: list[CanonicalItem] = field(default_factory=list[CanonicalItem])
    name_index: defaultdict[str, list[int]] = field(
        default_factory=lambda: defaultdict[str, list[int]](list)
    )

    def assign(self, record: SourceItem, *, index: int) -> None:
        name_key = name_key_for(record, index)
        match = self._exact_match(record.source_id, name_key)
        if match is None and not is_id_key(name_key):
            match = self._fuzzy_match(record.source_id, name_key)

        if match is None:
            self._seed(record, name_key=name_key, index=index)
            return

        canonical = self.items[match.index]
        canonical.by_source[record.source_id] = record
        canonical.match_details[record.source_id] = match.detail

    def _exact_match(self, source_id: ProviderId, name_key: str) -> _Match | None:
        for candidate_index in self.name_index.get(name_key, ()):
            if source_id not in self.items[candidate_index].by_source:
                return _Match(candidate_index, MatchDetail(MatchMethod.EXACT, 1.0))
        return None

    def _fuzzy_match(self, source_id: ProviderId, name_key: str) -> _Match | None:
        best_index: int | None = None
        best_score = 0.0
        for candidate_index, candidate in enumerate(self.items):
            if source_id in candidate.by_source or is_id_key(candidate.name_key):
                continue
            score = dice_similarity(name_key, candidate.name_key)
            if score > best_score:
                best_index, best_score = candidate_index, score

        if best_index is None or best_score < self.fuzzy_threshold:
            return None
        confidence = round(best_score, CONFIDENCE_PRECISION)
        return _Match(best_index, MatchDetail(MatchMethod.FUZZY, confidence))

    def _seed(self, record: SourceItem, *, name_key: str, index: int) -> None:
        canonical = CanonicalItem(
            canonical_id=f"canonical-{len(self.items) + 1}",
            name_key=name_key,
            display_name=display_name_for(record, index),
            by_source={record.source_id: record},
            match_details={record.source_id: MatchDetail(MatchMethod.EXACT, 1.0)},
        )
        self.items.append(canonical)
        self.name_index[name_key].append(len(self.items) - 1)


def resolve_canonical_items(
    normalized_by_source: Mapping[ProviderId, Sequence[SourceItem]],
    active_sources: Sequence[ProviderId],
    fuzzy_threshold: float,
) -> list[CanonicalItem]:
    """Resolve provider records into canonical items with diff reports.

    The result is ordered by descending severity, then case-insensitive
    display name.
    """

    state = _ResolutionState(fuzzy_threshold=fuzzy_threshold)
    for source_id in active_sources:
        for index, record in enumerate(normalized_by_source.get(source_id, ())):
            state.assign(record, index=index)

    for canonical in state.items:
        preferred = next(
            (
                record.name
                for source_id in active_sources
                if (record := canonical.by_source.get(source_id)) is not None and record.name
            ),
            None,
        )
        if preferred:
            canonical.display_name = preferred
        canonical.diff_report = build_diff_report(canonical, active_sources)

    log.debug(
        "Resolved %d canonical items from %d providers",
        len(state.items),
        len(active_sources),
    )
    return sorted(
        state.items,
        key=lambda canonical: (-canonical.diff_report.severity, canonical.display_name.casefold()),
    )
