"""Snapshot rows and typed item relations extracted from raw provider payloads."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from arcdiff.domain.reconciliation.normalize import (
    as_mapping,
    coerce_number,
    coerce_text,
    first_present,
)
from arcdiff.domain.types import parse_iso_datetime, utc_now

if TYPE_CHECKING:
    from datetime import datetime

    from arcdiff.domain.ports.fetching import SourceFetchResult
    from arcdiff.domain.reconciliation.normalize import RawRecord

log = logging.getLogger(__name__)


class LinkRelation(StrEnum):
    COMPONENTS = "components"
    RECYCLE_COMPONENTS = "recycle_components"
    RECYCLE_FROM = "recycle_from"
    USED_IN = "used_in"
    SOLD_BY = "sold_by"


@dataclass(slots=True, frozen=True)
class ItemLink:
    """One denormalized relation row; ``raw_fragment`` keeps the source entry."""

    item_id: str
    relation: LinkRelation
    related_item_id: str | None
    related_name: str | None
    quantity: float | None
    raw_fragment: object


@dataclass(slots=True, frozen=True)
class SnapshotItemRow:
    id: str
    name: str | None
    item_type: str | None
    rarity: str | None
    value: float | None
    weight: float | None
    icon: str | None
    updated_at: str | None
    cached_at: datetime
    raw: RawRecord


@dataclass(slots=True, frozen=True)
class SnapshotRecord:
    item: SnapshotItemRow
    links: tuple[ItemLink, ...]


# relation -> key of the nested object naming the related item
_NESTED_KEYS: Mapping[LinkRelation, str] = {
    LinkRelation.COMPONENTS: "component",
    LinkRelation.RECYCLE_COMPONENTS: "component",
    LinkRelation.RECYCLE_FROM: "item",
    LinkRelation.USED_IN: "item",
}


def _entries(raw: RawRecord, relation: LinkRelation) -> list[object]:
    value = raw.get(relation.value)
    return list(value) if isinstance(value, list) else []


def _item_relation_link(
    item_id: str, relation: LinkRelation, entry: object
) -> ItemLink:
    record = as_mapping(entry) or {}
    nested = as_mapping(record.get(_NESTED_KEYS[relation])) or {}
    quantity = first_present(
        coerce_number(record.get("quantity")),
        coerce_number(record.get("amount")),
        coerce_number(record.get("count")),
    )
    return ItemLink(
        item_id=item_id,
        relation=relation,
        related_item_id=first_present(coerce_text(nested.get("id")), coerce_text(record.get("id"))),
        related_name=first_present(
            coerce_text(nested.get("name")), coerce_text(record.get("name"))
        ),
        quantity=1.0 if quantity is None else quantity,
        raw_fragment=entry,
    )


def _sold_by_link(item_id: str, entry: object) -> ItemLink:
    record = as_mapping(entry) or {}
    return ItemLink(
        item_id=item_id,
        relation=LinkRelation.SOLD_BY,
        related_item_id=None,
        related_name=first_present(
            coerce_text(record.get("trader_name")), coerce_text(record.get("vendor"))
        ),
        quantity=coerce_number(record.get("price")),
        raw_fragment=entry,
    )


def extract_links(item_id: str, raw: RawRecord) -> tuple[ItemLink, ...]:
    """Extract every typed relation of one raw item, in relation order."""

    links: list[ItemLink] = []
    for relation in _NESTED_KEYS:
        links.extend(
            _item_relation_link(item_id, relation, entry) for entry in _entries(raw, relation)
        )
    links.extend(_sold_by_link(item_id, entry) for entry in _entries(raw, LinkRelation.SOLD_BY))
    return tuple(links)


def build_snapshot_record(raw: RawRecord, *, cached_at: datetime) -> SnapshotRecord | None:
    item_id = coerce_text(raw.get("id"))
    if item_id is None:
        return None
    stat_block = as_mapping(raw.get("stat_block"))
    row = SnapshotItemRow(
        id=item_id,
        name=coerce_text(raw.get("name")),
        item_type=coerce_text(raw.get("item_type")),
        rarity=coerce_text(raw.get("rarity")),
        value=coerce_number(raw.get("value")),
        weight=first_present(
            coerce_number(stat_block.get("weight")) if stat_block else None,
            coerce_number(raw.get("weight")),
        ),
        icon=coerce_text(raw.get("icon")),
        updated_at=coerce_text(raw.get("updated_at")),
        cached_at=cached_at,
        raw=raw,
    )
    return SnapshotRecord(item=row, links=extract_links(item_id, raw))


def build_snapshot_records(result: SourceFetchResult) -> list[SnapshotRecord]:
    """Turn a fetch result into persistable rows.

    Records without an id are skipped; for duplicate ids the first record wins.
    """

    try:
        cached_at = parse_iso_datetime(result.fetched_at)
    except ValueError:
        cached_at = utc_now()

    records: dict[str, SnapshotRecord] = {}
    for raw in result.items_raw:
        if not isinstance(raw, Mapping):
            continue
        record = build_snapshot_record(raw, cached_at=cached_at)
        if record is None:
            continue
        if record.item.id in records:
            log.warning(
                "Skipping duplicate %s item id %r in snapshot", result.source_id, record.item.id
            )
            continue
        records[record.item.id] = record
    return list(records.values())


def object_item_count(result: SourceFetchResult) -> int:
    return sum(1 for raw in result.items_raw if isinstance(raw, Mapping))
