from __future__ import annotations

from datetime import UTC, datetime

from arcdiff.domain.ports.fetching import SourceFetchResult
from arcdiff.domain.snapshot import LinkRelation, build_snapshot_records, extract_links
from arcdiff.domain.snapshot.links import build_snapshot_record, object_item_count
from tests.helpers.metaforge import battery_payload, metaforge_item

CACHED_AT = datetime(2025, 1, 1, tzinfo=UTC)


def test_extract_links_covers_every_relation() -> None:
    links = extract_links("battery", battery_payload())

    assert [(link.relation, link.related_item_id, link.quantity) for link in links] == [
        (LinkRelation.COMPONENTS, "wires", 2.0),
        (LinkRelation.COMPONENTS, "metal-parts", 1.0),
        (LinkRelation.RECYCLE_COMPONENTS, "wires", 3.0),
        (LinkRelation.RECYCLE_FROM, "old-radio", 1.0),
        (LinkRelation.USED_IN, "power-cell", 1.0),
        (LinkRelation.SOLD_BY, None, 750.0),
    ]
    assert links[0].related_name == "Wires"
    assert links[-1].related_name == "Celeste"
    assert links[-1].raw_fragment == {"trader_name": "Celeste", "price": 750}


def test_extract_links_tolerates_malformed_relations() -> None:
    raw = metaforge_item("wires", "Wires", components="none", sold_by=[{"vendor": "Lance"}])

    links = extract_links("wires", raw)

    assert len(links) == 1
    assert links[0].related_name == "Lance"
    assert links[0].quantity is None


def test_snapshot_record_reads_item_columns() -> None:
    record = build_snapshot_record(battery_payload(), cached_at=CACHED_AT)

    assert record is not None
    assert record.item.id == "battery"
    assert record.item.item_type == "Refined Material"
    assert record.item.weight == 0.5
    assert record.item.icon == "https://cdn.example.com/battery.png"
    assert record.item.cached_at == CACHED_AT
    assert len(record.links) == 6


def test_snapshot_record_requires_an_id() -> None:
    assert build_snapshot_record({"name": "Nameless"}, cached_at=CACHED_AT) is None


def test_snapshot_records_skip_duplicates_and_non_objects() -> None:
    result = SourceFetchResult(
        source_id="metaforge",
        fetched_at="2025-03-01T10:00:00.000Z",
        version_or_commit="v1",
        items_raw=[
            metaforge_item("wires", "Wires"),
            metaforge_item("wires", "Wires (duplicate)"),
            "junk",
            {"name": "no id"},
            metaforge_item("rope", "Rope"),
        ],
    )

    records = build_snapshot_records(result)

    assert [record.item.name for record in records] == ["Wires", "Rope"]
    assert records[0].item.cached_at == datetime(2025, 3, 1, 10, tzinfo=UTC)
    assert object_item_count(result) == 4
