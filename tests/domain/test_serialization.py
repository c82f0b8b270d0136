from __future__ import annotations

from arcdiff.domain.serialization import (
    diff_data_to_payload,
    item_link_to_payload,
    source_summary_to_payload,
)
from arcdiff.domain.snapshot import ItemLink, LinkRelation
from arcdiff.domain.types import (
    DiffDataResponse,
    MatchDetail,
    MatchMethod,
    RecipePart,
    SourceItem,
    SourceSummary,
)
from tests.helpers.items import make_canonical


def _response() -> DiffDataResponse:
    record = SourceItem(
        source_id="ardb",
        source_item_id="battery",
        name="Battery",
        value=250.0,
        inputs=(RecipePart(amount=2.0, item_id="wires"),),
        raw={"id": "battery"},
    )
    first = make_canonical(record, name_key="battery")
    first.match_details["ardb"] = MatchDetail(MatchMethod.FUZZY, 0.95)
    second = make_canonical(SourceItem(source_id="ardb", name="Wires"), name_key="wires")
    return DiffDataResponse(
        generated_at="2025-01-01T00:00:00.000Z",
        enabled_sources=("ardb",),
        source_summaries=(
            SourceSummary("ardb", "2025-01-01T00:00:00.000Z", "v1", 2),
            SourceSummary("metaforge", "2025-01-01T00:00:00.000Z", "unavailable", 0, "down"),
        ),
        canonical_items=(first, second),
    )


def test_diff_data_payload_uses_camel_case_and_omits_unset_fields() -> None:
    payload = diff_data_to_payload(_response())

    assert payload["enabledSources"] == ["ardb"]
    assert payload["sourceSummaries"][0] == {
        "sourceId": "ardb",
        "fetchedAt": "2025-01-01T00:00:00.000Z",
        "versionOrCommit": "v1",
        "itemCount": 2,
    }
    item = payload["canonicalItems"][0]
    assert item["canonicalId"] == "canonical-1"
    assert item["matchDetails"] == {"ardb": {"method": "fuzzy", "confidence": 0.95}}
    assert item["bySource"]["ardb"] == {
        "sourceId": "ardb",
        "sourceItemId": "battery",
        "name": "Battery",
        "value": 250.0,
        "inputs": [{"itemId": "wires", "amount": 2.0}],
        "raw": {"id": "battery"},
    }
    assert item["diffReport"]["severity"] == 0
    assert item["diffReport"]["fieldDiffers"]["name"] is False


def test_diff_data_payload_can_drop_raw_and_limit_items() -> None:
    payload = diff_data_to_payload(_response(), include_raw=False, limit=1)

    assert len(payload["canonicalItems"]) == 1
    assert "raw" not in payload["canonicalItems"][0]["bySource"]["ardb"]


def test_source_summary_payload_keeps_error() -> None:
    summary = SourceSummary("metaforge", "2025-01-01T00:00:00.000Z", "unavailable", 0, "down")

    assert source_summary_to_payload(summary)["error"] == "down"


def test_item_link_payload() -> None:
    link = ItemLink(
        item_id="battery",
        relation=LinkRelation.SOLD_BY,
        related_item_id=None,
        related_name="Celeste",
        quantity=750.0,
        raw_fragment={"trader_name": "Celeste", "price": 750},
    )

    assert item_link_to_payload(link) == {
        "itemId": "battery",
        "relation": "sold_by",
        "relatedName": "Celeste",
        "quantity": 750.0,
        "raw": {"trader_name": "Celeste", "price": 750},
    }
