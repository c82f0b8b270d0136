"""JSON-ready rendering of pipeline responses.

Field names follow the camelCase wire format consumed by the presentation
layer; optional fields that are unset are omitted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from arcdiff.domain.snapshot.links import ItemLink
    from arcdiff.domain.types import (
        CanonicalItem,
        DiffDataResponse,
        DiffReport,
        RecipePart,
        SourceItem,
        SourceSummary,
    )

type Payload = dict[str, Any]


def _without_none(payload: Payload) -> Payload:
    return {key: value for key, value in payload.items() if value is not None}


def recipe_part_to_payload(part: RecipePart) -> Payload:
    return _without_none({"itemId": part.item_id, "name": part.name, "amount": part.amount})


def _parts(parts: tuple[RecipePart, ...] | None) -> list[Payload] | None:
    if parts is None:
        return None
    return [recipe_part_to_payload(part) for part in parts]


def source_item_to_payload(item: SourceItem, *, include_raw: bool = True) -> Payload:
    payload = _without_none(
        {
            "sourceId": item.source_id,
            "sourceItemId": item.source_item_id,
            "name": item.name,
            "type": item.type,
            "rarity": item.rarity,
            "value": item.value,
            "weight": item.weight,
            "inputs": _parts(item.inputs),
            "outputs": _parts(item.outputs),
        }
    )
    if include_raw:
        payload["raw"] = item.raw
    return payload


def diff_report_to_payload(report: DiffReport) -> Payload:
    differs = report.field_differs
    return {
        "missingIn": list(report.missing_in),
        "fieldDiffers": {
            "name": differs.name,
            "type": differs.type,
            "rarity": differs.rarity,
            "value": differs.value,
            "weight": differs.weight,
        },
        "recipeDiffers": report.recipe_differs,
        "severity": report.severity,
        "explanation": list(report.explanation),
    }


def canonical_item_to_payload(item: CanonicalItem, *, include_raw: bool = True) -> Payload:
    return {
        "canonicalId": item.canonical_id,
        "nameKey": item.name_key,
        "displayName": item.display_name,
        "bySource": {
            source_id: source_item_to_payload(record, include_raw=include_raw)
            for source_id, record in item.by_source.items()
        },
        "matchDetails": {
            source_id: {"method": detail.method.value, "confidence": detail.confidence}
            for source_id, detail in item.match_details.items()
        },
        "diffReport": diff_report_to_payload(item.diff_report),
    }


def source_summary_to_payload(summary: SourceSummary) -> Payload:
    return _without_none(
        {
            "sourceId": summary.source_id,
            "fetchedAt": summary.fetched_at,
            "versionOrCommit": summary.version_or_commit,
            "itemCount": summary.item_count,
            "error": summary.error,
        }
    )


def diff_data_to_payload(
    response: DiffDataResponse, *, include_raw: bool = True, limit: int | None = None
) -> Payload:
    """Render a full response; ``limit`` keeps only the first canonical items."""

    items = response.canonical_items if limit is None else response.canonical_items[:limit]
    return {
        "generatedAt": response.generated_at,
        "enabledSources": list(response.enabled_sources),
        "sourceSummaries": [source_summary_to_payload(s) for s in response.source_summaries],
        "canonicalItems": [canonical_item_to_payload(i, include_raw=include_raw) for i in items],
    }


def item_link_to_payload(link: ItemLink) -> Payload:
    return _without_none(
        {
            "itemId": link.item_id,
            "relation": link.relation.value,
            "relatedItemId": link.related_item_id,
            "relatedName": link.related_name,
            "quantity": link.quantity,
            "raw": link.raw_fragment,
        }
    )
