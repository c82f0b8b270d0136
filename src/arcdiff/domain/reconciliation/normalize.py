"""Provider-specific normalization into ``SourceItem``.

Every provider has one hand-written mapping function keyed by its source id.
Mappings never raise: fields that are missing or malformed are left unset.

Recipe parts are accepted in two raw shapes:
- a list of entries, each carrying an id/name directly or on a nested
  ``item``/``component`` object, and an ``amount``/``quantity``/``count``
- a mapping of item id to numeric amount (non-positive amounts are dropped)
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

from arcdiff.domain.types import RecipePart, SourceId, SourceItem

if TYPE_CHECKING:
    from arcdiff.domain.ports.fetching import SourceFetchResult
    from arcdiff.domain.types import ProviderId

type RawRecord = Mapping[str, object]
type ItemNormalizer = Callable[[RawRecord], SourceItem]


def coerce_text(value: object) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def coerce_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if not isinstance(value, int | float | str):
        return None
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None
    return number if math.isfinite(number) else None


def coerce_name(value: object) -> str | None:
    """Extract a display name from a plain string or a localized-name map."""

    direct = coerce_text(value)
    if direct is not None:
        return direct
    if isinstance(value, Mapping):
        english = coerce_text(value.get("en"))
        if english is not None:
            return english
        for candidate in value.values():
            text = coerce_text(candidate)
            if text is not None:
                return text
    return None


def as_mapping(value: object) -> RawRecord | None:
    return value if isinstance(value, Mapping) else None


def first_present[T](*values: T | None) -> T | None:
    for value in values:
        if value is not None:
            return value
    return None


def normalize_recipe_parts(value: object) -> tuple[RecipePart, ...] | None:
    """Return canonical (deduplicated, key-ordered) recipe parts or ``None``."""

    if isinstance(value, list | tuple):
        parts = [part for entry in value if (part := _part_from_entry(entry)) is not None]
    elif isinstance(value, Mapping):
        parts = [
            part
            for key, amount in value.items()
            if (part := _part_from_pair(key, amount)) is not None
        ]
    else:
        return None
    return canonical_parts(parts)


def canonical_parts(parts: list[RecipePart]) -> tuple[RecipePart, ...] | None:
    unique = list(dict.fromkeys(parts))
    unique.sort(key=lambda part: part.sort_key)
    return tuple(unique) or None


def _part_from_entry(entry: object) -> RecipePart | None:
    record = as_mapping(entry)
    if record is None:
        return None
    nested_item = as_mapping(record.get("item"))
    nested_component = as_mapping(record.get("component"))

    amount = first_present(
        coerce_number(record.get("amount")),
        coerce_number(record.get("quantity")),
        coerce_number(record.get("count")),
    )
    item_id = first_present(
        coerce_text(record.get("itemId")),
        coerce_text(record.get("id")),
        coerce_text(nested_item.get("id")) if nested_item else None,
        coerce_text(nested_component.get("id")) if nested_component else None,
    )
    name = first_present(
        coerce_name(record.get("name")),
        coerce_name(record.get("itemName")),
        coerce_name(nested_item.get("name")) if nested_item else None,
        coerce_name(nested_component.get("name")) if nested_component else None,
    )
    if item_id is None and name is None:
        return None
    return RecipePart(amount=1.0 if amount is None else amount, item_id=item_id, name=name)


def _part_from_pair(key: object, amount: object) -> RecipePart | None:
    item_id = coerce_text(key)
    number = coerce_number(amount)
    if item_id is None or number is None or number <= 0:
        return None
    return RecipePart(amount=number, item_id=item_id)


def _self_output(
    item_id: str | None, name: str | None, amount: float = 1.0
) -> tuple[RecipePart, ...] | None:
    if item_id is None:
        return None
    return (RecipePart(amount=amount, item_id=item_id, name=name),)


def normalize_ardb_item(raw: RawRecord) -> SourceItem:
    item_id = coerce_text(raw.get("id"))
    name = coerce_name(raw.get("name"))
    crafting = as_mapping(raw.get("craftingRequirement"))

    inputs = normalize_recipe_parts(crafting.get("requiredItems")) if crafting else None
    if inputs is None:
        inputs = normalize_recipe_parts(raw.get("recipe"))

    outputs = None
    if crafting is not None:
        output_amount = coerce_number(crafting.get("outputAmount"))
        outputs = _self_output(item_id, name, 1.0 if output_amount is None else output_amount)

    return SourceItem(
        source_id=SourceId.ARDB,
        source_item_id=item_id,
        name=name,
        type=coerce_text(raw.get("type")),
        rarity=coerce_text(raw.get("rarity")),
        value=coerce_number(raw.get("value")),
        weight=coerce_number(raw.get("weight")),
        inputs=inputs,
        outputs=outputs,
        raw=raw,
    )


def normalize_metaforge_item(raw: RawRecord) -> SourceItem:
    item_id = coerce_text(raw.get("id"))
    name = coerce_name(raw.get("name"))
    stat_block = as_mapping(raw.get("stat_block"))

    inputs = first_present(
        normalize_recipe_parts(raw.get("components")),
        normalize_recipe_parts(raw.get("recipe")),
        normalize_recipe_parts(raw.get("ingredients")),
    )
    outputs = first_present(
        normalize_recipe_parts(raw.get("outputs")),
        normalize_recipe_parts(raw.get("output")),
    )
    if outputs is None and inputs is not None:
        outputs = _self_output(item_id, name)

    return SourceItem(
        source_id=SourceId.METAFORGE,
        source_item_id=item_id,
        name=name,
        type=first_present(coerce_text(raw.get("item_type")), coerce_text(raw.get("type"))),
        rarity=coerce_text(raw.get("rarity")),
        value=coerce_number(raw.get("value")),
        weight=first_present(
            coerce_number(stat_block.get("weight")) if stat_block else None,
            coerce_number(raw.get("weight")),
        ),
        inputs=inputs,
        outputs=outputs,
        raw=raw,
    )


def _normalize_repository_item(source_id: SourceId, raw: RawRecord) -> SourceItem:
    item_id = coerce_text(raw.get("id"))
    name = coerce_name(raw.get("name"))
    inputs = normalize_recipe_parts(raw.get("recipe"))

    return SourceItem(
        source_id=source_id,
        source_item_id=item_id,
        name=name,
        type=coerce_text(raw.get("type")),
        rarity=coerce_text(raw.get("rarity")),
        value=coerce_number(raw.get("value")),
        weight=first_present(coerce_number(raw.get("weightKg")), coerce_number(raw.get("weight"))),
        inputs=inputs,
        outputs=_self_output(item_id, name) if inputs is not None else None,
        raw=raw,
    )


def normalize_raidtheory_item(raw: RawRecord) -> SourceItem:
    return _normalize_repository_item(SourceId.RAIDTHEORY, raw)


def normalize_mahcks_item(raw: RawRecord) -> SourceItem:
    return _normalize_repository_item(SourceId.MAHCKS, raw)


NORMALIZERS: Mapping[ProviderId, ItemNormalizer] = {
    SourceId.ARDB: normalize_ardb_item,
    SourceId.METAFORGE: normalize_metaforge_item,
    SourceId.RAIDTHEORY: normalize_raidtheory_item,
    SourceId.MAHCKS: normalize_mahcks_item,
}


def normalize_item(source_id: ProviderId, raw: RawRecord) -> SourceItem:
    """Map one raw provider record to a ``SourceItem``.

    Providers without a registered mapping keep only their raw payload.
    """

    normalizer = NORMALIZERS.get(source_id)
    if normalizer is None:
        return SourceItem(source_id=source_id, raw=raw)
    return normalizer(raw)


def normalize_source_fetch(result: SourceFetchResult) -> list[SourceItem]:
    """Normalize every object-shaped record of a fetch result, in order."""

    return [
        normalize_item(result.source_id, raw)
        for raw in result.items_raw
        if isinstance(raw, Mapping)
    ]
