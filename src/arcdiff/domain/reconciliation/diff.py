"""Field-level and recipe-level difference reports for canonical items."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Final

from arcdiff.domain.types import DiffReport, FieldDiffers

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Sequence

    from arcdiff.domain.types import CanonicalItem, ProviderId, RecipePart, SourceItem

MISSING_SIGNATURE: Final[str] = "__missing__"

MISSING_WEIGHT: Final[int] = 18
NAME_WEIGHT: Final[int] = 10
TYPE_WEIGHT: Final[int] = 8
RARITY_WEIGHT: Final[int] = 8
VALUE_WEIGHT: Final[int] = 12
WEIGHT_WEIGHT: Final[int] = 12
RECIPE_WEIGHT: Final[int] = 20
MAX_SEVERITY: Final[int] = 100


def _normalize_text(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped.lower() if stripped else None


def _normalize_number(value: float | None) -> float | None:
    if value is None or value != value:  # NaN
        return None
    scaled = value * 1e4
    if not math.isfinite(scaled):
        return value
    # Half steps round towards positive infinity, not to even.
    return math.floor(scaled + 0.5) / 1e4


def _normalize_signature(value: str | None) -> str | None:
    return value or None


def format_amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def _format_source_value(value: str | float | None) -> str:
    if value is None or value == "":
        return "-"
    if isinstance(value, float | int):
        return format_amount(value)
    return value


def _render_parts(parts: tuple[RecipePart, ...] | None) -> str:
    if not parts:
        return ""
    ordered = sorted(parts, key=lambda part: part.sort_key)
    return "|".join(f"{part.sort_key}:{format_amount(part.amount)}" for part in ordered)


def recipe_signature(item: SourceItem | None) -> str:
    """Order-independent rendering of an item's inputs and outputs."""

    if item is None:
        return MISSING_SIGNATURE
    inputs = _render_parts(item.inputs)
    outputs = _render_parts(item.outputs)
    if not inputs and not outputs:
        return ""
    return f"in[{inputs}]out[{outputs}]"


def values_differ[T, K: Hashable](
    values: Sequence[T | None], normalizer: Callable[[T | None], K | None]
) -> bool:
    """Whether normalized values disagree or are present for only some providers."""

    normalized = [normalizer(value) for value in values]
    present = [value for value in normalized if value is not None]
    if not present:
        return False
    if len(set(present)) > 1:
        return True
    return len(present) != len(normalized)


def build_diff_report(item: CanonicalItem, active_sources: Sequence[ProviderId]) -> DiffReport:
    """Compare the records of ``item`` across ``active_sources``.

    Pure: the same item and provider list always produce an equal report.
    """

    present = [item.by_source[source] for source in active_sources if source in item.by_source]
    missing_in = tuple(source for source in active_sources if source not in item.by_source)

    differs = FieldDiffers(
        name=values_differ([record.name for record in present], _normalize_text),
        type=values_differ([record.type for record in present], _normalize_text),
        rarity=values_differ([record.rarity for record in present], _normalize_text),
        value=values_differ([record.value for record in present], _normalize_number),
        weight=values_differ([record.weight for record in present], _normalize_number),
    )
    recipe_differs = values_differ(
        [recipe_signature(record) for record in present], _normalize_signature
    )

    severity = (
        MISSING_WEIGHT * len(missing_in)
        + (NAME_WEIGHT if differs.name else 0)
        + (TYPE_WEIGHT if differs.type else 0)
        + (RARITY_WEIGHT if differs.rarity else 0)
        + (VALUE_WEIGHT if differs.value else 0)
        + (WEIGHT_WEIGHT if differs.weight else 0)
        + (RECIPE_WEIGHT if recipe_differs else 0)
    )

    return DiffReport(
        missing_in=missing_in,
        field_differs=differs,
        recipe_differs=recipe_differs,
        severity=min(MAX_SEVERITY, severity),
        explanation=tuple(_explain(item, active_sources, missing_in, differs, recipe_differs)),
    )


def _explain(
    item: CanonicalItem,
    active_sources: Sequence[ProviderId],
    missing_in: tuple[ProviderId, ...],
    differs: FieldDiffers,
    recipe_differs: bool,
) -> list[str]:
    lines: list[str] = []
    if missing_in:
        lines.append(f"Missing in: {', '.join(missing_in)}")

    def listing(read: Callable[[SourceItem], str | float | None]) -> str:
        values: list[str] = []
        for source in active_sources:
            record = item.by_source.get(source)
            values.append(f"{source}={_format_source_value(read(record) if record else None)}")
        return ", ".join(values)

    if differs.name:
        lines.append(f"Name differs: {listing(lambda record: record.name)}")
    if differs.type:
        lines.append(f"Type differs: {listing(lambda record: record.type)}")
    if differs.rarity:
        lines.append(f"Rarity differs: {listing(lambda record: record.rarity)}")
    if differs.value:
        lines.append(f"Value differs: {listing(lambda record: record.value)}")
    if differs.weight:
        lines.append(f"Weight differs: {listing(lambda record: record.weight)}")
    if recipe_differs:
        lines.append("Recipe differs (inputs/outputs are not equivalent).")
    return lines
