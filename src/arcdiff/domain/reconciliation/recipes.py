"""Flatten nested crafting recipes into base-material totals."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from arcdiff.domain.types import RecipePart, SourceItem


@dataclass(slots=True, frozen=True)
class Recipe:
    item_id: str
    inputs: tuple[RecipePart, ...]
    output_amount: float = 1.0


def recipe_key(value: str) -> str:
    return value.strip().lower()


def recipes_from_items(items: Iterable[SourceItem]) -> dict[str, Recipe]:
    """Index the craftable items of one provider by lowercased item id.

    The first recipe seen for an id wins.
    """

    recipes: dict[str, Recipe] = {}
    for item in items:
        if not item.source_item_id or not item.inputs:
            continue
        key = recipe_key(item.source_item_id)
        if key in recipes:
            continue
        output_amount = next(
            (
                part.amount
                for part in item.outputs or ()
                if part.sort_key == key and part.amount > 0
            ),
            1.0,
        )
        recipes[key] = Recipe(item_id=key, inputs=item.inputs, output_amount=output_amount)
    return recipes


def expand_requirements(
    item_id: str, recipes: Mapping[str, Recipe], amount: float = 1.0
) -> dict[str, float]:
    """Return the base materials needed to craft ``amount`` of ``item_id``.

    Items without a recipe are leaves. An item revisited on its own expansion
    branch is also treated as a leaf, so cyclic recipe data terminates.
    """

    totals: dict[str, float] = {}
    _expand(recipe_key(item_id), amount, recipes, frozenset(), totals)
    return totals


def _expand(
    key: str,
    amount: float,
    recipes: Mapping[str, Recipe],
    visited: frozenset[str],
    totals: dict[str, float],
) -> None:
    recipe = recipes.get(key)
    if recipe is None or key in visited:
        totals[key] = totals.get(key, 0.0) + amount
        return

    branch = visited | {key}
    batches = amount / recipe.output_amount
    for part in recipe.inputs:
        if not part.sort_key:
            continue
        _expand(part.sort_key, part.amount * batches, recipes, branch, totals)
