"""Normalization, entity resolution and diffing of provider catalogs."""

from __future__ import annotations

from .diff import build_diff_report, recipe_signature
from .normalize import normalize_item, normalize_source_fetch
from .recipes import Recipe, expand_requirements, recipes_from_items
from .resolve import resolve_canonical_items
from .similarity import dice_similarity, normalize_name

__all__ = [
    "Recipe",
    "build_diff_report",
    "dice_similarity",
    "expand_requirements",
    "normalize_item",
    "normalize_name",
    "normalize_source_fetch",
    "recipe_signature",
    "recipes_from_items",
    "resolve_canonical_items",
]
