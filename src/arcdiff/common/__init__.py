from __future__ import annotations

from .cache import MemoizedCache
from .concurrency import map_with_concurrency
from .logging import configure_logging

__all__ = [
    "MemoizedCache",
    "configure_logging",
    "map_with_concurrency",
]
