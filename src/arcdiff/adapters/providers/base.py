"""Helpers shared by the provider fetchers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError

from arcdiff.adapters.http_resilience import ResilientClient

if TYPE_CHECKING:
    from collections.abc import Iterable

    from arcdiff.config.http_resilience import ResilienceConfig

UNKNOWN_VERSION = "unknown"


class ProviderFetchError(RuntimeError):
    """Raised when a provider answers with a payload we cannot use."""


def default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def parse_envelope[M: BaseModel](model: type[M], payload: object, *, source: str) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ProviderFetchError(
            f"Unexpected {source} payload ({exc.error_count()} validation errors)"
        ) from exc


def latest_timestamp(items: Iterable[object], key: str) -> str:
    """Greatest non-empty string under ``key`` among object items, else ``unknown``."""

    stamps = [
        value
        for item in items
        if isinstance(item, Mapping) and isinstance(value := item.get(key), str) and value
    ]
    return max(stamps) if stamps else UNKNOWN_VERSION
