"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, Literal

import httpx

from .env import env_bool, env_float

if TYPE_CHECKING:
    from collections.abc import Mapping

ResponseHook = Callable[[httpx.Response], Awaitable[None] | None]

USER_AGENT: Final[str] = "arcdiff/0.1.0"
DEFAULT_HEADERS: Final[Mapping[str, str]] = {
    "Accept": "application/json",
    "User-Agent": USER_AGENT,
}
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = field(default_factory=lambda: frozenset({"GET", "HEAD"}))
    status_forcelist: frozenset[int] = field(
        default_factory=lambda: frozenset({429, 500, 502, 503, 504})
    )
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )
    backoff_jitter: float = 1.0


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    enabled: bool = True
    backend: Literal["sqlite", "memory"] = "sqlite"
    sqlite_path: str | None = None
    default_ttl_seconds: float | None = None
    refresh_ttl_on_access: bool = False


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    response_hooks: tuple[ResponseHook, ...] = field(default_factory=tuple)
    default_headers: Mapping[str, str] | None = field(default_factory=lambda: DEFAULT_HEADERS)


def request_timeout_seconds() -> float:
    return env_float("REQUEST_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)


def get_http_cache_config(*, sqlite_path: str | None = None) -> CacheConfig | None:
    """On-disk HTTP cache, only when ``HTTP_CACHE_ENABLED`` is set."""

    if not env_bool("HTTP_CACHE_ENABLED", default=False):
        return None
    return CacheConfig(
        backend="sqlite",
        sqlite_path=sqlite_path,
        default_ttl_seconds=env_float("HTTP_CACHE_TTL_SECONDS", 3600.0),
    )
