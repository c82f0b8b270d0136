from __future__ import annotations

from datetime import timedelta

import pytest

from arcdiff.config import (
    ConfigurationError,
    MissingConfigurationError,
    PipelineConfig,
    env_bool,
    env_float,
    get_pipeline_config,
    get_sources_config,
    parse_enabled_sources,
    require_env_vars,
)
from arcdiff.config.http_resilience import DEFAULT_HEADERS, get_http_cache_config
from arcdiff.config.pipeline import DEFAULT_ENABLED_SOURCES


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)
    monkeypatch.setenv("BLANK_VAR", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR", "BLANK_VAR"])

    assert exc.value.names == ("BLANK_VAR", "MISSING_VAR")
    assert "BLANK_VAR, MISSING_VAR" in str(exc.value)


def test_unparseable_values_fall_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SOME_FLOAT", "lots")
    monkeypatch.setenv("SOME_BOOL", "maybe")

    assert env_float("SOME_FLOAT", 1.5) == 1.5
    assert env_bool("SOME_BOOL", default=True) is True


def test_pipeline_defaults() -> None:
    config = get_pipeline_config()

    assert config.enabled_sources == ("ardb", "metaforge", "raidtheory")
    assert config.fuzzy_match_threshold == 0.93
    assert config.cache_ttl_seconds == 600
    assert config.metaforge_sync_interval == timedelta(hours=6)


def test_pipeline_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENABLED_SOURCES", "mahcks, ARDB")
    monkeypatch.setenv("FUZZY_MATCH_THRESHOLD", "0.8")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "30")
    monkeypatch.setenv("METAFORGE_SYNC_INTERVAL_SECONDS", "60")

    config = get_pipeline_config()

    assert config.enabled_sources == ("mahcks", "ardb")
    assert config.fuzzy_match_threshold == 0.8
    assert config.cache_ttl_seconds == 30
    assert config.metaforge_sync_interval == timedelta(minutes=1)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, DEFAULT_ENABLED_SOURCES),
        ("", DEFAULT_ENABLED_SOURCES),
        ("ardb,unknown,ardb", ("ardb",)),
        ("unknown", DEFAULT_ENABLED_SOURCES),
        (" metaforge , , raidtheory ", ("metaforge", "raidtheory")),
    ],
)
def test_parse_enabled_sources(raw: str | None, expected: tuple[str, ...]) -> None:
    assert parse_enabled_sources(raw) == expected


@pytest.mark.parametrize("threshold", [-0.1, 1.5])
def test_threshold_outside_unit_interval_is_rejected(threshold: float) -> None:
    with pytest.raises(ConfigurationError):
        PipelineConfig(fuzzy_match_threshold=threshold)


def test_invalid_threshold_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FUZZY_MATCH_THRESHOLD", "2")

    with pytest.raises(ConfigurationError):
        get_pipeline_config()


def test_sources_config_defaults() -> None:
    config = get_sources_config()

    assert config.metaforge.page_size == 100
    assert config.metaforge.include_components is True
    assert config.metaforge.resilience.ratelimit is not None
    assert config.raidtheory.concurrency == 20
    assert config.raidtheory.max_items == 0
    assert config.mahcks.page_size == 45
    assert config.ardb.resilience.cache is None
    assert config.ardb.resilience.default_headers == DEFAULT_HEADERS


def test_sources_config_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAHCKS_BASE_URL", "https://mirror.example.com/")
    monkeypatch.setenv("RAIDTHEORY_MAX_ITEMS", "5")
    monkeypatch.setenv("METAFORGE_PAGE_SIZE", "0")
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "5")

    config = get_sources_config()

    assert config.mahcks.base_url == "https://mirror.example.com"
    assert config.raidtheory.max_items == 5
    assert config.metaforge.page_size == 1
    assert config.ardb.resilience.timeout_seconds == 5.0


def test_http_cache_is_opt_in(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_http_cache_config(sqlite_path="/tmp/cache.db") is None

    monkeypatch.setenv("HTTP_CACHE_ENABLED", "yes")
    monkeypatch.setenv("HTTP_CACHE_TTL_SECONDS", "120")
    cache = get_http_cache_config(sqlite_path="/tmp/cache.db")

    assert cache is not None
    assert cache.sqlite_path == "/tmp/cache.db"
    assert cache.default_ttl_seconds == 120.0
