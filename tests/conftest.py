from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from arcdiff.adapters.sqlalchemy.unit_of_work import startup

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from arcdiff.adapters.sqlalchemy.unit_of_work import SnapshotDatabase

_CONFIG_ENV_VARS = (
    "ENABLED_SOURCES",
    "FUZZY_MATCH_THRESHOLD",
    "CACHE_TTL_SECONDS",
    "METAFORGE_SYNC_INTERVAL_SECONDS",
    "DATABASE_URI",
    "DATABASE_ECHO",
    "HTTP_CACHE_ENABLED",
    "REQUEST_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ARCDIFF_DATA_DIR", str(tmp_path / "data"))


@pytest.fixture
def snapshot_database(tmp_path: Path) -> Iterator[SnapshotDatabase]:
    database = startup(database_uri=f"sqlite+pysqlite:///{tmp_path / 'metaforge.db'}")
    try:
        yield database
    finally:
        database.dispose()


@pytest.fixture
def synced_at() -> datetime:
    return datetime(2025, 1, 1, tzinfo=UTC)
