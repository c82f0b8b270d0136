"""Where the snapshot database and the HTTP cache live on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_bool

APP_DIR_NAME: Final[str] = "arcdiff"
SNAPSHOT_DB_FILENAME: Final[str] = "metaforge.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"
SQLITE_URI_PREFIX: Final[str] = "sqlite+pysqlite:///"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    snapshot_filename: str = SNAPSHOT_DB_FILENAME
    http_cache_filename: str = HTTP_CACHE_FILENAME

    def ensure_data_dir(self) -> Path:
        data_dir = self.data_dir.expanduser().resolve()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def snapshot_path(self) -> Path:
        return self.ensure_data_dir() / self.snapshot_filename

    def http_cache_path(self) -> Path:
        return self.ensure_data_dir() / self.http_cache_filename


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.uri.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        return self.is_sqlite and (":memory:" in self.uri or self.uri.rstrip("/") == "sqlite:")


def default_data_dir() -> Path:
    """Per-user data directory: LOCALAPPDATA on Windows, XDG_DATA_HOME elsewhere."""

    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Local"
    else:
        base = os.getenv("XDG_DATA_HOME")
        root = Path(base) if base else Path.home() / ".local" / "share"
    return root / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    override = os.getenv("ARCDIFF_DATA_DIR")
    return StorageConfig(data_dir=Path(override) if override else default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    echo = env_bool("DATABASE_ECHO", default=False)
    override = os.getenv("DATABASE_URI")
    if override:
        return DatabaseConfig(uri=override, echo=echo)
    path = (storage or get_storage_config()).snapshot_path()
    return DatabaseConfig(uri=f"{SQLITE_URI_PREFIX}{path}", echo=echo)
