"""SQLAlchemy Core tables of the provider snapshot store."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Dialect,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    event,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.engine.interfaces import DBAPIConnection
    from sqlalchemy.pool import ConnectionPoolEntry

SYNC_STATE_ID: Final[int] = 1


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

items_table = Table(
    "metaforge_items",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=True),
    Column("item_type", String, nullable=True),
    Column("rarity", String, nullable=True),
    Column("value", Float, nullable=True),
    Column("weight", Float, nullable=True),
    Column("icon", String, nullable=True),
    Column("updated_at", String, nullable=True),
    Column("cached_at", UTCDateTime(), nullable=False),
    Column("raw_json", Text, nullable=False),
)

item_links_table = Table(
    "metaforge_item_links",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "item_id",
        String,
        ForeignKey("metaforge_items.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("relation", String, nullable=False),
    Column("related_item_id", String, nullable=True),
    Column("related_name", String, nullable=True),
    Column("quantity", Float, nullable=True),
    Column("payload_json", Text, nullable=False),
    Index("ix_metaforge_item_links_item_id", "item_id"),
    Index("ix_metaforge_item_links_relation", "relation"),
)

sync_state_table = Table(
    "metaforge_sync_state",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("last_synced_at", UTCDateTime(), nullable=False),
    Column("version", String, nullable=False),
    Column("item_count", Integer, nullable=False),
    CheckConstraint(f"id = {SYNC_STATE_ID}", name="singleton"),
)


def install_sqlite_pragmas(engine: Engine) -> None:
    """Enable foreign keys and NORMAL sync on every connection; WAL for file databases."""

    database = engine.url.database
    use_wal = bool(database) and database != ":memory:"

    @event.listens_for(engine, "connect")
    def _set_pragmas(
        dbapi_connection: DBAPIConnection, connection_record: ConnectionPoolEntry
    ) -> None:
        _ = connection_record
        cursor = dbapi_connection.cursor()
        try:
            if use_wal:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()
