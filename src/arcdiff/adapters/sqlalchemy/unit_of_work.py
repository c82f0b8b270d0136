"""Engine startup and the transactional unit of work of the snapshot store."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from arcdiff.config.storage import DatabaseConfig, get_database_config

from .mappings import install_sqlite_pragmas
from .migrations import upgrade_head
from .repositories import SqlAlchemySnapshotRepository

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the snapshot store is used before ``startup()`` prepared it."""


def create_snapshot_engine(config: DatabaseConfig | None = None) -> Engine:
    resolved = config or get_database_config()
    return create_engine(resolved.uri, echo=resolved.echo)


@dataclass(slots=True, frozen=True)
class SnapshotDatabase:
    """Explicit handle on an initialised snapshot store."""

    engine: Engine
    session_factory: sessionmaker[Session]

    def unit_of_work(self) -> SqlAlchemySnapshotUnitOfWork:
        return SqlAlchemySnapshotUnitOfWork(self.session_factory)

    def dispose(self) -> None:
        self.engine.dispose()


def startup(*, engine: Engine | None = None, database_uri: str | None = None) -> SnapshotDatabase:
    """Create the schema if absent and return a handle on the store."""

    resolved_engine = engine or create_snapshot_engine(
        DatabaseConfig(uri=database_uri) if database_uri else None
    )
    if resolved_engine.dialect.name == "sqlite":
        install_sqlite_pragmas(resolved_engine)
    upgrade_head(engine=resolved_engine)
    log.debug("Snapshot store ready at %s", resolved_engine.url.render_as_string())
    return SnapshotDatabase(
        engine=resolved_engine,
        session_factory=sessionmaker(bind=resolved_engine, expire_on_commit=False),
    )


class SqlAlchemySnapshotUnitOfWork:
    """One session per ``with`` block; rolls back when the block raises."""

    def __init__(self, session_factory: sessionmaker[Session] | None) -> None:
        if session_factory is None:
            raise StartupError(
                "Snapshot store not initialised. Call arcdiff.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        self.session_factory = session_factory
        self._session: Session | None = None
        self._snapshots: SqlAlchemySnapshotRepository | None = None

    def __enter__(self) -> SqlAlchemySnapshotUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = self.session_factory()
        self._snapshots = SqlAlchemySnapshotRepository(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self._session = None
        self._snapshots = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @property
    def snapshots(self) -> SqlAlchemySnapshotRepository:
        if self._snapshots is None:
            raise StartupError("Unit of work session not initialised")
        return self._snapshots

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from arcdiff.domain.ports.persistence import SnapshotUnitOfWork

    _uow_check: SnapshotUnitOfWork = SqlAlchemySnapshotUnitOfWork(sessionmaker())
