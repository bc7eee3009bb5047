"""SQLAlchemy-backed unit of work for the roster store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from clantrack.adapters.sqlalchemy.errors import persistence_errors
from clantrack.adapters.sqlalchemy.mappings import clan_member_table, start_mappers
from clantrack.adapters.sqlalchemy.migrations import upgrade_head
from clantrack.adapters.sqlalchemy.repositories import SqlAlchemyClanMemberRepository
from clantrack.config.storage import get_database_uri
from clantrack.domain.ports.unit_of_work import RepositoryCollection, RosterRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call clantrack.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def _enable_sqlite_foreign_keys(
    dbapi_connection: Any,  # noqa: ANN401
    _connection_record: object,
) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_roster_engine(database_uri: str) -> Engine:
    engine = create_engine(database_uri, future=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, apply migrations and prepare sessions."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_roster_engine(database_uri or get_database_uri())
    start_mappers()
    with persistence_errors("apply database migrations"):
        upgrade_head(engine=resolved_engine)

    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


def check_database_health() -> bool:
    """Check that the database answers and the roster table is readable."""

    engine = _STATE.engine
    if engine is None:
        log.error("Database health check requested before startup")
        return False
    try:
        with engine.connect() as connection:
            count = connection.execute(
                select(func.count()).select_from(clan_member_table)
            ).scalar_one()
    except SQLAlchemyError:
        log.exception("Database health check failed")
        return False
    log.info("Database health check passed; %s member record(s) stored", count)
    return True


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
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
        self.session = None
        return False

    def commit(self) -> None:
        with persistence_errors("save roster changes"):
            self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyRosterUnitOfWork(BaseSqlAlchemyUnitOfWork[RosterRepositories]):
    """Unit of work managing SQLAlchemy sessions for the squadron roster."""

    def _build_repositories(self, session: Session) -> RosterRepositories:
        return RosterRepositories(members=SqlAlchemyClanMemberRepository(session))


if TYPE_CHECKING:
    from clantrack.domain.ports.unit_of_work import RosterUnitOfWork

    _uow_check: RosterUnitOfWork = SqlAlchemyRosterUnitOfWork()
