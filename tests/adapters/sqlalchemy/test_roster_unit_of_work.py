from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from clantrack.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyRosterUnitOfWork,
    StartupError,
    check_database_health,
    configured_engine,
    create_roster_engine,
    is_started,
    shutdown,
    startup,
)
from clantrack.domain.model import ClanMember

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine

T0 = datetime(2024, 3, 1, 6, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemyRosterUnitOfWork()
    assert not check_database_health()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b
    assert is_started()


def test_startup_migrates_a_file_database(tmp_path: Path) -> None:
    startup(database_uri=f"sqlite+pysqlite:///{tmp_path / 'roster.db'}")

    assert check_database_health()
    assert (tmp_path / "roster.db").exists()


def test_committed_members_are_visible_to_the_next_unit(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyRosterUnitOfWork() as uow:
        uow.repositories.members.add(ClanMember.first_observed("Ace", rating=100, at=T0))
        uow.commit()

    with SqlAlchemyRosterUnitOfWork() as uow:
        assert uow.repositories.members.has_any()


def test_exception_rolls_back_pending_changes(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(RuntimeError), SqlAlchemyRosterUnitOfWork() as uow:
        uow.repositories.members.add(ClanMember.first_observed("Ace", rating=100, at=T0))
        raise RuntimeError("boom")

    with SqlAlchemyRosterUnitOfWork() as uow:
        assert not uow.repositories.members.has_any()


def test_sqlite_engines_enforce_foreign_keys() -> None:
    engine = create_roster_engine("sqlite+pysqlite:///:memory:")
    try:
        with engine.connect() as connection:
            assert connection.exec_driver_sql("PRAGMA foreign_keys").scalar_one() == 1
    finally:
        engine.dispose()
