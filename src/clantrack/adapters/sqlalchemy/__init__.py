"""SQLAlchemy adapter package for clantrack."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import SqlAlchemyClanMemberRepository
from .unit_of_work import (
    SqlAlchemyRosterUnitOfWork,
    StartupError,
    check_database_health,
    create_roster_engine,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyClanMemberRepository",
    "SqlAlchemyRosterUnitOfWork",
    "StartupError",
    "check_database_health",
    "create_roster_engine",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
