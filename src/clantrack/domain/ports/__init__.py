"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import SnapshotFetcher
from .notification import RosterNotifier
from .persistence import ClanMemberRepository, Repository
from .unit_of_work import (
    RepositoryCollection,
    RosterRepositories,
    RosterUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "ClanMemberRepository",
    "Repository",
    "RepositoryCollection",
    "RosterNotifier",
    "RosterRepositories",
    "RosterUnitOfWork",
    "SnapshotFetcher",
    "UnitOfWork",
]
