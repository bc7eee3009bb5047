"""Ports for fetching squadron snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from clantrack.domain.types import Observation


@runtime_checkable
class SnapshotFetcher(Protocol):
    """Callable port returning the current squadron roster.

    Implementations retry transient failures themselves and return an empty list
    when nothing could be read; an empty list is never an error.
    """

    def __call__(self, source: str) -> list[Observation]: ...


__all__ = ["SnapshotFetcher"]
