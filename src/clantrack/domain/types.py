"""Value objects exchanged between the fetcher, the engine and the notifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date, datetime


@dataclass(frozen=True, slots=True)
class Observation:
    """One ``(username, rating)`` pair read from the squadron page."""

    username: str
    rating: int
    observed_at: datetime


@dataclass(frozen=True, slots=True)
class RatingChange:
    username: str
    old_rating: int
    new_rating: int
    date: date

    @property
    def change(self) -> int:
        return self.new_rating - self.old_rating

    @classmethod
    def initial(cls, observation: Observation) -> RatingChange:
        """Present a first-time observation as a change from zero."""

        return cls(
            username=observation.username,
            old_rating=0,
            new_rating=observation.rating,
            date=observation.observed_at.date(),
        )


def sort_by_magnitude(changes: Iterable[RatingChange]) -> tuple[RatingChange, ...]:
    """Largest absolute movement first; ties keep their incoming order."""

    return tuple(sorted(changes, key=lambda change: abs(change.change), reverse=True))


@dataclass(frozen=True, slots=True)
class CycleResult:
    """What a reconciliation changed in the roster.

    ``joined`` keeps snapshot order, ``departed`` is sorted by name. Both hold
    unique names and never overlap.
    """

    changes: tuple[RatingChange, ...] = field(default_factory=tuple)
    joined: tuple[str, ...] = field(default_factory=tuple)
    departed: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not (self.changes or self.joined or self.departed)

    @property
    def increases(self) -> tuple[RatingChange, ...]:
        return tuple(change for change in self.changes if change.change > 0)

    @property
    def decreases(self) -> tuple[RatingChange, ...]:
        return tuple(change for change in self.changes if change.change < 0)
