"""Squadron roster entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from clantrack.domain.model.base import Entity

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class RatingRecord(Entity):
    """One observed personal clan rating. Never updated once written."""

    member_id: UUID
    rating: int
    recorded_at: datetime


@dataclass(eq=False, kw_only=True)
class ClanMember(Entity):
    """A squadron member tracked across cycles.

    The rating history is owned by the member: records are appended through
    ``record_rating`` and disappear only together with the member.
    """

    username: str
    first_seen: datetime
    last_seen: datetime
    is_active: bool = True

    _ratings: list[RatingRecord] = field(default_factory=list["RatingRecord"], repr=False)

    @classmethod
    def first_observed(cls, username: str, *, rating: int, at: datetime) -> ClanMember:
        member = cls(username=username, first_seen=at, last_seen=at)
        member.record_rating(rating, at=at)
        return member

    @property
    def ratings(self) -> tuple[RatingRecord, ...]:
        return tuple(sorted(self._ratings, key=lambda record: record.recorded_at))

    @property
    def latest_rating(self) -> RatingRecord | None:
        if not self._ratings:
            return None
        return max(self._ratings, key=lambda record: record.recorded_at)

    def record_rating(self, rating: int, *, at: datetime) -> RatingRecord:
        record = RatingRecord(member_id=self.id, rating=rating, recorded_at=at)
        self._ratings.append(record)
        return record

    def mark_seen(self, at: datetime) -> bool:
        """Refresh ``last_seen``; return ``True`` when the member was inactive."""

        reactivated = not self.is_active
        self.is_active = True
        self.last_seen = at
        return reactivated

    def deactivate(self) -> None:
        self.is_active = False
