"""In-memory fakes for the roster ports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from clantrack.domain.ports.unit_of_work import RosterRepositories
from clantrack.domain.types import Observation

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from types import TracebackType

    from clantrack.domain.model import ClanMember
    from clantrack.domain.types import RatingChange

T0 = datetime(2024, 3, 1, 6, 0, tzinfo=UTC)


def snapshot(*pairs: tuple[str, int], at: datetime = T0) -> list[Observation]:
    return [Observation(username=name, rating=rating, observed_at=at) for name, rating in pairs]


class FakeClock:
    """Clock that advances one day per call."""

    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = value + timedelta(days=1)
        return value


class InMemoryClanMemberRepository:
    def __init__(self) -> None:
        self.members: dict[str, ClanMember] = {}
        self.fail_on_list = False

    def add(self, entity: ClanMember) -> None:
        self.members[entity.username] = entity

    def remove(self, entity: ClanMember) -> None:
        del self.members[entity.username]

    def list_all(self) -> Sequence[ClanMember]:
        if self.fail_on_list:
            raise RuntimeError("store unavailable")
        return sorted(self.members.values(), key=lambda member: member.username)

    def list_active(self) -> Sequence[ClanMember]:
        return [member for member in self.list_all() if member.is_active]

    def get_by_username(self, username: str) -> ClanMember | None:
        return self.members.get(username)

    def has_any(self) -> bool:
        return bool(self.members)

    def record_count(self) -> int:
        return sum(len(member.ratings) for member in self.members.values())


class FakeRosterUnitOfWork:
    """Unit of work over a shared in-memory repository.

    Changes are applied eagerly; ``committed`` and ``rolled_back`` record what the
    caller asked for.
    """

    def __init__(self, repository: InMemoryClanMemberRepository) -> None:
        self._repositories = RosterRepositories(members=repository)
        self.committed = False
        self.rolled_back = False

    @property
    def repositories(self) -> RosterRepositories:
        return self._repositories

    def __enter__(self) -> FakeRosterUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True


@dataclass
class FakeUnitOfWorkFactory:
    repository: InMemoryClanMemberRepository = field(default_factory=InMemoryClanMemberRepository)
    created: list[FakeRosterUnitOfWork] = field(default_factory=list[FakeRosterUnitOfWork])

    def __call__(self) -> FakeRosterUnitOfWork:
        uow = FakeRosterUnitOfWork(self.repository)
        self.created.append(uow)
        return uow


class FakeSnapshotFetcher:
    def __init__(self, *snapshots: Iterable[Observation], error: Exception | None = None) -> None:
        self._snapshots = [list(batch) for batch in snapshots]
        self._error = error
        self.sources: list[str] = []

    def __call__(self, source: str) -> list[Observation]:
        self.sources.append(source)
        if self._error is not None:
            raise self._error
        if not self._snapshots:
            return []
        return self._snapshots.pop(0)


@dataclass
class RecordingNotifier:
    """Notifier fake recording every call; names in ``failing`` raise on role changes."""

    failing: set[str] = field(default_factory=set[str])
    publish_error: Exception | None = None
    published_changes: list[list[RatingChange]] = field(default_factory=list[list["RatingChange"]])
    published_snapshots: list[list[Observation]] = field(default_factory=list[list[Observation]])
    granted: list[tuple[str, int]] = field(default_factory=list[tuple[str, int]])
    revoked: list[tuple[str, int]] = field(default_factory=list[tuple[str, int]])

    def publish_rating_changes(self, changes: Sequence[RatingChange]) -> None:
        if self.publish_error is not None:
            raise self.publish_error
        self.published_changes.append(list(changes))

    def publish_initial_snapshot(self, observations: Sequence[Observation]) -> None:
        if self.publish_error is not None:
            raise self.publish_error
        self.published_snapshots.append(list(observations))

    def grant_marker(self, username: str, marker_id: int) -> None:
        if username in self.failing:
            raise RuntimeError(f"cannot grant role to {username}")
        self.granted.append((username, marker_id))

    def revoke_marker(self, username: str, marker_id: int) -> None:
        if username in self.failing:
            raise RuntimeError(f"cannot revoke role from {username}")
        self.revoked.append((username, marker_id))

    @property
    def publish_count(self) -> int:
        return len(self.published_changes) + len(self.published_snapshots)
