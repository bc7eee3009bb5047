"""Diff a squadron snapshot against the stored roster.

``reconcile_roster`` holds the algorithm and works on any repository;
``ReconciliationEngine`` wraps it in a single unit of work so either the whole
snapshot is applied or, on failure, nothing is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from clantrack.domain.model import ClanMember
from clantrack.domain.reconciliation.policy import ArchivePolicy, DeleteDepartedMembers
from clantrack.domain.types import CycleResult, Observation, RatingChange, sort_by_magnitude

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from clantrack.domain.ports.persistence import ClanMemberRepository
    from clantrack.domain.ports.unit_of_work import RosterUnitOfWork

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def unique_observations(observations: Sequence[Observation]) -> list[Observation]:
    """Drop repeated usernames, keeping the first occurrence."""

    seen: set[str] = set()
    unique: list[Observation] = []
    for observation in observations:
        if observation.username in seen:
            log.warning("Ignoring duplicate snapshot entry for %s", observation.username)
            continue
        seen.add(observation.username)
        unique.append(observation)
    return unique


def reconcile_roster(
    observations: Sequence[Observation],
    *,
    repository: ClanMemberRepository,
    archive_policy: ArchivePolicy,
    recorded_at: datetime,
) -> CycleResult:
    """Apply ``observations`` to ``repository`` and describe what changed.

    Callers must not pass an empty snapshot: it would read as "everyone left".
    """

    stored = {member.username: member for member in repository.list_all()}
    changes: list[RatingChange] = []
    joined: list[str] = []
    observed: set[str] = set()

    for observation in unique_observations(observations):
        username = observation.username
        observed.add(username)
        member = stored.get(username)

        if member is None:
            member = ClanMember.first_observed(
                username, rating=observation.rating, at=recorded_at
            )
            repository.add(member)
            joined.append(username)
            log.info("New member %s with rating %s", username, observation.rating)
            continue

        if member.mark_seen(recorded_at):
            joined.append(username)
            log.info("Member %s is back", username)

        latest = member.latest_rating
        if latest is not None and latest.rating == observation.rating:
            log.debug("No rating change for %s: %s", username, observation.rating)
            continue

        member.record_rating(observation.rating, at=recorded_at)
        if latest is None:
            continue
        change = RatingChange(
            username=username,
            old_rating=latest.rating,
            new_rating=observation.rating,
            date=recorded_at.date(),
        )
        changes.append(change)
        log.debug(
            "Rating change for %s: %s -> %s (%+d)",
            username,
            change.old_rating,
            change.new_rating,
            change.change,
        )

    departed: list[str] = []
    for username in sorted(stored.keys() - observed):
        member = stored[username]
        if not member.is_active:
            continue
        archive_policy.archive(member, repository, at=recorded_at)
        departed.append(username)

    return CycleResult(
        changes=sort_by_magnitude(changes),
        joined=tuple(joined),
        departed=tuple(departed),
    )


@dataclass(slots=True)
class ReconciliationEngine:
    """Reconciles snapshots inside one unit of work per call."""

    unit_of_work_factory: Callable[[], RosterUnitOfWork]
    archive_policy: ArchivePolicy = field(default_factory=DeleteDepartedMembers)
    clock: Callable[[], datetime] = _utcnow

    def reconcile(self, observations: Sequence[Observation]) -> CycleResult:
        if not observations:
            log.warning("Empty snapshot passed to reconciliation; leaving roster untouched")
            return CycleResult()

        recorded_at = self.clock()
        log.info("Reconciling %s observation(s) recorded at %s", len(observations), recorded_at)
        with self.unit_of_work_factory() as uow:
            result = reconcile_roster(
                observations,
                repository=uow.repositories.members,
                archive_policy=self.archive_policy,
                recorded_at=recorded_at,
            )
            uow.commit()

        log.info(
            "Reconciled roster: %s rating change(s), %s joined, %s departed",
            len(result.changes),
            len(result.joined),
            len(result.departed),
        )
        return result

    def has_history(self) -> bool:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.members.has_any()
