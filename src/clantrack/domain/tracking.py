"""Application service running one squadron tracking cycle.

A cycle is strictly sequential: fetch the snapshot, note whether any history
exists, reconcile, publish at most one message, then grant/revoke the member
role one name at a time. Failures before and during publishing end the cycle;
role failures are only counted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from time import perf_counter
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from clantrack.domain.reconciliation import unique_observations
from clantrack.domain.types import CycleResult

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from clantrack.domain.ports.fetching import SnapshotFetcher
    from clantrack.domain.ports.notification import RosterNotifier
    from clantrack.domain.reconciliation import ReconciliationEngine
    from clantrack.domain.types import Observation

log = getLogger(__name__)


class NotificationKind(StrEnum):
    RATING_CHANGES = "rating_changes"
    INITIAL_SNAPSHOT = "initial_snapshot"
    NONE = "none"
    SKIPPED = "skipped"


class MarkerAction(StrEnum):
    GRANT = "grant"
    REVOKE = "revoke"


@dataclass(frozen=True, slots=True)
class MarkerOutcome:
    username: str
    action: MarkerAction
    succeeded: bool
    error: str | None = None


@dataclass(frozen=True, slots=True)
class CycleSettings:
    """Values a cycle needs from configuration."""

    source: str
    marker_id: int


@dataclass(frozen=True, slots=True)
class CycleSummary:
    """Audit counters of one cycle."""

    execution_id: UUID
    observed: int
    result: CycleResult = field(default_factory=CycleResult)
    notification: NotificationKind = NotificationKind.SKIPPED
    marker_outcomes: tuple[MarkerOutcome, ...] = ()

    @property
    def changed(self) -> int:
        return len(self.result.changes)

    @property
    def joined(self) -> int:
        return len(self.result.joined)

    @property
    def departed(self) -> int:
        return len(self.result.departed)

    def _count(self, action: MarkerAction, *, succeeded: bool) -> int:
        return sum(
            1
            for outcome in self.marker_outcomes
            if outcome.action is action and outcome.succeeded is succeeded
        )

    @property
    def grants_succeeded(self) -> int:
        return self._count(MarkerAction.GRANT, succeeded=True)

    @property
    def grants_failed(self) -> int:
        return self._count(MarkerAction.GRANT, succeeded=False)

    @property
    def revokes_succeeded(self) -> int:
        return self._count(MarkerAction.REVOKE, succeeded=True)

    @property
    def revokes_failed(self) -> int:
        return self._count(MarkerAction.REVOKE, succeeded=False)


def _log_change_statistics(result: CycleResult) -> None:
    increases = result.increases
    decreases = result.decreases
    log.info(
        "Rating change statistics: %s increase(s), %s decrease(s)",
        len(increases),
        len(decreases),
    )
    if increases:
        top = max(increases, key=lambda change: change.change)
        log.info("Largest rating increase: %s (+%s)", top.username, top.change)
    if decreases:
        bottom = min(decreases, key=lambda change: change.change)
        log.info("Largest rating decrease: %s (%s)", bottom.username, bottom.change)


@dataclass(slots=True)
class TrackingCycle:
    fetcher: SnapshotFetcher
    engine: ReconciliationEngine
    notifier: RosterNotifier
    settings: CycleSettings
    id_factory: Callable[[], UUID] = uuid4

    def run(self) -> CycleSummary:
        execution_id = self.id_factory()
        started = perf_counter()
        log.info("Starting tracking cycle %s for %s", execution_id, self.settings.source)

        fetched = self.fetcher(self.settings.source)
        observations = unique_observations(fetched)
        log.info("Fetched %s observation(s), %s unique", len(fetched), len(observations))
        if not observations:
            log.warning(
                "No squadron members found; the page may be unavailable or its layout "
                "changed. Skipping reconciliation and notifications."
            )
            return CycleSummary(execution_id=execution_id, observed=0)

        has_history = self.engine.has_history()
        result = self.engine.reconcile(observations)
        if result.changes:
            _log_change_statistics(result)

        notification = self._publish(result, observations, has_history=has_history)

        outcomes = [
            *self._apply_markers(result.joined, MarkerAction.GRANT),
            *self._apply_markers(result.departed, MarkerAction.REVOKE),
        ]

        summary = CycleSummary(
            execution_id=execution_id,
            observed=len(observations),
            result=result,
            notification=notification,
            marker_outcomes=tuple(outcomes),
        )
        log.info(
            "Tracking cycle %s finished in %.0fms: observed=%s, changed=%s, joined=%s, "
            "departed=%s, grants ok/failed=%s/%s, revokes ok/failed=%s/%s, notification=%s",
            execution_id,
            (perf_counter() - started) * 1000,
            summary.observed,
            summary.changed,
            summary.joined,
            summary.departed,
            summary.grants_succeeded,
            summary.grants_failed,
            summary.revokes_succeeded,
            summary.revokes_failed,
            summary.notification,
        )
        return summary

    def _publish(
        self,
        result: CycleResult,
        observations: Sequence[Observation],
        *,
        has_history: bool,
    ) -> NotificationKind:
        if result.changes:
            log.info("Publishing %s rating change(s)", len(result.changes))
            self.notifier.publish_rating_changes(result.changes)
            return NotificationKind.RATING_CHANGES
        if not has_history:
            log.info("First run: publishing all %s member(s) as baseline", len(observations))
            self.notifier.publish_initial_snapshot(observations)
            return NotificationKind.INITIAL_SNAPSHOT
        log.info("No rating changes since last run; nothing to publish")
        return NotificationKind.NONE

    def _apply_markers(
        self,
        usernames: Sequence[str],
        action: MarkerAction,
    ) -> list[MarkerOutcome]:
        if usernames:
            log.info("Members to %s role: %s", action, ", ".join(usernames))
        return [self._apply_marker(username, action) for username in usernames]

    def _apply_marker(self, username: str, action: MarkerAction) -> MarkerOutcome:
        operation = (
            self.notifier.grant_marker
            if action is MarkerAction.GRANT
            else self.notifier.revoke_marker
        )
        log.warning("AUDIT: attempting to %s role for %s", action, username)
        try:
            operation(username, self.settings.marker_id)
        except Exception as exc:
            log.exception("AUDIT: failed to %s role for %s", action, username)
            return MarkerOutcome(username=username, action=action, succeeded=False, error=str(exc))
        log.warning("AUDIT: %s role for %s completed", action, username)
        return MarkerOutcome(username=username, action=action, succeeded=True)
