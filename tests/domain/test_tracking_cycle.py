from __future__ import annotations

import logging
from uuid import UUID

import pytest

from clantrack.domain.errors import FetchError, NotifierAuthorizationError
from clantrack.domain.reconciliation import ReconciliationEngine
from clantrack.domain.tracking import (
    CycleSettings,
    MarkerAction,
    NotificationKind,
    TrackingCycle,
)
from tests.helpers.roster import (
    FakeClock,
    FakeSnapshotFetcher,
    FakeUnitOfWorkFactory,
    RecordingNotifier,
    snapshot,
)

ROLE_ID = 987
EXECUTION_ID = UUID("00000000-0000-0000-0000-000000000001")


def _cycle(
    fetcher: FakeSnapshotFetcher,
    notifier: RecordingNotifier | None = None,
    factory: FakeUnitOfWorkFactory | None = None,
) -> tuple[TrackingCycle, RecordingNotifier, FakeUnitOfWorkFactory]:
    effective_notifier = notifier or RecordingNotifier()
    effective_factory = factory or FakeUnitOfWorkFactory()
    cycle = TrackingCycle(
        fetcher=fetcher,
        engine=ReconciliationEngine(unit_of_work_factory=effective_factory, clock=FakeClock()),
        notifier=effective_notifier,
        settings=CycleSettings(source="https://example.test/squadron", marker_id=ROLE_ID),
        id_factory=lambda: EXECUTION_ID,
    )
    return cycle, effective_notifier, effective_factory


def test_first_cycle_publishes_initial_snapshot_and_grants_everyone() -> None:
    observations = snapshot(("Alpha", 2100), ("Bravo", 900))
    cycle, notifier, _ = _cycle(FakeSnapshotFetcher(observations))

    summary = cycle.run()

    assert summary.execution_id == EXECUTION_ID
    assert summary.notification is NotificationKind.INITIAL_SNAPSHOT
    assert notifier.published_snapshots == [observations]
    assert notifier.published_changes == []
    assert notifier.granted == [("Alpha", ROLE_ID), ("Bravo", ROLE_ID)]
    assert summary.grants_succeeded == 2
    assert summary.observed == 2


def test_changes_are_published_once_and_departures_revoked() -> None:
    fetcher = FakeSnapshotFetcher(
        snapshot(("Alpha", 1000), ("Bravo", 1000)),
        snapshot(("Alpha", 1100), ("Charlie", 500)),
    )
    cycle, notifier, _ = _cycle(fetcher)
    cycle.run()

    summary = cycle.run()

    assert summary.notification is NotificationKind.RATING_CHANGES
    assert len(notifier.published_changes) == 1
    (changes,) = notifier.published_changes
    assert [(change.username, change.change) for change in changes] == [("Alpha", 100)]
    assert notifier.granted[-1] == ("Charlie", ROLE_ID)
    assert notifier.revoked == [("Bravo", ROLE_ID)]
    assert (summary.changed, summary.joined, summary.departed) == (1, 1, 1)


def test_unchanged_roster_publishes_nothing() -> None:
    observations = snapshot(("Alpha", 1000))
    cycle, notifier, _ = _cycle(FakeSnapshotFetcher(observations, observations))
    cycle.run()

    summary = cycle.run()

    assert summary.notification is NotificationKind.NONE
    assert notifier.publish_count == 1
    assert summary.marker_outcomes == ()


def test_joined_only_cycle_with_history_publishes_nothing() -> None:
    fetcher = FakeSnapshotFetcher(
        snapshot(("Alpha", 1000)),
        snapshot(("Alpha", 1000), ("Bravo", 700)),
    )
    cycle, notifier, _ = _cycle(fetcher)
    cycle.run()

    summary = cycle.run()

    assert summary.notification is NotificationKind.NONE
    assert notifier.publish_count == 1
    assert notifier.granted[-1] == ("Bravo", ROLE_ID)


def test_empty_snapshot_skips_everything() -> None:
    cycle, notifier, factory = _cycle(FakeSnapshotFetcher([]))

    summary = cycle.run()

    assert summary.notification is NotificationKind.SKIPPED
    assert summary.observed == 0
    assert notifier.publish_count == 0
    assert factory.created == []


def test_marker_failures_are_isolated_per_member(caplog: pytest.LogCaptureFixture) -> None:
    notifier = RecordingNotifier(failing={"Bravo"})
    cycle, _, _ = _cycle(
        FakeSnapshotFetcher(snapshot(("Alpha", 1), ("Bravo", 2), ("Charlie", 3))),
        notifier=notifier,
    )

    with caplog.at_level(logging.WARNING):
        summary = cycle.run()

    assert [name for name, _ in notifier.granted] == ["Alpha", "Charlie"]
    assert summary.grants_succeeded == 2
    assert summary.grants_failed == 1
    failed = [outcome for outcome in summary.marker_outcomes if not outcome.succeeded]
    assert failed[0].username == "Bravo"
    assert failed[0].action is MarkerAction.GRANT
    assert "cannot grant role to Bravo" in (failed[0].error or "")
    assert any("AUDIT" in record.getMessage() for record in caplog.records)


def test_fetch_failure_propagates_before_touching_the_store() -> None:
    fetcher = FakeSnapshotFetcher(error=FetchError("page gone"))
    cycle, notifier, factory = _cycle(fetcher)

    with pytest.raises(FetchError):
        cycle.run()

    assert factory.created == []
    assert notifier.publish_count == 0


def test_publish_failure_propagates_after_reconciliation_is_committed() -> None:
    notifier = RecordingNotifier(publish_error=NotifierAuthorizationError("bad token"))
    cycle, _, factory = _cycle(FakeSnapshotFetcher(snapshot(("Alpha", 1))), notifier=notifier)

    with pytest.raises(NotifierAuthorizationError):
        cycle.run()

    assert factory.repository.has_any()
    assert notifier.granted == []


def test_fetcher_receives_configured_source() -> None:
    fetcher = FakeSnapshotFetcher(snapshot(("Alpha", 1)))
    cycle, _, _ = _cycle(fetcher)

    cycle.run()

    assert fetcher.sources == ["https://example.test/squadron"]


def test_duplicate_names_in_snapshot_keep_first_entry_everywhere() -> None:
    cycle, notifier, factory = _cycle(
        FakeSnapshotFetcher(snapshot(("Alpha", 100), ("Bravo", 200), ("Alpha", 999)))
    )

    summary = cycle.run()

    assert summary.observed == 2
    assert summary.result.joined == ("Alpha", "Bravo")
    (published,) = notifier.published_snapshots
    assert [(item.username, item.rating) for item in published] == [("Alpha", 100), ("Bravo", 200)]
    assert notifier.granted == [("Alpha", ROLE_ID), ("Bravo", ROLE_ID)]
    assert factory.repository.members["Alpha"].ratings[-1].rating == 100
