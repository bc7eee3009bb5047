from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

from clantrack.domain.model import ClanMember
from clantrack.domain.types import CycleResult, Observation, RatingChange, sort_by_magnitude
from tests.helpers.roster import FakeClock

T0 = datetime(2024, 3, 1, 6, 0, tzinfo=UTC)


def _change(name: str, old: int, new: int) -> RatingChange:
    return RatingChange(username=name, old_rating=old, new_rating=new, date=date(2024, 3, 1))


def test_first_observed_member_starts_with_one_record() -> None:
    member = ClanMember.first_observed("Ace", rating=900, at=T0)

    assert member.is_active
    assert member.first_seen == member.last_seen == T0
    latest = member.latest_rating
    assert latest is not None
    assert (latest.rating, latest.member_id) == (900, member.id)


def test_latest_rating_follows_recording_time() -> None:
    member = ClanMember.first_observed("Ace", rating=900, at=T0)
    member.record_rating(950, at=T0 + timedelta(days=2))
    member.record_rating(920, at=T0 + timedelta(days=1))

    latest = member.latest_rating
    assert latest is not None
    assert latest.rating == 950
    assert [record.rating for record in member.ratings] == [900, 920, 950]


def test_mark_seen_reports_reactivation() -> None:
    member = ClanMember.first_observed("Ace", rating=900, at=T0)

    assert member.mark_seen(T0 + timedelta(days=1)) is False
    member.deactivate()
    assert member.mark_seen(T0 + timedelta(days=2)) is True
    assert member.is_active
    assert member.last_seen == T0 + timedelta(days=2)


def test_members_are_compared_by_identity() -> None:
    first = ClanMember.first_observed("Ace", rating=1, at=T0)
    second = ClanMember.first_observed("Ace", rating=1, at=T0)

    assert first != second
    assert first.id != second.id


def test_initial_change_counts_from_zero() -> None:
    change = RatingChange.initial(Observation(username="Ace", rating=1234, observed_at=T0))

    assert (change.old_rating, change.new_rating, change.change) == (0, 1234, 1234)
    assert change.date == T0.date()


def test_sort_by_magnitude_is_stable() -> None:
    changes = [_change("a", 10, 15), _change("b", 10, 0), _change("c", 10, 5), _change("d", 0, 3)]

    ordered = sort_by_magnitude(changes)

    assert [change.username for change in ordered] == ["b", "a", "c", "d"]


def test_cycle_result_splits_increases_and_decreases() -> None:
    result = CycleResult(changes=(_change("a", 1, 5), _change("b", 5, 1)), joined=("c",))

    assert [change.username for change in result.increases] == ["a"]
    assert [change.username for change in result.decreases] == ["b"]
    assert not result.is_empty
    assert CycleResult().is_empty


def test_fake_clock_rolls_over_month_end() -> None:
    clock = FakeClock(datetime(2024, 2, 29, 6, 0, tzinfo=UTC))

    assert [clock().date() for _ in range(2)] == [date(2024, 2, 29), date(2024, 3, 1)]
