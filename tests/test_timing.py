from datetime import datetime, timedelta, timezone

from assessments.services import timing

T = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


def test_end_time_adds_the_time_limit():
    assert timing.compute_end_time(T, 60) == T + timedelta(minutes=60)


def test_deadline_second_is_still_open():
    ends_at = timing.compute_end_time(T, 60)
    assert not timing.is_expired(ends_at, ends_at)
    assert timing.is_expired(ends_at + timedelta(seconds=1), ends_at)


def test_availability_window_bounds_are_inclusive():
    start, end = T, T + timedelta(days=1)
    assert timing.is_within_availability_window(start, start, end)
    assert timing.is_within_availability_window(end, start, end)
    assert not timing.is_within_availability_window(start - timedelta(seconds=1), start, end)
    assert not timing.is_within_availability_window(end + timedelta(seconds=1), start, end)


def test_missing_bounds_leave_the_window_open():
    assert timing.is_within_availability_window(T)
    assert timing.is_within_availability_window(T, valid_to=T)
    assert not timing.has_not_started(T, None)
    assert not timing.has_ended(T, None)


def test_remaining_seconds_never_goes_negative():
    ends_at = T + timedelta(minutes=1)
    assert timing.remaining_seconds(T, ends_at) == 60
    assert timing.remaining_seconds(ends_at + timedelta(minutes=5), ends_at) == 0
