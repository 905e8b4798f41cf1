# assessments/services/timing.py
"""
Time authority for attempts and exam availability.

All values handled here are timezone-aware datetimes at second resolution,
as produced by the clocks in ``assessments.services.clock``. Comparisons are
done on datetimes, never on float timestamps.
"""
from datetime import timedelta


def compute_end_time(started_at, time_limit_minutes):
    return started_at + timedelta(minutes=time_limit_minutes)


def is_expired(now, ends_at):
    return now > ends_at


def is_within_availability_window(now, valid_from=None, valid_to=None):
    """Both bounds are inclusive; a missing bound leaves that side open."""
    return not has_not_started(now, valid_from) and not has_ended(now, valid_to)


def has_not_started(now, valid_from=None):
    return valid_from is not None and now < valid_from


def has_ended(now, valid_to=None):
    return valid_to is not None and now > valid_to


def remaining_seconds(now, ends_at):
    if is_expired(now, ends_at):
        return 0
    return int((ends_at - now).total_seconds())
