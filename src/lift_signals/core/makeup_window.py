"""
Makeup-window rules for missed sessions.

A missed session may be made up until the day before the next session of
the same lift.  When no later same-lift session exists in the cycle, the
window closes on the Sunday ending the missed session's week.
"""

from datetime import date, datetime, timedelta

from .models import SessionRef


def parse_local_date(iso: str) -> date:
    """Parse 'YYYY-MM-DD' as a calendar date (no timezone shift)."""
    return date.fromisoformat(iso)


def sunday_of_week(day: date) -> date:
    """Sunday closing the Monday-start week containing day (day itself if Sunday)."""
    return day + timedelta(days=6 - day.weekday())


def makeup_window_end(missed_session: SessionRef, all_sessions_this_cycle: list[SessionRef]) -> date:
    """
    Last calendar day on which the missed session can still be made up.

    Args:
        missed_session: The session that was not performed
        all_sessions_this_cycle: Every session of the current cycle

    Returns:
        Last valid makeup day (inclusive)
    """
    missed_date = parse_local_date(missed_session.scheduled_date)

    later_same_lift = sorted(
        parse_local_date(s.scheduled_date)
        for s in all_sessions_this_cycle
        if s.lift == missed_session.lift
        and s.id != missed_session.id
        and parse_local_date(s.scheduled_date) > missed_date
    )

    if later_same_lift:
        return later_same_lift[0] - timedelta(days=1)
    return sunday_of_week(missed_date)


def is_makeup_window_expired(
    missed_session: SessionRef,
    all_sessions_this_cycle: list[SessionRef],
    today: date | datetime,
) -> bool:
    """
    Check whether the makeup window of a missed session has lapsed.

    Expired when today is strictly after the last valid makeup day; the
    day the replacement session occurs is already expired.

    Args:
        missed_session: The session that was not performed
        all_sessions_this_cycle: Every session of the current cycle
        today: Current day; time of day is ignored

    Returns:
        True if the session can no longer be made up
    """
    today_day = today.date() if isinstance(today, datetime) else today
    return today_day > makeup_window_end(missed_session, all_sessions_this_cycle)
