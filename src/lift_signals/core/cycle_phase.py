"""
Menstrual-cycle phase calculator.

Maps a last-period-start date and cycle length to a training phase.
Phase boundaries are defined on a canonical 28-day cycle; other cycle
lengths are scaled onto it so phases stay comparable between athletes.
"""

from datetime import date, datetime, timedelta

from .config import (
    CANONICAL_CYCLE_LENGTH_DAYS,
    DEFAULT_CYCLE_LENGTH_DAYS,
    FOLLICULAR_LAST_DAY,
    LATE_LUTEAL_FIRST_DAY,
    LUTEAL_LAST_DAY,
    MENSTRUAL_LAST_DAY,
    OVULATORY_FIRST_DAY,
    OVULATORY_LAST_DAY,
)
from .formulas import round_half_up
from .models import CycleContext, CyclePhase


def _days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole days from start to end, floored.

    Two datetimes are compared to the second; anything else is compared
    as calendar dates.
    """
    if isinstance(start, datetime) and isinstance(end, datetime):
        return (end - start) // timedelta(days=1)
    start_day = start.date() if isinstance(start, datetime) else start
    end_day = end.date() if isinstance(end, datetime) else end
    return (end_day - start_day).days


def scale_to_canonical_day(day_of_cycle: int, cycle_length_days: int) -> int:
    """Map a day of an arbitrary-length cycle onto the 28-day reference cycle."""
    if cycle_length_days == CANONICAL_CYCLE_LENGTH_DAYS:
        return day_of_cycle
    return int(round_half_up(day_of_cycle * CANONICAL_CYCLE_LENGTH_DAYS / cycle_length_days))


def phase_for_day(scaled_day: int) -> CyclePhase:
    """Phase for a day of the canonical 28-day cycle."""
    if scaled_day <= MENSTRUAL_LAST_DAY:
        return "menstrual"
    if scaled_day <= FOLLICULAR_LAST_DAY:
        return "follicular"
    if scaled_day <= OVULATORY_LAST_DAY:
        return "ovulatory"
    if scaled_day <= LUTEAL_LAST_DAY:
        return "luteal"
    return "late_luteal"


def compute_cycle_phase(
    last_period_start: date | datetime,
    cycle_length_days: int = DEFAULT_CYCLE_LENGTH_DAYS,
    reference_date: date | datetime | None = None,
) -> CycleContext:
    """
    Compute the cycle phase on a reference date.

    day_of_cycle = (days_since_period_start mod cycle_length) + 1

    Args:
        last_period_start: First day of the most recent period
        cycle_length_days: Athlete's cycle length (default 28)
        reference_date: Day to evaluate; None means now

    Returns:
        CycleContext with phase and window flags
    """
    if reference_date is not None:
        ref = reference_date
    else:
        tz = last_period_start.tzinfo if isinstance(last_period_start, datetime) else None
        ref = datetime.now(tz)
    days_since = _days_between(last_period_start, ref)

    day_of_cycle = days_since % cycle_length_days + 1
    days_until_next_period = cycle_length_days - day_of_cycle
    scaled_day = scale_to_canonical_day(day_of_cycle, cycle_length_days)

    return CycleContext(
        phase=phase_for_day(scaled_day),
        day_of_cycle=day_of_cycle,
        days_until_next_period=days_until_next_period,
        is_ovulatory_window=OVULATORY_FIRST_DAY <= scaled_day <= OVULATORY_LAST_DAY,
        is_late_luteal=scaled_day >= LATE_LUTEAL_FIRST_DAY,
    )
