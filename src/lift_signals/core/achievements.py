"""
Achievement signals: personal records, adherence streaks and cycle badges.

All functions are pure; persistence of the results belongs to the caller.
"""

from datetime import datetime, timezone
from typing import Iterable

from .config import (
    BADGE_COMPLETION_THRESHOLD,
    FULL_COMPLETION_THRESHOLD,
    REP_PR_CAP,
    RPE_ELIGIBILITY_THRESHOLD,
)
from .formulas import round_to_nearest
from .models import (
    CompletedSet,
    CycleCompletionInput,
    CycleCompletionResult,
    Disruption,
    HistoricalPRSnapshot,
    Lift,
    PersonalRecord,
    StreakResult,
    WeekAdherenceStatus,
)


# =============================================================================
# PERSONAL RECORDS
# =============================================================================


def has_major_disruption(disruptions: Iterable[Disruption] | None) -> bool:
    return any(d.severity == "major" for d in disruptions or ())


def best_eligible_1rm(completed_sets: list[CompletedSet]) -> float | None:
    """
    Highest precomputed 1RM estimate among sets logged at RPE ≥ 8.5.

    Returns:
        Best estimate in kg, or None when no set is eligible
    """
    eligible = [
        s.estimated_1rm_kg
        for s in completed_sets
        if s.rpe is not None
        and s.rpe >= RPE_ELIGIBILITY_THRESHOLD
        and s.estimated_1rm_kg is not None
    ]
    return max(eligible) if eligible else None


def session_volume_kg(completed_sets: list[CompletedSet]) -> float:
    """Total session volume: Σ weight × reps over every set."""
    return sum(s.weight_kg * s.reps for s in completed_sets)


def best_reps_by_weight(completed_sets: list[CompletedSet]) -> dict[float, int]:
    """
    Best reps per rounded weight in this session.

    Keys are weights rounded to the nearest 2.5 kg, inserted in
    first-encountered order.
    """
    best: dict[float, int] = {}
    for s in completed_sets:
        weight = round_to_nearest(s.weight_kg)
        if s.reps > best.get(weight, 0):
            best[weight] = s.reps
    return best


def detect_records(
    session_id: str,
    lift: Lift,
    completed_sets: list[CompletedSet],
    snapshot: HistoricalPRSnapshot,
    active_disruptions: list[Disruption] | None = None,
    achieved_at: str | None = None,
) -> list[PersonalRecord]:
    """
    Detect personal records earned during a single session.

    Returns up to one estimated-1RM PR, one volume PR and REP_PR_CAP
    rep-at-weight PRs (highest weights kept).  Records earned during an
    active major disruption are not credited.

    Args:
        session_id: Session the sets belong to
        lift: Lift performed
        completed_sets: Sets logged this session
        snapshot: Records as of before this session
        active_disruptions: Disruptions active on the session date
        achieved_at: ISO timestamp stamped on the records; None means now (UTC)

    Returns:
        Records broken, ordered 1RM, volume, then rep PRs by descending weight
    """
    if has_major_disruption(active_disruptions):
        return []

    stamp = achieved_at if achieved_at is not None else datetime.now(timezone.utc).isoformat()
    records: list[PersonalRecord] = []

    best_1rm = best_eligible_1rm(completed_sets)
    if best_1rm is not None and best_1rm > snapshot.best_1rm_kg:
        records.append(
            PersonalRecord(
                type="estimated_1rm",
                lift=lift,
                value=best_1rm,
                session_id=session_id,
                achieved_at=stamp,
            )
        )

    volume = session_volume_kg(completed_sets)
    if volume > snapshot.best_volume_kg:
        records.append(
            PersonalRecord(
                type="volume",
                lift=lift,
                value=volume,
                session_id=session_id,
                achieved_at=stamp,
            )
        )

    rep_records = [
        PersonalRecord(
            type="rep_at_weight",
            lift=lift,
            value=reps,
            session_id=session_id,
            achieved_at=stamp,
            weight_kg=weight,
        )
        for weight, reps in best_reps_by_weight(completed_sets).items()
        if reps > snapshot.rep_prs.get(weight, 0)
    ]
    # sorted() is stable: equal weights keep first-encountered order
    rep_records = sorted(rep_records, key=lambda r: r.weight_kg or 0.0, reverse=True)
    records.extend(rep_records[:REP_PR_CAP])

    return records


# =============================================================================
# STREAKS
# =============================================================================


def is_gap_week(week: WeekAdherenceStatus) -> bool:
    return week.scheduled <= 0


def is_clean_week(week: WeekAdherenceStatus) -> bool:
    """A week is clean when something was scheduled and nothing went unaccounted."""
    return week.scheduled > 0 and week.unaccounted_misses == 0


def compute_streak(weeks: list[WeekAdherenceStatus]) -> StreakResult:
    """
    Compute current and longest runs of clean weeks.

    Gap weeks (nothing scheduled) neither break nor extend a streak.
    The current streak walks backwards from the most recent week and stops
    at the first non-clean week.

    Args:
        weeks: Per-week adherence; re-sorted by week_start_date here

    Returns:
        StreakResult (all zero / empty for no input)
    """
    if not weeks:
        return StreakResult(current_streak=0, longest_streak=0, last_clean_week_date="")

    ordered = sorted(weeks, key=lambda w: w.week_start_date)

    current_streak = 0
    last_clean_week_date = ""
    for week in reversed(ordered):
        if is_gap_week(week):
            continue
        if not is_clean_week(week):
            break
        current_streak += 1
        if not last_clean_week_date:
            last_clean_week_date = week.week_start_date

    longest_streak = 0
    run = 0
    for week in ordered:
        if is_gap_week(week):
            continue
        if is_clean_week(week):
            run += 1
            longest_streak = max(longest_streak, run)
        else:
            run = 0

    return StreakResult(
        current_streak=current_streak,
        longest_streak=longest_streak,
        last_clean_week_date=last_clean_week_date,
    )


# =============================================================================
# CYCLE COMPLETION
# =============================================================================


def classify_completion(counts: CycleCompletionInput) -> CycleCompletionResult:
    """
    Completion percentage and badge eligibility for one program cycle.

    completion = (completed + skipped_with_disruption) / total_scheduled

    Sessions skipped for a documented disruption count as completed: the
    badge rewards adherence, not attendance.
    """
    if counts.total_scheduled == 0:
        return CycleCompletionResult(is_complete=False, completion_pct=0.0, qualifies_for_badge=False)

    completion_pct = (counts.completed + counts.skipped_with_disruption) / counts.total_scheduled
    return CycleCompletionResult(
        is_complete=completion_pct >= FULL_COMPLETION_THRESHOLD,
        completion_pct=completion_pct,
        qualifies_for_badge=completion_pct >= BADGE_COMPLETION_THRESHOLD,
    )
