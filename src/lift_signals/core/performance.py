"""
Session performance classification and per-lift estimated-1RM trends.
"""

from typing import Sequence

from .config import (
    INCOMPLETE_BELOW_PCT,
    ONE_RM_MAX_REPS,
    OVER_ABOVE_PCT,
    TREND_THRESHOLD_KG,
    TREND_WINDOW_SESSIONS,
    UNDER_BELOW_PCT,
)
from .formulas import estimate_one_rep_max_epley
from .models import CompletedSet, Lift, LiftTrend, PerformanceVsPlan, TrendDirection


def session_completion_pct(completed_sets: Sequence[CompletedSet], planned_count: int) -> float:
    """
    Percentage of planned sets that were actually performed.

    A set counts when at least one rep was completed.  When the plan has no
    sets the logged set count is used as the denominator.

    Args:
        completed_sets: Sets logged this session
        planned_count: Number of planned main-lift sets

    Returns:
        Completion percentage (may exceed 100 when extra sets were done)
    """
    denominator = planned_count if planned_count > 0 else len(completed_sets)
    if denominator == 0:
        return 0.0
    performed = sum(1 for s in completed_sets if s.reps > 0)
    return performed / denominator * 100


def classify_performance(completion_pct: float) -> PerformanceVsPlan:
    """
    Classify a session against its plan.

    "over" is an approximation: without planned reps per set, a set count
    above 110% of plan is used as the proxy.  It cannot tell "did more sets
    than planned" from "did fewer, harder sets".
    """
    if completion_pct < INCOMPLETE_BELOW_PCT:
        return "incomplete"
    if completion_pct < UNDER_BELOW_PCT:
        return "under"
    if completion_pct > OVER_ABOVE_PCT:
        return "over"
    return "at"


def heaviest_estimated_1rm(completed_sets: Sequence[CompletedSet]) -> float:
    """Best Epley estimate across sets with positive weight and reps (0.0 if none)."""
    best = 0.0
    for s in completed_sets:
        if s.weight_kg <= 0 or s.reps <= 0:
            continue
        # Epley rejects high-rep sets
        if s.reps > ONE_RM_MAX_REPS:
            continue
        best = max(best, estimate_one_rep_max_epley(s.weight_kg, s.reps))
    return best


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def compute_lift_trend(
    lift: Lift,
    sessions: Sequence[Sequence[CompletedSet]],
    completion_pcts: Sequence[float | None] = (),
) -> LiftTrend:
    """
    Estimated-1RM trend for one lift.

    Compares the mean heaviest estimate of the newest sessions with that of
    the oldest ones (TREND_WINDOW_SESSIONS each; the windows overlap when
    fewer sessions are logged).

    Args:
        lift: Lift the sessions belong to
        sessions: Completed sets per session, newest first
        completion_pcts: Completion percentage per session (None = unknown)

    Returns:
        LiftTrend for the lift
    """
    one_rm_series = [heaviest_estimated_1rm(sets) for sets in sessions]
    latest = one_rm_series[0] if one_rm_series else 0.0

    recent = _mean(one_rm_series[:TREND_WINDOW_SESSIONS])
    older = _mean(one_rm_series[-TREND_WINDOW_SESSIONS:])
    delta = recent - older

    trend: TrendDirection
    if delta > TREND_THRESHOLD_KG:
        trend = "improving"
    elif delta < -TREND_THRESHOLD_KG:
        trend = "declining"
    else:
        trend = "stable"

    known = [p for p in completion_pcts if p is not None]

    return LiftTrend(
        lift=lift,
        estimated_1rm_kg=latest,
        trend=trend,
        sessions_logged=len(one_rm_series),
        avg_completion_pct=_mean(known),
    )
