"""
Disruption-driven adjustment suggestions.

Translates a reported disruption (type × severity) into per-session
suggestions for the upcoming planned sessions it affects.  The decision
table is deterministic; unknown types or severities produce no suggestion.
"""

from .config import (
    FATIGUE_MINOR_REDUCTION_PCT,
    FATIGUE_MODERATE_REDUCTION_PCT,
    ILLNESS_MODERATE_REDUCTION_PCT,
    ILLNESS_REPS_REDUCTION,
    INJURY_MINOR_REDUCTION_PCT,
    INJURY_MODERATE_REDUCTION_PCT,
    TRAVEL_REDUCTION_PCT,
)
from .models import Disruption, DisruptionAdjustmentSuggestion, PlannedSession

TRAVEL_SUBSTITUTION_NOTE = "Consider bodyweight or hotel gym substitutions"
EQUIPMENT_SUBSTITUTION_NOTE = "Use bodyweight or alternative equipment"


def affects_session(disruption: Disruption, session: PlannedSession) -> bool:
    """True when the disruption covers the session's primary lift."""
    if not disruption.affected_lifts:
        return True
    return session.primary_lift in disruption.affected_lifts


def _weight_reduced(session_id: str, pct: int, rationale: str) -> DisruptionAdjustmentSuggestion:
    return DisruptionAdjustmentSuggestion(
        session_id=session_id,
        action="weight_reduced",
        reduction_pct=pct,
        rationale=rationale,
    )


def _reps_reduced(session_id: str, reps: int, rationale: str) -> DisruptionAdjustmentSuggestion:
    return DisruptionAdjustmentSuggestion(
        session_id=session_id,
        action="reps_reduced",
        reps_reduction=reps,
        rationale=rationale,
    )


def _skipped(session_id: str, rationale: str) -> DisruptionAdjustmentSuggestion:
    return DisruptionAdjustmentSuggestion(
        session_id=session_id,
        action="session_skipped",
        rationale=rationale,
    )


def build_suggestions(disruption: Disruption, session_id: str) -> list[DisruptionAdjustmentSuggestion]:
    """
    Apply the type × severity decision table to one session.

    Args:
        disruption: Reported disruption
        session_id: ID of the affected planned session

    Returns:
        Zero, one or two suggestions for the session
    """
    match (disruption.type, disruption.severity):
        case ("injury", "major"):
            return [_skipped(session_id, "Major injury — session skipped")]
        case ("injury", "moderate"):
            return [
                _weight_reduced(
                    session_id,
                    INJURY_MODERATE_REDUCTION_PCT,
                    f"Moderate injury — reduce intensity {INJURY_MODERATE_REDUCTION_PCT}% "
                    "to protect injured area",
                )
            ]
        case ("injury", "minor"):
            return [
                _weight_reduced(
                    session_id,
                    INJURY_MINOR_REDUCTION_PCT,
                    f"Minor injury — reduce intensity {INJURY_MINOR_REDUCTION_PCT}% "
                    "to maintain movement pattern safely",
                )
            ]

        case ("illness", "major"):
            return [_skipped(session_id, "Major illness — session skipped for recovery")]
        case ("illness", "moderate"):
            return [
                _weight_reduced(
                    session_id,
                    ILLNESS_MODERATE_REDUCTION_PCT,
                    f"Moderate illness — reduce weight {ILLNESS_MODERATE_REDUCTION_PCT}%",
                ),
                _reps_reduced(
                    session_id,
                    ILLNESS_REPS_REDUCTION,
                    f"Moderate illness — reduce reps by {ILLNESS_REPS_REDUCTION} per set",
                ),
            ]
        case ("illness", "minor"):
            return [
                _reps_reduced(
                    session_id,
                    ILLNESS_REPS_REDUCTION,
                    f"Minor illness — reduce reps by {ILLNESS_REPS_REDUCTION} per set",
                )
            ]

        case ("travel", "minor" | "moderate" | "major"):
            return [
                DisruptionAdjustmentSuggestion(
                    session_id=session_id,
                    action="weight_reduced",
                    reduction_pct=TRAVEL_REDUCTION_PCT,
                    rationale=f"{disruption.severity.capitalize()} travel — reduce weight "
                    f"{TRAVEL_REDUCTION_PCT}% due to equipment limitations",
                    substitution_note=TRAVEL_SUBSTITUTION_NOTE,
                )
            ]

        case ("fatigue", "major"):
            return [_skipped(session_id, "Major fatigue — session skipped")]
        case ("fatigue", "moderate"):
            return [
                _weight_reduced(
                    session_id,
                    FATIGUE_MODERATE_REDUCTION_PCT,
                    f"Moderate fatigue — reduce intensity {FATIGUE_MODERATE_REDUCTION_PCT}%",
                )
            ]
        case ("fatigue", "minor"):
            return [
                _weight_reduced(
                    session_id,
                    FATIGUE_MINOR_REDUCTION_PCT,
                    f"Minor fatigue — reduce intensity {FATIGUE_MINOR_REDUCTION_PCT}%",
                )
            ]

        case ("equipment_unavailable", "minor" | "moderate" | "major"):
            return [
                DisruptionAdjustmentSuggestion(
                    session_id=session_id,
                    action="exercise_substituted",
                    rationale=f"{disruption.severity.capitalize()} equipment unavailability — "
                    "substitute with available alternatives",
                    substitution_note=EQUIPMENT_SUBSTITUTION_NOTE,
                )
            ]

        case ("unprogrammed_event" | "other", _):
            return []

        case _:
            return []


def suggest_adjustments(
    disruption: Disruption,
    planned_sessions: list[PlannedSession],
) -> list[DisruptionAdjustmentSuggestion]:
    """
    Suggest adjustments for every planned session a disruption affects.

    Args:
        disruption: Reported disruption
        planned_sessions: Upcoming sessions, in display order

    Returns:
        Suggestions in session order (illness/moderate yields two per session)
    """
    suggestions: list[DisruptionAdjustmentSuggestion] = []
    for session in planned_sessions:
        if affects_session(disruption, session):
            suggestions.extend(build_suggestions(disruption, session.id))
    return suggestions
