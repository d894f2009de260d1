"""
Data models for lift-signals.

All core dataclasses are immutable value types built fresh for each call.
Validation is the job of io/serializers.py; the rules engine assumes its
inputs were checked upstream and never re-validates them.
"""

from dataclasses import dataclass, field
from typing import Literal

Lift = str  # "squat", "bench", "deadlift" in practice; not enforced here
Sex = Literal["male", "female"]
Severity = Literal["minor", "moderate", "major"]
DisruptionType = Literal[
    "injury",
    "illness",
    "travel",
    "fatigue",
    "equipment_unavailable",
    "unprogrammed_event",
    "other",
]
PRType = Literal["estimated_1rm", "volume", "rep_at_weight"]
AdjustmentAction = Literal[
    "weight_reduced", "reps_reduced", "session_skipped", "exercise_substituted"
]
CyclePhase = Literal["menstrual", "follicular", "ovulatory", "luteal", "late_luteal"]
PerformanceVsPlan = Literal["incomplete", "under", "at", "over"]
TrendDirection = Literal["improving", "stable", "declining"]


@dataclass(frozen=True)
class CompletedSet:
    """
    One logged set of a session.

    estimated_1rm_kg is precomputed by the 1RM estimator (see
    formulas.estimate_one_rep_max) when an RPE was logged.
    """

    weight_kg: float
    reps: int
    rpe: float | None = None
    estimated_1rm_kg: float | None = None


@dataclass(frozen=True)
class HistoricalPRSnapshot:
    """
    Best-ever records for one lift as of before the session being checked.

    rep_prs maps a weight rounded to the nearest 2.5 kg to the best rep
    count ever performed at that weight.
    """

    best_1rm_kg: float = 0.0
    best_volume_kg: float = 0.0
    rep_prs: dict[float, int] = field(default_factory=dict)


@dataclass(frozen=True)
class PersonalRecord:
    """A record broken during one session."""

    type: PRType
    lift: Lift
    value: float  # kg for estimated_1rm and volume, reps for rep_at_weight
    session_id: str
    achieved_at: str  # ISO timestamp
    weight_kg: float | None = None  # only for rep_at_weight


@dataclass(frozen=True)
class WeekAdherenceStatus:
    """Adherence counts for one Monday-start calendar week."""

    week_start_date: str  # ISO Monday, YYYY-MM-DD
    scheduled: int
    completed: int
    skipped_with_disruption: int
    unaccounted_misses: int


@dataclass(frozen=True)
class StreakResult:
    current_streak: int
    longest_streak: int
    last_clean_week_date: str  # "" when no clean week exists


@dataclass(frozen=True)
class CycleCompletionInput:
    total_scheduled: int
    completed: int
    skipped_with_disruption: int


@dataclass(frozen=True)
class CycleCompletionResult:
    is_complete: bool
    completion_pct: float  # 0.0 – 1.0
    qualifies_for_badge: bool


@dataclass(frozen=True)
class CycleBadge:
    """A finished program whose completion earned the cycle badge."""

    program_id: str
    cycle_number: int  # program version
    start_date: str  # ISO format: YYYY-MM-DD
    week_count: int
    completion_pct: float  # 0.0 – 1.0


@dataclass(frozen=True)
class StrengthScorePoint:
    cycle_number: int
    score: int  # strength score rounded to a whole number
    date: str  # program start date, YYYY-MM-DD


@dataclass(frozen=True)
class Disruption:
    """
    A reported life event affecting training capacity.

    affected_lifts of None or empty means every lift is affected.
    type and severity are plain strings so unknown values reaching the
    suggester fall through to "no suggestion" instead of failing.
    """

    type: str
    severity: str
    affected_lifts: tuple[Lift, ...] | None = None


@dataclass(frozen=True)
class PlannedSession:
    id: str
    primary_lift: Lift
    status: str = "planned"


@dataclass(frozen=True)
class DisruptionAdjustmentSuggestion:
    """One suggested change to a planned session."""

    session_id: str
    action: AdjustmentAction
    rationale: str
    reduction_pct: int | None = None
    reps_reduction: int | None = None
    substitution_note: str | None = None


@dataclass(frozen=True)
class SessionRef:
    """Minimal scheduled-session reference used for makeup windows."""

    id: str
    scheduled_date: str  # ISO format: YYYY-MM-DD
    lift: Lift
    week_number: int = 1


@dataclass(frozen=True)
class CycleContext:
    phase: CyclePhase
    day_of_cycle: int  # 1-indexed
    days_until_next_period: int
    is_ovulatory_window: bool
    is_late_luteal: bool


@dataclass(frozen=True)
class LiftTrend:
    """Estimated-1RM trend across recent sessions of one lift."""

    lift: Lift
    estimated_1rm_kg: float  # newest session's heaviest estimate
    trend: TrendDirection
    sessions_logged: int
    avg_completion_pct: float
