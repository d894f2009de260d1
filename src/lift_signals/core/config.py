"""
Configuration constants for the training-signal rules engine.

All adjustable thresholds are centralized here for easy tuning.
Functions in core/ import these directly; nothing here is mutated at runtime.
"""

from typing import Final

# =============================================================================
# WEIGHT ROUNDING
# =============================================================================

WEIGHT_ROUND_INCREMENT_KG: Final[float] = 2.5  # Smallest plate-pair step
GRAMS_PER_KG: Final[int] = 1000

# =============================================================================
# PERSONAL RECORDS
# =============================================================================

RPE_ELIGIBILITY_THRESHOLD: Final[float] = 8.5  # Min RPE for a 1RM estimate to count
REP_PR_CAP: Final[int] = 3  # Max rep-at-weight PRs credited per session

# =============================================================================
# CYCLE COMPLETION
# =============================================================================

BADGE_COMPLETION_THRESHOLD: Final[float] = 0.80
FULL_COMPLETION_THRESHOLD: Final[float] = 1.0

# =============================================================================
# STRENGTH SCORE (Wilks-style)
# =============================================================================

WILKS_NUMERATOR: Final[float] = 600.0

# Coefficients c0..c5 of poly(bw) = c0 + c1·bw + ... + c5·bw⁵
WILKS_COEFFICIENTS: Final[dict[str, tuple[float, float, float, float, float, float]]] = {
    "female": (
        594.31747775582,
        -27.23842536447,
        0.82112226871,
        -0.00930733913,
        0.00004731582,
        -0.00000009054,
    ),
    "male": (
        -216.0475144,
        16.2606339,
        -0.002388645,
        -0.00113732,
        0.000007018630,
        -0.00000001291,
    ),
}

# Bodyweight domain of the published polynomial (kg)
WILKS_BODYWEIGHT_RANGE: Final[dict[str, tuple[float, float]]] = {
    "female": (40.0, 150.0),
    "male": (40.0, 200.0),
}

# Bodyweight assumed for score history when the profile has none (kg)
DEFAULT_BODYWEIGHT_KG: Final[float] = 85.0

# =============================================================================
# ONE-REP-MAX ESTIMATION
# =============================================================================

ONE_RM_MAX_REPS: Final[int] = 20  # Estimates beyond this rep count are unreliable
EPLEY_DIVISOR: Final[float] = 30.0
BRZYCKI_A: Final[float] = 1.0278
BRZYCKI_B: Final[float] = 0.0278

# =============================================================================
# MENSTRUAL CYCLE PHASES
# =============================================================================

DEFAULT_CYCLE_LENGTH_DAYS: Final[int] = 28
CANONICAL_CYCLE_LENGTH_DAYS: Final[int] = 28

# Last (inclusive) day of each phase on the canonical 28-day cycle.
# late_luteal runs from LUTEAL_LAST_DAY + 1 to the end of the cycle.
MENSTRUAL_LAST_DAY: Final[int] = 5
FOLLICULAR_LAST_DAY: Final[int] = 11
OVULATORY_FIRST_DAY: Final[int] = 12
OVULATORY_LAST_DAY: Final[int] = 16
LUTEAL_LAST_DAY: Final[int] = 23
LATE_LUTEAL_FIRST_DAY: Final[int] = 24

# =============================================================================
# DISRUPTION ADJUSTMENTS (percent weight reduction / reps removed per set)
# =============================================================================

INJURY_MODERATE_REDUCTION_PCT: Final[int] = 40
INJURY_MINOR_REDUCTION_PCT: Final[int] = 20
ILLNESS_MODERATE_REDUCTION_PCT: Final[int] = 25
ILLNESS_REPS_REDUCTION: Final[int] = 2
TRAVEL_REDUCTION_PCT: Final[int] = 30
FATIGUE_MODERATE_REDUCTION_PCT: Final[int] = 20
FATIGUE_MINOR_REDUCTION_PCT: Final[int] = 10

# =============================================================================
# SESSION PERFORMANCE
# =============================================================================

INCOMPLETE_BELOW_PCT: Final[float] = 50.0
UNDER_BELOW_PCT: Final[float] = 90.0
OVER_ABOVE_PCT: Final[float] = 110.0  # Set-count proxy, see classify_performance()

TREND_WINDOW_SESSIONS: Final[int] = 5
TREND_THRESHOLD_KG: Final[float] = 2.5
