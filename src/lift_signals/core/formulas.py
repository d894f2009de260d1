"""
Formula primitives: strength score, weight rounding, unit helpers and
one-rep-max estimation.

All functions are pure.  Rounding is half-up throughout so results match
the mobile client, which rounds with Math.round semantics.
"""

import math
from typing import Literal

from .config import (
    BRZYCKI_A,
    BRZYCKI_B,
    EPLEY_DIVISOR,
    GRAMS_PER_KG,
    ONE_RM_MAX_REPS,
    WEIGHT_ROUND_INCREMENT_KG,
    WILKS_BODYWEIGHT_RANGE,
    WILKS_COEFFICIENTS,
    WILKS_NUMERATOR,
)
from .models import Sex

OneRepMaxFormula = Literal["epley", "brzycki"]


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round to ndigits decimals with ties going up.

    Python's round() uses banker's rounding (round(2.5) == 2), which would
    put 121.25 kg into the 120 kg bucket instead of 122.5 kg.
    """
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_to_nearest(weight_kg: float, increment_kg: float = WEIGHT_ROUND_INCREMENT_KG) -> float:
    """
    Round a weight to the nearest plate increment.

    Args:
        weight_kg: Weight in kg
        increment_kg: Rounding step (default 2.5 kg)

    Returns:
        Weight rounded half-up to a multiple of increment_kg
    """
    return round_half_up(weight_kg / increment_kg) * increment_kg


def grams_to_kg(grams: float) -> float:
    return grams / GRAMS_PER_KG


def kg_to_grams(kg: float) -> int:
    return int(round_half_up(kg * GRAMS_PER_KG))


def _wilks_polynomial(bodyweight_kg: float, sex: Sex) -> float:
    c0, c1, c2, c3, c4, c5 = WILKS_COEFFICIENTS[sex]
    bw = bodyweight_kg
    return c0 + c1 * bw + c2 * bw ** 2 + c3 * bw ** 3 + c4 * bw ** 4 + c5 * bw ** 5


def compute_strength_score(total_kg: float, bodyweight_kg: float, sex: Sex) -> float:
    """
    Calculate the bodyweight-normalized strength score (Wilks-style).

    score = total × 600 / poly(bw)

    Bodyweight is clamped into the polynomial's published domain
    (female 40–150 kg, male 40–200 kg) rather than extrapolated.

    Args:
        total_kg: Sum of squat, bench and deadlift maxes
        bodyweight_kg: Lifter bodyweight
        sex: "male" or "female"

    Returns:
        Score rounded half-up to 2 decimals; 0.0 for a non-positive total
    """
    if total_kg <= 0:
        return 0.0

    bw_min, bw_max = WILKS_BODYWEIGHT_RANGE[sex]
    bw = min(max(bodyweight_kg, bw_min), bw_max)

    score = total_kg * (WILKS_NUMERATOR / _wilks_polynomial(bw, sex))
    return round_half_up(score, 2)


def estimate_one_rep_max_epley(weight_kg: float, reps: int) -> float:
    """
    Epley estimate: 1RM = w × (1 + reps / 30).

    A single is returned unchanged.
    """
    _validate_one_rm_inputs(weight_kg, reps)
    if reps == 1:
        return weight_kg
    return weight_kg * (1 + reps / EPLEY_DIVISOR)


def estimate_one_rep_max_brzycki(weight_kg: float, reps: int) -> float:
    """Brzycki estimate: 1RM = w / (1.0278 − 0.0278 × reps)."""
    _validate_one_rm_inputs(weight_kg, reps)
    if reps == 1:
        return weight_kg
    return weight_kg / (BRZYCKI_A - BRZYCKI_B * reps)


def estimate_one_rep_max(
    weight_kg: float,
    reps: int,
    formula: OneRepMaxFormula = "epley",
) -> float:
    """
    Estimate a one-rep max from a sub-maximal set.

    This is the estimator the PR detector relies on: callers run it per set
    and store the result in CompletedSet.estimated_1rm_kg.

    Raises:
        ValueError: If weight_kg <= 0 or reps is outside 1–20
    """
    if formula == "brzycki":
        return estimate_one_rep_max_brzycki(weight_kg, reps)
    return estimate_one_rep_max_epley(weight_kg, reps)


def _validate_one_rm_inputs(weight_kg: float, reps: int) -> None:
    if weight_kg <= 0 or reps <= 0 or reps > ONE_RM_MAX_REPS:
        raise ValueError(
            f"Invalid inputs: weight_kg={weight_kg}, reps={reps}. "
            f"weight_kg must be > 0, reps must be between 1 and {ONE_RM_MAX_REPS}."
        )
