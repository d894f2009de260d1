"""
Formula-focused unit tests: weight rounding, unit helpers, strength score,
one-rep-max estimation and cycle phase.

Values are hand-computed from the formulas so the tests document the
expected behavior.
"""

from datetime import date, datetime, timezone

import pytest

from lift_signals.core.config import (
    CANONICAL_CYCLE_LENGTH_DAYS,
    ONE_RM_MAX_REPS,
    WILKS_BODYWEIGHT_RANGE,
)
from lift_signals.core.cycle_phase import (
    compute_cycle_phase,
    phase_for_day,
    scale_to_canonical_day,
)
from lift_signals.core.formulas import (
    compute_strength_score,
    estimate_one_rep_max,
    estimate_one_rep_max_brzycki,
    estimate_one_rep_max_epley,
    grams_to_kg,
    kg_to_grams,
    round_half_up,
    round_to_nearest,
)

CYCLE_START = date(2026, 1, 1)


# ===========================================================================
# formulas.py — rounding and units
# ===========================================================================

class TestRoundHalfUp:

    def test_ties_round_up(self):
        # Python's round(2.5) == 2; half-up gives 3
        assert round_half_up(2.5) == 3.0
        assert round_half_up(3.5) == 4.0

    def test_two_decimals(self):
        # 0.125 × 100 = 12.5 → 13 → 0.13
        assert round_half_up(0.125, 2) == pytest.approx(0.13)

    def test_below_half_rounds_down(self):
        assert round_half_up(2.49) == 2.0


class TestRoundToNearest:
    """round(w / step) × step, ties up"""

    def test_rounds_down_to_bucket(self):
        # 121 / 2.5 = 48.4 → 48 → 120
        assert round_to_nearest(121.0) == 120.0

    def test_tie_rounds_up(self):
        # 121.25 / 2.5 = 48.5 → 49 → 122.5
        assert round_to_nearest(121.25) == 122.5

    def test_exact_multiple_unchanged(self):
        assert round_to_nearest(100.0) == 100.0

    def test_custom_increment(self):
        # 102.4 / 5 = 20.48 → 100; 102.5 / 5 = 20.5 → 105
        assert round_to_nearest(102.4, 5.0) == 100.0
        assert round_to_nearest(102.5, 5.0) == 105.0


class TestUnitHelpers:

    def test_grams_to_kg(self):
        assert grams_to_kg(102500) == pytest.approx(102.5)

    def test_kg_to_grams_is_integer(self):
        result = kg_to_grams(102.5)
        assert result == 102500
        assert isinstance(result, int)


# ===========================================================================
# formulas.py — strength score
# ===========================================================================

class TestStrengthScore:
    """score = total × 600 / poly(clamp(bw))"""

    def test_zero_total_returns_zero(self):
        assert compute_strength_score(0.0, 80.0, "male") == 0.0

    def test_negative_total_returns_zero(self):
        assert compute_strength_score(-10.0, 80.0, "female") == 0.0

    def test_female_reference_value(self):
        # poly_f(60) ≈ 448.48 → 400 × 600 / 448.48 ≈ 535.1
        score = compute_strength_score(400.0, 60.0, "female")
        assert 533.0 < score < 537.0

    def test_male_reference_value(self):
        # poly_m(83) ≈ 749.06 → 600 × 600 / 749.06 ≈ 480.6
        score = compute_strength_score(600.0, 83.0, "male")
        assert 479.0 < score < 483.0

    def test_low_bodyweight_clamped(self):
        # 25 kg is below the domain; evaluated as 40 kg
        assert compute_strength_score(300.0, 25.0, "female") == compute_strength_score(300.0, 40.0, "female")

    def test_low_bodyweight_clamped_male(self):
        assert compute_strength_score(400.0, 25.0, "male") == compute_strength_score(400.0, 40.0, "male")

    def test_high_bodyweight_clamped(self):
        bw_max = WILKS_BODYWEIGHT_RANGE["male"][1]
        assert compute_strength_score(700.0, 250.0, "male") == compute_strength_score(700.0, bw_max, "male")

    @pytest.mark.parametrize("sex", ["male", "female"])
    def test_decreasing_in_bodyweight(self, sex):
        scores = [compute_strength_score(500.0, float(bw), sex) for bw in range(45, 130, 10)]
        assert all(a > b for a, b in zip(scores, scores[1:]))

    def test_rounded_to_two_decimals(self):
        score = compute_strength_score(512.5, 77.3, "male")
        assert score * 100 == pytest.approx(round(score * 100), abs=1e-6)

    def test_deterministic(self):
        a = compute_strength_score(455.0, 68.2, "female")
        b = compute_strength_score(455.0, 68.2, "female")
        assert a == b


# ===========================================================================
# formulas.py — one-rep max
# ===========================================================================

class TestOneRepMax:

    def test_epley(self):
        # 100 × (1 + 5/30) = 116.67
        assert estimate_one_rep_max_epley(100.0, 5) == pytest.approx(116.6667, rel=1e-4)

    def test_brzycki(self):
        # 100 / (1.0278 − 0.139) = 112.51
        assert estimate_one_rep_max_brzycki(100.0, 5) == pytest.approx(112.511, rel=1e-4)

    def test_single_is_unchanged(self):
        assert estimate_one_rep_max(180.0, 1) == 180.0
        assert estimate_one_rep_max(180.0, 1, "brzycki") == 180.0

    def test_default_formula_is_epley(self):
        assert estimate_one_rep_max(100.0, 5) == estimate_one_rep_max_epley(100.0, 5)

    def test_max_reps_accepted(self):
        assert estimate_one_rep_max(60.0, ONE_RM_MAX_REPS) > 60.0

    @pytest.mark.parametrize(
        "weight,reps",
        [(0.0, 5), (-20.0, 5), (100.0, 0), (100.0, ONE_RM_MAX_REPS + 1)],
    )
    def test_invalid_inputs_raise(self, weight, reps):
        with pytest.raises(ValueError):
            estimate_one_rep_max(weight, reps)


# ===========================================================================
# cycle_phase.py
# ===========================================================================

class TestPhaseForDay:

    @pytest.mark.parametrize(
        "day,phase",
        [
            (1, "menstrual"),
            (5, "menstrual"),
            (6, "follicular"),
            (11, "follicular"),
            (12, "ovulatory"),
            (16, "ovulatory"),
            (17, "luteal"),
            (23, "luteal"),
            (24, "late_luteal"),
            (28, "late_luteal"),
        ],
    )
    def test_boundaries(self, day, phase):
        assert phase_for_day(day) == phase


class TestScaleToCanonicalDay:

    def test_canonical_length_is_identity(self):
        assert scale_to_canonical_day(14, CANONICAL_CYCLE_LENGTH_DAYS) == 14

    def test_longer_cycle_scaled_down(self):
        # 10 × 28 / 35 = 8
        assert scale_to_canonical_day(10, 35) == 8


class TestComputeCyclePhase:

    def test_first_day(self):
        ctx = compute_cycle_phase(CYCLE_START, 28, date(2026, 1, 1))
        assert ctx.phase == "menstrual"
        assert ctx.day_of_cycle == 1
        assert ctx.days_until_next_period == 27
        assert not ctx.is_ovulatory_window
        assert not ctx.is_late_luteal

    @pytest.mark.parametrize(
        "ref,day,phase",
        [
            (date(2026, 1, 5), 5, "menstrual"),
            (date(2026, 1, 6), 6, "follicular"),
            (date(2026, 1, 12), 12, "ovulatory"),
            (date(2026, 1, 16), 16, "ovulatory"),
            (date(2026, 1, 17), 17, "luteal"),
            (date(2026, 1, 24), 24, "late_luteal"),
            (date(2026, 1, 28), 28, "late_luteal"),
        ],
    )
    def test_phase_progression(self, ref, day, phase):
        ctx = compute_cycle_phase(CYCLE_START, 28, ref)
        assert ctx.day_of_cycle == day
        assert ctx.phase == phase

    def test_ovulatory_window_flag(self):
        ctx = compute_cycle_phase(CYCLE_START, 28, date(2026, 1, 14))
        assert ctx.is_ovulatory_window
        assert not ctx.is_late_luteal

    def test_late_luteal_flag(self):
        ctx = compute_cycle_phase(CYCLE_START, 28, date(2026, 1, 24))
        assert ctx.is_late_luteal
        assert ctx.days_until_next_period == 4

    def test_wraps_to_next_cycle(self):
        # 28 days after start → day 1 of the next cycle
        ctx = compute_cycle_phase(CYCLE_START, 28, date(2026, 1, 29))
        assert ctx.day_of_cycle == 1
        assert ctx.phase == "menstrual"

    def test_reference_before_start_stays_in_range(self):
        # −1 mod 28 = 27 → day 28
        ctx = compute_cycle_phase(CYCLE_START, 28, date(2025, 12, 31))
        assert ctx.day_of_cycle == 28
        assert ctx.phase == "late_luteal"

    def test_longer_cycle_is_scaled(self):
        # day 15 of 35 → 15 × 28 / 35 = 12 → ovulatory
        ctx = compute_cycle_phase(CYCLE_START, 35, date(2026, 1, 15))
        assert ctx.day_of_cycle == 15
        assert ctx.phase == "ovulatory"
        assert ctx.days_until_next_period == 20

    def test_longer_cycle_late_luteal(self):
        # day 30 of 35 → 24 → late luteal
        ctx = compute_cycle_phase(CYCLE_START, 35, date(2026, 1, 30))
        assert ctx.phase == "late_luteal"
        assert ctx.is_late_luteal

    def test_datetimes_use_whole_elapsed_days(self):
        # 12 hours elapsed → still day 1
        ctx = compute_cycle_phase(datetime(2026, 1, 1, 20, 0), 28, datetime(2026, 1, 2, 8, 0))
        assert ctx.day_of_cycle == 1

    def test_mixed_date_and_datetime_use_calendar_days(self):
        ctx = compute_cycle_phase(CYCLE_START, 28, datetime(2026, 1, 2, 8, 0))
        assert ctx.day_of_cycle == 2

    def test_default_reference_is_now(self):
        ctx = compute_cycle_phase(CYCLE_START)
        assert 1 <= ctx.day_of_cycle <= 28
        assert ctx.days_until_next_period == 28 - ctx.day_of_cycle

    def test_default_reference_with_aware_start(self):
        # An aware start is compared against an aware "now" in the same zone
        ctx = compute_cycle_phase(datetime(2026, 1, 1, tzinfo=timezone.utc))
        assert 1 <= ctx.day_of_cycle <= 28
