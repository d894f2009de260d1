"""
Unit tests for achievement signals: personal records, streaks and cycle
completion badges.
"""

from datetime import datetime

import pytest

from lift_signals.core.achievements import (
    best_reps_by_weight,
    classify_completion,
    compute_streak,
    detect_records,
    is_clean_week,
    is_gap_week,
    session_volume_kg,
)
from lift_signals.core.config import REP_PR_CAP
from lift_signals.core.models import (
    CompletedSet,
    CycleCompletionInput,
    Disruption,
    HistoricalPRSnapshot,
    WeekAdherenceStatus,
)

STAMP = "2026-03-02T10:00:00+00:00"

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _set(weight: float, reps: int, rpe: float | None = None, e1rm: float | None = None) -> CompletedSet:
    return CompletedSet(weight_kg=weight, reps=reps, rpe=rpe, estimated_1rm_kg=e1rm)


def _snapshot(best_1rm: float = 150.0, best_volume: float = 3000.0, rep_prs: dict | None = None) -> HistoricalPRSnapshot:
    return HistoricalPRSnapshot(
        best_1rm_kg=best_1rm,
        best_volume_kg=best_volume,
        rep_prs=rep_prs if rep_prs is not None else {120.0: 5},
    )


def _detect(sets, snapshot=None, disruptions=None):
    return detect_records(
        "sess-1",
        "squat",
        sets,
        snapshot if snapshot is not None else _snapshot(),
        active_disruptions=disruptions,
        achieved_at=STAMP,
    )


def _types(records) -> list[str]:
    return [r.type for r in records]


def _week(start: str, scheduled: int = 3, misses: int = 0) -> WeekAdherenceStatus:
    return WeekAdherenceStatus(
        week_start_date=start,
        scheduled=scheduled,
        completed=scheduled - misses,
        skipped_with_disruption=0,
        unaccounted_misses=misses,
    )


def _gap(start: str) -> WeekAdherenceStatus:
    return WeekAdherenceStatus(start, 0, 0, 0, 0)


# ===========================================================================
# achievements.py — estimated-1RM PRs
# ===========================================================================

class TestEstimatedOneRepMaxRecord:

    def test_higher_estimate_is_a_record(self):
        records = _detect([_set(140.0, 3, rpe=9.0, e1rm=154.0)])
        assert records[0].type == "estimated_1rm"
        assert records[0].value == 154.0
        assert records[0].weight_kg is None

    def test_equal_estimate_is_not_a_record(self):
        records = _detect([_set(140.0, 3, rpe=9.0, e1rm=150.0)])
        assert "estimated_1rm" not in _types(records)

    def test_rpe_below_threshold_ignored(self):
        records = _detect([_set(140.0, 3, rpe=8.0, e1rm=160.0)])
        assert "estimated_1rm" not in _types(records)

    def test_rpe_at_threshold_counts(self):
        records = _detect([_set(140.0, 3, rpe=8.5, e1rm=160.0)])
        assert "estimated_1rm" in _types(records)

    def test_missing_rpe_ignored(self):
        records = _detect([_set(140.0, 3, e1rm=160.0)])
        assert "estimated_1rm" not in _types(records)

    def test_missing_estimate_ignored(self):
        records = _detect([_set(140.0, 3, rpe=9.5)])
        assert "estimated_1rm" not in _types(records)

    def test_best_eligible_estimate_wins(self):
        sets = [
            _set(140.0, 3, rpe=9.0, e1rm=155.0),
            _set(145.0, 2, rpe=9.5, e1rm=158.0),
            _set(150.0, 2, rpe=7.0, e1rm=170.0),
        ]
        records = _detect(sets)
        assert records[0].value == 158.0


# ===========================================================================
# achievements.py — volume PRs
# ===========================================================================

class TestVolumeRecord:
    """volume = Σ weight × reps over all sets"""

    def test_session_volume(self):
        assert session_volume_kg([_set(100.0, 5), _set(80.0, 10)]) == pytest.approx(1300.0)

    def test_equal_volume_is_not_a_record(self):
        # 6 × (100 × 5) = 3000 == best
        records = _detect([_set(100.0, 5)] * 6)
        assert "volume" not in _types(records)

    def test_higher_volume_is_a_record(self):
        # 7 × 500 = 3500 > 3000
        records = _detect([_set(100.0, 5)] * 7)
        volume = [r for r in records if r.type == "volume"]
        assert len(volume) == 1
        assert volume[0].value == pytest.approx(3500.0)

    def test_volume_ignores_rpe(self):
        records = _detect([_set(100.0, 5, rpe=6.0)] * 7)
        assert "volume" in _types(records)


# ===========================================================================
# achievements.py — rep-at-weight PRs
# ===========================================================================

class TestRepAtWeightRecord:

    def test_weights_bucketed_to_nearest_increment(self):
        # 121 → 120 bucket, 121.25 → 122.5 bucket
        best = best_reps_by_weight([_set(121.0, 4), _set(119.0, 6), _set(121.25, 3)])
        assert best == {120.0: 6, 122.5: 3}

    def test_more_reps_in_rounded_bucket_is_a_record(self):
        records = _detect([_set(121.0, 6)])
        reps = [r for r in records if r.type == "rep_at_weight"]
        assert len(reps) == 1
        assert reps[0].weight_kg == 120.0
        assert reps[0].value == 6

    def test_equal_reps_is_not_a_record(self):
        records = _detect([_set(121.0, 5)])
        assert "rep_at_weight" not in _types(records)

    def test_first_set_at_new_weight_counts(self):
        records = _detect([_set(60.0, 1)])
        reps = [r for r in records if r.type == "rep_at_weight"]
        assert [r.weight_kg for r in reps] == [60.0]

    def test_capped_to_highest_weights(self):
        sets = [_set(w, 3) for w in (100.0, 110.0, 120.0, 130.0, 140.0)]
        records = _detect(sets, _snapshot(best_volume=1e9, rep_prs={}))
        reps = [r for r in records if r.type == "rep_at_weight"]
        assert len(reps) == REP_PR_CAP
        assert [r.weight_kg for r in reps] == [140.0, 130.0, 120.0]

    def test_higher_weight_beats_more_reps(self):
        # The lighter sets carry more reps but the cap keeps the three heaviest buckets
        sets = [_set(90.0, 15), _set(100.0, 12), _set(110.0, 3), _set(120.0, 2), _set(130.0, 1)]
        records = _detect(sets, _snapshot(best_volume=1e9, rep_prs={}))
        reps = [r for r in records if r.type == "rep_at_weight"]
        assert [r.weight_kg for r in reps] == [130.0, 120.0, 110.0]
        assert [r.value for r in reps] == [1, 2, 3]

    def test_sets_in_same_bucket_yield_one_record(self):
        # 121 and 119 both round to 120; the better set wins
        records = _detect([_set(121.0, 4), _set(119.0, 6)], _snapshot(best_volume=1e9, rep_prs={}))
        reps = [r for r in records if r.type == "rep_at_weight"]
        assert [(r.weight_kg, r.value) for r in reps] == [(120.0, 6)]


# ===========================================================================
# achievements.py — disruption gate and ordering
# ===========================================================================

class TestDetectRecords:

    def _record_session(self):
        return [
            _set(140.0, 3, rpe=9.0, e1rm=154.0),
            _set(100.0, 10),
            _set(100.0, 10),
            _set(100.0, 10),
            _set(130.0, 4),
        ]

    def test_major_disruption_suppresses_records(self):
        records = _detect(self._record_session(), disruptions=[Disruption("injury", "major")])
        assert records == []

    @pytest.mark.parametrize("severity", ["minor", "moderate"])
    def test_lesser_disruption_keeps_records(self, severity):
        records = _detect(self._record_session(), disruptions=[Disruption("illness", severity)])
        assert records != []

    def test_ordering(self):
        # 1RM first, then volume (420 + 3000 + 520 = 3940), then reps by weight desc
        records = _detect(self._record_session(), _snapshot(rep_prs={}))
        assert _types(records) == ["estimated_1rm", "volume", "rep_at_weight", "rep_at_weight", "rep_at_weight"]
        assert [r.weight_kg for r in records[2:]] == [140.0, 130.0, 100.0]

    def test_at_most_one_of_each_aggregate(self):
        records = _detect(self._record_session(), _snapshot(rep_prs={}))
        assert _types(records).count("estimated_1rm") <= 1
        assert _types(records).count("volume") <= 1
        assert _types(records).count("rep_at_weight") <= REP_PR_CAP

    def test_records_carry_session_context(self):
        records = _detect(self._record_session())
        for r in records:
            assert r.session_id == "sess-1"
            assert r.lift == "squat"
            assert r.achieved_at == STAMP

    def test_default_timestamp_is_utc_now(self):
        records = detect_records("s", "bench", [_set(60.0, 5)], HistoricalPRSnapshot())
        stamp = datetime.fromisoformat(records[0].achieved_at)
        assert stamp.tzinfo is not None

    def test_empty_session_has_no_records(self):
        assert detect_records("s", "bench", [], HistoricalPRSnapshot()) == []


# ===========================================================================
# achievements.py — streaks
# ===========================================================================

class TestWeekClassification:

    def test_gap_week(self):
        assert is_gap_week(_gap("2026-01-05"))
        assert not is_clean_week(_gap("2026-01-05"))

    def test_clean_week(self):
        assert is_clean_week(_week("2026-01-05"))

    def test_week_with_miss_is_not_clean(self):
        assert not is_clean_week(_week("2026-01-05", misses=1))


class TestComputeStreak:

    def test_empty_input(self):
        result = compute_streak([])
        assert (result.current_streak, result.longest_streak, result.last_clean_week_date) == (0, 0, "")

    def test_gap_week_neither_breaks_nor_extends(self):
        weeks = [
            _week("2026-01-05"),
            _week("2026-01-12"),
            _gap("2026-01-19"),
            _week("2026-01-26"),
        ]
        result = compute_streak(weeks)
        assert result.current_streak == 3
        assert result.longest_streak == 3
        assert result.last_clean_week_date == "2026-01-26"

    def test_miss_resets_current_streak(self):
        weeks = [
            _week("2026-01-05"),
            _week("2026-01-12"),
            _week("2026-01-19"),
            _week("2026-01-26", misses=1),
            _week("2026-02-02"),
        ]
        result = compute_streak(weeks)
        assert result.current_streak == 1
        assert result.longest_streak == 3
        assert result.last_clean_week_date == "2026-02-02"

    def test_latest_week_dirty(self):
        weeks = [_week("2026-01-05"), _week("2026-01-12", misses=2)]
        result = compute_streak(weeks)
        assert result.current_streak == 0
        assert result.longest_streak == 1
        assert result.last_clean_week_date == ""

    def test_trailing_gap_week_skipped(self):
        weeks = [_week("2026-01-05"), _week("2026-01-12"), _gap("2026-01-19")]
        result = compute_streak(weeks)
        assert result.current_streak == 2
        assert result.last_clean_week_date == "2026-01-12"

    def test_unsorted_input_is_sorted(self):
        weeks = [
            _week("2026-01-26"),
            _week("2026-01-05", misses=1),
            _week("2026-01-19"),
            _week("2026-01-12"),
        ]
        result = compute_streak(weeks)
        assert result.current_streak == 3
        assert result.longest_streak == 3

    def test_current_never_exceeds_longest(self):
        weeks = [_week(f"2026-0{m}-0{d}", misses=int((m + d) % 3 == 0)) for m in (1, 2) for d in (1, 3, 5, 7)]
        result = compute_streak(weeks)
        assert result.current_streak <= result.longest_streak


# ===========================================================================
# achievements.py — cycle completion
# ===========================================================================

class TestClassifyCompletion:
    """completion = (completed + skipped_with_disruption) / total"""

    def test_zero_scheduled(self):
        result = classify_completion(CycleCompletionInput(0, 0, 0))
        assert result.completion_pct == 0.0
        assert not result.is_complete
        assert not result.qualifies_for_badge

    def test_badge_threshold_inclusive(self):
        # (6 + 2) / 10 = 0.8
        result = classify_completion(CycleCompletionInput(10, 6, 2))
        assert result.completion_pct == pytest.approx(0.8)
        assert result.qualifies_for_badge
        assert not result.is_complete

    def test_just_below_badge_threshold(self):
        result = classify_completion(CycleCompletionInput(10000, 7999, 0))
        assert not result.qualifies_for_badge

    def test_disruption_skips_count_as_completed(self):
        result = classify_completion(CycleCompletionInput(12, 9, 3))
        assert result.completion_pct == 1.0
        assert result.is_complete
        assert result.qualifies_for_badge
