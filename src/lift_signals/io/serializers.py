"""
Row ↔ value-type mapping at the row-store boundary.

Raw rows (plain dicts as returned by the hosted database or read from a
JSON document) are validated here and converted into the immutable value
types of core/models.py.  The rules engine never sees a raw row.
"""

import re
from datetime import date, datetime, timedelta
from typing import Any, Iterable

from ..core.achievements import classify_completion
from ..core.config import DEFAULT_BODYWEIGHT_KG
from ..core.formulas import compute_strength_score, grams_to_kg, round_half_up, round_to_nearest
from ..core.models import (
    CompletedSet,
    CycleBadge,
    CycleCompletionInput,
    CycleCompletionResult,
    CycleContext,
    Disruption,
    DisruptionAdjustmentSuggestion,
    HistoricalPRSnapshot,
    PersonalRecord,
    PlannedSession,
    SessionRef,
    StreakResult,
    StrengthScorePoint,
    WeekAdherenceStatus,
)

DISRUPTION_TYPES = (
    "injury",
    "illness",
    "travel",
    "fatigue",
    "equipment_unavailable",
    "unprogrammed_event",
    "other",
)
SEVERITIES = ("minor", "moderate", "major")
PR_TYPES = ("estimated_1rm", "volume", "rep_at_weight")
FINISHED_PROGRAM_STATUSES = ("completed", "archived")
RPE_MIN = 6.0
RPE_MAX = 10.0


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


# =============================================================================
# Field validators
# =============================================================================


def validate_date(date_str: str) -> str:
    """
    Validate an ISO calendar date string.

    Args:
        date_str: Date string to validate

    Returns:
        The same YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        date.fromisoformat(date_str)
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is positive.

    Raises:
        ValidationError: If value is zero or negative
    """
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def validate_choice(value: Any, choices: tuple[str, ...], name: str) -> str:
    """
    Validate that a value is one of a fixed set of strings.

    Raises:
        ValidationError: If value is not in choices
    """
    if value not in choices:
        raise ValidationError(f"Invalid {name}: {value!r}. Must be one of {choices}")
    return value


def validate_rpe(rpe: float | None) -> float | None:
    """
    Validate an optional RPE on the 6–10 scale.

    Raises:
        ValidationError: If rpe is outside [6, 10]
    """
    if rpe is None:
        return None
    if not RPE_MIN <= rpe <= RPE_MAX:
        raise ValidationError(f"rpe must be between {RPE_MIN:g} and {RPE_MAX:g}, got {rpe}")
    return rpe


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present (non-None) key among aliases."""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


def _require(data: dict[str, Any], *keys: str) -> Any:
    value = _pick(data, *keys)
    if value is None:
        raise ValidationError(f"Missing required field: {' / '.join(keys)}")
    return value


def validate_row(data: Any, name: str) -> dict[str, Any]:
    """
    Validate that a row is a JSON object.

    Raises:
        ValidationError: If data is not a dict
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Expected a JSON object for {name}, got {type(data).__name__}: {data!r}")
    return data


def validate_rows(data: Any, name: str) -> list[dict[str, Any]]:
    """
    Validate a list of rows; None counts as an empty list.

    Raises:
        ValidationError: If data is not a list of dicts
    """
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValidationError(f"Expected a list for {name}, got {type(data).__name__}")
    return [validate_row(row, name) for row in data]


def _whole_number(value: Any, name: str) -> int:
    """Convert a count to int, rejecting fractional values instead of truncating."""
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{name} must be a whole number, got {value}")
    return int(value)


def first_related(value: Any) -> dict[str, Any] | None:
    """
    Normalize a joined relation that may arrive as a list or a single row.

    Returns:
        The first related row, or None if absent
    """
    if value is None:
        return None
    if isinstance(value, list):
        return value[0] if value else None
    return value


# =============================================================================
# Row → value type
# =============================================================================


def dict_to_completed_set(data: dict[str, Any]) -> CompletedSet:
    """
    Convert a logged-set row to CompletedSet.

    Accepts both the app's storage format (weight_grams, reps_completed,
    rpe_actual) and the plain format (weight_kg, reps, rpe).

    Raises:
        ValidationError: If data is invalid
    """
    validate_row(data, "set")
    try:
        if data.get("weight_grams") is not None:
            weight_kg = grams_to_kg(float(data["weight_grams"]))
        else:
            weight_kg = float(_require(data, "weight_kg"))
        reps = _whole_number(_require(data, "reps", "reps_completed"), "reps")
        rpe_raw = _pick(data, "rpe", "rpe_actual")
        rpe = float(rpe_raw) if rpe_raw is not None else None
        e1rm_raw = _pick(data, "estimated_1rm_kg")
        e1rm = float(e1rm_raw) if e1rm_raw is not None else None
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid set row {data!r}: {e}") from e

    validate_non_negative(weight_kg, "weight_kg")
    validate_non_negative(reps, "reps")

    return CompletedSet(
        weight_kg=weight_kg,
        reps=reps,
        rpe=validate_rpe(rpe),
        estimated_1rm_kg=e1rm,
    )


def dict_to_snapshot(data: dict[str, Any]) -> HistoricalPRSnapshot:
    """
    Convert a stored snapshot dict to HistoricalPRSnapshot.

    rep_prs keys may be JSON strings ("120") and are re-rounded to 2.5 kg.
    """
    validate_row(data, "PR snapshot")
    rep_rows = data.get("rep_prs") or {}
    if not isinstance(rep_rows, dict):
        raise ValidationError(f"rep_prs must be an object of weight -> reps, got {rep_rows!r}")
    try:
        best_1rm = float(data.get("best_1rm_kg", 0.0))
        best_volume = float(_pick(data, "best_volume_kg", "best_volume_kg_cubed", default=0.0))
        rep_prs: dict[float, int] = {}
        for weight, reps in rep_rows.items():
            bucket = round_to_nearest(float(weight))
            rep_prs[bucket] = max(rep_prs.get(bucket, 0), int(reps))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid PR snapshot: {e}") from e

    validate_non_negative(best_1rm, "best_1rm_kg")
    validate_non_negative(best_volume, "best_volume_kg")
    return HistoricalPRSnapshot(best_1rm_kg=best_1rm, best_volume_kg=best_volume, rep_prs=rep_prs)


def dict_to_week_status(data: dict[str, Any]) -> WeekAdherenceStatus:
    """Convert a per-week adherence row to WeekAdherenceStatus."""
    validate_row(data, "week")
    try:
        counts = {
            name: int(validate_non_negative(_whole_number(data.get(name, 0), name), name))
            for name in ("scheduled", "completed", "skipped_with_disruption", "unaccounted_misses")
        }
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid week row {data!r}: {e}") from e

    return WeekAdherenceStatus(
        week_start_date=validate_date(_require(data, "week_start_date")),
        **counts,
    )


def dict_to_disruption(data: dict[str, Any]) -> Disruption:
    """
    Convert a disruption row to Disruption.

    Accepts "type" or the table column name "disruption_type".
    """
    validate_row(data, "disruption")
    lifts = data.get("affected_lifts")
    if lifts is not None and not isinstance(lifts, (list, tuple)):
        raise ValidationError(f"affected_lifts must be a list or null, got {lifts!r}")

    return Disruption(
        type=validate_choice(_require(data, "type", "disruption_type"), DISRUPTION_TYPES, "disruption type"),
        severity=validate_choice(_require(data, "severity"), SEVERITIES, "severity"),
        affected_lifts=tuple(lifts) if lifts else None,
    )


def dict_to_planned_session(data: dict[str, Any]) -> PlannedSession:
    validate_row(data, "session")
    return PlannedSession(
        id=str(_require(data, "id")),
        primary_lift=str(_require(data, "primary_lift", "lift")),
        status=str(data.get("status", "planned")),
    )


def dict_to_session_ref(data: dict[str, Any]) -> SessionRef:
    """Convert a scheduled-session row to SessionRef (scheduled_date or planned_date)."""
    validate_row(data, "session")
    try:
        week_number = _whole_number(data.get("week_number", 1), "week_number")
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid week_number: {data.get('week_number')!r}") from e

    return SessionRef(
        id=str(_require(data, "id")),
        scheduled_date=validate_date(_require(data, "scheduled_date", "planned_date")),
        lift=str(_require(data, "lift", "primary_lift")),
        week_number=week_number,
    )


def dict_to_completion_input(data: dict[str, Any]) -> CycleCompletionInput:
    """
    Convert program session counts to CycleCompletionInput.

    Raises:
        ValidationError: If counts are negative or completed + skipped
            exceeds the scheduled total
    """
    validate_row(data, "completion counts")
    try:
        total = _whole_number(_pick(data, "total_scheduled", "total_scheduled_sessions", default=0), "total_scheduled")
        completed = _whole_number(_pick(data, "completed", "completed_sessions", default=0), "completed")
        skipped = _whole_number(data.get("skipped_with_disruption", 0), "skipped_with_disruption")
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid completion counts: {e}") from e

    validate_non_negative(total, "total_scheduled")
    validate_non_negative(completed, "completed")
    validate_non_negative(skipped, "skipped_with_disruption")
    if completed + skipped > total:
        raise ValidationError(
            f"completed + skipped_with_disruption ({completed + skipped}) "
            f"exceeds total_scheduled ({total})"
        )
    return CycleCompletionInput(total_scheduled=total, completed=completed, skipped_with_disruption=skipped)


# =============================================================================
# Value type → row
# =============================================================================


def personal_record_to_dict(record: PersonalRecord) -> dict[str, Any]:
    data: dict[str, Any] = {
        "type": record.type,
        "lift": record.lift,
        "value": record.value,
        "session_id": record.session_id,
        "achieved_at": record.achieved_at,
    }
    if record.weight_kg is not None:
        data["weight_kg"] = record.weight_kg
    return data


def streak_to_dict(streak: StreakResult) -> dict[str, Any]:
    return {
        "current_streak": streak.current_streak,
        "longest_streak": streak.longest_streak,
        "last_clean_week_date": streak.last_clean_week_date,
    }


def completion_to_dict(result: CycleCompletionResult) -> dict[str, Any]:
    return {
        "is_complete": result.is_complete,
        "completion_pct": round(result.completion_pct, 4),
        "qualifies_for_badge": result.qualifies_for_badge,
    }


def cycle_context_to_dict(ctx: CycleContext) -> dict[str, Any]:
    return {
        "phase": ctx.phase,
        "day_of_cycle": ctx.day_of_cycle,
        "days_until_next_period": ctx.days_until_next_period,
        "is_ovulatory_window": ctx.is_ovulatory_window,
        "is_late_luteal": ctx.is_late_luteal,
    }


def suggestion_to_dict(suggestion: DisruptionAdjustmentSuggestion) -> dict[str, Any]:
    """Convert a suggestion to a dict, omitting absent optional fields."""
    data: dict[str, Any] = {
        "session_id": suggestion.session_id,
        "action": suggestion.action,
        "rationale": suggestion.rationale,
    }
    if suggestion.reduction_pct is not None:
        data["reduction_pct"] = suggestion.reduction_pct
    if suggestion.reps_reduction is not None:
        data["reps_reduction"] = suggestion.reps_reduction
    if suggestion.substitution_note is not None:
        data["substitution_note"] = suggestion.substitution_note
    return data


# =============================================================================
# Stored rows → core inputs
# =============================================================================


def snapshot_from_record_rows(rows: Iterable[dict[str, Any]]) -> HistoricalPRSnapshot:
    """
    Build the prior-best snapshot from stored personal-record rows.

    Each row carries "type" (or "pr_type"), "value" and, for rep records,
    "weight_kg".  An empty table yields an all-zero snapshot.
    """
    best_1rm = 0.0
    best_volume = 0.0
    rep_prs: dict[float, int] = {}

    for row in rows:
        validate_row(row, "personal record")
        pr_type = validate_choice(_pick(row, "type", "pr_type"), PR_TYPES, "record type")
        try:
            value = float(row["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid personal record row {row!r}") from e

        if pr_type == "estimated_1rm":
            best_1rm = max(best_1rm, value)
        elif pr_type == "volume":
            best_volume = max(best_volume, value)
        elif pr_type == "rep_at_weight" and row.get("weight_kg") is not None:
            bucket = round_to_nearest(float(row["weight_kg"]))
            rep_prs[bucket] = max(rep_prs.get(bucket, 0), int(value))

    return HistoricalPRSnapshot(best_1rm_kg=best_1rm, best_volume_kg=best_volume, rep_prs=rep_prs)


def _monday_of(day: date) -> date:
    return day - timedelta(days=day.weekday())


def _covered_by_disruption(day: str, disruptions: list[dict[str, Any]]) -> bool:
    for d in disruptions:
        start = d.get("affected_date_start")
        if start is None:
            continue
        end = d.get("affected_date_end") or start
        if start <= day <= end:
            return True
    return False


def week_statuses_from_sessions(
    sessions: Iterable[dict[str, Any]],
    disruptions: Iterable[dict[str, Any]],
    today: date | datetime,
) -> list[WeekAdherenceStatus]:
    """
    Aggregate session rows into per-week adherence for the streak calculator.

    Rules:
    - Sessions are bucketed by the Monday of their planned_date.
    - Planned sessions still in the future are not counted as scheduled.
    - A skipped session covered by a disruption (by session id or by the
      disruption's date range) counts as skipped_with_disruption.
    - Any other non-completed session is an unaccounted miss, but only
      once its week has ended.
    - Weeks with nothing scheduled are omitted.

    Args:
        sessions: Rows with id, planned_date, status
        disruptions: Rows with session_ids_affected and/or
            affected_date_start / affected_date_end
        today: Current day

    Returns:
        Week statuses sorted by week_start_date
    """
    today_day = today.date() if isinstance(today, datetime) else today
    today_str = today_day.isoformat()
    disruption_rows = validate_rows(list(disruptions), "disruption")

    disrupted_ids: set[str] = set()
    for d in disruption_rows:
        disrupted_ids.update(d.get("session_ids_affected") or [])

    by_week: dict[date, list[dict[str, Any]]] = {}
    for s in sessions:
        validate_row(s, "session")
        planned = date.fromisoformat(validate_date(_require(s, "planned_date", "scheduled_date")))
        by_week.setdefault(_monday_of(planned), []).append(s)

    statuses: list[WeekAdherenceStatus] = []
    for monday in sorted(by_week):
        week_is_over = (monday + timedelta(days=6)).isoformat() < today_str
        scheduled = completed = skipped_with_disruption = unaccounted = 0

        for s in by_week[monday]:
            status = s.get("status", "planned")
            day = _pick(s, "planned_date", "scheduled_date")
            if day > today_str and status == "planned":
                continue

            scheduled += 1
            if status == "completed":
                completed += 1
            elif status == "skipped" and (
                s.get("id") in disrupted_ids or _covered_by_disruption(day, disruption_rows)
            ):
                skipped_with_disruption += 1
            elif week_is_over:
                unaccounted += 1

        if scheduled > 0:
            statuses.append(
                WeekAdherenceStatus(
                    week_start_date=monday.isoformat(),
                    scheduled=scheduled,
                    completed=completed,
                    skipped_with_disruption=skipped_with_disruption,
                    unaccounted_misses=unaccounted,
                )
            )

    return statuses


# =============================================================================
# Program history → badges and score history
# =============================================================================


def _finished_programs(programs: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Completed or archived programs, oldest version first."""
    finished = []
    for p in programs:
        validate_row(p, "program")
        if p.get("status") not in FINISHED_PROGRAM_STATUSES:
            continue
        try:
            version = _whole_number(_require(p, "version", "cycle_number"), "version")
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid program version in {p!r}") from e
        finished.append({**p, "version": version, "start_date": validate_date(_require(p, "start_date"))})
    return sorted(finished, key=lambda p: p["version"])


def cycle_badges_from_programs(
    programs: Iterable[dict[str, Any]],
    sessions: Iterable[dict[str, Any]],
) -> list[CycleBadge]:
    """
    Cycle badges earned by finished programs.

    Each completed or archived program is scored with classify_completion
    over its own session rows.  Skipped sessions count toward completion
    alongside completed ones; programs without sessions are ignored.

    Args:
        programs: Rows with id, version, start_date, total_weeks, status
        sessions: Rows with program_id and status

    Returns:
        Badges ordered by cycle number
    """
    counts: dict[str, dict[str, int]] = {}
    for s in sessions:
        validate_row(s, "session")
        tally = counts.setdefault(str(_require(s, "program_id")), {"total": 0, "completed": 0, "skipped": 0})
        tally["total"] += 1
        status = s.get("status")
        if status in ("completed", "skipped"):
            tally[status] += 1

    badges: list[CycleBadge] = []
    for p in _finished_programs(programs):
        program_id = str(_require(p, "id"))
        tally = counts.get(program_id)
        if tally is None:
            continue
        result = classify_completion(
            CycleCompletionInput(
                total_scheduled=tally["total"],
                completed=tally["completed"],
                skipped_with_disruption=tally["skipped"],
            )
        )
        if not result.qualifies_for_badge:
            continue
        try:
            week_count = _whole_number(p.get("total_weeks", 0), "total_weeks")
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid total_weeks in program {program_id!r}") from e
        badges.append(
            CycleBadge(
                program_id=program_id,
                cycle_number=p["version"],
                start_date=p["start_date"],
                week_count=week_count,
                completion_pct=result.completion_pct,
            )
        )
    return badges


def _max_kg(row: dict[str, Any], lift: str) -> float:
    grams = row.get(f"{lift}_1rm_grams")
    try:
        if grams is not None:
            return grams_to_kg(float(grams))
        return float(row.get(f"{lift}_1rm_kg") or 0.0)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {lift} max in {row!r}") from e


def _total_kg(row: dict[str, Any]) -> float:
    return sum(_max_kg(row, lift) for lift in ("squat", "bench", "deadlift"))


def strength_history_from_maxes(
    programs: Iterable[dict[str, Any]],
    maxes: Iterable[dict[str, Any]],
    profile: dict[str, Any] | None = None,
) -> list[StrengthScorePoint]:
    """
    Strength score at the start of each finished program.

    Uses the latest maxes recorded on or before the program's start date,
    falling back to the earliest maxes when none predate it.  Sex is female
    only when the profile says so; a missing bodyweight is taken as 85 kg.

    Args:
        programs: Rows with version, start_date, status
        maxes: Rows with recorded_at and squat/bench/deadlift 1RM in grams
            (or *_1rm_kg)
        profile: Row with biological_sex (or sex) and bodyweight_kg

    Returns:
        One point per finished program, ordered by cycle number; empty
        when there are no maxes or no programs
    """
    profile = validate_row(profile or {}, "profile")
    max_rows = sorted(
        (validate_row(m, "maxes") for m in maxes),
        key=lambda m: str(_require(m, "recorded_at")),
    )
    finished = _finished_programs(programs)
    if not max_rows or not finished:
        return []

    sex = "female" if _pick(profile, "biological_sex", "sex") == "female" else "male"
    try:
        bodyweight = float(_pick(profile, "bodyweight_kg", default=DEFAULT_BODYWEIGHT_KG))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid bodyweight_kg: {profile.get('bodyweight_kg')!r}") from e
    validate_positive(bodyweight, "bodyweight_kg")

    points: list[StrengthScorePoint] = []
    for p in finished:
        start = p["start_date"]
        relevant = [m for m in max_rows if str(m["recorded_at"])[:10] <= start]
        row = relevant[-1] if relevant else max_rows[0]
        score = compute_strength_score(_total_kg(row), bodyweight, sex)
        points.append(
            StrengthScorePoint(cycle_number=p["version"], score=int(round_half_up(score)), date=start)
        )
    return points


def cycle_badge_to_dict(badge: CycleBadge) -> dict[str, Any]:
    return {
        "program_id": badge.program_id,
        "cycle_number": badge.cycle_number,
        "start_date": badge.start_date,
        "week_count": badge.week_count,
        "completion_pct": round(badge.completion_pct, 4),
    }


def strength_point_to_dict(point: StrengthScorePoint) -> dict[str, Any]:
    return {"cycle_number": point.cycle_number, "score": point.score, "date": point.date}
