"""Achievement commands: init, records, streak, completion, badges."""

import json
from dataclasses import replace
from datetime import date
from typing import Annotated, Optional

import typer

from ...core.achievements import classify_completion, compute_streak, detect_records
from ...core.config import ONE_RM_MAX_REPS
from ...core.formulas import estimate_one_rep_max
from ...core.models import CompletedSet
from ...io.row_store import RECORDS_TABLE, load_json_object
from ...io.serializers import (
    ValidationError,
    completion_to_dict,
    cycle_badge_to_dict,
    cycle_badges_from_programs,
    dict_to_completed_set,
    dict_to_completion_input,
    dict_to_disruption,
    dict_to_snapshot,
    dict_to_week_status,
    personal_record_to_dict,
    snapshot_from_record_rows,
    streak_to_dict,
    validate_date,
    validate_rows,
    week_statuses_from_sessions,
)
from .. import views
from ..app import InputFile, JsonOption, StoreOption, app, get_store


def _with_estimates(sets: list[CompletedSet]) -> list[CompletedSet]:
    """Fill in Epley 1RM estimates for sets that logged an RPE but carry none."""
    result = []
    for s in sets:
        if s.estimated_1rm_kg is None and s.rpe is not None and s.weight_kg > 0 and 1 <= s.reps <= ONE_RM_MAX_REPS:
            s = replace(s, estimated_1rm_kg=estimate_one_rep_max(s.weight_kg, s.reps))
        result.append(s)
    return result


@app.command()
def init(store_path: StoreOption = None) -> None:
    """
    Create an empty local row store.
    """
    store = get_store(store_path)
    if store.exists():
        views.print_info(f"Row store already exists: {store.path}")
        return
    store.init()
    views.print_success(f"Created row store: {store.path}")


@app.command()
def records(
    input_file: InputFile,
    store_path: StoreOption = None,
    user_id: Annotated[
        Optional[str],
        typer.Option("--user", "-u", help="User ID; reads and upserts records in the row store"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Detect personal records for one session.

    The input document holds session_id, lift, sets, and optionally
    snapshot, disruptions and achieved_at.  With --user the prior-best
    snapshot is built from the row store and new records are upserted.
    """
    try:
        doc = load_json_object(input_file)
        sets = _with_estimates([dict_to_completed_set(s) for s in validate_rows(doc.get("sets"), "set")])
        disruptions = [dict_to_disruption(d) for d in validate_rows(doc.get("disruptions"), "disruption")]
        session_id = str(doc["session_id"])
        lift = str(doc["lift"])
    except KeyError as e:
        views.print_error(f"Missing required field: {e}")
        raise typer.Exit(1)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store = get_store(store_path) if user_id is not None else None
    try:
        if store is not None:
            rows = store.load_rows(RECORDS_TABLE, user_id=user_id, lift=lift)
            snapshot = snapshot_from_record_rows(rows)
        else:
            snapshot = dict_to_snapshot(doc.get("snapshot") or {})
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    found = detect_records(
        session_id,
        lift,
        sets,
        snapshot,
        active_disruptions=disruptions,
        achieved_at=doc.get("achieved_at"),
    )

    if store is not None and found:
        written = store.upsert_records(user_id, found)  # type: ignore[arg-type]
        if not json_out:
            views.print_success(f"Stored {written} record(s) in {store.path}")

    if json_out:
        print(json.dumps([personal_record_to_dict(r) for r in found], indent=2))
        return

    views.print_records(found)


@app.command()
def streak(
    input_file: InputFile,
    today: Annotated[
        Optional[str],
        typer.Option("--today", help="Current date (YYYY-MM-DD) for session aggregation"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Compute current and longest adherence streaks.

    The input document holds either "weeks" (per-week adherence rows) or
    "sessions" plus optional "disruptions" to aggregate into weeks.
    """
    try:
        doc = load_json_object(input_file)
        if "weeks" in doc:
            weeks = [dict_to_week_status(w) for w in validate_rows(doc["weeks"], "week")]
        else:
            current = date.fromisoformat(validate_date(today)) if today else date.today()
            weeks = week_statuses_from_sessions(
                validate_rows(doc.get("sessions"), "session"),
                validate_rows(doc.get("disruptions"), "disruption"),
                current,
            )
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    result = compute_streak(weeks)

    if json_out:
        print(json.dumps(streak_to_dict(result), indent=2))
        return

    views.console.print(views.format_streak_display(result))


@app.command()
def completion(
    total_scheduled: Annotated[
        int,
        typer.Option("--scheduled", help="Sessions scheduled in the cycle"),
    ],
    completed: Annotated[
        int,
        typer.Option("--completed", help="Sessions completed"),
    ] = 0,
    skipped_with_disruption: Annotated[
        int,
        typer.Option("--skipped", help="Sessions skipped with a reported disruption"),
    ] = 0,
    json_out: JsonOption = False,
) -> None:
    """
    Show cycle completion and badge eligibility.
    """
    try:
        counts = dict_to_completion_input({
            "total_scheduled": total_scheduled,
            "completed": completed,
            "skipped_with_disruption": skipped_with_disruption,
        })
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    result = classify_completion(counts)

    if json_out:
        print(json.dumps(completion_to_dict(result), indent=2))
        return

    views.console.print(views.format_completion_display(result))


@app.command()
def badges(
    input_file: InputFile,
    json_out: JsonOption = False,
) -> None:
    """
    List cycle badges earned by finished programs.

    The input document holds "programs" (id, version, start_date,
    total_weeks, status) and "sessions" (program_id, status).
    """
    try:
        doc = load_json_object(input_file)
        earned = cycle_badges_from_programs(
            validate_rows(doc.get("programs"), "program"),
            validate_rows(doc.get("sessions"), "session"),
        )
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([cycle_badge_to_dict(b) for b in earned], indent=2))
        return

    if not earned:
        views.console.print("[yellow]No cycle badges earned yet.[/yellow]")
        return
    views.console.print(views.format_badges_table(earned))
