"""Adjustment commands: adjust, makeup, performance."""

import json
from datetime import date
from typing import Annotated, Any, Optional

import typer

from ...core.disruptions import suggest_adjustments
from ...core.engine.config_loader import get_display_defaults
from ...core.makeup_window import is_makeup_window_expired, makeup_window_end
from ...core.models import CompletedSet
from ...core.performance import (
    classify_performance,
    compute_lift_trend,
    session_completion_pct,
)
from ...io.row_store import load_json_object
from ...io.serializers import (
    ValidationError,
    dict_to_completed_set,
    dict_to_disruption,
    dict_to_planned_session,
    dict_to_session_ref,
    suggestion_to_dict,
    validate_date,
    validate_positive,
    validate_rows,
)
from .. import views
from ..app import InputFile, JsonOption, app


def _planned_weights(rows: list[dict[str, Any]]) -> dict[str, float]:
    """Planned top-set weight per session id, for rows that carry one."""
    weights = {}
    for row in rows:
        if row.get("planned_weight_kg") is None:
            continue
        try:
            weight = float(row["planned_weight_kg"])
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid planned_weight_kg in session {row.get('id')!r}") from e
        weights[str(row["id"])] = validate_positive(weight, "planned_weight_kg")
    return weights


@app.command()
def adjust(
    input_file: InputFile,
    json_out: JsonOption = False,
) -> None:
    """
    Suggest session adjustments for a reported disruption.

    The input document holds "disruption" and "sessions" (id, primary_lift,
    status, optional planned_weight_kg).  Only sessions still planned are
    adjusted.
    """
    try:
        doc = load_json_object(input_file)
        disruption = dict_to_disruption(doc["disruption"])
        session_rows = validate_rows(doc.get("sessions"), "session")
        sessions = [dict_to_planned_session(s) for s in session_rows]
        weights = _planned_weights(session_rows)
    except KeyError as e:
        views.print_error(f"Missing required field: {e}")
        raise typer.Exit(1)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    upcoming = [s for s in sessions if s.status == "planned"]
    suggestions = suggest_adjustments(disruption, upcoming)

    if json_out:
        print(json.dumps([suggestion_to_dict(s) for s in suggestions], indent=2))
        return

    if not suggestions:
        views.console.print("[yellow]No adjustments suggested for this disruption.[/yellow]")
        return

    increment = get_display_defaults()["rounding_increment_kg"]
    views.console.print(views.format_suggestions_table(suggestions, weights, increment))


@app.command()
def makeup(
    input_file: InputFile,
    today: Annotated[
        Optional[str],
        typer.Option("--today", help="Current date (YYYY-MM-DD); defaults to today"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Check whether a missed session can still be made up.

    The input document holds "missed_session" and "sessions" (every session
    of the current cycle with id, scheduled_date and lift).
    """
    try:
        doc = load_json_object(input_file)
        missed = dict_to_session_ref(doc["missed_session"])
        sessions = [dict_to_session_ref(s) for s in validate_rows(doc.get("sessions"), "session")]
        current = date.fromisoformat(validate_date(today)) if today else date.today()
    except KeyError as e:
        views.print_error(f"Missing required field: {e}")
        raise typer.Exit(1)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    window_end = makeup_window_end(missed, sessions)
    expired = is_makeup_window_expired(missed, sessions, current)

    if json_out:
        print(json.dumps({
            "session_id": missed.id,
            "window_end": window_end.isoformat(),
            "today": current.isoformat(),
            "expired": expired,
        }, indent=2))
        return

    if expired:
        views.print_warning(f"Makeup window for {missed.id} closed on {window_end.isoformat()}")
    else:
        views.print_success(f"{missed.id} can be made up through {window_end.isoformat()}")


def _session_sets(row: dict[str, Any]) -> list[CompletedSet]:
    return [dict_to_completed_set(s) for s in validate_rows(row.get("sets"), "set")]


@app.command()
def performance(
    input_file: InputFile,
    json_out: JsonOption = False,
) -> None:
    """
    Classify a session against its plan and show the lift's 1RM trend.

    The input document holds "sets" and "planned_count" for the current
    session, plus optional "lift" and "history" (earlier sessions, newest
    first, each with "sets" and optional "planned_count").
    """
    try:
        doc = load_json_object(input_file)
        sets = _session_sets(doc)
        planned_count = int(doc.get("planned_count", 0))
        history = [
            (_session_sets(h), int(h["planned_count"]) if h.get("planned_count") is not None else None)
            for h in validate_rows(doc.get("history"), "history session")
        ]
    except (TypeError, ValueError) as e:
        views.print_error(f"Invalid planned_count: {e}")
        raise typer.Exit(1)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    pct = session_completion_pct(sets, planned_count)
    verdict = classify_performance(pct)

    trend = None
    lift = doc.get("lift")
    if lift is not None:
        completion_pcts: list[float | None] = [pct]
        for past_sets, past_planned in history:
            completion_pcts.append(
                session_completion_pct(past_sets, past_planned) if past_planned is not None else None
            )
        trend = compute_lift_trend(
            str(lift),
            [sets] + [past_sets for past_sets, _ in history],
            completion_pcts,
        )

    if json_out:
        result: dict[str, Any] = {
            "completion_pct": round(pct, 2),
            "performance_vs_plan": verdict,
        }
        if trend is not None:
            result["trend"] = {
                "lift": trend.lift,
                "estimated_1rm_kg": round(trend.estimated_1rm_kg, 2),
                "trend": trend.trend,
                "sessions_logged": trend.sessions_logged,
                "avg_completion_pct": round(trend.avg_completion_pct, 2),
            }
        print(json.dumps(result, indent=2))
        return

    views.console.print(f"Session completion: [bold]{pct:.0f}%[/bold] ({verdict})")
    if trend is not None:
        views.console.print(views.format_trend_display(trend))
