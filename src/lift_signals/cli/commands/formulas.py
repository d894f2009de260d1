"""Formula commands: score, cycle-phase, score-history."""

import json
from datetime import date
from typing import Annotated, Optional

import typer

from ...core.cycle_phase import compute_cycle_phase
from ...core.engine.config_loader import get_profile_defaults
from ...core.formulas import compute_strength_score
from ...io.row_store import load_json_object
from ...io.serializers import (
    ValidationError,
    cycle_context_to_dict,
    strength_history_from_maxes,
    strength_point_to_dict,
    validate_date,
    validate_rows,
)
from .. import views
from ..app import InputFile, JsonOption, app


@app.command()
def score(
    total_kg: Annotated[
        float,
        typer.Option("--total", "-t", help="Squat + bench + deadlift total in kg"),
    ],
    bodyweight_kg: Annotated[
        float,
        typer.Option("--bodyweight-kg", "-w", help="Bodyweight in kg"),
    ],
    sex: Annotated[
        Optional[str],
        typer.Option("--sex", "-s", help="Sex (male/female); defaults to profile config"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Compute the bodyweight-normalized strength score.
    """
    if sex is None:
        sex = get_profile_defaults()["sex"]

    if sex not in ("male", "female"):
        views.print_error("Sex must be 'male' or 'female'")
        raise typer.Exit(1)

    if bodyweight_kg <= 0:
        views.print_error("Bodyweight must be positive")
        raise typer.Exit(1)

    result = compute_strength_score(total_kg, bodyweight_kg, sex)  # type: ignore[arg-type]

    if json_out:
        print(json.dumps({
            "total_kg": total_kg,
            "bodyweight_kg": bodyweight_kg,
            "sex": sex,
            "score": result,
        }, indent=2))
        return

    views.console.print(
        f"Strength score: [bold]{result:.2f}[/bold]  "
        f"({total_kg:.1f} kg total @ {bodyweight_kg:.1f} kg, {sex})"
    )


@app.command("cycle-phase")
def cycle_phase(
    last_period_start: Annotated[
        str,
        typer.Option("--last-period", "-l", help="First day of last period (YYYY-MM-DD)"),
    ],
    cycle_length: Annotated[
        Optional[int],
        typer.Option("--cycle-length", "-c", help="Cycle length in days; defaults to profile config"),
    ] = None,
    on: Annotated[
        Optional[str],
        typer.Option("--on", help="Reference date (YYYY-MM-DD); defaults to today"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the menstrual-cycle training phase on a given day.
    """
    if cycle_length is None:
        cycle_length = get_profile_defaults()["cycle_length_days"]

    if cycle_length <= 0:
        views.print_error("Cycle length must be positive")
        raise typer.Exit(1)

    try:
        start = date.fromisoformat(validate_date(last_period_start))
        reference = date.fromisoformat(validate_date(on)) if on else date.today()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    ctx = compute_cycle_phase(start, cycle_length, reference)

    if json_out:
        print(json.dumps(cycle_context_to_dict(ctx), indent=2))
        return

    views.console.print(views.format_cycle_display(ctx))


@app.command("score-history")
def score_history(
    input_file: InputFile,
    json_out: JsonOption = False,
) -> None:
    """
    Show the strength score at the start of each finished program.

    The input document holds "programs" (version, start_date, status),
    "maxes" (recorded_at plus squat/bench/deadlift 1RM in grams) and an
    optional "profile" (biological_sex, bodyweight_kg).
    """
    try:
        doc = load_json_object(input_file)
        points = strength_history_from_maxes(
            validate_rows(doc.get("programs"), "program"),
            validate_rows(doc.get("maxes"), "maxes"),
            doc.get("profile"),
        )
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([strength_point_to_dict(p) for p in points], indent=2))
        return

    if not points:
        views.console.print("[yellow]No finished programs with recorded maxes.[/yellow]")
        return
    views.console.print(views.format_score_history_table(points))
