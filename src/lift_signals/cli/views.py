"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of derived training signals.
"""

from rich.console import Console
from rich.table import Table

from ..core.formulas import round_to_nearest
from ..core.models import (
    CycleBadge,
    CycleCompletionResult,
    CycleContext,
    DisruptionAdjustmentSuggestion,
    LiftTrend,
    PersonalRecord,
    StreakResult,
    StrengthScorePoint,
)

console = Console()

_PR_LABELS = {
    "estimated_1rm": "Estimated 1RM",
    "volume": "Session volume",
    "rep_at_weight": "Reps at weight",
}


def format_records_table(records: list[PersonalRecord]) -> Table:
    """
    Create a Rich table of personal records.

    Args:
        records: Records detected for one session

    Returns:
        Rich Table object
    """
    table = Table(title="Personal Records")

    table.add_column("Type", style="magenta")
    table.add_column("Lift", style="cyan")
    table.add_column("Value", justify="right", style="bold")
    table.add_column("@ Weight", justify="right")

    for record in records:
        if record.type == "rep_at_weight":
            value = f"{int(record.value)} reps"
        else:
            value = f"{record.value:.1f} kg"
        weight = f"{record.weight_kg:.1f} kg" if record.weight_kg is not None else "-"
        table.add_row(_PR_LABELS[record.type], record.lift, value, weight)

    return table


def print_records(records: list[PersonalRecord]) -> None:
    if not records:
        console.print("[yellow]No new personal records this session.[/yellow]")
        return
    console.print(format_records_table(records))


def format_suggestions_table(
    suggestions: list[DisruptionAdjustmentSuggestion],
    planned_weights: dict[str, float] | None = None,
    rounding_increment_kg: float = 2.5,
) -> Table:
    """
    Create a Rich table of disruption adjustment suggestions.

    Args:
        suggestions: Suggestions to display
        planned_weights: Planned top-set weight per session id, if known
        rounding_increment_kg: Plate step for the adjusted weight column

    Returns:
        Rich Table object
    """
    weights = planned_weights or {}
    table = Table(title="Suggested Adjustments")

    table.add_column("Session", style="cyan")
    table.add_column("Action", style="magenta")
    table.add_column("Change", justify="right")
    table.add_column("New weight", justify="right", style="bold")
    table.add_column("Rationale")

    for s in suggestions:
        if s.reduction_pct is not None:
            change = f"-{s.reduction_pct}%"
        elif s.reps_reduction is not None:
            change = f"-{s.reps_reduction} reps"
        else:
            change = "-"

        new_weight = "-"
        if s.reduction_pct is not None and s.session_id in weights:
            adjusted = weights[s.session_id] * (1 - s.reduction_pct / 100)
            new_weight = f"{round_to_nearest(adjusted, rounding_increment_kg):.1f} kg"

        rationale = s.rationale
        if s.substitution_note:
            rationale += f" [dim]({s.substitution_note})[/dim]"

        table.add_row(s.session_id, s.action, change, new_weight, rationale)

    return table


def format_badges_table(badges: list[CycleBadge]) -> Table:
    table = Table(title="Cycle Badges")

    table.add_column("Cycle", justify="right", style="cyan")
    table.add_column("Started")
    table.add_column("Weeks", justify="right")
    table.add_column("Completion", justify="right", style="bold green")

    for b in badges:
        table.add_row(str(b.cycle_number), b.start_date, str(b.week_count), f"{b.completion_pct * 100:.0f}%")

    return table


def format_score_history_table(points: list[StrengthScorePoint]) -> Table:
    """
    Create a Rich table of strength scores per program cycle.

    The change column compares each cycle with the one before it.
    """
    table = Table(title="Strength Score History")

    table.add_column("Cycle", justify="right", style="cyan")
    table.add_column("Started")
    table.add_column("Score", justify="right", style="bold")
    table.add_column("Change", justify="right")

    previous = None
    for p in points:
        change = "-" if previous is None else f"{p.score - previous:+d}"
        table.add_row(str(p.cycle_number), p.date, str(p.score), change)
        previous = p.score

    return table


def format_streak_display(streak: StreakResult) -> str:
    lines = [
        "Adherence streak",
        f"- Current: {streak.current_streak} clean week(s)",
        f"- Longest: {streak.longest_streak} clean week(s)",
        f"- Last clean week: {streak.last_clean_week_date or 'none'}",
    ]
    return "\n".join(lines)


def format_completion_display(result: CycleCompletionResult) -> str:
    badge = "[green]yes[/green]" if result.qualifies_for_badge else "no"
    return "\n".join(
        [
            "Cycle completion",
            f"- Completion: {result.completion_pct * 100:.1f}%",
            f"- Complete: {'yes' if result.is_complete else 'no'}",
            f"- Badge earned: {badge}",
        ]
    )


def format_cycle_display(ctx: CycleContext) -> str:
    lines = [
        f"Cycle phase: [bold]{ctx.phase.replace('_', ' ')}[/bold]",
        f"- Day of cycle: {ctx.day_of_cycle}",
        f"- Days until next period: {ctx.days_until_next_period}",
    ]
    if ctx.is_ovulatory_window:
        lines.append("- Ovulatory window")
    if ctx.is_late_luteal:
        lines.append("- Late luteal")
    return "\n".join(lines)


def format_trend_display(trend: LiftTrend) -> str:
    return "\n".join(
        [
            f"{trend.lift} trend: [bold]{trend.trend}[/bold]",
            f"- Latest estimated 1RM: {trend.estimated_1rm_kg:.1f} kg",
            f"- Sessions logged: {trend.sessions_logged}",
            f"- Avg completion: {trend.avg_completion_pct:.0f}%",
        ]
    )


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
