"""
CLI entry point using Typer.

Provides commands for deriving training signals:
- init: Create the local row store
- records: Detect personal records for a session
- streak: Compute adherence streaks
- completion: Show cycle completion and badge eligibility
- badges: List cycle badges earned by finished programs
- score: Compute the bodyweight-normalized strength score
- score-history: Show the strength score per finished program
- cycle-phase: Show the menstrual-cycle training phase
- adjust: Suggest adjustments for a reported disruption
- makeup: Check a missed session's makeup window
- performance: Classify a session against its plan
"""

from .app import app
from .commands import achievements, adjustments, formulas  # noqa: F401  (registers commands)


if __name__ == "__main__":
    app()
