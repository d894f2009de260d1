"""Shared Typer app object, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..io.row_store import RowStore, get_default_store_path

# Shared --json option type used across all commands
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

# Shared --store option type for commands that read/write the row store
StoreOption = Annotated[
    Optional[Path],
    typer.Option("--store", "-p", help="Path to row store JSONL file"),
]

# Positional JSON input document for commands that read structured rows
InputFile = Annotated[Path, typer.Argument(help="JSON input document")]

app = typer.Typer(
    name="lift-signals",
    help="Training signals for powerlifters: records, streaks, badges, scores and adjustments.",
    no_args_is_help=True,
)


def get_store(store_path: Path | None) -> RowStore:
    """Get row store from path or default location."""
    if store_path is None:
        store_path = get_default_store_path()
    return RowStore(store_path)
