"""
JSONL-backed local row store.

Stands in for the hosted relational store when running the CLI: rows of
every table live in one JSONL file, one JSON object per line, each tagged
with its table name.
"""

import json
from pathlib import Path
from typing import Any

from ..core.models import PersonalRecord
from .serializers import ValidationError, personal_record_to_dict

RECORDS_TABLE = "personal_records"


def _record_key(row: dict[str, Any]) -> tuple[Any, ...]:
    """Conflict key for personal records: user + lift + type + weight.

    Rows written with the table column name "pr_type" share a key with
    rows written as "type".
    """
    pr_type = row.get("type") if row.get("type") is not None else row.get("pr_type")
    return (row.get("user_id"), row.get("lift"), pr_type, row.get("weight_kg"))


class RowStore:
    """
    Manages table rows stored in JSONL format.

    Each line is a JSON object with a "table" field plus the row's columns:
        {"table": "personal_records", "user_id": "u1", "lift": "squat", ...}
    """

    def __init__(self, path: str | Path):
        """
        Initialize the row store.

        Args:
            path: Path to the JSONL file
        """
        self.path = Path(path)

    def exists(self) -> bool:
        """Check if the store file exists."""
        return self.path.exists()

    def init(self) -> None:
        """
        Create an empty store file if it doesn't exist.

        Creates parent directories if needed.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        if not self.path.exists():
            self.path.touch()

    def _load_all(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            raise FileNotFoundError(f"Row store not found: {self.path}. Run 'init' first.")

        rows: list[dict[str, Any]] = []
        with open(self.path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError as e:
                    raise ValidationError(f"Error parsing line {line_num} in {self.path}: {e}") from e
                if not isinstance(data, dict) or "table" not in data:
                    raise ValidationError(f"Line {line_num} in {self.path} has no table name")
                rows.append(data)
        return rows

    def _write_all(self, rows: list[dict[str, Any]]) -> None:
        with open(self.path, "w") as f:
            for row in rows:
                f.write(json.dumps(row, separators=(",", ":")) + "\n")

    def load_rows(self, table: str, **filters: Any) -> list[dict[str, Any]]:
        """
        Load rows of one table, optionally filtered by column equality.

        Args:
            table: Table name
            **filters: column=value pairs every returned row must match

        Returns:
            Rows without the "table" tag, in file order

        Raises:
            FileNotFoundError: If the store file doesn't exist
            ValidationError: If a line cannot be parsed
        """
        result = []
        for row in self._load_all():
            if row["table"] != table:
                continue
            if any(row.get(k) != v for k, v in filters.items()):
                continue
            result.append({k: v for k, v in row.items() if k != "table"})
        return result

    def append_rows(self, table: str, rows: list[dict[str, Any]]) -> None:
        """Append rows to a table."""
        if not self.path.exists():
            raise FileNotFoundError(f"Row store not found: {self.path}. Run 'init' first.")

        with open(self.path, "a") as f:
            for row in rows:
                f.write(json.dumps({"table": table, **row}, separators=(",", ":")) + "\n")

    def upsert_records(self, user_id: str, records: list[PersonalRecord]) -> int:
        """
        Upsert personal records keyed by (user_id, lift, type, weight_kg).

        An existing row is replaced only when the new value is higher, so
        replaying the same detection result is a no-op.

        Args:
            user_id: Owner of the records
            records: Records detected for one session

        Returns:
            Number of rows inserted or replaced
        """
        rows = self._load_all()
        index = {
            _record_key(row): i for i, row in enumerate(rows) if row["table"] == RECORDS_TABLE
        }

        written = 0
        for record in records:
            new_row = {"table": RECORDS_TABLE, "user_id": user_id, **personal_record_to_dict(record)}
            new_row.setdefault("weight_kg", None)
            key = _record_key(new_row)

            if key in index:
                existing = rows[index[key]]
                if float(existing.get("value", 0)) >= record.value:
                    continue
                rows[index[key]] = new_row
            else:
                index[key] = len(rows)
                rows.append(new_row)
            written += 1

        if written:
            self._write_all(rows)
        return written


def load_json_document(path: str | Path) -> Any:
    """
    Load a JSON input document for the CLI.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file is not valid JSON
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input file not found: {p}")
    try:
        with open(p, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {p}: {e}") from e


def load_json_object(path: str | Path) -> dict[str, Any]:
    """
    Load a JSON input document whose top level must be an object.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file is not a JSON object
    """
    data = load_json_document(path)
    if not isinstance(data, dict):
        raise ValidationError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    return data


def get_default_store_path() -> Path:
    """Default row store location (~/.lift-signals/rows.jsonl)."""
    return Path.home() / ".lift-signals" / "rows.jsonl"
