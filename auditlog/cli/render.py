from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .results import CommandResult


@dataclass(frozen=True, slots=True)
class RenderSettings:
    output: str  # "table" | "json"
    quiet: bool
    verbosity: int


def _error_title(error_type: str) -> str:
    normalized = (error_type or "").strip()
    mapping = {
        "usage_error": "Usage error",
        "validation_error": "Validation error",
        "file_exists": "File exists",
        "permission_denied": "Permission denied",
        "io_error": "I/O error",
        "config_error": "Configuration error",
        "internal_error": "Internal error",
    }
    return mapping.get(normalized, "Error")


def _render_error_details(
    *,
    stderr: Console,
    command: str,
    error_type: str,
    hint: str | None,
    details: dict[str, Any] | None,
    settings: RenderSettings,
) -> None:
    if settings.quiet:
        return

    if hint:
        stderr.print(f"Hint: {hint}")
    elif error_type == "usage_error":
        stderr.print(f"Hint: run `auditlog {command} --help`")

    if details and settings.verbosity >= 1:
        stderr.print(Panel.fit(Text(json.dumps(details, ensure_ascii=False, indent=2))))


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(_format_cell(v) for v in value)
    if isinstance(value, dict):
        return f"object ({len(value):,} keys)"
    return str(value)


def _table_from_rows(rows: list[dict[str, Any]], columns: list[str] | None = None) -> Table:
    table = Table(show_header=True, header_style="bold")
    if not rows:
        table.add_column("result")
        table.add_row("No results")
        return table
    if columns is None:
        columns = list(rows[0].keys())
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*[_format_cell(row.get(col)) for col in columns])
    return table


def _kv_table(obj: dict[str, Any]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("field")
    table.add_column("value")
    for k, v in obj.items():
        table.add_row(str(k), _format_cell(v))
    return table


def _render_human_data(data: Any, *, columns: list[dict[str, Any]] | None) -> Any:
    if isinstance(data, dict) and isinstance(data.get("rows"), list):
        names = [str(c["name"]) for c in columns] if columns else None
        return _table_from_rows(data["rows"], names)
    if isinstance(data, list) and all(isinstance(row, dict) for row in data):
        return _table_from_rows(data)
    if isinstance(data, dict):
        return _kv_table(data)
    return Panel.fit(Text(str(data) if data is not None else "OK"))


def render_result(result: CommandResult, *, settings: RenderSettings) -> int:
    stdout = Console(file=sys.stdout, force_terminal=False)
    stderr = Console(file=sys.stderr, force_terminal=False)

    if settings.output == "json":
        payload = result.model_dump(by_alias=True, mode="json")
        sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")
        return 0

    if not result.ok:
        if result.error is not None:
            title = _error_title(result.error.type)
            stderr.print(f"{title}: {result.error.message}")
            _render_error_details(
                stderr=stderr,
                command=result.command,
                error_type=result.error.type,
                hint=result.error.hint,
                details=result.error.details,
                settings=settings,
            )
        else:
            stderr.print("Error")
        return 0

    renderable: Any
    if result.command == "version" and isinstance(result.data, dict):
        renderable = Text(result.data.get("version", ""), style="bold")
    else:
        renderable = _render_human_data(result.data, columns=result.meta.columns)
    stdout.print(renderable)

    for artifact in result.artifacts:
        if not settings.quiet:
            stderr.print(f"Wrote {artifact.rows_written or 0:,} rows to {artifact.path}")

    return 0
