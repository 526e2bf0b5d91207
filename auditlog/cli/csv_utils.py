from __future__ import annotations

import csv
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from auditlog.matching import format_time_like_ui
from auditlog.models.entries import AuditLogEntry

ENTRY_COLUMNS = [
    "time",
    "username",
    "firstName",
    "lastName",
    "email",
    "action",
    "description",
    "application",
    "experiment",
    "bucket",
    "attribute",
    "before",
    "after",
]


@dataclass(frozen=True, slots=True)
class CsvWriteResult:
    rows_written: int
    bytes_written: int


def entry_row(entry: AuditLogEntry, *, time_zone: str) -> dict[str, Any]:
    """Flatten an entry into display columns, rendering time like the UI does."""
    user = entry.user_info
    return {
        "time": format_time_like_ui(entry.time, time_zone),
        "username": user.username or user.user_id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "action": str(entry.action) if entry.action is not None else None,
        "description": entry.description,
        "application": entry.application_name,
        "experiment": entry.experiment_label,
        "bucket": entry.bucket_label,
        "attribute": entry.changed_property,
        "before": entry.before,
        "after": entry.after,
    }


def to_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def write_csv(
    *,
    path: Path,
    rows: Iterable[dict[str, Any]],
    fieldnames: list[str],
    bom: bool = False,
) -> CsvWriteResult:
    path.parent.mkdir(parents=True, exist_ok=True)
    encoding = "utf-8-sig" if bom else "utf-8"
    rows_written = 0

    with path.open("w", newline="", encoding=encoding) as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow({k: to_cell(v) for k, v in row.items()})
            rows_written += 1

    bytes_written = path.stat().st_size
    return CsvWriteResult(rows_written=rows_written, bytes_written=bytes_written)
