from __future__ import annotations

import sys
from pathlib import Path

from auditlog.mask import parse_mask
from auditlog.repository import InMemoryAuditLogRepository
from auditlog.service import AuditLog
from auditlog.sorting import DEFAULT_ORDER, parse_sort_order

from ..click_compat import RichCommand, click
from ..context import CLIContext
from ..csv_utils import ENTRY_COLUMNS, entry_row, write_csv
from ..errors import CLIError
from ..options import output_options
from ..results import Artifact
from ..runner import CommandOutput, run_command

TABLE_COLUMNS = ["time", "username", "action", "description", "application", "experiment", "bucket"]


def _load_repository(source: str) -> InMemoryAuditLogRepository:
    if source == "-":
        return InMemoryAuditLogRepository.from_json(sys.stdin.read(), source="<stdin>")
    return InMemoryAuditLogRepository.from_path(Path(source))


def _mask_warnings(filter_mask: str, sort_order: str) -> list[str]:
    warnings: list[str] = []
    if filter_mask.strip() and parse_mask(filter_mask).malformed:
        warnings.append(
            "Filter mask contains a field token with more than one '='; no entries match."
        )
    if sort_order.strip() and sort_order.lower() != DEFAULT_ORDER:
        known = len(parse_sort_order(sort_order))
        given = len([t for t in sort_order.split(",") if t.strip()])
        if known < given:
            warnings.append(f"Ignored {given - known} unknown sort key(s) in {sort_order!r}.")
    return warnings


@click.command(name="query", cls=RichCommand)
@click.argument("source", metavar="FILE", type=str)
@click.option("-f", "--filter", "filter_mask", default="", help="Filter mask, e.g. 'bob,action=created'.")
@click.option("-s", "--sort", "sort_order", default="", help="Sort order, e.g. 'lastname,-time'.")
@click.option("--app", "application_name", default=None, help="Only entries of this application.")
@click.option("--global", "global_only", is_flag=True, help="Only entries without an application.")
@click.option("--limit", type=int, default=None, help="Maximum entries to fetch (default from config).")
@click.option("--time-zone", default=None, help="Offset for displaying and filtering times, e.g. +0100.")
@click.option(
    "--csv",
    "csv_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write all columns of the result to a CSV file.",
)
@output_options
@click.pass_obj
def query_cmd(
    ctx: CLIContext,
    *,
    source: str,
    filter_mask: str,
    sort_order: str,
    application_name: str | None,
    global_only: bool,
    limit: int | None,
    time_zone: str | None,
    csv_path: Path | None,
) -> None:
    """Filter and sort audit log entries loaded from FILE ('-' for stdin)."""

    def fn(cli_ctx: CLIContext, warnings: list[str]) -> CommandOutput:
        if global_only and application_name is not None:
            raise CLIError(
                "--app and --global are mutually exclusive.",
                exit_code=2,
                error_type="usage_error",
            )
        if limit is not None and limit <= 0:
            raise CLIError("--limit must be > 0.", exit_code=2, error_type="usage_error")

        config = cli_ctx.load_config()
        zone = time_zone or config.time_zone
        audit_log = AuditLog(
            _load_repository(source),
            limit=limit or config.fetch_limit,
            time_zone=zone,
        )
        warnings.extend(_mask_warnings(filter_mask, sort_order))

        if global_only:
            entries = audit_log.get_global_audit_logs(filter_mask, sort_order)
        else:
            entries = audit_log.get_audit_logs(
                filter_mask, sort_order, application_name=application_name
            )

        rows = [entry_row(entry, time_zone=zone) for entry in entries]
        artifacts: list[Artifact] = []
        if csv_path is not None:
            written = write_csv(path=csv_path, rows=rows, fieldnames=ENTRY_COLUMNS)
            artifacts.append(
                Artifact(
                    type="csv",
                    path=str(csv_path),
                    path_is_relative=not csv_path.is_absolute(),
                    rows_written=written.rows_written,
                    bytes_written=written.bytes_written,
                )
            )

        if cli_ctx.output == "json":
            data = {
                "entries": [e.model_dump(by_alias=True, mode="json") for e in entries],
                "count": len(entries),
            }
            return CommandOutput(data=data, artifacts=artifacts)
        return CommandOutput(
            data={"rows": rows},
            artifacts=artifacts,
            columns=[{"name": name} for name in TABLE_COLUMNS],
        )

    run_command(ctx, command="query", fn=fn)
