from __future__ import annotations

import sys
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from rich.console import Console

from .click_compat import click
from .context import (
    CLIContext,
    build_result,
    error_info_for_exception,
    exit_code_for_exception,
)
from .render import RenderSettings, render_result
from .results import Artifact, CommandResult


@dataclass(frozen=True, slots=True)
class CommandOutput:
    data: Any | None = None
    artifacts: list[Artifact] | None = None
    warnings: list[str] | None = None
    columns: list[dict[str, Any]] | None = None
    exit_code: int = 0


def _emit_warnings(*, ctx: CLIContext, warnings: list[str]) -> None:
    if ctx.quiet:
        return
    if not warnings:
        return
    stderr = Console(file=sys.stderr, force_terminal=False)
    for w in warnings:
        stderr.print(f"Warning: {w}")


def emit_result(ctx: CLIContext, result: CommandResult) -> None:
    render_result(
        result,
        settings=RenderSettings(
            output=ctx.output,
            quiet=ctx.quiet,
            verbosity=ctx.verbosity,
        ),
    )
    if ctx.output != "json":
        _emit_warnings(ctx=ctx, warnings=result.warnings)


CommandFn = Callable[[CLIContext, list[str]], CommandOutput]


def run_command(ctx: CLIContext, *, command: str, fn: CommandFn) -> None:
    started = time.time()
    warnings: list[str] = []
    try:
        out = fn(ctx, warnings)
        result = build_result(
            ok=True,
            command=command,
            started_at=started,
            data=out.data,
            artifacts=out.artifacts,
            warnings=(out.warnings or warnings),
            config_path=ctx.config_path,
            columns=out.columns,
        )
        emit_result(ctx, result)
        raise click.exceptions.Exit(out.exit_code)
    except click.exceptions.Exit:
        raise
    except Exception as exc:
        code = exit_code_for_exception(exc)
        result = build_result(
            ok=False,
            command=command,
            started_at=started,
            data=None,
            warnings=warnings,
            config_path=ctx.config_path,
            error=error_info_for_exception(exc),
        )
        emit_result(ctx, result)
        raise click.exceptions.Exit(code) from exc
