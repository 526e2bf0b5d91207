from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from .click_compat import click
from .context import CLIContext

F = TypeVar("F", bound=Callable[..., object])


def _apply_output(ctx: click.Context, param: click.Parameter, value: str | bool | None) -> None:
    """Let subcommands override the group-level output format."""
    obj = ctx.obj
    if not isinstance(obj, CLIContext) or not value:
        return
    obj.output = "json" if param.name == "json_flag" else value  # type: ignore[assignment]


def output_options(fn: F) -> F:
    fn = click.option(
        "--output",
        type=click.Choice(["table", "json"]),
        default=None,
        help="Override output format for this command.",
        callback=_apply_output,
        expose_value=False,
    )(fn)
    fn = click.option(
        "--json",
        "json_flag",
        is_flag=True,
        help="Alias for --output json.",
        callback=_apply_output,
        expose_value=False,
    )(fn)
    return fn
