from __future__ import annotations

from pathlib import Path

import auditlog

from .click_compat import RichGroup, click
from .context import CLIContext
from .logging import configure_logging, restore_logging
from .paths import get_paths


@click.group(
    name="auditlog",
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    cls=RichGroup,
)
@click.option(
    "--output",
    type=click.Choice(["table", "json"]),
    default="table",
)
@click.option("--json", "json_flag", is_flag=True, help="Alias for --output json.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-essential stderr output.")
@click.option("-v", "verbose", count=True, help="Increase verbosity (-v, -vv).")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: user config dir).",
)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None)
@click.option("--no-log-file", is_flag=True, help="Disable file logging explicitly.")
@click.version_option(version=auditlog.__version__, prog_name="auditlog")
@click.pass_context
def cli(
    click_ctx: click.Context,
    *,
    output: str,
    json_flag: bool,
    quiet: bool,
    verbose: int,
    config_path: Path | None,
    log_file: str | None,
    no_log_file: bool,
) -> None:
    if click_ctx.invoked_subcommand is None:
        click.echo(click_ctx.get_help())
        raise click.exceptions.Exit(0)

    out = "json" if json_flag else output
    paths = get_paths()
    effective_log_file = Path(log_file) if log_file else paths.log_file
    enable_log_file = not no_log_file

    click_ctx.obj = CLIContext(
        output=out,  # type: ignore[arg-type]
        quiet=quiet,
        verbosity=verbose,
        config_path=config_path,
        log_file=effective_log_file,
        enable_log_file=enable_log_file,
        _paths=paths,
    )

    previous_logging = configure_logging(
        verbosity=verbose,
        log_file=effective_log_file,
        enable_file=enable_log_file,
    )
    click_ctx.call_on_close(lambda: restore_logging(previous_logging))


# Register commands
from .commands.keys_cmd import keys_cmd as _keys_cmd  # noqa: E402
from .commands.query_cmd import query_cmd as _query_cmd  # noqa: E402
from .commands.version_cmd import version_cmd as _version_cmd  # noqa: E402

cli.add_command(_version_cmd)
cli.add_command(_keys_cmd)
cli.add_command(_query_cmd)
