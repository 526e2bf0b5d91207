from __future__ import annotations

from auditlog.models.types import AuditLogProperty

from ..click_compat import RichCommand, click
from ..context import CLIContext
from ..options import output_options
from ..runner import CommandOutput, run_command

_DESCRIPTIONS = {
    AuditLogProperty.FIRSTNAME: "user's first name",
    AuditLogProperty.LASTNAME: "user's last name",
    AuditLogProperty.USERNAME: "username or user id",
    AuditLogProperty.MAIL: "user's email",
    AuditLogProperty.ACTION: "action or its description",
    AuditLogProperty.EXPERIMENT: "experiment label",
    AuditLogProperty.BUCKET: "bucket label",
    AuditLogProperty.APP: "application name",
    AuditLogProperty.TIME: "timestamp, rendered in UTC{+HHMM}",
    AuditLogProperty.ATTR: "changed property",
    AuditLogProperty.BEFORE: "value before the change",
    AuditLogProperty.AFTER: "value after the change",
    AuditLogProperty.DESCRIPTION: "action or its description",
    AuditLogProperty.USER: "first and last name",
}


@click.command(name="keys", cls=RichCommand)
@output_options
@click.pass_obj
def keys_cmd(ctx: CLIContext) -> None:
    """List the field keys usable in filter masks and sort orders."""

    def fn(_: CLIContext, _warnings: list[str]) -> CommandOutput:
        rows = [
            {
                "key": prop.key,
                "aliases": list(prop.aliases[1:]),
                "field": _DESCRIPTIONS[prop],
            }
            for prop in AuditLogProperty
        ]
        return CommandOutput(data={"rows": rows})

    run_command(ctx, command="keys", fn=fn)
