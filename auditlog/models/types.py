"""
Enumerations shared by the audit log models and the filter/sort engine.

`AuditLogProperty` is the field registry: the closed set of keys accepted in
filter masks and sort orders. `AuditLogAction` is the action category of an
entry; its human-readable description is derived from the entry itself.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .entries import AuditLogEntry


class AuditLogProperty(Enum):
    """Field keys usable in filter masks and sort orders.

    The first alias of each member is its canonical key; `user` is also
    reachable as `fullname`.
    """

    FIRSTNAME = ("firstname",)
    LASTNAME = ("lastname",)
    USERNAME = ("username",)
    MAIL = ("mail",)
    ACTION = ("action",)
    EXPERIMENT = ("experiment",)
    BUCKET = ("bucket",)
    APP = ("app",)
    TIME = ("time",)
    ATTR = ("attr",)
    BEFORE = ("before",)
    AFTER = ("after",)
    DESCRIPTION = ("desc",)
    USER = ("user", "fullname")

    @property
    def key(self) -> str:
        """Canonical key of the property."""
        return self.value[0]

    @property
    def aliases(self) -> tuple[str, ...]:
        return self.value

    @classmethod
    def keys(cls) -> list[str]:
        """Every recognized key (aliases included) in declaration order."""
        return [alias for prop in cls for alias in prop.aliases]

    @classmethod
    def for_key(cls, key: str | None) -> AuditLogProperty | None:
        """Look up a property by key, case-insensitively. Unknown keys give None."""
        if key is None:
            return None
        return _PROPERTIES_BY_KEY.get(key.strip().lower())


_PROPERTIES_BY_KEY: dict[str, AuditLogProperty] = {
    alias: prop for prop in AuditLogProperty for alias in prop.aliases
}


class AuditLogAction(str, Enum):
    """Category of change recorded by an audit log entry."""

    UNSPECIFIED_ACTION = "UNSPECIFIED_ACTION"
    EXPERIMENT_CREATED = "EXPERIMENT_CREATED"
    EXPERIMENT_CHANGED = "EXPERIMENT_CHANGED"
    EXPERIMENT_DELETED = "EXPERIMENT_DELETED"
    BUCKET_CREATED = "BUCKET_CREATED"
    BUCKET_CHANGED = "BUCKET_CHANGED"
    BUCKET_DELETED = "BUCKET_DELETED"
    APPLICATION_ROLE_ADDED = "APPLICATION_ROLE_ADDED"
    APPLICATION_ROLE_CHANGED = "APPLICATION_ROLE_CHANGED"
    APPLICATION_ROLE_REMOVED = "APPLICATION_ROLE_REMOVED"

    def __str__(self) -> str:
        return self.value

    @property
    def ordinal(self) -> int:
        """Position in declaration order, used when sorting by action."""
        return _ACTION_ORDER[self]

    @classmethod
    def describe(cls, entry: AuditLogEntry) -> str:
        """Human-readable description of what an entry records. Never None."""
        action = entry.action or cls.UNSPECIFIED_ACTION
        bucket = entry.bucket_label
        change = _describe_change(entry)

        if action is cls.EXPERIMENT_CREATED:
            return "created experiment"
        if action is cls.EXPERIMENT_CHANGED:
            return f"changed {change}" if change else "changed experiment"
        if action is cls.EXPERIMENT_DELETED:
            return "deleted experiment"
        if action is cls.BUCKET_CREATED:
            return f"created bucket {bucket}"
        if action is cls.BUCKET_CHANGED:
            return f"changed bucket {bucket}: {change}" if change else f"changed bucket {bucket}"
        if action is cls.BUCKET_DELETED:
            return f"deleted bucket {bucket}"
        if action is cls.APPLICATION_ROLE_ADDED:
            return f"added role {entry.after}"
        if action is cls.APPLICATION_ROLE_CHANGED:
            return f"changed role from {entry.before} to {entry.after}"
        if action is cls.APPLICATION_ROLE_REMOVED:
            return f"removed role {entry.before}"
        return "unknown action"


_ACTION_ORDER: dict[AuditLogAction, int] = {
    action: index for index, action in enumerate(AuditLogAction)
}


def _describe_change(entry: AuditLogEntry) -> str:
    if not entry.changed_property:
        return ""
    return f"{entry.changed_property} from {entry.before} to {entry.after}"
