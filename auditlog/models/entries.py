"""
Audit log record models.

Entries are immutable for the duration of a filter/sort call. JSON input may
use camelCase (as produced by the audit log API) or snake_case keys.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .types import AuditLogAction


class AuditModel(BaseModel):
    """Base model for all audit log records."""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class UserInfo(AuditModel):
    """The user who performed an audited action."""

    username: str | None = None
    user_id: str | None = Field(None, alias="userId")
    first_name: str | None = Field(None, alias="firstName")
    last_name: str | None = Field(None, alias="lastName")
    email: str | None = None


_NO_USER = UserInfo()


class AuditLogEntry(AuditModel):
    """A single audited change."""

    time: datetime | None = None
    user: UserInfo | None = None
    action: AuditLogAction | None = None
    application_name: str | None = Field(None, alias="applicationName")
    experiment_label: str | None = Field(None, alias="experimentLabel")
    experiment_id: str | None = Field(None, alias="experimentId")
    bucket_label: str | None = Field(None, alias="bucketLabel")
    changed_property: str | None = Field(None, alias="changedProperty")
    before: str | None = None
    after: str | None = None

    @field_validator("time")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # Naive timestamps are UTC.
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("action", mode="before")
    @classmethod
    def _normalize_action(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def user_info(self) -> UserInfo:
        """The entry's user, or an all-null user when none was recorded."""
        return self.user if self.user is not None else _NO_USER

    @property
    def description(self) -> str:
        return AuditLogAction.describe(self)
