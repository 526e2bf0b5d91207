from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from auditlog.models.entries import AuditModel


class ResultModel(AuditModel):
    model_config = ConfigDict(populate_by_name=True, frozen=False, extra="ignore")


class Artifact(ResultModel):
    type: str
    path: str
    path_is_relative: bool = Field(..., alias="pathIsRelative")
    rows_written: int | None = Field(None, alias="rowsWritten")
    bytes_written: int | None = Field(None, alias="bytesWritten")


class ErrorInfo(ResultModel):
    type: str
    message: str
    hint: str | None = None
    details: dict[str, Any] | None = None


class CommandMeta(ResultModel):
    duration_ms: int = Field(..., alias="durationMs")
    config_path: str | None = Field(None, alias="configPath")
    columns: list[dict[str, Any]] | None = None


class CommandResult(ResultModel):
    ok: bool
    command: str
    data: Any | None = None
    artifacts: list[Artifact] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    meta: CommandMeta
    error: ErrorInfo | None = None
