"""
Service configuration.

Settings are read from the ``[auditlog]`` table of a TOML file and then
overridden by environment variables:

    AUDITLOG_FETCH_LIMIT   maximum entries fetched per lookup (default 10000)
    AUDITLOG_TIME_ZONE     offset for `time` filters without an options block
"""

from __future__ import annotations

import os
import re
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

ENV_FETCH_LIMIT = "AUDITLOG_FETCH_LIMIT"
ENV_TIME_ZONE = "AUDITLOG_TIME_ZONE"

DEFAULT_FETCH_LIMIT = 10000

_OFFSET_RE = re.compile(r"^[+-]\d{1,2}(:?\d{2})?$")


class AuditLogConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    fetch_limit: int = Field(DEFAULT_FETCH_LIMIT, gt=0, alias="fetch-limit")
    time_zone: str = Field("+0000", alias="time-zone")

    @field_validator("time_zone")
    @classmethod
    def _check_offset(cls, value: str) -> str:
        value = value.strip()
        if not _OFFSET_RE.match(value):
            raise ValueError(f"expected an offset like +0000 or -05:30, got {value!r}")
        return value


def _read_table(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}", path=path) from exc
    table = data.get("auditlog", {})
    if not isinstance(table, dict):
        raise ConfigurationError(f"[auditlog] in {path} must be a table", path=path)
    return table


def load_config(path: Path | None = None) -> AuditLogConfig:
    """
    Load configuration from `path` (if it exists) and the environment.

    Raises:
        ConfigurationError: If a value is invalid.
    """
    values: dict[str, Any] = {}
    if path is not None and path.exists():
        values.update(_read_table(path))

    env_limit = os.getenv(ENV_FETCH_LIMIT, "").strip()
    if env_limit:
        try:
            values["fetch-limit"] = int(env_limit)
        except ValueError as exc:
            raise ConfigurationError(
                f"{ENV_FETCH_LIMIT} must be an integer, got {env_limit!r}",
                setting=ENV_FETCH_LIMIT,
            ) from exc
        values.pop("fetch_limit", None)

    env_zone = os.getenv(ENV_TIME_ZONE, "").strip()
    if env_zone:
        values["time-zone"] = env_zone
        values.pop("time_zone", None)

    try:
        return AuditLogConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid audit log configuration: {exc}", path=path) from exc
