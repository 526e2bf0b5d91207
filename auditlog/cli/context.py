from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from auditlog.config import AuditLogConfig, load_config
from auditlog.exceptions import AuditLogError, ConfigurationError, RepositoryError

from .errors import CLIError
from .paths import CliPaths, get_paths
from .results import Artifact, CommandMeta, CommandResult, ErrorInfo

OutputFormat = Literal["table", "json"]


@dataclass
class CLIContext:
    output: OutputFormat
    quiet: bool
    verbosity: int
    config_path: Path | None
    log_file: Path | None
    enable_log_file: bool

    _paths: CliPaths = field(default_factory=get_paths)
    _config: AuditLogConfig | None = None

    @property
    def paths(self) -> CliPaths:
        return self._paths

    def effective_config_path(self) -> Path:
        return self.config_path or self.paths.config_path

    def load_config(self) -> AuditLogConfig:
        if self._config is None:
            self._config = load_config(self.effective_config_path())
        return self._config


def exit_code_for_exception(exc: Exception) -> int:
    if isinstance(exc, CLIError):
        return exc.exit_code
    if isinstance(exc, ConfigurationError):
        return 2
    if isinstance(exc, (RepositoryError, AuditLogError)):
        return 1
    return 1


def error_info_for_exception(exc: Exception) -> ErrorInfo:
    if isinstance(exc, CLIError):
        return ErrorInfo(type=exc.error_type, message=exc.message, details=exc.details)
    if isinstance(exc, ConfigurationError):
        details = {"path": str(exc.path)} if exc.path is not None else None
        return ErrorInfo(type="config_error", message=exc.message, details=details)
    if isinstance(exc, RepositoryError):
        details = {"source": exc.source} if exc.source is not None else None
        return ErrorInfo(type="io_error", message=exc.message, details=details)
    return ErrorInfo(type="internal_error", message=str(exc), details=None)


def build_result(
    *,
    ok: bool,
    command: str,
    started_at: float,
    data: Any | None,
    artifacts: list[Artifact] | None = None,
    warnings: list[str],
    config_path: Path | None = None,
    columns: list[dict[str, Any]] | None = None,
    error: ErrorInfo | None = None,
) -> CommandResult:
    duration_ms = int(max(0.0, (time.time() - started_at) * 1000))
    meta = CommandMeta(
        duration_ms=duration_ms,
        config_path=str(config_path) if config_path is not None else None,
        columns=columns,
    )
    return CommandResult(
        ok=ok,
        command=command,
        data=data,
        artifacts=artifacts or [],
        warnings=warnings,
        meta=meta,
        error=error,
    )
