"""
Exceptions raised around the audit log engine.

The filter/sort engine itself never raises for malformed masks or sort
orders; these cover configuration and entry sources.
"""

from __future__ import annotations

from pathlib import Path


class AuditLogError(Exception):
    """Base class for all audit log errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigurationError(AuditLogError):
    """Invalid configuration file or environment value."""

    def __init__(self, message: str, *, path: Path | None = None, setting: str | None = None):
        super().__init__(message)
        self.path = path
        self.setting = setting


class RepositoryError(AuditLogError):
    """Entries could not be loaded from their source."""

    def __init__(self, message: str, *, source: str | None = None):
        super().__init__(message)
        self.source = source
