"""
Audit log entry sources.

The service only needs the `AuditLogRepository` contract: fetch up to `limit`
entries, newest first, either for one application, for everything, or for
global (application-less) entries. `InMemoryAuditLogRepository` implements it
over a list, which is what the command line loads from JSON.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError

from .exceptions import RepositoryError
from .models.entries import AuditLogEntry

logger = logging.getLogger(__name__)

_ENTRY_LIST = TypeAdapter(list[AuditLogEntry])
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class AuditLogRepository(Protocol):
    """Fetch contract for audit log entries."""

    def get_audit_log_entry_list(self, application_name: str, limit: int) -> list[AuditLogEntry]:
        """Entries of one application, newest first."""
        ...

    def get_complete_audit_log_entry_list(self, limit: int) -> list[AuditLogEntry]:
        """All entries, newest first."""
        ...

    def get_global_audit_log_entry_list(self, limit: int) -> list[AuditLogEntry]:
        """Entries not bound to an application, newest first."""
        ...


class InMemoryAuditLogRepository:
    """
    Repository over an in-memory collection of entries.

    Every call returns a new list, so callers may filter and sort the result
    in place without affecting each other.
    """

    def __init__(self, entries: Iterable[AuditLogEntry] = ()):
        self._entries: list[AuditLogEntry] = sorted(
            entries, key=lambda e: e.time or _OLDEST, reverse=True
        )

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, entry: AuditLogEntry) -> None:
        self._entries.append(entry)
        self._entries.sort(key=lambda e: e.time or _OLDEST, reverse=True)

    def get_audit_log_entry_list(self, application_name: str, limit: int) -> list[AuditLogEntry]:
        return [e for e in self._entries if e.application_name == application_name][:limit]

    def get_complete_audit_log_entry_list(self, limit: int) -> list[AuditLogEntry]:
        return self._entries[:limit]

    def get_global_audit_log_entry_list(self, limit: int) -> list[AuditLogEntry]:
        return [e for e in self._entries if e.application_name is None][:limit]

    @classmethod
    def from_json(cls, text: str, *, source: str | None = None) -> InMemoryAuditLogRepository:
        """Build a repository from JSON text: a list of entries or ``{"entries": [...]}``."""
        return cls(parse_entries(text, source=source))

    @classmethod
    def from_path(cls, path: Path) -> InMemoryAuditLogRepository:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise RepositoryError(f"Cannot read entries from {path}: {exc}", source=str(path)) from exc
        return cls.from_json(text, source=str(path))


def parse_entries(text: str, *, source: str | None = None) -> list[AuditLogEntry]:
    """Parse and validate audit log entries from JSON text."""
    where = source or "<input>"
    try:
        payload: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RepositoryError(f"Invalid JSON in {where}: {exc}", source=source) from exc

    if isinstance(payload, dict) and "entries" in payload:
        payload = payload["entries"]
    if not isinstance(payload, list):
        raise RepositoryError(
            f"Expected a list of entries in {where}, got {type(payload).__name__}",
            source=source,
        )

    try:
        entries = _ENTRY_LIST.validate_python(payload)
    except ValidationError as exc:
        raise RepositoryError(
            f"Invalid audit log entry in {where}: {exc.error_count()} error(s)\n{exc}",
            source=source,
        ) from exc

    logger.debug("Loaded %d entries from %s", len(entries), where)
    return entries
