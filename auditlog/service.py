"""
Audit log service: fetch, filter and sort.

Example:
    from auditlog import AuditLog, InMemoryAuditLogRepository

    audit_log = AuditLog(InMemoryAuditLogRepository(entries), limit=1000)
    entries = audit_log.get_audit_logs(
        "bob,action=created",
        "lastname,-time",
        application_name="checkout",
    )
"""

from __future__ import annotations

import logging
from typing import TypeVar

from .config import AuditLogConfig
from .matching import DEFAULT_TIME_ZONE, filter_entries
from .models.entries import AuditLogEntry
from .repository import AuditLogRepository
from .sorting import sort_entries

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=AuditLogEntry)


def process(
    entries: list[E],
    filter_mask: str | None,
    sort_order: str | None,
    *,
    time_zone: str = DEFAULT_TIME_ZONE,
) -> list[E]:
    """
    Filter entries by a mask, then sort the survivors.

    Both steps may hand back the same list object they were given; callers
    own `entries` until this returns.
    """
    return sort_entries(filter_entries(entries, filter_mask, time_zone=time_zone), sort_order)


class AuditLog:
    """
    Audit log lookups over a repository.

    Every lookup fetches at most `limit` entries, newest first, then applies
    the filter mask and sort order.
    """

    def __init__(
        self,
        repository: AuditLogRepository,
        *,
        limit: int,
        time_zone: str = DEFAULT_TIME_ZONE,
    ):
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")
        self._repository = repository
        self._limit = limit
        self._time_zone = time_zone

    @classmethod
    def from_config(cls, repository: AuditLogRepository, config: AuditLogConfig) -> AuditLog:
        return cls(repository, limit=config.fetch_limit, time_zone=config.time_zone)

    @property
    def limit(self) -> int:
        return self._limit

    def get_audit_logs(
        self,
        filter_mask: str | None = "",
        sort_order: str | None = "",
        *,
        application_name: str | None = None,
    ) -> list[AuditLogEntry]:
        """
        Fetch, filter and sort entries.

        Args:
            filter_mask: Filter mask; blank keeps everything.
            sort_order: Sort order; blank keeps the newest-first fetch order.
            application_name: Restrict to one application. None fetches all
                entries, including global ones.
        """
        if application_name is None:
            entries = self._repository.get_complete_audit_log_entry_list(self._limit)
        else:
            entries = self._repository.get_audit_log_entry_list(application_name, self._limit)
        logger.debug(
            "Fetched %d entries (application=%s, limit=%d)",
            len(entries),
            application_name,
            self._limit,
        )
        return self.filter_and_sort(entries, filter_mask, sort_order)

    def get_global_audit_logs(
        self, filter_mask: str | None = "", sort_order: str | None = ""
    ) -> list[AuditLogEntry]:
        """Fetch, filter and sort entries that belong to no application."""
        entries = self._repository.get_global_audit_log_entry_list(self._limit)
        logger.debug("Fetched %d global entries (limit=%d)", len(entries), self._limit)
        return self.filter_and_sort(entries, filter_mask, sort_order)

    def filter(self, entries: list[E], filter_mask: str | None) -> list[E]:
        return filter_entries(entries, filter_mask, time_zone=self._time_zone)

    def sort(self, entries: list[E], sort_order: str | None) -> list[E]:
        return sort_entries(entries, sort_order)

    def filter_and_sort(
        self, entries: list[E], filter_mask: str | None, sort_order: str | None
    ) -> list[E]:
        return self.sort(self.filter(entries, filter_mask), sort_order)
