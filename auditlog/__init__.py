"""
Filtering and sorting of audit log entries.

Example:
    from auditlog import process

    matching = process(entries, "action=created,time={+0500}09:", "lastname,-time")
"""

from __future__ import annotations

from .config import AuditLogConfig, load_config
from .exceptions import AuditLogError, ConfigurationError, RepositoryError
from .mask import FilterMask, Predicate, parse_mask
from .matching import filter_entries, full_text_search, single_field_search
from .models import AuditLogAction, AuditLogEntry, AuditLogProperty, UserInfo
from .repository import AuditLogRepository, InMemoryAuditLogRepository
from .service import AuditLog, process
from .sorting import SortTerm, parse_sort_order, sort_entries

__version__ = "0.3.0"

__all__ = [
    "__version__",
    # Service
    "AuditLog",
    "process",
    # Engine
    "FilterMask",
    "Predicate",
    "SortTerm",
    "parse_mask",
    "parse_sort_order",
    "filter_entries",
    "sort_entries",
    "single_field_search",
    "full_text_search",
    # Models
    "AuditLogAction",
    "AuditLogEntry",
    "AuditLogProperty",
    "UserInfo",
    # Repository
    "AuditLogRepository",
    "InMemoryAuditLogRepository",
    # Config
    "AuditLogConfig",
    "load_config",
    # Errors
    "AuditLogError",
    "ConfigurationError",
    "RepositoryError",
]
