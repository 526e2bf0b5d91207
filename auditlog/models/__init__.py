"""
Audit log data models.

All Pydantic models and type definitions are available from this module.
"""

from __future__ import annotations

from .entries import AuditLogEntry, AuditModel, UserInfo
from .types import AuditLogAction, AuditLogProperty

__all__ = [
    # Base
    "AuditModel",
    # Records
    "AuditLogEntry",
    "UserInfo",
    # Enums
    "AuditLogAction",
    "AuditLogProperty",
]
