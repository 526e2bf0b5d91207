"""
Multi-key sorting of audit log entries.

A sort order is a comma-separated list of keys, each optionally prefixed with
`-` for descending order, e.g. ``"lastname,-time"``. Terms are applied left to
right; later terms only break ties of earlier ones. Entries missing a value
always end up after entries that have one, in both directions.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from .models.entries import AuditLogEntry
from .models.types import AuditLogAction, AuditLogProperty

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=AuditLogEntry)

DESCENDING_PREFIX = "-"
DEFAULT_ORDER = "-time"


@dataclass(frozen=True)
class SortTerm:
    """One key/direction unit of a sort order."""

    property: AuditLogProperty
    descending: bool = False


def parse_sort_order(sort_order: str | None) -> list[SortTerm]:
    """Parse a sort order string. Unknown keys are skipped."""
    if sort_order is None:
        return []
    terms: list[SortTerm] = []
    for raw in sort_order.lower().split(","):
        raw = raw.strip()
        descending = raw.startswith(DESCENDING_PREFIX)
        key = raw[len(DESCENDING_PREFIX) :] if descending else raw
        prop = AuditLogProperty.for_key(key)
        if prop is None:
            if raw:
                logger.debug("Ignoring unknown sort key %r", key)
            continue
        terms.append(SortTerm(prop, descending))
    return terms


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _cmp_ignore_case(a: str, b: str) -> int:
    return _cmp(a.lower(), b.lower())


def compare_null(a: Any, b: Any, descending: bool) -> int | None:
    """
    Compare two values by presence only.

    Returns None if both are present (compare the values instead), 0 if both
    are missing, and otherwise the result that puts the missing value last
    once the descending flip has been applied.
    """
    if a is not None and b is not None:
        return None
    if a is not None:
        return 1 if descending else -1
    if b is not None:
        return -1 if descending else 1
    return 0


def compare_values(
    a: Any, b: Any, descending: bool, cmp: Callable[[Any, Any], int] = _cmp_ignore_case
) -> int:
    """Compare two possibly-missing values, missing values last."""
    result = compare_null(a, b, descending)
    if result is None:
        return cmp(a, b)
    return result


def _compare_time(a: Any, b: Any) -> int:
    return _cmp(a.timestamp(), b.timestamp())


def _compare_action(a: AuditLogAction, b: AuditLogAction) -> int:
    return _cmp(a.ordinal, b.ordinal)


def compare_property(a: AuditLogEntry, b: AuditLogEntry, term: SortTerm) -> int:
    """
    Compare two entries on a single property, before the direction flip.

    Strings compare case-insensitively, `time` compares instants, `action`
    compares declaration order, and `username` falls back to the user id when
    usernames tie. `desc` always compares the derived descriptions.
    """
    prop = term.property
    desc = term.descending
    user_a = a.user_info
    user_b = b.user_info

    if prop is AuditLogProperty.FIRSTNAME:
        return compare_values(user_a.first_name, user_b.first_name, desc)
    if prop is AuditLogProperty.LASTNAME:
        return compare_values(user_a.last_name, user_b.last_name, desc)
    if prop in (AuditLogProperty.USERNAME, AuditLogProperty.USER):
        result = compare_values(user_a.username, user_b.username, desc)
        if result == 0:
            result = compare_values(user_a.user_id, user_b.user_id, desc)
        return result
    if prop is AuditLogProperty.MAIL:
        return compare_values(user_a.email, user_b.email, desc)
    if prop is AuditLogProperty.ACTION:
        return compare_values(a.action, b.action, desc, _compare_action)
    if prop is AuditLogProperty.EXPERIMENT:
        return compare_values(a.experiment_label, b.experiment_label, desc)
    if prop is AuditLogProperty.BUCKET:
        return compare_values(a.bucket_label, b.bucket_label, desc)
    if prop is AuditLogProperty.APP:
        return compare_values(a.application_name, b.application_name, desc)
    if prop is AuditLogProperty.TIME:
        return compare_values(a.time, b.time, desc, _compare_time)
    if prop is AuditLogProperty.ATTR:
        return compare_values(a.changed_property, b.changed_property, desc)
    if prop is AuditLogProperty.BEFORE:
        return compare_values(a.before, b.before, desc)
    if prop is AuditLogProperty.AFTER:
        return compare_values(a.after, b.after, desc)
    if prop is AuditLogProperty.DESCRIPTION:
        return _cmp_ignore_case(AuditLogAction.describe(a), AuditLogAction.describe(b))
    raise AssertionError(f"Unhandled property: {prop}")


def compare_entries(a: AuditLogEntry, b: AuditLogEntry, terms: list[SortTerm]) -> int:
    """Compare two entries over a chain of sort terms."""
    for term in terms:
        result = compare_property(a, b, term)
        if result != 0:
            return -result if term.descending else result
    return 0


def sort_entries(entries: list[E], sort_order: str | None) -> list[E]:
    """
    Sort entries in place by a sort order string and return them.

    A blank order, or exactly ``-time`` (the order entries are fetched in),
    returns `entries` untouched. Ties keep their relative order.
    """
    if sort_order is None or not sort_order.strip():
        return entries
    if sort_order.lower() == DEFAULT_ORDER:
        return entries

    terms = parse_sort_order(sort_order)
    if terms:
        entries.sort(key=functools.cmp_to_key(lambda a, b: compare_entries(a, b, terms)))
    return entries
