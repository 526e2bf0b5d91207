"""
Predicate evaluation for filter masks.

Every test is a case-insensitive substring match against the string form of
one or more entry fields. A missing field never matches.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from .mask import FilterMask, Predicate, parse_mask
from .models.entries import AuditLogEntry
from .models.types import AuditLogAction, AuditLogProperty

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=AuditLogEntry)

DEFAULT_TIME_ZONE = "+0000"

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_OFFSET_RE = re.compile(r"^([+-])(\d{1,2})(?::?(\d{2}))?$")


def contains(container: Any, contained: Any) -> bool:
    """Case-insensitive substring test. False if either side is None."""
    if container is None or contained is None:
        return False
    return str(contained).lower() in str(container).lower()


def parse_offset(offset: str | None) -> timezone:
    """
    Parse a `+HHMM`, `-HHMM`, `+HH:MM` or `+H` offset into a fixed zone.

    Blank or unparsable offsets fall back to UTC.
    """
    if offset is None:
        return timezone.utc
    match = _OFFSET_RE.match(offset.strip())
    if match is None:
        return timezone.utc
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes or 0))
    if delta >= timedelta(hours=24):
        return timezone.utc
    return timezone(-delta if sign == "-" else delta)


def format_time_like_ui(value: datetime | None, offset: str | None = DEFAULT_TIME_ZONE) -> str | None:
    """
    Render a timestamp the way the audit log UI shows it.

    Format: ``MMM d, yyyy HH:mm:ss a`` in ``UTC<offset>``,
    e.g. ``Mar 5, 2016 09:04:27 AM``.
    """
    if value is None:
        return None
    local = value.astimezone(parse_offset(offset or DEFAULT_TIME_ZONE))
    marker = "AM" if local.hour < 12 else "PM"
    return (
        f"{_MONTHS[local.month - 1]} {local.day}, {local.year} "
        f"{local.hour:02}:{local.minute:02}:{local.second:02} {marker}"
    )


def _null_string(value: str | None) -> str:
    return "null" if value is None else value


def _field_matches(
    entry: AuditLogEntry, prop: AuditLogProperty, pattern: str | None, options: str | None
) -> bool:
    user = entry.user_info
    if prop is AuditLogProperty.FIRSTNAME:
        return contains(user.first_name, pattern)
    if prop is AuditLogProperty.LASTNAME:
        return contains(user.last_name, pattern)
    if prop is AuditLogProperty.USERNAME:
        return contains(user.username, pattern) or contains(user.user_id, pattern)
    if prop is AuditLogProperty.MAIL:
        return contains(user.email, pattern)
    if prop in (AuditLogProperty.ACTION, AuditLogProperty.DESCRIPTION):
        return contains(entry.action, pattern) or contains(AuditLogAction.describe(entry), pattern)
    if prop is AuditLogProperty.EXPERIMENT:
        return contains(entry.experiment_label, pattern)
    if prop is AuditLogProperty.BUCKET:
        return contains(entry.bucket_label, pattern)
    if prop is AuditLogProperty.APP:
        return contains(entry.application_name, pattern)
    if prop is AuditLogProperty.TIME:
        return contains(format_time_like_ui(entry.time, options), pattern)
    if prop is AuditLogProperty.ATTR:
        return contains(entry.changed_property, pattern)
    if prop is AuditLogProperty.BEFORE:
        return contains(entry.before, pattern)
    if prop is AuditLogProperty.AFTER:
        return contains(entry.after, pattern)
    if prop is AuditLogProperty.USER:
        # Missing name parts are rendered, not skipped.
        return contains(f"{_null_string(user.first_name)} {_null_string(user.last_name)}", pattern)
    raise AssertionError(f"Unhandled property: {prop}")


def single_field_search(
    entry: AuditLogEntry,
    key: str | None,
    pattern: str | None,
    options: str | None = None,
    negate: bool = False,
) -> bool:
    """
    Test one field of an entry against a pattern.

    Keys and the fields they check:
        firstname, lastname, mail   user's first name, last name, email
        username                    user's username or user id
        action, desc                action name or its derived description
        experiment, bucket, app     experiment label, bucket label, application
        time                        timestamp rendered like the UI in UTC<options>
        attr, before, after         changed property and its old/new values
        user, fullname              "<first name> <last name>"

    Args:
        entry: The entry to test.
        key: Field key; unknown keys never match.
        pattern: Substring to look for (case-insensitive).
        options: Field-specific options; the zone offset for `time`.
        negate: Invert the result.

    Returns:
        Whether the entry passes the predicate.
    """
    prop = AuditLogProperty.for_key(key)
    matched = prop is not None and _field_matches(entry, prop, pattern, options)
    return matched != negate


def full_text_search(
    entry: AuditLogEntry,
    pattern: str | None,
    options: Mapping[str, str] | None = None,
    negate: bool = False,
) -> bool:
    """
    Test every registry field, and the experiment id, against a pattern.

    The entry matches if any field does; `negate` inverts the overall result.
    """
    options = options or {}
    matched = any(
        single_field_search(entry, key, pattern, options.get(key))
        for key in AuditLogProperty.keys()
    ) or contains(entry.experiment_id, pattern)
    return matched != negate


def matches_predicate(
    entry: AuditLogEntry,
    predicate: Predicate,
    options: Mapping[str, str] | None = None,
) -> bool:
    """Evaluate a single parsed predicate against an entry."""
    if predicate.is_full_text:
        return full_text_search(entry, predicate.pattern, options, negate=predicate.negate)
    return single_field_search(
        entry, predicate.key, predicate.pattern, predicate.options, negate=predicate.negate
    )


def _with_default_time_zone(mask: FilterMask, time_zone: str) -> FilterMask:
    if time_zone == DEFAULT_TIME_ZONE:
        return mask
    fields = tuple(
        Predicate(p.key, p.pattern, p.options or time_zone, p.negate)
        if AuditLogProperty.for_key(p.key) is AuditLogProperty.TIME
        else p
        for p in mask.fields
    )
    options = dict(mask.options)
    for alias in AuditLogProperty.TIME.aliases:
        options.setdefault(alias, time_zone)
    return FilterMask(mask.full_text, fields, options, mask.malformed)


def filter_entries(
    entries: list[E],
    filter_mask: str | FilterMask | None,
    *,
    time_zone: str = DEFAULT_TIME_ZONE,
) -> list[E]:
    """
    Keep the entries that pass every predicate of a filter mask.

    Surviving entries keep their relative order. A blank mask returns
    `entries` itself; a malformed mask returns an empty list.

    Args:
        entries: Entries to filter.
        filter_mask: Raw mask string or an already parsed FilterMask.
        time_zone: Offset used for `time` predicates without an options block.
    """
    mask = filter_mask if isinstance(filter_mask, FilterMask) else parse_mask(filter_mask)
    if mask.malformed:
        return []
    if mask.is_empty:
        return entries

    mask = _with_default_time_zone(mask, time_zone)

    def keep(entry: E) -> bool:
        if not all(matches_predicate(entry, p) for p in mask.fields):
            return False
        if mask.full_text is not None:
            return matches_predicate(entry, mask.full_text, mask.options)
        return True

    kept = [entry for entry in entries if keep(entry)]
    logger.debug("Filter kept %d of %d entries", len(kept), len(entries))
    return kept
