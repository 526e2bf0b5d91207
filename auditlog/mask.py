"""
Filter mask parser.

A filter mask is a compact, comma-separated list of search predicates:

    mask          := [fulltext_token] ("," field_token)*
    field_token   := key "=" ["{" options "}"] ["\\-"] pattern
    fulltext_token:= ["\\-"] pattern

Example:
    from auditlog.mask import parse_mask

    mask = parse_mask("bob,action=created,time={+0500}09:00")
    mask.full_text   # Predicate(key=None, pattern="bob", ...)
    mask.fields      # (Predicate(key="action", ...), Predicate(key="time", ...))

A comma only separates tokens when it is directly followed by a registry key
and `=`; any other comma is part of the pattern, so `before=a,b` searches for
the literal `a,b`. Matching is case-insensitive, so every token is
lower-cased.

Malformed masks never raise: a field token with more than one `=` marks the
whole mask as malformed, and filtering with it yields an empty result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .models.types import AuditLogProperty

logger = logging.getLogger(__name__)

NEGATION_PREFIX = "\\-"
OPTIONS_OPEN = "{"
OPTIONS_CLOSE = "}"
SEPARATOR = ","
ASSIGN = "="


@dataclass(frozen=True)
class Predicate:
    """One search unit of a filter mask. `key` is None for the full-text token."""

    key: str | None
    pattern: str
    options: str = ""
    negate: bool = False

    @property
    def is_full_text(self) -> bool:
        return self.key is None


@dataclass(frozen=True)
class FilterMask:
    """Parsed filter mask."""

    full_text: Predicate | None = None
    fields: tuple[Predicate, ...] = ()
    options: dict[str, str] = field(default_factory=dict)
    malformed: bool = False

    @property
    def is_empty(self) -> bool:
        """True if the mask filters nothing out."""
        return not self.malformed and self.full_text is None and not self.fields


def is_separator_at(text: str, pos: int, keys: list[str] | None = None) -> bool:
    """
    Check whether the comma at `pos` separates two tokens.

    It does iff it is immediately followed by a registry key and `=`.
    The key comparison is case-insensitive.
    """
    if pos >= len(text) or text[pos] != SEPARATOR:
        return False
    rest = text[pos + 1 :].lower()
    for key in keys if keys is not None else AuditLogProperty.keys():
        if rest.startswith(key + ASSIGN):
            return True
    return False


class _MaskScanner:
    """Splits a raw mask into tokens, keeping commas that are not separators."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.length = len(text)
        self._keys = AuditLogProperty.keys()

    def _read_token(self) -> str:
        """Read up to the next separating comma (or the end of input)."""
        start = self.pos
        while self.pos < self.length:
            if is_separator_at(self.text, self.pos, self._keys):
                break
            self.pos += 1
        return self.text[start : self.pos]

    def scan(self) -> list[str]:
        tokens: list[str] = [self._read_token()]
        while self.pos < self.length:
            self.pos += 1  # Skip separator
            tokens.append(self._read_token())
        return [token.lower() for token in tokens]


def split_mask(filter_mask: str) -> list[str]:
    """Split a filter mask into lower-cased tokens."""
    return _MaskScanner(filter_mask).scan()


def _strip_negation(value: str) -> tuple[str, bool]:
    if value.startswith(NEGATION_PREFIX):
        return value[len(NEGATION_PREFIX) :], True
    return value, False


def _split_options(value: str) -> tuple[str, str]:
    """Split a leading `{options}` block off a value. Returns (options, rest)."""
    if value.startswith(OPTIONS_OPEN) and OPTIONS_CLOSE in value:
        end = value.index(OPTIONS_CLOSE)
        return value[1:end], value[end + 1 :]
    return "", value


def parse_mask(filter_mask: str | None) -> FilterMask:
    """
    Parse a filter mask into predicates.

    Args:
        filter_mask: Raw mask; blank or None means "no filtering".

    Returns:
        The parsed FilterMask. Check `malformed` before using it.
    """
    if filter_mask is None or not filter_mask.strip():
        return FilterMask()

    tokens = split_mask(filter_mask)

    full_text: Predicate | None = None
    field_tokens = tokens
    if ASSIGN not in tokens[0]:
        pattern, negate = _strip_negation(tokens[0])
        full_text = Predicate(key=None, pattern=pattern, negate=negate)
        field_tokens = tokens[1:]

    predicates: list[Predicate] = []
    options_by_key: dict[str, str] = {}
    for token in field_tokens:
        if token.count(ASSIGN) > 1:
            logger.debug("Malformed filter token %r: more than one '='", token)
            return FilterMask(malformed=True)

        key, _, value = token.partition(ASSIGN)
        if not value:
            # Nothing to search for
            continue

        options, value = _split_options(value)
        if options:
            options_by_key[key] = options
        pattern, negate = _strip_negation(value)
        predicates.append(Predicate(key=key, pattern=pattern, options=options, negate=negate))

    return FilterMask(
        full_text=full_text,
        fields=tuple(predicates),
        options=options_by_key,
    )
