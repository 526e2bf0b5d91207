"""Tests for sort order parsing and multi-key sorting."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from auditlog.models import AuditLogAction, AuditLogEntry, AuditLogProperty, UserInfo
from auditlog.sorting import (
    SortTerm,
    compare_entries,
    compare_null,
    parse_sort_order,
    sort_entries,
)

T0 = datetime(2020, 1, 1, 12, 0, tzinfo=timezone.utc)


def entry(
    first: str | None = None,
    last: str | None = None,
    *,
    username: str | None = None,
    user_id: str | None = None,
    **fields: object,
) -> AuditLogEntry:
    user = UserInfo(first_name=first, last_name=last, username=username, user_id=user_id)
    return AuditLogEntry(user=user, **fields)


def firsts(entries: list[AuditLogEntry]) -> list[str | None]:
    return [e.user_info.first_name for e in entries]


# =============================================================================
# Parsing
# =============================================================================


def test_parse_sort_order_directions() -> None:
    assert parse_sort_order("lastname,-time") == [
        SortTerm(AuditLogProperty.LASTNAME),
        SortTerm(AuditLogProperty.TIME, descending=True),
    ]


def test_parse_sort_order_skips_unknown_keys() -> None:
    assert parse_sort_order("color,-FirstName, -nope") == [
        SortTerm(AuditLogProperty.FIRSTNAME, descending=True)
    ]


def test_parse_sort_order_fullname_alias() -> None:
    assert parse_sort_order("fullname") == [SortTerm(AuditLogProperty.USER)]


@pytest.mark.parametrize("order", ["", None])
def test_parse_sort_order_blank(order: str | None) -> None:
    assert parse_sort_order(order) == []


# =============================================================================
# Null handling
# =============================================================================


def test_compare_null_both_present() -> None:
    assert compare_null("a", "b", descending=False) is None


def test_compare_null_both_missing() -> None:
    assert compare_null(None, None, descending=True) == 0


def test_compare_null_missing_last_ascending() -> None:
    assert compare_null("a", None, descending=False) == -1
    assert compare_null(None, "a", descending=False) == 1


def test_compare_null_flips_for_descending() -> None:
    # Flipped again by the descending direction, so missing values stay last
    assert compare_null("a", None, descending=True) == 1
    assert compare_null(None, "a", descending=True) == -1


# =============================================================================
# Sorting
# =============================================================================


def test_sort_first_name_case_insensitive_nulls_last() -> None:
    entries = [entry("Bob"), entry(None), entry("alice")]
    assert firsts(sort_entries(entries, "firstname")) == ["alice", "Bob", None]


def test_sort_first_name_descending_nulls_still_last() -> None:
    entries = [entry(None), entry("alice"), entry("Bob")]
    assert firsts(sort_entries(entries, "-firstname")) == ["Bob", "alice", None]


def test_sort_returns_same_list_sorted_in_place() -> None:
    entries = [entry("b"), entry("a")]
    result = sort_entries(entries, "firstname")
    assert result is entries
    assert firsts(entries) == ["a", "b"]


@pytest.mark.parametrize("order", ["", "  ", None, "-time", "-TIME"])
def test_default_order_is_untouched(order: str | None) -> None:
    entries = [
        entry("b", time=T0),
        entry("a", time=T0 + timedelta(hours=1)),
        entry("c", time=T0 - timedelta(hours=1)),
    ]
    result = sort_entries(entries, order)
    assert result is entries
    assert firsts(result) == ["b", "a", "c"]


def test_sort_time_ascending_compares_instants() -> None:
    plus_two = timezone(timedelta(hours=2))
    early = entry("early", time=datetime(2020, 1, 1, 13, 0, tzinfo=plus_two))  # 11:00 UTC
    late = entry("late", time=T0)
    assert firsts(sort_entries([late, early], "time")) == ["early", "late"]


def test_sort_time_with_other_terms_is_applied() -> None:
    entries = [entry("a", time=T0), entry("b", time=T0 + timedelta(days=1))]
    assert firsts(sort_entries(entries, "-time,firstname")) == ["b", "a"]


def test_multi_key_tie_break() -> None:
    entries = [
        entry("Zoe", "Adams"),
        entry("Amy", "Brown"),
        entry("Bea", "adams"),
    ]
    assert firsts(sort_entries(entries, "lastname,firstname")) == ["Bea", "Zoe", "Amy"]


def test_multi_key_mixed_directions() -> None:
    entries = [
        entry("Amy", "Adams"),
        entry("Zoe", "Adams"),
        entry("Kim", "Brown"),
    ]
    assert firsts(sort_entries(entries, "-lastname,-firstname")) == ["Kim", "Zoe", "Amy"]


def test_ties_keep_original_order() -> None:
    entries = [entry("x", "Same"), entry("y", "same"), entry("z", "SAME")]
    assert firsts(sort_entries(entries, "lastname")) == ["x", "y", "z"]


def test_unknown_keys_leave_order_unchanged() -> None:
    entries = [entry("b"), entry("a")]
    assert firsts(sort_entries(entries, "color")) == ["b", "a"]
    assert firsts(sort_entries(entries, "color,firstname")) == ["a", "b"]


def test_username_falls_back_to_user_id() -> None:
    entries = [
        entry("second", username="jdoe", user_id="u2"),
        entry("first", username="JDoe", user_id="u1"),
        entry("third", username="adam", user_id="u9"),
    ]
    assert firsts(sort_entries(entries, "username")) == ["third", "first", "second"]


def test_username_missing_sorts_last_then_user_id() -> None:
    entries = [
        entry("nobody"),
        entry("id-only", user_id="u1"),
        entry("named", username="a"),
    ]
    assert firsts(sort_entries(entries, "username")) == ["named", "id-only", "nobody"]


def test_sort_by_action_uses_declaration_order() -> None:
    entries = [
        entry("deleted", action=AuditLogAction.BUCKET_DELETED),
        entry("created", action=AuditLogAction.EXPERIMENT_CREATED),
        entry("none"),
        entry("changed", action=AuditLogAction.EXPERIMENT_CHANGED),
    ]
    assert firsts(sort_entries(entries, "action")) == ["created", "changed", "deleted", "none"]


def test_sort_by_description() -> None:
    entries = [
        entry("d", action=AuditLogAction.EXPERIMENT_DELETED),
        entry("c", action=AuditLogAction.EXPERIMENT_CREATED),
        entry("u"),
    ]
    # "created experiment" < "deleted experiment" < "unknown action"
    assert firsts(sort_entries(entries, "desc")) == ["c", "d", "u"]
    assert firsts(sort_entries(entries, "-desc")) == ["u", "d", "c"]


@pytest.mark.parametrize(
    ("key", "field"),
    [
        ("experiment", "experiment_label"),
        ("bucket", "bucket_label"),
        ("app", "application_name"),
        ("attr", "changed_property"),
        ("before", "before"),
        ("after", "after"),
    ],
)
def test_sort_direct_fields(key: str, field: str) -> None:
    entries = [entry("b", **{field: "beta"}), entry("n"), entry("a", **{field: "Alpha"})]
    assert firsts(sort_entries(list(entries), key)) == ["a", "b", "n"]
    assert firsts(sort_entries(list(entries), f"-{key}")) == ["b", "a", "n"]


def test_sort_mail() -> None:
    entries = [
        AuditLogEntry(user=UserInfo(first_name="z", email="Zed@x.io")),
        AuditLogEntry(user=UserInfo(first_name="a", email="amy@x.io")),
    ]
    assert firsts(sort_entries(entries, "mail")) == ["a", "z"]


def test_compare_entries_all_tie() -> None:
    a = entry("Same")
    b = entry("same")
    assert compare_entries(a, b, parse_sort_order("firstname,lastname")) == 0
