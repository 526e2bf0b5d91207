"""Tests for the audit log service, pipeline and repository."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from auditlog import (
    AuditLog,
    AuditLogConfig,
    AuditLogEntry,
    InMemoryAuditLogRepository,
    RepositoryError,
    UserInfo,
    process,
)
from auditlog.models import AuditLogAction

T0 = datetime(2021, 6, 1, 8, 30, tzinfo=timezone.utc)


def entry(minutes: int, first: str, app: str | None = "checkout", **fields: object) -> AuditLogEntry:
    return AuditLogEntry(
        time=T0 + timedelta(minutes=minutes),
        user=UserInfo(first_name=first, username=first.lower()),
        application_name=app,
        **fields,
    )


@pytest.fixture
def entries() -> list[AuditLogEntry]:
    return [
        entry(0, "Ann", action=AuditLogAction.EXPERIMENT_CREATED),
        entry(10, "Ben", action=AuditLogAction.BUCKET_CREATED, bucket_label="control"),
        entry(20, "Cid", app="search", action=AuditLogAction.EXPERIMENT_CHANGED),
        entry(30, "Dee", app=None, action=AuditLogAction.APPLICATION_ROLE_ADDED, after="ADMIN"),
    ]


@pytest.fixture
def repository(entries: list[AuditLogEntry]) -> InMemoryAuditLogRepository:
    return InMemoryAuditLogRepository(entries)


def names(items: list[AuditLogEntry]) -> list[str | None]:
    return [e.user_info.first_name for e in items]


# =============================================================================
# process
# =============================================================================


def test_process_blank_returns_input_unchanged(entries: list[AuditLogEntry]) -> None:
    original = list(entries)
    result = process(entries, "", "")
    assert result is entries
    assert result == original


def test_process_filters_then_sorts(entries: list[AuditLogEntry]) -> None:
    result = process(entries, "action=created", "-firstname")
    assert names(result) == ["Ben", "Ann"]


def test_process_malformed_mask_is_empty(entries: list[AuditLogEntry]) -> None:
    assert process(entries, "ann,firstname=a=b", "firstname") == []


def test_process_default_sort_keeps_filtered_order(entries: list[AuditLogEntry]) -> None:
    assert names(process(entries, "action=experiment", "-time")) == ["Ann", "Cid"]


# =============================================================================
# Repository
# =============================================================================


def test_repository_orders_newest_first(repository: InMemoryAuditLogRepository) -> None:
    assert names(repository.get_complete_audit_log_entry_list(10)) == ["Dee", "Cid", "Ben", "Ann"]


def test_repository_applies_limit(repository: InMemoryAuditLogRepository) -> None:
    assert names(repository.get_complete_audit_log_entry_list(2)) == ["Dee", "Cid"]


def test_repository_application_scope(repository: InMemoryAuditLogRepository) -> None:
    assert names(repository.get_audit_log_entry_list("checkout", 10)) == ["Ben", "Ann"]
    assert repository.get_audit_log_entry_list("missing", 10) == []


def test_repository_global_scope(repository: InMemoryAuditLogRepository) -> None:
    assert names(repository.get_global_audit_log_entry_list(10)) == ["Dee"]


def test_repository_returns_copies(repository: InMemoryAuditLogRepository) -> None:
    fetched = repository.get_complete_audit_log_entry_list(10)
    fetched.clear()
    assert len(repository.get_complete_audit_log_entry_list(10)) == 4


def test_repository_add_keeps_order(repository: InMemoryAuditLogRepository) -> None:
    repository.add(entry(15, "Eve"))
    assert names(repository.get_complete_audit_log_entry_list(10)) == [
        "Dee",
        "Cid",
        "Eve",
        "Ben",
        "Ann",
    ]
    assert len(repository) == 5


def test_repository_from_json_camel_case() -> None:
    text = json.dumps(
        {
            "entries": [
                {
                    "time": "2021-06-01T08:30:00Z",
                    "user": {"firstName": "Ann", "userId": "u1"},
                    "action": "bucket_created",
                    "applicationName": "checkout",
                    "bucketLabel": "control",
                }
            ]
        }
    )
    repo = InMemoryAuditLogRepository.from_json(text)
    (loaded,) = repo.get_complete_audit_log_entry_list(1)
    assert loaded.user_info.first_name == "Ann"
    assert loaded.user_info.user_id == "u1"
    assert loaded.action is AuditLogAction.BUCKET_CREATED
    assert loaded.description == "created bucket control"


def test_repository_from_json_invalid_json() -> None:
    with pytest.raises(RepositoryError, match="Invalid JSON"):
        InMemoryAuditLogRepository.from_json("[", source="broken.json")


def test_repository_from_json_not_a_list() -> None:
    with pytest.raises(RepositoryError, match="Expected a list"):
        InMemoryAuditLogRepository.from_json('{"time": 1}')


def test_repository_from_json_invalid_entry() -> None:
    with pytest.raises(RepositoryError, match="Invalid audit log entry"):
        InMemoryAuditLogRepository.from_json('[{"action": "EXPLODED"}]')


def test_repository_from_missing_path(tmp_path: Path) -> None:
    with pytest.raises(RepositoryError, match="Cannot read"):
        InMemoryAuditLogRepository.from_path(tmp_path / "missing.json")


# =============================================================================
# AuditLog service
# =============================================================================


def test_service_complete_lookup(repository: InMemoryAuditLogRepository) -> None:
    audit_log = AuditLog(repository, limit=10)
    assert names(audit_log.get_audit_logs()) == ["Dee", "Cid", "Ben", "Ann"]


def test_service_application_lookup(repository: InMemoryAuditLogRepository) -> None:
    audit_log = AuditLog(repository, limit=10)
    result = audit_log.get_audit_logs("", "firstname", application_name="checkout")
    assert names(result) == ["Ann", "Ben"]


def test_service_global_lookup(repository: InMemoryAuditLogRepository) -> None:
    audit_log = AuditLog(repository, limit=10)
    assert names(audit_log.get_global_audit_logs("admin")) == ["Dee"]
    assert audit_log.get_global_audit_logs("\\-admin") == []


def test_service_limit_applies_before_filter(repository: InMemoryAuditLogRepository) -> None:
    audit_log = AuditLog(repository, limit=2)
    assert audit_log.get_audit_logs("ann") == []


def test_service_time_zone(repository: InMemoryAuditLogRepository) -> None:
    # Ann's entry is 08:30 UTC, 10:30 at +0200
    audit_log = AuditLog(repository, limit=10, time_zone="+0200")
    assert names(audit_log.get_audit_logs("time=10:30")) == ["Ann"]


def test_service_filter_and_sort(entries: list[AuditLogEntry]) -> None:
    audit_log = AuditLog(InMemoryAuditLogRepository(), limit=1)
    assert names(audit_log.filter_and_sort(entries, "app=checkout", "-firstname")) == [
        "Ben",
        "Ann",
    ]


@pytest.mark.parametrize("limit", [0, -1, True, 1.5])
def test_service_rejects_bad_limit(limit: object) -> None:
    with pytest.raises(ValueError, match="limit"):
        AuditLog(InMemoryAuditLogRepository(), limit=limit)  # type: ignore[arg-type]


def test_service_from_config(repository: InMemoryAuditLogRepository) -> None:
    audit_log = AuditLog.from_config(repository, AuditLogConfig(fetch_limit=1))
    assert audit_log.limit == 1
    assert names(audit_log.get_audit_logs()) == ["Dee"]
