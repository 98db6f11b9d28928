"""Tests for active-scope reconstruction.

Covers: compute_current_scopes replay rules, ordering, counters, app identity
matching, duplicate tolerance, and compute_all_app_scopes.

Run with: pytest tests/test_reconstructor.py -v
"""

from __future__ import annotations

from datetime import datetime, timezone

from conftest import make_log

from scope_auditor.audit.reconstructor import compute_all_app_scopes, compute_current_scopes


# ---------------------------------------------------------------------------
# Test 1: grant then revoke
# ---------------------------------------------------------------------------


def test_reconstruct_grant_then_revoke():
    logs = [
        make_log(date="1000", change_type="added", scope="chat:write,files:read"),
        make_log(date="2000", change_type="removed", scope="files:read"),
    ]

    result = compute_current_scopes(logs, "A1")

    assert result.app_id == "A1"
    assert result.active_scopes == ["chat:write"]
    assert result.total_grants == 2
    assert result.total_revokes == 1
    assert result.last_activity == datetime.fromtimestamp(2000, tz=timezone.utc)


# ---------------------------------------------------------------------------
# Test 2: entries are replayed by numeric date, not input order
# ---------------------------------------------------------------------------


def test_reconstruct_sorts_out_of_order_pages():
    logs = [
        make_log(date="2000", change_type="removed", scope="files:read"),
        make_log(date="1000", change_type="added", scope="files:read"),
    ]

    result = compute_current_scopes(logs, "A1")
    assert result.active_scopes == []


def test_reconstruct_sorts_numerically_not_lexically():
    # "999" > "1000" as strings; numerically the removal comes first.
    logs = [
        make_log(date="1000", change_type="added", scope="files:read"),
        make_log(date="999", change_type="removed", scope="files:read"),
    ]

    result = compute_current_scopes(logs, "A1")
    assert result.active_scopes == ["files:read"]
    assert result.last_activity == datetime.fromtimestamp(1000, tz=timezone.utc)


# ---------------------------------------------------------------------------
# Test 3: change type effects
# ---------------------------------------------------------------------------


def test_reconstruct_expanded_adds_and_counts_as_grant():
    logs = [
        make_log(date="1000", change_type="added", scope="chat:write"),
        make_log(date="2000", change_type="expanded", scope="users:read,files:read"),
    ]

    result = compute_current_scopes(logs, "A1")
    assert result.active_scopes == ["chat:write", "files:read", "users:read"]
    assert result.total_grants == 3


def test_reconstruct_updated_adds_without_counting():
    logs = [make_log(date="1000", change_type="updated", scope="chat:write,users:read")]

    result = compute_current_scopes(logs, "A1")
    assert result.active_scopes == ["chat:write", "users:read"]
    assert result.total_grants == 0
    assert result.total_revokes == 0


def test_reconstruct_enabled_disabled_only_move_last_activity():
    logs = [
        make_log(date="1000", change_type="added", scope="chat:write"),
        make_log(date="5000", change_type="disabled", scope=None, reason="user"),
        make_log(date="6000", change_type="enabled", scope=None),
    ]

    result = compute_current_scopes(logs, "A1")
    assert result.active_scopes == ["chat:write"]
    assert result.total_grants == 1
    assert result.total_revokes == 0
    assert result.last_activity == datetime.fromtimestamp(6000, tz=timezone.utc)


def test_reconstruct_removing_absent_scope_is_noop_but_counted():
    logs = [
        make_log(date="1000", change_type="added", scope="chat:write"),
        make_log(date="2000", change_type="removed", scope="files:read"),
    ]

    result = compute_current_scopes(logs, "A1")
    assert result.active_scopes == ["chat:write"]
    assert result.total_revokes == 1


# ---------------------------------------------------------------------------
# Test 4: duplicates leave the set unchanged but add to counters
# ---------------------------------------------------------------------------


def test_reconstruct_duplicated_entries_only_affect_counters():
    logs = [
        make_log(date="1000", change_type="added", scope="chat:write,files:read"),
        make_log(date="2000", change_type="removed", scope="files:read"),
    ]
    baseline = compute_current_scopes(logs, "A1")

    duplicated = compute_current_scopes(logs + [logs[0], logs[1], logs[1]], "A1")

    assert duplicated.active_scopes == baseline.active_scopes
    assert duplicated.total_grants == baseline.total_grants + 2
    assert duplicated.total_revokes == baseline.total_revokes + 2
    assert duplicated.last_activity == baseline.last_activity


def test_reconstruct_commuting_same_timestamp_entries_are_order_independent():
    first = make_log(date="1000", change_type="added", scope="chat:write")
    second = make_log(date="1000", change_type="added", scope="files:read", user_id="U2")

    assert compute_current_scopes([first, second], "A1") == compute_current_scopes([second, first], "A1")


# ---------------------------------------------------------------------------
# Test 5: app identity
# ---------------------------------------------------------------------------


def test_reconstruct_matches_service_id():
    logs = [make_log(date="1000", change_type="added", scope="incoming-webhook", app_id=None, service_id="S1")]

    result = compute_current_scopes(logs, "S1")
    assert result.active_scopes == ["incoming-webhook"]


def test_reconstruct_ignores_other_apps():
    logs = [
        make_log(date="1000", change_type="added", scope="chat:write", app_id="A1"),
        make_log(date="1000", change_type="added", scope="users:read", app_id="A2"),
    ]

    result = compute_current_scopes(logs, "A1")
    assert result.active_scopes == ["chat:write"]


def test_reconstruct_unknown_app_returns_empty_result():
    result = compute_current_scopes([make_log()], "A404")

    assert result.app_id == "A404"
    assert result.active_scopes == []
    assert result.total_grants == 0
    assert result.total_revokes == 0
    assert result.last_activity is None


def test_reconstruct_does_not_mutate_input(sample_logs):
    snapshot = list(sample_logs)
    compute_current_scopes(sample_logs, "A1")
    assert sample_logs == snapshot


# ---------------------------------------------------------------------------
# Test 6: compute_all_app_scopes
# ---------------------------------------------------------------------------


def test_compute_all_app_scopes_covers_every_identity(sample_logs):
    results = compute_all_app_scopes(sample_logs)

    assert list(results) == ["A1", "A2", "S9"]
    assert results["A1"].active_scopes == ["chat:write"]
    assert results["A2"].active_scopes == ["users:read"]
    assert results["A2"].last_activity == datetime.fromtimestamp(2500, tz=timezone.utc)
    assert results["S9"].active_scopes == ["channels:history"]
    assert results["S9"].total_grants == 1


def test_compute_all_app_scopes_matches_single_app_results(sample_logs):
    results = compute_all_app_scopes(sample_logs)
    for app_id, result in results.items():
        assert result == compute_current_scopes(sample_logs, app_id)


def test_compute_all_app_scopes_empty_log():
    assert compute_all_app_scopes([]) == {}
