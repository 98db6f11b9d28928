"""Tests for the timeline builder and its filters.

Run with: pytest tests/test_timeline.py -v
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_log

from scope_auditor.audit.timeline import (
    filter_timeline_by_app,
    filter_timeline_by_days,
    transform_to_timeline,
)


def _epoch(dt: datetime) -> str:
    return str(int(dt.timestamp()))


def test_transform_to_timeline_orders_ascending(sample_logs):
    timeline = transform_to_timeline(sample_logs)

    assert [int(e.timestamp.timestamp()) for e in timeline] == [1000, 1500, 2000, 2500, 3000]


def test_transform_to_timeline_maps_fields():
    log = make_log(date="1000", change_type="added", scope="chat:write, files:read", user_name="alice")

    (event,) = transform_to_timeline([log])

    assert event.timestamp == datetime.fromtimestamp(1000, tz=timezone.utc)
    assert event.user_id == "U1"
    assert event.user_name == "alice"
    assert event.app_id == "A1"
    assert event.change_type == "added"
    assert event.scopes == ["chat:write", "files:read"]


def test_transform_to_timeline_uses_service_id_when_no_app_id():
    (event,) = transform_to_timeline([make_log(app_id=None, service_id="S1")])
    assert event.app_id == "S1"


def test_transform_to_timeline_empty_scope_is_empty_list():
    (event,) = transform_to_timeline([make_log(change_type="enabled", scope=None)])
    assert event.scopes == []


def test_transform_to_timeline_ties_keep_input_order():
    logs = [
        make_log(date="1000", user_id="U1"),
        make_log(date="1000", user_id="U2"),
        make_log(date="500", user_id="U0"),
        make_log(date="1000", user_id="U3"),
    ]

    timeline = transform_to_timeline(logs)
    assert [e.user_id for e in timeline] == ["U0", "U1", "U2", "U3"]


# ---------------------------------------------------------------------------
# filter_timeline_by_days
# ---------------------------------------------------------------------------


def test_filter_by_days_keeps_recent_events(fixed_now):
    logs = [
        make_log(date=_epoch(fixed_now - timedelta(days=40)), user_id="old"),
        make_log(date=_epoch(fixed_now - timedelta(days=10)), user_id="recent"),
        make_log(date=_epoch(fixed_now - timedelta(hours=1)), user_id="newest"),
    ]
    timeline = transform_to_timeline(logs)

    result = filter_timeline_by_days(timeline, 30, now=fixed_now)
    assert [e.user_id for e in result] == ["recent", "newest"]


def test_filter_by_days_zero_returns_empty(fixed_now):
    timeline = transform_to_timeline([make_log(date=_epoch(fixed_now))])
    assert filter_timeline_by_days(timeline, 0, now=fixed_now) == []


def test_filter_by_days_huge_window_returns_everything(sample_logs, fixed_now):
    timeline = transform_to_timeline(sample_logs)
    assert filter_timeline_by_days(timeline, 10**12, now=fixed_now) == timeline


def test_filter_by_days_defaults_to_wall_clock():
    recent = datetime.now(timezone.utc) - timedelta(days=1)
    timeline = transform_to_timeline([make_log(date=_epoch(recent)), make_log(date="1000")])

    result = filter_timeline_by_days(timeline, 7)
    assert len(result) == 1
    assert result[0].timestamp == datetime.fromtimestamp(int(recent.timestamp()), tz=timezone.utc)


# ---------------------------------------------------------------------------
# filter_timeline_by_app
# ---------------------------------------------------------------------------


def test_filter_by_app_exact_match(sample_logs):
    timeline = transform_to_timeline(sample_logs)

    result = filter_timeline_by_app(timeline, "A1")
    assert [e.app_id for e in result] == ["A1", "A1"]
    assert filter_timeline_by_app(timeline, "A") == []


def test_filter_by_app_finds_legacy_services(sample_logs):
    timeline = transform_to_timeline(sample_logs)

    result = filter_timeline_by_app(timeline, "S9")
    assert len(result) == 1
    assert result[0].scopes == ["channels:history"]


def test_filter_by_days_rejects_naive_now(sample_logs):
    timeline = transform_to_timeline(sample_logs)
    with pytest.raises(ValueError):
        filter_timeline_by_days(timeline, 30, now=datetime(2024, 1, 31))


def test_filter_by_days_honours_now_offset(fixed_now):
    plus_two = timezone(timedelta(hours=2))
    event_time = fixed_now - timedelta(days=1)
    timeline = transform_to_timeline([make_log(date=_epoch(event_time))])

    # Same instant as fixed_now, expressed in UTC+2.
    now = fixed_now.astimezone(plus_two)
    assert filter_timeline_by_days(timeline, 1, now=now) == timeline
