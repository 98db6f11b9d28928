"""Test fixtures for scope-auditor.

Provides:
- make_log: factory for IntegrationLog entries with sensible defaults
- slack_page: builder for a team.integrationLogs JSON page
- sample_logs: a small multi-app, multi-user log used across modules
- fixed_now: a deterministic "current time" for time-window filters
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from scope_auditor.audit.events import IntegrationLog


def make_log(
    date: str | int = "1000",
    change_type: str = "added",
    scope: str | None = None,
    app_id: str | None = "A1",
    service_id: str | None = None,
    user_id: str = "U1",
    user_name: str = "alice",
    **extra: Any,
) -> IntegrationLog:
    """Build an IntegrationLog for tests."""
    return IntegrationLog(
        date=str(date),
        change_type=change_type,  # type: ignore[arg-type]
        scope=scope,
        app_id=app_id,
        service_id=service_id,
        user_id=user_id,
        user_name=user_name,
        **extra,
    )


def slack_page(
    logs: list[dict[str, Any]],
    page: int = 1,
    pages: int = 1,
    total: int | None = None,
) -> dict[str, Any]:
    """Build a successful team.integrationLogs response body."""
    return {
        "ok": True,
        "logs": logs,
        "paging": {
            "count": len(logs),
            "total": total if total is not None else len(logs),
            "page": page,
            "pages": pages,
        },
    }


def raw_log(date: str, change_type: str = "added", scope: str | None = "chat:write", **fields: Any) -> dict[str, Any]:
    """Build one raw log entry dict as Slack would send it."""
    entry: dict[str, Any] = {
        "date": date,
        "user_id": "U1",
        "user_name": "alice",
        "app_id": "A1",
        "app_type": "app",
        "change_type": change_type,
    }
    if scope is not None:
        entry["scope"] = scope
    entry.update(fields)
    return entry


@pytest.fixture()
def fixed_now() -> datetime:
    """Return a fixed reference time: 2024-01-31T00:00:00Z.

    Returns:
        A deterministic timezone-aware datetime.
    """
    return datetime(2024, 1, 31, tzinfo=timezone.utc)


@pytest.fixture()
def sample_logs() -> list[IntegrationLog]:
    """A small unordered log spanning two apps, one legacy service and two users.

    Returns:
        Integration log entries in deliberately non-chronological order.
    """
    return [
        make_log(date="3000", change_type="removed", scope="files:read", app_id="A1", user_id="U2", user_name="bob"),
        make_log(date="1000", change_type="added", scope="chat:write,files:read", app_id="A1"),
        make_log(date="2000", change_type="added", scope="users:read", app_id="A2"),
        make_log(date="2500", change_type="disabled", app_id="A2", user_id="U2", user_name="bob", reason="user"),
        make_log(date="1500", change_type="expanded", scope="channels:history", app_id=None, service_id="S9"),
    ]
