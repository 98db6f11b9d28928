"""Chronological timeline view of the integration log.

Each log entry becomes one TimelineEvent with its scope string expanded into
a list. The timeline is ordered oldest first.
"""

from __future__ import annotations

from datetime import datetime, timezone

from scope_auditor.audit.events import IntegrationLog, TimelineEvent
from scope_auditor.audit.scopes import parse_scopes

_SECONDS_PER_DAY = 86_400


def transform_to_timeline(logs: list[IntegrationLog]) -> list[TimelineEvent]:
    """Map log entries to timeline events, sorted ascending by timestamp.

    Entries sharing a timestamp keep their input order. The event app_id is
    the entry's subject_id, so legacy service entries appear under their
    service ID.

    Args:
        logs: Integration log entries, in any order.

    Returns:
        One TimelineEvent per entry, oldest first.
    """
    events = [
        TimelineEvent(
            timestamp=log.timestamp,
            user_id=log.user_id,
            user_name=log.user_name,
            app_id=log.subject_id or "",
            change_type=log.change_type,
            scopes=parse_scopes(log.scope),
        )
        for log in logs
    ]
    return sorted(events, key=lambda event: event.timestamp)


def filter_timeline_by_days(
    timeline: list[TimelineEvent],
    days: int,
    now: datetime | None = None,
) -> list[TimelineEvent]:
    """Keep only events from the last `days` days.

    The window is anchored at `now`, which defaults to the wall-clock time at
    the moment of the call; pass a fixed value for reproducible results.

    Args:
        timeline: Events to filter.
        days: Window length in days. Zero or negative keeps nothing.
        now: End of the window, timezone-aware. Defaults to the current UTC
            time.

    Returns:
        Events whose timestamp is within the window, in their input order.

    Raises:
        ValueError: If `now` is a naive datetime.
    """
    if now is not None and now.utcoffset() is None:
        raise ValueError("now must be timezone-aware")
    if days <= 0:
        return []

    reference = now or datetime.now(timezone.utc)
    # Compare in epoch seconds so a very large window cannot overflow datetime.
    cutoff = reference.timestamp() - days * _SECONDS_PER_DAY
    return [event for event in timeline if event.timestamp.timestamp() >= cutoff]


def filter_timeline_by_app(timeline: list[TimelineEvent], app_id: str) -> list[TimelineEvent]:
    """Keep only events for the given app or service ID.

    Args:
        timeline: Events to filter.
        app_id: Exact app identity to keep.

    Returns:
        Matching events, in their input order.
    """
    return [event for event in timeline if event.app_id == app_id]
