"""Plain-text and JSON rendering for CLI output.

Formatting only: every function takes results already computed by the audit
core and returns a string. Nothing here re-derives scope state.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter

from scope_auditor.audit.events import (
    CategorizedScopes,
    CurrentScopesResult,
    IntegrationLog,
    TimelineEvent,
    UserScopeSummary,
    epoch_to_datetime,
)

_RULE = "-" * 60

_EVENT_ICONS: dict[str, str] = {
    "added": "+",
    "removed": "-",
    "enabled": "v",
    "disabled": "x",
    "expanded": "^",
    "updated": "~",
}

_ANY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


def format_json(data: Any) -> str:
    """Serialize models, lists or dicts of models to indented JSON."""
    return _ANY_ADAPTER.dump_json(data, indent=2).decode("utf-8")


def _truncate(value: str, width: int) -> str:
    return value if len(value) <= width else value[: width - 1] + "~"


def format_logs_table(logs: list[IntegrationLog]) -> str:
    """Render raw integration log entries as a fixed-width table."""
    if not logs:
        return "No logs found."

    lines = [
        f"{'date':<19}  {'user':<20}  {'app id':<14}  {'action':<9}  scopes",
        "-" * 100,
    ]
    for log in logs:
        date = epoch_to_datetime(log.date).strftime("%Y-%m-%d %H:%M:%S")
        lines.append(
            f"{date:<19}  {_truncate(log.user_name, 20):<20}  {_truncate(log.subject_id or '-', 14):<14}  "
            f"{log.change_type:<9}  {log.scope or '-'}"
        )
    return "\n".join(lines)


def format_current_scopes(result: CurrentScopesResult, categorized: CategorizedScopes) -> str:
    """Render an app's reconstructed scopes grouped by category."""
    lines = [f"Current Scopes for App: {result.app_id}", _RULE]

    if not categorized.categories:
        lines.append("No active scopes found.")
        return "\n".join(lines)

    for category in categorized.categories:
        lines.append("")
        lines.append(f"{category.name} ({len(category.scopes)})")
        lines.extend(f"  * {scope}" for scope in category.scopes)

    lines.append("")
    lines.append(_RULE)
    lines.append(f"Total: {categorized.total} active scopes")
    lines.append(f"Granted: {result.total_grants}  Revoked: {result.total_revokes}")
    if result.last_activity is not None:
        lines.append(f"Last activity: {result.last_activity.isoformat()}")
    return "\n".join(lines)


def format_timeline(events: list[TimelineEvent]) -> str:
    """Render timeline events grouped under a heading per day."""
    if not events:
        return "No events found."

    lines: list[str] = []
    current_day = ""
    for event in events:
        day = event.timestamp.strftime("%Y-%m-%d")
        if day != current_day:
            current_day = day
            lines.append("")
            lines.append(day)

        icon = _EVENT_ICONS.get(event.change_type, " ")
        lines.append(
            f"  {event.timestamp.strftime('%H:%M:%S')} {icon} {event.change_type:<10} "
            f"{event.user_name} - {event.app_id}"
        )
        if event.scopes:
            lines.append(f"              Scopes: {', '.join(event.scopes)}")
    return "\n".join(lines)


def format_user_summaries(summaries: list[UserScopeSummary]) -> str:
    """Render per-user activity, most recently active user first."""
    if not summaries:
        return "No user activity found."

    lines: list[str] = []
    for summary in summaries:
        lines.append("")
        lines.append(
            f"{summary.user_name} ({summary.user_id})  "
            f"+{summary.total_granted} granted  -{summary.total_revoked} revoked  "
            f"last active {summary.last_activity.isoformat()}"
        )
        for action in summary.actions:
            scopes = ", ".join(action.scopes) if action.scopes else "-"
            lines.append(
                f"  {action.timestamp.strftime('%Y-%m-%d %H:%M:%S')}  {action.change_type:<9}  "
                f"{action.app_id:<14}  {scopes}"
            )
    return "\n".join(lines)
