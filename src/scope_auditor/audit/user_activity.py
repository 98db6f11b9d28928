"""Per-user scope activity summaries.

Groups integration log entries by the acting user_id. The user_name shown
for a user is the one attached to the first entry seen for that id; later
entries with a different name for the same id do not change it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from scope_auditor.audit.events import (
    GRANT_CHANGE_TYPES,
    REVOKE_CHANGE_TYPES,
    IntegrationLog,
    UserScopeAction,
    UserScopeSummary,
)
from scope_auditor.audit.scopes import parse_scopes


@dataclass
class _UserAccumulator:
    user_id: str
    user_name: str
    last_activity: datetime
    actions: list[UserScopeAction] = field(default_factory=list)
    total_granted: int = 0
    total_revoked: int = 0

    def to_summary(self) -> UserScopeSummary:
        # reverse=True keeps equal timestamps in input order
        actions = sorted(self.actions, key=lambda action: action.timestamp, reverse=True)
        return UserScopeSummary(
            user_id=self.user_id,
            user_name=self.user_name,
            actions=actions,
            total_granted=self.total_granted,
            total_revoked=self.total_revoked,
            last_activity=self.last_activity,
        )


def transform_to_user_scopes(logs: list[IntegrationLog]) -> list[UserScopeSummary]:
    """Summarise scope activity per acting user.

    Only added/expanded entries count toward total_granted and only removed
    entries toward total_revoked; every entry is listed as an action.

    Args:
        logs: Integration log entries, in any order.

    Returns:
        One UserScopeSummary per distinct user_id, most recently active user
        first. Each summary lists its actions most recent first.
    """
    users: dict[str, _UserAccumulator] = {}

    for log in logs:
        timestamp = log.timestamp
        scopes = parse_scopes(log.scope)

        user = users.get(log.user_id)
        if user is None:
            user = _UserAccumulator(
                user_id=log.user_id,
                user_name=log.user_name,
                last_activity=timestamp,
            )
            users[log.user_id] = user

        user.actions.append(
            UserScopeAction(
                timestamp=timestamp,
                change_type=log.change_type,
                app_id=log.subject_id or "",
                scopes=scopes,
            )
        )

        if log.change_type in GRANT_CHANGE_TYPES:
            user.total_granted += len(scopes)
        elif log.change_type in REVOKE_CHANGE_TYPES:
            user.total_revoked += len(scopes)

        if timestamp > user.last_activity:
            user.last_activity = timestamp

    summaries = [user.to_summary() for user in users.values()]
    return sorted(summaries, key=lambda summary: summary.last_activity, reverse=True)
