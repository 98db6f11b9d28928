"""Active-scope reconstruction for Slack apps.

Given the integration log of a workspace, replays each app's change events
in chronological order to derive the scopes it currently holds. The upstream
log is paginated and does not guarantee ordering across pages, so entries
are always re-sorted by their numeric epoch before replay.

Replay rules:
    added, expanded  -> scopes are added to the active set, counted as grants
    removed          -> scopes are removed from the active set, counted as revokes
    updated          -> scopes are added to the active set (a restatement of
                        current grants), not counted
    enabled, disabled -> status only, no effect on scopes

Removing a scope that is not active is a no-op. Counters count scopes named
by events, not changes in set size, so duplicated or redundant entries still
increment them.

Entries sharing a timestamp are replayed in input order. When such entries
do not commute (an add and a remove of the same scope in the same second)
the result depends on the order the fetcher returned them in.
"""

from __future__ import annotations

from datetime import datetime

from scope_auditor.audit.events import (
    GRANT_CHANGE_TYPES,
    REVOKE_CHANGE_TYPES,
    CurrentScopesResult,
    IntegrationLog,
)
from scope_auditor.audit.scopes import parse_scopes
from scope_auditor.observability import get_logger

logger = get_logger(__name__)


def _chronological(logs: list[IntegrationLog]) -> list[IntegrationLog]:
    """Return logs sorted ascending by epoch; ties keep input order."""
    return sorted(logs, key=lambda log: log.epoch)


def compute_current_scopes(logs: list[IntegrationLog], app_id: str) -> CurrentScopesResult:
    """Reconstruct the current scope state of one app.

    Args:
        logs: Integration log entries for any number of apps, in any order.
        app_id: The app or service ID to reconstruct. Entries match when
            either their app_id or their service_id equals it.

    Returns:
        CurrentScopesResult with the sorted active scopes, grant and revoke
        counters, and the latest activity date. An app with no entries gets
        an empty result with last_activity None.
    """
    app_logs = _chronological([log for log in logs if log.concerns(app_id)])

    active_scopes: set[str] = set()
    total_grants = 0
    total_revokes = 0
    last_activity: datetime | None = None

    for log in app_logs:
        scopes = parse_scopes(log.scope)
        log_date = log.timestamp

        if last_activity is None or log_date > last_activity:
            last_activity = log_date

        if log.change_type in GRANT_CHANGE_TYPES:
            active_scopes.update(scopes)
            total_grants += len(scopes)
        elif log.change_type in REVOKE_CHANGE_TYPES:
            active_scopes.difference_update(scopes)
            total_revokes += len(scopes)
        elif log.change_type == "updated":
            active_scopes.update(scopes)
        # enabled / disabled carry no scope changes

    logger.debug(
        "Reconstructed app scopes",
        app_id=app_id,
        entries=len(app_logs),
        active_scopes=len(active_scopes),
        total_grants=total_grants,
        total_revokes=total_revokes,
    )

    return CurrentScopesResult(
        app_id=app_id,
        active_scopes=sorted(active_scopes),
        total_grants=total_grants,
        total_revokes=total_revokes,
        last_activity=last_activity,
    )


def compute_all_app_scopes(logs: list[IntegrationLog]) -> dict[str, CurrentScopesResult]:
    """Reconstruct the scope state of every app present in the log.

    Collects the distinct app identities first (in first-seen order) and
    then reconstructs each one independently from the full log.

    Args:
        logs: Integration log entries, in any order.

    Returns:
        Mapping of app or service ID to its CurrentScopesResult.
    """
    app_ids: dict[str, None] = {}
    for log in logs:
        subject_id = log.subject_id
        if subject_id:
            app_ids.setdefault(subject_id, None)

    return {app_id: compute_current_scopes(logs, app_id) for app_id in app_ids}
