"""API router for scope-auditor.

Every request fetches the integration log from Slack, runs it through the
audit core and returns the result. Nothing is cached between requests, so
each response reflects the log as it is at request time.

Endpoints (mounted under /api/v1 by main.py):
- GET /apps/{app_id}/scopes  current scopes of one app, with categories
- GET /apps/scopes           current scopes of every app in the log
- GET /timeline              log entries in chronological order
- GET /users                 scope activity per acting user
- GET /logs                  raw integration log entries, one page or all
- GET /manifest              Slack app manifest for the auditor app
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, Query

from scope_auditor.adapters.slack_client import IntegrationLogsRequest, SlackClient
from scope_auditor.api.schemas import AppScopesResponse
from scope_auditor.audit.events import (
    ChangeType,
    CurrentScopesResult,
    IntegrationLog,
    TimelineEvent,
    UserScopeSummary,
)
from scope_auditor.audit.reconstructor import compute_all_app_scopes, compute_current_scopes
from scope_auditor.audit.scopes import categorize_scopes
from scope_auditor.audit.timeline import filter_timeline_by_app, filter_timeline_by_days, transform_to_timeline
from scope_auditor.audit.user_activity import transform_to_user_scopes
from scope_auditor.manifest import SLACK_APP_MANIFEST
from scope_auditor.observability import get_logger
from scope_auditor.settings import Settings

logger = get_logger(__name__)

router = APIRouter(tags=["Scope Audit"])

_LIMIT_QUERY = Query(ge=1, description="Maximum number of log entries to fetch")


# ---------------------------------------------------------------------------
# Dependency providers
# ---------------------------------------------------------------------------


@lru_cache
def get_settings() -> Settings:
    """Return process settings, loaded once."""
    return Settings()


def get_slack_client(
    settings: Annotated[Settings, Depends(get_settings)],
    x_slack_token: Annotated[str | None, Header(description="Slack admin token override")] = None,
) -> SlackClient:
    """Build a SlackClient for this request.

    A token in the X-Slack-Token header takes precedence over the configured
    one.

    Raises:
        ConfigurationError: If neither is available.
    """
    return SlackClient.from_settings(settings, token=x_slack_token)


async def _fetch_logs(
    client: SlackClient,
    settings: Settings,
    limit: int | None,
    **filters: Any,
) -> list[IntegrationLog]:
    request = IntegrationLogsRequest(team_id=settings.team_id, count=settings.page_size, **filters)
    logs = await client.get_all_integration_logs(request, limit=limit)
    logger.info("Fetched integration logs for request", records=len(logs), **filters)
    return logs


# ---------------------------------------------------------------------------
# Route handlers
# ---------------------------------------------------------------------------


@router.get(
    "/apps/scopes",
    response_model=list[CurrentScopesResult],
    summary="Reconstruct current scopes for every app in the log",
)
async def list_app_scopes(
    client: Annotated[SlackClient, Depends(get_slack_client)],
    settings: Annotated[Settings, Depends(get_settings)],
    limit: Annotated[int | None, _LIMIT_QUERY] = None,
) -> list[CurrentScopesResult]:
    """Return the reconstructed scope state of every app seen in the log."""
    logs = await _fetch_logs(client, settings, limit)
    return list(compute_all_app_scopes(logs).values())


@router.get(
    "/apps/{app_id}/scopes",
    response_model=AppScopesResponse,
    summary="Reconstruct current scopes for one app",
)
async def get_app_scopes(
    app_id: str,
    client: Annotated[SlackClient, Depends(get_slack_client)],
    settings: Annotated[Settings, Depends(get_settings)],
    limit: Annotated[int | None, _LIMIT_QUERY] = None,
) -> AppScopesResponse:
    """Return one app's active scopes, grouped into display categories.

    Args:
        app_id: The app or legacy service ID to audit.
        client: Slack client for this request.
        settings: Process settings.
        limit: Optional cap on fetched log entries.

    Returns:
        AppScopesResponse with the reconstruction and its categories. An app
        with no log entries yields an empty result rather than a 404.
    """
    logs = await _fetch_logs(client, settings, limit, app_id=app_id)
    result = compute_current_scopes(logs, app_id)
    return AppScopesResponse(
        result=result,
        categorized=categorize_scopes(result.active_scopes),
        log_entries=len(logs),
    )


@router.get(
    "/timeline",
    response_model=list[TimelineEvent],
    summary="Integration events in chronological order",
)
async def get_timeline(
    client: Annotated[SlackClient, Depends(get_slack_client)],
    settings: Annotated[Settings, Depends(get_settings)],
    app_id: Annotated[str | None, Query(description="Filter by app ID")] = None,
    days: Annotated[int, Query(description="Show events from the last N days")] = 30,
    limit: Annotated[int | None, _LIMIT_QUERY] = None,
) -> list[TimelineEvent]:
    """Return log entries as timeline events, oldest first."""
    logs = await _fetch_logs(client, settings, limit, app_id=app_id)
    timeline = filter_timeline_by_days(transform_to_timeline(logs), days)
    if app_id:
        timeline = filter_timeline_by_app(timeline, app_id)
    return timeline


@router.get(
    "/users",
    response_model=list[UserScopeSummary],
    summary="Scope activity per acting user",
)
async def get_user_activity(
    client: Annotated[SlackClient, Depends(get_slack_client)],
    settings: Annotated[Settings, Depends(get_settings)],
    app_id: Annotated[str | None, Query(description="Filter by app ID")] = None,
    limit: Annotated[int | None, _LIMIT_QUERY] = None,
) -> list[UserScopeSummary]:
    """Return per-user summaries, most recently active user first."""
    logs = await _fetch_logs(client, settings, limit, app_id=app_id)
    return transform_to_user_scopes(logs)


@router.get(
    "/logs",
    response_model=list[IntegrationLog],
    summary="Raw integration log entries",
)
async def get_logs(
    client: Annotated[SlackClient, Depends(get_slack_client)],
    settings: Annotated[Settings, Depends(get_settings)],
    app_id: Annotated[str | None, Query(description="Filter by app ID")] = None,
    user: Annotated[str | None, Query(description="Filter by acting user ID")] = None,
    change_type: Annotated[ChangeType | None, Query(description="Filter by change type")] = None,
    count: Annotated[int | None, Query(ge=1, le=1000, description="Entries per page")] = None,
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    fetch_all: Annotated[bool, Query(alias="all", description="Fetch all pages")] = False,
    limit: Annotated[int | None, _LIMIT_QUERY] = None,
) -> list[IntegrationLog]:
    """Return integration log entries in the order Slack returned them.

    Returns one page unless `all` is set or a `limit` is given, in which case
    pages are walked from `page` onwards.
    """
    request = IntegrationLogsRequest(
        app_id=app_id,
        user=user,
        change_type=change_type,
        team_id=settings.team_id,
        count=count or settings.page_size,
        page=page,
    )
    if fetch_all or limit is not None:
        logs = await client.get_all_integration_logs(request, limit=limit)
    else:
        response = await client.get_integration_logs(request)
        logs = response.logs
    logger.info("Fetched integration logs for request", records=len(logs), page=page, fetch_all=fetch_all)
    return logs


@router.get("/manifest", summary="Slack app manifest for the auditor app")
async def get_manifest() -> dict[str, Any]:
    """Return the static Slack app manifest."""
    return SLACK_APP_MANIFEST
