"""Slack Web API client for the team.integrationLogs method.

Fetches the workspace integration log, one page per request, and can walk
every page into a flat list. This is the only component of scope-auditor
that performs network I/O; everything downstream works on the list of
IntegrationLog entries it returns.

The client:
- authenticates with a user token (xoxp-...) carrying the admin scope
- retries HTTP 429 responses after the Retry-After interval
- raises SlackApiError for Slack errors ("ok": false), unexpected HTTP
  statuses and transport failures
- does not deduplicate entries across pages

Slack API reference: https://api.slack.com/methods/team.integrationLogs
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from scope_auditor.audit.events import ChangeType, IntegrationLog
from scope_auditor.errors import SlackApiError
from scope_auditor.observability import get_logger
from scope_auditor.settings import Settings

logger = get_logger(__name__)

_DEFAULT_BASE_URL = "https://slack.com/api"

_DEFAULT_TIMEOUT_S = 30.0

_DEFAULT_MAX_RETRIES = 3

# Used when a 429 response carries no usable Retry-After header.
_DEFAULT_RETRY_AFTER_S = 1.0

_INTEGRATION_LOGS_METHOD = "team.integrationLogs"


class IntegrationLogsRequest(BaseModel):
    """Query parameters for team.integrationLogs.

    All filters are passed through to Slack unchanged; None values are
    omitted from the request.
    """

    model_config = ConfigDict(frozen=True)

    app_id: str | None = Field(default=None, description="Filter by app ID")
    change_type: ChangeType | None = Field(default=None, description="Filter by change type")
    count: int = Field(default=100, ge=1, le=1000, description="Entries per page")
    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    service_id: str | None = Field(default=None, description="Filter by legacy service ID")
    team_id: str | None = Field(default=None, description="Workspace ID, for org-level tokens")
    user: str | None = Field(default=None, description="Filter by acting user ID")

    def to_form(self) -> dict[str, str]:
        """Return the request as form fields, omitting unset filters."""
        return {key: str(value) for key, value in self.model_dump(exclude_none=True).items()}


class PagingInfo(BaseModel):
    """Paging metadata returned with every page."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    count: int = 0
    total: int = 0
    page: int = 1
    pages: int = 1


class IntegrationLogsResponse(BaseModel):
    """A successful team.integrationLogs page."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    ok: bool
    logs: list[IntegrationLog] = Field(default_factory=list)
    paging: PagingInfo = Field(default_factory=PagingInfo)


@dataclass(frozen=True)
class PaginationProgress:
    """Progress snapshot reported after each fetched page."""

    current_page: int
    total_pages: int
    records_fetched: int


ProgressCallback = Callable[[PaginationProgress], None]


class SlackClient:
    """Async client for the Slack team.integrationLogs method.

    Args:
        token: Slack user token with the admin scope.
        base_url: Slack Web API base URL.
        timeout_s: Per-request timeout in seconds.
        max_retries: Retries allowed for a rate-limited request.
        transport: Optional httpx transport, used by tests to fake Slack.
    """

    def __init__(
        self,
        token: str,
        base_url: str = _DEFAULT_BASE_URL,
        timeout_s: float = _DEFAULT_TIMEOUT_S,
        max_retries: int = _DEFAULT_MAX_RETRIES,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize SlackClient.

        Args:
            token: Slack user token with the admin scope.
            base_url: Slack Web API base URL.
            timeout_s: Per-request timeout in seconds.
            max_retries: Retries allowed for a rate-limited request.
            transport: Optional httpx transport override.
        """
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, token: str | None = None) -> SlackClient:
        """Build a client from application settings.

        Args:
            settings: Loaded settings.
            token: Optional token overriding the configured one.

        Returns:
            A configured SlackClient.

        Raises:
            ConfigurationError: If no token is given or configured.
        """
        return cls(
            token=token or settings.require_token(),
            base_url=settings.slack_api_base_url,
            timeout_s=settings.request_timeout_seconds,
            max_retries=settings.max_retries,
        )

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout_s,
            headers={"Authorization": f"Bearer {self._token}"},
            transport=self._transport,
        )

    async def get_integration_logs(self, request: IntegrationLogsRequest) -> IntegrationLogsResponse:
        """Fetch a single page of integration logs.

        Args:
            request: Filters and the page to fetch.

        Returns:
            The parsed page.

        Raises:
            SlackApiError: If Slack returns an error or cannot be reached.
        """
        async with self._http_client() as client:
            return await self._fetch_page(client, request)

    async def get_all_integration_logs(
        self,
        request: IntegrationLogsRequest | None = None,
        limit: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[IntegrationLog]:
        """Fetch every page of integration logs into one list.

        Starts at request.page and follows paging.pages until the last page.
        Stops early once `limit` entries have been collected; the result is
        truncated to `limit`.

        Args:
            request: Filters and page size. The page field sets the first page.
            limit: Optional maximum number of entries to return.
            on_progress: Optional callback invoked after each page.

        Returns:
            Entries in the order Slack returned them, page after page.

        Raises:
            SlackApiError: If any page request fails. Entries fetched before
                the failure are discarded.
        """
        base_request = request or IntegrationLogsRequest()
        logs: list[IntegrationLog] = []
        page = base_request.page
        total_pages = page

        async with self._http_client() as client:
            while page <= total_pages:
                response = await self._fetch_page(client, base_request.model_copy(update={"page": page}))
                logs.extend(response.logs)
                total_pages = response.paging.pages

                if on_progress is not None:
                    on_progress(
                        PaginationProgress(
                            current_page=page,
                            total_pages=total_pages,
                            records_fetched=len(logs),
                        )
                    )

                if limit is not None and len(logs) >= limit:
                    logger.info("Stopped fetching at record limit", limit=limit, page=page, pages=total_pages)
                    logs = logs[:limit]
                    break

                page += 1

        logger.info("Fetched integration logs", records=len(logs), pages=total_pages)
        return logs

    async def _fetch_page(
        self,
        client: httpx.AsyncClient,
        request: IntegrationLogsRequest,
    ) -> IntegrationLogsResponse:
        """POST one team.integrationLogs request, retrying on rate limits.

        Args:
            client: Open httpx client carrying auth headers.
            request: The page to fetch.

        Returns:
            The parsed page.

        Raises:
            SlackApiError: On Slack errors, bad statuses or transport failures.
        """
        attempt = 0
        while True:
            logger.debug("Requesting integration log page", page=request.page, attempt=attempt)
            try:
                response = await client.post(f"/{_INTEGRATION_LOGS_METHOD}", data=request.to_form())
            except httpx.TimeoutException as exc:
                logger.warning("Slack request timed out", page=request.page, timeout_s=self._timeout_s)
                raise SlackApiError(
                    code="request_timeout",
                    message=f"Slack request timed out after {self._timeout_s}s",
                ) from exc
            except httpx.RequestError as exc:
                logger.error("Slack request failed", page=request.page, error=str(exc))
                raise SlackApiError(code="request_failed", message=f"Slack request error: {exc}") from exc

            if response.status_code == 429 and attempt < self._max_retries:
                delay = _retry_after_seconds(response)
                attempt += 1
                logger.warning(
                    "Rate limited by Slack, retrying",
                    page=request.page,
                    retry_after_s=delay,
                    attempt=attempt,
                )
                await asyncio.sleep(delay)
                continue

            return _parse_response(response, request.page)


def _retry_after_seconds(response: httpx.Response) -> float:
    """Read the Retry-After header of a 429 response.

    Args:
        response: The rate-limited response.

    Returns:
        Seconds to wait before retrying.
    """
    try:
        return max(float(response.headers.get("Retry-After", "")), 0.0)
    except ValueError:
        return _DEFAULT_RETRY_AFTER_S


def _parse_response(response: httpx.Response, page: int) -> IntegrationLogsResponse:
    """Validate a Slack response and convert it to IntegrationLogsResponse.

    Args:
        response: Raw HTTP response.
        page: Page number requested, for logging.

    Returns:
        The parsed page.

    Raises:
        SlackApiError: If the status is not 2xx, the body is not valid JSON,
            Slack reports "ok": false, or the entries fail validation.
    """
    if response.status_code == 429:
        raise SlackApiError(code="ratelimited", status_code=429)
    if not response.is_success:
        logger.error(
            "Slack returned unexpected status",
            page=page,
            status_code=response.status_code,
            body=response.text[:500],
        )
        raise SlackApiError(
            code=f"http_{response.status_code}",
            message=f"Slack returned HTTP {response.status_code}",
            status_code=response.status_code,
        )

    try:
        body: dict[str, Any] = response.json()
    except ValueError as exc:
        raise SlackApiError(code="invalid_response", message="Slack returned a non-JSON body") from exc

    if not body.get("ok"):
        code = str(body.get("error") or "unknown_error")
        logger.warning("Slack API error", page=page, code=code)
        raise SlackApiError(code=code, status_code=response.status_code)

    try:
        parsed = IntegrationLogsResponse.model_validate(body)
    except ValidationError as exc:
        raise SlackApiError(
            code="invalid_response",
            message=f"Slack returned malformed integration logs: {exc.error_count()} invalid field(s)",
        ) from exc

    logger.debug(
        "Fetched integration log page",
        page=parsed.paging.page,
        pages=parsed.paging.pages,
        records=len(parsed.logs),
    )
    return parsed
