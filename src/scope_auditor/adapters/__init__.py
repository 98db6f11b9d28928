"""Adapters: external collaborators of the audit core.

Contains:
- slack_client.py  SlackClient for the paginated team.integrationLogs API
"""

from scope_auditor.adapters.slack_client import (
    IntegrationLogsRequest,
    IntegrationLogsResponse,
    PagingInfo,
    PaginationProgress,
    SlackClient,
)

__all__ = [
    "IntegrationLogsRequest",
    "IntegrationLogsResponse",
    "PagingInfo",
    "PaginationProgress",
    "SlackClient",
]
