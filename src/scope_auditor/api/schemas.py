"""Pydantic response schemas for the scope-auditor HTTP API.

The audit core's result models are returned as-is wherever possible; the
schemas here only cover responses that combine several results or describe
errors.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from scope_auditor.audit.events import CategorizedScopes, CurrentScopesResult


class AppScopesResponse(BaseModel):
    """Reconstructed scope state of one app with its display categories.

    Attributes:
        result: Active scopes, counters and last activity for the app.
        categorized: The active scopes grouped into display categories.
        log_entries: Number of log entries fetched to build the result.
    """

    model_config = ConfigDict(frozen=True)

    result: CurrentScopesResult
    categorized: CategorizedScopes
    log_entries: int = Field(..., ge=0, description="Number of log entries fetched")


class ErrorResponse(BaseModel):
    """Body returned for Slack and configuration errors.

    Attributes:
        code: Slack error code, or "configuration_error".
        message: Human-readable explanation.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
