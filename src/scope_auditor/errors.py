"""Error types raised at the I/O boundary of scope-auditor.

The reconstruction core (scope_auditor.audit) raises none of these. They
come from the Slack log fetcher and from configuration loading, and are
reported to the user by the CLI error handler or the API exception
handlers.
"""

from __future__ import annotations

# Human-readable explanations for the error codes team.integrationLogs returns.
SLACK_ERROR_MESSAGES: dict[str, str] = {
    "invalid_auth": "Invalid authentication token. Please check your token.",
    "not_admin": "You must be an admin to access this API.",
    "paid_only": "This API is only available on paid Slack plans.",
    "not_allowed_token_type": "Token type not permitted. Use a user token with admin scope.",
    "missing_scope": 'Token is missing required scope. Ensure you have the "admin" scope.',
    "account_inactive": "Account is inactive or has been deactivated.",
    "token_revoked": "Token has been revoked.",
}


class ScopeAuditorError(Exception):
    """Base error for scope-auditor failures.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        """Initialize ScopeAuditorError.

        Args:
            message: Error description.
        """
        super().__init__(message)
        self.message = message


class SlackApiError(ScopeAuditorError):
    """Raised when the Slack Web API rejects a request or cannot be reached.

    Attributes:
        code: Slack error code (e.g. "paid_only") or a synthetic code such as
            "http_500" or "request_failed" for transport-level failures.
        status_code: HTTP status code, if a response was received.
    """

    def __init__(
        self,
        code: str,
        message: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize SlackApiError.

        Args:
            code: Slack error code.
            message: Optional override. Defaults to the known explanation
                for the code, or a generic message.
            status_code: Optional HTTP status code.
        """
        super().__init__(message or SLACK_ERROR_MESSAGES.get(code, f"Slack API error: {code}"))
        self.code = code
        self.status_code = status_code


class ConfigurationError(ScopeAuditorError):
    """Raised when required configuration (e.g. the Slack token) is missing."""
