"""Settings for scope-auditor.

Values are read from the environment with the SCOPE_AUDITOR_ prefix (and
from a local .env file when present). The Slack token is also accepted
from the conventional SLACK_TOKEN variable.

Configuration is only consulted at the boundary (CLI, HTTP API, Slack
client construction); the reconstruction core takes no settings.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from scope_auditor.errors import ConfigurationError


class Settings(BaseSettings):
    """Settings for scope-auditor.

    Environment variable prefix: SCOPE_AUDITOR_
    """

    service_name: str = "scope-auditor"

    # -------------------------------------------------------------------------
    # Slack Web API
    # -------------------------------------------------------------------------

    slack_token: str = Field(
        default="",
        validation_alias=AliasChoices("SCOPE_AUDITOR_SLACK_TOKEN", "SLACK_TOKEN"),
        description="User OAuth token (xoxp-...) carrying the admin scope. "
        "team.integrationLogs rejects bot tokens.",
    )
    slack_api_base_url: str = Field(
        default="https://slack.com/api",
        description="Slack Web API base URL. Overridden in tests.",
    )
    team_id: str | None = Field(
        default=None,
        description="Workspace ID. Required only for org-level tokens.",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Per-request timeout for Slack API calls.",
    )
    page_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Number of log entries requested per page.",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        description="How many times a rate-limited (HTTP 429) request is retried "
        "after waiting for the Retry-After interval.",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------

    log_level: str = Field(default="INFO", description="Log level for structlog output.")
    log_json: bool = Field(default=False, description="Emit JSON log lines instead of console output.")

    model_config = SettingsConfigDict(
        env_prefix="SCOPE_AUDITOR_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    def require_token(self) -> str:
        """Return the configured Slack token.

        Returns:
            The Slack token.

        Raises:
            ConfigurationError: If no token is configured.
        """
        if not self.slack_token:
            raise ConfigurationError(
                "Slack token is required. Pass --token or set the SLACK_TOKEN environment variable."
            )
        return self.slack_token
