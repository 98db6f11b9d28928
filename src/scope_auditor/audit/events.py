"""Integration log entry and derived result schemas.

IntegrationLog mirrors one entry of the Slack team.integrationLogs response
as received. Every other model here is a derived, immutable view produced by
the reconstruction functions in this package: they are built fresh from a
log collection on each call and never mutated afterwards.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_EPOCH_PATTERN = re.compile(r"-?[0-9]+")

ChangeType = Literal["added", "removed", "enabled", "disabled", "expanded", "updated"]

# Change types whose scopes are unioned into the active set / counted as grants.
GRANT_CHANGE_TYPES: frozenset[str] = frozenset({"added", "expanded"})
REVOKE_CHANGE_TYPES: frozenset[str] = frozenset({"removed"})


def epoch_to_datetime(epoch_seconds: str | int) -> datetime:
    """Convert Slack's epoch-seconds value to an aware UTC datetime.

    Args:
        epoch_seconds: Seconds since the Unix epoch, as a string or int.

    Returns:
        The corresponding timezone-aware datetime in UTC.
    """
    return datetime.fromtimestamp(int(epoch_seconds), tz=timezone.utc)


class IntegrationLog(BaseModel):
    """Immutable record of one app or integration change in a workspace.

    Exactly one of app_id / service_id identifies the subject app; both are
    treated as the same identity (see subject_id). An absent or empty scope
    string means the change affected no scopes, as for enabled/disabled.

    Attributes:
        date: Epoch seconds as a string, as Slack sends it.
        user_id: ID of the user who made the change.
        user_name: Display name of that user at the time of the change.
        app_id: Slack app ID, for app changes.
        app_type: Slack-provided app type label, if any.
        service_id: Legacy integration (service) ID, for service changes.
        service_type: Legacy integration type label, if any.
        change_type: The nature of the change.
        scope: Comma-delimited scopes affected by the change.
        reason: Why the app was disabled, for disabled events.
        channel: Channel the integration was attached to, if any.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    date: str = Field(..., description="Epoch seconds as a string")
    user_id: str = Field(..., description="ID of the acting user")
    user_name: str = Field(default="", description="Display name of the acting user")
    app_id: str | None = Field(default=None, description="Slack app ID")
    app_type: str | None = Field(default=None, description="Slack app type label")
    service_id: str | None = Field(default=None, description="Legacy integration ID")
    service_type: str | None = Field(default=None, description="Legacy integration type label")
    change_type: ChangeType = Field(..., description="The nature of the change")
    scope: str | None = Field(default=None, description="Comma-delimited affected scopes")
    reason: str | None = Field(default=None, description="Disable reason, for disabled events")
    channel: str | None = Field(default=None, description="Attached channel, if any")

    @field_validator("date", mode="before")
    @classmethod
    def _validate_epoch(cls, value: object) -> str:
        """Reject dates that are not base-10 epoch seconds within datetime range.

        Integers are accepted and normalised to their string form.
        """
        if isinstance(value, bool):
            raise ValueError("date must be epoch seconds")
        if isinstance(value, int):
            epoch = str(value)
        elif isinstance(value, str) and _EPOCH_PATTERN.fullmatch(value.strip()):
            epoch = value.strip()
        else:
            raise ValueError(f"date must be epoch seconds, got {value!r}")

        try:
            epoch_to_datetime(epoch)
        except (OverflowError, OSError, ValueError) as exc:
            raise ValueError(f"date is out of range, got {epoch}") from exc
        return epoch

    @property
    def subject_id(self) -> str | None:
        """App identity this entry is about: app_id, else service_id."""
        return self.app_id or self.service_id

    @property
    def epoch(self) -> int:
        """The entry date as integer epoch seconds."""
        return int(self.date)

    @property
    def timestamp(self) -> datetime:
        """The entry date as an aware UTC datetime."""
        return epoch_to_datetime(self.date)

    def concerns(self, app_id: str) -> bool:
        """Return True if this entry is about the given app or service ID."""
        return self.app_id == app_id or self.service_id == app_id


class CurrentScopesResult(BaseModel):
    """Reconstructed scope state of one app after replaying its log.

    Attributes:
        app_id: The app (or service) identity.
        active_scopes: Scopes currently granted, sorted.
        total_grants: Number of scopes named by added/expanded events.
            Redundant grants still count.
        total_revokes: Number of scopes named by removed events.
            Redundant revokes still count.
        last_activity: Latest entry date seen for the app, of any change
            type. None when the app has no entries.
    """

    model_config = ConfigDict(frozen=True)

    app_id: str
    active_scopes: list[str] = Field(default_factory=list)
    total_grants: int = 0
    total_revokes: int = 0
    last_activity: datetime | None = None


class ScopeCategory(BaseModel):
    """A named group of scopes, deduplicated and sorted."""

    model_config = ConfigDict(frozen=True)

    name: str
    scopes: list[str]


class CategorizedScopes(BaseModel):
    """Scopes grouped for display.

    Attributes:
        categories: Non-empty categories sorted by name, "Other" last.
        total: Length of the input scope list, duplicates included.
    """

    model_config = ConfigDict(frozen=True)

    categories: list[ScopeCategory]
    total: int


class TimelineEvent(BaseModel):
    """One log entry normalised for chronological display."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    user_id: str
    user_name: str
    app_id: str
    change_type: ChangeType
    scopes: list[str]


class UserScopeAction(BaseModel):
    """One change made by a user, as listed in their activity summary."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    change_type: ChangeType
    app_id: str
    scopes: list[str]


class UserScopeSummary(BaseModel):
    """Scope activity of a single user.

    Attributes:
        user_id: The grouping key.
        user_name: Name attached to the first entry seen for user_id.
        actions: The user's changes, most recent first.
        total_granted: Scopes named by the user's added/expanded events.
        total_revoked: Scopes named by the user's removed events.
        last_activity: Date of the user's most recent change.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    user_name: str
    actions: list[UserScopeAction]
    total_granted: int
    total_revoked: int
    last_activity: datetime
