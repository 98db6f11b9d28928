"""Scope audit core: reconstructs app scope state from integration logs.

Pure functions over an already-fetched list of IntegrationLog entries. Nothing
in this package performs I/O or keeps state between calls.
"""

from __future__ import annotations

from scope_auditor.audit.events import (
    CategorizedScopes,
    ChangeType,
    CurrentScopesResult,
    IntegrationLog,
    ScopeCategory,
    TimelineEvent,
    UserScopeAction,
    UserScopeSummary,
)
from scope_auditor.audit.reconstructor import compute_all_app_scopes, compute_current_scopes
from scope_auditor.audit.scopes import SCOPE_CATEGORY_RULES, categorize_scopes, parse_scopes
from scope_auditor.audit.timeline import (
    filter_timeline_by_app,
    filter_timeline_by_days,
    transform_to_timeline,
)
from scope_auditor.audit.user_activity import transform_to_user_scopes

__all__ = [
    "CategorizedScopes",
    "ChangeType",
    "CurrentScopesResult",
    "IntegrationLog",
    "ScopeCategory",
    "TimelineEvent",
    "UserScopeAction",
    "UserScopeSummary",
    "SCOPE_CATEGORY_RULES",
    "categorize_scopes",
    "compute_all_app_scopes",
    "compute_current_scopes",
    "filter_timeline_by_app",
    "filter_timeline_by_days",
    "parse_scopes",
    "transform_to_timeline",
    "transform_to_user_scopes",
]
