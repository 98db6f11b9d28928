"""scope-auditor: audit Slack app OAuth scopes by replaying integration logs.

The audit core (scope_auditor.audit) reconstructs, from an already-fetched
team.integrationLogs collection, the active scopes of each app, a
chronological timeline and per-user activity summaries. The Slack client,
CLI and HTTP API are thin shells around it.
"""

__version__ = "0.1.0"
