"""Slack app manifest for the auditor app, and setup instructions.

team.integrationLogs needs a user token with the admin scope, so users
first register a small Slack app of their own. The manifest below is
static data emitted verbatim by the `manifest` CLI command and the
GET /manifest endpoint.
"""

from __future__ import annotations

import json
from typing import Any

SLACK_APP_MANIFEST: dict[str, Any] = {
    "_metadata": {
        "major_version": 1,
        "minor_version": 1,
    },
    "display_information": {
        "name": "Scopes Auditor",
        "description": "Audit Slack app scopes and integration logs",
        "background_color": "#1a1a2e",
        "long_description": (
            "An open-source tool for auditing Slack app scopes using the team.integrationLogs API. "
            "This app helps IT admins and organization admins verify what scopes have been granted "
            "to Slack apps in their workspace. It requires admin privileges to access integration "
            "logs and is only available on paid Slack plans."
        ),
    },
    "oauth_config": {
        "scopes": {
            "user": ["admin"],
        },
    },
    "settings": {
        "org_deploy_enabled": False,
        "socket_mode_enabled": False,
        "token_rotation_enabled": False,
    },
}

_SETUP_STEPS = """\
=== Slack Scopes Auditor Setup ===

Prerequisites:
  - A paid Slack workspace (team.integrationLogs requires a paid plan)
  - Workspace admin privileges

Step 1: Create a Slack App
  1. Go to https://api.slack.com/apps
  2. Click "Create New App"
  3. Select "From an app manifest"
  4. Choose your workspace
  5. Paste the manifest below (JSON tab)
  6. Click "Create"

Step 2: Install the App
  1. Go to "Install App" in the left sidebar
  2. Click "Install to Workspace"
  3. Review and allow the permissions

Step 3: Get Your Token
  1. After installation, copy the "User OAuth Token" (starts with xoxp-)
  2. Use it with scope-auditor:
     SLACK_TOKEN=xoxp-... scope-auditor audit --app-id A123
"""

_SETUP_FOOTER = """\
Note: The "admin" scope is required to access team.integrationLogs.
This scope allows reading workspace integration activity."""


def render_manifest_json() -> str:
    """Return the app manifest as indented JSON."""
    return json.dumps(SLACK_APP_MANIFEST, indent=2)


def setup_instructions() -> str:
    """Return the full onboarding guide, manifest included."""
    return f"{_SETUP_STEPS}\n=== App Manifest (JSON) ===\n\n{render_manifest_json()}\n\n{_SETUP_FOOTER}"
