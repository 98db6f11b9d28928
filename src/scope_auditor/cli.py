"""Command line interface for scope-auditor.

Usage:
    scope-auditor [--token xoxp-...] [--output table|json] [--team-id T] COMMAND ...

Commands:
    audit     current scopes of one app, grouped by category
    logs      raw integration log entries
    timeline  integration events in chronological order
    users     scope activity per acting user
    manifest  Slack app manifest and setup guide

Each command fetches the integration log, hands it to the audit core and
prints the result. Progress and diagnostics go to stderr; results go to
stdout.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from typing import get_args

from scope_auditor import __version__
from scope_auditor.adapters.slack_client import IntegrationLogsRequest, PaginationProgress, SlackClient
from scope_auditor.audit.events import ChangeType, IntegrationLog
from scope_auditor.audit.reconstructor import compute_current_scopes
from scope_auditor.audit.scopes import categorize_scopes
from scope_auditor.audit.timeline import filter_timeline_by_app, filter_timeline_by_days, transform_to_timeline
from scope_auditor.audit.user_activity import transform_to_user_scopes
from scope_auditor.errors import ConfigurationError, SlackApiError
from scope_auditor.formatters import (
    format_current_scopes,
    format_json,
    format_logs_table,
    format_timeline,
    format_user_summaries,
)
from scope_auditor.manifest import render_manifest_json, setup_instructions
from scope_auditor.observability import configure_logging, get_logger
from scope_auditor.settings import Settings

logger = get_logger(__name__)

_SLACK_ERROR_HINTS: dict[str, str] = {
    "paid_only": "Note: team.integrationLogs requires a paid Slack plan.",
    "not_admin": "Note: You must be an admin to access integration logs.",
    "invalid_auth": 'Run "scope-auditor manifest" to see how to create a Slack app with the correct scopes.',
    "not_allowed_token_type": (
        'Run "scope-auditor manifest" to see how to create a Slack app with the correct scopes.'
    ),
}


# --------------------------------------------------------------------------- #
# Argument parsing                                                            #
# --------------------------------------------------------------------------- #


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="scope-auditor",
        description=(
            "Audit Slack app scopes using the team.integrationLogs API. "
            "Verifies what scopes Slack apps have been granted in a workspace."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-t", "--token", help="Slack admin token (or use SLACK_TOKEN env var)")
    parser.add_argument(
        "-o",
        "--output",
        choices=("table", "json"),
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument("--team-id", help="Team ID (for org-level tokens)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    audit = subparsers.add_parser("audit", help="Show the current scopes of an app")
    audit.add_argument("-a", "--app-id", required=True, help="App ID to audit")
    audit.add_argument("-l", "--limit", type=_positive_int, help="Maximum number of log entries to fetch")

    logs = subparsers.add_parser("logs", help="Fetch and display raw integration logs")
    logs.add_argument("-a", "--app-id", help="Filter by app ID")
    logs.add_argument("-u", "--user", help="Filter by user ID")
    logs.add_argument("-c", "--change-type", choices=get_args(ChangeType), help="Filter by change type")
    logs.add_argument("-n", "--count", type=_positive_int, default=100, help="Number of results per page")
    logs.add_argument("-p", "--page", type=_positive_int, default=1, help="Page number")
    logs.add_argument("--all", action="store_true", help="Fetch all pages")
    logs.add_argument("-l", "--limit", type=_positive_int, help="Maximum number of records to fetch")

    timeline = subparsers.add_parser("timeline", help="Display integration events as a timeline")
    timeline.add_argument("-a", "--app-id", help="Filter by app ID")
    timeline.add_argument("-d", "--days", type=int, default=30, help="Show events from last N days")
    timeline.add_argument("-l", "--limit", type=_positive_int, help="Maximum number of log entries to fetch")

    users = subparsers.add_parser("users", help="Summarise scope activity per user")
    users.add_argument("-a", "--app-id", help="Filter by app ID")
    users.add_argument("-l", "--limit", type=_positive_int, help="Maximum number of log entries to fetch")

    manifest = subparsers.add_parser("manifest", help="Output the Slack app manifest for the auditor app")
    manifest.add_argument("--json", action="store_true", help="Output manifest as JSON only")

    return parser


# --------------------------------------------------------------------------- #
# Commands                                                                    #
# --------------------------------------------------------------------------- #


def _report_progress(progress: PaginationProgress) -> None:
    logger.info(
        "Fetching integration logs",
        page=progress.current_page,
        pages=progress.total_pages,
        records=progress.records_fetched,
    )


async def _fetch_all(
    client: SlackClient,
    request: IntegrationLogsRequest,
    limit: int | None,
) -> list[IntegrationLog]:
    logs = await client.get_all_integration_logs(request, limit=limit, on_progress=_report_progress)
    limit_note = f" (limited to {limit})" if limit is not None and len(logs) >= limit else ""
    print(f"Fetched {len(logs)} log entries{limit_note}", file=sys.stderr)
    return logs


async def _run_audit(args: argparse.Namespace, client: SlackClient) -> str:
    request = IntegrationLogsRequest(app_id=args.app_id, team_id=args.team_id, count=args.page_size)
    logs = await _fetch_all(client, request, args.limit)

    result = compute_current_scopes(logs, args.app_id)
    categorized = categorize_scopes(result.active_scopes)

    if args.output == "json":
        return format_json({"result": result, "categorized": categorized})
    return format_current_scopes(result, categorized)


async def _run_logs(args: argparse.Namespace, client: SlackClient) -> str:
    request = IntegrationLogsRequest(
        app_id=args.app_id,
        user=args.user,
        change_type=args.change_type,
        team_id=args.team_id,
        count=min(args.count, 1000),
        page=args.page,
    )

    if args.all or args.limit is not None:
        logs = await _fetch_all(client, request, args.limit)
    else:
        response = await client.get_integration_logs(request)
        logs = response.logs
        print(
            f"Fetched {len(logs)} log entries (page {response.paging.page}/{response.paging.pages})",
            file=sys.stderr,
        )

    if args.output == "json":
        return format_json(logs)
    return format_logs_table(logs)


async def _run_timeline(args: argparse.Namespace, client: SlackClient) -> str:
    request = IntegrationLogsRequest(app_id=args.app_id, team_id=args.team_id, count=args.page_size)
    logs = await _fetch_all(client, request, args.limit)

    timeline = filter_timeline_by_days(transform_to_timeline(logs), args.days)
    if args.app_id:
        timeline = filter_timeline_by_app(timeline, args.app_id)

    if args.output == "json":
        return format_json(timeline)
    return format_timeline(timeline)


async def _run_users(args: argparse.Namespace, client: SlackClient) -> str:
    request = IntegrationLogsRequest(app_id=args.app_id, team_id=args.team_id, count=args.page_size)
    logs = await _fetch_all(client, request, args.limit)

    summaries = transform_to_user_scopes(logs)

    if args.output == "json":
        return format_json(summaries)
    return format_user_summaries(summaries)


_COMMANDS = {
    "audit": _run_audit,
    "logs": _run_logs,
    "timeline": _run_timeline,
    "users": _run_users,
}


def handle_error(error: ConfigurationError | SlackApiError) -> int:
    """Report a command failure on stderr.

    Args:
        error: The exception raised by the command.

    Returns:
        The process exit status (always 1).
    """
    if isinstance(error, ConfigurationError):
        print(f"Configuration Error: {error.message}", file=sys.stderr)
        return 1

    print(f"Slack API Error: {error.message}", file=sys.stderr)
    print(f"Error code: {error.code}", file=sys.stderr)
    hint = _SLACK_ERROR_HINTS.get(error.code)
    if hint:
        print(f"\n{hint}", file=sys.stderr)
    return 1


def main(argv: Sequence[str] | None = None, client: SlackClient | None = None) -> int:
    """Run the CLI.

    Args:
        argv: Arguments, defaults to sys.argv[1:].
        client: Optional pre-built SlackClient, used by tests.

    Returns:
        Process exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings()
    configure_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        json_logs=settings.log_json,
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "manifest":
        print(render_manifest_json() if args.json else setup_instructions())
        return 0

    if args.team_id is None:
        args.team_id = settings.team_id
    args.page_size = settings.page_size

    try:
        slack_client = client or SlackClient.from_settings(settings, token=args.token)
        output = asyncio.run(_COMMANDS[args.command](args, slack_client))
    except (ConfigurationError, SlackApiError) as exc:
        return handle_error(exc)
    except Exception as exc:
        if args.verbose:
            logger.exception("Command failed", command=args.command)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
