"""Entry point for ``python -m issue_insights``."""

from __future__ import annotations

import argparse
from datetime import date

from issue_insights.core.filters import DIMENSIONS


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date (YYYY-MM-DD): {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    """Build the ``issue-insights`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="issue-insights",
        description="Project analytics dashboards for Jira Cloud.",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Log progress (-v) or debug detail (-vv) to stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Store Jira API-token credentials.")
    login.add_argument("--url", required=True, help="Jira site, e.g. https://acme.atlassian.net")
    login.add_argument("--email", required=True, help="Atlassian account e-mail.")
    login.add_argument("--token", help="API token (prompted for when omitted).")

    sub.add_parser("logout", help="Forget stored credentials.")

    projects = sub.add_parser("projects", help="List projects with issue counts.")
    projects.add_argument("--demo", action="store_true", help="Use generated demo data.")

    report = sub.add_parser("report", help="Show and export a project dashboard.")
    report.add_argument("project", nargs="?", help="Project key (defaults to the last one used).")
    _add_source_args(report)
    report.add_argument("--status", action="append", help="Keep only this status (repeatable).")
    report.add_argument("--type", action="append", dest="types", help="Keep only this issue type (repeatable).")
    report.add_argument("--assignee", action="append", help="Keep only this assignee (repeatable).")
    report.add_argument("--priority", action="append", help="Keep only this priority (repeatable).")
    report.add_argument("--from", dest="date_from", type=_iso_date, help="Updated on or after this date.")
    report.add_argument("--to", dest="date_to", type=_iso_date, help="Updated on or before this date.")
    report.add_argument("--burndown-start", type=_iso_date, help="First burndown day.")
    report.add_argument("--burndown-end", type=_iso_date, help="Last burndown day.")
    report.add_argument("--csv", help="Write the filtered issues to this CSV file.")
    report.add_argument("--pdf", help="Write a PDF dashboard report to this file.")
    report.add_argument("--charts", help="Write PNG charts into this directory.")
    report.add_argument("--title", help="PDF report title.")
    report.add_argument("--author", default="", help="PDF report author.")
    report.add_argument("--dark", action="store_true", help="Dark chart and PDF theme.")

    drill = sub.add_parser("drilldown", help="List the issues behind one chart segment.")
    drill.add_argument("project", help="Project key.")
    drill.add_argument("label", help="Segment label, e.g. 'In Progress' or 'Unassigned'.")
    drill.add_argument("--by", choices=sorted(DIMENSIONS), default="status")
    _add_source_args(drill)

    return parser


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--demo", action="store_true", help="Use generated demo data.")
    parser.add_argument("--seed", type=int, help="Seed for reproducible demo data.")
    parser.add_argument("--max-issues", type=int, help="Maximum issues to fetch.")


def main(argv: list[str] | None = None) -> int:
    """Run the ``issue-insights`` command line."""
    args = build_parser().parse_args(argv)

    from issue_insights.app import run_cli

    return run_cli(args)


if __name__ == "__main__":
    raise SystemExit(main())
