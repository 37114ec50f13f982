"""Command handlers for the ``issue-insights`` command line."""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from issue_insights.core import sample_data
from issue_insights.core.chart_generator import (
    format_day,
    render_burndown_chart,
    render_distribution_chart,
    render_timeline_chart,
    render_velocity_chart,
)
from issue_insights.core.dashboard import build_dashboard
from issue_insights.core.data_models import (
    ChartPoint,
    DashboardData,
    DashboardReport,
    FilterCriteria,
    Issue,
    IssueFetchResult,
    ReportConfig,
)
from issue_insights.core.exporter import ExportError, export_chart_png, export_issues_csv
from issue_insights.core.filters import issues_matching
from issue_insights.core.jira_client import JiraClient
from issue_insights.core.pdf_generator import generate_pdf
from issue_insights.services.auth_manager import AuthManager
from issue_insights.services.config_manager import ConfigManager

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Context:
    """Shared services handed to every command."""

    def __init__(
        self,
        config: ConfigManager,
        auth: AuthManager,
        jira: JiraClient,
        out: TextIO,
    ) -> None:
        self.config = config
        self.auth = auth
        self.jira = jira
        self.out = out

    def echo(self, text: str = "") -> None:
        print(text, file=self.out)


def run_cli(
    args: argparse.Namespace,
    *,
    config: ConfigManager | None = None,
    auth: AuthManager | None = None,
    jira: JiraClient | None = None,
    out: TextIO | None = None,
) -> int:
    """Dispatch *args* to its command handler, returning the exit code."""
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format=_LOG_FORMAT)

    config = config or ConfigManager()
    auth = auth or AuthManager(config)
    ctx = Context(config, auth, jira or JiraClient(auth), out or sys.stdout)

    logger.debug("Running command %s", args.command)
    return _COMMANDS[args.command](args, ctx)


# -- commands -----------------------------------------------------------------


def cmd_login(args: argparse.Namespace, ctx: Context) -> int:
    token = args.token or getpass.getpass("Jira API token: ")
    if not token:
        logger.error("No API token given")
        return 1
    if not ctx.jira.connect_basic(args.url, args.email, token):
        logger.error("Could not connect to %s with the given credentials", args.url)
        ctx.echo("Login failed. Check the site URL, e-mail and API token.")
        return 1

    ctx.auth.login_api_token(args.url, args.email, token)
    me = ctx.jira.get_myself()
    name = me["displayName"] if me else args.email
    ctx.echo(f"Logged in to {ctx.auth.site_name} as {name}.")
    return 0


def cmd_logout(args: argparse.Namespace, ctx: Context) -> int:
    ctx.auth.logout()
    ctx.echo("Logged out.")
    return 0


def cmd_projects(args: argparse.Namespace, ctx: Context) -> int:
    if args.demo or not ctx.jira.connect_from_config():
        if not args.demo:
            ctx.echo("Jira not configured for live data. Displaying demo data.")
        projects = sample_data.demo_projects()
    else:
        projects = ctx.jira.fetch_projects(with_summary=True)

    if not projects:
        ctx.echo("No projects found.")
        return 0

    ctx.echo(f"{'Key':<10} {'Name':<32} {'Open':>6} {'Active':>6} {'Done':>6} {'Total':>6}")
    for p in projects:
        s = p.summary
        counts = (
            f"{s.open:>6} {s.in_progress:>6} {s.done:>6} {s.total:>6}" if s else " ".join([f"{'-':>6}"] * 4)
        )
        ctx.echo(f"{p.key:<10} {p.name[:32]:<32} {counts}")
    return 0


def cmd_report(args: argparse.Namespace, ctx: Context) -> int:
    project_key = args.project or ctx.config.get("last_project_key")
    if not project_key:
        logger.error("No project key given and none used before")
        ctx.echo("Specify a project key, e.g. `issue-insights report PROJ`.")
        return 1

    fetched = load_issues(project_key, args, ctx)
    if not fetched.ok and not fetched.issues:
        for err in fetched.errors:
            ctx.echo(f"Error: {err}")
        return 1
    ctx.config.set("last_project_key", project_key)

    dashboard = build_dashboard(
        fetched.issues,
        criteria_from_args(args),
        burndown_start=args.burndown_start,
        burndown_end=args.burndown_end,
        horizon_days=ctx.config.get_int("burndown_horizon_days"),
        velocity_weeks=ctx.config.get_int("velocity_weeks"),
    )
    print_dashboard(ctx, project_key, dashboard, fetched)

    dark = args.dark or ctx.config.get("theme") == "dark"

    try:
        if args.csv:
            if dashboard.issues:
                export_issues_csv(dashboard.issues, Path(args.csv))
                ctx.echo(f"Wrote {args.csv}")
            else:
                ctx.echo("No issues match; CSV not written.")
        if args.charts:
            for path in export_charts(dashboard, Path(args.charts), dark=dark):
                ctx.echo(f"Wrote {path}")
        if args.pdf:
            report = DashboardReport(
                config=ReportConfig(
                    project_key=project_key,
                    project_name=_project_name(project_key, fetched, ctx),
                    title=args.title or ctx.config.get("default_title", "Project Dashboard"),
                    author=args.author,
                    dark_mode=dark,
                ),
                dashboard=dashboard,
                errors=fetched.errors,
            )
            Path(args.pdf).write_bytes(generate_pdf(report))
            ctx.echo(f"Wrote {args.pdf}")
    except (ExportError, OSError) as exc:
        logger.error("Export failed: %s", exc)
        ctx.echo(f"Export failed: {exc}")
        return 1
    return 0


def cmd_drilldown(args: argparse.Namespace, ctx: Context) -> int:
    fetched = load_issues(args.project, args, ctx)
    if not fetched.ok and not fetched.issues:
        for err in fetched.errors:
            ctx.echo(f"Error: {err}")
        return 1

    matches = issues_matching(fetched.issues, args.by, args.label)
    ctx.echo(f"{len(matches)} issue(s) with {args.by} = {args.label}")
    for issue in matches:
        ctx.echo(_issue_line(issue))
    return 0


_COMMANDS: dict[str, Callable[[argparse.Namespace, Context], int]] = {
    "login": cmd_login,
    "logout": cmd_logout,
    "projects": cmd_projects,
    "report": cmd_report,
    "drilldown": cmd_drilldown,
}


# -- helpers ------------------------------------------------------------------


def load_issues(project_key: str, args: argparse.Namespace, ctx: Context) -> IssueFetchResult:
    """Fetch a project's issues, falling back to demo data when not connected."""
    if not args.demo and ctx.jira.connect_from_config():
        max_issues = args.max_issues or ctx.config.get_int("max_issues")
        return ctx.jira.fetch_issues(project_key, max_issues=max_issues)

    result = IssueFetchResult(
        project_key=project_key,
        issues=sample_data.demo_issues(project_key, count=args.max_issues or 20, seed=args.seed),
        source="demo",
    )
    if not args.demo:
        msg = "Jira not configured for live data. Displaying demo data."
        logger.warning(msg)
        result.errors.append(msg)
    return result


def criteria_from_args(args: argparse.Namespace) -> FilterCriteria:
    """Translate report flags into :class:`FilterCriteria`."""

    def _set(values: list[str] | None) -> frozenset[str] | None:
        return frozenset(values) if values else None

    return FilterCriteria(
        statuses=_set(args.status),
        types=_set(args.types),
        assignees=_set(args.assignee),
        priorities=_set(args.priority),
        date_from=args.date_from,
        date_to=args.date_to,
    )


def export_charts(dashboard: DashboardData, directory: Path, *, dark: bool = False) -> list[Path]:
    """Render every non-empty chart into *directory* as PNG files."""
    charts = {
        "status.png": render_distribution_chart(dashboard.by_status, "Issues by Status", kind="pie", dark=dark),
        "type.png": render_distribution_chart(dashboard.by_type, "Issues by Type", dark=dark),
        "assignee.png": render_distribution_chart(dashboard.by_assignee, "Issues by Assignee", dark=dark),
        "timeline.png": render_timeline_chart(dashboard.timeline, dark=dark),
        "burndown.png": render_burndown_chart(dashboard.burndown, dark=dark),
        "velocity.png": render_velocity_chart(dashboard.velocity, dark=dark),
    }
    return [export_chart_png(png, directory / name) for name, png in charts.items() if png]


def print_dashboard(
    ctx: Context, project_key: str, dash: DashboardData, fetched: IssueFetchResult,
) -> None:
    source = " (demo data)" if fetched.source == "demo" else ""
    ctx.echo(f"{project_key}{source}: {len(dash.issues)} of {dash.total_unfiltered} issues")
    for err in fetched.errors:
        ctx.echo(f"  note    {err}")
    for line in dash.criteria.describe():
        ctx.echo(f"  filter  {line}")
    s = dash.summary
    ctx.echo(f"  open {s.open}, in progress {s.in_progress}, done {s.done}")

    for title, points in (
        ("Status", dash.by_status),
        ("Type", dash.by_type),
        ("Assignee", dash.by_assignee),
        ("Priority", dash.by_priority),
    ):
        ctx.echo()
        ctx.echo(title)
        _echo_points(ctx, points)

    if dash.burndown is not None:
        b = dash.burndown
        ctx.echo()
        ctx.echo(f"Burndown {format_day(b.start)} to {format_day(b.end)}, scope {b.total_scope}")
        if b.points:
            last = b.points[-1]
            ctx.echo(f"  remaining at end: {last.remaining} (ideal {last.ideal})")
        else:
            ctx.echo("  no data")


def _project_name(project_key: str, fetched: IssueFetchResult, ctx: Context) -> str:
    if fetched.source == "demo":
        project = sample_data.demo_project(project_key)
    else:
        project = ctx.jira.fetch_project(project_key)
    return project.name if project else project_key


def _echo_points(ctx: Context, points: list[ChartPoint]) -> None:
    if not points:
        ctx.echo("  no data")
        return
    width = max(len(p.name) for p in points)
    for p in points:
        ctx.echo(f"  {p.name:<{width}}  {p.value:>5}")


def _issue_line(issue: Issue) -> str:
    updated = issue.updated.strftime("%Y-%m-%d") if issue.updated else "-"
    return (
        f"{issue.key:<12} {issue.status:<14} {issue.effective_assignee:<18} "
        f"{updated}  {issue.summary}"
    )
