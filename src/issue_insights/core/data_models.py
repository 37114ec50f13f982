"""Data models for Issue Insights."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

UNASSIGNED = "Unassigned"

# Jira status-category keys
CATEGORY_NEW = "new"
CATEGORY_IN_PROGRESS = "indeterminate"
CATEGORY_DONE = "done"


@dataclass(frozen=True)
class Issue:
    """A single normalized Jira issue."""

    id: str
    key: str
    summary: str
    status: str
    status_category: str  # "new", "indeterminate", "done"
    issue_type: str
    assignee: str | None = None
    priority: str | None = None
    created: datetime | None = None
    updated: datetime | None = None

    @property
    def effective_assignee(self) -> str:
        """Assignee display name, or ``"Unassigned"`` when none is set."""
        return self.assignee or UNASSIGNED

    @property
    def is_done(self) -> bool:
        return self.status_category == CATEGORY_DONE


@dataclass(frozen=True)
class FilterCriteria:
    """Optional per-dimension restrictions applied by the filter engine.

    ``None`` on a dimension means "no restriction".
    """

    statuses: frozenset[str] | None = None
    types: frozenset[str] | None = None
    assignees: frozenset[str] | None = None
    priorities: frozenset[str] | None = None
    date_from: date | None = None
    date_to: date | None = None

    @property
    def has_date_range(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    @property
    def is_empty(self) -> bool:
        """Return True when no criterion restricts anything."""
        return not (
            self.statuses or self.types or self.assignees or self.priorities
            or self.has_date_range
        )

    def describe(self) -> list[str]:
        """Human-readable lines for each active criterion."""
        lines: list[str] = []
        for label, values in (
            ("Status", self.statuses),
            ("Type", self.types),
            ("Assignee", self.assignees),
            ("Priority", self.priorities),
        ):
            if values:
                lines.append(f"{label}: {', '.join(sorted(values))}")
        if self.has_date_range:
            lo = self.date_from.isoformat() if self.date_from else "…"
            hi = self.date_to.isoformat() if self.date_to else "…"
            lines.append(f"Updated: {lo} to {hi}")
        return lines


@dataclass(frozen=True)
class ChartPoint:
    """A (label, count) pair for category charts."""

    name: str
    value: int


@dataclass(frozen=True)
class TimelinePoint:
    day: date
    created: int = 0
    resolved: int = 0


@dataclass(frozen=True)
class BurndownPoint:
    day: date
    remaining: int
    ideal: int


@dataclass
class BurndownResult:
    """Burndown series plus the window it was computed over."""

    start: date
    end: date
    total_scope: int = 0
    points: list[BurndownPoint] = field(default_factory=list)


@dataclass(frozen=True)
class VelocityPoint:
    week_start: date
    created: int = 0
    resolved: int = 0


@dataclass
class FilterOptions:
    """Distinct values available for each filter dimension."""

    statuses: list[str] = field(default_factory=list)
    types: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    priorities: list[str] = field(default_factory=list)


@dataclass
class StatusSummary:
    """Issue counts per status category."""

    total: int = 0
    open: int = 0
    in_progress: int = 0
    done: int = 0


@dataclass
class Project:
    """A Jira project as listed on the projects overview."""

    id: str
    key: str
    name: str
    project_type: str = ""
    description: str = ""
    lead: str | None = None
    summary: StatusSummary | None = None


@dataclass
class IssueFetchResult:
    """Issues retrieved for a project plus any errors met on the way.

    Failures never raise: ``issues`` is empty and ``errors`` explains why.
    """

    project_key: str
    issues: list[Issue] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    source: str = "live"  # "live" or "demo"

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class DashboardData:
    """Every chart series for one project under one set of criteria."""

    criteria: FilterCriteria
    options: FilterOptions
    issues: list[Issue] = field(default_factory=list)
    total_unfiltered: int = 0
    summary: StatusSummary = field(default_factory=StatusSummary)
    by_status: list[ChartPoint] = field(default_factory=list)
    by_type: list[ChartPoint] = field(default_factory=list)
    by_assignee: list[ChartPoint] = field(default_factory=list)
    by_priority: list[ChartPoint] = field(default_factory=list)
    timeline: list[TimelinePoint] = field(default_factory=list)
    velocity: list[VelocityPoint] = field(default_factory=list)
    burndown: BurndownResult | None = None


@dataclass
class ReportConfig:
    """Configuration for a PDF dashboard report."""

    project_key: str = ""
    project_name: str = ""
    title: str = "Project Dashboard"
    author: str = ""
    report_date: date = field(default_factory=date.today)
    dark_mode: bool = False
    include_issue_table: bool = True


@dataclass
class DashboardReport:
    """All data needed to render the PDF dashboard report."""

    config: ReportConfig
    dashboard: DashboardData
    errors: list[str] = field(default_factory=list)
