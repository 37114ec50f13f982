"""Tests for issue_insights.core.data_models."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from issue_insights.core.data_models import (
    UNASSIGNED,
    BurndownResult,
    DashboardData,
    FilterCriteria,
    FilterOptions,
    Issue,
    IssueFetchResult,
    ReportConfig,
    StatusSummary,
)


class TestIssue:
    """Verify Issue fields and derived properties."""

    def test_creation(self) -> None:
        issue = Issue(
            id="10001",
            key="PROJ-1",
            summary="Do the thing",
            status="To Do",
            status_category="new",
            issue_type="Story",
            assignee="Alice",
            priority="High",
            created=datetime(2024, 1, 1, tzinfo=timezone.utc),
            updated=datetime(2024, 1, 2, tzinfo=timezone.utc),
        )
        assert issue.key == "PROJ-1"
        assert issue.effective_assignee == "Alice"
        assert issue.is_done is False

    def test_optional_fields_default_to_none(self) -> None:
        issue = Issue(
            id="1", key="X-1", summary="", status="Done",
            status_category="done", issue_type="Bug",
        )
        assert issue.assignee is None
        assert issue.priority is None
        assert issue.created is None
        assert issue.is_done is True

    def test_effective_assignee_fallback(self) -> None:
        issue = Issue(id="1", key="X-1", summary="", status="To Do",
                      status_category="new", issue_type="Task", assignee=None)
        assert issue.effective_assignee == UNASSIGNED == "Unassigned"

    def test_frozen(self) -> None:
        issue = Issue(id="1", key="X-1", summary="", status="To Do",
                      status_category="new", issue_type="Task")
        with pytest.raises(AttributeError):
            issue.status = "Done"  # type: ignore[misc]


class TestFilterCriteria:
    """FilterCriteria emptiness and description."""

    def test_default_is_empty(self) -> None:
        assert FilterCriteria().is_empty is True
        assert FilterCriteria().has_date_range is False

    def test_single_bound_is_a_date_range(self) -> None:
        c = FilterCriteria(date_to=date(2024, 3, 1))
        assert c.has_date_range is True
        assert c.is_empty is False

    def test_describe_lists_active_criteria(self) -> None:
        c = FilterCriteria(
            statuses=frozenset({"Done", "To Do"}),
            date_from=date(2024, 1, 1),
        )
        lines = c.describe()
        assert lines[0] == "Status: Done, To Do"
        assert lines[1].startswith("Updated: 2024-01-01")

    def test_describe_empty(self) -> None:
        assert FilterCriteria().describe() == []


class TestDefaults:
    """Containers must default to independent empty collections."""

    def test_filter_options(self) -> None:
        a = FilterOptions()
        b = FilterOptions()
        a.statuses.append("Done")
        assert b.statuses == []

    def test_fetch_result_ok(self) -> None:
        r = IssueFetchResult(project_key="P")
        assert r.ok is True
        assert r.source == "live"
        r.errors.append("boom")
        assert r.ok is False

    def test_burndown_result(self) -> None:
        r = BurndownResult(start=date(2024, 1, 1), end=date(2024, 1, 15))
        assert r.points == []
        assert r.total_scope == 0

    def test_dashboard_data(self) -> None:
        d = DashboardData(criteria=FilterCriteria(), options=FilterOptions())
        assert d.issues == []
        assert d.summary == StatusSummary()
        assert d.burndown is None

    def test_report_config(self) -> None:
        cfg = ReportConfig()
        assert cfg.title == "Project Dashboard"
        assert cfg.dark_mode is False
        assert cfg.report_date == date.today()
