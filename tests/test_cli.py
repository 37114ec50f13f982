"""Tests for the command line (issue_insights.__main__ and issue_insights.app)."""

from __future__ import annotations

import csv
import io
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from issue_insights.__main__ import build_parser
from issue_insights.app import criteria_from_args, run_cli
from issue_insights.core import sample_data
from issue_insights.core.data_models import IssueFetchResult, Project
from issue_insights.core.exporter import CSV_COLUMNS
from issue_insights.services.auth_manager import AuthManager
from issue_insights.services.config_manager import ConfigManager


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _make_config(tmp_path: Path) -> ConfigManager:
    cfg = ConfigManager(config_dir=tmp_path / "config")
    cfg.reset()
    return cfg


def _run(
    argv: list[str],
    tmp_path: Path,
    *,
    jira: MagicMock | None = None,
    config: ConfigManager | None = None,
) -> tuple[int, str, ConfigManager]:
    """Parse and run *argv* against isolated services; return (code, output, config)."""
    config = config or _make_config(tmp_path)
    if jira is None:
        jira = MagicMock()
        jira.connect_from_config.return_value = False
    out = io.StringIO()
    code = run_cli(
        build_parser().parse_args(argv),
        config=config,
        auth=AuthManager(config),
        jira=jira,
        out=out,
    )
    return code, out.getvalue(), config


# ---------------------------------------------------------------------------
# argument parsing
# ---------------------------------------------------------------------------


class TestParser:
    def test_report_filters(self) -> None:
        args = build_parser().parse_args([
            "report", "PROJ", "--status", "Done", "--status", "To Do",
            "--type", "Bug", "--from", "2024-01-01", "--to", "2024-02-01",
        ])
        criteria = criteria_from_args(args)
        assert criteria.statuses == frozenset({"Done", "To Do"})
        assert criteria.types == frozenset({"Bug"})
        assert criteria.assignees is None
        assert criteria.date_from == date(2024, 1, 1)
        assert criteria.date_to == date(2024, 2, 1)

    def test_no_filters_is_empty(self) -> None:
        args = build_parser().parse_args(["report", "PROJ"])
        assert criteria_from_args(args).is_empty

    def test_rejects_bad_date(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["report", "PROJ", "--from", "01/02/2024"])

    def test_rejects_unknown_dimension(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["drilldown", "PROJ", "x", "--by", "colour"])

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


# ---------------------------------------------------------------------------
# report
# ---------------------------------------------------------------------------


class TestReport:
    def test_demo_report_prints_dashboard(self, tmp_path: Path) -> None:
        code, out, _ = _run(["report", "PROJA", "--demo", "--seed", "7"], tmp_path)
        assert code == 0
        assert out.startswith("PROJA (demo data): 20 of 20 issues")
        for heading in ("Status", "Type", "Assignee", "Priority"):
            assert f"\n{heading}\n" in out

    def test_remembers_last_project(self, tmp_path: Path) -> None:
        code, _, config = _run(["report", "PROJB", "--demo"], tmp_path)
        assert code == 0
        assert config.get("last_project_key") == "PROJB"

        code, out, _ = _run(["report", "--demo"], tmp_path, config=config)
        assert code == 0
        assert out.startswith("PROJB")

    def test_requires_project(self, tmp_path: Path) -> None:
        code, out, _ = _run(["report", "--demo"], tmp_path)
        assert code == 1
        assert "Specify a project key" in out

    def test_falls_back_to_demo_when_not_configured(self, tmp_path: Path) -> None:
        code, out, _ = _run(["report", "PROJA", "--seed", "1"], tmp_path)
        assert code == 0
        assert "(demo data)" in out
        assert "Jira not configured for live data" in out

    def test_live_fetch_failure(self, tmp_path: Path) -> None:
        jira = MagicMock()
        jira.connect_from_config.return_value = True
        jira.fetch_issues.return_value = IssueFetchResult(
            project_key="PROJ", errors=["Failed to fetch issues for PROJ: boom"],
        )
        code, out, config = _run(["report", "PROJ", "--max-issues", "50"], tmp_path, jira=jira)
        assert code == 1
        assert "Error: Failed to fetch issues for PROJ: boom" in out
        jira.fetch_issues.assert_called_once_with("PROJ", max_issues=50)
        assert config.get("last_project_key") == ""

    def test_live_uses_configured_max_issues(self, tmp_path: Path) -> None:
        jira = MagicMock()
        jira.connect_from_config.return_value = True
        jira.fetch_issues.return_value = IssueFetchResult(
            project_key="PROJ", issues=sample_data.demo_issues("PROJ", count=5, seed=2),
        )
        config = _make_config(tmp_path)
        config.set("max_issues", 75)
        code, out, _ = _run(["report", "PROJ"], tmp_path, jira=jira, config=config)
        assert code == 0
        assert out.startswith("PROJ: 5 of 5 issues")
        jira.fetch_issues.assert_called_once_with("PROJ", max_issues=75)

    def test_filters_reduce_issue_count(self, tmp_path: Path) -> None:
        issues = sample_data.demo_issues("PROJA", count=20, seed=11)
        expected = sum(1 for i in issues if i.status == "Done")
        code, out, _ = _run(
            ["report", "PROJA", "--demo", "--seed", "11", "--status", "Done"], tmp_path,
        )
        assert code == 0
        assert out.startswith(f"PROJA (demo data): {expected} of 20 issues")
        assert "filter  Status: Done" in out

    def test_exports(self, tmp_path: Path) -> None:
        csv_path = tmp_path / "out" / "issues.csv"
        pdf_path = tmp_path / "report.pdf"
        charts_dir = tmp_path / "charts"
        code, out, _ = _run(
            [
                "report", "PROJA", "--demo", "--seed", "3",
                "--csv", str(csv_path), "--pdf", str(pdf_path),
                "--charts", str(charts_dir), "--author", "QA",
            ],
            tmp_path,
        )
        assert code == 0

        rows = list(csv.reader(csv_path.read_text(encoding="utf-8").splitlines()))
        assert rows[0] == CSV_COLUMNS
        assert len(rows) == 21

        assert pdf_path.read_bytes().startswith(b"%PDF")
        assert (charts_dir / "status.png").exists()
        assert (charts_dir / "type.png").exists()
        assert f"Wrote {pdf_path}" in out

    def test_csv_skipped_when_nothing_matches(self, tmp_path: Path) -> None:
        csv_path = tmp_path / "issues.csv"
        code, out, _ = _run(
            ["report", "PROJA", "--demo", "--status", "Nope", "--csv", str(csv_path)],
            tmp_path,
        )
        assert code == 0
        assert "CSV not written" in out
        assert not csv_path.exists()


# ---------------------------------------------------------------------------
# drilldown / projects
# ---------------------------------------------------------------------------


class TestDrilldown:
    def test_lists_matching_issues(self, tmp_path: Path) -> None:
        issues = sample_data.demo_issues("PROJA", count=20, seed=5)
        expected = [i.key for i in issues if i.effective_assignee == "Unassigned"]

        code, out, _ = _run(
            ["drilldown", "PROJA", "Unassigned", "--by", "assignee", "--demo", "--seed", "5"],
            tmp_path,
        )
        assert code == 0
        lines = out.splitlines()
        assert lines[0] == f"{len(expected)} issue(s) with assignee = Unassigned"
        assert [line.split()[0] for line in lines[1:]] == expected

    def test_unknown_label_is_empty(self, tmp_path: Path) -> None:
        code, out, _ = _run(["drilldown", "PROJA", "Nope", "--demo"], tmp_path)
        assert code == 0
        assert out.strip() == "0 issue(s) with status = Nope"


class TestProjects:
    def test_demo_projects(self, tmp_path: Path) -> None:
        code, out, _ = _run(["projects", "--demo"], tmp_path)
        assert code == 0
        assert "PROJA" in out and "PROJB" in out and "PROJC" in out
        assert "Jira not configured" not in out

    def test_live_projects_without_summary(self, tmp_path: Path) -> None:
        jira = MagicMock()
        jira.connect_from_config.return_value = True
        jira.fetch_projects.return_value = [Project(id="1", key="LIVE", name="Live project")]
        code, out, _ = _run(["projects"], tmp_path, jira=jira)
        assert code == 0
        assert "LIVE" in out
        jira.fetch_projects.assert_called_once_with(with_summary=True)

    def test_no_projects(self, tmp_path: Path) -> None:
        jira = MagicMock()
        jira.connect_from_config.return_value = True
        jira.fetch_projects.return_value = []
        code, out, _ = _run(["projects"], tmp_path, jira=jira)
        assert code == 0
        assert "No projects found." in out


# ---------------------------------------------------------------------------
# login / logout
# ---------------------------------------------------------------------------


class TestLogin:
    @patch("issue_insights.services.auth_manager.keyring")
    def test_success(self, mock_keyring: MagicMock, tmp_path: Path) -> None:
        jira = MagicMock()
        jira.connect_basic.return_value = True
        jira.get_myself.return_value = {"displayName": "Alice", "emailAddress": "a@b.com"}
        code, out, config = _run(
            ["login", "--url", "https://acme.atlassian.net", "--email", "a@b.com", "--token", "tok"],
            tmp_path, jira=jira,
        )
        assert code == 0
        assert "Logged in to acme as Alice." in out
        assert config.get("auth_method") == "api_token"
        mock_keyring.set_password.assert_called_once()

    @patch("issue_insights.services.auth_manager.keyring")
    def test_failure_stores_nothing(self, mock_keyring: MagicMock, tmp_path: Path) -> None:
        jira = MagicMock()
        jira.connect_basic.return_value = False
        code, out, config = _run(
            ["login", "--url", "https://acme.atlassian.net", "--email", "a@b.com", "--token", "bad"],
            tmp_path, jira=jira,
        )
        assert code == 1
        assert "Login failed" in out
        assert config.get("auth_method") == ""
        mock_keyring.set_password.assert_not_called()


class TestLogout:
    @patch("issue_insights.services.auth_manager.keyring")
    def test_clears_credentials(self, mock_keyring: MagicMock, tmp_path: Path) -> None:
        config = _make_config(tmp_path)
        config.update({"auth_method": "api_token", "jira_url": "https://acme.atlassian.net"})
        code, out, _ = _run(["logout"], tmp_path, config=config)
        assert code == 0
        assert out.strip() == "Logged out."
        assert config.get("jira_url") == ""
        mock_keyring.delete_password.assert_called_once()
