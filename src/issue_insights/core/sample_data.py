"""Demo projects and issues used when Jira is not connected."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta, timezone

from issue_insights.core.data_models import Issue, Project, StatusSummary

logger = logging.getLogger(__name__)

_PROJECTS = [
    Project(
        id="10001", key="PROJA", name="Project Alpha (Demo)", project_type="software",
        description="A demo software project with a mix of issue types and statuses.",
        lead="John Doe", summary=StatusSummary(total=50, open=10, in_progress=5, done=35),
    ),
    Project(
        id="10002", key="PROJB", name="Project Beta (Demo)", project_type="business",
        description="A demo business project with tasks and initiatives.",
        lead="Jane Smith", summary=StatusSummary(total=120, open=30, in_progress=20, done=70),
    ),
    Project(
        id="10003", key="PROJC", name="Project Gamma (Demo)", project_type="service_desk",
        description="A demo service desk project for customer support.",
        lead="Alex Johnson", summary=StatusSummary(total=75, open=15, in_progress=10, done=50),
    ),
]

_STATUSES = [
    ("To Do", "new"),
    ("In Progress", "indeterminate"),
    ("In Review", "indeterminate"),
    ("Done", "done"),
]
_TYPES = ["Bug", "Task", "Story", "Epic"]
_PRIORITIES = ["Highest", "High", "Medium", "Low", "Lowest"]
_ASSIGNEES = ["John Doe", "Jane Smith", "Alex Johnson", "Sarah Williams", None]
_VERBS = ["Implement", "Fix", "Update", "Review", "Test"]
_TOPICS = [
    "login page", "dashboard", "user profile", "settings", "navigation",
    "API integration", "database schema", "error handling",
]


def demo_projects() -> list[Project]:
    """Return the demo project list."""
    return list(_PROJECTS)


def demo_project(key: str) -> Project | None:
    """Look up a demo project by key or numeric id."""
    for p in _PROJECTS:
        if key in (p.key, p.id):
            return p
    return None


def demo_issues(
    project_key: str,
    count: int = 20,
    seed: int | None = None,
    now: datetime | None = None,
) -> list[Issue]:
    """Generate *count* random issues created within the last year.

    Pass *seed* for a reproducible set.
    """
    rng = random.Random(seed)
    now = now or datetime.now(tz=timezone.utc)
    year_ago = now - timedelta(days=365)

    def _between(lo: datetime, hi: datetime) -> datetime:
        span = (hi - lo).total_seconds()
        return lo + timedelta(seconds=rng.random() * span)

    issues: list[Issue] = []
    for n in range(1, count + 1):
        created = _between(year_ago, now)
        status, category = rng.choice(_STATUSES)
        issue_type = rng.choice(_TYPES)
        issues.append(
            Issue(
                id=f"{project_key}-{n}",
                key=f"{project_key}-{n}",
                summary=f"Demo {issue_type}: {rng.choice(_VERBS)} {rng.choice(_TOPICS)}",
                status=status,
                status_category=category,
                issue_type=issue_type,
                assignee=rng.choice(_ASSIGNEES),
                priority=rng.choice(_PRIORITIES),
                created=created,
                updated=_between(created, now),
            )
        )
    logger.info("Generated %d demo issues for %s", len(issues), project_key)
    return issues
