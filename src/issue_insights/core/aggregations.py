"""Chart-series aggregations over a (filtered) issue collection."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Sequence
from datetime import date, timedelta

from issue_insights.core.data_models import (
    CATEGORY_DONE,
    CATEGORY_IN_PROGRESS,
    ChartPoint,
    Issue,
    StatusSummary,
    TimelinePoint,
    VelocityPoint,
)
from issue_insights.core.normalizer import day_of

logger = logging.getLogger(__name__)


def aggregate_by(
    issues: Sequence[Issue] | None, key: Callable[[Issue], str | None]
) -> list[ChartPoint]:
    """Count issues per extracted key, largest count first.

    Ties keep the order in which each key was first seen.  Issues whose
    key is ``None`` are skipped.
    """
    if not issues:
        return []
    counts = Counter(k for k in map(key, issues) if k is not None)
    # most_common() is a stable sort, so first-seen order breaks ties
    return [ChartPoint(name, value) for name, value in counts.most_common()]


def aggregate_by_status(issues: Sequence[Issue] | None) -> list[ChartPoint]:
    return aggregate_by(issues, lambda i: i.status)


def aggregate_by_type(issues: Sequence[Issue] | None) -> list[ChartPoint]:
    return aggregate_by(issues, lambda i: i.issue_type)


def aggregate_by_assignee(issues: Sequence[Issue] | None) -> list[ChartPoint]:
    return aggregate_by(issues, lambda i: i.effective_assignee)


def aggregate_by_priority(issues: Sequence[Issue] | None) -> list[ChartPoint]:
    """Priority distribution; issues without a priority are left out."""
    return aggregate_by(issues, lambda i: i.priority)


def aggregate_timeline(
    issues: Sequence[Issue] | None, today: date | None = None
) -> list[TimelinePoint]:
    """Daily created/resolved counts from the first creation through *today*.

    An issue counts as resolved on the day of its last update when its
    status is in the done category; there is no transition history to do
    better.
    """
    if not issues:
        return []
    today = today or date.today()

    created_days = [day_of(i.created) for i in issues if i.created is not None]
    if not created_days:
        logger.warning("No issue has a usable created timestamp; timeline is empty")
        return []

    first = min(created_days)
    if first > today:
        return []

    created = Counter(created_days)
    resolved = Counter(
        day_of(i.updated) for i in issues if i.status_category == CATEGORY_DONE and i.updated
    )

    points: list[TimelinePoint] = []
    day = first
    while day <= today:
        points.append(TimelinePoint(day, created.get(day, 0), resolved.get(day, 0)))
        day += timedelta(days=1)

    logger.debug("Timeline: %d days from %s", len(points), first)
    return points


def aggregate_weekly_velocity(
    issues: Sequence[Issue] | None, weeks: int = 8, today: date | None = None
) -> list[VelocityPoint]:
    """Created vs. resolved issues for each of the last *weeks* weeks.

    Weeks start on Monday; the current (partial) week is the last point.
    """
    if not issues or weeks <= 0:
        return []
    today = today or date.today()
    current = today - timedelta(days=today.weekday())
    starts = [current - timedelta(weeks=n) for n in range(weeks - 1, -1, -1)]

    def _week(d: date) -> date:
        return d - timedelta(days=d.weekday())

    created = Counter(_week(day_of(i.created)) for i in issues if i.created)
    resolved = Counter(
        _week(day_of(i.updated)) for i in issues if i.status_category == CATEGORY_DONE and i.updated
    )
    return [VelocityPoint(s, created.get(s, 0), resolved.get(s, 0)) for s in starts]


def summarize_status_categories(issues: Sequence[Issue] | None) -> StatusSummary:
    """Open / in-progress / done counts by status category."""
    if not issues:
        return StatusSummary()
    cats = Counter(i.status_category for i in issues)
    done = cats.get(CATEGORY_DONE, 0)
    in_progress = cats.get(CATEGORY_IN_PROGRESS, 0)
    total = len(issues)
    return StatusSummary(
        total=total,
        open=total - done - in_progress,
        in_progress=in_progress,
        done=done,
    )
