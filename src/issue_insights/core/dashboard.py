"""Assemble every dashboard series for one set of filter criteria."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from issue_insights.core.aggregations import (
    aggregate_by_assignee,
    aggregate_by_priority,
    aggregate_by_status,
    aggregate_by_type,
    aggregate_timeline,
    aggregate_weekly_velocity,
    summarize_status_categories,
)
from issue_insights.core.burndown import DEFAULT_HORIZON_DAYS, compute_burndown
from issue_insights.core.data_models import DashboardData, FilterCriteria, Issue
from issue_insights.core.filters import available_filter_options, filter_issues

logger = logging.getLogger(__name__)


def build_dashboard(
    issues: Sequence[Issue] | None,
    criteria: FilterCriteria | None = None,
    *,
    burndown_start: date | None = None,
    burndown_end: date | None = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    velocity_weeks: int = 8,
    today: date | None = None,
) -> DashboardData:
    """Filter *issues* and compute all chart series from the result.

    Filter options are taken from the unfiltered collection.
    """
    criteria = criteria or FilterCriteria()
    all_issues = list(issues or [])
    filtered = filter_issues(all_issues, criteria)
    today = today or date.today()

    data = DashboardData(
        criteria=criteria,
        options=available_filter_options(all_issues),
        issues=filtered,
        total_unfiltered=len(all_issues),
        summary=summarize_status_categories(filtered),
        by_status=aggregate_by_status(filtered),
        by_type=aggregate_by_type(filtered),
        by_assignee=aggregate_by_assignee(filtered),
        by_priority=aggregate_by_priority(filtered),
        timeline=aggregate_timeline(filtered, today=today),
        velocity=aggregate_weekly_velocity(filtered, weeks=velocity_weeks, today=today),
        burndown=compute_burndown(
            filtered, burndown_start, burndown_end,
            today=today, horizon_days=horizon_days,
        ),
    )
    logger.info(
        "Dashboard built: %d/%d issues after filtering", len(filtered), len(all_issues),
    )
    return data
