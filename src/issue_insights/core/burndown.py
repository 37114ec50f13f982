"""Burndown projection: actual remaining issues against an ideal line."""

from __future__ import annotations

import logging
import math
from bisect import bisect_right
from collections.abc import Sequence
from datetime import date, timedelta

from issue_insights.core.data_models import (
    CATEGORY_DONE,
    BurndownPoint,
    BurndownResult,
    Issue,
)
from issue_insights.core.normalizer import day_of

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 14


def compute_burndown(
    issues: Sequence[Issue] | None,
    start: date | None = None,
    end: date | None = None,
    *,
    today: date | None = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> BurndownResult:
    """Compute a burndown over ``[start, end]`` for the given issues.

    Scope is the number of issues passed in, so the chart follows whatever
    filter is active.  ``start`` defaults to the earliest creation date and
    ``end`` to *horizon_days* after *today*.
    """
    today = today or date.today()
    default_end = today + timedelta(days=horizon_days)

    if not issues:
        logger.debug("No issues, returning empty burndown")
        return BurndownResult(start=start or today, end=end or default_end)

    if start is None:
        created = [day_of(i.created) for i in issues if i.created is not None]
        start = min(created) if created else today
    if end is None:
        end = default_end

    total = len(issues)
    total_days = (end - start).days
    resolved_days = sorted(
        day_of(i.updated) for i in issues if i.status_category == CATEGORY_DONE and i.updated
    )

    points: list[BurndownPoint] = []
    day = start
    while day <= end:
        elapsed = (day - start).days
        done_so_far = bisect_right(resolved_days, day)
        points.append(
            BurndownPoint(
                day=day,
                remaining=max(0, total - done_so_far),
                ideal=_ideal(total, elapsed, total_days),
            )
        )
        day += timedelta(days=1)

    logger.debug(
        "Burndown %s → %s: scope=%d, %d resolved, %d points",
        start, end, total, len(resolved_days), len(points),
    )
    return BurndownResult(start=start, end=end, total_scope=total, points=points)


def _ideal(total: int, elapsed: int, total_days: int) -> int:
    if total == 0 or total_days <= 0:
        return 0
    value = max(0.0, total * (1 - elapsed / total_days))
    # Round half up
    return int(math.floor(value + 0.5))
