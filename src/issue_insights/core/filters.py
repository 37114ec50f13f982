"""Filter engine, filter-option extraction and drill-down lookups."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from issue_insights.core.data_models import FilterCriteria, FilterOptions, Issue
from issue_insights.core.normalizer import day_of

logger = logging.getLogger(__name__)

# Drill-down dimensions and the key each one groups by
DIMENSIONS: dict[str, Callable[[Issue], str | None]] = {
    "status": lambda i: i.status,
    "type": lambda i: i.issue_type,
    "assignee": lambda i: i.effective_assignee,
    "priority": lambda i: i.priority,
}


def filter_issues(
    issues: Iterable[Issue] | None, criteria: FilterCriteria | None
) -> list[Issue]:
    """Return the issues matching every active criterion, in input order."""
    if not issues:
        return []
    if criteria is None or criteria.is_empty:
        return list(issues)

    result = [i for i in issues if _matches(i, criteria)]
    logger.debug("Filtered issues: %d kept", len(result))
    return result


def _matches(issue: Issue, c: FilterCriteria) -> bool:
    if c.statuses and issue.status not in c.statuses:
        return False
    if c.types and issue.issue_type not in c.types:
        return False
    if c.assignees and issue.effective_assignee not in c.assignees:
        return False
    # Issues without a priority pass through an active priority filter
    if c.priorities and issue.priority and issue.priority not in c.priorities:
        return False

    if c.has_date_range:
        if issue.updated is None:
            logger.warning("Excluding %s from date filter: no usable updated timestamp", issue.key)
            return False
        day = day_of(issue.updated)
        if c.date_from is not None and day < c.date_from:
            return False
        if c.date_to is not None and day > c.date_to:
            return False

    return True


def available_filter_options(issues: Iterable[Issue] | None) -> FilterOptions:
    """Collect the distinct, sorted values of each filter dimension.

    Run this over the unfiltered set so options don't shrink as filters
    are applied.
    """
    if not issues:
        return FilterOptions()

    statuses: set[str] = set()
    types: set[str] = set()
    assignees: set[str] = set()
    priorities: set[str] = set()
    for issue in issues:
        statuses.add(issue.status)
        types.add(issue.issue_type)
        assignees.add(issue.effective_assignee)
        if issue.priority:
            priorities.add(issue.priority)

    return FilterOptions(
        statuses=sorted(statuses),
        types=sorted(types),
        assignees=sorted(assignees),
        priorities=sorted(priorities),
    )


# -- drill-down ---------------------------------------------------------------


def issues_matching(issues: Iterable[Issue] | None, dimension: str, label: str) -> list[Issue]:
    """Return the issues whose *dimension* key equals *label*.

    Raises:
        ValueError: If *dimension* is not one of :data:`DIMENSIONS`.
    """
    try:
        key = DIMENSIONS[dimension]
    except KeyError:
        raise ValueError(
            f"Unknown dimension {dimension!r}; expected one of {', '.join(DIMENSIONS)}"
        ) from None
    if not issues:
        return []
    return [i for i in issues if key(i) == label]


def issues_by_status(issues: Iterable[Issue] | None, status: str) -> list[Issue]:
    return issues_matching(issues, "status", status)


def issues_by_type(issues: Iterable[Issue] | None, issue_type: str) -> list[Issue]:
    return issues_matching(issues, "type", issue_type)


def issues_by_assignee(issues: Iterable[Issue] | None, assignee: str) -> list[Issue]:
    return issues_matching(issues, "assignee", assignee)
