"""Convert raw Jira REST issue payloads into :class:`Issue` values."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from dateutil.parser import parse as dt_parse

from issue_insights.core.data_models import CATEGORY_NEW, Issue

logger = logging.getLogger(__name__)


def normalize_issue(raw: dict[str, Any]) -> Issue:
    """Build an :class:`Issue` from a Jira REST v3 issue dict.

    Only ``status`` and ``issuetype`` are treated as always present; a
    payload that lacks them still normalizes, with empty names.
    """
    fields: dict[str, Any] = raw.get("fields") or {}
    key = str(raw.get("key", ""))
    status = fields.get("status") or {}
    category = (status.get("statusCategory") or {}).get("key") or CATEGORY_NEW

    return Issue(
        id=str(raw.get("id", key)),
        key=key,
        summary=fields.get("summary") or "",
        status=status.get("name") or "",
        status_category=str(category),
        issue_type=(fields.get("issuetype") or {}).get("name") or "",
        assignee=_display_name(fields.get("assignee")),
        priority=_name(fields.get("priority")),
        created=parse_timestamp(fields.get("created"), key, "created"),
        updated=parse_timestamp(fields.get("updated"), key, "updated"),
    )


def normalize_issues(raws: Iterable[dict[str, Any]] | None) -> list[Issue]:
    """Normalize a collection, tolerating ``None``."""
    if not raws:
        return []
    return [normalize_issue(r) for r in raws]


def parse_timestamp(value: Any, key: str = "", field_name: str = "") -> datetime | None:
    """Parse an ISO-8601 timestamp; unparseable values become ``None``."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return dt_parse(str(value))
    except (ValueError, TypeError, OverflowError):
        logger.warning("Issue %s has an unparseable %s timestamp: %r", key, field_name, value)
        return None


def day_of(ts: datetime) -> date:
    """Calendar day of *ts* in its own UTC offset."""
    return ts.date()


def _display_name(obj: Any) -> str | None:
    if not obj:
        return None
    if isinstance(obj, str):
        return obj
    return obj.get("displayName") or None


def _name(obj: Any) -> str | None:
    if not obj:
        return None
    if isinstance(obj, str):
        return obj
    return obj.get("name") or None
