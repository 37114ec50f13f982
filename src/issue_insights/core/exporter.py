"""CSV and image export of dashboard data."""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Sequence
from pathlib import Path

from issue_insights.core.data_models import Issue

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "id", "key", "summary", "status", "issueType",
    "assignee", "priority", "created", "updated",
]


class ExportError(Exception):
    """Raised when there is nothing to export or the target can't be written."""


def issues_to_csv(issues: Sequence[Issue]) -> str:
    """Serialize issues as CSV text with a header row.

    Raises:
        ExportError: If *issues* is empty.
    """
    if not issues:
        raise ExportError("No issues to export")

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for i in issues:
        writer.writerow([
            i.id,
            i.key,
            i.summary,
            i.status,
            i.issue_type,
            i.assignee or "",
            i.priority or "",
            i.created.isoformat() if i.created else "",
            i.updated.isoformat() if i.updated else "",
        ])
    return buf.getvalue()


def export_issues_csv(issues: Sequence[Issue], path: Path) -> Path:
    """Write *issues* to *path* as UTF-8 CSV and return the path."""
    _write(path, issues_to_csv(issues).encode("utf-8"))
    logger.info("Exported %d issues to %s", len(issues), path)
    return path


def export_chart_png(png: bytes | None, path: Path) -> Path:
    """Write rendered chart bytes to *path*.

    Raises:
        ExportError: If there is no rendered chart.
    """
    if not png:
        raise ExportError(f"No chart data to export to {path.name}")
    _write(path, png)
    logger.info("Exported chart to %s (%d bytes)", path, len(png))
    return path


def _write(path: Path, data: bytes) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise ExportError(f"Cannot write {path}: {exc}") from exc
