"""ReportLab PDF builder for landscape 16:9 project dashboard reports."""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from datetime import date
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    BaseDocTemplate,
    Frame,
    Image,
    PageBreak,
    PageTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
)

from issue_insights.core.chart_generator import (
    format_day,
    render_burndown_chart,
    render_distribution_chart,
    render_timeline_chart,
    render_velocity_chart,
)
from issue_insights.core.data_models import ChartPoint, DashboardData, DashboardReport, ReportConfig

logger = logging.getLogger(__name__)

_MONTHS_FULL = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# Page dimensions: landscape 16:9
PAGE_W = 406 * mm  # ~1152 pt
PAGE_H = 228.4 * mm  # ~648 pt
MARGIN = 18 * mm

_ISSUE_ROWS_PER_PAGE = 25
# Summary-page distribution tables sit side by side in one row and cannot
# split across pages, so each is capped.
_SUMMARY_TABLE_ROWS = 12
_SUMMARY_LABEL_CHARS = 40

# ---------------------------------------------------------------------------
# Colour palettes
# ---------------------------------------------------------------------------

_LIGHT_PALETTE = {
    "accent": colors.HexColor("#0052CC"),
    "text": colors.HexColor("#172B4D"),
    "muted": colors.HexColor("#6B778C"),
    "bg": colors.white,
    "surface": colors.HexColor("#F4F5F7"),
    "row_alt": colors.HexColor("#F8F9FA"),
    "grid": colors.HexColor("#DFE1E6"),
    "header_text": colors.white,
}

_DARK_PALETTE = {
    "accent": colors.HexColor("#2979FF"),
    "text": colors.HexColor("#E0E0E0"),
    "muted": colors.HexColor("#90A4AE"),
    "bg": colors.HexColor("#1E1E1E"),
    "surface": colors.HexColor("#263238"),
    "row_alt": colors.HexColor("#252525"),
    "grid": colors.HexColor("#37474F"),
    "header_text": colors.white,
}


def _fmt_long_date(d: date) -> str:
    """``"June 15, 2024"`` with English month names regardless of locale."""
    return f"{_MONTHS_FULL[d.month - 1]} {d.day:02d}, {d.year}"


def generate_pdf(report: DashboardReport) -> bytes:
    """Build the full PDF report and return it as bytes."""
    dark = report.config.dark_mode
    pal = _DARK_PALETTE if dark else _LIGHT_PALETTE
    dash = report.dashboard

    logger.info(
        "Generating PDF: %d issue(s), dark_mode=%s, title=%r",
        len(dash.issues), dark, report.config.title,
    )

    buf = io.BytesIO()
    doc = _create_doc(buf, pal)
    styles = _build_styles(pal)

    story: list[Any] = []

    logger.debug("Building title page")
    _add_title_page(story, report.config, styles)

    logger.debug("Building summary page")
    story.append(PageBreak())
    _add_summary_page(story, dash, report.errors, styles, pal)

    for title, render in _chart_pages(dash, dark):
        logger.debug("Building chart page: %s", title)
        story.append(PageBreak())
        _add_chart_page(story, title, render(), styles)

    if report.config.include_issue_table and dash.issues:
        logger.debug("Building issue table for %d issue(s)", len(dash.issues))
        _add_issue_table(story, dash, styles, pal)

    doc.build(story)
    result = buf.getvalue()
    logger.info("PDF built: %d bytes", len(result))
    return result


# -- document setup -----------------------------------------------------------


def _create_doc(buf: io.BytesIO, pal: dict[str, Any]) -> BaseDocTemplate:
    doc = BaseDocTemplate(
        buf,
        pagesize=(PAGE_W, PAGE_H),
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
    )
    frame = Frame(MARGIN, MARGIN, PAGE_W - 2 * MARGIN, PAGE_H - 2 * MARGIN, id="main")

    def _on_page(canvas: Any, doc: Any) -> None:
        canvas.saveState()
        canvas.setFillColor(pal["bg"])
        canvas.rect(0, 0, PAGE_W, PAGE_H, fill=1, stroke=0)
        canvas.restoreState()

    doc.addPageTemplates([PageTemplate(id="default", frames=[frame], onPage=_on_page)])
    return doc


def _build_styles(pal: dict[str, Any]) -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "ReportTitle", parent=base["Title"],
            fontSize=36, leading=44, textColor=pal["text"], alignment=TA_CENTER,
        ),
        "subtitle": ParagraphStyle(
            "Subtitle", parent=base["Normal"],
            fontSize=18, leading=24, textColor=pal["muted"], alignment=TA_CENTER,
        ),
        "heading": ParagraphStyle(
            "SectionHeading", parent=base["Heading1"],
            fontSize=22, leading=28, textColor=pal["text"], spaceAfter=8,
        ),
        "body": ParagraphStyle(
            "Body", parent=base["Normal"],
            fontSize=12, leading=16, textColor=pal["text"],
        ),
        "small": ParagraphStyle(
            "Small", parent=base["Normal"],
            fontSize=9, leading=12, textColor=pal["muted"],
        ),
        "cell": ParagraphStyle(
            "Cell", parent=base["Normal"],
            fontSize=9, leading=12, textColor=pal["text"],
        ),
        "cell_right": ParagraphStyle(
            "CellRight", parent=base["Normal"],
            fontSize=9, leading=12, textColor=pal["text"], alignment=TA_RIGHT,
        ),
        "cell_header": ParagraphStyle(
            "CellHeader", parent=base["Normal"],
            fontSize=9, leading=12, textColor=pal["header_text"],
        ),
        "section_heading": ParagraphStyle(
            "SectionHeading2", parent=base["Normal"],
            fontSize=14, leading=18, textColor=pal["text"],
        ),
        "metric_label": ParagraphStyle(
            "MetricLabel", parent=base["Normal"],
            fontSize=10, leading=14, textColor=pal["muted"],
        ),
        "metric_value": ParagraphStyle(
            "MetricValue", parent=base["Normal"],
            fontSize=12, leading=16, textColor=pal["text"],
        ),
    }


# -- Page 1: Title -----------------------------------------------------------


def _add_title_page(
    story: list[Any], config: ReportConfig, styles: dict[str, ParagraphStyle],
) -> None:
    story.append(Spacer(1, 60 * mm))
    story.append(Paragraph(escape(config.title), styles["title"]))
    story.append(Spacer(1, 8 * mm))

    if config.project_name or config.project_key:
        name = config.project_name or config.project_key
        if config.project_name and config.project_key:
            name = f"{config.project_name} ({config.project_key})"
        story.append(Paragraph(escape(name), styles["subtitle"]))
        story.append(Spacer(1, 4 * mm))

    story.append(Paragraph(_fmt_long_date(config.report_date), styles["subtitle"]))

    if config.author:
        story.append(Spacer(1, 3 * mm))
        story.append(Paragraph(f"Prepared by {escape(config.author)}", styles["subtitle"]))


# -- Page 2: Summary ----------------------------------------------------------


def _add_summary_page(
    story: list[Any], dash: DashboardData, errors: list[str],
    styles: dict[str, ParagraphStyle], pal: dict[str, Any],
) -> None:
    story.append(Paragraph("Summary", styles["heading"]))
    story.append(Spacer(1, 4 * mm))

    avail_w = PAGE_W - 2 * MARGIN
    col_w = avail_w * 0.23
    gap = avail_w * 0.02

    cols = [
        _build_summary_box(dash, styles, pal),
        "",
        _distribution_table("Status", dash.by_status, styles, pal),
        "",
        _distribution_table("Type", dash.by_type, styles, pal),
        "",
        _distribution_table("Assignee", dash.by_assignee, styles, pal),
    ]
    layout = Table([cols], colWidths=[col_w, gap, col_w, gap, col_w, gap, col_w])
    layout.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    story.append(layout)

    story.append(Spacer(1, 6 * mm))
    filters = dash.criteria.describe()
    if filters:
        story.append(Paragraph("<b>Active filters</b>", styles["section_heading"]))
        for line in filters:
            story.append(Paragraph(escape(line), styles["body"]))
    else:
        story.append(Paragraph("No filters applied.", styles["small"]))

    for err in errors:
        story.append(Spacer(1, 2 * mm))
        story.append(Paragraph(f"<i>{escape(err)}</i>", styles["small"]))


def _build_summary_box(
    dash: DashboardData, styles: dict[str, ParagraphStyle], pal: dict[str, Any],
) -> Table:
    s = dash.summary
    burndown = dash.burndown
    rows: list[list[Any]] = [
        [Paragraph("<b>Issues</b>", styles["section_heading"]), ""],
        [Paragraph("Shown", styles["metric_label"]),
         Paragraph(f"{s.total} of {dash.total_unfiltered}", styles["metric_value"])],
        [Paragraph("Open", styles["metric_label"]),
         Paragraph(str(s.open), styles["metric_value"])],
        [Paragraph("In Progress", styles["metric_label"]),
         Paragraph(str(s.in_progress), styles["metric_value"])],
        [Paragraph("Done", styles["metric_label"]),
         Paragraph(str(s.done), styles["metric_value"])],
        [Paragraph("Burndown", styles["metric_label"]),
         Paragraph(
             f"{format_day(burndown.start)} to {format_day(burndown.end)}" if burndown else "N/A",
             styles["metric_value"],
         )],
    ]
    tbl = Table(rows, colWidths=["55%", "45%"])
    tbl.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), pal["surface"]),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ("LEFTPADDING", (0, 0), (-1, -1), 4),
        ("LINEBELOW", (0, 0), (-1, 0), 0.5, pal["accent"]),
    ]))
    return tbl


def _distribution_table(
    label: str, points: list[ChartPoint],
    styles: dict[str, ParagraphStyle], pal: dict[str, Any],
) -> Table:
    rows: list[list[Any]] = [[
        Paragraph(f"<b>{label}</b>", styles["cell_header"]),
        Paragraph("<b>Issues</b>", styles["cell_header"]),
    ]]
    if not points:
        rows.append([Paragraph("<i>No data</i>", styles["small"]), ""])
    for p in _top_points(points, _SUMMARY_TABLE_ROWS):
        name = p.name[:_SUMMARY_LABEL_CHARS] + ("..." if len(p.name) > _SUMMARY_LABEL_CHARS else "")
        rows.append([
            Paragraph(escape(name), styles["cell"]),
            Paragraph(str(p.value), styles["cell_right"]),
        ])
    return _striped_table(rows, ["70%", "30%"], pal)


def _top_points(points: list[ChartPoint], limit: int) -> list[ChartPoint]:
    """Keep the first *limit* - 1 points and fold the rest into one "Other" row."""
    if len(points) <= limit:
        return list(points)
    head, rest = points[: limit - 1], points[limit - 1 :]
    return [*head, ChartPoint(f"Other ({len(rest)})", sum(p.value for p in rest))]


# -- Pages 3+: Charts ---------------------------------------------------------


def _chart_pages(dash: DashboardData, dark: bool) -> list[tuple[str, Callable[[], bytes | None]]]:
    return [
        ("Issues by Status", lambda: render_distribution_chart(
            dash.by_status, "Issues by Status", kind="pie", dark=dark)),
        ("Issues by Type", lambda: render_distribution_chart(
            dash.by_type, "Issues by Type", dark=dark)),
        ("Issues by Assignee", lambda: render_distribution_chart(
            dash.by_assignee, "Issues by Assignee", dark=dark)),
        ("Timeline", lambda: render_timeline_chart(dash.timeline, dark=dark)),
        ("Burndown", lambda: render_burndown_chart(dash.burndown, dark=dark)),
        ("Velocity", lambda: render_velocity_chart(dash.velocity, dark=dark)),
    ]


def _add_chart_page(
    story: list[Any], title: str, png: bytes | None, styles: dict[str, ParagraphStyle],
) -> None:
    story.append(Paragraph(title, styles["heading"]))
    story.append(Spacer(1, 4 * mm))
    if not png:
        story.append(Paragraph("<i>No chart data available</i>", styles["small"]))
        return
    story.append(Image(io.BytesIO(png), width=300 * mm, height=150 * mm, kind="proportional"))


# -- Issue table ---------------------------------------------------------------


def _add_issue_table(
    story: list[Any], dash: DashboardData,
    styles: dict[str, ParagraphStyle], pal: dict[str, Any],
) -> None:
    headers = ["Key", "Summary", "Status", "Type", "Assignee", "Priority", "Updated"]
    avail_w = PAGE_W - 2 * MARGIN
    col_widths = [
        avail_w * 0.09,  # Key
        avail_w * 0.37,  # Summary
        avail_w * 0.11,  # Status
        avail_w * 0.09,  # Type
        avail_w * 0.14,  # Assignee
        avail_w * 0.09,  # Priority
        avail_w * 0.11,  # Updated
    ]

    issues = dash.issues
    for offset in range(0, len(issues), _ISSUE_ROWS_PER_PAGE):
        story.append(PageBreak())
        story.append(Paragraph("Issues", styles["heading"]))
        rows: list[list[Any]] = [
            [Paragraph(f"<b>{h}</b>", styles["cell_header"]) for h in headers]
        ]
        for i in issues[offset:offset + _ISSUE_ROWS_PER_PAGE]:
            summary = i.summary[:90] + ("..." if len(i.summary) > 90 else "")
            rows.append([
                Paragraph(escape(i.key), styles["cell"]),
                Paragraph(escape(summary), styles["cell"]),
                Paragraph(escape(i.status), styles["cell"]),
                Paragraph(escape(i.issue_type), styles["cell"]),
                Paragraph(escape(i.effective_assignee), styles["cell"]),
                Paragraph(escape(i.priority or "-"), styles["cell"]),
                Paragraph(i.updated.strftime("%Y-%m-%d") if i.updated else "-", styles["cell"]),
            ])
        story.append(_striped_table(rows, col_widths, pal))


def _striped_table(rows: list[list[Any]], col_widths: list[Any], pal: dict[str, Any]) -> Table:
    tbl = Table(rows, colWidths=col_widths, repeatRows=1)
    style_cmds: list[Any] = [
        ("BACKGROUND", (0, 0), (-1, 0), pal["accent"]),
        ("TEXTCOLOR", (0, 0), (-1, 0), pal["header_text"]),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
        ("TOPPADDING", (0, 0), (-1, 0), 6),
        ("GRID", (0, 0), (-1, -1), 0.25, pal["grid"]),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LEFTPADDING", (0, 0), (-1, -1), 4),
        ("RIGHTPADDING", (0, 0), (-1, -1), 4),
        ("TOPPADDING", (0, 1), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 1), (-1, -1), 4),
    ]
    # Alternating row colours
    for i in range(2, len(rows), 2):
        style_cmds.append(("BACKGROUND", (0, i), (-1, i), pal["row_alt"]))
    tbl.setStyle(TableStyle(style_cmds))
    return tbl
