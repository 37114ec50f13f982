"""Matplotlib rendering of the dashboard series as PNG images."""

from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from datetime import date

from issue_insights.core.data_models import (
    BurndownResult,
    ChartPoint,
    TimelinePoint,
    VelocityPoint,
)

import matplotlib  # isort: skip

matplotlib.use("Agg")

import matplotlib.dates as mdates  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402
import matplotlib.ticker as mticker  # noqa: E402

logger = logging.getLogger(__name__)

_MONTHS_ABBR = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def format_day(d: date) -> str:
    """``"Mar 05"``-style label with English month names."""
    return f"{_MONTHS_ABBR[d.month - 1]} {d.day:02d}"


class _EnglishDateFormatter(mticker.Formatter):
    """Date formatter that always uses English abbreviated month names.

    Avoids locale-dependent ``%b`` which produces non-Latin characters on
    systems with e.g. Ukrainian or Russian locale.
    """

    def __call__(self, x: float, pos: int | None = None) -> str:
        return format_day(mdates.num2date(x).date())


# -- Light theme colour palette ------------------------------------------------
_LIGHT = {
    "series": ["#0052cc", "#36b37e", "#ffab00", "#de350b", "#6554c0", "#00b8d9", "#8993a4"],
    "created": "#4c9aff",
    "resolved": "#36b37e",
    "remaining": "#0747a6",
    "ideal": "#8b6914",
    "label_color": "#505f79",
    "grid": "#dfe1e6",
    "bg": "#ffffff",
    "face": "#ffffff",
    "legend_face": "#ffffff",
}

# -- Dark theme colour palette -------------------------------------------------
_DARK = {
    "series": ["#2979ff", "#66bb6a", "#ffa726", "#ef5350", "#9575cd", "#4dd0e1", "#90a4ae"],
    "created": "#82b1ff",
    "resolved": "#66bb6a",
    "remaining": "#82b1ff",
    "ideal": "#ffb74d",
    "label_color": "#b0bec5",
    "grid": "#37474f",
    "bg": "#1e1e1e",
    "face": "#1e1e1e",
    "legend_face": "#263238",
}


def render_distribution_chart(
    points: Sequence[ChartPoint],
    title: str,
    *,
    kind: str = "bar",
    dpi: int = 150,
    dark: bool = False,
) -> bytes | None:
    """Render a status/type/assignee distribution as a bar or pie chart.

    Returns ``None`` if there is nothing to plot.
    """
    if not points:
        logger.debug("No data for %r, skipping chart", title)
        return None
    if kind not in ("bar", "pie"):
        raise ValueError(f"Unsupported chart kind: {kind!r}")

    pal = _DARK if dark else _LIGHT
    names = [p.name for p in points]
    values = [p.value for p in points]
    colours = [pal["series"][i % len(pal["series"])] for i in range(len(points))]

    fig, ax = _new_figure(pal, dpi)
    if kind == "pie":
        _, texts, autotexts = ax.pie(
            values, labels=names, colors=colours, autopct="%1.0f%%",
            startangle=90, counterclock=False,
            wedgeprops={"edgecolor": pal["bg"], "linewidth": 1},
        )
        for text in (*texts, *autotexts):
            text.set_fontsize(7)
            text.set_color(pal["label_color"])
        ax.axis("equal")
    else:
        ax.barh(names[::-1], values[::-1], color=colours[::-1])
        ax.xaxis.set_major_locator(mticker.MaxNLocator(integer=True))
        ax.set_xlabel("Issues", fontsize=8, color=pal["label_color"])
        _style_axes(ax, pal)
        ax.grid(axis="x", linewidth=0.3, color=pal["grid"])
        ax.set_axisbelow(True)

    ax.set_title(title, fontsize=10, color=pal["label_color"])
    return _to_png(fig, dpi)


def render_timeline_chart(
    points: Sequence[TimelinePoint], *, dpi: int = 150, dark: bool = False
) -> bytes | None:
    """Render daily created vs. resolved issue counts."""
    if not points:
        logger.debug("No timeline data, skipping chart")
        return None

    pal = _DARK if dark else _LIGHT
    days = [p.day for p in points]
    fig, ax = _new_figure(pal, dpi)
    ax.plot(days, [p.created for p in points], color=pal["created"], linewidth=1.5, label="Created")
    ax.plot(days, [p.resolved for p in points], color=pal["resolved"], linewidth=1.5, label="Resolved")
    ax.yaxis.set_major_locator(mticker.MaxNLocator(integer=True))
    _format_date_axis(fig, ax, days, pal)
    ax.set_title("Issues Created vs. Resolved", fontsize=10, color=pal["label_color"])
    _legend(ax, pal)
    return _to_png(fig, dpi)


def render_burndown_chart(
    burndown: BurndownResult | None, *, dpi: int = 150, dark: bool = False
) -> bytes | None:
    """Render actual remaining issues against the ideal burndown line."""
    if burndown is None or not burndown.points:
        logger.debug("No burndown data, skipping chart")
        return None

    pal = _DARK if dark else _LIGHT
    days = [p.day for p in burndown.points]
    fig, ax = _new_figure(pal, dpi)
    ax.step(
        days, [p.remaining for p in burndown.points],
        where="post", color=pal["remaining"], linewidth=1.5, label="Remaining",
    )
    ax.plot(
        days, [p.ideal for p in burndown.points],
        color=pal["ideal"], linewidth=1.2, linestyle="--", label="Ideal",
    )
    ax.yaxis.set_major_locator(mticker.MaxNLocator(integer=True))
    _format_date_axis(fig, ax, days, pal)
    ax.set_title(
        f"Burndown ({burndown.total_scope} issues, "
        f"{format_day(burndown.start)} to {format_day(burndown.end)})",
        fontsize=10, color=pal["label_color"],
    )
    _legend(ax, pal)
    return _to_png(fig, dpi)


def render_velocity_chart(
    points: Sequence[VelocityPoint], *, dpi: int = 150, dark: bool = False
) -> bytes | None:
    """Render weekly created ("committed") vs. resolved ("completed") bars."""
    if not points:
        logger.debug("No velocity data, skipping chart")
        return None

    pal = _DARK if dark else _LIGHT
    labels = [format_day(p.week_start) for p in points]
    xs = range(len(points))
    fig, ax = _new_figure(pal, dpi)
    ax.bar([x - 0.2 for x in xs], [p.created for p in points], width=0.4,
           color=pal["created"], label="Committed")
    ax.bar([x + 0.2 for x in xs], [p.resolved for p in points], width=0.4,
           color=pal["resolved"], label="Completed")
    ax.set_xticks(list(xs))
    ax.set_xticklabels(labels, rotation=30, ha="right")
    ax.yaxis.set_major_locator(mticker.MaxNLocator(integer=True))
    _style_axes(ax, pal)
    ax.set_title("Weekly Velocity", fontsize=10, color=pal["label_color"])
    _legend(ax, pal)
    return _to_png(fig, dpi)


# -- helpers ------------------------------------------------------------------


def _new_figure(pal: dict, dpi: int) -> tuple[plt.Figure, plt.Axes]:
    fig, ax = plt.subplots(figsize=(7.2, 3.6), dpi=dpi)
    fig.patch.set_facecolor(pal["face"])
    ax.set_facecolor(pal["bg"])
    return fig, ax


def _style_axes(ax: plt.Axes, pal: dict) -> None:
    ax.tick_params(labelsize=7, colors=pal["label_color"])
    for spine in ax.spines.values():
        spine.set_color(pal["grid"])


def _format_date_axis(fig: plt.Figure, ax: plt.Axes, days: list[date], pal: dict) -> None:
    ax.xaxis.set_major_formatter(_EnglishDateFormatter())
    ax.xaxis.set_major_locator(mdates.AutoDateLocator(minticks=4, maxticks=10))
    fig.autofmt_xdate(rotation=30, ha="right")
    if len(days) > 1:
        ax.set_xlim(days[0], days[-1])
    ax.set_ylim(bottom=0)
    _style_axes(ax, pal)
    ax.grid(axis="y", linewidth=0.3, color=pal["grid"])
    ax.set_axisbelow(True)


def _legend(ax: plt.Axes, pal: dict) -> None:
    legend = ax.legend(
        fontsize=6, loc="upper left", framealpha=0.9, facecolor=pal["legend_face"],
    )
    for text in legend.get_texts():
        text.set_color(pal["label_color"])


def _to_png(fig: plt.Figure, dpi: int) -> bytes:
    buf = io.BytesIO()
    try:
        fig.tight_layout()
        fig.savefig(
            buf, format="png", dpi=dpi, bbox_inches="tight",
            facecolor=fig.get_facecolor(), edgecolor="none",
        )
    finally:
        plt.close(fig)
    buf.seek(0)
    data = buf.read()
    logger.debug("Chart rendered: %d bytes", len(data))
    return data
