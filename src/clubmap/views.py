"""Panel view models and their HTML fragments.

All data-sourced text goes through `html.escape` before it is inserted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from html import escape
from typing import Sequence
from urllib.parse import quote

from .models import Dataset, VisitRecord
from .stats import MonthlyActivity, StatsSummary


MONTH_INITIALS = ("J", "F", "M", "A", "M", "J", "J", "A", "S", "O", "N", "D")
MAPS_SEARCH_URL = "https://www.google.com/maps/search/"


def format_visit_date(value: str) -> str:
    """`2024-03-05` -> `Mar 5, 2024`; unparsable strings come back unchanged."""
    try:
        when = date.fromisoformat(value)
    except ValueError:
        return value
    return f"{when:%b} {when.day}, {when.year}"


def restaurant_search_url(country_name: str, location: str) -> str:
    return MAPS_SEARCH_URL + quote(f"{country_name} restaurants near {location}", safe="")


def region_classes(*, visited: bool, active: bool) -> str:
    classes = ["country"]
    if visited:
        classes.append("visited")
    if active:
        classes.append("active")
    return " ".join(classes)


@dataclass(frozen=True, slots=True)
class DetailPanel:
    country_name: str
    code: str | None
    flag: str
    visits: tuple[VisitRecord, ...]
    search_url: str
    highlight_date: str | None = None


@dataclass(frozen=True, slots=True)
class StatsPanel:
    summary: StatsSummary
    flags: dict[str, str]


@dataclass(frozen=True, slots=True)
class CalendarPanel:
    activity: MonthlyActivity


Panel = DetailPanel | StatsPanel | CalendarPanel


def detail_panel(
    dataset: Dataset,
    country_name: str,
    code: str | None,
    *,
    search_location: str,
    visits: Sequence[VisitRecord] | None = None,
    highlight_date: str | None = None,
) -> DetailPanel:
    return DetailPanel(
        country_name=country_name,
        code=code,
        flag=dataset.lookups.flag_for(code),
        visits=tuple(dataset.visits_for(country_name) if visits is None else visits),
        search_url=restaurant_search_url(country_name, search_location),
        highlight_date=highlight_date,
    )


def stats_panel(dataset: Dataset, summary: StatsSummary) -> StatsPanel:
    flags = {
        entry.code: dataset.lookups.flag_for(entry.code)
        for entry in summary.most_visited
        if entry.code
    }
    return StatsPanel(summary=summary, flags=flags)


def render_title(panel: DetailPanel) -> str:
    name = f"<span class='sidebar-country'>{escape(panel.country_name)}</span>"
    if panel.flag:
        return f"<span class='sidebar-flag'>{panel.flag}</span>{name}"
    return name


def render_trip_card(visit: VisitRecord, highlight_date: str | None = None) -> str:
    highlighted = highlight_date is not None and visit.date == highlight_date
    meta: list[str] = []
    if visit.date:
        meta.append(f"<span class='trip-date'>📅 {escape(format_visit_date(visit.date))}</span>")
    if visit.rating is not None:
        meta.append(f"<span class='trip-rating'>★ {visit.rating:g}/5</span>")
    if visit.maps_url:
        meta.append(
            f"<a href='{escape(visit.maps_url)}' target='_blank' rel='noopener' "
            "class='trip-location'>📍 Google Maps</a>"
        )
    lines = [
        f"<div class='trip-card{' highlighted' if highlighted else ''}' "
        f"data-date='{escape(visit.date or '')}'>",
        f"  <div class='trip-restaurant'>{escape(visit.restaurant)}</div>",
        f"  <div class='trip-meta'>{''.join(meta)}</div>",
    ]
    if visit.notes:
        lines.append(f"  <div class='trip-notes'>&quot;{escape(visit.notes)}&quot;</div>")
    lines.append("</div>")
    return "\n".join(lines)


def render_detail(panel: DetailPanel) -> str:
    search = escape(panel.search_url)
    if not panel.visits:
        return "\n".join(
            [
                "<div class='empty-state'>",
                "  <div class='empty-state-icon'>🍽️</div>",
                "  <p class='empty-state-text'>No visits yet!</p>",
                f"  <a href='{search}' target='_blank' rel='noopener' class='find-btn'>"
                "Find a restaurant</a>",
                "</div>",
            ]
        )
    cards = [render_trip_card(visit, panel.highlight_date) for visit in panel.visits]
    cards.append(
        f"<a href='{search}' target='_blank' rel='noopener' "
        "class='find-btn find-btn-secondary'>Find another restaurant</a>"
    )
    return "\n".join(cards)


def render_stats(panel: StatsPanel) -> str:
    summary = panel.summary
    parts = [
        "<div class='stats-overview'>",
        f"  <div class='stats-big-number'>{summary.visited_count}/{summary.total_regions}</div>",
        "  <div class='stats-label'>countries visited</div>",
        f"  <div class='stats-percentage'>{summary.percentage:.1f}%</div>",
        "</div>",
        "<div class='stats-section'><h3>By Continent</h3><div class='continent-list'>",
    ]
    for row in summary.continents:
        parts.append(
            "<div class='continent-row'>"
            f"<span class='continent-name'>{escape(row.continent)}</span>"
            f"<span class='continent-stat'>{row.visited}/{row.total} ({row.percentage}%)</span>"
            "</div>"
        )
    parts.append("</div></div>")

    if summary.most_visited:
        parts.append("<div class='stats-section'><h3>Most Visited</h3><div class='carousel'>")
        for entry in summary.most_visited:
            flag = panel.flags.get(entry.code, "") if entry.code else ""
            plural = "s" if entry.count > 1 else ""
            parts.append(
                f"<div class='carousel-item' data-country='{escape(entry.display_name)}' "
                f"data-country-id='{escape(entry.code or '')}'>"
                f"<div class='carousel-flag'>{flag}</div>"
                f"<div class='carousel-country'>{escape(entry.display_name)}</div>"
                f"<div class='carousel-count'>{entry.count} visit{plural}</div>"
                "</div>"
            )
        parts.append("</div></div>")
    return "\n".join(parts)


def render_calendar(panel: CalendarPanel) -> str:
    activity = panel.activity
    if activity.empty:
        return "<div class='empty-state'>No trips recorded yet</div>"

    header = "".join(f"<div class='streak-month-header'>{m}</div>" for m in MONTH_INITIALS)
    parts = [
        "<div class='streak-header'><div class='streak-year-label'></div>"
        f"<div class='streak-months'>{header}</div></div>"
    ]
    for year, cells in activity.rows:
        row: list[str] = []
        for cell in cells:
            if cell.visit is not None:
                row.append(
                    "<div class='streak-month active' "
                    f"data-trip-date='{escape(cell.visit.date or '')}' "
                    f"data-trip-country='{escape(cell.visit.country)}'></div>"
                )
            else:
                row.append(f"<div class='streak-month{' future' if cell.future else ''}'></div>")
        parts.append(
            f"<div class='streak-year'><div class='streak-year-label'>{year}</div>"
            f"<div class='streak-months'>{''.join(row)}</div></div>"
        )
    parts.append(
        f"<div class='streak-summary'>{activity.active_months}/{activity.total_months} months "
        f"({activity.rate}%)</div>"
    )
    return "\n".join(parts)


def render_panel(panel: Panel) -> str:
    """Render any panel view model to its HTML fragment."""
    if isinstance(panel, DetailPanel):
        return render_detail(panel)
    if isinstance(panel, StatsPanel):
        return render_stats(panel)
    if isinstance(panel, CalendarPanel):
        return render_calendar(panel)
    raise TypeError(f"Unknown panel type: {type(panel).__name__}")
