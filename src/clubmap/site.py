"""Static page assembly: one HTML file with both viewport layouts baked in."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from html import escape
from pathlib import Path
from typing import Any, Sequence

from .app import EXHAUSTED_NOTICE, ClubMap
from .assets import PAGE_CSS, RUNTIME_JS, panel_css
from .config import AppConfig, LayoutConfig
from .loader import LoadReport, load_dataset
from .models import Dataset, normalize_name
from .preview import render_preview
from .projection import Projector
from .views import render_calendar, render_panel, render_stats, render_title
from .util import format_report_lines, to_json_script, write_text


_LOGGER = logging.getLogger("clubmap.site")

LANDSCAPE = "landscape"
PORTRAIT = "portrait"


@dataclass(slots=True)
class SiteReport:
    output_path: Path | None = None
    preview_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)

    def extend_from(self, load_report: LoadReport) -> None:
        # Load failures degrade features; they never abort the build.
        self.infos.extend(f"[load] {msg}" for msg in load_report.infos)
        self.warnings.extend(f"[load] {msg}" for msg in load_report.warnings)
        self.warnings.extend(f"[load] {msg}" for msg in load_report.errors)


def format_site_lines(report: SiteReport) -> Sequence[str]:
    return format_report_lines(
        report.infos,
        report.warnings,
        report.errors,
        ok_line="Site build completed with no errors.",
    )


def _layout_payload(app: ClubMap) -> dict[str, Any]:
    viewport = app.viewport
    # Keyed by code; with duplicate codes the last shape wins, as in region_by_code.
    bounds: dict[str, list[list[float]]] = {}
    if viewport.fit is not None:
        for region in app.dataset.regions:
            bounds[region.code] = [[round(v, 3) for v in corner] for corner in viewport.fit.bounds(region)]
    return {
        "width": viewport.width,
        "height": viewport.height,
        "minZoom": round(viewport.min_zoom, 6),
        "maxZoom": viewport.max_zoom,
        "translateExtent": [list(corner) for corner in viewport.translate_extent],
        "default": viewport.default_transform().as_list(),
        "bounds": bounds,
    }


def _hatch_pattern(pattern_id: str, unit: float, fill: str, stroke: str, stroke_width: float) -> str:
    return (
        f"<pattern id='{pattern_id}' patternUnits='userSpaceOnUse' width='{unit:.3f}' "
        f"height='{unit:.3f}' patternTransform='rotate(45)'>"
        f"<rect width='{unit:.3f}' height='{unit:.3f}' fill='{fill}'/>"
        f"<line x1='0' y1='0' x2='0' y2='{unit:.3f}' stroke='{stroke}' "
        f"stroke-width='{stroke_width:.3f}'/></pattern>"
    )


def render_map_svg(app: ClubMap, layout_name: str, *, simplify_tolerance: float = 0.0) -> str:
    """One SVG for one layout: hatch patterns, ocean, shadows, then countries."""
    viewport = app.viewport
    fit = viewport.fit
    if fit is None:
        raise ValueError("Cannot draw a map without regions")
    width, height = viewport.width, viewport.height
    # Pattern density follows the layout width.
    unit = width / 160
    defs = "".join(
        [
            _hatch_pattern("visited-hatch", unit, "#dfe6e9", "#b2bec3", unit / 3),
            _hatch_pattern("visited-hatch-hover", unit, "#c8d1d6", "#949ea3", unit / 3),
            _hatch_pattern("visited-hatch-active", unit, "#f4ead5", "#c4956a", unit / 1.7),
        ]
    )
    shadows: list[str] = []
    countries: list[str] = []
    for region, classes in zip(app.dataset.regions, app.region_classes()):
        d = fit.path(region, simplify_tolerance=simplify_tolerance)
        if not d:
            continue
        shadows.append(f"<path class='country-shadow' d='{d}'/>")
        countries.append(
            f"<path class='{classes}' d='{d}' data-id='{escape(region.code)}' "
            f"data-name='{escape(region.name)}'/>"
        )
    transform = viewport.default_transform()
    return "\n".join(
        [
            f"<svg class='map' data-layout='{layout_name}' viewBox='0 0 {width:g} {height:g}' "
            "preserveAspectRatio='xMidYMid meet' xmlns='http://www.w3.org/2000/svg'"
            f"{' hidden' if layout_name != LANDSCAPE else ''}>",
            f"<defs>{defs}</defs>",
            f"<g class='zoom-layer' style='transform: translate({transform.x:.4f}px,"
            f"{transform.y:.4f}px) scale({transform.k:.6f})'>",
            f"<rect class='ocean' x='{-width:g}' y='{-height:g}' width='{width * 3:g}' "
            f"height='{height * 3:g}'/>",
            *shadows,
            *countries,
            "</g>",
            "</svg>",
        ]
    )


def _map_unavailable_markup(message: str) -> str:
    return "\n".join(
        [
            "<div class='map-error'>",
            f"  <p>{escape(message)}</p>",
            "  <p class='hint'>Make sure the countries GeoJSON file is in the data folder.</p>",
            "</div>",
        ]
    )


def _panel_payload(app: ClubMap) -> dict[str, Any]:
    dataset = app.dataset
    titles: dict[str, str] = {}
    details: dict[str, str] = {}
    for region in dataset.regions:
        selection = app.select_region(region.code)
        titles[region.code] = render_title(selection.panel)
        details[region.code] = render_panel(selection.panel)
    names = dict(dataset.code_by_name)
    extra: dict[str, dict[str, str]] = {}
    for country in dataset.unmatched_countries():
        selection = app.select_country(country)
        extra[normalize_name(country)] = {
            "title": render_title(selection.panel),
            "html": render_panel(selection.panel),
        }
    app.deselect()
    return {
        "titles": titles,
        "details": details,
        "names": names,
        "extra": extra,
        "unvisited": [region.code for region in dataset.unvisited_regions()],
    }


def render_page(
    cfg: AppConfig,
    dataset: Dataset,
    *,
    today: date | None = None,
) -> str:
    """Render the full single-file page for both configured layouts."""
    layouts: dict[str, LayoutConfig] = {LANDSCAPE: cfg.map.landscape, PORTRAIT: cfg.map.portrait}
    projector = Projector(dataset.regions)
    apps = {
        name: ClubMap(dataset, cfg, width=layout.width, height=layout.height, projector=projector)
        for name, layout in layouts.items()
    }
    primary = apps[LANDSCAPE]

    if dataset.map_error is None and dataset.regions:
        map_markup = "\n".join(
            render_map_svg(app, name, simplify_tolerance=cfg.map.simplify_tolerance)
            for name, app in apps.items()
        )
        layout_payload = {name: _layout_payload(app) for name, app in apps.items()}
    else:
        map_markup = _map_unavailable_markup(dataset.map_error or "Failed to load map data.")
        layout_payload = {}

    payload: dict[str, Any] = {
        "layouts": layout_payload,
        "transitionMs": cfg.zoom.transition_ms,
        "debounceMs": cfg.zoom.resize_debounce_ms,
        "wheel": cfg.zoom.wheel_sensitivity,
        "notice": EXHAUSTED_NOTICE,
        "focus": {
            "maxScale": cfg.zoom.focus_max_scale,
            "padding": cfg.zoom.focus_padding,
            "sidebarWidth": cfg.panels.sidebar_width,
            "narrowBreakpoint": cfg.panels.narrow_breakpoint,
            "bottomAnchorY": cfg.panels.bottom_anchor_y,
        },
    }
    payload.update(_panel_payload(primary))

    stats_html = render_stats(primary.open_stats())
    calendar_html = render_calendar(primary.open_calendar(today))
    primary.cancel()

    title = escape(cfg.project.title)
    return "\n".join(
        [
            "<!doctype html>",
            "<html lang='en'>",
            "<head>",
            "  <meta charset='utf-8'>",
            "  <meta name='viewport' content='width=device-width, initial-scale=1'>",
            f"  <title>{title}</title>",
            f"  <style>{PAGE_CSS}{panel_css(cfg.panels.sidebar_width, cfg.panels.narrow_breakpoint)}</style>",
            "</head>",
            "<body>",
            "<header>",
            f"  <h1>{title}</h1>",
            "  <div class='actions'>",
            "    <button id='discover-btn' type='button'>🎲 Discover</button>",
            "    <button id='stats-btn' type='button'>📊 Stats</button>",
            "    <button id='calendar-btn' type='button'>📅 Calendar</button>",
            "  </div>",
            "</header>",
            f"<main id='map-container'>\n{map_markup}\n</main>",
            "<div id='sidebar-overlay'></div>",
            "<aside id='sidebar'>",
            "  <div class='sidebar-header'><h2 id='sidebar-title'></h2>"
            "<button id='sidebar-close' class='close-btn' type='button' aria-label='Close'>×</button></div>",
            "  <div id='trips-list'></div>",
            "</aside>",
            "<div id='stats-overlay' class='modal-overlay'><div class='modal'>",
            "  <div class='modal-header'><h2>Stats</h2>"
            "<button id='stats-close' class='close-btn' type='button' aria-label='Close'>×</button></div>",
            f"  <div id='stats-content'>{stats_html}</div>",
            "</div></div>",
            "<div id='calendar-overlay' class='modal-overlay'><div class='modal'>",
            "  <div class='modal-header'><h2>Calendar</h2>"
            "<button id='calendar-close' class='close-btn' type='button' aria-label='Close'>×</button></div>",
            f"  <div id='calendar-content'>{calendar_html}</div>",
            "</div></div>",
            f"<script id='clubmap-data' type='application/json'>{to_json_script(payload)}</script>",
            f"<script>{RUNTIME_JS}</script>",
            "</body>",
            "</html>",
            "",
        ]
    )


def build_site(cfg: AppConfig, *, today: date | None = None) -> SiteReport:
    """Load every source, then write the page (and the optional preview PNG)."""
    report = SiteReport(output_path=cfg.project.output_html)
    dataset, load_report = load_dataset(cfg)
    report.extend_from(load_report)

    try:
        html = render_page(cfg, dataset, today=today)
    except Exception as exc:
        report.add_error(f"Failed rendering page: {exc}")
        return report
    write_text(cfg.project.output_html, html)
    report.add_info(f"Page written to {cfg.project.output_html}")

    if cfg.project.preview_png is not None:
        if dataset.regions:
            try:
                report.preview_path = render_preview(
                    dataset,
                    cfg.project.preview_png,
                    width=cfg.map.landscape.width,
                    height=cfg.map.landscape.height,
                    padding=cfg.map.padding,
                )
                report.add_info(f"Preview written to {report.preview_path}")
            except Exception as exc:
                report.add_warning(f"Preview rendering failed: {exc}")
        else:
            report.add_warning("Preview skipped: no regions loaded.")

    report.summary = {
        "regions": len(dataset.regions),
        "visits": len(dataset.visits),
        "unvisited": len(dataset.unvisited_regions()),
        "unmatched_countries": len(dataset.unmatched_countries()),
    }
    _LOGGER.debug("Site summary: %s", report.summary)
    return report
