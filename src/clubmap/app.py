"""Application state and the user-facing entry points.

`ClubMap` is the composition root: it owns the loaded dataset, the viewport
controller, which overlay panels are open, and the single active region.
Rendering layers read from it; nothing else mutates it.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from datetime import date

from .config import AppConfig
from .models import Dataset, Region, normalize_name
from .projection import Projector
from .stats import monthly_activity, summarize
from .viewport import ResizeDebouncer, Transition, ViewportController, choose_unvisited
from .views import CalendarPanel, DetailPanel, StatsPanel, detail_panel, region_classes, stats_panel


_LOGGER = logging.getLogger("clubmap.app")

DETAIL = "detail"
STATS = "stats"
CALENDAR = "calendar"
PANELS = (DETAIL, STATS, CALENDAR)

EXHAUSTED_NOTICE = "You've visited everywhere! Amazing!"


@dataclass(slots=True)
class PanelState:
    open: dict[str, bool] = field(default_factory=lambda: {name: False for name in PANELS})

    def show(self, name: str) -> None:
        self._check(name)
        self.open[name] = True

    def hide(self, name: str) -> None:
        self._check(name)
        self.open[name] = False

    def is_open(self, name: str) -> bool:
        self._check(name)
        return self.open[name]

    @staticmethod
    def _check(name: str) -> None:
        if name not in PANELS:
            raise ValueError(f"Unknown panel: {name}")


@dataclass(frozen=True, slots=True)
class Selection:
    panel: DetailPanel
    region: Region | None
    transition: Transition | None


class ClubMap:
    def __init__(
        self,
        dataset: Dataset,
        cfg: AppConfig,
        *,
        width: float | None = None,
        height: float | None = None,
        projector: Projector | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.dataset = dataset
        self.cfg = cfg
        self.projector = projector or Projector(dataset.regions)
        self.viewport = ViewportController(
            self.projector,
            width=width or cfg.map.landscape.width,
            height=height or cfg.map.landscape.height,
            zoom=cfg.zoom,
            panels=cfg.panels,
            padding=cfg.map.padding,
        )
        self.debouncer = ResizeDebouncer(cfg.zoom.resize_debounce_ms)
        self.panels = PanelState()
        self.active_code: str | None = None
        self.detail: DetailPanel | None = None
        self.notice: str | None = None
        self.rng = rng or random.Random()

    # Region selection

    def select_region(self, code: str) -> Selection:
        """Click on a region shape."""
        region = self.dataset.region_by_code(code)
        if region is None:
            raise KeyError(f"Unknown region code: {code}")
        return self._select(region.name, region, visits=None, highlight_date=None)

    def select_country(
        self,
        name: str,
        code: str | None = None,
        *,
        highlight_date: str | None = None,
    ) -> Selection:
        """Programmatic selection by country name, as overlay entries do."""
        code = code or self.dataset.code_by_name.get(normalize_name(name))
        region = self.dataset.region_by_code(code) if code else None
        display = self.dataset.name_by_code.get(code, name) if code else name
        self.deselect()
        return self._select(display, region, visits=None, highlight_date=highlight_date)

    def _select(
        self,
        name: str,
        region: Region | None,
        *,
        visits: tuple | None,
        highlight_date: str | None,
    ) -> Selection:
        self.active_code = region.code if region is not None else None
        transition = None
        if region is not None and self.viewport.fit is not None:
            transition = self.viewport.focus(region)
        self.detail = detail_panel(
            self.dataset,
            name,
            region.code if region is not None else None,
            search_location=self.cfg.panels.search_location,
            visits=visits,
            highlight_date=highlight_date,
        )
        self.panels.show(DETAIL)
        _LOGGER.debug("Selected %s (%d visits)", name, len(self.detail.visits))
        return Selection(panel=self.detail, region=region, transition=transition)

    def deselect(self) -> None:
        self.panels.hide(DETAIL)
        self.active_code = None
        self.detail = None
        self.viewport.release()

    def discover(self) -> Selection | None:
        """Focus a random unvisited region; None (with a notice) when none remain."""
        region = choose_unvisited(self.dataset.regions, self.dataset.visited, self.rng)
        if region is None:
            self.notice = EXHAUSTED_NOTICE
            _LOGGER.info(EXHAUSTED_NOTICE)
            return None
        self.notice = None
        return self._select(region.name, region, visits=(), highlight_date=None)

    # Overlays

    def open_stats(self) -> StatsPanel:
        summary = summarize(
            self.dataset,
            top_n=self.cfg.stats.top_n,
            continent_order=self.cfg.stats.continent_order,
        )
        self.panels.show(STATS)
        return stats_panel(self.dataset, summary)

    def open_calendar(self, today: date | None = None) -> CalendarPanel:
        self.panels.show(CALENDAR)
        return CalendarPanel(activity=monthly_activity(self.dataset.visits, today))

    def choose_stats_entry(self, name: str, code: str | None = None) -> Selection:
        self.panels.hide(STATS)
        return self.select_country(name, code)

    def choose_calendar_entry(self, country: str, trip_date: str | None) -> Selection:
        self.panels.hide(CALENDAR)
        return self.select_country(country, highlight_date=trip_date)

    # Dismissal is identical for every panel: close control, outside click, cancel key.

    def close_panel(self, name: str) -> None:
        if name == DETAIL:
            self.deselect()
        else:
            self.panels.hide(name)

    def click_outside(self, name: str) -> None:
        if self.panels.is_open(name):
            self.close_panel(name)

    def cancel(self) -> None:
        for name in PANELS:
            self.close_panel(name)

    # Viewport

    def request_resize(self, width: float, height: float, now: float | None = None) -> None:
        self.debouncer.request(width, height, time.monotonic() if now is None else now)

    def tick(self, now: float | None = None) -> bool:
        """Apply a pending resize once the quiet period has passed."""
        size = self.debouncer.poll(time.monotonic() if now is None else now)
        if size is None:
            return False
        self.viewport.resize(*size)
        return True

    def region_classes(self) -> list[str]:
        """Class strings aligned with `dataset.regions`; one shape at most is active."""
        active = self.dataset.region_by_code(self.active_code) if self.active_code else None
        return [
            region_classes(
                visited=self.dataset.is_visited(region),
                active=region is active,
            )
            for region in self.dataset.regions
        ]
