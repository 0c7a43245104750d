"""Zoom/pan state machine for the map viewport.

States are `overview` (whole map fitted) and `focused` (one region centered
beside the detail panel). Transforms follow the usual web-map convention:
screen = translate + scale * map.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Sequence

from .config import PanelsConfig, ZoomConfig
from .models import Region
from .projection import FittedProjection, Projector


_LOGGER = logging.getLogger("clubmap.viewport")

OVERVIEW = "overview"
FOCUSED = "focused"

Extent = tuple[tuple[float, float], tuple[float, float]]


@dataclass(frozen=True, slots=True)
class ZoomTransform:
    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def apply(self, point: tuple[float, float]) -> tuple[float, float]:
        return (point[0] * self.k + self.x, point[1] * self.k + self.y)

    def invert(self, point: tuple[float, float]) -> tuple[float, float]:
        return ((point[0] - self.x) / self.k, (point[1] - self.y) / self.k)

    def translate(self, dx: float, dy: float) -> ZoomTransform:
        """Translate in map units."""
        return ZoomTransform(self.k, self.x + self.k * dx, self.y + self.k * dy)

    def to_svg(self) -> str:
        return f"translate({self.x:.4f},{self.y:.4f}) scale({self.k:.6f})"

    def as_list(self) -> list[float]:
        return [round(self.k, 6), round(self.x, 4), round(self.y, 4)]


IDENTITY = ZoomTransform()


@dataclass(frozen=True, slots=True)
class Transition:
    transform: ZoomTransform
    duration_ms: int


def constrain(transform: ZoomTransform, extent: Extent, translate_extent: Extent) -> ZoomTransform:
    """Keep the translate extent covering the viewport, centering when it can't."""
    (vx0, vy0), (vx1, vy1) = extent
    (tx0, ty0), (tx1, ty1) = translate_extent
    dx0 = transform.invert((vx0, vy0))[0] - tx0
    dx1 = transform.invert((vx1, vy1))[0] - tx1
    dy0 = transform.invert((vx0, vy0))[1] - ty0
    dy1 = transform.invert((vx1, vy1))[1] - ty1
    return transform.translate(
        (dx0 + dx1) / 2 if dx1 > dx0 else (min(0.0, dx0) or max(0.0, dx1)),
        (dy0 + dy1) / 2 if dy1 > dy0 else (min(0.0, dy0) or max(0.0, dy1)),
    )


def min_zoom_for(width: float, height: float, cfg: ZoomConfig) -> float:
    """1x for landscape; portrait zooms in so the map fills the height."""
    if height <= width:
        return 1.0
    return max(1.0, cfg.portrait_fill * cfg.map_aspect_ratio * height / width)


def translate_extent_for(width: float, height: float, cfg: ZoomConfig) -> Extent:
    mx = width * cfg.pan_margin
    my = height * cfg.pan_margin
    return ((-mx, -my), (width + mx, height + my))


def default_transform_for(width: float, height: float, cfg: ZoomConfig) -> ZoomTransform:
    """Identity for landscape; centered at min zoom for portrait."""
    if height <= width:
        return IDENTITY
    k = min_zoom_for(width, height, cfg)
    return ZoomTransform(k, -(width * k - width) / 2, -(height * k - height) / 2)


class ViewportController:
    """Owns width/height, the fitted projection and the current zoom transform."""

    def __init__(
        self,
        projector: Projector,
        *,
        width: float,
        height: float,
        zoom: ZoomConfig,
        panels: PanelsConfig,
        padding: float = 10.0,
    ) -> None:
        self.projector = projector
        self.zoom_cfg = zoom
        self.panels_cfg = panels
        self.padding = padding
        self.state = OVERVIEW
        self.focused_code: str | None = None
        self._apply_size(width, height)
        self.transform = self.default_transform()

    def _apply_size(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)
        self.min_zoom = min_zoom_for(self.width, self.height, self.zoom_cfg)
        self.max_zoom = max(self.zoom_cfg.max_zoom, self.min_zoom)
        self.translate_extent = translate_extent_for(self.width, self.height, self.zoom_cfg)
        self.fit: FittedProjection | None = (
            self.projector.fit(self.width, self.height, self.padding)
            if self.projector.regions
            else None
        )

    @property
    def extent(self) -> Extent:
        return ((0.0, 0.0), (self.width, self.height))

    @property
    def is_portrait(self) -> bool:
        return self.height > self.width

    @property
    def panel_docked_bottom(self) -> bool:
        return self.is_portrait or self.width <= self.panels_cfg.narrow_breakpoint

    def default_transform(self) -> ZoomTransform:
        return default_transform_for(self.width, self.height, self.zoom_cfg)

    def focus_anchor(self) -> tuple[float, float]:
        """Screen point the focused region is centered on, beside the panel."""
        if self.panel_docked_bottom:
            return (self.width / 2, self.height * self.panels_cfg.bottom_anchor_y)
        sidebar = self.panels_cfg.sidebar_width
        return (sidebar + (self.width - sidebar) / 2, self.height / 2)

    def focus_transform(self, region: Region) -> ZoomTransform:
        if self.fit is None:
            raise RuntimeError("No fitted projection; the region collection is empty")
        (x0, y0), (x1, y1) = self.fit.bounds(region)
        ratio = max((x1 - x0) / self.width, (y1 - y0) / self.height)
        cap = self.zoom_cfg.focus_max_scale
        scale = cap if ratio <= 0 else min(cap, self.zoom_cfg.focus_padding / ratio)
        anchor_x, anchor_y = self.focus_anchor()
        center_x = (x0 + x1) / 2
        center_y = (y0 + y1) / 2
        return ZoomTransform(scale, anchor_x - center_x * scale, anchor_y - center_y * scale)

    def focus(self, region: Region) -> Transition:
        """overview -> focused, or focused -> focused on a new region."""
        self.transform = self.focus_transform(region)
        self.state = FOCUSED
        self.focused_code = region.code
        _LOGGER.debug("Focused %s at %s", region.code, self.transform.to_svg())
        return Transition(self.transform, self.zoom_cfg.transition_ms)

    def release(self) -> None:
        """focused -> overview; the current transform is left in place."""
        self.state = OVERVIEW
        self.focused_code = None

    def pan_by(self, dx: float, dy: float) -> ZoomTransform:
        """Drag by a screen-space delta."""
        moved = ZoomTransform(self.transform.k, self.transform.x + dx, self.transform.y + dy)
        self.transform = constrain(moved, self.extent, self.translate_extent)
        return self.transform

    def zoom_by(self, factor: float, point: tuple[float, float] | None = None) -> ZoomTransform:
        """Scale about a screen point (viewport center by default), clamped."""
        if point is None:
            point = (self.width / 2, self.height / 2)
        k = min(self.max_zoom, max(self.min_zoom, self.transform.k * factor))
        map_x, map_y = self.transform.invert(point)
        scaled = ZoomTransform(k, point[0] - map_x * k, point[1] - map_y * k)
        self.transform = constrain(scaled, self.extent, self.translate_extent)
        return self.transform

    def wheel(self, delta_y: float, point: tuple[float, float] | None = None) -> ZoomTransform:
        return self.zoom_by(2 ** (-delta_y * self.zoom_cfg.wheel_sensitivity), point)

    def resize(self, width: float, height: float) -> ZoomTransform:
        """Re-fit for the new size and reset to that orientation's default view."""
        self._apply_size(width, height)
        self.transform = self.default_transform()
        _LOGGER.debug(
            "Resized to %.0fx%.0f (min_zoom=%.3f)", self.width, self.height, self.min_zoom
        )
        return self.transform


class ResizeDebouncer:
    """Coalesce bursts of resize requests into one after a quiet period."""

    def __init__(self, delay_ms: int = 150) -> None:
        self.delay_s = delay_ms / 1000.0
        self._pending: tuple[float, float] | None = None
        self._deadline: float | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def request(self, width: float, height: float, now: float) -> None:
        # Each request restarts the timer.
        self._pending = (width, height)
        self._deadline = now + self.delay_s

    def poll(self, now: float) -> tuple[float, float] | None:
        if self._pending is None or self._deadline is None or now < self._deadline:
            return None
        size = self._pending
        self._pending = None
        self._deadline = None
        return size


def choose_unvisited(
    regions: Sequence[Region],
    visited: frozenset[str],
    rng: random.Random | None = None,
) -> Region | None:
    """Uniformly pick a region no visit matches, or None when all are visited."""
    unvisited = [region for region in regions if region.key not in visited]
    if not unvisited:
        return None
    return (rng or random.Random()).choice(unvisited)
