"""Fit a world projection to a viewport and generate SVG path data."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Sequence

from .models import Region


_NATURAL_EARTH_CRS = "+proj=natearth +lon_0=0 +datum=WGS84 +units=m +no_defs"

ScreenBounds = tuple[tuple[float, float], tuple[float, float]]


class Projector:
    """Natural Earth projection with a cache of projected region shapes.

    Projecting through pyproj is viewport independent, so it runs once per
    region; only the affine fit is recomputed when the viewport changes.
    """

    def __init__(self, regions: Sequence[Region]) -> None:
        self._transformer = _require_pyproj_transformer()
        self._regions = tuple(regions)
        self._projected: dict[int, Any] = {}

    @property
    def regions(self) -> tuple[Region, ...]:
        return self._regions

    def project_point(self, lon: float, lat: float) -> tuple[float, float]:
        x, y = self._transformer.transform(float(lon), float(lat))
        return (float(x), float(y))

    def projected(self, region: Region) -> Any:
        key = id(region)
        geometry = self._projected.get(key)
        if geometry is None:
            shapely_transform = _require_shapely_transform()
            geometry = shapely_transform(self._transformer.transform, region.geometry)
            self._projected[key] = geometry
        return geometry

    def world_bounds(self) -> tuple[float, float, float, float]:
        min_x = min_y = math.inf
        max_x = max_y = -math.inf
        for region in self._regions:
            x0, y0, x1, y1 = (float(v) for v in self.projected(region).bounds)
            if not all(math.isfinite(v) for v in (x0, y0, x1, y1)):
                continue
            min_x, min_y = min(min_x, x0), min(min_y, y0)
            max_x, max_y = max(max_x, x1), max(max_y, y1)
        if not math.isfinite(min_x):
            raise ValueError("No finite region geometry to fit")
        return (min_x, min_y, max_x, max_y)

    def fit(self, width: float, height: float, padding: float = 10.0) -> FittedProjection:
        return fit_projection(self, width, height, padding)


@dataclass(frozen=True, slots=True)
class FittedProjection:
    """Projection scaled and centered into a padded viewport rectangle."""

    projector: Projector = field(repr=False, compare=False)
    width: float
    height: float
    padding: float
    scale: float
    translate_x: float
    translate_y: float

    def __call__(self, lon: float, lat: float) -> tuple[float, float]:
        x, y = self.projector.project_point(lon, lat)
        return self._to_screen(x, y)

    def _to_screen(self, x: float, y: float) -> tuple[float, float]:
        return (self.translate_x + self.scale * x, self.translate_y - self.scale * y)

    def geometry(self, region: Region) -> Any:
        """Region shape in screen coordinates (y grows downward)."""
        affine_transform = _require_shapely_affine()
        return affine_transform(
            self.projector.projected(region),
            [self.scale, 0.0, 0.0, -self.scale, self.translate_x, self.translate_y],
        )

    def bounds(self, region: Region) -> ScreenBounds:
        x0, y0, x1, y1 = (float(v) for v in self.geometry(region).bounds)
        return ((x0, y0), (x1, y1))

    def path(self, region: Region, *, simplify_tolerance: float = 0.0) -> str:
        geometry = self.geometry(region)
        if simplify_tolerance > 0:
            geometry = geometry.simplify(simplify_tolerance, preserve_topology=True)
        return svg_path(geometry)


def fit_projection(
    projector: Projector,
    width: float,
    height: float,
    padding: float = 10.0,
) -> FittedProjection:
    """Fit all regions into [padding, padding] - [width - padding, height - padding]."""
    if width <= 2 * padding or height <= 2 * padding:
        raise ValueError(f"Viewport {width}x{height} too small for padding {padding}")
    min_x, min_y, max_x, max_y = projector.world_bounds()
    span_x = max(max_x - min_x, 1e-9)
    span_y = max(max_y - min_y, 1e-9)
    inner_w = width - 2 * padding
    inner_h = height - 2 * padding
    scale = min(inner_w / span_x, inner_h / span_y)
    translate_x = padding + (inner_w - scale * span_x) / 2 - scale * min_x
    translate_y = padding + (inner_h - scale * span_y) / 2 + scale * max_y
    return FittedProjection(
        projector=projector,
        width=float(width),
        height=float(height),
        padding=float(padding),
        scale=scale,
        translate_x=translate_x,
        translate_y=translate_y,
    )


def svg_path(geometry: Any, precision: int = 2) -> str:
    """SVG path data for a (multi)polygon; holes become extra subpaths."""
    parts: list[str] = []
    for polygon in explode_polygons(geometry):
        for ring in (polygon.exterior, *polygon.interiors):
            coords = list(ring.coords)
            if len(coords) < 3:
                continue
            head, *tail = coords
            segment = f"M{head[0]:.{precision}f},{head[1]:.{precision}f}"
            segment += "".join(f"L{x:.{precision}f},{y:.{precision}f}" for x, y, *_ in tail)
            parts.append(segment + "Z")
    return "".join(parts)


def explode_polygons(geometry: Any) -> list[Any]:
    if geometry is None or geometry.is_empty:
        return []
    geom_type = getattr(geometry, "geom_type", "")
    if geom_type == "Polygon":
        return [geometry]
    if geom_type in {"MultiPolygon", "GeometryCollection"}:
        out: list[Any] = []
        for part in geometry.geoms:
            out.extend(explode_polygons(part))
        return out
    return []


def _require_shapely_transform() -> Any:
    try:
        from shapely.ops import transform
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for geometry projection") from exc
    return transform


def _require_shapely_affine() -> Any:
    try:
        from shapely.affinity import affine_transform
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for viewport fitting") from exc
    return affine_transform


def _require_pyproj_transformer() -> Any:
    try:
        from pyproj import Transformer
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("pyproj is required for the Natural Earth projection") from exc
    return Transformer.from_crs("EPSG:4326", _NATURAL_EARTH_CRS, always_xy=True)
