"""PNG preview of the colored world map."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .models import Dataset
from .projection import Projector, explode_polygons


_LOGGER = logging.getLogger("clubmap.preview")

_OCEAN_COLOR = "#eef3f7"
_LAND_COLOR = "#ffffff"
_VISITED_COLOR = "#dfe6e9"
_VISITED_HATCH_COLOR = "#b2bec3"
_OUTLINE_COLOR = "#b2bec3"


def render_preview(
    dataset: Dataset,
    output_path: Path,
    *,
    width: int,
    height: int,
    padding: float = 10.0,
    dpi: int = 100,
    projector: Projector | None = None,
) -> Path:
    """Draw every region at the default (un-zoomed) fit and save a PNG."""
    if not dataset.regions:
        raise ValueError("No regions to draw")
    plt = _require_matplotlib()
    fit = (projector or Projector(dataset.regions)).fit(width, height, padding)

    fig, ax = plt.subplots(figsize=(width / dpi, height / dpi), dpi=dpi)
    fig.subplots_adjust(left=0.0, right=1.0, bottom=0.0, top=1.0)
    try:
        fig.patch.set_facecolor(_OCEAN_COLOR)
        ax.set_facecolor(_OCEAN_COLOR)
        drawn = 0
        for region in dataset.regions:
            visited = dataset.is_visited(region)
            for polygon in explode_polygons(fit.geometry(region)):
                _fill_polygon(ax, polygon, visited=visited)
            drawn += 1
        ax.set_xlim(0, width)
        # Screen coordinates grow downward.
        ax.set_ylim(height, 0)
        ax.set_aspect("equal", adjustable="box")
        ax.axis("off")

        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=dpi, format="png", facecolor=fig.get_facecolor())
        _LOGGER.info("[preview] drew %d regions into %s", drawn, output_path)
        return output_path
    finally:
        plt.close(fig)


def _fill_polygon(ax: Any, polygon: Any, *, visited: bool) -> None:
    xs, ys = polygon.exterior.xy
    ax.fill(
        list(xs),
        list(ys),
        facecolor=_VISITED_COLOR if visited else _LAND_COLOR,
        edgecolor=_OUTLINE_COLOR,
        linewidth=0.4,
        hatch="////" if visited else None,
        zorder=2,
    )
    if visited:
        # Hatch lines take the edge color; redraw the outline on top.
        ax.plot(list(xs), list(ys), color=_VISITED_HATCH_COLOR, linewidth=0.4, zorder=3)


def _require_matplotlib() -> Any:
    try:
        import matplotlib

        matplotlib.use("Agg", force=False)
        import matplotlib.pyplot as plt
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for preview rendering") from exc
    return plt
