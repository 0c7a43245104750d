"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml


# Territories too small to click reliably at world scale.
DEFAULT_EXCLUDED_REGIONS: tuple[str, ...] = (
    "BMU", "ABW", "AIA", "ASM", "AND", "ATG", "BHR", "BRB", "BLZ", "VGB",
    "CYM", "COM", "COK", "DMA", "FLK", "FRO", "GIB", "GRD", "GLP", "GUM",
    "GGY", "HKG", "IMN", "JEY", "KIR", "LIE", "MAC", "MDV", "MLT", "MHL",
    "MTQ", "MUS", "FSM", "MCO", "MSR", "NRU", "ANT", "NCL", "NIU", "NFK",
    "MNP", "PLW", "PCN", "PRI", "REU", "SHN", "KNA", "LCA", "SPM", "VCT",
    "WSM", "SMR", "STP", "SYC", "SGP", "SXM", "SLB", "TCA", "TKL", "TON",
    "TTO", "TUV", "VIR", "VAT", "WLF",
)

DEFAULT_CONTINENT_ORDER: tuple[str, ...] = (
    "Europe",
    "Asia",
    "Africa",
    "North America",
    "South America",
    "Oceania",
)


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected integer for '{field_name}'")
    return value


def _positive_int(value: Any, field_name: str) -> int:
    out = _int(value, field_name)
    if out <= 0:
        raise ValueError(f"{field_name} must be > 0")
    return out


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _str_list(value: Any, field_name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Expected list for '{field_name}'")
    out: list[str] = []
    for idx, item in enumerate(value):
        out.append(_str(item, f"{field_name}[{idx}]"))
    return tuple(out)


def _source_from_cfg(value: Any, field_name: str, root_dir: Path) -> str:
    """Resolve a data source: URLs pass through, paths resolve against the config dir."""
    raw = _str(value, field_name)
    if raw.startswith(("http://", "https://")):
        return raw
    p = Path(raw)
    return str(p if p.is_absolute() else root_dir / p)


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    title: str
    output_html: Path
    preview_png: Path | None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> ProjectConfig:
        preview_raw = raw.get("preview_png")
        return cls(
            title=_str(raw.get("title", "Dinner Club"), "project.title"),
            output_html=_path_from_cfg(
                raw.get("output_html", "build/site/index.html"), "project.output_html", root_dir
            ),
            preview_png=(
                None
                if preview_raw is None
                else _path_from_cfg(preview_raw, "project.preview_png", root_dir)
            ),
        )


@dataclass(frozen=True, slots=True)
class PathsConfig:
    trips: str
    regions: str
    continents: str
    country_codes: str
    logs_dir: Path

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        return cls(
            trips=_source_from_cfg(raw.get("trips", "data/trips.yaml"), "paths.trips", root_dir),
            regions=_source_from_cfg(
                raw.get("regions", "data/countries.geojson"), "paths.regions", root_dir
            ),
            continents=_source_from_cfg(
                raw.get("continents", "data/country-continents.json"), "paths.continents", root_dir
            ),
            country_codes=_source_from_cfg(
                raw.get("country_codes", "data/country-codes.json"), "paths.country_codes", root_dir
            ),
            logs_dir=_path_from_cfg(raw.get("logs_dir", "build/logs"), "paths.logs_dir", root_dir),
        )


@dataclass(frozen=True, slots=True)
class SourcesConfig:
    request_timeout_s: float
    user_agent: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> SourcesConfig:
        timeout = _float(raw.get("request_timeout_s", 20), "sources.request_timeout_s")
        if timeout <= 0:
            raise ValueError("sources.request_timeout_s must be > 0")
        return cls(
            request_timeout_s=timeout,
            user_agent=_str(raw.get("user_agent", "clubmap/0.1"), "sources.user_agent"),
        )


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    width: int
    height: int

    @property
    def is_portrait(self) -> bool:
        return self.height > self.width

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], field_name: str) -> LayoutConfig:
        return cls(
            width=_positive_int(raw.get("width"), f"{field_name}.width"),
            height=_positive_int(raw.get("height"), f"{field_name}.height"),
        )


@dataclass(frozen=True, slots=True)
class MapConfig:
    landscape: LayoutConfig
    portrait: LayoutConfig
    padding: float
    simplify_tolerance: float
    excluded_regions: tuple[str, ...]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> MapConfig:
        landscape = LayoutConfig.from_mapping(
            _mapping(raw.get("landscape", {"width": 960, "height": 500}), "map.landscape"),
            "map.landscape",
        )
        portrait = LayoutConfig.from_mapping(
            _mapping(raw.get("portrait", {"width": 500, "height": 900}), "map.portrait"),
            "map.portrait",
        )
        if landscape.is_portrait:
            raise ValueError("map.landscape must not be taller than it is wide")
        if not portrait.is_portrait:
            raise ValueError("map.portrait must be taller than it is wide")
        padding = _float(raw.get("padding", 10), "map.padding")
        if padding < 0:
            raise ValueError("map.padding must be >= 0")
        tolerance = _float(raw.get("simplify_tolerance", 0.0), "map.simplify_tolerance")
        if tolerance < 0:
            raise ValueError("map.simplify_tolerance must be >= 0")
        excluded_raw = raw.get("excluded_regions")
        excluded = (
            DEFAULT_EXCLUDED_REGIONS
            if excluded_raw is None
            else _str_list(excluded_raw, "map.excluded_regions")
        )
        return cls(
            landscape=landscape,
            portrait=portrait,
            padding=padding,
            simplify_tolerance=tolerance,
            excluded_regions=tuple(code.upper() for code in excluded),
        )


@dataclass(frozen=True, slots=True)
class ZoomConfig:
    max_zoom: float
    focus_max_scale: float
    focus_padding: float
    transition_ms: int
    resize_debounce_ms: int
    portrait_fill: float
    map_aspect_ratio: float
    pan_margin: float
    wheel_sensitivity: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ZoomConfig:
        max_zoom = _float(raw.get("max_zoom", 12), "zoom.max_zoom")
        focus_max_scale = _float(raw.get("focus_max_scale", 8), "zoom.focus_max_scale")
        if max_zoom < 1:
            raise ValueError("zoom.max_zoom must be >= 1")
        if focus_max_scale <= 0:
            raise ValueError("zoom.focus_max_scale must be > 0")
        pan_margin = _float(raw.get("pan_margin", 0.05), "zoom.pan_margin")
        if pan_margin < 0:
            raise ValueError("zoom.pan_margin must be >= 0")
        return cls(
            max_zoom=max_zoom,
            focus_max_scale=focus_max_scale,
            focus_padding=_float(raw.get("focus_padding", 0.8), "zoom.focus_padding"),
            transition_ms=_int(raw.get("transition_ms", 750), "zoom.transition_ms"),
            resize_debounce_ms=_int(raw.get("resize_debounce_ms", 150), "zoom.resize_debounce_ms"),
            portrait_fill=_float(raw.get("portrait_fill", 0.8), "zoom.portrait_fill"),
            map_aspect_ratio=_float(raw.get("map_aspect_ratio", 2.0), "zoom.map_aspect_ratio"),
            pan_margin=pan_margin,
            wheel_sensitivity=_float(raw.get("wheel_sensitivity", 0.002), "zoom.wheel_sensitivity"),
        )


@dataclass(frozen=True, slots=True)
class PanelsConfig:
    sidebar_width: float
    narrow_breakpoint: float
    bottom_anchor_y: float
    search_location: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> PanelsConfig:
        return cls(
            sidebar_width=_float(raw.get("sidebar_width", 400), "panels.sidebar_width"),
            narrow_breakpoint=_float(raw.get("narrow_breakpoint", 600), "panels.narrow_breakpoint"),
            bottom_anchor_y=_float(raw.get("bottom_anchor_y", 0.225), "panels.bottom_anchor_y"),
            search_location=_str(
                raw.get("search_location", "London, UK"), "panels.search_location"
            ),
        )


@dataclass(frozen=True, slots=True)
class StatsConfig:
    top_n: int
    continent_order: tuple[str, ...]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> StatsConfig:
        order_raw = raw.get("continent_order")
        return cls(
            top_n=_positive_int(raw.get("top_n", 10), "stats.top_n"),
            continent_order=(
                DEFAULT_CONTINENT_ORDER
                if order_raw is None
                else _str_list(order_raw, "stats.continent_order")
            ),
        )


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path
    project: ProjectConfig
    paths: PathsConfig
    sources: SourcesConfig
    map: MapConfig
    zoom: ZoomConfig
    panels: PanelsConfig
    stats: StatsConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> AppConfig:
        root_dir = source_path.parent.resolve()
        return cls(
            source_path=source_path.resolve(),
            project=ProjectConfig.from_mapping(_mapping(raw.get("project"), "project"), root_dir),
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
            sources=SourcesConfig.from_mapping(_mapping(raw.get("sources"), "sources")),
            map=MapConfig.from_mapping(_mapping(raw.get("map"), "map")),
            zoom=ZoomConfig.from_mapping(_mapping(raw.get("zoom"), "zoom")),
            panels=PanelsConfig.from_mapping(_mapping(raw.get("panels"), "panels")),
            stats=StatsConfig.from_mapping(_mapping(raw.get("stats"), "stats")),
        )

    @classmethod
    def defaults(cls, root_dir: Path) -> AppConfig:
        """Configuration with every default, anchored at `root_dir`."""
        return cls.from_mapping({}, root_dir / "config.yaml")


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
