"""Data loading: visit list, code lookup tables, and region shapes.

Every source fails soft. A missing or unparsable source leaves an empty
default for that source and records the failure in `LoadReport`; the rest of
the dataset still loads.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import requests
import yaml
from shapely.geometry import shape

from .config import AppConfig, SourcesConfig
from .models import Dataset, Lookups, Region, VisitRecord, regions_without
from .sources import SourceNotFound, read_source
from .util import format_report_lines


_LOGGER = logging.getLogger("clubmap.loader")

REGION_CODE_PROPERTIES = ("ISO_A3", "ADM0_A3", "iso_a3", "adm0_a3", "ISO3", "A3")
REGION_NAME_PROPERTIES = ("name", "NAME", "ADMIN", "admin", "NAME_EN")

MAP_UNAVAILABLE_MESSAGE = "Failed to load map data."


@dataclass(slots=True)
class LoadReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        _LOGGER.error(msg)
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        _LOGGER.warning(msg)
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        _LOGGER.debug(msg)
        self.infos.append(msg)


def format_load_lines(report: LoadReport) -> Sequence[str]:
    return format_report_lines(
        report.infos,
        report.warnings,
        report.errors,
        ok_line="All data sources loaded.",
    )


def _read(
    source: str,
    cfg: SourcesConfig | None,
    report: LoadReport,
    label: str,
    *,
    missing_is_error: bool = True,
) -> str | None:
    try:
        return read_source(source, cfg)
    except SourceNotFound:
        msg = f"No {label} found at {source}"
        if missing_is_error:
            report.add_error(msg)
        else:
            report.add_info(msg + ", using empty data")
        return None
    except (OSError, requests.RequestException) as exc:
        report.add_error(f"Failed reading {label} '{source}': {exc}")
        return None
    except UnicodeDecodeError as exc:
        report.add_error(f"Failed decoding {label} '{source}' as UTF-8: {exc}")
        return None


def parse_trips(text: str, report: LoadReport) -> tuple[VisitRecord, ...]:
    """Parse a `trips:` YAML document into visit records, skipping bad entries."""
    raw = yaml.safe_load(text)
    if raw is None:
        return ()
    if not isinstance(raw, Mapping):
        raise ValueError("Expected a mapping with a 'trips' list at the top level")
    items = raw.get("trips")
    if items is None:
        return ()
    if not isinstance(items, list):
        raise ValueError("Expected 'trips' to be a list")

    visits: list[VisitRecord] = []
    for idx, item in enumerate(items):
        if not isinstance(item, Mapping):
            report.add_warning(f"Skipping trips[{idx}]: expected a mapping")
            continue
        rating_raw = item.get("rating")
        try:
            visit = VisitRecord.from_mapping({**item, "rating": None})
        except ValueError as exc:
            report.add_warning(f"Skipping trips[{idx}]: {exc}")
            continue
        if rating_raw is not None:
            try:
                visit = VisitRecord.from_mapping(item)
            except ValueError as exc:
                report.add_warning(f"Ignoring rating of trips[{idx}]: {exc}")
        if visit.date is None:
            report.add_warning(f"trips[{idx}] ({visit.country}) has no date")
        visits.append(visit)
    return tuple(visits)


def parse_code_table(text: str, label: str) -> dict[str, str]:
    """Parse a flat code -> value mapping (JSON or YAML)."""
    raw = yaml.safe_load(text)
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {label}")
    table: dict[str, str] = {}
    for key, value in raw.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise ValueError(f"{label} entries must map strings to strings: {key!r}")
        table[key.strip().upper()] = value.strip()
    return table


def _first_property(properties: Mapping[str, Any], candidates: Sequence[str]) -> str | None:
    for candidate in candidates:
        value = properties.get(candidate)
        if isinstance(value, str) and value.strip() and value.strip() != "-99":
            return value.strip()
    return None


def parse_regions(text: str, report: LoadReport) -> tuple[Region, ...]:
    """Parse a GeoJSON FeatureCollection into regions."""
    payload = json.loads(text)
    if not isinstance(payload, Mapping) or not isinstance(payload.get("features"), list):
        raise ValueError("Expected a GeoJSON FeatureCollection with a 'features' list")

    regions: list[Region] = []
    skipped = 0
    for feature in payload["features"]:
        if not isinstance(feature, Mapping):
            skipped += 1
            continue
        properties = feature.get("properties") or {}
        if not isinstance(properties, Mapping):
            skipped += 1
            continue
        feature_id = feature.get("id")
        code = (
            feature_id.strip()
            if isinstance(feature_id, str) and feature_id.strip()
            else _first_property(properties, REGION_CODE_PROPERTIES)
        )
        name = _first_property(properties, REGION_NAME_PROPERTIES)
        geometry_raw = feature.get("geometry")
        if code is None or name is None or not geometry_raw:
            skipped += 1
            continue
        try:
            geometry = shape(geometry_raw)
        except Exception as exc:
            report.add_warning(f"Skipping region {code}: invalid geometry ({exc})")
            continue
        if geometry.is_empty:
            skipped += 1
            continue
        regions.append(Region(code=code.upper(), name=name, geometry=geometry))
    if skipped:
        report.add_warning(f"Skipped {skipped} features without code, name, or geometry")
    return tuple(regions)


def load_trips(source: str, report: LoadReport, cfg: SourcesConfig | None = None) -> tuple[VisitRecord, ...]:
    text = _read(source, cfg, report, "trips file", missing_is_error=False)
    if text is None:
        return ()
    try:
        visits = parse_trips(text, report)
    except (yaml.YAMLError, ValueError) as exc:
        report.add_error(f"Failed parsing trips '{source}': {exc}")
        return ()
    report.add_info(f"Loaded {len(visits)} visit records from {source}")
    return visits


def load_lookups(
    continents_source: str,
    codes_source: str,
    report: LoadReport,
    cfg: SourcesConfig | None = None,
) -> Lookups:
    tables: list[dict[str, str]] = []
    for source, label in ((continents_source, "continent table"), (codes_source, "country code table")):
        text = _read(source, cfg, report, label)
        table: dict[str, str] = {}
        if text is not None:
            try:
                table = parse_code_table(text, label)
                report.add_info(f"Loaded {len(table)} {label} entries from {source}")
            except (yaml.YAMLError, ValueError) as exc:
                report.add_error(f"Failed parsing {label} '{source}': {exc}")
        tables.append(table)
    return Lookups(continents=tables[0], alpha2=tables[1])


def load_regions(
    source: str,
    report: LoadReport,
    *,
    excluded: Sequence[str] = (),
    cfg: SourcesConfig | None = None,
) -> tuple[tuple[Region, ...], str | None]:
    """Return (regions, map_error); map_error is set when the map cannot render."""
    text = _read(source, cfg, report, "region shapes")
    if text is None:
        return ((), MAP_UNAVAILABLE_MESSAGE)
    try:
        regions = parse_regions(text, report)
    except (ValueError, TypeError) as exc:
        report.add_error(f"Failed parsing region shapes '{source}': {exc}")
        return ((), MAP_UNAVAILABLE_MESSAGE)
    kept = regions_without(regions, excluded)
    report.add_info(
        f"Loaded {len(kept)} regions from {source} ({len(regions) - len(kept)} excluded)"
    )
    if not kept:
        report.add_error(f"No drawable regions in {source}")
        return ((), MAP_UNAVAILABLE_MESSAGE)
    return (kept, None)


def load_dataset(cfg: AppConfig) -> tuple[Dataset, LoadReport]:
    """Load every source; drawing starts only after this returns."""
    report = LoadReport()
    lookups = load_lookups(cfg.paths.continents, cfg.paths.country_codes, report, cfg.sources)
    visits = load_trips(cfg.paths.trips, report, cfg.sources)
    regions, map_error = load_regions(
        cfg.paths.regions,
        report,
        excluded=cfg.map.excluded_regions,
        cfg=cfg.sources,
    )
    dataset = Dataset(visits=visits, regions=regions, lookups=lookups, map_error=map_error)
    report.summary = {
        "visits": len(dataset.visits),
        "visited_countries": len(dataset.visited),
        "regions": len(dataset.regions),
        "continent_entries": len(lookups.continents),
        "alpha2_entries": len(lookups.alpha2),
    }
    return (dataset, report)
