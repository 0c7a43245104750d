"""Validation layer for config paths and data files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .config import AppConfig
from .loader import load_dataset
from .sources import source_exists
from .util import format_report_lines


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Checks that the data files load and line up with each other."""

    def __init__(self, cfg: AppConfig) -> None:
        self.cfg = cfg

    def run(self) -> ValidationReport:
        report = ValidationReport()
        self._validate_paths(report)
        self._validate_data(report)
        return report

    def _validate_paths(self, report: ValidationReport) -> None:
        paths = self.cfg.paths
        for source in (paths.trips, paths.continents, paths.country_codes):
            if source_exists(source) is False:
                report.add_warning(f"Missing input file: {source}")
        if source_exists(paths.regions) is False:
            report.add_error(f"Missing region shapes file: {paths.regions}")

    def _validate_data(self, report: ValidationReport) -> None:
        dataset, load_report = load_dataset(self.cfg)
        report.infos.extend(load_report.infos)
        report.warnings.extend(load_report.warnings)
        report.warnings.extend(load_report.errors)
        if dataset.map_error is not None and source_exists(self.cfg.paths.regions) is not False:
            report.add_error(f"Region shapes unusable: {dataset.map_error}")

        unmatched = dataset.unmatched_countries()
        if unmatched and dataset.regions:
            report.add_warning(
                "Visit countries matching no region name (not colored on the map): "
                + _format_name_list(unmatched)
            )

        if not dataset.regions:
            return
        no_continent = sorted(
            region.code for region in dataset.regions if region.code not in dataset.lookups.continents
        )
        no_alpha2 = sorted(
            region.code for region in dataset.regions if region.code not in dataset.lookups.alpha2
        )
        if no_continent:
            report.add_info(
                f"{len(no_continent)} regions without a continent (counted as Other): "
                + _format_name_list(no_continent)
            )
        if no_alpha2:
            report.add_info(
                f"{len(no_alpha2)} regions without a two-letter code (no flag): "
                + _format_name_list(no_alpha2)
            )
        report.add_info(
            f"{len(dataset.visited)} visited countries, {len(dataset.unvisited_regions())} "
            f"of {len(dataset.regions)} regions unvisited"
        )


def format_validation_lines(report: ValidationReport) -> Sequence[str]:
    return format_report_lines(
        report.infos,
        report.warnings,
        report.errors,
        ok_line="Validation completed with no errors.",
    )


def _format_name_list(values: Sequence[str], limit: int = 20) -> str:
    if len(values) <= limit:
        return ", ".join(values)
    return ", ".join(values[:limit]) + f", ... (+{len(values) - limit} more)"
