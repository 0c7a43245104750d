"""CLI entrypoint for the dinner club map builder."""

from __future__ import annotations

import argparse
import logging
import random
from typing import Sequence

from .app import ClubMap
from .config import AppConfig, load_config
from .loader import format_load_lines, load_dataset
from .site import build_site, format_site_lines
from .stats import monthly_activity, summarize
from .util import setup_logging
from .validate import Validator, format_validation_lines

LOGGER = logging.getLogger("clubmap.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clubmap",
        description="Dinner club world map builder.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default="config.yaml", help="Path to YAML config.")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    build_p = subparsers.add_parser("build", help="Write the static map page.")
    add_common(build_p)

    validate_p = subparsers.add_parser("validate", help="Validate config and input files.")
    add_common(validate_p)

    stats_p = subparsers.add_parser("stats", help="Log visit statistics.")
    add_common(stats_p)

    discover_p = subparsers.add_parser("discover", help="Suggest a random unvisited country.")
    add_common(discover_p)
    discover_p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for a reproducible suggestion.",
    )

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config)
    setup_logging(cfg.paths.logs_dir / "build.log", verbose=args.verbose)
    return cfg


def _run_build(cfg: AppConfig) -> int:
    LOGGER.info("Starting site build.")
    report = build_site(cfg)
    for line in format_site_lines(report):
        LOGGER.info(line)
    if not report.ok:
        LOGGER.error("Build failed.")
        return 1
    LOGGER.info("Build finished: %s", report.output_path)
    return 0


def _run_validate(cfg: AppConfig) -> int:
    report = Validator(cfg).run()
    for line in format_validation_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_stats(cfg: AppConfig) -> int:
    dataset, load_report = load_dataset(cfg)
    for line in format_load_lines(load_report):
        LOGGER.debug(line)
    summary = summarize(dataset, top_n=cfg.stats.top_n, continent_order=cfg.stats.continent_order)
    LOGGER.info(
        "Visited %d of %d countries (%.1f%%)",
        summary.visited_count,
        summary.total_regions,
        summary.percentage,
    )
    for stat in summary.continents:
        LOGGER.info("  %-16s %d/%d (%d%%)", stat.continent, stat.visited, stat.total, stat.percentage)
    for rank, entry in enumerate(summary.most_visited, start=1):
        LOGGER.info("  #%d %s: %d visits", rank, entry.display_name, entry.count)
    activity = monthly_activity(dataset.visits)
    if activity.empty:
        LOGGER.info("No trips recorded yet.")
    else:
        LOGGER.info(
            "Active months: %d/%d (%d%%)",
            activity.active_months,
            activity.total_months,
            activity.rate,
        )
    return 0


def _run_discover(cfg: AppConfig, *, seed: int | None) -> int:
    dataset, load_report = load_dataset(cfg)
    if dataset.map_error is not None:
        for line in format_load_lines(load_report):
            LOGGER.info(line)
        LOGGER.error(dataset.map_error)
        return 1
    app = ClubMap(dataset, cfg, rng=random.Random(seed))
    selection = app.discover()
    if selection is None:
        LOGGER.info(app.notice)
        return 0
    LOGGER.info("Next up: %s", selection.panel.country_name)
    LOGGER.info("Find a restaurant: %s", selection.panel.search_url)
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    cfg = _load_and_setup(args)
    command = str(args.command)
    if command == "build":
        return _run_build(cfg)
    if command == "validate":
        return _run_validate(cfg)
    if command == "stats":
        return _run_stats(cfg)
    if command == "discover":
        return _run_discover(cfg, seed=args.seed)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
