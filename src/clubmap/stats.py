"""Aggregate statistics derived from the visit list.

Nothing here is cached; panels recompute on every open.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from .models import Dataset, Lookups, Region, VisitRecord
from .util import percent


OTHER_CONTINENT = "Other"


@dataclass(frozen=True, slots=True)
class ContinentStat:
    continent: str
    visited: int
    total: int

    @property
    def percentage(self) -> int:
        return int(percent(self.visited, self.total))


@dataclass(frozen=True, slots=True)
class CountryCount:
    key: str
    display_name: str
    code: str | None
    count: int


@dataclass(frozen=True, slots=True)
class StatsSummary:
    visited_count: int
    total_regions: int
    percentage: float
    continents: tuple[ContinentStat, ...]
    most_visited: tuple[CountryCount, ...]


@dataclass(frozen=True, slots=True)
class MonthCell:
    year: int
    month: int
    visit: VisitRecord | None
    future: bool

    @property
    def active(self) -> bool:
        return self.visit is not None


@dataclass(frozen=True, slots=True)
class MonthlyActivity:
    rows: tuple[tuple[int, tuple[MonthCell, ...]], ...]
    active_months: int
    total_months: int

    @property
    def rate(self) -> int:
        return int(percent(self.active_months, self.total_months))

    @property
    def empty(self) -> bool:
        return not self.rows


def overall_ratio(regions: Sequence[Region], visited: frozenset[str]) -> tuple[int, int, float]:
    """(visited regions, total regions, percentage to one decimal)."""
    total = len(regions)
    count = sum(1 for region in regions if region.key in visited)
    return (count, total, percent(count, total, digits=1))


def continent_breakdown(
    regions: Sequence[Region],
    visited: frozenset[str],
    lookups: Lookups,
    order: Sequence[str] = (),
) -> tuple[ContinentStat, ...]:
    totals: Counter[str] = Counter()
    hits: Counter[str] = Counter()
    for region in regions:
        continent = lookups.continent_for(region.code, OTHER_CONTINENT)
        totals[continent] += 1
        if region.key in visited:
            hits[continent] += 1

    ordered = [name for name in order if totals[name] > 0]
    rest = sorted(name for name in totals if name not in ordered and name != OTHER_CONTINENT)
    ordered.extend(rest)
    if totals[OTHER_CONTINENT] > 0 and OTHER_CONTINENT not in ordered:
        ordered.append(OTHER_CONTINENT)
    return tuple(ContinentStat(name, hits[name], totals[name]) for name in ordered)


def most_visited(dataset: Dataset, limit: int = 10) -> tuple[CountryCount, ...]:
    """Visit counts per country, descending; ties keep first-encounter order."""
    counts: Counter[str] = Counter()
    first_seen: dict[str, VisitRecord] = {}
    for visit in dataset.visits:
        counts[visit.country_key] += 1
        first_seen.setdefault(visit.country_key, visit)
    # Counter preserves insertion order and sorted() is stable.
    ranked = sorted(counts.items(), key=lambda item: -item[1])[:limit]
    out: list[CountryCount] = []
    for key, count in ranked:
        code = dataset.code_by_name.get(key)
        display = dataset.name_by_code.get(code, key) if code else key
        out.append(CountryCount(key=key, display_name=display, code=code, count=count))
    return tuple(out)


def summarize(
    dataset: Dataset,
    *,
    top_n: int = 10,
    continent_order: Sequence[str] = (),
) -> StatsSummary:
    count, total, pct = overall_ratio(dataset.regions, dataset.visited)
    return StatsSummary(
        visited_count=count,
        total_regions=total,
        percentage=pct,
        continents=continent_breakdown(
            dataset.regions, dataset.visited, dataset.lookups, continent_order
        ),
        most_visited=most_visited(dataset, top_n),
    )


def monthly_activity(visits: Sequence[VisitRecord], today: date | None = None) -> MonthlyActivity:
    """Month grid from the earliest visit year through max(latest, current year)."""
    today = today or date.today()
    by_month: dict[tuple[int, int], VisitRecord] = {}
    years: set[int] = set()
    for visit in visits:
        when = visit.parsed_date
        if when is None:
            continue
        years.add(when.year)
        by_month.setdefault((when.year, when.month), visit)

    if not years:
        return MonthlyActivity(rows=(), active_months=0, total_months=0)

    first_year = min(years)
    last_year = max(max(years), today.year)
    rows: list[tuple[int, tuple[MonthCell, ...]]] = []
    active_months = 0
    total_months = 0
    for year in range(last_year, first_year - 1, -1):
        cells: list[MonthCell] = []
        for month in range(1, 13):
            future = year == today.year and month > today.month
            visit = by_month.get((year, month))
            if not future:
                total_months += 1
                if visit is not None:
                    active_months += 1
            cells.append(MonthCell(year=year, month=month, visit=visit, future=future))
        rows.append((year, tuple(cells)))
    return MonthlyActivity(rows=tuple(rows), active_months=active_months, total_months=total_months)
