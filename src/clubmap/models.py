"""Domain models shared across the map modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Sequence


def normalize_name(value: str) -> str:
    """Case-insensitive key for matching visit countries against region names."""
    return value.strip().casefold()


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _normalize_date(value: Any) -> str | None:
    # YAML turns unquoted 2024-03-05 into a date object.
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return _optional_str(value)


def _normalize_rating(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected number for 'rating', got {value!r}")
    rating = float(value)
    if rating < 0.0 or rating > 5.0:
        raise ValueError(f"rating must be between 0 and 5, got {rating}")
    return rating


@dataclass(frozen=True, slots=True)
class VisitRecord:
    """One logged restaurant visit from `trips.yaml`."""

    country: str
    restaurant: str
    date: str | None = None
    rating: float | None = None
    notes: str | None = None
    maps_url: str | None = None

    @property
    def country_key(self) -> str:
        return normalize_name(self.country)

    @property
    def parsed_date(self) -> date | None:
        if self.date is None:
            return None
        try:
            return date.fromisoformat(self.date)
        except ValueError:
            return None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> VisitRecord:
        return cls(
            country=_require_str(data.get("country"), "country"),
            restaurant=_require_str(data.get("restaurant"), "restaurant"),
            date=_normalize_date(data.get("date")),
            rating=_normalize_rating(data.get("rating")),
            notes=_optional_str(data.get("notes")),
            maps_url=_optional_str(data.get("maps_url")),
        )


@dataclass(frozen=True, slots=True)
class Region:
    """A country/territory shape keyed by its three-letter code."""

    code: str
    name: str
    geometry: Any

    @property
    def key(self) -> str:
        return normalize_name(self.name)


@dataclass(frozen=True, slots=True)
class Lookups:
    """Static code tables: three-letter code to continent / two-letter code."""

    continents: Mapping[str, str] = field(default_factory=dict)
    alpha2: Mapping[str, str] = field(default_factory=dict)

    def continent_for(self, code: str, default: str = "Other") -> str:
        return self.continents.get(code, default)

    def flag_for(self, code: str | None) -> str:
        """Flag emoji built from regional indicator symbols, '' when unknown."""
        if not code:
            return ""
        alpha2 = self.alpha2.get(code)
        if not alpha2 or len(alpha2) != 2 or not alpha2.isalpha():
            return ""
        return "".join(chr(0x1F1E6 + ord(ch) - ord("A")) for ch in alpha2.upper())


@dataclass(frozen=True, slots=True)
class Dataset:
    """Everything loaded at startup; the single join point before drawing."""

    visits: tuple[VisitRecord, ...] = ()
    regions: tuple[Region, ...] = ()
    lookups: Lookups = field(default_factory=Lookups)
    map_error: str | None = None
    visited: frozenset[str] = field(init=False, repr=False, compare=False)
    code_by_name: Mapping[str, str] = field(init=False, repr=False, compare=False)
    name_by_code: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "visited", visited_set(self.visits))
        code_by_name: dict[str, str] = {}
        name_by_code: dict[str, str] = {}
        for region in self.regions:
            # Duplicate codes or names: last write wins.
            code_by_name[region.key] = region.code
            name_by_code[region.code] = region.name
        object.__setattr__(self, "code_by_name", code_by_name)
        object.__setattr__(self, "name_by_code", name_by_code)

    def is_visited(self, region: Region) -> bool:
        return region.key in self.visited

    def region_by_code(self, code: str) -> Region | None:
        found: Region | None = None
        for region in self.regions:
            if region.code == code:
                found = region
        return found

    def visits_for(self, country_name: str) -> list[VisitRecord]:
        key = normalize_name(country_name)
        return [visit for visit in self.visits if visit.country_key == key]

    def unvisited_regions(self) -> list[Region]:
        return [region for region in self.regions if not self.is_visited(region)]

    def unmatched_countries(self) -> list[str]:
        known = {region.key for region in self.regions}
        seen: list[str] = []
        for visit in self.visits:
            if visit.country_key not in known and visit.country not in seen:
                seen.append(visit.country)
        return seen


def visited_set(visits: Iterable[VisitRecord]) -> frozenset[str]:
    return frozenset(visit.country_key for visit in visits)


def regions_without(regions: Sequence[Region], excluded: Iterable[str]) -> tuple[Region, ...]:
    drop = {code.upper() for code in excluded}
    return tuple(region for region in regions if region.code not in drop)
