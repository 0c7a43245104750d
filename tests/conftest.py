"""Shared fixtures: a handful of box-shaped countries and matching lookups."""

import json
from pathlib import Path

import pytest
from shapely.geometry import box, mapping

from clubmap.config import AppConfig
from clubmap.models import Dataset, Lookups, Region, VisitRecord


# (code, name, lon0, lat0, lon1, lat1, continent, alpha2)
COUNTRIES = [
    ("FRA", "France", -5.0, 42.0, 8.0, 51.0, "Europe", "FR"),
    ("ITA", "Italy", 7.0, 37.0, 18.0, 47.0, "Europe", "IT"),
    ("JPN", "Japan", 129.0, 31.0, 146.0, 45.0, "Asia", "JP"),
    ("EGY", "Egypt", 25.0, 22.0, 36.0, 32.0, "Africa", "EG"),
    ("PER", "Peru", -81.0, -18.0, -69.0, 0.0, "South America", "PE"),
    ("BRA", "Brazil", -74.0, -34.0, -35.0, 5.0, "South America", "BR"),
]


def make_regions():
    return tuple(
        Region(code=code, name=name, geometry=box(x0, y0, x1, y1))
        for code, name, x0, y0, x1, y1, _, _ in COUNTRIES
    )


def make_lookups():
    return Lookups(
        continents={row[0]: row[6] for row in COUNTRIES},
        alpha2={row[0]: row[7] for row in COUNTRIES},
    )


def visit(country, restaurant="Somewhere", date=None, **extra):
    return VisitRecord(country=country, restaurant=restaurant, date=date, **extra)


def make_dataset(visits=(), regions=None, lookups=None, map_error=None):
    return Dataset(
        visits=tuple(visits),
        regions=make_regions() if regions is None else tuple(regions),
        lookups=make_lookups() if lookups is None else lookups,
        map_error=map_error,
    )


def geojson_text(rows=COUNTRIES, *, use_id=True):
    features = []
    for code, name, x0, y0, x1, y1, _, _ in rows:
        feature = {
            "type": "Feature",
            "properties": {"name": name} if use_id else {"name": name, "ISO_A3": code},
            "geometry": mapping(box(x0, y0, x1, y1)),
        }
        if use_id:
            feature["id"] = code
        features.append(feature)
    return json.dumps({"type": "FeatureCollection", "features": features})


def write_data_dir(root: Path, trips_yaml: str | None = None) -> None:
    data = root / "data"
    data.mkdir(parents=True, exist_ok=True)
    (data / "countries.geojson").write_text(geojson_text(), encoding="utf-8")
    (data / "country-continents.json").write_text(
        json.dumps({row[0]: row[6] for row in COUNTRIES}), encoding="utf-8"
    )
    (data / "country-codes.json").write_text(
        json.dumps({row[0]: row[7] for row in COUNTRIES}), encoding="utf-8"
    )
    if trips_yaml is not None:
        (data / "trips.yaml").write_text(trips_yaml, encoding="utf-8")


TRIPS_YAML = """\
trips:
  - country: Italy
    restaurant: Trattoria
    date: 2024-01-18
    rating: 4.5
  - country: italy
    restaurant: Bocca di Lupo
    date: 2024-06-06
  - country: Japan
    restaurant: Koya
    date: 2024-02-22
    notes: Udon <three> ways
"""


@pytest.fixture
def regions():
    return make_regions()


@pytest.fixture
def lookups():
    return make_lookups()


@pytest.fixture
def cfg(tmp_path):
    return AppConfig.defaults(tmp_path)


@pytest.fixture
def project_dir(tmp_path):
    """A tmp project with config.yaml and every data file in place."""
    write_data_dir(tmp_path, TRIPS_YAML)
    (tmp_path / "config.yaml").write_text(
        "project:\n  title: Test Club\n  preview_png: build/site/preview.png\n",
        encoding="utf-8",
    )
    return tmp_path
