"""Unit tests for the application state and its entry points."""

import random
from datetime import date

import pytest
from shapely.geometry import box

from clubmap.app import CALENDAR, DETAIL, EXHAUSTED_NOTICE, STATS, ClubMap, PanelState
from clubmap.models import Region
from clubmap.viewport import FOCUSED, OVERVIEW

from conftest import make_dataset, make_regions, visit


def make_app(cfg, visits=(), **kwargs):
    return ClubMap(make_dataset(visits), cfg, rng=random.Random(7), **kwargs)


def active_codes(app):
    return [
        region.code
        for region, classes in zip(app.dataset.regions, app.region_classes())
        if "active" in classes.split()
    ]


class TestSelection:
    """Test region selection and the single active indicator."""

    def test_select_region_opens_detail(self, cfg):
        """Test that clicking a region focuses it and opens the sidebar."""
        app = make_app(cfg, [visit("Italy", "A")])
        selection = app.select_region("ITA")
        assert selection.panel.country_name == "Italy"
        assert selection.transition is not None
        assert app.panels.is_open(DETAIL)
        assert app.viewport.state == FOCUSED
        assert active_codes(app) == ["ITA"]

    def test_second_selection_moves_indicator(self, cfg):
        """Test that at most one region is ever marked active."""
        app = make_app(cfg)
        app.select_region("ITA")
        app.select_region("JPN")
        assert active_codes(app) == ["JPN"]
        assert app.viewport.focused_code == "JPN"

    def test_duplicate_code_marks_one_shape(self, cfg):
        """Test that two shapes sharing a code never both carry the active class."""
        regions = make_regions() + (Region(code="ITA", name="Italy", geometry=box(14, 36, 16, 38)),)
        app = ClubMap(make_dataset(regions=regions), cfg, rng=random.Random(7))
        app.select_region("ITA")
        active = [
            region for region, classes in zip(regions, app.region_classes()) if "active" in classes.split()
        ]
        assert len(active) == 1
        assert active[0] is regions[-1]

    def test_unknown_code(self, cfg):
        """Test that an unknown region code is a KeyError."""
        with pytest.raises(KeyError):
            make_app(cfg).select_region("XXX")

    def test_select_country_by_name(self, cfg):
        """Test name lookup is case-insensitive and uses the region's name."""
        app = make_app(cfg, [visit("japan", "Koya")])
        selection = app.select_country("JAPAN")
        assert selection.region.code == "JPN"
        assert selection.panel.country_name == "Japan"
        assert [v.restaurant for v in selection.panel.visits] == ["Koya"]

    def test_unmatched_country_opens_panel_without_zoom(self, cfg):
        """Test that an unmatched name still shows its visits, with no focus."""
        app = make_app(cfg, [visit("Atlantis", "Sunken Grill")])
        selection = app.select_country("Atlantis")
        assert selection.region is None
        assert selection.transition is None
        assert [v.restaurant for v in selection.panel.visits] == ["Sunken Grill"]
        assert active_codes(app) == []

    def test_visited_classes(self, cfg):
        """Test that visited regions carry the visited class."""
        app = make_app(cfg, [visit("Peru")])
        classes = dict(zip((r.code for r in app.dataset.regions), app.region_classes()))
        assert "visited" in classes["PER"].split()
        assert "visited" not in classes["BRA"].split()


class TestDismissal:
    """Test closing panels."""

    def test_close_detail_deselects(self, cfg):
        """Test that closing the sidebar clears the selection, keeping the zoom."""
        app = make_app(cfg)
        selection = app.select_region("FRA")
        app.close_panel(DETAIL)
        assert not app.panels.is_open(DETAIL)
        assert active_codes(app) == []
        assert app.viewport.state == OVERVIEW
        assert app.viewport.transform == selection.transition.transform

    def test_click_outside_only_when_open(self, cfg):
        """Test that an outside click closes an open overlay."""
        app = make_app(cfg)
        app.open_stats()
        app.click_outside(STATS)
        app.click_outside(CALENDAR)
        assert not app.panels.is_open(STATS)

    def test_cancel_closes_everything(self, cfg):
        """Test that the cancel key closes every panel."""
        app = make_app(cfg)
        app.select_region("EGY")
        app.open_stats()
        app.open_calendar(date(2025, 1, 1))
        app.cancel()
        assert not any(app.panels.open.values())
        assert app.active_code is None

    def test_unknown_panel_name(self):
        """Test that panel names are checked."""
        with pytest.raises(ValueError):
            PanelState().show("settings")


class TestOverlays:
    """Test the stats and calendar overlays."""

    def test_stats_entry_selects_country(self, cfg):
        """Test that choosing a ranking entry closes stats and focuses the region."""
        app = make_app(cfg, [visit("Italy"), visit("Italy")])
        panel = app.open_stats()
        entry = panel.summary.most_visited[0]
        selection = app.choose_stats_entry(entry.display_name, entry.code)
        assert not app.panels.is_open(STATS)
        assert app.panels.is_open(DETAIL)
        assert selection.region.code == "ITA"

    def test_calendar_entry_highlights_card(self, cfg):
        """Test that a calendar cell opens the country with that date highlighted."""
        app = make_app(cfg, [visit("Japan", "Koya", "2024-02-22")])
        app.open_calendar(date(2024, 6, 1))
        selection = app.choose_calendar_entry("Japan", "2024-02-22")
        assert not app.panels.is_open(CALENDAR)
        assert selection.panel.highlight_date == "2024-02-22"


class TestDiscover:
    """Test random discovery of unvisited regions."""

    def test_never_selects_visited(self, cfg):
        """Test that discover only ever lands on unvisited regions."""
        app = make_app(cfg, [visit("Italy"), visit("France"), visit("Japan")])
        for _ in range(25):
            selection = app.discover()
            assert selection.region.code in {"EGY", "PER", "BRA"}
            assert selection.transition is not None
            assert active_codes(app) == [selection.region.code]

    def test_exhausted(self, cfg):
        """Test that with everything visited there is a notice and no transition."""
        app = make_app(cfg, [visit(r.name) for r in make_regions()])
        before = app.viewport.transform
        assert app.discover() is None
        assert app.notice == EXHAUSTED_NOTICE
        assert app.viewport.transform == before
        assert app.viewport.state == OVERVIEW
        assert not app.panels.is_open(DETAIL)


class TestResize:
    """Test debounced resizing through the app."""

    def test_debounced_resize_to_portrait(self, cfg):
        """Test that a resize applies only after the quiet period."""
        app = make_app(cfg)
        app.select_region("BRA")
        app.request_resize(500, 900, now=10.0)
        assert not app.tick(now=10.1)
        assert app.viewport.width == 960
        assert app.tick(now=10.2)
        assert app.viewport.min_zoom > 1.0
        assert app.viewport.transform == app.viewport.default_transform()
        # The selection survives the resize.
        assert app.active_code == "BRA"
