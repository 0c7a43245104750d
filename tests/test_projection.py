"""Unit tests for fitting the world projection to a viewport."""

import pytest
from shapely.geometry import MultiPolygon, Polygon, box

from clubmap.models import Region
from clubmap.projection import Projector, fit_projection, svg_path

from conftest import make_regions


class TestFitProjection:
    """Test the padded fit."""

    def test_regions_inside_padded_viewport(self):
        """Test that every region lands inside the padded rectangle."""
        regions = make_regions()
        fit = Projector(regions).fit(960, 500, padding=10)
        for region in regions:
            (x0, y0), (x1, y1) = fit.bounds(region)
            assert x0 >= 10 - 1e-6
            assert y0 >= 10 - 1e-6
            assert x1 <= 950 + 1e-6
            assert y1 <= 490 + 1e-6

    def test_fit_touches_limiting_edges(self):
        """Test that the limiting dimension spans the padded size exactly."""
        regions = make_regions()
        fit = Projector(regions).fit(960, 500, padding=10)
        bounds = [fit.bounds(region) for region in regions]
        min_x = min(b[0][0] for b in bounds)
        max_x = max(b[1][0] for b in bounds)
        min_y = min(b[0][1] for b in bounds)
        max_y = max(b[1][1] for b in bounds)
        assert max(max_x - min_x - 940, max_y - min_y - 480) == pytest.approx(0, abs=1e-6)

    def test_north_is_up(self):
        """Test that the y axis is flipped for screen coordinates."""
        regions = make_regions()
        fit = Projector(regions).fit(960, 500)
        france = fit.bounds(regions[0])
        peru = fit.bounds(regions[4])
        assert france[1][1] < peru[0][1]

    def test_point_projection_matches_geometry(self):
        """Test that __call__ agrees with the projected shapes."""
        regions = make_regions()
        fit = Projector(regions).fit(960, 500)
        x, y = fit(-5.0, 51.0)
        corners = list(fit.geometry(regions[0]).exterior.coords)
        assert any(
            cx == pytest.approx(x, abs=1e-6) and cy == pytest.approx(y, abs=1e-6)
            for cx, cy in corners
        )

    def test_too_small_viewport(self):
        """Test that padding larger than the viewport is rejected."""
        with pytest.raises(ValueError):
            fit_projection(Projector(make_regions()), 15, 15, padding=10)

    def test_no_regions(self):
        """Test that fitting nothing is an error."""
        with pytest.raises(ValueError):
            Projector([]).fit(960, 500)


class TestSvgPath:
    """Test SVG path generation."""

    def test_polygon_path(self):
        """Test one closed subpath per ring."""
        d = svg_path(box(0, 0, 1, 1))
        assert d.startswith("M")
        assert d.count("M") == 1
        assert d.endswith("Z")

    def test_holes_and_parts(self):
        """Test that holes and multipolygon parts become extra subpaths."""
        holed = Polygon([(0, 0), (10, 0), (10, 10), (0, 10)], [[(2, 2), (4, 2), (4, 4), (2, 4)]])
        multi = MultiPolygon([holed, box(20, 20, 21, 21)])
        assert svg_path(multi).count("M") == 3

    def test_path_for_region(self):
        """Test that a fitted region yields non-empty path data."""
        region = Region("FRA", "France", box(-5, 42, 8, 51))
        fit = Projector([region]).fit(200, 100)
        assert fit.path(region).startswith("M")
        assert fit.path(region, simplify_tolerance=1.0).endswith("Z")
