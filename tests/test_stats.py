"""Unit tests for the derived statistics."""

from datetime import date

from clubmap.stats import (
    OTHER_CONTINENT,
    continent_breakdown,
    monthly_activity,
    most_visited,
    overall_ratio,
    summarize,
)
from clubmap.util import percent

from conftest import make_dataset, visit


class TestVisitedSet:
    """Test visited-set membership."""

    def test_case_insensitive_exact_match(self):
        """Test that matching ignores case but never matches partially."""
        dataset = make_dataset([visit("  iTaLy "), visit("Peru North"), visit("Fran")])
        by_code = {r.code: dataset.is_visited(r) for r in dataset.regions}
        assert by_code["ITA"] is True
        assert by_code["PER"] is False
        assert by_code["FRA"] is False

    def test_unmatched_countries_listed(self):
        """Test that names matching no region are reported once each."""
        dataset = make_dataset([visit("Atlantis"), visit("Italy"), visit("Atlantis")])
        assert dataset.unmatched_countries() == ["Atlantis"]


class TestOverallRatio:
    """Test the visited/total ratio."""

    def test_zero_visits(self):
        """Test that no visits gives 0/N, 0.0% and an empty ranking."""
        dataset = make_dataset([])
        summary = summarize(dataset)
        assert (summary.visited_count, summary.total_regions) == (0, 6)
        assert summary.percentage == 0.0
        assert summary.most_visited == ()
        assert all(not dataset.is_visited(r) for r in dataset.regions)

    def test_one_decimal(self):
        """Test one-decimal rounding of the overall percentage."""
        dataset = make_dataset([visit("Italy")])
        assert overall_ratio(dataset.regions, dataset.visited) == (1, 6, 16.7)

    def test_unmatched_names_not_counted(self):
        """Test that unmatched visit names do not inflate the ratio."""
        dataset = make_dataset([visit("Italy"), visit("Atlantis")])
        assert overall_ratio(dataset.regions, dataset.visited)[0] == 1

    def test_percent_rounds_half_up(self):
        """Test that .5 rounds away from zero."""
        assert percent(1, 8) == 13.0
        assert percent(1, 0) == 0.0


class TestContinentBreakdown:
    """Test per-continent ratios."""

    def test_sums_match_overall(self):
        """Test that continent visited counts add up to the overall count."""
        dataset = make_dataset([visit("Italy"), visit("Japan"), visit("Peru"), visit("France")])
        stats = continent_breakdown(dataset.regions, dataset.visited, dataset.lookups)
        assert sum(s.visited for s in stats) == overall_ratio(dataset.regions, dataset.visited)[0]
        assert sum(s.total for s in stats) == len(dataset.regions)

    def test_configured_order_then_alphabetical(self):
        """Test ordering: configured continents first, the rest sorted."""
        dataset = make_dataset([])
        stats = continent_breakdown(
            dataset.regions, dataset.visited, dataset.lookups, ("Asia", "Europe")
        )
        assert [s.continent for s in stats] == ["Asia", "Europe", "Africa", "South America"]

    def test_unmapped_regions_are_other(self, lookups):
        """Test that regions without a continent fall into Other, listed last."""
        continents = dict(lookups.continents)
        del continents["EGY"]
        dataset = make_dataset([visit("Egypt")], lookups=type(lookups)(continents, lookups.alpha2))
        stats = continent_breakdown(dataset.regions, dataset.visited, dataset.lookups, ("Europe",))
        assert stats[-1].continent == OTHER_CONTINENT
        assert (stats[-1].visited, stats[-1].total, stats[-1].percentage) == (1, 1, 100)

    def test_integer_percentages(self):
        """Test that continent percentages are whole numbers."""
        dataset = make_dataset([visit("Peru")])
        stats = {s.continent: s for s in continent_breakdown(dataset.regions, dataset.visited, dataset.lookups)}
        assert stats["South America"].percentage == 50


class TestMostVisited:
    """Test the visit-count ranking."""

    def test_italy_before_japan(self):
        """Test that two Italy visits outrank one Japan visit."""
        dataset = make_dataset([visit("Japan"), visit("Italy"), visit("italy")])
        ranking = most_visited(dataset)
        assert [(r.display_name, r.count) for r in ranking] == [("Italy", 2), ("Japan", 1)]
        assert ranking[0].code == "ITA"

    def test_ties_keep_first_seen_order(self):
        """Test that equal counts keep encounter order."""
        dataset = make_dataset([visit("Peru"), visit("Egypt"), visit("France")])
        assert [r.code for r in most_visited(dataset)] == ["PER", "EGY", "FRA"]

    def test_unmatched_counted_without_code(self):
        """Test that unmatched names rank by their raw key with no code."""
        dataset = make_dataset([visit("Atlantis"), visit("Atlantis"), visit("Italy")])
        top = most_visited(dataset)[0]
        assert (top.key, top.code, top.count) == ("atlantis", None, 2)

    def test_limit(self):
        """Test that the ranking is truncated."""
        dataset = make_dataset([visit(name) for name in ("Italy", "Peru", "Japan")])
        assert len(most_visited(dataset, limit=2)) == 2


class TestMonthlyActivity:
    """Test the month grid."""

    def test_single_visit_rate(self):
        """Test that one visit in month M of year Y gives rate 1/T."""
        today = date(2025, 3, 10)
        activity = monthly_activity([visit("Italy", date="2024-05-02")], today)
        # Jan 2024 .. Mar 2025 inclusive.
        assert activity.total_months == 15
        assert activity.active_months == 1
        assert activity.rate == 7
        assert [year for year, _ in activity.rows] == [2025, 2024]

    def test_future_months_flagged(self):
        """Test that months after today are future and not counted."""
        today = date(2025, 3, 10)
        activity = monthly_activity([visit("Italy", date="2025-01-15")], today)
        cells = dict(activity.rows)[2025]
        assert [c.future for c in cells[:4]] == [False, False, False, True]
        assert activity.total_months == 3

    def test_undated_visits_skipped(self):
        """Test that visits without a usable date are ignored."""
        activity = monthly_activity([visit("Italy"), visit("Peru", date="someday")], date(2025, 1, 1))
        assert activity.empty
        assert activity.total_months == 0
        assert activity.rate == 0

    def test_first_visit_in_month_kept(self):
        """Test that a month with several visits shows the first one."""
        visits = [visit("Italy", "A", "2024-05-02"), visit("Japan", "B", "2024-05-20")]
        cells = dict(monthly_activity(visits, date(2024, 12, 1)).rows)[2024]
        assert cells[4].visit.restaurant == "A"
        assert cells[4].active

    def test_visit_after_today_extends_grid(self):
        """Test that a later year counts every month, and only this year has future months."""
        activity = monthly_activity([visit("Italy", date="2026-02-01")], date(2025, 6, 1))
        assert [year for year, _ in activity.rows] == [2026]
        assert activity.total_months == 12
        assert activity.active_months == 1
        assert not any(cell.future for _, cells in activity.rows for cell in cells)

