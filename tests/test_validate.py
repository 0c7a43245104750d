"""Tests for the input validator."""

import json

from clubmap.config import load_config
from clubmap.validate import Validator, format_validation_lines

from conftest import COUNTRIES


def run(project_dir):
    return Validator(load_config(project_dir / "config.yaml")).run()


class TestValidator:
    """Test validation findings."""

    def test_clean_project(self, project_dir):
        """Test that a complete project validates with no errors."""
        report = run(project_dir)
        assert report.ok
        assert report.warnings == []
        assert format_validation_lines(report)[-1] == "[OK] Validation completed with no errors."

    def test_missing_regions_is_error(self, project_dir):
        """Test that missing shapes fail validation."""
        (project_dir / "data" / "countries.geojson").unlink()
        report = run(project_dir)
        assert not report.ok
        assert any("region shapes" in msg for msg in report.errors)

    def test_missing_lookup_is_warning(self, project_dir):
        """Test that a missing lookup table only warns."""
        (project_dir / "data" / "country-codes.json").unlink()
        report = run(project_dir)
        assert report.ok
        assert any("Missing input file" in msg for msg in report.warnings)

    def test_unparsable_regions_is_error(self, project_dir):
        """Test that a broken shapes file fails validation."""
        (project_dir / "data" / "countries.geojson").write_text("{not json", encoding="utf-8")
        report = run(project_dir)
        assert not report.ok

    def test_unmatched_and_undated_warnings(self, project_dir):
        """Test warnings for unknown country names and undated visits."""
        (project_dir / "data" / "trips.yaml").write_text(
            "trips:\n  - country: Atlantis\n    restaurant: Sunken Grill\n", encoding="utf-8"
        )
        report = run(project_dir)
        assert report.ok
        assert any("Atlantis" in msg and "no region" in msg for msg in report.warnings)
        assert any("no date" in msg for msg in report.warnings)

    def test_regions_without_mappings_info(self, project_dir):
        """Test the count of regions with no continent or two-letter code."""
        continents = {row[0]: row[6] for row in COUNTRIES if row[0] != "EGY"}
        (project_dir / "data" / "country-continents.json").write_text(
            json.dumps(continents), encoding="utf-8"
        )
        report = run(project_dir)
        assert any(msg.startswith("1 regions without a continent") for msg in report.infos)
        assert not any("two-letter" in msg for msg in report.infos)
