"""
Tests for the Reference Database

Run with: pytest tests/test_reference_db.py -v
"""

import json
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from appaudit.exceptions import ReferenceDatabaseError
from appaudit.models import MalwareMatch, TrackerMatch
from appaudit.scanning import LocalReferenceDatabase, load_default


class TestLocalReferenceDatabase:
    """Tests for in-memory lookups."""

    def test_longest_tracker_prefix(self):
        """Test that the most specific tracker prefix wins."""
        db = LocalReferenceDatabase(trackers={
            "com.ads": TrackerMatch("Ads", 5),
            "com.ads.sdk": TrackerMatch("Ads SDK", 15),
        })

        assert db.lookup_tracker("com.ads.sdk.core").name == "Ads SDK"
        assert db.lookup_tracker("com.ads.sdk").name == "Ads SDK"
        assert db.lookup_tracker("com.ads.other").name == "Ads"
        assert db.lookup_tracker("com.adsx") is None

    def test_package_lookup_is_exact(self):
        """Test that package names only match exactly."""
        db = LocalReferenceDatabase(packages={"com.evil.sms": "Joker"})

        assert db.lookup_by_package_name("com.evil.sms") == MalwareMatch("Joker")
        assert db.lookup_by_package_name("com.evil.sms.pro") is None

    def test_certificate_lookup_ignores_case(self):
        """Test that certificate hashes are compared case-insensitively."""
        db = LocalReferenceDatabase(certificates={"ABCDEF": "Anatsa"})

        assert db.lookup_by_certificate_hash("abcdef").name == "Anatsa"
        assert db.lookup_by_certificate_hash("ABCDEF").name == "Anatsa"

    def test_isolated_from_source_data(self):
        """Test that mutating the source mapping does not change the database."""
        packages = {"com.evil.sms": "Joker"}
        db = LocalReferenceDatabase(packages=packages)

        packages["com.other"] = "Other"
        packages.pop("com.evil.sms")

        assert db.lookup_by_package_name("com.evil.sms") is not None
        assert db.lookup_by_package_name("com.other") is None
        assert len(db) == 1


class TestLoading:
    """Tests for loading from files."""

    def test_load_default(self):
        """Test that the bundled sample database loads."""
        db = load_default()

        assert len(db) > 0
        assert db.lookup_by_package_name("com.fakeclean.booster") is not None
        assert db.lookup_tracker("com.adtrack.sdk").risk_score == 10

    def test_load_yaml(self, tmp_path):
        """Test loading a YAML database."""
        path = tmp_path / "db.yaml"
        path.write_text(
            "certificates:\n"
            "  aa11: Joker\n"
            "packages:\n"
            "  com.evil.sms: Joker\n"
            "trackers:\n"
            "  com.spy:\n"
            "    name: Spy\n"
            "    risk_score: 20\n"
        )

        db = LocalReferenceDatabase.from_file(path)

        assert db.lookup_by_certificate_hash("AA11").name == "Joker"
        assert db.lookup_tracker("com.spy.core") == TrackerMatch("Spy", 20)

    def test_load_json(self, tmp_path):
        """Test loading a JSON database."""
        path = tmp_path / "db.json"
        path.write_text(json.dumps({"packages": {"com.evil.sms": "Joker"}}))

        db = LocalReferenceDatabase.from_file(path)

        assert db.lookup_by_package_name("com.evil.sms").name == "Joker"

    def test_empty_file(self, tmp_path):
        """Test that an empty file is an empty database."""
        path = tmp_path / "db.yaml"
        path.write_text("")

        assert len(LocalReferenceDatabase.from_file(path)) == 0

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises ReferenceDatabaseError."""
        with pytest.raises(ReferenceDatabaseError) as exc_info:
            LocalReferenceDatabase.from_file(tmp_path / "missing.yaml")

        assert exc_info.value.details["path"].endswith("missing.yaml")

    def test_malformed_tracker(self, tmp_path):
        """Test that a tracker without a risk score is rejected."""
        path = tmp_path / "db.yaml"
        path.write_text("trackers:\n  com.spy:\n    name: Spy\n")

        with pytest.raises(ReferenceDatabaseError, match="Malformed"):
            LocalReferenceDatabase.from_file(path)

    def test_negative_tracker_score(self):
        """Test that a tracker cannot carry a negative risk score."""
        data = {"trackers": {"com.ads": {"name": "Ads", "risk_score": -5}}}

        with pytest.raises(ReferenceDatabaseError, match="Malformed"):
            LocalReferenceDatabase.from_dict(data)

    def test_not_a_mapping(self, tmp_path):
        """Test that a top-level list is rejected."""
        path = tmp_path / "db.yaml"
        path.write_text("- com.evil.sms\n")

        with pytest.raises(ReferenceDatabaseError):
            LocalReferenceDatabase.from_file(path)
