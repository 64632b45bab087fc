"""
Tests for team-name normalization
Run with: pytest tests/test_team_mapping.py -v
"""

import pytest

from rightcall.services.team_mapping import TEAM_ABBR, normalize_abbr, team_abbr


class TestTeamAbbr:

    def test_all_32_franchises(self):
        assert len(TEAM_ABBR) == 32
        assert len(set(TEAM_ABBR.values())) == 32

    @pytest.mark.parametrize("name, abbr", [
        ("Buffalo Bills", "BUF"),
        ("New York Jets", "NYJ"),
        ("New York Giants", "NYG"),
        ("Los Angeles Rams", "LAR"),
        ("Washington Commanders", "WAS"),
    ])
    def test_exact(self, name, abbr):
        assert team_abbr(name) == abbr

    def test_already_abbreviated(self):
        assert team_abbr("KC") == "KC"
        assert team_abbr("wsh") == "WAS"

    def test_fuzzy_case_and_spacing(self):
        assert team_abbr("san francisco 49ers") == "SF"
        assert team_abbr("Tampa Bay  Buccaneers") == "TB"
        assert team_abbr("Bills Buffalo") == "BUF"

    def test_unknown_returns_none(self):
        assert team_abbr("Springfield Isotopes") is None

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_empty(self, name):
        assert team_abbr(name) is None


class TestNormalizeAbbr:

    @pytest.mark.parametrize("raw, expected", [
        ("WSH", "WAS"),
        ("JAC", "JAX"),
        ("LA", "LAR"),
        (" buf ", "BUF"),
        ("NYJ", "NYJ"),
        ("XYZ", "XYZ"),
    ])
    def test_aliases(self, raw, expected):
        assert normalize_abbr(raw) == expected

    def test_none_is_empty(self):
        assert normalize_abbr(None) == ""
