"""Tests for cross-weapon aggregation."""

from pathlib import Path

import pytest

from ttklab.analysis.aggregate import (
    best_at_range,
    compare_weapons,
    overall_statistics,
    summarize_by_type,
    type_statistics,
    weapon_damage_profile,
    weapon_ttk_profile,
)
from ttklab.analysis.query import get_weapon_by_name
from ttklab.ingest.loader import load_weapon_data

SAMPLE_CSV = Path(__file__).parent / "data" / "sample_weapons.csv"


@pytest.fixture
def weapons():
    return load_weapon_data(SAMPLE_CSV)


class TestBestAtRange:
    """Tests for best_at_range."""

    def test_best_near(self, weapons):
        assert best_at_range(weapons, "10M").name == "M87A1"

    def test_best_far(self, weapons):
        """The shotgun deals no damage at 70M, so the LMG wins."""
        assert best_at_range(weapons, "70M").name == 'Drum "Heavy", Mk2'

    def test_tie_keeps_first(self, weapons):
        m433 = get_weapon_by_name(weapons, "M433")
        m4a1 = get_weapon_by_name(weapons, "M4A1")
        assert best_at_range([m433, m4a1], "10M") is m433
        assert best_at_range([m4a1, m433], "10M") is m4a1

    def test_no_candidates(self, weapons):
        svk = get_weapon_by_name(weapons, "SVK")
        assert best_at_range([svk], "10M") is None
        assert best_at_range([], "10M") is None
        assert best_at_range(weapons, "999M") is None


class TestTypeStatistics:
    """Tests for per-type summaries."""

    def test_assault_rifles(self, weapons):
        stats = type_statistics(weapons, "ASSAULT RIFLE")
        assert stats["count"] == 2
        assert stats["complete"] == 2
        assert stats["rpm"] == {"min": 600.0, "max": 800.0, "avg": 700.0}
        assert stats["ranges"]["10M"] == {"min": 25.0, "max": 33.5, "avg": 29.25}
        assert list(stats["ranges"]) == ["10M", "20M", "35M", "50M", "70M"]

    def test_unknown_damage_omitted(self, weapons):
        """SVK has RPM but no damage values: no range blocks."""
        stats = type_statistics(weapons, "DMR")
        assert stats["count"] == 1
        assert stats["complete"] == 0
        assert stats["rpm"]["avg"] == 300.0
        assert stats["ranges"] == {}

    def test_zero_damage_counted(self, weapons):
        stats = type_statistics(weapons, "SHOTGUN")
        assert stats["ranges"]["70M"] == {"min": 0.0, "max": 0.0, "avg": 0.0}

    def test_missing_type(self, weapons):
        assert type_statistics(weapons, "PISTOL") is None
        assert type_statistics(weapons, "smg") is None


class TestOverallStatistics:
    """Tests for dataset-wide totals."""

    def test_sample_dataset(self, weapons):
        stats = overall_statistics(weapons)
        assert stats["total"] == 8
        assert stats["complete"] == 6
        assert stats["incomplete"] == 2
        assert stats["types"] == 7
        assert stats["coverage"] == 75
        assert stats["types_list"] == [
            "ASSAULT RIFLE",
            "CARBINE",
            "SMG",
            "SNIPER RIFLE",
            "SHOTGUN",
            "LMG",
            "DMR",
        ]

    def test_empty_dataset(self):
        stats = overall_statistics([])
        assert stats == {
            "total": 0,
            "complete": 0,
            "incomplete": 0,
            "types": 0,
            "types_list": [],
            "coverage": 0,
        }

    def test_coverage_rounds_half_up(self, weapons):
        m433 = get_weapon_by_name(weapons, "M433")
        svk = get_weapon_by_name(weapons, "SVK")
        assert overall_statistics([m433] + [svk] * 7)["coverage"] == 13
        assert overall_statistics([m433, svk, svk])["coverage"] == 33
        assert overall_statistics([m433, m433, svk])["coverage"] == 67


class TestComparison:
    """Tests for profiles and side-by-side comparison."""

    def test_damage_profile(self, weapons):
        shotgun = get_weapon_by_name(weapons, "M87A1")
        assert weapon_damage_profile(shotgun) == {
            "10M": 100.0,
            "20M": 50.0,
            "35M": 0.0,
            "50M": 0.0,
            "70M": 0.0,
        }

    def test_ttk_profile(self, weapons):
        shotgun = get_weapon_by_name(weapons, "M87A1")
        profile = weapon_ttk_profile(shotgun)
        assert profile["10M"] == 1.0
        assert profile["20M"] == 857.1
        assert profile["35M"] is None

    def test_compare(self, weapons):
        result = compare_weapons(weapons, "M433", "M4A1")
        assert result["weapons"] == ["M433", "M4A1"]
        assert result["types"] == ["ASSAULT RIFLE", "CARBINE"]
        assert result["rpm"] == [800.0, 800.0]
        assert result["ranges"]["20M"]["damage"] == [25.0, 20.0]
        assert result["ranges"]["20M"]["ttk"] == [225.0, 300.0]
        assert result["ranges"]["20M"]["stk"] == [4, 5]

    def test_compare_missing_weapon(self, weapons):
        assert compare_weapons(weapons, "M433", "Nope") is None


class TestSummarizeByType:
    """Tests for the DataFrame roll-up."""

    def test_rollup(self, weapons):
        frame = summarize_by_type(weapons)
        assert list(frame.columns) == ["weapon_type", "count", "complete", "avg_rpm"]
        assert len(frame) == 7

        rows = frame.set_index("weapon_type")
        assert rows.loc["ASSAULT RIFLE", "count"] == 2
        assert rows.loc["ASSAULT RIFLE", "complete"] == 2
        assert rows.loc["ASSAULT RIFLE", "avg_rpm"] == pytest.approx(700.0)
        assert rows.loc["LMG", "complete"] == 0

    def test_empty(self):
        frame = summarize_by_type([])
        assert frame.empty
        assert list(frame.columns) == ["weapon_type", "count", "complete", "avg_rpm"]
