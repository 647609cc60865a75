"""Tests for raw row normalization."""

import pytest

from ttklab.analysis.metrics import with_derived
from ttklab.ingest.normalizer import (
    DEFAULT_DAMAGE_CORRECTIONS,
    DamageCorrection,
    corrections_from_mapping,
    normalize_row,
    normalize_rows,
    parse_damage,
    parse_numeric,
    parse_text,
)


def _raw_row(**overrides) -> dict:
    """A complete raw row as the CSV tokenizer produces it."""
    row = {
        "Weapon Type": "ASSAULT RIFLE",
        "Weapon": "M433",
        "10M": "25",
        "20M": "25",
        "35M": "20",
        "50M": "20",
        "70M": "18",
        "RPM": "800",
        "DPS": "333.3",
        "ADS": "250",
        "Precision": "60",
        "Control": "70",
    }
    row.update(overrides)
    return row


class TestParseNumeric:
    """Tests for the strict numeric parser."""

    def test_plain_numbers(self):
        assert parse_numeric("25") == 25.0
        assert parse_numeric("33.5") == 33.5
        assert parse_numeric(" 12.5 ") == 12.5

    def test_native_numbers(self):
        assert parse_numeric(800) == 800.0
        assert parse_numeric(0) == 0.0
        assert parse_numeric(12.5) == 12.5

    def test_blank_is_unknown(self):
        """Blank input is unknown, never zero."""
        assert parse_numeric("") is None
        assert parse_numeric("   ") is None
        assert parse_numeric(None) is None

    def test_unparsable_is_unknown(self):
        assert parse_numeric("N/A") is None
        assert parse_numeric("12abc") is None
        assert parse_numeric("abc") is None

    def test_non_finite_is_unknown(self):
        assert parse_numeric("nan") is None
        assert parse_numeric("inf") is None
        assert parse_numeric(float("nan")) is None

    def test_plain_notation_only(self):
        """Only ASCII decimal or exponent notation counts as a number."""
        assert parse_numeric("1_000") is None
        assert parse_numeric("\u0661\u0662") is None
        assert parse_numeric("0x10") is None
        assert parse_numeric("1e400") is None

    def test_accepted_notations(self):
        assert parse_numeric("1e2") == 100.0
        assert parse_numeric(".5") == 0.5
        assert parse_numeric("5.") == 5.0
        assert parse_numeric("+3") == 3.0
        assert parse_numeric("-2.5E-1") == -0.25

    def test_booleans_are_not_numbers(self):
        assert parse_numeric(True) is None

    def test_parse_text(self):
        assert parse_text("  SMG ") == "SMG"
        assert parse_text(None) == ""
        assert parse_text(float("nan")) == ""


class TestDamageCorrection:
    """Tests for the 33 -> 33.5 correction rule."""

    def test_exact_33_corrected(self):
        assert parse_damage("33") == 33.5
        assert parse_damage("33.0") == 33.5

    def test_other_values_untouched(self):
        assert parse_damage("33.4") == 33.4
        assert parse_damage("34") == 34.0
        assert parse_damage("") is None

    def test_rules_are_pluggable(self):
        assert parse_damage("33", corrections=()) == 33.0
        rules = (DamageCorrection(20.0, 21.0),)
        assert parse_damage("20", corrections=rules) == 21.0
        assert parse_damage("33", corrections=rules) == 33.0

    def test_rules_from_config_mapping(self):
        rules = corrections_from_mapping({"33": "33.5"})
        assert rules == DEFAULT_DAMAGE_CORRECTIONS

    def test_applied_per_range_before_derivation(self):
        """Corrected damage drives shots-to-kill: 33.5 needs 3 hits, not 4."""
        record = normalize_row(_raw_row(**{"10M": "33", "20M": "33", "35M": "25"}))
        assert record.damage_at("10M") == 33.5
        assert record.damage_at("20M") == 33.5
        assert record.damage_at("35M") == 25.0
        assert record.shots_to_kill_at("10M") == 3
        assert record.ttk_at("10M") == 150.0


class TestNormalizeRow:
    """Tests for single-row normalization."""

    def test_complete_row(self):
        record = normalize_row(_raw_row())
        assert record.weapon_type == "ASSAULT RIFLE"
        assert record.name == "M433"
        assert record.damage_by_range == {"10M": 25, "20M": 25, "35M": 20, "50M": 20, "70M": 18}
        assert record.rpm == 800
        assert record.dps == pytest.approx(333.3)
        assert record.ads_time == 250
        assert record.precision == 60
        assert record.control == 70
        assert record.is_complete is True

    def test_strings_are_trimmed(self):
        record = normalize_row(_raw_row(**{"Weapon": "  M433 ", "Weapon Type": " SMG"}))
        assert record.name == "M433"
        assert record.weapon_type == "SMG"

    def test_unknown_type_passes_through(self):
        record = normalize_row(_raw_row(**{"Weapon Type": "Battle Rifle"}))
        assert record.weapon_type == "Battle Rifle"

    def test_missing_name_or_type_dropped(self):
        assert normalize_row(_raw_row(Weapon="")) is None
        assert normalize_row(_raw_row(**{"Weapon Type": "   "})) is None
        assert normalize_row({}) is None

    def test_missing_columns_are_unknown(self):
        record = normalize_row({"Weapon Type": "SMG", "Weapon": "PW7A2", "10M": "20"})
        assert record.damage_at("10M") == 20
        assert record.damage_at("70M") is None
        assert record.rpm is None
        assert record.is_complete is False

    def test_zero_damage_is_known(self):
        record = normalize_row(_raw_row(**{"35M": "0", "50M": "0", "70M": "0"}))
        assert record.damage_at("70M") == 0
        assert record.shots_to_kill_at("70M") is None
        assert record.is_complete is True

    def test_out_of_domain_values_unknown(self):
        """Negative damage/ADS/RPM and out-of-range stats are unknown."""
        record = normalize_row(
            _raw_row(**{"10M": "-5", "RPM": "-800", "ADS": "-1", "Precision": "150", "Control": "-3"})
        )
        assert record.damage_at("10M") is None
        assert record.rpm is None
        assert record.ads_time is None
        assert record.precision is None
        assert record.control is None

    def test_zero_rpm_is_known(self):
        """RPM 0 counts as present for completeness but yields no TTK."""
        record = normalize_row(_raw_row(RPM="0"))
        assert record.rpm == 0
        assert record.is_complete is True
        assert record.ttk_at("10M") is None
        assert record.shots_to_kill_at("10M") == 4

    def test_declared_dps_not_revalidated(self):
        record = normalize_row(_raw_row(DPS="999"))
        assert record.dps == 999.0

    def test_derived_fields_match_recomputation(self):
        record = normalize_row(_raw_row(**{"70M": "", "ADS": ""}))
        assert with_derived(record) == record


class TestNormalizeRows:
    """Tests for batch normalization."""

    def test_drops_invalid_rows_keeps_order(self):
        rows = [
            _raw_row(Weapon="B"),
            _raw_row(Weapon=""),
            _raw_row(Weapon="A"),
            {"Weapon Type": "", "Weapon": "Orphan"},
        ]
        records = normalize_rows(rows)
        assert [r.name for r in records] == ["B", "A"]
        assert isinstance(records, tuple)

    def test_duplicates_kept(self):
        records = normalize_rows([_raw_row(), _raw_row()])
        assert len(records) == 2

    def test_empty_input(self):
        assert normalize_rows([]) == ()
