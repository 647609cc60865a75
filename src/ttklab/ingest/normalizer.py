"""
Row Normalizer

Turns raw dataset rows (column name -> raw string or number) into typed
WeaponRecords:

- String fields are trimmed
- Numeric fields go through a strict parser: blank or unparsable input is
  unknown (None), never 0 and never an error
- Values outside a field's domain are unknown as well
- Damage corrections are applied per range after parsing
- Rows without a name or a type are dropped
- Derived metrics are attached before the record is returned
"""

import logging
import math
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ttklab.analysis.metrics import with_derived
from ttklab.core.constants import (
    COL_ADS,
    COL_CONTROL,
    COL_DPS,
    COL_PRECISION,
    COL_RPM,
    COL_WEAPON,
    COL_WEAPON_TYPE,
    RANGES,
)
from ttklab.core.models import WeaponRecord

logger = logging.getLogger(__name__)

# Plain decimal or exponent notation, ASCII digits only
NUMBER_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


@dataclass(frozen=True)
class DamageCorrection:
    """Replace a damage value that parses to exactly `source` with `target`."""

    source: float
    target: float

    def apply(self, value: float | None) -> float | None:
        if value is not None and value == self.source:
            return self.target
        return value


# The dataset records 33.5-damage weapons as 33
DEFAULT_DAMAGE_CORRECTIONS: tuple[DamageCorrection, ...] = (DamageCorrection(33.0, 33.5),)


def corrections_from_mapping(mapping: Mapping[float, float]) -> tuple[DamageCorrection, ...]:
    """Build correction rules from a {source: target} mapping (as held in config)."""
    return tuple(DamageCorrection(float(k), float(v)) for k, v in mapping.items())


def parse_text(value: Any) -> str:
    """Trimmed string form of a raw field; empty for missing values."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def parse_numeric(value: Any) -> float | None:
    """
    Strictly parse a raw numeric field.

    Args:
        value: Raw cell value (string, number or None)

    Returns:
        The finite float value, or None for blank, unparsable or
        non-finite input
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        if not NUMBER_PATTERN.fullmatch(text):
            return None
        number = float(text)

    if not math.isfinite(number):
        return None
    return number


def _non_negative(value: float | None) -> float | None:
    return value if value is not None and value >= 0 else None


def _percentage(value: float | None) -> float | None:
    return value if value is not None and 0 <= value <= 100 else None


def parse_damage(
    value: Any,
    corrections: Sequence[DamageCorrection] = DEFAULT_DAMAGE_CORRECTIONS,
) -> float | None:
    """Parse one per-range damage cell and apply the correction rules."""
    damage = _non_negative(parse_numeric(value))
    for correction in corrections:
        damage = correction.apply(damage)
    return damage


def normalize_row(
    raw_row: Mapping[str, Any],
    corrections: Sequence[DamageCorrection] = DEFAULT_DAMAGE_CORRECTIONS,
) -> WeaponRecord | None:
    """
    Normalize one raw row into a WeaponRecord with derived fields.

    Args:
        raw_row: Mapping from column name to raw value
        corrections: Damage correction rules to apply per range

    Returns:
        The record, or None when the row has no name or no weapon type
    """
    weapon_type = parse_text(raw_row.get(COL_WEAPON_TYPE))
    name = parse_text(raw_row.get(COL_WEAPON))
    if not weapon_type or not name:
        return None

    record = WeaponRecord(
        weapon_type=weapon_type,
        name=name,
        damage_by_range={r: parse_damage(raw_row.get(r), corrections) for r in RANGES},
        rpm=_non_negative(parse_numeric(raw_row.get(COL_RPM))),
        dps=parse_numeric(raw_row.get(COL_DPS)),
        ads_time=_non_negative(parse_numeric(raw_row.get(COL_ADS))),
        precision=_percentage(parse_numeric(raw_row.get(COL_PRECISION))),
        control=_percentage(parse_numeric(raw_row.get(COL_CONTROL))),
    )
    return with_derived(record)


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    corrections: Sequence[DamageCorrection] = DEFAULT_DAMAGE_CORRECTIONS,
) -> tuple[WeaponRecord, ...]:
    """
    Normalize every row, dropping rows without a name or a type.

    Args:
        rows: Raw rows in dataset order
        corrections: Damage correction rules

    Returns:
        Records in input order
    """
    records = []
    dropped = 0
    for raw_row in rows:
        record = normalize_row(raw_row, corrections)
        if record is None:
            dropped += 1
            continue
        records.append(record)

    if dropped:
        logger.debug(f"Dropped {dropped} rows without a weapon name or type")
    return tuple(records)
