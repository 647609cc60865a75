"""
Weapon Metric Calculator

Closed-form combat metrics computed from a weapon's per-range damage and
fire rate:

- Time-to-kill in three firing models (hip-fire, ADS, recoil-adjusted)
- Shots-to-kill
- Damage drop-off between two ranges
- Average damage across ranges
- DPS from damage and RPM

All three TTK variants share the same shots-to-kill and rounding
primitives so results stay comparable across modes.

The recoil-adjusted model is an expected-value approximation:

    p = clamp(precision/100 * control/100 * range_multiplier, 0.05, 1.0)
    expected_shots = ceil(required_hits / p)

with p floored at 0.90 at point-blank range. Sniper rifles and shotguns
are assumed to land every shot.
"""

import logging
import math
from dataclasses import replace
from enum import StrEnum
from typing import Any

from ttklab.analysis.validation import is_complete
from ttklab.core.constants import (
    MAX_HIT_PROBABILITY,
    MIN_HIT_PROBABILITY,
    NEAR_RANGE,
    NEAR_RANGE_HIT_FLOOR,
    PLAYER_HEALTH,
    RANGE_ACCURACY_MULTIPLIERS,
    RANGES,
    get_capabilities,
)
from ttklab.core.models import WeaponRecord
from ttklab.core.utils import clamp, round_tenth

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60000.0


class FireMode(StrEnum):
    """TTK computation modes."""

    HIP = "hip"
    ADS = "ads"
    RECOIL = "recoil"


# =============================================================================
# Shared primitives
# =============================================================================


def _is_positive(value: float | None) -> bool:
    return value is not None and value > 0


def _shot_interval_ms(rpm: float) -> float:
    return MS_PER_MINUTE / rpm


def _finalize_ttk(raw_ttk: float) -> float:
    """Round to one decimal and report a zero result as 1ms."""
    rounded = round_tenth(raw_ttk)
    return 1.0 if rounded == 0 else rounded


def calculate_shots_to_kill(damage: float | None) -> int | None:
    """
    Minimum number of hits needed to reach lethal damage.

    Args:
        damage: Damage per shot

    Returns:
        ceil(100 / damage), or None when damage is unknown or not positive
    """
    if not _is_positive(damage):
        return None
    return math.ceil(PLAYER_HEALTH / damage)


def range_accuracy_multiplier(range_label: str) -> float:
    """Hit chance multiplier for a range label; 1.0 for unknown labels."""
    return RANGE_ACCURACY_MULTIPLIERS.get(range_label, 1.0)


# =============================================================================
# Time-to-kill
# =============================================================================


def calculate_ttk(
    damage: float | None,
    rpm: float | None,
    ads_time_ms: float | None = 0,
) -> float | None:
    """
    Calculate time-to-kill in milliseconds.

    Args:
        damage: Damage per shot
        rpm: Rounds per minute
        ads_time_ms: Aim-down-sights delay added to the result (unknown = 0)

    Returns:
        (shots - 1) * interval + ads_time_ms rounded to 0.1ms, with 0 reported
        as 1; None when damage or rpm is unknown or not positive
    """
    if not _is_positive(damage) or not _is_positive(rpm):
        return None

    shots = calculate_shots_to_kill(damage)
    ttk = (shots - 1) * _shot_interval_ms(rpm) + (ads_time_ms or 0)
    return _finalize_ttk(ttk)


def hit_probability(
    precision: float | None,
    control: float | None,
    range_label: str,
) -> float:
    """
    Per-shot hit probability for the recoil-adjusted model.

    Args:
        precision: Precision stat, 0-100 (unknown = perfect)
        control: Control stat, 0-100 (unknown = perfect)
        range_label: Range label, e.g. "35M"

    Returns:
        Probability in [0.05, 1.0]
    """
    if precision is None or control is None:
        base = 1.0
    else:
        base = (precision / 100) * (control / 100)

    probability = base * range_accuracy_multiplier(range_label)
    if range_label == NEAR_RANGE:
        probability = max(probability, NEAR_RANGE_HIT_FLOOR)

    return clamp(probability, MIN_HIT_PROBABILITY, MAX_HIT_PROBABILITY)


def calculate_recoil_adjusted_ttk(
    damage: float | None,
    rpm: float | None,
    precision: float | None = None,
    control: float | None = None,
    range_label: str = NEAR_RANGE,
    weapon_type: str | None = None,
) -> float | None:
    """
    Calculate TTK accounting for the chance that shots miss.

    ADS time is never added in this mode.

    Args:
        damage: Damage per shot
        rpm: Rounds per minute
        precision: Precision stat, 0-100
        control: Control stat, 0-100
        range_label: Range the damage value applies to
        weapon_type: Weapon category label; hit-immune categories skip
            the accuracy model

    Returns:
        TTK in milliseconds, or None when damage or rpm is unknown or not positive
    """
    if not _is_positive(damage) or not _is_positive(rpm):
        return None

    required_hits = calculate_shots_to_kill(damage)
    interval = _shot_interval_ms(rpm)

    if get_capabilities(weapon_type).hit_immune:
        return _finalize_ttk((required_hits - 1) * interval)

    p = hit_probability(precision, control, range_label)
    expected_shots = math.ceil(required_hits / p)
    return _finalize_ttk((expected_shots - 1) * interval)


def calculate_ttk_for_mode(
    record: WeaponRecord,
    range_label: str,
    mode: FireMode | str = FireMode.HIP,
) -> float | None:
    """
    TTK for a record at a range under the given fire mode.

    Unknown modes fall back to hip-fire.
    """
    damage = record.damage_at(range_label)

    if mode == FireMode.RECOIL:
        return calculate_recoil_adjusted_ttk(
            damage,
            record.rpm,
            record.precision,
            record.control,
            range_label,
            record.weapon_type,
        )
    if mode == FireMode.ADS:
        return calculate_ttk(damage, record.rpm, record.ads_time)
    return calculate_ttk(damage, record.rpm)


# =============================================================================
# Damage metrics
# =============================================================================


def calculate_dps(damage: float | None, rpm: float | None) -> float | None:
    """Damage per second (damage * rpm / 60), rounded to one decimal."""
    if damage is None or not _is_positive(rpm):
        return None
    return round_tenth(damage * rpm / 60)


def get_average_damage(record: WeaponRecord) -> float | None:
    """Mean of the known per-range damage values, or None if none are known."""
    damages = [d for d in (record.damage_at(r) for r in RANGES) if d is not None]
    if not damages:
        return None
    return sum(damages) / len(damages)


def get_damage_dropoff(
    record: WeaponRecord,
    range_start: str,
    range_end: str,
) -> float | None:
    """
    Percentage of damage lost between two ranges.

    Args:
        record: Weapon record
        range_start: Reference range (the denominator)
        range_end: Comparison range

    Returns:
        ((start - end) / start) * 100 rounded to one decimal, or None when
        either value is unknown or the start damage is zero
    """
    start = record.damage_at(range_start)
    end = record.damage_at(range_end)

    if start is None or end is None or start == 0:
        return None

    return round_tenth((start - end) / start * 100)


# =============================================================================
# Derived fields
# =============================================================================


def compute_derived(record: WeaponRecord) -> dict[str, Any]:
    """
    Compute every derived field of a record from its stored fields.

    This is the only code path that produces derived values; ingestion
    caches its output on the record.
    """
    return {
        "ttk_by_range": {r: calculate_ttk(record.damage_at(r), record.rpm) for r in RANGES},
        "shots_to_kill_by_range": {
            r: calculate_shots_to_kill(record.damage_at(r)) for r in RANGES
        },
        "is_complete": is_complete(record),
        "average_damage": get_average_damage(record),
    }


def with_derived(record: WeaponRecord) -> WeaponRecord:
    """Return a copy of the record with freshly computed derived fields."""
    return replace(record, **compute_derived(record))
