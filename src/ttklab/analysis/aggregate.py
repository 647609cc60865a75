"""
Cross-weapon aggregation.

Provides:
- best_at_range: fastest TTK at a range
- type_statistics: per-category RPM and damage summaries
- overall_statistics: dataset totals and completeness coverage
- compare_weapons / damage and TTK profiles for side-by-side views
- summarize_by_type: a DataFrame roll-up for tabular display

Summaries only describe values that are known; a block with no known
values is omitted rather than reported as 0.
"""

import logging
import math
from collections.abc import Iterable
from typing import Any

import numpy as np
import pandas as pd

from ttklab.analysis.metrics import calculate_ttk
from ttklab.analysis.validation import is_complete
from ttklab.core.constants import RANGES
from ttklab.core.models import WeaponRecord, records_by_name
from ttklab.core.utils import safe_divide

logger = logging.getLogger(__name__)


def best_at_range(records: Iterable[WeaponRecord], range_label: str) -> WeaponRecord | None:
    """
    Weapon with the lowest hip-fire TTK at a range.

    Args:
        records: Candidate records
        range_label: Range label, e.g. "20M"

    Returns:
        The fastest record (earliest one on ties), or None if no record has
        a TTK at that range
    """
    best: WeaponRecord | None = None
    best_ttk = float("inf")

    for record in records:
        ttk = calculate_ttk(record.damage_at(range_label), record.rpm)
        if ttk is not None and ttk < best_ttk:
            best, best_ttk = record, ttk

    return best


def _summary(values: list[float]) -> dict[str, float]:
    arr = np.asarray(values, dtype=float)
    return {"min": float(arr.min()), "max": float(arr.max()), "avg": float(arr.mean())}


def type_statistics(records: Iterable[WeaponRecord], weapon_type: str) -> dict[str, Any] | None:
    """
    Summary statistics for one weapon type.

    Args:
        records: Records to summarize
        weapon_type: Exact type label

    Returns:
        Dict with count, complete, rpm {min, max, avg} and
        ranges {range: {min, max, avg}}; "rpm" and individual ranges are
        left out when no record of the type has a value there. None when
        no record has the type.
    """
    weapons = [r for r in records if r.weapon_type == weapon_type]
    if not weapons:
        return None

    stats: dict[str, Any] = {
        "count": len(weapons),
        "complete": sum(1 for w in weapons if is_complete(w)),
        "ranges": {},
    }

    rpms = [w.rpm for w in weapons if w.rpm is not None]
    if rpms:
        stats["rpm"] = _summary(rpms)

    for range_label in RANGES:
        damages = [w.damage_at(range_label) for w in weapons]
        known = [d for d in damages if d is not None]
        if known:
            stats["ranges"][range_label] = _summary(known)

    return stats


def overall_statistics(records: Iterable[WeaponRecord]) -> dict[str, Any]:
    """
    Dataset-wide totals.

    Returns:
        Dict with total, complete, incomplete, types (count), types_list
        (first-seen order) and coverage (integer percent, 0 for no records)
    """
    records = list(records)
    total = len(records)
    complete = sum(1 for r in records if is_complete(r))
    types_list = list(dict.fromkeys(r.weapon_type for r in records))
    coverage = math.floor(safe_divide(complete, total) * 100 + 0.5)

    return {
        "total": total,
        "complete": complete,
        "incomplete": total - complete,
        "types": len(types_list),
        "types_list": types_list,
        "coverage": coverage,
    }


def weapon_damage_profile(record: WeaponRecord) -> dict[str, float | None]:
    """Damage at every range, in range order."""
    return {r: record.damage_at(r) for r in RANGES}


def weapon_ttk_profile(record: WeaponRecord) -> dict[str, float | None]:
    """Hip-fire TTK at every range, in range order."""
    return {r: record.ttk_at(r) for r in RANGES}


def compare_weapons(
    records: Iterable[WeaponRecord],
    name_a: str,
    name_b: str,
) -> dict[str, Any] | None:
    """
    Side-by-side comparison of two weapons by name.

    Returns:
        Dict of paired values ([a, b]) for type, rpm, dps and per-range
        damage/ttk/stk, or None if either weapon is not found
    """
    index = records_by_name(records)
    a, b = index.get(name_a), index.get(name_b)
    if a is None or b is None:
        logger.debug(f"Cannot compare {name_a!r} and {name_b!r}: weapon not found")
        return None

    return {
        "weapons": [a.name, b.name],
        "types": [a.weapon_type, b.weapon_type],
        "rpm": [a.rpm, b.rpm],
        "dps": [a.dps, b.dps],
        "ranges": {
            r: {
                "damage": [a.damage_at(r), b.damage_at(r)],
                "ttk": [a.ttk_at(r), b.ttk_at(r)],
                "stk": [a.shots_to_kill_at(r), b.shots_to_kill_at(r)],
            }
            for r in RANGES
        },
    }


def summarize_by_type(records: Iterable[WeaponRecord]) -> pd.DataFrame:
    """
    Per-type roll-up as a DataFrame.

    Columns: weapon_type, count, complete, avg_rpm (NaN where no RPM is known).
    """
    frame = pd.DataFrame(
        [
            {"weapon_type": r.weapon_type, "complete": is_complete(r), "rpm": r.rpm}
            for r in records
        ],
        columns=["weapon_type", "complete", "rpm"],
    )
    if frame.empty:
        return pd.DataFrame(columns=["weapon_type", "count", "complete", "avg_rpm"])

    frame["rpm"] = pd.to_numeric(frame["rpm"], errors="coerce")
    summary = frame.groupby("weapon_type", sort=True).agg(
        count=("weapon_type", "size"),
        complete=("complete", "sum"),
        avg_rpm=("rpm", "mean"),
    )
    return summary.reset_index()
