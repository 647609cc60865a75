"""
Query Engine - filtering, sorting and ranking of weapon records.

Every function takes the records explicitly and returns a new tuple; the
input collection is never modified.

Sort policies:
- ttk: ascending, weapons without a TTK at the range sort last
- damage / rpm / dps: descending, unknown values count as 0
- anything else: input order unchanged
"""

import logging
import math
from collections.abc import Callable, Iterable
from enum import StrEnum

from ttklab.analysis.metrics import calculate_ttk
from ttklab.analysis.validation import is_complete
from ttklab.core.constants import ALL_TYPES, NEAR_RANGE
from ttklab.core.models import FilterCriteria, WeaponRecord

logger = logging.getLogger(__name__)


class SortMetric(StrEnum):
    """Metrics weapons can be ranked by."""

    TTK = "ttk"
    DAMAGE = "damage"
    RPM = "rpm"
    DPS = "dps"


# =============================================================================
# Filtering
# =============================================================================


def filter_by_type(
    records: Iterable[WeaponRecord],
    types: Iterable[str] | None,
) -> tuple[WeaponRecord, ...]:
    """Keep records whose type is in `types`; empty or "ALL" keeps everything."""
    wanted = frozenset(types or ())
    if not wanted or ALL_TYPES in wanted:
        return tuple(records)
    return tuple(r for r in records if r.weapon_type in wanted)


def search_weapons(records: Iterable[WeaponRecord], term: str | None) -> tuple[WeaponRecord, ...]:
    """Case-insensitive substring match against name or type; blank matches all."""
    needle = (term or "").strip().lower()
    if not needle:
        return tuple(records)
    return tuple(
        r for r in records if needle in r.name.lower() or needle in r.weapon_type.lower()
    )


def filter_by_rpm(
    records: Iterable[WeaponRecord],
    rpm_min: float | None = None,
    rpm_max: float | None = None,
) -> tuple[WeaponRecord, ...]:
    """
    Keep records with RPM inside the inclusive bounds.

    Records with unknown RPM are dropped whenever a bound is given.
    """
    if rpm_min is None and rpm_max is None:
        return tuple(records)

    def in_bounds(record: WeaponRecord) -> bool:
        if record.rpm is None:
            return False
        if rpm_min is not None and record.rpm < rpm_min:
            return False
        if rpm_max is not None and record.rpm > rpm_max:
            return False
        return True

    return tuple(r for r in records if in_bounds(r))


def filter_weapons(
    records: Iterable[WeaponRecord],
    criteria: FilterCriteria,
) -> tuple[WeaponRecord, ...]:
    """
    Apply every filter stage in order: type, search, RPM bounds, completeness.

    Args:
        records: Source records
        criteria: Filter configuration

    Returns:
        Matching records in input order
    """
    result = tuple(records)
    if not criteria.selects_all_types:
        result = filter_by_type(result, criteria.types)
    result = search_weapons(result, criteria.search_text)
    result = filter_by_rpm(result, criteria.rpm_min, criteria.rpm_max)
    if criteria.complete_only:
        result = tuple(r for r in result if is_complete(r))
    return result


# =============================================================================
# Sorting
# =============================================================================


def _ttk_key(range_label: str) -> Callable[[WeaponRecord], float]:
    def key(record: WeaponRecord) -> float:
        ttk = calculate_ttk(record.damage_at(range_label), record.rpm)
        return math.inf if ttk is None else ttk

    return key


def _descending_key(getter: Callable[[WeaponRecord], float | None]):
    return lambda record: -(getter(record) or 0)


def sort_weapons(
    records: Iterable[WeaponRecord],
    metric: str = SortMetric.TTK,
    range_label: str = NEAR_RANGE,
) -> tuple[WeaponRecord, ...]:
    """
    Stable sort of records by a metric at a range.

    Args:
        records: Records to sort
        metric: One of "ttk", "damage", "rpm", "dps"; anything else keeps
            the input order
        range_label: Range used by the ttk and damage metrics

    Returns:
        Sorted records
    """
    records = tuple(records)

    if metric == SortMetric.TTK:
        key = _ttk_key(range_label)
    elif metric == SortMetric.DAMAGE:
        key = _descending_key(lambda r: r.damage_at(range_label))
    elif metric == SortMetric.RPM:
        key = _descending_key(lambda r: r.rpm)
    elif metric == SortMetric.DPS:
        key = _descending_key(lambda r: r.dps)
    else:
        logger.debug(f"Unknown sort metric {metric!r}, keeping input order")
        return records

    return tuple(sorted(records, key=key))


def has_metric(record: WeaponRecord, metric: str, range_label: str) -> bool:
    """Whether a record carries the values needed to rank it by `metric`."""
    if metric == SortMetric.TTK:
        return calculate_ttk(record.damage_at(range_label), record.rpm) is not None
    if metric == SortMetric.DAMAGE:
        return record.damage_at(range_label) is not None
    if metric == SortMetric.RPM:
        return record.rpm is not None
    if metric == SortMetric.DPS:
        return record.dps is not None
    return True


def top_n(
    records: Iterable[WeaponRecord],
    n: int = 5,
    metric: str = SortMetric.TTK,
    range_label: str = NEAR_RANGE,
) -> tuple[WeaponRecord, ...]:
    """
    The best `n` records by a metric.

    Records missing the metric's inputs are excluded before ranking rather
    than sorted last.
    """
    if n <= 0:
        return ()
    eligible = [r for r in records if has_metric(r, metric, range_label)]
    return sort_weapons(eligible, metric, range_label)[:n]


# =============================================================================
# Lookups
# =============================================================================


def get_weapon_types(records: Iterable[WeaponRecord]) -> list[str]:
    """Sorted distinct weapon types present in the records."""
    return sorted({r.weapon_type for r in records if r.weapon_type})


def get_weapon_by_name(records: Iterable[WeaponRecord], name: str) -> WeaponRecord | None:
    """First record with exactly this name."""
    return next((r for r in records if r.name == name), None)


def get_complete_weapons(records: Iterable[WeaponRecord]) -> tuple[WeaponRecord, ...]:
    return tuple(r for r in records if is_complete(r))


def get_incomplete_weapons(records: Iterable[WeaponRecord]) -> tuple[WeaponRecord, ...]:
    return tuple(r for r in records if not is_complete(r))


def get_weapons_for_range(
    records: Iterable[WeaponRecord],
    range_label: str,
    limit: int = 10,
) -> tuple[WeaponRecord, ...]:
    """Fastest-killing weapons at a range."""
    return top_n(records, limit, SortMetric.TTK, range_label)
