"""
Completeness validation for weapon records.

A record is complete when it has a name, a type, a damage value at every
range, an RPM and an ADS time. Zero counts as known data (some classes
deal no damage at long range). Display badges, chart eligibility and
coverage statistics all go through is_complete.
"""

from ttklab.core.constants import COL_ADS, COL_RPM, COL_WEAPON, COL_WEAPON_TYPE, RANGES
from ttklab.core.models import WeaponRecord


def missing_fields(record: WeaponRecord) -> list[str]:
    """
    List the required columns a record has no value for.

    Args:
        record: Weapon record to check

    Returns:
        Column names in dataset order; empty when the record is complete
    """
    missing = []
    if not record.weapon_type:
        missing.append(COL_WEAPON_TYPE)
    if not record.name:
        missing.append(COL_WEAPON)
    missing.extend(r for r in RANGES if record.damage_at(r) is None)
    if record.rpm is None:
        missing.append(COL_RPM)
    if record.ads_time is None:
        missing.append(COL_ADS)
    return missing


def is_complete(record: WeaponRecord) -> bool:
    """True iff every field required for display and ranking is known."""
    return not missing_fields(record)
