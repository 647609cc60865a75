"""
TTKLab Core - Foundation modules shared by ingestion and analysis.

This module contains:
- constants: Range labels, dataset columns, weapon categories and their behaviour
- config: Application configuration management
- models: WeaponRecord, FilterCriteria and AnalysisContext
- utils: Rounding, bounding and formatting helpers
"""

from ttklab.core.constants import (
    ALL_TYPES,
    CSV_COLUMNS,
    PLAYER_HEALTH,
    RANGES,
    WEAPON_TYPE_CAPABILITIES,
    WeaponCapabilities,
    WeaponType,
    get_capabilities,
    weapon_type_color,
)
from ttklab.core.models import AnalysisContext, FilterCriteria, WeaponRecord

__all__ = [
    # Enums
    "WeaponType",
    # Constants
    "ALL_TYPES",
    "CSV_COLUMNS",
    "PLAYER_HEALTH",
    "RANGES",
    "WEAPON_TYPE_CAPABILITIES",
    "WeaponCapabilities",
    "get_capabilities",
    "weapon_type_color",
    # Model
    "AnalysisContext",
    "FilterCriteria",
    "WeaponRecord",
]
