"""
TTKLab - Constants

Defines range labels, dataset columns, weapon categories and the
per-category behaviour table used across the analytics engine.
"""

from dataclasses import dataclass
from enum import StrEnum

# Lethal cumulative damage threshold
PLAYER_HEALTH = 100

# Ordered range labels, in display order
RANGES: tuple[str, ...] = ("10M", "20M", "35M", "50M", "70M")

# Dataset column names (input and export layout)
COL_WEAPON_TYPE = "Weapon Type"
COL_WEAPON = "Weapon"
COL_RPM = "RPM"
COL_DPS = "DPS"
COL_ADS = "ADS"
COL_PRECISION = "Precision"
COL_CONTROL = "Control"

CSV_COLUMNS: tuple[str, ...] = (
    COL_WEAPON_TYPE,
    COL_WEAPON,
    *RANGES,
    COL_RPM,
    COL_DPS,
    COL_ADS,
    COL_PRECISION,
    COL_CONTROL,
)

# Selecting this value in a type filter means "every type"
ALL_TYPES = "ALL"

# Placeholder rendered for unknown values
MISSING_PLACEHOLDER = "N/A"

# Accuracy falloff by range for the recoil-adjusted model
RANGE_ACCURACY_MULTIPLIERS: dict[str, float] = {
    "10M": 1.0,
    "20M": 0.95,
    "35M": 0.90,
    "50M": 0.85,
    "70M": 0.80,
}

# Point-blank hit probability never drops below this
NEAR_RANGE = "10M"
NEAR_RANGE_HIT_FLOOR = 0.90

# Bounds for the per-shot hit probability
MIN_HIT_PROBABILITY = 0.05
MAX_HIT_PROBABILITY = 1.0

DEFAULT_TYPE_COLOR = "#CCCCCC"


class WeaponType(StrEnum):
    """
    Weapon categories present in the dataset.

    Values match the dataset's `Weapon Type` column exactly.
    """

    ASSAULT_RIFLE = "ASSAULT RIFLE"
    CARBINE = "CARBINE"
    SMG = "SMG"
    LMG = "LMG"
    DMR = "DMR"
    SNIPER_RIFLE = "SNIPER RIFLE"
    SHOTGUN = "SHOTGUN"
    PISTOL = "PISTOL"

    @classmethod
    def from_label(cls, label: str | None) -> "WeaponType | None":
        """Case-insensitive lookup; None for labels outside the known set."""
        if not label:
            return None
        key = label.strip().upper()
        for member in cls:
            if member.value == key:
                return member
        return None


@dataclass(frozen=True)
class WeaponCapabilities:
    """Behaviour flags attached to a weapon category."""

    # Every shot assumed to land in the recoil-adjusted model
    hit_immune: bool
    color: str


WEAPON_TYPE_CAPABILITIES: dict[WeaponType, WeaponCapabilities] = {
    WeaponType.ASSAULT_RIFLE: WeaponCapabilities(hit_immune=False, color="#FF6B35"),
    WeaponType.CARBINE: WeaponCapabilities(hit_immune=False, color="#F7931E"),
    WeaponType.SMG: WeaponCapabilities(hit_immune=False, color="#FFC857"),
    WeaponType.LMG: WeaponCapabilities(hit_immune=False, color="#4ECDC4"),
    WeaponType.DMR: WeaponCapabilities(hit_immune=False, color="#95E1D3"),
    WeaponType.SNIPER_RIFLE: WeaponCapabilities(hit_immune=True, color="#8B4A6B"),
    WeaponType.SHOTGUN: WeaponCapabilities(hit_immune=True, color="#E74C3C"),
    WeaponType.PISTOL: WeaponCapabilities(hit_immune=False, color="#9B59B6"),
}

UNKNOWN_TYPE_CAPABILITIES = WeaponCapabilities(hit_immune=False, color=DEFAULT_TYPE_COLOR)


def get_capabilities(weapon_type: str | None) -> WeaponCapabilities:
    """
    Look up the behaviour table entry for a weapon type label.

    Args:
        weapon_type: Raw type label (any case)

    Returns:
        The category's capabilities, or a neutral default for unknown labels
    """
    member = WeaponType.from_label(weapon_type)
    if member is None:
        return UNKNOWN_TYPE_CAPABILITIES
    return WEAPON_TYPE_CAPABILITIES[member]


def weapon_type_color(weapon_type: str | None) -> str:
    """Hex color for a weapon type, for chart collaborators."""
    return get_capabilities(weapon_type).color
