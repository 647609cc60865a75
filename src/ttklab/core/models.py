"""
TTKLab Data Model

Every structure that crosses a module boundary is defined here:
- WeaponRecord: one weapon's normalized profile plus cached derived metrics
- FilterCriteria: a query configuration consumed by the query engine
- AnalysisContext: the records/filters pair threaded through queries
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from ttklab.core.constants import ALL_TYPES, RANGES

_MAPPING_FIELDS = ("damage_by_range", "ttk_by_range", "shots_to_kill_by_range")


@dataclass(frozen=True)
class WeaponRecord:
    """
    A single weapon's profile.

    Numeric fields are either finite numbers within their domain or None
    for unknown. The derived fields (ttk_by_range, shots_to_kill_by_range,
    is_complete, average_damage) are filled at ingestion by
    ttklab.analysis.metrics.with_derived and must always equal a fresh
    recomputation from the stored fields.
    """

    weapon_type: str
    name: str
    damage_by_range: Mapping[str, float | None] = field(
        default_factory=lambda: dict.fromkeys(RANGES), hash=False
    )
    rpm: float | None = None
    dps: float | None = None
    ads_time: float | None = None
    precision: float | None = None
    control: float | None = None

    # Derived
    ttk_by_range: Mapping[str, float | None] = field(default_factory=dict, hash=False)
    shots_to_kill_by_range: Mapping[str, int | None] = field(default_factory=dict, hash=False)
    is_complete: bool = False
    average_damage: float | None = None

    def __post_init__(self):
        # Mapping fields are stored as read-only views over private copies
        for name in _MAPPING_FIELDS:
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def damage_at(self, range_label: str) -> float | None:
        """Damage at a range label; None for unknown values or labels."""
        return self.damage_by_range.get(range_label)

    def ttk_at(self, range_label: str) -> float | None:
        return self.ttk_by_range.get(range_label)

    def shots_to_kill_at(self, range_label: str) -> int | None:
        return self.shots_to_kill_by_range.get(range_label)

    def stored_fields(self) -> dict[str, object]:
        """The declared (non-derived) fields, for equality checks across loads."""
        return {
            "weapon_type": self.weapon_type,
            "name": self.name,
            "damage_by_range": dict(self.damage_by_range),
            "rpm": self.rpm,
            "dps": self.dps,
            "ads_time": self.ads_time,
            "precision": self.precision,
            "control": self.control,
        }


@dataclass(frozen=True)
class FilterCriteria:
    """
    Multi-criteria filter configuration.

    An empty type set, or one containing "ALL", selects every type.
    """

    types: frozenset[str] = frozenset()
    search_text: str = ""
    complete_only: bool = False
    rpm_min: float | None = None
    rpm_max: float | None = None

    @classmethod
    def build(
        cls,
        types: Iterable[str] | None = None,
        search_text: str = "",
        complete_only: bool = False,
        rpm_min: float | None = None,
        rpm_max: float | None = None,
    ) -> FilterCriteria:
        """Construct criteria from loose inputs (lists, None)."""
        return cls(
            types=frozenset(types or ()),
            search_text=search_text or "",
            complete_only=complete_only,
            rpm_min=rpm_min,
            rpm_max=rpm_max,
        )

    @property
    def selects_all_types(self) -> bool:
        return not self.types or ALL_TYPES in self.types

    @property
    def has_rpm_bounds(self) -> bool:
        return self.rpm_min is not None or self.rpm_max is not None


@dataclass(frozen=True)
class AnalysisContext:
    """
    A dataset snapshot paired with the filters applied to it.

    Callers construct one per view instead of relying on shared
    "current data" state, so independent datasets can coexist.
    """

    records: tuple[WeaponRecord, ...] = ()
    filters: FilterCriteria = field(default_factory=FilterCriteria)

    def with_filters(self, filters: FilterCriteria) -> AnalysisContext:
        return replace(self, filters=filters)

    def with_records(self, records: Iterable[WeaponRecord]) -> AnalysisContext:
        return replace(self, records=tuple(records))

    def view(self) -> tuple[WeaponRecord, ...]:
        """The records that pass this context's filters, in dataset order."""
        from ttklab.analysis.query import filter_weapons

        return filter_weapons(self.records, self.filters)


def records_by_name(records: Iterable[WeaponRecord]) -> Mapping[str, WeaponRecord]:
    """Index records by name; the first record wins on duplicate names."""
    index: dict[str, WeaponRecord] = {}
    for record in records:
        index.setdefault(record.name, record)
    return index
