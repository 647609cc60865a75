"""
TTKLab Analysis - metric calculation, validation, querying and aggregation.

This module contains:
- metrics: TTK (hip-fire, ADS, recoil-adjusted), shots-to-kill, drop-off
- validation: Record completeness
- query: Filtering, sorting, top-N and lookups
- aggregate: Best-at-range, per-type and overall statistics
"""

from ttklab.analysis.aggregate import best_at_range, overall_statistics, type_statistics
from ttklab.analysis.metrics import (
    FireMode,
    calculate_recoil_adjusted_ttk,
    calculate_shots_to_kill,
    calculate_ttk,
)
from ttklab.analysis.query import SortMetric, filter_weapons, sort_weapons, top_n
from ttklab.analysis.validation import is_complete

__all__: list[str] = [
    "FireMode",
    "SortMetric",
    "best_at_range",
    "calculate_recoil_adjusted_ttk",
    "calculate_shots_to_kill",
    "calculate_ttk",
    "filter_weapons",
    "is_complete",
    "overall_statistics",
    "sort_weapons",
    "top_n",
    "type_statistics",
]
