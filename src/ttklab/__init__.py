"""
TTKLab - Weapon Time-to-Kill Analytics

Computes comparable combat metrics (time-to-kill under three firing models,
shots-to-kill, damage drop-off, completeness) from a per-range weapon damage
dataset, with filtering, ranking and summary statistics on top.

Usage:
    from ttklab import load_weapon_data, top_n

    weapons = load_weapon_data("data/ttk.csv")

    for weapon in top_n(weapons, 5, "ttk", "10M"):
        print(f"{weapon.name}: {weapon.ttk_at('10M')}ms")
"""

__version__ = "0.3.0"
__author__ = "TTKLab Contributors"


def __getattr__(name):
    """Lazy import for heavy dependencies."""
    # Ingestion (pandas, httpx)
    if name == "load_weapon_data":
        from ttklab.ingest.loader import load_weapon_data
        return load_weapon_data
    elif name == "WeaponDataset":
        from ttklab.ingest.loader import WeaponDataset
        return WeaponDataset
    elif name == "DatasetLoadError":
        from ttklab.ingest.loader import DatasetLoadError
        return DatasetLoadError
    elif name == "normalize_row":
        from ttklab.ingest.normalizer import normalize_row
        return normalize_row
    # Model
    elif name == "WeaponRecord":
        from ttklab.core.models import WeaponRecord
        return WeaponRecord
    elif name == "FilterCriteria":
        from ttklab.core.models import FilterCriteria
        return FilterCriteria
    elif name == "AnalysisContext":
        from ttklab.core.models import AnalysisContext
        return AnalysisContext
    # Metrics
    elif name == "calculate_ttk":
        from ttklab.analysis.metrics import calculate_ttk
        return calculate_ttk
    elif name == "calculate_recoil_adjusted_ttk":
        from ttklab.analysis.metrics import calculate_recoil_adjusted_ttk
        return calculate_recoil_adjusted_ttk
    elif name == "is_complete":
        from ttklab.analysis.validation import is_complete
        return is_complete
    # Queries and aggregates
    elif name == "filter_weapons":
        from ttklab.analysis.query import filter_weapons
        return filter_weapons
    elif name == "sort_weapons":
        from ttklab.analysis.query import sort_weapons
        return sort_weapons
    elif name == "top_n":
        from ttklab.analysis.query import top_n
        return top_n
    elif name == "best_at_range":
        from ttklab.analysis.aggregate import best_at_range
        return best_at_range
    elif name == "overall_statistics":
        from ttklab.analysis.aggregate import overall_statistics
        return overall_statistics
    elif name == "export_to_csv":
        from ttklab.export import export_to_csv
        return export_to_csv
    raise AttributeError(f"module 'ttklab' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Ingestion
    "load_weapon_data",
    "WeaponDataset",
    "DatasetLoadError",
    "normalize_row",
    # Model
    "WeaponRecord",
    "FilterCriteria",
    "AnalysisContext",
    # Metrics
    "calculate_ttk",
    "calculate_recoil_adjusted_ttk",
    "is_complete",
    # Queries and aggregates
    "filter_weapons",
    "sort_weapons",
    "top_n",
    "best_at_range",
    "overall_statistics",
    "export_to_csv",
]
