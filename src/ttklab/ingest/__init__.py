"""
TTKLab Ingest - dataset loading and row normalization.

This module contains:
- normalizer: Raw row -> WeaponRecord, damage corrections
- loader: CSV fetch (file or URL), tokenizing and the dataset snapshot holder
"""

__all__: list[str] = []
