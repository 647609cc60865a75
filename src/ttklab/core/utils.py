"""
Utility functions for TTKLab.

This module provides:
- Performance timing helpers
- Numeric rounding and bounding helpers shared by the metric calculator
- Display formatting for possibly-unknown values
"""

import logging
import math
import time

from ttklab.core.constants import MISSING_PLACEHOLDER

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Context manager for monitoring performance of code blocks.

    Usage:
        with PerformanceMonitor("loading weapon data"):
            load_weapon_data(...)
    """

    def __init__(self, operation_name: str, log_level: int = logging.INFO):
        self.operation_name = operation_name
        self.log_level = log_level
        self.start_time: float | None = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - (self.start_time or 0)
        if exc_type is not None:
            logger.error(f"{self.operation_name} failed after {elapsed:.3f}s: {exc_val}")
        else:
            logger.log(self.log_level, f"{self.operation_name} completed in {elapsed:.3f}s")
        return False


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default if denominator is 0.

    Args:
        numerator: Top of fraction
        denominator: Bottom of fraction
        default: Value to return if denominator is 0

    Returns:
        Result of division or default
    """
    if denominator == 0:
        return default
    return numerator / denominator


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value to [min_val, max_val]."""
    return max(min_val, min(value, max_val))


def round_tenth(value: float) -> float:
    """
    Round to one decimal place with halves rounded up.

    Python's round() uses banker's rounding, which would put 0.25 at 0.2.
    """
    return math.floor(value * 10 + 0.5) / 10


def format_number(value: float | int | None) -> str:
    """
    Format a possibly-unknown number with thousands separators.

    Args:
        value: Number or None

    Returns:
        "N/A" for unknown values, otherwise e.g. "1,200" or "33.5"
    """
    if value is None:
        return MISSING_PLACEHOLDER
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int):
        return f"{value:,}"
    return f"{value:,.10g}" if abs(value) >= 1000 else f"{value:g}"


def format_ttk(value: float | None) -> str:
    """Format a TTK in milliseconds, e.g. "466.7ms"."""
    if value is None:
        return MISSING_PLACEHOLDER
    return f"{format_number(value)}ms"
