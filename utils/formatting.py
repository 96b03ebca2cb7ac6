"""
Formatting Utilities

Functions for formatting durations, rates and hourly volumes for display.
"""

import logging
import math
from typing import Optional

import pandas as pd

logger = logging.getLogger(__name__)


def format_duration_minutes(minutes) -> str:
    """
    Format a duration in minutes as "Xh Ym".

    Args:
        minutes: Duration in minutes (fractions are truncated)

    Returns:
        Formatted string, e.g. "8h 30m"; "0h 0m" for missing values
    """
    if minutes is None or pd.isna(minutes) or minutes < 0:
        return "0h 0m"
    hours = math.floor(minutes / 60)
    mins = math.floor(minutes % 60)
    return f"{hours}h {mins}m"


def format_rate(rate_ton_per_hour: Optional[float], decimals: int = 2) -> str:
    """
    Format a flow rate in t/h, or "N/A" when there is no rate.

    Args:
        rate_ton_per_hour: Rate, or None when there was no net process time
        decimals: Decimal places
    """
    if rate_ton_per_hour is None or pd.isna(rate_ton_per_hour):
        return "N/A"
    return f"{rate_ton_per_hour:.{decimals}f} t/h"


def format_target_difference(difference: Optional[float]) -> str:
    """Format a rate difference with an explicit sign, e.g. "+0.25" or "-1.10" """
    if difference is None or pd.isna(difference):
        return ""
    sign = "+" if difference > 0 else ""
    return f"{sign}{difference:.2f}"


def format_hourly_volume(volume_kg: float) -> str:
    """
    Format an hourly volume: kg below one tonne, tonnes above.

    Args:
        volume_kg: Volume for one hour in kg

    Returns:
        e.g. "450 kg" or "7.1 t"
    """
    if volume_kg is None or pd.isna(volume_kg):
        return ""
    if volume_kg < 1000:
        return f"{volume_kg:.0f} kg"
    return f"{volume_kg / 1000:.1f} t"


def format_tonnes(value_kg: float, decimals: int = 2) -> str:
    """Format a mass in kg as tonnes, e.g. "9.00 t" """
    if value_kg is None or pd.isna(value_kg):
        return ""
    return f"{value_kg / 1000:.{decimals}f} t"
