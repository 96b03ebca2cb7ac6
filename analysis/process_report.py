"""
Process Report Builder
Aggregates shift, downtime and production records into daily process
reports and a per-date efficiency history
"""
import pandas as pd
import logging
from typing import Dict, Iterable, List, Optional
from datetime import datetime

from core.calculations.throughput import (
    DailyMetrics,
    calculate_daily_metrics,
    compare_to_target,
    hourly_frame,
)
from core.calculations.timeline import reconstruct_day
from core.time_windows.filters import (
    daily_totals_from_dataframe,
    downtime_from_dataframe,
    shift_intervals_from_dataframe,
    totals_for_date,
)
from core.time_windows.models import DailyTotal, DowntimeInterval, ShiftInterval
from core.time_windows.normalizer import as_date, to_float
from utils.formatting import (
    format_duration_minutes,
    format_rate,
    format_target_difference,
    format_tonnes,
)

logger = logging.getLogger(__name__)


def calculate_daily_process_report(
    target_date,
    cooking_df: pd.DataFrame,
    downtime_df: pd.DataFrame,
    production_df: pd.DataFrame,
    now: datetime,
    rate_source=None,
    target_ton_per_hour: Optional[float] = None,
    timezone: Optional[str] = None
) -> Dict:
    """
    Build the process report of one day from data-store DataFrames.

    Args:
        target_date: Calendar day
        cooking_df: Cooking time records (date, start_time, end_time)
        downtime_df: Downtime records (date, start_time, end_time, duration_hours, reason)
        production_df: Production entries (date, mp_used, sebo_produced, ...)
        now: Current instant supplied by the caller
        rate_source: Hourly rate source (MeasuredRate by default)
        target_ton_per_hour: Target flow rate override
        timezone: Plant timezone name (defaults to Config.TIMEZONE)

    Returns:
        Dictionary with:
        - metrics: DailyMetrics
        - target: Dictionary from compare_to_target
        - hourly: DataFrame from hourly_frame

    Edge Cases:
    - Empty DataFrames: all-zero metrics and hourly values
    """
    shifts = shift_intervals_from_dataframe(cooking_df)
    downtime = downtime_from_dataframe(downtime_df)
    totals = daily_totals_from_dataframe(production_df)

    reconstruction = reconstruct_day(target_date, shifts, downtime, now, timezone)
    metrics = calculate_daily_metrics(reconstruction, totals)

    return {
        'metrics': metrics,
        'target': compare_to_target(metrics, target_ton_per_hour),
        'hourly': hourly_frame(
            reconstruction, metrics.total_produced_kg, metrics.total_consumption_kg, rate_source
        )
    }


def calculate_efficiency_history(
    shifts: Iterable[ShiftInterval],
    downtime: Iterable[DowntimeInterval],
    totals: Iterable[DailyTotal],
    now: datetime,
    unit: str = 'kg',
    limit: Optional[int] = 14,
    timezone: Optional[str] = None
) -> pd.DataFrame:
    """
    Production and consumption rate per hour of net process time, per date.

    Every date with a shift or a total gets a row. Rates use the same net
    active hours as the daily metrics, so a date's consumption rate equals
    its DailyMetrics rate.

    Args:
        shifts: Cooking shift intervals
        downtime: Timestamped and manual downtime
        totals: Daily totals
        now: Current instant supplied by the caller
        unit: 'kg' for kg/h or 't' for t/h
        limit: Keep only the most recent N dates (None keeps all)
        timezone: Plant timezone name (defaults to Config.TIMEZONE)

    Returns:
        DataFrame with columns: date, net_active_hours, production_rate,
        consumption_rate, sorted by date
    """
    if unit not in ('kg', 't'):
        raise ValueError(f"Unknown unit: '{unit}'. Valid options: 'kg', 't'")

    shifts = list(shifts)
    downtime = list(downtime)
    totals = list(totals)

    dates = {as_date(s.date) for s in shifts} | {as_date(t.date) for t in totals}
    dates.discard(None)

    divisor = 1000.0 if unit == 't' else 1.0
    rows: List[Dict] = []

    for day in sorted(dates):
        reconstruction = reconstruct_day(day, shifts, downtime, now, timezone)
        metrics = calculate_daily_metrics(reconstruction, totals)
        day_totals = totals_for_date(totals, day)
        produced = sum(to_float(t.produced_kg) for t in day_totals)

        if metrics.net_active_hours > 0:
            production_rate = produced / metrics.net_active_hours / divisor
        else:
            production_rate = 0.0

        rows.append({
            'date': day,
            'net_active_hours': metrics.net_active_hours,
            'production_rate': production_rate,
            'consumption_rate': metrics.rate_kg_per_hour / divisor
        })

    if not rows:
        logger.warning("No shift or production records for efficiency history")
        return pd.DataFrame(columns=['date', 'net_active_hours', 'production_rate', 'consumption_rate'])

    result_df = pd.DataFrame(rows)
    if limit is not None:
        result_df = result_df.tail(limit).reset_index(drop=True)

    logger.info(f"Calculated efficiency history: {len(result_df)} dates")
    return result_df


def summarize_daily_metrics(metrics: DailyMetrics, target: Optional[Dict] = None) -> Dict[str, str]:
    """
    Display strings for a daily metrics card.

    Args:
        metrics: DailyMetrics
        target: Dictionary from compare_to_target (computed when omitted)

    Returns:
        Dictionary with: raw_material, cooking_time, downtime, net_time, flow_rate, target_difference
    """
    target = target or compare_to_target(metrics)
    return {
        'raw_material': format_tonnes(metrics.total_consumption_kg),
        'cooking_time': format_duration_minutes(metrics.raw_active_minutes),
        'downtime': format_duration_minutes(metrics.total_downtime_minutes),
        'net_time': format_duration_minutes(metrics.net_active_minutes),
        'flow_rate': format_rate(target['rate_ton_per_hour']),
        'target_difference': format_target_difference(target['difference'])
    }
