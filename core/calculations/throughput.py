"""
Throughput Calculation Functions

Calculates daily active time, throughput rate and hourly breakdowns for the
cooking process from the reconstructed activity timeline.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from config import Config
from core.time_windows.filters import totals_for_date
from core.time_windows.models import DailyTotal, DowntimeInterval, ShiftInterval
from core.time_windows.normalizer import to_float
from .timeline import DayReconstruction, active_minutes_per_hour, reconstruct_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyMetrics:
    """Container for the daily process metrics"""
    gross_active_minutes: int
    net_active_minutes: float
    net_active_hours: float
    total_consumption_kg: float
    rate_kg_per_hour: float
    rate_ton_per_hour: float
    raw_active_minutes: int = 0
    timestamped_downtime_minutes: int = 0
    manual_downtime_minutes: float = 0.0
    total_produced_kg: float = 0.0

    @property
    def total_downtime_minutes(self) -> float:
        """Active time lost to timestamped and manual downtime"""
        return self.timestamped_downtime_minutes + self.manual_downtime_minutes

    @property
    def has_rate(self) -> bool:
        """False when there is no net process time to compute a rate over"""
        return self.net_active_hours > 0

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary for easy display"""
        result = asdict(self)
        result['total_downtime_minutes'] = self.total_downtime_minutes
        return result


def calculate_daily_metrics(
    reconstruction: DayReconstruction,
    totals: Iterable[DailyTotal]
) -> DailyMetrics:
    """
    Reduce an overlaid timeline and the day's totals to DailyMetrics.

    Args:
        reconstruction: Result of reconstruct_day
        totals: Daily totals (any dates; filtered to the reconstructed day)

    Returns:
        DailyMetrics

    Edge Cases:
    - Manual downtime larger than gross activity: net clamps to 0 (logged)
    - No net time: rates are 0, never inf/NaN
    """
    gross = reconstruction.gross_active_minutes
    manual = reconstruction.manual_downtime_minutes

    if manual > gross:
        logger.warning(
            f"Manual downtime ({manual:.0f} min) exceeds active time ({gross} min) "
            f"on {reconstruction.target_date}; net active time set to 0"
        )
    net_minutes = max(0.0, gross - manual)
    net_hours = net_minutes / 60.0

    day_totals = totals_for_date(totals, reconstruction.target_date)
    total_consumption = sum(to_float(t.consumption_kg) for t in day_totals)
    total_produced = sum(to_float(t.produced_kg) for t in day_totals)

    if net_hours > 0:
        rate_kg = total_consumption / net_hours
    else:
        rate_kg = 0.0

    metrics = DailyMetrics(
        gross_active_minutes=gross,
        net_active_minutes=net_minutes,
        net_active_hours=net_hours,
        total_consumption_kg=total_consumption,
        rate_kg_per_hour=rate_kg,
        rate_ton_per_hour=rate_kg / 1000.0,
        raw_active_minutes=reconstruction.raw_active_minutes,
        timestamped_downtime_minutes=reconstruction.timestamped_downtime_minutes,
        manual_downtime_minutes=manual,
        total_produced_kg=total_produced
    )

    logger.info(
        f"Daily metrics {reconstruction.target_date}: gross={gross} min, "
        f"net={net_minutes:.0f} min, consumption={total_consumption:.0f} kg, "
        f"rate={metrics.rate_ton_per_hour:.2f} t/h"
    )
    return metrics


def build_daily_metrics(
    target_date,
    shifts: Iterable[ShiftInterval],
    downtime: Iterable[DowntimeInterval],
    totals: Iterable[DailyTotal],
    now: datetime,
    timezone: Optional[str] = None
) -> DailyMetrics:
    """
    Calculate the process metrics of one calendar day.

    Args:
        target_date: Calendar day (date, datetime or ISO string)
        shifts: Cooking shift intervals, unfiltered or filtered
        downtime: Timestamped and manual downtime, unfiltered or filtered
        totals: Daily totals, unfiltered or filtered
        now: Current instant supplied by the caller
        timezone: Plant timezone name (defaults to Config.TIMEZONE)

    Returns:
        DailyMetrics

    Examples:
        >>> # Shift 08:00-17:00, downtime 12:00-12:30, 9000 kg consumed
        >>> metrics = build_daily_metrics(day, shifts, downtime, totals, now)
        >>> print(f"{metrics.rate_kg_per_hour:.2f} kg/h")  # 1058.82 kg/h
    """
    reconstruction = reconstruct_day(target_date, shifts, downtime, now, timezone)
    return calculate_daily_metrics(reconstruction, totals)


def compare_to_target(
    metrics: DailyMetrics,
    target_ton_per_hour: Optional[float] = None
) -> Dict[str, Optional[float]]:
    """
    Compare the daily flow rate to the target flow rate.

    Args:
        metrics: DailyMetrics
        target_ton_per_hour: Target rate; defaults to Config.TARGET_FLOW_RATE_TON_PER_HOUR

    Returns:
        Dictionary with:
        - rate_ton_per_hour: Measured rate, None when there is no net time
        - target_ton_per_hour: Target used
        - difference: rate - target, None when there is no net time
        - below_target: True when the rate is below target
    """
    target = Config.TARGET_FLOW_RATE_TON_PER_HOUR if target_ton_per_hour is None else target_ton_per_hour

    if not metrics.has_rate:
        return {
            'rate_ton_per_hour': None,
            'target_ton_per_hour': target,
            'difference': None,
            'below_target': False
        }

    difference = metrics.rate_ton_per_hour - target
    return {
        'rate_ton_per_hour': metrics.rate_ton_per_hour,
        'target_ton_per_hour': target,
        'difference': difference,
        'below_target': difference < 0
    }


# ============================================================
# HOURLY DISTRIBUTION
# ============================================================
#
# There is no per-minute ground truth for production, only interval-level
# activity. The daily total is therefore spread evenly over the day's net
# active minutes: each active minute carries total / net_active_minutes, and
# an hour's value is its active minute count times that rate. Manual downtime
# has no clock position, so it lowers the per-minute weight of every active
# minute but is not removed from any particular hour; with manual downtime
# the 24 values sum to total × gross / net rather than exactly total.

@dataclass(frozen=True)
class MeasuredRate:
    """Per-minute rate measured from the day's total over net active minutes"""
    name = "measured"

    def per_minute(self, daily_total: float, net_active_minutes: float) -> float:
        if net_active_minutes > 0:
            return daily_total / net_active_minutes
        return 0.0


@dataclass(frozen=True)
class AssumedThroughputRate:
    """
    Fixed nominal throughput (kg per active minute), independent of the totals.

    Used to chart expected volume while the day's totals are not yet recorded.
    """
    ton_per_hour: Optional[float] = None
    name = "assumed"

    def per_minute(self, daily_total: float, net_active_minutes: float) -> float:
        ton_per_hour = Config.TARGET_FLOW_RATE_TON_PER_HOUR if self.ton_per_hour is None else self.ton_per_hour
        return ton_per_hour * 1000.0 / 60.0


def distribute_hourly(
    reconstruction: DayReconstruction,
    daily_total: float,
    rate_source=None
) -> np.ndarray:
    """
    Apportion one daily quantity into 24 hourly values.

    Args:
        reconstruction: Result of reconstruct_day
        daily_total: Quantity to distribute (kg)
        rate_source: MeasuredRate (default) or AssumedThroughputRate

    Returns:
        float array of length 24
    """
    rate_source = rate_source or MeasuredRate()
    net_minutes = max(0.0, reconstruction.gross_active_minutes - reconstruction.manual_downtime_minutes)

    per_minute = rate_source.per_minute(to_float(daily_total), net_minutes)
    weights = active_minutes_per_hour(reconstruction.timeline)

    return weights * per_minute


def build_hourly_buckets(
    target_date,
    shifts: Iterable[ShiftInterval],
    downtime: Iterable[DowntimeInterval],
    daily_total: float,
    now: datetime,
    rate_source=None,
    timezone: Optional[str] = None
) -> List[float]:
    """
    Split one daily quantity into 24 hourly figures for charting.

    Args:
        target_date: Calendar day
        shifts: Cooking shift intervals
        downtime: Timestamped and manual downtime
        daily_total: Quantity to distribute (production or consumption, kg)
        now: Current instant supplied by the caller
        rate_source: MeasuredRate (default) or AssumedThroughputRate
        timezone: Plant timezone name

    Returns:
        List of 24 floats, index = hour of day
    """
    reconstruction = reconstruct_day(target_date, shifts, downtime, now, timezone)
    return distribute_hourly(reconstruction, daily_total, rate_source).tolist()


def hourly_buckets_dataframe(
    target_date,
    shifts: Iterable[ShiftInterval],
    downtime: Iterable[DowntimeInterval],
    totals: Iterable[DailyTotal],
    now: datetime,
    rate_source=None,
    timezone: Optional[str] = None
) -> pd.DataFrame:
    """
    Hourly production and consumption of one day.

    Both quantities share the same active-minute weights, each with its own
    per-minute rate.

    Returns:
        DataFrame with columns:
        - hour: Label "HH:00"
        - hour_start_minute: Minute-of-day the hour starts at
        - active_minutes: Active minutes in the hour after timestamped downtime
        - production_kg: Output apportioned to the hour
        - consumption_kg: Raw material apportioned to the hour
    """
    reconstruction = reconstruct_day(target_date, shifts, downtime, now, timezone)
    day_totals = totals_for_date(totals, reconstruction.target_date)

    produced = sum(to_float(t.produced_kg) for t in day_totals)
    consumed = sum(to_float(t.consumption_kg) for t in day_totals)

    return hourly_frame(reconstruction, produced, consumed, rate_source)


def hourly_frame(
    reconstruction: DayReconstruction,
    produced_kg: float,
    consumed_kg: float,
    rate_source=None
) -> pd.DataFrame:
    """Hourly production/consumption DataFrame for an existing reconstruction"""
    weights = active_minutes_per_hour(reconstruction.timeline)
    result_df = pd.DataFrame({
        'hour': [f"{h:02d}:00" for h in range(len(weights))],
        'hour_start_minute': [h * 60 for h in range(len(weights))],
        'active_minutes': weights,
        'production_kg': distribute_hourly(reconstruction, produced_kg, rate_source),
        'consumption_kg': distribute_hourly(reconstruction, consumed_kg, rate_source),
    })

    logger.info(f"Calculated hourly breakdown for {reconstruction.target_date}: {int(weights.sum())} active minutes")
    return result_df
