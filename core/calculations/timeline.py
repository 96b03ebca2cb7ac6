"""
Activity Timeline Reconstruction

Builds the per-minute cooking activity of one calendar day from shift
intervals, then removes downtime:
- Timestamped downtime clears minutes on the timeline
- Manual downtime has no clock position and is accumulated as a scalar

The timeline is a 1440-cell int8 array, index = minute-of-day.
Cells are only ever set by shifts and only ever cleared by downtime.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Tuple

import numpy as np

from core.time_windows.filters import downtime_for_date, shifts_for_date
from core.time_windows.models import DowntimeInterval, ShiftInterval
from core.time_windows.normalizer import (
    MINUTES_PER_DAY,
    as_date,
    normalize_downtime_interval,
    normalize_shift_interval,
)

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


@dataclass
class DayReconstruction:
    """Overlaid timeline of one day plus what could not be placed on it"""
    target_date: date
    timeline: np.ndarray
    raw_active_minutes: int
    manual_downtime_minutes: float

    @property
    def gross_active_minutes(self) -> int:
        """Active minutes left after timestamped downtime"""
        return int(self.timeline.sum())

    @property
    def timestamped_downtime_minutes(self) -> int:
        """Active minutes cleared by timestamped downtime"""
        return self.raw_active_minutes - self.gross_active_minutes


def empty_timeline() -> np.ndarray:
    return np.zeros(MINUTES_PER_DAY, dtype=np.int8)


def build_activity_timeline(
    target_date: date,
    shifts: Iterable[ShiftInterval],
    now: datetime,
    timezone: Optional[str] = None
) -> np.ndarray:
    """
    Mark every minute covered by a cooking shift on target_date.

    Overlapping shifts are OR-ed, so simultaneous shifts never double-count.

    Args:
        target_date: Calendar day to reconstruct
        shifts: Shift intervals (any dates; filtered here)
        now: Current instant, used to end running shifts
        timezone: Plant timezone name

    Returns:
        int8 array of length 1440 with 1 for active minutes
    """
    timeline = empty_timeline()

    for shift in shifts_for_date(shifts, target_date):
        start_min, end_min = normalize_shift_interval(
            shift.date, shift.start_time, shift.end_time, now, timezone
        )
        if end_min > start_min:
            timeline[start_min:end_min] = 1
        logger.debug(f"{shift!r} → minutes [{start_min}, {end_min})")

    return timeline


def apply_downtime_overlay(
    timeline: np.ndarray,
    target_date: date,
    downtime: Iterable[DowntimeInterval],
    now: datetime,
    timezone: Optional[str] = None
) -> Tuple[np.ndarray, float]:
    """
    Remove downtime from a timeline.

    Works on a copy; the input array is left untouched.

    Args:
        timeline: Activity timeline from build_activity_timeline
        target_date: Calendar day being reconstructed
        downtime: Downtime records (any dates; filtered here)
        now: Current instant, used to end ongoing downtime
        timezone: Plant timezone name

    Returns:
        (overlaid timeline, manual downtime minutes)
    """
    overlaid = timeline.copy()
    timestamped, manual = downtime_for_date(downtime, target_date, timezone)

    for record in timestamped:
        start_min, end_min = normalize_downtime_interval(record, target_date, now, timezone)
        if end_min > start_min:
            overlaid[start_min:end_min] = 0

    manual_downtime_minutes = sum(record.duration_minutes for record in manual)

    if timestamped or manual:
        logger.debug(
            f"Downtime on {target_date}: {len(timestamped)} timestamped, "
            f"{len(manual)} manual ({manual_downtime_minutes:.0f} min)"
        )

    return overlaid, float(manual_downtime_minutes)


def reconstruct_day(
    target_date,
    shifts: Iterable[ShiftInterval],
    downtime: Iterable[DowntimeInterval],
    now: datetime,
    timezone: Optional[str] = None
) -> DayReconstruction:
    """
    Build the overlaid activity timeline of one day.

    This is the single reconstruction shared by the daily metrics and the
    hourly distribution, so both always agree on which minutes were active.
    """
    target = as_date(target_date)
    shifts = list(shifts)
    downtime = list(downtime)

    timeline = build_activity_timeline(target, shifts, now, timezone)
    raw_active = int(timeline.sum())
    overlaid, manual_minutes = apply_downtime_overlay(timeline, target, downtime, now, timezone)

    return DayReconstruction(
        target_date=target,
        timeline=overlaid,
        raw_active_minutes=raw_active,
        manual_downtime_minutes=manual_minutes
    )


def active_minutes_per_hour(timeline: np.ndarray) -> np.ndarray:
    """Count active minutes in each of the 24 hours of a timeline"""
    return timeline.reshape(HOURS_PER_DAY, 60).sum(axis=1).astype(int)
