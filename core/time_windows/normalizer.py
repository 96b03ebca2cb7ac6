"""
Interval Normalization

Converts human-entered shift and downtime records into clamped
minute-of-day offsets on a single calendar day.

Rules:
- Offsets are integers in [0, 1440]; 0 = 00:00, 1440 = end of day
- An interval never spans two calendar days: an overnight record only
  contributes to the day it starts on (its end clamps to 1440)
- A still-running interval ends at `now` when its day is today, otherwise at 1440
- Unparsable time components count as 0

The caller supplies `now`; nothing here reads the wall clock.
"""

import logging
import math
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, Tuple

import pandas as pd
import pytz
from dateutil import parser as dateutil_parser

from config import Config
from .models import TimestampedDowntime

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

# Supplies the date parts a parsed string omits
DEFAULT_INSTANT = datetime(1970, 1, 1)


def to_float(value) -> float:
    """
    Coerce a numeric record field to float, treating missing values as 0.

    Handles Decimal (PostgreSQL numerics), None, NaN and numeric strings.
    """
    if value is None:
        return 0.0
    if isinstance(value, Decimal):
        value = float(value)
    try:
        result = float(value)
    except (ValueError, TypeError):
        logger.debug(f"Non-numeric value treated as 0: {value!r}")
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def as_date(value) -> Optional[date]:
    """
    Coerce a record date (date, datetime, pd.Timestamp or string) to a date.

    Returns None when the value cannot be interpreted as a date.
    """
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return None
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return dateutil_parser.parse(str(value), default=DEFAULT_INSTANT).date()
    except (ValueError, OverflowError):
        logger.warning(f"Unparsable record date ignored: {value!r}")
        return None


def to_local(instant: datetime, timezone: Optional[str] = None) -> datetime:
    """
    Express an instant in plant-local time.

    Aware datetimes are converted to the plant timezone; naive datetimes are
    already local and are returned unchanged.
    """
    if isinstance(instant, pd.Timestamp):
        instant = instant.to_pydatetime()
    if instant.tzinfo is None:
        return instant
    tz = pytz.timezone(timezone or Config.TIMEZONE)
    return instant.astimezone(tz)


def _component(part: str) -> int:
    try:
        return int(float(part))
    except (ValueError, TypeError, OverflowError):
        logger.debug(f"Unparsable time component treated as 0: {part!r}")
        return 0


def parse_time_of_day(value) -> int:
    """
    Convert a time of day to minutes after midnight.

    Accepts "HH:MM", "HH:MM:SS", datetime.time and datetime. Any component
    that cannot be parsed counts as 0, so "08:xx" is 480 and "" is 0.
    """
    if value is None:
        return 0
    if isinstance(value, (time, datetime)):
        return value.hour * 60 + value.minute

    parts = str(value).strip().split(':')
    hours = _component(parts[0]) if parts[0] else 0
    minutes = _component(parts[1]) if len(parts) > 1 else 0
    return hours * 60 + minutes


def minute_of_day(instant: datetime) -> int:
    """Minutes elapsed since local midnight of the instant's own day"""
    return instant.hour * 60 + instant.minute


def clamp_minute(minute: int) -> int:
    """Clamp a minute offset to [0, 1440]"""
    return max(0, min(MINUTES_PER_DAY, minute))


def normalize_shift_interval(
    shift_date,
    start_time,
    end_time,
    now: datetime,
    timezone: Optional[str] = None
) -> Tuple[int, int]:
    """
    Normalize one cooking shift to [start, end) minute offsets.

    Args:
        shift_date: Calendar day of the shift
        start_time: Start time of day
        end_time: End time of day, or None/"" while the shift is running
        now: Current instant supplied by the caller
        timezone: Plant timezone name (defaults to Config.TIMEZONE)

    Returns:
        (start_minute, end_minute), both within [0, 1440]. end <= start means
        the shift contributes no minutes.

    Edge Cases:
    - Explicit end before start (overnight, e.g. 22:00 → 02:00): end = 1440
    - Running shift on today's date: end = minute-of-day of `now`
    - Running shift on any other date: end = 1440 (assumed to run to midnight)
    """
    start_min = parse_time_of_day(start_time)

    if end_time is not None and end_time != "":
        end_min = parse_time_of_day(end_time)
        if end_min < start_min:
            end_min = MINUTES_PER_DAY
    else:
        local_now = to_local(now, timezone)
        if as_date(shift_date) == local_now.date():
            end_min = min(minute_of_day(local_now), MINUTES_PER_DAY - 1)
        else:
            end_min = MINUTES_PER_DAY

    return clamp_minute(start_min), clamp_minute(end_min)


def normalize_downtime_interval(
    downtime: TimestampedDowntime,
    target_date: date,
    now: datetime,
    timezone: Optional[str] = None
) -> Tuple[int, int]:
    """
    Normalize one timestamped downtime to [start, end) minute offsets.

    Args:
        downtime: Timestamped downtime starting on target_date
        target_date: Calendar day being reconstructed
        now: Current instant supplied by the caller
        timezone: Plant timezone name (defaults to Config.TIMEZONE)

    Returns:
        (start_minute, end_minute), both within [0, 1440]

    Edge Cases:
    - Recorded end on a later day, or an end minute before the start: end = 1440
    - Ongoing downtime on today's date: end = minute-of-day of `now`
    - Ongoing downtime on any other date: end = 1439, the minute of the
      day's last instant (23:59:59.999)
    """
    start = to_local(downtime.start_instant, timezone)
    start_min = minute_of_day(start)

    if downtime.end_instant is not None:
        end = to_local(downtime.end_instant, timezone)
        end_min = minute_of_day(end)
        if end.date() > start.date() or end_min < start_min:
            end_min = MINUTES_PER_DAY
    else:
        local_now = to_local(now, timezone)
        if target_date == local_now.date():
            end_min = minute_of_day(local_now)
        else:
            end_min = MINUTES_PER_DAY - 1

    return clamp_minute(start_min), clamp_minute(end_min)
