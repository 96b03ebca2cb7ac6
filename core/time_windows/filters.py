"""
Record Filtering Utilities

Functions to select the records relevant to one calendar day or month, and
to convert data-store DataFrames into typed process records.
"""

import logging
from datetime import date, datetime, time
from typing import Iterable, List, Optional, Tuple

import pandas as pd
from dateutil import parser as dateutil_parser

from .models import (
    DailyTotal,
    DowntimeInterval,
    ManualDowntime,
    ProductionRecord,
    RawMaterialIntake,
    ShiftInterval,
    TimestampedDowntime,
)
from .normalizer import DEFAULT_INSTANT, as_date, to_float, to_local

logger = logging.getLogger(__name__)


def is_same_day(value, target_date: date) -> bool:
    """Check if a record date falls on target_date"""
    return as_date(value) == target_date


def is_same_month(value, target_date: date) -> bool:
    """Check if a record date falls in target_date's calendar month and year"""
    record_date = as_date(value)
    if record_date is None:
        return False
    return record_date.year == target_date.year and record_date.month == target_date.month


def shifts_for_date(shifts: Iterable[ShiftInterval], target_date: date) -> List[ShiftInterval]:
    """Select the cooking shifts recorded on target_date"""
    return [shift for shift in shifts if is_same_day(shift.date, target_date)]


def downtime_for_date(
    downtime: Iterable[DowntimeInterval],
    target_date: date,
    timezone: Optional[str] = None
) -> Tuple[List[TimestampedDowntime], List[ManualDowntime]]:
    """
    Select the downtime relevant to target_date, split by variant.

    A timestamped downtime is relevant when its start instant falls on
    target_date (in plant-local time). A manual downtime is relevant when its
    own date matches.

    Returns:
        (timestamped, manual)
    """
    timestamped = []
    manual = []

    for record in downtime:
        if isinstance(record, TimestampedDowntime):
            if to_local(record.start_instant, timezone).date() == target_date:
                timestamped.append(record)
        elif isinstance(record, ManualDowntime):
            if is_same_day(record.date, target_date):
                manual.append(record)

    return timestamped, manual


def totals_for_date(totals: Iterable[DailyTotal], target_date: date) -> List[DailyTotal]:
    """Select the daily totals recorded on target_date"""
    return [total for total in totals if is_same_day(total.date, target_date)]


def production_for_month(
    records: Iterable[ProductionRecord],
    target_date: date
) -> List[ProductionRecord]:
    """Select production records in target_date's calendar month"""
    return [record for record in records if is_same_month(record.date, target_date)]


# ============================================================
# DATAFRAME → RECORDS
# ============================================================

def _cell(row, column: str):
    """Read a row value, mapping missing columns and NaN/NaT to None"""
    if column not in row:
        return None
    value = row[column]
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _parse_instant(value, record_date: Optional[date] = None) -> Optional[datetime]:
    """Parse a downtime instant; time-only values fall on record_date"""
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value
    try:
        default = datetime.combine(record_date, time()) if record_date else DEFAULT_INSTANT
        return dateutil_parser.parse(str(value), default=default)
    except (ValueError, OverflowError):
        logger.warning(f"Unparsable downtime instant ignored: {value!r}")
        return None


def shift_intervals_from_dataframe(df: pd.DataFrame) -> List[ShiftInterval]:
    """
    Convert cooking time records to ShiftIntervals.

    Args:
        df: DataFrame with columns: date, start_time, end_time (optional)

    Returns:
        List of ShiftInterval, skipping rows without a usable date
    """
    if df is None or df.empty:
        return []

    shifts = []
    for _, row in df.iterrows():
        record_date = as_date(_cell(row, 'date'))
        if record_date is None:
            continue
        shifts.append(ShiftInterval(
            date=record_date,
            start_time=_cell(row, 'start_time') or "",
            end_time=_cell(row, 'end_time')
        ))

    logger.debug(f"Loaded {len(shifts)} shift intervals from {len(df)} rows")
    return shifts


def downtime_from_dataframe(df: pd.DataFrame) -> List[DowntimeInterval]:
    """
    Convert downtime records to the tagged DowntimeInterval variants.

    Rows carrying a start_time instant become TimestampedDowntime; all other
    rows become ManualDowntime built from date and duration_hours. The
    discrimination happens here once so the calculations never inspect
    which fields happen to be populated.

    Args:
        df: DataFrame with columns: date, start_time, end_time, duration_hours, reason

    Returns:
        List of TimestampedDowntime / ManualDowntime
    """
    if df is None or df.empty:
        return []

    records: List[DowntimeInterval] = []
    for _, row in df.iterrows():
        reason = str(_cell(row, 'reason') or "")
        start_value = _cell(row, 'start_time')
        record_date = as_date(_cell(row, 'date'))

        if start_value is not None:
            start = _parse_instant(start_value, record_date)
            if start is None:
                continue
            records.append(TimestampedDowntime(
                start_instant=start,
                end_instant=_parse_instant(_cell(row, 'end_time'), record_date),
                reason=reason
            ))
            continue

        if record_date is None:
            continue
        records.append(ManualDowntime(
            date=record_date,
            duration_hours=to_float(_cell(row, 'duration_hours')),
            reason=reason
        ))

    logger.debug(f"Loaded {len(records)} downtime records from {len(df)} rows")
    return records


def production_records_from_dataframe(df: pd.DataFrame) -> List[ProductionRecord]:
    """
    Convert production entries to ProductionRecords.

    Args:
        df: DataFrame with columns: date, mp_used, sebo_produced, fco_produced,
            farinheta_produced, losses (optional)

    Returns:
        List of ProductionRecord, skipping rows without a usable date
    """
    if df is None or df.empty:
        return []

    records = []
    for _, row in df.iterrows():
        record_date = as_date(_cell(row, 'date'))
        if record_date is None:
            continue
        records.append(ProductionRecord(
            date=record_date,
            mp_used=to_float(_cell(row, 'mp_used')),
            sebo_produced=to_float(_cell(row, 'sebo_produced')),
            fco_produced=to_float(_cell(row, 'fco_produced')),
            farinheta_produced=to_float(_cell(row, 'farinheta_produced')),
            losses=to_float(_cell(row, 'losses'))
        ))

    return records


def daily_totals_from_dataframe(df: pd.DataFrame) -> List[DailyTotal]:
    """Convert production entries to DailyTotals (consumption and summed output)"""
    return [DailyTotal.from_production(record) for record in production_records_from_dataframe(df)]


def raw_material_intakes_from_dataframe(df: pd.DataFrame) -> List[RawMaterialIntake]:
    """
    Convert raw material entries to RawMaterialIntakes.

    Args:
        df: DataFrame with columns: date, quantity, supplier (optional), type (optional)
    """
    if df is None or df.empty:
        return []

    intakes = []
    for _, row in df.iterrows():
        record_date = as_date(_cell(row, 'date'))
        if record_date is None:
            continue
        intakes.append(RawMaterialIntake(
            date=record_date,
            quantity=to_float(_cell(row, 'quantity')),
            supplier=str(_cell(row, 'supplier') or ""),
            material_type=str(_cell(row, 'type') or "")
        ))

    return intakes
