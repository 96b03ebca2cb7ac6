"""
Yield and Load Forecast Functions

Derives average yield ratios from production history and projects daily and
monthly output (kg and bags) from raw-material intake.

Yield ratio = stream output / raw material used × 100
Projected output = intake × yield / 100
Projected bags = projected output / bag weight (both bag weights reported)
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

import pandas as pd

from config import Config
from core.time_windows.filters import is_same_day, is_same_month, production_for_month
from core.time_windows.models import ProductionRecord, RawMaterialIntake
from core.time_windows.normalizer import to_float, to_local
from utils.config import get_fallback_yields

logger = logging.getLogger(__name__)

STREAMS = ('sebo', 'fco', 'farinheta')


@dataclass(frozen=True)
class YieldRatios:
    """Yield per product stream as a percentage of raw material input"""
    sebo: float
    fco: float
    farinheta: float
    from_history: bool = True

    @classmethod
    def fallback(cls, overrides: Optional[Dict[str, float]] = None) -> 'YieldRatios':
        """Configured default ratios, used when there is no usable history"""
        values = get_fallback_yields()
        if overrides:
            values.update(overrides)
        return cls(
            sebo=values['sebo'],
            fco=values['fco'],
            farinheta=values['farinheta'],
            from_history=False
        )

    def for_stream(self, stream: str) -> float:
        return getattr(self, stream)

    def to_dict(self) -> Dict[str, float]:
        return {stream: self.for_stream(stream) for stream in STREAMS}


def project_yields(
    production_history: Iterable[ProductionRecord],
    fallback: Optional[Dict[str, float]] = None
) -> YieldRatios:
    """
    Calculate historical average yield ratios.

    Ratios are computed from summed input and summed output (a weighted
    average over the history, not a mean of per-record yields).

    Args:
        production_history: Production records
        fallback: Optional overrides for the configured fallback ratios

    Returns:
        YieldRatios; the fallback ratios when the summed input is zero
    """
    input_sum = 0.0
    stream_sums = {stream: 0.0 for stream in STREAMS}

    for record in production_history:
        input_sum += to_float(record.mp_used)
        stream_sums['sebo'] += to_float(record.sebo_produced)
        stream_sums['fco'] += to_float(record.fco_produced)
        stream_sums['farinheta'] += to_float(record.farinheta_produced)

    if input_sum <= 0:
        logger.info("No raw material in production history, using fallback yields")
        return YieldRatios.fallback(fallback)

    ratios = {stream: total / input_sum * 100 for stream, total in stream_sums.items()}
    logger.info(
        f"Historical yields over {input_sum:.0f} kg: "
        + ", ".join(f"{s}={r:.2f}%" for s, r in ratios.items())
    )
    return YieldRatios(**ratios)


def project_output(intake_sum: float, yield_ratio: float) -> float:
    """Projected output (kg) from an intake sum and a yield percentage"""
    return to_float(intake_sum) * (to_float(yield_ratio) / 100)


def project_bags(intake_sum: float, yield_ratio: float, bag_weight_kg: float) -> float:
    """
    Projected bag count for one bag weight.

    Args:
        intake_sum: Raw material intake (kg)
        yield_ratio: Yield percentage of the product stream
        bag_weight_kg: Weight of one bag

    Returns:
        Fractional number of bags; 0 for a non-positive bag weight
    """
    bag_weight = to_float(bag_weight_kg)
    if bag_weight <= 0:
        return 0.0
    return project_output(intake_sum, yield_ratio) / bag_weight


def yield_history(records: Iterable[ProductionRecord]) -> pd.DataFrame:
    """
    Per-record yield of each product stream.

    Returns:
        DataFrame with columns: date, mp_used, sebo, fco, farinheta (percent;
        0 when the record used no raw material), sorted by date
    """
    rows = []
    for record in records:
        mp_used = to_float(record.mp_used)
        rows.append({
            'date': record.date,
            'mp_used': mp_used,
            'sebo': to_float(record.sebo_produced) / mp_used * 100 if mp_used > 0 else 0.0,
            'fco': to_float(record.fco_produced) / mp_used * 100 if mp_used > 0 else 0.0,
            'farinheta': to_float(record.farinheta_produced) / mp_used * 100 if mp_used > 0 else 0.0,
        })

    if not rows:
        return pd.DataFrame(columns=['date', 'mp_used', *STREAMS])
    return pd.DataFrame(rows).sort_values('date').reset_index(drop=True)


# ============================================================
# LOAD FORECAST
# ============================================================

@dataclass(frozen=True)
class StreamForecast:
    """Daily and monthly projections of one product stream"""
    stream: str
    yield_percent: float
    daily_kg: float
    daily_bags_small: float
    daily_bags_large: float
    monthly_kg: float
    monthly_bags_small: float
    monthly_bags_large: float
    month_to_date_kg: float
    monthly_run_rate_kg: float


@dataclass(frozen=True)
class LoadForecast:
    """Load forecast for a reference day"""
    reference_date: date
    daily_intake_kg: float
    monthly_intake_kg: float
    yields: YieldRatios
    streams: Dict[str, StreamForecast] = field(default_factory=dict)
    cadence_ton_per_hour: Dict[str, float] = field(default_factory=dict)
    daily_bag_capacity: float = 0.0

    def to_dataframe(self) -> pd.DataFrame:
        """One row per product stream"""
        return pd.DataFrame([vars(forecast) for forecast in self.streams.values()])


def _reference_day(now) -> date:
    if isinstance(now, datetime):
        return to_local(now).date()
    return now


def forecast_load(
    now,
    production_history: Iterable[ProductionRecord],
    intakes: Iterable[RawMaterialIntake],
    yields: Optional[YieldRatios] = None
) -> LoadForecast:
    """
    Project today's and this month's output per product stream.

    Intake is filtered by exact calendar day and by calendar month and year of
    `now`, not by a rolling window.

    Args:
        now: Current instant (or reference date) supplied by the caller
        production_history: Production records
        intakes: Raw material intake records
        yields: Yield ratios; defaults to project_yields(production_history)

    Returns:
        LoadForecast

    Edge Cases:
    - No intake recorded today but production used raw material today:
      production mp_used is used as today's intake
    - Monthly run-rate uses max(1, day of month) as divisor
    """
    reference = _reference_day(now)
    history: List[ProductionRecord] = list(production_history)
    intakes = list(intakes)

    if yields is None:
        yields = project_yields(history)

    daily_intake = sum(to_float(i.quantity) for i in intakes if is_same_day(i.date, reference))
    monthly_intake = sum(to_float(i.quantity) for i in intakes if is_same_month(i.date, reference))

    production_mp = sum(to_float(r.mp_used) for r in history if is_same_day(r.date, reference))
    if daily_intake == 0 and production_mp > 0:
        logger.info(f"No raw material intake on {reference}, using production consumption ({production_mp:.0f} kg)")
        daily_intake = production_mp

    month_records = production_for_month(history, reference)
    month_actuals = {
        'sebo': sum(to_float(r.sebo_produced) for r in month_records),
        'fco': sum(to_float(r.fco_produced) for r in month_records),
        'farinheta': sum(to_float(r.farinheta_produced) for r in month_records),
    }

    days_in_month = calendar.monthrange(reference.year, reference.month)[1]
    projection_factor = days_in_month / max(1, reference.day)

    small = Config.BAG_WEIGHT_SMALL_KG
    large = Config.BAG_WEIGHT_LARGE_KG

    streams = {}
    for stream in STREAMS:
        ratio = yields.for_stream(stream)
        streams[stream] = StreamForecast(
            stream=stream,
            yield_percent=ratio,
            daily_kg=project_output(daily_intake, ratio),
            daily_bags_small=project_bags(daily_intake, ratio, small),
            daily_bags_large=project_bags(daily_intake, ratio, large),
            monthly_kg=project_output(monthly_intake, ratio),
            monthly_bags_small=project_bags(monthly_intake, ratio, small),
            monthly_bags_large=project_bags(monthly_intake, ratio, large),
            month_to_date_kg=month_actuals[stream],
            monthly_run_rate_kg=month_actuals[stream] * projection_factor
        )

    logger.info(
        f"Load forecast {reference}: daily intake={daily_intake:.0f} kg, "
        f"monthly intake={monthly_intake:.0f} kg"
    )

    return LoadForecast(
        reference_date=reference,
        daily_intake_kg=daily_intake,
        monthly_intake_kg=monthly_intake,
        yields=yields,
        streams=streams,
        cadence_ton_per_hour={
            'small': Config.BAGS_PER_HOUR * small / 1000.0,
            'large': Config.BAGS_PER_HOUR * large / 1000.0,
        },
        daily_bag_capacity=Config.BAGS_PER_HOUR * Config.SHIFT_HOURS
    )
