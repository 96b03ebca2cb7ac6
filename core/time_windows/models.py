"""
Process Record Models

Read-only records supplied by the data store and consumed by the process
calculations:
- Cooking shift intervals (start/stop times of a processing run)
- Downtime, as an explicit tagged union of timestamped and manual entries
- Production totals, production history and raw-material intake
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional, Union

TimeOfDay = Union[str, time]


@dataclass(frozen=True)
class ShiftInterval:
    """
    A cooking/processing run on one calendar day.

    start_time and end_time are times of day ("HH:MM", "HH:MM:SS" or
    datetime.time). An absent end_time means the run is still going.
    """
    date: date
    start_time: TimeOfDay
    end_time: Optional[TimeOfDay] = None

    @property
    def is_open(self) -> bool:
        """True while the run has no recorded end"""
        return self.end_time is None or self.end_time == ""

    def __repr__(self) -> str:
        end = "running" if self.is_open else self.end_time
        return f"ShiftInterval({self.date} {self.start_time} → {end})"


@dataclass(frozen=True)
class TimestampedDowntime:
    """
    A stoppage with known clock instants.

    Can be located on the per-minute timeline. An absent end_instant means
    the stoppage is still ongoing.
    """
    start_instant: datetime
    end_instant: Optional[datetime] = None
    reason: str = ""

    @property
    def is_open(self) -> bool:
        return self.end_instant is None


@dataclass(frozen=True)
class ManualDowntime:
    """
    A stoppage recorded only as a duration.

    It has no clock position, so it is only deducted from the aggregate
    active time and never touches the timeline.
    """
    date: date
    duration_hours: float
    reason: str = ""

    @property
    def duration_minutes(self) -> float:
        return self.duration_hours * 60.0


DowntimeInterval = Union[TimestampedDowntime, ManualDowntime]


@dataclass(frozen=True)
class ProductionRecord:
    """One production entry: raw material used and output per product stream (kg)"""
    date: date
    mp_used: float
    sebo_produced: float = 0.0
    fco_produced: float = 0.0
    farinheta_produced: float = 0.0
    losses: float = 0.0

    @property
    def total_produced(self) -> float:
        """Sebo + FCO + Farinheta"""
        return self.sebo_produced + self.fco_produced + self.farinheta_produced


@dataclass(frozen=True)
class DailyTotal:
    """
    Consumption and output of one production record.

    Several totals on the same date are summed by the calculations.
    """
    date: date
    consumption_kg: float
    produced_kg: float = 0.0

    @classmethod
    def from_production(cls, record: ProductionRecord) -> 'DailyTotal':
        return cls(
            date=record.date,
            consumption_kg=record.mp_used,
            produced_kg=record.total_produced
        )


@dataclass(frozen=True)
class RawMaterialIntake:
    """Raw material received at the plant (kg)"""
    date: date
    quantity: float
    supplier: str = ""
    material_type: str = ""
