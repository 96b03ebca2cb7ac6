from __future__ import annotations

from datetime import date, datetime

import pytest

from core.time_windows.models import (
    DailyTotal,
    ManualDowntime,
    ShiftInterval,
    TimestampedDowntime,
)

DAY = date(2024, 3, 5)


@pytest.fixture
def day() -> date:
    return DAY


@pytest.fixture
def next_morning() -> datetime:
    """A `now` after the reconstructed day, so nothing on DAY is still running"""
    return datetime(2024, 3, 6, 9, 0)


@pytest.fixture
def day_shift() -> ShiftInterval:
    return ShiftInterval(date=DAY, start_time="08:00", end_time="17:00")


@pytest.fixture
def lunch_stop() -> TimestampedDowntime:
    return TimestampedDowntime(
        start_instant=datetime(2024, 3, 5, 12, 0),
        end_instant=datetime(2024, 3, 5, 12, 30),
        reason="Troca de peneira",
    )


@pytest.fixture
def manual_stop() -> ManualDowntime:
    return ManualDowntime(date=DAY, duration_hours=1.5, reason="Falta de vapor")


@pytest.fixture
def consumption_total() -> DailyTotal:
    return DailyTotal(date=DAY, consumption_kg=9000.0, produced_kg=5100.0)
