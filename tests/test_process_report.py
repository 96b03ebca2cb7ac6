from __future__ import annotations

from datetime import date, datetime

import pandas as pd
import pytest
import pytz

from analysis.process_report import (
    calculate_daily_process_report,
    calculate_efficiency_history,
    summarize_daily_metrics,
)
from core.calculations.throughput import AssumedThroughputRate
from core.time_windows.models import DailyTotal, ManualDowntime, ShiftInterval

NOW = datetime(2024, 3, 6, 9, 0)


@pytest.fixture
def store_frames():
    cooking_df = pd.DataFrame([
        {'date': '2024-03-05', 'start_time': '08:00', 'end_time': '17:00'},
        {'date': '2024-03-04', 'start_time': '08:00', 'end_time': '12:00'},
    ])
    downtime_df = pd.DataFrame([
        {'date': '2024-03-05', 'start_time': '2024-03-05T12:00:00', 'end_time': '2024-03-05T12:30:00',
         'duration_hours': None, 'reason': 'Peneira'},
    ])
    production_df = pd.DataFrame([
        {'date': '2024-03-05', 'mp_used': 9000.0, 'sebo_produced': 2550.0,
         'fco_produced': 2300.0, 'farinheta_produced': 250.0},
    ])
    return cooking_df, downtime_df, production_df


def test_daily_process_report(store_frames) -> None:
    report = calculate_daily_process_report(date(2024, 3, 5), *store_frames, now=NOW)

    metrics = report['metrics']
    assert metrics.gross_active_minutes == 510
    assert metrics.rate_kg_per_hour == pytest.approx(1058.82, abs=0.01)
    assert metrics.total_produced_kg == 5100.0

    assert report['target']['below_target'] is True

    hourly = report['hourly']
    assert len(hourly) == 24
    assert hourly['production_kg'].sum() == pytest.approx(5100.0)
    assert hourly['consumption_kg'].sum() == pytest.approx(9000.0)


def test_daily_process_report_with_assumed_rate(store_frames) -> None:
    report = calculate_daily_process_report(
        date(2024, 3, 5), *store_frames, now=NOW, rate_source=AssumedThroughputRate(ton_per_hour=6.0)
    )
    assert report['hourly'].loc[8, 'production_kg'] == pytest.approx(6000.0)


def test_daily_process_report_empty_frames() -> None:
    empty = pd.DataFrame()
    report = calculate_daily_process_report(date(2024, 3, 5), empty, empty, empty, now=NOW)

    assert report['metrics'].gross_active_minutes == 0
    assert report['metrics'].rate_kg_per_hour == 0
    assert report['hourly']['production_kg'].sum() == 0
    assert report['target']['rate_ton_per_hour'] is None


def test_efficiency_history_rates_per_date() -> None:
    shifts = [
        ShiftInterval(date(2024, 3, 4), "08:00", "12:00"),
        ShiftInterval(date(2024, 3, 5), "08:00", "18:00"),
    ]
    downtime = [ManualDowntime(date(2024, 3, 5), 2.0)]
    totals = [
        DailyTotal(date(2024, 3, 4), 4000.0, 2000.0),
        DailyTotal(date(2024, 3, 5), 8000.0, 4000.0),
        DailyTotal(date(2024, 3, 6), 1000.0, 500.0),
    ]

    df = calculate_efficiency_history(shifts, downtime, totals, NOW, unit='t')

    assert list(df['date']) == [date(2024, 3, 4), date(2024, 3, 5), date(2024, 3, 6)]
    assert df.loc[0, 'consumption_rate'] == pytest.approx(1.0)
    assert df.loc[0, 'production_rate'] == pytest.approx(0.5)
    assert df.loc[1, 'net_active_hours'] == pytest.approx(8.0)
    assert df.loc[1, 'consumption_rate'] == pytest.approx(1.0)
    assert df.loc[2, 'consumption_rate'] == 0.0


def test_efficiency_history_keeps_most_recent_dates() -> None:
    totals = [DailyTotal(date(2024, 3, d), 1000.0, 500.0) for d in range(1, 21)]
    df = calculate_efficiency_history([], [], totals, NOW, limit=14)
    assert len(df) == 14
    assert df.loc[0, 'date'] == date(2024, 3, 7)


def test_efficiency_history_rejects_unknown_unit() -> None:
    with pytest.raises(ValueError):
        calculate_efficiency_history([], [], [], NOW, unit='lb')


def test_efficiency_history_empty() -> None:
    df = calculate_efficiency_history([], [], [], NOW)
    assert df.empty


def test_summarize_daily_metrics(store_frames) -> None:
    report = calculate_daily_process_report(date(2024, 3, 5), *store_frames, now=NOW)
    summary = summarize_daily_metrics(report['metrics'], report['target'])

    assert summary == {
        'raw_material': "9.00 t",
        'cooking_time': "9h 0m",
        'downtime': "0h 30m",
        'net_time': "8h 30m",
        'flow_rate': "1.06 t/h",
        'target_difference': "-6.07",
    }


def test_daily_process_report_time_only_downtime() -> None:
    cooking_df = pd.DataFrame([{'date': '2024-03-05', 'start_time': '08:00', 'end_time': '17:00'}])
    downtime_df = pd.DataFrame([{'date': '2024-03-05', 'start_time': '12:00', 'end_time': '12:30'}])

    report = calculate_daily_process_report(date(2024, 3, 5), cooking_df, downtime_df, pd.DataFrame(), now=NOW)

    assert report['metrics'].gross_active_minutes == 510
    assert report['metrics'].timestamped_downtime_minutes == 30


def test_daily_process_report_uses_given_timezone() -> None:
    cooking_df = pd.DataFrame([{'date': '2024-03-05', 'start_time': '08:00', 'end_time': None}])
    now = pytz.UTC.localize(datetime(2024, 3, 5, 17, 30))

    sao_paulo = calculate_daily_process_report(
        date(2024, 3, 5), cooking_df, pd.DataFrame(), pd.DataFrame(), now=now, timezone='America/Sao_Paulo'
    )
    utc = calculate_daily_process_report(
        date(2024, 3, 5), cooking_df, pd.DataFrame(), pd.DataFrame(), now=now, timezone='UTC'
    )

    assert sao_paulo['metrics'].gross_active_minutes == 390
    assert utc['metrics'].gross_active_minutes == 570


def test_efficiency_history_uses_given_timezone() -> None:
    shifts = [ShiftInterval(date(2024, 3, 5), "08:00", None)]
    totals = [DailyTotal(date(2024, 3, 5), 3900.0, 1950.0)]
    now = pytz.UTC.localize(datetime(2024, 3, 5, 17, 30))

    df = calculate_efficiency_history(shifts, [], totals, now, timezone='America/Sao_Paulo')

    assert df.loc[0, 'net_active_hours'] == pytest.approx(6.5)
    assert df.loc[0, 'consumption_rate'] == pytest.approx(600.0)
