from __future__ import annotations

from datetime import date, datetime

import numpy as np

from core.calculations.timeline import (
    active_minutes_per_hour,
    apply_downtime_overlay,
    build_activity_timeline,
    reconstruct_day,
)
from core.time_windows.models import ManualDowntime, ShiftInterval, TimestampedDowntime


def test_timeline_has_one_cell_per_minute(day, next_morning, day_shift) -> None:
    timeline = build_activity_timeline(day, [day_shift], next_morning)
    assert timeline.shape == (1440,)
    assert timeline.dtype == np.int8
    assert timeline[479] == 0
    assert timeline[480] == 1
    assert timeline[1019] == 1
    assert timeline[1020] == 0


def test_overlapping_shifts_do_not_double_count(day, next_morning) -> None:
    shifts = [
        ShiftInterval(day, "08:00", "12:00"),
        ShiftInterval(day, "10:00", "14:00"),
    ]
    timeline = build_activity_timeline(day, shifts, next_morning)
    assert int(timeline.sum()) == 360
    assert timeline.max() == 1


def test_shifts_on_other_days_are_ignored(day, next_morning, day_shift) -> None:
    other = ShiftInterval(date(2024, 3, 4), "00:00", "23:00")
    timeline = build_activity_timeline(day, [day_shift, other], next_morning)
    assert int(timeline.sum()) == 540


def test_overnight_shift_contributes_only_to_start_day(day, next_morning) -> None:
    overnight = ShiftInterval(day, "22:00", "02:00")
    timeline = build_activity_timeline(day, [overnight], next_morning)
    assert int(timeline.sum()) == 120
    assert timeline[:1320].sum() == 0

    following_day = build_activity_timeline(date(2024, 3, 6), [overnight], datetime(2024, 3, 7, 9, 0))
    assert int(following_day.sum()) == 0


def test_overlay_only_clears_cells_and_leaves_input_untouched(day, next_morning, lunch_stop) -> None:
    timeline = build_activity_timeline(day, [ShiftInterval(day, "11:00", "12:15")], next_morning)
    before = timeline.copy()

    overlaid, manual = apply_downtime_overlay(timeline, day, [lunch_stop], next_morning)

    np.testing.assert_array_equal(timeline, before)
    assert manual == 0.0
    assert int(overlaid.sum()) == 60
    assert np.all(overlaid <= before)


def test_manual_downtime_never_touches_timeline(day, next_morning, day_shift, manual_stop) -> None:
    timeline = build_activity_timeline(day, [day_shift], next_morning)
    overlaid, manual = apply_downtime_overlay(
        timeline, day, [manual_stop, ManualDowntime(day, 0.5)], next_morning
    )
    np.testing.assert_array_equal(overlaid, timeline)
    assert manual == 120.0


def test_downtime_relevance_follows_variant_dates(day, next_morning, day_shift) -> None:
    downtime = [
        TimestampedDowntime(datetime(2024, 3, 4, 12, 0), datetime(2024, 3, 4, 13, 0)),
        ManualDowntime(date(2024, 3, 4), 2.0),
    ]
    reconstruction = reconstruct_day(day, [day_shift], downtime, next_morning)
    assert reconstruction.gross_active_minutes == 540
    assert reconstruction.manual_downtime_minutes == 0.0


def test_reconstruction_tracks_timestamped_downtime(day, next_morning, day_shift, lunch_stop) -> None:
    reconstruction = reconstruct_day(day, [day_shift], [lunch_stop], next_morning)
    assert reconstruction.raw_active_minutes == 540
    assert reconstruction.gross_active_minutes == 510
    assert reconstruction.timestamped_downtime_minutes == 30


def test_reconstruct_day_accepts_string_dates(next_morning, day_shift) -> None:
    reconstruction = reconstruct_day("2024-03-05", [day_shift], [], next_morning)
    assert reconstruction.gross_active_minutes == 540


def test_active_minutes_per_hour(day, next_morning, lunch_stop) -> None:
    reconstruction = reconstruct_day(
        day, [ShiftInterval(day, "11:20", "13:00")], [lunch_stop], next_morning
    )
    per_hour = active_minutes_per_hour(reconstruction.timeline)
    assert len(per_hour) == 24
    assert per_hour[11] == 40
    assert per_hour[12] == 30
    assert per_hour[13] == 0
    assert per_hour.sum() == reconstruction.gross_active_minutes
