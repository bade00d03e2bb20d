from __future__ import annotations

import math

import numpy as np
import pytest

from market_state_ta import (
    HistoryBuffer,
    InsufficientHistory,
    SlopeRangeWindow,
    slope,
    slope_range,
)


def test_slope_should_average_change_per_bar() -> None:
    buf = HistoryBuffer(10, [1.0, 2.0, 4.0, 7.0])

    assert slope(buf, 3) == 2.0
    assert slope(buf, 2, offset=1) == 1.5


def test_slope_should_raise_when_history_is_short() -> None:
    buf = HistoryBuffer(10, [1.0, 2.0])

    with pytest.raises(InsufficientHistory):
        slope(buf, 3)


def test_slope_range_should_seed_extrema_from_its_own_first_slope() -> None:
    # period-1 slopes are 5, 4, 3, 2, 1 at offsets 0..4: all positive
    buf = HistoryBuffer(10, [0.0, 1.0, 3.0, 6.0, 10.0, 15.0])

    assert slope_range(buf, 1, 4) == 4.0
    # a zero-seeded minimum would report 5.0 here
    assert slope_range(buf, 1, 4) != 5.0


def test_slope_range_should_seed_extrema_for_all_negative_slopes() -> None:
    buf = HistoryBuffer(10, [15.0, 10.0, 6.0, 3.0, 1.0, 0.0])

    assert slope_range(buf, 1, 4) == 4.0


def test_slope_range_should_scan_offsets_zero_to_lookback_inclusive() -> None:
    buf = HistoryBuffer(10, [0.0, 1.0, 3.0, 6.0, 10.0, 15.0])

    # offsets 0, 1, 2 -> slopes 5, 4, 3
    assert slope_range(buf, 1, 2) == 2.0


def test_slope_range_should_clip_to_available_history() -> None:
    buf = HistoryBuffer(10, [0.0, 1.0, 3.0, 6.0, 10.0, 15.0])

    assert slope_range(buf, 1, 2000) == slope_range(buf, 1, 4)


def test_slope_range_should_be_zero_for_equal_slopes() -> None:
    buf = HistoryBuffer(50, [0.5 * i for i in range(30)])

    assert slope_range(buf, 4, 20) == 0.0


def test_slope_range_should_raise_when_no_slope_is_available() -> None:
    buf = HistoryBuffer(10, [1.0, 2.0, 3.0])

    with pytest.raises(InsufficientHistory):
        slope_range(buf, 3, 10)


def test_slope_range_window_should_match_full_scan(random_walk: np.ndarray) -> None:
    period, lookback = 5, 25
    buf = HistoryBuffer(len(random_walk))
    window = SlopeRangeWindow(lookback)

    for value in random_walk:
        buf.append(value)
        if len(buf) <= period:
            continue
        window.push(slope(buf, period))
        assert window.range() == slope_range(buf, period, lookback)


def test_slope_range_window_should_expire_old_extrema() -> None:
    window = SlopeRangeWindow(1)
    for value in (10.0, 1.0, 2.0):
        window.push(value)

    assert window.highest == 2.0
    assert window.lowest == 1.0
    assert window.range() == 1.0
    assert len(window) == 2


def test_slope_range_window_should_skip_nan_but_keep_its_slot() -> None:
    window = SlopeRangeWindow(1)

    window.push(1.0)
    window.push(float("nan"))
    assert window.range() == 0.0

    window.push(3.0)
    assert window.range() == 0.0

    window.push(5.0)
    assert window.range() == 2.0


def test_slope_range_window_should_be_nan_when_empty_or_reset() -> None:
    window = SlopeRangeWindow(3)
    assert math.isnan(window.range())

    window.push(1.0)
    window.push(4.0)
    window.reset()
    assert math.isnan(window.range())
    assert len(window) == 0
