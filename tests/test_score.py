from __future__ import annotations

import itertools

import numpy as np
import pytest

from market_state_ta import (
    AdaptiveThresholds,
    FixedThresholds,
    InvalidConfiguration,
    ThresholdSet,
    aggregate,
    tier_score,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        (0.31, 2),
        (0.3, 1),
        (0.11, 1),
        (0.1, 0),
        (0.0, 0),
        (-0.1, 0),
        (-0.11, -1),
        (-0.3, -1),
        (-0.31, -2),
    ],
)
def test_tier_score_with_double_band(value: float, expected: int) -> None:
    assert tier_score(value, 0.1, 0.3) == expected


@pytest.mark.parametrize(
    "value,expected",
    [(5.0, 1), (0.1, 0), (0.0, 0), (-0.1, 0), (-5.0, -1)],
)
def test_tier_score_without_double_band(value: float, expected: int) -> None:
    assert tier_score(value, 0.1) == expected


@pytest.mark.parametrize("double", [0.3, None])
def test_tier_score_should_be_monotone_in_slope(double) -> None:
    slopes = sorted(list(np.linspace(-1.0, 1.0, 201)) + [-0.3, -0.1, 0.1, 0.3])
    scores = [tier_score(s, 0.1, double) for s in slopes]

    assert all(a <= b for a, b in zip(scores, scores[1:]))


def test_zero_range_should_send_any_nonzero_mini_slope_to_the_double_band() -> None:
    th = ThresholdSet.from_range(0.0, 0.05, 0.3)

    assert th.neutral == 0.0
    assert th.double == 0.0
    assert tier_score(1e-12, th.neutral, th.double) == 2
    assert tier_score(-1e-12, th.neutral, th.double) == -2
    assert tier_score(0.0, th.neutral, th.double) == 0


def test_threshold_set_should_scale_with_range() -> None:
    th = ThresholdSet.from_range(2.0, 0.05, 0.3)

    assert th.neutral == pytest.approx(0.1)
    assert th.double == pytest.approx(0.6)
    assert ThresholdSet.from_range(2.0, 0.05).double is None


def test_aggregate_should_stay_within_bounds() -> None:
    totals = [
        aggregate(m, f, s)
        for m, f, s in itertools.product(range(-2, 3), range(-1, 2), range(-1, 2))
    ]

    assert min(totals) == -4
    assert max(totals) == 4


@pytest.mark.parametrize(
    "mode",
    [
        FixedThresholds(neutral=-0.1),
        FixedThresholds(neutral=0.1, double=-1.0),
        FixedThresholds(neutral=float("nan")),
        AdaptiveThresholds(lookback=0),
        AdaptiveThresholds(neutral_ratio=-0.05),
        AdaptiveThresholds(double_ratio=-0.3),
    ],
)
def test_threshold_modes_should_reject_invalid_values(mode) -> None:
    with pytest.raises(InvalidConfiguration):
        mode.validate()
