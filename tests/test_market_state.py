from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from market_state_ta import InvalidConfiguration, market_state

SMALL = {
    "mini": 4, "fast": 10, "slow": 20,
    "period_mini": 3, "period_fast": 5, "period_slow": 8,
    "lookback": 40,
}


def test_market_state_should_return_three_named_columns(close_series: pd.Series) -> None:
    df = market_state(close_series, **SMALL)

    assert list(df.columns) == ["MSSbull_4_10_20", "MSSbear_4_10_20", "MSSneut_4_10_20"]
    assert df.name == "MSS_4_10_20"
    assert df.category == "trend"
    assert df.index.equals(close_series.index)


def test_market_state_should_leave_warmup_rows_empty(close_series: pd.Series) -> None:
    df = market_state(close_series, **SMALL)

    assert df.iloc[:8].isna().all().all()
    assert (df.iloc[8:].notna().sum(axis=1) == 1).all()


def test_market_state_should_respect_band_limits(close_series: pd.Series) -> None:
    df = market_state(close_series, **SMALL)
    bull, bear, neut = (df[c].dropna() for c in df.columns)

    assert (bull >= 2).all()
    assert (bear <= -2).all()
    assert ((neut > -2) & (neut < 2)).all()
    values = df.to_numpy()
    values = values[~np.isnan(values)]
    assert ((values >= -4) & (values <= 4)).all()


def test_market_state_single_channel(close_series: pd.Series) -> None:
    df = market_state(close_series, output="single", **SMALL)
    three = market_state(close_series, **SMALL)

    assert list(df.columns) == ["MSS_4_10_20"]
    pd.testing.assert_series_equal(
        df.iloc[:, 0], three.sum(axis=1, min_count=1), check_names=False
    )


def test_market_state_flat_series_should_be_neutral_zero() -> None:
    # power of two keeps the EMA recursion exact
    close = pd.Series([64.0] * 2200)
    df = market_state(close, period_mini=8, period_fast=50, period_slow=200, lookback=2000)

    assert df.iloc[:200].isna().all().all()
    assert df.iloc[200:, 0].isna().all()
    assert df.iloc[200:, 1].isna().all()
    assert (df.iloc[200:, 2] == 0.0).all()


def test_market_state_offset_and_fillna(close_series: pd.Series) -> None:
    base = market_state(close_series, **SMALL)
    shifted = market_state(close_series, offset=2, fillna=0.0, **SMALL)

    assert (shifted.iloc[:10] == 0.0).all().all()
    pd.testing.assert_frame_equal(shifted.iloc[12:], base.shift(2).fillna(0.0).iloc[12:])


def test_market_state_should_return_none_for_short_input() -> None:
    assert market_state(pd.Series(np.arange(8.0)), **SMALL) is None
    assert market_state(None) is None


@pytest.mark.parametrize(
    "kwargs",
    [{"period_mini": 0}, {"smoothing": -1}, {"lookback": 0}, {"thresholds": "fixed"}, {"output": "many"}],
)
def test_market_state_should_reject_invalid_configuration(close_series: pd.Series, kwargs) -> None:
    params = dict(SMALL, **kwargs)
    with pytest.raises(InvalidConfiguration):
        market_state(close_series, **params)
