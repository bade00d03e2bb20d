from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import pytest

from market_state_ta import (
    HistoryBuffer,
    MarketStateCalculator,
    MarketStateConfig,
    MarketStateResult,
)


def make_buffers(config: MarketStateConfig) -> Tuple[HistoryBuffer, HistoryBuffer, HistoryBuffer]:
    return (
        HistoryBuffer(config.history_needed),
        HistoryBuffer(config.history_needed),
        HistoryBuffer(config.history_needed),
    )


def run_stream(
    config: MarketStateConfig,
    mini: Sequence[float],
    fast: Sequence[float],
    slow: Sequence[float],
) -> List[Optional[MarketStateResult]]:
    """Feed three value series bar by bar; one result (or None) per bar."""
    buffers = make_buffers(config)
    calc = MarketStateCalculator(config, *buffers)
    results = []
    for values in zip(mini, fast, slow):
        for buf, value in zip(buffers, values):
            buf.append(value)
        results.append(calc.on_bar_update())
    return results


def iter_active(results: Sequence[Optional[MarketStateResult]]) -> Iterator[MarketStateResult]:
    return (r for r in results if r is not None)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(7)


@pytest.fixture
def random_walk(rng: np.random.Generator) -> np.ndarray:
    return 100 + rng.standard_normal(600).cumsum()


@pytest.fixture
def close_series(rng: np.random.Generator) -> pd.Series:
    idx = pd.date_range("2025-01-01", periods=400, freq="1min")
    close = 100 + rng.standard_normal(400).cumsum() + rng.normal(0, 0.2, 400)
    return pd.Series(close, index=idx, name="close")
