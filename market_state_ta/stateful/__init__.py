# -*- coding: utf-8 -*-
"""market-state-ta.stateful – streaming market state score.

Indicator modules populate STATEFUL_REGISTRY and SEED_REGISTRY at import
time.  This package re-exports them plus the calculator API.
"""
from __future__ import annotations

# Base API (always available)
from ._base import (
    NAN,
    EMAState,
    StatefulIndicator,
    STATEFUL_REGISTRY,
    SEED_REGISTRY,
    ema_update_raw,
    ema_make,
    ema_reset,
    replay_seed,
    resolve_output_names,
    stateful_supported_kinds,
    _param,
    _as_int,
    _as_float,
)
from ._provider import ValueProvider, HistoryBuffer, SeriesProvider
from ._slope import slope, slope_range, SlopeRangeWindow
from ._score import (
    NEUTRAL_RATIO,
    DOUBLE_RATIO,
    FixedThresholds,
    AdaptiveThresholds,
    ThresholdSet,
    tier_score,
    aggregate,
)
from ._bands import Band, OutputMode, classify
from ._calculator import (
    Phase,
    MarketStateConfig,
    MarketStateResult,
    MarketStateCalculator,
)

# ---------------------------------------------------------------------------
# Indicator modules – each populates the shared registries on import
# ---------------------------------------------------------------------------
from . import _overlap        # noqa: F401  ema
from . import _market_state   # noqa: F401  mss
from ._market_state import MSSState, mss_reset

__all__ = [
    # base
    "NAN",
    "EMAState",
    "StatefulIndicator",
    "STATEFUL_REGISTRY",
    "SEED_REGISTRY",
    "ema_update_raw",
    "ema_make",
    "ema_reset",
    "replay_seed",
    "resolve_output_names",
    "stateful_supported_kinds",
    # providers
    "ValueProvider",
    "HistoryBuffer",
    "SeriesProvider",
    # core
    "slope",
    "slope_range",
    "SlopeRangeWindow",
    "NEUTRAL_RATIO",
    "DOUBLE_RATIO",
    "FixedThresholds",
    "AdaptiveThresholds",
    "ThresholdSet",
    "tier_score",
    "aggregate",
    "Band",
    "OutputMode",
    "classify",
    "Phase",
    "MarketStateConfig",
    "MarketStateResult",
    "MarketStateCalculator",
    "MSSState",
    "mss_reset",
]
