# -*- coding: utf-8 -*-
"""market-state-ta stateful -- market state score (MSS).

Host side of the calculator: three registered ``ema`` indicators (mini /
fast / slow) are updated per bar and appended to bounded history
buffers, which serve as the calculator's value providers.

Params
------
mini, fast, slow                      EMA lengths       (8, 50, 200)
period_mini, period_fast, period_slow slope periods     (8, 20, 100)
lookback, smoothing                                     (2000, 5)
neutral_ratio, double_ratio                             (0.05, 0.3)
thresholds   "adaptive" | "fixed"  (fixed needs neutral, optional double)
output       "three" | "single"
range_method "window" | "scan"
prefix, suffix, delimiter, col_names  output column overrides
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import logging

from ._base import (
    _param,
    _as_int,
    EMAState,
    ema_reset,
    StatefulIndicator,
    STATEFUL_REGISTRY,
    SEED_REGISTRY,
    replay_seed,
    resolve_output_names,
)
from ._bands import OutputMode
from ._calculator import MarketStateCalculator, MarketStateConfig
from ._overlap import EMA
from ._provider import HistoryBuffer

logger = logging.getLogger(__name__)


def _ema_lengths(params: Dict[str, Any]) -> Tuple[int, int, int]:
    return (
        _as_int(_param(params, "mini", 8), "mini"),
        _as_int(_param(params, "fast", 50), "fast"),
        _as_int(_param(params, "slow", 200), "slow"),
    )


@dataclass
class MSSState:
    emas: Tuple[EMAState, EMAState, EMAState]
    buffers: Tuple[HistoryBuffer, HistoryBuffer, HistoryBuffer]
    calculator: MarketStateCalculator
    bars: int = 0


def _mss_init(params: Dict[str, Any]) -> MSSState:
    config = MarketStateConfig.from_params(params)
    emas = tuple(EMA.init({"length": n}) for n in _ema_lengths(params))
    buffers = tuple(HistoryBuffer(config.history_needed) for _ in range(3))
    return MSSState(
        emas=emas,  # type: ignore[arg-type]
        buffers=buffers,  # type: ignore[arg-type]
        calculator=MarketStateCalculator(config, *buffers),
    )


def _mss_update(
    state: MSSState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], MSSState]:
    for ema, buf in zip(state.emas, state.buffers):
        (val,), _ = EMA.update(ema, bar, params)
        buf.append(val)
    state.bars += 1

    result = state.calculator.on_bar_update()
    if result is None:
        n = 1 if state.calculator.config.output is OutputMode.SINGLE_CHANNEL else 3
        return [None] * n, state
    return result.values(), state


def mss_reset(state: MSSState) -> MSSState:
    """Start a new stream (symbol or timeframe change) on the same state."""
    logger.debug("mss stream reset after %d bars", state.bars)
    for ema, buf in zip(state.emas, state.buffers):
        ema_reset(ema)
        buf.clear()
    state.calculator.reset()
    state.bars = 0
    return state


def _mss_output_names(params: Dict[str, Any]) -> List[str]:
    mini, fast, slow = _ema_lengths(params)
    props = f"_{mini}_{fast}_{slow}"
    output = str(_param(params, "output", OutputMode.THREE_CHANNEL.value)).lower()
    if output == OutputMode.SINGLE_CHANNEL.value:
        names = [f"MSS{props}"]
    else:
        names = [f"MSSbull{props}", f"MSSbear{props}", f"MSSneut{props}"]
    return resolve_output_names(names, params)


def _mss_seed(series: Dict[str, "pd.Series"], params: Dict[str, Any]) -> MSSState:  # noqa: F821
    """Reconstruct MSSState by replaying over the close series."""
    return replay_seed("mss", series, params)


STATEFUL_REGISTRY["mss"] = StatefulIndicator(
    kind="mss",
    inputs=("close",),
    init=_mss_init,
    update=_mss_update,
    output_names=_mss_output_names,
)
SEED_REGISTRY["mss"] = _mss_seed
