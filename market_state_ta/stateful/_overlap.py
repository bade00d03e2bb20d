# -*- coding: utf-8 -*-
"""market-state-ta stateful -- overlap indicators.

Only the EMA the market state providers are built from lives here.
First output = first close (no SMA seed), alpha = 2 / (length + 1),
which matches ``pandas.Series.ewm(span=length, adjust=False)``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ._base import (
    _param,
    _as_int,
    EMAState,
    ema_make,
    ema_update_raw,
    StatefulIndicator,
    STATEFUL_REGISTRY,
    SEED_REGISTRY,
    replay_seed,
    resolve_output_names,
)


# ===========================================================================
# EMA  (feeds the mss value providers)
# ===========================================================================
# State: reuses EMAState directly.  Default length = 10.

def _ema_length(params: Dict[str, Any]) -> int:
    return _as_int(_param(params, "length", 10), "length")


def _ema_init(params: Dict[str, Any]) -> EMAState:
    return ema_make(_ema_length(params))


def _ema_update(
    state: EMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], EMAState]:
    val, state = ema_update_raw(state, bar["close"])
    return [val], state


def _ema_output_names(params: Dict[str, Any]) -> List[str]:
    return resolve_output_names([f"EMA_{_ema_length(params)}"], params)


def _ema_seed(series: Dict[str, Any], params: Dict[str, Any]) -> EMAState:
    """Reconstruct EMAState by replaying over the close series."""
    return replay_seed("ema", series, params)


EMA = StatefulIndicator(
    kind="ema",
    inputs=("close",),
    init=_ema_init,
    update=_ema_update,
    output_names=_ema_output_names,
)
STATEFUL_REGISTRY["ema"] = EMA
SEED_REGISTRY["ema"] = _ema_seed
