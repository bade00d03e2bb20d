# -*- coding: utf-8 -*-
"""market-state-ta stateful – shared base: state classes, helpers, registries.

Every stateful module (``_overlap``, ``_market_state``) imports from here
and populates the registries at load time.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import math

from ..exceptions import InvalidConfiguration

NAN = float("nan")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _is_finite(x: Any) -> bool:
    """True when *x* is a real number that is neither NaN nor ±inf."""
    return x is not None and math.isfinite(x)


def _param(params: Dict[str, Any], key: str, default: Any) -> Any:
    """Pull *key* from *params*; treat None as missing → default."""
    value = params.get(key, default)
    return default if value is None else value


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise InvalidConfiguration(f"'{key}' must be an integer, got {value!r}")
    try:
        as_float = float(value)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"'{key}' must be an integer, got {value!r}") from None
    if not as_float.is_integer():
        raise InvalidConfiguration(f"'{key}' must be an integer, got {value!r}")
    return int(as_float)


def _as_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"'{key}' must be a number, got {value!r}") from None


# ---------------------------------------------------------------------------
# Shared state classes
# ---------------------------------------------------------------------------

@dataclass
class EMAState:
    """Single-pole exponential filter, alpha = 2 / (length + 1).

    The first sample passes through unchanged; ``last`` is None until
    then.  Used by the market state smoother and the host-side EMAs.
    """
    length: int
    alpha: float
    last: Optional[float] = None


# ---------------------------------------------------------------------------
# Low-level update helpers
# ---------------------------------------------------------------------------

def ema_make(length: int) -> EMAState:
    """EMA state – alpha = 2 / (length + 1)."""
    if length <= 0:
        raise InvalidConfiguration(f"EMA length must be positive, got {length}")
    return EMAState(length=length, alpha=2.0 / (length + 1.0))


def ema_update_raw(state: EMAState, x: float) -> Tuple[float, EMAState]:
    """Single-step EMA update.  Returns (value, state)."""
    if state.last is None:
        state.last = x
    else:
        state.last = state.alpha * x + (1.0 - state.alpha) * state.last
    return state.last, state


def ema_reset(state: EMAState) -> EMAState:
    """Forget all memory; the next sample seeds the filter again."""
    state.last = None
    return state


# ---------------------------------------------------------------------------
# Indicator descriptor & registries  (populated by stateful modules)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatefulIndicator:
    """Immutable descriptor for a single stateful indicator."""
    kind:         str
    inputs:       Tuple[str, ...]
    init:         Callable[[Dict[str, Any]], Any]
    update:       Callable[[Any, Dict[str, Any], Dict[str, Any]],
                           Tuple[List[Optional[float]], Any]]
    output_names: Callable[[Dict[str, Any]], List[str]]


# Populated by stateful modules at import time.  Descriptors only: every
# stream owns the state object returned by ``init``.
STATEFUL_REGISTRY:  Dict[str, StatefulIndicator] = {}
SEED_REGISTRY:      Dict[str, Callable] = {}            # kind -> seed_fn(inputs, params) -> State


def stateful_supported_kinds() -> List[str]:
    """Return sorted list of registered indicator kinds."""
    return sorted(STATEFUL_REGISTRY.keys())


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------

def replay_seed(kind: str, inputs: Dict[str, Any], params: Dict[str, Any]) -> Any:
    """Rebuild a stream's state by replaying *inputs* bar by bar.

    *inputs* maps each of the indicator's input names to a Series.  Bars
    where any input is NaN are skipped, as a host would never deliver
    them.  The returned state continues exactly like an uninterrupted
    stream.
    """
    import pandas as pd          # lazy – pandas not required at module load
    indicator = STATEFUL_REGISTRY.get(kind)
    if indicator is None:
        raise InvalidConfiguration(
            f"unknown stateful indicator {kind!r}, expected one of {stateful_supported_kinds()}"
        )
    missing = [name for name in indicator.inputs if name not in inputs]
    if missing:
        raise InvalidConfiguration(f"'{kind}' seed is missing inputs {missing}")

    state = indicator.init(params)
    frame = pd.DataFrame({name: inputs[name] for name in indicator.inputs}).astype(float).dropna()
    for row in frame.itertuples(index=False):
        bar = {name: float(v) for name, v in zip(indicator.inputs, row)}
        _, state = indicator.update(state, bar, params)
    return state


# ---------------------------------------------------------------------------
# Output names
# ---------------------------------------------------------------------------

def resolve_output_names(base_names: List[str], params: Dict[str, Any]) -> List[str]:
    """Column names after the ``prefix`` / ``suffix`` / ``col_names`` params.

    ``col_names`` replaces the names outright and must name every output.
    """
    col_names = params.get("col_names")
    if col_names is not None:
        if isinstance(col_names, str):
            col_names = (col_names,)
        if len(col_names) != len(base_names):
            raise InvalidConfiguration(
                f"col_names needs {len(base_names)} names, got {len(col_names)}"
            )
        return [str(name) for name in col_names]

    delimiter = params.get("delimiter") or "_"
    prefix, suffix = params.get("prefix"), params.get("suffix")
    return [
        delimiter.join(str(part) for part in (prefix, name, suffix) if part)
        for name in base_names
    ]
