# -*- coding: utf-8 -*-
"""Market state calculator – one instance per stream.

Per update:
  slope x3  ->  slope range x3 (adaptive only)  ->  tier score x3
  ->  aggregate  ->  smoother  ->  band

The calculator only reads its three value providers.  It owns the
smoother memory and the per-tier range windows; ``reset()`` clears
both when the host restarts the stream (symbol or timeframe change).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import logging
import warnings

from ._base import NAN, EMAState, _as_float, _as_int, _is_finite, _param, ema_make, ema_reset, ema_update_raw
from ._bands import Band, OutputMode, classify
from ._provider import ValueProvider
from ._score import (
    DOUBLE_RATIO,
    NEUTRAL_RATIO,
    AdaptiveThresholds,
    FixedThresholds,
    ThresholdMode,
    ThresholdSet,
    aggregate,
    tier_score,
)
from ._slope import SlopeRangeWindow, max_slope_offset, slope, slope_range
from ..exceptions import InsufficientHistory, InvalidConfiguration

logger = logging.getLogger(__name__)

RANGE_METHODS = ("window", "scan")


class Phase(str, Enum):
    WARMING_UP = "warming_up"
    ACTIVE = "active"


@dataclass(frozen=True)
class MarketStateConfig:
    """Slope periods, smoothing and the threshold / output modes.

    The EMA lengths feeding the providers live with the host.
    """
    period_mini: int = 8
    period_fast: int = 20
    period_slow: int = 100
    smoothing: int = 5
    double_enabled: bool = True
    thresholds: ThresholdMode = field(default_factory=AdaptiveThresholds)
    output: OutputMode = OutputMode.THREE_CHANNEL
    range_method: str = "window"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        for name in ("period_mini", "period_fast", "period_slow", "smoothing"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidConfiguration(f"'{name}' must be a positive integer, got {value!r}")
        if not isinstance(self.thresholds, (FixedThresholds, AdaptiveThresholds)):
            raise InvalidConfiguration(f"unknown threshold mode {self.thresholds!r}")
        self.thresholds.validate()
        if not isinstance(self.output, OutputMode):
            raise InvalidConfiguration(f"unknown output mode {self.output!r}")
        if self.range_method not in RANGE_METHODS:
            raise InvalidConfiguration(
                f"range_method must be one of {RANGE_METHODS}, got {self.range_method!r}"
            )

    @property
    def periods(self) -> Tuple[int, int, int]:
        return self.period_mini, self.period_fast, self.period_slow

    @property
    def max_period(self) -> int:
        return max(self.periods)

    @property
    def adaptive(self) -> bool:
        return isinstance(self.thresholds, AdaptiveThresholds)

    @property
    def history_needed(self) -> int:
        """Bars a provider must retain for a full, unclipped update."""
        lookback = self.thresholds.lookback if self.adaptive else 0
        return lookback + self.max_period + 1

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "MarketStateConfig":
        """Build from a flat params dict (``None`` means default)."""
        mode = str(_param(params, "thresholds", "adaptive")).lower()
        if mode == "adaptive":
            thresholds: ThresholdMode = AdaptiveThresholds(
                lookback=_as_int(_param(params, "lookback", 2000), "lookback"),
                neutral_ratio=_as_float(_param(params, "neutral_ratio", NEUTRAL_RATIO), "neutral_ratio"),
                double_ratio=_as_float(_param(params, "double_ratio", DOUBLE_RATIO), "double_ratio"),
            )
        elif mode == "fixed":
            if params.get("neutral") is None:
                raise InvalidConfiguration("fixed thresholds need a 'neutral' value")
            double = params.get("double")
            thresholds = FixedThresholds(
                neutral=_as_float(params["neutral"], "neutral"),
                double=None if double is None else _as_float(double, "double"),
            )
        else:
            raise InvalidConfiguration(f"unknown threshold mode {mode!r}")

        output = str(_param(params, "output", OutputMode.THREE_CHANNEL.value)).lower()
        try:
            output_mode = OutputMode(output)
        except ValueError:
            raise InvalidConfiguration(f"unknown output mode {output!r}") from None

        return cls(
            period_mini=_as_int(_param(params, "period_mini", 8), "period_mini"),
            period_fast=_as_int(_param(params, "period_fast", 20), "period_fast"),
            period_slow=_as_int(_param(params, "period_slow", 100), "period_slow"),
            smoothing=_as_int(_param(params, "smoothing", 5), "smoothing"),
            double_enabled=bool(_param(params, "double_enabled", True)),
            thresholds=thresholds,
            output=output_mode,
            range_method=str(_param(params, "range_method", "window")).lower(),
        )


@dataclass(frozen=True)
class MarketStateResult:
    """Output of one active update.

    Exactly one of bullish / bearish / neutral holds the smoothed value,
    the others are None.  ``raw`` is NaN and ``scores`` None when an
    upstream value was not finite.
    """
    raw: float
    smoothed: float
    band: Band
    scores: Optional[Tuple[int, int, int]]
    output: OutputMode = OutputMode.THREE_CHANNEL

    @property
    def bullish(self) -> Optional[float]:
        return self.smoothed if self.band is Band.BULLISH else None

    @property
    def bearish(self) -> Optional[float]:
        return self.smoothed if self.band is Band.BEARISH else None

    @property
    def neutral(self) -> Optional[float]:
        return self.smoothed if self.band is Band.NEUTRAL else None

    def values(self) -> List[Optional[float]]:
        if self.output is OutputMode.SINGLE_CHANNEL:
            return [self.smoothed]
        return [self.bullish, self.bearish, self.neutral]

    def as_dict(self) -> Dict[str, Optional[float]]:
        if self.output is OutputMode.SINGLE_CHANNEL:
            return {"state": self.smoothed}
        return {band.value: value for band, value in zip(Band, self.values())}


@dataclass
class _Tier:
    name: str
    period: int
    provider: ValueProvider
    double: bool
    window: Optional[SlopeRangeWindow] = None
    synced: bool = False

    def refill(self) -> None:
        """Rebuild the window from the history the provider already holds."""
        self.window.reset()
        last = min(self.window.size - 1, max_slope_offset(self.provider, self.period))
        for off in range(last, -1, -1):
            self.window.push(slope(self.provider, self.period, off))
        self.synced = True


class MarketStateCalculator:
    """Per-stream pipeline driven by one ``on_bar_update()`` per bar.

    With ``range_method="window"`` the range windows are rebuilt from
    the providers on the first update (and after ``reset()``), then fed
    one slope per update, so every later bar must be delivered.
    """

    def __init__(
        self,
        config: MarketStateConfig,
        mini: ValueProvider,
        fast: ValueProvider,
        slow: ValueProvider,
    ) -> None:
        config.validate()
        self.config = config
        use_window = config.adaptive and config.range_method == "window"
        lookback = config.thresholds.lookback if config.adaptive else 0
        self._tiers = tuple(
            _Tier(
                name=name,
                period=period,
                provider=provider,
                double=double,
                window=SlopeRangeWindow(lookback) if use_window else None,
            )
            for name, period, provider, double in (
                ("mini", config.period_mini, mini, config.double_enabled),
                ("fast", config.period_fast, fast, False),
                ("slow", config.period_slow, slow, False),
            )
        )
        self._smoother: EMAState = ema_make(config.smoothing)
        self.phase = Phase.WARMING_UP
        self.warned = False

    @property
    def smoothed(self) -> Optional[float]:
        """Smoother memory; None until the first active update."""
        return self._smoother.last

    def reset(self) -> None:
        ema_reset(self._smoother)
        for tier in self._tiers:
            if tier.window is not None:
                tier.window.reset()
                tier.synced = False
        self.phase = Phase.WARMING_UP
        self.warned = False
        logger.debug("market state stream reset")

    def available(self) -> int:
        return min(len(tier.provider) for tier in self._tiers)

    def on_bar_update(self) -> Optional[MarketStateResult]:
        """Run one update; None while warming up."""
        try:
            self._feed_windows()
            if self.available() <= self.config.max_period:
                return None
            slopes, thresholds = self._measure()
        except InsufficientHistory as ex:
            logger.debug("update skipped: %s", ex)
            for tier in self._tiers:
                tier.synced = False
            return None

        if self.phase is Phase.WARMING_UP:
            self.phase = Phase.ACTIVE
            logger.debug("market state active after %d bars", self.available())

        finite = all(_is_finite(s) for s in slopes) and all(
            _is_finite(t.neutral) and (t.double is None or _is_finite(t.double))
            for t in thresholds
        )
        if finite:
            scores = tuple(
                tier_score(s, t.neutral, t.double) for s, t in zip(slopes, thresholds)
            )
            raw = float(aggregate(*scores))
            smoothed, self._smoother = ema_update_raw(self._smoother, raw)
        else:
            if not self.warned:
                warnings.warn(
                    "Non-finite slope or threshold from an upstream value provider; "
                    "market state is NaN for this bar.",
                    RuntimeWarning,
                    stacklevel=2,
                )
                self.warned = True
            scores = None
            raw = smoothed = NAN

        return MarketStateResult(
            raw=raw,
            smoothed=smoothed,
            band=classify(smoothed),
            scores=scores,
            output=self.config.output,
        )

    def _measure(self) -> Tuple[List[float], List[ThresholdSet]]:
        cfg = self.config
        slopes = [slope(t.provider, t.period) for t in self._tiers]
        if isinstance(cfg.thresholds, FixedThresholds):
            fixed = cfg.thresholds
            thresholds = [
                ThresholdSet(fixed.neutral, fixed.double if t.double else None)
                for t in self._tiers
            ]
            return slopes, thresholds

        adaptive = cfg.thresholds
        thresholds = []
        for t in self._tiers:
            if t.window is not None:
                rng = t.window.range()
            else:
                rng = slope_range(t.provider, t.period, adaptive.lookback)
            thresholds.append(ThresholdSet.from_range(
                rng, adaptive.neutral_ratio, adaptive.double_ratio if t.double else None,
            ))
        return slopes, thresholds

    def _feed_windows(self) -> None:
        for tier in self._tiers:
            if tier.window is None:
                continue
            if not tier.synced:
                tier.refill()
            elif len(tier.provider) > tier.period:
                tier.window.push(slope(tier.provider, tier.period))
