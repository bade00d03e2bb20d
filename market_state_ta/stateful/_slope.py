# -*- coding: utf-8 -*-
"""Slope extraction and adaptive slope-range estimation.

slope(series, period, offset)
    (series[offset] - series[offset + period]) / period

slope_range(series, period, lookback)
    max(slope) - min(slope) over offsets 0..lookback, clipped to the
    offsets the provider can serve.  Extrema are seeded from the first
    finite slope of the same series, so a window whose slopes all share
    one sign yields max - min rather than max - 0.

SlopeRangeWindow
    Same quantity maintained incrementally: one slope pushed per bar,
    monotonic deques for the running max/min, O(1) amortised.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Optional, Tuple

import math

from ._base import NAN
from ._provider import ValueProvider
from ..exceptions import InsufficientHistory, InvalidConfiguration


def slope(series: ValueProvider, period: int, offset: int = 0) -> float:
    """Average per-bar change of *series* over *period* bars, ending *offset* bars back."""
    return (series.get(offset) - series.get(offset + period)) / period


def max_slope_offset(series: ValueProvider, period: int) -> int:
    """Largest offset at which ``slope`` can be evaluated, or -1."""
    return len(series) - 1 - period


def slope_range(series: ValueProvider, period: int, lookback: int) -> float:
    """Full rescan of the lookback window.  O(lookback) per call."""
    last = min(lookback, max_slope_offset(series, period))
    if last < 0:
        raise InsufficientHistory(period, len(series))

    highest = lowest = NAN
    for i in range(last + 1):
        s = slope(series, period, i)
        if math.isnan(s):
            continue
        if math.isnan(highest):
            # seed from this series' own first slope
            highest = lowest = s
            continue
        if s > highest:
            highest = s
        if s < lowest:
            lowest = s
    return highest - lowest


class SlopeRangeWindow:
    """Sliding max/min over the latest ``lookback + 1`` slopes.

    NaN slopes occupy a slot in the window but never become an
    extremum, matching ``slope_range`` and ``pandas.Series.rolling``.
    """

    __slots__ = ("size", "_count", "_maxq", "_minq")

    def __init__(self, lookback: int) -> None:
        if lookback < 0:
            raise InvalidConfiguration(f"lookback must be non-negative, got {lookback}")
        self.size = lookback + 1
        self._count = 0
        self._maxq: Deque[Tuple[int, float]] = deque()
        self._minq: Deque[Tuple[int, float]] = deque()

    def push(self, value: float) -> None:
        idx = self._count
        self._count += 1
        expired = idx - self.size
        while self._maxq and self._maxq[0][0] <= expired:
            self._maxq.popleft()
        while self._minq and self._minq[0][0] <= expired:
            self._minq.popleft()
        if math.isnan(value):
            return
        while self._maxq and self._maxq[-1][1] <= value:
            self._maxq.pop()
        self._maxq.append((idx, value))
        while self._minq and self._minq[-1][1] >= value:
            self._minq.pop()
        self._minq.append((idx, value))

    @property
    def highest(self) -> Optional[float]:
        return self._maxq[0][1] if self._maxq else None

    @property
    def lowest(self) -> Optional[float]:
        return self._minq[0][1] if self._minq else None

    def range(self) -> float:
        """``highest - lowest``; NaN when the window holds no finite slope."""
        if not self._maxq:
            return NAN
        return self._maxq[0][1] - self._minq[0][1]

    def reset(self) -> None:
        self._count = 0
        self._maxq.clear()
        self._minq.clear()

    def __len__(self) -> int:
        return min(self._count, self.size)
