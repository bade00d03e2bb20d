# -*- coding: utf-8 -*-
"""Band classification and output modes."""
from __future__ import annotations

from enum import Enum

BAND_LIMIT = 2.0


class Band(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class OutputMode(str, Enum):
    """THREE_CHANNEL routes the value into one band; SINGLE_CHANNEL emits it alone."""
    THREE_CHANNEL = "three"
    SINGLE_CHANNEL = "single"


def classify(smoothed: float) -> Band:
    """±2 belong to the extreme bands; NaN falls through to NEUTRAL."""
    if smoothed >= BAND_LIMIT:
        return Band.BULLISH
    if smoothed <= -BAND_LIMIT:
        return Band.BEARISH
    return Band.NEUTRAL
