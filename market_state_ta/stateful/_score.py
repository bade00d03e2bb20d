# -*- coding: utf-8 -*-
"""Tier scoring: threshold modes, per-tier score, aggregate.

Scores use strict comparisons only, so a slope sitting exactly on a
threshold falls into the lower-magnitude band.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..exceptions import InvalidConfiguration

NEUTRAL_RATIO = 0.05
DOUBLE_RATIO = 0.3


@dataclass(frozen=True)
class FixedThresholds:
    """Constant slope thresholds shared by every tier.

    *double* applies to the mini tier only; None disables the ±2 band.
    """
    neutral: float
    double: Optional[float] = None

    def validate(self) -> None:
        if not self.neutral >= 0.0:
            raise InvalidConfiguration(f"neutral threshold must be >= 0, got {self.neutral}")
        if self.double is not None and not self.double >= 0.0:
            raise InvalidConfiguration(f"double threshold must be >= 0, got {self.double}")


@dataclass(frozen=True)
class AdaptiveThresholds:
    """Thresholds proportional to each tier's recent slope range."""
    lookback: int = 2000
    neutral_ratio: float = NEUTRAL_RATIO
    double_ratio: float = DOUBLE_RATIO

    def validate(self) -> None:
        if isinstance(self.lookback, bool) or not isinstance(self.lookback, int) or self.lookback <= 0:
            raise InvalidConfiguration(f"lookback must be positive, got {self.lookback}")
        if not self.neutral_ratio >= 0.0:
            raise InvalidConfiguration(f"neutral_ratio must be >= 0, got {self.neutral_ratio}")
        if not self.double_ratio >= 0.0:
            raise InvalidConfiguration(f"double_ratio must be >= 0, got {self.double_ratio}")


ThresholdMode = Union[FixedThresholds, AdaptiveThresholds]


@dataclass(frozen=True)
class ThresholdSet:
    neutral: float
    double: Optional[float] = None

    @classmethod
    def from_range(cls, slope_range: float, neutral_ratio: float,
                   double_ratio: Optional[float] = None) -> "ThresholdSet":
        double = None if double_ratio is None else slope_range * double_ratio
        return cls(neutral=slope_range * neutral_ratio, double=double)


def tier_score(slope: float, neutral: float, double: Optional[float] = None) -> int:
    """Map *slope* to {-2..2} (with *double*) or {-1, 0, 1}."""
    if double is not None:
        if slope > double:
            return 2
        if slope < -double:
            return -2
    if slope > neutral:
        return 1
    if slope < -neutral:
        return -1
    return 0


def aggregate(mini: int, fast: int, slow: int) -> int:
    """Raw market state, always within [-4, 4]."""
    return mini + fast + slow
