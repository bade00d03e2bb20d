# -*- coding: utf-8 -*-
"""Exception hierarchy for the market state score.

``InvalidConfiguration`` is fatal and raised before any update runs.
``InsufficientHistory`` is expected while a stream warms up; the
calculator catches it and skips the update.
"""
from __future__ import annotations


class MarketStateError(Exception):
    """Base class for all market state errors."""


class InvalidConfiguration(MarketStateError, ValueError):
    """Raised for non-positive periods, negative ratios or unknown modes."""


class InsufficientHistory(MarketStateError, LookupError):
    """Raised when a value provider cannot supply a requested offset."""

    def __init__(self, offset: int, available: int) -> None:
        self.offset = offset
        self.available = available
        super().__init__(
            f"offset {offset} requested but only {available} bar(s) available"
        )


__all__ = ["MarketStateError", "InvalidConfiguration", "InsufficientHistory"]
