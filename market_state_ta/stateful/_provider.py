# -*- coding: utf-8 -*-
"""Value providers: offset-indexed views of an externally owned series.

Offset 0 is the current bar, larger offsets reach further into the
past.  A provider that cannot serve an offset raises
``InsufficientHistory``.
"""
from __future__ import annotations

from collections import deque
from typing import Any, Deque, Iterable, Optional, Protocol, runtime_checkable

import numpy as np

from ..exceptions import InsufficientHistory, InvalidConfiguration


@runtime_checkable
class ValueProvider(Protocol):
    """Anything the core may read slope inputs from."""

    def get(self, offset: int) -> float: ...

    def __len__(self) -> int: ...


class HistoryBuffer:
    """Bounded history fed one value per bar.

    Holds at most *maxlen* values; ``len()`` is the number of bars the
    buffer can serve, capped at *maxlen*.
    """

    __slots__ = ("_values",)

    def __init__(self, maxlen: int, values: Optional[Iterable[float]] = None) -> None:
        if maxlen <= 0:
            raise InvalidConfiguration(f"HistoryBuffer maxlen must be positive, got {maxlen}")
        self._values: Deque[float] = deque(maxlen=maxlen)
        if values is not None:
            for v in values:
                self.append(v)

    @property
    def maxlen(self) -> int:
        return self._values.maxlen  # type: ignore[return-value]

    def append(self, value: float) -> None:
        self._values.append(float(value))

    def get(self, offset: int) -> float:
        n = len(self._values)
        if offset < 0 or offset >= n:
            raise InsufficientHistory(offset, n)
        return self._values[n - 1 - offset]

    def clear(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"HistoryBuffer(len={len(self)}, maxlen={self.maxlen})"


class SeriesProvider:
    """Read-only provider over a pandas Series or 1-d array.

    *position* is the integer location of the current bar; it is moved
    forward with ``advance()`` as the host replays history.
    """

    __slots__ = ("_values", "position")

    def __init__(self, values: Any, position: int = 0) -> None:
        self._values = np.asarray(values, dtype=float)
        if self._values.ndim != 1:
            raise InvalidConfiguration("SeriesProvider expects a 1-d series")
        self.position = position

    def advance(self, bars: int = 1) -> None:
        self.position += bars

    def get(self, offset: int) -> float:
        idx = self.position - offset
        if offset < 0 or idx < 0 or idx >= self._values.size:
            raise InsufficientHistory(offset, len(self))
        return float(self._values[idx])

    def __len__(self) -> int:
        return max(0, min(self.position + 1, self._values.size))
