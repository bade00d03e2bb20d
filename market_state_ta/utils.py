# -*- coding: utf-8 -*-
from typing import Optional

from pandas import Series

__all__ = ["v_offset", "v_series"]


def v_offset(var: Optional[int]) -> int:
    """Post shift; 0 when missing."""
    return int(var) if isinstance(var, int) and not isinstance(var, bool) else 0


def v_series(series: Series, length: Optional[int] = None) -> Optional[Series]:
    """Returns series as float if it's a Series with at least length rows."""
    if series is None or not isinstance(series, Series):
        return None
    length = length if isinstance(length, int) and length > 0 else 0
    if series.size < length:
        return None
    return series.astype(float)
