# -*- coding: utf-8 -*-
from numba import njit
from numpy import full, isfinite, isnan, nan, vstack, where
from pandas import DataFrame, Series

from market_state_ta.stateful._bands import BAND_LIMIT, OutputMode
from market_state_ta.stateful._calculator import MarketStateConfig
from market_state_ta.stateful._market_state import _ema_lengths, _mss_output_names
from market_state_ta.stateful._score import AdaptiveThresholds
from market_state_ta.utils import v_offset, v_series


# Score, aggregate and smooth every bar from start onwards.
@njit(cache=True)
def nb_market_state(slopes, neutral, double, use_double, start, alpha):
    m = slopes.shape[1]
    raw = full(m, nan)
    smoothed = full(m, nan)
    prev = nan

    for i in range(start, m):
        finite = True
        for k in range(3):
            if not isfinite(slopes[k, i]) or not isfinite(neutral[k, i]):
                finite = False
        if use_double and not isfinite(double[i]):
            finite = False
        # upstream broken: output NaN, keep smoother memory
        if not finite:
            continue

        total = 0
        for k in range(3):
            s = slopes[k, i]
            if k == 0 and use_double and s > double[i]:
                total += 2
            elif k == 0 and use_double and s < -double[i]:
                total -= 2
            elif s > neutral[k, i]:
                total += 1
            elif s < -neutral[k, i]:
                total -= 1

        raw[i] = total
        if isnan(prev):
            prev = float(total)
        else:
            prev = alpha * total + (1.0 - alpha) * prev
        smoothed[i] = prev

    return raw, smoothed


def market_state(
    close: Series, mini: int = None, fast: int = None, slow: int = None,
    period_mini: int = None, period_fast: int = None, period_slow: int = None,
    lookback: int = None, smoothing: int = None,
    neutral_ratio: float = None, double_ratio: float = None,
    double_enabled: bool = None, thresholds: str = None,
    neutral: float = None, double: float = None, output: str = None,
    offset: int = None, **kwargs
):
    """Market State Score (MSS)

    Scores the slopes of three close-price EMAs against thresholds
    scaled by each slope's recent range, sums the three tier scores
    into a raw state in [-4, 4], smooths it with an EMA and routes the
    result into a bullish, bearish or neutral column.

    Parameters:
        close (Series): ```close``` Series
        mini (int): Mini EMA length. Default: ```8```
        fast (int): Fast EMA length. Default: ```50```
        slow (int): Slow EMA length. Default: ```200```
        period_mini (int): Mini slope period. Default: ```8```
        period_fast (int): Fast slope period. Default: ```20```
        period_slow (int): Slow slope period. Default: ```100```
        lookback (int): Slope range window. Default: ```2000```
        smoothing (int): Smoother length. Default: ```5```
        neutral_ratio (float): Neutral threshold / range. Default: ```0.05```
        double_ratio (float): Mini double threshold / range. Default: ```0.3```
        double_enabled (bool): Mini tier may score ±2. Default: ```True```
        thresholds (str): ```"adaptive"``` or ```"fixed"```. Default: ```"adaptive"```
        neutral (float): Fixed neutral threshold. Default: ```None```
        double (float): Fixed double threshold. Default: ```None```
        output (str): ```"three"``` or ```"single"```. Default: ```"three"```
        offset (int): Post shift. Default: ```0```

    Other Parameters:
        fillna (value): ```pd.DataFrame.fillna(value)```
        prefix, suffix (str): Column name affixes. Default: ```None```
        col_names (tuple): Replacement column names. Default: ```None```

    Returns:
        (DataFrame): 3 columns, or 1 column when ```output="single"```

    Note: Bands
        ```>= 2``` is bullish, ```<= -2``` is bearish, anything between
        is neutral. Inactive band columns are ```NaN```.

    Warning:
        Rows before the largest slope period are ```NaN```.
    """
    # Validate
    params = {
        "mini": mini, "fast": fast, "slow": slow,
        "period_mini": period_mini, "period_fast": period_fast,
        "period_slow": period_slow, "lookback": lookback,
        "smoothing": smoothing, "neutral_ratio": neutral_ratio,
        "double_ratio": double_ratio, "double_enabled": double_enabled,
        "thresholds": thresholds, "neutral": neutral, "double": double,
        "output": output,
    }
    config = MarketStateConfig.from_params(params)
    ema_lengths = _ema_lengths(params)
    names = _mss_output_names({**params, **kwargs})
    close = v_series(close, config.max_period + 1)
    if close is None:
        return

    offset = v_offset(offset)

    # Calculation
    slopes, neutrals = [], []
    double_th = full(close.size, nan)
    for k, (length, period) in enumerate(zip(ema_lengths, config.periods)):
        ema = close.ewm(span=length, adjust=False).mean()
        slope = (ema - ema.shift(period)) / period
        slopes.append(slope.to_numpy())

        th = config.thresholds
        if isinstance(th, AdaptiveThresholds):
            window = slope.rolling(th.lookback + 1, min_periods=1)
            slope_range = (window.max() - window.min()).to_numpy()
            neutrals.append(slope_range * th.neutral_ratio)
            if k == 0:
                double_th = slope_range * th.double_ratio
        else:
            neutrals.append(full(close.size, th.neutral))
            if k == 0 and th.double is not None:
                double_th = full(close.size, th.double)

    use_double = config.double_enabled and (
        isinstance(config.thresholds, AdaptiveThresholds)
        or config.thresholds.double is not None
    )
    alpha = 2.0 / (config.smoothing + 1.0)
    _, smoothed = nb_market_state(
        vstack(slopes), vstack(neutrals), double_th,
        use_double, config.max_period, alpha
    )

    # Name and Category
    _props = f"_{ema_lengths[0]}_{ema_lengths[1]}_{ema_lengths[2]}"
    if config.output is OutputMode.SINGLE_CHANNEL:
        values = [smoothed]
    else:
        bull = smoothed >= BAND_LIMIT
        bear = smoothed <= -BAND_LIMIT
        values = [
            where(bull, smoothed, nan),
            where(bear, smoothed, nan),
            where(bull | bear, nan, smoothed),
        ]
    df = DataFrame(dict(zip(names, values)), index=close.index)

    # Offset
    if offset != 0:
        df = df.shift(offset)

    # Fill
    if "fillna" in kwargs:
        df.fillna(kwargs["fillna"], inplace=True)

    df.name = f"MSS{_props}"
    df.category = "trend"

    return df
