"""
Indicator Engine

Pure indicator functions over numeric sequences. Every result is aligned to the
tail of its input: the warm-up period is dropped rather than padded, so a result
has one value per input index once enough samples exist. Use align_to_input()
when index alignment with the input is needed; missing warm-up values are None.

Insufficient samples yield an empty list. Nonsensical parameters raise
InvalidParameterError.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

import pandas as pd

from ta_errors import InvalidParameterError


T = TypeVar("T")


@dataclass(frozen=True)
class MACDPoint:
    macd: float
    signal: float | None = None
    histogram: float | None = None

    def as_dict(self) -> dict[str, Any]:
        return {"MACD": self.macd, "signal": self.signal, "histogram": self.histogram}


@dataclass(frozen=True)
class BollingerPoint:
    middle: float
    upper: float
    lower: float
    pb: float | None = None

    def as_dict(self) -> dict[str, Any]:
        return {"middle": self.middle, "upper": self.upper, "lower": self.lower, "pb": self.pb}


def _check_period(period: int, name: str = "period") -> None:
    if period <= 0:
        raise InvalidParameterError(f"{name} must be a positive integer, got {period}")


def align_to_input(result: Sequence[T], length: int) -> list[T | None]:
    """Front-pad a tail-aligned result with None so it lines up with an input of `length` items."""
    if len(result) > length:
        raise InvalidParameterError(f"result of length {len(result)} cannot align to input of length {length}")
    return [None] * (length - len(result)) + list(result)


def last_value(result: Sequence[T]) -> T | None:
    """Most recent value of an indicator result, or None when the indicator is unknown."""
    return result[-1] if result else None


def sma(values: Sequence[float], period: int) -> list[float]:
    """Simple moving average of the trailing `period` window."""
    _check_period(period)
    if len(values) < period:
        return []
    series = pd.Series(values, dtype=float)
    return series.rolling(window=period).mean().iloc[period - 1:].tolist()


def ema(values: Sequence[float], period: int) -> list[float]:
    """Exponential moving average (k = 2/(period+1)) seeded with the SMA of the first window."""
    _check_period(period)
    if len(values) < period:
        return []
    k = 2 / (period + 1)
    result = [sum(values[:period]) / period]
    for price in values[period:]:
        result.append((price - result[-1]) * k + result[-1])
    return result


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0 and avg_gain == 0:
        return 50.0  # flat prices: neither side has momentum
    if avg_loss == 0:
        return 100.0
    if avg_gain == 0:
        return 0.0
    return 100 - (100 / (1 + avg_gain / avg_loss))


def rsi(values: Sequence[float], period: int = 14) -> list[float]:
    """
    Relative Strength Index with Wilder smoothing.

    Average gain/loss are seeded with the simple mean of the first `period`
    differences, then smoothed as (prev * (period - 1) + current) / period.

    Returns:
        len(values) - period values in [0, 100], or [] when len(values) <= period
    """
    _check_period(period)
    if len(values) <= period:
        return []

    gains = []
    losses = []
    for i in range(1, len(values)):
        delta = values[i] - values[i - 1]
        gains.append(max(delta, 0.0))
        losses.append(max(-delta, 0.0))

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period
    result = [_rsi_value(avg_gain, avg_loss)]
    for i in range(period, len(gains)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        result.append(_rsi_value(avg_gain, avg_loss))
    return result


def macd(values: Sequence[float], fast: int = 12, slow: int = 26, signal: int = 9) -> list[MACDPoint]:
    """
    Moving Average Convergence Divergence.

    One point per index from the first index where the slow EMA is defined.
    Points before the signal line warms up have signal and histogram set to None.
    """
    _check_period(fast, "fast period")
    _check_period(slow, "slow period")
    _check_period(signal, "signal period")
    if fast >= slow:
        raise InvalidParameterError(f"fast period ({fast}) must be shorter than slow period ({slow})")

    slow_ema = ema(values, slow)
    if not slow_ema:
        return []
    fast_ema = ema(values, fast)[-len(slow_ema):]

    macd_line = [f - s for f, s in zip(fast_ema, slow_ema)]
    signal_line = ema(macd_line, signal)
    warmup = len(macd_line) - len(signal_line)

    points = [MACDPoint(macd=m) for m in macd_line[:warmup]]
    for m, s in zip(macd_line[warmup:], signal_line):
        points.append(MACDPoint(macd=m, signal=s, histogram=m - s))
    return points


def bollinger_bands(values: Sequence[float], period: int = 20, std_dev: float = 2) -> list[BollingerPoint]:
    """
    Bollinger Bands: SMA middle band +/- std_dev population standard deviations.

    pb is the position of the price inside the bands (0 = lower, 1 = upper),
    None when the bands have zero width.
    """
    _check_period(period)
    if std_dev < 0:
        raise InvalidParameterError(f"std_dev must not be negative, got {std_dev}")
    if len(values) < period:
        return []

    series = pd.Series(values, dtype=float)
    middle = series.rolling(window=period).mean()
    sigma = series.rolling(window=period).std(ddof=0)

    points = []
    for i in range(period - 1, len(series)):
        mid = float(middle.iloc[i])
        upper = mid + std_dev * float(sigma.iloc[i])
        lower = mid - std_dev * float(sigma.iloc[i])
        width = upper - lower
        pb = (float(series.iloc[i]) - lower) / width if width else None
        points.append(BollingerPoint(middle=mid, upper=upper, lower=lower, pb=pb))
    return points


def true_range(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float]) -> list[float]:
    """Per-bar true range from the second bar onward."""
    return [
        max(highs[i] - lows[i], abs(highs[i] - closes[i - 1]), abs(lows[i] - closes[i - 1]))
        for i in range(1, len(closes))
    ]


def atr(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float], period: int = 14) -> list[float]:
    """
    Average True Range, Wilder smoothed and seeded with the mean of the first `period` true ranges.

    Returns:
        len(closes) - period values, or [] when there are not more than `period` bars
    """
    _check_period(period)
    if not len(highs) == len(lows) == len(closes):
        raise InvalidParameterError("highs, lows and closes must have the same length")
    if len(closes) <= period:
        return []

    ranges = true_range(highs, lows, closes)
    result = [sum(ranges[:period]) / period]
    for tr in ranges[period:]:
        result.append((result[-1] * (period - 1) + tr) / period)
    return result


def vwap(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float], volumes: Sequence[float]) -> list[float | None]:
    """
    Volume Weighted Average Price as one running series over the whole window.

    There is no session reset: pass exactly the window VWAP should cover.
    Values are None while cumulative volume is still zero.
    """
    if not len(highs) == len(lows) == len(closes) == len(volumes):
        raise InvalidParameterError("highs, lows, closes and volumes must have the same length")
    if not closes:
        return []

    df = pd.DataFrame({"high": highs, "low": lows, "close": closes, "volume": volumes}, dtype=float)
    typical = (df["high"] + df["low"] + df["close"]) / 3
    cum_pv = (typical * df["volume"]).cumsum(skipna=False)
    cum_volume = df["volume"].cumsum(skipna=False)

    return [
        None if volume == 0 else float(pv / volume)
        for pv, volume in zip(cum_pv, cum_volume)
    ]


def is_defined(value: float | None) -> bool:
    """True for a real number; False for None or NaN."""
    return value is not None and not math.isnan(value)
