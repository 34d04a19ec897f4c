"""
Price statistics over a candle window.

Returns are per-bar percentage changes of the close. The Sharpe ratio is
annualized with a fixed sqrt(252) factor whatever the candle interval, so it is
only comparable between windows of the same interval.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import pandas as pd

import constants as const
from candles import Candle, closes


@dataclass(frozen=True)
class PriceStatistics:
    avg_return: float | None = None
    std_dev: float | None = None
    sharpe_ratio: float | None = None
    max_return: float | None = None
    min_return: float | None = None
    win_rate: float | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "avgReturn": self.avg_return,
            "stdDev": self.std_dev,
            "sharpeRatio": self.sharpe_ratio,
            "maxReturn": self.max_return,
            "minReturn": self.min_return,
            "winRate": self.win_rate,
        }


def percentage_returns(prices: Sequence[float]) -> pd.Series:
    """Per-bar returns in percent: (p[i] - p[i-1]) / p[i-1] * 100 for i >= 1."""
    series = pd.Series(prices, dtype=float)
    return (series.diff() / series.shift(1) * 100).iloc[1:].reset_index(drop=True)


def sharpe_ratio(avg_return: float, std_dev: float) -> float | None:
    """Annualized Sharpe ratio; None when the return deviation is zero or not finite."""
    if std_dev == 0 or not math.isfinite(std_dev):
        return None
    return avg_return / std_dev * math.sqrt(const.TRADING_DAYS_PER_YEAR)


def calculate_price_stats(candles: Sequence[Candle]) -> PriceStatistics:
    """
    Compute return statistics for a candle window.

    NaN closes propagate into every field except win rate. With fewer than two
    candles there are no returns and every field is None.
    """
    returns = percentage_returns(closes(list(candles)))
    if returns.empty:
        return PriceStatistics()

    avg_return = float(returns.mean(skipna=False))
    std_dev = float(returns.std(ddof=0, skipna=False))

    return PriceStatistics(
        avg_return=avg_return,
        std_dev=std_dev,
        sharpe_ratio=sharpe_ratio(avg_return, std_dev),
        max_return=float(returns.max(skipna=False)),
        min_return=float(returns.min(skipna=False)),
        win_rate=float((returns > 0).sum() / len(returns) * 100),
    )
