"""
Comparison Aggregator

Runs the per-symbol analyses for 2-5 symbols and assembles one record per
symbol for the requested metric:

- performance: price, scaled average return, win rate, Sharpe ratio, plus a ranking by Sharpe
- volatility:  return deviation, ATR and ATR as percent of price, worst bar return
- correlation: per-symbol trend and RSI, plus the pairwise correlation of bar returns

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd

import constants as const
from candles import Candle, closes, highs, lows
from indicators import atr, last_value, rsi
from market_structure import detect_trend
from price_stats import calculate_price_stats, percentage_returns
from ta_errors import InvalidParameterError
from util import format_percent


logger = logging.getLogger(__name__)


def _performance(candles: Sequence[Candle]) -> dict[str, Any]:
    stats = calculate_price_stats(candles)
    # 24 bars of the requested interval, like change24h in market analysis
    return {
        "currentPrice": candles[-1].close if candles else None,
        "return24h": stats.avg_return * 24 if stats.avg_return is not None else None,
        "winRate": stats.win_rate,
        "sharpeRatio": stats.sharpe_ratio,
    }


def _volatility(candles: Sequence[Candle]) -> dict[str, Any]:
    stats = calculate_price_stats(candles)
    current_atr = last_value(atr(highs(candles), lows(candles), closes(candles), const.ATR_PERIOD))
    atr_percent = None
    if current_atr is not None and candles and candles[-1].close:
        atr_percent = current_atr / candles[-1].close * 100
    return {
        "stdDev": stats.std_dev,
        "atr": current_atr,
        "atrPercent": format_percent(atr_percent),
        "maxDrawdown": stats.min_return,
    }


def _momentum(candles: Sequence[Candle]) -> dict[str, Any]:
    prices = closes(candles)
    return {
        "trend": detect_trend(prices),
        "rsi": last_value(rsi(prices, const.RSI_PERIOD)),
    }


def rank_by_sharpe(records: Mapping[str, Mapping[str, Any]]) -> list[str]:
    """Symbols ordered by Sharpe ratio, best first. Undefined ratios go last; ties keep input order."""
    def sort_key(item: tuple[str, Mapping[str, Any]]) -> tuple[bool, float]:
        ratio = item[1].get("sharpeRatio")
        defined = ratio is not None and not math.isnan(ratio)
        return (not defined, -ratio if defined else 0.0)

    return [symbol for symbol, _ in sorted(records.items(), key=sort_key)]


def return_correlation(candles_by_symbol: Mapping[str, Sequence[Candle]]) -> dict[str, dict[str, float | None]]:
    """
    Pearson correlation of bar returns for every symbol pair.

    Series are aligned on their common tail length (the most recent bars).
    A pair with a constant return series has no defined correlation (None).
    """
    returns = {symbol: percentage_returns(closes(list(c))) for symbol, c in candles_by_symbol.items()}
    common = min((len(r) for r in returns.values()), default=0)
    if common < 2:
        return {symbol: {other: None for other in returns} for symbol in returns}

    frame = pd.DataFrame({symbol: r.iloc[-common:].to_numpy() for symbol, r in returns.items()})
    matrix = frame.corr(method="pearson")
    return {
        symbol: {
            other: None if pd.isna(matrix.loc[symbol, other]) else float(matrix.loc[symbol, other])
            for other in matrix.columns
        }
        for symbol in matrix.index
    }


def validate_comparison(symbols: Sequence[str], metric: str) -> None:
    """Raise InvalidParameterError unless `metric` is known and there are 2-5 symbols."""
    if metric not in const.COMPARISON_METRICS:
        raise InvalidParameterError(f"Unknown comparison metric '{metric}', expected one of {', '.join(const.COMPARISON_METRICS)}")
    if not const.MIN_COMPARE_SYMBOLS <= len(symbols) <= const.MAX_COMPARE_SYMBOLS:
        raise InvalidParameterError(
            f"Comparison needs {const.MIN_COMPARE_SYMBOLS}-{const.MAX_COMPARE_SYMBOLS} symbols, got {len(symbols)}"
        )


def compare_symbols(candles_by_symbol: Mapping[str, Sequence[Candle]], metric: str) -> dict[str, Any]:
    """
    Compare symbols on one metric.

    Args:
        candles_by_symbol: Candle window per symbol (2-5 symbols)
        metric: 'performance', 'volatility' or 'correlation'

    Returns:
        {'metric', 'symbols': {symbol: record}} plus 'ranking' for performance
        and 'returnCorrelation' for correlation
    """
    validate_comparison(list(candles_by_symbol), metric)

    builders = {"performance": _performance, "volatility": _volatility, "correlation": _momentum}
    build = builders[metric]

    result: dict[str, Any] = {
        "metric": metric,
        "symbols": {symbol: build(candles) for symbol, candles in candles_by_symbol.items()},
    }

    if metric == "performance":
        result["ranking"] = rank_by_sharpe(result["symbols"])
    elif metric == "correlation":
        result["returnCorrelation"] = return_correlation(candles_by_symbol)

    logger.debug(f"Compared {len(candles_by_symbol)} symbols on {metric}")
    return result
