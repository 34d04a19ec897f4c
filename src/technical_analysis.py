"""
Technical Analysis Module

Assembles indicator summaries and market analyses from a candle window.
All methods are pure: they take normalized candles and return JSON-ready dicts.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import logging
from collections.abc import Sequence
from typing import Any

import constants as const
from candles import Candle, closes, highs, lows, volumes
from indicators import atr, bollinger_bands, ema, is_defined, last_value, macd, rsi, sma, vwap
from market_structure import RESISTANCE, SUPPORT, detect_trend, find_support_resistance
from price_stats import calculate_price_stats
from ta_errors import InvalidParameterError
from util import format_percent, timestamp_to_iso


logger = logging.getLogger(__name__)


def rsi_zone(value: float | None) -> str:
    if not is_defined(value):
        return "unknown"
    if value > const.RSI_OVERBOUGHT:
        return "overbought"
    if value < const.RSI_OVERSOLD:
        return "oversold"
    return "neutral"


def volatility_zone(std_dev: float | None) -> str:
    if not is_defined(std_dev):
        return "unknown"
    if std_dev > 2:
        return "high"
    if std_dev > 1:
        return "moderate"
    return "low"


class TechnicalAnalysis:
    """Technical analysis indicators and market structure."""

    @staticmethod
    def calculate_indicators(candles: Sequence[Candle], names: Sequence[str], period: int = const.DEFAULT_INDICATOR_PERIOD) -> dict[str, Any]:
        """
        Calculate the requested indicators from a candle window.

        Args:
            candles: Candle window, oldest first
            names: Any of sma, ema, rsi, macd, bollinger, atr, vwap
            period: Period for SMA, EMA and Bollinger Bands (RSI and ATR use 14)

        Returns:
            Dictionary keyed by indicator; missing values are None
        """
        unknown = [n for n in names if n not in const.SUPPORTED_INDICATORS]
        if unknown:
            raise InvalidParameterError(f"Unknown indicators: {', '.join(unknown)}")

        prices = closes(candles)
        last_close = prices[-1] if prices else None
        indicators: dict[str, Any] = {}

        for name in names:
            # === TREND ===
            if name == "sma":
                values = sma(prices, period)
                indicators["sma"] = {
                    "period": period,
                    "current": last_value(values),
                    "values": values[-const.RECENT_VALUES:],
                }

            elif name == "ema":
                values = ema(prices, period)
                indicators["ema"] = {
                    "period": period,
                    "current": last_value(values),
                    "values": values[-const.RECENT_VALUES:],
                }

            # === MOMENTUM ===
            elif name == "rsi":
                values = rsi(prices, const.RSI_PERIOD)
                current = last_value(values)
                indicators["rsi"] = {
                    "period": const.RSI_PERIOD,
                    "current": current,
                    "signal": rsi_zone(current),
                    "values": values[-const.RECENT_VALUES:],
                }

            elif name == "macd":
                latest = last_value(macd(prices))
                signal = "unknown"
                if latest is not None and latest.signal is not None:
                    signal = "bullish" if latest.macd > latest.signal else "bearish"
                indicators["macd"] = {
                    "current": latest.as_dict() if latest else None,
                    "signal": signal,
                }

            # === VOLATILITY ===
            elif name == "bollinger":
                latest = last_value(bollinger_bands(prices, period))
                position = "unknown"
                if latest is not None:
                    if last_close > latest.upper:
                        position = "above upper"
                    elif last_close < latest.lower:
                        position = "below lower"
                    else:
                        position = "within bands"
                indicators["bollingerBands"] = {
                    "period": period,
                    "current": latest.as_dict() if latest else None,
                    "position": position,
                }

            elif name == "atr":
                current = last_value(atr(highs(candles), lows(candles), prices, const.ATR_PERIOD))
                percent = current / last_close * 100 if current is not None and last_close else None
                indicators["atr"] = {
                    "period": const.ATR_PERIOD,
                    "current": current,
                    "volatility": format_percent(percent),
                }

            # === VOLUME ===
            elif name == "vwap":
                current = last_value(vwap(highs(candles), lows(candles), prices, volumes(candles)))
                relation = "unknown"
                if is_defined(current):
                    relation = "above" if last_close > current else "below"
                indicators["vwap"] = {
                    "current": current,
                    "priceRelation": relation,
                }

        return indicators

    @staticmethod
    def summarize_indicators(candles: Sequence[Candle], names: Sequence[str], period: int = const.DEFAULT_INDICATOR_PERIOD) -> dict[str, Any]:
        """Indicator summary with the data point count and the latest candle."""
        latest = None
        if candles:
            latest = {"timestamp": timestamp_to_iso(candles[-1].timestamp), "close": candles[-1].close}
        return {
            "dataPoints": len(candles),
            "latest": latest,
            "indicators": TechnicalAnalysis.calculate_indicators(candles, names, period),
        }

    @staticmethod
    def analyze_trend(candles: Sequence[Candle]) -> dict[str, Any]:
        """Trend direction from the 20/50 SMA crossover, with the SMAs it was derived from."""
        prices = closes(candles)
        return {
            "direction": detect_trend(prices),
            "shortSma": last_value(sma(prices, const.TREND_SHORT_PERIOD)),
            "longSma": last_value(sma(prices, const.TREND_LONG_PERIOD)),
        }

    @staticmethod
    def detect_support_resistance(candles: Sequence[Candle], num_levels: int = const.TOP_LEVELS) -> dict[str, list[dict[str, Any]]]:
        """Strongest support and resistance levels, `num_levels` of each."""
        levels = find_support_resistance(candles)
        return {
            "support": [lvl.as_dict() for lvl in levels if lvl.kind == SUPPORT][:num_levels],
            "resistance": [lvl.as_dict() for lvl in levels if lvl.kind == RESISTANCE][:num_levels],
        }

    @staticmethod
    def analyze_market(candles: Sequence[Candle], include_support: bool = False) -> dict[str, Any]:
        """
        Comprehensive market analysis of a candle window.

        Args:
            candles: Candle window, oldest first
            include_support: Whether to add support/resistance levels

        Returns:
            Dictionary with price, trend, statistics, optional levels and conditions.
            price.change24h is the change over the last 24 bars, which is 24 hours
            only on the 1h interval (same convention as return24h in comparisons).
        """
        prices = closes(candles)
        current = prices[-1] if prices else None

        change = None
        lookback = const.CHANGE_LOOKBACK_BARS + 1
        if len(prices) >= lookback and prices[-lookback]:
            change = (prices[-1] - prices[-lookback]) / prices[-lookback] * 100

        statistics = calculate_price_stats(candles)
        current_rsi = last_value(rsi(prices, const.RSI_PERIOD))

        analysis: dict[str, Any] = {
            "price": {
                "current": current,
                "change24h": format_percent(change),
            },
            "trend": TechnicalAnalysis.analyze_trend(candles),
            "statistics": statistics.as_dict(),
        }

        if include_support:
            analysis["levels"] = TechnicalAnalysis.detect_support_resistance(candles)

        analysis["conditions"] = {
            "rsi": current_rsi,
            "momentum": rsi_zone(current_rsi),
            "volatility": volatility_zone(statistics.std_dev),
        }
        return analysis
