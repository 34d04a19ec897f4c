"""
Technical Analysis Service

Provides a high-level API for technical analysis, combining:
- a MarketDataProvider (the Binance REST client by default) for candle data
- TechnicalAnalysis and the comparison aggregator for the calculations

Designed for use by:
- MCP server (LLM access)
- CLI commands

Failures come back as {"error": ...} results rather than exceptions, so a tool
can always report something.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import constants as const
from candles import Candle
from comparison import compare_symbols, validate_comparison
from providers.binance_client import BinanceClient
from providers.market_data_provider import MarketDataProvider
from ta_errors import AnalysisError, BinanceAPIError
from technical_analysis import TechnicalAnalysis
from util import utc_now_iso


logger = logging.getLogger(__name__)


class TAService:
    """
    High-level Technical Analysis service.

    Fetches candles and runs the stateless analysis core over them.
    """

    def __init__(self, provider: MarketDataProvider | None = None):
        """Initialize TA service with a candle provider."""
        self.provider = provider or BinanceClient()

    def _error(self, message: str, **context: Any) -> dict[str, Any]:
        return {"error": message, **context, "timestamp": utc_now_iso()}

    def calculate_indicators(
        self,
        symbol: str,
        interval: str,
        indicators: Sequence[str],
        period: int = const.DEFAULT_INDICATOR_PERIOD,
        limit: int = const.DEFAULT_INDICATOR_LIMIT,
    ) -> dict[str, Any]:
        """
        Calculate technical indicators for a symbol.

        Args:
            symbol: Trading pair symbol
            interval: Kline interval
            indicators: Indicator names (sma, ema, rsi, macd, bollinger, atr, vwap)
            period: Period for SMA, EMA and Bollinger Bands
            limit: Number of candles to analyze

        Returns:
            Dictionary with symbol, interval, dataPoints, latest candle and indicator blocks
        """
        try:
            logger.info(f"Calculating {', '.join(indicators)} for {symbol} ({interval}, period={period}, limit={limit})")
            candles = self.provider.get_candles(symbol, interval, limit)
            if not candles:
                return self._error(f"No kline data available for {symbol}", symbol=symbol)

            summary = TechnicalAnalysis.summarize_indicators(candles, indicators, period)
            return {"symbol": symbol, "interval": interval, **summary}

        except (BinanceAPIError, AnalysisError) as e:
            logger.warning(f"Indicator calculation for {symbol} failed: {e}")
            return self._error(str(e), symbol=symbol)
        except Exception as e:
            logger.error(f"Error calculating indicators for {symbol}: {e}", exc_info=True)
            return self._error("Unexpected error while calculating indicators", symbol=symbol)

    def analyze_market(self, symbol: str, interval: str, include_support: bool = False) -> dict[str, Any]:
        """
        Comprehensive market analysis over the last 200 candles.

        Returns:
            Dictionary with price, trend, statistics, conditions and optional levels
        """
        try:
            logger.info(f"Analyzing market for {symbol} ({interval}, include_support={include_support})")
            candles = self.provider.get_candles(symbol, interval, const.ANALYSIS_CANDLES)
            if not candles:
                return self._error(f"No kline data available for {symbol}", symbol=symbol)

            analysis = TechnicalAnalysis.analyze_market(candles, include_support=include_support)
            return {"symbol": symbol, "interval": interval, "timestamp": utc_now_iso(), **analysis}

        except (BinanceAPIError, AnalysisError) as e:
            logger.warning(f"Market analysis for {symbol} failed: {e}")
            return self._error(str(e), symbol=symbol)
        except Exception as e:
            logger.error(f"Error analyzing market for {symbol}: {e}", exc_info=True)
            return self._error("Unexpected error while analyzing market", symbol=symbol)

    def fetch_many(self, symbols: Sequence[str], interval: str, limit: int) -> dict[str, list[Candle]]:
        """Fetch candles for several symbols in parallel; the result keeps the order of `symbols`."""
        with ThreadPoolExecutor(max_workers=max(len(symbols), 1)) as executor:
            futures = {symbol: executor.submit(self.provider.get_candles, symbol, interval, limit) for symbol in symbols}
            return {symbol: future.result() for symbol, future in futures.items()}

    def compare_symbols(self, symbols: Sequence[str], interval: str, metric: str) -> dict[str, Any]:
        """
        Compare 2-5 symbols on performance, volatility or correlation.

        Returns:
            Dictionary with metric, interval, timestamp, per-symbol records and,
            depending on the metric, a ranking or a return correlation matrix
        """
        try:
            logger.info(f"Comparing {', '.join(symbols)} on {metric} ({interval})")
            if len(set(symbols)) != len(symbols):
                return self._error("Duplicate symbols in comparison", symbols=list(symbols))
            validate_comparison(symbols, metric)

            candles_by_symbol = self.fetch_many(symbols, interval, const.COMPARISON_CANDLES)
            empty = [symbol for symbol, candles in candles_by_symbol.items() if not candles]
            if empty:
                return self._error(f"No kline data available for {', '.join(empty)}", symbols=list(symbols))

            comparison = compare_symbols(candles_by_symbol, metric)
            return {"metric": metric, "interval": interval, "timestamp": utc_now_iso(), **comparison}

        except (BinanceAPIError, AnalysisError) as e:
            logger.warning(f"Comparison of {', '.join(symbols)} failed: {e}")
            return self._error(str(e), symbols=list(symbols))
        except Exception as e:
            logger.error(f"Error comparing symbols {symbols}: {e}", exc_info=True)
            return self._error("Unexpected error while comparing symbols", symbols=list(symbols))


# Singleton instance
_ta_service_instance = None


def get_ta_service() -> TAService:
    """Get singleton TA service instance."""
    global _ta_service_instance
    if _ta_service_instance is None:
        _ta_service_instance = TAService()
    return _ta_service_instance
