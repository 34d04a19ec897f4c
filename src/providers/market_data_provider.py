"""
Market Data Provider Abstract Base Class

The analysis service only needs candles for a symbol, interval and window.
Anything that can supply them (the Binance REST client, a test double) implements
this interface.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

from abc import ABC, abstractmethod

from candles import Candle


class MarketDataProvider(ABC):
    """Abstract base class for candle providers."""

    @abstractmethod
    def get_candles(self, symbol: str, interval: str, limit: int) -> list[Candle]:
        """
        Get the most recent candles for a symbol.

        Args:
            symbol: Trading pair symbol (e.g., 'BTCUSDT')
            interval: Kline interval (e.g., '1h', '4h', '1d')
            limit: Number of candles, most recent last

        Returns:
            List of Candle, oldest first

        Raises:
            BinanceAPIError: If data retrieval fails
        """
