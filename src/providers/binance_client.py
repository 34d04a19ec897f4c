"""
Binance Market Data Provider

Thin client over the Binance public REST API (/api/v3). Returns the JSON
payloads unchanged, except fetch helpers that normalize klines into candles.

Errors are re-raised as BinanceAPIError with a sanitized message; upstream
details only go to the log.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import json
import logging
from typing import Any

import requests

import constants as const
from candles import Candle, kline_to_ohlcv
from providers.market_data_provider import MarketDataProvider
from ta_errors import BinanceAPIError, InvalidParameterError


logger = logging.getLogger(__name__)


def sanitize_error(error: Exception) -> str:
    """Map a request failure to a message that is safe to return to a caller."""
    response = getattr(error, "response", None)
    status = response.status_code if response is not None else None

    if status == 401:
        return "Authentication failed. Please check your API key."
    if status == 429:
        return "Rate limit exceeded. Please try again later."
    if status is not None and status >= 500:
        return "Binance API server error. Please try again later."
    if isinstance(error, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return "Unable to connect to Binance API. Please check your network connection."
    return "An error occurred while fetching data."


def validate_api_key(api_key: str | None) -> str:
    """Return the API key if it looks usable, raise BinanceAPIError otherwise."""
    if not api_key:
        raise BinanceAPIError("BINANCE_API_KEY environment variable not set")
    if not const.API_KEY_MIN_LENGTH <= len(api_key) <= const.API_KEY_MAX_LENGTH:
        raise BinanceAPIError("Invalid BINANCE_API_KEY format")
    return api_key


def _symbol_params(symbol: str | None, symbols: list[str] | None) -> dict[str, Any]:
    if symbol and symbols:
        raise InvalidParameterError("Provide either symbol or symbols, not both")
    if symbol:
        return {"symbol": symbol}
    if symbols:
        return {"symbols": json.dumps(symbols, separators=(",", ":"))}
    return {}


class BinanceClient(MarketDataProvider):
    """Market data provider using the Binance REST API."""

    def __init__(self, base_url: str | None = None, api_key: str | None = None, timeout: float = const.REQUEST_TIMEOUT):
        """
        Initialize Binance client.

        Args:
            base_url: API root (defaults to testnet or production per BINANCE_TESTNET)
            api_key: API key for endpoints that need one (defaults to const.BINANCE_API_KEY)
            timeout: Request timeout in seconds
        """
        if base_url is None:
            base_url = const.BINANCE_TESTNET_URL if const.BINANCE_TESTNET else const.BINANCE_BASE_URL
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key or const.BINANCE_API_KEY
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({"User-Agent": const.USER_AGENT})
        self.session.max_redirects = 0
        logger.info(f"Initialized Binance client for {self.base_url}")

    def _make_request(self, endpoint: str, params: dict[str, Any] | None = None, headers: dict[str, str] | None = None) -> Any:
        """
        Make a GET request against /api/v3 with error handling.

        Args:
            endpoint: Path below /api/v3 (e.g. 'depth')
            params: Query parameters; None values are dropped
            headers: Extra request headers

        Returns:
            Decoded JSON response

        Raises:
            BinanceAPIError: If the request fails or returns a non-2xx status
        """
        url = f"{self.base_url}/api/v3/{endpoint}"
        query = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            response = self.session.get(url, params=query, headers=headers, timeout=self.timeout, allow_redirects=False)
            if not 200 <= response.status_code < 300:
                raise requests.exceptions.HTTPError(f"{response.status_code} for {endpoint}", response=response)
            return response.json()

        except requests.exceptions.RequestException as e:
            status = e.response.status_code if e.response is not None else None
            logger.error(f"Binance API request to {endpoint} failed (status={status}): {e}")
            raise BinanceAPIError(sanitize_error(e), status_code=status) from e

    # ---------------------------------------------------------------------
    # Order book and trades
    # ---------------------------------------------------------------------

    def get_order_book(self, symbol: str, limit: int | None = None) -> dict[str, Any]:
        return self._make_request("depth", {"symbol": symbol, "limit": limit or const.DEFAULT_ORDER_BOOK_LIMIT})

    def get_recent_trades(self, symbol: str, limit: int | None = None) -> list[dict[str, Any]]:
        return self._make_request("trades", {"symbol": symbol, "limit": limit or const.DEFAULT_TRADES_LIMIT})

    def get_historical_trades(self, symbol: str, limit: int | None = None, from_id: int | None = None) -> list[dict[str, Any]]:
        """Older trades; the only endpoint here that needs the API key header."""
        api_key = validate_api_key(self.api_key)
        return self._make_request(
            "historicalTrades",
            {"symbol": symbol, "limit": limit or const.DEFAULT_TRADES_LIMIT, "fromId": from_id},
            headers={const.API_KEY_HEADER: api_key},
        )

    def get_aggregate_trades(
        self,
        symbol: str,
        from_id: int | None = None,
        start_time: int | None = None,
        end_time: int | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        return self._make_request(
            "aggTrades",
            {
                "symbol": symbol,
                "fromId": from_id,
                "startTime": start_time,
                "endTime": end_time,
                "limit": limit or const.DEFAULT_TRADES_LIMIT,
            },
        )

    # ---------------------------------------------------------------------
    # Klines
    # ---------------------------------------------------------------------

    def get_klines(
        self,
        symbol: str,
        interval: str,
        start_time: int | None = None,
        end_time: int | None = None,
        time_zone: str | None = None,
        limit: int | None = None,
        ui: bool = False,
    ) -> list[list[Any]]:
        """
        Raw kline rows.

        Args:
            ui: Use /uiKlines, the variant tuned for chart presentation
        """
        return self._make_request(
            "uiKlines" if ui else "klines",
            {
                "symbol": symbol,
                "interval": interval,
                "startTime": start_time,
                "endTime": end_time,
                "timeZone": time_zone,
                "limit": min(limit or const.DEFAULT_KLINES_LIMIT, const.MAX_KLINES_LIMIT),
            },
        )

    def get_candles(self, symbol: str, interval: str, limit: int) -> list[Candle]:
        klines = self.get_klines(symbol, interval, limit=limit)
        candles = kline_to_ohlcv(klines)
        logger.debug(f"Fetched {len(candles)} {interval} candles for {symbol}")
        return candles

    # ---------------------------------------------------------------------
    # Tickers
    # ---------------------------------------------------------------------

    def get_avg_price(self, symbol: str) -> dict[str, Any]:
        return self._make_request("avgPrice", {"symbol": symbol})

    def get_24hr_ticker(self, symbol: str | None = None, symbols: list[str] | None = None, ticker_type: str | None = None) -> Any:
        params = {"type": ticker_type or "FULL", **_symbol_params(symbol, symbols)}
        return self._make_request("ticker/24hr", params)

    def get_trading_day_ticker(
        self,
        symbol: str | None = None,
        symbols: list[str] | None = None,
        time_zone: str | None = None,
        ticker_type: str | None = None,
    ) -> Any:
        params = {"timeZone": time_zone or "UTC", "type": ticker_type or "FULL", **_symbol_params(symbol, symbols)}
        return self._make_request("ticker/tradingDay", params)

    def get_price(self, symbol: str | None = None, symbols: list[str] | None = None) -> Any:
        return self._make_request("ticker/price", _symbol_params(symbol, symbols))

    def get_book_ticker(self, symbol: str | None = None, symbols: list[str] | None = None) -> Any:
        return self._make_request("ticker/bookTicker", _symbol_params(symbol, symbols))

    def get_rolling_window_ticker(
        self,
        symbol: str | None = None,
        symbols: list[str] | None = None,
        window_size: str | None = None,
        ticker_type: str | None = None,
    ) -> Any:
        params = {"windowSize": window_size or "1d", "type": ticker_type or "FULL", **_symbol_params(symbol, symbols)}
        return self._make_request("ticker", params)
