"""
OHLCV Normalizer

Converts raw Binance kline rows into Candle records.

Kline row layout:
    [openTime, open, high, low, close, volume, closeTime, quoteAssetVolume,
     numberOfTrades, takerBuyBaseAssetVolume, takerBuyQuoteAssetVolume]

Prices and volumes arrive as decimal strings. Malformed numbers become NaN
and are carried through so downstream statistics degrade visibly.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any

import pandas as pd


logger = logging.getLogger(__name__)

KLINE_FIELDS = ["timestamp", "open", "high", "low", "close", "volume"]
PRICE_FIELDS = ["open", "high", "low", "close", "volume"]


@dataclass(frozen=True)
class Candle:
    """One trading-period summary record."""

    open: float
    high: float
    low: float
    close: float
    volume: float
    timestamp: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def kline_to_ohlcv(klines: list[list[Any]]) -> list[Candle]:
    """
    Normalize Binance kline rows into Candle records.

    Args:
        klines: Rows as returned by /api/v3/klines or /api/v3/uiKlines

    Returns:
        List of Candle in input order (empty list for empty input)
    """
    if not klines:
        return []

    df = pd.DataFrame([row[:6] for row in klines], columns=KLINE_FIELDS)
    for field in PRICE_FIELDS:
        df[field] = pd.to_numeric(df[field], errors="coerce").astype(float)

    nan_rows = int(df[PRICE_FIELDS].isna().any(axis=1).sum())
    if nan_rows:
        logger.warning(f"{nan_rows} kline rows contained malformed numeric fields")

    return [
        Candle(
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
            timestamp=int(row.timestamp),
        )
        for row in df.itertuples(index=False)
    ]


def closes(candles: list[Candle]) -> list[float]:
    return [c.close for c in candles]


def highs(candles: list[Candle]) -> list[float]:
    return [c.high for c in candles]


def lows(candles: list[Candle]) -> list[float]:
    return [c.low for c in candles]


def volumes(candles: list[Candle]) -> list[float]:
    return [c.volume for c in candles]
