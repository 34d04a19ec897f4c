"""
Market Structure Analyzer

Support/resistance detection via local-extremum scanning and greedy clustering,
and trend classification from a short/long SMA comparison.

The extremum scan is O(n * lookback); it is meant for bounded candle windows
(a few hundred bars), which is all the kline endpoints return per call.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Any

import constants as const
from candles import Candle, highs, lows
from indicators import last_value, sma
from ta_errors import InvalidParameterError


logger = logging.getLogger(__name__)

SUPPORT = "support"
RESISTANCE = "resistance"


@dataclass
class Level:
    """A support or resistance price; strength counts how many extrema were merged into it."""

    price: float
    kind: str
    strength: int = 1

    def as_dict(self) -> dict[str, Any]:
        return {"price": self.price, "type": self.kind, "strength": self.strength}


def _local_extrema(values: Sequence[float], lookback: int, kind: str) -> list[Level]:
    """Levels at indices whose value is the strict max (resistance) or min (support) of [i-L, i+L]."""
    levels = []
    for i in range(lookback, len(values) - lookback):
        window = [values[j] for j in range(i - lookback, i + lookback + 1) if j != i]
        if kind == RESISTANCE:
            is_extremum = all(v < values[i] for v in window)
        else:
            is_extremum = all(v > values[i] for v in window)
        if is_extremum:
            levels.append(Level(price=values[i], kind=kind))
    return levels


def _merge_pass(levels: Sequence[Level], threshold: float) -> list[Level]:
    clusters: list[Level] = []
    for level in levels:
        existing = next(
            (c for c in clusters if abs(c.price - level.price) / level.price < threshold),
            None,
        )
        if existing:
            existing.strength += level.strength
            existing.price = (existing.price + level.price) / 2
        else:
            clusters.append(replace(level))
    return sorted(clusters, key=lambda c: c.strength, reverse=True)


def cluster_levels(levels: Sequence[Level], threshold: float = const.SR_THRESHOLD) -> list[Level]:
    """
    Greedily merge levels lying within `threshold` (relative) of an earlier cluster.

    A level joins the first cluster where |cluster - level| / level < threshold;
    the cluster price becomes the average of the two and the strengths add up.
    Averaging can pull a cluster next to one it passed over, so merge passes
    repeat until nothing merges, which makes clustering a clustered list a no-op.
    Inputs are not mutated. Result is sorted by strength, strongest first (stable).
    """
    if threshold <= 0:
        raise InvalidParameterError(f"threshold must be positive, got {threshold}")

    clusters = _merge_pass(levels, threshold)
    while True:
        merged = _merge_pass(clusters, threshold)
        if len(merged) == len(clusters):
            return clusters
        clusters = merged


def find_support_resistance(
    candles: Sequence[Candle],
    lookback: int = const.SR_LOOKBACK,
    threshold: float = const.SR_THRESHOLD,
) -> list[Level]:
    """
    Detect support and resistance levels.

    Args:
        candles: Candle window, oldest first
        lookback: Bars on each side an extremum must dominate
        threshold: Relative distance under which levels are merged (0.02 = 2%)

    Returns:
        Clustered levels sorted by strength; empty when fewer than 2 * lookback + 1 candles
    """
    if lookback <= 0:
        raise InvalidParameterError(f"lookback must be a positive integer, got {lookback}")
    if threshold <= 0:
        raise InvalidParameterError(f"threshold must be positive, got {threshold}")

    candidates = _local_extrema(highs(candles), lookback, RESISTANCE)
    candidates += _local_extrema(lows(candles), lookback, SUPPORT)
    logger.debug(f"Found {len(candidates)} support/resistance candidates in {len(candles)} candles")

    return cluster_levels(candidates, threshold)


def detect_trend(
    prices: Sequence[float],
    short_period: int = const.TREND_SHORT_PERIOD,
    long_period: int = const.TREND_LONG_PERIOD,
) -> str:
    """
    Classify trend direction from the latest short and long SMA.

    Returns:
        'bullish', 'bearish' or 'neutral'; 'unknown' when either SMA is not available
    """
    short_sma = last_value(sma(prices, short_period))
    long_sma = last_value(sma(prices, long_period))

    if short_sma is None or long_sma is None or math.isnan(short_sma) or math.isnan(long_sma):
        return "unknown"

    if short_sma > long_sma:
        return "bullish"
    if short_sma < long_sma:
        return "bearish"
    return "neutral"
