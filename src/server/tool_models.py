"""
Tool argument models for the MCP server.

Each MCP tool validates its arguments against one of these models before any
request reaches Binance. Field names follow the Binance / MCP camelCase naming
so the generated JSON schemas can be published as tool input schemas.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

import constants as const


Symbol = Annotated[str, Field(pattern=const.SYMBOL_PATTERN, description="Trading pair symbol, e.g. BTCUSDT")]
Timestamp = Annotated[int, Field(gt=0, description="Timestamp in milliseconds")]


def _check_choice(value: str | None, choices: tuple[str, ...], name: str) -> str | None:
    if value is not None and value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}")
    return value


class ToolArguments(BaseModel):
    """Base class for tool arguments"""

    model_config = ConfigDict(str_strip_whitespace=True)


class SymbolOrSymbolsArguments(ToolArguments):
    """Ticker tools accept one symbol or a list of symbols, never both"""

    symbol: Symbol | None = None
    symbols: list[Symbol] | None = Field(default=None, description="Array of multiple trading pair symbols")

    @model_validator(mode="after")
    def check_exclusive(self):
        if self.symbol and self.symbols:
            raise ValueError("Provide either symbol or symbols, not both")
        return self


class TickerTypeMixin(BaseModel):
    type: str | None = Field(
        default=None,
        description="Ticker type, default FULL",
        json_schema_extra={"enum": list(const.TICKER_TYPES)},
    )

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str | None) -> str | None:
        return _check_choice(v, const.TICKER_TYPES, "type")


class OrderBookArguments(ToolArguments):
    symbol: Symbol
    limit: int | None = Field(default=None, ge=1, le=const.MAX_LIMIT, description="Order book depth, default 100, max 5000")


class RecentTradesArguments(ToolArguments):
    symbol: Symbol
    limit: int | None = Field(default=None, ge=1, le=const.MAX_TRADES_LIMIT, description="Number of trades to return, default 500, max 1000")


class HistoricalTradesArguments(RecentTradesArguments):
    fromId: int | None = Field(default=None, description="Trade ID to start from")


class AggregateTradesArguments(ToolArguments):
    symbol: Symbol
    fromId: int | None = Field(default=None, description="Aggregate trade ID to start from")
    startTime: Timestamp | None = None
    endTime: Timestamp | None = None
    limit: int | None = Field(default=None, ge=1, le=const.MAX_TRADES_LIMIT, description="Number of aggregate trades to return, default 500, max 1000")


class KlinesArguments(ToolArguments):
    symbol: Symbol
    interval: str = Field(description="K-line interval", json_schema_extra={"enum": list(const.KLINE_INTERVALS)})
    startTime: Timestamp | None = None
    endTime: Timestamp | None = None
    timeZone: str | None = Field(default=None, description="Time zone, default UTC")
    limit: int | None = Field(default=None, ge=1, le=const.MAX_KLINES_LIMIT, description="Number of K-lines to return, default 500, max 1000")

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, v: str) -> str:
        return _check_choice(v, const.KLINE_INTERVALS, "interval")


class AvgPriceArguments(ToolArguments):
    symbol: Symbol


class TickerArguments(SymbolOrSymbolsArguments, TickerTypeMixin):
    pass


class TradingDayTickerArguments(SymbolOrSymbolsArguments, TickerTypeMixin):
    timeZone: str | None = Field(default=None, description="Time zone, default UTC")


class PriceArguments(SymbolOrSymbolsArguments):
    pass


class RollingWindowTickerArguments(SymbolOrSymbolsArguments, TickerTypeMixin):
    windowSize: str | None = Field(
        default=None,
        description="Window size, default 1d",
        json_schema_extra={"enum": list(const.ROLLING_WINDOW_SIZES)},
    )

    @field_validator("windowSize")
    @classmethod
    def validate_window_size(cls, v: str | None) -> str | None:
        return _check_choice(v, const.ROLLING_WINDOW_SIZES, "windowSize")


class CalculateIndicatorsArguments(ToolArguments):
    symbol: Symbol
    interval: str = Field(description="K-line interval", json_schema_extra={"enum": list(const.KLINE_INTERVALS)})
    indicators: list[str] = Field(
        min_length=1,
        description="Technical indicators to calculate: " + ", ".join(const.SUPPORTED_INDICATORS),
    )
    period: int = Field(default=const.DEFAULT_INDICATOR_PERIOD, ge=1, le=const.MAX_PERIOD, description="Period for moving averages (default 20)")
    limit: int = Field(default=const.DEFAULT_INDICATOR_LIMIT, ge=1, le=const.MAX_ANALYSIS_LIMIT, description="Number of candles to analyze (default 100)")

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, v: str) -> str:
        return _check_choice(v, const.KLINE_INTERVALS, "interval")

    @field_validator("indicators")
    @classmethod
    def validate_indicators(cls, v: list[str]) -> list[str]:
        for name in v:
            _check_choice(name, const.SUPPORTED_INDICATORS, "indicators")
        return v


class AnalyzeMarketArguments(ToolArguments):
    symbol: Symbol
    interval: str = Field(description="Analysis timeframe", json_schema_extra={"enum": list(const.ANALYSIS_INTERVALS)})
    includeSupport: bool = Field(default=False, description="Include support/resistance levels")

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, v: str) -> str:
        return _check_choice(v, const.ANALYSIS_INTERVALS, "interval")


class CompareSymbolsArguments(ToolArguments):
    symbols: list[Symbol] = Field(
        min_length=const.MIN_COMPARE_SYMBOLS,
        max_length=const.MAX_COMPARE_SYMBOLS,
        description="Symbols to compare (2-5)",
    )
    interval: str = Field(description="Comparison timeframe", json_schema_extra={"enum": list(const.ANALYSIS_INTERVALS)})
    metric: str = Field(description="Comparison metric", json_schema_extra={"enum": list(const.COMPARISON_METRICS)})

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, v: str) -> str:
        return _check_choice(v, const.ANALYSIS_INTERVALS, "interval")

    @field_validator("metric")
    @classmethod
    def validate_metric(cls, v: str) -> str:
        return _check_choice(v, const.COMPARISON_METRICS, "metric")
