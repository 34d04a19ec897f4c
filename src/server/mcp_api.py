#!/usr/bin/env python3
"""
MCP Server for Binance Market Data

Provides Model Context Protocol access to:
- Binance public market data (order book, trades, klines, tickers)
- Technical indicators (SMA, EMA, RSI, MACD, Bollinger Bands, ATR, VWAP)
- Market analysis (trend, statistics, support/resistance)
- Multi-symbol comparison (performance, volatility, correlation)

Every tool answers with a single text content item holding 2-space indented
JSON, or an error message with isError set.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import logging
import os
import sys
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from pydantic import BaseModel, Field, ValidationError


# Add parent directory (src/) to path so imports work from src/server/
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Local application imports
import constants as const
import util
from providers.binance_client import BinanceClient
from server.tool_models import (
    AggregateTradesArguments,
    AnalyzeMarketArguments,
    AvgPriceArguments,
    CalculateIndicatorsArguments,
    CompareSymbolsArguments,
    HistoricalTradesArguments,
    KlinesArguments,
    OrderBookArguments,
    PriceArguments,
    RecentTradesArguments,
    RollingWindowTickerArguments,
    TickerArguments,
    TradingDayTickerArguments,
)
from ta_errors import BinanceAPIError, InvalidParameterError
from ta_service import TAService, get_ta_service


util.setup_logger(name=None, level=None, console=True, log_file=const.API_LOG_FILE)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Binance MCP Server",
    description="Model Context Protocol server exposing Binance market data and technical analysis tools",
    version=const.VERSION,
)

# Track server startup time for debugging
SERVER_START_TIME = None


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing information"""
    start_time = time.time()
    client_host = request.client.host if request.client else "unknown"
    logger.info(f"Method: {request.method} | Path: {request.url.path} | Client: {client_host}")

    try:
        response = await call_next(request)
        duration = time.time() - start_time
        logger.info(f"Status: {response.status_code} | Duration: {duration:.3f}s")
        return response
    except Exception as e:
        duration = time.time() - start_time
        logger.error(f"Request failed after {duration:.3f}s: {e!s}", exc_info=True)
        raise


# ============================================================================
# MCP Protocol Models
# ============================================================================


class ToolInputSchema(BaseModel):
    """Schema for tool input parameters"""

    type: str = "object"
    properties: dict[str, Any]
    required: list[str] | None = []


class Tool(BaseModel):
    """MCP Tool definition"""

    name: str
    description: str
    inputSchema: ToolInputSchema


class ToolCallRequest(BaseModel):
    """Request model for tool execution"""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolCallResponse(BaseModel):
    """Response model for tool execution"""

    content: list[dict[str, Any]]
    isError: bool = False


def text_response(text: str, is_error: bool = False) -> ToolCallResponse:
    return ToolCallResponse(content=[{"type": "text", "text": text}], isError=is_error)


# ============================================================================
# MCP Server Implementation
# ============================================================================


class RegisteredTool:
    """A tool definition with its argument model, handler and failure wording"""

    def __init__(self, tool: Tool, arguments: type[BaseModel], action: str, handler: Callable[[Any], Any]):
        self.tool = tool
        self.arguments = arguments
        self.action = action
        self.handler = handler


class MCPServer:
    """Core MCP Server implementation"""

    def __init__(self, client: BinanceClient | None = None, ta_service: TAService | None = None):
        logger.info("Initializing MCP Server...")

        self.client = client or BinanceClient()
        self.ta_service = ta_service or get_ta_service()
        self.tools: dict[str, RegisteredTool] = {}

        self._initialize_defaults()
        logger.info(f"MCP Server initialized with {len(self.tools)} tools")

    def register_tool(
        self,
        name: str,
        description: str,
        arguments: type[BaseModel],
        action: str,
        handler: Callable[[Any], Any],
    ):
        """Register a tool; its input schema is generated from the argument model"""
        schema = arguments.model_json_schema()
        tool = Tool(
            name=name,
            description=description,
            inputSchema=ToolInputSchema(properties=schema.get("properties", {}), required=schema.get("required", [])),
        )
        self.tools[name] = RegisteredTool(tool, arguments, action, handler)

    def _initialize_defaults(self):
        """Initialize default tools"""
        client = self.client

        # ========== Market Data Tools ==========

        self.register_tool(
            "get_order_book",
            "Get order book bids and asks for a trading pair",
            OrderBookArguments,
            "get order book",
            lambda a: client.get_order_book(a.symbol, a.limit),
        )
        self.register_tool(
            "get_recent_trades",
            "Get the most recent trades for a trading pair",
            RecentTradesArguments,
            "get recent trades",
            lambda a: client.get_recent_trades(a.symbol, a.limit),
        )
        self.register_tool(
            "get_historical_trades",
            "Get older trades for a trading pair (requires BINANCE_API_KEY)",
            HistoricalTradesArguments,
            "get historical trades",
            lambda a: client.get_historical_trades(a.symbol, a.limit, a.fromId),
        )
        self.register_tool(
            "get_aggregate_trades",
            "Get compressed, aggregate trades for a trading pair",
            AggregateTradesArguments,
            "get aggregate trades",
            lambda a: client.get_aggregate_trades(a.symbol, a.fromId, a.startTime, a.endTime, a.limit),
        )
        self.register_tool(
            "get_klines",
            "Get K-line/candlestick data for a trading pair",
            KlinesArguments,
            "get K-line data",
            lambda a: client.get_klines(a.symbol, a.interval, a.startTime, a.endTime, a.timeZone, a.limit),
        )
        self.register_tool(
            "get_ui_klines",
            "Get K-line data optimized for candlestick chart presentation",
            KlinesArguments,
            "get UI K-line data",
            lambda a: client.get_klines(a.symbol, a.interval, a.startTime, a.endTime, a.timeZone, a.limit, ui=True),
        )
        self.register_tool(
            "get_avg_price",
            "Get the current average price for a trading pair",
            AvgPriceArguments,
            "get average price",
            lambda a: client.get_avg_price(a.symbol),
        )
        self.register_tool(
            "get_24hr_ticker",
            "Get 24 hour rolling window price change statistics",
            TickerArguments,
            "get 24hr ticker",
            lambda a: client.get_24hr_ticker(a.symbol, a.symbols, a.type),
        )
        self.register_tool(
            "get_trading_day_ticker",
            "Get price change statistics for the current trading day",
            TradingDayTickerArguments,
            "get trading day ticker",
            lambda a: client.get_trading_day_ticker(a.symbol, a.symbols, a.timeZone, a.type),
        )
        self.register_tool(
            "get_price",
            "Get the latest price for one, several or all trading pairs",
            PriceArguments,
            "get price ticker",
            lambda a: client.get_price(a.symbol, a.symbols),
        )
        self.register_tool(
            "get_book_ticker",
            "Get the best bid/ask price and quantity on the order book",
            PriceArguments,
            "get book ticker",
            lambda a: client.get_book_ticker(a.symbol, a.symbols),
        )
        self.register_tool(
            "get_rolling_window_ticker",
            "Get price change statistics within a requested window",
            RollingWindowTickerArguments,
            "get rolling window ticker",
            lambda a: client.get_rolling_window_ticker(a.symbol, a.symbols, a.windowSize, a.type),
        )

        # ========== Technical Analysis Tools ==========

        self.register_tool(
            "calculate_indicators",
            "Calculate technical indicators (sma, ema, rsi, macd, bollinger, atr, vwap) from recent K-lines",
            CalculateIndicatorsArguments,
            "calculate indicators",
            lambda a: self.ta_service.calculate_indicators(a.symbol, a.interval, a.indicators, a.period, a.limit),
        )
        self.register_tool(
            "analyze_market",
            "Comprehensive market analysis: trend, return statistics, momentum, volatility and optional support/resistance",
            AnalyzeMarketArguments,
            "analyze market",
            lambda a: self.ta_service.analyze_market(a.symbol, a.interval, a.includeSupport),
        )
        self.register_tool(
            "compare_symbols",
            "Compare 2-5 trading pairs by performance, volatility or correlation",
            CompareSymbolsArguments,
            "compare symbols",
            lambda a: self.ta_service.compare_symbols(a.symbols, a.interval, a.metric),
        )

    def execute_tool(self, name: str, arguments: dict[str, Any]) -> ToolCallResponse:
        """Execute a tool by name"""
        logger.info(f"Executing tool: {name}")
        logger.debug(f"Tool arguments: {arguments}")

        registered = self.tools.get(name)
        if registered is None:
            logger.warning(f"Tool not found: {name}")
            return text_response(f"Tool '{name}' not found", is_error=True)

        try:
            args = registered.arguments.model_validate(arguments)
        except ValidationError as e:
            problems = "; ".join(f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}" for err in e.errors())
            logger.warning(f"{name}: invalid arguments: {problems}")
            return text_response(f"Invalid arguments for {name}: {problems}", is_error=True)

        try:
            result = registered.handler(args)
        except (BinanceAPIError, InvalidParameterError) as e:
            return text_response(f"Failed to {registered.action}: {e}", is_error=True)
        except Exception as e:
            logger.error(f"Error executing tool '{name}': {e}", exc_info=True)
            return text_response(f"Failed to {registered.action}: An error occurred while fetching data.", is_error=True)

        if isinstance(result, dict) and "error" in result:
            return text_response(f"Failed to {registered.action}: {result['error']}", is_error=True)

        return text_response(util.to_json(result))


mcp_server = MCPServer()

# ============================================================================
# API Endpoints
# ============================================================================


@app.get("/")
async def root():
    """Root endpoint with server information"""
    return {
        "name": const.SERVER_NAME,
        "version": const.VERSION,
        "protocolVersion": const.PROTOCOL_VERSION,
        "description": "Binance Cryptocurrency Market Data MCP Service with Technical Analysis",
        "testnet": const.BINANCE_TESTNET,
        "capabilities": {
            "tools": {"available": len(mcp_server.tools), "list": list(mcp_server.tools.keys())},
        },
    }


@app.get("/tools/list", response_model=dict[str, list[Tool]])
async def list_tools():
    """List all available tools"""
    return {"tools": [registered.tool for registered in mcp_server.tools.values()]}


@app.post("/tools/call", response_model=ToolCallResponse)
async def call_tool(request: ToolCallRequest):
    """Execute a tool"""
    return mcp_server.execute_tool(request.name, request.arguments)


@app.get("/health")
async def health_check():
    """Health check endpoint with startup time"""
    uptime = None
    if SERVER_START_TIME:
        uptime_delta = datetime.now() - datetime.strptime(SERVER_START_TIME, "%Y-%m-%d %H:%M:%S")
        uptime = str(uptime_delta).split(".")[0]  # Remove microseconds

    return {
        "status": "healthy",
        "startup_time": SERVER_START_TIME,
        "uptime": uptime,
        "current_time": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    }


# ============================================================================
# Individual Tool Endpoints (OpenAPI-compatible wrappers)
# ============================================================================


def _tool_endpoint(name: str, arguments: type[BaseModel]):
    async def endpoint(request: arguments):  # type: ignore[valid-type]
        return mcp_server.execute_tool(name, request.model_dump(exclude_none=True))

    endpoint.__name__ = f"{name}_endpoint"
    return endpoint


for _name, _registered in mcp_server.tools.items():
    app.post(f"/tools/{_name}", response_model=ToolCallResponse, summary=_registered.tool.description)(
        _tool_endpoint(_name, _registered.arguments)
    )


# ============================================================================
# Main Entry Point
# ============================================================================


def main():
    global SERVER_START_TIME
    SERVER_START_TIME = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    logger.info("=" * 60)
    logger.info("Starting Binance MCP Server")
    logger.info(f"STARTUP TIME: {SERVER_START_TIME}")
    logger.info(f"Testnet mode: {'ENABLED' if const.BINANCE_TESTNET else 'DISABLED'}")
    logger.info(f"Logging to: {const.API_LOG_FILE}")
    logger.info(f"Server will run on: http://{const.MCP_HOST}:{const.MCP_PORT}")
    logger.info("=" * 60)

    try:
        uvicorn.run(app, host=const.MCP_HOST, port=const.MCP_PORT, log_level="info")
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error(f"Server crashed: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
