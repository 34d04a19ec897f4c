#!/usr/bin/env python3
"""
Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import os

from dotenv import load_dotenv


load_dotenv()

# Logging
LOG_FILE = "binance-mcp.log"
API_LOG_FILE = "binance-mcp-api.log"
CMDS_LOG_FILE = "cmds.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5

# Version
VERSION = "1.1.0"
SERVER_NAME = "binance-mcp-enhanced"

# Binance
BINANCE_API_KEY = os.getenv("BINANCE_API_KEY")
BINANCE_TESTNET = os.getenv("BINANCE_TESTNET", "").lower() == "true"
BINANCE_BASE_URL = "https://api.binance.com"
BINANCE_TESTNET_URL = "https://testnet.binance.vision"
API_KEY_HEADER = "X-MBX-APIKEY"
API_KEY_MIN_LENGTH = 32
API_KEY_MAX_LENGTH = 128
REQUEST_TIMEOUT = 10  # seconds
USER_AGENT = f"Binance-MCP-Enhanced/{VERSION}"

# MCP server
MCP_HOST = os.getenv("MCP_HOST", "0.0.0.0")
MCP_PORT = int(os.getenv("MCP_PORT", "8000"))
PROTOCOL_VERSION = "2024-11-05"

# Request parameters
SYMBOL_PATTERN = r"^[A-Z]{2,20}$"
KLINE_INTERVALS = ("1m", "3m", "5m", "15m", "30m", "1h", "2h", "4h", "6h", "8h", "12h", "1d", "3d", "1w", "1M")
ANALYSIS_INTERVALS = ("1h", "4h", "1d")
ROLLING_WINDOW_SIZES = ("1m", "2m", "5m", "15m", "30m", "1h", "2h", "4h", "6h", "8h", "12h", "1d", "2d", "3d", "7d", "30d")
TICKER_TYPES = ("FULL", "MINI")
MAX_LIMIT = 5000
MAX_TRADES_LIMIT = 1000
MAX_KLINES_LIMIT = 1000
MAX_ANALYSIS_LIMIT = 500
MAX_PERIOD = 200

DEFAULT_ORDER_BOOK_LIMIT = 100
DEFAULT_TRADES_LIMIT = 500
DEFAULT_KLINES_LIMIT = 500
DEFAULT_INDICATOR_LIMIT = 100
DEFAULT_INDICATOR_PERIOD = 20
ANALYSIS_CANDLES = 200
COMPARISON_CANDLES = 100
MIN_COMPARE_SYMBOLS = 2
MAX_COMPARE_SYMBOLS = 5

# Analysis
SUPPORTED_INDICATORS = ("sma", "ema", "rsi", "macd", "bollinger", "atr", "vwap")
COMPARISON_METRICS = ("performance", "volatility", "correlation")
TRADING_DAYS_PER_YEAR = 252
RSI_PERIOD = 14
ATR_PERIOD = 14
RSI_OVERBOUGHT = 70
RSI_OVERSOLD = 30
TREND_SHORT_PERIOD = 20
TREND_LONG_PERIOD = 50
SR_LOOKBACK = 20
SR_THRESHOLD = 0.02
RECENT_VALUES = 10
TOP_LEVELS = 3
CHANGE_LOOKBACK_BARS = 24
