#!/usr/bin/env python3
"""
Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

# Standard library imports
import json
import logging
import math
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any

# Local application imports
import constants as const


# Module-level logger
logger = logging.getLogger(__name__)


def setup_logger(name: str | None = None, level: str | None = None, console: bool = True, log_file: str | None = None) -> logging.Logger:
    """
    Setup a logger with file and optional console output.

    Args:
        name: Logger name (use __name__ from calling module). If None, configures root logger.
        level: Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to INFO or env LOG_LEVEL.
        console: Whether to also log to console (default True for main apps)
        log_file: Custom log filename (defaults to const.LOG_FILE)

    Returns:
        logging.Logger: Configured logger instance

    Example:
        # For the MCP server with its own log file:
        util.setup_logger(name=None, level='INFO', console=True, log_file=const.API_LOG_FILE)
        logger = logging.getLogger(__name__)
    """
    # Determine log level from parameter, environment, or default to INFO
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO").upper()

    numeric_level = getattr(logging, level, logging.INFO)

    # Get or create logger
    logger = logging.getLogger(name) if name else logging.getLogger()

    # Avoid duplicate handlers if logger already configured
    if logger.handlers:
        return logger

    logger.setLevel(numeric_level)

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%H:%M:%S"
    )

    log_filename = log_file if log_file else const.LOG_FILE

    # File handler with rotation (don't delete on startup)
    file_handler = RotatingFileHandler(
        filename=log_filename,
        maxBytes=const.MAX_LOG_SIZE,
        backupCount=const.BACKUP_COUNT,
        encoding="utf-8"
    )
    file_handler.setFormatter(detailed_formatter)
    file_handler.setLevel(logging.DEBUG)  # Capture everything to file
    logger.addHandler(file_handler)

    # Console goes to stderr so stdout stays clean for JSON output
    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(numeric_level)
        logger.addHandler(console_handler)

    return logger


def _finite(data: Any) -> Any:
    """Replace NaN and infinities with None, recursing into dicts and lists."""
    if isinstance(data, float):
        return data if math.isfinite(data) else None
    if isinstance(data, dict):
        return {key: _finite(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [_finite(value) for value in data]
    return data


def to_json(data: Any) -> str:
    """
    Serialize a tool result the way every tool returns it: 2-space indented JSON.

    Non-finite floats (from malformed kline numbers) are written as null so the
    output is strict JSON.
    """
    return json.dumps(_finite(data), indent=2, default=str, allow_nan=False)


def timestamp_to_iso(timestamp_ms: int) -> str:
    """Convert an exchange timestamp in milliseconds to an ISO-8601 UTC string."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).isoformat()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def format_percent(value: float | None) -> str:
    """Format a percentage as 'x.xx%', or 'unknown' when it is missing or not finite."""
    if value is None or not math.isfinite(value):
        return "unknown"
    return f"{value:.2f}%"


def parse_symbols(symbols: str) -> list[str]:
    """Split a comma-separated symbol list ("btcusdt, ETHUSDT") into uppercase symbols."""
    return [s.strip().upper() for s in symbols.split(",") if s.strip()]
