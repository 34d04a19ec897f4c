"""
Exceptions raised by the analysis core and the Binance client.

Insufficient data is deliberately not an exception: indicators return an
empty list and statistics return None so composite results stay partial.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""


class AnalysisError(ValueError):
    """Base class for analysis failures."""


class InvalidParameterError(AnalysisError):
    """Raised when a period, threshold, metric or symbol list makes no sense."""


class BinanceAPIError(Exception):
    """Raised when a Binance REST call fails. The message is safe to show to callers."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
