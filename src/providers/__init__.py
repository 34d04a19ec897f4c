"""
Market data providers.

This package contains the candle provider interface and the Binance REST
client that implements it.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""
