"""
MCP (Model Context Protocol) Server Module

Provides a FastAPI-based MCP server that exposes Binance market data and
technical analysis tools to LLM applications.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""
