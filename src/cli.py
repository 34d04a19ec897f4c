#!/usr/bin/env python3
"""
Binance MCP CLI

Command-line access to the same market data and analysis the MCP server exposes.
Output is the JSON each tool would return, or a table with --table.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.

Usage:
    python src/cli.py --help
    python src/cli.py market price --symbol BTCUSDT
    python src/cli.py market klines --symbol ETHUSDT --interval 1h --limit 20 --table
    python src/cli.py analyze indicators --symbol BTCUSDT --interval 4h --indicators rsi,macd
    python src/cli.py analyze compare --symbols BTCUSDT,ETHUSDT,SOLUSDT --metric performance --table
"""

import logging
import sys

import click
from tabulate import tabulate

# Local application imports
import constants as const
import util
from providers.binance_client import BinanceClient
from ta_errors import BinanceAPIError, InvalidParameterError
from ta_service import TAService


# Initialize logging for CLI application
util.setup_logger(name=None, level="INFO", console=True, log_file=const.CMDS_LOG_FILE)
logger = logging.getLogger(__name__)


def _echo_result(result):
    """Print a result as JSON; analysis errors go to stderr and exit non-zero."""
    if isinstance(result, dict) and "error" in result:
        click.secho(f"\n✗ {result['error']}\n", fg="red", err=True)
        sys.exit(1)
    click.echo(util.to_json(result))


def _fmt(value, digits=4):
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:.{digits}f}"
    return str(value)


@click.group()
@click.option("--testnet", is_flag=True, help="Use the Binance testnet instead of production")
@click.pass_context
def cli(ctx, testnet):
    """
    Binance MCP Command Line Interface

    Query market data and run technical analysis on Binance trading pairs.
    """
    ctx.ensure_object(dict)

    base_url = const.BINANCE_TESTNET_URL if testnet else None
    client = BinanceClient(base_url=base_url)
    ctx.obj["client"] = client
    ctx.obj["ta_service"] = TAService(client)
    logger.info(f"Initializing Binance MCP CLI against {client.base_url}")


# ============================================================================
# Market data commands
# ============================================================================


@cli.group()
def market():
    """Raw market data: prices, K-lines, order book, tickers."""


@market.command("price")
@click.option("--symbol", help="Trading pair, e.g. BTCUSDT (omit for all pairs)")
@click.pass_context
def market_price(ctx, symbol):
    """Latest price for one or all trading pairs."""
    client: BinanceClient = ctx.obj["client"]
    _echo_result(client.get_price(symbol.upper() if symbol else None))


@market.command("klines")
@click.option("--symbol", required=True, help="Trading pair, e.g. BTCUSDT")
@click.option("--interval", type=click.Choice(const.KLINE_INTERVALS), default="1h", help="K-line interval (default: 1h)")
@click.option("--limit", type=click.IntRange(1, const.MAX_KLINES_LIMIT), default=20, help="Number of K-lines (default: 20)")
@click.option("--table", is_flag=True, help="Show candles as a table instead of JSON")
@click.pass_context
def market_klines(ctx, symbol, interval, limit, table):
    """
    Candlestick data for a trading pair.

    Examples:
      cli.py market klines --symbol BTCUSDT
      cli.py market klines --symbol ETHUSDT --interval 4h --limit 50 --table
    """
    client: BinanceClient = ctx.obj["client"]
    symbol = symbol.upper()

    if not table:
        _echo_result(client.get_klines(symbol, interval, limit=limit))
        return

    candles = client.get_candles(symbol, interval, limit)
    rows = [
        [util.timestamp_to_iso(c.timestamp), c.open, c.high, c.low, c.close, c.volume]
        for c in candles
    ]
    click.echo(f"\n{symbol} {interval} ({len(candles)} candles)\n")
    click.echo(tabulate(rows, headers=["Open Time", "Open", "High", "Low", "Close", "Volume"], tablefmt="simple", floatfmt=".4f"))


@market.command("order-book")
@click.option("--symbol", required=True, help="Trading pair, e.g. BTCUSDT")
@click.option("--limit", type=click.IntRange(1, const.MAX_LIMIT), default=10, help="Order book depth (default: 10)")
@click.pass_context
def market_order_book(ctx, symbol, limit):
    """Order book bids and asks."""
    client: BinanceClient = ctx.obj["client"]
    _echo_result(client.get_order_book(symbol.upper(), limit))


@market.command("ticker")
@click.option("--symbols", required=True, help='Comma-separated symbols (e.g., "BTCUSDT,ETHUSDT")')
@click.option("--type", "ticker_type", type=click.Choice(const.TICKER_TYPES), default="MINI", help="Ticker type (default: MINI)")
@click.pass_context
def market_ticker(ctx, symbols, ticker_type):
    """24 hour price change statistics."""
    client: BinanceClient = ctx.obj["client"]
    symbols_list = util.parse_symbols(symbols)
    if len(symbols_list) == 1:
        _echo_result(client.get_24hr_ticker(symbol=symbols_list[0], ticker_type=ticker_type))
    else:
        _echo_result(client.get_24hr_ticker(symbols=symbols_list, ticker_type=ticker_type))


# ============================================================================
# Analysis commands
# ============================================================================


@cli.group()
def analyze():
    """Technical analysis: indicators, market analysis, symbol comparison."""


@analyze.command("indicators")
@click.option("--symbol", required=True, help="Trading pair, e.g. BTCUSDT")
@click.option("--interval", type=click.Choice(const.KLINE_INTERVALS), default="1h", help="K-line interval (default: 1h)")
@click.option("--indicators", "names", default="sma,ema,rsi,macd", help="Comma-separated indicators (default: sma,ema,rsi,macd)")
@click.option("--period", type=click.IntRange(1, const.MAX_PERIOD), default=const.DEFAULT_INDICATOR_PERIOD, help="Moving average period (default: 20)")
@click.option("--limit", type=click.IntRange(1, const.MAX_ANALYSIS_LIMIT), default=const.DEFAULT_INDICATOR_LIMIT, help="Candles to analyze (default: 100)")
@click.pass_context
def analyze_indicators(ctx, symbol, interval, names, period, limit):
    """
    Calculate technical indicators.

    Available: sma, ema, rsi, macd, bollinger, atr, vwap

    Examples:
      cli.py analyze indicators --symbol BTCUSDT --indicators rsi,bollinger
      cli.py analyze indicators --symbol ETHUSDT --interval 1d --period 50
    """
    ta_service: TAService = ctx.obj["ta_service"]
    indicators = [n.strip().lower() for n in names.split(",") if n.strip()]
    _echo_result(ta_service.calculate_indicators(symbol.upper(), interval, indicators, period, limit))


@analyze.command("market")
@click.option("--symbol", required=True, help="Trading pair, e.g. BTCUSDT")
@click.option("--interval", type=click.Choice(const.ANALYSIS_INTERVALS), default="1h", help="Analysis timeframe (default: 1h)")
@click.option("--levels/--no-levels", default=False, help="Include support/resistance levels")
@click.pass_context
def analyze_market(ctx, symbol, interval, levels):
    """Trend, return statistics and market conditions over the last 200 candles."""
    ta_service: TAService = ctx.obj["ta_service"]
    _echo_result(ta_service.analyze_market(symbol.upper(), interval, include_support=levels))


@analyze.command("compare")
@click.option("--symbols", required=True, help='2-5 comma-separated symbols (e.g., "BTCUSDT,ETHUSDT")')
@click.option("--interval", type=click.Choice(const.ANALYSIS_INTERVALS), default="1d", help="Comparison timeframe (default: 1d)")
@click.option("--metric", type=click.Choice(const.COMPARISON_METRICS), default="performance", help="Comparison metric (default: performance)")
@click.option("--table", is_flag=True, help="Show the comparison as a table instead of JSON")
@click.pass_context
def analyze_compare(ctx, symbols, interval, metric, table):
    """
    Compare several symbols on one metric.

    Examples:
      cli.py analyze compare --symbols BTCUSDT,ETHUSDT
      cli.py analyze compare --symbols BTCUSDT,ETHUSDT,BNBUSDT --metric volatility --table
    """
    ta_service: TAService = ctx.obj["ta_service"]
    symbols_list = util.parse_symbols(symbols)
    if not const.MIN_COMPARE_SYMBOLS <= len(symbols_list) <= const.MAX_COMPARE_SYMBOLS:
        raise click.BadParameter(
            f"expected {const.MIN_COMPARE_SYMBOLS}-{const.MAX_COMPARE_SYMBOLS} symbols, got {len(symbols_list)}",
            param_hint="--symbols",
        )

    result = ta_service.compare_symbols(symbols_list, interval, metric)
    if not table or "error" in result:
        _echo_result(result)
        return

    records = result["symbols"]
    headers = ["Symbol"] + list(next(iter(records.values())).keys())
    rows = [[symbol] + [_fmt(v) for v in record.values()] for symbol, record in records.items()]
    click.echo(f"\nComparison by {metric} ({interval})\n")
    click.echo(tabulate(rows, headers=headers, tablefmt="simple"))
    if "ranking" in result:
        click.echo(f"\nRanking (Sharpe): {' > '.join(result['ranking'])}")


# Add version command
@cli.command()
def version():
    """Show version information"""
    click.echo(f"{const.SERVER_NAME} CLI v{const.VERSION}")


def main():
    try:
        cli()
    except (BinanceAPIError, InvalidParameterError) as e:
        click.secho(f"\n✗ {e}\n", fg="red", err=True)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        click.secho(f"\n✗ Fatal error: {e}\n", fg="red", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
