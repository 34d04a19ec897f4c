#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import sys
import os
# Add src and tests to path for imports (needed when running test file directly)
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

import unittest

from comparison import compare_symbols, rank_by_sharpe, return_correlation
from price_stats import calculate_price_stats
from ta_errors import InvalidParameterError
from test_data_factory import make_candles, random_walk


class TestRankBySharpe(unittest.TestCase):
    """Test performance ranking"""

    def test_higher_ratio_first(self):
        records = {'ETHUSDT': {'sharpeRatio': 0.8}, 'BTCUSDT': {'sharpeRatio': 1.5}}
        self.assertEqual(rank_by_sharpe(records), ['BTCUSDT', 'ETHUSDT'])

    def test_undefined_ratio_last(self):
        records = {
            'AUSDT': {'sharpeRatio': None},
            'BUSDT': {'sharpeRatio': -2.0},
            'CUSDT': {'sharpeRatio': float('nan')},
            'DUSDT': {'sharpeRatio': 0.1},
        }
        self.assertEqual(rank_by_sharpe(records), ['DUSDT', 'BUSDT', 'AUSDT', 'CUSDT'])

    def test_ties_keep_input_order(self):
        records = {'XUSDT': {'sharpeRatio': 1.0}, 'YUSDT': {'sharpeRatio': 1.0}}
        self.assertEqual(rank_by_sharpe(records), ['XUSDT', 'YUSDT'])


class TestCompareSymbols(unittest.TestCase):
    """Test the comparison aggregator"""

    def setUp(self):
        self.candles = {
            'BTCUSDT': make_candles(random_walk(100, start_price=40000, seed=1)),
            'ETHUSDT': make_candles(random_walk(100, start_price=2000, seed=2)),
        }

    def test_performance(self):
        result = compare_symbols(self.candles, 'performance')

        self.assertEqual(result['metric'], 'performance')
        self.assertEqual(list(result['symbols']), ['BTCUSDT', 'ETHUSDT'])
        btc = result['symbols']['BTCUSDT']
        stats = calculate_price_stats(self.candles['BTCUSDT'])
        self.assertEqual(btc['currentPrice'], self.candles['BTCUSDT'][-1].close)
        self.assertAlmostEqual(btc['return24h'], stats.avg_return * 24)
        self.assertEqual(btc['winRate'], stats.win_rate)
        self.assertEqual(btc['sharpeRatio'], stats.sharpe_ratio)
        self.assertCountEqual(result['ranking'], ['BTCUSDT', 'ETHUSDT'])

    def test_volatility(self):
        result = compare_symbols(self.candles, 'volatility')

        eth = result['symbols']['ETHUSDT']
        stats = calculate_price_stats(self.candles['ETHUSDT'])
        self.assertEqual(eth['stdDev'], stats.std_dev)
        self.assertEqual(eth['maxDrawdown'], stats.min_return)
        self.assertGreater(eth['atr'], 0)
        self.assertTrue(eth['atrPercent'].endswith('%'))
        self.assertNotIn('ranking', result)

    def test_correlation(self):
        result = compare_symbols(self.candles, 'correlation')

        for record in result['symbols'].values():
            self.assertIn(record['trend'], ('bullish', 'bearish', 'neutral', 'unknown'))
            self.assertGreaterEqual(record['rsi'], 0)
            self.assertLessEqual(record['rsi'], 100)
        matrix = result['returnCorrelation']
        self.assertAlmostEqual(matrix['BTCUSDT']['BTCUSDT'], 1.0)
        self.assertAlmostEqual(matrix['BTCUSDT']['ETHUSDT'], matrix['ETHUSDT']['BTCUSDT'])

    def test_short_window_fields_are_undefined(self):
        result = compare_symbols({'AUSDT': make_candles([1, 2, 3]), 'BUSDT': make_candles([3, 2, 1])}, 'volatility')

        self.assertIsNone(result['symbols']['AUSDT']['atr'])
        self.assertEqual(result['symbols']['AUSDT']['atrPercent'], 'unknown')

    def test_invalid_metric(self):
        with self.assertRaises(InvalidParameterError):
            compare_symbols(self.candles, 'momentum')

    def test_symbol_count(self):
        with self.assertRaises(InvalidParameterError):
            compare_symbols({'BTCUSDT': self.candles['BTCUSDT']}, 'performance')

        six = {f'S{i}USDT': self.candles['BTCUSDT'] for i in range(6)}
        with self.assertRaises(InvalidParameterError):
            compare_symbols(six, 'performance')


class TestReturnCorrelation(unittest.TestCase):
    def test_identical_series(self):
        candles = make_candles(random_walk(50))
        matrix = return_correlation({'AUSDT': candles, 'BUSDT': candles})

        self.assertAlmostEqual(matrix['AUSDT']['BUSDT'], 1.0)

    def test_constant_series_is_undefined(self):
        matrix = return_correlation({
            'AUSDT': make_candles(random_walk(50)),
            'BUSDT': make_candles([10.0] * 50),
        })

        self.assertIsNone(matrix['AUSDT']['BUSDT'])
        self.assertIsNone(matrix['BUSDT']['AUSDT'])

    def test_aligns_on_common_tail(self):
        prices = random_walk(60)
        matrix = return_correlation({
            'AUSDT': make_candles(prices),
            'BUSDT': make_candles(prices[-30:]),
        })

        self.assertAlmostEqual(matrix['AUSDT']['BUSDT'], 1.0)


if __name__ == '__main__':
    unittest.main()
