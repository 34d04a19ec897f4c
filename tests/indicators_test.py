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

import math
import unittest

from indicators import (
    align_to_input, atr, bollinger_bands, ema, is_defined, last_value, macd, rsi, sma, true_range, vwap,
)
from ta_errors import InvalidParameterError
from test_data_factory import random_walk


class TestMovingAverages(unittest.TestCase):
    """Test SMA and EMA"""

    def test_sma_values(self):
        result = sma(list(range(1, 11)), 3)

        self.assertEqual(len(result), 8)
        for actual, expected in zip(result, range(2, 10)):
            self.assertAlmostEqual(actual, expected)
        self.assertAlmostEqual(last_value(result), 9.0)
        self.assertAlmostEqual(align_to_input(result, 10)[9], 9.0)

    def test_sma_matches_windowed_mean(self):
        prices = random_walk(120, vol=0.03, seed=7)

        for period in (1, 5, 20, 50):
            result = sma(prices, period)
            self.assertEqual(len(result), len(prices) - period + 1)
            for i, value in enumerate(align_to_input(result, len(prices))):
                if i < period - 1:
                    self.assertIsNone(value)
                else:
                    window = prices[i - period + 1:i + 1]
                    self.assertAlmostEqual(value, sum(window) / period, places=6)

    def test_sma_insufficient_data(self):
        self.assertEqual(sma([1, 2], 3), [])

    def test_sma_period_equals_length(self):
        self.assertEqual(len(sma([1, 2, 3], 3)), 1)

    def test_invalid_period_raises(self):
        for func in (sma, ema, rsi):
            with self.assertRaises(InvalidParameterError):
                func([1, 2, 3], 0)
            with self.assertRaises(InvalidParameterError):
                func([1, 2, 3], -1)

    def test_ema_seeded_with_sma(self):
        """With k = 0.5 and a linear series the EMA tracks one step behind"""
        result = ema(list(range(1, 11)), 3)

        self.assertEqual(len(result), 8)
        self.assertAlmostEqual(result[0], 2.0)
        for actual, expected in zip(result, range(2, 10)):
            self.assertAlmostEqual(actual, expected)

    def test_ema_insufficient_data(self):
        self.assertEqual(ema([1, 2], 5), [])


class TestRSI(unittest.TestCase):
    """Test RSI"""

    def test_flat_prices(self):
        """Zero average gain and loss is reported as neutral 50"""
        self.assertEqual(rsi([10, 10, 10, 10, 10], 4), [50.0])

    def test_only_gains(self):
        result = rsi(list(range(1, 21)), 14)
        self.assertEqual(len(result), 6)
        self.assertTrue(all(v == 100.0 for v in result))

    def test_only_losses(self):
        result = rsi(list(range(20, 0, -1)), 14)
        self.assertTrue(all(v == 0.0 for v in result))

    def test_bounds(self):
        prices = random_walk(200, vol=0.05)
        result = rsi(prices, 14)

        self.assertEqual(len(result), len(prices) - 14)
        for value in result:
            self.assertGreaterEqual(value, 0)
            self.assertLessEqual(value, 100)

    def test_needs_more_than_period_samples(self):
        self.assertEqual(rsi([1, 2, 3, 4], 4), [])
        self.assertEqual(rsi([], 14), [])


class TestMACD(unittest.TestCase):
    """Test MACD"""

    def test_length_and_warmup(self):
        prices = random_walk(60)
        points = macd(prices)

        self.assertEqual(len(points), 60 - 26 + 1)
        # signal line needs 9 MACD values
        for point in points[:8]:
            self.assertIsNone(point.signal)
            self.assertIsNone(point.histogram)
        for point in points[8:]:
            self.assertIsNotNone(point.signal)

    def test_histogram_identity(self):
        for point in macd(random_walk(120)):
            if point.signal is not None:
                self.assertAlmostEqual(point.histogram, point.macd - point.signal)

    def test_fast_must_be_shorter_than_slow(self):
        with self.assertRaises(InvalidParameterError):
            macd(random_walk(60), fast=26, slow=12)
        with self.assertRaises(InvalidParameterError):
            macd(random_walk(60), fast=12, slow=12)

    def test_insufficient_data(self):
        self.assertEqual(macd(random_walk(20)), [])

    def test_as_dict_keys(self):
        point = last_value(macd(random_walk(60)))
        self.assertEqual(set(point.as_dict()), {'MACD', 'signal', 'histogram'})


class TestBollingerBands(unittest.TestCase):
    """Test Bollinger Bands"""

    def test_middle_equals_sma(self):
        prices = random_walk(50)
        bands = bollinger_bands(prices, 20)
        middle = sma(prices, 20)

        self.assertEqual(len(bands), len(middle))
        for band, avg in zip(bands, middle):
            self.assertAlmostEqual(band.middle, avg)
            self.assertLessEqual(band.lower, band.middle)
            self.assertGreaterEqual(band.upper, band.middle)

    def test_population_standard_deviation(self):
        band = bollinger_bands([1, 2, 3], 3)[0]
        sigma = math.sqrt(2 / 3)

        self.assertAlmostEqual(band.middle, 2.0)
        self.assertAlmostEqual(band.upper, 2.0 + 2 * sigma)
        self.assertAlmostEqual(band.lower, 2.0 - 2 * sigma)
        self.assertAlmostEqual(band.pb, (3 - band.lower) / (band.upper - band.lower))

    def test_flat_prices_have_zero_width(self):
        band = bollinger_bands([10] * 20, 20)[0]

        self.assertEqual(band.upper, band.lower)
        self.assertIsNone(band.pb)

    def test_insufficient_data(self):
        self.assertEqual(bollinger_bands([1, 2, 3], 20), [])


class TestATR(unittest.TestCase):
    """Test true range and ATR"""

    def test_constant_range(self):
        closes = [100.0] * 20
        highs = [101.0] * 20
        lows = [99.0] * 20

        self.assertEqual(true_range(highs, lows, closes), [2.0] * 19)
        result = atr(highs, lows, closes, 14)
        self.assertEqual(len(result), 6)
        for value in result:
            self.assertAlmostEqual(value, 2.0)

    def test_gap_uses_previous_close(self):
        """A gap up makes the true range larger than the bar's own range"""
        self.assertEqual(true_range([11, 21], [9, 19], [10, 20]), [11])

    def test_insufficient_data(self):
        self.assertEqual(atr([1] * 14, [1] * 14, [1] * 14, 14), [])

    def test_mismatched_lengths(self):
        with self.assertRaises(InvalidParameterError):
            atr([1, 2], [1], [1, 2], 1)


class TestVWAP(unittest.TestCase):
    """Test VWAP"""

    def test_running_average(self):
        result = vwap([2, 4], [0, 2], [1, 3], [1, 3])

        self.assertEqual(len(result), 2)
        self.assertAlmostEqual(result[0], 1.0)
        self.assertAlmostEqual(result[1], 2.5)

    def test_zero_volume_is_undefined(self):
        result = vwap([2, 4], [0, 2], [1, 3], [0, 2])

        self.assertIsNone(result[0])
        self.assertAlmostEqual(result[1], 3.0)

    def test_empty(self):
        self.assertEqual(vwap([], [], [], []), [])


class TestHelpers(unittest.TestCase):
    def test_align_to_input(self):
        self.assertEqual(align_to_input([1, 2], 4), [None, None, 1, 2])
        self.assertEqual(align_to_input(sma([1, 2, 3, 4], 2), 4)[0], None)

    def test_align_rejects_longer_result(self):
        with self.assertRaises(InvalidParameterError):
            align_to_input([1, 2, 3], 2)

    def test_last_value(self):
        self.assertIsNone(last_value([]))
        self.assertEqual(last_value([1, 2, 3]), 3)

    def test_is_defined(self):
        self.assertTrue(is_defined(0.0))
        self.assertFalse(is_defined(None))
        self.assertFalse(is_defined(float('nan')))


if __name__ == '__main__':
    unittest.main()
