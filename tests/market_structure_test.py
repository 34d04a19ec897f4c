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

from market_structure import RESISTANCE, SUPPORT, Level, cluster_levels, detect_trend, find_support_resistance
from ta_errors import InvalidParameterError
from test_data_factory import make_candles, random_walk


class TestClusterLevels(unittest.TestCase):
    """Test greedy level clustering"""

    def test_well_separated_levels_unchanged(self):
        levels = [Level(100.0, SUPPORT), Level(200.0, RESISTANCE), Level(300.0, RESISTANCE)]

        clustered = cluster_levels(levels, 0.02)

        self.assertEqual(clustered, levels)
        # clustering again is a no-op
        self.assertEqual(cluster_levels(clustered, 0.02), clustered)

    def test_nearby_levels_merge(self):
        levels = [Level(150.0, SUPPORT), Level(100.0, SUPPORT), Level(101.0, SUPPORT)]

        clustered = cluster_levels(levels, 0.02)

        self.assertEqual(len(clustered), 2)
        self.assertEqual(clustered[0].strength, 2)
        self.assertAlmostEqual(clustered[0].price, 100.5)
        self.assertEqual(clustered[1], Level(150.0, SUPPORT))

    def test_drifting_cluster_absorbs_neighbour(self):
        """Averaging moves 100 toward 103 until they are within the threshold"""
        levels = [Level(100.0, SUPPORT), Level(103.0, SUPPORT), Level(102.0, SUPPORT)]

        clustered = cluster_levels(levels, 0.02)

        self.assertEqual(clustered, [Level(102.0, SUPPORT, 3)])
        self.assertEqual(cluster_levels(clustered, 0.02), clustered)

    def test_cluster_keeps_first_kind(self):
        clustered = cluster_levels([Level(100.0, RESISTANCE), Level(100.5, SUPPORT)], 0.02)

        self.assertEqual(len(clustered), 1)
        self.assertEqual(clustered[0].kind, RESISTANCE)

    def test_inputs_not_mutated(self):
        levels = [Level(100.0, SUPPORT), Level(101.0, SUPPORT)]
        cluster_levels(levels, 0.02)

        self.assertEqual(levels[0], Level(100.0, SUPPORT, 1))

    def test_sorted_by_strength_stable(self):
        levels = [Level(10.0, SUPPORT), Level(50.0, SUPPORT), Level(50.1, SUPPORT), Level(90.0, SUPPORT)]

        clustered = cluster_levels(levels, 0.02)

        self.assertEqual([round(c.price, 2) for c in clustered], [50.05, 10.0, 90.0])

    def test_invalid_threshold(self):
        with self.assertRaises(InvalidParameterError):
            cluster_levels([], 0)

    def test_as_dict(self):
        self.assertEqual(Level(1.5, SUPPORT, 3).as_dict(), {'price': 1.5, 'type': 'support', 'strength': 3})


class TestFindSupportResistance(unittest.TestCase):
    """Test extremum scanning"""

    def test_peak_is_resistance(self):
        candles = make_candles([1, 2, 3, 10, 3, 2, 1])

        levels = find_support_resistance(candles, lookback=2)

        self.assertEqual(levels, [Level(11.0, RESISTANCE)])

    def test_valley_is_support(self):
        candles = make_candles([50, 40, 30, 10, 30, 40, 50])

        levels = find_support_resistance(candles, lookback=2)

        self.assertEqual(levels, [Level(9.0, SUPPORT)])

    def test_ties_are_not_extrema(self):
        candles = make_candles([1, 2, 10, 10, 2, 1])
        self.assertEqual(find_support_resistance(candles, lookback=2), [])

    def test_too_few_candles(self):
        self.assertEqual(find_support_resistance(make_candles(random_walk(40)), lookback=20), [])

    def test_levels_on_random_walk(self):
        levels = find_support_resistance(make_candles(random_walk(300, vol=0.03)))

        strengths = [lvl.strength for lvl in levels]
        self.assertEqual(strengths, sorted(strengths, reverse=True))
        for level in levels:
            self.assertIn(level.kind, (SUPPORT, RESISTANCE))

    def test_invalid_parameters(self):
        candles = make_candles(random_walk(50))
        with self.assertRaises(InvalidParameterError):
            find_support_resistance(candles, lookback=0)
        with self.assertRaises(InvalidParameterError):
            find_support_resistance(candles, threshold=-0.1)


class TestDetectTrend(unittest.TestCase):
    """Test SMA crossover trend classification"""

    def test_bullish(self):
        self.assertEqual(detect_trend(list(range(1, 61))), 'bullish')

    def test_bearish(self):
        self.assertEqual(detect_trend(list(range(60, 0, -1))), 'bearish')

    def test_neutral(self):
        self.assertEqual(detect_trend([100.0] * 60), 'neutral')

    def test_unknown_without_long_sma(self):
        self.assertEqual(detect_trend(list(range(1, 31))), 'unknown')

    def test_unknown_with_nan(self):
        prices = [100.0] * 60
        prices[-1] = float('nan')
        self.assertEqual(detect_trend(prices), 'unknown')


if __name__ == '__main__':
    unittest.main()
