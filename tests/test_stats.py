"""Tests for benchreport.stats — sample reduction and scenario ordering."""

from __future__ import annotations

import math
import unittest

from benchreport.stats import (
    EmptySampleSetError,
    SingleMode,
    Statistics,
    TiedMode,
    _median,
    _percentile,
    compute_mode,
    reduce,
    sort_scenarios,
)
from report_test_helpers import make_scenario, make_stats

KNOWN_SAMPLES = [200, 400, 400, 400, 500, 500, 700, 900]


# ---------------------------------------------------------------------------
# reduce()
# ---------------------------------------------------------------------------


class TestReduce(unittest.TestCase):
    """Tests for reduce() and the Statistics record."""

    def test_known_values(self) -> None:
        stats = reduce(KNOWN_SAMPLES)
        self.assertAlmostEqual(stats.average, 500.0)
        self.assertAlmostEqual(stats.std_dev, 200.0)
        self.assertAlmostEqual(stats.std_dev_ratio, 0.4)
        self.assertAlmostEqual(stats.median, 450.0)
        self.assertEqual(stats.mode, SingleMode(400))
        self.assertEqual(stats.minimum, 200)
        self.assertEqual(stats.maximum, 900)
        self.assertEqual(stats.sample_size, 8)
        self.assertFalse(stats.degenerate)

    def test_ips_nanoseconds(self) -> None:
        """Samples default to nanoseconds: 500ns average is 2M per second."""
        stats = reduce(KNOWN_SAMPLES)
        self.assertAlmostEqual(stats.ips, 2_000_000.0)
        self.assertAlmostEqual(stats.std_dev_ips, 800_000.0)

    def test_ips_microseconds(self) -> None:
        stats = reduce(KNOWN_SAMPLES, units_per_second=1_000_000)
        self.assertAlmostEqual(stats.ips, 2000.0)
        self.assertAlmostEqual(stats.std_dev_ips, 800.0)

    def test_empty_raises(self) -> None:
        with self.assertRaises(EmptySampleSetError):
            reduce([])

    def test_empty_error_is_value_error(self) -> None:
        self.assertTrue(issubclass(EmptySampleSetError, ValueError))

    def test_single_sample(self) -> None:
        stats = reduce([42])
        self.assertEqual(stats.average, 42.0)
        self.assertEqual(stats.median, 42.0)
        self.assertIsInstance(stats.median, float)
        self.assertEqual(stats.std_dev, 0.0)
        self.assertEqual(stats.std_dev_ratio, 0.0)
        self.assertIsNone(stats.mode)
        self.assertEqual(stats.percentiles[99], 42.0)

    def test_unsorted_input(self) -> None:
        stats = reduce([5, 1, 3, 2, 4])
        self.assertEqual(stats.minimum, 1)
        self.assertEqual(stats.maximum, 5)
        self.assertEqual(stats.median, 3.0)

    def test_order_invariants(self) -> None:
        """minimum <= median <= maximum and minimum <= average <= maximum."""
        for samples in (
            [1, 2, 3],
            [10, 10, 10, 10],
            [3, 900, 4, 5, 1, 1000, 2],
            [0.5, 0.25, 0.75, 100.0],
            KNOWN_SAMPLES,
        ):
            stats = reduce(samples)
            self.assertLessEqual(stats.minimum, stats.median)
            self.assertLessEqual(stats.median, stats.maximum)
            self.assertLessEqual(stats.minimum, stats.average)
            self.assertLessEqual(stats.average, stats.maximum)
            self.assertGreaterEqual(stats.std_dev_ratio, 0)

    def test_input_not_mutated(self) -> None:
        samples = [3, 1, 2]
        reduce(samples)
        self.assertEqual(samples, [3, 1, 2])

    def test_percentiles_requested(self) -> None:
        stats = reduce(list(range(1, 101)), percentiles=(25, 75, 99))
        self.assertEqual(set(stats.percentiles), {25, 75, 99})
        self.assertAlmostEqual(stats.percentiles[25], 25.75)
        self.assertAlmostEqual(stats.percentiles[75], 75.25)
        self.assertAlmostEqual(stats.percentiles[99], 99.01)

    def test_percentile_50_is_median(self) -> None:
        stats = reduce(KNOWN_SAMPLES)
        self.assertAlmostEqual(stats.percentiles[50], stats.median)

    def test_bad_percentile_rank(self) -> None:
        with self.assertRaises(ValueError):
            reduce([1, 2, 3], percentiles=(101,))


class TestDegenerate(unittest.TestCase):
    """All-zero samples have an undefined deviation ratio."""

    def test_all_zero(self) -> None:
        with self.assertLogs("benchreport", level="WARNING") as cm:
            stats = reduce([0, 0, 0])
        self.assertTrue(stats.degenerate)
        self.assertEqual(stats.average, 0.0)
        self.assertEqual(stats.ips, 0.0)
        self.assertEqual(stats.std_dev_ratio, 0.0)
        self.assertEqual(stats.std_dev_ips, 0.0)
        self.assertIn("undefined", cm.output[0])

    def test_no_nan_or_inf(self) -> None:
        stats = reduce([0, 0])
        for value in (stats.ips, stats.std_dev_ratio, stats.std_dev_ips):
            self.assertFalse(math.isnan(value))
            self.assertFalse(math.isinf(value))


# ---------------------------------------------------------------------------
# Median / percentile helpers
# ---------------------------------------------------------------------------


class TestMedian(unittest.TestCase):
    def test_odd(self) -> None:
        self.assertEqual(_median([1, 2, 10]), 2.0)

    def test_even(self) -> None:
        self.assertEqual(_median([1, 2, 3, 10]), 2.5)


class TestPercentile(unittest.TestCase):
    """Tests for _percentile() linear interpolation."""

    def test_bounds(self) -> None:
        data = [1.0, 2.0, 3.0, 4.0]
        self.assertEqual(_percentile(data, 0), 1.0)
        self.assertEqual(_percentile(data, 100), 4.0)

    def test_exact_rank(self) -> None:
        self.assertEqual(_percentile([10.0, 20.0, 30.0], 50), 20.0)

    def test_interpolated(self) -> None:
        # position (4 - 1) * 0.5 = 1.5, halfway between 2 and 3
        self.assertAlmostEqual(_percentile([1.0, 2.0, 3.0, 4.0], 50), 2.5)

    def test_single_value(self) -> None:
        self.assertEqual(_percentile([7.0], 99), 7.0)

    def test_within_range(self) -> None:
        data = sorted([5, 1, 9, 3, 7, 2])
        for rank in (0, 1, 50, 90, 99, 100):
            value = _percentile(data, rank)
            self.assertGreaterEqual(value, data[0])
            self.assertLessEqual(value, data[-1])


# ---------------------------------------------------------------------------
# Mode
# ---------------------------------------------------------------------------


class TestMode(unittest.TestCase):
    def test_single(self) -> None:
        self.assertEqual(compute_mode([1, 2, 2, 3]), SingleMode(2))

    def test_no_repeats(self) -> None:
        self.assertIsNone(compute_mode([1, 2, 3, 4]))

    def test_empty(self) -> None:
        self.assertIsNone(compute_mode([]))

    def test_tie_keeps_encounter_order(self) -> None:
        mode = compute_mode([5, 3, 3, 5, 1])
        self.assertEqual(mode, TiedMode((5, 3)))

    def test_tie_ignores_lower_counts(self) -> None:
        mode = compute_mode([9, 1, 1, 2, 2, 9, 9, 1, 2, 4, 4])
        self.assertEqual(mode, TiedMode((9, 1, 2)))


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


class TestStatisticsDict(unittest.TestCase):
    def test_to_dict_fields(self) -> None:
        d = reduce(KNOWN_SAMPLES).to_dict()
        self.assertEqual(d["average"], 500.0)
        self.assertEqual(d["mode"], 400)
        self.assertEqual(d["sample_size"], 8)
        self.assertIn("99", d["percentiles"])
        self.assertFalse(d["degenerate"])

    def test_tied_mode_serialized_as_list(self) -> None:
        d = reduce([1, 1, 2, 2]).to_dict()
        self.assertEqual(d["mode"], [1, 2])

    def test_from_dict(self) -> None:
        original = reduce([1, 1, 2, 2, 3])
        restored = Statistics.from_dict(original.to_dict())
        self.assertEqual(restored.mode, TiedMode((1, 2)))
        self.assertAlmostEqual(restored.percentiles[99], original.percentiles[99])
        self.assertEqual(restored.sample_size, 5)


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


class TestSortScenarios(unittest.TestCase):
    def test_sorts_by_average(self) -> None:
        scenarios = [
            make_scenario("b", make_stats(200.0)),
            make_scenario("c", make_stats(400.0)),
            make_scenario("a", make_stats(100.0)),
        ]
        result = sort_scenarios(scenarios)
        self.assertEqual([s.statistics.average for s in result], [100.0, 200.0, 400.0])

    def test_stable(self) -> None:
        scenarios = [
            make_scenario("first", make_stats(100.0)),
            make_scenario("fast", make_stats(50.0)),
            make_scenario("second", make_stats(100.0)),
        ]
        result = sort_scenarios(scenarios)
        self.assertEqual([s.name for s in result], ["fast", "first", "second"])

    def test_does_not_reorder_input(self) -> None:
        scenarios = [make_scenario("b", make_stats(2.0)), make_scenario("a", make_stats(1.0))]
        sort_scenarios(scenarios)
        self.assertEqual([s.name for s in scenarios], ["b", "a"])

    def test_missing_statistics(self) -> None:
        with self.assertRaises(ValueError):
            sort_scenarios([make_scenario("bare")])
