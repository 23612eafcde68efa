from __future__ import annotations

from datetime import datetime, timedelta, timezone
import unittest

import numpy as np

from livechart.scales import (
    LinearScale,
    TimeScale,
    format_ticks_for_axis,
    format_value,
    generate_nice_ticks,
)


class LinearScaleTests(unittest.TestCase):
    def test_maps_domain_onto_range(self) -> None:
        scale = LinearScale(domain=(0.0, 10.0), range=(0.0, 200.0))
        self.assertEqual(scale(5.0), 100.0)
        self.assertEqual(scale(12.5), 250.0)

    def test_inverted_range(self) -> None:
        scale = LinearScale(domain=(0.0, 4.0), range=(400.0, 0.0))
        self.assertEqual(scale(0.0), 400.0)
        self.assertEqual(scale(1.0), 300.0)
        np.testing.assert_allclose(scale.map_array(np.asarray([0.0, 2.0, 4.0])), [400.0, 200.0, 0.0])

    def test_zero_span_domain_maps_to_range_start(self) -> None:
        scale = LinearScale(domain=(3.0, 3.0), range=(50.0, 0.0))
        self.assertEqual(scale(3.0), 50.0)
        self.assertEqual(scale.map_array(np.asarray([1.0, 3.0])).tolist(), [50.0, 50.0])

    def test_ticks_stay_inside_domain(self) -> None:
        scale = LinearScale(domain=(0.3, 9.7), range=(0.0, 100.0))
        ticks = scale.ticks(10)
        self.assertGreater(ticks.size, 2)
        self.assertTrue(np.all(ticks >= 0.3))
        self.assertTrue(np.all(ticks <= 9.7))

    def test_tick_labels(self) -> None:
        self.assertEqual(format_ticks_for_axis(np.asarray([1.5, 2.0, 2.5])), ["1.5", "2", "2.5"])
        self.assertEqual(format_ticks_for_axis(np.asarray([-1.0, -4.4409e-16, 1.0]))[1], "0")

    def test_nice_ticks_single_value(self) -> None:
        self.assertEqual(generate_nice_ticks(4.0, 4.0, 10).tolist(), [4.0])

    def test_nice_ticks_overflowing_span(self) -> None:
        self.assertEqual(generate_nice_ticks(-1e308, 1e308, 10).tolist(), [-1e308, 1e308])


class TimeScaleTests(unittest.TestCase):
    def test_maps_datetimes(self) -> None:
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        scale = TimeScale(domain=(start, start + timedelta(seconds=100)), range=(0.0, 500.0))
        self.assertEqual(scale(start + timedelta(seconds=50)), 250.0)

    def test_labels_use_clock_time_for_short_spans(self) -> None:
        start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        scale = TimeScale(domain=(start, start + timedelta(minutes=5)), range=(0.0, 500.0))
        labels = scale.tick_labels(scale.ticks(5))
        self.assertTrue(labels)
        for label in labels:
            self.assertRegex(label, r"^10:0\d:\d\d$")


class ValueFormatTests(unittest.TestCase):
    def test_integral_values_have_no_fraction(self) -> None:
        self.assertEqual(format_value(5.0), "5")
        self.assertEqual(format_value(-12.0), "-12")
        self.assertEqual(format_value(2.25), "2.25")


if __name__ == "__main__":
    unittest.main()
