from __future__ import annotations

from datetime import datetime, timezone
import random
import unittest

from livechart.points import Point, histogram_points, parse_timestamp, scatter_points, time_series_points


class HistogramPointTests(unittest.TestCase):
    def test_scenario_points(self) -> None:
        points = histogram_points({"2": 1, "0": 2, "1": 5})
        self.assertEqual(points, [Point(x=0.0, y=2.0), Point(x=1.0, y=5.0), Point(x=2.0, y=1.0)])

    def test_sorted_numerically_not_lexically(self) -> None:
        rng = random.Random(7)
        keys = [str(rng.randint(-500, 500) * 5) for _ in range(60)]
        values = {key: float(i) for i, key in enumerate(keys)}
        xs = [p.x for p in histogram_points(values)]
        self.assertEqual(xs, sorted(xs))
        self.assertEqual(histogram_points({"10": 1, "9": 1, "-5": 1})[0].x, -5.0)

    def test_unparseable_keys_are_dropped(self) -> None:
        points = histogram_points({"1.5": 3, "nope": 4, "2.5": 1})
        self.assertEqual([p.x for p in points], [1.5, 2.5])

    def test_non_finite_keys_and_values_are_dropped(self) -> None:
        points = histogram_points({"3": 1, "nan": 1, "1": 1, "inf": 1, "-1e400": 1, "2": float("nan")})
        self.assertEqual([p.x for p in points], [1.0, 3.0])


class TimeSeriesPointTests(unittest.TestCase):
    def test_chronological_order(self) -> None:
        values = {
            "2014-03-01T10:00:02Z": 3.0,
            "2014-03-01T10:00:00Z": 1.0,
            "2014-03-01T10:00:01Z": 2.0,
        }
        self.assertEqual([p.y for p in time_series_points(values)], [1.0, 2.0, 3.0])

    def test_order_follows_instants_across_offsets(self) -> None:
        values = {
            "2014-03-01T11:00:00+02:00": 2.0,  # 09:00Z
            "2014-03-01T09:30:00Z": 3.0,
            "2014-03-01T03:00:00-05:00": 1.0,  # 08:00Z
        }
        self.assertEqual([p.y for p in time_series_points(values)], [1.0, 2.0, 3.0])

    def test_ties_broken_by_key_string(self) -> None:
        values = {
            "2014-03-01T10:00:00Z": 2.0,
            "2014-03-01T10:00:00+00:00": 1.0,
        }
        self.assertEqual([p.y for p in time_series_points(values)], [1.0, 2.0])

    def test_nanosecond_timestamps(self) -> None:
        when = parse_timestamp("2015-06-07T08:09:10.123456789-04:00")
        self.assertEqual(when.microsecond, 123456)
        self.assertEqual(when.astimezone(timezone.utc).hour, 12)

    def test_naive_timestamps_are_utc(self) -> None:
        self.assertEqual(parse_timestamp("2015-06-07T08:09:10"), datetime(2015, 6, 7, 8, 9, 10, tzinfo=timezone.utc))

    def test_unparseable_keys_are_dropped(self) -> None:
        points = time_series_points({"garbage": 1.0, "2014-03-01T10:00:00Z": 2.0, "2014-03-01T10:00:01Z": 3.0})
        self.assertEqual(len(points), 2)

    def test_non_finite_values_are_dropped(self) -> None:
        values = {
            "2014-03-01T10:00:00Z": 2.0,
            "2014-03-01T10:00:01Z": float("inf"),
            "2014-03-01T10:00:02Z": float("nan"),
        }
        self.assertEqual([p.y for p in time_series_points(values)], [2.0])


class ScatterPointTests(unittest.TestCase):
    def test_feed_order_is_kept(self) -> None:
        values = {"5|1": 1.0, "-2|2": 4.0, "3.5|3": 9.0}
        self.assertEqual(
            scatter_points(values),
            [Point(x=5.0, y=1.0), Point(x=-2.0, y=4.0), Point(x=3.5, y=9.0)],
        )

    def test_only_prefix_before_bar_is_parsed(self) -> None:
        self.assertEqual(scatter_points({"7|x|y": 2.0, "8": 3.0})[0].x, 7.0)
        self.assertEqual(scatter_points({"7|x|y": 2.0, "8": 3.0})[1].x, 8.0)
        self.assertEqual(scatter_points({"a|1": 2.0}), [])

    def test_non_finite_points_are_dropped(self) -> None:
        values = {"1|0": float("nan"), "inf|1": 2.0, "2|2": 3.0, "nan|3": 1.0, "4|4": 5.0}
        self.assertEqual(scatter_points(values), [Point(x=2.0, y=3.0), Point(x=4.0, y=5.0)])


if __name__ == "__main__":
    unittest.main()
