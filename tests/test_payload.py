from __future__ import annotations

import unittest

from livechart.errors import PayloadError, UnknownLayoutError
from livechart.payload import (
    HistogramPayload,
    LogFilePayload,
    ScatterPayload,
    TimeSeriesPayload,
    parse_payload,
)


class ParsePayloadTests(unittest.TestCase):
    def test_histogram(self) -> None:
        payload = parse_payload(
            {
                "Layout": "histogram",
                "Label": "Hits",
                "Values": {"0": 2, "1": 5.5},
                "Width": 640,
                "Height": 480,
                "Wide": True,
                "Bucket": 10,
                "Colors": "#000,#fff,red",
                "FontSize": "14px",
            }
        )
        self.assertIsInstance(payload, HistogramPayload)
        self.assertEqual(payload.layout, "histogram")
        self.assertEqual(payload.values, {"0": 2.0, "1": 5.5})
        self.assertEqual((payload.width, payload.height, payload.wide, payload.bucket), (640.0, 480.0, True, 10.0))
        self.assertEqual(payload.presentation.label, "Hits")
        self.assertEqual(payload.presentation.colors, "#000,#fff,red")
        self.assertEqual(payload.presentation.font_size, "14px")

    def test_defaults(self) -> None:
        payload = parse_payload({"Layout": "histogram", "Values": {}, "Width": 0, "Bucket": 0})
        self.assertEqual((payload.width, payload.height, payload.bucket), (500.0, 500.0, 1.0))
        self.assertEqual(payload.presentation.label, "")
        self.assertIsNone(payload.presentation.colors)

    def test_negative_bucket_falls_back_to_one(self) -> None:
        self.assertEqual(HistogramPayload(values={}, bucket=-3).bucket, 1.0)

    def test_other_layouts(self) -> None:
        self.assertIsInstance(parse_payload({"Layout": "time-series", "Values": {}}), TimeSeriesPayload)
        self.assertIsInstance(parse_payload({"Layout": "scatterplot", "Values": {}, "Wide": True}), ScatterPayload)
        log = parse_payload({"Layout": "logfile", "Label": "app.log", "Values": {"0": "up"}, "Count": 1})
        self.assertIsInstance(log, LogFilePayload)
        self.assertEqual((log.values, log.count), ({"0": "up"}, 1))

    def test_unknown_layout(self) -> None:
        with self.assertRaises(UnknownLayoutError) as ctx:
            parse_payload({"Layout": "pie"})
        self.assertEqual(ctx.exception.layout, "pie")
        with self.assertRaises(UnknownLayoutError):
            parse_payload({"Values": {}})

    def test_invalid_payloads(self) -> None:
        for raw in (
            {"Layout": "histogram", "Values": [1, 2]},
            {"Layout": "histogram", "Values": {"0": "x"}},
            {"Layout": "histogram", "Values": {"0": True}},
            {"Layout": "histogram", "Width": "wide"},
            {"Layout": "histogram", "Width": -10},
            {"Layout": "histogram", "Label": 7},
            {"Layout": "logfile", "Count": 1.5},
            {"Layout": "logfile", "Count": -1},
        ):
            with self.subTest(raw=raw):
                with self.assertRaises(PayloadError):
                    parse_payload(raw)

    def test_non_finite_numbers_rejected(self) -> None:
        for raw in (
            {"Layout": "histogram", "Values": {"0": float("nan")}},
            {"Layout": "time-series", "Values": {"2014-03-01T10:00:00Z": float("inf")}},
            {"Layout": "scatterplot", "Values": {"1|0": float("-inf")}},
            {"Layout": "histogram", "Values": {"0": 10**400}},
            {"Layout": "histogram", "Bucket": float("inf")},
            {"Layout": "scatterplot", "Height": float("nan")},
            {"Layout": "logfile", "Count": float("inf")},
        ):
            with self.subTest(raw=raw):
                with self.assertRaises(PayloadError):
                    parse_payload(raw)

    def test_wide_must_be_a_boolean(self) -> None:
        self.assertFalse(parse_payload({"Layout": "histogram", "Wide": False}).wide)
        self.assertFalse(parse_payload({"Layout": "histogram"}).wide)
        for wide in ("false", "true", 1, 0):
            with self.subTest(wide=wide):
                with self.assertRaises(PayloadError):
                    parse_payload({"Layout": "histogram", "Wide": wide})

    def test_not_an_object(self) -> None:
        with self.assertRaises(PayloadError):
            parse_payload(["histogram"])  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
