from __future__ import annotations

import json
from pathlib import Path
import tempfile
import unittest

import main
from livechart.backend import RasterPageBackend, SvgPageBackend
from livechart.config import ViewerConfig


CAPTURE = (
    'data: {"changed": "hits"}\n'
    "\n"
    "event: hits\n"
    f"data: {json.dumps({'Layout': 'histogram', 'Label': 'Hits', 'Values': {'0': 2, '1': 5, '2': 1}})}\n"
    "\n"
)


class MainTests(unittest.TestCase):
    def test_replay_writes_html_snapshot(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            capture = Path(tmp) / "feed.txt"
            capture.write_text(CAPTURE, encoding="utf-8")
            out = Path(tmp) / "chart.html"
            rc = main.main(["replay", str(capture), "--out", str(out), "--backend", "svg"])
            self.assertEqual(rc, 0)
            page = out.read_text(encoding="utf-8")
        self.assertIn("<svg", page)
        self.assertIn("<title>Hits</title>", page)

    def test_watch_reports_unreachable_feed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "chart.html"
            rc = main.main(
                ["watch", "--url", "http://127.0.0.1:9/data", "--max-retries", "0", "--timeout", "1", "--out", str(out)]
            )
        self.assertEqual(rc, 1)

    def test_build_backend(self) -> None:
        self.assertIsInstance(main.build_backend(ViewerConfig()), SvgPageBackend)
        raster = main.build_backend(ViewerConfig(backend="raster", font_size_px=16))
        self.assertIsInstance(raster, RasterPageBackend)
        self.assertEqual(raster.font_size_px, 16)
        self.assertEqual(raster.output_path, Path("livechart.png"))

    def test_requires_a_command(self) -> None:
        with self.assertRaises(SystemExit):
            main.main([])


if __name__ == "__main__":
    unittest.main()
