from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from PIL import Image

from livechart.backend import RasterPageBackend, SvgPageBackend
from livechart.backend.base import body_font_size_px, parse_rules
from livechart.backend.raster import palette_from_rules
from livechart.session import StreamSession
from livechart.payload import HistogramPayload, Presentation


class PageModelTests(unittest.TestCase):
    def test_drawing_requires_a_chart(self) -> None:
        backend = SvgPageBackend()
        with self.assertRaises(RuntimeError):
            backend.draw_rect(0, 0, 1, 1)

    def test_commit_writes_when_path_set(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "nested" / "page.html"
            backend = SvgPageBackend(output_path=out)
            backend.append_log_line("hello")
            backend.commit()
            self.assertEqual(backend.commits, 1)
            self.assertIn("hello", out.read_text(encoding="utf-8"))
            self.assertFalse(out.with_name("page.html.tmp").exists())

    def test_body_font_size_override(self) -> None:
        self.assertEqual(body_font_size_px(["body { background-color: #000}", "body { font-size: 40px}"]), 40.0)
        self.assertIsNone(body_font_size_px(["body { font-size: large}"]))
        self.assertIsNone(body_font_size_px([]))

    def test_measure_text_follows_style_override(self) -> None:
        for backend in (SvgPageBackend(), RasterPageBackend()):
            with self.subTest(backend=type(backend).__name__):
                small_w, small_h = backend.measure_text("12345")
                backend.set_style(["body { font-size: 40px}"])
                self.assertEqual(backend.effective_font_size_px(), 40.0)
                large_w, large_h = backend.measure_text("12345")
                self.assertGreater(large_w, small_w)
                self.assertGreater(large_h, small_h)
                backend.set_style([])
                self.assertEqual(backend.measure_text("12345"), (small_w, small_h))


class SvgBackendTests(unittest.TestCase):
    def test_chart_markup(self) -> None:
        backend = SvgPageBackend()
        backend.begin_chart(120, 80)
        backend.draw_rect(50, 10, 20.5, 40, css_class="bar")
        backend.draw_line(0, 60, 100, 60, css_class="axis")
        backend.draw_text(10, 70, "0", css_class="axis", anchor="middle", baseline="hanging")
        backend.draw_polyline([(0, 0), (10, 5)], css_class="line")
        backend.draw_text(60, 75, "Hits", css_class="label", anchor="middle", rotate=-90, font_scale=1.1, bold=True)

        svg = backend.to_svg()
        self.assertTrue(svg.startswith("<svg"))
        self.assertIn('width="120"', svg)
        self.assertIn('<rect x="50" y="10" width="20.5" height="40" class="bar" />', svg)
        self.assertIn('<g class="axis"><line', svg)
        self.assertIn('d="M0,0L10,5"', svg)
        self.assertIn('transform="rotate(-90 60 75)"', svg)
        self.assertIn('font-weight="bold"', svg)

    def test_html_page(self) -> None:
        backend = SvgPageBackend()
        backend.set_title("Hits & misses")
        backend.set_style(["body { background-color: #000}"])
        backend.append_log_line("[2024-05-01T12:00:00.000Z] <started>")
        page = backend.to_html()
        self.assertIn("<title>Hits &amp; misses</title>", page)
        self.assertIn('<style class="overrides">\nbody { background-color: #000}\n</style>', page)
        self.assertIn('<pre class="lines">[2024-05-01T12:00:00.000Z] &lt;started&gt;\n</pre>', page)
        self.assertNotIn("<svg", page)

    def test_clear_chart_removes_svg(self) -> None:
        backend = SvgPageBackend()
        backend.begin_chart(10, 10)
        backend.clear_chart()
        self.assertIsNone(backend.to_svg())


class RasterBackendTests(unittest.TestCase):
    def test_parse_rules_splits_selectors(self) -> None:
        parsed = parse_rules([".dot, .bar { fill: #ff0000}", "body { font-size: 18px; color: red }"])
        self.assertEqual(parsed[".bar"], {"fill": "#ff0000"})
        self.assertEqual(parsed[".dot"], {"fill": "#ff0000"})
        self.assertEqual(parsed["body"], {"font-size": "18px", "color": "red"})

    def test_palette_from_rules(self) -> None:
        palette = palette_from_rules(
            [
                "body { background-color: #000000}",
                ".axis path, .axis line { stroke: #ffffff}",
                ".dot, .bar { fill: not-a-color}",
                "body { font-size: 18px}",
            ]
        )
        self.assertEqual(palette.background, (0, 0, 0, 255))
        self.assertEqual(palette.foreground, (255, 255, 255, 255))
        self.assertEqual(palette.bar, (70, 130, 180, 255))
        self.assertEqual(palette.font_size_px, 18.0)

    def test_bar_color_and_background(self) -> None:
        backend = RasterPageBackend()
        backend.set_style(["body { background-color: #0000ff}", ".dot, .bar { fill: #ff0000}"])
        backend.begin_chart(20, 20)
        backend.draw_rect(2, 2, 10, 10, css_class="bar")
        rgba = backend.to_rgba()
        self.assertEqual(rgba.shape, (20, 20, 4))
        self.assertEqual(rgba[5, 5].tolist(), [255, 0, 0, 255])
        self.assertEqual(rgba[15, 15].tolist(), [0, 0, 255, 255])

    def test_log_lines_extend_the_page(self) -> None:
        backend = RasterPageBackend()
        backend.append_log_line("one")
        backend.append_log_line("two")
        rgba = backend.to_rgba()
        self.assertEqual(rgba.shape[1], 800)
        self.assertGreater(rgba.shape[0], 24)

    def test_writes_png_snapshot(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "chart.png"
            backend = RasterPageBackend(output_path=out)
            session = StreamSession(backend=backend)
            payload = HistogramPayload(
                values={"0": 2, "1": 5, "2": 1},
                presentation=Presentation(label="Hits", colors=",,#ff0000"),
            )
            self.assertTrue(session.render(payload))
            with Image.open(out) as image:
                self.assertEqual(image.size, (565, 605))
                self.assertEqual(image.mode, "RGBA")


if __name__ == "__main__":
    unittest.main()
