from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, ImageColor

from livechart.backend.base import (
    CircleElement,
    LineElement,
    PageBackend,
    PolylineElement,
    RectElement,
    TextElement,
    body_font_size_px,
    parse_rules,
)
from livechart.backend.text import render_text_mask, text_size


RGBA = tuple[int, int, int, int]

LOG_PAGE_WIDTH = 800
LOG_MARGIN = 12
MAX_PAGE_HEIGHT = 4000


@dataclass(frozen=True)
class RasterPalette:
    background: RGBA = (255, 255, 255, 255)
    foreground: RGBA = (0, 0, 0, 255)
    inside_text: RGBA = (255, 255, 255, 255)
    bar: RGBA = (70, 130, 180, 255)
    line: RGBA = (70, 130, 180, 255)
    log_text: RGBA = (0, 0, 0, 255)
    font_size_px: float | None = None


def palette_from_rules(rules: Sequence[str], base: RasterPalette | None = None) -> RasterPalette:
    base = base or RasterPalette()
    parsed = parse_rules(rules)

    def pick(selector: str, prop: str, default: RGBA) -> RGBA:
        value = parsed.get(selector, {}).get(prop)
        if value is None:
            return default
        try:
            rgb = ImageColor.getrgb(value)
        except ValueError:
            return default
        if len(rgb) == 3:
            return (rgb[0], rgb[1], rgb[2], 255)
        return (rgb[0], rgb[1], rgb[2], rgb[3])

    return RasterPalette(
        background=pick("body", "background-color", base.background),
        foreground=pick(".axis line", "stroke", base.foreground),
        inside_text=pick("text.inside", "fill", base.inside_text),
        bar=pick(".bar", "fill", base.bar),
        line=pick("path.line", "stroke", base.line),
        log_text=pick("pre.lines", "color", pick("text", "fill", base.log_text)),
        font_size_px=body_font_size_px(rules) or base.font_size_px,
    )


class RasterPageBackend(PageBackend):
    """Rasterizes the page to an RGBA array and writes PNG snapshots."""

    def palette(self) -> RasterPalette:
        return palette_from_rules(self.style_rules)

    def to_rgba(self) -> np.ndarray:
        palette = self.palette()
        font_px = self.effective_font_size_px()
        chart_w = int(np.ceil(self.chart.width)) if self.chart is not None else 0
        chart_h = int(np.ceil(self.chart.height)) if self.chart is not None else 0

        line_h = text_size("Mg", font_family=self.font_family, font_size_px=font_px)[1] + 4
        max_lines = max(1, (MAX_PAGE_HEIGHT - chart_h - 2 * LOG_MARGIN) // line_h)
        visible = self.log_lines[-max_lines:]
        log_h = len(visible) * line_h + 2 * LOG_MARGIN if visible else 0

        width = max(1, chart_w, LOG_PAGE_WIDTH if visible else 0)
        height = max(1, chart_h + log_h)
        canvas = new_canvas(width, height, palette.background)

        if self.chart is not None:
            for element in self.chart.elements:
                self._draw_element(canvas, element, palette, font_px)

        y = chart_h + LOG_MARGIN
        for line in visible:
            mask = render_text_mask(line, font_family=self.font_family, font_size_px=font_px)
            blend_mask(canvas, LOG_MARGIN, y, mask, palette.log_text)
            y += line_h
        return canvas

    def write(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        Image.fromarray(self.to_rgba()).save(tmp, format="PNG")
        tmp.replace(path)

    def _draw_element(self, canvas: np.ndarray, element, palette: RasterPalette, font_px: float) -> None:
        if isinstance(element, RectElement):
            fill_rect(canvas, element.x, element.y, element.width, element.height, palette.bar)
        elif isinstance(element, LineElement):
            draw_segment(canvas, element.x1, element.y1, element.x2, element.y2, palette.foreground)
        elif isinstance(element, PolylineElement):
            color = palette.line if element.css_class == "line" else palette.foreground
            for (x0, y0), (x1, y1) in zip(element.points, element.points[1:]):
                draw_segment(canvas, x0, y0, x1, y1, color, width=2)
        elif isinstance(element, CircleElement):
            fill_circle(canvas, element.cx, element.cy, element.r, palette.bar)
        elif isinstance(element, TextElement):
            color = palette.inside_text if element.css_class == "inside" else palette.foreground
            rotate = int(round(element.rotate / 90.0)) * 90
            mask = render_text_mask(
                element.text,
                font_family=self.font_family,
                font_size_px=font_px * element.font_scale,
                rotate_deg=rotate,
            )
            x, y = _anchor_origin(element, mask.shape[1], mask.shape[0])
            blend_mask(canvas, x, y, mask, color)
        else:
            raise TypeError(f"unsupported chart element: {element!r}")


def _anchor_origin(element: TextElement, w: int, h: int) -> tuple[int, int]:
    x = float(element.x)
    y = float(element.y)
    if element.rotate:
        # Rotated labels are centered on their anchor point.
        return int(round(x - w / 2)), int(round(y - h / 2))
    if element.anchor == "middle":
        x -= w / 2
    elif element.anchor == "end":
        x -= w
    if element.baseline == "auto":
        y -= h
    elif element.baseline == "middle":
        y -= h / 2
    return int(round(x)), int(round(y))


def new_canvas(width: int, height: int, color: RGBA) -> np.ndarray:
    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def fill_rect(dst: np.ndarray, x: float, y: float, width: float, height: float, color: RGBA) -> None:
    x0 = max(0, int(round(x)))
    y0 = max(0, int(round(y)))
    x1 = min(dst.shape[1], int(round(x + width)))
    y1 = min(dst.shape[0], int(round(y + height)))
    if x1 <= x0 or y1 <= y0:
        return
    _blend_region(dst[y0:y1, x0:x1], color, np.ones((y1 - y0, x1 - x0), dtype=np.float32))


def fill_circle(dst: np.ndarray, cx: float, cy: float, r: float, color: RGBA) -> None:
    if r <= 0:
        return
    x0 = max(0, int(np.floor(cx - r)))
    y0 = max(0, int(np.floor(cy - r)))
    x1 = min(dst.shape[1], int(np.ceil(cx + r)) + 1)
    y1 = min(dst.shape[0], int(np.ceil(cy + r)) + 1)
    if x1 <= x0 or y1 <= y0:
        return
    yy, xx = np.ogrid[y0:y1, x0:x1]
    inside = ((xx + 0.5 - cx) ** 2 + (yy + 0.5 - cy) ** 2) <= r * r
    _blend_region(dst[y0:y1, x0:x1], color, inside.astype(np.float32))


def draw_segment(dst: np.ndarray, x0: float, y0: float, x1: float, y1: float, color: RGBA, width: int = 1) -> None:
    ax, ay = int(round(x0)), int(round(y0))
    bx, by = int(round(x1)), int(round(y1))
    dx = abs(bx - ax)
    sx = 1 if ax < bx else -1
    dy = -abs(by - ay)
    sy = 1 if ay < by else -1
    err = dx + dy
    radius = max(0, width // 2)
    while True:
        fill_rect(dst, ax - radius, ay - radius, 2 * radius + 1, 2 * radius + 1, color)
        if ax == bx and ay == by:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            ax += sx
        if e2 <= dx:
            err += dx
            ay += sy


def blend_mask(dst: np.ndarray, x: int, y: int, mask: np.ndarray, color: RGBA) -> None:
    h, w = mask.shape
    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(dst.shape[1], x + w)
    y1 = min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return
    cov = mask[y0 - y : y1 - y, x0 - x : x1 - x].astype(np.float32) / 255.0
    _blend_region(dst[y0:y1, x0:x1], color, cov)


def _blend_region(region: np.ndarray, color: RGBA, coverage: np.ndarray) -> None:
    alpha = (color[3] / 255.0) * coverage[:, :, None]
    src = np.asarray(color[:3], dtype=np.float32).reshape(1, 1, 3)
    region[:, :, :3] = (src * alpha + region[:, :, :3].astype(np.float32) * (1.0 - alpha)).astype(np.uint8)
    region[:, :, 3] = 255
