from __future__ import annotations

import logging
from typing import Union

from livechart.backend.base import RenderBackend
from livechart.layout import (
    CHART_MARGIN,
    DOT_RADIUS,
    AxisOrient,
    compute_cartesian,
    histogram_geometry,
    scatter_scales,
    time_series_scales,
)
from livechart.payload import HistogramPayload, Presentation, ScatterPayload, TimeSeriesPayload
from livechart.points import Point, histogram_points, scatter_points, time_series_points
from livechart.scales import LinearScale, TimeScale, format_value
from livechart.style import StyleApplier

LOGGER = logging.getLogger(__name__)

AXIS_CLASS = "axis"
TICK_SIZE = 6.0
TICK_PADDING = 3.0
TICK_TARGET = 10
TITLE_FONT_SCALE = 1.1

Scale = Union[LinearScale, TimeScale]


def draw_axis(backend: RenderBackend, scale: Scale, orient: AxisOrient, origin: tuple[float, float]) -> None:
    """Domain line, tick marks and tick labels, the way a d3 axis lays them out."""

    ox, oy = origin
    r0, r1 = scale.range
    ticks = scale.ticks(TICK_TARGET)
    labels = scale.tick_labels(ticks)
    linear = scale.linear if isinstance(scale, TimeScale) else scale
    if orient == "bottom":
        backend.draw_line(ox + r0, oy, ox + r1, oy, css_class=AXIS_CLASS)
        for tick, label in zip(ticks.tolist(), labels):
            px = ox + linear(tick)
            backend.draw_line(px, oy, px, oy + TICK_SIZE, css_class=AXIS_CLASS)
            backend.draw_text(
                px,
                oy + TICK_SIZE + TICK_PADDING,
                label,
                css_class=AXIS_CLASS,
                anchor="middle",
                baseline="hanging",
            )
        return
    backend.draw_line(ox, oy + r0, ox, oy + r1, css_class=AXIS_CLASS)
    for tick, label in zip(ticks.tolist(), labels):
        py = oy + linear(tick)
        backend.draw_line(ox - TICK_SIZE, py, ox, py, css_class=AXIS_CLASS)
        backend.draw_text(
            ox - TICK_SIZE - TICK_PADDING,
            py,
            label,
            css_class=AXIS_CLASS,
            anchor="end",
            baseline="middle",
        )


class _ChartRenderer:
    kind = ""

    def __init__(self, backend: RenderBackend, style: StyleApplier | None = None) -> None:
        self.backend = backend
        self.style = style or StyleApplier(backend)

    def _enough(self, points: list[Point]) -> bool:
        if len(points) < 2:
            LOGGER.debug("skipping %s render: %d point(s)", self.kind, len(points))
            return False
        return True

    def _draw_title(self, presentation: Presentation, x: float, y: float, rotate: float = 0.0) -> None:
        if not presentation.label:
            return
        self.backend.draw_text(
            x,
            y,
            presentation.label,
            css_class="label",
            anchor="middle",
            rotate=rotate,
            font_scale=TITLE_FONT_SCALE,
            bold=True,
        )


class HistogramRenderer(_ChartRenderer):
    kind = "histogram"

    def render(self, payload: HistogramPayload) -> bool:
        points = histogram_points(payload.values)
        if not self._enough(points):
            return False
        self.style.apply(payload.presentation)

        geom = histogram_geometry(points, payload.width, payload.height, payload.wide, payload.bucket)
        spec = geom.spec
        mx, my = CHART_MARGIN
        self.backend.begin_chart(spec.outer_width, spec.outer_height)
        self._draw_title(payload.presentation, mx + spec.label_x, my + spec.label_y, spec.label_rotate)

        for point in points:
            gx, gy = spec.translate(point, geom.x, geom.y)
            ox, oy = mx + gx, my + gy
            rect = spec.bar(point, geom.y, geom.dx)
            self.backend.draw_rect(ox + rect.x, oy + rect.y, rect.width, rect.height, css_class="bar")
            text = format_value(point.y)
            placement = spec.text(point, geom.y, geom.dx, self.backend.measure_text(text))
            self.backend.draw_text(
                ox + placement.x,
                oy + placement.y,
                text,
                css_class=placement.css_class,
                anchor=placement.anchor,
                baseline=placement.baseline,
            )

        ax, ay = spec.axis_transform
        draw_axis(self.backend, geom.x, spec.axis_orient, (mx + ax, my + ay))
        self.backend.commit()
        return True


class TimeSeriesRenderer(_ChartRenderer):
    kind = "time-series"

    def render(self, payload: TimeSeriesPayload) -> bool:
        points = time_series_points(payload.values)
        if not self._enough(points):
            return False
        self.style.apply(payload.presentation)

        spec = compute_cartesian(payload.width, payload.height)
        x, y = time_series_scales(points, spec)
        mx, my = CHART_MARGIN
        self.backend.begin_chart(spec.outer_width, spec.outer_height)
        self._draw_title(payload.presentation, mx + spec.label_x, my + spec.label_y)
        self.backend.draw_polyline([(mx + x(p.x), my + y(p.y)) for p in points], css_class="line")

        draw_axis(self.backend, y, "left", (mx, my))
        draw_axis(self.backend, x, "bottom", (mx, my + y(max(0.0, y.domain[0]))))
        self.backend.commit()
        return True


class ScatterRenderer(_ChartRenderer):
    kind = "scatterplot"

    def render(self, payload: ScatterPayload) -> bool:
        points = scatter_points(payload.values)
        if not self._enough(points):
            return False
        self.style.apply(payload.presentation)

        spec = compute_cartesian(payload.width, payload.height)
        x, y = scatter_scales(points, spec)
        mx, my = CHART_MARGIN
        self.backend.begin_chart(spec.outer_width, spec.outer_height)
        self._draw_title(payload.presentation, mx + spec.label_x, my + spec.label_y)
        for p in points:
            self.backend.draw_circle(mx + x(float(p.x)), my + y(p.y), DOT_RADIUS, css_class="dot")

        draw_axis(self.backend, y, "left", (mx + x(max(0.0, x.domain[0])), my))
        draw_axis(self.backend, x, "bottom", (mx, my + y(max(0.0, y.domain[0]))))
        self.backend.commit()
        return True
