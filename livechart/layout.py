from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from livechart.points import Point
from livechart.scales import LinearScale, TimeScale


Orientation = Literal["wide", "tall"]
AxisOrient = Literal["left", "bottom"]

CHART_MARGIN = (50.0, 50.0)
OUTER_PAD_AXIS = 65.0
OUTER_PAD_BAR = 105.0
LABEL_PADDING = 30.0
LABEL_OFFSET = 6.0
TITLE_OFFSET = 50.0
WIDE_TITLE_X = -35.0
DOT_RADIUS = 3.5


@dataclass(frozen=True)
class LabelPlacement:
    inside: bool
    # Distance from the bar base to the near edge of the label, along the bar.
    offset: float

    @property
    def css_class(self) -> str:
        return "inside" if self.inside else "outside"


def place_label(extent: float, label_length: float) -> LabelPlacement:
    """Inside the bar only when it is longer than the label plus padding (strictly)."""

    if extent > label_length + LABEL_PADDING:
        return LabelPlacement(inside=True, offset=extent - LABEL_OFFSET - label_length)
    return LabelPlacement(inside=False, offset=extent + LABEL_OFFSET)


@dataclass(frozen=True)
class BarRect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class TextPlacement:
    x: float
    y: float
    css_class: str
    anchor: Literal["start", "middle"]
    baseline: Literal["middle", "auto"]


def bar_thickness(dx: float) -> float:
    return max(1.0, dx - 1.0)


@dataclass(frozen=True)
class OrientationSpec:
    orientation: Orientation
    axis_orient: AxisOrient
    axis_transform: tuple[float, float]
    range_x: tuple[float, float]
    range_y: tuple[float, float]
    outer_width: float
    outer_height: float
    label_x: float
    label_y: float
    label_rotate: float
    slot_width: float
    axis_length: float
    bar_length: float

    def translate(self, point: Point, x: LinearScale, y: LinearScale) -> tuple[float, float]:
        """Origin of the bar group for ``point``, relative to the chart origin."""

        if self.orientation == "wide":
            return (0.0, x(float(point.x)))
        return (x(float(point.x)), y(point.y))

    def bar_extent(self, point: Point, y: LinearScale) -> float:
        if self.orientation == "wide":
            return y(point.y)
        return self.bar_length - y(point.y)

    def bar(self, point: Point, y: LinearScale, dx: float) -> BarRect:
        thickness = bar_thickness(dx)
        extent = self.bar_extent(point, y)
        if self.orientation == "wide":
            return BarRect(x=0.0, y=1.0, width=extent, height=thickness)
        return BarRect(x=1.0, y=0.0, width=thickness, height=extent)

    def text(self, point: Point, y: LinearScale, dx: float, label_size: tuple[float, float]) -> TextPlacement:
        """Value label position, relative to the bar group origin.

        ``label_size`` is the measured (width, height) of the label; the
        component along the bar is the one compared against the bar extent.
        """

        extent = self.bar_extent(point, y)
        if self.orientation == "wide":
            placement = place_label(extent, label_size[0])
            return TextPlacement(
                x=placement.offset,
                y=dx * 0.5,
                css_class=placement.css_class,
                anchor="start",
                baseline="middle",
            )
        placement = place_label(extent, label_size[1])
        # The tall group origin is the top of the bar; labels grow upward.
        return TextPlacement(
            x=dx * 0.5,
            y=extent - placement.offset,
            css_class=placement.css_class,
            anchor="middle",
            baseline="auto",
        )


def compute_orientation(point_count: int, axis_length: float, bar_length: float, wide: bool) -> OrientationSpec:
    if point_count <= 1:
        raise ValueError("point_count must be > 1")
    if axis_length <= 0 or bar_length <= 0:
        raise ValueError("axis_length/bar_length must be > 0")

    slot = axis_length / point_count
    span = axis_length - slot
    if wide:
        return OrientationSpec(
            orientation="wide",
            axis_orient="left",
            axis_transform=(0.0, 0.0),
            range_x=(0.0, span),
            range_y=(0.0, float(bar_length)),
            outer_width=bar_length + OUTER_PAD_BAR,
            outer_height=axis_length + OUTER_PAD_AXIS,
            label_x=WIDE_TITLE_X,
            label_y=span * 0.5,
            label_rotate=-90.0,
            slot_width=slot,
            axis_length=float(axis_length),
            bar_length=float(bar_length),
        )
    return OrientationSpec(
        orientation="tall",
        axis_orient="bottom",
        axis_transform=(0.0, float(bar_length)),
        range_x=(0.0, span),
        range_y=(float(bar_length), 0.0),
        outer_width=axis_length + OUTER_PAD_AXIS,
        outer_height=bar_length + OUTER_PAD_BAR,
        label_x=span * 0.5,
        label_y=bar_length + TITLE_OFFSET,
        label_rotate=0.0,
        slot_width=slot,
        axis_length=float(axis_length),
        bar_length=float(bar_length),
    )


def orientation_for(point_count: int, width: float, height: float, wide: bool) -> OrientationSpec:
    """Wide charts lay the category axis along the height, tall ones along the width."""

    axis_length = height if wide else width
    bar_length = width if wide else height
    return compute_orientation(point_count, axis_length, bar_length, wide)


@dataclass(frozen=True)
class HistogramGeometry:
    spec: OrientationSpec
    x: LinearScale
    y: LinearScale
    # Pixel width of one bucket along the category axis.
    dx: float


def histogram_x_domain(points: Sequence[Point], bucket: float) -> tuple[float, float]:
    xs = [float(p.x) for p in points]
    return (min(xs), max(xs) + bucket)


def extent_domain(values: Sequence[float]) -> tuple[float, float]:
    if not values:
        raise ValueError("extent of an empty sequence")
    return (min(values), max(values))


def histogram_geometry(points: Sequence[Point], width: float, height: float, wide: bool, bucket: float) -> HistogramGeometry:
    spec = orientation_for(len(points), width, height, wide)
    x = LinearScale(domain=histogram_x_domain(points, bucket), range=spec.range_x)
    y = LinearScale(domain=(0.0, max(p.y for p in points)), range=spec.range_y)
    dx = (x(1.0) - x(0.0)) * bucket
    return HistogramGeometry(spec=spec, x=x, y=y, dx=dx)


@dataclass(frozen=True)
class CartesianSpec:
    width: float
    height: float
    outer_width: float
    outer_height: float
    label_x: float
    label_y: float


def compute_cartesian(width: float, height: float) -> CartesianSpec:
    """Fixed left-to-right, bottom-to-top layout for time-series and scatter charts."""

    if width <= 0 or height <= 0:
        raise ValueError("width/height must be > 0")
    return CartesianSpec(
        width=float(width),
        height=float(height),
        outer_width=width + OUTER_PAD_AXIS,
        outer_height=height + OUTER_PAD_BAR,
        label_x=width * 0.5,
        label_y=height + TITLE_OFFSET,
    )


def time_series_scales(points: Sequence[Point], spec: CartesianSpec) -> tuple[TimeScale, LinearScale]:
    times: list[datetime] = [p.x for p in points]  # type: ignore[misc]
    x = TimeScale(domain=(min(times), max(times)), range=(0.0, spec.width))
    y = LinearScale(domain=extent_domain([p.y for p in points]), range=(spec.height, 0.0))
    return x, y


def scatter_scales(points: Sequence[Point], spec: CartesianSpec) -> tuple[LinearScale, LinearScale]:
    x = LinearScale(domain=extent_domain([float(p.x) for p in points]), range=(0.0, spec.width))
    y = LinearScale(domain=extent_domain([p.y for p in points]), range=(spec.height, 0.0))
    return x, y
