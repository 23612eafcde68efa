from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
import re
from typing import Literal, Union

from livechart.backend.text import DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE_PX, text_size


TextAnchor = Literal["start", "middle", "end"]
TextBaseline = Literal["auto", "middle", "hanging"]


@dataclass(frozen=True)
class RectElement:
    x: float
    y: float
    width: float
    height: float
    css_class: str | None = None


@dataclass(frozen=True)
class LineElement:
    x1: float
    y1: float
    x2: float
    y2: float
    css_class: str | None = None


@dataclass(frozen=True)
class PolylineElement:
    points: tuple[tuple[float, float], ...]
    css_class: str | None = None


@dataclass(frozen=True)
class CircleElement:
    cx: float
    cy: float
    r: float
    css_class: str | None = None


@dataclass(frozen=True)
class TextElement:
    x: float
    y: float
    text: str
    css_class: str | None = None
    anchor: TextAnchor = "start"
    baseline: TextBaseline = "auto"
    rotate: float = 0.0
    font_scale: float = 1.0
    bold: bool = False


ChartElement = Union[RectElement, LineElement, PolylineElement, CircleElement, TextElement]


@dataclass
class ChartCanvas:
    width: float
    height: float
    elements: list[ChartElement] = field(default_factory=list)


_RULE = re.compile(r"([^{}]+)\{([^{}]*)\}")
_PX = re.compile(r"^\s*(\d+(?:\.\d+)?)px\s*$")


def parse_rules(rules: Sequence[str]) -> dict[str, dict[str, str]]:
    """Flatten ``selector, selector { prop: value }`` rules into per-selector declarations."""

    out: dict[str, dict[str, str]] = {}
    for rule in rules:
        for selectors, body in _RULE.findall(rule):
            decls: dict[str, str] = {}
            for decl in body.split(";"):
                if ":" not in decl:
                    continue
                prop, value = decl.split(":", 1)
                decls[prop.strip().lower()] = value.strip()
            for selector in selectors.split(","):
                out.setdefault(" ".join(selector.split()), {}).update(decls)
    return out


def body_font_size_px(rules: Sequence[str]) -> float | None:
    """The ``body { font-size: Npx }`` override in ``rules``, if any."""

    raw = parse_rules(rules).get("body", {}).get("font-size")
    if raw is None:
        return None
    match = _PX.match(raw)
    return float(match.group(1)) if match else None


class RenderBackend(ABC):
    """Drawing primitives the renderers call into.

    Coordinates are page pixels with the origin at the top-left of the chart
    canvas; y grows downward.
    """

    @abstractmethod
    def begin_chart(self, width: float, height: float) -> None:
        """Replace whatever chart is on screen with an empty canvas."""
        raise NotImplementedError

    @abstractmethod
    def clear_chart(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw_rect(self, x: float, y: float, width: float, height: float, *, css_class: str | None = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw_line(self, x1: float, y1: float, x2: float, y2: float, *, css_class: str | None = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw_polyline(self, points: Sequence[tuple[float, float]], *, css_class: str | None = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw_circle(self, cx: float, cy: float, r: float, *, css_class: str | None = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw_text(
        self,
        x: float,
        y: float,
        text: str,
        *,
        css_class: str | None = None,
        anchor: TextAnchor = "start",
        baseline: TextBaseline = "auto",
        rotate: float = 0.0,
        font_scale: float = 1.0,
        bold: bool = False,
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def measure_text(self, text: str, *, font_scale: float = 1.0) -> tuple[float, float]:
        """Rendered (width, height) of ``text`` in pixels."""
        raise NotImplementedError

    @abstractmethod
    def set_title(self, title: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_style(self, rules: Sequence[str]) -> None:
        """Replace the override style block with ``rules``."""
        raise NotImplementedError

    @abstractmethod
    def clear_log(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def append_log_line(self, line: str) -> None:
        raise NotImplementedError

    def commit(self) -> None:
        """Optional hook called after each complete redraw."""
        return


class PageBackend(RenderBackend):
    """Retained page model shared by the concrete backends.

    Holds the title, the override style rules, at most one chart canvas and
    the log lines; subclasses serialize it on ``commit``.
    """

    def __init__(
        self,
        *,
        output_path: Path | None = None,
        font_family: str = DEFAULT_FONT_FAMILY,
        font_size_px: float = DEFAULT_FONT_SIZE_PX,
    ) -> None:
        self.output_path = output_path
        self.font_family = font_family
        self.font_size_px = font_size_px
        self.title = ""
        self.style_rules: list[str] = []
        self.chart: ChartCanvas | None = None
        self.log_lines: list[str] = []
        self.commits = 0

    def begin_chart(self, width: float, height: float) -> None:
        self.chart = ChartCanvas(width=float(width), height=float(height))

    def clear_chart(self) -> None:
        self.chart = None

    def draw_rect(self, x: float, y: float, width: float, height: float, *, css_class: str | None = None) -> None:
        self._add(RectElement(x=x, y=y, width=width, height=height, css_class=css_class))

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, *, css_class: str | None = None) -> None:
        self._add(LineElement(x1=x1, y1=y1, x2=x2, y2=y2, css_class=css_class))

    def draw_polyline(self, points: Sequence[tuple[float, float]], *, css_class: str | None = None) -> None:
        self._add(PolylineElement(points=tuple((float(x), float(y)) for x, y in points), css_class=css_class))

    def draw_circle(self, cx: float, cy: float, r: float, *, css_class: str | None = None) -> None:
        self._add(CircleElement(cx=cx, cy=cy, r=r, css_class=css_class))

    def draw_text(
        self,
        x: float,
        y: float,
        text: str,
        *,
        css_class: str | None = None,
        anchor: TextAnchor = "start",
        baseline: TextBaseline = "auto",
        rotate: float = 0.0,
        font_scale: float = 1.0,
        bold: bool = False,
    ) -> None:
        self._add(
            TextElement(
                x=x,
                y=y,
                text=text,
                css_class=css_class,
                anchor=anchor,
                baseline=baseline,
                rotate=rotate,
                font_scale=font_scale,
                bold=bold,
            )
        )

    def measure_text(self, text: str, *, font_scale: float = 1.0) -> tuple[float, float]:
        w, h = text_size(text, font_family=self.font_family, font_size_px=self.effective_font_size_px() * font_scale)
        return (float(w), float(h))

    def effective_font_size_px(self) -> float:
        """Body font size after the page's style override, in pixels."""

        return body_font_size_px(self.style_rules) or self.font_size_px

    def set_title(self, title: str) -> None:
        self.title = title

    def set_style(self, rules: Sequence[str]) -> None:
        self.style_rules = list(rules)

    def clear_log(self) -> None:
        self.log_lines = []

    def append_log_line(self, line: str) -> None:
        self.log_lines.append(line)

    def commit(self) -> None:
        self.commits += 1
        if self.output_path is not None:
            self.write(self.output_path)

    def write(self, path: Path) -> None:
        raise NotImplementedError

    def _add(self, element: ChartElement) -> None:
        if self.chart is None:
            raise RuntimeError("begin_chart must be called before drawing")
        self.chart.elements.append(element)
