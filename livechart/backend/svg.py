from __future__ import annotations

import html
from pathlib import Path
import xml.etree.ElementTree as ET

from livechart.backend.base import (
    ChartCanvas,
    ChartElement,
    CircleElement,
    LineElement,
    PageBackend,
    PolylineElement,
    RectElement,
    TextElement,
)


SVG_NS = "http://www.w3.org/2000/svg"
AXIS_CLASS = "axis"

BASE_STYLESHEET = """\
body { font-family: sans-serif; font-size: 12px; margin: 0; padding: 0; }
.axis path, .axis line { fill: none; stroke: #000; shape-rendering: crispEdges; }
.dot, .bar { fill: steelblue; }
path.line { fill: none; stroke: steelblue; stroke-width: 1.5px; }
text.inside { fill: #fff; }
pre.lines { margin: 1em; }
"""

_BASELINES = {"auto": None, "middle": "middle", "hanging": "hanging"}


class SvgPageBackend(PageBackend):
    """Serializes the page as a standalone HTML document with an inline SVG chart."""

    def to_svg(self) -> str | None:
        if self.chart is None:
            return None
        return ET.tostring(build_svg(self.chart), encoding="unicode")

    def to_html(self) -> str:
        parts = [
            "<!DOCTYPE html>",
            "<html>",
            "<head>",
            '<meta charset="utf-8">',
            f"<title>{html.escape(self.title)}</title>",
            f"<style>\n{BASE_STYLESHEET}</style>",
            f'<style class="overrides">\n{html.escape(chr(10).join(self.style_rules), quote=False)}\n</style>',
            "</head>",
            "<body>",
        ]
        svg = self.to_svg()
        if svg is not None:
            parts.append(svg)
        if self.log_lines:
            body = "\n".join(html.escape(line, quote=False) for line in self.log_lines)
            parts.append(f'<pre class="lines">{body}\n</pre>')
        parts.extend(["</body>", "</html>", ""])
        return "\n".join(parts)

    def write(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(self.to_html(), encoding="utf-8")
        tmp.replace(path)


def build_svg(chart: ChartCanvas) -> ET.Element:
    root = ET.Element(
        "svg",
        {
            "xmlns": SVG_NS,
            "width": _fmt(chart.width),
            "height": _fmt(chart.height),
        },
    )
    axis_group: ET.Element | None = None
    for element in chart.elements:
        if element.css_class == AXIS_CLASS:
            if axis_group is None:
                axis_group = ET.SubElement(root, "g", {"class": AXIS_CLASS})
            _append(axis_group, element, css_class=None)
        else:
            _append(root, element, css_class=element.css_class)
    return root


def _append(parent: ET.Element, element: ChartElement, *, css_class: str | None) -> ET.Element:
    attrs: dict[str, str] = {}
    if isinstance(element, RectElement):
        attrs.update(
            x=_fmt(element.x),
            y=_fmt(element.y),
            width=_fmt(max(0.0, element.width)),
            height=_fmt(max(0.0, element.height)),
        )
        node = ET.SubElement(parent, "rect", attrs)
    elif isinstance(element, LineElement):
        attrs.update(x1=_fmt(element.x1), y1=_fmt(element.y1), x2=_fmt(element.x2), y2=_fmt(element.y2))
        node = ET.SubElement(parent, "line", attrs)
    elif isinstance(element, PolylineElement):
        attrs["d"] = _path_data(element.points)
        node = ET.SubElement(parent, "path", attrs)
    elif isinstance(element, CircleElement):
        attrs.update(cx=_fmt(element.cx), cy=_fmt(element.cy), r=_fmt(element.r))
        node = ET.SubElement(parent, "circle", attrs)
    elif isinstance(element, TextElement):
        attrs.update(x=_fmt(element.x), y=_fmt(element.y))
        if element.anchor != "start":
            attrs["text-anchor"] = element.anchor
        baseline = _BASELINES[element.baseline]
        if baseline is not None:
            attrs["dominant-baseline"] = baseline
        if element.rotate:
            attrs["transform"] = f"rotate({_fmt(element.rotate)} {_fmt(element.x)} {_fmt(element.y)})"
        if element.font_scale != 1.0:
            attrs["font-size"] = f"{_fmt(element.font_scale)}em"
        if element.bold:
            attrs["font-weight"] = "bold"
        node = ET.SubElement(parent, "text", attrs)
        node.text = element.text
    else:
        raise TypeError(f"unsupported chart element: {element!r}")
    if css_class:
        node.set("class", css_class)
    return node


def _path_data(points: tuple[tuple[float, float], ...]) -> str:
    if not points:
        return ""
    head, *rest = points
    out = [f"M{_fmt(head[0])},{_fmt(head[1])}"]
    out.extend(f"L{_fmt(x)},{_fmt(y)}" for x, y in rest)
    return "".join(out)


def _fmt(value: float) -> str:
    out = f"{float(value):.3f}".rstrip("0").rstrip(".")
    return "0" if out in ("", "-0") else out
