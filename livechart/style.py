from __future__ import annotations

from dataclasses import dataclass

from livechart.backend.base import RenderBackend
from livechart.payload import Presentation


@dataclass(frozen=True)
class ColorPalette:
    bg: str | None = None
    fg: str | None = None
    bar: str | None = None


def parse_colors(colors: str | None) -> ColorPalette:
    """Split a ``"background,foreground,bar"`` string; empty parts count as absent."""

    parts = [part.strip() for part in colors.split(",")] if colors else []
    parts += [""] * (3 - len(parts))
    return ColorPalette(bg=parts[0] or None, fg=parts[1] or None, bar=parts[2] or None)


def color_rules(palette: ColorPalette) -> list[str]:
    rules: list[str] = []
    if palette.bg and palette.fg:
        rules.append(f"body {{ background-color: {palette.bg}}}")
        rules.append(f".axis path, .axis line {{ stroke: {palette.fg}}}")
        rules.append(f"text, text.outside {{ fill: {palette.fg}}}")
        rules.append(f"text.inside {{ fill: {palette.bg}}}")
        rules.append(f"pre.lines {{ color: {palette.fg}}}")
    if palette.bar:
        rules.append(f".dot, .bar {{ fill: {palette.bar}}}")
        rules.append(f"path.line {{ stroke: {palette.bar}}}")
    return rules


def style_rules(presentation: Presentation) -> list[str]:
    rules = color_rules(parse_colors(presentation.colors))
    if presentation.font_size:
        rules.append(f"body {{ font-size: {presentation.font_size}}}")
    return rules


class StyleApplier:
    def __init__(self, backend: RenderBackend) -> None:
        self._backend = backend

    def apply(self, presentation: Presentation) -> None:
        if presentation.label:
            self._backend.set_title(presentation.label)
        self._backend.set_style(style_rules(presentation))
