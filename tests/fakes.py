from __future__ import annotations

from datetime import datetime, timedelta, timezone

from livechart.backend.base import PageBackend, RectElement, TextElement
from livechart.backend.text import DEFAULT_FONT_SIZE_PX


class RecordingBackend(PageBackend):
    """Page model with deterministic text metrics.

    At the default 12px body size a character is 7px wide and a line 12px
    tall; both scale with the effective font size.
    """

    CHAR_WIDTH = 7.0
    LINE_HEIGHT = 12.0

    def measure_text(self, text: str, *, font_scale: float = 1.0) -> tuple[float, float]:
        scale = font_scale * self.effective_font_size_px() / DEFAULT_FONT_SIZE_PX
        return (len(text) * self.CHAR_WIDTH * scale, self.LINE_HEIGHT * scale)

    def elements(self, kind: type) -> list:
        if self.chart is None:
            return []
        return [e for e in self.chart.elements if isinstance(e, kind)]

    def bars(self) -> list[RectElement]:
        return [e for e in self.elements(RectElement) if e.css_class == "bar"]

    def value_labels(self) -> list[TextElement]:
        return [e for e in self.elements(TextElement) if e.css_class in ("inside", "outside")]


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        out = self.now
        self.now += timedelta(seconds=1)
        return out
