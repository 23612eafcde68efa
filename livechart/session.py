from __future__ import annotations

from dataclasses import dataclass, field
from typing import assert_never

from livechart.backend.base import RenderBackend
from livechart.logview import Clock, LogCursor, LogFileRenderer, utc_now
from livechart.payload import GraphPayload, HistogramPayload, LogFilePayload, ScatterPayload, TimeSeriesPayload
from livechart.renderers import HistogramRenderer, ScatterRenderer, TimeSeriesRenderer
from livechart.style import StyleApplier


@dataclass
class StreamSession:
    """State owned by one viewer: the chart-id registry, the log cursor and the renderers.

    Created once per stream and handed to the dispatcher. The registry only
    lives as long as a connection; the log cursor survives reconnects so a
    replayed log payload does not duplicate lines.
    """

    backend: RenderBackend
    clock: Clock = utc_now
    registry: dict[str, bool] = field(default_factory=dict)
    log_cursor: LogCursor = field(default_factory=LogCursor)
    connections: int = 0

    def __post_init__(self) -> None:
        self.style = StyleApplier(self.backend)
        self.histogram = HistogramRenderer(self.backend, self.style)
        self.time_series = TimeSeriesRenderer(self.backend, self.style)
        self.scatter = ScatterRenderer(self.backend, self.style)
        self.logfile = LogFileRenderer(self.backend, self.log_cursor, self.style, clock=self.clock)

    def start_connection(self) -> None:
        self.registry.clear()
        self.connections += 1

    def is_registered(self, chart_id: str) -> bool:
        return self.registry.get(chart_id, False)

    def register(self, chart_id: str) -> None:
        self.registry[chart_id] = True

    def render(self, payload: GraphPayload) -> bool:
        """Route ``payload`` to the renderer for its layout; False when nothing was drawn."""

        if isinstance(payload, HistogramPayload):
            return self.histogram.render(payload)
        if isinstance(payload, TimeSeriesPayload):
            return self.time_series.render(payload)
        if isinstance(payload, ScatterPayload):
            return self.scatter.render(payload)
        if isinstance(payload, LogFilePayload):
            self.logfile.render(payload)
            return True
        assert_never(payload)
