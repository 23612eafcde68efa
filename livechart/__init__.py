from livechart.config import ViewerConfig, load_config
from livechart.dispatch import DispatchResult, StreamDispatcher
from livechart.errors import FeedError, LivechartError, PayloadError, UnknownLayoutError
from livechart.feed import EventSourceClient, ReconnectPolicy, SseEvent, iter_events, replay_capture
from livechart.layout import OrientationSpec, compute_orientation, place_label
from livechart.logview import LogCursor, LogFileRenderer
from livechart.payload import (
    GraphPayload,
    HistogramPayload,
    LogFilePayload,
    Presentation,
    ScatterPayload,
    TimeSeriesPayload,
    parse_payload,
)
from livechart.points import Point
from livechart.session import StreamSession

__all__ = [
    "DispatchResult",
    "EventSourceClient",
    "FeedError",
    "GraphPayload",
    "HistogramPayload",
    "LivechartError",
    "LogCursor",
    "LogFilePayload",
    "LogFileRenderer",
    "OrientationSpec",
    "PayloadError",
    "Point",
    "Presentation",
    "ReconnectPolicy",
    "ScatterPayload",
    "SseEvent",
    "StreamDispatcher",
    "StreamSession",
    "TimeSeriesPayload",
    "UnknownLayoutError",
    "ViewerConfig",
    "compute_orientation",
    "iter_events",
    "load_config",
    "parse_payload",
    "place_label",
    "replay_capture",
]
