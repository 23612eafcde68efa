from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Any, Callable, Literal

from livechart.errors import PayloadError, UnknownLayoutError
from livechart.feed import SseEvent
from livechart.payload import parse_payload
from livechart.session import StreamSession

LOGGER = logging.getLogger(__name__)

DEFAULT_EVENT = "message"
CREATED_EVENT = "__created"
COMPLETED_EVENT = "__completed"

DispatcherState = Literal["idle", "connected"]
DispatchStatus = Literal["subscribed", "duplicate", "rendered", "skipped", "ignored", "error"]


@dataclass(frozen=True)
class DispatchResult:
    status: DispatchStatus
    chart_id: str | None = None
    detail: str | None = None


Listener = Callable[[str], DispatchResult]


class StreamDispatcher:
    """Routes feed events to chart renderers.

    Default messages are either error envelopes (logged, nothing else) or
    discovery envelopes ``{"changed": id}``. The first discovery of an id
    subscribes a listener for named events with that id; later ones are
    no-ops. Named events carry a full graph payload. Events are handled to
    completion, in arrival order, and no payload problem escapes as an
    exception.
    """

    def __init__(self, session: StreamSession) -> None:
        self.session = session
        self.state: DispatcherState = "idle"
        self._listeners: dict[str, Listener] = {}

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def listening_to(self, chart_id: str) -> bool:
        return chart_id in self._listeners

    def on_open(self) -> None:
        self.state = "connected"
        self._listeners.clear()
        self.session.start_connection()
        LOGGER.info("feed connected")

    def on_close(self) -> None:
        self.state = "idle"
        LOGGER.info("feed closed")

    def handle_event(self, event: SseEvent) -> DispatchResult:
        name = event.event or DEFAULT_EVENT
        if name == DEFAULT_EVENT:
            return self.handle_message(event.data)
        if name == COMPLETED_EVENT:
            return self._handle_completed(event.data)
        if name == CREATED_EVENT:
            LOGGER.debug("graph created: %s", event.data)
            return DispatchResult("ignored", detail=name)
        listener = self._listeners.get(name)
        if listener is None:
            LOGGER.debug("dropping event for unannounced chart %r", name)
            return DispatchResult("ignored", chart_id=name, detail="no listener")
        return listener(event.data)

    def handle_message(self, data: str) -> DispatchResult:
        message = _decode_json(data)
        if not isinstance(message, dict):
            LOGGER.warning("dropping malformed feed message: %r", data)
            return DispatchResult("error", detail="malformed message")
        if message.get("type") == "error" or "error" in message:
            LOGGER.error("feed reported an error: %s", message)
            return DispatchResult("error", detail="error envelope")
        chart_id = message.get("changed")
        if isinstance(chart_id, str) and chart_id:
            return self.subscribe(chart_id)
        LOGGER.debug("ignoring feed message: %s", message)
        return DispatchResult("ignored")

    def subscribe(self, chart_id: str) -> DispatchResult:
        if self.session.is_registered(chart_id):
            return DispatchResult("duplicate", chart_id=chart_id)
        self.session.register(chart_id)
        self._listeners[chart_id] = self._make_listener(chart_id)
        LOGGER.info("new graph: %s", chart_id)
        return DispatchResult("subscribed", chart_id=chart_id)

    def _make_listener(self, chart_id: str) -> Listener:
        def listener(data: str) -> DispatchResult:
            return self._render(chart_id, data)

        return listener

    def _render(self, chart_id: str, data: str) -> DispatchResult:
        raw = _decode_json(data)
        if raw is None:
            LOGGER.warning("dropping undecodable payload for %s", chart_id)
            return DispatchResult("error", chart_id=chart_id, detail="malformed payload")
        try:
            payload = parse_payload(raw)
        except UnknownLayoutError as exc:
            LOGGER.debug("no renderer for %s: %s", chart_id, exc)
            return DispatchResult("ignored", chart_id=chart_id, detail=str(exc))
        except PayloadError as exc:
            LOGGER.warning("dropping invalid payload for %s: %s", chart_id, exc)
            return DispatchResult("error", chart_id=chart_id, detail=str(exc))
        LOGGER.debug("%s: %s payload", chart_id, payload.layout)
        if self.session.render(payload):
            return DispatchResult("rendered", chart_id=chart_id, detail=payload.layout)
        return DispatchResult("skipped", chart_id=chart_id, detail=payload.layout)

    def _handle_completed(self, data: str) -> DispatchResult:
        body = _decode_json(data)
        if isinstance(body, dict):
            LOGGER.warning("graph %s stopped updating: %s", body.get("name"), body.get("reason"))
            return DispatchResult("ignored", chart_id=body.get("name"), detail=COMPLETED_EVENT)
        LOGGER.warning("graph stopped updating: %r", data)
        return DispatchResult("ignored", detail=COMPLETED_EVENT)


def _decode_json(data: str) -> Any:
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        return None
