from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
import logging
from pathlib import Path
import time
from typing import TYPE_CHECKING, Any, Callable
import urllib.request

from livechart.errors import FeedError

if TYPE_CHECKING:
    from livechart.dispatch import StreamDispatcher

LOGGER = logging.getLogger(__name__)

DEFAULT_FEED_URL = "http://localhost:8080/data"


@dataclass(frozen=True)
class SseEvent:
    event: str = "message"
    data: str = ""
    id: str | None = None
    retry_ms: int | None = None


class EventStreamDecoder:
    """Incremental ``text/event-stream`` decoder; feed it one line at a time."""

    def __init__(self) -> None:
        self._event = ""
        self._data: list[str] = []
        self._id: str | None = None
        self._retry_ms: int | None = None

    def feed(self, line: str) -> SseEvent | None:
        line = line.rstrip("\r\n")
        if not line:
            return self._flush()
        if line.startswith(":"):
            return None
        field_name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]
        if field_name == "event":
            self._event = value
        elif field_name == "data":
            self._data.append(value)
        elif field_name == "id":
            if "\0" not in value:
                self._id = value
        elif field_name == "retry":
            if value.isdigit():
                self._retry_ms = int(value)
        return None

    def _flush(self) -> SseEvent | None:
        if not self._data:
            self._event = ""
            return None
        out = SseEvent(
            event=self._event or "message",
            data="\n".join(self._data),
            id=self._id,
            retry_ms=self._retry_ms,
        )
        self._event = ""
        self._data = []
        return out


def iter_events(lines: Iterable[str | bytes]) -> Iterator[SseEvent]:
    decoder = EventStreamDecoder()
    for raw in lines:
        line = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        # A chunk may hold several lines when the source is not line-buffered.
        for part in line.splitlines() or [""]:
            event = decoder.feed(part)
            if event is not None:
                yield event
    # End of stream dispatches nothing that was not terminated by a blank line.


@dataclass(frozen=True)
class ReconnectPolicy:
    """Exponential backoff between reconnect attempts.

    ``max_retries=0`` stops after the first connection ends. The attempt
    counter resets once a connection delivers an event.
    """

    max_retries: int = 5
    initial_delay_s: float = 1.0
    max_delay_s: float = 30.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_delay_s < 0 or self.max_delay_s < 0:
            raise ValueError("retry delays must be >= 0")

    def delay(self, attempt: int) -> float:
        if attempt <= 0:
            raise ValueError("attempt must be > 0")
        return min(self.max_delay_s, self.initial_delay_s * (2 ** (attempt - 1)))


Opener = Callable[..., Any]


class EventSourceClient:
    """Long-lived push connection feeding a dispatcher."""

    def __init__(
        self,
        url: str,
        dispatcher: "StreamDispatcher",
        *,
        policy: ReconnectPolicy | None = None,
        timeout: float | None = None,
        opener: Opener = urllib.request.urlopen,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.url = url
        self.dispatcher = dispatcher
        self.policy = policy or ReconnectPolicy()
        self.timeout = timeout
        self._opener = opener
        self._sleep = sleep
        self._closed = False
        self.events_seen = 0

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def run(self) -> None:
        """Consume the feed until closed or until reconnect attempts run out."""

        attempt = 0
        while not self._closed:
            failure: Exception | None = None
            seen_before = self.events_seen
            try:
                self._consume_once()
            except OSError as exc:
                failure = exc
                LOGGER.warning("feed connection to %s failed: %s", self.url, exc)
            if self._closed:
                break
            delivered = self.events_seen > seen_before
            attempt = 1 if delivered else attempt + 1
            if attempt > self.policy.max_retries:
                if failure is not None:
                    raise FeedError(f"could not stay connected to {self.url}: {failure}") from failure
                LOGGER.info("feed %s ended", self.url)
                return
            delay = self.policy.delay(attempt)
            LOGGER.info("reconnecting to %s in %.1fs (attempt %d/%d)", self.url, delay, attempt, self.policy.max_retries)
            self._sleep(delay)

    def _consume_once(self) -> None:
        request = urllib.request.Request(
            self.url,
            headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
        )
        with self._opener(request, timeout=self.timeout) as response:
            self.dispatcher.on_open()
            try:
                for event in iter_events(response):
                    if self._closed:
                        break
                    self.dispatch(event)
            finally:
                self.dispatcher.on_close()

    def dispatch(self, event: SseEvent) -> None:
        self.events_seen += 1
        try:
            self.dispatcher.handle_event(event)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("rendering event %r failed: %s", event.event, exc)


def replay_capture(path: Path, dispatcher: "StreamDispatcher") -> int:
    """Push a captured ``text/event-stream`` file through ``dispatcher``; returns the event count."""

    count = 0
    with path.open("r", encoding="utf-8") as handle:
        dispatcher.on_open()
        try:
            for event in iter_events(handle):
                count += 1
                try:
                    dispatcher.handle_event(event)
                except Exception as exc:  # noqa: BLE001
                    LOGGER.exception("rendering event %r failed: %s", event.event, exc)
        finally:
            dispatcher.on_close()
    return count

