from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Callable

from livechart.backend.base import RenderBackend
from livechart.payload import LogFilePayload
from livechart.style import StyleApplier

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def receipt_stamp(when: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision and a ``Z`` suffix."""

    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class LogCursor:
    """How far into the current log instance the display has advanced."""

    last_line_index: int = 0
    last_label: str | None = None

    @property
    def state(self) -> str:
        return "streaming" if self.last_line_index > 0 else "fresh"

    def pending(self, payload: LogFilePayload) -> tuple[bool, range]:
        """Whether ``payload`` starts a new log instance, and the line indices still to show."""

        reset = payload.presentation.label != self.last_label
        start = 0 if reset else self.last_line_index
        return reset, range(start, payload.count)

    def advance(self, payload: LogFilePayload) -> None:
        self.last_line_index = payload.count
        self.last_label = payload.presentation.label


class LogFileRenderer:
    """Append-only log view.

    Lines are stamped with the time they were received, not the time they were
    logged. Indices missing from ``values`` are skipped for good: the cursor
    moves to ``count`` regardless.
    """

    kind = "logfile"

    def __init__(
        self,
        backend: RenderBackend,
        cursor: LogCursor,
        style: StyleApplier | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.backend = backend
        self.cursor = cursor
        self.style = style or StyleApplier(backend)
        self._clock = clock

    def render(self, payload: LogFilePayload) -> int:
        """Apply ``payload`` and return the number of lines appended."""

        self.style.apply(payload.presentation)
        reset, indices = self.cursor.pending(payload)
        if reset:
            LOGGER.debug("log label changed %r -> %r; clearing", self.cursor.last_label, payload.presentation.label)
            self.backend.clear_log()

        appended = 0
        for i in indices:
            line = payload.values.get(str(i))
            if line is None:
                continue
            self.backend.append_log_line(f"[{receipt_stamp(self._clock())}] {line}")
            appended += 1
        self.cursor.advance(payload)
        self.backend.commit()
        return appended
