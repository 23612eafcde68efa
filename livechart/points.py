from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import math
import re

LOGGER = logging.getLogger(__name__)

_FRACTION = re.compile(r"(\.\d{6})\d+")
_ZULU = re.compile(r"[zZ]$")


@dataclass(frozen=True)
class Point:
    x: float | datetime
    y: float


def histogram_points(values: Mapping[str, float]) -> list[Point]:
    """Bucket-start keys parsed as floats, ascending by x."""

    points: list[Point] = []
    for key, value in values.items():
        try:
            x = float(key)
        except ValueError:
            LOGGER.debug("dropping histogram bucket with non-numeric key %r", key)
            continue
        if not _finite(x, value):
            LOGGER.debug("dropping non-finite histogram bucket %r", key)
            continue
        points.append(Point(x=x, y=float(value)))
    points.sort(key=lambda p: (p.x, p.y))
    return points


def time_series_points(values: Mapping[str, float]) -> list[Point]:
    """Timestamp keys, chronological; equal instants keep key-string order."""

    keyed: list[tuple[datetime, str, float]] = []
    for key, value in values.items():
        try:
            when = parse_timestamp(key)
        except ValueError:
            LOGGER.debug("dropping time-series sample with unparseable key %r", key)
            continue
        if not _finite(value):
            LOGGER.debug("dropping non-finite time-series sample %r", key)
            continue
        keyed.append((when, key, float(value)))
    keyed.sort(key=lambda item: (item[0], item[1]))
    return [Point(x=when, y=value) for when, _, value in keyed]


def scatter_points(values: Mapping[str, float]) -> list[Point]:
    """Keys are ``"x|discriminator"``; feed order is kept."""

    points: list[Point] = []
    for key, value in values.items():
        raw_x = key.split("|", 1)[0]
        try:
            x = float(raw_x)
        except ValueError:
            LOGGER.debug("dropping scatter point with non-numeric x in key %r", key)
            continue
        if not _finite(x, value):
            LOGGER.debug("dropping non-finite scatter point %r", key)
            continue
        points.append(Point(x=x, y=float(value)))
    return points


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 timestamp, including nanosecond fractions and ``Z``.

    Naive results are taken to be UTC so that every point shares one timeline.
    """

    normalized = _ZULU.sub("+00:00", text.strip())
    normalized = _FRACTION.sub(r"\1", normalized)
    when = datetime.fromisoformat(normalized)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when


def _finite(*numbers: float) -> bool:
    return all(math.isfinite(n) for n in numbers)
