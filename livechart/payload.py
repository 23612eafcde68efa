from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import math
from typing import Any, Literal, Union

from livechart.errors import PayloadError, UnknownLayoutError


LayoutKind = Literal["histogram", "time-series", "scatterplot", "logfile"]
LAYOUT_KINDS: tuple[LayoutKind, ...] = ("histogram", "time-series", "scatterplot", "logfile")

DEFAULT_CANVAS_WIDTH = 500
DEFAULT_CANVAS_HEIGHT = 500


@dataclass(frozen=True)
class Presentation:
    """Options every chart kind carries: title plus optional palette and font size."""

    label: str = ""
    colors: str | None = None
    font_size: str | None = None


@dataclass(frozen=True)
class HistogramPayload:
    values: Mapping[str, float]
    presentation: Presentation = field(default_factory=Presentation)
    width: float = DEFAULT_CANVAS_WIDTH
    height: float = DEFAULT_CANVAS_HEIGHT
    wide: bool = False
    bucket: float = 1.0

    layout: LayoutKind = field(default="histogram", init=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise PayloadError("histogram width/height must be > 0")
        # The producer buckets with size 1 when no positive size is configured.
        if self.bucket <= 0:
            object.__setattr__(self, "bucket", 1.0)


@dataclass(frozen=True)
class TimeSeriesPayload:
    values: Mapping[str, float]
    presentation: Presentation = field(default_factory=Presentation)
    width: float = DEFAULT_CANVAS_WIDTH
    height: float = DEFAULT_CANVAS_HEIGHT

    layout: LayoutKind = field(default="time-series", init=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise PayloadError("time-series width/height must be > 0")


@dataclass(frozen=True)
class ScatterPayload:
    values: Mapping[str, float]
    presentation: Presentation = field(default_factory=Presentation)
    width: float = DEFAULT_CANVAS_WIDTH
    height: float = DEFAULT_CANVAS_HEIGHT

    layout: LayoutKind = field(default="scatterplot", init=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise PayloadError("scatterplot width/height must be > 0")


@dataclass(frozen=True)
class LogFilePayload:
    values: Mapping[str, str]
    count: int
    presentation: Presentation = field(default_factory=Presentation)

    layout: LayoutKind = field(default="logfile", init=False)

    def __post_init__(self) -> None:
        if self.count < 0:
            raise PayloadError("logfile count must be >= 0")


GraphPayload = Union[HistogramPayload, TimeSeriesPayload, ScatterPayload, LogFilePayload]


def parse_payload(raw: Mapping[str, Any]) -> GraphPayload:
    """Build the payload variant declared by ``raw["Layout"]``.

    ``raw`` uses the producer's wire names (``Layout``, ``Label``, ``Values``,
    ``Width``, ``Height``, ``Wide``, ``Bucket``, ``Colors``, ``FontSize``,
    ``Count``). Fields that are not meaningful for the declared layout are
    ignored.
    """

    if not isinstance(raw, Mapping):
        raise PayloadError(f"payload must be a JSON object, got {type(raw).__name__}")
    layout = raw.get("Layout")
    if layout not in LAYOUT_KINDS:
        raise UnknownLayoutError(layout)

    presentation = Presentation(
        label=_optional_str(raw, "Label") or "",
        colors=_optional_str(raw, "Colors") or None,
        font_size=_optional_str(raw, "FontSize") or None,
    )

    if layout == "logfile":
        return LogFilePayload(
            values=_text_values(raw.get("Values")),
            count=_int(raw, "Count", default=0),
            presentation=presentation,
        )

    values = _numeric_values(raw.get("Values"))
    width = _number(raw, "Width", default=DEFAULT_CANVAS_WIDTH)
    height = _number(raw, "Height", default=DEFAULT_CANVAS_HEIGHT)
    if layout == "histogram":
        return HistogramPayload(
            values=values,
            presentation=presentation,
            width=width,
            height=height,
            wide=_bool(raw, "Wide", default=False),
            bucket=_number(raw, "Bucket", default=1.0),
        )
    if layout == "time-series":
        return TimeSeriesPayload(values=values, presentation=presentation, width=width, height=height)
    return ScatterPayload(values=values, presentation=presentation, width=width, height=height)


def _optional_str(raw: Mapping[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise PayloadError(f"{key} must be a string")
    return value


def _bool(raw: Mapping[str, Any], key: str, *, default: bool) -> bool:
    value = raw.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise PayloadError(f"{key} must be a boolean")
    return value


def _number(raw: Mapping[str, Any], key: str, *, default: float) -> float:
    value = raw.get(key)
    if value is None:
        return float(default)
    if not _is_finite_number(value):
        raise PayloadError(f"{key} must be a finite number")
    # Unset integer fields arrive as 0 from the producer.
    if value == 0 and key in ("Width", "Height"):
        return float(default)
    return float(value)


def _int(raw: Mapping[str, Any], key: str, *, default: int) -> int:
    value = raw.get(key)
    if value is None:
        return default
    if not _is_finite_number(value) or int(value) != value:
        raise PayloadError(f"{key} must be an integer")
    return int(value)


def _numeric_values(value: Any) -> dict[str, float]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise PayloadError("Values must be a JSON object")
    out: dict[str, float] = {}
    for key, item in value.items():
        if not _is_finite_number(item):
            raise PayloadError(f"Values[{key!r}] must be a finite number")
        out[str(key)] = float(item)
    return out


def _text_values(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise PayloadError("Values must be a JSON object")
    return {str(key): str(item) for key, item in value.items()}


def _is_finite_number(value: Any) -> bool:
    # json.loads accepts the NaN and Infinity literals.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False
