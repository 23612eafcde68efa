from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

import numpy as np


@dataclass(frozen=True)
class LinearScale:
    """Maps a numeric domain onto a pixel range; the range may be inverted."""

    domain: tuple[float, float]
    range: tuple[float, float]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return float(r0)
        return float(r0 + (float(value) - d0) * (r1 - r0) / (d1 - d0))

    def map_array(self, values: np.ndarray) -> np.ndarray:
        d0, d1 = self.domain
        r0, r1 = self.range
        arr = np.asarray(values, dtype=np.float64)
        if d1 == d0:
            return np.full(arr.shape, float(r0), dtype=np.float64)
        return r0 + (arr - d0) * ((r1 - r0) / (d1 - d0))

    def ticks(self, target: int = 10) -> np.ndarray:
        lo, hi = sorted(self.domain)
        ticks = generate_nice_ticks(lo, hi, target)
        return ticks[(ticks >= lo - 1e-9 * abs(hi - lo)) & (ticks <= hi + 1e-9 * abs(hi - lo))]

    def tick_labels(self, ticks: np.ndarray) -> list[str]:
        return format_ticks_for_axis(ticks)


@dataclass(frozen=True)
class TimeScale:
    """Linear scale over POSIX seconds that accepts and labels datetimes."""

    domain: tuple[datetime, datetime]
    range: tuple[float, float]

    @property
    def linear(self) -> LinearScale:
        return LinearScale(
            domain=(to_seconds(self.domain[0]), to_seconds(self.domain[1])),
            range=self.range,
        )

    def __call__(self, value: datetime) -> float:
        return self.linear(to_seconds(value))

    def ticks(self, target: int = 10) -> np.ndarray:
        return self.linear.ticks(target)

    def tick_labels(self, ticks: np.ndarray) -> list[str]:
        if ticks.size == 0:
            return []
        span = float(abs(to_seconds(self.domain[1]) - to_seconds(self.domain[0])))
        fmt = _time_format_for_span(span)
        tz = self.domain[0].tzinfo or timezone.utc
        return [datetime.fromtimestamp(float(t), tz=tz).strftime(fmt) for t in ticks]


def to_seconds(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _time_format_for_span(span_s: float) -> str:
    if span_s < 1.0:
        return "%H:%M:%S.%f"
    if span_s < 2 * 86400.0:
        return "%H:%M:%S"
    return "%Y-%m-%d"


def generate_nice_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    """Round-valued ticks covering ``[vmin, vmax]`` without leaving it."""

    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)
    if not np.isfinite(vmax - vmin):
        return np.asarray([vmin, vmax], dtype=np.float64)

    span = _nice_number(vmax - vmin, round_result=False)
    step = _nice_number(span / max(target - 1, 1), round_result=True)
    tick_min = np.ceil(vmin / step) * step
    tick_max = np.floor(vmax / step) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e9 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.4e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def format_value(value: float) -> str:
    """Render a bar value the way the feed's JSON numbers read (``5`` not ``5.0``)."""

    if np.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return format_tick(float(value))


def _nice_number(value: float, *, round_result: bool) -> float:
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    return float(nice_frac * (10**exp))


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
