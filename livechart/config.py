from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
import os
from pathlib import Path
import tomllib
from typing import Any, Literal

from livechart.backend.text import DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE_PX
from livechart.feed import DEFAULT_FEED_URL, ReconnectPolicy


BackendName = Literal["svg", "raster"]
BACKENDS: tuple[BackendName, ...] = ("svg", "raster")
ENV_PREFIX = "LIVECHART_"
TOML_TABLE = "livechart"
DEFAULT_OUTPUT = {"svg": Path("livechart.html"), "raster": Path("livechart.png")}


@dataclass(frozen=True)
class ViewerConfig:
    url: str = DEFAULT_FEED_URL
    backend: BackendName = "svg"
    output_path: Path | None = None
    font_family: str = DEFAULT_FONT_FAMILY
    font_size_px: float = DEFAULT_FONT_SIZE_PX
    connect_timeout_s: float | None = None
    max_retries: int = 5
    retry_initial_delay_s: float = 1.0
    retry_max_delay_s: float = 30.0

    def __post_init__(self) -> None:
        if not self.url.strip():
            raise ValueError("url must be non-empty")
        if self.backend not in BACKENDS:
            raise ValueError(f"backend must be one of {', '.join(BACKENDS)}")
        if self.font_size_px <= 0:
            raise ValueError("font_size_px must be > 0")
        if self.connect_timeout_s is not None and self.connect_timeout_s <= 0:
            raise ValueError("connect_timeout_s must be > 0 when set")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.retry_initial_delay_s < 0 or self.retry_max_delay_s < 0:
            raise ValueError("retry delays must be >= 0")

    @property
    def resolved_output_path(self) -> Path:
        return self.output_path if self.output_path is not None else DEFAULT_OUTPUT[self.backend]

    def reconnect_policy(self) -> ReconnectPolicy:
        return ReconnectPolicy(
            max_retries=self.max_retries,
            initial_delay_s=self.retry_initial_delay_s,
            max_delay_s=self.retry_max_delay_s,
        )

    def with_overrides(self, **overrides: Any) -> "ViewerConfig":
        """Apply overrides, skipping those left as ``None`` (unset CLI flags)."""

        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], base: "ViewerConfig | None" = None) -> "ViewerConfig":
        base = base or cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ValueError(f"unknown config keys: {', '.join(unknown)}")
        return replace(base, **{key: _coerce(key, value) for key, value in raw.items()})

    @classmethod
    def from_toml(cls, path: Path, base: "ViewerConfig | None" = None) -> "ViewerConfig":
        with path.open("rb") as f:
            raw = tomllib.load(f)
        table = raw.get(TOML_TABLE, {})
        if not isinstance(table, dict):
            raise ValueError(f"[{TOML_TABLE}] must be a table in {path}")
        return cls.from_mapping(table, base=base)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, base: "ViewerConfig | None" = None) -> "ViewerConfig":
        env = os.environ if env is None else env
        raw: dict[str, Any] = {}
        for f in fields(cls):
            value = env.get(ENV_PREFIX + f.name.upper())
            if value is not None and value.strip():
                raw[f.name] = value.strip()
        return cls.from_mapping(raw, base=base)


def load_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> ViewerConfig:
    """Defaults, then the TOML file, then ``LIVECHART_*`` environment variables."""

    config = ViewerConfig()
    if path is not None:
        config = ViewerConfig.from_toml(path, base=config)
    return ViewerConfig.from_env(env, base=config)


def _coerce(key: str, value: Any) -> Any:
    try:
        if key in ("font_size_px", "retry_initial_delay_s", "retry_max_delay_s"):
            return float(value)
        if key == "max_retries":
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(value)
            return int(value)
        if key == "connect_timeout_s":
            if value is None or (isinstance(value, str) and value.lower() in ("", "none", "off")):
                return None
            return float(value)
        if key == "output_path":
            return None if value is None else Path(value)
        return str(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid value for {key}: {value!r}") from exc
