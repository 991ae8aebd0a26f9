from __future__ import annotations

import os
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping

from dotenv import load_dotenv


class ConfigError(ValueError):
    """Raised when threshold/TTL or other settings cannot be used."""


_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: str) -> float:
    """Parse a Go-style duration string ("30s", "1m30s", "250ms") into seconds."""
    raw = (value or "").strip()
    if not raw:
        raise ConfigError("invalid duration: empty value")

    sign = 1.0
    body = raw
    if body[0] in "+-":
        if body[0] == "-":
            sign = -1.0
        body = body[1:]

    if body == "0":
        return 0.0
    if not body:
        raise ConfigError(f"invalid duration: {raw!r}")

    total = 0.0
    pos = 0
    while pos < len(body):
        match = _DURATION_PART.match(body, pos)
        if match is None:
            raise ConfigError(f"invalid duration: {raw!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return sign * total


def parse_threshold(value: str | int) -> int:
    try:
        threshold = int(str(value).strip())
    except ValueError as exc:
        raise ConfigError(f"invalid threshold: {value!r}") from exc
    if threshold < 1:
        raise ConfigError(f"threshold must be at least 1, got {threshold}")
    return threshold


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    threshold: int
    ttl_seconds: float
    log_level: str
    enable_prometheus_metrics: bool

    def validate(self) -> None:
        """Raise early on values the limiter cannot run with."""
        if self.threshold < 1:
            raise ConfigError(f"threshold must be at least 1, got {self.threshold}")
        # The window reset fires every TTL, so it needs a positive interval.
        if self.ttl_seconds <= 0:
            raise ConfigError(f"ttl must be positive, got {self.ttl_seconds}s")
        if not 0 < self.port < 65536:
            raise ConfigError(f"port out of range: {self.port}")


def load_settings(
    environ: Mapping[str, str] | None = None,
    *,
    threshold: int | None = None,
    ttl_seconds: float | None = None,
) -> Settings:
    """Build settings from the environment.

    Explicit ``threshold``/``ttl_seconds`` win over REPORT_THRESHOLD and
    REPORT_TTL, and the environment values are then not parsed at all.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    loaded = Settings(
        host=environ.get("HOST", "0.0.0.0").strip(),
        port=_as_int(environ.get("PORT"), 8080),
        threshold=(
            threshold if threshold is not None else parse_threshold(environ.get("REPORT_THRESHOLD", "5"))
        ),
        ttl_seconds=(
            ttl_seconds if ttl_seconds is not None else parse_duration(environ.get("REPORT_TTL", "30s"))
        ),
        log_level=environ.get("LOG_LEVEL", "INFO").strip().upper(),
        enable_prometheus_metrics=_as_bool(environ.get("ENABLE_PROMETHEUS_METRICS"), True),
    )
    loaded.validate()
    return loaded


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
