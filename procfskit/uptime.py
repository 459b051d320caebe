"""System uptime, as reported by ``/proc/uptime``."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta

from procfskit.errors import IncompleteError, InternalError


def _parse_float(token: str, what: str) -> float:
    if "_" in token or token != token.strip():
        raise InternalError(f"invalid {what} value: {token!r}")
    try:
        return float(token)
    except ValueError as exc:
        raise InternalError(f"invalid {what} value: {token!r}") from exc


def _to_duration(seconds: float) -> timedelta:
    """Convert fractional seconds to a duration with centisecond precision."""
    whole = max(0, math.trunc(seconds))
    fraction = seconds - math.trunc(seconds)
    centis = max(0, math.floor(fraction * 100.0 + 0.5))
    return timedelta(seconds=whole, microseconds=centis * 10_000)


@dataclass(frozen=True)
class Uptime:
    """The uptime of the system and the total idle time of all cores."""

    uptime: float
    idle: float

    @classmethod
    def from_text(cls, text: str | bytes) -> Uptime:
        """Parse the contents of ``/proc/uptime``."""
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8", errors="replace")
        fields = text.strip().split(" ")
        if len(fields) < 2:
            raise IncompleteError("uptime data is missing the idle field")
        return cls(
            uptime=_parse_float(fields[0], "uptime"),
            idle=_parse_float(fields[1], "idle"),
        )

    def uptime_duration(self) -> timedelta:
        """The uptime of the system (including time spent in suspend)."""
        return _to_duration(self.uptime)

    def idle_duration(self) -> timedelta:
        """The sum of how much time each core has spent idle."""
        return _to_duration(self.idle)