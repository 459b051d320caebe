"""Pressure stall information from ``/proc/pressure/{cpu,memory,io}``."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from procfskit.errors import IncompleteError

_U64_MAX = 2**64 - 1
_UINT_RE = re.compile(r"\+?[0-9]+")


@dataclass(frozen=True)
class PressureRecord:
    """Stall percentages over 10, 60 and 300 second windows, and total stall time in µs."""

    avg10: float
    avg60: float
    avg300: float
    total: int


def _get_float(values: dict[str, str], key: str) -> float:
    raw = values.get(key)
    if raw is None or "_" in raw:
        raise IncompleteError(f"missing or invalid {key}")
    try:
        return float(raw)
    except ValueError:
        raise IncompleteError(f"missing or invalid {key}") from None


def _get_total(values: dict[str, str]) -> int:
    raw = values.get("total")
    if raw is None or not _UINT_RE.fullmatch(raw):
        raise IncompleteError("missing or invalid total")
    total = int(raw)
    if total > _U64_MAX:
        raise IncompleteError("missing or invalid total")
    return total


def parse_pressure_record(line: str) -> PressureRecord:
    """Parse one ``some ...`` or ``full ...`` line."""
    if not line.startswith(("some", "full")):
        raise IncompleteError(f"not a pressure record: {line!r}")
    values: dict[str, str] = {}
    for item in line[5:].split():
        parts = item.split("=")
        if len(parts) == 2:
            values[parts[0]] = parts[1]
    return PressureRecord(
        avg10=_get_float(values, "avg10"),
        avg60=_get_float(values, "avg60"),
        avg300=_get_float(values, "avg300"),
        total=_get_total(values),
    )


def _lines(text: str | bytes) -> Iterator[str]:
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8", errors="replace")
    return iter(text.split("\n"))


def _some_and_full(text: str | bytes) -> tuple[PressureRecord, PressureRecord]:
    lines = _lines(text)
    some = next(lines, "")
    full = next(lines, "")
    return parse_pressure_record(some), parse_pressure_record(full)


@dataclass(frozen=True)
class CpuPressure:
    """CPU pressure information."""

    some: PressureRecord

    @classmethod
    def from_text(cls, text: str | bytes) -> CpuPressure:
        """Parse the contents of ``/proc/pressure/cpu``."""
        return cls(some=parse_pressure_record(next(_lines(text), "")))


@dataclass(frozen=True)
class MemoryPressure:
    """Memory pressure: time some tasks stalled, and time all non-idle tasks stalled."""

    some: PressureRecord
    full: PressureRecord

    @classmethod
    def from_text(cls, text: str | bytes) -> MemoryPressure:
        """Parse the contents of ``/proc/pressure/memory``."""
        some, full = _some_and_full(text)
        return cls(some=some, full=full)


@dataclass(frozen=True)
class IoPressure:
    """IO pressure: time some tasks stalled, and time all non-idle tasks stalled."""

    some: PressureRecord
    full: PressureRecord

    @classmethod
    def from_text(cls, text: str | bytes) -> IoPressure:
        """Parse the contents of ``/proc/pressure/io``."""
        some, full = _some_and_full(text)
        return cls(some=some, full=full)