"""Process resource limits from ``/proc/<pid>/limits``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from procfskit.errors import IncompleteError, InternalError

_U64_MAX = 2**64 - 1
_UINT_RE = re.compile(r"\+?[0-9]+")

# These two limits have no units column.
_UNITLESS = ("Max nice priority", "Max realtime priority")

_FIELDS = (
    ("max_cpu_time", "Max cpu time"),
    ("max_file_size", "Max file size"),
    ("max_data_size", "Max data size"),
    ("max_stack_size", "Max stack size"),
    ("max_core_file_size", "Max core file size"),
    ("max_resident_set", "Max resident set"),
    ("max_processes", "Max processes"),
    ("max_open_files", "Max open files"),
    ("max_locked_memory", "Max locked memory"),
    ("max_address_space", "Max address space"),
    ("max_file_locks", "Max file locks"),
    ("max_pending_signals", "Max pending signals"),
    ("max_msgqueue_size", "Max msgqueue size"),
    ("max_nice_priority", "Max nice priority"),
    ("max_realtime_priority", "Max realtime priority"),
    ("max_realtime_timeout", "Max realtime timeout"),
)


def parse_limit_value(text: str) -> int | None:
    """Parse a limit value; ``unlimited`` gives None."""
    if text == "unlimited":
        return None
    if not _UINT_RE.fullmatch(text):
        raise InternalError(f"invalid limit value: {text!r}")
    value = int(text)
    if value > _U64_MAX:
        raise InternalError(f"limit value out of range: {text!r}")
    return value


@dataclass(frozen=True)
class Limit:
    """A soft and hard limit pair; None means unlimited."""

    soft_limit: int | None
    hard_limit: int | None


@dataclass(frozen=True)
class Limits:
    """All resource limits of a process; see ``getrlimit(2)`` for their meaning."""

    max_cpu_time: Limit
    max_file_size: Limit
    max_data_size: Limit
    max_stack_size: Limit
    max_core_file_size: Limit
    max_resident_set: Limit
    max_processes: Limit
    max_open_files: Limit
    max_locked_memory: Limit
    max_address_space: Limit
    max_file_locks: Limit
    max_pending_signals: Limit
    max_msgqueue_size: Limit
    max_nice_priority: Limit
    max_realtime_priority: Limit
    max_realtime_timeout: Limit

    @classmethod
    def from_text(cls, text: str | bytes) -> Limits:
        """Parse the contents of ``/proc/<pid>/limits``."""
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8", errors="replace")
        pairs: dict[str, tuple[str, str]] = {}
        for raw in text.splitlines():
            line = raw.strip()
            if line.startswith("Limit"):
                continue
            tokens = line.split()
            offset = 2 if line.startswith(_UNITLESS) else 3
            if len(tokens) < offset:
                raise IncompleteError(f"truncated limits line: {raw!r}")
            soft = tokens[-offset]
            hard = tokens[-offset + 1]
            name = " ".join(tokens[:-offset])
            pairs[name] = (soft, hard)

        values = {}
        for attr, label in _FIELDS:
            try:
                soft, hard = pairs.pop(label)
            except KeyError:
                raise IncompleteError(f"missing limit {label!r}") from None
            values[attr] = Limit(parse_limit_value(soft), parse_limit_value(hard))
        return cls(**values)