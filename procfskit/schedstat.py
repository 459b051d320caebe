"""Scheduler statistics from ``/proc/<pid>/schedstat``."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields

from procfskit.errors import IncompleteError, InternalError

_U64_MAX = 2**64 - 1
_UINT_RE = re.compile(r"\+?[0-9]+")


def _parse_u64(token: str, what: str) -> int:
    if not _UINT_RE.fullmatch(token):
        raise InternalError(f"invalid {what}: {token!r}")
    value = int(token)
    if value > _U64_MAX:
        raise InternalError(f"{what} out of range: {token!r}")
    return value


@dataclass(frozen=True)
class Schedstat:
    """CPU time (ns), run-queue wait time (ns) and timeslice count of a process."""

    sum_exec_runtime: int
    run_delay: int
    pcount: int

    @classmethod
    def from_text(cls, text: str | bytes) -> Schedstat:
        """Parse the contents of ``/proc/<pid>/schedstat``."""
        if isinstance(text, (bytes, bytearray)):
            try:
                text = bytes(text).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise IncompleteError("schedstat data is not valid UTF-8") from exc
        tokens = text.split()
        names = [f.name for f in fields(cls)]
        if len(tokens) < len(names):
            raise IncompleteError(f"expected {len(names)} values, found {len(tokens)}")
        return cls(**{name: _parse_u64(tok, name) for name, tok in zip(names, tokens)})