"""Per-process I/O counters and memory usage in pages."""

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


def _decode(text: str | bytes) -> str:
    if isinstance(text, (bytes, bytearray)):
        try:
            return bytes(text).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise IncompleteError("data is not valid UTF-8") from exc
    return text


@dataclass(frozen=True)
class Io:
    """I/O statistics of a process, from ``/proc/<pid>/io``."""

    rchar: int
    wchar: int
    syscr: int
    syscw: int
    read_bytes: int
    write_bytes: int
    cancelled_write_bytes: int

    @classmethod
    def from_text(cls, text: str | bytes) -> Io:
        """Parse the contents of ``/proc/<pid>/io``."""
        values: dict[str, int] = {}
        for line in _decode(text).split("\n"):
            line = line.removesuffix("\r")
            if not line or " " not in line:
                continue
            tokens = line.split()
            if len(tokens) < 2:
                raise IncompleteError(f"missing value in line {line!r}")
            name = tokens[0][:-1]
            values[name] = _parse_u64(tokens[1], name)
        try:
            return cls(**{f.name: values[f.name] for f in fields(cls)})
        except KeyError as exc:
            raise IncompleteError(f"missing field {exc.args[0]}") from None


@dataclass(frozen=True)
class StatM:
    """Memory usage of a process in pages, from ``/proc/<pid>/statm``."""

    size: int
    resident: int
    shared: int
    text: int
    lib: int
    data: int
    dt: int

    @classmethod
    def from_text(cls, text: str | bytes) -> StatM:
        """Parse the contents of ``/proc/<pid>/statm``."""
        tokens = _decode(text).split()
        names = [f.name for f in fields(cls)]
        if len(tokens) < len(names):
            raise IncompleteError(f"expected {len(names)} values, found {len(tokens)}")
        return cls(**{name: _parse_u64(tok, name) for name, tok in zip(names, tokens)})