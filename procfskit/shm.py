"""System V shared memory segments from ``/proc/sysvipc/shm``."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from procfskit.errors import IncompleteError, InternalError

_I32 = (-(2**31), 2**31 - 1)
_U16 = (0, 2**16 - 1)
_U32 = (0, 2**32 - 1)
_U64 = (0, 2**64 - 1)
_INT_RE = re.compile(r"[+-]?[0-9]+")

_COLUMNS = (
    ("key", _I32),
    ("shmid", _U64),
    ("perms", _U16),
    ("size", _U64),
    ("cpid", _I32),
    ("lpid", _I32),
    ("nattch", _U32),
    ("uid", _U16),
    ("gid", _U16),
    ("cuid", _U16),
    ("cgid", _U16),
    ("atime", _U64),
    ("dtime", _U64),
    ("ctime", _U64),
    ("rss", _U64),
    ("swap", _U64),
)


def _parse_int(token: str, what: str, bounds: tuple[int, int]) -> int:
    low, high = bounds
    if not _INT_RE.fullmatch(token) or (low >= 0 and token.startswith("-")):
        raise InternalError(f"invalid {what}: {token!r}")
    value = int(token)
    if not low <= value <= high:
        raise InternalError(f"{what} out of range: {token!r}")
    return value


def _lines(text: str | bytes) -> list[str]:
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise IncompleteError("shared memory data is not valid UTF-8") from exc
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return [part.removesuffix("\r") for part in parts]


@dataclass(frozen=True, order=True)
class Shm:
    """One shared memory segment.

    ``key`` matches the key of a SysV mapping and ``shmid`` its inode.
    """

    key: int
    shmid: int
    perms: int
    size: int
    cpid: int
    lpid: int
    nattch: int
    uid: int
    gid: int
    cuid: int
    cgid: int
    atime: int
    dtime: int
    ctime: int
    rss: int
    swap: int

    @classmethod
    def _from_line(cls, line: str) -> Shm:
        tokens = line.split()
        if len(tokens) < len(_COLUMNS):
            raise IncompleteError(f"truncated shared memory line: {line!r}")
        return cls(
            **{name: _parse_int(tok, name, bounds) for (name, bounds), tok in zip(_COLUMNS, tokens)}
        )


@dataclass
class SharedMemorySegments:
    """All shared memory segments listed in ``/proc/sysvipc/shm``."""

    segments: list[Shm] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str | bytes) -> SharedMemorySegments:
        """Parse the file contents; the first line is a header and is skipped."""
        return cls([Shm._from_line(line) for line in _lines(text)[1:]])

    def __iter__(self) -> Iterator[Shm]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)