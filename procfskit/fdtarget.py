"""Targets of the links in ``/proc/<pid>/fd``."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from procfskit.errors import IncompleteError, InternalError

_U64_MAX = 2**64 - 1
_UINT_RE = re.compile(r"\+?[0-9]+")


class FDKind(enum.Enum):
    """What an open file descriptor refers to."""

    PATH = "path"
    SOCKET = "socket"
    NET = "net"
    PIPE = "pipe"
    ANON_INODE = "anon_inode"
    MEMFD = "memfd"
    OTHER = "other"


def _strip_first_last(text: str) -> str:
    if len(text.encode("utf-8")) > 2:
        return text[1:-1]
    raise IncompleteError(f"inode field too short: {text!r}")


def _parse_inode(text: str, what: str) -> int:
    inner = _strip_first_last(text)
    if not _UINT_RE.fullmatch(inner) or int(inner) > _U64_MAX:
        raise InternalError(f"invalid {what} inode: {text!r}")
    return int(inner)


_INODE_KINDS = {
    "socket": FDKind.SOCKET,
    "net": FDKind.NET,
    "pipe": FDKind.PIPE,
}


@dataclass(frozen=True)
class FDTarget:
    """An open file descriptor's target.

    ``path`` is set for PATH, ``inode`` for SOCKET, NET, PIPE and OTHER, and
    ``name`` for ANON_INODE, MEMFD and OTHER (where it is the descriptor type).
    """

    kind: FDKind
    path: PurePosixPath | None = None
    inode: int | None = None
    name: str | None = None

    @classmethod
    def parse(cls, text: str) -> FDTarget:
        """Parse the target of a ``/proc/<pid>/fd/<n>`` link."""
        if not text.startswith("/") and ":" in text:
            parts = text.split(":")
            fd_type, rest = parts[0], parts[1]
            kind = _INODE_KINDS.get(fd_type)
            if kind is not None:
                return cls(kind, inode=_parse_inode(rest, fd_type))
            if fd_type == "anon_inode":
                return cls(FDKind.ANON_INODE, name=rest)
            if fd_type == "":
                raise IncompleteError(f"missing descriptor type in {text!r}")
            return cls(FDKind.OTHER, inode=_parse_inode(rest, fd_type), name=fd_type)
        if text.startswith("/memfd:"):
            return cls(FDKind.MEMFD, name=text.removeprefix("/memfd:"))
        return cls(FDKind.PATH, path=PurePosixPath(text))