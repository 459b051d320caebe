"""Mount information from ``/proc/<pid>/mountinfo``."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from procfskit.errors import IncompleteError, InternalError

_I32 = (-(2**31), 2**31 - 1)
_U32 = (0, 2**32 - 1)
_INT_RE = re.compile(r"[+-]?[0-9]+")


def _parse_int(token: str, what: str, bounds: tuple[int, int]) -> int:
    low, high = bounds
    if not _INT_RE.fullmatch(token) or (low >= 0 and token.startswith("-")):
        raise InternalError(f"invalid {what}: {token!r}")
    value = int(token)
    if not low <= value <= high:
        raise InternalError(f"{what} out of range: {token!r}")
    return value


def _next(tokens: Iterator[str], what: str) -> str:
    try:
        return next(tokens)
    except StopIteration:
        raise IncompleteError(f"missing {what}") from None


def _parse_options(text: str) -> dict[str, str | None]:
    options: dict[str, str | None] = {}
    for opt in text.split(","):
        name, sep, value = opt.partition("=")
        options[name] = value if sep else None
    return options


class MountOptKind(enum.Enum):
    """Kinds of optional fields in a mountinfo line."""

    SHARED = "shared"
    MASTER = "master"
    PROPAGATE_FROM = "propagate_from"
    UNBINDABLE = "unbindable"


@dataclass(frozen=True)
class MountOptField:
    """An optional mountinfo field; ``value`` is the peer group ID where one applies."""

    kind: MountOptKind
    value: int | None = None


@dataclass
class MountInfo:
    """A single mount in a process's mount namespace."""

    mnt_id: int
    pid: int
    majmin: str
    root: str
    mount_point: PurePosixPath
    mount_options: dict[str, str | None]
    opt_fields: list[MountOptField]
    fs_type: str
    mount_source: str | None
    super_options: dict[str, str | None]

    @classmethod
    def from_line(cls, line: str) -> MountInfo:
        """Parse one line of a mountinfo file."""
        tokens = iter(line.split())
        mnt_id = _parse_int(_next(tokens, "mount id"), "mount id", _I32)
        pid = _parse_int(_next(tokens, "parent id"), "parent id", _I32)
        majmin = _next(tokens, "major:minor")
        root = _next(tokens, "root")
        mount_point = PurePosixPath(_next(tokens, "mount point"))
        mount_options = _parse_options(_next(tokens, "mount options"))

        opt_fields: list[MountOptField] = []
        while (token := _next(tokens, "optional field separator")) != "-":
            parts = iter(token.split(":"))
            name = next(parts)
            if name == MountOptKind.UNBINDABLE.value:
                opt_fields.append(MountOptField(MountOptKind.UNBINDABLE))
            elif name in (
                MountOptKind.SHARED.value,
                MountOptKind.MASTER.value,
                MountOptKind.PROPAGATE_FROM.value,
            ):
                value = _parse_int(_next(parts, f"{name} value"), f"{name} value", _U32)
                opt_fields.append(MountOptField(MountOptKind(name), value))

        fs_type = _next(tokens, "filesystem type")
        source = _next(tokens, "mount source")
        super_options = _parse_options(_next(tokens, "super options"))

        return cls(
            mnt_id=mnt_id,
            pid=pid,
            majmin=majmin,
            root=root,
            mount_point=mount_point,
            mount_options=mount_options,
            opt_fields=opt_fields,
            fs_type=fs_type,
            mount_source=None if source == "none" else source,
            super_options=super_options,
        )


@dataclass
class MountInfos:
    """All mounts in a process's mount namespace."""

    entries: list[MountInfo] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> MountInfos:
        """Parse the full contents of a mountinfo file."""
        return cls([MountInfo.from_line(line) for line in text.splitlines()])

    def __iter__(self) -> Iterator[MountInfo]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)