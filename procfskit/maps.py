"""Memory mappings from ``/proc/<pid>/maps``, ``smaps`` and ``smaps_rollup``."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from functools import reduce
from operator import or_
from pathlib import PurePosixPath

from procfskit.errors import IncompleteError, InternalError, ProcError
from procfskit.flags import MMPermissions, VmFlags

_U64 = (0, 2**64 - 1)
_U32 = (0, 2**32 - 1)
_I32 = (-(2**31), 2**31 - 1)
_DEC_RE = re.compile(r"[+-]?[0-9]+")
_HEX_RE = re.compile(r"[+-]?[0-9a-fA-F]+")


def _parse_int(token: str, what: str, bounds: tuple[int, int], radix: int = 10) -> int:
    low, high = bounds
    pattern = _HEX_RE if radix == 16 else _DEC_RE
    if not pattern.fullmatch(token) or (low >= 0 and token.startswith("-")):
        raise InternalError(f"invalid {what}: {token!r}")
    value = int(token, radix)
    if not low <= value <= high:
        raise InternalError(f"{what} out of range: {token!r}")
    return value


def _split_pair(text: str, sep: str, what: str, bounds: tuple[int, int]) -> tuple[int, int]:
    left, found, right = text.partition(sep)
    if not found:
        raise IncompleteError(f"missing {sep!r} in {what}: {text!r}")
    return _parse_int(left, what, bounds, 16), _parse_int(right, what, bounds, 16)


def _lines(text: str | bytes) -> Iterator[str]:
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise IncompleteError("memory map data is not valid UTF-8") from exc
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    for part in parts:
        yield part.removesuffix("\r")


class MMapKind(enum.Enum):
    """What backs a memory mapping."""

    PATH = "path"
    HEAP = "heap"
    STACK = "stack"
    TSTACK = "tstack"
    VDSO = "vdso"
    VVAR = "vvar"
    VSYSCALL = "vsyscall"
    ROLLUP = "rollup"
    ANONYMOUS = "anonymous"
    VSYS = "vsys"
    OTHER = "other"


_PSEUDO_PATHS = {
    "": MMapKind.ANONYMOUS,
    "[heap]": MMapKind.HEAP,
    "[stack]": MMapKind.STACK,
    "[vdso]": MMapKind.VDSO,
    "[vvar]": MMapKind.VVAR,
    "[vsyscall]": MMapKind.VSYSCALL,
    "[rollup]": MMapKind.ROLLUP,
}


@dataclass(frozen=True)
class MMapPath:
    """The pathname column of a mapping.

    ``value`` holds the file path for PATH, the thread ID for TSTACK, the shared
    memory key for VSYS and the bracketed name for OTHER; it is None otherwise.
    """

    kind: MMapKind
    value: PurePosixPath | str | int | None = None

    @classmethod
    def parse(cls, path: str) -> MMapPath:
        """Parse the pathname column of a maps line."""
        text = path.strip()
        kind = _PSEUDO_PATHS.get(text)
        if kind is not None:
            return cls(kind)
        if text.startswith("[stack:"):
            parts = text[1:-1].split(":")
            if len(parts) < 2:
                raise IncompleteError(f"missing thread id in {text!r}")
            return cls(MMapKind.TSTACK, _parse_int(parts[1], "thread id", _U32))
        if text.startswith("[") and text.endswith("]"):
            return cls(MMapKind.OTHER, text[1:-1])
        if text.startswith("/SYSV"):
            # /SYSVaabbccdd (deleted): the key is a 32-bit signed value in hex
            if len(text) < 13:
                raise IncompleteError(f"truncated SysV key in {text!r}")
            key = _parse_int(text[5:13], "SysV key", _U32, 16)
            if key >= 2**31:
                key -= 2**32
            return cls(MMapKind.VSYS, key)
        return cls(MMapKind.PATH, PurePosixPath(text))


@dataclass
class MMapExtension:
    """Extra per-mapping data from ``smaps``; sizes are in bytes."""

    map: dict[str, int] = field(default_factory=dict)
    vm_flags: VmFlags = VmFlags.NONE

    def is_empty(self) -> bool:
        """Return whether no extension information is present."""
        return not self.map and self.vm_flags == VmFlags.NONE


@dataclass
class MemoryMap:
    """One entry of a maps or smaps file."""

    address: tuple[int, int]
    perms: MMPermissions
    offset: int
    dev: tuple[int, int]
    inode: int
    pathname: MMapPath
    extension: MMapExtension = field(default_factory=MMapExtension)

    @classmethod
    def from_line(cls, line: str) -> MemoryMap:
        """Parse the header line of a mapping."""
        parts = line.split(" ", 5)
        if len(parts) < 6:
            raise IncompleteError(f"truncated memory map line: {line!r}")
        address, perms, offset, dev, inode, path = parts
        return cls(
            address=_split_pair(address, "-", "address", _U64),
            perms=MMPermissions.parse(perms),
            offset=_parse_int(offset, "offset", _U64, 16),
            dev=_split_pair(dev, ":", "device", _I32),
            inode=_parse_int(inode, "inode", _U64),
            pathname=MMapPath.parse(path),
        )


def _apply_attribute(mapping: MemoryMap, line: str) -> None:
    if line.startswith("VmFlags"):
        names = line.split()[1:]
        mapping.extension.vm_flags = reduce(
            or_, (VmFlags.from_name(name) for name in names), VmFlags.NONE
        )
        return
    parts = line.split()
    if len(parts) < 2:
        return
    key, raw = parts[0], parts[1]
    multiplier = 1024 if len(parts) > 2 else 1
    try:
        value = _parse_int(raw, "value", _U64)
    except InternalError:
        raise ProcError("Value in `Key: Value` pair was not actually a number") from None
    mapping.extension.map[key.rstrip(":")] = value * multiplier


@dataclass
class MemoryMaps:
    """All entries of a maps, smaps or smaps_rollup file."""

    entries: list[MemoryMap] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str | bytes) -> MemoryMaps:
        """Parse the full contents of a maps, smaps or smaps_rollup file."""
        entries: list[MemoryMap] = []
        current: MemoryMap | None = None
        for line in _lines(text):
            if line and "A" <= line[0] <= "Z":
                if current is None:
                    raise IncompleteError(f"attribute before any mapping: {line!r}")
                _apply_attribute(current, line)
            else:
                if current is not None:
                    entries.append(current)
                current = MemoryMap.from_line(line)
        if current is not None:
            entries.append(current)
        return cls(entries)

    def __iter__(self) -> Iterator[MemoryMap]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class SmapsRollup:
    """Summed memory statistics from ``/proc/<pid>/smaps_rollup``."""

    memory_map_rollup: MemoryMaps

    @classmethod
    def from_text(cls, text: str | bytes) -> SmapsRollup:
        """Parse the contents of ``smaps_rollup``."""
        return cls(MemoryMaps.from_text(text))