"""NFS statistics blocks found in ``/proc/<pid>/mountstats``."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable
from dataclasses import dataclass, field, fields
from datetime import timedelta
from functools import reduce
from operator import or_
from typing import TypeVar

from procfskit.errors import IncompleteError, InternalError

_U64_MAX = 2**64 - 1
_U32_MAX = 2**32 - 1
_DEC_RE = re.compile(r"\+?[0-9]+")
_HEX_RE = re.compile(r"\+?[0-9a-fA-F]+")

_C = TypeVar("_C")


def _parse_unsigned(token: str, what: str, *, radix: int = 10, maximum: int = _U64_MAX) -> int:
    pattern = _HEX_RE if radix == 16 else _DEC_RE
    if not pattern.fullmatch(token):
        raise InternalError(f"invalid {what}: {token!r}")
    value = int(token, radix)
    if value > maximum:
        raise InternalError(f"{what} out of range: {token!r}")
    return value


def _parse_counters(cls: type[_C], text: str) -> _C:
    tokens = text.split()
    names = [f.name for f in fields(cls)]  # type: ignore[arg-type]
    if len(tokens) < len(names):
        raise IncompleteError(f"expected {len(names)} counters, found {len(tokens)}")
    values = {name: _parse_unsigned(token, name) for name, token in zip(names, tokens)}
    return cls(**values)


def _duration(**kwargs: int) -> timedelta:
    try:
        return timedelta(**kwargs)
    except OverflowError as exc:
        raise InternalError(f"duration out of range: {kwargs}") from exc


class NFSServerCaps(enum.IntFlag):
    """NFS server capability bits."""

    NFS_CAP_READDIRPLUS = 1
    NFS_CAP_HARDLINKS = 1 << 1
    NFS_CAP_SYMLINKS = 1 << 2
    NFS_CAP_ACLS = 1 << 3
    NFS_CAP_ATOMIC_OPEN = 1 << 4
    NFS_CAP_LGOPEN = 1 << 5
    NFS_CAP_FILEID = 1 << 6
    NFS_CAP_MODE = 1 << 7
    NFS_CAP_NLINK = 1 << 8
    NFS_CAP_OWNER = 1 << 9
    NFS_CAP_OWNER_GROUP = 1 << 10
    NFS_CAP_ATIME = 1 << 11
    NFS_CAP_CTIME = 1 << 12
    NFS_CAP_MTIME = 1 << 13
    NFS_CAP_POSIX_LOCK = 1 << 14
    NFS_CAP_UIDGID_NOMAP = 1 << 15
    NFS_CAP_STATEID_NFSV41 = 1 << 16
    NFS_CAP_ATOMIC_OPEN_V1 = 1 << 17
    NFS_CAP_SECURITY_LABEL = 1 << 18
    NFS_CAP_SEEK = 1 << 19
    NFS_CAP_ALLOCATE = 1 << 20
    NFS_CAP_DEALLOCATE = 1 << 21
    NFS_CAP_LAYOUTSTATS = 1 << 22
    NFS_CAP_CLONE = 1 << 23
    NFS_CAP_COPY = 1 << 24
    NFS_CAP_OFFLOAD_CANCEL = 1 << 25


_ALL_CAPS = reduce(or_, (m.value for m in NFSServerCaps.__members__.values()), 0)


@dataclass(frozen=True)
class NFSEventCounter:
    """Counters from the ``events:`` line of an NFS statistics block."""

    inode_revalidate: int
    deny_try_revalidate: int
    data_invalidate: int
    attr_invalidate: int
    vfs_open: int
    vfs_lookup: int
    vfs_access: int
    vfs_update_page: int
    vfs_read_page: int
    vfs_read_pages: int
    vfs_write_page: int
    vfs_write_pages: int
    vfs_get_dents: int
    vfs_set_attr: int
    vfs_flush: int
    vfs_fs_sync: int
    vfs_lock: int
    vfs_release: int
    congestion_wait: int
    set_attr_trunc: int
    extend_write: int
    silly_rename: int
    short_read: int
    short_write: int
    delay: int
    pnfs_read: int
    pnfs_write: int

    @classmethod
    def parse(cls, text: str) -> NFSEventCounter:
        """Parse the whitespace-separated counters of an ``events:`` line."""
        return _parse_counters(cls, text)


@dataclass(frozen=True)
class NFSByteCounter:
    """Counters from the ``bytes:`` line of an NFS statistics block."""

    normal_read: int
    normal_write: int
    direct_read: int
    direct_write: int
    server_read: int
    server_write: int
    pages_read: int
    pages_write: int

    @classmethod
    def parse(cls, text: str) -> NFSByteCounter:
        """Parse the whitespace-separated counters of a ``bytes:`` line."""
        return _parse_counters(cls, text)


@dataclass(frozen=True)
class NFSOperationStat:
    """Statistics for one RPC operation in the per-op section."""

    operations: int
    transmissions: int
    major_timeouts: int
    bytes_sent: int
    bytes_recv: int
    cum_queue_time: timedelta
    cum_resp_time: timedelta
    cum_total_req_time: timedelta

    @classmethod
    def parse(cls, text: str) -> NFSOperationStat:
        """Parse the eight numbers following an operation name; times are in ms."""
        tokens = text.split()
        names = (
            "operations",
            "transmissions",
            "major_timeouts",
            "bytes_sent",
            "bytes_recv",
            "cum_queue_time",
            "cum_resp_time",
            "cum_total_req_time",
        )
        if len(tokens) < len(names):
            raise IncompleteError(f"expected {len(names)} values, found {len(tokens)}")
        values = [_parse_unsigned(tok, name) for name, tok in zip(names, tokens)]
        ops, trans, timeouts, sent, recv, queue_ms, resp_ms, total_ms = values
        return cls(
            operations=ops,
            transmissions=trans,
            major_timeouts=timeouts,
            bytes_sent=sent,
            bytes_recv=recv,
            cum_queue_time=_duration(milliseconds=queue_ms),
            cum_resp_time=_duration(milliseconds=resp_ms),
            cum_total_req_time=_duration(milliseconds=total_ms),
        )


def _split_list(text: str) -> list[str]:
    return text.strip().split(",")


@dataclass
class MountNFSStatistics:
    """The statistics block that follows an NFS mount in ``mountstats``."""

    version: str
    opts: list[str]
    age: timedelta
    caps: list[str]
    sec: list[str]
    events: NFSEventCounter
    bytes: NFSByteCounter
    per_op_stats: dict[str, NFSOperationStat] = field(default_factory=dict)

    @classmethod
    def from_lines(cls, lines: Iterable[str], version: str) -> MountNFSStatistics:
        """Consume lines up to and including the next blank line and parse them."""
        parsing_per_op = False
        opts: list[str] | None = None
        age: timedelta | None = None
        caps: list[str] | None = None
        sec: list[str] | None = None
        byte_counts: NFSByteCounter | None = None
        events: NFSEventCounter | None = None
        per_op: dict[str, NFSOperationStat] = {}

        for raw in lines:
            line = raw.strip()
            if not line:
                break
            if parsing_per_op:
                name, sep, rest = line.partition(":")
                if not sep:
                    raise IncompleteError(f"missing statistics for operation {name!r}")
                per_op[name] = NFSOperationStat.parse(rest)
                continue
            if line.startswith("opts:"):
                opts = _split_list(line.removeprefix("opts:"))
            elif line.startswith("age:"):
                seconds = _parse_unsigned(line.removeprefix("age:").strip(), "age")
                age = _duration(seconds=seconds)
            elif line.startswith("caps:"):
                caps = _split_list(line.removeprefix("caps:"))
            elif line.startswith("sec:"):
                sec = _split_list(line.removeprefix("sec:"))
            elif line.startswith("bytes:"):
                byte_counts = NFSByteCounter.parse(line.removeprefix("bytes:").strip())
            elif line.startswith("events:"):
                events = NFSEventCounter.parse(line.removeprefix("events:").strip())
            if line == "per-op statistics":
                parsing_per_op = True

        if opts is None:
            raise IncompleteError("Failed to find opts field in nfs stats")
        if age is None:
            raise IncompleteError("Failed to find age field in nfs stats")
        if caps is None:
            raise IncompleteError("Failed to find caps field in nfs stats")
        if sec is None:
            raise IncompleteError("Failed to find sec field in nfs stats")
        if events is None:
            raise IncompleteError("Failed to find events section in nfs stats")
        if byte_counts is None:
            raise IncompleteError("Failed to find bytes section in nfs stats")

        return cls(
            version=version,
            opts=opts,
            age=age,
            caps=caps,
            sec=sec,
            events=events,
            bytes=byte_counts,
            per_op_stats=per_op,
        )

    def server_caps(self) -> NFSServerCaps | None:
        """Decode the ``caps=0x...`` entry; None if absent or holding unknown bits."""
        for data in self.caps:
            if data.startswith("caps=0x"):
                value = _parse_unsigned(
                    data.removeprefix("caps=0x"), "server caps", radix=16, maximum=_U32_MAX
                )
                if value & ~_ALL_CAPS:
                    return None
                return NFSServerCaps(value)
        return None