"""Process status from ``/proc/<pid>/stat``."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import reduce
from operator import or_

from procfskit.errors import IncompleteError, InternalError
from procfskit.flags import ProcState, StatFlags

_I32 = (-(2**31), 2**31 - 1)
_U32 = (0, 2**32 - 1)
_I64 = (-(2**63), 2**63 - 1)
_U64 = (0, 2**64 - 1)
_INT_RE = re.compile(r"[+-]?[0-9]+")

_KNOWN_FLAGS = reduce(or_, (m.value for m in StatFlags.__members__.values()), 0)

_REQUIRED = (
    ("ppid", _I32),
    ("pgrp", _I32),
    ("session", _I32),
    ("tty_nr", _I32),
    ("tpgid", _I32),
    ("flags", _U32),
    ("minflt", _U64),
    ("cminflt", _U64),
    ("majflt", _U64),
    ("cmajflt", _U64),
    ("utime", _U64),
    ("stime", _U64),
    ("cutime", _I64),
    ("cstime", _I64),
    ("priority", _I64),
    ("nice", _I64),
    ("num_threads", _I64),
    ("itrealvalue", _I64),
    ("starttime", _U64),
    ("vsize", _U64),
    ("rss", _U64),
    ("rsslim", _U64),
    ("startcode", _U64),
    ("endcode", _U64),
    ("startstack", _U64),
    ("kstkesp", _U64),
    ("kstkeip", _U64),
    ("signal", _U64),
    ("blocked", _U64),
    ("sigignore", _U64),
    ("sigcatch", _U64),
    ("wchan", _U64),
    ("nswap", _U64),
    ("cnswap", _U64),
)

# Fields added in successive kernel versions; older kernels omit them.
_OPTIONAL = (
    ("exit_signal", _I32),
    ("processor", _I32),
    ("rt_priority", _U32),
    ("policy", _U32),
    ("delayacct_blkio_ticks", _U64),
    ("guest_time", _U64),
    ("cguest_time", _I64),
    ("start_data", _U64),
    ("end_data", _U64),
    ("start_brk", _U64),
    ("arg_start", _U64),
    ("arg_end", _U64),
    ("env_start", _U64),
    ("env_end", _U64),
    ("exit_code", _I32),
)


def _parse_int(token: str, what: str, bounds: tuple[int, int]) -> int:
    low, high = bounds
    if not _INT_RE.fullmatch(token) or (low >= 0 and token.startswith("-")):
        raise InternalError(f"invalid {what}: {token!r}")
    value = int(token)
    if not low <= value <= high:
        raise InternalError(f"{what} out of range: {token!r}")
    return value


def _required(tokens: Iterator[str], what: str, bounds: tuple[int, int]) -> int:
    try:
        token = next(tokens)
    except StopIteration:
        raise IncompleteError(f"missing {what}") from None
    return _parse_int(token, what, bounds)


def _optional(tokens: Iterator[str], what: str, bounds: tuple[int, int]) -> int | None:
    token = next(tokens, None)
    if token is None:
        return None
    return _parse_int(token, what, bounds)


@dataclass(frozen=True)
class Stat:
    """Status information about a process.

    Fields that older kernels do not provide are None.
    """

    pid: int
    comm: str
    state: str
    ppid: int
    pgrp: int
    session: int
    tty_nr: int
    tpgid: int
    flags: int
    minflt: int
    cminflt: int
    majflt: int
    cmajflt: int
    utime: int
    stime: int
    cutime: int
    cstime: int
    priority: int
    nice: int
    num_threads: int
    itrealvalue: int
    starttime: int
    vsize: int
    rss: int
    rsslim: int
    startcode: int
    endcode: int
    startstack: int
    kstkesp: int
    kstkeip: int
    signal: int
    blocked: int
    sigignore: int
    sigcatch: int
    wchan: int
    nswap: int
    cnswap: int
    exit_signal: int | None = None
    processor: int | None = None
    rt_priority: int | None = None
    policy: int | None = None
    delayacct_blkio_ticks: int | None = None
    guest_time: int | None = None
    cguest_time: int | None = None
    start_data: int | None = None
    end_data: int | None = None
    start_brk: int | None = None
    arg_start: int | None = None
    arg_end: int | None = None
    env_start: int | None = None
    env_end: int | None = None
    exit_code: int | None = None

    @classmethod
    def from_text(cls, text: str | bytes) -> Stat:
        """Parse the contents of ``/proc/<pid>/stat``."""
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8", errors="replace")
        buf = text.strip()

        start_paren = buf.find("(")
        end_paren = buf.rfind(")")
        if start_paren < 1 or end_paren < start_paren:
            raise IncompleteError("missing command name in stat data")
        pid = _parse_int(buf[: start_paren - 1], "pid", _I32)
        comm = buf[start_paren + 1 : end_paren]

        tokens = iter(buf[end_paren + 2 :].split(" "))
        state_token = next(tokens, "")
        if not state_token:
            raise IncompleteError("missing process state")

        values: dict[str, int | None] = {
            name: _required(tokens, name, bounds) for name, bounds in _REQUIRED
        }
        values.update(
            (name, _optional(tokens, name, bounds)) for name, bounds in _OPTIONAL
        )
        return cls(pid=pid, comm=comm, state=state_token[0], **values)

    def process_state(self) -> ProcState:
        """The process state as an enum."""
        state = ProcState.from_char(self.state)
        if state is None:
            raise InternalError(f"{self.state!r} is not a recognized process state")
        return state

    def tty_device(self) -> tuple[int, int]:
        """The controlling terminal decoded into ``(major, minor)``."""
        # minor is bits 31-20 and 7-0, major is bits 15-8
        major = (self.tty_nr & 0xFFF00) >> 8
        minor = (self.tty_nr & 0x000FF) | ((self.tty_nr >> 12) & 0xFFF00)
        return major, minor

    def stat_flags(self) -> StatFlags:
        """The kernel flags word as a flag set."""
        if self.flags & ~_KNOWN_FLAGS:
            raise InternalError(f"Can't construct flags bitfield from {self.flags!r}")
        return StatFlags(self.flags)

    def start_time(self, boot_time: datetime, ticks_per_second: int) -> datetime:
        """The absolute start time, given the boot time and the clock tick rate."""
        seconds_since_boot = self.starttime / ticks_per_second
        return boot_time + timedelta(milliseconds=int(seconds_since_boot * 1000.0))

    def rss_bytes(self, page_size: int) -> int:
        """The resident set size in bytes."""
        return self.rss * page_size