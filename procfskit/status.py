"""Process status from ``/proc/<pid>/status``."""

from __future__ import annotations

from dataclasses import dataclass

from procfskit.errors import IncompleteError, InternalError

_I32 = (-(2**31), 2**31 - 1)
_U32 = (0, 2**32 - 1)
_U64 = (0, 2**64 - 1)

_DIGITS = {
    8: frozenset("01234567"),
    10: frozenset("0123456789"),
    16: frozenset("0123456789abcdefABCDEF"),
}


def _parse_int(token: str, what: str, bounds: tuple[int, int], radix: int = 10) -> int:
    low, high = bounds
    sign = token[:1] if token[:1] in ("+", "-") else ""
    body = token[len(sign):]
    digits = _DIGITS[radix]
    if not body or any(c not in digits for c in body) or (sign == "-" and low >= 0):
        raise InternalError(f"invalid {what}: {token!r}")
    value = int(body, radix)
    if sign == "-":
        value = -value
    if not low <= value <= high:
        raise InternalError(f"{what} out of range: {token!r}")
    return value


def parse_uid_gid(text: str, index: int) -> int:
    """Return the ``index``-th whitespace-separated ID of a ``Uid``/``Gid`` value."""
    tokens = text.split()
    if not 0 <= index < len(tokens):
        raise IncompleteError(f"missing id at position {index} in {text!r}")
    return _parse_int(tokens[index], "id", _U32)


def _collect(text: str | bytes) -> dict[str, str]:
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise IncompleteError("status data is not valid UTF-8") from exc
    values: dict[str, str] = {}
    for line in text.split("\n"):
        line = line.removesuffix("\r")
        if not line:
            continue
        parts = line.split(":")
        if len(parts) < 2:
            raise IncompleteError(f"missing value in line {line!r}")
        values[parts[0]] = parts[1].strip()
    return values


def _take(values: dict[str, str], key: str) -> str:
    try:
        return values.pop(key)
    except KeyError:
        raise IncompleteError(f"missing field {key}") from None


def _required(
    values: dict[str, str], key: str, bounds: tuple[int, int], radix: int = 10
) -> int:
    return _parse_int(_take(values, key), key, bounds, radix)


def _optional(
    values: dict[str, str], key: str, bounds: tuple[int, int], radix: int = 10
) -> int | None:
    raw = values.pop(key, None)
    return None if raw is None else _parse_int(raw, key, bounds, radix)


def _with_kb(values: dict[str, str], key: str) -> int | None:
    raw = values.pop(key, None)
    return None if raw is None else _parse_int(raw.replace(" kB", ""), key, _U64)


def _list(text: str, what: str) -> list[int]:
    return [_parse_int(token, what, _I32) for token in text.split()]


def _optional_list(values: dict[str, str], key: str) -> list[int] | None:
    raw = values.pop(key, None)
    return None if raw is None else _list(raw, key)


def _sigq(text: str) -> tuple[int, int]:
    parts = text.split("/")
    if len(parts) < 2:
        raise IncompleteError(f"SigQ needs two values: {text!r}")
    return _parse_int(parts[0], "SigQ", _U64), _parse_int(parts[1], "SigQ", _U64)


def _allowed(values: dict[str, str], key: str) -> list[int] | None:
    raw = values.pop(key, None)
    if raw is None:
        return None
    return [_parse_int(part, key, _U32, 16) for part in raw.split(",")]


def _parse_allowed_list(text: str) -> list[tuple[int, int]]:
    ranges: list[tuple[int, int]] = []
    for part in text.split(","):
        if "-" in part:
            pieces = part.split("-")
            begin = _parse_int(pieces[0], "range start", _U32)
            end = _parse_int(pieces[1], "range end", _U32)
            ranges.append((begin, end))
        else:
            single = _parse_int(part, "range", _U32)
            ranges.append((single, single))
    return ranges


def _allowed_list(values: dict[str, str], key: str) -> list[tuple[int, int]] | None:
    raw = values.pop(key, None)
    if raw is None:
        return None
    try:
        return _parse_allowed_list(raw)
    except InternalError:
        return None


def _flag(values: dict[str, str], key: str) -> bool | None:
    raw = values.pop(key, None)
    return None if raw is None else raw == "1"


@dataclass(frozen=True)
class Status:
    """Status information about a process.

    Fields that are not present on every kernel are None when absent. Memory
    sizes are in kibibytes.
    """

    name: str
    umask: int | None
    state: str
    tgid: int
    ngid: int | None
    pid: int
    ppid: int
    tracerpid: int
    ruid: int
    euid: int
    suid: int
    fuid: int
    rgid: int
    egid: int
    sgid: int
    fgid: int
    fdsize: int
    groups: list[int]
    nstgid: list[int] | None
    nspid: list[int] | None
    nspgid: list[int] | None
    nssid: list[int] | None
    vmpeak: int | None
    vmsize: int | None
    vmlck: int | None
    vmpin: int | None
    vmhwm: int | None
    vmrss: int | None
    rssanon: int | None
    rssfile: int | None
    rssshmem: int | None
    vmdata: int | None
    vmstk: int | None
    vmexe: int | None
    vmlib: int | None
    vmpte: int | None
    vmswap: int | None
    hugetlbpages: int | None
    threads: int
    sigq: tuple[int, int]
    sigpnd: int
    shdpnd: int
    sigblk: int
    sigign: int
    sigcgt: int
    capinh: int
    capprm: int
    capeff: int
    capbnd: int | None
    capamb: int | None
    nonewprivs: int | None
    seccomp: int | None
    speculation_store_bypass: str | None
    cpus_allowed: list[int] | None
    cpus_allowed_list: list[tuple[int, int]] | None
    mems_allowed: list[int] | None
    mems_allowed_list: list[tuple[int, int]] | None
    voluntary_ctxt_switches: int | None
    nonvoluntary_ctxt_switches: int | None
    core_dumping: bool | None
    thp_enabled: bool | None

    @classmethod
    def from_text(cls, text: str | bytes) -> Status:
        """Parse the contents of ``/proc/<pid>/status``."""
        v = _collect(text)
        name = _take(v, "Name")
        umask = _optional(v, "Umask", _U32, 8)
        state = _take(v, "State")
        tgid = _required(v, "Tgid", _I32)
        ngid = _optional(v, "Ngid", _I32)
        pid = _required(v, "Pid", _I32)
        ppid = _required(v, "PPid", _I32)
        tracerpid = _required(v, "TracerPid", _I32)
        uids = _take(v, "Uid")
        ruid, euid, suid, fuid = (parse_uid_gid(uids, i) for i in range(4))
        gids = _take(v, "Gid")
        rgid, egid, sgid, fgid = (parse_uid_gid(gids, i) for i in range(4))
        return cls(
            name=name,
            umask=umask,
            state=state,
            tgid=tgid,
            ngid=ngid,
            pid=pid,
            ppid=ppid,
            tracerpid=tracerpid,
            ruid=ruid,
            euid=euid,
            suid=suid,
            fuid=fuid,
            rgid=rgid,
            egid=egid,
            sgid=sgid,
            fgid=fgid,
            fdsize=_required(v, "FDSize", _U32),
            groups=_list(_take(v, "Groups"), "Groups"),
            nstgid=_optional_list(v, "NStgid"),
            nspid=_optional_list(v, "NSpid"),
            nspgid=_optional_list(v, "NSpgid"),
            nssid=_optional_list(v, "NSsid"),
            vmpeak=_with_kb(v, "VmPeak"),
            vmsize=_with_kb(v, "VmSize"),
            vmlck=_with_kb(v, "VmLck"),
            vmpin=_with_kb(v, "VmPin"),
            vmhwm=_with_kb(v, "VmHWM"),
            vmrss=_with_kb(v, "VmRSS"),
            rssanon=_with_kb(v, "RssAnon"),
            rssfile=_with_kb(v, "RssFile"),
            rssshmem=_with_kb(v, "RssShmem"),
            vmdata=_with_kb(v, "VmData"),
            vmstk=_with_kb(v, "VmStk"),
            vmexe=_with_kb(v, "VmExe"),
            vmlib=_with_kb(v, "VmLib"),
            vmpte=_with_kb(v, "VmPTE"),
            vmswap=_with_kb(v, "VmSwap"),
            hugetlbpages=_with_kb(v, "HugetlbPages"),
            threads=_required(v, "Threads", _U64),
            sigq=_sigq(_take(v, "SigQ")),
            sigpnd=_required(v, "SigPnd", _U64, 16),
            shdpnd=_required(v, "ShdPnd", _U64, 16),
            sigblk=_required(v, "SigBlk", _U64, 16),
            sigign=_required(v, "SigIgn", _U64, 16),
            sigcgt=_required(v, "SigCgt", _U64, 16),
            capinh=_required(v, "CapInh", _U64, 16),
            capprm=_required(v, "CapPrm", _U64, 16),
            capeff=_required(v, "CapEff", _U64, 16),
            capbnd=_optional(v, "CapBnd", _U64, 16),
            capamb=_optional(v, "CapAmb", _U64, 16),
            nonewprivs=_optional(v, "NoNewPrivs", _U64),
            seccomp=_optional(v, "Seccomp", _U32),
            speculation_store_bypass=v.pop("Speculation_Store_Bypass", None),
            cpus_allowed=_allowed(v, "Cpus_allowed"),
            cpus_allowed_list=_allowed_list(v, "Cpus_allowed_list"),
            mems_allowed=_allowed(v, "Mems_allowed"),
            mems_allowed_list=_allowed_list(v, "Mems_allowed_list"),
            voluntary_ctxt_switches=_optional(v, "voluntary_ctxt_switches", _U64),
            nonvoluntary_ctxt_switches=_optional(v, "nonvoluntary_ctxt_switches", _U64),
            core_dumping=_flag(v, "CoreDumping"),
            thp_enabled=_flag(v, "THP_enabled"),
        )