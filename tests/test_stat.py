from datetime import datetime, timedelta, timezone

import pytest

from procfskit.errors import IncompleteError, InternalError
from procfskit.flags import ProcState, StatFlags
from procfskit.stat import Stat

REQUIRED = [
    "1", "1234", "1234", "34817", "1234", "4194368",
    "100", "7", "3", "2", "5", "3", "-1", "4", "20", "0", "1", "0",
    "500", "1000000", "250", "18446744073709551615",
    "11", "12", "13", "14", "15", "16", "17", "18", "19", "20", "0", "0",
]
OPTIONAL = ["17", "2", "0", "0", "9", "8", "-6", "21", "22", "23", "24", "25", "26", "27", "0"]


def make_line(comm="my proc", state="S", fields=REQUIRED + OPTIONAL):
    return f"1234 ({comm}) {state} " + " ".join(fields) + "\n"


def test_parses_full_line():
    stat = Stat.from_text(make_line())
    assert stat.pid == 1234
    assert stat.comm == "my proc"
    assert stat.state == "S"
    assert stat.ppid == 1
    assert stat.tty_nr == 34817
    assert stat.cutime == -1
    assert stat.rsslim == 18446744073709551615
    assert stat.cnswap == 0
    assert stat.exit_signal == 17
    assert stat.cguest_time == -6
    assert stat.env_end == 27
    assert stat.exit_code == 0


def test_comm_may_contain_parens_and_spaces():
    stat = Stat.from_text(make_line(comm="a) (b"))
    assert stat.comm == "a) (b"
    assert stat.ppid == 1


def test_optional_fields_missing_on_old_kernels():
    stat = Stat.from_text(make_line(fields=REQUIRED + ["17", "2"]))
    assert stat.exit_signal == 17
    assert stat.processor == 2
    assert stat.rt_priority is None
    assert stat.exit_code is None


def test_bytes_with_invalid_utf8_are_replaced():
    raw = b"42 (bad\xffname) R " + " ".join(REQUIRED).encode()
    stat = Stat.from_text(raw)
    assert stat.pid == 42
    assert stat.comm == "bad\ufffdname"
    assert stat.process_state() is ProcState.RUNNING


def test_process_state():
    assert Stat.from_text(make_line(state="Z")).process_state() is ProcState.ZOMBIE


def test_unknown_state_raises():
    with pytest.raises(InternalError):
        Stat.from_text(make_line(state="Q")).process_state()


def test_tty_device():
    assert Stat.from_text(make_line()).tty_device() == (136, 1)


def test_stat_flags():
    flags = Stat.from_text(make_line()).stat_flags()
    assert flags == StatFlags.PF_FORKNOEXEC | StatFlags.PF_RANDOMIZE
    assert StatFlags.PF_KTHREAD not in flags


def test_stat_flags_rejects_unknown_bit():
    fields = list(REQUIRED)
    fields[5] = "1"
    with pytest.raises(InternalError):
        Stat.from_text(make_line(fields=fields)).stat_flags()


def test_start_time():
    boot = datetime(2024, 1, 1, tzinfo=timezone.utc)
    stat = Stat.from_text(make_line())
    assert stat.start_time(boot, 100) == boot + timedelta(seconds=5)


def test_rss_bytes():
    stat = Stat.from_text(make_line())
    assert stat.rss_bytes(1) == stat.rss
    assert stat.rss_bytes(4096) // 4096 == stat.rss
    assert stat.rss_bytes(4096) % 4096 == 0


def test_missing_paren_raises():
    with pytest.raises(IncompleteError):
        Stat.from_text("1234 noparen S 1 2 3")


def test_truncated_line_raises():
    with pytest.raises(IncompleteError):
        Stat.from_text(make_line(fields=REQUIRED[:10]))


def test_missing_state_raises():
    with pytest.raises(IncompleteError):
        Stat.from_text("1234 (x)")


def test_bad_number_raises():
    fields = list(REQUIRED)
    fields[6] = "-5"
    with pytest.raises(InternalError):
        Stat.from_text(make_line(fields=fields))


def test_bad_pid_raises():
    with pytest.raises(InternalError):
        Stat.from_text("abc (x) S " + " ".join(REQUIRED))