import pytest

from procfskit.errors import IncompleteError, InternalError
from procfskit.schedstat import Schedstat


def test_parse_schedstat():
    stat = Schedstat.from_text("123456789 987654 42\n")
    assert stat.sum_exec_runtime == 123456789
    assert stat.run_delay == 987654
    assert stat.pcount == 42


def test_bytes_input():
    assert Schedstat.from_text(b"1 2 3\n") == Schedstat.from_text("1 2 3")


def test_largest_u64_accepted():
    big = str(2**64 - 1)
    assert Schedstat.from_text(f"{big} 0 0").sum_exec_runtime == 2**64 - 1


def test_value_beyond_u64_rejected():
    with pytest.raises(InternalError):
        Schedstat.from_text(f"{2**64} 0 0")


def test_missing_field():
    with pytest.raises(IncompleteError):
        Schedstat.from_text("1 2")


@pytest.mark.parametrize("text", ["x 2 3", "1 -2 3", "1 2 3.5"])
def test_invalid_value(text):
    with pytest.raises(InternalError):
        Schedstat.from_text(text)