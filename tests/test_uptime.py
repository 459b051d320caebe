from datetime import timedelta

import pytest

from procfskit.errors import IncompleteError, InternalError
from procfskit.uptime import Uptime


def test_uptime_from_bytes():
    uptime = Uptime.from_text(b"2578790.61 1999230.98\n")
    assert uptime.uptime_duration() == timedelta(seconds=2578790, microseconds=610_000)
    assert uptime.idle_duration() == timedelta(seconds=1999230, microseconds=980_000)


def test_uptime_from_str_keeps_raw_values():
    uptime = Uptime.from_text("2578790.61 1999230.98\n")
    assert uptime.uptime == pytest.approx(2578790.61)
    assert uptime.idle == pytest.approx(1999230.98)


def test_missing_idle_field():
    with pytest.raises(IncompleteError):
        Uptime.from_text("2578790.61\n")


def test_invalid_number():
    with pytest.raises(InternalError):
        Uptime.from_text("abc 1999230.98\n")


def test_whole_seconds_have_no_fraction():
    uptime = Uptime.from_text("42 7")
    assert uptime.uptime_duration() == timedelta(seconds=42)
    assert uptime.idle_duration() == timedelta(seconds=7)