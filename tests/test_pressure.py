import pytest

from procfskit.errors import IncompleteError
from procfskit.pressure import (
    CpuPressure,
    IoPressure,
    MemoryPressure,
    parse_pressure_record,
)

EPSILON = 1.1920929e-07

SOME = "some avg10=2.10 avg60=0.12 avg300=0.00 total=391926"
FULL = "full avg10=2.10 avg60=0.12 avg300=0.00 total=391926"


def test_parse_pressure_record():
    record = parse_pressure_record(FULL)
    assert abs(record.avg10 - 2.10) < EPSILON
    assert abs(record.avg60 - 0.12) < EPSILON
    assert abs(record.avg300 - 0.00) < EPSILON
    assert record.total == 391_926


@pytest.mark.parametrize(
    "line",
    [
        "avg10=2.10 avg60=0.12 avg300=0.00 total=391926",
        "some avg10=2.10 avg300=0.00 total=391926",
        "some avg10=2.10 avg60=0.00 avg300=0.00",
        "some avg10=x avg60=0.00 avg300=0.00 total=1",
        "some avg10=1 avg60=0.00 avg300=0.00 total=-1",
    ],
)
def test_parse_pressure_record_errs(line):
    with pytest.raises(IncompleteError):
        parse_pressure_record(line)


def test_cpu_pressure():
    cpu = CpuPressure.from_text(SOME + "\n")
    assert cpu.some.total == 391_926


def test_memory_and_io_pressure():
    text = SOME + "\n" + FULL.replace("391926", "7") + "\n"
    for cls in (MemoryPressure, IoPressure):
        pressure = cls.from_text(text.encode())
        assert pressure.some.total == 391_926
        assert pressure.full.total == 7


def test_memory_pressure_missing_full_line():
    with pytest.raises(IncompleteError):
        MemoryPressure.from_text(SOME + "\n")


def test_cpu_pressure_empty():
    with pytest.raises(IncompleteError):
        CpuPressure.from_text("")