from datetime import timedelta

import pytest

from procfskit.errors import IncompleteError, InternalError
from procfskit.nfsstats import (
    MountNFSStatistics,
    NFSByteCounter,
    NFSEventCounter,
    NFSOperationStat,
    NFSServerCaps,
)

BLOCK = [
    "       opts:   rw,vers=4.1,rsize=131072,hard,proto=tcp ",
    "       age:    3542 ",
    "       impl_id:        name='',domain='',date='0,0' ",
    "       caps:   caps=0x3ffdf,wtmult=512,dtsize=32768,bsize=0,namlen=255 ",
    "       sec:    flavor=6,pseudoflavor=390003 ",
    "       events: 114 1579 5 3 132 20 3019 1 2 3 4 5 115 1 4 1 2 4 3 4 5 6 7 8 9 0 1  ",
    "       bytes:  1 2 3 4 5 6 7 8  ",
    "       per-op statistics ",
    "               NULL: 0 0 0 0 0 0 0 0 ",
    "               OPEN: 1 1 0 320 420 0 124 124 ",
]


def test_event_counter_fields_in_order():
    text = " ".join(str(n) for n in range(1, 28))
    counter = NFSEventCounter.parse(text)
    assert counter.inode_revalidate == 1
    assert counter.deny_try_revalidate == 2
    assert counter.pnfs_write == 27


def test_event_counter_too_short():
    with pytest.raises(IncompleteError):
        NFSEventCounter.parse("1 2 3")


def test_byte_counter_parse_and_errors():
    counter = NFSByteCounter.parse("1 2 3 4 5 6 7 8")
    assert counter.normal_read == 1
    assert counter.pages_write == 8
    with pytest.raises(InternalError):
        NFSByteCounter.parse("1 2 3 x 5 6 7 8")
    with pytest.raises(IncompleteError):
        NFSByteCounter.parse("1 2 3 4 5 6 7")


def test_operation_stat_times_are_milliseconds():
    stat = NFSOperationStat.parse(" 1 1 0 320 420 0 124 124")
    assert stat.operations == 1
    assert stat.bytes_sent == 320
    assert stat.bytes_recv == 420
    assert stat.cum_queue_time == timedelta(milliseconds=0)
    assert stat.cum_resp_time == timedelta(milliseconds=124)
    assert stat.cum_total_req_time == timedelta(milliseconds=124)


def test_from_lines_full_block():
    stats = MountNFSStatistics.from_lines(BLOCK, "1.1")
    assert stats.version == "1.1"
    assert stats.age == timedelta(seconds=3542)
    assert stats.opts == ["rw", "vers=4.1", "rsize=131072", "hard", "proto=tcp"]
    assert stats.sec == ["flavor=6", "pseudoflavor=390003"]
    assert stats.events.inode_revalidate == 114
    assert stats.bytes.normal_read == 1
    assert set(stats.per_op_stats) == {"NULL", "OPEN"}
    assert stats.per_op_stats["OPEN"].bytes_sent == 320


def test_server_caps_decoding():
    stats = MountNFSStatistics.from_lines(BLOCK, "1.1")
    caps = stats.server_caps()
    assert caps == NFSServerCaps(0x3FFDF)
    assert NFSServerCaps.NFS_CAP_READDIRPLUS in caps
    assert NFSServerCaps.NFS_CAP_SEEK not in caps


def test_server_caps_absent_or_unknown_bits():
    stats = MountNFSStatistics.from_lines(BLOCK, "1.1")
    stats.caps = ["wtmult=512"]
    assert stats.server_caps() is None
    stats.caps = ["caps=0x80000000"]
    assert stats.server_caps() is None


def test_from_lines_stops_at_blank_line():
    it = iter(BLOCK + ["   ", "device next mounted on /x with fstype ext4"])
    MountNFSStatistics.from_lines(it, "1.0")
    assert next(it) == "device next mounted on /x with fstype ext4"


@pytest.mark.parametrize("missing", ["opts:", "age:", "caps:", "sec:", "events:", "bytes:"])
def test_from_lines_missing_field(missing):
    lines = [line for line in BLOCK if not line.strip().startswith(missing)]
    with pytest.raises(IncompleteError):
        MountNFSStatistics.from_lines(lines, "1.1")


def test_from_lines_bad_age():
    lines = [line if "age:" not in line else "age: soon" for line in BLOCK]
    with pytest.raises(InternalError):
        MountNFSStatistics.from_lines(lines, "1.1")