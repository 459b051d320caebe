from pathlib import PurePosixPath

import pytest

from procfskit.errors import IncompleteError, InternalError
from procfskit.fdtarget import FDKind, FDTarget


@pytest.mark.parametrize(
    "text, kind, inode",
    [
        ("socket:[12345]", FDKind.SOCKET, 12345),
        ("net:[4026531992]", FDKind.NET, 4026531992),
        ("pipe:[67890]", FDKind.PIPE, 67890),
    ],
)
def test_inode_targets(text, kind, inode):
    assert FDTarget.parse(text) == FDTarget(kind, inode=inode)


def test_anon_inode():
    assert FDTarget.parse("anon_inode:[eventfd]") == FDTarget(
        FDKind.ANON_INODE, name="[eventfd]"
    )


def test_memfd():
    assert FDTarget.parse("/memfd:shm (deleted)") == FDTarget(
        FDKind.MEMFD, name="shm (deleted)"
    )


def test_absolute_path():
    target = FDTarget.parse("/dev/null")
    assert target.kind is FDKind.PATH
    assert target.path == PurePosixPath("/dev/null")


def test_path_with_colon():
    target = FDTarget.parse("/tmp/a:b")
    assert target == FDTarget(FDKind.PATH, path=PurePosixPath("/tmp/a:b"))


def test_relative_without_colon_is_path():
    assert FDTarget.parse("relative") == FDTarget(FDKind.PATH, path=PurePosixPath("relative"))


def test_other_type():
    assert FDTarget.parse("mnt:[4026531840]") == FDTarget(
        FDKind.OTHER, inode=4026531840, name="mnt"
    )


def test_empty_type():
    with pytest.raises(IncompleteError):
        FDTarget.parse(":[1]")


def test_inode_too_short():
    with pytest.raises(IncompleteError):
        FDTarget.parse("socket:[]")


def test_inode_not_numeric():
    with pytest.raises(InternalError):
        FDTarget.parse("pipe:[abc]")


def test_other_inode_not_numeric():
    with pytest.raises(InternalError):
        FDTarget.parse("mnt:[xyz]")