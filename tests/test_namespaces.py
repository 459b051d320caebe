from pathlib import PurePosixPath

from procfskit.namespaces import Namespace, Namespaces


def _ns(ns_type, path, identifier, device_id):
    return Namespace(ns_type, PurePosixPath(path), identifier, device_id)


def test_equality_ignores_type_and_path():
    a = _ns("net", "/proc/1/ns/net", 4026531992, 4)
    b = _ns("net", "/proc/2/ns/net", 4026531992, 4)
    assert a == b
    assert hash(a) == hash(b)


def test_different_identifier_or_device():
    a = _ns("net", "/proc/1/ns/net", 4026531992, 4)
    assert not a == _ns("net", "/proc/1/ns/net", 4026531993, 4)
    assert not a == _ns("net", "/proc/1/ns/net", 4026531992, 5)


def test_compare_with_other_type():
    a = _ns("pid", "/proc/1/ns/pid", 4026531836, 4)
    assert (a == 4026531836) is False


def test_set_deduplicates():
    a = _ns("mnt", "/proc/1/ns/mnt", 4026531840, 4)
    b = _ns("mnt", "/proc/self/ns/mnt", 4026531840, 4)
    c = _ns("uts", "/proc/1/ns/uts", 4026531838, 4)
    assert len({a, b, c}) == 2


def test_namespaces_equality():
    first = Namespaces({"net": _ns("net", "/proc/1/ns/net", 4026531992, 4)})
    second = Namespaces({"net": _ns("net", "/proc/9/ns/net", 4026531992, 4)})
    third = Namespaces({"net": _ns("net", "/proc/9/ns/net", 4026531999, 4)})
    assert first == second
    assert first != third
    assert first.namespaces["net"].path == PurePosixPath("/proc/1/ns/net")