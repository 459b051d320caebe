"""Namespaces of a process, from ``/proc/<pid>/ns``."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath


@dataclass(eq=False)
class Namespace:
    """One namespace; two namespaces are the same when their inode and device match."""

    ns_type: str
    path: PurePosixPath
    identifier: int
    device_id: int

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Namespace):
            return NotImplemented
        return self.identifier == other.identifier and self.device_id == other.device_id

    def __hash__(self) -> int:
        return hash((self.identifier, self.device_id))


@dataclass
class Namespaces:
    """All namespaces of a process, keyed by namespace type."""

    namespaces: dict[str, Namespace] = field(default_factory=dict)