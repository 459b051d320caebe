"""Page table entries from ``/proc/<pid>/pagemap``."""

from __future__ import annotations

import enum
from dataclasses import dataclass

_U64_MAX = 2**64 - 1

# Number of bits used for the swap type (include/linux/swap.h).
MAX_SWAPFILES_SHIFT = 5


def genmask(high: int, low: int) -> int:
    """Return a 64-bit mask with bits ``low`` through ``high`` set."""
    if not 0 <= high <= 63 or not 0 <= low <= 63:
        raise ValueError(f"bit positions out of range: high={high}, low={low}")
    return ((1 << (high + 1)) - 1) & ~((1 << low) - 1)


class SwapPageFlags(enum.IntFlag):
    """Fields and flags of a page table entry for a swapped page."""

    SWAP_TYPE = genmask(MAX_SWAPFILES_SHIFT - 1, 0)
    SWAP_OFFSET = genmask(54, MAX_SWAPFILES_SHIFT)
    SOFT_DIRTY = 1 << 55
    MMAP_EXCLUSIVE = 1 << 56
    FILE = 1 << 61
    SWAP = 1 << 62
    PRESENT = 1 << 63

    def swap_type(self) -> int:
        """The swap type recorded in this entry."""
        return int(self & SwapPageFlags.SWAP_TYPE)

    def swap_offset(self) -> int:
        """The swap offset recorded in this entry."""
        return int(self & SwapPageFlags.SWAP_OFFSET) >> MAX_SWAPFILES_SHIFT


@dataclass(frozen=True, order=True)
class Pfn:
    """A page frame number, identifying a physical memory page."""

    value: int

    def __format__(self, spec: str) -> str:
        if not spec:
            return repr(self)
        return format(self.value, spec)

    def __index__(self) -> int:
        return self.value


class MemoryPageFlags(enum.IntFlag):
    """Fields and flags of a page table entry for a memory page."""

    PFN = genmask(54, 0)
    SOFT_DIRTY = 1 << 55
    MMAP_EXCLUSIVE = 1 << 56
    FILE = 1 << 61
    SWAP = 1 << 62
    PRESENT = 1 << 63

    def page_frame_number(self) -> Pfn:
        """The page frame number recorded in this entry."""
        return Pfn(int(self & MemoryPageFlags.PFN))


def parse_page_info(info: int) -> MemoryPageFlags | SwapPageFlags:
    """Decode a raw 64-bit pagemap entry into memory-page or swap-page flags."""
    if not 0 <= info <= _U64_MAX:
        raise ValueError(f"pagemap entry out of range: {info}")
    flags = MemoryPageFlags(info)
    if MemoryPageFlags.SWAP in flags:
        return SwapPageFlags(info)
    return flags