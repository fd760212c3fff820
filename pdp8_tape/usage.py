"""
Per-address usage counts and overlap detection.

Every data word loaded from a tape bumps the counter of the address it
lands on. Any address loaded more than once belongs to an overlap; runs of
such addresses are reported as inclusive [start, end] regions.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from .records import MEMORY_SIZE, AddressRangeError

__all__ = ['OverlapRegion', 'UsageTable', 'find_overlaps']

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverlapRegion:
    """Addresses start..end (inclusive) each loaded more than once."""
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1


class UsageTable:
    """Load counts for the 4096 words of one memory field."""

    def __init__(self, size: int = MEMORY_SIZE):
        self.counts: List[int] = [0] * size

    def __len__(self) -> int:
        return len(self.counts)

    def __getitem__(self, addr: int) -> int:
        return self.counts[addr]

    def __iter__(self) -> Iterator[int]:
        return iter(self.counts)

    def _check(self, addr: int):
        if not 0 <= addr < len(self.counts):
            raise AddressRangeError(addr)

    def record(self, addr: int):
        """Count one data word loaded at ``addr``."""
        self._check(addr)
        self.counts[addr] += 1

    def apply_checksum_correction(self, last_write: Optional[int]) -> bool:
        """Drop the BIN checksum word from the counts.

        The checksum is the last data word on a BIN tape, loaded at
        ``last_write``. Returns False when no data word was loaded.
        """
        if last_write is None:
            return False
        addr = last_write
        self._check(addr)
        self.counts[addr] -= 1
        log.debug("Removed BIN checksum word at %04o", addr)
        return True

    def total(self) -> int:
        return sum(self.counts)

    def used(self) -> int:
        """Number of addresses loaded at least once."""
        return sum(1 for c in self.counts if c > 0)

    def overlaps(self) -> List[OverlapRegion]:
        return find_overlaps(self.counts)


def find_overlaps(counts: Sequence[int]) -> List[OverlapRegion]:
    """Return the maximal runs of addresses with a count above one."""
    regions: List[OverlapRegion] = []
    in_region = False
    region_start = 0

    for addr, count in enumerate(counts):
        if count > 1:
            if not in_region:
                in_region = True
                region_start = addr
        elif in_region:
            regions.append(OverlapRegion(region_start, addr - 1))
            in_region = False

    # Run reaching the top of memory
    if in_region:
        regions.append(OverlapRegion(region_start, len(counts) - 1))

    log.debug("Found %d overlap region(s)", len(regions))
    return regions
