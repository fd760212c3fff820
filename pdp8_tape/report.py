"""
Text output: decode trace, overlap list and usage maps.

All addresses and words are printed in octal, the PDP-8 convention.

Usage map characters:
  .   not loaded
  X   loaded once
  O   loaded more than once (overlap)
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Sequence

from .records import Leader, FieldSet, DataWrite, Invalid, Record
from .usage import OverlapRegion

__all__ = [
    'MAP_NONE', 'MAP_COMPRESSED', 'MAP_FULL', 'MAP_MODES',
    'trace_line', 'overlap_lines', 'compressed_map', 'full_map', 'render_map',
]

MAP_NONE = 'none'
MAP_COMPRESSED = 'compressed'
MAP_FULL = 'full'
MAP_MODES = (MAP_NONE, MAP_COMPRESSED, MAP_FULL)

MAP_WIDTH = 128         # characters per map line


def trace_line(rec: Record) -> Optional[str]:
    """Verbose trace text for one record, or None if it prints nothing."""
    if isinstance(rec, Leader):
        return f"Leader * {rec.count}"
    if isinstance(rec, FieldSet):
        return f"Field {rec.field}"
    if isinstance(rec, Invalid):
        return "Invalid record type"
    if isinstance(rec, DataWrite):
        mark = '*' if rec.after_address_set else ' '
        return f"{mark} {rec.address:04o} : {rec.value:04o}"
    # AddressSet only shows up as the '*' on the next data word
    return None


def overlap_lines(regions: Iterable[OverlapRegion]) -> List[str]:
    return [f"Overlap in area {r.start:04o} to {r.end:04o}" for r in regions]


def _cell(count: int) -> str:
    if count <= 0:
        return '.'
    if count == 1:
        return 'X'
    return 'O'


def compressed_map(counts: Sequence[int]) -> List[str]:
    """One character per pair of addresses, 256 addresses per line."""
    lines = []
    line = ''
    for addr in range(0, len(counts), 2):
        pair = counts[addr:addr + 2]
        if len(line) == 0:
            line = f"{addr:04o} "
        if any(c >= 2 for c in pair):
            line += 'O'
        elif any(c == 1 for c in pair):
            line += 'X'
        else:
            line += '.'
        if (addr // 2 + 1) % MAP_WIDTH == 0:
            lines.append(line)
            line = ''
    if line:
        lines.append(line)
    return lines


def full_map(counts: Sequence[int]) -> List[str]:
    """One character per address, 128 addresses per line.

    Lines are labelled with the address divided by 64 (the page number).
    """
    lines = []
    for addr in range(0, len(counts), MAP_WIDTH):
        row = ''.join(_cell(c) for c in counts[addr:addr + MAP_WIDTH])
        lines.append(f"{addr // 64:02o} {row}")
    return lines


def render_map(counts: Sequence[int], mode: str) -> List[str]:
    if mode == MAP_COMPRESSED:
        return compressed_map(counts)
    if mode == MAP_FULL:
        return full_map(counts)
    if mode == MAP_NONE:
        return []
    raise ValueError(f"Unknown map mode: {mode}")
