"""
PDP-8 Paper Tape Overlap Checker
================================
Decodes PDP-8 BIN and RIM loader tapes and finds memory areas that more
than one data word was loaded into. Assemblers such as palbart do not warn
when code or data areas run into each other; the resulting tape silently
overwrites part of the program when loaded.

Pipeline:
    ┌──────────┐    ┌──────────┐    ┌────────────┐    ┌──────────┐
    │  Tape    │───>│ Decoder  │───>│ UsageTable │───>│  Report  │
    │ (frames) │    │ (records)│    │  (counts)  │    │  (text)  │
    └──────────┘    └──────────┘    └────────────┘    └──────────┘

    - records.py:  wire constants, record types, errors
    - decoder.py:  frame-by-frame record decoder
    - usage.py:    per-address load counts and overlap scan
    - report.py:   trace lines, overlap lines, usage maps
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional

__version__ = "1.00"

from .records import (
    Leader, FieldSet, AddressSet, DataWrite, Invalid, Record,
    TapeError, TruncatedRecordError, AddressRangeError, TapeInputError,
    pack_word, split_word,
)
from .decoder import TapeDecoder, DecoderState, decode
from .usage import UsageTable, OverlapRegion, find_overlaps
from .report import (
    MAP_NONE, MAP_COMPRESSED, MAP_FULL, MAP_MODES,
    trace_line, overlap_lines, render_map,
)


@dataclass
class Analysis:
    """Result of checking one tape."""
    usage: UsageTable
    regions: List[OverlapRegion] = field(default_factory=list)
    records: int = 0
    writes: int = 0
    checksum_removed: bool = False

    @property
    def overlaps(self) -> int:
        return len(self.regions)


def analyze(source, *, checksummed: bool = False,
            on_record: Optional[Callable[[Record], None]] = None) -> Analysis:
    """Decode a tape image and scan it for overlapping loads.

    Args:
        source: Binary file object or bytes holding the tape image.
        checksummed: True for BIN tapes; the trailing checksum word is
            removed from the counts.
        on_record: Called with every decoded record, in tape order.

    Returns:
        Analysis with the usage table and overlap regions.

    Raises:
        TruncatedRecordError: the tape ends inside a two-frame record.
        AddressRangeError: a data word is loaded past address 7777.
    """
    decoder = TapeDecoder(source)
    usage = UsageTable()

    for rec in decoder.records():
        if on_record is not None:
            on_record(rec)
        if isinstance(rec, DataWrite):
            usage.record(rec.address)

    st = decoder.state
    removed = False
    if checksummed:
        removed = usage.apply_checksum_correction(st.last_write)

    return Analysis(
        usage=usage,
        regions=usage.overlaps(),
        records=st.records,
        writes=st.writes,
        checksum_removed=removed,
    )
