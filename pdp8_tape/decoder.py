"""
Tape record decoder.

Reads a BIN/RIM tape image frame by frame and turns it into records
(see records.py). The decoder keeps the load address cursor the same way
the PDP-8 loader does: an address record replaces it and every data word
is deposited at the cursor, which then advances by one.

Leader frames (exactly 0x80) are tallied and reported as one Leader
record when the run ends, either at the next non-leader frame or at end
of tape.
"""

from __future__ import annotations
import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional, Union

from .records import (
    LEADER, TAG_MASK, TAG_FIELD, TAG_INVALID, TAG_ADDRESS,
    Leader, FieldSet, AddressSet, DataWrite, Invalid, Record,
    TruncatedRecordError, pack_word,
)

__all__ = ['DecoderState', 'TapeDecoder', 'decode']

log = logging.getLogger(__name__)

ByteSource = Union[BinaryIO, bytes, bytearray, memoryview]


@dataclass
class DecoderState:
    """Running state of one decode pass."""
    cursor: int = 0             # next load address
    pending: bool = False       # address set, no data word yet
    leader_run: int = 0         # consecutive leader frames
    offset: int = 0             # frames consumed
    records: int = 0
    writes: int = 0
    last_write: Optional[int] = None   # address of the latest data word


class TapeDecoder:
    """Decodes a tape image into a stream of records."""

    def __init__(self, source: ByteSource):
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self.source = source
        self.state = DecoderState()

    def _read(self) -> Optional[int]:
        frame = self.source.read(1)
        if not frame:
            return None
        self.state.offset += 1
        return frame[0]

    def _read_continuation(self, command: int) -> int:
        b2 = self._read()
        if b2 is None:
            raise TruncatedRecordError(self.state.offset - 1, command)
        return b2

    def _flush_leader(self) -> Optional[Leader]:
        if self.state.leader_run == 0:
            return None
        rec = Leader(self.state.leader_run)
        self.state.leader_run = 0
        return rec

    def _classify(self, b1: int) -> Record:
        st = self.state
        tag = b1 & TAG_MASK

        if tag == TAG_FIELD:
            return FieldSet((b1 >> 3) & 7)

        if tag == TAG_INVALID:
            return Invalid(b1)

        if tag == TAG_ADDRESS:
            b2 = self._read_continuation(b1)
            st.cursor = pack_word(b1, b2)
            st.pending = True
            return AddressSet(st.cursor)

        # TAG_DATA
        b2 = self._read_continuation(b1)
        rec = DataWrite(st.cursor, pack_word(b1, b2), st.pending)
        st.last_write = st.cursor
        st.pending = False
        st.cursor += 1
        st.writes += 1
        return rec

    def records(self) -> Iterator[Record]:
        """Yield records until the tape is exhausted.

        Raises TruncatedRecordError if the tape ends inside a two-frame
        record.
        """
        st = self.state
        while True:
            b1 = self._read()
            if b1 is None:
                break

            if b1 == LEADER:
                st.leader_run += 1
                continue

            leader = self._flush_leader()
            if leader is not None:
                st.records += 1
                yield leader

            st.records += 1
            yield self._classify(b1)

        leader = self._flush_leader()
        if leader is not None:
            st.records += 1
            yield leader

        log.debug("Decoded %d records (%d data words) from %d frames, cursor %04o",
                  st.records, st.writes, st.offset, st.cursor)

    __iter__ = records


def decode(source: ByteSource) -> Iterator[Record]:
    """Convenience wrapper: iterate the records of a tape image."""
    return TapeDecoder(source).records()
