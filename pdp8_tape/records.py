"""
PDP-8 paper-tape record definitions.

The loader tapes (BIN and RIM) are streams of 8-bit frames. The two high
bits of every frame select the record class:

  10000000  Leader / trailer filler          1 frame
  11xxxxxx  Field set, field in bits 3-5     1 frame
  01xxxxxx  Address set, high 6 bits         2 frames
  00xxxxxx  Data word, high 6 bits           2 frames
  10xxxxxx  anything else: invalid           1 frame

Two-frame records carry a 12-bit word as (frame1_low6 << 6) | frame2_low6.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, Union

__all__ = [
    'LEADER', 'TAG_MASK', 'TAG_FIELD', 'TAG_INVALID', 'TAG_ADDRESS', 'TAG_DATA',
    'WORD_MASK', 'MEMORY_SIZE',
    'Leader', 'FieldSet', 'AddressSet', 'DataWrite', 'Invalid', 'Record',
    'pack_word', 'split_word',
    'TapeError', 'TruncatedRecordError', 'AddressRangeError', 'TapeInputError',
]


# ──────────────────────────────────────────────
# Wire constants
# ──────────────────────────────────────────────

LEADER = 0x80          # exact leader/trailer frame
TAG_MASK = 0xC0
TAG_FIELD = 0xC0
TAG_INVALID = 0x80
TAG_ADDRESS = 0x40
TAG_DATA = 0x00

HALF_MASK = 0x3F       # 6 payload bits per frame
WORD_MASK = 0o7777     # 12-bit word
MEMORY_SIZE = 4096     # one PDP-8 field


# ──────────────────────────────────────────────
# Records
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Leader:
    """A run of leader/trailer frames."""
    count: int


@dataclass(frozen=True)
class FieldSet:
    field: int


@dataclass(frozen=True)
class AddressSet:
    address: int


@dataclass(frozen=True)
class DataWrite:
    """One data word deposited at ``address``.

    ``after_address_set`` is True when this is the first data word since
    the last address record (shown with a ``*`` in the trace).
    """
    address: int
    value: int
    after_address_set: bool = False


@dataclass(frozen=True)
class Invalid:
    byte: int


Record = Union[Leader, FieldSet, AddressSet, DataWrite, Invalid]


def pack_word(high: int, low: int) -> int:
    """Join the low 6 bits of two frames into a 12-bit word."""
    return ((high & HALF_MASK) << 6) | (low & HALF_MASK)


def split_word(word: int, tag: int = TAG_DATA) -> Tuple[int, int]:
    """Split a 12-bit word into two frames, tagging the first one."""
    word &= WORD_MASK
    return (tag | ((word >> 6) & HALF_MASK), word & HALF_MASK)


# ──────────────────────────────────────────────
# Errors
# ──────────────────────────────────────────────

class TapeError(Exception):
    """Base class for fatal tape processing faults."""


class TruncatedRecordError(TapeError):
    """Raised when a two-frame record is cut off by end of tape."""
    def __init__(self, offset: int, command: int):
        self.offset = offset
        self.command = command
        super().__init__(
            f"Truncated record at offset {offset}: "
            f"frame {command:03o} has no continuation frame")


class AddressRangeError(TapeError):
    """Raised when a data word lands outside the 12-bit address space."""
    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Address {address:o} outside 0000-7777")


class TapeInputError(TapeError):
    """Raised when the tape image cannot be opened."""
    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        msg = f"Cannot open {path}"
        super().__init__(f"{msg}: {reason}" if reason else msg)
