"""AMF3 constants: marker tags, U29 bounds, and decoder limits.

Marker values are the one-byte tags that open every encoded value.  The
set is closed: 0x00-0x11 are defined, anything from 0x12 up is invalid.
"""

from __future__ import annotations

import enum


class Marker(enum.IntEnum):
    UNDEFINED = 0x00
    NULL = 0x01
    FALSE = 0x02
    TRUE = 0x03
    INTEGER = 0x04       # payload: U29
    DOUBLE = 0x05        # payload: 8 bytes, see DOUBLE_FORMAT
    STRING = 0x06        # payload: U29 header, then bytes or a table index
    XML_DOC = 0x07
    DATE = 0x08
    ARRAY = 0x09         # payload: U29 header, associative part, dense part
    OBJECT = 0x0A
    XML = 0x0B
    BYTE_ARRAY = 0x0C
    VECTOR_INT = 0x0D
    VECTOR_UINT = 0x0E
    VECTOR_DOUBLE = 0x0F
    VECTOR_OBJECT = 0x10
    DICTIONARY = 0x11


# First byte value that is not a marker.
MARKER_LIMIT: int = 0x12

# Markers the decoder recognizes but does not implement.
UNSUPPORTED_MARKERS = frozenset({
    Marker.XML_DOC,
    Marker.DATE,
    Marker.OBJECT,
    Marker.XML,
    Marker.BYTE_ARRAY,
    Marker.VECTOR_INT,
    Marker.VECTOR_UINT,
    Marker.VECTOR_DOUBLE,
    Marker.VECTOR_OBJECT,
    Marker.DICTIONARY,
})

# ── U29 ───────────────────────────────────────────────────────
# Bytes 1-3 carry 7 payload bits and a continuation flag in the high bit.
# Byte 4, when present, carries a full 8 bits.
U29_CONTINUE: int = 0x80
U29_PAYLOAD: int = 0x7F
U29_MAX: int = 0x1FFFFFFF

# Little-endian IEEE-754 binary64.  Real-world producers may well write
# network byte order; this matches the encoder this decoder was paired with.
DOUBLE_FORMAT: str = "<d"
DOUBLE_SIZE: int = 8

# ── Limits ────────────────────────────────────────────────────
# Composite nesting beyond this fails closed with ERR_LIMIT_DEPTH instead
# of exhausting the interpreter stack.
MAX_DEPTH: int = 64
