"""AMF3 byte cursor: forward-only reads over one input buffer.

A cursor lives for exactly one top-level decode.  It owns the read
position and the string reference table, and nothing else.  There is no
seek and no lookahead; every read either completes from the buffer or
raises.

U29 layout (big-endian groups, high bit = "more bytes follow"):

    0x00000000 - 0x0000007F : 0xxxxxxx
    0x00000080 - 0x00003FFF : 1xxxxxxx 0xxxxxxx
    0x00004000 - 0x001FFFFF : 1xxxxxxx 1xxxxxxx 0xxxxxxx
    0x00200000 - 0x1FFFFFFF : 1xxxxxxx 1xxxxxxx 1xxxxxxx xxxxxxxx

Strings are copied out of the buffer when decoded (Python has no
borrowed str).  The table holds those copies, so a back-reference costs a
list lookup and never re-reads bytes.
"""

from __future__ import annotations

import struct
from typing import List, Union

from ._constants import (
    DOUBLE_FORMAT,
    DOUBLE_SIZE,
    MARKER_LIMIT,
    U29_CONTINUE,
    U29_PAYLOAD,
    Marker,
)
from ._errors import (
    ERR_END_OF_STREAM,
    ERR_INVALID_MARKER,
    ERR_MISSING_STRING_REF,
    ERR_STRING_DECODE,
    ERR_UNSUPPORTED,
    Amf3Error,
)

_DOUBLE = struct.Struct(DOUBLE_FORMAT)


class ByteCursor:
    __slots__ = ("_buf", "_off", "strings")

    def __init__(self, buf: Union[bytes, bytearray, memoryview]) -> None:
        self._buf = memoryview(buf).cast("B")
        self._off = 0
        # Non-empty strings in the order they were decoded by value.
        self.strings: List[str] = []

    @property
    def offset(self) -> int:
        return self._off

    @property
    def remaining(self) -> int:
        return len(self._buf) - self._off

    def _take(self, n: int) -> memoryview:
        if n > len(self._buf) - self._off:
            raise Amf3Error(ERR_END_OF_STREAM,
                            "need {} bytes at offset {}, have {}".format(
                                n, self._off, len(self._buf) - self._off))
        start = self._off
        self._off += n
        return self._buf[start:self._off]

    def read_byte(self) -> int:
        if self._off >= len(self._buf):
            raise Amf3Error(ERR_END_OF_STREAM, "end of stream at offset {}".format(self._off))
        b = self._buf[self._off]
        self._off += 1
        return b

    def read_marker(self) -> Marker:
        b = self.read_byte()
        # Range check before the enum lookup; never coerce an unknown tag.
        if b >= MARKER_LIMIT:
            raise Amf3Error(ERR_INVALID_MARKER, "invalid marker 0x{:02x}".format(b), byte=b)
        return Marker(b)

    def read_u29(self) -> int:
        b = self.read_byte()
        value = b & U29_PAYLOAD
        if b & U29_CONTINUE:
            b = self.read_byte()
            value = (value << 7) | (b & U29_PAYLOAD)
            if b & U29_CONTINUE:
                b = self.read_byte()
                value = (value << 7) | (b & U29_PAYLOAD)
                if b & U29_CONTINUE:
                    # Fourth byte: all 8 bits are payload.
                    value = (value << 8) | self.read_byte()
        return value

    def read_double(self) -> float:
        return _DOUBLE.unpack(self._take(DOUBLE_SIZE))[0]

    def read_string(self) -> str:
        header = self.read_u29()
        value = header >> 1
        if header & 1 == 0:
            if value >= len(self.strings):
                raise Amf3Error(ERR_MISSING_STRING_REF,
                                "string reference {} with {} entries in table".format(
                                    value, len(self.strings)))
            return self.strings[value]

        raw = self._take(value)
        try:
            s = str(raw, "utf-8")
        except UnicodeDecodeError as e:
            raise Amf3Error(ERR_STRING_DECODE, "invalid utf-8: {}".format(e.reason)) from e
        # The empty string is never a reference target.
        if s:
            self.strings.append(s)
        return s

    def skip(self) -> None:
        """Consume one value without producing it.

        Only scalars with a fixed-shape payload are supported: integers,
        doubles, and the payload-less markers.  Everything else, strings
        included, raises ERR_UNSUPPORTED.
        """
        marker = self.read_marker()
        if marker == Marker.INTEGER:
            self.read_u29()
        elif marker == Marker.DOUBLE:
            self._take(DOUBLE_SIZE)
        elif marker not in (Marker.UNDEFINED, Marker.NULL, Marker.FALSE, Marker.TRUE):
            raise Amf3Error(ERR_UNSUPPORTED, "cannot skip {} value".format(marker.name))
