"""AMF3 value decoder: marker dispatch and array/object disambiguation.

One Decoder serves one top-level decode.  It reads a marker through its
ByteCursor and either hands a scalar straight to the visitor or opens a
SeqAccess / MapAccess that recursively decodes the elements.  There is
no backtracking; each value is a strict prefix of the remaining input.

Array payload (marker 0x09):

    U29 header      low bit 0 -> reference to an earlier array (unsupported)
                    low bit 1 -> header >> 1 is the dense count N
    key             string; empty -> pure dense array
    value, key, ... associative entries, terminated by an empty key
    N values        dense portion

A pure dense array goes to `visit_seq`.  Anything with an associative
portion goes to `visit_map`, with the dense slots appended under integer
keys N-1 down to 0.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from ._constants import MAX_DEPTH, Marker
from ._cursor import ByteCursor
from ._errors import ERR_LIMIT_DEPTH, ERR_UNSUPPORTED, Amf3Error
from ._numeric import Width, deliver_float, deliver_int
from ._visitor import EXHAUSTED, MapAccess, SeqAccess


class _DenseSeq(SeqAccess):
    __slots__ = ("_dec", "_len")

    def __init__(self, dec: "Decoder", length: int) -> None:
        self._dec = dec
        self._len = length

    def next_element(self, schema: Any) -> Any:
        if self._len == 0:
            return EXHAUSTED
        self._len -= 1
        return schema.decode(self._dec)

    def __len__(self) -> int:
        return self._len


class _AssocMap(MapAccess):
    __slots__ = ("_dec", "_len", "_key")

    def __init__(self, dec: "Decoder", length: int, first_key: str) -> None:
        self._dec = dec
        self._len = length
        self._key = first_key

    def next_key(self) -> Optional[Union[str, int]]:
        if self._key:
            return self._key
        # Associative portion is over; walk the dense slots downward.
        if self._len > 0:
            self._len -= 1
            return self._len
        return None

    def next_value(self, schema: Any) -> Any:
        value = schema.decode(self._dec)
        if self._key:
            # Empty key here ends the associative portion.
            self._key = self._dec.cursor.read_string()
        return value


class Decoder:
    """Decodes values from one buffer into caller-supplied visitors."""

    def __init__(self, buf: Union[bytes, bytearray, memoryview],
                 max_depth: int = MAX_DEPTH) -> None:
        self.cursor = ByteCursor(buf)
        self.max_depth = max_depth
        self.depth = 0

    def decode(self, visitor: Any, width: Width = Width.ANY) -> Any:
        """Decode the next value, delivering numbers cast to `width`."""
        cur = self.cursor
        marker = cur.read_marker()

        # Undefined and null both collapse to visit_none.
        if marker == Marker.UNDEFINED or marker == Marker.NULL:
            return visitor.visit_none()
        if marker == Marker.FALSE:
            return visitor.visit_bool(False)
        if marker == Marker.TRUE:
            return visitor.visit_bool(True)
        if marker == Marker.INTEGER:
            return deliver_int(visitor, width, cur.read_u29())
        if marker == Marker.DOUBLE:
            return deliver_float(visitor, width, cur.read_double())
        if marker == Marker.STRING:
            return visitor.visit_str(cur.read_string())
        if marker == Marker.ARRAY:
            return self._decode_array(visitor)

        raise Amf3Error(ERR_UNSUPPORTED, "{} values are not supported".format(marker.name))

    def decode_ignored(self) -> None:
        """Consume the next value and discard it (see ByteCursor.skip)."""
        self.cursor.skip()
        return None

    def _decode_array(self, visitor: Any) -> Any:
        header = self.cursor.read_u29()
        if header & 1 == 0:
            raise Amf3Error(ERR_UNSUPPORTED,
                            "array reference {} is not supported".format(header >> 1))
        count = header >> 1

        if self.depth + 1 > self.max_depth:
            raise Amf3Error(ERR_LIMIT_DEPTH, "depth exceeds {}".format(self.max_depth))

        first_key = self.cursor.read_string()
        self.depth += 1
        try:
            if not first_key:
                return visitor.visit_seq(_DenseSeq(self, count))
            return visitor.visit_map(_AssocMap(self, count, first_key))
        finally:
            self.depth -= 1


def decode_with(buf: Union[bytes, bytearray, memoryview], visitor: Any, *,
                width: Width = Width.ANY, max_depth: int = MAX_DEPTH) -> Any:
    """Decode one value from `buf` into `visitor`.

    Bytes after the first complete value are not examined.
    """
    return Decoder(buf, max_depth).decode(visitor, width)
