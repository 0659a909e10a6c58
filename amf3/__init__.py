"""amf3: a read-only decoder for the AMF3 object serialization format.

Decode a byte buffer into plain Python values or into annotated types.

Quick start:
    >>> from amf3 import decode, decode_value
    >>> decode_value(b"\\x06\\x0bHello")
    'Hello'
    >>> decode_value(b"\\x09\\x07\\x01\\x04\\x01\\x04\\x02\\x04\\x03")
    [1, 2, 3]

Typed targets use annotations:
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Point:
    ...     a: int
    ...     b: int
    >>> decode(b"\\x09\\x01\\x03a\\x04\\x05\\x03b\\x04\\x07\\x01", Point)
    Point(a=5, b=7)

Supported markers are undefined, null, false, true, integer, double,
string and array.  Everything else (dates, XML, byte arrays, vectors,
dictionaries, class-defined objects, and array back-references) fails
with ERR_UNSUPPORTED.
"""

from __future__ import annotations

from typing import Any, Union

from ._binding import (
    FIELD_NAME_KEY,
    Schema,
    float_schema,
    int_schema,
    schema_for,
)
from ._constants import MAX_DEPTH, Marker
from ._cursor import ByteCursor
from ._decoder import Decoder, decode_with
from ._errors import (
    ERR_CUSTOM,
    ERR_END_OF_STREAM,
    ERR_INVALID_MARKER,
    ERR_LIMIT_DEPTH,
    ERR_MISSING_STRING_REF,
    ERR_STRING_DECODE,
    ERR_UNSUPPORTED,
    Amf3Error,
    custom_error,
)
from ._numeric import Width
from ._value import VALUE, ValueVisitor
from ._visitor import EXHAUSTED, MapAccess, SeqAccess, Visitor

__version__ = "0.1.0"

__all__ = [
    # Decoding
    "decode",
    "decode_value",
    "decode_with",
    "schema_for",
    "int_schema",
    "float_schema",
    "Decoder",
    "ByteCursor",
    # Consumer contract
    "Visitor",
    "SeqAccess",
    "MapAccess",
    "EXHAUSTED",
    "Schema",
    "ValueVisitor",
    "VALUE",
    "FIELD_NAME_KEY",
    "Width",
    "Marker",
    "MAX_DEPTH",
    # Exception
    "Amf3Error",
    "custom_error",
    # Error codes
    "ERR_INVALID_MARKER",
    "ERR_END_OF_STREAM",
    "ERR_STRING_DECODE",
    "ERR_MISSING_STRING_REF",
    "ERR_UNSUPPORTED",
    "ERR_CUSTOM",
    "ERR_LIMIT_DEPTH",
]

Buffer = Union[bytes, bytearray, memoryview]


def decode(buf: Buffer, target: Any = Any, *, max_depth: int = MAX_DEPTH) -> Any:
    """Decode one value from `buf` as `target`.

    `target` is a type (see schema_for) or a schema instance.  Each call is
    a separate session with its own string reference table.
    """
    return schema_for(target).decode(Decoder(buf, max_depth))


def decode_value(buf: Buffer, *, max_depth: int = MAX_DEPTH) -> Any:
    """Decode one value from `buf` into the generic tree."""
    return VALUE.decode(Decoder(buf, max_depth))
