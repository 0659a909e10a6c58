"""AMF3 error codes and the exception class.

Every failure aborts the whole top-level decode.  There is no
resynchronization and nothing partially decoded is ever returned.
"""

from __future__ import annotations

from typing import Any, Optional

# ── Error codes ───────────────────────────────────────────────
# Grep-friendly; tests and the conformance vectors compare against these.

ERR_INVALID_MARKER: str = "ERR_INVALID_MARKER"          # tag byte >= 0x12
ERR_END_OF_STREAM: str = "ERR_END_OF_STREAM"            # ran out of input
ERR_STRING_DECODE: str = "ERR_STRING_DECODE"            # invalid UTF-8
ERR_MISSING_STRING_REF: str = "ERR_MISSING_STRING_REF"  # bad table index
ERR_UNSUPPORTED: str = "ERR_UNSUPPORTED"                # known, not implemented
ERR_CUSTOM: str = "ERR_CUSTOM"                          # raised by a binding layer
ERR_LIMIT_DEPTH: str = "ERR_LIMIT_DEPTH"                # exceeds max_depth

ALL_CODES = (
    ERR_INVALID_MARKER,
    ERR_END_OF_STREAM,
    ERR_STRING_DECODE,
    ERR_MISSING_STRING_REF,
    ERR_UNSUPPORTED,
    ERR_CUSTOM,
    ERR_LIMIT_DEPTH,
)


class Amf3Error(Exception):
    """Exception for AMF3 decoding errors.

    The `.code` attribute is one of the ERR_* strings above.  For
    ERR_INVALID_MARKER, `.byte` holds the offending tag byte.
    """

    def __init__(self, code: str, msg: str = "", byte: Optional[int] = None) -> None:
        super().__init__(msg or code)
        self.code = code
        self.byte = byte


def custom_error(msg: Any) -> Amf3Error:
    """Build the error a binding layer raises when a value doesn't fit."""
    return Amf3Error(ERR_CUSTOM, str(msg))
