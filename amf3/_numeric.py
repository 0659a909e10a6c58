"""Numeric-width dispatch.

A caller asks the decoder for a value "as width W".  The decoder reads an
integer (U29, carried as unsigned 32-bit) or a double (binary64) and
hands it over cast to W, through `visit_int` for integer widths and
`visit_float` for float widths.  The marker that produced the number
does not pick the visitor method; the requested width does.

Casts follow fixed-width machine semantics:

    int   -> int width    two's-complement wrap to the low N bits
    float -> int width    truncate toward zero, saturate, NaN -> 0
    any   -> F32          round to nearest binary32 (overflow -> inf)
    any   -> F64          float()
"""

from __future__ import annotations

import enum
import math
import struct
from typing import Any, Callable, Dict, NamedTuple

_F32 = struct.Struct("<f")
_F32_MAX = 3.4028234663852886e38


class Width(enum.Enum):
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    F32 = "f32"
    F64 = "f64"
    ANY = "any"  # integers as U32, doubles as F64

    @property
    def is_float(self) -> bool:
        return self in (Width.F32, Width.F64)

    @property
    def signed(self) -> bool:
        return self in (Width.I8, Width.I16, Width.I32, Width.I64, Width.F32, Width.F64)


class _IntRange(NamedTuple):
    bits: int
    lo: int
    hi: int


def _irange(bits: int, signed: bool) -> _IntRange:
    if signed:
        return _IntRange(bits, -(1 << (bits - 1)), (1 << (bits - 1)) - 1)
    return _IntRange(bits, 0, (1 << bits) - 1)


INT_RANGES: Dict[Width, _IntRange] = {
    Width.I8: _irange(8, True),
    Width.I16: _irange(16, True),
    Width.I32: _irange(32, True),
    Width.I64: _irange(64, True),
    Width.U8: _irange(8, False),
    Width.U16: _irange(16, False),
    Width.U32: _irange(32, False),
    Width.U64: _irange(64, False),
}


def wrap_int(v: int, width: Width) -> int:
    r = INT_RANGES[width]
    v &= (1 << r.bits) - 1
    if r.lo < 0 and v > r.hi:
        v -= 1 << r.bits
    return v


def saturate_float(v: float, width: Width) -> int:
    if math.isnan(v):
        return 0
    r = INT_RANGES[width]
    if v <= r.lo:
        return r.lo
    if v >= r.hi:
        return r.hi
    return int(v)


def to_f32(v: float) -> float:
    v = float(v)
    if math.isfinite(v) and abs(v) > _F32_MAX:
        # struct refuses out-of-range values.  Anything within half an ulp
        # of the largest binary32 still rounds down to it.
        if abs(v) >= _F32_MAX + 2.0 ** 103:
            return math.copysign(math.inf, v)
        return math.copysign(_F32_MAX, v)
    return _F32.unpack(_F32.pack(v))[0]


def cast_int(v: int, width: Width) -> Any:
    """Cast an unsigned 32-bit integer carrier to `width`."""
    if width is Width.ANY:
        return wrap_int(v, Width.U32)
    if width is Width.F32:
        return to_f32(v)
    if width is Width.F64:
        return float(v)
    return wrap_int(v, width)


def cast_float(v: float, width: Width) -> Any:
    """Cast a binary64 carrier to `width`."""
    if width is Width.ANY or width is Width.F64:
        return v
    if width is Width.F32:
        return to_f32(v)
    return saturate_float(v, width)


def _int_delivery(width: Width) -> Callable[[Any, Any], Any]:
    def deliver(visitor: Any, v: Any) -> Any:
        return visitor.visit_int(width, v)
    return deliver


def _float_delivery(width: Width) -> Callable[[Any, Any], Any]:
    def deliver(visitor: Any, v: Any) -> Any:
        return visitor.visit_float(width, v)
    return deliver


# Requested width -> visitor delivery.  ANY has no entry: it is resolved
# per marker in deliver_int and deliver_float.
_DISPATCH: Dict[Width, Callable[[Any, Any], Any]] = {
    w: (_float_delivery(w) if w.is_float else _int_delivery(w))
    for w in Width if w is not Width.ANY
}


def deliver_int(visitor: Any, width: Width, v: int) -> Any:
    if width is Width.ANY:
        width = Width.U32
    return _DISPATCH[width](visitor, cast_int(v, width))


def deliver_float(visitor: Any, width: Width, v: float) -> Any:
    if width is Width.ANY:
        width = Width.F64
    return _DISPATCH[width](visitor, cast_float(v, width))
