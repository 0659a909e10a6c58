"""Consumer capability set.

The decoder never builds values itself.  It reads one marker and calls
exactly one `visit_*` method on whatever visitor the caller handed it.
Composite values arrive as access objects that decode their elements on
demand:

    visit_seq(seq)   seq.next_element(schema) -> value, or EXHAUSTED
    visit_map(m)     m.next_key() -> str | int | None
                     m.next_value(schema) -> value

A schema is anything with a `decode(decoder)` method; it is the recursive
callback that turns the next encoded value into a Python value.  See
_binding.py for the ones built from type annotations.

Each default `visit_*` raises ERR_CUSTOM, so a visitor only implements
the shapes it accepts.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from ._errors import custom_error
from ._numeric import Width


class _Exhausted:
    __slots__ = ()

    def __repr__(self) -> str:
        return "EXHAUSTED"

    def __bool__(self) -> bool:
        return False


# Returned by SeqAccess.next_element once every element has been read.
# A sentinel rather than None, because None is a legitimate element.
EXHAUSTED = _Exhausted()


class SeqAccess:
    """Forward-only view of a dense array being decoded."""

    def next_element(self, schema: Any) -> Any:
        raise NotImplementedError

    def __len__(self) -> int:
        raise NotImplementedError


class MapAccess:
    """Forward-only view of an associative array being decoded.

    Keys and values must be requested alternately: next_key, next_value,
    next_key, ...  Calling next_value first, or twice, is a usage error.
    """

    def next_key(self) -> Optional[Union[str, int]]:
        raise NotImplementedError

    def next_value(self, schema: Any) -> Any:
        raise NotImplementedError


class Visitor:
    # Used in error messages: "invalid type: X, expected <expecting>".
    expecting = "a value"

    def _unexpected(self, what: str) -> Any:
        raise custom_error("invalid type: {}, expected {}".format(what, self.expecting))

    def visit_none(self) -> Any:
        return self._unexpected("null")

    def visit_bool(self, v: bool) -> Any:
        return self._unexpected("boolean `{}`".format("true" if v else "false"))

    def visit_int(self, width: Width, v: int) -> Any:
        return self._unexpected("integer `{}`".format(v))

    def visit_float(self, width: Width, v: float) -> Any:
        return self._unexpected("floating point `{}`".format(v))

    def visit_str(self, v: str) -> Any:
        return self._unexpected("string {!r}".format(v))

    def visit_seq(self, seq: SeqAccess) -> Any:
        return self._unexpected("sequence")

    def visit_map(self, m: MapAccess) -> Any:
        return self._unexpected("map")
