"""Generic value tree: the decoded buffer as plain Python values.

    undefined, null  -> None
    false, true      -> bool
    integer          -> int (unsigned 32-bit carrier)
    double           -> float
    string           -> str
    dense array      -> list
    mixed array      -> dict; associative keys are str, dense keys are int
"""

from __future__ import annotations

from typing import Any, Dict, List, Union

from ._numeric import Width
from ._visitor import EXHAUSTED, MapAccess, SeqAccess, Visitor


class ValueVisitor(Visitor):
    expecting = "any value"

    def visit_none(self) -> Any:
        return None

    def visit_bool(self, v: bool) -> Any:
        return v

    def visit_int(self, width: Width, v: int) -> Any:
        return v

    def visit_float(self, width: Width, v: float) -> Any:
        return v

    def visit_str(self, v: str) -> Any:
        return v

    def visit_seq(self, seq: SeqAccess) -> Any:
        out: List[Any] = []
        while True:
            item = seq.next_element(VALUE)
            if item is EXHAUSTED:
                return out
            out.append(item)

    def visit_map(self, m: MapAccess) -> Any:
        out: Dict[Union[str, int], Any] = {}
        while True:
            key = m.next_key()
            if key is None:
                return out
            out[key] = m.next_value(VALUE)


class ValueSchema:
    """Schema for the generic tree.  Stateless; use the VALUE instance."""

    visitor = ValueVisitor()

    def decode(self, dec: Any) -> Any:
        return dec.decode(self.visitor, Width.ANY)

    def __repr__(self) -> str:
        return "VALUE"


VALUE = ValueSchema()
