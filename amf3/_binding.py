"""Typed binding: decode straight into annotated Python types.

`schema_for(tp)` turns a type into a schema, the object the decoder calls
back into for each value.  Supported targets:

    bool, str
    int                       asks for I64
    float                     asks for F64
    Annotated[int, Width.U8]  asks for an explicit width
    Optional[T]               None for undefined/null, else T
    List[T], Tuple[T, ...]    dense arrays
    Tuple[A, B, ...]          dense arrays of exactly that length
    Dict[K, V]                mixed arrays (K is str, int or Any)
    dataclasses               mixed arrays, or dense arrays positionally
    Any                       the generic value tree

Dataclass fields can be renamed on the wire:

    @dataclass
    class Strip:
        action_index: int = field(metadata={"amf3": "actionIndex"})

Keys with no matching field are skipped through Decoder.decode_ignored.
Integer keys (the dense tail of a mixed array) select fields by
declaration order.
"""

from __future__ import annotations

import dataclasses
import sys
import typing
from typing import Any, Callable, Dict, List, Optional, Tuple

from ._errors import custom_error
from ._numeric import Width
from ._value import VALUE, ValueSchema
from ._visitor import EXHAUSTED, MapAccess, SeqAccess, Visitor

if sys.version_info >= (3, 10):
    import types
    _UNION_TYPES: Tuple[Any, ...] = (typing.Union, types.UnionType)
else:
    _UNION_TYPES = (typing.Union,)

_NoneType = type(None)

# Wire-name override key in dataclass field metadata.
FIELD_NAME_KEY = "amf3"


class Schema:
    """Base schema: decode the next value with `visitor` at `width`."""

    width = Width.ANY
    visitor: Visitor

    def decode(self, dec: Any) -> Any:
        return dec.decode(self.visitor, self.width)


# ── Scalars ───────────────────────────────────────────────────

class _BoolVisitor(Visitor):
    expecting = "a boolean"

    def visit_bool(self, v: bool) -> Any:
        return v


class _IntVisitor(Visitor):
    expecting = "an integer"

    def visit_int(self, width: Width, v: int) -> Any:
        return v


class _FloatVisitor(Visitor):
    expecting = "a float"

    def visit_float(self, width: Width, v: float) -> Any:
        return v


class _StrVisitor(Visitor):
    expecting = "a string"

    def visit_str(self, v: str) -> Any:
        return v


class ScalarSchema(Schema):
    def __init__(self, visitor: Visitor, width: Width = Width.ANY) -> None:
        self.visitor = visitor
        self.width = width

    def __repr__(self) -> str:
        return "ScalarSchema({}, {})".format(type(self.visitor).__name__, self.width.value)


BOOL = ScalarSchema(_BoolVisitor())
STR = ScalarSchema(_StrVisitor())


def int_schema(width: Width = Width.I64) -> ScalarSchema:
    if width.is_float or width is Width.ANY:
        raise TypeError("integer schema needs an integer width, got {}".format(width))
    return ScalarSchema(_IntVisitor(), width)


def float_schema(width: Width = Width.F64) -> ScalarSchema:
    if not width.is_float:
        raise TypeError("float schema needs a float width, got {}".format(width))
    return ScalarSchema(_FloatVisitor(), width)


class _Ignored:
    """Schema that consumes a value without keeping it."""

    def decode(self, dec: Any) -> None:
        return dec.decode_ignored()


IGNORED = _Ignored()


# ── Optional ──────────────────────────────────────────────────

class _OptionVisitor(Visitor):
    """Routes null to None and everything else to the inner visitor."""

    def __init__(self, inner: Visitor) -> None:
        self.inner = inner
        self.expecting = "an option of " + inner.expecting

    def visit_none(self) -> Any:
        return None

    def visit_bool(self, v: bool) -> Any:
        return self.inner.visit_bool(v)

    def visit_int(self, width: Width, v: int) -> Any:
        return self.inner.visit_int(width, v)

    def visit_float(self, width: Width, v: float) -> Any:
        return self.inner.visit_float(width, v)

    def visit_str(self, v: str) -> Any:
        return self.inner.visit_str(v)

    def visit_seq(self, seq: SeqAccess) -> Any:
        return self.inner.visit_seq(seq)

    def visit_map(self, m: MapAccess) -> Any:
        return self.inner.visit_map(m)


class OptionalSchema(Schema):
    def __init__(self, inner: Any) -> None:
        self.inner = inner

    def decode(self, dec: Any) -> Any:
        inner = self.inner
        if not isinstance(inner, Schema):
            # Generic tree already maps null to None.
            return inner.decode(dec)
        return dec.decode(_OptionVisitor(inner.visitor), inner.width)


# ── Sequences ─────────────────────────────────────────────────

class _ListVisitor(Visitor):
    expecting = "a sequence"

    def __init__(self, item: Any, convert: Callable[[List[Any]], Any]) -> None:
        self.item = item
        self.convert = convert

    def visit_seq(self, seq: SeqAccess) -> Any:
        out = []
        while True:
            v = seq.next_element(self.item)
            if v is EXHAUSTED:
                return self.convert(out)
            out.append(v)


class ListSchema(Schema):
    def __init__(self, item: Any, convert: Callable[[List[Any]], Any] = list) -> None:
        self.item = item
        self.visitor = _ListVisitor(item, convert)


class _TupleVisitor(Visitor):
    def __init__(self, items: List[Any]) -> None:
        self.items = items
        self.expecting = "a tuple of size {}".format(len(items))

    def visit_seq(self, seq: SeqAccess) -> Any:
        out = []
        for i, item in enumerate(self.items):
            v = seq.next_element(item)
            if v is EXHAUSTED:
                raise custom_error("invalid length {}, expected {}".format(i, self.expecting))
            out.append(v)
        if len(seq):
            raise custom_error("invalid length {}, expected {}".format(
                len(self.items) + len(seq), self.expecting))
        return tuple(out)


class TupleSchema(Schema):
    def __init__(self, items: List[Any]) -> None:
        self.visitor = _TupleVisitor(items)


# ── Mappings ──────────────────────────────────────────────────

def _check_key(key: Any, key_type: Any) -> Any:
    if key_type is str and not isinstance(key, str):
        raise custom_error("invalid type: integer `{}`, expected a string".format(key))
    if key_type is int and not isinstance(key, int):
        raise custom_error("invalid type: string {!r}, expected an integer".format(key))
    return key


class _DictVisitor(Visitor):
    expecting = "a map"

    def __init__(self, key_type: Any, value: Any) -> None:
        self.key_type = key_type
        self.value = value

    def visit_map(self, m: MapAccess) -> Any:
        out: Dict[Any, Any] = {}
        while True:
            key = m.next_key()
            if key is None:
                return out
            out[_check_key(key, self.key_type)] = m.next_value(self.value)


class DictSchema(Schema):
    def __init__(self, key_type: Any, value: Any) -> None:
        if key_type not in (str, int, Any):
            raise TypeError("unsupported dict key type {!r}".format(key_type))
        self.visitor = _DictVisitor(key_type, value)


# ── Dataclasses ───────────────────────────────────────────────

class _Field(typing.NamedTuple):
    name: str
    wire: str
    schema: Any
    required: bool


class _DataclassVisitor(Visitor):
    def __init__(self, owner: "DataclassSchema") -> None:
        self.owner = owner
        self.expecting = "struct " + owner.cls.__name__

    def visit_map(self, m: MapAccess) -> Any:
        fields = self.owner.fields()
        by_wire = self.owner.by_wire()
        values: Dict[str, Any] = {}
        while True:
            key = m.next_key()
            if key is None:
                break
            if isinstance(key, int):
                f = fields[key] if key < len(fields) else None
            else:
                f = by_wire.get(key)
            if f is None:
                m.next_value(IGNORED)
                continue
            if f.name in values:
                raise custom_error("duplicate field `{}`".format(f.wire))
            values[f.name] = m.next_value(f.schema)
        return self.owner.build(values)

    def visit_seq(self, seq: SeqAccess) -> Any:
        fields = self.owner.fields()
        values: Dict[str, Any] = {}
        for i, f in enumerate(fields):
            v = seq.next_element(f.schema)
            if v is EXHAUSTED:
                if any(g.required for g in fields[i:]):
                    raise custom_error("invalid length {}, expected {} with {} elements".format(
                        i, self.expecting, len(fields)))
                break
            values[f.name] = v
        if len(seq):
            raise custom_error("invalid length {}, expected {} with {} elements".format(
                len(fields) + len(seq), self.expecting, len(fields)))
        return self.owner.build(values)


class DataclassSchema(Schema):
    # Fields resolve on first use so a dataclass can refer to itself.
    def __init__(self, cls: type) -> None:
        self.cls = cls
        self.visitor = _DataclassVisitor(self)
        self._fields: Optional[List[_Field]] = None
        self._by_wire: Optional[Dict[str, _Field]] = None

    def fields(self) -> List[_Field]:
        if self._fields is None:
            hints = typing.get_type_hints(self.cls, include_extras=True)
            out = []
            for f in dataclasses.fields(self.cls):
                if not f.init:
                    continue
                required = (f.default is dataclasses.MISSING
                            and f.default_factory is dataclasses.MISSING)
                out.append(_Field(f.name, f.metadata.get(FIELD_NAME_KEY, f.name),
                                  schema_for(hints[f.name]), required))
            self._fields = out
        return self._fields

    def by_wire(self) -> Dict[str, _Field]:
        if self._by_wire is None:
            self._by_wire = {f.wire: f for f in self.fields()}
        return self._by_wire

    def build(self, values: Dict[str, Any]) -> Any:
        for f in self.fields():
            if f.required and f.name not in values:
                raise custom_error("missing field `{}`".format(f.wire))
        return self.cls(**values)

    def __repr__(self) -> str:
        return "DataclassSchema({})".format(self.cls.__name__)


# ── Type → schema ─────────────────────────────────────────────

_dataclass_cache: Dict[type, DataclassSchema] = {}


def _width_from_metadata(metadata: Tuple[Any, ...]) -> Optional[Width]:
    for m in metadata:
        if isinstance(m, Width):
            return m
    return None


def schema_for(tp: Any) -> Any:
    """Return the schema that decodes values of type `tp`."""
    if isinstance(tp, (Schema, ValueSchema, _Ignored)):
        return tp
    if tp is Any:
        return VALUE
    # bool before int: bool is a subclass of int.
    if tp is bool:
        return BOOL
    if tp is int:
        return int_schema()
    if tp is float:
        return float_schema()
    if tp is str:
        return STR
    if dataclasses.is_dataclass(tp) and isinstance(tp, type):
        schema = _dataclass_cache.get(tp)
        if schema is None:
            schema = _dataclass_cache[tp] = DataclassSchema(tp)
        return schema

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is typing.Annotated:
        base, metadata = args[0], args[1:]
        width = _width_from_metadata(metadata)
        if width is None:
            return schema_for(base)
        if base is int:
            return int_schema(width)
        if base is float:
            return float_schema(width)
        raise TypeError("width annotation on non-numeric type {!r}".format(base))

    if origin in _UNION_TYPES:
        rest = [a for a in args if a is not _NoneType]
        if len(rest) == 1 and len(args) == 2:
            return OptionalSchema(schema_for(rest[0]))
        raise TypeError("only Optional[T] unions are supported, got {!r}".format(tp))

    if origin in (list, List):
        return ListSchema(schema_for(args[0]) if args else VALUE)

    if origin in (tuple, Tuple):
        if len(args) == 2 and args[1] is Ellipsis:
            return ListSchema(schema_for(args[0]), tuple)
        if not args:
            return ListSchema(VALUE, tuple)
        return TupleSchema([schema_for(a) for a in args])

    if origin in (dict, Dict):
        if not args:
            return DictSchema(Any, VALUE)
        return DictSchema(args[0], schema_for(args[1]))

    if tp is list:
        return ListSchema(VALUE)
    if tp is tuple:
        return ListSchema(VALUE, tuple)
    if tp is dict:
        return DictSchema(Any, VALUE)

    raise TypeError("cannot decode into {!r}".format(tp))
