"""
Schema model.

A schema is a tree of immutable codec nodes. Each node describes the
shape of a value and knows how to move it between its wire shape (what
crosses a serialization boundary) and its domain shape (what the
application works with in-process).

Every node exposes:

- tag       structural kind, a member of the closed SchemaTag set
- name      identity name; branded types use a stable reserved name
- is_       True if a value is already in domain shape
- validate  wire value -> domain value, raising DecodeError on failure
- encode    domain value -> wire value (total)

The full combinator set is modelled up front, including kinds the
arbitrary generator does not support, so gaps are explicit rather than
silent.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    FrozenSet,
    List,
    Mapping,
    NoReturn,
    Sequence,
    Tuple,
)

from pydantic import StrictBool, StrictFloat, StrictStr, TypeAdapter, ValidationError

from quotation.app.errors import (
    DecodeError,
    UnsupportedSchemaError,
    ValidationIssue,
)


Context = Tuple[str, ...]


# ---------------------------------------------------------------------------
# Tags (closed set)
# ---------------------------------------------------------------------------


class SchemaTag(str, Enum):
    """
    Structural kind of a schema node.

    NOTE:
    This set is closed. Adding a member requires a matching entry in the
    generator's structural dispatch table.
    """

    # Leaf scalars
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"

    # Containers
    ARRAY = "array"
    INTERFACE = "interface"
    PARTIAL = "partial"
    EXACT = "exact"

    # Narrowing
    REFINEMENT = "refinement"

    # Remaining combinators
    UNKNOWN = "unknown"
    UNDEFINED = "undefined"
    VOID = "void"
    NULL = "null"
    KEYOF = "keyof"
    LITERAL = "literal"
    DICTIONARY = "dictionary"
    TUPLE = "tuple"
    UNION = "union"
    INTERSECTION = "intersection"


STRUCT_TAGS: FrozenSet[SchemaTag] = frozenset(
    {SchemaTag.INTERFACE, SchemaTag.PARTIAL, SchemaTag.EXACT}
)


# ---------------------------------------------------------------------------
# Failure helpers
# ---------------------------------------------------------------------------


def render_path(context: Context) -> str:
    return ".".join(context)


def failure(
    value: Any,
    context: Context,
    expected: str,
    message: str | None = None,
) -> NoReturn:
    """Raise a DecodeError for a single offending value."""
    raise DecodeError(
        [
            ValidationIssue(
                value=value,
                path=render_path(context),
                expected=expected,
                message=message,
            )
        ]
    )


def check(
    adapter: TypeAdapter,
    value: Any,
    context: Context,
    expected: str,
    message: str | None = None,
) -> Any:
    """Validate `value` with a pydantic adapter, raising DecodeError on failure."""
    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        raise DecodeError.from_validation_error(
            exc, render_path(context), expected, message
        ) from None


# Strict float accepts int but never bool.
_STRING = TypeAdapter(StrictStr)
_NUMBER = TypeAdapter(StrictFloat)
_BOOLEAN = TypeAdapter(StrictBool)
_NONE = TypeAdapter(None)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# Base node
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Schema:
    """Base class for all schema nodes."""

    tag: ClassVar[SchemaTag]

    @property
    def name(self) -> str:
        return self.tag.value

    def is_(self, value: Any) -> bool:
        raise NotImplementedError

    def validate(self, value: Any, context: Context = ()) -> Any:
        raise NotImplementedError

    def encode(self, value: Any) -> Any:
        return value

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


# ---------------------------------------------------------------------------
# Leaf scalars
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False, repr=False)
class StringType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.STRING

    def is_(self, value: Any) -> bool:
        return isinstance(value, str)

    def validate(self, value: Any, context: Context = ()) -> Any:
        return check(_STRING, value, context, self.name)


@dataclass(frozen=True, eq=False, repr=False)
class NumberType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.NUMBER

    def is_(self, value: Any) -> bool:
        return _is_number(value)

    def validate(self, value: Any, context: Context = ()) -> Any:
        # The wire number is kept as-is; the adapter would coerce int to float.
        check(_NUMBER, value, context, self.name)
        return value


@dataclass(frozen=True, eq=False, repr=False)
class BooleanType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.BOOLEAN

    def is_(self, value: Any) -> bool:
        return isinstance(value, bool)

    def validate(self, value: Any, context: Context = ()) -> Any:
        return check(_BOOLEAN, value, context, self.name)


@dataclass(frozen=True, eq=False, repr=False)
class UnknownType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.UNKNOWN

    def is_(self, value: Any) -> bool:
        return True

    def validate(self, value: Any, context: Context = ()) -> Any:
        return value


@dataclass(frozen=True, eq=False, repr=False)
class UndefinedType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.UNDEFINED

    def is_(self, value: Any) -> bool:
        return value is None

    def validate(self, value: Any, context: Context = ()) -> Any:
        return check(_NONE, value, context, self.name)


@dataclass(frozen=True, eq=False, repr=False)
class VoidType(UndefinedType):
    tag: ClassVar[SchemaTag] = SchemaTag.VOID


@dataclass(frozen=True, eq=False, repr=False)
class NullType(UndefinedType):
    tag: ClassVar[SchemaTag] = SchemaTag.NULL


@dataclass(frozen=True, eq=False, repr=False)
class LiteralType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.LITERAL

    value: Any

    @cached_property
    def name(self) -> str:
        return json.dumps(self.value)

    def is_(self, value: Any) -> bool:
        return type(value) is type(self.value) and value == self.value

    def validate(self, value: Any, context: Context = ()) -> Any:
        if not self.is_(value):
            failure(value, context, self.name)
        return value


@dataclass(frozen=True, eq=False, repr=False)
class KeyofType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.KEYOF

    keys: Tuple[str, ...]

    @cached_property
    def name(self) -> str:
        return " | ".join(json.dumps(k) for k in self.keys)

    def is_(self, value: Any) -> bool:
        return isinstance(value, str) and value in self.keys

    def validate(self, value: Any, context: Context = ()) -> Any:
        if not self.is_(value):
            failure(value, context, self.name)
        return value


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False, repr=False)
class ArrayType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.ARRAY

    item: Schema

    @cached_property
    def name(self) -> str:
        return f"Array<{self.item.name}>"

    def is_(self, value: Any) -> bool:
        return isinstance(value, list) and all(
            self.item.is_(v) for v in value
        )

    def validate(self, value: Any, context: Context = ()) -> Any:
        if not isinstance(value, (list, tuple)):
            failure(value, context, self.name)

        issues: List[ValidationIssue] = []
        decoded: List[Any] = []
        for index, element in enumerate(value):
            try:
                decoded.append(
                    self.item.validate(element, context + (str(index),))
                )
            except DecodeError as exc:
                issues.extend(exc.issues)

        if issues:
            raise DecodeError(issues)
        return decoded

    def encode(self, value: Any) -> Any:
        return [self.item.encode(v) for v in value]


def _props_name(props: Mapping[str, Schema]) -> str:
    inner = ", ".join(f"{k}: {v.name}" for k, v in props.items())
    return f"{{ {inner} }}"


@dataclass(frozen=True, eq=False, repr=False)
class InterfaceType(Schema):
    """Struct whose props are all required."""

    tag: ClassVar[SchemaTag] = SchemaTag.INTERFACE

    props: Mapping[str, Schema]

    def __post_init__(self) -> None:
        object.__setattr__(self, "props", MappingProxyType(dict(self.props)))

    @cached_property
    def name(self) -> str:
        return _props_name(self.props)

    def is_(self, value: Any) -> bool:
        return isinstance(value, Mapping) and all(
            prop.is_(value.get(key)) for key, prop in self.props.items()
        )

    def _validate_prop(
        self,
        key: str,
        prop: Schema,
        value: Mapping[str, Any],
        context: Context,
    ) -> Any:
        return prop.validate(value.get(key), context + (key,))

    def validate(self, value: Any, context: Context = ()) -> Any:
        if not isinstance(value, Mapping):
            failure(value, context, self.name)

        issues: List[ValidationIssue] = []
        decoded: Dict[str, Any] = dict(value)
        for key, prop in self.props.items():
            if key not in value and self.tag is SchemaTag.PARTIAL:
                continue
            try:
                decoded[key] = self._validate_prop(key, prop, value, context)
            except DecodeError as exc:
                issues.extend(exc.issues)

        if issues:
            raise DecodeError(issues)
        return decoded

    def encode(self, value: Any) -> Any:
        encoded = dict(value)
        for key, prop in self.props.items():
            if key in encoded:
                encoded[key] = prop.encode(encoded[key])
        return encoded


@dataclass(frozen=True, eq=False, repr=False)
class PartialType(InterfaceType):
    """Struct whose props are all optional (missing or None)."""

    tag: ClassVar[SchemaTag] = SchemaTag.PARTIAL

    @cached_property
    def name(self) -> str:
        return f"Partial<{_props_name(self.props)}>"

    def is_(self, value: Any) -> bool:
        return isinstance(value, Mapping) and all(
            value.get(key) is None or prop.is_(value[key])
            for key, prop in self.props.items()
        )

    def _validate_prop(
        self,
        key: str,
        prop: Schema,
        value: Mapping[str, Any],
        context: Context,
    ) -> Any:
        if value[key] is None:
            return None
        return prop.validate(value[key], context + (key,))


@dataclass(frozen=True, eq=False, repr=False)
class ExactType(Schema):
    """Wraps a struct and strips keys it does not declare."""

    tag: ClassVar[SchemaTag] = SchemaTag.EXACT

    inner: Schema

    def __post_init__(self) -> None:
        if self.inner.tag not in STRUCT_TAGS:
            raise TypeError(
                f"exact() expects a struct schema, got '{self.inner.tag.value}'"
            )

    @cached_property
    def name(self) -> str:
        return f"Exact<{self.inner.name}>"

    def _strip(self, value: Mapping[str, Any]) -> Dict[str, Any]:
        props = get_props(self)
        return {k: v for k, v in value.items() if k in props}

    def is_(self, value: Any) -> bool:
        return self.inner.is_(value)

    def validate(self, value: Any, context: Context = ()) -> Any:
        return self._strip(self.inner.validate(value, context))

    def encode(self, value: Any) -> Any:
        return self._strip(self.inner.encode(value))


@dataclass(frozen=True, eq=False, repr=False)
class DictionaryType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.DICTIONARY

    domain: Schema
    codomain: Schema

    @cached_property
    def name(self) -> str:
        return f"{{ [K in {self.domain.name}]: {self.codomain.name} }}"

    def is_(self, value: Any) -> bool:
        return isinstance(value, Mapping) and all(
            self.domain.is_(k) and self.codomain.is_(v)
            for k, v in value.items()
        )

    def validate(self, value: Any, context: Context = ()) -> Any:
        if not isinstance(value, Mapping):
            failure(value, context, self.name)

        issues: List[ValidationIssue] = []
        decoded: Dict[Any, Any] = {}
        for key, element in value.items():
            child = context + (str(key),)
            try:
                decoded[self.domain.validate(key, child)] = (
                    self.codomain.validate(element, child)
                )
            except DecodeError as exc:
                issues.extend(exc.issues)

        if issues:
            raise DecodeError(issues)
        return decoded

    def encode(self, value: Any) -> Any:
        return {
            self.domain.encode(k): self.codomain.encode(v)
            for k, v in value.items()
        }


@dataclass(frozen=True, eq=False, repr=False)
class TupleType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.TUPLE

    types: Tuple[Schema, ...]

    @cached_property
    def name(self) -> str:
        return "[" + ", ".join(t.name for t in self.types) + "]"

    def is_(self, value: Any) -> bool:
        return (
            isinstance(value, list)
            and len(value) == len(self.types)
            and all(t.is_(v) for t, v in zip(self.types, value))
        )

    def validate(self, value: Any, context: Context = ()) -> Any:
        if not isinstance(value, (list, tuple)) or len(value) != len(self.types):
            failure(value, context, self.name)

        issues: List[ValidationIssue] = []
        decoded: List[Any] = []
        for index, (member, element) in enumerate(zip(self.types, value)):
            try:
                decoded.append(member.validate(element, context + (str(index),)))
            except DecodeError as exc:
                issues.extend(exc.issues)

        if issues:
            raise DecodeError(issues)
        return decoded

    def encode(self, value: Any) -> Any:
        return [t.encode(v) for t, v in zip(self.types, value)]


@dataclass(frozen=True, eq=False, repr=False)
class UnionType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.UNION

    types: Tuple[Schema, ...]

    @cached_property
    def name(self) -> str:
        return "(" + " | ".join(t.name for t in self.types) + ")"

    def is_(self, value: Any) -> bool:
        return any(t.is_(value) for t in self.types)

    def validate(self, value: Any, context: Context = ()) -> Any:
        for member in self.types:
            try:
                return member.validate(value, context)
            except DecodeError:
                continue
        failure(value, context, self.name)

    def encode(self, value: Any) -> Any:
        for member in self.types:
            if member.is_(value):
                return member.encode(value)
        return value


@dataclass(frozen=True, eq=False, repr=False)
class IntersectionType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.INTERSECTION

    types: Tuple[Schema, ...]

    @cached_property
    def name(self) -> str:
        return "(" + " & ".join(t.name for t in self.types) + ")"

    def is_(self, value: Any) -> bool:
        return all(t.is_(value) for t in self.types)

    def validate(self, value: Any, context: Context = ()) -> Any:
        results = [member.validate(value, context) for member in self.types]
        if all(isinstance(r, Mapping) for r in results):
            merged: Dict[str, Any] = {}
            for result in results:
                merged.update(result)
            return merged
        return results[-1]


# ---------------------------------------------------------------------------
# Narrowing and branding
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False, repr=False)
class RefinementType(Schema):
    tag: ClassVar[SchemaTag] = SchemaTag.REFINEMENT

    inner: Schema
    predicate: Callable[[Any], bool]
    label: str = ""

    @cached_property
    def name(self) -> str:
        return self.label or f"Refinement<{self.inner.name}>"

    def is_(self, value: Any) -> bool:
        return self.inner.is_(value) and bool(self.predicate(value))

    def validate(self, value: Any, context: Context = ()) -> Any:
        decoded = self.inner.validate(value, context)
        if not self.predicate(decoded):
            failure(value, context, self.name)
        return decoded

    def encode(self, value: Any) -> Any:
        return self.inner.encode(value)


@dataclass(frozen=True, eq=False, repr=False)
class CustomType(Schema):
    """
    A named codec with user-supplied decode and encode functions.

    `tag` is the structural kind of the WIRE shape. The generator
    dispatches on `name` first, so a custom type may share the tag of a
    leaf scalar without being generated as one.
    """

    tag: SchemaTag
    label: str
    recognize: Callable[[Any], bool]
    decoder: Callable[[Any, Context], Any]
    encoder: Callable[[Any], Any]

    @property
    def name(self) -> str:
        return self.label

    def is_(self, value: Any) -> bool:
        return self.recognize(value)

    def validate(self, value: Any, context: Context = ()) -> Any:
        return self.decoder(value, context)

    def encode(self, value: Any) -> Any:
        return self.encoder(value)


# ---------------------------------------------------------------------------
# Props accessor
# ---------------------------------------------------------------------------


def get_props(node: Schema) -> Mapping[str, Schema]:
    """
    Return the field mapping of a struct node.

    Only interface, partial and exact nodes expose props; exact nodes are
    unwrapped until the underlying struct is found. Anything else raises
    UnsupportedSchemaError.
    """
    if isinstance(node, InterfaceType):
        return node.props
    if isinstance(node, ExactType):
        return get_props(node.inner)
    raise UnsupportedSchemaError(node.tag.value, node.name)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

string = StringType()
number = NumberType()
boolean = BooleanType()
unknown = UnknownType()
undefined = UndefinedType()
void = VoidType()
null = NullType()


def array(item: Schema) -> ArrayType:
    return ArrayType(item=item)


def type_(props: Mapping[str, Schema]) -> InterfaceType:
    return InterfaceType(props=props)


def partial(props: Mapping[str, Schema]) -> PartialType:
    return PartialType(props=props)


def exact(inner: Schema) -> ExactType:
    return ExactType(inner=inner)


def refinement(
    inner: Schema,
    predicate: Callable[[Any], bool],
    name: str = "",
) -> RefinementType:
    return RefinementType(inner=inner, predicate=predicate, label=name)


def literal(value: Any) -> LiteralType:
    return LiteralType(value=value)


def keyof(keys: Sequence[str] | Mapping[str, Any]) -> KeyofType:
    return KeyofType(keys=tuple(keys))


def record(domain: Schema, codomain: Schema) -> DictionaryType:
    return DictionaryType(domain=domain, codomain=codomain)


def tuple_(*types: Schema) -> TupleType:
    return TupleType(types=tuple(types))


def union(*types: Schema) -> UnionType:
    return UnionType(types=tuple(types))


def intersection(*types: Schema) -> IntersectionType:
    return IntersectionType(types=tuple(types))
