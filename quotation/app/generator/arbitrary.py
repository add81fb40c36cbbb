"""
Schema-driven arbitrary value generator.

Given a schema node, produce a pseudo-random WIRE-shape value that the
same schema's decoder accepts. The generated value is decoder input, not
decoder output: a date node yields an ISO-8601 string, a currency node
yields a float.

Dispatch order (MUST be preserved):

    1. Named dispatch table, keyed by node.name. Branded types are
       resolved here regardless of their structural tag.
    2. Structural dispatch table, keyed by node.tag. Every SchemaTag has
       an entry; kinds without a generation strategy map to an explicit
       unsupported handler that raises UnsupportedSchemaError.

The generator holds no mutable state besides its random source.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, Mapping

from quotation.app.errors import RefinementExhaustedError, UnsupportedSchemaError
from quotation.app.generator.random_source import FakerRandomSource, RandomSource
from quotation.app.schema.branded import (
    CURRENCY_FROM_NUMBER_NAME,
    DATE_FROM_ISO_STRING_NAME,
    UUID_NAME,
)
from quotation.app.schema.decoder import is_valid
from quotation.app.schema.nodes import (
    ArrayType,
    CustomType,
    DictionaryType,
    ExactType,
    InterfaceType,
    KeyofType,
    LiteralType,
    RefinementType,
    Schema,
    SchemaTag,
    TupleType,
    UnionType,
    get_props,
)

logger = logging.getLogger(__name__)


NamedGenerator = Callable[[RandomSource], Any]

DEFAULT_MAX_ARRAY_LENGTH = 10
DEFAULT_REFINEMENT_MAX_ATTEMPTS = 100

# Inclusive upper bound for plain number leaves.
MAX_NUMBER = 99_999

UNSUPPORTED_TAGS = frozenset({SchemaTag.UNKNOWN, SchemaTag.INTERSECTION})

# Tags an unnamed custom node may fall back to: they read nothing but the tag.
CUSTOM_FALLBACK_TAGS = frozenset(
    {
        SchemaTag.STRING,
        SchemaTag.NUMBER,
        SchemaTag.BOOLEAN,
        SchemaTag.UNDEFINED,
        SchemaTag.VOID,
        SchemaTag.NULL,
    }
)


# ---------------------------------------------------------------------------
# Named dispatch (branded types)
# ---------------------------------------------------------------------------

DEFAULT_NAMED_GENERATORS: Mapping[str, NamedGenerator] = {
    DATE_FROM_ISO_STRING_NAME: lambda random: random.past_iso_datetime(),
    UUID_NAME: lambda random: random.uuid(),
    CURRENCY_FROM_NUMBER_NAME: lambda random: random.currency_amount(),
}


class ArbitraryGenerator:
    """
    Recursive arbitrary value generator.

    New branded types are added with register_named(); the structural
    table is closed over SchemaTag and never needs editing for them.
    """

    def __init__(
        self,
        random_source: RandomSource | None = None,
        *,
        max_array_length: int = DEFAULT_MAX_ARRAY_LENGTH,
        refinement_max_attempts: int = DEFAULT_REFINEMENT_MAX_ATTEMPTS,
    ) -> None:
        if max_array_length < 1:
            raise ValueError("max_array_length must be at least 1")
        if refinement_max_attempts < 1:
            raise ValueError("refinement_max_attempts must be at least 1")

        self._random: RandomSource = (
            random_source if random_source is not None else FakerRandomSource()
        )
        self._max_array_length = max_array_length
        self._refinement_max_attempts = refinement_max_attempts

        self._named: Dict[str, NamedGenerator] = dict(DEFAULT_NAMED_GENERATORS)
        self._structural: Dict[SchemaTag, Callable[[Schema], Any]] = {
            SchemaTag.STRING: self._string,
            SchemaTag.NUMBER: self._number,
            SchemaTag.BOOLEAN: self._boolean,
            SchemaTag.ARRAY: self._array,
            SchemaTag.INTERFACE: self._struct,
            SchemaTag.PARTIAL: self._struct,
            SchemaTag.EXACT: self._struct,
            SchemaTag.REFINEMENT: self._refinement,
            SchemaTag.UNDEFINED: self._none,
            SchemaTag.VOID: self._none,
            SchemaTag.NULL: self._none,
            SchemaTag.LITERAL: self._literal,
            SchemaTag.KEYOF: self._keyof,
            SchemaTag.DICTIONARY: self._dictionary,
            SchemaTag.TUPLE: self._tuple,
            SchemaTag.UNION: self._union,
            SchemaTag.UNKNOWN: self._unsupported,
            SchemaTag.INTERSECTION: self._unsupported,
        }

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_named(self, name: str, generator: NamedGenerator) -> None:
        """Route every node named `name` to `generator`."""
        self._named[name] = generator

    @property
    def named_dispatch(self) -> Mapping[str, NamedGenerator]:
        return dict(self._named)

    @property
    def structural_dispatch(self) -> Mapping[SchemaTag, Callable[[Schema], Any]]:
        return dict(self._structural)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def generate(self, node: Schema) -> Any:
        """Return a random wire-shape value conforming to `node`."""
        named = self._named.get(node.name)
        if named is not None:
            return named(self._random)

        if _is_shape_gap(node):
            raise UnsupportedSchemaError(node.tag.value, node.name)
        return self._structural[node.tag](node)

    # ------------------------------------------------------------------
    # Leaf scalars
    # ------------------------------------------------------------------

    def _string(self, node: Schema) -> str:
        return self._random.text()

    def _number(self, node: Schema) -> int:
        return self._random.integer(0, MAX_NUMBER)

    def _boolean(self, node: Schema) -> bool:
        return self._random.boolean()

    def _none(self, node: Schema) -> None:
        return None

    def _literal(self, node: LiteralType) -> Any:
        return node.value

    def _keyof(self, node: KeyofType) -> str:
        return self._random.choice(node.keys)

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    def _array(self, node: ArrayType) -> list:
        size = self._random.count(self._max_array_length)
        return [self.generate(node.item) for _ in range(size)]

    def _struct(self, node: Schema) -> dict:
        return {key: self.generate(prop) for key, prop in get_props(node).items()}

    def _dictionary(self, node: DictionaryType) -> dict:
        size = self._random.count(self._max_array_length)
        return {
            self.generate(node.domain): self.generate(node.codomain)
            for _ in range(size)
        }

    def _tuple(self, node: TupleType) -> list:
        return [self.generate(member) for member in node.types]

    def _union(self, node: UnionType) -> Any:
        index = self._random.integer(0, len(node.types) - 1)
        return self.generate(node.types[index])

    # ------------------------------------------------------------------
    # Narrowing
    # ------------------------------------------------------------------

    def _refinement(self, node: RefinementType) -> Any:
        for attempt in range(1, self._refinement_max_attempts + 1):
            candidate = self.generate(node.inner)
            if is_valid(node, candidate):
                return candidate
            logger.debug(
                "refinement_candidate_rejected name=%s attempt=%d",
                node.name,
                attempt,
            )
        raise RefinementExhaustedError(node.name, self._refinement_max_attempts)

    # ------------------------------------------------------------------
    # Gaps
    # ------------------------------------------------------------------

    def _unsupported(self, node: Schema) -> Any:
        raise UnsupportedSchemaError(node.tag.value, node.name)

    # ------------------------------------------------------------------
    # Pre-validation
    # ------------------------------------------------------------------

    def ensure_generatable(self, node: Schema) -> None:
        """
        Walk a schema and raise UnsupportedSchemaError for the first node
        this generator cannot produce values for.

        Intended for startup checks, before any request is served.
        """
        if node.name in self._named:
            return
        if node.tag in UNSUPPORTED_TAGS or _is_shape_gap(node):
            raise UnsupportedSchemaError(node.tag.value, node.name)
        for child in _children(node):
            self.ensure_generatable(child)


def _is_shape_gap(node: Schema) -> bool:
    """
    True for nodes whose tag has a strategy but whose shape cannot feed it:
    unnamed custom codecs over a container tag, and empty unions or keyofs.
    """
    if isinstance(node, CustomType):
        return node.tag not in CUSTOM_FALLBACK_TAGS
    if isinstance(node, UnionType):
        return not node.types
    if isinstance(node, KeyofType):
        return not node.keys
    return False


def _children(node: Schema) -> Iterator[Schema]:
    if isinstance(node, ArrayType):
        yield node.item
    elif isinstance(node, (InterfaceType, ExactType)):
        yield from get_props(node).values()
    elif isinstance(node, RefinementType):
        yield node.inner
    elif isinstance(node, DictionaryType):
        yield node.domain
        yield node.codomain
    elif isinstance(node, (TupleType, UnionType)):
        yield from node.types

