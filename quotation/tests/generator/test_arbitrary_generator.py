"""
Arbitrary generator contract tests.

Covers:
- named dispatch precedence over structural dispatch
- array size bounds
- struct field completeness and exact unwrapping
- wire/domain asymmetry of the date codec
- bounded refinement retries
- explicit gaps for unsupported kinds and unusable shapes
"""

from datetime import datetime
from decimal import Decimal

import pytest

from quotation.app.errors import RefinementExhaustedError, UnsupportedSchemaError
from quotation.app.generator.arbitrary import (
    MAX_NUMBER,
    UNSUPPORTED_TAGS,
    ArbitraryGenerator,
)
from quotation.app.schema import nodes as t
from quotation.app.schema.branded import (
    CURRENCY_FROM_NUMBER_NAME,
    CurrencyFromNumber,
    DateFromISOString,
    Uuid,
)
from quotation.app.schema.decoder import decode, encode, is_valid
from quotation.tests.generator.stubs import (
    FIXED_CURRENCY,
    FIXED_DATE_WIRE,
    FIXED_NUMBER,
    FIXED_UUID,
    StubRandomSource,
)


# ---------------------------------------------------------------------------
# Dispatch tables
# ---------------------------------------------------------------------------


def test_structural_table_covers_every_tag():
    generator = ArbitraryGenerator(StubRandomSource())

    assert set(generator.structural_dispatch) == set(t.SchemaTag)


def test_named_table_holds_reserved_names():
    generator = ArbitraryGenerator(StubRandomSource())

    assert set(generator.named_dispatch) == {
        "date-from-iso-string",
        "uuid",
        "currency-from-number",
    }


def test_named_dispatch_takes_precedence_over_number_tag():
    generator = ArbitraryGenerator(StubRandomSource())
    disguised = t.CustomType(
        tag=t.SchemaTag.NUMBER,
        label=CURRENCY_FROM_NUMBER_NAME,
        recognize=lambda value: isinstance(value, Decimal),
        decoder=lambda value, context: t.number.validate(value, context),
        encoder=lambda value: value,
    )

    value = generator.generate(disguised)

    assert value == FIXED_CURRENCY
    assert value != FIXED_NUMBER
    assert isinstance(decode(CurrencyFromNumber, value), Decimal)


def test_currency_amount_has_two_decimal_precision(seeded_generator):
    for _ in range(200):
        value = seeded_generator.generate(CurrencyFromNumber)

        assert isinstance(value, float)
        assert round(value, 2) == value
        assert decode(CurrencyFromNumber, value) == Decimal(str(value))


def test_uuid_generation_yields_version_4_shape(seeded_generator):
    value = seeded_generator.generate(Uuid)

    assert len(value) == 36
    assert value[14] == "4"
    assert decode(Uuid, value) == value


def test_register_named_routes_custom_brand():
    generator = ArbitraryGenerator(StubRandomSource())
    sku = t.CustomType(
        tag=t.SchemaTag.STRING,
        label="sku",
        recognize=lambda value: isinstance(value, str),
        decoder=lambda value, context: t.string.validate(value, context),
        encoder=lambda value: value,
    )

    generator.register_named("sku", lambda random: "SKU-" + random.text())

    assert generator.generate(sku) == "SKU-stub-text"


# ---------------------------------------------------------------------------
# Leaves
# ---------------------------------------------------------------------------


def test_leaf_scalars(seeded_generator):
    assert isinstance(seeded_generator.generate(t.string), str)
    assert isinstance(seeded_generator.generate(t.boolean), bool)

    number = seeded_generator.generate(t.number)
    assert isinstance(number, int) and not isinstance(number, bool)


# ---------------------------------------------------------------------------
# Arrays
# ---------------------------------------------------------------------------


def test_array_lengths_stay_in_range_and_include_empty(seeded_generator):
    schema = t.array(t.string)

    lengths = [len(seeded_generator.generate(schema)) for _ in range(1000)]

    assert all(0 <= n < 10 for n in lengths)
    assert 0 in lengths


def test_array_elements_come_from_item_node():
    generator = ArbitraryGenerator(StubRandomSource(count=3))

    assert generator.generate(t.array(Uuid)) == [FIXED_UUID] * 3


def test_max_array_length_is_configurable():
    generator = ArbitraryGenerator(StubRandomSource(count=50), max_array_length=5)

    assert len(generator.generate(t.array(t.number))) == 4


def test_invalid_bounds_are_rejected():
    with pytest.raises(ValueError):
        ArbitraryGenerator(StubRandomSource(), max_array_length=0)
    with pytest.raises(ValueError):
        ArbitraryGenerator(StubRandomSource(), refinement_max_attempts=0)


# ---------------------------------------------------------------------------
# Structs
# ---------------------------------------------------------------------------


def test_struct_has_exactly_declared_fields(seeded_generator):
    value = seeded_generator.generate(t.type_({"a": t.string, "b": t.number}))

    assert set(value) == {"a", "b"}
    assert isinstance(value["a"], str)
    assert isinstance(value["b"], int)


def test_struct_preserves_prop_order(seeded_generator):
    value = seeded_generator.generate(t.type_({"z": t.string, "a": t.string}))

    assert list(value) == ["z", "a"]


def test_partial_generates_every_field(seeded_generator):
    value = seeded_generator.generate(t.partial({"a": t.string, "b": t.boolean}))

    assert set(value) == {"a", "b"}


def test_exact_unwraps_one_level(seeded_generator):
    value = seeded_generator.generate(t.exact(t.type_({"x": t.boolean})))

    assert list(value) == ["x"]
    assert isinstance(value["x"], bool)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def test_date_generates_wire_string_not_domain_value():
    generator = ArbitraryGenerator(StubRandomSource())

    wire = generator.generate(DateFromISOString)
    decoded = decode(DateFromISOString, wire)
    reencoded = encode(DateFromISOString, decoded)

    assert wire == FIXED_DATE_WIRE
    assert isinstance(decoded, datetime)
    assert reencoded == "2025-03-04"
    assert reencoded != wire


def test_generated_dates_are_in_the_past(seeded_generator):
    wire = seeded_generator.generate(DateFromISOString)
    decoded = decode(DateFromISOString, wire)

    assert wire.endswith("Z")
    assert "T" in wire
    assert decoded <= datetime.now(decoded.tzinfo)


# ---------------------------------------------------------------------------
# Refinements
# ---------------------------------------------------------------------------


def test_refinement_retries_until_predicate_holds(seeded_generator):
    even = t.refinement(t.number, lambda n: n % 2 == 0, "Even")

    for _ in range(50):
        assert seeded_generator.generate(even) % 2 == 0


def test_refinement_over_branded_type_sees_domain_value(seeded_generator):
    positive = t.refinement(
        CurrencyFromNumber,
        lambda amount: amount > Decimal("1"),
        "PositiveAmount",
    )

    value = seeded_generator.generate(positive)

    assert decode(positive, value) > Decimal("1")


def test_refinement_exhaustion_raises():
    generator = ArbitraryGenerator(StubRandomSource(), refinement_max_attempts=5)
    never = t.refinement(t.string, lambda s: False, "Never")

    with pytest.raises(RefinementExhaustedError) as exc_info:
        generator.generate(never)

    assert exc_info.value.attempts == 5
    assert exc_info.value.name == "Never"


# ---------------------------------------------------------------------------
# Remaining combinators
# ---------------------------------------------------------------------------


def test_constant_kinds():
    generator = ArbitraryGenerator(StubRandomSource())

    assert generator.generate(t.null) is None
    assert generator.generate(t.undefined) is None
    assert generator.generate(t.void) is None
    assert generator.generate(t.literal("fixed")) == "fixed"
    assert generator.generate(t.keyof(["a", "b"])) == "a"


def test_tuple_union_and_dictionary_round_trip(seeded_generator):
    schemas = [
        t.tuple_(t.string, CurrencyFromNumber, t.boolean),
        t.union(t.null, DateFromISOString, t.number),
        t.record(t.string, t.array(t.number)),
    ]

    for schema in schemas:
        for _ in range(20):
            assert is_valid(schema, seeded_generator.generate(schema))


@pytest.mark.parametrize(
    "schema",
    [
        t.unknown,
        t.intersection(t.type_({"a": t.string}), t.type_({"b": t.number})),
    ],
)
def test_unsupported_kinds_raise(schema):
    generator = ArbitraryGenerator(StubRandomSource())

    assert schema.tag in UNSUPPORTED_TAGS
    with pytest.raises(UnsupportedSchemaError) as exc_info:
        generator.generate(schema)

    assert exc_info.value.tag == schema.tag.value


def test_ensure_generatable_finds_nested_gaps():
    generator = ArbitraryGenerator(StubRandomSource())
    schema = t.type_({"items": t.array(t.partial({"meta": t.unknown}))})

    with pytest.raises(UnsupportedSchemaError):
        generator.ensure_generatable(schema)


def test_ensure_generatable_skips_named_nodes():
    generator = ArbitraryGenerator(StubRandomSource())

    generator.ensure_generatable(
        t.type_({"id": Uuid, "when": DateFromISOString, "tags": t.array(t.string)})
    )


def _unregistered_custom(tag):
    return t.CustomType(
        tag=tag,
        label="Money",
        recognize=lambda value: True,
        decoder=lambda value, context: value,
        encoder=lambda value: value,
    )


@pytest.mark.parametrize(
    "tag",
    [
        t.SchemaTag.ARRAY,
        t.SchemaTag.INTERFACE,
        t.SchemaTag.EXACT,
        t.SchemaTag.REFINEMENT,
        t.SchemaTag.UNION,
        t.SchemaTag.LITERAL,
    ],
)
def test_unregistered_custom_container_is_rejected(tag):
    generator = ArbitraryGenerator(StubRandomSource())
    schema = _unregistered_custom(tag)

    with pytest.raises(UnsupportedSchemaError) as exc_info:
        generator.ensure_generatable(t.type_({"price": schema}))
    assert exc_info.value.name == "Money"

    with pytest.raises(UnsupportedSchemaError):
        generator.generate(schema)


def test_unregistered_custom_leaf_falls_back_to_its_tag():
    generator = ArbitraryGenerator(StubRandomSource())
    schema = _unregistered_custom(t.SchemaTag.NUMBER)

    generator.ensure_generatable(schema)

    assert generator.generate(schema) == FIXED_NUMBER


def test_registered_custom_container_uses_named_generator():
    generator = ArbitraryGenerator(StubRandomSource())
    schema = _unregistered_custom(t.SchemaTag.ARRAY)
    generator.register_named("Money", lambda random: [random.currency_amount()])

    generator.ensure_generatable(schema)

    assert generator.generate(schema) == [FIXED_CURRENCY]


@pytest.mark.parametrize("schema", [t.union(), t.keyof([])])
def test_empty_choice_kinds_are_rejected(schema):
    generator = ArbitraryGenerator(StubRandomSource())

    with pytest.raises(UnsupportedSchemaError):
        generator.ensure_generatable(t.array(schema))
    with pytest.raises(UnsupportedSchemaError):
        generator.generate(schema)


def test_number_range_does_not_depend_on_the_source():
    seen = []

    class RecordingSource(StubRandomSource):
        def integer(self, min_value, max_value):
            seen.append((min_value, max_value))
            return super().integer(min_value, max_value)

    ArbitraryGenerator(RecordingSource()).generate(t.number)

    assert seen == [(0, MAX_NUMBER)]


def test_refinement_over_nested_branded_struct(seeded_generator):
    line = t.type_({"total": CurrencyFromNumber, "at": DateFromISOString})
    dated = t.refinement(
        t.array(line),
        lambda lines: all(isinstance(item["at"], datetime) for item in lines),
        "DatedLines",
    )

    for _ in range(20):
        decoded = decode(dated, seeded_generator.generate(dated))

        assert all(isinstance(item["total"], Decimal) for item in decoded)


def test_node_names_are_computed_once():
    leaf = t.type_({"a": t.string})
    schema = t.array(leaf)

    assert schema.name == "Array<{ a: string }>"
    assert "name" in vars(schema)
    assert "name" in vars(leaf)
