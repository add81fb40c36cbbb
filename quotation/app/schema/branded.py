"""
Custom branded codecs.

Each codec pairs a reserved identity name with recognize / decode /
encode functions. The generator keys its named dispatch table on these
names, so they MUST remain stable.

    uuid                  wire: str    domain: str
    date-from-iso-string  wire: str    domain: datetime
    currency-from-number  wire: number domain: Decimal

NOTE:
DateFromISOString decodes any ISO-8601 string but encodes a date only
("%Y-%m-%d"). Re-encoding a decoded date-time therefore drops the
time-of-day component. This asymmetry is long-standing behaviour that
consumers of the encoded form rely on.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Final

from pydantic import Field, TypeAdapter

from quotation.app.schema.nodes import (
    Context,
    CustomType,
    SchemaTag,
    check,
    number,
    string,
)

UUID_NAME: Final = "uuid"
DATE_FROM_ISO_STRING_NAME: Final = "date-from-iso-string"
CURRENCY_FROM_NUMBER_NAME: Final = "currency-from-number"

DATE_ENCODE_FORMAT: Final = "%Y-%m-%d"


# ---------------------------------------------------------------------------
# Uuid
# ---------------------------------------------------------------------------


def _decode_uuid(value: Any, context: Context) -> str:
    # Generic string validation only; the format is not checked.
    return string.validate(value, context)


Uuid = CustomType(
    tag=SchemaTag.STRING,
    label=UUID_NAME,
    recognize=lambda value: isinstance(value, str),
    decoder=_decode_uuid,
    encoder=lambda value: value,
)


# ---------------------------------------------------------------------------
# DateFromISOString
# ---------------------------------------------------------------------------


_ISO_DATETIME = TypeAdapter(datetime)


def _decode_date(value: Any, context: Context) -> datetime:
    raw = string.validate(value, context)
    return check(
        _ISO_DATETIME,
        raw,
        context,
        DATE_FROM_ISO_STRING_NAME,
        message="string is not a valid date",
    )


def _encode_date(value: datetime) -> str:
    return value.strftime(DATE_ENCODE_FORMAT)


DateFromISOString = CustomType(
    tag=SchemaTag.STRING,
    label=DATE_FROM_ISO_STRING_NAME,
    recognize=lambda value: isinstance(value, datetime),
    decoder=_decode_date,
    encoder=_encode_date,
)


# ---------------------------------------------------------------------------
# CurrencyFromNumber
# ---------------------------------------------------------------------------


_FINITE_DECIMAL = TypeAdapter(Annotated[Decimal, Field(allow_inf_nan=False)])


def _decode_currency(value: Any, context: Context) -> Decimal:
    raw = number.validate(value, context)
    # Built from the shortest repr of the number, not its binary expansion.
    return check(
        _FINITE_DECIMAL,
        str(raw),
        context,
        CURRENCY_FROM_NUMBER_NAME,
        message="number does not construct a valid decimal",
    )


CurrencyFromNumber = CustomType(
    tag=SchemaTag.NUMBER,
    label=CURRENCY_FROM_NUMBER_NAME,
    recognize=lambda value: isinstance(value, Decimal),
    decoder=_decode_currency,
    # Precision loss is accepted on the wire.
    encoder=lambda value: float(value),
)
