from .nodes import (
    Schema,
    SchemaTag,
    STRUCT_TAGS,
    get_props,
)
from .branded import CurrencyFromNumber, DateFromISOString, Uuid
from .decoder import decode, encode, is_valid

__all__ = [
    "Schema",
    "SchemaTag",
    "STRUCT_TAGS",
    "get_props",
    "CurrencyFromNumber",
    "DateFromISOString",
    "Uuid",
    "decode",
    "encode",
    "is_valid",
]
