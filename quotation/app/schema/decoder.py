"""
Schema decoder entry points.

Decoding is delegated entirely to the schema nodes themselves; this
module only fixes the root context and gives callers a stable API.
"""

from __future__ import annotations

import logging
from typing import Any

from quotation.app.errors import DecodeError
from quotation.app.schema.nodes import Schema

logger = logging.getLogger(__name__)


def decode(schema: Schema, value: Any) -> Any:
    """
    Validate a wire-shape value and convert it to domain shape.

    Raises DecodeError carrying every issue found. No local recovery is
    attempted.
    """
    try:
        return schema.validate(value, ())
    except DecodeError as exc:
        logger.debug(
            "decode_failed schema=%s issues=%d",
            schema.name,
            len(exc.issues),
        )
        raise


def encode(schema: Schema, value: Any) -> Any:
    """Convert a domain-shape value back to its wire shape."""
    return schema.encode(value)


def is_valid(schema: Schema, value: Any) -> bool:
    try:
        schema.validate(value, ())
    except DecodeError:
        return False
    return True
