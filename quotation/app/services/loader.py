"""
Quotation loader.

Produces a fake quotation by generating a wire-shape value from the
quotation schema and decoding it through the same schema. Decoding both
confirms conformance and converts wire values into domain values.

Any failure propagates unchanged. Callers MUST treat it as fatal for the
request; no partial quotation is ever returned.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from quotation.app.generator.arbitrary import ArbitraryGenerator
from quotation.app.codecs.quotation import QuotationCodec
from quotation.app.schema.decoder import decode

logger = logging.getLogger(__name__)


def load_quotation(generator: ArbitraryGenerator) -> Dict[str, Any]:
    """Generate and decode a single quotation."""
    wire_value = generator.generate(QuotationCodec)
    quotation = decode(QuotationCodec, wire_value)

    logger.debug(
        "quotation_generated id=%s product_quotations=%d",
        quotation["id"],
        len(quotation["productQuotations"]),
    )
    return quotation
