"""
Quotation schema.

Wire shape: identifiers and dates are strings, amounts are numbers.
Domain shape: dates are datetimes, amounts are Decimals.
"""

from quotation.app.schema import nodes as t
from quotation.app.schema.branded import (
    CurrencyFromNumber,
    DateFromISOString,
    Uuid,
)


ProductQuotationCodec = t.type_(
    {
        "amountNetOfIof": CurrencyFromNumber,
        "totalAmount": CurrencyFromNumber,
        "iofAmount": CurrencyFromNumber,
    }
)

QuotationCodec = t.type_(
    {
        "id": Uuid,
        "createdAt": DateFromISOString,
        "productComboId": Uuid,
        "totalAmount": CurrencyFromNumber,
        "validUntil": DateFromISOString,
        "productQuotations": t.array(ProductQuotationCodec),
    }
)
