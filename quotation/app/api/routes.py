"""
Quotation endpoints.

Each request generates a fresh fake quotation from the quotation schema
and decodes it through the same schema before anything is returned.

    GET /           HTML quotation page
    GET /quotation  rich-type JSON payload (SuperJSON)

If generation or decoding fails, the request fails as a whole with a
500. No partial page is ever rendered.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from quotation.app.api.responses import SuperJSONResponse
from quotation.app.config import QuotationSettings
from quotation.app.errors import QuotationError
from quotation.app.generator.arbitrary import ArbitraryGenerator
from quotation.app.rendering.page import render_quotation_page
from quotation.app.services.loader import load_quotation

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Shared loading
# ---------------------------------------------------------------------------


def _load_or_fail(request: Request) -> Dict[str, Any]:
    generator: ArbitraryGenerator = request.app.state.generator

    try:
        return load_quotation(generator)
    except QuotationError as exc:
        logger.exception("quotation_generation_failed")
        raise HTTPException(
            status_code=500,
            detail="Quotation generation failed. See service logs for details.",
        ) from exc


# ---------------------------------------------------------------------------
# GET /
# ---------------------------------------------------------------------------


@router.get(
    "/",
    response_class=HTMLResponse,
    summary="Render a generated quotation page",
)
def quotation_page(request: Request) -> HTMLResponse:
    settings: QuotationSettings = request.app.state.settings
    quotation = _load_or_fail(request)

    return HTMLResponse(
        render_quotation_page(
            quotation,
            currency_symbol=settings.currency_symbol,
        )
    )


# ---------------------------------------------------------------------------
# GET /quotation
# ---------------------------------------------------------------------------


@router.get(
    "/quotation",
    response_class=SuperJSONResponse,
    summary="Return a generated quotation as rich-type JSON",
)
def quotation_data(request: Request) -> SuperJSONResponse:
    """
    Return the decoded quotation.

    Dates and decimal amounts are annotated in the `meta` section so the
    consumer can revive them.
    """
    return SuperJSONResponse(_load_or_fail(request))
