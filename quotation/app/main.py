"""
FastAPI entrypoint for the quotation service.

Configuration, logging and the arbitrary generator are wired once in the
lifespan hook and treated as immutable for the lifetime of the process.
The quotation schema is checked against the generator at startup, so an
unsupported schema kind fails the boot instead of a request.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from quotation.app.api.routes import router as quotation_router
from quotation.app.codecs.quotation import QuotationCodec
from quotation.app.config import QuotationSettings, get_settings
from quotation.app.generator.arbitrary import ArbitraryGenerator
from quotation.app.generator.random_source import FakerRandomSource

logger = logging.getLogger("quotation.main")


def get_app_version() -> str:
    try:
        return version("quotation-preview")
    except PackageNotFoundError:
        return "0.1.0"


def configure_logging(settings: QuotationSettings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def build_generator(settings: QuotationSettings) -> ArbitraryGenerator:
    return ArbitraryGenerator(
        FakerRandomSource(locale=settings.faker_locale),
        max_array_length=settings.max_array_length,
        refinement_max_attempts=settings.refinement_max_attempts,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Guarantees:
    - Fail-fast startup on invalid configuration
    - Fail-fast startup if the quotation schema is not generatable
    """
    # ------------------------------------------------------------------
    # Load and validate configuration (FAIL FAST)
    # ------------------------------------------------------------------
    try:
        settings = get_settings()
    except Exception:
        logger.exception("invalid_quotation_configuration")
        raise

    configure_logging(settings)

    logger.info(
        "quotation_startup_begin",
        extra={
            "service": "quotation",
            "version": get_app_version(),
        },
    )

    # ------------------------------------------------------------------
    # Generator wiring
    # ------------------------------------------------------------------
    generator = getattr(app.state, "generator", None) or build_generator(settings)
    generator.ensure_generatable(QuotationCodec)

    app.state.settings = settings
    app.state.generator = generator

    logger.info(
        "quotation_generator_ready",
        extra={
            "faker_locale": settings.faker_locale,
            "max_array_length": settings.max_array_length,
        },
    )

    try:
        yield
    finally:
        logger.info("quotation_shutdown")


def create_app() -> FastAPI:
    """
    Application factory for the quotation service.
    """
    app = FastAPI(
        title="quotation-preview",
        description="Renders quotations generated from the quotation schema",
        version=get_app_version(),
        lifespan=lifespan,
    )
    app.include_router(quotation_router)

    @app.get(
        "/health",
        summary="Service health check",
    )
    def health_check() -> JSONResponse:
        """Simple health check endpoint."""
        return JSONResponse(
            content={
                "status": "ok",
                "service": "quotation",
                "version": app.version,
            }
        )

    return app


app = create_app()
