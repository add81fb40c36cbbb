"""
Centralized configuration for the quotation service.

Pydantic v2 settings management with strict validation and fast failure
on invalid configuration. Values are read once from the environment
(QUOTATION_* variables) and are immutable for the process lifetime.
"""

from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class QuotationSettings(BaseSettings):
    """
    Application settings parsed from the environment.
    """

    # ---------------------------------------------------------------------
    # Arbitrary value generation
    # ---------------------------------------------------------------------

    faker_locale: Annotated[
        str,
        Field(
            default="en_US",
            min_length=2,
            description="Locale passed to Faker for generated strings",
        ),
    ]

    max_array_length: Annotated[
        int,
        Field(
            default=10,
            ge=1,
            le=1000,
            description=(
                "Exclusive upper bound on generated array and "
                "dictionary sizes"
            ),
        ),
    ]

    refinement_max_attempts: Annotated[
        int,
        Field(
            default=100,
            ge=1,
            description=(
                "Candidates generated for a refinement before giving up"
            ),
        ),
    ]

    # ---------------------------------------------------------------------
    # Presentation
    # ---------------------------------------------------------------------

    currency_symbol: Annotated[
        str,
        Field(
            default="R$",
            description="Currency symbol rendered on the quotation page",
        ),
    ]

    # ---------------------------------------------------------------------
    # Logging
    # ---------------------------------------------------------------------

    log_level: Annotated[
        str,
        Field(default="INFO", description="Root log level"),
    ]

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.upper()
        if level not in allowed:
            raise ValueError(
                f"Unsupported log_level '{v}'. "
                f"Allowed values: {sorted(allowed)}"
            )
        return level

    model_config = SettingsConfigDict(
        env_prefix="QUOTATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> QuotationSettings:
    """
    Dependency injection provider for application settings.
    """
    return QuotationSettings()
