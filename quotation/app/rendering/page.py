"""
Quotation page rendering.

Presentation only: takes an already decoded quotation (domain shape) and
renders it to HTML with Jinja2. No generation or decoding happens here.
"""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_EVEN, Decimal
from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

TEMPLATE_ROOT = Path(__file__).resolve().parent.parent / "templates"

PAGE_TEMPLATE = "quotation.html.jinja"
DISPLAY_DATE_FORMAT = "%d %b %Y"

_CENT = Decimal("0.01")


def format_currency(amount: Decimal, symbol: str = "R$") -> str:
    """
    Format an amount the pt-BR way: "R$ 1.234,56".
    """
    quantized = Decimal(amount).quantize(_CENT, rounding=ROUND_HALF_EVEN)
    sign = "-" if quantized < 0 else ""
    grouped = f"{abs(quantized):,.2f}"
    localized = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {localized}"


def format_date(value: datetime) -> str:
    return value.strftime(DISPLAY_DATE_FORMAT)


def _build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_ROOT),
        undefined=StrictUndefined,
        autoescape=select_autoescape(["html", "jinja"]),
    )
    env.filters["currency"] = format_currency
    env.filters["display_date"] = format_date
    return env


_ENV = _build_environment()


def render_quotation_page(
    quotation: Mapping[str, Any],
    *,
    currency_symbol: str = "R$",
) -> str:
    template = _ENV.get_template(PAGE_TEMPLATE)
    return template.render(
        quotation=quotation,
        currency_symbol=currency_symbol,
    )
