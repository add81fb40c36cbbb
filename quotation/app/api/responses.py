"""
HTTP response helpers.

SuperJSONResponse ships rich values (datetimes, Decimals) so that the
consumer can revive them symmetrically.
"""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from quotation.app.serialization.superjson import superjson


class SuperJSONResponse(JSONResponse):
    """JSON response rendered through the process-wide SuperJSON instance."""

    media_type = "application/json; charset=utf-8"

    def render(self, content: Any) -> bytes:
        return superjson.stringify(content).encode("utf-8")
