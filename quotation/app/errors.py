"""
Error hierarchy for the quotation service.

Two failure domains exist:

- decode failures, raised by the schema decoder when a wire value does
  not conform to its schema (DecodeError)
- generator gaps, raised by the arbitrary generator when it is asked for
  a schema kind it cannot produce values for (GenerationError family)

Both propagate to the HTTP layer, which fails the whole request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence

from pydantic import ValidationError


class QuotationError(RuntimeError):
    """Base class for all quotation service errors."""


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationIssue:
    """
    A single decode failure.

    `path` is the dotted location of the offending value relative to the
    schema root (empty string for the root itself).
    """

    value: Any
    path: str
    expected: str
    message: str | None = None

    def describe(self) -> str:
        location = self.path or "<root>"
        detail = self.message or f"expected {self.expected}"
        return f"{location}: {detail} (got {self.value!r})"


class DecodeError(QuotationError):
    """Raised when a value does not conform to its schema."""

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues: List[ValidationIssue] = list(issues)
        super().__init__(
            "; ".join(issue.describe() for issue in self.issues)
            or "decode failed"
        )

    @classmethod
    def from_validation_error(
        cls,
        exc: ValidationError,
        path: str,
        expected: str,
        message: str | None = None,
    ) -> "DecodeError":
        """Translate a pydantic ValidationError raised for the value at `path`."""
        return cls(
            [
                ValidationIssue(
                    value=error.get("input"),
                    path=path,
                    expected=expected,
                    message=message or error["msg"],
                )
                for error in exc.errors(include_url=False)
            ]
        )


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class GenerationError(QuotationError):
    """Raised when an arbitrary value cannot be produced for a schema."""


class UnsupportedSchemaError(GenerationError):
    """Raised for schema kinds the generator does not cover."""

    def __init__(self, tag: str, name: str) -> None:
        self.tag = tag
        self.name = name
        super().__init__(
            f"Unsupported schema kind '{tag}' (schema '{name}')"
        )


class RefinementExhaustedError(GenerationError):
    """Raised when no candidate satisfied a refinement predicate."""

    def __init__(self, name: str, attempts: int) -> None:
        self.name = name
        self.attempts = attempts
        super().__init__(
            f"Refinement '{name}' rejected {attempts} generated candidates"
        )
