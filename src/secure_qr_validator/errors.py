"""Deterministic validation error contracts."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from pydantic.types import JsonValue


class ValidationErrorKind(StrEnum):
    """Stable error kinds, one per pipeline gate plus a catch-all."""

    DECRYPTION = "decryption"
    DECODING = "decoding"
    FORMAT = "format"
    VERSION = "version"
    SIGNATURE = "signature"
    EXPIRED = "expired"
    BUSINESS_RULE = "business_rule"
    UNKNOWN = "unknown"


class ValidationError(BaseModel):
    """Detailed description of why a payload was rejected.

    This is returned inside a result, never raised.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ValidationErrorKind
    message: str
    details: dict[str, JsonValue] | None = None

    def __str__(self) -> str:
        return self.message


class GateFailure(RuntimeError):
    """Gate rejection with stable kind, converted to a result by the pipeline."""

    def __init__(
        self,
        kind: ValidationErrorKind,
        message: str,
        *,
        details: dict[str, JsonValue] | None = None,
    ) -> None:
        """Create gate failure.

        Args:
            kind: Stable error kind.
            message: Human-readable description of the offending condition.
            details: Optional structured payload for diagnostics.
        """
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    def to_error(self) -> ValidationError:
        """Return the result-side error model for this failure."""
        return ValidationError(kind=self.kind, message=self.message, details=self.details)
