"""Envelope model and parser — structured record carried inside a QR payload."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.types import JsonValue

from secure_qr_validator.errors import GateFailure, ValidationErrorKind

SIGNATURE_FIELD = "signature"

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class Envelope(BaseModel):
    """Parsed envelope. Pure data; no crypto or clock access.

    Unknown top-level fields are kept so that they stay covered by the
    signature.
    """

    model_config = ConfigDict(extra="allow", frozen=True, strict=True)

    data: dict[str, JsonValue]
    timestamp: int
    id: str
    version: int
    signature: str | None = None

    @property
    def generated_at(self) -> datetime:
        """Generation time as an aware UTC datetime (exact to the millisecond)."""
        return _EPOCH + timedelta(milliseconds=self.timestamp)

    def unsigned_fields(self) -> dict[str, JsonValue]:
        """Return a fresh mapping of every field except ``signature``."""
        return self.model_dump(mode="json", exclude={SIGNATURE_FIELD})


def _reject_constant(name: str) -> None:
    raise ValueError(f"non-standard JSON constant {name}")


def parse_envelope(text: str) -> Envelope:
    """Parse decoded text into a well-typed Envelope.

    Args:
        text: Decoded envelope JSON text.

    Returns:
        Validated envelope.

    Raises:
        GateFailure: ``format`` on unparsable text, non-object root, missing
            fields, or wrong field types.
    """
    try:
        payload = json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise GateFailure(
            ValidationErrorKind.FORMAT,
            f"Payload is not valid JSON: {exc}",
        ) from exc
    if not isinstance(payload, dict):
        raise GateFailure(
            ValidationErrorKind.FORMAT,
            f"Payload root must be an object, got {type(payload).__name__}",
        )
    try:
        return Envelope.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "<root>"
        raise GateFailure(
            ValidationErrorKind.FORMAT,
            f"Invalid envelope field '{field}': {first['msg']}",
            details={"field": field, "error_type": first["type"]},
        ) from exc
