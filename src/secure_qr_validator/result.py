"""Validation outcomes: valid, invalid, or expired-with-data."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal, TypeVar, overload

from pydantic import BaseModel, ConfigDict, Field
from pydantic.types import JsonValue

from secure_qr_validator.errors import ValidationError, ValidationErrorKind

T = TypeVar("T")


class ValidationStatus(StrEnum):
    """Result discriminator."""

    VALID = "valid"
    INVALID = "invalid"
    EXPIRED = "expired"


def _coerce(value: JsonValue, expected_type: type[T]) -> T | None:
    """Coerce a business value to ``expected_type``; ``None`` on mismatch.

    Unconvertible values (ints beyond float range or the int-to-str digit
    limit, parameterized generics such as ``list[str]``) count as a mismatch.
    """
    try:
        if expected_type is str:
            return value if isinstance(value, str) else str(value)  # type: ignore[return-value]
        if expected_type in (int, float):
            # bool is an int subclass but never a number here
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return None
            return expected_type(value)  # type: ignore[call-arg]
        if isinstance(value, bool) and expected_type is not bool:
            return None
        if isinstance(value, expected_type):
            return value
    except (OverflowError, TypeError, ValueError):
        return None
    return None


class _ResultBase(BaseModel):
    """Shared read-only accessor API over every result shape."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def is_valid(self) -> bool:
        return False

    @property
    def payload_data(self) -> dict[str, JsonValue] | None:
        """Extracted business data, when this shape carries any."""
        return None

    @property
    def failure(self) -> ValidationError | None:
        """Validation error, when this shape carries one."""
        return None

    @property
    def is_expired(self) -> bool:
        return self.has_error(ValidationErrorKind.EXPIRED)

    def has_error(self, kind: ValidationErrorKind) -> bool:
        """Return True when the result failed with ``kind``."""
        error = self.failure
        return error is not None and error.kind == kind

    def has_data(self, key: str) -> bool:
        """Return True when extracted data contains ``key``."""
        data = self.payload_data
        return data is not None and key in data

    @overload
    def get_data(self, key: str, expected_type: None = None, default: Any = None) -> Any: ...

    @overload
    def get_data(
        self, key: str, expected_type: type[T], default: T | None = None
    ) -> T | None: ...

    def get_data(
        self,
        key: str,
        expected_type: type[Any] | None = None,
        default: Any = None,
    ) -> Any:
        """Return one business value, coerced to ``expected_type`` when given.

        Coercions: numbers convert between ``int`` and ``float``, any value
        stringifies for ``str``. Missing, null, or non-convertible values
        return ``default``.

        Example: ``result.get_data("age", int, default=0)``.

        Args:
            key: Business data key.
            expected_type: Requested Python type, or None for the raw value.
            default: Fallback value.

        Returns:
            Typed value or ``default``.
        """
        data = self.payload_data
        if data is None:
            return default
        value = data.get(key)
        if value is None:
            return default
        if expected_type is None:
            return value
        coerced = _coerce(value, expected_type)
        return default if coerced is None else coerced

    def has_all_data(self, keys: Iterable[str]) -> bool:
        """Return True when every key is present."""
        return all(self.has_data(key) for key in keys)

    def has_any_data(self, keys: Iterable[str]) -> bool:
        """Return True when at least one key is present."""
        return any(self.has_data(key) for key in keys)


class ValidResult(_ResultBase):
    """Payload passed every gate."""

    status: Literal["valid"] = "valid"
    data: dict[str, JsonValue]
    generated_at: datetime
    id: str

    @property
    def is_valid(self) -> bool:
        return True

    @property
    def payload_data(self) -> dict[str, JsonValue] | None:
        return self.data


class InvalidResult(_ResultBase):
    """Payload rejected; no data is exposed."""

    status: Literal["invalid"] = "invalid"
    error: ValidationError

    @property
    def failure(self) -> ValidationError | None:
        return self.error


class ExpiredResult(_ResultBase):
    """Authentic payload past its validity window; data stays readable."""

    status: Literal["expired"] = "expired"
    error: ValidationError
    data: dict[str, JsonValue]
    generated_at: datetime
    id: str

    @property
    def payload_data(self) -> dict[str, JsonValue] | None:
        return self.data

    @property
    def failure(self) -> ValidationError | None:
        return self.error


type ValidationResult = Annotated[
    ValidResult | InvalidResult | ExpiredResult, Field(discriminator="status")
]
