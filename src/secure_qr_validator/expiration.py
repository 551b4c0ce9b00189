"""Expiration policy: generation time vs. configured validity window."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from secure_qr_validator.config import ValidatorConfig
from secure_qr_validator.envelope import Envelope
from secure_qr_validator.errors import GateFailure, ValidationErrorKind

type Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


class ExpirationPolicy:
    """Rejects envelopes older than ``validity_duration``."""

    def __init__(self, config: ValidatorConfig, *, clock: Clock = utc_now) -> None:
        self._enabled = config.enable_expiration_check
        self._validity = config.validity_duration
        self._clock = clock

    def age(self, envelope: Envelope) -> timedelta:
        """Return how long ago the envelope was generated (negative if future)."""
        return self._clock() - envelope.generated_at

    def check(self, envelope: Envelope) -> None:
        """Raise ``expired`` when the envelope is past its validity window.

        Args:
            envelope: Parsed envelope.

        Raises:
            GateFailure: ``expired`` when age exceeds the validity window.
        """
        if not self._enabled:
            return
        age = self.age(envelope)
        if age > self._validity:
            raise GateFailure(
                ValidationErrorKind.EXPIRED,
                f"QR code expired: generated {age.total_seconds():.3f}s ago, "
                f"valid for {self._validity.total_seconds():.3f}s",
                details={
                    "age_ms": age // timedelta(milliseconds=1),
                    "validity_ms": self._validity // timedelta(milliseconds=1),
                },
            )
