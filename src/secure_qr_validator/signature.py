"""HMAC-SHA256 signature verification over the canonical envelope."""

from __future__ import annotations

import hmac

from secure_qr_validator.canonical import sign_payload
from secure_qr_validator.config import ValidatorConfig
from secure_qr_validator.envelope import Envelope
from secure_qr_validator.errors import GateFailure, ValidationErrorKind


class SignatureVerifier:
    """Recomputes the envelope signature and compares it to the supplied one."""

    def __init__(self, config: ValidatorConfig) -> None:
        self._enabled = config.enable_signature
        self._secret_key = config.secret_key

    def expected_signature(self, envelope: Envelope) -> str:
        """Return the hex signature an issuer sharing our secret would produce.

        Args:
            envelope: Parsed envelope; its ``signature`` field is ignored.

        Returns:
            Hex-encoded HMAC-SHA256 digest of the canonical unsigned envelope.
        """
        if self._secret_key is None:
            raise ValueError("Signature computation requires a secret_key.")
        return sign_payload(self._secret_key, envelope.unsigned_fields())

    def verify(self, envelope: Envelope) -> None:
        """Pass silently or raise when the signature is missing or wrong.

        Args:
            envelope: Parsed envelope.

        Raises:
            GateFailure: ``signature`` when missing or mismatched.
        """
        if not self._enabled:
            return
        if envelope.signature is None:
            raise GateFailure(
                ValidationErrorKind.SIGNATURE,
                f"Missing signature for payload {envelope.id!r}",
                details={"id": envelope.id},
            )
        expected = self.expected_signature(envelope)
        if not hmac.compare_digest(
            envelope.signature.encode("utf-8"), expected.encode("utf-8")
        ):
            raise GateFailure(
                ValidationErrorKind.SIGNATURE,
                f"Invalid signature for payload {envelope.id!r}",
                details={"id": envelope.id},
            )
