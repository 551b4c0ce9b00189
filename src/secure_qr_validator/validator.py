"""Validation pipeline: fixed gate sequence from scanned text to typed result."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import StrEnum

from secure_qr_validator.codec import PayloadCodec
from secure_qr_validator.config import ValidatorConfig
from secure_qr_validator.envelope import Envelope, parse_envelope
from secure_qr_validator.errors import GateFailure, ValidationError, ValidationErrorKind
from secure_qr_validator.expiration import Clock, ExpirationPolicy, utc_now
from secure_qr_validator.result import (
    ExpiredResult,
    InvalidResult,
    ValidationResult,
    ValidResult,
)
from secure_qr_validator.rules import CompositeRule, RuleFunction, ValidationRule, as_rule
from secure_qr_validator.signature import SignatureVerifier

_LOGGER = logging.getLogger(__name__)


class ValidationStage(StrEnum):
    """Pipeline gates in execution order."""

    DECODE = "decode"
    PARSE = "parse"
    VERSION_CHECK = "version_check"
    SIGNATURE_CHECK = "signature_check"
    EXPIRATION_CHECK = "expiration_check"
    BUSINESS_RULES = "business_rules"


class SecureQRValidator:
    """Validates scanned QR payloads against one immutable configuration.

    Instances hold no per-call state and may be shared across threads as long
    as business rules are pure.
    """

    def __init__(
        self,
        config: ValidatorConfig,
        *,
        business_rules: Sequence[ValidationRule | RuleFunction] = (),
        clock: Clock = utc_now,
    ) -> None:
        """Build gate collaborators for config.

        Args:
            config: Validated configuration.
            business_rules: Rules applied in order to the business data.
            clock: Current-time source used by the expiration gate.
        """
        self._config = config
        self._codec = PayloadCodec(config)
        self._verifier = SignatureVerifier(config)
        self._expiration = ExpirationPolicy(config, clock=clock)
        self._rules = CompositeRule(tuple(as_rule(rule) for rule in business_rules))

    @property
    def config(self) -> ValidatorConfig:
        return self._config

    def validate(self, encoded_payload: str) -> ValidationResult:
        """Run every gate on one payload and return a typed outcome.

        Never raises for data problems: gate rejections become
        ``InvalidResult``, expiration becomes ``ExpiredResult``, and any
        unanticipated exception becomes ``InvalidResult`` of kind ``unknown``.

        Args:
            encoded_payload: Base64 text read from the QR code.

        Returns:
            Validation result.
        """
        stage = ValidationStage.DECODE
        try:
            text = self._codec.decode(encoded_payload)
            stage = ValidationStage.PARSE
            envelope = parse_envelope(text)
            stage = ValidationStage.VERSION_CHECK
            self._check_version(envelope)
            stage = ValidationStage.SIGNATURE_CHECK
            self._verifier.verify(envelope)
            stage = ValidationStage.EXPIRATION_CHECK
            try:
                self._expiration.check(envelope)
            except GateFailure as failure:
                _LOGGER.debug("QR payload %r expired: %s", envelope.id, failure.message)
                return ExpiredResult(
                    error=failure.to_error(),
                    data=envelope.data,
                    generated_at=envelope.generated_at,
                    id=envelope.id,
                )
            stage = ValidationStage.BUSINESS_RULES
            self._apply_business_rules(envelope)
            return ValidResult(
                data=envelope.data,
                generated_at=envelope.generated_at,
                id=envelope.id,
            )
        except GateFailure as failure:
            _LOGGER.debug(
                "QR payload rejected at %s (%s): %s",
                stage,
                failure.kind,
                failure.message,
            )
            return InvalidResult(error=failure.to_error())
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning(
                "Unexpected failure during QR validation at %s", stage, exc_info=True
            )
            return InvalidResult(
                error=ValidationError(
                    kind=ValidationErrorKind.UNKNOWN,
                    message=f"Unexpected error: {exc}",
                    details={"stage": str(stage), "exception": type(exc).__name__},
                )
            )

    def _check_version(self, envelope: Envelope) -> None:
        """Reject envelope versions newer than the configured maximum."""
        if envelope.version > self._config.max_supported_version:
            raise GateFailure(
                ValidationErrorKind.VERSION,
                f"Unsupported version: {envelope.version} "
                f"(max supported: {self._config.max_supported_version})",
                details={
                    "version": envelope.version,
                    "max_supported_version": self._config.max_supported_version,
                },
            )

    def _apply_business_rules(self, envelope: Envelope) -> None:
        """Raise ``business_rule`` with the first failing rule's message."""
        message = self._rules.evaluate(envelope.data)
        if message is not None:
            raise GateFailure(ValidationErrorKind.BUSINESS_RULE, message)
