"""Secure QR payload validation: decode, authenticate, gate, and apply rules."""

from secure_qr_validator.canonical import canonical_envelope_bytes, sign_payload
from secure_qr_validator.codec import PayloadCodec, derive_aes_key
from secure_qr_validator.config import (
    ValidatorConfig,
    ValidatorConfigError,
    load_validator_config,
)
from secure_qr_validator.envelope import Envelope, parse_envelope
from secure_qr_validator.errors import GateFailure, ValidationError, ValidationErrorKind
from secure_qr_validator.expiration import ExpirationPolicy
from secure_qr_validator.result import (
    ExpiredResult,
    InvalidResult,
    ValidationResult,
    ValidationStatus,
    ValidResult,
)
from secure_qr_validator.rules import (
    CompositeRule,
    ValidationRule,
    ValidationRuleBuilder,
    as_rule,
    date_must_be_future,
    list_length,
    matches_pattern,
    mutually_exclusive,
    number_in_range,
    required,
)
from secure_qr_validator.signature import SignatureVerifier
from secure_qr_validator.validator import SecureQRValidator, ValidationStage

__all__ = [
    "CompositeRule",
    "Envelope",
    "ExpirationPolicy",
    "ExpiredResult",
    "GateFailure",
    "InvalidResult",
    "PayloadCodec",
    "SecureQRValidator",
    "SignatureVerifier",
    "ValidResult",
    "ValidationError",
    "ValidationErrorKind",
    "ValidationResult",
    "ValidationRule",
    "ValidationRuleBuilder",
    "ValidationStage",
    "ValidationStatus",
    "ValidatorConfig",
    "ValidatorConfigError",
    "as_rule",
    "canonical_envelope_bytes",
    "date_must_be_future",
    "derive_aes_key",
    "list_length",
    "load_validator_config",
    "matches_pattern",
    "mutually_exclusive",
    "number_in_range",
    "parse_envelope",
    "required",
    "sign_payload",
]
