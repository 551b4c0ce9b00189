"""Validator configuration model and loading helpers."""

from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

MIN_ENCRYPTION_KEY_LENGTH = 32


class ValidatorConfig(BaseModel):
    """Immutable validation parameters; must mirror the issuer's settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    secret_key: str | None = Field(default=None, repr=False)
    validity_duration: timedelta = timedelta(minutes=5)
    enable_encryption: bool = False
    enable_signature: bool = False
    enable_expiration_check: bool = True
    max_supported_version: int = 1

    @model_validator(mode="after")
    def _validate_invariants(self) -> ValidatorConfig:
        """Reject inconsistent security settings at construction.

        Returns:
            Validated config.

        Raises:
            ValueError: If any configuration invariant is violated.
        """
        if (self.enable_encryption or self.enable_signature) and self.secret_key is None:
            raise ValueError(
                "secret_key is required when encryption or signature is enabled."
            )
        if (
            self.enable_encryption
            and self.secret_key is not None
            and len(self.secret_key) < MIN_ENCRYPTION_KEY_LENGTH
        ):
            raise ValueError(
                "secret_key must be at least "
                f"{MIN_ENCRYPTION_KEY_LENGTH} characters when encryption is enabled."
            )
        if self.max_supported_version < 1:
            raise ValueError("max_supported_version must be at least 1.")
        return self


class ValidatorConfigError(RuntimeError):
    """Raised when validator config cannot be decoded or validated."""


def _decode_config_payload(path: Path) -> dict[str, object]:
    """Decode validator config payload from JSON or YAML.

    Args:
        path: Config file path.

    Returns:
        Parsed mapping payload.

    Raises:
        ValidatorConfigError: If decode fails or payload is not an object.
    """
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValidatorConfigError(f"Invalid validator config JSON: {exc}") from exc
    else:
        try:
            payload = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ValidatorConfigError(f"Invalid validator config YAML: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidatorConfigError(
            "Invalid validator config payload: root must be an object"
        )
    return payload


def load_validator_config(path: Path) -> ValidatorConfig:
    """Load validator config from disk, defaulting when missing.

    Args:
        path: Config file path (``.json``, ``.yaml`` or ``.yml``).

    Returns:
        Parsed config, or defaults when file does not exist.

    Raises:
        ValidatorConfigError: If payload decode or validation fails.
    """
    if not path.exists():
        return ValidatorConfig()
    payload = _decode_config_payload(path)
    try:
        return ValidatorConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValidatorConfigError(f"Invalid validator config payload: {exc}") from exc
