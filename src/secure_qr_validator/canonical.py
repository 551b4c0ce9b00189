"""Canonical envelope form and its HMAC-SHA256 signature."""

from __future__ import annotations

import hashlib
import hmac
import json
from collections.abc import Mapping

from pydantic.types import JsonValue


def canonical_envelope_bytes(fields: Mapping[str, JsonValue]) -> bytes:
    """Serialize unsigned envelope fields into the bytes the signature covers.

    Keys are sorted at every depth and separators are compact, so issuers
    emitting fields in any order sign the same bytes. Text stays UTF-8
    (no ``\\u`` escaping). NaN and Infinity are rejected because they have no
    JSON form an issuer could reproduce.

    Args:
        fields: Envelope fields without ``signature`` (data, timestamp, id,
            version and any extra top-level fields).

    Returns:
        UTF-8 encoded canonical JSON bytes.

    Raises:
        TypeError: If a value is not JSON-serializable.
        ValueError: On NaN or Infinity.
    """
    raw = json.dumps(
        dict(fields),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return raw.encode("utf-8")


def hmac_sha256_hex(key: str, payload: bytes) -> str:
    """Return hex-encoded HMAC-SHA256 of payload keyed by the UTF-8 secret.

    Args:
        key: Shared secret.
        payload: Bytes to authenticate.

    Returns:
        Lowercase hex digest (64 chars).
    """
    return hmac.new(key.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def sign_payload(key: str, fields: Mapping[str, JsonValue]) -> str:
    """Sign unsigned envelope fields: canonical bytes -> HMAC-SHA256 hex."""
    return hmac_sha256_hex(key, canonical_envelope_bytes(fields))
