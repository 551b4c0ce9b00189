"""Test-only payload issuer. Not part of the library API (it never encodes)."""

from __future__ import annotations

import base64
import json
import os
from datetime import UTC, datetime

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from secure_qr_validator.canonical import sign_payload
from secure_qr_validator.codec import derive_aes_key

TEST_KEY = "2024#@#qrcod#orange@##perform#=="
FIXED_NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC)


def epoch_ms(moment: datetime) -> int:
    """Return epoch milliseconds for an aware datetime."""
    return int(moment.timestamp() * 1000)


def encrypt_text(text: str, key: str, *, iv: bytes | None = None) -> bytes:
    """Return IV || AES-256-CBC(PKCS7(text)) the way issuers produce it."""
    iv = iv if iv is not None else os.urandom(16)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(text.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(derive_aes_key(key)), modes.CBC(iv)).encryptor()
    return iv + encryptor.update(padded) + encryptor.finalize()


def issue_payload(
    data: dict[str, object],
    *,
    key: str = TEST_KEY,
    encrypted: bool = False,
    signed: bool = False,
    timestamp_ms: int | None = None,
    version: int = 1,
    payload_id: str = "test-id-123",
    extra: dict[str, object] | None = None,
    iv: bytes | None = None,
) -> str:
    """Build an encoded QR payload as an issuer would.

    Args:
        data: Business data.
        key: Shared secret for signing/encryption.
        encrypted: Encrypt the envelope JSON.
        signed: Attach HMAC signature.
        timestamp_ms: Generation time; defaults to FIXED_NOW.
        version: Envelope format version.
        payload_id: Envelope id.
        extra: Additional top-level envelope fields.
        iv: Fixed 16-byte IV for encrypted payloads; random when omitted.

    Returns:
        Base64 payload text.
    """
    envelope: dict[str, object] = {
        "data": data,
        "timestamp": timestamp_ms if timestamp_ms is not None else epoch_ms(FIXED_NOW),
        "id": payload_id,
        "version": version,
        **(extra or {}),
    }
    if signed:
        envelope["signature"] = sign_payload(key, envelope)
    text = json.dumps(envelope)
    raw = encrypt_text(text, key, iv=iv) if encrypted else text.encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def encode_raw(text: str) -> str:
    """Base64-encode arbitrary text (no envelope checks)."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")
