"""Payload codec: base64 text to envelope JSON text, with optional AES-CBC."""

from __future__ import annotations

import base64
import binascii

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from secure_qr_validator.config import ValidatorConfig
from secure_qr_validator.errors import GateFailure, ValidationErrorKind

AES_KEY_BYTES = 32
IV_BYTES = 16


def derive_aes_key(secret_key: str) -> bytes:
    """Right-pad the secret with spaces and cut it to the AES-256 key length.

    Issuers derive the key the same way; this is not a KDF.

    Args:
        secret_key: Configured shared secret.

    Returns:
        32-byte AES key.
    """
    return secret_key.ljust(AES_KEY_BYTES).encode("utf-8")[:AES_KEY_BYTES]


class PayloadCodec:
    """Turns externally supplied text into the decoded envelope text."""

    def __init__(self, config: ValidatorConfig) -> None:
        """Derive cipher key material once per config.

        Args:
            config: Validator configuration.
        """
        self._key: bytes | None = None
        if config.enable_encryption and config.secret_key is not None:
            self._key = derive_aes_key(config.secret_key)

    @property
    def encrypted(self) -> bool:
        """Whether decoded bytes are decrypted before text decoding."""
        return self._key is not None

    def decode(self, encoded: str) -> str:
        """Decode (and decrypt when enabled) one scanned payload.

        Args:
            encoded: Base64 text as read from the QR code.

        Returns:
            Envelope JSON text.

        Raises:
            GateFailure: ``decoding`` for bad base64/UTF-8, ``decryption`` for
                any cipher failure.
        """
        try:
            raw = base64.b64decode(encoded.strip(), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise GateFailure(
                ValidationErrorKind.DECODING,
                f"Payload is not valid base64: {exc}",
            ) from exc
        if self._key is not None:
            return self._decrypt(raw, self._key)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise GateFailure(
                ValidationErrorKind.DECODING,
                f"Decoded payload is not valid UTF-8 text: {exc.reason}",
            ) from exc

    def _decrypt(self, raw: bytes, key: bytes) -> str:
        """Split IV from ciphertext, decrypt and unpad.

        Args:
            raw: Base64-decoded payload bytes.
            key: AES key.

        Returns:
            Decrypted envelope text.

        Raises:
            GateFailure: ``decryption`` on any failure.
        """
        if len(raw) <= IV_BYTES:
            raise GateFailure(
                ValidationErrorKind.DECRYPTION,
                f"Encrypted payload too short: {len(raw)} bytes, "
                f"expected IV ({IV_BYTES} bytes) followed by ciphertext.",
                details={"length": len(raw)},
            )
        iv, ciphertext = raw[:IV_BYTES], raw[IV_BYTES:]
        try:
            decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
        except ValueError as exc:
            raise GateFailure(
                ValidationErrorKind.DECRYPTION,
                f"Decryption failed: {exc}",
            ) from exc
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise GateFailure(
                ValidationErrorKind.DECRYPTION,
                "Decryption failed: plaintext is not valid UTF-8 (wrong key?)",
            ) from exc
