"""RSA credential encryption for wifi provisioning."""

from __future__ import annotations

import logging

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from ..errors import PublicKeyError

LOGGER = logging.getLogger(__name__)


def trim_trailing_zeros(data: bytes) -> bytes:
    """Strip the zero padding the device appends after its DER key."""

    return data.rstrip(b"\x00")


def load_device_public_key(hex_blob: str) -> RSAPublicKey:
    """Parse the device's hex-encoded, null-padded SubjectPublicKeyInfo blob.

    Raises:
        PublicKeyError: if the blob is not hex, trims to nothing, is not valid
            DER, or does not hold an RSA key.
    """

    try:
        raw = bytes.fromhex(hex_blob)
    except ValueError as exc:
        raise PublicKeyError(f"Public key is not valid hex: {exc}") from exc

    der = trim_trailing_zeros(raw)
    if not der:
        raise PublicKeyError("Public key is empty after trimming padding")

    try:
        key = serialization.load_der_public_key(der)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise PublicKeyError(f"Public key is not valid DER: {exc}") from exc

    if not isinstance(key, RSAPublicKey):
        raise PublicKeyError(f"Unsupported public key type {type(key).__name__}")

    LOGGER.debug("Loaded %d-bit device public key", key.key_size)
    return key


def encrypt_password(public_key: RSAPublicKey, plaintext: str) -> str:
    """Encrypt ``plaintext`` with PKCS#1 v1.5 and return lowercase hex.

    The padding is random, so every call yields a different ciphertext.
    """

    ciphertext = public_key.encrypt(plaintext.encode("utf-8"), padding.PKCS1v15())
    return ciphertext.hex()
