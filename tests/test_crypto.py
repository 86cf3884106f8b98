import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding

from thermal_harness.errors import PublicKeyError
from thermal_harness.protocol.crypto import (
    encrypt_password,
    load_device_public_key,
    trim_trailing_zeros,
)


def test_trim_trailing_zeros() -> None:
    assert trim_trailing_zeros(bytes.fromhex("AABB00000000")) == b"\xaa\xbb"


def test_trim_keeps_interior_zeros() -> None:
    assert trim_trailing_zeros(b"\xaa\x00\xbb\x00") == b"\xaa\x00\xbb"


def test_all_zero_blob_is_rejected() -> None:
    with pytest.raises(PublicKeyError):
        load_device_public_key("00000000")


def test_non_hex_blob_is_rejected() -> None:
    with pytest.raises(PublicKeyError):
        load_device_public_key("not-hex")


def test_invalid_der_is_rejected() -> None:
    with pytest.raises(PublicKeyError):
        load_device_public_key("AABB0000")


def test_non_rsa_key_is_rejected() -> None:
    ec_key = ec.generate_private_key(ec.SECP256R1())
    der = ec_key.public_key().public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )

    with pytest.raises(PublicKeyError):
        load_device_public_key(der.hex())


def test_encrypt_password_decrypts_with_device_key(rsa_private_key, device_key_blob) -> None:
    public_key = load_device_public_key(device_key_blob)

    ciphertext = encrypt_password(public_key, "hunter2")

    assert ciphertext == ciphertext.lower()
    assert len(ciphertext) == public_key.key_size // 4
    plaintext = rsa_private_key.decrypt(bytes.fromhex(ciphertext), padding.PKCS1v15())
    assert plaintext == b"hunter2"


def test_encrypt_password_is_randomized(device_key_blob) -> None:
    public_key = load_device_public_key(device_key_blob)

    assert encrypt_password(public_key, "secret") != encrypt_password(public_key, "secret")
