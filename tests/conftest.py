import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def device_key_blob(rsa_private_key: rsa.RSAPrivateKey) -> str:
    """Public key as the device reports it: hex DER with trailing zero padding."""
    der = rsa_private_key.public_key().public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return (der + b"\x00" * 16).hex().upper()
