"""Device pairing protocol: framing codec and credential crypto."""

from .crypto import encrypt_password, load_device_public_key, trim_trailing_zeros
from .framing import (
    PublicKeyResponse,
    Request,
    ResultResponse,
    decode_device_id,
    decode_public_key,
    decode_response,
    decode_result,
    decode_scan,
    encode_request,
)

__all__ = [
    "PublicKeyResponse",
    "Request",
    "ResultResponse",
    "decode_device_id",
    "decode_public_key",
    "decode_response",
    "decode_result",
    "decode_scan",
    "encode_request",
    "encrypt_password",
    "load_device_public_key",
    "trim_trailing_zeros",
]
