"""Request encoding and response decoding for the device pairing protocol.

Request layout (ASCII)::

    <name>\\n<contentLength>\\n\\n<jsonContent>

- name: request tag, e.g. ``device-id``
- contentLength: byte length of ``jsonContent``; ``0`` when there is no content
- jsonContent: compact JSON, empty when there is no content

Responses carry no framing at all: the device writes one JSON document and
closes the connection. The whole buffer read up to EOF is the response.
The request length header is informational and never drives reads.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, TypeVar

from ..core.models import DeviceIdentity, WifiNetwork
from ..errors import DecodeError

T = TypeVar("T")

Decoder = Callable[[Any], T]


@dataclass(frozen=True, slots=True)
class Request:
    name: str
    content: Optional[Any] = None


@dataclass(frozen=True, slots=True)
class PublicKeyResponse:
    result: int
    blob: str


@dataclass(frozen=True, slots=True)
class ResultResponse:
    code: float

    @property
    def ok(self) -> bool:
        return self.code == 0


def encode_request(request: Request) -> bytes:
    """Serialize ``request`` into its wire representation."""

    if request.content is None:
        encoded_content = ""
    else:
        encoded_content = json.dumps(request.content, separators=(",", ":"))
    return f"{request.name}\n{len(encoded_content)}\n\n{encoded_content}".encode("ascii")


def decode_response(data: bytes, decoder: Decoder[T]) -> T:
    """Decode a raw response buffer and validate it with ``decoder``.

    Raises:
        DecodeError: if the buffer is not ASCII, not JSON, or has the wrong shape.
            The error carries the raw text.
    """

    try:
        text = data.decode("ascii")
    except UnicodeDecodeError as exc:
        raise DecodeError(
            f"non-ascii response: {exc.reason}", data.decode("ascii", errors="replace")
        ) from exc

    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"invalid json: {exc.msg}", text) from exc

    try:
        return decoder(value)
    except DecodeError as exc:
        raise exc.at(text) from None


# ----------------------------------------------------------------------
# Shape helpers
# ----------------------------------------------------------------------
def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _expect_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DecodeError(f"expected object, got {type(value).__name__}", path=path)
    return value


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _require_string(obj: Mapping[str, Any], key: str, path: str = "") -> str:
    field_path = _join(path, key)
    if key not in obj:
        raise DecodeError("required field missing", path=field_path)
    value = obj[key]
    if not isinstance(value, str):
        raise DecodeError(f"expected string, got {type(value).__name__}", path=field_path)
    return value


def _optional_string(obj: Mapping[str, Any], key: str, path: str = "") -> Optional[str]:
    if key not in obj:
        return None
    return _require_string(obj, key, path)


def _require_number(obj: Mapping[str, Any], key: str, path: str = "") -> Any:
    field_path = _join(path, key)
    if key not in obj:
        raise DecodeError("required field missing", path=field_path)
    value = obj[key]
    if not _is_number(value):
        raise DecodeError(f"expected number, got {type(value).__name__}", path=field_path)
    return value


# ----------------------------------------------------------------------
# Per-response decoders
# ----------------------------------------------------------------------
def decode_device_id(value: Any) -> DeviceIdentity:
    """``{id: string, c?: string}`` -> :class:`DeviceIdentity` with a lowercase id."""

    obj = _expect_mapping(value, "")
    device_id = _require_string(obj, "id")
    checksum = _optional_string(obj, "c")
    return DeviceIdentity(id=device_id.lower(), checksum=checksum)


def decode_public_key(value: Any) -> PublicKeyResponse:
    """``{r: 0, b: string}``; any other result code is a shape violation."""

    obj = _expect_mapping(value, "")
    result = _require_number(obj, "r")
    if result != 0:
        raise DecodeError(f"expected 0, got {result}", path="r")
    blob = _require_string(obj, "b")
    return PublicKeyResponse(result=int(result), blob=blob)


def decode_scan(value: Any) -> List[WifiNetwork]:
    """``{scans: [{ssid, sec, ch, rssi, mdr}]}`` -> networks in scan order."""

    obj = _expect_mapping(value, "")
    if "scans" not in obj:
        raise DecodeError("required field missing", path="scans")
    scans = obj["scans"]
    if not isinstance(scans, list):
        raise DecodeError(f"expected array, got {type(scans).__name__}", path="scans")

    networks: List[WifiNetwork] = []
    for index, entry in enumerate(scans):
        path = f"scans[{index}]"
        item = _expect_mapping(entry, path)
        networks.append(
            WifiNetwork(
                ssid=_require_string(item, "ssid", path),
                security_type=_require_number(item, "sec", path),
                channel=_require_number(item, "ch", path),
                rssi=_require_number(item, "rssi", path),
                max_data_rate_kbps=_require_number(item, "mdr", path),
            )
        )
    return networks


def decode_result(value: Any) -> ResultResponse:
    """Generic ``{r: number}`` result envelope."""

    obj = _expect_mapping(value, "")
    return ResultResponse(code=_require_number(obj, "r"))
