"""Exception hierarchy for the pairing protocol and the thermal test."""

from __future__ import annotations

from typing import Optional


class HarnessError(RuntimeError):
    """Base class for all thermal-harness errors."""


class ConfigurationError(HarnessError):
    """Raised when the configuration file holds invalid values."""


class TransportError(HarnessError):
    """Raised when the device socket is refused, reset or otherwise fails."""

    def __init__(self, message: str, *, host: str = "", port: int = 0) -> None:
        super().__init__(message)
        self.host = host
        self.port = port


class DeviceTimeoutError(HarnessError):
    """Raised when connecting to or reading from the device exceeds its deadline.

    Not a :class:`TransportError`; a silent device and a refused connection
    are reported separately.
    """

    def __init__(self, message: str, *, timeout: float) -> None:
        super().__init__(message)
        self.timeout = timeout


class DecodeError(HarnessError):
    """Raised when a device response is malformed or has the wrong shape."""

    def __init__(self, reason: str, raw_text: str = "", path: str = "") -> None:
        self.reason = reason
        self.raw_text = raw_text
        self.path = path
        location = f" at {path}" if path else ""
        super().__init__(f"Response decode failed{location}: {reason}")

    def at(self, raw_text: str) -> "DecodeError":
        """Return a copy of this error carrying the raw response text."""

        return DecodeError(self.reason, raw_text, self.path)


class ProtocolError(HarnessError):
    """Raised when the device answers a request with a non-zero result code."""

    def __init__(self, request_name: str, code: float) -> None:
        self.request_name = request_name
        self.code = code
        super().__init__(f"Device rejected {request_name!r} with result code {code}")


class PublicKeyError(HarnessError):
    """Raised when the device public key cannot be constructed."""


class NetworkNotFound(HarnessError):
    """Raised when the requested SSID is absent from the device scan."""

    def __init__(self, ssid: str, available: Optional[list[str]] = None) -> None:
        self.ssid = ssid
        self.available = list(available or [])
        super().__init__(f"Network {ssid!r} not found in device scan")


class DeviceNotReady(HarnessError):
    """Raised when the device does not report ready before the deadline."""


class InvalidTemperatureReading(HarnessError):
    """Raised when a heat-level reading is unusable.

    Missing, non-numeric, non-finite, out-of-range and sentinel values all count.
    """

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid reading {value} for {field}")


class CloudApiError(HarnessError):
    """Raised when the cloud control API returns an unexpected response."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status
