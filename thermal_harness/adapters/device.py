"""TCP client for the device pairing protocol.

Every operation opens its own connection, writes exactly one request, reads
until the device closes the socket and then closes its side. Connections are
never reused, so at most one request is ever outstanding on a socket.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from .. import constants
from ..core.models import DeviceIdentity, WifiNetwork
from ..errors import DeviceTimeoutError, NetworkNotFound, ProtocolError, TransportError
from ..protocol.crypto import encrypt_password, load_device_public_key
from ..protocol.framing import (
    Decoder,
    Request,
    ResultResponse,
    decode_device_id,
    decode_public_key,
    decode_response,
    decode_result,
    decode_scan,
    encode_request,
)
from ..retry import RetryPolicy, retry

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# The firmware keeps a single pending network selection.
NETWORK_INDEX = 0

DEFAULT_READ_SIZE = 4096


@dataclass(frozen=True, slots=True)
class WifiCredentialMessage:
    """Content of a ``configure-ap`` request."""

    network_index: int
    ssid: str
    security_type: int
    channel: int
    encrypted_password: str

    @classmethod
    def build(
        cls, network: WifiNetwork, public_key: RSAPublicKey, password: str
    ) -> "WifiCredentialMessage":
        return cls(
            network_index=NETWORK_INDEX,
            ssid=network.ssid,
            security_type=network.security_type,
            channel=network.channel,
            encrypted_password=encrypt_password(public_key, password),
        )

    def as_content(self) -> Dict[str, Any]:
        return {
            "idx": self.network_index,
            "ssid": self.ssid,
            "sec": self.security_type,
            "ch": self.channel,
            "pwd": self.encrypted_password,
        }


class DeviceClient:
    """Pairing-protocol client for a device reachable on its local access point."""

    def __init__(
        self,
        host: str = constants.DEFAULT_DEVICE_HOST,
        port: int = constants.DEFAULT_DEVICE_PORT,
        *,
        timeout: float = constants.DEFAULT_DEVICE_TIMEOUT_SECONDS,
        retry_policy: Optional[RetryPolicy] = None,
        read_size: int = DEFAULT_READ_SIZE,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy.attempts(1)
        self.read_size = read_size

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def get_device_id(self) -> str:
        identity: DeviceIdentity = await self._request("device-id", decode_device_id)
        LOGGER.info("Device reports id %s", identity.id)
        return identity.id

    async def get_public_key(self) -> RSAPublicKey:
        response = await self._request("public-key", decode_public_key)
        return load_device_public_key(response.blob)

    async def scan_networks(self) -> List[WifiNetwork]:
        networks = await self._request("scan-ap", decode_scan)
        LOGGER.info("Device scan found %d network(s)", len(networks))
        return networks

    async def send_credentials(
        self, network: WifiNetwork, public_key: RSAPublicKey, password: str
    ) -> None:
        """Provision ``network`` with ``password`` encrypted under ``public_key``.

        The message, and so the ciphertext, is rebuilt for every attempt.
        """

        def build_content() -> Dict[str, Any]:
            message = WifiCredentialMessage.build(network, public_key, password)
            return message.as_content()

        await self._request(
            "configure-ap", decode_result, content=build_content, check_result=True
        )
        LOGGER.info("Credentials for %s accepted by device", network.ssid)

    async def connect_to_network(self) -> None:
        await self._request(
            "connect-ap",
            decode_result,
            content=lambda: {"idx": NETWORK_INDEX},
            check_result=True,
        )
        LOGGER.info("Device acknowledged connect request")

    async def connect_and_get_id(self, ssid: str, password: str) -> str:
        """Pair the device with ``ssid`` and return its id.

        Steps run in order and the first failure aborts the pairing; nothing
        already sent to the device is rolled back.

        Raises:
            NetworkNotFound: if no scanned network has exactly ``ssid``.
        """

        device_id = await self.get_device_id()
        public_key = await self.get_public_key()
        networks = await self.scan_networks()

        network = next((item for item in networks if item.ssid == ssid), None)
        if network is None:
            raise NetworkNotFound(ssid, [item.ssid for item in networks])

        await self.send_credentials(network, public_key, password)
        await self.connect_to_network()
        return device_id

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _request(
        self,
        name: str,
        decoder: Decoder[T],
        *,
        content: Optional[Callable[[], Any]] = None,
        check_result: bool = False,
    ) -> T:
        async def attempt() -> T:
            request = Request(name, content() if content is not None else None)
            response = await self.exchange(request, decoder)
            if check_result and isinstance(response, ResultResponse) and not response.ok:
                raise ProtocolError(request.name, response.code)
            return response

        return await retry(
            attempt,
            self.retry_policy,
            description=f"{name} on {self.host}:{self.port}",
        )

    async def exchange(self, request: Request, decoder: Decoder[T]) -> T:
        """Run one connect, write, drain, close cycle and decode the reply."""

        start_time = time.perf_counter()
        reader, writer = await self._open()
        try:
            payload = encode_request(request)
            LOGGER.debug(
                "Sending %s (%d bytes) to %s:%d",
                request.name,
                len(payload),
                self.host,
                self.port,
            )
            writer.write(payload)
            async with asyncio.timeout(self.timeout):
                await writer.drain()
            data = await self._read_until_closed(reader)
        except TimeoutError as exc:
            writer.transport.abort()
            raise DeviceTimeoutError(
                f"No response to {request.name!r} from {self.host}:{self.port} "
                f"within {self.timeout:.1f}s",
                timeout=self.timeout,
            ) from exc
        except OSError as exc:
            raise TransportError(
                f"Exchange of {request.name!r} with {self.host}:{self.port} failed: {exc}",
                host=self.host,
                port=self.port,
            ) from exc
        finally:
            writer.close()
            with contextlib.suppress(OSError):
                await writer.wait_closed()

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        LOGGER.debug(
            "Received %d bytes for %s in %.1fms", len(data), request.name, elapsed_ms
        )
        return decode_response(data, decoder)

    async def _open(self) -> Tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        try:
            async with asyncio.timeout(self.timeout):
                return await asyncio.open_connection(self.host, self.port)
        except TimeoutError as exc:
            raise DeviceTimeoutError(
                f"Connection to {self.host}:{self.port} timed out after {self.timeout:.1f}s",
                timeout=self.timeout,
            ) from exc
        except OSError as exc:
            raise TransportError(
                f"Connection to {self.host}:{self.port} failed: {exc}",
                host=self.host,
                port=self.port,
            ) from exc

    async def _read_until_closed(self, reader: asyncio.StreamReader) -> bytes:
        chunks: List[bytes] = []
        while True:
            async with asyncio.timeout(self.timeout):
                chunk = await reader.read(self.read_size)
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)

    def __repr__(self) -> str:
        return f"DeviceClient({self.host}:{self.port}, timeout={self.timeout}s)"
