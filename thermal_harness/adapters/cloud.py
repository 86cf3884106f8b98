"""Cloud control API adapter providing device state, functions and schedules."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Sequence
from urllib.parse import quote

import aiohttp

from ..core.models import ThermalTestEvent
from ..errors import CloudApiError

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class CloudDeviceApi:
    """Async client for the device endpoints of the cloud control API.

    Implements the ``TelemetryReader``, ``FunctionInvoker`` and
    ``EventScheduler`` protocols consumed by the thermal test.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers: Dict[str, str] = {}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None

    async def __aenter__(self) -> "CloudDeviceApi":
        await self._ensure_session()
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def get_state(self, device_id: str) -> Mapping[str, Mapping[str, Any]]:
        """Fetch the latest reported telemetry for ``device_id``.

        Raises:
            CloudApiError: on a non-2xx status or a body that is not an object.
        """

        payload = await self._request("GET", self._device_url(device_id, "state"))
        if not isinstance(payload, dict):
            raise CloudApiError(
                f"Unexpected state payload for {device_id}: {type(payload).__name__}"
            )
        return payload

    async def call_function(self, device_id: str, name: str, confirm: bool) -> None:
        url = self._device_url(device_id, "functions", name)
        LOGGER.debug("Invoking %s on %s (confirm=%s)", name, device_id, confirm)
        await self._request("POST", url, json={"confirm": confirm})

    async def put_side_state_events(
        self, device_id: str, side: str, events: Sequence[ThermalTestEvent]
    ) -> None:
        url = self._device_url(device_id, "sides", side, "state-events")
        body = [event.as_dict() for event in events]
        LOGGER.debug("Scheduling %d event(s) on %s/%s", len(body), device_id, side)
        await self._request("PUT", url, json=body)

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _device_url(self, device_id: str, *parts: str) -> str:
        segments = [quote(device_id, safe="")] + [quote(part, safe="") for part in parts]
        return f"{self._base_url}/v1/devices/" + "/".join(segments)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _request(self, method: str, url: str, *, json: Any = None) -> Any:
        session = await self._ensure_session()
        try:
            async with session.request(
                method,
                url,
                json=json,
                headers=self._headers,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as response:
                if response.status >= 300:
                    detail = (await response.text()).strip()
                    raise CloudApiError(
                        f"{method} {url} failed with status {response.status}: {detail}",
                        status=response.status,
                    )
                if response.content_type == "application/json":
                    try:
                        return await response.json()
                    except ValueError as exc:
                        raise CloudApiError(
                            f"{method} {url} returned malformed JSON: {exc}",
                            status=response.status,
                        ) from exc
                return None
        except asyncio.TimeoutError as exc:
            raise CloudApiError(
                f"{method} {url} timed out after {self._timeout:.1f}s"
            ) from exc
        except aiohttp.ClientError as exc:
            raise CloudApiError(f"{method} {url} failed: {exc}") from exc
