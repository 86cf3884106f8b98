from datetime import datetime, timezone

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from thermal_harness.adapters.cloud import CloudDeviceApi
from thermal_harness.core.models import ControlOperation, ThermalTestEvent
from thermal_harness.errors import CloudApiError


def build_app(recorded: list) -> web.Application:
    async def state_handler(request: web.Request) -> web.StreamResponse:
        recorded.append(("GET", request.path, request.headers.get("Authorization"), None))
        return web.json_response(
            {
                "lastHeard": {"value": "2026-01-01T00:00:00Z"},
                "heatLevelL": {"value": 12},
            }
        )

    async def function_handler(request: web.Request) -> web.StreamResponse:
        recorded.append(("POST", request.path, None, await request.json()))
        return web.json_response({"return_value": 1})

    async def events_handler(request: web.Request) -> web.StreamResponse:
        recorded.append(("PUT", request.path, None, await request.json()))
        return web.Response(status=204)

    app = web.Application()
    app.router.add_get("/v1/devices/{device_id}/state", state_handler)
    app.router.add_post("/v1/devices/{device_id}/functions/{name}", function_handler)
    app.router.add_put("/v1/devices/{device_id}/sides/{side}/state-events", events_handler)
    return app


@pytest.mark.asyncio
async def test_get_state_sends_bearer_token():
    recorded: list = []

    async with TestServer(build_app(recorded)) as server:
        async with CloudDeviceApi(str(server.make_url("/")), token="tok") as api:
            state = await api.get_state("dev-1")

    assert state["heatLevelL"]["value"] == 12
    assert recorded == [("GET", "/v1/devices/dev-1/state", "Bearer tok", None)]


@pytest.mark.asyncio
async def test_call_function_posts_confirm_flag():
    recorded: list = []

    async with TestServer(build_app(recorded)) as server:
        async with CloudDeviceApi(str(server.make_url("/"))) as api:
            await api.call_function("dev-1", "prime", True)

    assert recorded == [("POST", "/v1/devices/dev-1/functions/prime", None, {"confirm": True})]


@pytest.mark.asyncio
async def test_put_side_state_events_serializes_events():
    recorded: list = []
    start = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    events = [
        ThermalTestEvent(start, ControlOperation.ON),
        ThermalTestEvent(start, ControlOperation.TEMPERATURE, -100),
    ]

    async with TestServer(build_app(recorded)) as server:
        async with CloudDeviceApi(str(server.make_url("/"))) as api:
            await api.put_side_state_events("dev-1", "left", events)

    method, path, _, body = recorded[0]
    assert method == "PUT"
    assert path == "/v1/devices/dev-1/sides/left/state-events"
    assert body == [
        {
            "time": "2026-01-01T12:00:00.000Z",
            "type": "temperatureControl",
            "operation": "on",
        },
        {
            "time": "2026-01-01T12:00:00.000Z",
            "type": "temperatureControl",
            "operation": "temperature",
            "data": {"value": -100},
        },
    ]


@pytest.mark.asyncio
async def test_error_status_raises_cloud_api_error():
    async def handler(request: web.Request) -> web.StreamResponse:
        return web.Response(status=503, text="maintenance")

    app = web.Application()
    app.router.add_get("/v1/devices/{device_id}/state", handler)

    async with TestServer(app) as server:
        async with CloudDeviceApi(str(server.make_url("/"))) as api:
            with pytest.raises(CloudApiError) as excinfo:
                await api.get_state("dev-1")

    assert excinfo.value.status == 503
    assert "maintenance" in str(excinfo.value)


@pytest.mark.asyncio
async def test_non_object_state_is_rejected():
    async def handler(request: web.Request) -> web.StreamResponse:
        return web.json_response([1, 2, 3])

    app = web.Application()
    app.router.add_get("/v1/devices/{device_id}/state", handler)

    async with TestServer(app) as server:
        async with CloudDeviceApi(str(server.make_url("/"))) as api:
            with pytest.raises(CloudApiError):
                await api.get_state("dev-1")


@pytest.mark.asyncio
async def test_injected_session_is_not_closed():
    recorded: list = []
    async with TestServer(build_app(recorded)) as server:
        async with aiohttp.ClientSession() as session:
            api = CloudDeviceApi(str(server.make_url("/")), session=session)
            await api.get_state("dev-1")
            await api.aclose()

            assert not session.closed


def test_thermal_event_rejects_out_of_range_level():
    with pytest.raises(ValueError):
        ThermalTestEvent(datetime.now(timezone.utc), ControlOperation.TEMPERATURE, 101)


@pytest.mark.asyncio
async def test_malformed_json_body_raises_cloud_api_error():
    async def handler(request: web.Request) -> web.StreamResponse:
        return web.Response(text="{not json", content_type="application/json")

    app = web.Application()
    app.router.add_get("/v1/devices/{device_id}/state", handler)

    async with TestServer(app) as server:
        async with CloudDeviceApi(str(server.make_url("/"))) as api:
            with pytest.raises(CloudApiError) as excinfo:
                await api.get_state("dev-1")

    assert excinfo.value.status == 200
