"""Protocol definitions for the cloud collaborators of the thermal test."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence

from .models import ThermalTestEvent


class TelemetryReader(Protocol):
    """Reads the latest reported device state."""

    async def get_state(self, device_id: str) -> Mapping[str, Mapping[str, Any]]:
        """Return a mapping of telemetry field name to ``{"value": ...}``."""
        ...


class FunctionInvoker(Protocol):
    """Invokes named firmware functions on a device."""

    async def call_function(self, device_id: str, name: str, confirm: bool) -> None:
        ...


class EventScheduler(Protocol):
    """Schedules temperature-control events for one side of a device."""

    async def put_side_state_events(
        self, device_id: str, side: str, events: Sequence[ThermalTestEvent]
    ) -> None:
        """Replace the side's pending events with ``events``.

        Args:
            device_id: Cloud device identifier.
            side: ``"left"`` or ``"right"``.
            events: Events ordered by time.
        """
        ...
