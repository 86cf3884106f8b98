"""Burn-in schedules: one hour of maximum cooling on both sides."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from . import constants
from .core.models import ControlOperation, ThermalTestEvent
from .core.protocols import EventScheduler
from .retry import RetryPolicy, retry

LOGGER = logging.getLogger(__name__)

BURN_IN_DURATION = timedelta(minutes=60)
BURN_IN_LEVEL = -100
BURN_IN_RETRY_SECONDS = 120.0


def build_burn_in_events(start: datetime) -> List[ThermalTestEvent]:
    return [
        ThermalTestEvent(start, ControlOperation.ON),
        ThermalTestEvent(start, ControlOperation.TEMPERATURE, BURN_IN_LEVEL),
        ThermalTestEvent(start + BURN_IN_DURATION, ControlOperation.OFF),
    ]


async def post_burn_in_schedules(
    scheduler: EventScheduler,
    device_ids: Iterable[str],
    start: datetime,
    *,
    policy: Optional[RetryPolicy] = None,
) -> List[str]:
    """Schedule burn-in on every device, one side at a time.

    Devices are handled in order; the first one that cannot be scheduled
    within the retry policy aborts the run with that error.
    """

    policy = policy or RetryPolicy.duration(BURN_IN_RETRY_SECONDS)
    events = build_burn_in_events(start)
    scheduled: List[str] = []

    for device_id in device_ids:
        for side in constants.SIDES:
            await retry(
                lambda: scheduler.put_side_state_events(device_id, side, events),
                policy,
                description=f"Burn-in schedule for {device_id} ({side})",
            )
        LOGGER.info(
            "Scheduled burn-in for %s from %s", device_id, start.isoformat()
        )
        scheduled.append(device_id)

    return scheduled
