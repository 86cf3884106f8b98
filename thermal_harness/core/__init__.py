"""Core primitives for thermal-harness."""

from .models import (
    AttemptResult,
    ControlOperation,
    DeviceIdentity,
    RunResult,
    SideTemperatures,
    TemperatureDeltas,
    TestOutcome,
    ThermalTestEvent,
    WifiNetwork,
)
from .protocols import EventScheduler, FunctionInvoker, TelemetryReader

__all__ = [
    "AttemptResult",
    "ControlOperation",
    "DeviceIdentity",
    "EventScheduler",
    "FunctionInvoker",
    "RunResult",
    "SideTemperatures",
    "TelemetryReader",
    "TemperatureDeltas",
    "TestOutcome",
    "ThermalTestEvent",
    "WifiNetwork",
]
