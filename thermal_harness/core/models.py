"""Domain models for pairing and thermal testing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True, slots=True)
class DeviceIdentity:
    id: str
    checksum: Optional[str] = None


@dataclass(frozen=True, slots=True)
class WifiNetwork:
    """One entry of a device-side access point scan."""

    ssid: str
    security_type: int
    channel: int
    rssi: int
    max_data_rate_kbps: int


@dataclass(frozen=True, slots=True)
class SideTemperatures:
    left_c: float
    right_c: float


class ControlOperation(str, Enum):
    ON = "on"
    OFF = "off"
    TEMPERATURE = "temperature"


@dataclass(frozen=True, slots=True)
class ThermalTestEvent:
    """A temperature-control event scheduled through the cloud API."""

    time: datetime
    operation: ControlOperation
    value: Optional[int] = None

    def __post_init__(self) -> None:
        if self.value is not None and not -100 <= self.value <= 100:
            raise ValueError(f"Temperature level {self.value} outside [-100, 100]")

    def as_dict(self) -> Dict[str, Any]:
        timestamp = self.time.astimezone(timezone.utc).isoformat(timespec="milliseconds")
        payload: Dict[str, Any] = {
            "time": timestamp.replace("+00:00", "Z"),
            "type": "temperatureControl",
            "operation": self.operation.value,
        }
        if self.value is not None:
            payload["data"] = {"value": self.value}
        return payload


class TestOutcome(str, Enum):
    __test__ = False

    PASS = "pass"
    FAIL = "fail"


@dataclass(slots=True)
class TemperatureDeltas:
    left_heat: float
    right_heat: float
    left_cool: Optional[float] = None
    right_cool: Optional[float] = None

    def values(self) -> List[float]:
        return [
            value
            for value in (self.left_heat, self.right_heat, self.left_cool, self.right_cool)
            if value is not None
        ]


@dataclass(slots=True)
class AttemptResult:
    """Outcome of one full pass through the thermal test sequence."""

    attempt: int
    outcome: TestOutcome
    stage: str
    deltas: Optional[TemperatureDeltas] = None
    error: Optional[str] = None


@dataclass(slots=True)
class RunResult:
    serial: str
    device_id: str
    outcome: TestOutcome
    attempts: List[AttemptResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.outcome == TestOutcome.PASS
