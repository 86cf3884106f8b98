"""Constants used across the thermal-harness package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "thermal-harness"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / APP_NAME / DEFAULT_CONFIG_FILENAME

DEFAULT_LOG_PATH = Path.home() / ".config" / APP_NAME / "logs" / f"{APP_NAME}.log"

DEFAULT_DEVICE_HOST = "192.168.0.1"
DEFAULT_DEVICE_PORT = 5609
DEFAULT_DEVICE_TIMEOUT_SECONDS = 1.0

DEFAULT_CLOUD_BASE_URL = "http://localhost:8080"

# Telemetry field names reported by the cloud state endpoint.
FIELD_LAST_HEARD = "lastHeard"
FIELD_FIRMWARE_VERSION = "firmwareVersion"
FIELD_HEAT_LEVEL_LEFT = "heatLevelL"
FIELD_HEAT_LEVEL_RIGHT = "heatLevelR"

SIDES = ("left", "right")
