"""Configuration loader for thermal-harness."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from . import constants
from .errors import ConfigurationError


@dataclass(slots=True)
class DeviceConfig:
    host: str = constants.DEFAULT_DEVICE_HOST
    port: int = constants.DEFAULT_DEVICE_PORT
    timeout_seconds: float = constants.DEFAULT_DEVICE_TIMEOUT_SECONDS
    retry_attempts: int = 1
    retry_sleep_seconds: float = 1.0


@dataclass(slots=True)
class CloudConfig:
    base_url: str = constants.DEFAULT_CLOUD_BASE_URL
    token: Optional[str] = None  # Bearer token, issued out of band
    timeout_seconds: float = 10.0


@dataclass(slots=True)
class ThermalTestConfig:
    # Readiness gate
    readiness_timeout_seconds: float = 120.0
    readiness_poll_seconds: float = 5.0
    last_heard_max_age_seconds: float = 120.0
    required_firmware: Optional[str] = None

    # Priming
    prime_settle_seconds: float = 120.0
    reset_settle_seconds: float = 0.2
    pump_burst_wait_seconds: float = 20.0

    # Scheduling
    schedule_lead_seconds: float = 2.0
    schedule_retry_seconds: float = 120.0
    schedule_retry_sleep_seconds: float = 1.0
    heat_seconds: float = 60.0
    cool_seconds: float = 60.0
    heat_soak_seconds: float = 90.0
    cool_soak_seconds: float = 90.0

    # Sampling
    sample_attempts: int = 8
    sample_interval_seconds: float = 10.0

    # Thresholds (degrees C, inclusive)
    min_delta_c: float = 2.0
    max_delta_c: Optional[float] = None

    # Whole-sequence retry
    max_attempts: int = 3
    attempt_cooldown_seconds: float = 60.0


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = constants.DEFAULT_LOG_PATH
    log_network: bool = False


@dataclass(slots=True)
class HarnessConfig:
    device: DeviceConfig
    cloud: CloudConfig
    thermal: ThermalTestConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def _get_int(parser: ConfigParser, section: str, option: str, fallback: int) -> int:
    try:
        return parser.getint(section, option, fallback=fallback)
    except ValueError as exc:
        raise ConfigurationError(
            f"[{section}] {option} must be an integer: {exc}"
        ) from exc


def _get_float(
    parser: ConfigParser, section: str, option: str, fallback: float
) -> float:
    try:
        return parser.getfloat(section, option, fallback=fallback)
    except ValueError as exc:
        raise ConfigurationError(f"[{section}] {option} must be a number: {exc}") from exc


def _get_optional_str(parser: ConfigParser, section: str, option: str) -> Optional[str]:
    value = parser.get(section, option, fallback="").strip()
    return value or None


def _thermal_defaults() -> dict[str, str]:
    defaults = ThermalTestConfig()
    values = {}
    for item in fields(ThermalTestConfig):
        value = getattr(defaults, item.name)
        values[item.name] = "" if value is None else str(value)
    return values


def _load_thermal(parser: ConfigParser) -> ThermalTestConfig:
    defaults = ThermalTestConfig()
    values = {}
    for item in fields(ThermalTestConfig):
        default = getattr(defaults, item.name)
        if item.name == "required_firmware":
            values[item.name] = _get_optional_str(parser, "thermal", item.name)
        elif item.name == "max_delta_c":
            raw = _get_optional_str(parser, "thermal", item.name)
            values[item.name] = (
                None if raw is None else _get_float(parser, "thermal", item.name, 0.0)
            )
        elif isinstance(default, int):
            values[item.name] = _get_int(parser, "thermal", item.name, default)
        else:
            values[item.name] = _get_float(parser, "thermal", item.name, default)

    thermal = ThermalTestConfig(**values)
    if thermal.max_attempts < 1 or thermal.sample_attempts < 1:
        raise ConfigurationError("[thermal] attempt counts must be at least 1")
    if thermal.max_delta_c is not None and thermal.max_delta_c < thermal.min_delta_c:
        raise ConfigurationError("[thermal] max_delta_c must not be below min_delta_c")
    return thermal


def load_config(path: Optional[Path] = None) -> HarnessConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "device": {
                "host": constants.DEFAULT_DEVICE_HOST,
                "port": str(constants.DEFAULT_DEVICE_PORT),
                "timeout_seconds": str(constants.DEFAULT_DEVICE_TIMEOUT_SECONDS),
                "retry_attempts": "1",
                "retry_sleep_seconds": "1.0",
            },
            "cloud": {
                "base_url": constants.DEFAULT_CLOUD_BASE_URL,
                "timeout_seconds": "10.0",
            },
            "thermal": _thermal_defaults(),
            "logging": {
                "level": "INFO",
                "path": str(constants.DEFAULT_LOG_PATH),
                "log_network": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    device = DeviceConfig(
        host=parser.get("device", "host"),
        port=_get_int(parser, "device", "port", constants.DEFAULT_DEVICE_PORT),
        timeout_seconds=max(
            0.001,
            _get_float(
                parser,
                "device",
                "timeout_seconds",
                constants.DEFAULT_DEVICE_TIMEOUT_SECONDS,
            ),
        ),
        retry_attempts=max(1, _get_int(parser, "device", "retry_attempts", 1)),
        retry_sleep_seconds=max(
            0.0, _get_float(parser, "device", "retry_sleep_seconds", 1.0)
        ),
    )

    cloud = CloudConfig(
        base_url=parser.get("cloud", "base_url"),
        token=_get_optional_str(parser, "cloud", "token"),
        timeout_seconds=_get_float(parser, "cloud", "timeout_seconds", 10.0),
    )

    log_path_value = parser.get("logging", "path", fallback="").strip()
    try:
        log_network = parser.getboolean("logging", "log_network", fallback=False)
    except ValueError as exc:
        raise ConfigurationError(f"[logging] log_network must be a boolean: {exc}") from exc

    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=log_network,
    )

    return HarnessConfig(
        device=device,
        cloud=cloud,
        thermal=_load_thermal(parser),
        logging=logging_config,
        raw=parser,
        path=config_path,
    )


def save_config(config: HarnessConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)
