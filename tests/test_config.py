from pathlib import Path

import pytest

from thermal_harness import constants
from thermal_harness.config import load_config, save_config
from thermal_harness.errors import ConfigurationError


def test_load_config_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "thermal-harness.cfg"
    config = load_config(config_path)

    assert config.path == config_path
    assert config.device.host == "192.168.0.1"
    assert config.device.port == 5609
    assert config.device.timeout_seconds == 1.0
    assert config.device.retry_attempts == 1
    assert config.cloud.base_url == constants.DEFAULT_CLOUD_BASE_URL
    assert config.cloud.token is None
    assert config.thermal.min_delta_c == 2.0
    assert config.thermal.max_delta_c is None
    assert config.thermal.max_attempts == 3
    assert config.thermal.attempt_cooldown_seconds == 60.0
    assert config.thermal.sample_attempts == 8
    assert config.thermal.required_firmware is None
    assert config.logging.level == "INFO"


def test_load_config_overrides_defaults(tmp_path: Path) -> None:
    config_file = tmp_path / "thermal-harness.cfg"
    config_file.write_text(
        """
[device]
host = 10.0.0.5
timeout_seconds = 2.5
retry_attempts = 3

[cloud]
base_url = https://cloud.example.com
token = secret

[thermal]
min_delta_c = 1.5
max_delta_c = 20
max_attempts = 5
required_firmware = 2.3.1

[logging]
level = DEBUG
path =
"""
    )

    config = load_config(config_file)

    assert config.device.host == "10.0.0.5"
    assert config.device.timeout_seconds == 2.5
    assert config.device.retry_attempts == 3
    assert config.cloud.base_url == "https://cloud.example.com"
    assert config.cloud.token == "secret"
    assert config.thermal.min_delta_c == 1.5
    assert config.thermal.max_delta_c == 20.0
    assert config.thermal.max_attempts == 5
    assert config.thermal.required_firmware == "2.3.1"
    assert config.logging.level == "DEBUG"
    assert config.logging.path is None


def test_load_config_rejects_non_integer(tmp_path: Path) -> None:
    config_file = tmp_path / "thermal-harness.cfg"
    config_file.write_text("[device]\nport = not-a-port\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(config_file)


def test_load_config_rejects_inverted_bounds(tmp_path: Path) -> None:
    config_file = tmp_path / "thermal-harness.cfg"
    config_file.write_text(
        "[thermal]\nmin_delta_c = 3\nmax_delta_c = 2\n", encoding="utf-8"
    )

    with pytest.raises(ConfigurationError):
        load_config(config_file)


def test_save_config_round_trips(tmp_path: Path) -> None:
    config_path = tmp_path / "nested" / "thermal-harness.cfg"
    config = load_config(config_path)
    config.raw.set("device", "host", "10.1.1.1")

    save_config(config)

    assert config_path.exists()
    assert load_config(config_path).device.host == "10.1.1.1"


def test_thermal_defaults_are_written_out(tmp_path: Path) -> None:
    config = load_config(tmp_path / "thermal-harness.cfg")

    assert config.raw.get("thermal", "max_attempts") == "3"
    assert config.raw.get("thermal", "min_delta_c") == "2.0"
    assert config.raw.get("thermal", "required_firmware") == ""

    save_config(config)
    reloaded = load_config(config.path)

    assert reloaded.thermal.max_delta_c is None
    assert reloaded.thermal.required_firmware is None
    assert reloaded.thermal.max_attempts == 3
