"""Command-line interface for thermal-harness."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from . import constants
from .adapters.cloud import CloudDeviceApi
from .adapters.device import DeviceClient
from .burn_in import post_burn_in_schedules
from .config import HarnessConfig, load_config, save_config
from .errors import ConfigurationError, HarnessError
from .logging import configure_logging
from .results import ResultStore
from .retry import RetryPolicy
from .thermal_test import ThermalTestOrchestrator

LOGGER = logging.getLogger(__name__)


def _parse_start(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid ISO-8601 time: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=constants.APP_NAME,
        description="Pair devices over their local access point and run thermal acceptance tests",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    pair_parser = subparsers.add_parser(
        "pair", help="Provision wifi credentials on a device and print its id"
    )
    pair_parser.add_argument("--ssid", required=True, help="Network to join")
    pair_parser.add_argument(
        "--password", help="Network password (prompted for when omitted)"
    )

    test_parser = subparsers.add_parser(
        "thermal-test", help="Run the thermal acceptance test on a paired device"
    )
    test_parser.add_argument("--serial", required=True, help="Device serial number")
    test_parser.add_argument("--device-id", required=True, help="Cloud device id")

    burn_parser = subparsers.add_parser(
        "burn-in", help="Schedule a one hour max-cool burn-in"
    )
    burn_parser.add_argument(
        "--device-id",
        dest="device_ids",
        action="append",
        required=True,
        help="Cloud device id (repeatable)",
    )
    burn_parser.add_argument(
        "--start",
        type=_parse_start,
        help="Burn-in start time, ISO-8601 (default: now)",
    )

    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )
    subparsers.add_parser(
        "init-config", help="Write the resolved configuration to the config path"
    )

    return parser


def _device_client(config: HarnessConfig) -> DeviceClient:
    device = config.device
    return DeviceClient(
        device.host,
        device.port,
        timeout=device.timeout_seconds,
        retry_policy=RetryPolicy.attempts(
            device.retry_attempts, device.retry_sleep_seconds
        ),
    )


def _cloud_api(config: HarnessConfig) -> CloudDeviceApi:
    return CloudDeviceApi(
        config.cloud.base_url,
        token=config.cloud.token,
        timeout=config.cloud.timeout_seconds,
    )


async def run_pair(config: HarnessConfig, ssid: str, password: str) -> str:
    client = _device_client(config)
    LOGGER.info("Pairing %r with network %s", client, ssid)
    return await client.connect_and_get_id(ssid, password)


async def run_thermal_test(
    config: HarnessConfig, serial: str, device_id: str
) -> bool:
    results = ResultStore()
    async with _cloud_api(config) as api:
        orchestrator = ThermalTestOrchestrator(
            api, api, api, config.thermal, results=results
        )
        outcome = await orchestrator.run(serial, device_id)
    return outcome.passed


async def run_burn_in(
    config: HarnessConfig, device_ids: list[str], start: datetime
) -> list[str]:
    async with _cloud_api(config) as api:
        return await post_burn_in_schedules(api, device_ids, start)


def _print_config(config: HarnessConfig) -> None:
    print(f"Configuration loaded from {config.path!s}\n")
    for section in config.raw.sections():
        print(f"[{section}]")
        for key, value in config.raw[section].items():
            if section == "cloud" and key == "token":
                value = "********"
            print(f"{key} = {value}")
        print()


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as exc:
        parser.error(str(exc))

    if args.command == "show-config":
        _print_config(config)
        return 0

    if args.command == "init-config":
        save_config(config)
        print(f"Configuration written to {config.path!s}")
        return 0

    try:
        configure_logging(
            config.logging.level,
            log_path=config.logging.path,
            log_network=config.logging.log_network,
        )
    except ConfigurationError as exc:
        parser.error(str(exc))

    if args.command == "pair":
        password = args.password
        if password is None:
            password = getpass.getpass(f"Password for {args.ssid}: ")
        try:
            device_id = asyncio.run(run_pair(config, args.ssid, password))
        except HarnessError as exc:
            LOGGER.error("Pairing failed: %s", exc)
            return 1
        print(device_id)
        return 0

    if args.command == "thermal-test":
        try:
            passed = asyncio.run(
                run_thermal_test(config, args.serial, args.device_id)
            )
        except HarnessError as exc:
            LOGGER.error("Thermal test could not run: %s", exc)
            return 1
        print(f"{args.serial}: {'pass' if passed else 'fail'}")
        return 0 if passed else 1

    if args.command == "burn-in":
        start = args.start or datetime.now(timezone.utc)
        try:
            scheduled = asyncio.run(run_burn_in(config, args.device_ids, start))
        except HarnessError as exc:
            LOGGER.error("Burn-in scheduling failed: %s", exc)
            return 1
        for device_id in scheduled:
            print(device_id)
        return 0

    LOGGER.error("Unknown command: %s", args.command)
    return 1


if __name__ == "__main__":
    sys.exit(main())
