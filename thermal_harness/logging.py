"""Logging setup for harness runs.

Console output always goes to stderr. A run can also be appended to a log
file so factory operators keep a trail per station.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Per-request traffic is logged at DEBUG by these loggers.
NETWORK_LOGGERS = (
    "thermal_harness.adapters.device",
    "thermal_harness.adapters.cloud",
    "aiohttp.client",
    "aiohttp.access",
    "asyncio",
)


def resolve_level(level: str) -> int:
    """Map a level name such as ``"debug"`` to its numeric value."""

    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ConfigurationError(f"[logging] level {level!r} is not a log level")
    return value


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, log_network: bool = False
) -> None:
    """Install the harness handlers on the root logger.

    Existing root handlers are replaced. Unless ``log_network`` is set, socket
    and HTTP traffic stays at INFO and above even when ``level`` is DEBUG.
    """

    numeric_level = resolve_level(level)
    logging.captureWarnings(True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    network_level = logging.NOTSET if log_network else max(numeric_level, logging.INFO)
    for name in NETWORK_LOGGERS:
        logging.getLogger(name).setLevel(network_level)
