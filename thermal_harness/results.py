"""Per-session store of thermal test outcomes keyed by device serial.

The store is created by whoever drives a test session and handed to the
orchestrator, so its lifetime is the session's rather than the process's.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional

from .core.models import RunResult, TestOutcome

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultEntry:
    serial: str
    outcome: TestOutcome
    recorded_at: datetime


class ResultStore:
    """In-memory map of serial to latest outcome."""

    def __init__(self) -> None:
        self._entries: "OrderedDict[str, ResultEntry]" = OrderedDict()

    def record(self, serial: str, outcome: TestOutcome) -> ResultEntry:
        entry = ResultEntry(
            serial=serial, outcome=outcome, recorded_at=datetime.now(timezone.utc)
        )
        self._entries[serial] = entry
        self._entries.move_to_end(serial)
        LOGGER.debug("Recorded %s for serial %s", outcome.value, serial)
        return entry

    def record_run(self, result: RunResult) -> ResultEntry:
        return self.record(result.serial, result.outcome)

    def get(self, serial: str) -> Optional[TestOutcome]:
        entry = self._entries.get(serial)
        return entry.outcome if entry else None

    def passed(self, serial: str) -> bool:
        return self.get(serial) == TestOutcome.PASS

    def as_dict(self) -> Dict[str, str]:
        return {serial: entry.outcome.value for serial, entry in self._entries.items()}

    def __iter__(self) -> Iterator[ResultEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, serial: object) -> bool:
        return serial in self._entries
