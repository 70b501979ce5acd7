"""Crash reporting sink for internal failures.

Internal errors never propagate to callers of the reporter; they are handed to
a crash reporter instead. The default one logs them and keeps a short history.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Protocol

from loguru import logger


class CrashReporter(Protocol):
    """Anything that accepts internal exceptions."""

    def handle_crash(self, tag: str, exc: BaseException) -> None: ...


@dataclass(frozen=True)
class CrashRecord:
    """A reported internal error."""

    tag: str
    error_type: str
    message: str
    reported_at: datetime = field(default_factory=datetime.now)


class LoggingCrashReporter:
    """Crash reporter that logs through loguru and remembers recent crashes."""

    def __init__(
        self,
        max_records: int = 100,
        callback: Optional[Callable[[CrashRecord, BaseException], None]] = None,
    ):
        """Initialize the crash reporter.

        Args:
            max_records: Number of recent crashes kept in memory
            callback: Optional function forwarded every crash
        """
        self._records: deque[CrashRecord] = deque(maxlen=max_records)
        self._lock = threading.Lock()
        self._callback = callback
        self._total_reported = 0

    def handle_crash(self, tag: str, exc: BaseException) -> None:
        record = CrashRecord(tag=tag, error_type=type(exc).__name__, message=str(exc))

        with self._lock:
            self._records.append(record)
            self._total_reported += 1

        logger.opt(exception=exc).error(f"[{tag}] {record.error_type}: {record.message}")

        if self._callback:
            try:
                self._callback(record, exc)
            except Exception as e:
                logger.error(f"Crash callback failed: {e}")

    def get_records(self) -> List[CrashRecord]:
        """Return recent crash records, oldest first."""
        with self._lock:
            return list(self._records)

    @property
    def total_reported(self) -> int:
        return self._total_reported
