"""Event model for the app events reporter.

Events are created by the application, buffered by the queue owner and handed
to the dispatcher, which only ever reads them.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

_id_lock = threading.Lock()
_id_counter = itertools.count(1)


def next_unique_id() -> int:
    """Return a process-wide increasing event id."""
    with _id_lock:
        return next(_id_counter)


@dataclass
class AppEvent:
    """A single tracked application event."""

    event_name: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    properties: Dict[str, Any] = field(default_factory=dict)
    unique_id: int = field(default_factory=next_unique_id)
