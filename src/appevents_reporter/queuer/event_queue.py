"""In-memory buffer of app events waiting to be reported.

The queue is owned by the application side. Its size is reported as part of
the cumulative "seen" count, and failed events may be put back into it.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Optional

from loguru import logger

from ..core.events import AppEvent


@dataclass
class QueueConfig:
    """Configuration for the event queue."""

    max_size: int = 10000  # Maximum events held in memory
    drain_batch_size: int = 1000  # Default number of events taken per flush


class AppEventQueue:
    """Thread-safe bounded FIFO of app events."""

    def __init__(self, config: QueueConfig = QueueConfig()):
        self.config = config
        self._queue: deque[AppEvent] = deque()
        self._lock = threading.RLock()

        # Statistics
        self._total_enqueued = 0
        self._total_dequeued = 0
        self._total_dropped = 0
        self._running = True

    def enqueue(self, event: AppEvent) -> bool:
        """Add an event to the queue.

        Returns:
            True if enqueued, False if the queue is full or shut down
        """
        with self._lock:
            if not self._running:
                logger.warning(f"Queue is shut down, dropping {event.event_name} event")
                self._total_dropped += 1
                return False

            if len(self._queue) >= self.config.max_size:
                logger.warning(f"Queue full, dropping {event.event_name} event")
                self._total_dropped += 1
                return False

            self._queue.append(event)
            self._total_enqueued += 1
            logger.debug(f"Enqueued {event.event_name} event, queue size: {len(self._queue)}")
            return True

    def enqueue_all(self, events: Iterable[AppEvent]) -> int:
        """Add several events, returning how many were accepted."""
        return sum(1 for event in events if self.enqueue(event))

    def dequeue_batch(self, max_size: Optional[int] = None) -> list[AppEvent]:
        """Remove and return up to ``max_size`` events in FIFO order."""
        max_size = max_size or self.config.drain_batch_size
        events = []

        with self._lock:
            while len(events) < max_size and len(self._queue) > 0:
                events.append(self._queue.popleft())
                self._total_dequeued += 1

        if events:
            logger.debug(f"Dequeued batch of {len(events)} events, queue size: {len(self._queue)}")

        return events

    def size(self) -> int:
        with self._lock:
            return len(self._queue)

    def is_empty(self) -> bool:
        with self._lock:
            return len(self._queue) == 0

    def clear(self) -> list[AppEvent]:
        """Clear all events from the queue and return them."""
        with self._lock:
            events = list(self._queue)
            self._queue.clear()
            logger.info(f"Cleared {len(events)} events from queue")
            return events

    def shutdown(self) -> list[AppEvent]:
        """Shutdown the queue and return any remaining events."""
        with self._lock:
            self._running = False
            remaining_events = list(self._queue)
            self._queue.clear()

            logger.info(f"Queue shutdown. Stats - Enqueued: {self._total_enqueued}, Dequeued: {self._total_dequeued}, Dropped: {self._total_dropped}, Remaining: {len(remaining_events)}")

            return remaining_events

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "current_size": len(self._queue),
                "max_size": self.config.max_size,
                "total_enqueued": self._total_enqueued,
                "total_dequeued": self._total_dequeued,
                "total_dropped": self._total_dropped,
                "running": self._running,
            }
