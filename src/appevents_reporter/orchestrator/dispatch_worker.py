"""Single-consumer worker that owns all dispatch calls.

Every ``report_app_event`` call is executed on one background thread, one
after the other, so the dispatcher's shared state is only touched by that
thread and no caller blocks on network I/O.
"""

from __future__ import annotations

import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, List, MutableMapping, Optional, Sequence

from loguru import logger

from ..core.events import AppEvent
from ..dispatcher import RequestDispatcher
from ..queuer import AppEventQueue


@dataclass
class DispatchTask:
    """One pending ``report_app_event`` call."""

    base_payload: MutableMapping[str, Any]
    events: List[AppEvent]
    requeue_into: Optional[AppEventQueue] = None  # Receives failed events before the future resolves
    future: Future = field(default_factory=Future)


class DispatchWorker:
    """Runs dispatch calls sequentially on a dedicated thread."""

    def __init__(self, dispatcher: RequestDispatcher, name: str = "appevents-dispatch"):
        self.dispatcher = dispatcher
        self.name = name

        self._tasks: queue.Queue[Optional[DispatchTask]] = queue.Queue()
        self._lock = threading.Lock()
        self._running = False
        self._thread: Optional[threading.Thread] = None

        # Statistics
        self._total_tasks = 0
        self._total_failed_events = 0

    def start(self) -> None:
        """Start the worker thread."""
        with self._lock:
            if self._running:
                logger.warning("Dispatch worker is already running")
                return

            self._running = True
            self._thread = threading.Thread(target=self._run, daemon=True, name=self.name)
            self._thread.start()
            logger.info("Started dispatch worker")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop accepting work; tasks already submitted still run."""
        with self._lock:
            if not self._running:
                return

            self._running = False
            self._tasks.put(None)

        if self._thread:
            self._thread.join(timeout=timeout)

        logger.info(f"Stopped dispatch worker. Stats - Tasks: {self._total_tasks}, Failed events: {self._total_failed_events}")

    @property
    def is_running(self) -> bool:
        return self._running

    def submit(
        self,
        base_payload: MutableMapping[str, Any],
        events: Sequence[AppEvent],
        requeue_into: Optional[AppEventQueue] = None,
    ) -> Future:
        """Queue a dispatch call.

        Args:
            base_payload: Shared request fields
            events: Events to send
            requeue_into: Queue that takes back failed events

        Returns:
            Future resolving to the list of failed events
        """
        task = DispatchTask(base_payload=base_payload, events=list(events or []), requeue_into=requeue_into)

        with self._lock:
            if self._running:
                self._tasks.put(task)
                return task.future

        self._requeue(task, task.events)
        task.future.set_exception(RuntimeError("Dispatch worker is not running"))
        return task.future

    def flush(self, event_queue: AppEventQueue, base_payload: MutableMapping[str, Any], requeue_failed: bool = True) -> Future:
        """Drain ``event_queue`` and dispatch everything it held.

        Args:
            event_queue: Queue to drain
            base_payload: Shared request fields
            requeue_failed: Put failed events back into the queue before the future resolves
        """
        events = event_queue.dequeue_batch(max_size=event_queue.size())
        return self.submit(base_payload, events, requeue_into=event_queue if requeue_failed else None)

    def _requeue(self, task: DispatchTask, events: List[AppEvent]) -> None:
        if task.requeue_into is None or not events:
            return

        accepted = task.requeue_into.enqueue_all(events)
        logger.info(f"Re-queued {accepted} of {len(events)} failed events")

    def _run(self) -> None:
        logger.debug("Dispatch worker loop started")

        while True:
            task = self._tasks.get()
            if task is None:
                break

            if not task.future.set_running_or_notify_cancel():
                self._requeue(task, task.events)
                continue

            try:
                failed = self.dispatcher.report_app_event(task.base_payload, task.events)
            except Exception as e:
                logger.error(f"Dispatch task failed: {e}")
                self._requeue(task, task.events)
                task.future.set_exception(e)
                continue

            self._total_tasks += 1
            self._total_failed_events += len(failed)
            self._requeue(task, failed)
            task.future.set_result(failed)

        logger.debug("Dispatch worker loop finished")
