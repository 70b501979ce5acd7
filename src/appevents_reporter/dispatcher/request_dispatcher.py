"""Batch dispatch of app events to the ads open API.

This module splits a list of buffered events into bounded chunks, sends one
POST per chunk and collects the events of every failed chunk so the caller
can retry or discard them. It also keeps per-call and lifetime statistics and
notifies an optional network listener after every step.
"""

from __future__ import annotations

import json
import threading
from collections import deque
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Sequence, TypeVar

from loguru import logger

from ..config.settings import ReporterConfig
from ..core.context import SdkContext
from ..core.crash_handler import CrashReporter
from ..core.errors import ApplicationError, ProtocolError, SerializationError, TransportFailure
from ..core.events import AppEvent
from ..core.serializer import to_wire_record
from ..core.stats import DispatchStats
from ..sender.http_sender import RequestHeaders, Transport
from ..sender.response import interpret_batch_response

T = TypeVar("T")

MAX_EVENT_SIZE = 50


def average_assign(source: Sequence[T], split_num: int) -> List[List[T]]:
    """Split ``source`` into consecutive chunks of ``split_num`` items.

    The last chunk holds the remainder. An empty source gives no chunks.

    Raises:
        ValueError: ``split_num`` is not positive
    """
    if split_num <= 0:
        raise ValueError(f"Chunk size must be positive, got {split_num}")

    return [list(source[start : start + split_num]) for start in range(0, len(source), split_num)]


class RequestDispatcher:
    """Sends app events in batches and keeps dispatch statistics.

    Only one ``report_app_event`` call runs at a time; it mutates the shared
    header map, the statistics and the caller's payload template.
    """

    TAG = "RequestDispatcher"

    def __init__(
        self,
        sdk_context: SdkContext,
        transport: Transport,
        headers: RequestHeaders,
        context_provider: Callable[[], Dict[str, Any]],
        crash_reporter: CrashReporter,
        config: Optional[ReporterConfig] = None,
    ):
        """Initialize the dispatcher.

        Args:
            sdk_context: SDK state providing the access token and listener
            transport: HTTP primitive used for the POST requests
            headers: Shared header map
            context_provider: Returns the shared ``context`` object for wire records
            crash_reporter: Sink for internal errors
            config: Reporter configuration
        """
        self.sdk_context = sdk_context
        self.transport = transport
        self.headers = headers
        self.context_provider = context_provider
        self.crash_reporter = crash_reporter
        self.config = config or ReporterConfig()

        self._lock = threading.RLock()

        # Stats for the current call
        self._to_be_sent = 0
        self._failed = 0
        self._successful = 0

        if self.config.max_batch_size <= 0:
            logger.warning(f"Invalid max batch size: {self.config.max_batch_size}, using {MAX_EVENT_SIZE}")

        history_limit = self.config.lifetime_history_limit
        if history_limit is not None and history_limit <= 0:
            logger.warning(f"Invalid lifetime history limit: {history_limit}, keeping full history")
            history_limit = None

        # Stats for the whole lifecycle
        self._all_request_ids: set[int] = set()
        self._successfully_sent: deque[AppEvent] = deque(maxlen=history_limit)
        self._total_successful = 0

    @property
    def max_batch_size(self) -> int:
        size = self.config.max_batch_size
        return size if size > 0 else MAX_EVENT_SIZE

    def report_app_event(self, base_payload: MutableMapping[str, Any], events: Optional[Sequence[AppEvent]]) -> List[AppEvent]:
        """Send events in chunks and return every event that failed.

        Never raises: internal errors are reported to the crash reporter and
        the affected chunk counts as failed.

        Args:
            base_payload: Shared request fields; a ``batch`` key is set on it per chunk
            events: Events to send, in order

        Returns:
            Events of failed chunks, in their original order
        """
        if not events:
            return []

        with self._lock:
            # access token might rotate between calls
            self.headers.refresh_credential(self.sdk_context.get_access_token())

            events = list(events)
            self._all_request_ids.update(event.unique_id for event in events if event is not None)

            self._to_be_sent = len(events)
            self._failed = 0
            self._successful = 0
            self._notify_change()

            url = self.config.events_url(self.sdk_context.api_version)
            failed_events: List[AppEvent] = []

            for chunk in average_assign(events, self.max_batch_size):
                failed_events.extend(self._dispatch_chunk(url, base_payload, chunk))
                self._notify_change()

            logger.debug(f"Flushed {self._successful} events, failed to flush {len(failed_events)} events")

            self._to_be_sent = 0
            self._failed = 0
            self._successful = 0
            self._notify_change()

            return failed_events

    def get_successfully_sent_events(self) -> List[AppEvent]:
        """Events accepted by the server so far, for debugging."""
        with self._lock:
            return list(self._successfully_sent)

    def get_dispatch_stats(self) -> DispatchStats:
        with self._lock:
            return DispatchStats(
                pending=self._to_be_sent,
                successful=self._successful,
                failed=self._failed,
                cumulative_seen=len(self._all_request_ids) + self.sdk_context.pending_queue_size(),
                cumulative_successful=self._total_successful,
            )

    def get_stats(self) -> Dict[str, Any]:
        """Get dispatcher statistics."""
        with self._lock:
            return {
                "seen_event_ids": len(self._all_request_ids),
                "total_successful": self._total_successful,
                "retained_successful": len(self._successfully_sent),
                "lifetime_history_limit": self._successfully_sent.maxlen,
                "max_batch_size": self.max_batch_size,
            }

    def _dispatch_chunk(self, url: str, base_payload: MutableMapping[str, Any], chunk: List[AppEvent]) -> List[AppEvent]:
        """Serialize, send and account for one chunk.

        Returns:
            The chunk's failed events, in chunk order
        """
        self._to_be_sent -= len(chunk)

        try:
            context = self.context_provider()
        except Exception as e:
            self.crash_reporter.handle_crash(self.TAG, e)
            self._failed += len(chunk)
            return list(chunk)

        sendable: List[AppEvent] = []
        rejected: List[AppEvent] = []
        batch: List[Dict[str, Any]] = []
        for event in chunk:
            try:
                batch.append(to_wire_record(event, context))
                sendable.append(event)
            except SerializationError as e:
                self.crash_reporter.handle_crash(self.TAG, e)
                if self.config.fail_unserializable_events:
                    rejected.append(event)

        if batch and self._send_batch(url, base_payload, batch):
            self._successful += len(sendable)
            self._total_successful += len(sendable)
            self._successfully_sent.extend(sendable)
            failed = rejected
        elif batch:
            failed = sendable + rejected
        else:
            logger.debug(f"No serializable events in chunk of {len(chunk)}, skipping request")
            failed = rejected

        self._failed += len(failed)
        failed_ids = {id(event) for event in failed}
        return [event for event in chunk if id(event) in failed_ids]

    def _send_batch(self, url: str, base_payload: MutableMapping[str, Any], batch: List[Dict[str, Any]]) -> bool:
        """POST one batch and report whether the server accepted it."""
        try:
            base_payload["batch"] = batch
            body = json.dumps(base_payload)
        except (TypeError, ValueError) as e:
            self.crash_reporter.handle_crash(self.TAG, SerializationError(f"Cannot serialize request body: {e}"))
            return False

        logger.opt(lazy=True).debug("To Api:\n{}", lambda: json.dumps(base_payload, indent=4))

        try:
            result = self.transport.do_post(url, self.headers.snapshot(), body)
        except Exception as e:
            self.crash_reporter.handle_crash(self.TAG, e)
            result = None

        if result is not None:
            logger.debug(f"From Api: {result}")

        try:
            interpret_batch_response(result)
        except TransportFailure:
            logger.warning(f"Transport failure sending {len(batch)} events")
            return False
        except ProtocolError as e:
            self.crash_reporter.handle_crash(self.TAG, e)
            return False
        except ApplicationError as e:
            logger.warning(f"Batch of {len(batch)} events rejected: {e.message}")
            return False

        return True

    def _notify_change(self) -> None:
        listener = self.sdk_context.network_listener
        if listener is None:
            return

        try:
            listener(self.get_dispatch_stats())
        except Exception as e:
            self.crash_reporter.handle_crash(self.TAG, e)
