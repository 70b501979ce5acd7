"""Wiring of the reporter components.

``AppEventsReporter`` ties together the SDK context, the transport, the
dispatcher, the remote config fetcher, the event queue and the dispatch
worker, and ties their construction and teardown to the SDK lifecycle.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Dict, MutableMapping, Optional

from loguru import logger

from ..config.settings import ReporterConfig
from ..core.context import ApiContextBuilder, SdkContext
from ..core.crash_handler import CrashReporter, LoggingCrashReporter
from ..core.events import AppEvent
from ..core.stats import NetworkListener
from ..dispatcher import RequestDispatcher
from ..queuer import AppEventQueue, QueueConfig
from ..remote_config import RemoteConfigFetcher
from ..sender import RequestHeaders, Transport, UrllibTransport
from .dispatch_worker import DispatchWorker


class AppEventsReporter:
    """Entry point owning every reporter component."""

    def __init__(
        self,
        config: ReporterConfig,
        transport: Optional[Transport] = None,
        crash_reporter: Optional[CrashReporter] = None,
        network_listener: Optional[NetworkListener] = None,
        queue_config: QueueConfig = QueueConfig(),
        app_name: Optional[str] = None,
        app_version: Optional[str] = None,
    ):
        self.config = config
        self.queue = AppEventQueue(queue_config)
        self.sdk_context = SdkContext.from_config(config, network_listener=network_listener, queue_size_provider=self.queue.size)
        self.transport = transport or UrllibTransport(timeout_seconds=config.timeout_seconds)
        self.crash_reporter = crash_reporter or LoggingCrashReporter()
        self.headers = RequestHeaders(self.sdk_context.user_agent())
        self.context_builder = ApiContextBuilder(self.sdk_context, app_name=app_name, app_version=app_version)

        self.dispatcher = RequestDispatcher(
            sdk_context=self.sdk_context,
            transport=self.transport,
            headers=self.headers,
            context_provider=self.context_builder.get_context_for_api,
            crash_reporter=self.crash_reporter,
            config=config,
        )
        self.config_fetcher = RemoteConfigFetcher(
            sdk_context=self.sdk_context,
            transport=self.transport,
            headers=self.headers,
            crash_reporter=self.crash_reporter,
            config=config,
        )
        self.worker = DispatchWorker(self.dispatcher)

    def start(self) -> None:
        self.worker.start()
        logger.info(f"App events reporter started - App ID: {self.sdk_context.app_id}, API: {self.config.events_url(self.sdk_context.api_version)}")

    def stop(self, timeout: float = 5.0) -> None:
        self.worker.stop(timeout=timeout)
        logger.info("App events reporter stopped")

    def track(self, event: AppEvent) -> bool:
        """Buffer an event until the next flush."""
        return self.queue.enqueue(event)

    def flush(self, base_payload: MutableMapping[str, Any], requeue_failed: bool = True) -> Future:
        """Send every buffered event on the worker thread."""
        return self.worker.flush(self.queue, base_payload, requeue_failed=requeue_failed)

    def get_remote_config(self) -> Optional[Dict[str, Any]]:
        return self.config_fetcher.get_remote_config()

    def set_access_token(self, token: str) -> None:
        self.sdk_context.set_access_token(token)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "dispatch": self.dispatcher.get_dispatch_stats().to_dict(),
            "dispatcher": self.dispatcher.get_stats(),
            "queue": self.queue.get_stats(),
            "worker_running": self.worker.is_running,
        }


def create_default_reporter(
    config: Optional[ReporterConfig] = None,
    transport: Optional[Transport] = None,
    network_listener: Optional[NetworkListener] = None,
) -> AppEventsReporter:
    """Create a reporter, validating the configuration first.

    Raises:
        ValueError: the configuration is invalid
    """
    config = config or ReporterConfig()

    is_valid, errors = config.validate()
    if not is_valid:
        raise ValueError(f"Invalid reporter configuration: {'; '.join(errors)}")

    return AppEventsReporter(config, transport=transport, network_listener=network_listener)
