"""Shared fixtures for the app events reporter tests."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Union

import pytest

from appevents_reporter.config import ReporterConfig
from appevents_reporter.core import AppEvent, ApiContextBuilder, LoggingCrashReporter, SdkContext
from appevents_reporter.dispatcher import RequestDispatcher
from appevents_reporter.sender import RequestHeaders

OK = '{"code": 0, "message": "OK"}'

Response = Union[Optional[str], Exception]


@dataclass
class RecordedRequest:
    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[str] = None


@dataclass
class FakeTransport:
    """In-memory transport replaying scripted responses.

    ``responses`` is either a list consumed per request (the last entry is
    repeated) or a callable receiving the request index.
    """

    responses: Union[List[Response], Callable[[int], Response]] = field(default_factory=lambda: [OK])
    delay: float = 0.0
    requests: List[RecordedRequest] = field(default_factory=list)
    max_in_flight: int = 0
    _in_flight: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def do_get(self, url, headers):
        return self._handle(RecordedRequest("GET", url, dict(headers)))

    def do_post(self, url, headers, body):
        return self._handle(RecordedRequest("POST", url, dict(headers), body))

    @property
    def posts(self) -> List[RecordedRequest]:
        return [r for r in self.requests if r.method == "POST"]

    def _handle(self, request: RecordedRequest) -> Optional[str]:
        with self._lock:
            index = len(self.requests)
            self.requests.append(request)
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)

        try:
            if self.delay:
                time.sleep(self.delay)

            if callable(self.responses):
                response = self.responses(index)
            else:
                response = self.responses[min(index, len(self.responses) - 1)]

            if isinstance(response, Exception):
                raise response
            return response
        finally:
            with self._lock:
                self._in_flight -= 1


def make_events(count: int, prefix: str = "event") -> List[AppEvent]:
    return [AppEvent(event_name=f"{prefix}_{i}", timestamp=datetime(2024, 5, 1, 12, 0, i % 60), properties={"index": i}) for i in range(count)]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep APPEVENTS_* variables from leaking into configs."""
    import os

    for key in list(os.environ):
        if key.startswith("APPEVENTS_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def config() -> ReporterConfig:
    return ReporterConfig(api_base_url="https://api.example.test/open_api", app_id="app-123", access_token="token-1", log_to_console=False)


@pytest.fixture
def listener_calls() -> list:
    return []


@pytest.fixture
def sdk_context(config, listener_calls) -> SdkContext:
    return SdkContext.from_config(config, network_listener=listener_calls.append)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def crash_reporter() -> LoggingCrashReporter:
    return LoggingCrashReporter()


@pytest.fixture
def headers(sdk_context) -> RequestHeaders:
    return RequestHeaders(sdk_context.user_agent())


@pytest.fixture
def dispatcher(sdk_context, transport, headers, crash_reporter, config) -> RequestDispatcher:
    return RequestDispatcher(
        sdk_context=sdk_context,
        transport=transport,
        headers=headers,
        context_provider=ApiContextBuilder(sdk_context, app_name="Demo").get_context_for_api,
        crash_reporter=crash_reporter,
        config=config,
    )
