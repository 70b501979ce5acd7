"""Exceptions raised while turning events into requests and reading responses.

None of these escape the dispatcher or the remote config fetcher; they classify
why a batch counts as failed.
"""

from __future__ import annotations

from typing import Optional


class ReporterError(Exception):
    """Base class for reporter errors."""

    def __init__(self, message: str = "An error occurred while reporting app events."):
        self.message = message
        super().__init__(self.message)


class SerializationError(ReporterError):
    """An event or request body could not be turned into wire JSON."""


class TransportFailure(ReporterError):
    """The HTTP primitive returned no response body."""

    def __init__(self, message: str = "No response from server (transport failure)."):
        super().__init__(message)


class ProtocolError(ReporterError):
    """The response body is not JSON or lacks the integer status code."""


class ApplicationError(ReporterError):
    """The server answered with a non-zero status code."""

    def __init__(self, code: int, message: Optional[str] = None):
        self.code = code
        super().__init__(message or f"Server rejected request with code {code}")
