"""Core models and helpers for the app events reporter."""

from .context import ApiContext, ApiContextBuilder, SdkContext
from .crash_handler import CrashRecord, CrashReporter, LoggingCrashReporter
from .errors import ApplicationError, ProtocolError, ReporterError, SerializationError, TransportFailure
from .events import AppEvent, next_unique_id
from .serializer import format_iso8601, parse_properties, to_wire_record
from .stats import DispatchStats, NetworkListener

__all__ = [
    "ApiContext",
    "ApiContextBuilder",
    "AppEvent",
    "ApplicationError",
    "CrashRecord",
    "CrashReporter",
    "DispatchStats",
    "LoggingCrashReporter",
    "NetworkListener",
    "ProtocolError",
    "ReporterError",
    "SdkContext",
    "SerializationError",
    "TransportFailure",
    "format_iso8601",
    "next_unique_id",
    "parse_properties",
    "to_wire_record",
]
