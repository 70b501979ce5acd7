"""Conversion of app events into wire records for the batch endpoint."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from .errors import SerializationError
from .events import AppEvent

ISO8601_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_iso8601(value: datetime) -> str:
    """Format a timestamp with second precision and a literal ``Z`` suffix.

    No timezone conversion is done; callers pass times already in UTC.
    """
    return value.strftime(ISO8601_FORMAT)


def parse_properties(properties: Any) -> Dict[str, Any]:
    """Return a JSON-clean copy of an event's property bag.

    Accepts a mapping or a JSON object string.
    """
    try:
        if isinstance(properties, (str, bytes)):
            parsed = json.loads(properties)
        elif properties is None:
            parsed = {}
        else:
            parsed = json.loads(json.dumps(properties, allow_nan=False))
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Event properties are not JSON-compatible: {e}") from e

    if not isinstance(parsed, dict):
        raise SerializationError(f"Event properties must be a JSON object, got {type(parsed).__name__}")

    return parsed


def to_wire_record(event: Optional[AppEvent], context: Mapping[str, Any]) -> Dict[str, Any]:
    """Build the ``track`` record sent for one event.

    Raises:
        SerializationError: the event cannot be represented as wire JSON
    """
    if event is None:
        raise SerializationError("Cannot serialize a missing event")

    if not isinstance(event.event_name, str):
        raise SerializationError(f"Event {event.unique_id} has an invalid name: {event.event_name!r}")

    if not isinstance(event.timestamp, datetime):
        raise SerializationError(f"Event {event.unique_id} has no valid timestamp")

    record: Dict[str, Any] = {
        "type": "track",
        "event": event.event_name,
        "timestamp": format_iso8601(event.timestamp),
    }

    properties = parse_properties(event.properties)
    if properties:
        record["properties"] = properties

    record["context"] = dict(context)

    try:
        json.dumps(record, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Event {event.unique_id} cannot be encoded: {e}") from e

    return record
