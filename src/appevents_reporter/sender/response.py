"""Parsing of open API responses."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.errors import ApplicationError, ProtocolError, TransportFailure


class ApiResponse(BaseModel):
    """Envelope returned by every open API endpoint."""

    model_config = ConfigDict(extra="ignore")

    code: int = Field(..., strict=True, description="0 when the request was accepted")
    message: Any = None  # Not interpreted
    data: Any = None  # Endpoint specific


def parse_api_response(body: Optional[str]) -> ApiResponse:
    """Parse a raw response body.

    Raises:
        TransportFailure: no body was received
        ProtocolError: the body is not JSON or has no integer ``code``
    """
    if body is None:
        raise TransportFailure()

    try:
        return ApiResponse.model_validate_json(body)
    except ValidationError as e:
        raise ProtocolError(f"Malformed API response: {e.error_count()} error(s): {body[:200]!r}") from e


def interpret_batch_response(body: Optional[str]) -> ApiResponse:
    """Decide whether a batch was accepted.

    Returns the parsed response when ``code == 0``.

    Raises:
        TransportFailure, ProtocolError, ApplicationError
    """
    response = parse_api_response(body)
    if response.code != 0:
        raise ApplicationError(response.code, None if response.message is None else str(response.message))
    return response
