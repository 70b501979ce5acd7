"""HTTP transport module for the ads open API."""

from .http_sender import RequestHeaders, Transport, UrllibTransport
from .response import ApiResponse, interpret_batch_response, parse_api_response

__all__ = ["ApiResponse", "RequestHeaders", "Transport", "UrllibTransport", "interpret_batch_response", "parse_api_response"]
