"""Batch dispatch module for app events."""

from .request_dispatcher import MAX_EVENT_SIZE, RequestDispatcher, average_assign

__all__ = ["MAX_EVENT_SIZE", "RequestDispatcher", "average_assign"]
