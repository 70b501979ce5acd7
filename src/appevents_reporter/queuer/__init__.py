"""Event queue module for buffering app events."""

from .event_queue import AppEventQueue, QueueConfig

__all__ = ["AppEventQueue", "QueueConfig"]
