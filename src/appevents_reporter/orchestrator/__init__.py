"""Orchestration module for the app events reporter."""

from .dispatch_worker import DispatchTask, DispatchWorker
from .reporter import AppEventsReporter, create_default_reporter

__all__ = ["AppEventsReporter", "DispatchTask", "DispatchWorker", "create_default_reporter"]
