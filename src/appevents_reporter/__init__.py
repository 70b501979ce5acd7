"""App events reporter - batched event dispatch for the ads open API."""

__version__ = "1.0.0"

from .config import ReporterConfig, get_config_manager, setup_logging  # noqa: E402
from .core import AppEvent, DispatchStats, SdkContext  # noqa: E402
from .dispatcher import RequestDispatcher, average_assign  # noqa: E402
from .orchestrator import AppEventsReporter, DispatchWorker, create_default_reporter  # noqa: E402
from .remote_config import RemoteConfigFetcher  # noqa: E402

__all__ = [
    "AppEvent",
    "AppEventsReporter",
    "DispatchStats",
    "DispatchWorker",
    "RemoteConfigFetcher",
    "ReporterConfig",
    "RequestDispatcher",
    "SdkContext",
    "average_assign",
    "create_default_reporter",
    "get_config_manager",
    "setup_logging",
]
