"""Explicit SDK state shared by the dispatcher and the remote config fetcher.

The caller owns an ``SdkContext`` for the lifetime of the SDK and injects it;
nothing here is module-global.
"""

from __future__ import annotations

import copy
import locale
import platform
import threading
from typing import Any, Callable, Dict, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from .. import __version__
from ..config.settings import ReporterConfig
from .stats import NetworkListener


class SdkContext:
    """Process-level SDK state with a rotating access token."""

    def __init__(
        self,
        app_id: str,
        access_token: str = "",
        api_version: str = "v1.2",
        sdk_version: str = __version__,
        network_listener: Optional[NetworkListener] = None,
        queue_size_provider: Optional[Callable[[], int]] = None,
    ):
        """Initialize the SDK context.

        Args:
            app_id: Application identifier registered with the ads platform
            access_token: Initial access token, may be rotated later
            api_version: Open API version used in endpoint URLs
            sdk_version: Version reported in the user agent
            network_listener: Optional observer of dispatch statistics
            queue_size_provider: Optional callable returning the number of buffered events
        """
        self.app_id = app_id
        self.api_version = api_version
        self.sdk_version = sdk_version
        self.network_listener = network_listener
        self.queue_size_provider = queue_size_provider
        self._access_token = access_token
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: ReporterConfig, **kwargs: Any) -> SdkContext:
        return cls(app_id=config.app_id, access_token=config.access_token, api_version=config.api_version, **kwargs)

    def get_access_token(self) -> str:
        with self._lock:
            return self._access_token

    def set_access_token(self, token: str) -> None:
        """Rotate the access token; the next request picks it up."""
        with self._lock:
            self._access_token = token
        logger.debug("Access token updated")

    def user_agent(self) -> str:
        return f"appevents-python-sdk/{self.sdk_version}/{self.api_version}"

    def pending_queue_size(self) -> int:
        """Number of events still buffered by the queue owner."""
        if self.queue_size_provider is None:
            return 0
        return self.queue_size_provider()


class AppInfo(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., description="Application identifier")
    name: Optional[str] = None
    version: Optional[str] = None


class DeviceInfo(BaseModel):
    model_config = ConfigDict(extra="forbid")

    platform: str
    os_version: str
    architecture: Optional[str] = None
    hostname: Optional[str] = None


class LibraryInfo(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = "appevents-python-sdk"
    version: str = __version__


class ApiContext(BaseModel):
    """Shared ``context`` object attached to every wire record."""

    model_config = ConfigDict(extra="forbid")

    app: AppInfo
    device: DeviceInfo
    library: LibraryInfo = Field(default_factory=LibraryInfo)
    locale: Optional[str] = None
    user_agent: str


class ApiContextBuilder:
    """Builds the per-process API context once and hands out copies."""

    def __init__(self, sdk_context: SdkContext, app_name: Optional[str] = None, app_version: Optional[str] = None):
        self.sdk_context = sdk_context
        self.app_name = app_name
        self.app_version = app_version
        self._cached: Optional[Dict[str, Any]] = None
        self._lock = threading.Lock()

    def get_context_for_api(self) -> Dict[str, Any]:
        """Return the shared context object as a JSON-ready dict."""
        with self._lock:
            if self._cached is None:
                self._cached = self._build().model_dump(exclude_none=True)
                logger.debug(f"Built API context: {self._cached}")
            return copy.deepcopy(self._cached)

    def _build(self) -> ApiContext:
        return ApiContext(
            app=AppInfo(id=self.sdk_context.app_id, name=self.app_name, version=self.app_version),
            device=DeviceInfo(
                platform=platform.system().lower() or "unknown",
                os_version=platform.release() or "unknown",
                architecture=platform.machine() or None,
                hostname=platform.node() or None,
            ),
            library=LibraryInfo(version=self.sdk_context.sdk_version),
            locale=_current_locale(),
            user_agent=self.sdk_context.user_agent(),
        )


def _current_locale() -> Optional[str]:
    try:
        return locale.getlocale()[0]
    except ValueError:
        return None
