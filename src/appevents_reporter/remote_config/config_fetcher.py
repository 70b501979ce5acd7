"""Fetching of the remote SDK configuration."""

from __future__ import annotations

from typing import Any, Dict, Optional

from loguru import logger

from ..config.settings import ReporterConfig
from ..core.context import SdkContext
from ..core.crash_handler import CrashReporter
from ..core.errors import ProtocolError
from ..sender.http_sender import RequestHeaders, Transport
from ..sender.response import parse_api_response


class RemoteConfigFetcher:
    """Performs a single GET for the app's global SDK configuration."""

    TAG = "RemoteConfigFetcher"

    def __init__(
        self,
        sdk_context: SdkContext,
        transport: Transport,
        headers: RequestHeaders,
        crash_reporter: CrashReporter,
        config: Optional[ReporterConfig] = None,
    ):
        self.sdk_context = sdk_context
        self.transport = transport
        self.headers = headers
        self.crash_reporter = crash_reporter
        self.config = config or ReporterConfig()

    def get_remote_config(self) -> Optional[Dict[str, Any]]:
        """Fetch the remote config.

        Returns:
            The ``data`` object when the server answers ``code == 0``, else None
        """
        logger.info("Try to fetch global configs")
        self.headers.refresh_credential(self.sdk_context.get_access_token())
        url = self.config.remote_config_url(self.sdk_context.app_id)

        try:
            result = self.transport.do_get(url, self.headers.snapshot())
        except Exception as e:
            self.crash_reporter.handle_crash(self.TAG, e)
            return None

        logger.debug(f"Remote config response: {result}")
        if result is None:
            logger.warning("Failed to fetch global configs: no response")
            return None

        try:
            response = parse_api_response(result)
        except ProtocolError as e:
            self.crash_reporter.handle_crash(self.TAG, e)
            return None

        if response.code != 0:
            logger.warning(f"Global config request rejected with code {response.code}: {response.message}")
            return None

        if not isinstance(response.data, dict):
            logger.warning(f"Global config response has no data object: {response.data!r}")
            return None

        logger.info(f"Global config fetched: {response.data}")
        return response.data
