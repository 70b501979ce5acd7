"""Configuration management for the app events reporter.

This module provides the reporter configuration with environment variable
overrides and a small manager for the process-wide configuration instance.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

from loguru import logger


@dataclass
class ReporterConfig:
    """Complete reporter configuration."""

    # Server settings
    api_base_url: str = "https://ads.tiktok.com/open_api"
    api_version: str = "v1.2"
    batch_path: str = "app/batch/"
    config_path: str = "business_sdk_config/get/"

    # Client identification
    app_id: str = ""
    access_token: str = ""

    # Dispatch settings
    max_batch_size: int = 50  # Events per POST
    timeout_seconds: int = 30  # Transport timeout
    fail_unserializable_events: bool = False  # Route bad events to the failed list instead of dropping
    lifetime_history_limit: Optional[int] = None  # None keeps every successfully sent event

    # Logging settings
    log_level: str = "INFO"
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: Path = field(default_factory=lambda: Path.cwd() / "logs" / "appevents.log")
    log_rotation: str = "10 MB"
    log_retention: str = "7 days"
    log_package_only: bool = True  # Sinks ignore records from the host application

    def __post_init__(self):
        """Apply environment variable overrides."""
        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """Apply configuration overrides from environment variables."""
        if api_base_url := os.getenv("APPEVENTS_API_BASE_URL"):
            self.api_base_url = api_base_url

        if api_version := os.getenv("APPEVENTS_API_VERSION"):
            self.api_version = api_version

        if app_id := os.getenv("APPEVENTS_APP_ID"):
            self.app_id = app_id

        if access_token := os.getenv("APPEVENTS_ACCESS_TOKEN"):
            self.access_token = access_token

        if max_batch_size := os.getenv("APPEVENTS_MAX_BATCH_SIZE"):
            try:
                self.max_batch_size = int(max_batch_size)
            except ValueError:
                logger.warning(f"Invalid max batch size: {max_batch_size}")

        if timeout_seconds := os.getenv("APPEVENTS_TIMEOUT_SECONDS"):
            try:
                self.timeout_seconds = int(timeout_seconds)
            except ValueError:
                logger.warning(f"Invalid timeout: {timeout_seconds}")

        if history_limit := os.getenv("APPEVENTS_LIFETIME_HISTORY_LIMIT"):
            try:
                self.lifetime_history_limit = int(history_limit)
            except ValueError:
                logger.warning(f"Invalid lifetime history limit: {history_limit}")

        if fail_unserializable := os.getenv("APPEVENTS_FAIL_UNSERIALIZABLE_EVENTS"):
            self.fail_unserializable_events = fail_unserializable.lower() in ("1", "true", "yes")

        # Logging
        if log_level := os.getenv("APPEVENTS_LOG_LEVEL"):
            self.log_level = log_level.upper()

        if log_file_path := os.getenv("APPEVENTS_LOG_FILE"):
            self.log_file_path = Path(log_file_path)
            self.log_to_file = True

    def events_url(self, api_version: Optional[str] = None) -> str:
        """URL of the batch ingest endpoint."""
        version = api_version or self.api_version
        return f"{self.api_base_url.rstrip('/')}/{version}/{self.batch_path.lstrip('/')}"

    def remote_config_url(self, app_id: Optional[str] = None) -> str:
        """URL of the remote config endpoint for an app."""
        query = urlencode({"app_id": app_id or self.app_id})
        return f"{self.api_base_url.rstrip('/')}/{self.config_path.lstrip('/')}?{query}"

    def validate(self) -> tuple[bool, list[str]]:
        """Validate the configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if not self.api_base_url:
            errors.append("API base URL is required")

        if not self.app_id:
            errors.append("App ID is required")

        if not self.access_token:
            errors.append("Access token is required")

        if self.max_batch_size <= 0:
            errors.append("Max batch size must be positive")

        if self.timeout_seconds <= 0:
            errors.append("Timeout must be positive")

        if self.lifetime_history_limit is not None and self.lifetime_history_limit <= 0:
            errors.append("Lifetime history limit must be positive when set")

        return len(errors) == 0, errors


class ConfigManager:
    """Manages the reporter configuration."""

    def __init__(self):
        self._config: Optional[ReporterConfig] = None

    def load_config(
        self,
        api_base_url: Optional[str] = None,
        app_id: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> ReporterConfig:
        """Load configuration with optional overrides.

        Args:
            api_base_url: Base URL override
            app_id: App ID override
            access_token: Access token override

        Returns:
            Configured ReporterConfig instance
        """
        config = ReporterConfig()

        if api_base_url:
            config.api_base_url = api_base_url

        if app_id:
            config.app_id = app_id

        if access_token:
            config.access_token = access_token

        self._config = config
        return config

    def get_config(self) -> Optional[ReporterConfig]:
        """Get current configuration."""
        return self._config

    def validate_config(self) -> tuple[bool, list[str]]:
        """Validate current configuration."""
        if not self._config:
            return False, ["No configuration loaded"]

        return self._config.validate()


# Global configuration manager instance
_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager."""
    return _config_manager
