"""Configuration module for the app events reporter."""

from .logger_config import setup_logging
from .settings import ConfigManager, ReporterConfig, get_config_manager

__all__ = ["ReporterConfig", "ConfigManager", "get_config_manager", "setup_logging"]
