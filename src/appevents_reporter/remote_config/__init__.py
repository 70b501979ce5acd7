"""Remote SDK configuration module."""

from .config_fetcher import RemoteConfigFetcher

__all__ = ["RemoteConfigFetcher"]
