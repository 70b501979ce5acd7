"""Tests for configuration, logging setup and the crash reporter."""

from __future__ import annotations

import sys

from loguru import logger

from appevents_reporter.config import ReporterConfig, get_config_manager, setup_logging
from appevents_reporter.core import LoggingCrashReporter


def test_defaults():
    config = ReporterConfig()

    assert config.max_batch_size == 50
    assert config.lifetime_history_limit is None
    assert config.fail_unserializable_events is False
    assert config.events_url() == "https://ads.tiktok.com/open_api/v1.2/app/batch/"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("APPEVENTS_APP_ID", "env-app")
    monkeypatch.setenv("APPEVENTS_ACCESS_TOKEN", "env-token")
    monkeypatch.setenv("APPEVENTS_API_VERSION", "v2")
    monkeypatch.setenv("APPEVENTS_MAX_BATCH_SIZE", "25")
    monkeypatch.setenv("APPEVENTS_LIFETIME_HISTORY_LIMIT", "1000")
    monkeypatch.setenv("APPEVENTS_FAIL_UNSERIALIZABLE_EVENTS", "true")

    config = ReporterConfig()

    assert config.app_id == "env-app"
    assert config.access_token == "env-token"
    assert config.max_batch_size == 25
    assert config.lifetime_history_limit == 1000
    assert config.fail_unserializable_events is True
    assert config.events_url() == "https://ads.tiktok.com/open_api/v2/app/batch/"


def test_invalid_env_value_keeps_default(monkeypatch):
    monkeypatch.setenv("APPEVENTS_MAX_BATCH_SIZE", "lots")
    assert ReporterConfig().max_batch_size == 50


def test_remote_config_url_encodes_app_id():
    config = ReporterConfig(api_base_url="https://api.example.test/open_api/", app_id="a b&c")
    assert config.remote_config_url() == "https://api.example.test/open_api/business_sdk_config/get/?app_id=a+b%26c"
    assert config.remote_config_url("other").endswith("?app_id=other")


def test_validate():
    is_valid, errors = ReporterConfig(max_batch_size=0, lifetime_history_limit=-1).validate()

    assert not is_valid
    assert "App ID is required" in errors
    assert "Access token is required" in errors
    assert "Max batch size must be positive" in errors
    assert "Lifetime history limit must be positive when set" in errors

    assert ReporterConfig(app_id="a", access_token="t").validate() == (True, [])


def test_config_manager():
    manager = get_config_manager()
    config = manager.load_config(app_id="app-1", access_token="tok")

    assert manager.get_config() is config
    assert manager.validate_config() == (True, [])


def _write_logs(config):
    handler_ids = setup_logging(config)
    logger.debug("hello from the host application")
    logger.complete()
    logger.remove()
    logger.add(sys.stderr)
    return handler_ids


def test_setup_logging_keeps_only_package_records(tmp_path):
    log_file = tmp_path / "logs" / "reporter.log"
    config = ReporterConfig(log_to_console=False, log_to_file=True, log_file_path=log_file, log_level="DEBUG")

    handler_ids = _write_logs(config)

    content = log_file.read_text()
    assert len(handler_ids) == 1
    assert "Logging configured" in content
    assert "appevents_reporter.config.logger_config" in content
    assert "hello from the host application" not in content


def test_setup_logging_can_include_host_records(tmp_path):
    log_file = tmp_path / "reporter.log"
    config = ReporterConfig(log_to_console=False, log_to_file=True, log_file_path=log_file, log_level="DEBUG", log_package_only=False)

    _write_logs(config)

    assert "hello from the host application" in log_file.read_text()


def test_crash_reporter_records_and_forwards():
    forwarded = []
    reporter = LoggingCrashReporter(max_records=2, callback=lambda record, exc: forwarded.append(exc))

    for i in range(3):
        reporter.handle_crash("Test", ValueError(f"boom {i}"))

    assert [record.message for record in reporter.get_records()] == ["boom 1", "boom 2"]
    assert reporter.total_reported == 3
    assert len(forwarded) == 3


def test_crash_callback_failure_is_contained():
    def broken(record, exc):
        raise RuntimeError("callback down")

    reporter = LoggingCrashReporter(callback=broken)
    reporter.handle_crash("Test", KeyError("x"))

    assert reporter.get_records()[0].error_type == "KeyError"
