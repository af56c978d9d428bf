import logging

import structlog

from weather_aggregator.logging import _service_context, init_logging


def test_service_context_stamps_events():
    processor = _service_context("weather-aggregator", "test")
    event = processor(None, "info", {"event": "cache_hit"})
    assert event == {"event": "cache_hit", "service": "weather-aggregator", "env": "test"}


def test_service_context_keeps_explicit_values():
    processor = _service_context("weather-aggregator", "test")
    event = processor(None, "info", {"event": "x", "service": "other"})
    assert event["service"] == "other"


def test_init_logging_installs_service_context():
    try:
        init_logging("INFO", app_name="weather-aggregator", app_env="test")
        names = [getattr(p, "__qualname__", "") for p in structlog.get_config()["processors"]]
        assert any(name.startswith("_service_context") for name in names)
        assert logging.getLogger("urllib3").level == logging.WARNING
    finally:
        structlog.reset_defaults()
