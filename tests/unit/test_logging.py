"""
Unit Tests - Logging Configuration
"""
import logging

import pytest
import structlog
from structlog.processors import JSONRenderer

from storefront import create_context
from storefront.config import MonitoringSettings, Settings, StoreSettings
from storefront.config.logging import build_renderer, configure_logging, resolve_level


@pytest.fixture
def restore_logging():
    """Put the root handlers and structlog defaults back after a test"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def make_settings(**monitoring) -> Settings:
    return Settings(
        app_env="testing",
        store=StoreSettings(seed_sample_data=False, currency="EUR"),
        monitoring=MonitoringSettings(**monitoring),
    )


class TestRenderer:
    """Tests for the renderer choice"""

    def test_json_format(self):
        """Test the json format renders JSON lines"""
        assert isinstance(build_renderer(make_settings(LOG_FORMAT="json")), JSONRenderer)

    def test_text_format(self):
        """Test the text format renders for the console"""
        renderer = build_renderer(make_settings(LOG_FORMAT="text"))

        assert isinstance(renderer, structlog.dev.ConsoleRenderer)


class TestConfigureLogging:
    """Tests for root logger setup"""

    def test_stdout_only_by_default(self, restore_logging):
        """Test a single stream handler is attached when no log file is set"""
        handlers = configure_logging(make_settings(LOG_FORMAT="json"))

        assert [type(h) for h in handlers] == [logging.StreamHandler]
        assert logging.getLogger().handlers == handlers
        assert isinstance(handlers[0].formatter.processors[-1], JSONRenderer)

    def test_file_handler(self, restore_logging, tmp_path):
        """Test a file handler is added and receives rendered events"""
        log_file = tmp_path / "store.log"

        handlers = configure_logging(make_settings(LOG_FORMAT="json", log_file=str(log_file)))
        for handler in handlers:
            handler.flush()

        assert isinstance(handlers[1], logging.FileHandler)
        assert '"event": "Logging configured"' in log_file.read_text(encoding="utf-8")

    def test_store_context_is_bound(self, restore_logging):
        """Test every event carries the app, environment and currency"""
        configure_logging(make_settings())

        bound = structlog.contextvars.get_contextvars()

        assert bound == {"app": "storefront-assistant", "environment": "testing", "currency": "EUR"}

    def test_explicit_level_wins(self, restore_logging):
        """Test the log level argument overrides the settings"""
        configure_logging(make_settings(LOG_LEVEL="ERROR"), log_level="warning")

        assert logging.getLogger().level == logging.WARNING

    def test_debug_mode_level(self):
        """Test debug mode lowers the level to DEBUG"""
        settings = make_settings(LOG_LEVEL="ERROR")
        settings.debug = True

        assert resolve_level(settings) == logging.DEBUG
        assert resolve_level(make_settings(LOG_LEVEL="ERROR")) == logging.ERROR


class TestContextLogging:
    """Tests for logging set up through the store context"""

    def test_context_configures_logging_on_request(self, monkeypatch):
        """Test create_context passes its settings to configure_logging only when asked"""
        calls = []
        monkeypatch.setattr("storefront.context.configure_logging", calls.append)
        settings = make_settings()

        create_context(settings)
        create_context(settings, configure_logs=True)

        assert calls == [settings]
