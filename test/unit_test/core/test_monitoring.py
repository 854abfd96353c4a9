"""
Unit tests for the Logfire monitoring module.

Logfire itself is replaced by a mock; no data leaves the process.
"""

import importlib
import os
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI

import bookbridge.core.monitoring as monitoring


@pytest.fixture
def fresh_monitoring():
    """Reload the module under a patched environment, then restore it."""

    def _reload(env):
        with patch.dict(os.environ, env, clear=True):
            return importlib.reload(monitoring)

    yield _reload
    importlib.reload(monitoring)


@pytest.fixture
def mock_logfire(monkeypatch):
    mock = MagicMock()
    monkeypatch.setattr(monitoring, "logfire", mock)
    monkeypatch.setattr(monitoring, "_logfire_ready", False)
    return mock


class TestEnvironmentConfiguration:
    def test_disabled_by_default(self, fresh_monitoring):
        module = fresh_monitoring({})
        assert module.LOGFIRE_ENABLED is False
        assert module.LOGFIRE_SERVICE_NAME == "bookbridge-server"

    @pytest.mark.parametrize("value", ["true", "1", "yes", "TRUE"])
    def test_enabled_values(self, fresh_monitoring, value):
        assert fresh_monitoring({"LOGFIRE_ENABLED": value}).LOGFIRE_ENABLED is True

    def test_feature_flags(self, fresh_monitoring):
        module = fresh_monitoring({"LOGFIRE_TRACE_SQLALCHEMY": "false", "LOGFIRE_ENVIRONMENT": "production"})
        assert module.LOGFIRE_TRACE_SQLALCHEMY is False
        assert module.LOGFIRE_TRACE_FASTAPI is True
        assert module.LOGFIRE_ENVIRONMENT == "production"


class TestInitializeLogfire:
    def test_disabled_does_nothing(self, mock_logfire, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", False)
        assert monitoring.initialize_logfire() is False
        mock_logfire.configure.assert_not_called()

    def test_enabled_without_token(self, mock_logfire, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", True)
        monkeypatch.setattr(monitoring, "LOGFIRE_TOKEN", "")
        assert monitoring.initialize_logfire() is False
        mock_logfire.configure.assert_not_called()

    def test_configures_and_instruments(self, mock_logfire, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", True)
        monkeypatch.setattr(monitoring, "LOGFIRE_TOKEN", "test-token")
        app = FastAPI()

        assert monitoring.initialize_logfire(app) is True
        mock_logfire.configure.assert_called_once()
        assert mock_logfire.configure.call_args.kwargs["token"] == "test-token"
        mock_logfire.instrument_sqlalchemy.assert_called_once()
        mock_logfire.instrument_fastapi.assert_called_once_with(app=app)

    def test_configure_failure_is_reported(self, mock_logfire, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", True)
        monkeypatch.setattr(monitoring, "LOGFIRE_TOKEN", "test-token")
        mock_logfire.configure.side_effect = RuntimeError("bad token")
        assert monitoring.initialize_logfire() is False
        assert monitoring._logfire_ready is False


class TestEvents:
    def test_events_skipped_when_not_ready(self, mock_logfire):
        monitoring.log_api_request("GET", "/health", 200, 1.5)
        monitoring.log_order_placed("o1", "b1", 2, "400.00")
        monitoring.log_message_sent("c1", 1, 12)
        monitoring.log_error("ValueError", "boom")
        mock_logfire.info.assert_not_called()
        mock_logfire.error.assert_not_called()

    def test_events_sent_when_ready(self, mock_logfire, monkeypatch):
        monkeypatch.setattr(monitoring, "_logfire_ready", True)
        monitoring.log_order_placed("o1", "b1", 2, "400.00")
        monitoring.log_message_sent("c1", 1, 12)
        monitoring.log_error("ValueError", "boom", {"path": "/api/v1/orders"})

        messages = [c.args[0] for c in mock_logfire.info.call_args_list]
        assert messages == ["Order placed", "Message sent"]
        assert mock_logfire.error.call_args.kwargs["path"] == "/api/v1/orders"

    def test_logfire_failures_are_swallowed(self, mock_logfire, monkeypatch):
        monkeypatch.setattr(monitoring, "_logfire_ready", True)
        mock_logfire.info.side_effect = RuntimeError("exporter down")
        monitoring.log_api_request("GET", "/health", 200, 1.5)
