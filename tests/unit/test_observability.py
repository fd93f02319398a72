"""Tests for logging and Logfire setup."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest

from docstore import observability
from docstore.config import LoggingConfig, Settings


@pytest.fixture
def root_handlers() -> Iterator[None]:
    """Restore root logger handlers and level after the test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fake_logfire(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    fake = MagicMock()
    fake.LogfireLoggingHandler.return_value = logging.NullHandler()
    monkeypatch.setattr(observability, "logfire", fake)
    return fake


@pytest.mark.unit
class TestConfigureLogging:
    def test_sets_root_level(self, root_handlers: None) -> None:
        observability.configure_logging(Settings(logging=LoggingConfig(level="DEBUG")))
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("pymongo").level == logging.WARNING


@pytest.mark.unit
class TestInitializeLogfire:
    def test_disabled_without_token(self, fake_logfire: MagicMock) -> None:
        assert observability.initialize_logfire(Settings(logfire_token="")) is False
        fake_logfire.configure.assert_not_called()

    def test_instruments_pymongo(self, fake_logfire: MagicMock, root_handlers: None) -> None:
        settings = Settings(logfire_token="token", environment="test")

        assert observability.initialize_logfire(settings) is True

        fake_logfire.configure.assert_called_once()
        assert fake_logfire.configure.call_args.kwargs["service_name"] == "docstore"
        assert fake_logfire.configure.call_args.kwargs["environment"] == "test"
        fake_logfire.instrument_pymongo.assert_called_once_with()

    def test_failure_does_not_raise(self, fake_logfire: MagicMock) -> None:
        fake_logfire.configure.side_effect = RuntimeError("bad token")
        assert observability.initialize_logfire(Settings(logfire_token="token")) is False
