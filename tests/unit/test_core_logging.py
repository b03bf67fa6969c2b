"""Tests for logging helpers."""

import pytest
import structlog
from structlog.testing import capture_logs

from deploystack.core.config import Settings
from deploystack.core.logging import AppContext, get_logger, plugin_scope


def test_plugin_scope_binds_and_restores() -> None:
    """Test plugin context is visible only inside the scope."""
    structlog.contextvars.bind_contextvars(request_id="r1")
    try:
        with plugin_scope("example-plugin", "initialize"):
            bound = structlog.contextvars.get_contextvars()
        after = structlog.contextvars.get_contextvars()
    finally:
        structlog.contextvars.clear_contextvars()

    assert bound == {"request_id": "r1", "plugin": "example-plugin", "hook": "initialize"}
    assert after == {"request_id": "r1"}


def test_plugin_scope_restores_on_error() -> None:
    """Test the context is unbound when the hook raises."""
    with pytest.raises(RuntimeError):
        with plugin_scope("broken", "cleanup"):
            raise RuntimeError("boom")

    assert "plugin" not in structlog.contextvars.get_contextvars()


def test_app_context_processor() -> None:
    """Test entries are stamped with app name and environment."""
    settings = Settings(_env_file=None, app_name="DeployStack", app_env="test")  # type: ignore

    event = AppContext(settings)(None, "info", {"event": "started"})

    assert event == {"event": "started", "app": "DeployStack", "env": "test"}


def test_get_logger_emits_events() -> None:
    """Test module loggers emit snake_case events with keyword context."""
    with capture_logs() as logs:
        get_logger(__name__).info("plugin_loaded", plugin="p1")

    assert logs == [{"event": "plugin_loaded", "plugin": "p1", "log_level": "info"}]
