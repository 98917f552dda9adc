"""Tests for structlog configuration."""

from __future__ import annotations

import pytest
import structlog

from mcpli.logging_setup import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_logs_go_to_stderr(capsys) -> None:
    """Test log lines are written to stderr, never stdout."""
    configure_logging("INFO")

    structlog.get_logger("mcpli.test").info("Server added", server="knuspr")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Server added" in captured.err
    assert "server=knuspr" in captured.err


def test_level_filters_lower_records(capsys) -> None:
    """Test records below the level are dropped."""
    configure_logging("WARNING")
    logger = structlog.get_logger("mcpli.test")

    logger.info("hidden")
    logger.warning("shown")

    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "shown" in err


def test_level_is_case_insensitive(capsys) -> None:
    """Test lower-case level names are accepted."""
    configure_logging("debug")

    structlog.get_logger("mcpli.test").debug("trace")

    assert "trace" in capsys.readouterr().err


def test_unknown_level() -> None:
    """Test an unknown level name is rejected."""
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging("chatty")
