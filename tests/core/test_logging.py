# tests/core/test_logging.py
"""Tests for structured logging configuration."""

import json
import logging

import pytest


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        """get_logger returns a bound logger."""
        from formflow.core.logging import get_logger

        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "warning")
        assert hasattr(logger, "bind")

    def test_logger_outputs_structured(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs structured JSON."""
        from formflow.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        logger = get_logger("test")

        logger.info("submission processed", form_id=3)

        captured = capsys.readouterr()
        log_line = captured.out.strip().split("\n")[-1]
        data = json.loads(log_line)
        assert data["event"] == "submission processed"
        assert data["form_id"] == 3
        assert data["level"] == "info"
        assert "_record" not in data

    def test_logger_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs human-readable in console mode."""
        from formflow.core.logging import configure_logging, get_logger

        configure_logging(json_output=False)
        get_logger("test").info("test message", key="value")

        captured = capsys.readouterr()
        assert "test message" in captured.out
        assert not captured.out.strip().startswith("{")

    def test_bound_context_is_emitted(self, capsys: pytest.CaptureFixture[str]) -> None:
        from formflow.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        get_logger("test").bind(form_id=9).warning("CSRF token mismatch")

        data = json.loads(capsys.readouterr().out.strip().split("\n")[-1])
        assert data["form_id"] == 9
        assert data["level"] == "warning"

    def test_stdlib_logging_uses_same_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Records from logging.getLogger() are rendered by the structlog chain."""
        from formflow.core.logging import configure_logging

        configure_logging(json_output=True)
        logging.getLogger("plain.stdlib").warning("from stdlib")

        data = json.loads(capsys.readouterr().out.strip().split("\n")[-1])
        assert data["event"] == "from stdlib"

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        from formflow.core.logging import configure_logging, get_logger

        configure_logging(json_output=True, level="WARNING")
        get_logger("test").info("quiet")

        assert "quiet" not in capsys.readouterr().out

    def test_noisy_loggers_stay_at_warning(self) -> None:
        from formflow.core.logging import configure_logging

        configure_logging(level="DEBUG")
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("dynaconf").level == logging.WARNING
