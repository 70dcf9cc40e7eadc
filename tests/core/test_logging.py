# tests/core/test_logging.py
"""Tests for structured logging configuration."""

import json
import logging

import pytest


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        from plumbline.core.logging import get_logger

        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")
        assert hasattr(logger, "bind")

    def test_logger_outputs_structured(self, capsys: pytest.CaptureFixture[str]) -> None:
        """JSON mode emits one JSON object per event."""
        from plumbline.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        logger = get_logger("test")

        logger.info("test message", key="value")

        captured = capsys.readouterr()
        log_line = captured.out.strip().split("\n")[-1]
        data = json.loads(log_line)
        assert data["event"] == "test message"
        assert data["key"] == "value"
        assert data["level"] == "info"
        assert "_record" not in data

    def test_logger_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        from plumbline.core.logging import configure_logging, get_logger

        configure_logging(json_output=False)
        get_logger("test").info("test message", key="value")

        captured = capsys.readouterr()
        assert "test message" in captured.out
        assert not captured.out.strip().startswith("{")

    def test_bound_context_is_rendered(self, capsys: pytest.CaptureFixture[str]) -> None:
        from plumbline.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        get_logger("test").bind(job="row_count").warning("bound")

        data = json.loads(capsys.readouterr().out.strip().split("\n")[-1])
        assert data["job"] == "row_count"

    def test_stdlib_loggers_use_same_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Records from plain logging.getLogger() go through the structlog chain."""
        from plumbline.core.logging import configure_logging

        configure_logging(json_output=True)
        logging.getLogger("some.library").warning("from stdlib")

        data = json.loads(capsys.readouterr().out.strip().split("\n")[-1])
        assert data["event"] == "from stdlib"

    def test_level_filters_debug(self, capsys: pytest.CaptureFixture[str]) -> None:
        from plumbline.core.logging import configure_logging, get_logger

        configure_logging(json_output=True, level="INFO")
        get_logger("test").debug("hidden")

        assert "hidden" not in capsys.readouterr().out

    def test_sqlalchemy_loggers_clamped_to_warning(self) -> None:
        """Verbose mode must not turn on per-statement SQL logging."""
        from plumbline.core.logging import configure_logging

        configure_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.pool").level == logging.WARNING

    def test_noisy_loggers_never_less_strict_than_root(self) -> None:
        from plumbline.core.logging import configure_logging

        configure_logging(level="ERROR")

        assert logging.getLogger("sqlalchemy").level == logging.ERROR


class TestSqlFieldShortening:
    """SQL carried on log events is flattened and capped."""

    def test_multiline_script_is_flattened(self, capsys: pytest.CaptureFixture[str]) -> None:
        from plumbline.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        get_logger("test").info("Executing script", script="DELETE FROM scratch\n  WHERE id > 10;\n")

        data = json.loads(capsys.readouterr().out.strip().split("\n")[-1])
        assert data["script"] == "DELETE FROM scratch WHERE id > 10;"

    def test_long_sql_is_truncated_with_length(self, capsys: pytest.CaptureFixture[str]) -> None:
        from plumbline.core.logging import SQL_LOG_MAX_CHARS, configure_logging, get_logger

        configure_logging(json_output=True)
        statement = "SELECT " + ", ".join(f"col_{i}" for i in range(100)) + " FROM orders"
        get_logger("test").error("Script failed, continuing", sql=statement)

        data = json.loads(capsys.readouterr().out.strip().split("\n")[-1])
        assert data["sql"] == f"{statement[:SQL_LOG_MAX_CHARS]}... ({len(statement)} chars)"

    def test_other_fields_untouched(self, capsys: pytest.CaptureFixture[str]) -> None:
        from plumbline.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        get_logger("test").info("Dropped invalidate-item view", view="a\n b", script=None)

        data = json.loads(capsys.readouterr().out.strip().split("\n")[-1])
        assert data["view"] == "a\n b"
        assert data["script"] is None
