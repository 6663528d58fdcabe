from __future__ import annotations

import io
import sys
import logging
from typing import Generator
from unittest.mock import patch

import pytest

import lockkeeper.utils.logger as logger_module
from lockkeeper.utils.logger import (
    ColoredFormatter,
    disable_logging,
    get_logger,
    is_logging_configured,
    level_for_verbosity,
    setup_logging,
)


@pytest.fixture
def clean_logger_state() -> Generator[None, None, None]:
    """Clear lockkeeper handlers and the configured flag around a test."""
    root_logger = logging.getLogger("lockkeeper")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    logger_module._logging_configured = False

    yield

    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    logger_module._logging_configured = False


@pytest.fixture
def captured_stream() -> io.StringIO:
    return io.StringIO()


def _record(level: int = logging.WARNING, msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("lockkeeper.test", level, __file__, 1, msg, None, None)


@pytest.mark.unit
class TestColoredFormatter:
    """Tests for ColoredFormatter ANSI color formatting."""

    def test_plain_when_color_disabled(self) -> None:
        formatter = ColoredFormatter("%(levelname)s: %(message)s", use_color=False)

        assert formatter.format(_record()) == "WARNING: hello"

    def test_colors_level_on_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("CI", raising=False)
        formatter = ColoredFormatter("%(levelname)s: %(message)s")

        with patch.object(sys.stderr, "isatty", return_value=True):
            output = formatter.format(_record(logging.ERROR))

        assert output == "\033[31mERROR\033[0m: hello"

    def test_record_is_not_mutated(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test other handlers still see the original level name.

        The formatter colors a copy so a shared record stays intact.
        """
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("CI", raising=False)
        record = _record()

        with patch.object(sys.stderr, "isatty", return_value=True):
            ColoredFormatter("%(levelname)s").format(record)

        assert record.levelname == "WARNING"

    def test_no_color_env_disables_color(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("NO_COLOR", "1")

        with patch.object(sys.stderr, "isatty", return_value=True):
            output = ColoredFormatter("%(levelname)s").format(_record())

        assert output == "WARNING"


@pytest.mark.unit
class TestLevelForVerbosity:
    """Tests for level_for_verbosity."""

    @pytest.mark.parametrize(
        "verbose,expected",
        [
            (0, logging.WARNING),
            (1, logging.INFO),
            (2, logging.DEBUG),
            (5, logging.DEBUG),
        ],
    )
    def test_mapping(self, verbose: int, expected: int) -> None:
        assert level_for_verbosity(verbose) == expected


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_writes_to_stream(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(level=logging.INFO, stream=captured_stream)

        get_logger("core.uv").info("locking")

        assert "INFO: locking" in captured_stream.getvalue()
        assert is_logging_configured()

    def test_level_filters_messages(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(level=logging.WARNING, stream=captured_stream)

        get_logger("core.uv").info("hidden")

        assert captured_stream.getvalue() == ""

    def test_verbose_format_includes_logger_name(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(level=logging.DEBUG, verbose=True, stream=captured_stream)

        get_logger("bazel.extract").debug("skipped")

        assert "lockkeeper.bazel.extract - DEBUG - skipped" in captured_stream.getvalue()

    def test_repeated_setup_does_not_stack_handlers(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(stream=captured_stream)
        setup_logging(stream=captured_stream)

        assert len(logging.getLogger("lockkeeper").handlers) == 1


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger."""

    def test_namespacing(self) -> None:
        assert get_logger("core.uv").name == "lockkeeper.core.uv"
        assert get_logger("lockkeeper.core.uv") is get_logger("core.uv")
        assert get_logger().name == "lockkeeper"
        assert get_logger("lockkeeper").name == "lockkeeper"

    def test_silent_without_configuration(self, clean_logger_state: None) -> None:
        logger = get_logger("unconfigured.test")

        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)


@pytest.mark.unit
class TestDisableLogging:
    """Tests for disable_logging."""

    def test_silences_output(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(stream=captured_stream)

        disable_logging()
        get_logger("core.uv").error("nothing")

        assert captured_stream.getvalue() == ""
        assert not is_logging_configured()
