"""Unit tests for TemplateLogger."""

import io
import json

import pytest

from templet.errors import create_error
from templet.logging import LogConfig, TemplateLogger
from templet.logging.colors import RESET
from templet.types import LogFormat, LogLevel


def make_logger(**kwargs) -> tuple[TemplateLogger, io.StringIO]:
    output = io.StringIO()
    return TemplateLogger(LogConfig(output=output, **kwargs)), output


class TestLevels:
    """Tests for level filtering."""

    def test_info_hides_debug(self):
        """DEBUG messages are dropped at INFO."""
        logger, output = make_logger(level=LogLevel.INFO)
        logger.loader().cache_hit("t")
        assert output.getvalue() == ""

    def test_debug_shows_debug(self):
        """DEBUG messages are shown at DEBUG."""
        logger, output = make_logger(level=LogLevel.DEBUG)
        logger.loader().cache_hit("t")
        assert "Template 't' cached" in output.getvalue()

    def test_error_hides_warnings(self):
        """ERROR level drops warnings."""
        logger, output = make_logger(level=LogLevel.ERROR)
        logger.warn("careful")
        assert output.getvalue() == ""


class TestComponents:
    """Tests for component switches."""

    def test_disabled_component(self):
        """Disabled components are silent."""
        logger, output = make_logger(
            level=LogLevel.DEBUG,
            components={"engine": True, "loader": False, "render": True},
        )
        logger.loader().loaded("t", 3, 1)
        logger.info("engine message")
        assert "loaded" not in output.getvalue()
        assert "engine message" in output.getvalue()

    def test_default_components(self):
        """All components are enabled by default."""
        assert LogConfig().components == {"engine": True, "loader": True, "render": True}


class TestFormats:
    """Tests for output formats."""

    def test_json(self):
        """JSON lines carry level, component, message and context."""
        logger, output = make_logger(format=LogFormat.JSON)
        logger.render("page.html").completed(duration_ms=12, chars_written=340)

        entry = json.loads(output.getvalue())
        assert entry["level"] == "INFO"
        assert entry["component"] == "render"
        assert entry["event"] == "render_completed"
        assert entry["chars_written"] == 340
        assert entry["timestamp"].endswith("Z")

    def test_colored(self):
        """Colored output prefixes the component."""
        logger, output = make_logger(format=LogFormat.COLORED)
        logger.info("hello", key="value")
        text = output.getvalue()
        assert "[ENGINE]" in text
        assert "hello" in text
        assert "'key': 'value'" in text
        assert RESET in text

    def test_context_hidden(self):
        """show_context=False omits the context."""
        logger, output = make_logger(show_context=False)
        logger.info("hello", key="value")
        assert "key" not in output.getvalue()

    def test_context_truncated(self):
        """Long context is truncated."""
        logger, output = make_logger(truncate_at=10)
        logger.info("hello", key="x" * 100)
        assert "x" * 50 not in output.getvalue()
        assert "..." in output.getvalue()

    def test_configure(self):
        """configure() replaces the configuration."""
        logger, _ = make_logger()
        new_output = io.StringIO()
        logger.configure(LogConfig(format=LogFormat.JSON, output=new_output))
        logger.info("moved")
        assert json.loads(new_output.getvalue())["message"] == "moved"


class TestRenderLogger:
    """Tests for render events."""

    @pytest.fixture
    def logged(self):
        logger, output = make_logger(level=LogLevel.DEBUG, format=LogFormat.JSON)

        def entries():
            return [json.loads(line) for line in output.getvalue().splitlines()]

        return logger, entries

    def test_started_with_locale(self, logged):
        """started() records the locale."""
        logger, entries = logged
        logger.render("t").started("de_DE")
        assert entries()[0]["locale"] == "de_DE"

    def test_include(self, logged):
        """include() records name and depth."""
        logger, entries = logged
        logger.render("t").include("row", 2)
        entry = entries()[0]
        assert entry["include"] == "row"
        assert entry["depth"] == 2

    def test_failed_with_code(self, logged):
        """failed() records the error code of template errors."""
        logger, entries = logged
        error = create_error("UNKNOWN_MODIFIER", modifier="x", supported_modifiers="")
        logger.render("t").failed(error, 5)
        entry = entries()[0]
        assert entry["level"] == "ERROR"
        assert entry["error_code"] == "UNKNOWN_MODIFIER"
        assert entry["error_type"] == "ResolutionFailure"

    def test_failed_without_code(self, logged):
        """Other exceptions have no error code."""
        logger, entries = logged
        logger.render("t").failed(ValueError("boom"), 5)
        assert "error_code" not in entries()[0]


class TestLoaderLogger:
    """Tests for loader events."""

    def test_invalidate_all(self):
        """Invalidating everything is reported as such."""
        logger, output = make_logger()
        logger.loader().invalidated(None)
        assert "Invalidated all templates" in output.getvalue()

    def test_failed(self):
        """Load failures are logged at ERROR."""
        logger, output = make_logger(level=LogLevel.ERROR, format=LogFormat.JSON)
        logger.loader().failed("t", OSError("gone"))
        entry = json.loads(output.getvalue())
        assert entry["event"] == "template_load_failed"
        assert entry["error"] == "gone"
