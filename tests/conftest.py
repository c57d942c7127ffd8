"""
Pytest configuration and shared fixtures for templet tests.
"""

import io
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from templet.logging import LogConfig, TemplateLogger  # noqa: E402
from templet.telemetry import reset_telemetry  # noqa: E402
from templet.template import MappingSource, TemplateEngine  # noqa: E402
from templet.types import LogFormat, LogLevel  # noqa: E402


# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def tests_dir() -> Path:
    """Return the tests directory."""
    return Path(__file__).parent


@pytest.fixture(scope="session")
def fixtures_dir(tests_dir: Path) -> Path:
    """Return the fixtures directory."""
    return tests_dir / "fixtures"


@pytest.fixture(scope="session")
def templates_dir(fixtures_dir: Path) -> Path:
    """Return the template fixtures directory."""
    return fixtures_dir / "templates"


@pytest.fixture(scope="session")
def resources_dir(fixtures_dir: Path) -> Path:
    """Return the resource bundle fixtures directory."""
    return fixtures_dir / "resources"


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def make_engine() -> Callable[..., TemplateEngine]:
    """Build an engine over in-memory templates."""

    def _make(templates: dict[str, str], **kwargs) -> TemplateEngine:
        return TemplateEngine(MappingSource(templates), **kwargs)

    return _make


@pytest.fixture
def render() -> Callable[..., str]:
    """Render a single template string against a value."""

    def _render(source: str, value, **kwargs) -> str:
        engine = TemplateEngine(MappingSource({"test.txt": source}))
        return engine.render_to_string("test.txt", value, **kwargs)

    return _render


# =============================================================================
# Logging Fixtures
# =============================================================================


@pytest.fixture
def log_output() -> io.StringIO:
    """Capture logger output."""
    return io.StringIO()


@pytest.fixture
def json_logger(log_output: io.StringIO) -> TemplateLogger:
    """Logger writing JSON lines at DEBUG level to log_output."""
    return TemplateLogger(
        LogConfig(level=LogLevel.DEBUG, format=LogFormat.JSON, output=log_output)
    )


# =============================================================================
# Telemetry Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_telemetry() -> Generator[None, None, None]:
    """Reset telemetry state around every test."""
    reset_telemetry()
    yield
    reset_telemetry()


# =============================================================================
# Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "slow: Slow tests")
