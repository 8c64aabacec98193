"""
Test configuration and fixtures for the pagelang test suite.
"""
import sys
import pytest
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pagelang import Settings, load


@pytest.fixture(scope="session")
def examples_dir() -> Path:
    """Return the path to the bundled example pages."""
    return Path(__file__).resolve().parents[1] / "examples"


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of the environment."""
    return Settings()


@pytest.fixture
def render(settings):
    """Compile a source string and render it for a method."""
    def _render(src: str, method=None):
        return load(src, settings=settings).render(method)
    return _render


@pytest.fixture
def evaluate(settings):
    """Compile a source string and return the raw Value of its root expression."""
    def _evaluate(src: str, method=None):
        return load(src, settings=settings).evaluate(method)
    return _evaluate


@pytest.fixture
def hello_page(examples_dir, settings):
    """The landing page example, compiled."""
    return load(examples_dir / "hello.page", settings=settings)
