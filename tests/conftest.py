"""Pytest configuration and fixtures."""

import re
from pathlib import Path

import pytest
from typer.testing import CliRunner

from scriptforge.config import ScriptForgeSettings, reset_settings, set_settings
from scriptforge.parser import parse
from scriptforge.tools import ToolContext

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SCREENPLAYS_DIR = FIXTURES_DIR / "screenplays"

ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")


def strip_ansi_codes(text: str) -> str:
    """Strip ANSI escape sequences from CLI output."""
    return ANSI_ESCAPE.sub("", text)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Give every test default settings, independent of the host machine."""
    for name in ("SCRIPTFORGE_CONFIG", "SCRIPTFORGE_DEBUG", "SCRIPTFORGE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    reset_settings()
    set_settings(ScriptForgeSettings())
    yield
    reset_settings()


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding test fixture files."""
    return FIXTURES_DIR


@pytest.fixture
def load_screenplay():
    """Read a screenplay fixture by file name."""

    def _load(name: str) -> str:
        return (SCREENPLAYS_DIR / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def sample_text(load_screenplay) -> str:
    """Four-scene screenplay with a title page."""
    return load_screenplay("sample.fountain")


@pytest.fixture
def sample_document(sample_text):
    """Parsed sample screenplay."""
    return parse(sample_text)


@pytest.fixture
def tool_context() -> ToolContext:
    """Tool context with default settings and no story bible."""
    return ToolContext(settings=ScriptForgeSettings())


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def screenplay_file(tmp_path, sample_text) -> Path:
    """Writable copy of the sample screenplay."""
    path = tmp_path / "sample.fountain"
    path.write_text(sample_text, encoding="utf-8")
    return path


@pytest.fixture
def clean_output():
    """Function stripping ANSI codes from CLI output."""
    return strip_ansi_codes
