"""Shared test fixtures for specir.

Provides reusable fixtures for loading document fixtures, creating isolated
config environments, managing output state, and running CLI commands.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from specir.models import TranslationResult
from specir.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts)
# ---------------------------------------------------------------------------


@pytest.fixture
def items_raw() -> dict[str, Any]:
    """The single-route ``/items`` document with one refined ``Name`` component."""
    with open(FIXTURES_DIR / "items.yaml") as f:
        return yaml.safe_load(f)


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Load raw petstore document dict."""
    with open(FIXTURES_DIR / "petstore.json") as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Translated fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_result(petstore_raw: dict[str, Any]) -> TranslationResult:
    """Translated petstore document."""
    from specir.pipeline import translate_document

    return translate_document(petstore_raw)


def _minimal_document(**sections: Any) -> dict[str, Any]:
    schemas = sections.pop("schemas", None)
    tree: dict[str, Any] = {"openapi": "3.0.3", "info": {"title": "t", "version": "1"}, "paths": {}}
    if schemas is not None:
        tree["components"] = {"schemas": schemas}
    tree.update(sections)
    return tree


@pytest.fixture
def make_document():
    """Factory for small OpenAPI 3.0 trees.

    Keyword arguments replace top-level keys; ``schemas`` is a shortcut for
    ``components={"schemas": ...}``.
    """
    return _minimal_document


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_DATA_HOME to a subdirectory of tmp_path so that crash logs
    never touch the real user directory. Clears all SPECIR_* environment
    variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["SPECIR_SOURCE", "SPECIR_PACKAGE", "SPECIR_OUTPUT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for tests that ignore output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
