"""Configuration resolution, XDG data paths, and atomic file writes.

This module handles the small configuration surface of specir:

* **Generator config** -- :func:`resolve_config` merges CLI flags,
  environment variables and the project-local ``./specir.json`` into a
  :class:`~specir.models.GeneratorConfig` (source document, output package,
  output file).
* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specir/`` on macOS and Windows. Only the data directory is used, for
  crash logs; see :func:`get_data_dir`.
* **Output files** -- :func:`write_output` and :func:`write_files` write
  through :func:`_atomic_write` (temp file then rename) so a failed run never
  leaves half-written IR or rendered sources behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specir.exceptions import ConfigError
from specir.models import GeneratorConfig

_APP_NAME = "specir"
_PROJECT_CONFIG_FILENAME = "specir.json"

_ENV_SOURCE = "SPECIR_SOURCE"
_ENV_PACKAGE = "SPECIR_PACKAGE"
_ENV_OUTPUT = "SPECIR_OUTPUT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specir/`` (default ``~/.local/share/specir/``).
    On macOS/Windows: ``~/.specir/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def write_output(path: str | Path, text: str) -> Path:
    """Atomically write *text* to *path* and return the resolved path."""
    target = Path(path).expanduser()
    try:
        _atomic_write(target, text)
    except OSError as exc:
        raise ConfigError(f"Cannot write {target}: {exc}") from exc
    return target


def write_files(output_dir: str | Path, files: dict[str, str]) -> list[Path]:
    """Write rendered files under *output_dir*, each one atomically.

    Args:
        output_dir: Root directory for the rendered files.
        files: Relative path to content, as returned by a renderer.

    Returns:
        The written paths, in the order of *files*.

    Raises:
        ConfigError: If a relative path escapes *output_dir* or a write fails.
    """
    root = Path(output_dir).expanduser().resolve()
    written: list[Path] = []
    for relative, content in files.items():
        target = (root / relative).resolve()
        if not target.is_relative_to(root):
            raise ConfigError(f"Rendered path escapes the output directory: {relative}")
        written.append(write_output(target, content))
    return written


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specir.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_source: Optional[str] = None,
    cli_package: Optional[str] = None,
    cli_output: Optional[str] = None,
) -> GeneratorConfig:
    """Resolve the generator config with full precedence chain.

    Precedence (high to low):
        1. CLI arguments (``cli_source``, ``cli_package``, ``cli_output``)
        2. Environment variables (``SPECIR_SOURCE``, ``SPECIR_PACKAGE``,
           ``SPECIR_OUTPUT``)
        3. Project config (``./specir.json`` with ``source``, ``package``,
           ``output`` keys)
        4. Defaults

    Raises:
        ConfigError: If the project file is invalid or the resulting values
            fail validation (e.g. a package name that is not a dotted
            identifier).
    """
    values: dict[str, Any] = {}

    project = load_project_config()
    if project is not None:
        for key in ("source", "package", "output"):
            if project.get(key) is not None:
                values[key] = project[key]

    for key, env_var in (("source", _ENV_SOURCE), ("package", _ENV_PACKAGE), ("output", _ENV_OUTPUT)):
        env_value = os.environ.get(env_var)
        if env_value:
            values[key] = env_value

    for key, cli_value in (("source", cli_source), ("package", cli_package), ("output", cli_output)):
        if cli_value is not None:
            values[key] = cli_value

    try:
        return GeneratorConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
