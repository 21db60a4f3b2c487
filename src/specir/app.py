"""Typer application and CLI entry point for specir.

This module wires together the top-level Typer application and registers the
built-in sub-commands (``translate``, ``inspect``, ``render``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~specir.exceptions.SpecirError` exits with the error's own code;
any other exception is written to a crash log under the data directory.

See Also:
    :mod:`specir.config`: Configuration resolution.
    :mod:`specir.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from specir import __version__
from specir.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="specir",
    help="Translate OpenAPI 3.0 documents into a typed IR for code generation.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specir {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send ``specir.*`` log records to stderr through Rich.

    Only warnings are shown by default; ``--verbose`` lowers the level to
    debug so the translator's own log lines appear next to stage traces.
    """
    from rich.console import Console
    from rich.logging import RichHandler

    logger = logging.getLogger("specir")
    logger.handlers.clear()
    handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output and stage traces."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~specir.output.OutputManager` from CLI
    flags and stores ``verbose`` in the Typer context so that commands can
    attach an :class:`~specir.tracing.OutputTracer`.
    """
    from specir.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# ------------------------------------------------------------------ #
# Built-in commands
# ------------------------------------------------------------------ #

from specir.commands.inspect import inspect_app  # noqa: E402
from specir.commands.render import render_command  # noqa: E402
from specir.commands.translate import translate_command  # noqa: E402

app.command("translate")(translate_command)
app.command("render")(render_command)
app.add_typer(inspect_app, name="inspect", help="Inspect the IR of a document.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from specir.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specir`` console script.

    Unhandled :class:`~specir.exceptions.SpecirError` instances cause a clean
    exit with the error's ``exit_code``. All other exceptions produce a crash
    log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from specir.exceptions import SpecirError
        from specir.output import error

        if isinstance(exc, SpecirError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
