"""Translate command -- turn a document into IR JSON.

Implements the ``specir translate`` top-level command and the
:func:`load_result` helper shared by the ``inspect`` and ``render``
commands. The source document is resolved through
:func:`~specir.config.resolve_config`, so it may come from the command line,
``SPECIR_SOURCE`` or ``./specir.json``.
"""

from __future__ import annotations

from typing import Optional

import typer

from specir.exit_codes import EXIT_INVALID_USAGE
from specir.models import TranslationResult
from specir.output import debug, error, print_json_text, success


def load_result(ctx: typer.Context, source: Optional[str]) -> TranslationResult:
    """Translate the document named by *source* (or the configured one).

    Stage transitions are traced to stderr when the root ``--verbose`` flag
    is set.

    Raises:
        typer.Exit: With ``EXIT_INVALID_USAGE`` when no source is configured,
            or with the error's own exit code when loading or translation
            fails.
    """
    from specir.config import resolve_config
    from specir.exceptions import SpecirError
    from specir.pipeline import translate_source
    from specir.tracing import OutputTracer

    try:
        config = resolve_config(cli_source=source)
    except SpecirError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if config.source is None:
        error("No source document. Pass SOURCE, set SPECIR_SOURCE, or add 'source' to specir.json")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    verbose = bool((ctx.obj or {}).get("verbose"))
    tracers = [OutputTracer()] if verbose else None

    debug(f"Translating {config.source}")
    try:
        return translate_source(config.source, tracers)
    except SpecirError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def translate_command(
    ctx: typer.Context,
    source: Optional[str] = typer.Argument(
        None, help="Document path, URL, or '-' for stdin."
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the IR to this file instead of stdout."
    ),
) -> None:
    """Translate an OpenAPI document and print its IR as JSON.

    The JSON is deterministic: translating the same document twice gives
    byte-identical output, so the file can be committed and diffed.

    Example::

        specir translate openapi.yaml
        specir translate openapi.yaml -o build/api.ir.json
        curl -s https://api.example.com/openapi.json | specir translate -
    """
    from specir.config import resolve_config, write_output
    from specir.emission import dump_ir
    from specir.exceptions import SpecirError

    result = load_result(ctx, source)
    text = dump_ir(result)

    try:
        target = resolve_config(cli_source=source, cli_output=output).output
        if target is None:
            print_json_text(text)
            return
        path = write_output(target, text)
    except SpecirError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(
        f"Wrote IR for {len(result.components)} components and "
        f"{len(result.paths)} paths to {path}"
    )
