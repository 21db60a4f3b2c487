"""Render command -- hand the IR to an installed renderer.

``specir render NAME`` translates the configured document, looks up the
renderer ``NAME`` among the ``specir.renderers`` entry points, and writes the
files it returns under ``--output-dir``. ``specir render --list`` shows what
is installed.
"""

from __future__ import annotations

from typing import Optional

import typer

from specir.exit_codes import EXIT_INVALID_USAGE
from specir.output import error, get_output, info, success


def render_command(
    ctx: typer.Context,
    renderer: Optional[str] = typer.Argument(None, help="Renderer name."),
    source: Optional[str] = typer.Argument(
        None, help="Document path, URL, or '-' for stdin."
    ),
    package: Optional[str] = typer.Option(
        None, "--package", help="Package/namespace for the generated code."
    ),
    output_dir: str = typer.Option(
        ".", "--output-dir", "-d", help="Directory to write rendered files into."
    ),
    list_only: bool = typer.Option(
        False, "--list", help="List installed renderers and exit."
    ),
) -> None:
    """Render the IR of a document with an installed renderer.

    Example::

        specir render --list
        specir render http4s openapi.yaml --package com.example.api -d gen/
    """
    from specir.commands.translate import load_result
    from specir.config import resolve_config, write_files
    from specir.exceptions import RendererError, SpecirError
    from specir.renderers import RendererRegistry

    registry = RendererRegistry()
    registry.discover()

    if list_only:
        renderers = registry.list_renderers()
        if not renderers:
            info("No renderers installed.")
            return
        rows = [[r["name"], r["description"] or "-"] for r in renderers]
        get_output().print_table(["Renderer", "Description"], rows, title="Renderers")
        return

    if renderer is None:
        error("Missing renderer name. Run: specir render --list")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    try:
        selected = registry.get(renderer)
        config = resolve_config(cli_source=source, cli_package=package)
    except SpecirError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    result = load_result(ctx, source)

    try:
        try:
            files = selected.render(result, config.package)
        except SpecirError:
            raise
        except Exception as exc:
            raise RendererError(f"Renderer '{selected.name}' failed: {exc}") from exc
        written = write_files(output_dir, files)
    except SpecirError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"Rendered {len(written)} files with '{selected.name}' into {output_dir}")
