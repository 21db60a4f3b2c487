"""Inspect commands -- examine the IR of a document.

Provides the ``specir inspect`` sub-command group with read-only views of a
translated document: the component types, the route items, and the decoder
plan. Each sub-command translates the document first, so an unsupported
document fails here exactly as it would in ``specir translate``.
"""

from __future__ import annotations

from typing import Optional

import typer

from specir.commands.translate import load_result
from specir.emission import describe_type, iter_route_items, route_signature, shape_of
from specir.models import Record
from specir.output import get_output, info


inspect_app = typer.Typer(no_args_is_help=True)

_SOURCE_HELP = "Document path, URL, or '-' for stdin."


@inspect_app.command("components")
def inspect_components(
    ctx: typer.Context,
    source: Optional[str] = typer.Argument(None, help=_SOURCE_HELP),
) -> None:
    """List component types in document order.

    Records show their fields with a trailing ``?`` on optional ones.

    Example::

        specir inspect components openapi.yaml
    """
    result = load_result(ctx, source)
    if not result.components:
        info("No components defined in this document.")
        return

    headers = ["Component", "Shape", "Type"]
    rows: list[list[str]] = []
    for name, type_repr in result.components.items():
        if isinstance(type_repr, Record):
            detail = ", ".join(
                f"{f.name}{'' if f.required else '?'}: {describe_type(f.type)}"
                for f in type_repr.fields
            )
        else:
            detail = describe_type(type_repr)
        rows.append([name, shape_of(type_repr).value, detail or "-"])

    get_output().print_table(headers, rows, title=f"Components ({len(rows)})")


@inspect_app.command("routes")
def inspect_routes(
    ctx: typer.Context,
    source: Optional[str] = typer.Argument(None, help=_SOURCE_HELP),
) -> None:
    """List route items with their parameters and response codes.

    Example::

        specir inspect routes openapi.yaml
    """
    result = load_result(ctx, source)

    headers = ["Route", "Operation", "Parameters", "Body", "Responses"]
    rows: list[list[str]] = []
    for item in iter_route_items(result.paths):
        params = ", ".join(
            f"{p.location.value}:{p.name}{'[]' if p.list_valued else ''}"
            for p in item.parameters
        )
        body = describe_type(item.request_body) if item.request_body is not None else "-"
        rows.append([
            route_signature(item),
            item.operation_id or "-",
            params or "-",
            body,
            ", ".join(item.responses) or "-",
        ])

    if not rows:
        info("No routes defined in this document.")
        return

    get_output().print_table(headers, rows, title=f"Routes ({len(rows)})")


@inspect_app.command("decoders")
def inspect_decoders(
    ctx: typer.Context,
    source: Optional[str] = typer.Argument(None, help=_SOURCE_HELP),
) -> None:
    """Show the decoder plan: refinement, list and enum decoders.

    Example::

        specir inspect decoders openapi.yaml
    """
    result = load_result(ctx, source)
    plan = result.decoders

    rows: list[list[str]] = []
    for d in plan.refinement_decoders:
        rows.append(["refinement", d.name, describe_type(d.primitive)])
    for d in plan.list_decoders:
        detail = describe_type(d.array)
        if d.element_decoder:
            detail += f" via {d.element_decoder}"
        rows.append(["list", d.name, detail])
    for d in plan.enum_decoders:
        rows.append(["enum", d.name, ", ".join(str(v) for v in d.values)])

    if not rows:
        info("No decoders needed for this document.")
        return

    get_output().print_table(["Kind", "Decoder", "Decodes"], rows, title=f"Decoders ({len(rows)})")
