"""Emission contract: the queries a renderer may ask of the IR.

specir never produces target source text. A renderer (see
:mod:`specir.renderers`) consumes a :class:`~specir.models.TranslationResult`
through the helpers below. Every query is total over the IR: it answers for
every :data:`~specir.models.TypeRepr` variant and never raises on translator
output.

Ordering guarantees a renderer can rely on:

* ``result.components`` iterates in document order.
* ``result.paths`` iterates in document order, and each aggregation's
  ``items`` in method declaration order; :func:`iter_route_items` flattens
  them in that order.
* Refinement tuples are in canonical kind order.
* Decoder plan tuples are in first-encounter order.

:func:`dump_ir` serialises a result to JSON. Equal documents give
byte-identical output.
"""

from __future__ import annotations

import enum
import json
from typing import Iterator, Mapping, assert_never

from specir.models import (
    ArrayOf,
    EnumOf,
    PathItemAggregation,
    Primitive,
    Record,
    Ref,
    Refinement,
    RouteItem,
    TranslationResult,
    TypeRepr,
)


class TypeShape(str, enum.Enum):
    """The coarse shape of a type, as seen by a renderer."""

    PRIMITIVE = "primitive"
    ARRAY = "array"
    ENUM = "enum"
    REFERENCE = "reference"
    RECORD = "record"


def shape_of(type_repr: TypeRepr) -> TypeShape:
    """Return the shape of *type_repr*."""
    if isinstance(type_repr, Primitive):
        return TypeShape.PRIMITIVE
    if isinstance(type_repr, ArrayOf):
        return TypeShape.ARRAY
    if isinstance(type_repr, EnumOf):
        return TypeShape.ENUM
    if isinstance(type_repr, Ref):
        return TypeShape.REFERENCE
    if isinstance(type_repr, Record):
        return TypeShape.RECORD
    assert_never(type_repr)


def refinements_of(type_repr: TypeRepr) -> tuple[Refinement, ...]:
    """Return the refinements on *type_repr*; empty for anything but a primitive."""
    if isinstance(type_repr, Primitive):
        return type_repr.refinements
    return ()


def referenced_components(type_repr: TypeRepr) -> tuple[str, ...]:
    """Names of components *type_repr* refers to directly, first occurrence order.

    References are not followed, so this is what a renderer needs to import
    for one declaration.
    """
    names: dict[str, None] = {}

    def _collect(node: TypeRepr) -> None:
        if isinstance(node, Ref):
            names.setdefault(node.name)
        elif isinstance(node, ArrayOf):
            _collect(node.element)
        elif isinstance(node, Record):
            for field in node.fields:
                _collect(field.type)

    _collect(type_repr)
    return tuple(names)


def iter_route_items(paths: Mapping[str, PathItemAggregation]) -> Iterator[RouteItem]:
    """Yield every route item, aggregation by aggregation, in source order."""
    for aggregation in paths.values():
        yield from aggregation.items


def route_signature(item: RouteItem) -> str:
    """Human-readable route name, e.g. ``"GET /contacts/{id}"``."""
    return f"{item.method.value.upper()} {item.path_template}"


def dump_ir(result: TranslationResult) -> str:
    """Serialise *result* as indented JSON with a trailing newline."""
    return json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"


def describe_type(type_repr: TypeRepr) -> str:
    """Compact one-line rendering of a type for tables and logs.

    Example::

        >>> describe_type(ArrayOf(element=Ref(name="Pet")))
        'array<Pet>'
    """
    if isinstance(type_repr, Primitive):
        text = type_repr.kind.value
        if type_repr.format:
            text += f"({type_repr.format})"
        if type_repr.refinements:
            text += "{" + ", ".join(f"{r.kind}={r.value}" for r in type_repr.refinements) + "}"
        return text
    if isinstance(type_repr, ArrayOf):
        return f"array<{describe_type(type_repr.element)}>"
    if isinstance(type_repr, EnumOf):
        return "enum[" + ", ".join(json.dumps(v) for v in type_repr.values) + "]"
    if isinstance(type_repr, Ref):
        return type_repr.name
    if isinstance(type_repr, Record):
        return f"record({len(type_repr.fields)} fields)"
    assert_never(type_repr)
