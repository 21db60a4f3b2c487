"""Type translator: convert schema definitions into renderer-facing ``TypeRepr`` values.

Each :data:`~specir.models.SchemaDef` is translated into one of the
:data:`~specir.models.TypeRepr` variants:

* :class:`~specir.models.PrimitiveShape` -> :class:`~specir.models.Primitive`
  with normalised refinements (see :mod:`~specir.translator.refinements`).
* :class:`~specir.models.ArrayShape` -> :class:`~specir.models.ArrayOf`.
  Arrays may nest to any depth.
* :class:`~specir.models.EnumShape` -> :class:`~specir.models.EnumOf`.
* :class:`~specir.models.RefShape` -> :class:`~specir.models.Ref`, checked
  against the set of component names.
* :class:`~specir.models.ObjectShape` -> :class:`~specir.models.Record`, but
  only as the top-level value of a component. Anywhere else an object must
  be referenced by name.

Components are translated independently. A reference only needs the target
*name* to exist, so components may refer to each other in any order,
including mutually, without a topological sort.
"""

from __future__ import annotations

import enum
import logging
from typing import Mapping, assert_never

from specir.exceptions import InvalidSchema, UnresolvedReference, UnsupportedFeature
from specir.models import (
    ArrayOf,
    ArrayShape,
    EnumOf,
    EnumShape,
    ObjectShape,
    Primitive,
    PrimitiveShape,
    Record,
    RecordField,
    Ref,
    RefShape,
    SchemaDef,
    TypeRepr,
)
from specir.translator.refinements import APPLICABLE_KINDS, normalize

logger = logging.getLogger(__name__)


class Position(str, enum.Enum):
    """Where a schema sits, which decides whether an inline object is allowed."""

    COMPONENT = "component"
    NESTED = "nested"
    ROUTE = "route"


def translate(
    schema: SchemaDef,
    context: frozenset[str],
    where: str = "",
    position: Position = Position.NESTED,
) -> TypeRepr:
    """Translate one schema definition.

    Args:
        schema: The schema to translate.
        context: Names of all components in the document.
        where: Dotted location used in error messages.
        position: ``COMPONENT`` for the top-level value of a component,
            ``ROUTE`` for a parameter, request body or response schema, and
            ``NESTED`` for record fields and array elements.

    Returns:
        The translated type.

    Raises:
        UnsupportedFeature: ``"nested object definition"`` for an inline
            object in a field or array element, ``"anonymous inline type"``
            for an inline object in a route.
        UnresolvedReference: If a reference names an unknown component.
        InvalidSchema: For an empty enum or an inapplicable refinement.
        ConflictingRefinement: For a refinement kind declared twice.
    """
    if isinstance(schema, ObjectShape):
        if position is Position.COMPONENT:
            return _translate_record(schema, context, where)
        if position is Position.ROUTE:
            raise UnsupportedFeature("anonymous inline type", where)
        raise UnsupportedFeature("nested object definition", where)

    if isinstance(schema, ArrayShape):
        inner = Position.ROUTE if position is Position.ROUTE else Position.NESTED
        return ArrayOf(element=translate(schema.element, context, f"{where}.items", inner))

    if isinstance(schema, PrimitiveShape):
        return _translate_primitive(schema, where)

    if isinstance(schema, EnumShape):
        if not schema.values:
            raise InvalidSchema("empty enum", where)
        return EnumOf(values=schema.values)

    if isinstance(schema, RefShape):
        if schema.name not in context:
            raise UnresolvedReference(schema.name, where)
        return Ref(name=schema.name)

    assert_never(schema)


def _translate_primitive(schema: PrimitiveShape, where: str) -> Primitive:
    refinements = normalize(schema.constraints, where)
    allowed = APPLICABLE_KINDS[schema.kind]
    for refinement in refinements:
        if refinement.kind not in allowed:
            raise InvalidSchema(
                f"{refinement.kind} does not apply to {schema.kind.value}", where
            )
    return Primitive(kind=schema.kind, format=schema.format, refinements=refinements)


def _translate_record(schema: ObjectShape, context: frozenset[str], where: str) -> Record:
    return Record(
        fields=tuple(
            RecordField(
                name=name,
                type=translate(field, context, f"{where}.properties.{name}", Position.NESTED),
                required=name in schema.required,
            )
            for name, field in schema.fields.items()
        )
    )


def translate_component(name: str, schema: SchemaDef, context: frozenset[str]) -> TypeRepr:
    """Translate the top-level schema of component *name*."""
    return translate(schema, context, f"components.schemas.{name}", Position.COMPONENT)


def translate_components(components: Mapping[str, SchemaDef]) -> dict[str, TypeRepr]:
    """Translate every component of a document.

    Args:
        components: Component name to schema, in document order.

    Returns:
        Component name to translated type, in the same order.

    Raises:
        TranslationError: The first error of any component; no partial
            result is returned.
    """
    context = frozenset(components)
    result: dict[str, TypeRepr] = {}
    for name, schema in components.items():
        result[name] = translate_component(name, schema, context)
        logger.debug("translated component %s as %s", name, result[name].shape)

    for name in result:
        resolve(Ref(name=name), result, f"components.schemas.{name}")
    return result


def resolve(type_repr: TypeRepr, components: Mapping[str, TypeRepr], where: str = "") -> TypeRepr:
    """Follow :class:`~specir.models.Ref` links until a concrete type is reached.

    Only alias chains are followed; references inside arrays or records
    are left alone, so recursive data types resolve fine.

    Raises:
        UnresolvedReference: If a link names an unknown component.
        InvalidSchema: ``"circular type alias"`` if the chain loops.
    """
    seen: set[str] = set()
    while isinstance(type_repr, Ref):
        if type_repr.name in seen:
            raise InvalidSchema("circular type alias", where)
        seen.add(type_repr.name)
        if type_repr.name not in components:
            raise UnresolvedReference(type_repr.name, where)
        type_repr = components[type_repr.name]
    return type_repr
