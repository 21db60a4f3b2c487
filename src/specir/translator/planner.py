"""Decoder planner: derive the deduplicated set of auxiliary decoders routes need.

A renderer targeting a typed HTTP framework has to emit small parsing helpers
next to its routes:

* **refinement decoders** -- one per distinct refined primitive, keyed on
  ``(kind, refinements)``;
* **list decoders** -- one per distinct array-of-primitive type used by a
  ``list_valued`` query parameter;
* **enum decoders** -- one per distinct enum value set (order-insensitive).

The planner walks every route item of every aggregation (parameters, then
request body, then responses), following ``Ref`` links into components,
array elements and record fields. Decoders are keyed on structural equality
of the IR values, never on identity, so two routes using the same
constrained string share one decoder. Output order is first-encounter order,
and names are derived from content only, so repeated runs on the same
document give identical plans.

The planner needs a consistent view of all routes and must run after
:func:`~specir.translator.routes.aggregate` has finished.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Mapping, assert_never

from specir.models import (
    ArrayOf,
    DecoderPlan,
    EnumDecoder,
    EnumLiteral,
    EnumOf,
    ListDecoder,
    PathItemAggregation,
    Primitive,
    Record,
    Ref,
    Refinement,
    RefinementDecoder,
    TypeRepr,
)
from specir.translator.types import resolve

logger = logging.getLogger(__name__)

_KIND_SLUGS = {
    "minLength": "min_length",
    "maxLength": "max_length",
    "minimum": "minimum",
    "maximum": "maximum",
    "pattern": "pattern",
}


def plan_decoders(
    paths: Mapping[str, PathItemAggregation],
    components: Mapping[str, TypeRepr],
) -> DecoderPlan:
    """Scan all route items and collect the decoders a renderer must emit.

    Args:
        paths: The aggregations produced by
            :func:`~specir.translator.routes.aggregate`.
        components: The translated components, used to follow references.

    Returns:
        A :class:`~specir.models.DecoderPlan` with three deduplicated,
        order-stable tuples.
    """
    collector = _Collector(components)
    for aggregation in paths.values():
        for item in aggregation.items:
            for parameter in item.parameters:
                collector.walk(parameter.type)
                if parameter.list_valued:
                    collector.add_list(parameter.type)
            if item.request_body is not None:
                collector.walk(item.request_body)
            for response in item.responses.values():
                if response is not None:
                    collector.walk(response)

    plan = collector.plan()
    logger.debug(
        "planned %d refinement, %d list and %d enum decoders",
        len(plan.refinement_decoders),
        len(plan.list_decoders),
        len(plan.enum_decoders),
    )
    return plan


class _Collector:
    """Accumulates decoders keyed on IR content, in first-seen order."""

    def __init__(self, components: Mapping[str, TypeRepr]) -> None:
        self._components = components
        self._visited: set[str] = set()
        self._refined: dict[Primitive, RefinementDecoder] = {}
        self._lists: dict[ArrayOf, ListDecoder] = {}
        self._enums: dict[frozenset[tuple[str, EnumLiteral]], EnumDecoder] = {}

    def walk(self, type_repr: TypeRepr) -> None:
        if isinstance(type_repr, Primitive):
            if type_repr.refinements:
                self._add_refined(type_repr)
        elif isinstance(type_repr, ArrayOf):
            self.walk(type_repr.element)
        elif isinstance(type_repr, EnumOf):
            self._add_enum(type_repr.values)
        elif isinstance(type_repr, Ref):
            # Each component only needs walking once; this also stops cycles.
            if type_repr.name not in self._visited:
                self._visited.add(type_repr.name)
                self.walk(self._components[type_repr.name])
        elif isinstance(type_repr, Record):
            for field in type_repr.fields:
                self.walk(field.type)
        else:
            assert_never(type_repr)

    def add_list(self, type_repr: TypeRepr) -> None:
        array = resolve(type_repr, self._components)
        element = resolve(array.element, self._components) if isinstance(array, ArrayOf) else None
        if not isinstance(element, Primitive):
            raise TypeError(f"list-valued parameter type {type_repr!r} is not an array of primitives")
        key_element = _decoder_key(element)
        key = ArrayOf(element=key_element)
        if key in self._lists:
            return

        element_decoder = None
        if key_element.refinements:
            element_decoder = self._add_refined(key_element).name
        name = f"list_of_{element_decoder or key_element.kind.value}"
        self._lists[key] = ListDecoder(name=name, array=key, element_decoder=element_decoder)

    def plan(self) -> DecoderPlan:
        return DecoderPlan(
            refinement_decoders=tuple(self._refined.values()),
            list_decoders=tuple(self._lists.values()),
            enum_decoders=tuple(self._enums.values()),
        )

    def _add_refined(self, primitive: Primitive) -> RefinementDecoder:
        key = _decoder_key(primitive)
        decoder = self._refined.get(key)
        if decoder is None:
            slugs = "_".join(_refinement_slug(r) for r in key.refinements)
            decoder = RefinementDecoder(name=f"{key.kind.value}_{slugs}", primitive=key)
            self._refined[key] = decoder
        return decoder

    def _add_enum(self, values: tuple[EnumLiteral, ...]) -> None:
        key = frozenset((type(v).__name__, v) for v in values)
        if key not in self._enums:
            self._enums[key] = EnumDecoder(name=_enum_name(key), values=values)


def _decoder_key(primitive: Primitive) -> Primitive:
    """Drop ``format``: decoders are keyed on kind and refinements only."""
    if primitive.format is None:
        return primitive
    return Primitive(kind=primitive.kind, refinements=primitive.refinements)


def _refinement_slug(refinement: Refinement) -> str:
    kind = _KIND_SLUGS[refinement.kind]
    if refinement.kind == "pattern":
        digest = hashlib.sha1(refinement.value.encode("utf-8")).hexdigest()[:8]
        return f"{kind}_{digest}"
    value = str(refinement.value).replace("-", "neg").replace("+", "").replace(".", "_")
    return f"{kind}_{value}"


def _enum_name(key: frozenset[tuple[str, EnumLiteral]]) -> str:
    canonical = "\x1f".join(sorted(f"{type_name}:{value!r}" for type_name, value in key))
    return "enum_" + hashlib.sha1(canonical.encode("utf-8")).hexdigest()[:10]
