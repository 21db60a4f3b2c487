"""Route aggregator: group operations by path into ``PathItemAggregation`` values.

Each path of the document becomes one :class:`~specir.models.PathItemAggregation`
holding one :class:`~specir.models.RouteItem` per declared method, in the
order the methods appear in the source. Parameter, request body and response
schemas are translated in the ``ROUTE`` position, where inline objects are
rejected as anonymous types.

Path templates are checked against their parameters: every ``{name}``
placeholder needs a declared ``in: path`` parameter, and every declared path
parameter needs a placeholder.

Query parameters whose type is (or aliases) an array of primitives are
marked ``list_valued``. Query strings carry lists by repeating the key, so
the renderer needs a list decoder for them; see
:mod:`~specir.translator.planner`.
"""

from __future__ import annotations

import logging
import re
from typing import Mapping

from specir.exceptions import InvalidSchema
from specir.models import (
    ArrayOf,
    Operation,
    Parameter,
    ParameterLocation,
    PathItem,
    PathItemAggregation,
    Primitive,
    RawParameter,
    RouteItem,
    TypeRepr,
)
from specir.translator.types import Position, resolve, translate

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{([^{}/]+)\}")


def path_placeholders(template: str) -> tuple[str, ...]:
    """Return the ``{name}`` placeholders of *template*, first occurrence order.

    Example::

        >>> path_placeholders("/users/{userId}/orders/{orderId}")
        ('userId', 'orderId')
    """
    return tuple(dict.fromkeys(_PLACEHOLDER_RE.findall(template)))


def aggregate(
    paths: Mapping[str, PathItem],
    components: Mapping[str, TypeRepr],
) -> dict[str, PathItemAggregation]:
    """Build one aggregation per path.

    Args:
        paths: Path template to path item, in document order.
        components: Translated components, used both as the reference
            context and to resolve aliases when flagging list-valued
            query parameters.

    Returns:
        Path template to aggregation, in document order.

    Raises:
        InvalidSchema: For undeclared path parameters or path parameters
            missing from the template.
        TranslationError: Any error raised while translating a route
            schema.
    """
    context = frozenset(components)
    result: dict[str, PathItemAggregation] = {}
    for template, item in paths.items():
        placeholders = path_placeholders(template)
        items = tuple(
            _build_route_item(
                template, placeholders, operation, context, components,
                f"paths.{template}.{operation.method.value}",
            )
            for operation in item.operations
        )
        result[template] = PathItemAggregation(path_template=template, items=items)
        logger.debug("aggregated %s with %d route items", template, len(items))
    return result


def _build_route_item(
    template: str,
    placeholders: tuple[str, ...],
    operation: Operation,
    context: frozenset[str],
    components: Mapping[str, TypeRepr],
    where: str,
) -> RouteItem:
    parameters = tuple(
        _build_parameter(raw, context, components, f"{where}.parameters.{raw.name}")
        for raw in operation.parameters
    )

    declared = [p.name for p in parameters if p.location is ParameterLocation.PATH]
    for name in placeholders:
        if name not in declared:
            raise InvalidSchema("undeclared path parameter", f"{where}.parameters.{name}")
    for name in declared:
        if name not in placeholders:
            raise InvalidSchema("path parameter not in template", f"{where}.parameters.{name}")

    request_body = None
    if operation.request_body is not None:
        request_body = translate(
            operation.request_body, context, f"{where}.requestBody", Position.ROUTE
        )

    responses: dict[str, TypeRepr | None] = {}
    for status, schema in operation.responses.items():
        responses[status] = (
            None
            if schema is None
            else translate(schema, context, f"{where}.responses.{status}", Position.ROUTE)
        )

    return RouteItem(
        method=operation.method,
        path_template=template,
        path_parameters=placeholders,
        operation_id=operation.operation_id,
        parameters=parameters,
        request_body=request_body,
        responses=responses,
    )


def _build_parameter(
    raw: RawParameter,
    context: frozenset[str],
    components: Mapping[str, TypeRepr],
    where: str,
) -> Parameter:
    type_repr = translate(raw.schema_def, context, f"{where}.schema", Position.ROUTE)
    return Parameter(
        name=raw.name,
        location=raw.location,
        required=raw.required,
        type=type_repr,
        list_valued=(
            raw.location is ParameterLocation.QUERY
            and is_list_of_primitive(type_repr, components)
        ),
    )


def is_list_of_primitive(type_repr: TypeRepr, components: Mapping[str, TypeRepr]) -> bool:
    """Whether *type_repr* resolves to an array whose element resolves to a primitive."""
    resolved = resolve(type_repr, components)
    return isinstance(resolved, ArrayOf) and isinstance(
        resolve(resolved.element, components), Primitive
    )
