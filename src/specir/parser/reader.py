"""Read a generic parsed document tree into a typed :class:`~specir.models.CoreDocument`.

This module is the explicit, hand-written mapping from the JSON/YAML tree
returned by :func:`~specir.parser.loader.load_document` to the document
models. Every shape outside the supported subset is rejected here with a
typed :class:`~specir.exceptions.TranslationError` rather than being carried
forward and failing later.

The single public entry point is :func:`read_document`. Internally it
delegates to private helpers that each handle one section:

* ``_read_components`` -- the ``components.schemas`` map.
* ``_read_paths`` -- the ``paths`` object, one :class:`~specir.models.PathItem`
  per path, operations in declaration order.
* :func:`read_schema` -- a single schema node (public so tests and callers
  can read detached schemas).

References are never followed here. A ``$ref`` becomes a
:class:`~specir.models.RefShape` holding the component name, and the
translator resolves it by name lookup.

Parameter merging follows OpenAPI: path-level parameters provide defaults,
and operation-level parameters override them when they share the same
``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specir.exceptions import InvalidSchema, MalformedDocument, UnsupportedFeature
from specir.models import (
    ArrayShape,
    CoreDocument,
    EnumShape,
    HTTPMethod,
    ObjectShape,
    Operation,
    ParameterLocation,
    PathItem,
    PrimitiveKind,
    PrimitiveShape,
    RawParameter,
    RefShape,
    SchemaDef,
)

logger = logging.getLogger(__name__)

_HTTP_METHODS = {m.value: m for m in HTTPMethod}
_PRIMITIVE_KINDS = {k.value: k for k in PrimitiveKind}
_COMPOSITION_KEYWORDS = ("allOf", "oneOf", "anyOf", "not")
# Keys describing the shape itself; everything else on a primitive is a
# candidate constraint.
_STRUCTURAL_KEYS = frozenset({"$ref", "type", "format", "enum", "items", "properties", "required"})
_SCHEMA_REF_PREFIX = "#/components/schemas/"


def read_document(tree: Any) -> CoreDocument:
    """Build a :class:`~specir.models.CoreDocument` from a parsed tree.

    Args:
        tree: The document as returned by
            :func:`~specir.parser.loader.load_document` (or any equivalent
            dict produced by another JSON/YAML parser).

    Returns:
        The typed document. Components and paths keep document order.

    Raises:
        MalformedDocument: If required keys are missing or have the wrong
            shape, or the document is not OpenAPI 3.x.
        UnsupportedFeature: For external references, composition keywords,
            cookie parameters and other shapes outside the subset.
        InvalidSchema: For duplicate methods on one path or duplicate
            parameters in one parameter list.

    Example::

        tree = load_document("api.yaml")
        document = read_document(tree)
        for name in document.components:
            print(name)
    """
    if not isinstance(tree, dict):
        raise MalformedDocument("document root must be a mapping")

    _check_version(tree)
    components = _read_components(tree.get("components"))
    paths = _read_paths(tree)
    logger.debug("read %d components and %d paths", len(components), len(paths))
    return CoreDocument(components=components, paths=paths)


def _check_version(tree: dict[str, Any]) -> None:
    if "swagger" in tree:
        raise MalformedDocument(
            f"Swagger {tree['swagger']} documents are not supported, only OpenAPI 3.x",
            "swagger",
        )
    version = tree.get("openapi")
    if version is not None and not str(version).startswith("3."):
        raise MalformedDocument(f"unsupported OpenAPI version {version}", "openapi")


def _read_components(raw: Any) -> dict[str, SchemaDef]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise MalformedDocument("'components' must be a mapping", "components")

    schemas = raw.get("schemas")
    if schemas is None:
        return {}
    if not isinstance(schemas, dict):
        raise MalformedDocument("'schemas' must be a mapping", "components.schemas")

    return {
        str(name): read_schema(schema, f"components.schemas.{name}")
        for name, schema in schemas.items()
    }


def read_schema(node: Any, where: str) -> SchemaDef:
    """Read one schema node into a :data:`~specir.models.SchemaDef`.

    The shape is chosen in this order: ``$ref``, composition keywords
    (rejected), ``enum``, object (``type: object`` or a bare
    ``properties``), array, scalar.

    Args:
        node: The raw schema mapping.
        where: Dotted location used in error messages.

    Raises:
        MalformedDocument: If the node is not a mapping, an array has no
            ``items``, or no type can be determined.
        UnsupportedFeature: For references outside ``components.schemas``,
            composition keywords and unknown types.
    """
    if not isinstance(node, dict):
        raise MalformedDocument("schema must be a mapping", where)

    if "$ref" in node:
        return RefShape(name=parse_schema_ref(node["$ref"], where))

    for keyword in _COMPOSITION_KEYWORDS:
        if keyword in node:
            raise UnsupportedFeature(f"composition keyword {keyword}", where)

    if "enum" in node:
        return _read_enum(node["enum"], where)

    schema_type = node.get("type")
    if schema_type is None and "properties" in node:
        schema_type = "object"

    if schema_type == "object":
        return _read_object(node, where)

    if schema_type == "array":
        if "items" not in node:
            raise MalformedDocument("array schema without 'items'", where)
        return ArrayShape(element=read_schema(node["items"], f"{where}.items"))

    if schema_type is None:
        raise MalformedDocument("schema has no type", where)

    kind = _PRIMITIVE_KINDS.get(schema_type) if isinstance(schema_type, str) else None
    if kind is None:
        raise UnsupportedFeature(f"schema type {schema_type!r}", where)

    return PrimitiveShape(
        kind=kind,
        format=node.get("format"),
        constraints=tuple(
            (str(key), value) for key, value in node.items() if key not in _STRUCTURAL_KEYS
        ),
    )


def _read_object(node: dict[str, Any], where: str) -> ObjectShape:
    properties = node.get("properties") or {}
    if not isinstance(properties, dict):
        raise MalformedDocument("'properties' must be a mapping", where)

    required = node.get("required") or []
    if not isinstance(required, list) or not all(isinstance(r, str) for r in required):
        raise MalformedDocument("'required' must be a list of property names", where)
    for name in required:
        if name not in properties:
            raise InvalidSchema(f"required field '{name}' is not a property", where)

    # A boolean only opens or closes the record; a schema would declare map values.
    additional = node.get("additionalProperties")
    if additional is not None and not isinstance(additional, bool):
        raise UnsupportedFeature("additional properties", f"{where}.additionalProperties")
    if node.get("patternProperties"):
        raise UnsupportedFeature("additional properties", f"{where}.patternProperties")

    return ObjectShape(
        fields={
            str(name): read_schema(prop, f"{where}.properties.{name}")
            for name, prop in properties.items()
        },
        required=tuple(required),
    )


def _read_enum(values: Any, where: str) -> EnumShape:
    if not isinstance(values, list):
        raise MalformedDocument("'enum' must be a list", where)

    literals: list[Any] = []
    # bool is an int subclass; key on the type too so True and 1 stay distinct
    seen: set[tuple[type, Any]] = set()
    for value in values:
        if not isinstance(value, (str, int, float, bool)):
            raise InvalidSchema(f"enum literal {value!r} is not a scalar", where)
        key = (type(value), value)
        if key not in seen:
            seen.add(key)
            literals.append(value)
    return EnumShape(values=tuple(literals))


def parse_schema_ref(ref: Any, where: str) -> str:
    """Return the component name a ``$ref`` points to.

    Only ``#/components/schemas/<name>`` is accepted. RFC 6901 escaping
    (``~1`` for ``/``, ``~0`` for ``~``) is undone on the name.

    Raises:
        MalformedDocument: If *ref* is not a string.
        UnsupportedFeature: ``"external reference"`` for anything pointing
            outside the document, ``"non-schema reference"`` for other
            in-document pointers.
    """
    if not isinstance(ref, str):
        raise MalformedDocument("'$ref' must be a string", where)
    _reject_external(ref, where)
    name = ref[len(_SCHEMA_REF_PREFIX):]
    if not ref.startswith(_SCHEMA_REF_PREFIX) or not name or "/" in name:
        raise UnsupportedFeature("non-schema reference", where)
    return name.replace("~1", "/").replace("~0", "~")


def _reject_external(ref: Any, where: str) -> None:
    if not isinstance(ref, str) or not ref.startswith("#"):
        raise UnsupportedFeature("external reference", where)


# --- Paths ---


def _read_paths(tree: dict[str, Any]) -> dict[str, PathItem]:
    if "paths" not in tree:
        raise MalformedDocument("missing required key 'paths'")
    paths = tree["paths"]
    if not isinstance(paths, dict):
        raise MalformedDocument("'paths' must be a mapping", "paths")

    result: dict[str, PathItem] = {}
    for path, item in paths.items():
        where = f"paths.{path}"
        if not isinstance(path, str) or not path.startswith("/"):
            raise MalformedDocument("path must start with '/'", where)
        if not isinstance(item, dict):
            raise MalformedDocument("path item must be a mapping", where)
        if "$ref" in item:
            _reject_external(item["$ref"], where)
            raise UnsupportedFeature("path item reference", where)
        result[path] = _read_path_item(item, where)
    return result


def _read_path_item(item: dict[str, Any], where: str) -> PathItem:
    path_params = _as_list(item.get("parameters"), f"{where}.parameters")
    _check_unique_parameters(path_params, f"{where}.parameters")
    operations: list[Operation] = []
    seen: set[str] = set()

    # Iterate the item itself so operations keep declaration order.
    for key, operation in item.items():
        method = str(key).lower()
        if method not in _HTTP_METHODS:
            continue
        op_where = f"{where}.{key}"
        if method in seen:
            raise InvalidSchema("duplicate method", op_where)
        seen.add(method)
        if not isinstance(operation, dict):
            raise MalformedDocument("operation must be a mapping", op_where)
        operations.append(
            _read_operation(_HTTP_METHODS[method], operation, path_params, op_where)
        )

    return PathItem(operations=tuple(operations))


def _read_operation(
    method: HTTPMethod,
    operation: dict[str, Any],
    path_params: list[Any],
    where: str,
) -> Operation:
    op_params = _as_list(operation.get("parameters"), f"{where}.parameters")
    _check_unique_parameters(op_params, f"{where}.parameters")
    merged = _merge_parameters(path_params, op_params)

    responses = operation.get("responses") or {}
    if not isinstance(responses, dict):
        raise MalformedDocument("'responses' must be a mapping", f"{where}.responses")

    return Operation(
        method=method,
        operation_id=operation.get("operationId"),
        parameters=tuple(_read_parameter(p, f"{where}.parameters") for p in merged),
        request_body=_read_body(operation.get("requestBody"), f"{where}.requestBody"),
        responses={
            str(status): _read_body(response, f"{where}.responses.{status}")
            for status, response in responses.items()
        },
    )


def _as_list(value: Any, where: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedDocument("'parameters' must be a list", where)
    return value


def _check_unique_parameters(params: list[Any], where: str) -> None:
    seen: set[tuple[Any, Any]] = set()
    for param in params:
        if not isinstance(param, dict):
            continue
        key = (param.get("name"), param.get("in"))
        if key in seen:
            raise InvalidSchema("duplicate parameter", f"{where}.{key[0]}")
        seen.add(key)


def _merge_parameters(path_params: list[Any], op_params: list[Any]) -> list[Any]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field). Non-mapping entries pass through so
    :func:`_read_parameter` can report them.
    """

    def _key(param: Any) -> tuple[Any, Any]:
        if isinstance(param, dict):
            return (param.get("name"), param.get("in"))
        return (None, None)

    overridden = {_key(p) for p in op_params if isinstance(p, dict)}
    merged = [p for p in path_params if _key(p) not in overridden or not isinstance(p, dict)]
    merged.extend(op_params)
    return merged


def _read_parameter(param: Any, where: str) -> RawParameter:
    if not isinstance(param, dict):
        raise MalformedDocument("parameter must be a mapping", where)
    if "$ref" in param:
        _reject_external(param["$ref"], where)
        raise UnsupportedFeature("non-schema reference", where)

    name = param.get("name")
    if not isinstance(name, str) or not name:
        raise MalformedDocument("parameter without 'name'", where)
    where = f"{where}.{name}"

    location_str = param.get("in")
    if location_str == "cookie":
        raise UnsupportedFeature("cookie parameter", where)
    try:
        location = ParameterLocation(location_str)
    except ValueError:
        raise MalformedDocument(f"unknown parameter location {location_str!r}", where) from None

    if "schema" not in param:
        if "content" in param:
            raise UnsupportedFeature("parameter content encoding", where)
        raise MalformedDocument("parameter without 'schema'", where)

    declared = param.get("required", False)
    if not isinstance(declared, bool):
        raise MalformedDocument("'required' must be a boolean", where)
    # Path parameters are always required
    required = declared or location == ParameterLocation.PATH

    return RawParameter(
        name=name,
        location=location,
        required=required,
        schema_def=read_schema(param["schema"], f"{where}.schema"),
    )


def _read_body(node: Any, where: str) -> Optional[SchemaDef]:
    """Read the schema of a request body or response, ``None`` when it has none.

    Accepts both the OpenAPI ``content: {<media type>: {schema: ...}}`` form
    (first media type carrying a schema wins) and a direct ``schema`` key.
    """
    if node is None:
        return None
    if not isinstance(node, dict):
        raise MalformedDocument("body must be a mapping", where)
    if "$ref" in node:
        _reject_external(node["$ref"], where)
        raise UnsupportedFeature("non-schema reference", where)

    if "schema" in node:
        return read_schema(node["schema"], f"{where}.schema")

    content = node.get("content")
    if content is None:
        return None
    if not isinstance(content, dict):
        raise MalformedDocument("'content' must be a mapping", where)
    for media_type, media in content.items():
        if isinstance(media, dict) and "schema" in media:
            return read_schema(media["schema"], f"{where}.content.{media_type}.schema")
    return None
