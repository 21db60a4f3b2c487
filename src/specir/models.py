"""Canonical Pydantic models shared across all specir modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into four groups:

**Configuration models** -- resolved from CLI flags, environment variables and
the project file by :mod:`specir.config`:
    :class:`GeneratorConfig`.

**Document models** -- produced by the document reader from a generic parsed
tree and consumed by the translator:
    :class:`CoreDocument`, :class:`PathItem`, :class:`Operation`,
    :class:`RawParameter` and the :data:`SchemaDef` union
    (:class:`ObjectShape`, :class:`ArrayShape`, :class:`PrimitiveShape`,
    :class:`EnumShape`, :class:`RefShape`).

**IR models** -- the renderer-facing intermediate representation:
    the :data:`TypeRepr` union (:class:`Primitive`, :class:`ArrayOf`,
    :class:`EnumOf`, :class:`Ref`, :class:`Record`), the :data:`Refinement`
    union, :class:`Parameter`, :class:`RouteItem` and
    :class:`PathItemAggregation`.

**Decoder plan models** -- the auxiliary parsers a renderer must emit:
    :class:`RefinementDecoder`, :class:`ListDecoder`, :class:`EnumDecoder`,
    :class:`DecoderPlan`, and the final :class:`TranslationResult`.

Document, IR and plan models are frozen. IR values are hashable and compare
structurally, which is what the decoder planner deduplicates on. Closed unions
are pydantic discriminated unions keyed on ``shape`` (types) or ``kind``
(refinements).
"""

from __future__ import annotations

import enum
import re
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

_PACKAGE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


# --- Generator Config ---


class GeneratorConfig(BaseModel):
    """Values the build integration hands to the translator.

    The core only reads ``source``; ``package`` is passed through to the
    renderer so generated declarations land in the right namespace.

    Example::

        GeneratorConfig(source="api/openapi.yaml", package="com.example.api")
    """

    source: Optional[str] = Field(
        default=None, description="File path, URL or '-' for the source document"
    )
    package: str = Field(
        default="generated", description="Output package/namespace name"
    )
    output: Optional[str] = Field(
        default=None, description="File to write the IR JSON to (stdout if unset)"
    )

    @field_validator("package")
    @classmethod
    def _check_package(cls, value: str) -> str:
        if not _PACKAGE_RE.match(value):
            raise ValueError(f"package must be a dotted identifier, got {value!r}")
        return value


# --- Shared enums ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised as keys of an OpenAPI path-item object."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Parameter locations in the supported subset (``cookie`` is rejected)."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"


class PrimitiveKind(str, enum.Enum):
    """Scalar JSON Schema types."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"


EnumLiteral = Union[bool, int, float, str]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Document models ---


class ObjectShape(_Frozen):
    """An object schema. Only legal as the top-level value of a component."""

    shape: Literal["object"] = "object"
    fields: dict[str, SchemaDef] = Field(default_factory=dict)
    required: tuple[str, ...] = ()


class ArrayShape(_Frozen):
    shape: Literal["array"] = "array"
    element: SchemaDef


class PrimitiveShape(_Frozen):
    """A scalar schema with its raw, not yet normalised, constraint keys.

    ``constraints`` keeps every non-structural ``(key, value)`` pair of the
    source schema in document order; unknown keys are dropped later by
    :func:`~specir.translator.refinements.normalize`.
    """

    shape: Literal["primitive"] = "primitive"
    kind: PrimitiveKind
    format: Optional[str] = None
    constraints: tuple[tuple[str, Any], ...] = ()


class EnumShape(_Frozen):
    shape: Literal["enum"] = "enum"
    values: tuple[EnumLiteral, ...] = ()


class RefShape(_Frozen):
    """A same-document ``#/components/schemas/<name>`` pointer."""

    shape: Literal["ref"] = "ref"
    name: str


SchemaDef = Annotated[
    Union[ObjectShape, ArrayShape, PrimitiveShape, EnumShape, RefShape],
    Field(discriminator="shape"),
]


class RawParameter(_Frozen):
    """A parameter as declared in the document, before type translation."""

    name: str
    location: ParameterLocation
    required: bool = False
    schema_def: SchemaDef


class Operation(_Frozen):
    """One method entry of a path item.

    ``responses`` maps the status code string (``"200"``, ``"default"``) to
    the response body schema, or ``None`` when the response has no body.
    """

    method: HTTPMethod
    operation_id: Optional[str] = None
    parameters: tuple[RawParameter, ...] = ()
    request_body: Optional[SchemaDef] = None
    responses: dict[str, Optional[SchemaDef]] = Field(default_factory=dict)


class PathItem(_Frozen):
    operations: tuple[Operation, ...] = ()


class CoreDocument(_Frozen):
    """Typed root of a document: components and paths in document order."""

    components: dict[str, SchemaDef] = Field(default_factory=dict)
    paths: dict[str, PathItem] = Field(default_factory=dict)


# --- Refinements ---


class MinLength(_Frozen):
    kind: Literal["minLength"] = "minLength"
    value: int


class MaxLength(_Frozen):
    kind: Literal["maxLength"] = "maxLength"
    value: int


class Minimum(_Frozen):
    kind: Literal["minimum"] = "minimum"
    value: Union[int, float]


class Maximum(_Frozen):
    kind: Literal["maximum"] = "maximum"
    value: Union[int, float]


class Pattern(_Frozen):
    kind: Literal["pattern"] = "pattern"
    value: str


Refinement = Annotated[
    Union[MinLength, MaxLength, Minimum, Maximum, Pattern],
    Field(discriminator="kind"),
]


# --- IR models ---


class Primitive(_Frozen):
    """A scalar type with its canonical, ordered refinement tuple."""

    shape: Literal["primitive"] = "primitive"
    kind: PrimitiveKind
    format: Optional[str] = None
    refinements: tuple[Refinement, ...] = ()


class ArrayOf(_Frozen):
    """A homogeneous array. Arrays may nest to any depth."""

    shape: Literal["array"] = "array"
    element: TypeRepr


class EnumOf(_Frozen):
    """A closed set of literal values, in first-declared order without duplicates."""

    shape: Literal["enum"] = "enum"
    values: tuple[EnumLiteral, ...]


class Ref(_Frozen):
    """A reference to another component by name.

    The target is looked up by name, never inlined, so components may refer
    to each other in any order and cycles stay finite.
    """

    shape: Literal["ref"] = "ref"
    name: str


class RecordField(_Frozen):
    name: str
    type: TypeRepr
    required: bool = False


class Record(_Frozen):
    """The translated form of a top-level object component.

    Records never appear nested: every field type is a primitive, array,
    enum or :class:`Ref`.
    """

    shape: Literal["record"] = "record"
    fields: tuple[RecordField, ...] = ()


TypeRepr = Annotated[
    Union[Primitive, ArrayOf, EnumOf, Ref, Record],
    Field(discriminator="shape"),
]


class Parameter(_Frozen):
    """A translated route parameter.

    ``list_valued`` is set for query parameters whose type resolves to an
    array of primitives: query strings carry lists by repeating the key, so
    the renderer needs a dedicated list decoder for them.
    """

    name: str
    location: ParameterLocation
    required: bool = False
    type: TypeRepr
    list_valued: bool = False


class RouteItem(_Frozen):
    """One HTTP method on one path template."""

    method: HTTPMethod
    path_template: str
    path_parameters: tuple[str, ...] = ()
    operation_id: Optional[str] = None
    parameters: tuple[Parameter, ...] = ()
    request_body: Optional[TypeRepr] = None
    responses: dict[str, Optional[TypeRepr]] = Field(default_factory=dict)


class PathItemAggregation(_Frozen):
    """All route items declared for one path, in source declaration order."""

    path_template: str
    items: tuple[RouteItem, ...] = ()


# --- Decoder plan ---


class RefinementDecoder(_Frozen):
    """Decoder validating a refined primitive (one per distinct primitive)."""

    name: str
    primitive: Primitive


class ListDecoder(_Frozen):
    """Decoder for a repeated query key collected into a list.

    ``element_decoder`` names the refinement decoder of the element type when
    the element is refined.
    """

    name: str
    array: ArrayOf
    element_decoder: Optional[str] = None


class EnumDecoder(_Frozen):
    name: str
    values: tuple[EnumLiteral, ...]


class DecoderPlan(_Frozen):
    """Deduplicated decoders in first-encounter order."""

    refinement_decoders: tuple[RefinementDecoder, ...] = ()
    list_decoders: tuple[ListDecoder, ...] = ()
    enum_decoders: tuple[EnumDecoder, ...] = ()


class TranslationResult(_Frozen):
    """Complete IR for one document, handed to a renderer."""

    components: dict[str, TypeRepr] = Field(default_factory=dict)
    paths: dict[str, PathItemAggregation] = Field(default_factory=dict)
    decoders: DecoderPlan = Field(default_factory=DecoderPlan)


for _model in (ObjectShape, ArrayShape, RawParameter, Operation, CoreDocument,
               ArrayOf, RecordField, Record, Parameter, RouteItem,
               PathItemAggregation, TranslationResult):
    _model.model_rebuild()
del _model
