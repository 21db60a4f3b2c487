"""Tests for specir.parser.reader."""

from __future__ import annotations

from typing import Any

import pytest

from specir.exceptions import InvalidSchema, MalformedDocument, UnsupportedFeature
from specir.models import (
    ArrayShape,
    EnumShape,
    HTTPMethod,
    ObjectShape,
    ParameterLocation,
    PrimitiveKind,
    PrimitiveShape,
    RefShape,
)
from specir.parser.reader import parse_schema_ref, read_document, read_schema


# ---------------------------------------------------------------------------
# Document root
# ---------------------------------------------------------------------------


class TestReadDocument:
    """Test the top-level structure checks."""

    def test_petstore_keeps_document_order(self, petstore_raw: dict[str, Any]) -> None:
        doc = read_document(petstore_raw)
        assert list(doc.components) == ["Pets", "Pet", "Name", "Status", "Error"]
        assert list(doc.paths) == ["/pets", "/pets/{petId}"]

    def test_missing_paths_is_malformed(self) -> None:
        with pytest.raises(MalformedDocument, match="missing required key 'paths'"):
            read_document({"openapi": "3.0.3"})

    def test_null_paths_is_malformed(self) -> None:
        with pytest.raises(MalformedDocument, match="'paths' must be a mapping") as exc_info:
            read_document({"openapi": "3.0.3", "paths": None})
        assert exc_info.value.location == "paths"

    def test_empty_paths_allowed(self) -> None:
        assert read_document({"paths": {}}).paths == {}

    def test_non_mapping_root_is_malformed(self) -> None:
        with pytest.raises(MalformedDocument):
            read_document(["not", "a", "mapping"])

    def test_swagger_2_rejected(self) -> None:
        with pytest.raises(MalformedDocument, match="Swagger 2.0") as exc_info:
            read_document({"swagger": "2.0", "paths": {}})
        assert exc_info.value.location == "swagger"

    def test_openapi_version_must_be_3x(self) -> None:
        with pytest.raises(MalformedDocument, match="unsupported OpenAPI version"):
            read_document({"openapi": "4.0.0", "paths": {}})

    def test_openapi_key_is_optional(self, items_raw: dict[str, Any]) -> None:
        assert "openapi" not in items_raw
        doc = read_document(items_raw)
        assert list(doc.components) == ["Name"]

    def test_components_without_schemas(self) -> None:
        doc = read_document({"paths": {}, "components": {"parameters": {}}})
        assert doc.components == {}

    def test_path_must_start_with_slash(self) -> None:
        with pytest.raises(MalformedDocument, match="must start with '/'"):
            read_document({"paths": {"items": {}}})


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class TestReadSchema:
    """Test the schema shape mapping."""

    def test_ref(self) -> None:
        assert read_schema({"$ref": "#/components/schemas/Pet"}, "x") == RefShape(name="Pet")

    def test_primitive_keeps_constraints_in_declaration_order(self) -> None:
        shape = read_schema(
            {"type": "string", "maxLength": 3, "description": "d", "minLength": 1}, "x"
        )
        assert isinstance(shape, PrimitiveShape)
        assert shape.kind is PrimitiveKind.STRING
        assert shape.constraints == (("maxLength", 3), ("description", "d"), ("minLength", 1))

    def test_primitive_format(self) -> None:
        shape = read_schema({"type": "integer", "format": "int64"}, "x")
        assert shape == PrimitiveShape(kind=PrimitiveKind.INTEGER, format="int64")

    def test_bare_properties_means_object(self) -> None:
        shape = read_schema({"properties": {"a": {"type": "boolean"}}}, "x")
        assert isinstance(shape, ObjectShape)
        assert list(shape.fields) == ["a"]

    def test_required_must_name_a_property(self) -> None:
        with pytest.raises(InvalidSchema, match="required field 'b'"):
            read_schema({"type": "object", "properties": {"a": {"type": "string"}}, "required": ["b"]}, "x")

    def test_array(self) -> None:
        shape = read_schema({"type": "array", "items": {"type": "number"}}, "x")
        assert shape == ArrayShape(element=PrimitiveShape(kind=PrimitiveKind.NUMBER))

    def test_array_without_items(self) -> None:
        with pytest.raises(MalformedDocument, match="without 'items'"):
            read_schema({"type": "array"}, "x")

    def test_enum_wins_over_type(self) -> None:
        shape = read_schema({"type": "string", "enum": ["a", "b"]}, "x")
        assert shape == EnumShape(values=("a", "b"))

    def test_enum_duplicates_dropped_keeping_first(self) -> None:
        shape = read_schema({"enum": ["b", "a", "b"]}, "x")
        assert shape == EnumShape(values=("b", "a"))

    def test_enum_keeps_true_and_one_apart(self) -> None:
        shape = read_schema({"enum": [True, 1]}, "x")
        assert isinstance(shape, EnumShape)
        assert len(shape.values) == 2

    def test_enum_rejects_non_scalars(self) -> None:
        with pytest.raises(InvalidSchema, match="not a scalar"):
            read_schema({"enum": [{"a": 1}]}, "x")

    @pytest.mark.parametrize("keyword", ["allOf", "oneOf", "anyOf", "not"])
    def test_composition_unsupported(self, keyword: str) -> None:
        with pytest.raises(UnsupportedFeature, match=f"composition keyword {keyword}"):
            read_schema({keyword: [{"type": "string"}]}, "x")

    def test_missing_type_is_malformed(self) -> None:
        with pytest.raises(MalformedDocument, match="schema has no type"):
            read_schema({"description": "anything"}, "x")

    def test_unknown_type_unsupported(self) -> None:
        with pytest.raises(UnsupportedFeature, match="schema type 'file'"):
            read_schema({"type": "file"}, "x")

    def test_error_location_points_into_properties(self) -> None:
        with pytest.raises(UnsupportedFeature) as exc_info:
            read_schema({"type": "object", "properties": {"a": {"type": "null"}}}, "components.schemas.T")
        assert exc_info.value.location == "components.schemas.T.properties.a"

    def test_additional_properties_schema_unsupported(self) -> None:
        bag = {
            "type": "object",
            "additionalProperties": {"type": "object", "properties": {"x": {"type": "string"}}},
        }
        with pytest.raises(UnsupportedFeature, match="additional properties") as exc_info:
            read_schema(bag, "components.schemas.Bag")
        assert exc_info.value.location == "components.schemas.Bag.additionalProperties"

    def test_pattern_properties_unsupported(self) -> None:
        node = {"type": "object", "patternProperties": {"^x-": {"type": "string"}}}
        with pytest.raises(UnsupportedFeature, match="additional properties"):
            read_schema(node, "x")

    @pytest.mark.parametrize("flag", [True, False])
    def test_additional_properties_boolean_allowed(self, flag: bool) -> None:
        node = {"type": "object", "properties": {"a": {"type": "string"}}, "additionalProperties": flag}
        shape = read_schema(node, "x")
        assert isinstance(shape, ObjectShape)
        assert list(shape.fields) == ["a"]


class TestParseSchemaRef:
    """Test $ref pointer parsing."""

    def test_component_name(self) -> None:
        assert parse_schema_ref("#/components/schemas/Pet", "x") == "Pet"

    def test_unescapes_json_pointer(self) -> None:
        assert parse_schema_ref("#/components/schemas/a~1b~0c", "x") == "a/b~c"

    def test_external_reference(self) -> None:
        with pytest.raises(UnsupportedFeature, match="external reference"):
            parse_schema_ref("other.yaml#/components/schemas/Pet", "x")

    def test_non_schema_reference(self) -> None:
        with pytest.raises(UnsupportedFeature, match="non-schema reference"):
            parse_schema_ref("#/components/parameters/Limit", "x")

    def test_non_string_is_malformed(self) -> None:
        with pytest.raises(MalformedDocument):
            parse_schema_ref(42, "x")


# ---------------------------------------------------------------------------
# Paths and operations
# ---------------------------------------------------------------------------


class TestReadPaths:
    """Test operations, parameters and bodies."""

    def test_methods_in_declaration_order(self) -> None:
        doc = read_document({"paths": {"/a": {"post": {}, "get": {}, "summary": "s"}}})
        methods = [op.method for op in doc.paths["/a"].operations]
        assert methods == [HTTPMethod.POST, HTTPMethod.GET]

    def test_duplicate_method_rejected(self) -> None:
        with pytest.raises(InvalidSchema, match="duplicate method") as exc_info:
            read_document({"paths": {"/a": {"get": {}, "GET": {}}}})
        assert exc_info.value.location == "paths./a.GET"

    def test_path_level_parameters_merged_and_overridden(self, petstore_raw: dict[str, Any]) -> None:
        doc = read_document(petstore_raw)
        delete = doc.paths["/pets/{petId}"].operations[1]
        assert [p.name for p in delete.parameters] == ["petId", "X-Request-Id"]

        tree = {
            "paths": {
                "/a/{id}": {
                    "parameters": [{"name": "id", "in": "path", "schema": {"type": "string"}}],
                    "get": {"parameters": [{"name": "id", "in": "path", "schema": {"type": "integer"}}]},
                }
            }
        }
        (param,) = read_document(tree).paths["/a/{id}"].operations[0].parameters
        assert param.schema_def == PrimitiveShape(kind=PrimitiveKind.INTEGER)

    def test_path_parameters_always_required(self) -> None:
        tree = {"paths": {"/a/{id}": {"get": {"parameters": [{"name": "id", "in": "path", "schema": {"type": "string"}}]}}}}
        (param,) = read_document(tree).paths["/a/{id}"].operations[0].parameters
        assert param.location is ParameterLocation.PATH
        assert param.required is True

    def test_duplicate_operation_parameter_rejected(self) -> None:
        tree = {
            "paths": {
                "/a/{id}": {
                    "get": {
                        "parameters": [
                            {"name": "id", "in": "path", "schema": {"type": "string"}},
                            {"name": "id", "in": "path", "schema": {"type": "integer"}},
                        ]
                    }
                }
            }
        }
        with pytest.raises(InvalidSchema, match="duplicate parameter") as exc_info:
            read_document(tree)
        assert exc_info.value.location == "paths./a/{id}.get.parameters.id"

    def test_duplicate_path_level_parameter_rejected(self) -> None:
        param = {"name": "id", "in": "path", "schema": {"type": "string"}}
        tree = {"paths": {"/a/{id}": {"parameters": [param, dict(param)], "get": {}}}}
        with pytest.raises(InvalidSchema, match="duplicate parameter"):
            read_document(tree)

    def test_same_name_in_different_locations_allowed(self) -> None:
        tree = {
            "paths": {
                "/a": {
                    "get": {
                        "parameters": [
                            {"name": "id", "in": "query", "schema": {"type": "string"}},
                            {"name": "id", "in": "header", "schema": {"type": "string"}},
                        ]
                    }
                }
            }
        }
        params = read_document(tree).paths["/a"].operations[0].parameters
        assert [p.location for p in params] == [ParameterLocation.QUERY, ParameterLocation.HEADER]

    @pytest.mark.parametrize("value", ["false", "true", 0, 1])
    def test_non_boolean_required_is_malformed(self, value: Any) -> None:
        param = {"name": "q", "in": "query", "required": value, "schema": {"type": "string"}}
        tree = {"paths": {"/a": {"get": {"parameters": [param]}}}}
        with pytest.raises(MalformedDocument, match="'required' must be a boolean"):
            read_document(tree)

    def test_required_defaults_to_false(self) -> None:
        tree = {"paths": {"/a": {"get": {"parameters": [{"name": "q", "in": "query", "schema": {"type": "string"}}]}}}}
        (param,) = read_document(tree).paths["/a"].operations[0].parameters
        assert param.required is False

    def test_cookie_parameter_unsupported(self) -> None:
        tree = {"paths": {"/a": {"get": {"parameters": [{"name": "s", "in": "cookie", "schema": {"type": "string"}}]}}}}
        with pytest.raises(UnsupportedFeature, match="cookie parameter") as exc_info:
            read_document(tree)
        assert exc_info.value.location == "paths./a.get.parameters.s"

    def test_unknown_parameter_location(self) -> None:
        tree = {"paths": {"/a": {"get": {"parameters": [{"name": "s", "in": "body", "schema": {"type": "string"}}]}}}}
        with pytest.raises(MalformedDocument, match="unknown parameter location"):
            read_document(tree)

    def test_parameter_content_unsupported(self) -> None:
        tree = {"paths": {"/a": {"get": {"parameters": [{"name": "s", "in": "query", "content": {}}]}}}}
        with pytest.raises(UnsupportedFeature, match="parameter content encoding"):
            read_document(tree)

    def test_response_without_body_is_none(self, petstore_raw: dict[str, Any]) -> None:
        doc = read_document(petstore_raw)
        post = doc.paths["/pets"].operations[1]
        assert post.responses == {"201": None}
        assert post.request_body == RefShape(name="Pet")

    def test_direct_schema_body_and_integer_status(self, items_raw: dict[str, Any]) -> None:
        doc = read_document(items_raw)
        (get,) = doc.paths["/items"].operations
        assert get.responses == {"200": RefShape(name="Name")}

    def test_body_reference_unsupported(self) -> None:
        tree = {"paths": {"/a": {"post": {"requestBody": {"$ref": "#/components/requestBodies/B"}}}}}
        with pytest.raises(UnsupportedFeature, match="non-schema reference"):
            read_document(tree)

    def test_path_item_reference_unsupported(self) -> None:
        with pytest.raises(UnsupportedFeature, match="path item reference"):
            read_document({"paths": {"/a": {"$ref": "#/paths/~1b"}}})
