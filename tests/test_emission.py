"""Tests for specir.emission."""

from __future__ import annotations

import json

import pytest

from specir.emission import (
    TypeShape,
    describe_type,
    dump_ir,
    iter_route_items,
    referenced_components,
    refinements_of,
    route_signature,
    shape_of,
)
from specir.models import (
    ArrayOf,
    EnumOf,
    MinLength,
    Primitive,
    PrimitiveKind,
    Record,
    RecordField,
    Ref,
    TranslationResult,
)

REFINED = Primitive(kind=PrimitiveKind.STRING, refinements=(MinLength(value=1),))


class TestQueries:
    """Every query answers for every variant."""

    @pytest.mark.parametrize(
        ("type_repr", "shape"),
        [
            (REFINED, TypeShape.PRIMITIVE),
            (ArrayOf(element=REFINED), TypeShape.ARRAY),
            (EnumOf(values=("a",)), TypeShape.ENUM),
            (Ref(name="Pet"), TypeShape.REFERENCE),
            (Record(), TypeShape.RECORD),
        ],
    )
    def test_shape_and_refinements_total(self, type_repr, shape: TypeShape) -> None:
        assert shape_of(type_repr) is shape
        expected = REFINED.refinements if shape is TypeShape.PRIMITIVE else ()
        assert refinements_of(type_repr) == expected
        assert describe_type(type_repr)

    def test_referenced_components_first_occurrence(self) -> None:
        record = Record(
            fields=(
                RecordField(name="a", type=Ref(name="B")),
                RecordField(name="b", type=ArrayOf(element=Ref(name="A"))),
                RecordField(name="c", type=Ref(name="B")),
            )
        )
        assert referenced_components(record) == ("B", "A")

    def test_describe_type(self) -> None:
        assert describe_type(ArrayOf(element=Ref(name="Pet"))) == "array<Pet>"
        assert describe_type(REFINED) == "string{minLength=1}"
        assert describe_type(Primitive(kind=PrimitiveKind.INTEGER, format="int64")) == "integer(int64)"
        assert describe_type(EnumOf(values=("a", 1))) == 'enum["a", 1]'


class TestRouteQueries:
    """Route iteration over a translated document."""

    def test_iteration_order(self, petstore_result: TranslationResult) -> None:
        signatures = [route_signature(i) for i in iter_route_items(petstore_result.paths)]
        assert signatures == [
            "GET /pets",
            "POST /pets",
            "GET /pets/{petId}",
            "DELETE /pets/{petId}",
        ]


class TestDumpIr:
    """JSON serialisation of a result."""

    def test_valid_json_with_trailing_newline(self, petstore_result: TranslationResult) -> None:
        text = dump_ir(petstore_result)
        assert text.endswith("}\n")
        data = json.loads(text)
        assert list(data) == ["components", "paths", "decoders"]
        assert list(data["components"]) == ["Pets", "Pet", "Name", "Status", "Error"]

    def test_round_trips_through_model(self, petstore_result: TranslationResult) -> None:
        again = TranslationResult.model_validate_json(dump_ir(petstore_result))
        assert again == petstore_result
