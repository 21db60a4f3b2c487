"""Tests for specir.pipeline and specir.tracing."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from specir.emission import dump_ir
from specir.exceptions import InvalidSchema, SpecParseError, UnsupportedFeature
from specir.models import (
    HTTPMethod,
    MaxLength,
    MinLength,
    ParameterLocation,
    Primitive,
    PrimitiveKind,
    Ref,
)
from specir.pipeline import translate_document, translate_source
from specir.tracing import RecordingTracer, StageEvent, Tracer, TraceRunner


FIXTURES_DIR = Path(__file__).parent / "fixtures"

NAME_TYPE = Primitive(
    kind=PrimitiveKind.STRING,
    refinements=(MinLength(value=1), MaxLength(value=256)),
)


class TestItemsScenario:
    """One refined component used by a query parameter and a response."""

    def test_components(self, items_raw: dict[str, Any]) -> None:
        result = translate_document(items_raw)
        assert result.components == {"Name": NAME_TYPE}

    def test_route(self, items_raw: dict[str, Any]) -> None:
        result = translate_document(items_raw)
        assert list(result.paths) == ["/items"]
        (item,) = result.paths["/items"].items
        assert item.method is HTTPMethod.GET
        (param,) = item.parameters
        assert param.name == "q"
        assert param.location is ParameterLocation.QUERY
        assert param.type == Ref(name="Name")
        assert item.responses == {"200": Ref(name="Name")}

    def test_one_refinement_decoder(self, items_raw: dict[str, Any]) -> None:
        plan = translate_document(items_raw).decoders
        assert len(plan.refinement_decoders) == 1
        assert plan.refinement_decoders[0].primitive == NAME_TYPE
        assert plan.list_decoders == ()
        assert plan.enum_decoders == ()


class TestTranslateDocument:
    """End-to-end behaviour."""

    def test_deterministic(self, petstore_raw: dict[str, Any]) -> None:
        assert dump_ir(translate_document(petstore_raw)) == dump_ir(translate_document(petstore_raw))

    def test_fails_fast_on_nested_object(self, make_document) -> None:
        tree = make_document(
            schemas={"Outer": {"type": "object", "properties": {"inner": {"type": "object", "properties": {}}}}}
        )
        with pytest.raises(UnsupportedFeature, match="nested object definition"):
            translate_document(tree)

    def test_fails_on_empty_enum(self, make_document) -> None:
        with pytest.raises(InvalidSchema, match="empty enum"):
            translate_document(make_document(schemas={"E": {"enum": []}}))

    def test_repeated_constraint_fails_in_loader(self, tmp_path: Path) -> None:
        doc = tmp_path / "repeat.yaml"
        doc.write_text(
            "paths: {}\n"
            "components:\n"
            "  schemas:\n"
            "    Name:\n"
            "      type: string\n"
            "      minLength: 1\n"
            "      minLength: 2\n",
            encoding="utf-8",
        )
        with pytest.raises(SpecParseError, match="duplicate key") as exc_info:
            translate_source(str(doc))
        assert exc_info.value.exit_code == 7

    def test_translate_source_reads_file(self) -> None:
        result = translate_source(str(FIXTURES_DIR / "items.yaml"))
        assert list(result.components) == ["Name"]


# ---------------------------------------------------------------------------
# Tracing
# ---------------------------------------------------------------------------


class TestTracing:
    """Stage transitions are recorded without changing the result."""

    def test_transitions_in_order(self, items_raw: dict[str, Any]) -> None:
        tracer = RecordingTracer()
        translate_document(items_raw, [tracer])
        assert tracer.transitions == [
            ("read", "start"), ("read", "end"),
            ("components", "start"), ("components", "end"),
            ("routes", "start"), ("routes", "end"),
            ("plan", "start"), ("plan", "end"),
        ]

    def test_end_events_carry_counts(self, petstore_raw: dict[str, Any]) -> None:
        tracer = RecordingTracer()
        translate_document(petstore_raw, [tracer])
        ends = {e.stage: e.counts for e in tracer.events if e.phase == "end"}
        assert ends["read"] == {"components": 5, "paths": 2}
        assert ends["routes"] == {"route_items": 4}
        assert ends["plan"] == {"refinement_decoders": 3, "list_decoders": 1, "enum_decoders": 1}

    def test_error_event_then_reraise(self, make_document) -> None:
        tracer = RecordingTracer()
        with pytest.raises(InvalidSchema):
            translate_document(make_document(schemas={"E": {"enum": []}}), [tracer])
        assert tracer.transitions[-1] == ("components", "error")
        assert isinstance(tracer.events[-1].error, InvalidSchema)

    def test_tracing_does_not_change_result(self, petstore_raw: dict[str, Any]) -> None:
        traced = translate_document(petstore_raw, [RecordingTracer()])
        assert traced == translate_document(petstore_raw)

    def test_failing_tracer_is_skipped(self, items_raw: dict[str, Any]) -> None:
        class Broken(Tracer):
            def on_stage_start(self, event: StageEvent) -> None:
                raise RuntimeError("boom")

        recorder = RecordingTracer()
        result = translate_document(items_raw, [Broken(), recorder])
        assert list(result.components) == ["Name"]
        assert len(recorder.transitions) == 8

    def test_runner_without_tracers(self) -> None:
        with TraceRunner().stage("read") as counts:
            counts["x"] = 1
