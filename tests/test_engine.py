import pytest

from api_doc_filters.errors import FilterExecutionError
from api_doc_filters.model.base import Document, Operation, Parameter, PathItem, Schema
from api_doc_filters.pipeline.engine import OperationContext, apply_filters, iter_schemas
from api_doc_filters.pipeline.registry import FilterLevel, FilterRegistry


class Recorder:
    def __init__(self, label: str, calls: list):
        self.label = label
        self.calls = calls

    def apply(self, target, context):
        where = getattr(context, "location", None) or getattr(context, "pointer", None) or "document"
        self.calls.append((self.label, where))


class Failing:
    def apply(self, target, context):
        raise ValueError("boom")


def _make_document() -> Document:
    return Document(
        paths={
            "/a": PathItem(operations={
                "get": Operation(parameters=[Parameter(name="q", location="query", schema_=Schema(type="string"))]),
                "post": Operation(),
            }),
            "/b": PathItem(operations={"delete": Operation()}),
        },
    )


class TestRegistry:
    def test_rejects_objects_without_apply(self):
        with pytest.raises(TypeError):
            FilterRegistry().operation_filter(object())

    def test_for_level_keeps_registration_order(self):
        calls = []
        first, second, third = Recorder("1", calls), Recorder("2", calls), Recorder("3", calls)
        registry = FilterRegistry().operation_filter(first).schema_filter(second).operation_filter(third)
        assert [e.filter for e in registry.for_level(FilterLevel.OPERATION)] == [first, third]
        assert len(registry) == 3


class TestApplyFilters:
    def test_levels_run_document_then_operations_then_schemas(self):
        calls = []
        registry = (
            FilterRegistry()
            .schema_filter(Recorder("schema", calls))
            .operation_filter(Recorder("op1", calls))
            .document_filter(Recorder("doc", calls))
            .operation_filter(Recorder("op2", calls))
        )
        apply_filters(_make_document(), registry)
        assert calls == [
            ("doc", "document"),
            ("op1", "GET /a"),
            ("op2", "GET /a"),
            ("op1", "POST /a"),
            ("op2", "POST /a"),
            ("op1", "DELETE /b"),
            ("op2", "DELETE /b"),
            ("schema", "#/paths/~1a/get/parameters/0/schema"),
        ]

    def test_later_filter_sees_earlier_changes(self):
        class AddParam:
            def apply(self, operation, context):
                operation.parameters.append(Parameter(name="added", location="query"))

        class Check:
            seen = []

            def apply(self, operation, context):
                self.seen.append([p.name for p in operation.parameters])

        check = Check()
        doc = Document(paths={"/x": PathItem(operations={"get": Operation()})})
        apply_filters(doc, FilterRegistry().operation_filter(AddParam()).operation_filter(check))
        assert check.seen == [["added"]]

    def test_operation_context(self):
        contexts = []

        class Capture:
            def apply(self, operation, context):
                contexts.append(context)

        doc = _make_document()
        apply_filters(doc, FilterRegistry().operation_filter(Capture()))
        first = contexts[0]
        assert isinstance(first, OperationContext)
        assert first.method == "GET"
        assert first.path == "/a"
        assert first.document is doc

    def test_failing_filter_aborts(self):
        calls = []
        registry = FilterRegistry().operation_filter(Failing()).operation_filter(Recorder("after", calls))
        with pytest.raises(FilterExecutionError) as excinfo:
            apply_filters(_make_document(), registry)
        assert excinfo.value.filter_name == "Failing"
        assert excinfo.value.location == "GET /a"
        assert isinstance(excinfo.value.__cause__, ValueError)
        assert calls == []

    def test_returns_same_document(self):
        doc = _make_document()
        assert apply_filters(doc, FilterRegistry()) is doc


class TestIterSchemas:
    def test_walks_components_then_parameters(self):
        doc = _make_document()
        doc.components.schemas["Widget"] = Schema(
            type="object",
            properties={"tags": Schema(type="array", items=Schema(type="string"))},
        )
        doc.components.schemas["a/b"] = Schema(type="string")
        pointers = [pointer for pointer, _ in iter_schemas(doc)]
        assert pointers == [
            "#/components/schemas/Widget",
            "#/components/schemas/Widget/properties/tags",
            "#/components/schemas/Widget/properties/tags/items",
            "#/components/schemas/a~1b",
            "#/paths/~1a/get/parameters/0/schema",
        ]

    def test_walks_bodies_responses_headers_and_composition(self):
        doc = Document.model_validate({
            "openapi": "3.0.1",
            "paths": {"/w": {
                "parameters": [{"name": "tenant", "in": "header", "schema": {"type": "string"}}],
                "put": {
                    "parameters": [{"$ref": "#/components/parameters/Id"}],
                    "requestBody": {"content": {"application/json": {"schema": {
                        "oneOf": [{"type": "string"}], "not": {"type": "integer"},
                    }}}},
                    "responses": {"200": {
                        "description": "OK",
                        "headers": {"X-Rate": {"schema": {"type": "integer"}}},
                        "content": {"text/plain": {"schema": {"type": "string"}}},
                    }},
                },
            }},
            "components": {
                "parameters": {"Id": {"name": "id", "in": "path", "schema": {"type": "integer"}}},
                "requestBodies": {"Map": {"content": {"application/json": {"schema": {
                    "additionalProperties": {"anyOf": [{"type": "string"}]},
                }}}}},
                "responses": {"Err": {"description": "Error", "content": {"application/json": {"schema": {"allOf": [{"type": "object"}]}}}}},
                "headers": {"X-Id": {"schema": {"type": "string"}}},
            },
        })
        pointers = [pointer for pointer, _ in iter_schemas(doc)]
        assert pointers == [
            "#/components/parameters/Id/schema",
            "#/components/requestBodies/Map/content/application~1json/schema",
            "#/components/requestBodies/Map/content/application~1json/schema/additionalProperties",
            "#/components/requestBodies/Map/content/application~1json/schema/additionalProperties/anyOf/0",
            "#/components/responses/Err/content/application~1json/schema",
            "#/components/responses/Err/content/application~1json/schema/allOf/0",
            "#/components/headers/X-Id/schema",
            "#/paths/~1w/parameters/0/schema",
            "#/paths/~1w/put/requestBody/content/application~1json/schema",
            "#/paths/~1w/put/requestBody/content/application~1json/schema/oneOf/0",
            "#/paths/~1w/put/requestBody/content/application~1json/schema/not",
            "#/paths/~1w/put/responses/200/headers/X-Rate/schema",
            "#/paths/~1w/put/responses/200/content/text~1plain/schema",
        ]

    def test_boolean_additional_properties_is_not_walked(self):
        doc = Document()
        doc.components.schemas["Open"] = Schema(type="object", additional_properties=True)
        assert [pointer for pointer, _ in iter_schemas(doc)] == ["#/components/schemas/Open"]
