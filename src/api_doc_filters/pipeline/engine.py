"""Transformation engine.

Walks a Document and applies registered filters in three passes:

1. document filters, once, on the whole document;
2. operation filters, on every operation (path order, then method order);
3. schema filters, on every schema reached from the components, parameters,
   headers, request bodies and responses, recursing into nested schemas.

Within a pass filters run in registration order, so each one sees the
cumulative result of everything that ran before it. The first failing filter
aborts the run with FilterExecutionError.
"""

import logging
from dataclasses import dataclass
from typing import Iterator

from api_doc_filters.errors import FilterExecutionError
from api_doc_filters.model.base import ApiDescription, Document, Header, MediaType, Operation, Parameter, Response, Schema
from api_doc_filters.pipeline.registry import FilterLevel, FilterRegistry, RegisteredFilter

logger = logging.getLogger(__name__)


@dataclass
class DocumentContext:
    document_name: str | None = None


@dataclass
class OperationContext:
    document: Document
    path: str
    method: str  # upper-case HTTP method
    api_description: ApiDescription | None

    @property
    def location(self) -> str:
        return f"{self.method} {self.path}"


@dataclass
class SchemaContext:
    document: Document
    pointer: str  # JSON pointer of the schema inside the serialized document


def apply_filters(document: Document, registry: FilterRegistry, document_name: str | None = None) -> Document:
    """Run every registered filter over ``document`` in place and return it."""
    document_filters = registry.for_level(FilterLevel.DOCUMENT)
    operation_filters = registry.for_level(FilterLevel.OPERATION)
    schema_filters = registry.for_level(FilterLevel.SCHEMA)

    context = DocumentContext(document_name=document_name)
    for entry in document_filters:
        _run(entry, document, context, "document")

    operation_count = 0
    if operation_filters:
        for path, method, operation in list(document.operations()):
            op_context = OperationContext(
                document=document,
                path=path,
                method=method.upper(),
                api_description=operation.source,
            )
            for entry in operation_filters:
                _run(entry, operation, op_context, op_context.location)
            operation_count += 1

    schema_count = 0
    if schema_filters:
        for pointer, schema in list(iter_schemas(document)):
            schema_context = SchemaContext(document=document, pointer=pointer)
            for entry in schema_filters:
                _run(entry, schema, schema_context, pointer)
            schema_count += 1

    logger.info(
        "Applied %d filters (%d operations, %d schemas visited)",
        len(registry), operation_count, schema_count,
    )
    return document


def _run(entry: RegisteredFilter, target, context, location: str) -> None:
    logger.debug("Applying %s filter %s at %s", entry.level.value, entry.name, location)
    try:
        entry.filter.apply(target, context)
    except Exception as e:
        raise FilterExecutionError(entry.name, location, e) from e


def iter_schemas(document: Document) -> Iterator[tuple[str, Schema]]:
    """Yield ``(pointer, schema)`` for every schema node, parents before children.

    Order: component schemas, parameters, request bodies, responses and
    headers, then each path's shared parameters and its operations'
    parameters, request body and responses.
    """
    components = document.components
    for name, schema in components.schemas.items():
        yield from _walk(schema, f"#/components/schemas/{_escape(name)}")
    for name, parameter in components.parameters.items():
        yield from _parameter(parameter, f"#/components/parameters/{_escape(name)}")
    for name, body in components.request_bodies.items():
        yield from _content(body.content, f"#/components/requestBodies/{_escape(name)}")
    for name, response in components.responses.items():
        yield from _response(response, f"#/components/responses/{_escape(name)}")
    for name, header in components.headers.items():
        yield from _parameter(header, f"#/components/headers/{_escape(name)}")

    for path, item in document.paths.items():
        base = f"#/paths/{_escape(path)}"
        for index, parameter in enumerate(item.parameters or []):
            yield from _parameter(parameter, f"{base}/parameters/{index}")
        for method, operation in item.operations.items():
            for index, parameter in enumerate(operation.parameters):
                yield from _parameter(parameter, f"{base}/{method}/parameters/{index}")
            if operation.request_body is not None:
                yield from _content(operation.request_body.content, f"{base}/{method}/requestBody")
            for response in operation.responses:
                yield from _response(response, f"{base}/{method}/responses/{response.status_code}")


def _parameter(parameter: Parameter | Header, pointer: str) -> Iterator[tuple[str, Schema]]:
    if parameter.schema_ is not None:
        yield from _walk(parameter.schema_, f"{pointer}/schema")


def _content(content: dict[str, MediaType] | None, pointer: str) -> Iterator[tuple[str, Schema]]:
    for media_type, media in (content or {}).items():
        if media.schema_ is not None:
            yield from _walk(media.schema_, f"{pointer}/content/{_escape(media_type)}/schema")


def _response(response: Response, pointer: str) -> Iterator[tuple[str, Schema]]:
    for name, header in (response.headers or {}).items():
        yield from _parameter(header, f"{pointer}/headers/{_escape(name)}")
    yield from _content(response.content, pointer)


def _walk(schema: Schema, pointer: str) -> Iterator[tuple[str, Schema]]:
    yield pointer, schema
    for name, child in (schema.properties or {}).items():
        yield from _walk(child, f"{pointer}/properties/{_escape(name)}")
    if schema.items is not None:
        yield from _walk(schema.items, f"{pointer}/items")
    if isinstance(schema.additional_properties, Schema):
        yield from _walk(schema.additional_properties, f"{pointer}/additionalProperties")
    for keyword, children in (("allOf", schema.all_of), ("oneOf", schema.one_of), ("anyOf", schema.any_of)):
        for index, child in enumerate(children or []):
            yield from _walk(child, f"{pointer}/{keyword}/{index}")
    if schema.not_ is not None:
        yield from _walk(schema.not_, f"{pointer}/not")


def _escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")
