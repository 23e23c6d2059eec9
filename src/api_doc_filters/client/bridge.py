"""Serialize-then-reparse bridge to the client dialect.

The generated document is written to OpenAPI JSON and that text is parsed
into ClientDocument, so neither model depends on the other.
"""

import json

from api_doc_filters.client.base import ClientDocument, ClientEndpoint, ClientParam
from api_doc_filters.pipeline.generator import DocumentGenerator

CONSTRAINT_KEYS = ("minimum", "maximum", "minLength", "maxLength", "pattern", "enum", "x-enumNames")
PREFERRED_CONTENT_TYPES = ("application/json", "multipart/form-data")


def generate_client_document(generator: DocumentGenerator, document_name: str | None = None) -> ClientDocument:
    """Regenerate the document and convert it through its JSON form."""
    return parse_client_document(generator.generate_json(document_name))


def parse_client_document(text: str) -> ClientDocument:
    """Parse OpenAPI 3.x JSON text into a ClientDocument."""
    doc = json.loads(text)

    components = doc.get("components", {})
    endpoints = []
    for path, methods in doc.get("paths", {}).items():
        for method, operation in methods.items():
            if method.upper() not in ("GET", "POST", "PUT", "DELETE", "PATCH"):
                continue

            security = operation.get("security", doc.get("security", []))
            body_schema, content_type = _request_body(_resolve(operation.get("requestBody"), components, "requestBodies"))
            endpoints.append(
                ClientEndpoint(
                    operation_id=operation.get("operationId"),
                    method=method.upper(),
                    path=path,
                    summary=operation.get("summary", ""),
                    parameters=_parse_parameters(operation.get("parameters", []), components),
                    request_body=body_schema,
                    responses=_parse_responses(operation.get("responses", {})),
                    auth_required=bool(security),
                    scopes=[scope for requirement in security for scopes in requirement.values() for scope in scopes],
                    tags=operation.get("tags", []),
                    content_type=content_type,
                )
            )

    info = doc.get("info", {})
    schemes = components.get("securitySchemes", {})
    return ClientDocument(
        title=info.get("title", ""),
        version=info.get("version", ""),
        security_schemes={name: scheme.get("type", "") for name, scheme in schemes.items()},
        endpoints=endpoints,
    )


def _parse_parameters(params: list[dict], components: dict) -> list[ClientParam]:
    result = []
    for p in params:
        p = _resolve(p, components, "parameters")
        if p is None:
            continue
        schema = p.get("schema", {})
        constraints = {key: schema[key] for key in CONSTRAINT_KEYS if key in schema}

        result.append(
            ClientParam(
                name=p["name"],
                location=p.get("in", "query"),
                required=p.get("required", False),
                param_type=schema.get("type", "string"),
                nullable=schema.get("nullable", False),
                default=schema.get("default"),
                description=p.get("description", ""),
                constraints=constraints,
            )
        )
    return result


def _resolve(node: dict | None, components: dict, section: str) -> dict | None:
    """Follow a local ``#/components/<section>/<name>`` reference; other refs resolve to None."""
    if not node or "$ref" not in node:
        return node
    prefix = f"#/components/{section}/"
    ref = node["$ref"]
    if not ref.startswith(prefix):
        return None
    return components.get(section, {}).get(ref[len(prefix):])


def _request_body(body: dict | None) -> tuple[dict | None, str]:
    """Pick the body schema and its media type.

    JSON wins, then multipart form data, then whatever media type comes first.
    An operation without a body is reported as JSON with no schema.
    """
    content = (body or {}).get("content") or {}
    if not content:
        return None, "application/json"
    media_type = next((ct for ct in PREFERRED_CONTENT_TYPES if ct in content), next(iter(content)))
    return content[media_type].get("schema"), media_type


def _parse_responses(responses: dict) -> dict:
    return {str(code): {"description": resp.get("description", "")} for code, resp in responses.items()}
