"""Client-generation dialect of an API description.

A flat list of endpoints, the shape client code generators consume. Built
only from serialized OpenAPI JSON (see ``client.bridge``), never from the
Document model directly.
"""

from typing import Any

from pydantic import BaseModel


class ClientParam(BaseModel):
    """A single API parameter (query, path, header, or cookie)."""

    name: str
    location: str  # query / path / header / cookie
    required: bool
    param_type: str  # string / integer / boolean / array / object
    nullable: bool = False
    default: Any = None
    description: str = ""
    constraints: dict = {}  # min, max, pattern, enum, x-enumNames, etc.


class ClientEndpoint(BaseModel):
    """A single API endpoint with all its metadata."""

    operation_id: str | None = None
    method: str  # GET / POST / PUT / DELETE / PATCH
    path: str  # /api/users/{id}
    summary: str
    parameters: list[ClientParam]
    request_body: dict | None
    responses: dict  # {status_code: {description}}
    auth_required: bool
    scopes: list[str] = []
    tags: list[str]
    content_type: str = "application/json"


class ClientDocument(BaseModel):
    title: str
    version: str
    security_schemes: dict[str, str] = {}  # scheme id -> scheme type
    endpoints: list[ClientEndpoint]
