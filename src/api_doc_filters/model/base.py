"""In-memory model of an OpenAPI 3.x description document.

Every node keeps unknown OpenAPI keys as pydantic extras so a loaded document
serializes back without losing anything the filters do not touch. Source
metadata (``Operation.source``, ``Schema.enum_names``) only drives filtering
decisions and is never serialized.
"""

from typing import Any, Iterator, Literal

from pydantic import BaseModel, ConfigDict, Field, RootModel, SerializerFunctionWrapHandler, model_serializer, model_validator

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

ParameterLocation = Literal["query", "header", "path", "cookie"]


class Schema(BaseModel):
    """A schema node. ``x-*`` keys live in ``extensions`` and are written inline."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    ref: str | None = Field(default=None, alias="$ref")
    type: str | None = None
    format: str | None = None
    nullable: bool | None = None
    default: Any = None
    enum: list[Any] | None = None
    items: "Schema | None" = None
    properties: "dict[str, Schema] | None" = None
    additional_properties: "Schema | bool | None" = Field(default=None, alias="additionalProperties")
    all_of: "list[Schema] | None" = Field(default=None, alias="allOf")
    one_of: "list[Schema] | None" = Field(default=None, alias="oneOf")
    any_of: "list[Schema] | None" = Field(default=None, alias="anyOf")
    not_: "Schema | None" = Field(default=None, alias="not")
    extensions: dict[str, Any] = Field(default_factory=dict, exclude=True)
    enum_names: list[str] | None = Field(default=None, exclude=True)  # declaration order

    @model_validator(mode="before")
    @classmethod
    def _split_extensions(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "x-source-enum" in data:
            data["enum_names"] = data.pop("x-source-enum")
        extensions = {key: data.pop(key) for key in list(data) if key.startswith("x-")}
        if extensions:
            data["extensions"] = {**data.get("extensions", {}), **extensions}
        return data

    @model_serializer(mode="wrap")
    def _inline_extensions(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        data.update(self.extensions)
        return data


class Parameter(BaseModel):
    """A rendered operation parameter, or a ``$ref`` to a component parameter.

    Reference parameters have no name or location of their own; exclusion
    filters never match them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    ref: str | None = Field(default=None, alias="$ref")
    name: str | None = None
    location: ParameterLocation | None = Field(default=None, alias="in")
    required: bool | None = None
    description: str | None = None
    schema_: Schema | None = Field(default=None, alias="schema")

    @model_validator(mode="after")
    def _name_and_location_unless_ref(self) -> "Parameter":
        if self.ref is None and (self.name is None or self.location is None):
            raise ValueError("a parameter needs 'name' and 'in' unless it is a $ref")
        return self


class Header(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    ref: str | None = Field(default=None, alias="$ref")
    description: str | None = None
    schema_: Schema | None = Field(default=None, alias="schema")


class MediaType(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    schema_: Schema | None = Field(default=None, alias="schema")


class RequestBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    ref: str | None = Field(default=None, alias="$ref")
    description: str | None = None
    content: dict[str, MediaType] | None = None


class ParameterDescription(BaseModel):
    """Source-side description of a parameter, as the framework declared it.

    ``capabilities`` holds the tags of every type the declared type is
    assignable to; ``markers`` holds the tags of attached marker attributes.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    location: str = Field(default="query", alias="in")
    type_name: str | None = Field(default=None, alias="type")
    capabilities: list[str] = []
    markers: list[str] = []


class ApiDescription(BaseModel):
    """Source metadata of an operation: where it was declared and its parameters."""

    model_config = ConfigDict(populate_by_name=True)

    declaring_type: str | None = Field(default=None, alias="declaringType")
    method_name: str | None = Field(default=None, alias="methodName")
    parameter_descriptions: list[ParameterDescription] = Field(default_factory=list, alias="parameters")


class Response(BaseModel):
    """A response. ``status_code`` is unset for component responses."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    status_code: str | None = Field(default=None, exclude=True)
    ref: str | None = Field(default=None, alias="$ref")
    description: str | None = None
    headers: dict[str, Header] | None = None
    content: dict[str, MediaType] | None = None


class SecurityRequirement(RootModel[dict[str, list[str]]]):
    """Scheme id -> required scopes."""


class Operation(BaseModel):
    """One HTTP method on one path.

    ``responses`` is a list rather than a mapping so additive filters can append
    an entry for a status code that already exists; when serialized, later
    entries override earlier ones with the same code.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    operation_id: str | None = Field(default=None, alias="operationId")
    parameters: list[Parameter] = []
    request_body: RequestBody | None = Field(default=None, alias="requestBody")
    responses: list[Response] = []
    security: list[SecurityRequirement] | None = None
    source: ApiDescription | None = Field(default=None, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _read_source(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "x-source" in data:
            data["source"] = data.pop("x-source")
        responses = data.get("responses")
        if isinstance(responses, dict):
            data["responses"] = [
                {"status_code": str(code), **(response or {})} for code, response in responses.items()
            ]
        return data

    @model_serializer(mode="wrap")
    def _fold_responses(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        dumped = data.get("responses", [])
        data["responses"] = {r.status_code: d for r, d in zip(self.responses, dumped)}
        if not self.parameters:
            data.pop("parameters", None)
        return data

    def response_codes(self) -> list[str]:
        return [r.status_code for r in self.responses]


class PathItem(BaseModel):
    """Operations of a single path, keyed by lower-case HTTP method."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    parameters: list[Parameter] | None = None  # shared by every operation of the path
    operations: dict[str, Operation] = {}

    @model_validator(mode="before")
    @classmethod
    def _collect_operations(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "operations" in data:
            return data
        data = dict(data)
        methods = [key for key in data if key.lower() in HTTP_METHODS]
        data["operations"] = {key.lower(): data.pop(key) for key in methods}
        return data

    @model_serializer(mode="wrap")
    def _flatten_operations(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        operations = data.pop("operations", {})
        return {**data, **operations}


class OAuthFlow(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    authorization_url: str | None = Field(default=None, alias="authorizationUrl")
    token_url: str | None = Field(default=None, alias="tokenUrl")
    refresh_url: str | None = Field(default=None, alias="refreshUrl")
    scopes: dict[str, str] = {}


class OAuthFlows(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    implicit: OAuthFlow | None = None
    password: OAuthFlow | None = None
    client_credentials: OAuthFlow | None = Field(default=None, alias="clientCredentials")
    authorization_code: OAuthFlow | None = Field(default=None, alias="authorizationCode")


class SecurityScheme(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str  # oauth2 / apiKey / http / openIdConnect
    description: str | None = None
    name: str | None = None
    location: str | None = Field(default=None, alias="in")
    scheme: str | None = None
    bearer_format: str | None = Field(default=None, alias="bearerFormat")
    flows: OAuthFlows | None = None
    open_id_connect_url: str | None = Field(default=None, alias="openIdConnectUrl")


class Components(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    schemas: dict[str, Schema] = {}
    parameters: dict[str, Parameter] = {}
    request_bodies: dict[str, RequestBody] = Field(default_factory=dict, alias="requestBodies")
    responses: dict[str, Response] = {}
    headers: dict[str, Header] = {}
    security_schemes: dict[str, SecurityScheme] = Field(default_factory=dict, alias="securitySchemes")

    @model_serializer(mode="wrap")
    def _drop_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return {key: value for key, value in handler(self).items() if value != {}}


class Info(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str = ""
    version: str = ""


class Document(BaseModel):
    """Root of an API description."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    openapi: str = "3.0.1"
    info: Info = Field(default_factory=Info)
    paths: dict[str, PathItem] = {}
    components: Components = Field(default_factory=Components)

    @model_serializer(mode="wrap")
    def _drop_empty_components(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        if not data.get("components"):
            data.pop("components", None)
        return data

    def operations(self) -> Iterator[tuple[str, str, Operation]]:
        """Yield ``(path, method, operation)`` in path then method order."""
        for path, item in self.paths.items():
            for method, operation in item.operations.items():
                yield path, method, operation

    def to_openapi(self) -> dict[str, Any]:
        """Serialize to a plain OpenAPI 3.x mapping (JSON-compatible)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
