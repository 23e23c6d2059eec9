"""Documentation configuration and registration.

``DocumentationBuilder.register`` validates a DocumentationConfig, builds the
OAuth2 security scheme and the filter registry, and keeps the resolved
settings. The builder is the handle passed to the generator and to the UI
setup; both refuse to run before registration.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from api_doc_filters.errors import ConfigurationError, SequencingError
from api_doc_filters.filters.enums import EnumNamesSchemaFilter
from api_doc_filters.filters.operation_ids import OperationIdFilter
from api_doc_filters.filters.paging import PagingParametersFilter
from api_doc_filters.filters.parameters import (
    ExcludeMarkedParametersFilter,
    ExcludeParameterNamesFilter,
    ExcludeParameterTypeFilter,
)
from api_doc_filters.filters.security import AuthorizeCheckOperationFilter
from api_doc_filters.model.base import OAuthFlow, OAuthFlows, SecurityScheme
from api_doc_filters.model.source import Undocumented
from api_doc_filters.pipeline.registry import FilterRegistry

logger = logging.getLogger(__name__)


class DocumentationConfig(BaseModel):
    """User options. Accepts both snake_case names and the camelCase aliases.

    Frozen: the registered settings cannot change after registration.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    api_title: str = Field(default="Application Web API", alias="apiTitle")
    api_version: str = Field(default="1.0.0", alias="apiVersion")
    api_name: str = Field(default="api", alias="apiName")
    security_scheme: str = Field(default="oauth2", alias="securityScheme")
    token_url: str | None = Field(default=None, alias="tokenUrl")
    ignored_parameter_names: tuple[str, ...] = Field(default=(), alias="ignoredParameterNames")
    paging_parameter_prefix: str = Field(default="", alias="pagingParameterPrefix")


@dataclass(frozen=True)
class DocumentationSettings:
    config: DocumentationConfig
    security_scheme: SecurityScheme
    registry: FilterRegistry


def load_config(file_path: Path) -> DocumentationConfig:
    """Read a YAML config file (camelCase or snake_case keys)."""
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read config {file_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {file_path} must be a mapping")
    return parse_config(data)


def parse_config(data: dict) -> DocumentationConfig:
    try:
        return DocumentationConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid documentation config: {e}") from e


def build_security_scheme(config: DocumentationConfig) -> SecurityScheme:
    """OAuth2 password flow against the configured token endpoint."""
    return SecurityScheme(
        type="oauth2",
        location="header",
        name="Authentication",
        scheme="Bearer",
        bearer_format="Bearer {token}",
        flows=OAuthFlows(
            password=OAuthFlow(
                token_url=config.token_url,
                refresh_url=config.token_url,
                scopes={config.api_name: config.api_title},
            )
        ),
    )


def build_registry(config: DocumentationConfig) -> FilterRegistry:
    registry = FilterRegistry()
    registry.document_filter(ExcludeParameterNamesFilter(config.ignored_parameter_names))
    registry.operation_filter(ExcludeParameterTypeFilter(Undocumented))
    registry.operation_filter(AuthorizeCheckOperationFilter(config.security_scheme, config.api_name))
    registry.operation_filter(ExcludeMarkedParametersFilter())
    registry.operation_filter(PagingParametersFilter(prefix=config.paging_parameter_prefix))
    registry.operation_filter(OperationIdFilter())
    registry.schema_filter(EnumNamesSchemaFilter())
    return registry


class DocumentationBuilder:
    """Holds the registered documentation settings for one application."""

    def __init__(self):
        self._settings: DocumentationSettings | None = None

    def register(self, config: DocumentationConfig | None = None, **options) -> DocumentationSettings:
        """Validate ``config`` (or keyword options) and build the filter pipeline.

        Raises ConfigurationError when no token URL is configured. Registering
        again replaces the previous settings.
        """
        if config is None:
            config = parse_config(options)
        elif options:
            config = parse_config({**config.model_dump(), **options})

        if not config.token_url:
            raise ConfigurationError("tokenUrl is required to register the documentation services")

        if self._settings is not None:
            logger.warning("Documentation services registered twice; replacing previous settings")

        self._settings = DocumentationSettings(
            config=config,
            security_scheme=build_security_scheme(config),
            registry=build_registry(config),
        )
        logger.info(
            "Registered documentation %r version %s with %d filters",
            config.api_title, config.api_version, len(self._settings.registry),
        )
        return self._settings

    @property
    def is_registered(self) -> bool:
        return self._settings is not None

    def require(self, action: str) -> DocumentationSettings:
        """Return the settings, or raise SequencingError naming ``action``."""
        if self._settings is None:
            raise SequencingError(action)
        return self._settings
