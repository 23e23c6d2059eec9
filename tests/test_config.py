from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from api_doc_filters.config import (
    DocumentationBuilder,
    DocumentationConfig,
    build_registry,
    build_security_scheme,
    load_config,
)
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
from api_doc_filters.pipeline.registry import FilterLevel

FIXTURES = Path(__file__).parent / "fixtures"
TOKEN_URL = "https://auth.example.com/connect/token"


class TestDocumentationConfig:
    def test_defaults(self):
        config = DocumentationConfig()
        assert config.api_title == "Application Web API"
        assert config.api_version == "1.0.0"
        assert config.api_name == "api"
        assert config.security_scheme == "oauth2"
        assert config.token_url is None
        assert config.ignored_parameter_names == ()
        assert config.paging_parameter_prefix == ""

    def test_camel_case_aliases(self):
        config = DocumentationConfig.model_validate({"apiTitle": "Shop", "tokenUrl": TOKEN_URL})
        assert config.api_title == "Shop"
        assert config.token_url == TOKEN_URL

    def test_load_yaml(self):
        config = load_config(FIXTURES / "config.yaml")
        assert config.api_version == "v1"
        assert config.ignored_parameter_names == ("secret",)

    def test_load_empty_file(self, tmp_path):
        f = tmp_path / "empty.yaml"
        f.write_text("")
        assert load_config(f) == DocumentationConfig()

    def test_unknown_key_is_a_configuration_error(self, tmp_path):
        f = tmp_path / "bad.yaml"
        f.write_text("apiTitel: typo\n")
        with pytest.raises(ConfigurationError):
            load_config(f)

    def test_non_mapping_file(self, tmp_path):
        f = tmp_path / "list.yaml"
        f.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(f)


class TestSecurityScheme:
    def test_password_flow(self):
        config = DocumentationConfig(api_title="Shop", api_name="shop", token_url=TOKEN_URL)
        scheme = build_security_scheme(config)
        assert scheme.type == "oauth2"
        assert scheme.flows.password.token_url == TOKEN_URL
        assert scheme.flows.password.refresh_url == TOKEN_URL
        assert scheme.flows.password.scopes == {"shop": "Shop"}
        assert scheme.scheme == "Bearer"
        assert scheme.bearer_format == "Bearer {token}"


class TestBuildRegistry:
    def test_registration_order(self):
        registry = build_registry(DocumentationConfig(token_url=TOKEN_URL))
        assert [type(e.filter) for e in registry] == [
            ExcludeParameterNamesFilter,
            ExcludeParameterTypeFilter,
            AuthorizeCheckOperationFilter,
            ExcludeMarkedParametersFilter,
            PagingParametersFilter,
            OperationIdFilter,
            EnumNamesSchemaFilter,
        ]
        assert [e.level for e in registry][0] == FilterLevel.DOCUMENT
        assert registry.for_level(FilterLevel.SCHEMA)[0].level == FilterLevel.SCHEMA

    def test_filters_bound_to_config(self):
        config = DocumentationConfig(token_url=TOKEN_URL, security_scheme="bearer", api_name="shop",
                                     ignored_parameter_names=["tenant"], paging_parameter_prefix="$")
        filters = [e.filter for e in build_registry(config)]
        assert filters[0].ignored_names == frozenset({"tenant"})
        assert filters[1].tag == "api_doc_filters.model.source.Undocumented"
        assert (filters[2].scheme_id, filters[2].scope) == ("bearer", "shop")
        assert filters[4].prefix == "$"


class TestDocumentationBuilder:
    def test_missing_token_url_fails_before_registration(self):
        builder = DocumentationBuilder()
        with patch("api_doc_filters.config.build_registry") as mock_build:
            with pytest.raises(ConfigurationError, match="tokenUrl"):
                builder.register(DocumentationConfig())
        mock_build.assert_not_called()
        assert builder.is_registered is False

    def test_register_with_options(self):
        builder = DocumentationBuilder()
        settings = builder.register(token_url=TOKEN_URL, api_title="Shop")
        assert settings.config.api_title == "Shop"
        assert builder.require("anything") is settings

    def test_options_override_config(self):
        settings = DocumentationBuilder().register(DocumentationConfig(token_url=TOKEN_URL), api_version="v2")
        assert settings.config.api_version == "v2"

    def test_invalid_option(self):
        with pytest.raises(ConfigurationError):
            DocumentationBuilder().register(token_url=TOKEN_URL, colour="blue")

    def test_registered_config_is_frozen(self):
        settings = DocumentationBuilder().register(DocumentationConfig(token_url=TOKEN_URL))
        with pytest.raises(ValidationError):
            settings.config.api_title = "changed"
        with pytest.raises(AttributeError):
            settings.config.ignored_parameter_names.append("tenant")
        assert settings.config.api_title == "Application Web API"

    def test_require_before_register(self):
        with pytest.raises(SequencingError, match="DocumentationBuilder.register"):
            DocumentationBuilder().require("generate API documentation")

    def test_second_registration_replaces_first(self, caplog):
        builder = DocumentationBuilder()
        builder.register(token_url=TOKEN_URL, api_version="v1")
        builder.register(token_url=TOKEN_URL, api_version="v2")
        assert builder.require("read").config.api_version == "v2"
        assert "registered twice" in caplog.text
