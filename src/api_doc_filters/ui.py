"""Documentation UI settings and eager warm-up."""

import logging
from typing import Any

from pydantic import BaseModel

from api_doc_filters.config import DocumentationBuilder
from api_doc_filters.pipeline.generator import DocumentGenerator

logger = logging.getLogger(__name__)


class SwaggerUiSettings(BaseModel):
    endpoint_url: str
    endpoint_name: str
    doc_expansion: str = "none"
    display_request_duration: bool = True
    default_model_expand_depth: int = 0
    default_models_expand_depth: int = -1
    display_operation_id: bool = True

    def to_config(self) -> dict[str, Any]:
        """swagger-ui ``SwaggerUIBundle`` options."""
        return {
            "urls": [{"url": self.endpoint_url, "name": self.endpoint_name}],
            "docExpansion": self.doc_expansion,
            "displayRequestDuration": self.display_request_duration,
            "defaultModelExpandDepth": self.default_model_expand_depth,
            "defaultModelsExpandDepth": self.default_models_expand_depth,
            "displayOperationId": self.display_operation_id,
        }


def document_url(version: str) -> str:
    return f"/swagger/{version}/swagger.json"


def use_documentation(builder: DocumentationBuilder, generator: DocumentGenerator) -> SwaggerUiSettings:
    """Prepare the documentation UI.

    Generates the document once before any request is served, so a broken
    filter fails here instead of on the first visit to the docs.
    """
    config = builder.require("set up the documentation UI").config

    generator.generate(config.api_version)
    logger.info("Documentation warm-up for %s completed", config.api_version)

    return SwaggerUiSettings(
        endpoint_url=document_url(config.api_version),
        endpoint_name=f"{config.api_title} {config.api_version}",
    )
