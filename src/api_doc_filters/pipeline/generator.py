"""Document generation trigger."""

import json
import logging
from typing import Callable

from api_doc_filters.config import DocumentationBuilder
from api_doc_filters.errors import UnknownDocumentError
from api_doc_filters.model.base import Document
from api_doc_filters.pipeline.engine import apply_filters

logger = logging.getLogger(__name__)

DocumentProvider = Callable[[], Document]


class DocumentGenerator:
    """Produces filtered documents from a provider of freshly built documents.

    The provider stands in for the framework that discovers routes and builds
    schemas; it must return a new tree on every call.
    """

    def __init__(self, builder: DocumentationBuilder, provider: DocumentProvider):
        self.builder = builder
        self.provider = provider

    def generate(self, document_name: str | None = None) -> Document:
        """Build and filter the document registered under ``document_name`` (the API version)."""
        settings = self.builder.require("generate API documentation")
        config = settings.config
        if document_name is not None and document_name != config.api_version:
            raise UnknownDocumentError(document_name, config.api_version)

        document = self.provider()
        document.info.title = config.api_title
        document.info.version = config.api_version
        document.components.security_schemes[config.security_scheme] = settings.security_scheme.model_copy(deep=True)

        apply_filters(document, settings.registry, document_name=config.api_version)
        logger.info("Generated document %s with %d paths", config.api_version, len(document.paths))
        return document

    def generate_json(self, document_name: str | None = None, indent: int | None = 2) -> str:
        return json.dumps(self.generate(document_name).to_openapi(), indent=indent)
