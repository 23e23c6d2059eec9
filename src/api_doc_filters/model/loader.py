"""OpenAPI document loader.

Reads OpenAPI 3.x documents (YAML or JSON) into the Document model. Source
metadata is taken from the ``x-source`` vendor key on operations and the
``x-source-enum`` key on schemas.
"""

from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import ValidationError

from api_doc_filters.errors import InvalidDocumentError
from api_doc_filters.model.base import Document


def load_document(file_path: Path) -> Document:
    """Parse an OpenAPI file into a Document."""
    text = file_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)  # JSON parses as YAML too
    except yaml.YAMLError as e:
        raise InvalidDocumentError(f"{file_path}: {e}") from e
    return parse_document(data, origin=str(file_path))


def parse_document(data: Any, origin: str = "<document>") -> Document:
    if not isinstance(data, dict):
        raise InvalidDocumentError(f"{origin}: expected a mapping at the top level")
    if "swagger" in data:
        raise InvalidDocumentError(f"{origin}: Swagger {data['swagger']} documents are not supported, convert to OpenAPI 3.x")
    if "openapi" not in data:
        raise InvalidDocumentError(f"{origin}: missing 'openapi' version field")

    try:
        return Document.model_validate(data)
    except ValidationError as e:
        raise InvalidDocumentError(f"{origin}: {e}") from e


def file_provider(file_path: Path) -> Callable[[], Document]:
    """Document provider that re-reads the file, so each call returns a fresh tree."""

    def provide() -> Document:
        return load_document(file_path)

    return provide
