"""Enum member names annotation."""

from api_doc_filters.model.base import Schema
from api_doc_filters.pipeline.engine import SchemaContext

ENUM_NAMES_KEY = "x-enumNames"


class EnumNamesSchemaFilter:
    """Attaches ``x-enumNames`` (member names, declaration order) to enum schemas.

    Skips schemas that already carry the key, since the same enum can be
    reached through several schemas in one document.
    """

    def apply(self, schema: Schema, context: SchemaContext) -> None:
        if schema.enum_names is None or ENUM_NAMES_KEY in schema.extensions:
            return
        schema.extensions[ENUM_NAMES_KEY] = list(schema.enum_names)
