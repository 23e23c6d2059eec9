"""Filter registry: ordered transformation units tagged with the level they apply at."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from api_doc_filters.model.base import Document, Operation, Schema


class FilterLevel(str, Enum):
    DOCUMENT = "document"
    OPERATION = "operation"
    SCHEMA = "schema"


class DocumentFilter(Protocol):
    def apply(self, document: Document, context: Any) -> None: ...


class OperationFilter(Protocol):
    def apply(self, operation: Operation, context: Any) -> None: ...


class SchemaFilter(Protocol):
    def apply(self, schema: Schema, context: Any) -> None: ...


@dataclass(frozen=True)
class RegisteredFilter:
    level: FilterLevel
    filter: Any

    @property
    def name(self) -> str:
        return type(self.filter).__name__


class FilterRegistry:
    """Filters in registration order. The engine runs them in exactly this order per level."""

    def __init__(self):
        self._entries: list[RegisteredFilter] = []

    def add(self, level: FilterLevel, filter_: Any) -> "FilterRegistry":
        if not callable(getattr(filter_, "apply", None)):
            raise TypeError(f"{type(filter_).__name__} has no apply() method")
        self._entries.append(RegisteredFilter(FilterLevel(level), filter_))
        return self

    def document_filter(self, filter_: DocumentFilter) -> "FilterRegistry":
        return self.add(FilterLevel.DOCUMENT, filter_)

    def operation_filter(self, filter_: OperationFilter) -> "FilterRegistry":
        return self.add(FilterLevel.OPERATION, filter_)

    def schema_filter(self, filter_: SchemaFilter) -> "FilterRegistry":
        return self.add(FilterLevel.SCHEMA, filter_)

    def for_level(self, level: FilterLevel) -> list[RegisteredFilter]:
        return [entry for entry in self._entries if entry.level == level]

    def __iter__(self):
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
