"""Parameter exclusion filters.

All three filters remove a parameter from the rendered ``Operation.parameters``
and from the source parameter descriptions, so no later filter can re-derive
a parameter that has already been excluded.
"""

import logging
from typing import Iterable

from api_doc_filters.model.base import Document, Operation
from api_doc_filters.model.source import EXCLUDE_MARKER, type_tag
from api_doc_filters.pipeline.engine import DocumentContext, OperationContext

logger = logging.getLogger(__name__)


def remove_parameter(operation: Operation, name: str) -> None:
    for index, parameter in enumerate(operation.parameters):
        if parameter.name == name:
            del operation.parameters[index]
            break
    if operation.source is not None:
        operation.source.parameter_descriptions = [
            d for d in operation.source.parameter_descriptions if d.name != name
        ]


class ExcludeParameterTypeFilter:
    """Drops parameters whose declared type is assignable to the excluded type."""

    def __init__(self, excluded_type: type | str):
        self.tag = type_tag(excluded_type)

    def apply(self, operation: Operation, context: OperationContext) -> None:
        description = context.api_description
        if description is None:
            return
        ignored = [d.name for d in description.parameter_descriptions if self.tag in d.capabilities]
        for name in ignored:
            logger.debug("Excluding parameter %r of %s (type %s)", name, context.location, self.tag)
            remove_parameter(operation, name)


class ExcludeParameterNamesFilter:
    """Document filter dropping every parameter whose name is in a fixed set (exact match)."""

    def __init__(self, ignored_names: Iterable[str]):
        self.ignored_names = frozenset(ignored_names)

    def apply(self, document: Document, context: DocumentContext) -> None:
        if not self.ignored_names:
            return
        for path, method, operation in document.operations():
            self._filter_operation(operation, f"{method.upper()} {path}")

    def _filter_operation(self, operation: Operation, location: str) -> None:
        for index in range(len(operation.parameters) - 1, -1, -1):
            name = operation.parameters[index].name
            if name not in self.ignored_names:
                continue
            logger.debug("Excluding parameter %r of %s (ignored name)", name, location)
            del operation.parameters[index]
        if operation.source is not None:
            operation.source.parameter_descriptions = [
                d for d in operation.source.parameter_descriptions if d.name not in self.ignored_names
            ]


class ExcludeMarkedParametersFilter:
    """Drops parameters whose declaration carries the ``doc-exclude`` marker."""

    marker = EXCLUDE_MARKER

    def apply(self, operation: Operation, context: OperationContext) -> None:
        description = context.api_description
        if description is None:
            return
        marked = [d.name for d in description.parameter_descriptions if self.marker in d.markers]
        for name in marked:
            logger.debug("Excluding parameter %r of %s (marked)", name, context.location)
            remove_parameter(operation, name)
