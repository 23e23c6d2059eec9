"""Paging/query parameters for list-query endpoints (GET .../odata)."""

from api_doc_filters.model.base import Operation, Parameter, Schema
from api_doc_filters.pipeline.engine import OperationContext

LIST_QUERY_SUFFIX = "/odata"

_QUERY_OPTIONS_DOC = "https://docs.microsoft.com/en-us/odata/concepts/queryoptions-overview"
_AGGREGATION_DOC = (
    "http://docs.oasis-open.org/odata/odata-data-aggregation-ext/v4.0/cs01/"
    "odata-data-aggregation-ext-v4.0-cs01.html#_Toc378326289"
)

# name, schema type, default, description
PAGING_PARAMETERS = (
    ("count", "boolean", False, f"Defines if the total element count should be computed. ref: {_QUERY_OPTIONS_DOC}#count"),
    ("skip", "integer", 0, f"Defines how many elements to skip. ref: {_QUERY_OPTIONS_DOC}#top-and-skip"),
    ("top", "integer", 30, f"Defines how many elements to return. ref: {_QUERY_OPTIONS_DOC}#top-and-skip"),
    ("filter", "string", None, f"Defines the filtering expression. ref: {_QUERY_OPTIONS_DOC}#filter"),
    ("orderBy", "string", None, f"Defines the ordering expression. ref: {_QUERY_OPTIONS_DOC}#orderby"),
    ("apply", "string", None, f"Defines the Aggregation behavior. ref: {_AGGREGATION_DOC}"),
)


def is_list_query(method: str, path: str) -> bool:
    return method.upper() == "GET" and path.endswith(LIST_QUERY_SUFFIX)


class PagingParametersFilter:
    """Appends the paging query parameters to GET list-query operations.

    ``prefix`` is prepended to every parameter name, e.g. ``"$"`` for
    OData-style ``$top``.
    """

    def __init__(self, prefix: str = ""):
        self.prefix = prefix

    def apply(self, operation: Operation, context: OperationContext) -> None:
        if not is_list_query(context.method, context.path):
            return

        for name, schema_type, default, description in PAGING_PARAMETERS:
            operation.parameters.append(
                Parameter(
                    name=f"{self.prefix}{name}",
                    location="query",
                    required=False,
                    description=description,
                    schema_=Schema(type=schema_type, nullable=True, default=default),
                )
            )
