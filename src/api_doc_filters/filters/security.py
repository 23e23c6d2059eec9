"""Security requirement injection."""

from api_doc_filters.model.base import Operation, Response, SecurityRequirement
from api_doc_filters.pipeline.engine import OperationContext

AUTH_RESPONSES = (
    ("401", "Unauthorized"),
    ("403", "Forbidden"),
    ("400", "BadRequest"),
)


class AuthorizeCheckOperationFilter:
    """Adds the auth failure responses and a security requirement to every operation.

    Purely additive: applying it twice yields duplicate entries. The engine
    runs it once per generated document.
    """

    def __init__(self, scheme_id: str, scope: str):
        self.scheme_id = scheme_id
        self.scope = scope

    def apply(self, operation: Operation, context: OperationContext) -> None:
        for status_code, description in AUTH_RESPONSES:
            operation.responses.append(Response(status_code=status_code, description=description))

        requirement = SecurityRequirement({self.scheme_id: [self.scope]})
        operation.security = [*(operation.security or []), requirement]
