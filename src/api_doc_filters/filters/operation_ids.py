"""Operation ids derived from the declaring handler."""

from api_doc_filters.model.base import Operation
from api_doc_filters.pipeline.engine import OperationContext


def operation_id_for(declaring_type: str, method_name: str) -> str:
    return f"{declaring_type.replace('Controller', '')}_{method_name}"


class OperationIdFilter:
    """Sets ``<DeclaringType minus "Controller">_<method>`` when source metadata is known."""

    def apply(self, operation: Operation, context: OperationContext) -> None:
        description = context.api_description
        if description is None or not description.declaring_type or not description.method_name:
            return
        operation.operation_id = operation_id_for(description.declaring_type, description.method_name)
