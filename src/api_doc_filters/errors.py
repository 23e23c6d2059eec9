"""Error types raised while configuring and generating API documentation."""


class DocumentationError(Exception):
    """Base class for every documentation pipeline failure."""


class ConfigurationError(DocumentationError):
    """A required option is missing or a config file is invalid."""


class SequencingError(DocumentationError):
    """Generation or UI setup was attempted before registration."""

    def __init__(self, action: str):
        super().__init__(
            f"Attempting to {action} without registering the documentation services. "
            "Please register them first by calling DocumentationBuilder.register()"
        )
        self.action = action


class UnknownDocumentError(DocumentationError):
    """The requested document name is not the configured API version."""

    def __init__(self, name: str, known: str):
        super().__init__(f"Unknown document {name!r}; the only registered document is {known!r}")
        self.name = name
        self.known = known


class FilterExecutionError(DocumentationError):
    """A registered filter raised while the document was being transformed."""

    def __init__(self, filter_name: str, location: str, cause: Exception):
        super().__init__(f"Filter {filter_name} failed at {location}: {cause}")
        self.filter_name = filter_name
        self.location = location
        self.cause = cause


class InvalidDocumentError(DocumentationError):
    """An input file is not an OpenAPI 3.x description."""
