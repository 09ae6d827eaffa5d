"""Error taxonomy shared by the data-access layer and the HTTP surface."""


class StudioError(Exception):
    """Base class for errors reported back to callers with a message."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StudioError):
    """Bad caller input, e.g. a missing or empty required field."""

    status_code = 400


class UnknownTableError(StudioError):
    """The named table or view does not exist in the store."""

    status_code = 400

    def __init__(self, table: str):
        super().__init__(f"Table not found: {table}")
        self.table = table


class InvalidIdentifierError(StudioError):
    """An identifier cannot be safely embedded into generated SQL."""

    status_code = 400


class ExecutionError(StudioError):
    """The store rejected a statement (syntax, constraint, type mismatch)."""

    status_code = 400


class CatalogError(StudioError):
    """The store could not be reached during introspection."""

    status_code = 500


class TransportError(StudioError):
    """A channel is closed or the AI provider is unreachable.

    Always absorbed by the assistant layer into a degraded response.
    """

    status_code = 500
