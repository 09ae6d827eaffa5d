"""db-studio: local database browser with an AI SQL assistant."""

__version__ = "0.1.0"

from db_studio.core import (
    DatabaseConnection,
    IdentifierGuard,
    PaginationEngine,
    QueryExecutor,
    RowMutator,
    SchemaCatalog,
)
from db_studio.models import DatabaseConfig, ServerConfig

__all__ = [
    "__version__",
    "DatabaseConnection",
    "IdentifierGuard",
    "SchemaCatalog",
    "QueryExecutor",
    "RowMutator",
    "PaginationEngine",
    "DatabaseConfig",
    "ServerConfig",
]
