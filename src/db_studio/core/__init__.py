"""Core data-access components."""

from .catalog import SchemaCatalog
from .classifier import StatementKind, classify
from .connection import DatabaseConnection
from .executor import QueryExecutor
from .identifiers import IdentifierGuard
from .mutator import RowMutator
from .pagination import PaginationEngine
from .seed import seed_sample_data

__all__ = [
    "DatabaseConnection",
    "IdentifierGuard",
    "StatementKind",
    "classify",
    "SchemaCatalog",
    "QueryExecutor",
    "RowMutator",
    "PaginationEngine",
    "seed_sample_data",
]
