"""Pydantic models for store metadata, results and assistant exchanges."""

from .assistant import (
    AIResponse,
    AssistantTurn,
    ErrorFrame,
    RequestFrame,
    ResponseFrame,
    TurnState,
)
from .config import AssistantConfig, DatabaseConfig, ServerConfig
from .query import MutationResult, Page, QueryResult
from .row import RowRecord
from .schema import ColumnDescriptor, TableDescriptor

__all__ = [
    "AIResponse",
    "AssistantTurn",
    "TurnState",
    "RequestFrame",
    "ResponseFrame",
    "ErrorFrame",
    "AssistantConfig",
    "DatabaseConfig",
    "ServerConfig",
    "QueryResult",
    "MutationResult",
    "Page",
    "RowRecord",
    "TableDescriptor",
    "ColumnDescriptor",
]
