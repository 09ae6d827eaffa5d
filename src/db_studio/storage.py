"""Saved query metadata behind an opaque key-value store."""

import uuid
from datetime import datetime, timezone
from typing import Optional, Protocol

from pydantic import Field

from db_studio.models.base import CamelModel


class SavedQueryCreate(CamelModel):
    name: str = Field(..., min_length=1)
    sql: str = Field(..., min_length=1)
    user_id: Optional[str] = None


class SavedQuery(SavedQueryCreate):
    id: str
    created_at: datetime


class SavedQueryStore(Protocol):
    async def list_queries(self, user_id: Optional[str] = None) -> list[SavedQuery]: ...

    async def save(self, query: SavedQueryCreate) -> SavedQuery: ...

    async def delete(self, query_id: str) -> None: ...


class InMemoryQueryStore:
    """Process-local store; contents are lost on restart."""

    def __init__(self):
        self._queries: dict[str, SavedQuery] = {}

    async def list_queries(self, user_id: Optional[str] = None) -> list[SavedQuery]:
        queries = list(self._queries.values())
        if user_id is not None:
            queries = [query for query in queries if query.user_id == user_id]
        return queries

    async def save(self, query: SavedQueryCreate) -> SavedQuery:
        saved = SavedQuery(
            id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc),
            **query.model_dump(),
        )
        self._queries[saved.id] = saved
        return saved

    async def delete(self, query_id: str) -> None:
        self._queries.pop(query_id, None)
