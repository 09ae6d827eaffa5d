from typing import List, Optional

from fastapi import APIRouter

from db_studio.api.dependencies import QueryStoreDep
from db_studio.storage import SavedQuery, SavedQueryCreate

router = APIRouter(prefix="/queries", tags=["Saved queries"])


@router.get("", response_model=List[SavedQuery])
async def list_queries(store: QueryStoreDep, user_id: Optional[str] = None):
    return await store.list_queries(user_id)


@router.post("", response_model=SavedQuery)
async def save_query(query: SavedQueryCreate, store: QueryStoreDep):
    return await store.save(query)


@router.delete("/{query_id}")
async def delete_query(query_id: str, store: QueryStoreDep):
    await store.delete(query_id)
    return {"success": True}
