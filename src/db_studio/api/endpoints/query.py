from typing import Any

from fastapi import APIRouter

from db_studio.api.dependencies import ExecutorDep
from db_studio.models.base import CamelModel
from db_studio.models.query import QueryResult

router = APIRouter(prefix="/query", tags=["Query"])


class ExecuteQueryRequest(CamelModel):
    # Type-checked by the executor so a non-string gets the same message
    sql: Any = None


@router.post("/execute", response_model=QueryResult)
async def execute_query(request: ExecuteQueryRequest, executor: ExecutorDep):
    return await executor.execute(request.sql)
