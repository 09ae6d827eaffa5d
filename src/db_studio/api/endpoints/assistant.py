from typing import Any, Optional

from fastapi import APIRouter, WebSocket

from db_studio.api.dependencies import CatalogDep, GatewayDep, SchemaContextFlagDep
from db_studio.assistant.channel import AssistantChannel
from db_studio.assistant.gateway import resolve_schema_context
from db_studio.errors import ValidationError
from db_studio.models.assistant import AIResponse
from db_studio.models.base import CamelModel

router = APIRouter(prefix="/ai", tags=["Assistant"])

# Mounted without the HTTP prefix
stream_router = APIRouter(tags=["Assistant"])


class GenerateRequest(CamelModel):
    prompt: Any = None
    table_schema: Optional[str] = None


class SqlQueryRequest(CamelModel):
    sql_query: Any = None


def _required_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value


@router.post("/generate", response_model=AIResponse, response_model_exclude_none=True)
async def generate(
    request: GenerateRequest,
    gateway: GatewayDep,
    catalog: CatalogDep,
    include_schema_context: SchemaContextFlagDep,
):
    prompt = _required_text(request.prompt, "Prompt is required")
    context = await resolve_schema_context(
        request.table_schema, catalog, include_schema_context
    )
    return await gateway.generate(prompt, context)


@router.post("/optimize", response_model=AIResponse, response_model_exclude_none=True)
async def optimize(request: SqlQueryRequest, gateway: GatewayDep):
    sql_text = _required_text(request.sql_query, "SQL query is required")
    return await gateway.optimize(sql_text)


@router.post("/explain", response_model=AIResponse, response_model_exclude_none=True)
async def explain(request: SqlQueryRequest, gateway: GatewayDep):
    sql_text = _required_text(request.sql_query, "SQL query is required")
    return await gateway.explain(sql_text)


# Streamed transport: one channel per connected client
@stream_router.websocket("/ws")
async def assistant_channel(websocket: WebSocket):
    server = websocket.app.state.server
    channel = AssistantChannel(
        websocket,
        server.gateway,
        catalog=server.catalog,
        include_schema_context=server.config.assistant.include_schema_context,
        registry=server.channels,
    )
    await channel.serve()
