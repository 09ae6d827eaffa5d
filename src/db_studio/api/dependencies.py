from typing import Annotated

from fastapi import Depends, Request

from db_studio.assistant.gateway import AssistantGateway
from db_studio.core import PaginationEngine, QueryExecutor, RowMutator, SchemaCatalog
from db_studio.storage import SavedQueryStore


def _component(request: Request, name: str):
    component = getattr(request.app.state.server, name)
    if component is None:
        raise RuntimeError("Server not initialized. Call initialize() first.")
    return component


def get_catalog(request: Request) -> SchemaCatalog:
    return _component(request, "catalog")


def get_executor(request: Request) -> QueryExecutor:
    return _component(request, "executor")


def get_mutator(request: Request) -> RowMutator:
    return _component(request, "mutator")


def get_paginator(request: Request) -> PaginationEngine:
    return _component(request, "paginator")


def get_gateway(request: Request) -> AssistantGateway:
    return _component(request, "gateway")


def get_query_store(request: Request) -> SavedQueryStore:
    return _component(request, "query_store")


def get_include_schema_context(request: Request) -> bool:
    return request.app.state.server.config.assistant.include_schema_context


CatalogDep = Annotated[SchemaCatalog, Depends(get_catalog)]
ExecutorDep = Annotated[QueryExecutor, Depends(get_executor)]
MutatorDep = Annotated[RowMutator, Depends(get_mutator)]
PaginatorDep = Annotated[PaginationEngine, Depends(get_paginator)]
GatewayDep = Annotated[AssistantGateway, Depends(get_gateway)]
QueryStoreDep = Annotated[SavedQueryStore, Depends(get_query_store)]
SchemaContextFlagDep = Annotated[bool, Depends(get_include_schema_context)]
