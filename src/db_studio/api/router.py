from fastapi import APIRouter

from db_studio.api.endpoints import assistant, queries, query, tables

api_router = APIRouter()

# Combine all HTTP sub-routers into one
api_router.include_router(tables.router)
api_router.include_router(query.router)
api_router.include_router(assistant.router)
api_router.include_router(queries.router)

stream_router = assistant.stream_router
