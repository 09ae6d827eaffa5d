"""db-studio server

A local database browser service: table inspection, arbitrary SQL, row
editing, and an AI SQL assistant over HTTP and a persistent WebSocket channel.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from db_studio.api.router import api_router, stream_router
from db_studio.assistant import AssistantGateway, ChannelRegistry, OpenAIProvider
from db_studio.assistant.provider import AssistantProvider
from db_studio.core import (
    DatabaseConnection,
    IdentifierGuard,
    PaginationEngine,
    QueryExecutor,
    RowMutator,
    SchemaCatalog,
    seed_sample_data,
)
from db_studio.errors import StudioError
from db_studio.models.config import ServerConfig
from db_studio.storage import InMemoryQueryStore, SavedQueryStore

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class StudioServer:
    """Composition root: owns the store handle and wires every component."""

    def __init__(
        self,
        config: ServerConfig,
        provider: Optional[AssistantProvider] = None,
        query_store: Optional[SavedQueryStore] = None,
    ):
        """
        Initialize the server.

        Args:
            config: Server configuration
            provider: AI completion provider (OpenAI when omitted)
            query_store: Saved query store (in-memory when omitted)
        """
        self.config = config
        self.connection = DatabaseConnection(config.database)
        self.provider = provider if provider is not None else OpenAIProvider(config.assistant)
        self.gateway = AssistantGateway(self.provider)
        self.query_store = query_store if query_store is not None else InMemoryQueryStore()
        self.channels = ChannelRegistry()
        self.guard: Optional[IdentifierGuard] = None
        self.catalog: Optional[SchemaCatalog] = None
        self.executor: Optional[QueryExecutor] = None
        self.mutator: Optional[RowMutator] = None
        self.paginator: Optional[PaginationEngine] = None

    @property
    def is_initialized(self) -> bool:
        return self.catalog is not None

    async def initialize(self) -> None:
        """Open the store and build the data-access components."""
        if self.is_initialized:
            return

        await self.connection.initialize()

        self.guard = IdentifierGuard.for_dialect(self.connection.sa_dialect)
        self.catalog = SchemaCatalog(self.connection, self.guard)
        self.executor = QueryExecutor(self.connection)
        self.mutator = RowMutator(self.connection, self.catalog, self.guard)
        self.paginator = PaginationEngine(self.connection, self.catalog, self.guard)

        if self.config.database.seed_sample_data:
            await seed_sample_data(self.connection)

        provider_state = (
            "configured"
            if getattr(self.provider, "is_configured", True)
            else "not configured"
        )
        logger.info(
            f"Initialized db-studio on {self.connection.dialect} "
            f"(AI provider {provider_state})"
        )

    async def cleanup(self) -> None:
        """Close the store and the provider client."""
        await self.connection.dispose()
        close = getattr(self.provider, "close", None)
        if close is not None:
            await close()
        self.catalog = None
        self.executor = None
        self.mutator = None
        self.paginator = None
        logger.info("db-studio server cleaned up")


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first['msg']}" if location else first["msg"]


def create_app(server: StudioServer) -> FastAPI:
    """Build the FastAPI application around an (optionally initialized) server."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await server.initialize()
        yield
        await server.cleanup()

    app = FastAPI(title="db-studio", lifespan=lifespan)
    app.state.server = server

    @app.exception_handler(StudioError)
    async def studio_error_handler(request: Request, exc: StudioError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"message": str(exc)})

    app.include_router(api_router, prefix=server.config.api_prefix)
    app.include_router(stream_router)

    @app.get(f"{server.config.api_prefix}/health")
    async def health():
        connected = server.is_initialized and await server.connection.test_connection()
        return {
            "status": "ok" if connected else "degraded",
            "database": connected,
            "channels": len(server.channels),
        }

    return app


async def main() -> None:
    """Run the HTTP/WebSocket server until interrupted."""
    config = ServerConfig.from_env()
    server = StudioServer(config)
    app = create_app(server)

    uvicorn_config = uvicorn.Config(
        app, host=config.host, port=config.port, log_level="info"
    )
    await uvicorn.Server(uvicorn_config).serve()


def cli_entry() -> None:
    """
    Synchronous entry point for console script.

    This function is called by the 'db-studio' console script.
    """
    logging.basicConfig(level=os.getenv("DB_STUDIO_LOG_LEVEL", "INFO").upper())

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    cli_entry()
