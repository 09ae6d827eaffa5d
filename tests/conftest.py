"""Pytest configuration and shared fixtures for db-studio tests"""

from pathlib import Path
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from db_studio.core import (
    DatabaseConnection,
    IdentifierGuard,
    PaginationEngine,
    QueryExecutor,
    RowMutator,
    SchemaCatalog,
    seed_sample_data,
)
from db_studio.models.config import DatabaseConfig, ServerConfig
from db_studio.server import StudioServer, create_app
from tests.fakes import FakeProvider


# ==================== Configuration Fixtures ====================


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    """Fresh SQLite file per test"""
    return tmp_path / "data" / "studio.db"


@pytest.fixture
def database_config(database_path: Path) -> DatabaseConfig:
    """Store configuration pointing at the per-test file"""
    return DatabaseConfig(url=f"sqlite+aiosqlite:///{database_path}")


@pytest.fixture
def server_config(database_config: DatabaseConfig) -> ServerConfig:
    return ServerConfig(database=database_config)


# ==================== Core Fixtures ====================


@pytest.fixture
async def connection(
    database_config: DatabaseConfig,
) -> AsyncGenerator[DatabaseConnection, None]:
    """Seeded store connection with proper cleanup"""
    connection = DatabaseConnection(database_config)
    await connection.initialize()
    await seed_sample_data(connection)
    try:
        yield connection
    finally:
        await connection.dispose()


@pytest.fixture
def guard() -> IdentifierGuard:
    return IdentifierGuard()


@pytest.fixture
def catalog(connection: DatabaseConnection, guard: IdentifierGuard) -> SchemaCatalog:
    return SchemaCatalog(connection, guard)


@pytest.fixture
def executor(connection: DatabaseConnection) -> QueryExecutor:
    return QueryExecutor(connection)


@pytest.fixture
def mutator(
    connection: DatabaseConnection, catalog: SchemaCatalog, guard: IdentifierGuard
) -> RowMutator:
    return RowMutator(connection, catalog, guard)


@pytest.fixture
def paginator(
    connection: DatabaseConnection, catalog: SchemaCatalog, guard: IdentifierGuard
) -> PaginationEngine:
    return PaginationEngine(connection, catalog, guard)


# ==================== Server Fixtures ====================


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
async def server(
    server_config: ServerConfig, provider: FakeProvider
) -> AsyncGenerator[StudioServer, None]:
    """Initialized server (the ASGI transport does not run the lifespan)"""
    server = StudioServer(server_config, provider=provider)
    await server.initialize()
    try:
        yield server
    finally:
        await server.cleanup()


@pytest.fixture
async def client(server: StudioServer) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=create_app(server)), base_url="http://test"
    ) as ac:
        yield ac
