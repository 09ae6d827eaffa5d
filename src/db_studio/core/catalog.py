"""Schema introspection using SQLAlchemy reflection."""

import logging
from typing import Any, cast

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.types import NullType

from db_studio.core.connection import DatabaseConnection
from db_studio.core.identifiers import IdentifierGuard
from db_studio.errors import CatalogError, InvalidIdentifierError, UnknownTableError
from db_studio.models.schema import ColumnDescriptor, TableDescriptor

logger = logging.getLogger(__name__)


def _collect_names(sync_conn) -> list[tuple[str, str]]:
    # A fresh inspector per call: reflection results are never cached.
    inspector = sa_inspect(sync_conn)
    entries = [(name, "table") for name in inspector.get_table_names()]
    entries.extend((name, "view") for name in inspector.get_view_names())
    return sorted(entries)


def _collect_columns(sync_conn, table_name: str) -> dict[str, Any]:
    inspector = sa_inspect(sync_conn)
    return {
        "columns": inspector.get_columns(table_name),
        "pk_constraint": inspector.get_pk_constraint(table_name),
    }


class SchemaCatalog:
    """Live view of the store's tables, views and columns."""

    def __init__(self, connection: DatabaseConnection, guard: IdentifierGuard):
        """
        Initialize schema catalog.

        Args:
            connection: Store handle
            guard: Identifier guard used for the per-table count queries
        """
        self.connection = connection
        self.guard = guard

    async def list_tables(self) -> list[TableDescriptor]:
        """
        List user tables and views with live row counts, ordered by name.

        Raises:
            CatalogError: If the store cannot be reached
        """
        try:
            async with self.connection.get_connection() as conn:
                entries = await conn.run_sync(_collect_names)
                tables = []
                for name, kind in entries:
                    try:
                        row_count = await self._count_rows(conn, name)
                    except InvalidIdentifierError:
                        logger.warning(f"Skipping {kind} with unsafe name: {name!r}")
                        continue
                    except DBAPIError as e:
                        # e.g. a view whose base table was dropped
                        logger.warning(f"Skipping unreadable {kind} {name}: {e.orig}")
                        continue
                    tables.append(
                        TableDescriptor(name=name, kind=kind, row_count=row_count)
                    )
                return tables
        except SQLAlchemyError as e:
            raise CatalogError(f"Failed to list tables: {e}") from e

    async def table_exists(self, name: str) -> bool:
        """Check whether a table or view with this exact name exists."""
        try:
            async with self.connection.get_connection() as conn:
                entries = await conn.run_sync(_collect_names)
        except SQLAlchemyError as e:
            raise CatalogError(f"Failed to read catalog: {e}") from e
        return any(entry_name == name for entry_name, _ in entries)

    async def describe_table(self, name: str) -> list[ColumnDescriptor]:
        """
        Describe the columns of a table or view in physical order.

        Raises:
            UnknownTableError: If no such table or view exists
            CatalogError: If the store cannot be reached
        """
        try:
            async with self.connection.get_connection() as conn:
                return await self._describe(conn, name)
        except SQLAlchemyError as e:
            raise CatalogError(f"Failed to describe table {name}: {e}") from e

    async def schema_context(self) -> str:
        """
        Render every table as ``name(col TYPE, ...)``, one per line.

        Used as assistant context when the caller does not provide one.
        """
        try:
            async with self.connection.get_connection() as conn:
                entries = await conn.run_sync(_collect_names)
                lines = []
                for name, kind in entries:
                    try:
                        columns = await self._describe(conn, name, known=True)
                    except DBAPIError as e:
                        logger.warning(f"Leaving {kind} {name} out of context: {e.orig}")
                        continue
                    described = ", ".join(column.describe() for column in columns)
                    prefix = "VIEW " if kind == "view" else ""
                    lines.append(f"{prefix}{name}({described})")
                return "\n".join(lines)
        except SQLAlchemyError as e:
            raise CatalogError(f"Failed to build schema context: {e}") from e

    async def _describe(
        self, conn: AsyncConnection, name: str, known: bool = False
    ) -> list[ColumnDescriptor]:
        if not known:
            entries = await conn.run_sync(_collect_names)
            if not any(entry_name == name for entry_name, _ in entries):
                raise UnknownTableError(name)

        table_data = await conn.run_sync(_collect_columns, name)

        pk_columns = set(
            (table_data["pk_constraint"] or {}).get("constrained_columns") or []
        )
        return [
            self._column_from_sa(cast(dict[str, Any], col_data), pk_columns)
            for col_data in table_data["columns"]
        ]

    async def _count_rows(self, conn: AsyncConnection, name: str) -> int:
        query = f"SELECT COUNT(*) FROM {self.guard.quote(name)}"
        result = await conn.exec_driver_sql(query)
        return int(result.scalar_one())

    def _column_from_sa(self, col_data: dict, pk_columns: set[str]) -> ColumnDescriptor:
        """Convert SQLAlchemy column data to ColumnDescriptor."""
        column_type = col_data["type"]
        # Untyped SQLite columns reflect as NullType
        declared_type = "" if isinstance(column_type, NullType) else str(column_type)
        return ColumnDescriptor(
            name=col_data["name"],
            declared_type=declared_type,
            is_primary_key=col_data["name"] in pk_columns,
            not_null=not col_data["nullable"],
        )
