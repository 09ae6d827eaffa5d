"""Parameterized insert, update and delete against runtime-discovered tables."""

import logging
from collections.abc import Mapping
from typing import Any, Union

from sqlalchemy.exc import DBAPIError, StatementError

from db_studio.core.catalog import SchemaCatalog
from db_studio.core.connection import DatabaseConnection
from db_studio.core.executor import mutation_from_cursor
from db_studio.core.identifiers import IdentifierGuard
from db_studio.errors import ExecutionError, ValidationError
from db_studio.models.query import MutationResult
from db_studio.models.row import RowRecord

logger = logging.getLogger(__name__)

# Rows are addressed by a column literally named "id"; tables without one
# cannot be edited through this layer.
ROW_ID_COLUMN = "id"

RowValues = Union[RowRecord, Mapping[str, Any]]


class RowMutator:
    """Build and run CRUD statements. Values are always bound, never inlined."""

    def __init__(
        self,
        connection: DatabaseConnection,
        catalog: SchemaCatalog,
        guard: IdentifierGuard,
    ):
        self.connection = connection
        self.catalog = catalog
        self.guard = guard

    async def insert_row(self, table: str, values: RowValues) -> MutationResult:
        """
        Insert one row.

        Raises:
            ValidationError: If values is empty or names unknown columns
            UnknownTableError: If the table does not exist
            InvalidIdentifierError: If a name cannot be quoted safely
            ExecutionError: If the store rejects the row (unique, foreign key)
        """
        record = await self._checked_record(table, values, "insert")
        columns = ", ".join(self.guard.quote_all(record.names()))
        placeholders = ", ".join("?" for _ in range(len(record)))
        sql = (
            f"INSERT INTO {self.guard.quote(table)} ({columns}) "
            f"VALUES ({placeholders})"
        )
        return await self._run(sql, tuple(record.values()), inserted=True)

    async def update_row(
        self, table: str, row_id: Any, values: RowValues
    ) -> MutationResult:
        """Set the given columns on the row whose ``id`` equals ``row_id``."""
        record = await self._checked_record(table, values, "update")
        assignments = ", ".join(
            f"{quoted} = ?" for quoted in self.guard.quote_all(record.names())
        )
        sql = (
            f"UPDATE {self.guard.quote(table)} SET {assignments} "
            f"WHERE {self.guard.quote(ROW_ID_COLUMN)} = ?"
        )
        return await self._run(sql, (*record.values(), row_id))

    async def delete_row(self, table: str, row_id: Any) -> MutationResult:
        """Delete the row whose ``id`` equals ``row_id``."""
        self.guard.validate(table)
        await self.catalog.describe_table(table)
        sql = (
            f"DELETE FROM {self.guard.quote(table)} "
            f"WHERE {self.guard.quote(ROW_ID_COLUMN)} = ?"
        )
        return await self._run(sql, (row_id,))

    async def _checked_record(
        self, table: str, values: RowValues, operation: str
    ) -> RowRecord:
        record = values if isinstance(values, RowRecord) else RowRecord.from_mapping(values)
        if len(record) == 0:
            raise ValidationError(f"No values provided for {operation}")

        self.guard.validate(table)
        for name in record.names():
            self.guard.validate(name)

        columns = await self.catalog.describe_table(table)
        known = {column.name for column in columns}
        unknown = [name for name in record.names() if name not in known]
        if unknown:
            raise ValidationError(
                f"Unknown column(s) for table {table}: {', '.join(unknown)}"
            )
        return record

    async def _run(
        self, sql: str, params: tuple, inserted: bool = False
    ) -> MutationResult:
        try:
            async with self.connection.begin() as conn:
                result = await conn.exec_driver_sql(sql, params)
                return mutation_from_cursor(result, inserted)
        except (DBAPIError, StatementError) as e:
            message = str(getattr(e, "orig", None) or e)
            logger.info(f"Row change rejected by store: {message}")
            raise ExecutionError(f"SQL execution failed: {message}") from e
