"""Bounded slices of live table state."""

from typing import Any, Optional

from sqlalchemy.exc import DBAPIError, StatementError

from db_studio.core.catalog import SchemaCatalog
from db_studio.core.connection import DatabaseConnection
from db_studio.core.identifiers import IdentifierGuard
from db_studio.errors import ExecutionError, UnknownTableError
from db_studio.models.query import Page
from db_studio.models.row import RowRecord
from db_studio.utils import convert_row_to_json_safe

DEFAULT_LIMIT = 100
DEFAULT_OFFSET = 0


def normalize_window(
    limit: Optional[int], offset: Optional[int]
) -> tuple[int, int]:
    """Missing or negative values fall back to the defaults."""
    if limit is None or limit < 0:
        limit = DEFAULT_LIMIT
    if offset is None or offset < 0:
        offset = DEFAULT_OFFSET
    return limit, offset


class PaginationEngine:
    """Page through a table.

    The total comes from its own count query, run separately from the data
    query. Under concurrent writers the two can disagree; no snapshot is taken.
    """

    def __init__(
        self,
        connection: DatabaseConnection,
        catalog: SchemaCatalog,
        guard: IdentifierGuard,
    ):
        self.connection = connection
        self.catalog = catalog
        self.guard = guard

    async def page(
        self, table: str, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Page:
        """
        Fetch up to ``limit`` rows starting at ``offset``.

        Raises:
            UnknownTableError: If the table does not exist
            ExecutionError: If the store rejects either query
        """
        limit, offset = normalize_window(limit, offset)

        quoted = self.guard.quote(table)
        if not await self.catalog.table_exists(table):
            raise UnknownTableError(table)

        try:
            async with self.connection.get_connection() as conn:
                count_result = await conn.exec_driver_sql(
                    f"SELECT COUNT(*) FROM {quoted}"
                )
                total = int(count_result.scalar_one())

            async with self.connection.get_connection() as conn:
                result = await conn.exec_driver_sql(
                    f"SELECT * FROM {quoted} LIMIT ? OFFSET ?", (limit, offset)
                )
                columns = [str(key) for key in result.keys()]
                data = [self._record(columns, list(row)) for row in result.fetchall()]
        except (DBAPIError, StatementError) as e:
            message = str(getattr(e, "orig", None) or e)
            raise ExecutionError(f"Failed to read table {table}: {message}") from e

        return Page(data=data, total=total)

    def _record(self, columns: list[str], row: list[Any]) -> RowRecord:
        return RowRecord.from_pairs(columns, convert_row_to_json_safe(row))
