"""Execution of raw, caller-supplied SQL into a uniform result envelope."""

import logging
import time
from typing import Any, Optional

from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import DBAPIError, StatementError

from db_studio.core.classifier import StatementKind, classify, leading_keyword
from db_studio.core.connection import DatabaseConnection
from db_studio.errors import ExecutionError, ValidationError
from db_studio.models.query import MutationResult, QueryResult
from db_studio.utils import convert_rows_to_json_safe

logger = logging.getLogger(__name__)


def unique_columns(names: list[str]) -> list[str]:
    """Suffix repeated labels (``id``, ``id_2``) so columns stay unique."""
    seen: dict[str, int] = {}
    taken = set(names)
    result = []
    for name in names:
        if name not in seen:
            seen[name] = 1
            result.append(name)
            continue
        count = seen[name]
        candidate = name
        while candidate in taken:
            count += 1
            candidate = f"{name}_{count}"
        seen[name] = count
        taken.add(candidate)
        result.append(candidate)
    return result


INSERT_KEYWORDS = frozenset({"INSERT", "REPLACE"})


def mutation_from_cursor(result: CursorResult, inserted: bool) -> MutationResult:
    """Affected rows, and the last insert id when ``inserted`` rows went in."""
    # DDL and other non-DML statements report -1
    affected = max(result.rowcount, 0)
    last_insert_id: Optional[int] = None
    if inserted and affected > 0:
        last_insert_id = result.lastrowid
    return MutationResult(affected_rows=affected, last_insert_id=last_insert_id)


class QueryExecutor:
    """Run arbitrary SQL text against the store.

    Reads are materialized in full; everything else is reported through the
    fixed ``affected_rows``/``last_insert_id`` envelope. Failures surface once,
    there are no retries.
    """

    def __init__(self, connection: DatabaseConnection):
        """
        Initialize query executor.

        Args:
            connection: Store handle
        """
        self.connection = connection

    async def execute(self, sql_text: Any) -> QueryResult:
        """
        Classify and execute one SQL statement.

        Args:
            sql_text: Raw SQL from the caller

        Returns:
            QueryResult with timing in whole milliseconds

        Raises:
            ValidationError: If the SQL is missing or blank
            ExecutionError: If the store rejects the statement
        """
        if not isinstance(sql_text, str) or not sql_text.strip():
            raise ValidationError("SQL query is required")

        kind = classify(sql_text)

        try:
            async with self.connection.begin() as conn:
                start_time = time.perf_counter()
                # Driver-level execution: no bind parameter parsing of the text
                result = await conn.exec_driver_sql(sql_text)
                if kind is StatementKind.READ:
                    columns, rows = self._materialize(result)
                else:
                    mutation = mutation_from_cursor(
                        result, leading_keyword(sql_text) in INSERT_KEYWORDS
                    )
                execution_time = int((time.perf_counter() - start_time) * 1000)
        except (DBAPIError, StatementError) as e:
            message = str(getattr(e, "orig", None) or e)
            logger.info(f"Statement rejected by store: {message}")
            raise ExecutionError(f"SQL execution failed: {message}") from e

        if kind is StatementKind.READ:
            return QueryResult(
                columns=columns,
                rows=rows,
                row_count=len(rows),
                execution_time_ms=execution_time,
            )
        return mutation.to_query_result(execution_time)

    def _materialize(self, result: CursorResult) -> tuple[list[str], list[list[Any]]]:
        # e.g. WITH ... INSERT classified as a read
        if not result.returns_rows:
            return [], []

        rows_data = result.fetchall()
        if not rows_data:
            return [], []

        columns = unique_columns([str(key) for key in result.keys()])
        rows = convert_rows_to_json_safe([list(row) for row in rows_data])
        return columns, rows
