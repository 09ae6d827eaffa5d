"""Module Tests for QueryExecutor

Runs raw SQL against a seeded SQLite file.
Validates:
- Read statements materialized with ordered columns
- Mutating statements reported through the fixed envelope
- Validation and store errors
- Value conversion for JSON transport
"""

import pytest

from db_studio.core import QueryExecutor, SchemaCatalog
from db_studio.core.executor import unique_columns
from db_studio.errors import ExecutionError, ValidationError


class TestReads:
    """Statements classified as reads return their rows."""

    @pytest.mark.asyncio
    async def test_active_usernames(self, executor: QueryExecutor):
        result = await executor.execute(
            "SELECT username FROM users WHERE status = 'active'"
        )

        assert result.columns == ["username"]
        assert result.row_count == 4
        assert len(result.rows) == 4
        assert ["emma_davis"] not in result.rows
        assert result.execution_time_ms >= 0

    @pytest.mark.asyncio
    async def test_column_order_follows_statement(self, executor: QueryExecutor):
        result = await executor.execute(
            "SELECT email, id FROM users WHERE id = 1"
        )
        assert result.columns == ["email", "id"]
        assert result.rows == [["john@example.com", 1]]

    @pytest.mark.asyncio
    async def test_empty_result(self, executor: QueryExecutor):
        result = await executor.execute("SELECT * FROM users WHERE id = -1")
        assert result.columns == []
        assert result.rows == []
        assert result.row_count == 0

    @pytest.mark.asyncio
    async def test_leading_comment_and_cte(self, executor: QueryExecutor):
        result = await executor.execute(
            "-- posts per user\n"
            "WITH counts AS (SELECT user_id, COUNT(*) AS n FROM posts GROUP BY user_id)"
            " SELECT user_id, n FROM counts ORDER BY user_id"
        )
        assert result.columns == ["user_id", "n"]
        assert result.rows == [[1, 3], [2, 1], [3, 1]]

    @pytest.mark.asyncio
    async def test_duplicate_labels_are_suffixed(self, executor: QueryExecutor):
        result = await executor.execute(
            "SELECT u.id, p.id FROM users u JOIN posts p ON p.user_id = u.id "
            "WHERE p.id = 3"
        )
        assert result.columns == ["id", "id_2"]
        assert result.rows == [[2, 3]]

    @pytest.mark.asyncio
    async def test_colons_are_not_bind_parameters(self, executor: QueryExecutor):
        result = await executor.execute("SELECT 'a:b' AS label, '12:30' AS t")
        assert result.rows == [["a:b", "12:30"]]

    @pytest.mark.asyncio
    async def test_blob_values_are_json_safe(self, executor: QueryExecutor):
        result = await executor.execute("SELECT X'FF00' AS raw, X'6869' AS text")
        assert result.rows == [["/wA=", "hi"]]

    @pytest.mark.asyncio
    async def test_explain(self, executor: QueryExecutor):
        result = await executor.execute("EXPLAIN QUERY PLAN SELECT * FROM users")
        assert result.row_count >= 1


class TestMutations:
    """Everything not classified as a read reports affected rows."""

    @pytest.mark.asyncio
    async def test_insert(self, executor: QueryExecutor, catalog: SchemaCatalog):
        result = await executor.execute(
            "INSERT INTO users (username, email) VALUES ('kate', 'kate@example.com')"
        )

        assert result.columns == ["affected_rows", "last_insert_id"]
        assert result.rows == [[1, 6]]
        assert result.row_count == 1

        tables = {table.name: table for table in await catalog.list_tables()}
        assert tables["users"].row_count == 6

    @pytest.mark.asyncio
    async def test_insert_with_zero_rowid(self, executor: QueryExecutor):
        result = await executor.execute(
            "INSERT INTO categories (id, name) VALUES (0, 'zero')"
        )
        assert result.rows == [[1, 0]]

    @pytest.mark.asyncio
    async def test_update_many(self, executor: QueryExecutor):
        result = await executor.execute(
            "UPDATE users SET status = 'archived' WHERE status = 'active'"
        )
        assert result.rows == [[4, None]]
        assert result.row_count == 4

    @pytest.mark.asyncio
    async def test_ddl_reports_zero(self, executor: QueryExecutor):
        result = await executor.execute("CREATE TABLE tags (id INTEGER PRIMARY KEY)")
        assert result.columns == ["affected_rows", "last_insert_id"]
        assert result.rows[0][0] == 0
        assert result.row_count == 0

    @pytest.mark.asyncio
    async def test_changes_are_committed(self, executor: QueryExecutor):
        await executor.execute("DELETE FROM categories WHERE name = 'Tutorial'")
        result = await executor.execute("SELECT COUNT(*) AS n FROM categories")
        assert result.rows == [[2]]


class TestErrors:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("sql", [None, "", "   \n", 42])
    async def test_missing_sql(self, executor: QueryExecutor, sql):
        with pytest.raises(ValidationError) as exc_info:
            await executor.execute(sql)
        assert exc_info.value.message == "SQL query is required"

    @pytest.mark.asyncio
    async def test_syntax_error(self, executor: QueryExecutor):
        with pytest.raises(ExecutionError) as exc_info:
            await executor.execute("SELEC * FROM users")
        assert exc_info.value.message.startswith("SQL execution failed:")
        assert "syntax error" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_table(self, executor: QueryExecutor):
        with pytest.raises(ExecutionError) as exc_info:
            await executor.execute("SELECT * FROM nope")
        assert "no such table" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_constraint_violation(self, executor: QueryExecutor):
        with pytest.raises(ExecutionError):
            await executor.execute(
                "INSERT INTO users (username, email) "
                "VALUES ('john_doe', 'other@example.com')"
            )


def test_unique_columns():
    assert unique_columns(["a", "b"]) == ["a", "b"]
    assert unique_columns(["id", "id", "id"]) == ["id", "id_2", "id_3"]
    # An existing label is not reused as a suffix
    assert unique_columns(["id", "id", "id_2"]) == ["id", "id_3", "id_2"]
