"""Query execution, mutation and pagination result models."""

from typing import Any, Optional

from pydantic import Field, model_validator

from db_studio.models.base import CamelModel
from db_studio.models.row import RowRecord

MUTATION_COLUMNS = ["affected_rows", "last_insert_id"]


class QueryResult(CamelModel):
    """Uniform tabular result of a raw SQL statement."""

    columns: list[str] = Field(..., description="Column names in order")
    rows: list[list[Any]] = Field(..., description="Result rows as value lists")
    row_count: int = Field(..., description="Rows returned, or rows affected")
    execution_time_ms: int = Field(
        ..., ge=0, description="Execution time in whole milliseconds"
    )

    @model_validator(mode="after")
    def _check_shape(self) -> "QueryResult":
        if len(set(self.columns)) != len(self.columns):
            raise ValueError("Column names must be unique within a result")
        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {index} has {len(row)} values, expected {width}"
                )
        return self


class MutationResult(CamelModel):
    """Outcome of an insert, update or delete."""

    affected_rows: int = Field(..., ge=0, description="Rows changed")
    last_insert_id: Optional[int] = Field(
        None, description="Row id of the last inserted row, if any"
    )

    def to_query_result(self, execution_time_ms: int) -> QueryResult:
        return QueryResult(
            columns=list(MUTATION_COLUMNS),
            rows=[[self.affected_rows, self.last_insert_id]],
            row_count=self.affected_rows,
            execution_time_ms=execution_time_ms,
        )


class Page(CamelModel):
    """A bounded slice of a table plus the (independently counted) total."""

    data: list[RowRecord] = Field(default_factory=list)
    total: int = Field(..., ge=0, description="Row count from a separate query")

    def to_json_dict(self) -> dict:
        return {"data": [row.to_dict() for row in self.data], "total": self.total}
