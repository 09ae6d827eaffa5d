"""Table and column descriptors produced by schema introspection."""

from typing import Literal

from pydantic import Field

from db_studio.models.base import CamelModel


class TableDescriptor(CamelModel):
    """A user-visible table or view with its live row count."""

    name: str = Field(..., description="Table or view name")
    kind: Literal["table", "view"] = Field(..., description="Object kind")
    row_count: int = Field(..., ge=0, description="Rows at introspection time")


class ColumnDescriptor(CamelModel):
    """A single column, in physical column order."""

    name: str = Field(..., description="Column name")
    declared_type: str = Field(..., description="Declared column type")
    is_primary_key: bool = Field(
        default=False, description="Whether column is part of primary key"
    )
    not_null: bool = Field(default=False, description="Whether NULL is rejected")

    def describe(self) -> str:
        """Compact one-token description used in schema context text."""
        parts = [self.name]
        if self.declared_type:
            parts.append(self.declared_type)
        if self.is_primary_key:
            parts.append("PRIMARY KEY")
        if self.not_null:
            parts.append("NOT NULL")
        return " ".join(parts)
