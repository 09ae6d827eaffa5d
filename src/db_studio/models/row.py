"""Ordered row representation used by CRUD and pagination."""

from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import Field, RootModel, model_serializer, model_validator


class RowRecord(RootModel[list[tuple[str, Any]]]):
    """One table row as an ordered sequence of (column, value) pairs.

    Column order is part of the value: a record built from a mapping keeps the
    mapping's iteration order, and serializes back to a JSON object in the same
    order. Column names are unique within a record.
    """

    root: list[tuple[str, Any]] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_mapping(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return list(data.items())
        return data

    @model_validator(mode="after")
    def _check_unique_names(self) -> "RowRecord":
        seen: set[str] = set()
        for name, _ in self.root:
            if name in seen:
                raise ValueError(f"Duplicate column in row: {name}")
            seen.add(name)
        return self

    @model_serializer(mode="plain")
    def _as_object(self) -> dict[str, Any]:
        return self.to_dict()

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "RowRecord":
        return cls.model_validate(values)

    @classmethod
    def from_pairs(cls, names: list[str], values: list[Any]) -> "RowRecord":
        return cls.model_validate(list(zip(names, values)))

    def names(self) -> list[str]:
        return [name for name, _ in self.root]

    def values(self) -> list[Any]:
        return [value for _, value in self.root]

    def get(self, name: str, default: Any = None) -> Any:
        for key, value in self.root:
            if key == name:
                return value
        return default

    def to_dict(self) -> dict[str, Any]:
        return {name: value for name, value in self.root}

    def __iter__(self) -> Iterator[tuple[str, Any]]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __contains__(self, name: object) -> bool:
        return any(key == name for key, _ in self.root)
