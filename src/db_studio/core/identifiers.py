"""Identifier quoting for table and column names in generated SQL.

Identifiers cannot be bound as statement parameters, so every table or column
name interpolated into SQL built by this package goes through
``IdentifierGuard.quote`` first. Values are always bound separately.
"""

import unicodedata
from typing import Any

from sqlalchemy.engine import Dialect

from db_studio.errors import InvalidIdentifierError

DEFAULT_DELIMITER = '"'


class IdentifierGuard:
    """Validate and delimit identifiers for one dialect."""

    def __init__(self, delimiter: str = DEFAULT_DELIMITER):
        if len(delimiter) != 1:
            raise ValueError("Identifier delimiter must be a single character")
        self.delimiter = delimiter

    @classmethod
    def for_dialect(cls, dialect: Dialect) -> "IdentifierGuard":
        """Use the quote character of a SQLAlchemy dialect."""
        return cls(dialect.identifier_preparer.initial_quote or DEFAULT_DELIMITER)

    def validate(self, identifier: Any) -> str:
        """
        Check that an identifier can be embedded safely.

        Raises:
            InvalidIdentifierError: On non-strings, empty names, the delimiter
                character, or any control character (NUL included)
        """
        if not isinstance(identifier, str) or not identifier:
            raise InvalidIdentifierError(f"Invalid identifier: {identifier!r}")

        if self.delimiter in identifier:
            raise InvalidIdentifierError(
                f"Identifier contains quote character {self.delimiter!r}: {identifier!r}"
            )

        for char in identifier:
            if unicodedata.category(char) == "Cc":
                raise InvalidIdentifierError(
                    f"Identifier contains control character: {identifier!r}"
                )

        return identifier

    def quote(self, identifier: Any) -> str:
        """Return the delimited form of a validated identifier."""
        name = self.validate(identifier)
        return f"{self.delimiter}{name}{self.delimiter}"

    def quote_all(self, identifiers) -> list[str]:
        return [self.quote(identifier) for identifier in identifiers]

