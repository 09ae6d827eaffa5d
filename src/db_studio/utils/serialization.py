"""JSON serialization utilities using orjson.

orjson handles the common store types natively (datetime, date, UUID, ints,
floats, strings). SQLite additionally hands back BLOBs as bytes, and adapters
may produce Decimal values; those are covered by the default handler.
"""

import base64
import datetime
import decimal
from typing import Any

import orjson


def _default_handler(obj: Any) -> Any:
    """
    Custom default handler for types orjson doesn't handle natively.

    Raises:
        TypeError: If object cannot be serialized
    """
    if isinstance(obj, decimal.Decimal):
        return str(obj)

    if isinstance(obj, datetime.timedelta):
        return obj.total_seconds()

    # BLOB columns - try UTF-8 decode, fall back to base64
    if isinstance(obj, (bytes, bytearray, memoryview)):
        data = bytes(obj)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return base64.b64encode(data).decode("ascii")

    if isinstance(obj, (set, frozenset)):
        return list(obj)

    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def convert_value_to_json_safe(value: Any) -> Any:
    """
    Convert a value to JSON-serializable format.

    Round-trips through orjson so the result matches what will actually be
    written on the wire.
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    try:
        return orjson.loads(orjson.dumps(value, default=_default_handler))
    except TypeError:
        return str(value)


def convert_row_to_json_safe(row: list[Any]) -> list[Any]:
    """Convert all values of a positional row."""
    return [convert_value_to_json_safe(value) for value in row]


def convert_rows_to_json_safe(rows: list[list[Any]]) -> list[list[Any]]:
    """Convert all positional rows."""
    return [convert_row_to_json_safe(row) for row in rows]


def dumps(obj: Any) -> str:
    """Serialize object to JSON string using orjson."""
    return orjson.dumps(obj, default=_default_handler).decode("utf-8")


def loads(data: str | bytes) -> Any:
    """Parse a JSON document. Raises ``orjson.JSONDecodeError`` (a ValueError)."""
    return orjson.loads(data)
