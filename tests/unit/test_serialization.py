"""Tests for orjson-backed serialization of store values."""

import datetime
import decimal
import uuid

from db_studio.utils import (
    convert_row_to_json_safe,
    convert_rows_to_json_safe,
    convert_value_to_json_safe,
    dumps,
    loads,
)


class TestValueConversion:
    """Values are converted to what will actually be written on the wire."""

    def test_scalars_pass_through(self):
        for value in ("text", 42, 3.14, True, None):
            assert convert_value_to_json_safe(value) == value

    def test_datetime_types(self):
        dt = datetime.datetime(2024, 1, 15, 10, 30, 0)
        assert convert_value_to_json_safe(dt) == "2024-01-15T10:30:00"
        assert convert_value_to_json_safe(dt.date()) == "2024-01-15"
        assert convert_value_to_json_safe(dt.time()) == "10:30:00"

    def test_decimal_becomes_string(self):
        """Precision is kept by sending Decimal as text."""
        assert convert_value_to_json_safe(decimal.Decimal("123.456789")) == "123.456789"

    def test_uuid(self):
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")
        assert convert_value_to_json_safe(value) == str(value)

    def test_timedelta_becomes_seconds(self):
        assert convert_value_to_json_safe(datetime.timedelta(minutes=2)) == 120.0

    def test_utf8_blob_is_decoded(self):
        assert convert_value_to_json_safe(b"hello") == "hello"

    def test_binary_blob_is_base64(self):
        assert convert_value_to_json_safe(b"\xff\x00") == "/wA="

    def test_unknown_type_falls_back_to_str(self):
        class Opaque:
            def __str__(self):
                return "opaque"

        assert convert_value_to_json_safe(Opaque()) == "opaque"


class TestRowConversion:
    def test_row_keeps_positions(self):
        row = [1, decimal.Decimal("9.50"), None, b"x"]
        assert convert_row_to_json_safe(row) == [1, "9.50", None, "x"]

    def test_rows(self):
        rows = [[1, "a"], [2, "b"]]
        assert convert_rows_to_json_safe(rows) == rows


class TestDumpsLoads:
    def test_dumps_returns_text(self):
        text = dumps({"total": decimal.Decimal("1.5"), "ids": {7}})
        assert isinstance(text, str)
        assert loads(text) == {"total": "1.5", "ids": [7]}

    def test_loads_accepts_bytes(self):
        assert loads(b'{"type": "ai_chat"}') == {"type": "ai_chat"}
