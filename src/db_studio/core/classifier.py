"""Read/mutating classification of raw SQL text.

This is a textual heuristic, not a parse: the first keyword after leading
comments decides. Anything not recognised as a read is treated as mutating.
Keep all classification behind ``classify`` so a real parser can replace it.
"""

import re
from enum import Enum


class StatementKind(str, Enum):
    READ = "read"
    MUTATING = "mutating"


READ_KEYWORDS = frozenset({"SELECT", "WITH", "SHOW", "DESCRIBE", "EXPLAIN"})

_LEADING_COMMENTS = re.compile(r"\A(?:\s+|--[^\n]*(?:\n|\Z)|/\*.*?\*/)*", re.DOTALL)
_FIRST_KEYWORD = re.compile(r"[A-Za-z_]+")


def leading_keyword(sql_text: str) -> str:
    """Upper-cased first keyword, or an empty string when there is none."""
    remainder = _LEADING_COMMENTS.sub("", sql_text, count=1)
    match = _FIRST_KEYWORD.match(remainder.lstrip("( \t\r\n"))
    return match.group(0).upper() if match else ""


def classify(sql_text: str) -> StatementKind:
    """Classify a statement as READ or MUTATING."""
    if leading_keyword(sql_text) in READ_KEYWORDS:
        return StatementKind.READ
    return StatementKind.MUTATING
