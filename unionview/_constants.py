"""
Global constants for unionview.

Organized by: Identifiers, Query Modes, Operators, DuckDB.
"""

from typing import Literal

# Identifiers
DEFAULT_ID_FIELD = "id"
"""Field (mapping key or attribute) holding a record's identifier."""


# Query Modes
QueryMode = Literal["first", "all"]
"""Valid match-mode selectors for a Query."""

MODE_FIRST: QueryMode = "first"
"""Route to find_first(): first match by member order."""

MODE_ALL: QueryMode = "all"
"""Route to find_all(): every match, partitioned by member."""

VALID_MODES: tuple[QueryMode, ...] = (MODE_FIRST, MODE_ALL)


# Predicate Operators
Operator = Literal[
    "==", "!=", "<", "<=", ">", ">=", "in", "not in", "is null", "is not null", "like"
]
"""Operators understood by both in-memory and SQL sources."""

VALID_OPERATORS: frozenset[str] = frozenset(
    {"==", "!=", "<", "<=", ">", ">=", "in", "not in", "is null", "is not null", "like"}
)

UNARY_OPERATORS: frozenset[str] = frozenset({"is null", "is not null"})
"""Operators that ignore the predicate value."""

OPERATOR_ALIASES: dict[str, str] = {
    "=": "==",
    "eq": "==",
    "ne": "!=",
    "<>": "!=",
    "lt": "<",
    "le": "<=",
    "gt": ">",
    "ge": ">=",
}
"""Alternate spellings normalized at Predicate construction."""

SQL_OPERATORS: dict[str, str] = {
    "==": "=",
    "!=": "<>",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
    "like": "LIKE",
}
"""Binary operators and their SQL spelling (IN / IS NULL handled separately)."""


# DuckDB
ARROW_TABLE_PREFIX = "records_"
"""Prefix for Arrow tables registered by DuckDBSource.from_arrow()."""

REPR_MAX_MEMBERS = 10
"""Members listed in UnionView.__repr__ before eliding."""
