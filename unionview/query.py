"""
Immutable query descriptions passed uniformly to every member source.

A Query combines a match-mode selector ('first' or 'all'), field/value
predicates and free-form SQL filter expressions. Queries are frozen
pydantic models: combinators return new values, and UnionView hands each
member its own deep copy, so no member execution can leak state into the
next one.

Examples:
    Query.where(name="george")                 # equality
    Query.compare("id", ">=", 10)              # comparison
    Query.sql("age BETWEEN 18 AND 30")         # SQL-only filter
    Query.first(team="red").ordered_by("id")   # mode + ordering
"""

import re
from collections.abc import Iterable, Mapping
from functools import lru_cache
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from unionview._constants import (
    MODE_ALL,
    MODE_FIRST,
    OPERATOR_ALIASES,
    UNARY_OPERATORS,
    VALID_MODES,
    VALID_OPERATORS,
    QueryMode,
)
from unionview._exceptions import UnionQueryError


def get_field(record: Any, name: str) -> Any:
    """Read a field from a mapping (by key) or any other object (by attribute)."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


@lru_cache(maxsize=256)
def _like_regex(pattern: str) -> re.Pattern:
    """Translate a SQL LIKE pattern ('%' any run, '_' one char) to a regex."""
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


class Predicate(BaseModel):
    """
    Single `field op value` condition.

    Operators: ==, !=, <, <=, >, >=, in, not in, is null, is not null, like.
    Aliases such as '=', 'eq' or '<>' are normalized on construction.
    Missing fields read as None and, like SQL NULL, only satisfy 'is null'.
    """

    field: str
    op: str = "=="
    value: Any = None

    model_config = ConfigDict(frozen=True)

    def __init__(self, field: str, op: str = "==", value: Any = None, **data: Any):
        _check_field(field)
        op = _normalize_operator(op)

        if op in ("in", "not in"):
            if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
                raise UnionQueryError(
                    f"Operator '{op}' needs a collection of values, "
                    f"got {value!r} ({type(value).__name__})"
                )
            value = tuple(value)
        elif op in UNARY_OPERATORS:
            value = None

        super().__init__(field=field, op=op, value=value, **data)

    def matches(self, record: Any) -> bool:
        actual = get_field(record, self.field)

        if self.op == "is null":
            return actual is None
        if self.op == "is not null":
            return actual is not None
        if actual is None:
            return False

        try:
            if self.op == "==":
                return actual == self.value
            if self.op == "!=":
                return actual != self.value
            if self.op == "<":
                return actual < self.value
            if self.op == "<=":
                return actual <= self.value
            if self.op == ">":
                return actual > self.value
            if self.op == ">=":
                return actual >= self.value
            if self.op == "in":
                return actual in self.value
            if self.op == "not in":
                return actual not in self.value
        except TypeError as e:
            raise UnionQueryError(
                f"Cannot evaluate {self}: field value {actual!r} "
                f"({type(actual).__name__}) is not comparable with {self.value!r}"
            ) from e

        # like
        if not isinstance(actual, str):
            return False
        return _like_regex(str(self.value)).fullmatch(actual) is not None

    def __str__(self) -> str:
        if self.op in UNARY_OPERATORS:
            return f"{self.field} {self.op}"
        return f"{self.field} {self.op} {self.value!r}"


def _normalize_operator(op: Any) -> str:
    if not isinstance(op, str):
        raise UnionQueryError(f"Operator must be a string, got {type(op).__name__}")

    normalized = " ".join(op.lower().split())
    normalized = OPERATOR_ALIASES.get(normalized, normalized)

    if normalized not in VALID_OPERATORS:
        raise UnionQueryError(
            f"Unknown operator: '{op}'\n"
            f"Valid operators: {sorted(VALID_OPERATORS)}"
        )
    return normalized


class Query(BaseModel):
    """
    Immutable query description.

    Attributes:
        mode: 'first' routes to find_first(), 'all' to find_all()
        predicates: Conditions ANDed together, understood by every source
        filters: Free-form SQL boolean expressions, ANDed; SQL sources only
        order_by: Optional field to sort matches by
        descending: Sort direction for order_by
        limit: Optional cap on matches per member
    """

    mode: QueryMode = MODE_ALL
    predicates: tuple[Predicate, ...] = ()
    filters: tuple[str, ...] = ()
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None

    model_config = ConfigDict(frozen=True)

    def __init__(self, **data: Any):
        mode = data.get("mode", MODE_ALL)
        if mode not in VALID_MODES:
            raise UnionQueryError(
                f"Invalid query mode: {mode!r}. Use one of {list(VALID_MODES)}."
            )

        _check_limit(data.get("limit"))
        if data.get("order_by") is not None:
            _check_field(data["order_by"])

        super().__init__(**data)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def where(cls, **fields: Any) -> "Query":
        """Equality on every given field."""
        return cls(predicates=tuple(Predicate(k, "==", v) for k, v in fields.items()))

    @classmethod
    def compare(cls, field: str, op: str, value: Any = None) -> "Query":
        return cls(predicates=(Predicate(field, op, value),))

    @classmethod
    def sql(cls, expression: str) -> "Query":
        """Free-form SQL boolean expression (SQL sources only)."""
        return cls(filters=(_check_expression(expression),))

    @classmethod
    def first(cls, **fields: Any) -> "Query":
        return cls.where(**fields).as_first()

    @classmethod
    def all(cls, **fields: Any) -> "Query":
        return cls.where(**fields)

    # ------------------------------------------------------------------
    # Combinators (each returns a new Query)
    # ------------------------------------------------------------------

    def and_where(self, **fields: Any) -> "Query":
        extra = tuple(Predicate(k, "==", v) for k, v in fields.items())
        return self.model_copy(update={"predicates": self.predicates + extra})

    def and_compare(self, field: str, op: str, value: Any = None) -> "Query":
        extra = (Predicate(field, op, value),)
        return self.model_copy(update={"predicates": self.predicates + extra})

    def and_sql(self, expression: str) -> "Query":
        extra = (_check_expression(expression),)
        return self.model_copy(update={"filters": self.filters + extra})

    def ordered_by(self, field: str, descending: bool = False) -> "Query":
        _check_field(field)
        return self.model_copy(update={"order_by": field, "descending": descending})

    def limited_to(self, limit: int) -> "Query":
        _check_limit(limit)
        return self.model_copy(update={"limit": limit})

    def as_first(self) -> "Query":
        return self.model_copy(update={"mode": MODE_FIRST})

    def as_all(self) -> "Query":
        return self.model_copy(update={"mode": MODE_ALL})

    # ------------------------------------------------------------------
    # In-memory evaluation
    # ------------------------------------------------------------------

    @property
    def has_filters(self) -> bool:
        return bool(self.filters)

    def matches(self, record: Any) -> bool:
        """
        Evaluate predicates against one record.

        Raises:
            UnionQueryError: If the query carries SQL filters
        """
        if self.filters:
            raise UnionQueryError(
                f"SQL filters cannot be evaluated in memory: {list(self.filters)}\n"
                f"Use predicates (Query.where / Query.compare) or a DuckDBSource."
            )
        return all(p.matches(record) for p in self.predicates)

    def apply(self, records: Iterable[Any]) -> list[Any]:
        """Filter, order and limit records in memory."""
        selected = [r for r in records if self.matches(r)]

        if self.order_by is not None:
            key_field = self.order_by
            present = [r for r in selected if get_field(r, key_field) is not None]
            missing = [r for r in selected if get_field(r, key_field) is None]
            try:
                present.sort(
                    key=lambda r: get_field(r, key_field), reverse=self.descending
                )
            except TypeError as e:
                raise UnionQueryError(
                    f"Cannot order by '{key_field}': values are not comparable"
                ) from e
            # NULLs last, as in DuckDB's default ordering
            selected = present + missing

        if self.limit is not None:
            selected = selected[: self.limit]

        return selected

    def __str__(self) -> str:
        conditions = [str(p) for p in self.predicates]
        conditions += [f"({f})" for f in self.filters]
        text = " AND ".join(conditions) if conditions else "*"

        if self.order_by is not None:
            text += f" ORDER BY {self.order_by}{' DESC' if self.descending else ''}"
        if self.limit is not None:
            text += f" LIMIT {self.limit}"

        return f"{self.mode}: {text}"


def _check_field(name: Any) -> None:
    if not isinstance(name, str) or not name:
        raise UnionQueryError(f"Field name must be a non-empty string, got {name!r}")


def _check_limit(limit: Any) -> None:
    if limit is None:
        return
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise UnionQueryError(f"limit must be a non-negative int, got {limit!r}")


def _check_expression(expression: Any) -> str:
    if not isinstance(expression, str) or not expression.strip():
        raise UnionQueryError(
            f"SQL filter must be a non-empty string, got {expression!r}"
        )
    return expression.strip()
