"""
DuckDB-backed member source.

Wraps a table or view on a DuckDB connection (or a PyArrow Table
registered on a fresh in-memory connection) and compiles Query values to
parameterized SQL. find_many() is lazy: it returns a new DuckDBSource over
a nested SELECT, nothing is fetched until the result is iterated.

Connection Management:
    Sources built with from_arrow() / from_records() own their connection.
    Derived sources (find_many) share the parent's connection and never
    close it. Use the context manager for cleanup:

        with DuckDBSource.from_records(rows) as people:
            adults = people.find_many(Query.compare("age", ">=", 18))
            print(list(adults))
"""

import uuid
from collections.abc import Iterable, Iterator
from typing import Any, Optional

import duckdb
import pyarrow as pa

from unionview._constants import ARROW_TABLE_PREFIX, SQL_OPERATORS
from unionview._exceptions import RecordNotFound, UnionQueryError, UnionSourceError
from unionview._logging import get_logger
from unionview.query import Query
from unionview.sources.base import QuerySource, resolve_id_field

logger = get_logger(__name__)

SUBQUERY_ALIAS = "_member"


def quote_identifier(name: str) -> str:
    """Quote a column name for DuckDB."""
    return '"' + name.replace('"', '""') + '"'


def quote_relation(relation: str) -> str:
    """Quote a possibly schema-qualified relation name (schema.table)."""
    return ".".join(quote_identifier(part) for part in relation.split("."))


def compile_conditions(query: Query) -> tuple[list[str], list[Any]]:
    """
    Compile query predicates and filters to SQL conditions.

    Returns:
        (conditions, params): conditions to AND together, positional params
    """
    conditions: list[str] = []
    params: list[Any] = []

    for predicate in query.predicates:
        column = quote_identifier(predicate.field)

        if predicate.op == "is null":
            conditions.append(f"{column} IS NULL")
        elif predicate.op == "is not null":
            conditions.append(f"{column} IS NOT NULL")
        elif predicate.op in ("in", "not in"):
            values = list(predicate.value)
            if not values:
                # x IN () is always false, x NOT IN () true for non-NULL x
                conditions.append(
                    "FALSE" if predicate.op == "in" else f"{column} IS NOT NULL"
                )
                continue
            placeholders = ", ".join("?" for _ in values)
            keyword = "IN" if predicate.op == "in" else "NOT IN"
            conditions.append(f"{column} {keyword} ({placeholders})")
            params.extend(values)
        else:
            conditions.append(f"{column} {SQL_OPERATORS[predicate.op]} ?")
            params.append(predicate.value)

    conditions.extend(f"({expression})" for expression in query.filters)

    return conditions, params


class DuckDBSource(QuerySource):
    """
    Member source over a DuckDB relation.

    Examples:
        db = duckdb.connect()
        db.execute("CREATE TABLE people AS SELECT * FROM 'people.parquet'")

        managers = DuckDBSource(db, "people", where="role = 'manager'")
        managers.find_single(Query.where(name="george"))
        managers.find_by_id(30)
    """

    def __init__(
        self,
        db: duckdb.DuckDBPyConnection,
        relation: str,
        where: Optional[str] = None,
        id_field: Optional[str] = None,
        owns_connection: bool = False,
    ):
        """
        Args:
            db: DuckDB connection holding the relation
            relation: Table or view name (optionally schema-qualified)
            where: Optional SQL condition narrowing the relation
            id_field: Identifier column (default: global id field)
            owns_connection: Close db when this source is closed
        """
        select = f"SELECT * FROM {quote_relation(relation)}"
        if where is not None:
            select += f" WHERE ({where})"

        self._db = db
        self._name = relation
        self._select = select
        self._params: tuple[Any, ...] = ()
        self._owns_connection = owns_connection
        self.id_field = resolve_id_field(id_field)

    @classmethod
    def from_arrow(
        cls,
        table: pa.Table,
        name: Optional[str] = None,
        id_field: Optional[str] = None,
    ) -> "DuckDBSource":
        """Register a PyArrow Table on a fresh in-memory connection."""
        db = duckdb.connect(":memory:")
        name = name or f"{ARROW_TABLE_PREFIX}{uuid.uuid4().hex[:8]}"
        db.register(name, table)

        logger.debug(f"Registered Arrow table '{name}' ({table.num_rows} rows)")

        return cls(db, name, id_field=id_field, owns_connection=True)

    @classmethod
    def from_records(
        cls,
        records: Iterable[dict[str, Any]],
        name: Optional[str] = None,
        id_field: Optional[str] = None,
        schema: Optional[pa.Schema] = None,
    ) -> "DuckDBSource":
        """
        Build from mapping records (one dict per row).

        An empty input needs a schema; without one a single int64 id
        column is assumed.
        """
        rows = list(records)
        if not rows and schema is None:
            schema = pa.schema([(resolve_id_field(id_field), pa.int64())])

        table = pa.Table.from_pylist(rows, schema=schema)
        return cls.from_arrow(table, name=name, id_field=id_field)

    def _derive(self, select: str, params: tuple[Any, ...]) -> "DuckDBSource":
        child = object.__new__(DuckDBSource)
        child._db = self._db
        child._name = self._name
        child._select = select
        child._params = params
        child._owns_connection = False  # Derived sources share parent's connection
        child.id_field = self.id_field
        return child

    def _compile(self, query: Query, limit: Optional[int] = None) -> tuple[str, tuple]:
        conditions, params = compile_conditions(query)

        sql = f"SELECT * FROM ({self._select}) AS {SUBQUERY_ALIAS}"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        if query.order_by is not None:
            direction = "DESC" if query.descending else "ASC"
            sql += f" ORDER BY {quote_identifier(query.order_by)} {direction} NULLS LAST"

        limits = [n for n in (query.limit, limit) if n is not None]
        if limits:
            sql += f" LIMIT {min(limits)}"

        return sql, self._params + tuple(params)

    def _execute(self, sql: str, params: tuple[Any, ...] = ()):
        if self._db is None:
            raise UnionSourceError(f"DuckDBSource '{self._name}' is closed")

        try:
            return self._db.execute(sql, list(params))
        except duckdb.Error as e:
            raise UnionQueryError(
                f"DuckDB query failed on '{self._name}': {e}\n"
                f"SQL: {sql}\n"
                f"Params: {list(params)}"
            ) from e

    def _fetch(self, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        return self._execute(sql, params).fetch_arrow_table().to_pylist()

    def is_empty(self) -> bool:
        row = self._execute(
            f"SELECT 1 FROM ({self._select}) AS {SUBQUERY_ALIAS} LIMIT 1", self._params
        ).fetchone()
        return row is None

    def find_single(self, query: Query) -> Optional[dict[str, Any]]:
        sql, params = self._compile(query, limit=1)
        rows = self._fetch(sql, params)
        return rows[0] if rows else None

    def find_many(self, query: Query) -> "DuckDBSource":
        sql, params = self._compile(query)
        # Bind now so a bad column or filter fails here, not on first read
        self._execute(f"SELECT * FROM ({sql}) AS {SUBQUERY_ALIAS} LIMIT 0", params)
        return self._derive(sql, params)

    def find_by_id(self, record_id: Any) -> dict[str, Any]:
        column = quote_identifier(self.id_field)
        rows = self._fetch(
            f"SELECT * FROM ({self._select}) AS {SUBQUERY_ALIAS} "
            f"WHERE {column} = ? LIMIT 1",
            self._params + (record_id,),
        )
        if not rows:
            raise RecordNotFound(
                f"No row with {column} = {record_id!r} in {self._name}"
            )
        return rows[0]

    def to_arrow(self) -> pa.Table:
        """All rows of this source as a PyArrow Table."""
        return self._execute(self._select, self._params).fetch_arrow_table()

    @property
    def sql(self) -> str:
        """SELECT statement behind this source (with ? placeholders)."""
        return self._select

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self._fetch(self._select, self._params))

    def __len__(self) -> int:
        return self._execute(
            f"SELECT COUNT(*) FROM ({self._select}) AS {SUBQUERY_ALIAS}", self._params
        ).fetchone()[0]

    def close(self) -> None:
        """Close the DuckDB connection if this source owns it."""
        if self._db is None:
            return

        if self._owns_connection:
            self._db.close()
        self._db = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        state = "closed" if self._db is None else "open"
        return f"DuckDBSource('{self._name}', {state})"
