"""
In-memory member source.

RecordList wraps an ordered, immutable tuple of records (mappings or
objects) and evaluates Query predicates in Python. Plain lists passed to
UnionView are wrapped in a RecordList automatically.
"""

from collections.abc import Iterable, Iterator
from typing import Any, Optional, overload

from unionview._exceptions import RecordNotFound
from unionview.query import Query
from unionview.sources.base import QuerySource, ids_equal, record_id, resolve_id_field


class RecordList(QuerySource):
    """
    Ordered in-memory records with the query capability.

    Examples:
        people = RecordList([{"id": 1, "name": "george"}, {"id": 2, "name": "ann"}])

        people.find_single(Query.where(name="ann"))     # {"id": 2, ...}
        people.find_many(Query.compare("id", ">", 1))   # RecordList of 1
        people.find_by_id(3)                            # raises RecordNotFound
    """

    def __init__(self, records: Iterable[Any] = (), id_field: Optional[str] = None):
        self._records = tuple(records)
        self.id_field = resolve_id_field(id_field)

    @property
    def records(self) -> tuple:
        return self._records

    def is_empty(self) -> bool:
        return not self._records

    def find_single(self, query: Query) -> Optional[Any]:
        matches = query.limited_to(1).apply(self._records) if query.limit != 0 else []
        return matches[0] if matches else None

    def find_many(self, query: Query) -> "RecordList":
        return RecordList(query.apply(self._records), id_field=self.id_field)

    def find_by_id(self, record_id_: Any) -> Any:
        for record in self._records:
            if ids_equal(record_id(record, self.id_field), record_id_):
                return record

        raise RecordNotFound(
            f"No record with {self.id_field}={record_id_!r} in {self!r}"
        )

    def __iter__(self) -> Iterator[Any]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> "RecordList": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return RecordList(self._records[index], id_field=self.id_field)
        return self._records[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RecordList):
            return self._records == other._records
        if isinstance(other, (list, tuple)):
            return list(self._records) == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"RecordList({len(self._records)} records)"
