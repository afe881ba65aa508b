"""
Abstract base class for union member sources.

Defines the query capability every member of a UnionView speaks.
Implementations decide how a Query is executed (in memory, SQL, ...);
UnionView only routes and merges.

Main class:
    QuerySource: Abstract base class with shared identifier helpers
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from typing import Any, Optional, Union

from unionview._exceptions import UnionSourceError
from unionview.query import Query, get_field


def resolve_id_field(id_field: Optional[str]) -> str:
    """Explicit id_field, or the global default set via unionview.use_id_field()."""
    if id_field is not None:
        return id_field

    from unionview import _ID_FIELD

    return _ID_FIELD


def record_id(record: Any, id_field: str) -> Any:
    """Identifier of a record (mapping key or attribute)."""
    return get_field(record, id_field)


def ids_equal(actual: Any, requested: Any) -> bool:
    """
    Compare a stored identifier with a requested one.

    Requested ids often arrive as strings (URLs, CLI args) while stored ids
    are ints, so a numeric string matches the equal int.
    """
    if actual == requested:
        return True
    if isinstance(actual, int) and not isinstance(actual, bool) and isinstance(requested, str):
        if re.fullmatch(r"\s*-?\d+\s*", requested, re.ASCII) is None:
            return False
        return actual == int(requested)
    return False


class QuerySource(ABC):
    """
    Base class for member sources.

    All sources must implement:
    - is_empty(): True when the source holds no records
    - find_single(): first match or None (RecordNotFound also accepted)
    - find_many(): all matches as a new source, empty when none match
    - find_by_id(): exact record, RecordNotFound when absent
    - __iter__ / __len__: full contents in source order
    """

    id_field: str

    @abstractmethod
    def is_empty(self) -> bool:
        pass

    @abstractmethod
    def find_single(self, query: Query) -> Optional[Any]:
        """
        First record matching query, in source order (or query.order_by).

        Returns None when nothing matches. Sources may raise RecordNotFound
        instead; UnionView treats both the same.
        """
        pass

    @abstractmethod
    def find_many(self, query: Query) -> Union["QuerySource", Sequence[Any]]:
        """
        All records matching query.

        Never raises on absence: returns an empty result instead.
        Must be deterministic for a repeated query.
        """
        pass

    @abstractmethod
    def find_by_id(self, record_id: Any) -> Any:
        """
        Record whose identifier equals record_id.

        Raises:
            RecordNotFound: If the source holds no such record
        """
        pass

    @abstractmethod
    def __iter__(self) -> Iterator[Any]:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


def as_source(member: Any, position: int = 0) -> QuerySource:
    """
    Coerce a union member into a QuerySource.

    Plain sequences (lists, tuples) are wrapped in a RecordList so every
    stored member speaks the query capability.

    Raises:
        UnionSourceError: If member is neither a QuerySource nor a sequence
    """
    if isinstance(member, QuerySource):
        return member

    if isinstance(member, (str, bytes)) or not isinstance(member, Sequence):
        raise UnionSourceError(
            f"Member {position} is not a query source or a sequence: "
            f"{member!r} ({type(member).__name__})"
        )

    from unionview.sources.memory import RecordList

    return RecordList(member)
