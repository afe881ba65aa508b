"""
UnionView - one queryable, ordered, deduplicated view over many member sets.

Members are QuerySources (or plain sequences, wrapped on construction).
Finds are fanned out to the members and merged back:

* find_first(query)  - members in order, first match wins
* find_all(query)    - every member queried, results kept per member in a
                       new UnionView that can be searched further
* find_by_ids(*ids)  - every member probed for every id; RecordsNotFound
                       unless all ids are located
* find_by / find_all_by - equality shortcuts for the two query shapes

Anything else goes through the read-only sequence interface, which
materializes (flattens + deduplicates) the members on every call.

Examples:
    union = UnionView(
        people.find_many(Query.compare("id", "<=", 1)),   # set 0
        people.find_many(Query.sql("id BETWEEN 10 AND 15")), # set 1
        people.find_many(Query.compare("id", ">=", 20)),  # set 2
    )

    union.find_all(Query.sql("id <= 1 OR id >= 20"))  # records of sets 0 and 2
    union.find_by(name="george")                      # first george, by set order
    union.find_by_ids(30)                             # record 30 from set 2
    union.find_by_ids(9)                              # raises RecordsNotFound
"""

from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Optional, Union, overload

import pyarrow as pa

from unionview._constants import MODE_FIRST, REPR_MAX_MEMBERS
from unionview._exceptions import RecordNotFound, RecordsNotFound
from unionview._logging import get_logger, member_label
from unionview.query import Query
from unionview.sources.base import QuerySource, as_source, resolve_id_field
from unionview.sources.memory import RecordList

logger = get_logger(__name__)


def unique(records: Iterable[Any]) -> list[Any]:
    """
    Stable deduplication by equality, keeping first occurrences.

    Hashable records are tracked in a set; unhashable ones (dicts) fall back
    to a linear scan of the unhashable records seen so far.
    """
    result: list[Any] = []
    seen_hashable: set = set()
    seen_unhashable: list[Any] = []

    for record in records:
        try:
            if record in seen_hashable:
                continue
            seen_hashable.add(record)
        except TypeError:
            if record in seen_unhashable:
                continue
            seen_unhashable.append(record)
        result.append(record)

    return result


class UnionView(QuerySource, Sequence):
    """
    Union of ordered member sets.

    Member order is fixed at construction and is the tie-break precedence
    of every routed find. None members are dropped. A UnionView is itself
    a QuerySource, so unions can be members of other unions.
    """

    def __init__(self, *members: Any):
        self._members: tuple[QuerySource, ...] = tuple(
            as_source(member, position)
            for position, member in enumerate(members)
            if member is not None
        )

    @classmethod
    def of(cls, members: Iterable[Any]) -> "UnionView":
        return cls(*members)

    @property
    def members(self) -> tuple[QuerySource, ...]:
        return self._members

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------

    def materialize(self) -> list[Any]:
        """All member records, in member order, without duplicates."""
        return unique(record for member in self._members for record in member)

    to_list = materialize

    def to_arrow(self) -> pa.Table:
        """Materialized mapping records as a PyArrow Table."""
        return pa.Table.from_pylist(self.materialize())

    # ------------------------------------------------------------------
    # Routed finds
    # ------------------------------------------------------------------

    def find_first(self, query: Query) -> Optional[Any]:
        """
        First match, trying members in declared order.

        Each member gets its own copy of query. RecordNotFound from a member
        means "try the next one"; any other error propagates.
        """
        for position, member in enumerate(self._members):
            if member.is_empty():
                logger.debug(f"find_first: {member_label(position, member)} empty, skipped")
                continue

            try:
                record = member.find_single(query.model_copy(deep=True))
            except RecordNotFound:
                record = None

            if record is not None:
                logger.debug(
                    f"find_first: match in {member_label(position, member)} for {query}"
                )
                return record

            logger.debug(f"find_first: no match in {member_label(position, member)}")

        return None

    def find_all(self, query: Query) -> "UnionView":
        """
        Every match, as a new UnionView partitioned like this one.

        Member i of the result holds member i's matches (an empty RecordList
        when member i is empty), so chained finds keep the same precedence.
        """
        results = []
        for position, member in enumerate(self._members):
            if member.is_empty():
                logger.debug(f"find_all: {member_label(position, member)} empty, skipped")
                results.append(RecordList(id_field=member.id_field))
                continue
            logger.debug(f"find_all: querying {member_label(position, member)} for {query}")
            results.append(member.find_many(query.model_copy(deep=True)))

        return UnionView(*results)

    def find_by_ids(self, *ids: Any) -> Union[Any, list[Any]]:
        """
        Records for the given identifiers, probing every member for each id.

        Returns the record itself for a single id, a list otherwise.

        Raises:
            RecordsNotFound: Unless every requested id is located
        """
        hits = []
        for record_id in ids:
            for position, member in enumerate(self._members):
                if member.is_empty():
                    continue
                try:
                    hits.append(member.find_by_id(record_id))
                except RecordNotFound:
                    continue
                logger.debug(
                    f"find_by_ids: {record_id!r} found in {member_label(position, member)}"
                )

        hits = unique(hits)
        if len(unique(ids)) != len(hits):
            logger.debug(
                f"find_by_ids: {len(hits)} unique hits for {len(unique(ids))} ids"
            )
            raise RecordsNotFound(
                f"Couldn't find all records with IDs ({','.join(str(i) for i in ids)})",
                ids=ids,
            )

        return hits[0] if len(ids) == 1 else hits

    def find_by(self, **fields: Any) -> Optional[Any]:
        """First record whose fields equal the given values."""
        return self.find_first(Query.where(**fields))

    def find_all_by(self, **fields: Any) -> "UnionView":
        """All records whose fields equal the given values."""
        return self.find_all(Query.where(**fields))

    def find(self, *args: Any) -> Any:
        """
        Single entry point routing on argument shape.

        find(query) routes by query.mode ('first' or 'all');
        find(id, ...) routes to find_by_ids().
        """
        if len(args) == 1 and isinstance(args[0], Query):
            query = args[0]
            if query.mode == MODE_FIRST:
                return self.find_first(query)
            return self.find_all(query)

        return self.find_by_ids(*args)

    # ------------------------------------------------------------------
    # QuerySource capability (unions nest)
    # ------------------------------------------------------------------

    @property
    def id_field(self) -> str:
        if self._members:
            return self._members[0].id_field
        return resolve_id_field(None)

    def is_empty(self) -> bool:
        return all(member.is_empty() for member in self._members)

    def find_single(self, query: Query) -> Optional[Any]:
        return self.find_first(query)

    def find_many(self, query: Query) -> "UnionView":
        return self.find_all(query)

    def find_by_id(self, record_id: Any) -> Any:
        return self.find_by_ids(record_id)

    # ------------------------------------------------------------------
    # Read-only sequence interface
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[Any]:
        return iter(self.materialize())

    def __len__(self) -> int:
        return len(self.materialize())

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> list[Any]: ...

    def __getitem__(self, index):
        return self.materialize()[index]

    def __contains__(self, record: object) -> bool:
        return record in self.materialize()

    def __reversed__(self) -> Iterator[Any]:
        return reversed(self.materialize())

    def index(self, record: Any, start: int = 0, stop: Optional[int] = None) -> int:
        records = self.materialize()
        return records.index(record, start, len(records) if stop is None else stop)

    def count(self, record: Any) -> int:
        return self.materialize().count(record)

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, UnionView):
            return self.materialize() == other.materialize()
        if isinstance(other, (list, tuple)):
            return self.materialize() == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        shown = ", ".join(repr(m) for m in self._members[:REPR_MAX_MEMBERS])
        if len(self._members) > REPR_MAX_MEMBERS:
            shown += f", ... ({len(self._members) - REPR_MAX_MEMBERS} more)"
        return f"UnionView({shown})"
