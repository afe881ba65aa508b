"""
Exception hierarchy for unionview.

All unionview exceptions inherit from UnionError.
Routing depends on exactly one soft error kind: RecordNotFound means
"this member has no match, try the next one". Everything else is hard.

Usage:
    from unionview._exceptions import RecordNotFound, RecordsNotFound

    try:
        person = union.find_by_ids(9)
    except RecordsNotFound as exc:
        # None of the member sets holds all requested ids
        logger.warning(f"Missing ids among {exc.ids}")
    except UnionError:
        # Catch-all for other unionview errors
        raise
"""


class UnionError(Exception):
    """Base exception for all unionview errors."""

    pass


class RecordNotFound(UnionError, LookupError):
    """
    A single-record lookup found nothing.

    Raised by member sources when:
    - find_by_id() is given an identifier the source does not hold
    - find_single() has no match (sources may also return None)

    UnionView catches this per member and moves on to the next member.
    It never reaches the caller from find_first() or find_by_ids() probes.

    Examples:
        - "No record with id=9 in RecordList(3 records)"
        - "No row with \"id\" = 30 in people"
    """

    pass


class RecordsNotFound(RecordNotFound):
    """
    Aggregate lookup failure from UnionView.find_by_ids().

    Raised when, after probing every member for every requested identifier,
    the number of unique hits differs from the number of unique requested
    identifiers.

    The message and `ids` carry the full requested identifier list,
    not only the missing ones.

    Examples:
        - "Couldn't find all records with IDs (1,30)"
    """

    def __init__(self, message: str, ids: tuple = ()):
        super().__init__(message)
        self.ids = tuple(ids)


class UnionQueryError(UnionError, ValueError):
    """
    Invalid query or query execution failure.

    Raised when:
    - Predicate operator is unknown
    - Query mode is not 'first' or 'all'
    - Free-form SQL filters are given to an in-memory source
    - DuckDB rejects the compiled SQL (unknown column, syntax error)

    Examples:
        - "Unknown operator: '=~'. Valid operators: ['!=', '<', ...]"
        - "RecordList cannot evaluate SQL filters: ['age > 3']"
    """

    pass


class UnionSourceError(UnionError):
    """
    Invalid member or backing source failure.

    Raised when:
    - A member is neither a QuerySource nor a sequence of records
    - A source is used after its connection was closed

    Examples:
        - "Member 2 is not a query source or a sequence: 42 (int)"
        - "DuckDBSource 'people' is closed"
    """

    pass
