import importlib.metadata as _metadata
import logging

from unionview._constants import DEFAULT_ID_FIELD
from unionview._exceptions import (
    RecordNotFound,
    RecordsNotFound,
    UnionError,
    UnionQueryError,
    UnionSourceError,
)
from unionview._logging import disable_logging, setup_basic_logging
from unionview.declarative import UnionAccessor, acts_as_union
from unionview.query import Predicate, Query
from unionview.sources import DuckDBSource, QuerySource, RecordList
from unionview.union import UnionView

__version__ = _metadata.version("unionview")

# Global identifier field, read by sources built without id_field
_ID_FIELD: str = DEFAULT_ID_FIELD


def use_id_field(name: str):
    """
    Set the default identifier field for sources created afterwards.

    Sources read the default when they are constructed, so existing sources
    keep the field they were built with.

    Args:
        name: Mapping key / attribute holding record identifiers

    Raises:
        UnionQueryError: If name is not a non-empty string

    Examples:
        >>> import unionview
        >>> unionview.use_id_field("uuid")
        >>> people = unionview.RecordList(rows)   # people.id_field == "uuid"
        >>> unionview.use_id_field("id")          # restore default
    """
    global _ID_FIELD

    if not isinstance(name, str) or not name.strip():
        raise UnionQueryError(
            f"Identifier field must be a non-empty string, got {name!r}"
        )

    _ID_FIELD = name


def get_id_field() -> str:
    """
    Get the current default identifier field.

    Example:
        >>> import unionview
        >>> unionview.get_id_field()
        'id'
    """
    return _ID_FIELD


def verbose(level=True):
    """
    Enable/disable verbose logging for unionview operations.

    Args:
        level: Logging level to enable:
            - True or "info": Show INFO and above (default)
            - "debug": Show DEBUG and above (member-by-member routing)
            - False: Disable all logging

    Example:
        >>> import unionview
        >>> unionview.verbose("debug")
        >>> union.find_first(query)   # logs skipped / matching members
        >>> unionview.verbose(False)
    """
    if level is False:
        disable_logging()
    elif level is True or level == "info":
        setup_basic_logging(level=logging.INFO)
    elif level == "debug":
        setup_basic_logging(level=logging.DEBUG)
    else:
        raise ValueError(
            f"Invalid verbose level: {level}. " "Use True, 'info', 'debug', or False."
        )


__all__ = [
    "DuckDBSource",
    "Predicate",
    "Query",
    "QuerySource",
    "RecordList",
    "RecordNotFound",
    "RecordsNotFound",
    "UnionAccessor",
    "UnionError",
    "UnionQueryError",
    "UnionSourceError",
    "UnionView",
    "acts_as_union",
    "get_id_field",
    "use_id_field",
    "verbose",
]
