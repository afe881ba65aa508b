"""
Member sources for UnionView.

Public API:
    QuerySource: abstract query capability every member speaks
    RecordList: in-memory ordered records
    DuckDBSource: table/view on a DuckDB connection (or a PyArrow Table)
"""

from unionview.sources.base import QuerySource, as_source, record_id
from unionview.sources.duckdb import DuckDBSource
from unionview.sources.memory import RecordList

__all__ = ["DuckDBSource", "QuerySource", "RecordList", "as_source", "record_id"]
