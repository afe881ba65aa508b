"""Pytest fixtures for unionview tests."""

import logging
from dataclasses import dataclass

import pytest

from unionview import RecordList, UnionView


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: unit tests (in-memory sources only)")
    config.addinivalue_line("markers", "integration: integration tests with DuckDB")


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@dataclass(frozen=True)
class Person:
    id: int
    name: str
    age: int = 30


@pytest.fixture
def people() -> dict[int, Person]:
    return {
        1: Person(1, "stephen", 41),
        20: Person(20, "george", 25),
        22: Person(22, "billy", 19),
        30: Person(30, "george", 52),
    }


@pytest.fixture
def s0(people) -> RecordList:
    return RecordList([people[1]])


@pytest.fixture
def s1() -> RecordList:
    return RecordList([])


@pytest.fixture
def s2(people) -> RecordList:
    return RecordList([people[20], people[22]])


@pytest.fixture
def union(s0, s1, s2) -> UnionView:
    """S0={1}, S1={}, S2={20, 22}."""
    return UnionView(s0, s1, s2)


@pytest.fixture
def rows() -> list[dict]:
    return [
        {"id": 1, "name": "stephen", "age": 41, "team": "red"},
        {"id": 10, "name": "ann", "age": 33, "team": "blue"},
        {"id": 15, "name": "george", "age": 28, "team": "blue"},
        {"id": 20, "name": "george", "age": 25, "team": "red"},
        {"id": 22, "name": "billy", "age": 19, "team": None},
        {"id": 30, "name": "zoe", "age": 52, "team": "red"},
    ]


@pytest.fixture(autouse=True)
def reset_unionview():
    logger = logging.getLogger("unionview")
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield
    import unionview
    unionview.use_id_field("id")
    logger.handlers, logger.level, logger.propagate = handlers, level, propagate

    from unionview import _logging
    for name in _logging._debug_modules:
        logging.getLogger(name).setLevel(logging.NOTSET)
    _logging._debug_modules.clear()
