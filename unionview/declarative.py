"""
Declarative union accessors.

acts_as_union() attaches a read-only attribute to a host class that, on
each access, builds a fresh UnionView over the current values of other
attributes of the instance:

    @acts_as_union("acquaintances", ["friends", "colleagues"])
    class Person:
        def __init__(self, friends, colleagues):
            self.friends = friends
            self.colleagues = colleagues

    stephen.acquaintances.find_by(name="Billy")  # searches both sets

Sources may be plain attributes, properties or zero-argument methods.
"""

from collections.abc import Sequence
from typing import Any, Callable, TypeVar

from unionview._exceptions import UnionSourceError
from unionview._logging import get_logger
from unionview.sources.base import QuerySource
from unionview.union import UnionView

logger = get_logger(__name__)

T = TypeVar("T", bound=type)


class UnionAccessor:
    """
    Read-only descriptor returning a UnionView over named attributes.

    Usable directly in a class body:

        class Person:
            acquaintances = UnionAccessor("friends", "colleagues")
    """

    def __init__(self, *sources: str):
        if not sources:
            raise UnionSourceError("UnionAccessor needs at least one source name")

        for source in sources:
            if not isinstance(source, str) or not source.isidentifier():
                raise UnionSourceError(
                    f"Union source must be an attribute name, got {source!r}"
                )

        self.sources: tuple[str, ...] = sources
        self.name: str = "<union>"

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type = None):
        if instance is None:
            return self

        members = [self._resolve(instance, source) for source in self.sources]
        return UnionView(*members)

    def __set__(self, instance: Any, value: Any) -> None:
        raise AttributeError(
            f"'{type(instance).__name__}.{self.name}' is a read-only union of "
            f"{list(self.sources)}"
        )

    def _resolve(self, instance: Any, source: str) -> Any:
        try:
            value = getattr(instance, source)
        except AttributeError as e:
            raise AttributeError(
                f"Union '{self.name}' on {type(instance).__name__} references "
                f"missing attribute '{source}'"
            ) from e

        # Zero-arg methods are called; sequences and sources are used as-is
        if callable(value) and not isinstance(value, (Sequence, QuerySource)):
            value = value()

        return value

    def __repr__(self) -> str:
        return f"UnionAccessor({', '.join(repr(s) for s in self.sources)})"


def acts_as_union(name: str, sources: Sequence[str]) -> Callable[[T], T]:
    """
    Class decorator installing a union accessor.

    Args:
        name: Attribute name of the accessor on the host class
        sources: Ordered attribute names whose values become the members

    Returns:
        Decorator returning the same class with the accessor attached
    """
    if isinstance(sources, str):
        raise UnionSourceError(
            f"acts_as_union('{name}', ...) expects a list of source names, "
            f"got the string {sources!r}"
        )

    accessor = UnionAccessor(*sources)

    def decorate(cls: T) -> T:
        accessor.__set_name__(cls, name)
        setattr(cls, name, accessor)
        logger.debug(f"{cls.__name__}.{name} = union of {list(accessor.sources)}")
        return cls

    return decorate
