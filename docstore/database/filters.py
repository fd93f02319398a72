"""
Filter expressions translated to MongoDB query documents.

Predicates are built from field references and combined with ``&``, ``|``
and ``~`` instead of opaque callables, so they can be sent to the server:

    (field("name") == "A") & (field("age") >= 18)

translates to ``{"$and": [{"name": {"$eq": "A"}}, {"age": {"$gte": 18}}]}``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal, Union

Resolver = Callable[[str, Any], tuple[str, Any]]

Operator = Literal[
    "$eq", "$ne", "$gt", "$gte", "$lt", "$lte", "$in", "$nin", "$exists", "$regex"
]


def _identity(name: str, value: Any) -> tuple[str, Any]:
    return name, value


class Filter:
    """Base class for filter expressions."""

    def to_query(self, resolve: Resolver | None = None) -> dict[str, Any]:
        raise NotImplementedError

    def __and__(self, other: Filter) -> And:
        return And((self, other))

    def __or__(self, other: Filter) -> Or:
        return Or((self, other))

    def __invert__(self) -> Not:
        return Not(self)


@dataclass(frozen=True)
class Comparison(Filter):
    """Single field condition."""

    field: str
    op: Operator
    value: Any

    def to_query(self, resolve: Resolver | None = None) -> dict[str, Any]:
        resolve = resolve or _identity
        if self.op in ("$in", "$nin"):
            name = resolve(self.field, None)[0]
            value = [resolve(self.field, item)[1] for item in self.value]
        elif self.op in ("$exists", "$regex"):
            name, value = resolve(self.field, None)[0], self.value
        else:
            name, value = resolve(self.field, self.value)
        return {name: {self.op: value}}


@dataclass(frozen=True)
class And(Filter):
    filters: tuple[Filter, ...]

    def to_query(self, resolve: Resolver | None = None) -> dict[str, Any]:
        return {"$and": [f.to_query(resolve) for f in _flatten(self.filters, And)]}


@dataclass(frozen=True)
class Or(Filter):
    filters: tuple[Filter, ...]

    def to_query(self, resolve: Resolver | None = None) -> dict[str, Any]:
        return {"$or": [f.to_query(resolve) for f in _flatten(self.filters, Or)]}


@dataclass(frozen=True)
class Not(Filter):
    filter: Filter

    def to_query(self, resolve: Resolver | None = None) -> dict[str, Any]:
        # $not only applies to operator expressions; $nor negates a whole query
        return {"$nor": [self.filter.to_query(resolve)]}


def _flatten(filters: Iterable[Filter], kind: type) -> list[Filter]:
    flat: list[Filter] = []
    for f in filters:
        if isinstance(f, kind):
            flat.extend(_flatten(f.filters, kind))
        else:
            flat.append(f)
    return flat


@dataclass(frozen=True, eq=False)
class FieldRef:
    """Reference to a document field, the left-hand side of a comparison."""

    name: str

    def __eq__(self, value: Any) -> Comparison:  # type: ignore[override]
        return Comparison(self.name, "$eq", value)

    def __ne__(self, value: Any) -> Comparison:  # type: ignore[override]
        return Comparison(self.name, "$ne", value)

    def __gt__(self, value: Any) -> Comparison:
        return Comparison(self.name, "$gt", value)

    def __ge__(self, value: Any) -> Comparison:
        return Comparison(self.name, "$gte", value)

    def __lt__(self, value: Any) -> Comparison:
        return Comparison(self.name, "$lt", value)

    def __le__(self, value: Any) -> Comparison:
        return Comparison(self.name, "$lte", value)

    __hash__ = None  # type: ignore[assignment]

    def is_in(self, values: Iterable[Any]) -> Comparison:
        return Comparison(self.name, "$in", tuple(values))

    def not_in(self, values: Iterable[Any]) -> Comparison:
        return Comparison(self.name, "$nin", tuple(values))

    def exists(self, present: bool = True) -> Comparison:
        return Comparison(self.name, "$exists", present)

    def matches(self, pattern: str) -> Comparison:
        return Comparison(self.name, "$regex", pattern)


def field(name: str) -> FieldRef:
    return FieldRef(name)


def and_(*filters: Filter) -> And:
    return And(tuple(filters))


def or_(*filters: Filter) -> Or:
    return Or(tuple(filters))


def not_(f: Filter) -> Not:
    return Not(f)


FilterLike = Union[Filter, Mapping[str, Any]]


def to_query(f: FilterLike | None, resolve: Resolver | None = None) -> dict[str, Any]:
    """Translate a filter (or pass a raw query mapping through) for the driver."""
    if f is None:
        return {}
    if isinstance(f, Filter):
        return f.to_query(resolve)
    if isinstance(f, Mapping):
        return dict(f)
    raise TypeError(f"Expected a Filter or a query mapping, got {type(f).__name__}")
