from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from ..errors import UsageError

# Operators shared by every backend. Anything else is passed through untouched
# and left to the backend to accept or reject.
FILTER_OPERATORS = frozenset(
    {
        "$eq",
        "$ne",
        "$gt",
        "$gte",
        "$lt",
        "$lte",
        "$in",
        "$nin",
        "$exists",
        "$regex",
        "$elemMatch",
        "$size",
        "$not",
        "$and",
        "$or",
    }
)

UPDATE_OPERATORS = frozenset(
    {
        "$inc",
        "$min",
        "$max",
        "$mul",
        "$set",
        "$setOnInsert",
        "$unset",
        "$addToSet",
        "$pop",
        "$pull",
        "$push",
    }
)


@dataclass(slots=True, frozen=True)
class QueryExpression:
    """A single ``field <operator> value`` condition."""

    field: str
    operator: str
    value: Any

    def __and__(self, other: Expression) -> CompoundExpression:
        return CompoundExpression("and", [self, other])

    def __or__(self, other: Expression) -> CompoundExpression:
        return CompoundExpression("or", [self, other])

    def __invert__(self) -> QueryExpression:
        return QueryExpression(self.field, "not", self)

    def to_filter(self) -> dict[str, Any]:
        """Compile into a filter document."""
        return {self.field: self._condition()}

    def _condition(self) -> dict[str, Any]:
        if self.operator == "not":
            return {"$not": self.value._condition()}
        return {f"${self.operator}": self.value}


@dataclass(slots=True, frozen=True)
class CompoundExpression:
    """Compound expression for combining multiple query expressions."""

    operator: str  # 'and', 'or'
    expressions: list[Expression]

    def __and__(self, other: Expression) -> CompoundExpression:
        return CompoundExpression("and", [self, other])

    def __or__(self, other: Expression) -> CompoundExpression:
        return CompoundExpression("or", [self, other])

    def __invert__(self) -> CompoundExpression:
        raise UsageError("Only single-field conditions can be negated")

    def to_filter(self) -> dict[str, Any]:
        """Compile into a filter document."""
        return {f"${self.operator}": [e.to_filter() for e in self.expressions]}


Expression = Union[QueryExpression, CompoundExpression]


class Field:
    """Named document field used to build filter expressions.

    Example:
        >>> age = Field("age")
        >>> ((age >= 20) & Field("name").in_(["a", "b"])).to_filter()
        {'$and': [{'age': {'$gte': 20}}, {'name': {'$in': ['a', 'b']}}]}
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"Field({self.name!r})"

    def __eq__(self, other: Any) -> QueryExpression:  # type: ignore[override]
        return QueryExpression(self.name, "eq", other)

    def __ne__(self, other: Any) -> QueryExpression:  # type: ignore[override]
        return QueryExpression(self.name, "ne", other)

    def __lt__(self, other: Any) -> QueryExpression:
        return QueryExpression(self.name, "lt", other)

    def __le__(self, other: Any) -> QueryExpression:
        return QueryExpression(self.name, "lte", other)

    def __gt__(self, other: Any) -> QueryExpression:
        return QueryExpression(self.name, "gt", other)

    def __ge__(self, other: Any) -> QueryExpression:
        return QueryExpression(self.name, "gte", other)

    def in_(self, values: list[Any]) -> QueryExpression:
        """Check if field value is in a list of values."""
        return QueryExpression(self.name, "in", list(values))

    def not_in(self, values: list[Any]) -> QueryExpression:
        """Check if field value is not in a list of values."""
        return QueryExpression(self.name, "nin", list(values))

    def exists(self, value: bool = True) -> QueryExpression:
        """Check if field exists."""
        return QueryExpression(self.name, "exists", value)

    def regex(self, pattern: str) -> QueryExpression:
        """Regex match operation."""
        return QueryExpression(self.name, "regex", pattern)

    def elem_match(self, condition: Mapping[str, Any] | Expression) -> QueryExpression:
        """Match arrays holding at least one element that satisfies ``condition``."""
        if isinstance(condition, (QueryExpression, CompoundExpression)):
            condition = condition.to_filter()
        return QueryExpression(self.name, "elemMatch", dict(condition))

    def size(self, length: int) -> QueryExpression:
        """Match arrays with exactly ``length`` elements."""
        return QueryExpression(self.name, "size", length)


def to_filter(query: Mapping[str, Any] | Expression | None) -> dict[str, Any]:
    """Normalize any accepted filter form into a plain filter document."""
    if query is None:
        return {}
    if isinstance(query, (QueryExpression, CompoundExpression)):
        return query.to_filter()
    if isinstance(query, Mapping):
        return dict(query)
    raise UsageError(f"Unsupported filter type: {type(query).__name__}")


def is_operator_update(update: Mapping[str, Any]) -> bool:
    """Return True if ``update`` uses ``$`` operators rather than replacing."""
    return any(key.startswith("$") for key in update)
