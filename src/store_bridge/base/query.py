from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from ..errors import UsageError

SortDirection = Literal[1, -1, "asc", "desc", "ascending", "descending"]
SortSpec = Union[
    str,
    tuple[str, SortDirection],
    Sequence[Union[str, tuple[str, SortDirection]]],
    Mapping[str, SortDirection],
]
Projection = Union[Mapping[str, Any], Sequence[str]]

_DIRECTIONS: dict[Any, int] = {
    1: 1,
    -1: -1,
    "asc": 1,
    "ascending": 1,
    "desc": -1,
    "descending": -1,
}


def parse_direction(direction: Any) -> int:
    """Map any accepted direction spelling onto 1 or -1."""
    # bool is an int subclass; True must not read as ascending.
    if (
        isinstance(direction, bool)
        or not isinstance(direction, (int, str))
        or direction not in _DIRECTIONS
    ):
        raise UsageError(f"Invalid sort direction: {direction!r}")
    return _DIRECTIONS[direction]


def _is_pair(value: Any) -> bool:
    """Return True for a ``(field, direction)`` tuple; the direction is checked later.

    Several field names must be given as a list, never as a tuple.
    """
    return isinstance(value, tuple) and len(value) == 2 and isinstance(value[0], str)


def parse_sort_fields(sort: SortSpec | None) -> list[tuple[str, int]]:
    """Parse sort field specifications into (field_name, direction) tuples.

    ``"-name"`` sorts descending, ``"name"`` ascending.
    """
    if sort is None:
        return []
    if isinstance(sort, str):
        if sort.startswith("-"):
            return [(sort[1:], -1)]
        return [(sort, 1)]
    if isinstance(sort, Mapping):
        return [(name, parse_direction(d)) for name, d in sort.items()]
    if _is_pair(sort):
        return [(sort[0], parse_direction(sort[1]))]  # type: ignore[index]
    if not isinstance(sort, Sequence):
        raise UsageError(f"Invalid sort: {sort!r}")

    parsed_fields = []
    for item in sort:
        if isinstance(item, str):
            parsed_fields.extend(parse_sort_fields(item))
        elif _is_pair(item):
            parsed_fields.append((item[0], parse_direction(item[1])))
        else:
            raise UsageError(f"Invalid sort field: {item!r}")
    return parsed_fields


def parse_projection(projection: Projection | None) -> dict[str, Any] | None:
    """Normalize a projection; a sequence of names selects those fields."""
    if projection is None:
        return None
    if isinstance(projection, Mapping):
        return dict(projection)
    if isinstance(projection, str):
        return {projection: 1}
    return {name: 1 for name in projection}


@dataclass(slots=True)
class FindOptions:
    """Normalized options of a find: filter, then sort, skip, limit, projection."""

    sort: list[tuple[str, int]] = field(default_factory=list)
    skip: int = 0
    limit: int = 0
    projection: dict[str, Any] | None = None

    @classmethod
    def build(
        cls,
        *,
        sort: SortSpec | None = None,
        skip: int | None = None,
        limit: int | None = None,
        projection: Projection | None = None,
    ) -> FindOptions:
        """Validate caller-supplied options. ``limit=0`` means no limit."""
        skip = skip or 0
        limit = limit or 0
        if skip < 0:
            raise UsageError(f"skip must be >= 0, got {skip}")
        if limit < 0:
            raise UsageError(f"limit must be >= 0, got {limit}")
        return cls(
            sort=parse_sort_fields(sort),
            skip=skip,
            limit=limit,
            projection=parse_projection(projection),
        )
