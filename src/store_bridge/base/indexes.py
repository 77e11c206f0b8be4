from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Literal, Union

from ..errors import UsageError

IndexDirection = Literal[1, -1]
IndexSpec = Union[
    str,
    tuple[str, IndexDirection],
    Mapping[str, IndexDirection],
    Sequence[Union[str, tuple[str, IndexDirection], Mapping[str, IndexDirection]]],
]


def _key(name: Any, direction: Any) -> tuple[str, int]:
    if not isinstance(name, str) or not name:
        raise UsageError(f"Invalid index field: {name!r}")
    if isinstance(direction, bool) or direction not in (1, -1):
        raise UsageError(f"Invalid index direction for {name!r}: {direction!r}")
    return name, direction


def normalize_index_spec(spec: IndexSpec) -> list[tuple[str, int]]:
    """Flatten an index spec into ordered ``(field, direction)`` pairs."""
    if isinstance(spec, str):
        return [_key(spec, 1)]
    if (
        isinstance(spec, tuple)
        and len(spec) == 2
        and not isinstance(spec[1], (str, tuple, Mapping))
    ):
        return [_key(*spec)]

    keys: list[tuple[str, int]] = []
    items = [spec] if isinstance(spec, Mapping) else spec
    for item in items:
        if isinstance(item, str):
            keys.append(_key(item, 1))
        elif isinstance(item, Mapping):
            keys.extend(_key(name, direction) for name, direction in item.items())
        elif isinstance(item, tuple) and len(item) == 2:
            keys.append(_key(*item))
        else:
            raise UsageError(f"Invalid index spec element: {item!r}")
    if not keys:
        raise UsageError("Index spec names no fields")
    return keys


def canonical_index_name(keys: Sequence[tuple[str, int]]) -> str:
    """Sorted, comma-joined field names.

    This is what create_index returns on every backend. It is not necessarily
    the backend-native name that drop_index expects; use list_indexes for that.
    """
    return ",".join(sorted(name for name, _ in keys))
