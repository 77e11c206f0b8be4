"""Backend-neutral result shapes returned by every collection adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True, frozen=True)
class InsertOneResult:
    inserted_id: Any
    acknowledged: bool = True


@dataclass(slots=True, frozen=True)
class InsertManyResult:
    """``inserted_ids`` maps each input position to the id it received."""

    inserted_ids: dict[int, Any] = field(default_factory=dict)
    acknowledged: bool = True

    @property
    def inserted_count(self) -> int:
        return len(self.inserted_ids)


@dataclass(slots=True, frozen=True)
class DeleteResult:
    deleted_count: int
    acknowledged: bool = True


@dataclass(slots=True, frozen=True)
class UpdateResult:
    """``matched_count`` excludes a document created by upsert."""

    matched_count: int
    upserted_id: Any = None
    acknowledged: bool = True


@dataclass(slots=True, frozen=True)
class IndexInfo:
    name: str
    key: dict[str, int]
    version: int | None = None
