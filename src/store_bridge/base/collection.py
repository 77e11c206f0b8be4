from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .fields import Expression, to_filter
from .query import FindOptions, Projection, SortSpec
from .timestamps import stamp_insert, stamp_update

if TYPE_CHECKING:
    from ..deferred import Deferred
    from .indexes import IndexSpec
    from .results import (
        DeleteResult,
        IndexInfo,
        InsertManyResult,
        InsertOneResult,
        UpdateResult,
    )

H = TypeVar("H")

Document = dict[str, Any]
Filter = Mapping[str, Any] | Expression | None


class BaseCollection(ABC, Generic[H]):
    """Uniform CRUD, index and query contract over one backend collection.

    The raw backend handle ``H`` is delivered through a deferred that the owning
    client resolves once; every operation awaits that same deferred, so
    operations issued before the backend is ready simply queue behind it and an
    open failure is raised by all of them.
    """

    def __init__(self, name: str, handle: Deferred[H], *, timestamp: bool = False) -> None:
        self.name = name
        self.timestamp = timestamp
        self._handle = handle

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, timestamp={self.timestamp})"

    async def _raw(self) -> H:
        """Wait for and return the backend handle."""
        return await self._handle

    def _prepare_insert(self, document: Mapping[str, Any]) -> Document:
        if self.timestamp:
            return stamp_insert(document)
        return dict(document)

    def _prepare_update(self, update: Mapping[str, Any]) -> Document:
        if self.timestamp:
            return stamp_update(update)
        return dict(update)

    @staticmethod
    def _filter(query: Filter) -> Document:
        return to_filter(query)

    @staticmethod
    def _find_options(
        sort: SortSpec | None,
        skip: int | None,
        limit: int | None,
        projection: Projection | None,
    ) -> FindOptions:
        return FindOptions.build(sort=sort, skip=skip, limit=limit, projection=projection)

    @abstractmethod
    async def insert_one(self, document: Mapping[str, Any]) -> InsertOneResult:
        """Insert a document and return the id it was assigned."""
        pass

    @abstractmethod
    async def insert_many(self, documents: Sequence[Mapping[str, Any]]) -> InsertManyResult:
        """Insert documents in order; ids are keyed by input position."""
        pass

    @abstractmethod
    async def delete_one(self, query: Filter) -> DeleteResult:
        """Delete at most one matching document."""
        pass

    @abstractmethod
    async def delete_many(self, query: Filter) -> DeleteResult:
        """Delete every matching document."""
        pass

    @abstractmethod
    async def update_one(
        self, query: Filter, update: Mapping[str, Any], *, upsert: bool = False
    ) -> UpdateResult:
        """Update at most one matching document."""
        pass

    @abstractmethod
    async def update_many(
        self, query: Filter, update: Mapping[str, Any], *, upsert: bool = False
    ) -> UpdateResult:
        """Update every matching document."""
        pass

    @abstractmethod
    async def find(
        self,
        query: Filter = None,
        *,
        sort: SortSpec | None = None,
        skip: int | None = None,
        limit: int | None = None,
        projection: Projection | None = None,
    ) -> list[Document]:
        """Return matching documents: filter, sort, skip, limit, then project."""
        pass

    async def find_one(
        self,
        query: Filter = None,
        *,
        sort: SortSpec | None = None,
        skip: int | None = None,
        projection: Projection | None = None,
    ) -> Document | None:
        """Return the first document ``find`` would return, or None."""
        documents = await self.find(query, sort=sort, skip=skip, limit=1, projection=projection)
        return documents[0] if documents else None

    @abstractmethod
    async def count_documents(self, query: Filter = None) -> int:
        """Count matching documents."""
        pass

    @abstractmethod
    async def create_index(
        self,
        spec: IndexSpec,
        *,
        unique: bool = False,
        sparse: bool = False,
        expire_after_seconds: int | None = None,
    ) -> str:
        """Create an index and return its canonical (sorted field list) name."""
        pass

    @abstractmethod
    async def drop_index(self, name: str) -> None:
        """Drop an index by its backend-native name, as listed by list_indexes."""
        pass

    @abstractmethod
    async def list_indexes(self) -> list[IndexInfo]:
        """List indexes with their backend-native names."""
        pass

    @abstractmethod
    async def drop(self) -> bool:
        """Remove all documents and indexes; the collection stays usable."""
        pass
