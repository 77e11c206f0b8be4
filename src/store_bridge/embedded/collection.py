from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from ..base.collection import BaseCollection, Document, Filter
from ..base.indexes import canonical_index_name, normalize_index_spec
from ..base.results import (
    DeleteResult,
    IndexInfo,
    InsertManyResult,
    InsertOneResult,
    UpdateResult,
)
from .datastore import Datastore

if TYPE_CHECKING:
    from ..base.indexes import IndexSpec
    from ..base.query import Projection, SortSpec

logger = logging.getLogger(__name__)


class EmbeddedCollection(BaseCollection[Datastore]):
    """Collection adapter over an embedded Datastore."""

    async def insert_one(self, document: Mapping[str, Any]) -> InsertOneResult:
        datastore = await self._raw()
        inserted = await datastore.insert(self._prepare_insert(document))
        return InsertOneResult(inserted_id=inserted["_id"])

    async def insert_many(self, documents: Sequence[Mapping[str, Any]]) -> InsertManyResult:
        datastore = await self._raw()
        if not documents:
            return InsertManyResult()
        inserted = await datastore.insert([self._prepare_insert(d) for d in documents])
        return InsertManyResult(
            inserted_ids={index: document["_id"] for index, document in enumerate(inserted)}
        )

    async def delete_one(self, query: Filter) -> DeleteResult:
        datastore = await self._raw()
        removed = await datastore.remove(self._filter(query), multi=False)
        return DeleteResult(deleted_count=removed)

    async def delete_many(self, query: Filter) -> DeleteResult:
        datastore = await self._raw()
        removed = await datastore.remove(self._filter(query), multi=True)
        return DeleteResult(deleted_count=removed)

    async def _update(
        self, query: Filter, update: Mapping[str, Any], *, multi: bool, upsert: bool
    ) -> UpdateResult:
        datastore = await self._raw()
        outcome = await datastore.update(
            self._filter(query),
            self._prepare_update(update),
            multi=multi,
            upsert=upsert,
            return_updated_docs=True,
            preserve_created_at=self.timestamp,
        )
        if not outcome.upsert:
            return UpdateResult(matched_count=outcome.num_affected)

        affected = outcome.affected_documents
        if isinstance(affected, list):
            affected = affected[0] if affected else None
        return UpdateResult(
            matched_count=0,
            upserted_id=affected["_id"] if affected else None,
        )

    async def update_one(
        self, query: Filter, update: Mapping[str, Any], *, upsert: bool = False
    ) -> UpdateResult:
        return await self._update(query, update, multi=False, upsert=upsert)

    async def update_many(
        self, query: Filter, update: Mapping[str, Any], *, upsert: bool = False
    ) -> UpdateResult:
        return await self._update(query, update, multi=True, upsert=upsert)

    async def find(
        self,
        query: Filter = None,
        *,
        sort: SortSpec | None = None,
        skip: int | None = None,
        limit: int | None = None,
        projection: Projection | None = None,
    ) -> list[Document]:
        options = self._find_options(sort, skip, limit, projection)
        datastore = await self._raw()
        cursor = datastore.find(self._filter(query))
        if options.projection is not None:
            cursor = cursor.projection(options.projection)
        if options.sort:
            cursor = cursor.sort(options.sort)
        if options.skip:
            cursor = cursor.skip(options.skip)
        if options.limit:
            cursor = cursor.limit(options.limit)
        return await cursor

    async def count_documents(self, query: Filter = None) -> int:
        datastore = await self._raw()
        return await datastore.count(self._filter(query))

    async def create_index(
        self,
        spec: IndexSpec,
        *,
        unique: bool = False,
        sparse: bool = False,
        expire_after_seconds: int | None = None,
    ) -> str:
        keys = normalize_index_spec(spec)
        datastore = await self._raw()
        # Embedded indexes are unordered, so directions are dropped.
        definition = await datastore.ensure_index(
            [name for name, _ in keys],
            unique=unique,
            sparse=sparse,
            expire_after_seconds=expire_after_seconds,
        )
        logger.debug("Index %r created on %r", definition.name, self.name)
        return canonical_index_name(keys)

    async def drop_index(self, name: str) -> None:
        datastore = await self._raw()
        await datastore.remove_index(name.split(","))

    async def list_indexes(self) -> list[IndexInfo]:
        datastore = await self._raw()
        return [
            IndexInfo(name=definition.name, key={field: 1 for field in definition.field_name})
            for definition in await datastore.get_indexes()
        ]

    async def drop(self) -> bool:
        datastore = await self._raw()
        await datastore.drop_database()
        return True

    async def flush(self) -> None:
        """Wait for pending data file writes. No-op if the open failed."""
        if not self._handle.done() or self._handle.future.exception() is not None:
            return
        datastore = await self._raw()
        await datastore.flush()
