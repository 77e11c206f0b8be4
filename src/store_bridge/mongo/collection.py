from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from ..base.collection import BaseCollection, Document, Filter
from ..base.fields import is_operator_update
from ..base.indexes import canonical_index_name, normalize_index_spec
from ..base.results import (
    DeleteResult,
    IndexInfo,
    InsertManyResult,
    InsertOneResult,
    UpdateResult,
)
from ..base.timestamps import CREATED_AT, carry_created_at

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection

    from ..base.indexes import IndexSpec
    from ..base.query import Projection, SortSpec

logger = logging.getLogger(__name__)


class MongoCollection(BaseCollection["AsyncIOMotorCollection"]):
    """Collection adapter over a Motor collection."""

    async def insert_one(self, document: Mapping[str, Any]) -> InsertOneResult:
        collection = await self._raw()
        result = await collection.insert_one(self._prepare_insert(document))
        return InsertOneResult(inserted_id=result.inserted_id, acknowledged=result.acknowledged)

    async def insert_many(self, documents: Sequence[Mapping[str, Any]]) -> InsertManyResult:
        collection = await self._raw()
        if not documents:
            return InsertManyResult()
        result = await collection.insert_many([self._prepare_insert(d) for d in documents])
        return InsertManyResult(
            inserted_ids=dict(enumerate(result.inserted_ids)),
            acknowledged=result.acknowledged,
        )

    async def delete_one(self, query: Filter) -> DeleteResult:
        collection = await self._raw()
        result = await collection.delete_one(self._filter(query))
        return DeleteResult(deleted_count=result.deleted_count, acknowledged=result.acknowledged)

    async def delete_many(self, query: Filter) -> DeleteResult:
        collection = await self._raw()
        result = await collection.delete_many(self._filter(query))
        return DeleteResult(deleted_count=result.deleted_count, acknowledged=result.acknowledged)

    async def update_one(
        self, query: Filter, update: Mapping[str, Any], *, upsert: bool = False
    ) -> UpdateResult:
        collection = await self._raw()
        document = self._prepare_update(update)
        if is_operator_update(document):
            result = await collection.update_one(self._filter(query), document, upsert=upsert)
        else:
            if self.timestamp and CREATED_AT not in document:
                existing = await collection.find_one(self._filter(query), projection={CREATED_AT: 1})
                document = carry_created_at(document, existing)
            result = await collection.replace_one(self._filter(query), document, upsert=upsert)
        return self._update_result(result)

    async def update_many(
        self, query: Filter, update: Mapping[str, Any], *, upsert: bool = False
    ) -> UpdateResult:
        collection = await self._raw()
        result = await collection.update_many(
            self._filter(query), self._prepare_update(update), upsert=upsert
        )
        return self._update_result(result)

    @staticmethod
    def _update_result(result: Any) -> UpdateResult:
        return UpdateResult(
            matched_count=result.matched_count,
            upserted_id=result.upserted_id,
            acknowledged=result.acknowledged,
        )

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
        collection = await self._raw()
        kwargs: dict[str, Any] = {"skip": options.skip, "limit": options.limit}
        if options.sort:
            kwargs["sort"] = options.sort
        if options.projection is not None:
            kwargs["projection"] = options.projection
        cursor = collection.find(self._filter(query), **kwargs)
        return await cursor.to_list(length=None)

    async def count_documents(self, query: Filter = None) -> int:
        collection = await self._raw()
        return await collection.count_documents(self._filter(query))

    async def create_index(
        self,
        spec: IndexSpec,
        *,
        unique: bool = False,
        sparse: bool = False,
        expire_after_seconds: int | None = None,
    ) -> str:
        keys = normalize_index_spec(spec)
        collection = await self._raw()
        kwargs: dict[str, Any] = {"unique": unique, "sparse": sparse}
        if expire_after_seconds is not None:
            kwargs["expireAfterSeconds"] = expire_after_seconds
        native_name = await collection.create_index(keys, **kwargs)
        logger.debug("Index %r created on %r", native_name, self.name)
        return canonical_index_name(keys)

    async def drop_index(self, name: str) -> None:
        collection = await self._raw()
        await collection.drop_index(name)

    async def list_indexes(self) -> list[IndexInfo]:
        collection = await self._raw()
        indexes = await collection.list_indexes().to_list(length=None)
        return [
            IndexInfo(name=index["name"], key=dict(index["key"]), version=index.get("v"))
            for index in indexes
        ]

    async def drop(self) -> bool:
        collection = await self._raw()
        await collection.drop()
        return True
