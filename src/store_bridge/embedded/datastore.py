"""Single-collection embedded datastore.

Query, update and index semantics come from mongomock. Durability is a JSON
lines data file: index definitions first, then one document per line, rewritten
in full after every mutation through ``<file>~`` and an atomic rename.
"""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from collections.abc import Generator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, overload

import mongomock
from bson import ObjectId, json_util

from ..base.fields import is_operator_update
from ..base.timestamps import CREATED_AT, carry_created_at
from ..errors import CorruptDataError, DatastoreNotLoadedError

logger = logging.getLogger(__name__)

INDEX_CREATED = "$$indexCreated"
ID_INDEX = "_id"


@dataclass(slots=True, frozen=True)
class IndexDefinition:
    field_name: list[str]
    unique: bool = False
    sparse: bool = False
    expire_after_seconds: int | None = None

    @property
    def name(self) -> str:
        return ",".join(self.field_name)

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "fieldName": self.field_name,
            "unique": self.unique,
            "sparse": self.sparse,
        }
        if self.expire_after_seconds is not None:
            record["expireAfterSeconds"] = self.expire_after_seconds
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> IndexDefinition:
        field_name = record["fieldName"]
        return cls(
            field_name=[field_name] if isinstance(field_name, str) else list(field_name),
            unique=bool(record.get("unique", False)),
            sparse=bool(record.get("sparse", False)),
            expire_after_seconds=record.get("expireAfterSeconds"),
        )


@dataclass(slots=True)
class UpdateOutcome:
    """Result of Datastore.update.

    ``num_affected`` counts upserted documents too; ``upsert`` tells whether a
    document was inserted.
    """

    num_affected: int
    affected_documents: dict[str, Any] | list[dict[str, Any]] | None = None
    upsert: bool = False


class Cursor:
    """Chainable, awaitable find over a Datastore."""

    def __init__(
        self,
        datastore: Datastore,
        query: Mapping[str, Any],
        projection: Mapping[str, Any] | None = None,
    ) -> None:
        self._datastore = datastore
        self._query = dict(query)
        self._projection = dict(projection) if projection else None
        self._sort: list[tuple[str, int]] = []
        self._skip = 0
        self._limit = 0

    def sort(self, keys: Sequence[tuple[str, int]] | Mapping[str, int]) -> Cursor:
        self._sort = list(keys.items()) if isinstance(keys, Mapping) else list(keys)
        return self

    def skip(self, count: int) -> Cursor:
        self._skip = count
        return self

    def limit(self, count: int) -> Cursor:
        self._limit = count
        return self

    def projection(self, projection: Mapping[str, Any]) -> Cursor:
        self._projection = dict(projection)
        return self

    async def exec(self) -> list[dict[str, Any]]:
        collection = self._datastore._require_loaded()
        cursor = collection.find(self._query, self._projection)
        if self._sort:
            cursor = cursor.sort(self._sort)
        if self._skip:
            cursor = cursor.skip(self._skip)
        if self._limit:
            cursor = cursor.limit(self._limit)
        return list(cursor)

    def __await__(self) -> Generator[Any, None, list[dict[str, Any]]]:
        return self.exec().__await__()


class Datastore:
    """One embedded collection, in memory or backed by a data file.

    Args:
        filename: Path of the data file. Required unless ``in_memory_only``.
        in_memory_only: Keep documents in memory only.
        corrupt_alert_threshold: Fraction of data file lines that may fail to
            decode before load() gives up.
    """

    def __init__(
        self,
        filename: str | os.PathLike[str] | None = None,
        *,
        in_memory_only: bool = False,
        corrupt_alert_threshold: float = 0.1,
    ) -> None:
        if filename is None and not in_memory_only:
            in_memory_only = True
        self.filename = os.fspath(filename) if filename is not None else None
        self.in_memory_only = in_memory_only
        self.corrupt_alert_threshold = corrupt_alert_threshold
        self._client = mongomock.MongoClient(tz_aware=True)
        self._db_name = f"datastore_{uuid.uuid4().hex}"
        self._collection: Any = None
        self._indexes: dict[str, IndexDefinition] = {}
        self._write_lock = asyncio.Lock()

    def __repr__(self) -> str:
        where = "memory" if self.in_memory_only else self.filename
        return f"Datastore({where!r})"

    @property
    def loaded(self) -> bool:
        return self._collection is not None

    def _require_loaded(self) -> Any:
        if self._collection is None:
            raise DatastoreNotLoadedError(extra={"filename": self.filename})
        return self._collection

    def _reset(self) -> Any:
        self._client.drop_database(self._db_name)
        self._indexes = {}
        return self._client[self._db_name]["documents"]

    # --- Loading and persistence ------------------------------------------------

    async def load(self) -> None:
        """(Re)load the datastore from its data file, then compact the file."""
        collection = self._reset()
        self._collection = None
        if self.in_memory_only:
            self._collection = collection
            return

        lines = await asyncio.to_thread(self._read_lines)
        documents, indexes = self._decode(lines)
        if documents:
            collection.insert_many(list(documents.values()))
        for definition in indexes.values():
            self._create_native_index(collection, definition)
        self._indexes = indexes
        self._collection = collection
        logger.debug("Loaded %d documents from %s", len(documents), self.filename)
        await self._persist()

    def _read_lines(self) -> list[str]:
        assert self.filename is not None
        try:
            with open(self.filename, encoding="utf-8") as handle:
                return handle.read().splitlines()
        except FileNotFoundError:
            return []

    def _decode(
        self, lines: list[str]
    ) -> tuple[dict[Any, dict[str, Any]], dict[str, IndexDefinition]]:
        documents: dict[Any, dict[str, Any]] = {}
        indexes: dict[str, IndexDefinition] = {}
        corrupt = 0
        total = 0
        for line in lines:
            if not line.strip():
                continue
            total += 1
            try:
                record = json_util.loads(line)
                if INDEX_CREATED in record:
                    definition = IndexDefinition.from_record(record[INDEX_CREATED])
                    indexes[definition.name] = definition
                else:
                    documents[record["_id"]] = record
            except (ValueError, KeyError, TypeError):
                corrupt += 1

        if corrupt:
            ratio = corrupt / total
            if ratio > self.corrupt_alert_threshold:
                raise CorruptDataError(
                    f"{corrupt} of {total} lines in {self.filename} are corrupt",
                    extra={
                        "filename": self.filename,
                        "corrupt": corrupt,
                        "total": total,
                        "threshold": self.corrupt_alert_threshold,
                    },
                )
            logger.warning("Skipped %d corrupt lines in %s", corrupt, self.filename)
        return documents, indexes

    def _encode(self) -> str:
        collection = self._require_loaded()
        lines = [
            json_util.dumps({INDEX_CREATED: definition.to_record()})
            for definition in self._indexes.values()
        ]
        lines.extend(json_util.dumps(document) for document in collection.find({}))
        return "".join(f"{line}\n" for line in lines)

    def _write_file(self, payload: str) -> None:
        assert self.filename is not None
        directory = os.path.dirname(self.filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        temporary = f"{self.filename}~"
        with open(temporary, "w", encoding="utf-8") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temporary, self.filename)

    async def _persist(self) -> None:
        if self.in_memory_only:
            return
        async with self._write_lock:
            # Snapshot inside the lock so the last writer always writes the latest state.
            payload = self._encode()
            await asyncio.to_thread(self._write_file, payload)
        logger.debug("Wrote %s", self.filename)

    async def flush(self) -> None:
        """Wait for any in-flight data file write to finish."""
        async with self._write_lock:
            pass

    # --- Documents ----------------------------------------------------------------

    @overload
    async def insert(self, documents: Mapping[str, Any]) -> dict[str, Any]: ...

    @overload
    async def insert(self, documents: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]: ...

    async def insert(
        self, documents: Mapping[str, Any] | Sequence[Mapping[str, Any]]
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """Insert one document or a list of documents; returns them with ids."""
        collection = self._require_loaded()
        if isinstance(documents, Mapping):
            document = {"_id": ObjectId(), **documents}
            try:
                collection.insert_one(document)
            finally:
                await self._persist()
            return document

        batch = [{"_id": ObjectId(), **document} for document in documents]
        if not batch:
            return []
        try:
            collection.insert_many(batch)
        finally:
            await self._persist()
        return batch

    async def remove(self, query: Mapping[str, Any], *, multi: bool = False) -> int:
        """Remove matching documents; only the first unless ``multi``."""
        collection = self._require_loaded()
        if multi:
            removed = collection.delete_many(dict(query)).deleted_count
        else:
            removed = collection.delete_one(dict(query)).deleted_count
        if removed:
            await self._persist()
        return removed

    async def update(
        self,
        query: Mapping[str, Any],
        update: Mapping[str, Any],
        *,
        multi: bool = False,
        upsert: bool = False,
        return_updated_docs: bool = False,
        preserve_created_at: bool = False,
    ) -> UpdateOutcome:
        """Apply ``update`` (operators or a replacement) to matching documents.

        With ``preserve_created_at`` a replacement keeps the createdAt of the
        document it replaces.
        """
        collection = self._require_loaded()
        query = dict(query)
        update = dict(update)

        matched_ids = [
            document["_id"]
            for document in collection.find(query, {"_id": 1}).limit(0 if multi else 1)
        ]
        try:
            if is_operator_update(update):
                if multi:
                    result = collection.update_many(query, update, upsert=upsert)
                else:
                    result = collection.update_one(query, update, upsert=upsert)
                upserted_id = result.upserted_id
            elif matched_ids:
                for matched_id in matched_ids:
                    replacement = update
                    if preserve_created_at:
                        existing = collection.find_one({"_id": matched_id}, {CREATED_AT: 1})
                        replacement = carry_created_at(update, existing)
                    collection.replace_one({"_id": matched_id}, replacement)
                upserted_id = None
            else:
                upserted_id = collection.replace_one(query, update, upsert=upsert).upserted_id
        finally:
            await self._persist()

        was_upsert = upserted_id is not None
        outcome = UpdateOutcome(
            num_affected=1 if was_upsert else len(matched_ids),
            upsert=was_upsert,
        )
        if return_updated_docs:
            ids = [upserted_id] if was_upsert else matched_ids
            documents = list(collection.find({"_id": {"$in": ids}}))
            if multi:
                outcome.affected_documents = documents
            else:
                outcome.affected_documents = documents[0] if documents else None
        return outcome

    def find(
        self, query: Mapping[str, Any], projection: Mapping[str, Any] | None = None
    ) -> Cursor:
        """Start a find; chain sort/skip/limit/projection, then await."""
        return Cursor(self, query, projection)

    async def count(self, query: Mapping[str, Any]) -> int:
        return self._require_loaded().count_documents(dict(query))

    # --- Indexes ------------------------------------------------------------------

    @staticmethod
    def _create_native_index(collection: Any, definition: IndexDefinition) -> None:
        collection.create_index(
            [(name, 1) for name in definition.field_name],
            name=definition.name,
            unique=definition.unique,
            sparse=definition.sparse,
            expireAfterSeconds=definition.expire_after_seconds,
        )

    async def ensure_index(
        self,
        field_name: str | Sequence[str],
        *,
        unique: bool = False,
        sparse: bool = False,
        expire_after_seconds: int | None = None,
    ) -> IndexDefinition:
        """Create an index on ``field_name`` unless an identical one exists."""
        collection = self._require_loaded()
        definition = IndexDefinition(
            field_name=[field_name] if isinstance(field_name, str) else list(field_name),
            unique=unique,
            sparse=sparse,
            expire_after_seconds=expire_after_seconds,
        )
        self._create_native_index(collection, definition)
        if self._indexes.get(definition.name) != definition:
            self._indexes[definition.name] = definition
            await self._persist()
        return definition

    async def remove_index(self, field_name: str | Sequence[str]) -> None:
        """Remove the index on ``field_name``; unknown indexes are ignored."""
        collection = self._require_loaded()
        name = field_name if isinstance(field_name, str) else ",".join(field_name)
        definition = self._indexes.pop(name, None)
        if definition is None:
            logger.debug("No index %r on %r", name, self)
            return
        collection.drop_index(name)
        await self._persist()

    async def get_indexes(self) -> list[IndexDefinition]:
        """Index definitions, starting with the implicit unique ``_id`` index."""
        self._require_loaded()
        return [IndexDefinition([ID_INDEX], unique=True), *self._indexes.values()]

    # --- Lifecycle ----------------------------------------------------------------

    async def drop_database(self) -> None:
        """Remove every document, index and the data file; the store stays loaded.

        Writes made after the drop recreate the file.
        """
        self._require_loaded()
        self._collection = self._reset()
        if self.in_memory_only:
            return
        async with self._write_lock:
            await asyncio.to_thread(self._remove_file)

    def _remove_file(self) -> None:
        assert self.filename is not None
        try:
            os.remove(self.filename)
        except FileNotFoundError:
            pass
