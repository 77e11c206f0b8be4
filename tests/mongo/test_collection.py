"""MongoDB collection adapter details not covered by the shared behaviour suite."""

from types import SimpleNamespace

import pytest

from store_bridge.deferred import Deferred
from store_bridge.mongo import MongoCollection


class RecordingCollection:
    """Records the driver calls a MongoCollection makes."""

    def __init__(self):
        self.calls = []

    async def update_one(self, query, update, **kwargs):
        self.calls.append(("update_one", query, update, kwargs))
        return SimpleNamespace(matched_count=1, upserted_id=None, acknowledged=True)

    async def replace_one(self, query, document, **kwargs):
        self.calls.append(("replace_one", query, document, kwargs))
        return SimpleNamespace(matched_count=1, upserted_id=None, acknowledged=True)

    async def find_one(self, query, **kwargs):
        self.calls.append(("find_one", query, kwargs))
        return {"_id": 1, "createdAt": "then"}

    async def create_index(self, keys, **kwargs):
        self.calls.append(("create_index", keys, kwargs))
        return "_".join(f"{name}_{direction}" for name, direction in keys)

    def find(self, query, **kwargs):
        self.calls.append(("find", query, kwargs))
        return SimpleNamespace(to_list=self._to_list)

    async def _to_list(self, length=None):
        return []


@pytest.fixture
async def recorded():
    raw = RecordingCollection()
    handle = Deferred()
    handle.resolve(raw)
    return MongoCollection("users", handle), raw


class TestMongoCollection:
    async def test_replacement_keeps_created_at(self):
        raw = RecordingCollection()
        handle = Deferred()
        handle.resolve(raw)
        collection = MongoCollection("users", handle, timestamp=True)

        await collection.update_one({"a": 1}, {"b": 2})

        assert raw.calls[0] == ("find_one", {"a": 1}, {"projection": {"createdAt": 1}})
        name, query, document, _ = raw.calls[1]
        assert (name, query) == ("replace_one", {"a": 1})
        assert document["createdAt"] == "then"
        assert document["b"] == 2
        assert "updatedAt" in document

    async def test_replacement_routed_to_replace_one(self, recorded):
        collection, raw = recorded
        await collection.update_one({"a": 1}, {"b": 2}, upsert=True)
        assert raw.calls == [("replace_one", {"a": 1}, {"b": 2}, {"upsert": True})]

    async def test_operator_update_uses_update_one(self, recorded):
        collection, raw = recorded
        await collection.update_one({"a": 1}, {"$set": {"b": 2}})
        assert raw.calls[0][0] == "update_one"

    async def test_create_index_options(self, recorded):
        collection, raw = recorded
        name = await collection.create_index({"b": -1, "a": 1}, unique=True, expire_after_seconds=60)
        assert name == "a,b"
        assert raw.calls == [
            (
                "create_index",
                [("b", -1), ("a", 1)],
                {"unique": True, "sparse": False, "expireAfterSeconds": 60},
            )
        ]

    async def test_find_options(self, recorded):
        collection, raw = recorded
        await collection.find({"a": 1}, sort="-a", skip=2, limit=3, projection=["a"])
        assert raw.calls == [
            (
                "find",
                {"a": 1},
                {"skip": 2, "limit": 3, "sort": [("a", -1)], "projection": {"a": 1}},
            )
        ]

    async def test_find_without_options(self, recorded):
        collection, raw = recorded
        await collection.find()
        assert raw.calls == [("find", {}, {"skip": 0, "limit": 0})]
