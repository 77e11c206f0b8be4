"""
Store Bridge - one async collection API over an embedded datastore or MongoDB.

The connection descriptor picks the backend:
- ``memory`` / ``memory://``: embedded, in memory only
- ``dir://<path>``: embedded, one JSON lines data file per collection
- ``mongodb://...``: a MongoDB server through Motor

Usage:
    # Explicit bridge
    from store_bridge import StoreBridge

    async with StoreBridge("dir://./data", timestamp=True) as bridge:
        users = bridge.collection("users")
        await users.insert_one({"name": "Alice"})

    # Process-wide default connection
    import store_bridge

    await store_bridge.init("mongodb://localhost:27017/app")
    users = store_bridge.collection("users")
    await users.find(store_bridge.Field("age") >= 18, sort="-age")
"""

import logging

from .base.fields import CompoundExpression, Field, QueryExpression
from .base.results import (
    DeleteResult,
    IndexInfo,
    InsertManyResult,
    InsertOneResult,
    UpdateResult,
)
from .connection import StoreBridge, close, collection, init, is_connected, reset
from .descriptor import BackendKind, ConnectionDescriptor
from .errors import (
    CorruptDataError,
    DatastoreNotLoadedError,
    InvalidDescriptorError,
    NotConnectedError,
    StoreBridgeError,
    UsageError,
)
from .settings import BridgeSettings, get_settings

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "BackendKind",
    "BridgeSettings",
    "CompoundExpression",
    "ConnectionDescriptor",
    "CorruptDataError",
    "DatastoreNotLoadedError",
    "DeleteResult",
    "Field",
    "IndexInfo",
    "InsertManyResult",
    "InsertOneResult",
    "InvalidDescriptorError",
    "NotConnectedError",
    "QueryExpression",
    "StoreBridge",
    "StoreBridgeError",
    "UpdateResult",
    "UsageError",
    "close",
    "collection",
    "get_settings",
    "init",
    "is_connected",
    "reset",
]
