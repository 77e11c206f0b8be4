"""Embedded backend: one Datastore per collection, in memory or on disk."""

from .client import EmbeddedStoreClient
from .collection import EmbeddedCollection
from .datastore import Cursor, Datastore, IndexDefinition, UpdateOutcome
from .driver import EmbeddedDriver, EmbeddedLocation

__all__ = [
    "Cursor",
    "Datastore",
    "EmbeddedCollection",
    "EmbeddedDriver",
    "EmbeddedLocation",
    "EmbeddedStoreClient",
    "IndexDefinition",
    "UpdateOutcome",
]
