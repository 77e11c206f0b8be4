"""
Backend-neutral pieces shared by every Store Bridge backend.

This package provides the client and collection contracts, the driver adapter
protocol, and the query, index and timestamp normalisation both backends use.
"""

from .client import BaseClient, ClientState
from .collection import BaseCollection, Document, Filter
from .fields import CompoundExpression, Field, QueryExpression
from .query import FindOptions

__all__ = [
    "BaseClient",
    "BaseCollection",
    "ClientState",
    "CompoundExpression",
    "Document",
    "Field",
    "Filter",
    "FindOptions",
    "QueryExpression",
]
