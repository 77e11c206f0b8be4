"""MongoDB backend over Motor."""

from .client import MongoStoreClient
from .collection import MongoCollection
from .driver import MotorDriver

__all__ = [
    "MongoCollection",
    "MongoStoreClient",
    "MotorDriver",
]
