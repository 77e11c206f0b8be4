from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection

if TYPE_CHECKING:
    from ..descriptor import ConnectionDescriptor

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "test"


class MotorDriver:
    """Driver adapter for a MongoDB server reached through Motor."""

    def __init__(self, client_class: type[AsyncIOMotorClient] = AsyncIOMotorClient) -> None:
        self.client_class = client_class

    async def connect(
        self, descriptor: ConnectionDescriptor, options: dict[str, Any]
    ) -> AsyncIOMotorClient:
        """Create a client and complete a handshake with the server.

        Raises:
            pymongo.errors.PyMongoError: If the server is unreachable or
                rejects the credentials.
        """
        client = self.client_class(descriptor.url, **options)
        try:
            await client.admin.command("ping")
        except Exception:
            client.close()
            raise
        return client

    def close(self, client: AsyncIOMotorClient) -> None:
        client.close()

    async def get_raw_collection(
        self, client: AsyncIOMotorClient, name: str, options: dict[str, Any]
    ) -> AsyncIOMotorCollection:
        database = client.get_default_database(default=DEFAULT_DATABASE)
        logger.debug("Using collection %s.%s", database.name, name)
        return database.get_collection(name, **options)
