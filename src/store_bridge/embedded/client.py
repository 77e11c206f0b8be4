from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..base.client import BaseClient, ClientState
from .collection import EmbeddedCollection

logger = logging.getLogger(__name__)


class EmbeddedStoreClient(BaseClient):
    """Client for the embedded backend.

    There is no client-level connection; readiness is tracked per collection
    by the deferred each EmbeddedCollection waits on.
    """

    collection_class = EmbeddedCollection

    def connect(self) -> None:
        if self.state is not ClientState.READY:
            self.state = ClientState.READY
            logger.info("Embedded store ready at %s", self.descriptor.url)

    async def ready(self) -> None:
        return None

    async def _open_collection(self, name: str, options: dict[str, Any]) -> Any:
        location = await self.driver.connect(self.descriptor, self.options)
        return await self.driver.get_raw_collection(location, name, {**self.options, **options})

    async def disconnect(self) -> None:
        """Flush pending writes of every open collection and forget them."""
        if self.state is not ClientState.READY:
            return
        self.state = ClientState.CLOSED
        collections = list(self._collections.values())
        await self._forget_collections()
        await asyncio.gather(*(collection.flush() for collection in collections))
        logger.info("Embedded store at %s disconnected", self.descriptor.url)
