from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Coroutine
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from ..deferred import Deferred
from ..errors import NotConnectedError, UsageError
from .collection import BaseCollection

if TYPE_CHECKING:
    from ..descriptor import ConnectionDescriptor
    from .backends import DriverAdapter

logger = logging.getLogger(__name__)


class ClientState(str, Enum):
    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    READY = "ready"
    CLOSED = "closed"


class BaseClient(ABC):
    """Owns one driver adapter and one collection adapter per name.

    ``get_collection`` never suspends: the cache slot for a new name is filled
    before the backend open is scheduled, so concurrent first requests for the
    same name share a single open.
    """

    collection_class: ClassVar[type[BaseCollection[Any]]]

    def __init__(
        self,
        driver: DriverAdapter,
        descriptor: ConnectionDescriptor,
        *,
        timestamp: bool = False,
        **options: Any,
    ) -> None:
        self.driver = driver
        self.descriptor = descriptor
        self.timestamp = timestamp
        self.options = options
        self.state = ClientState.UNCONNECTED
        self._collections: dict[str, BaseCollection[Any]] = {}
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def is_connected(self) -> bool:
        return self.state in (ClientState.CONNECTING, ClientState.READY)

    @property
    def collection_names(self) -> list[str]:
        """Names of every collection requested since connect()."""
        return list(self._collections)

    def get_collection(self, name: str, **options: Any) -> BaseCollection[Any]:
        """Return the adapter for ``name``, creating it on first request.

        Args:
            name: Collection name.
            **options: Backend-native collection options, used only when the
                adapter is first created.

        Raises:
            NotConnectedError: If connect() has not been called.
            UsageError: If called outside a running event loop.
        """
        if not self.is_connected:
            raise NotConnectedError(
                f"Cannot open collection {name!r}: client is {self.state.value}",
                extra={"collection": name, "state": self.state.value},
            )

        collection = self._collections.get(name)
        if collection is not None:
            return collection

        # Fails before anything is cached.
        loop = running_loop(f"Opening collection {name!r}")
        handle: Deferred[Any] = Deferred()
        collection = self.collection_class(name, handle, timestamp=self.timestamp)
        self._spawn(loop, self._resolve(name, handle, options))
        self._collections[name] = collection
        return collection

    async def _resolve(self, name: str, handle: Deferred[Any], options: dict[str, Any]) -> None:
        try:
            raw = await self._open_collection(name, options)
        except Exception as exc:
            logger.warning("Failed to open collection %r: %s", name, exc)
            handle.reject(exc)
        else:
            logger.debug("Opened collection %r", name)
            handle.resolve(raw)

    def _spawn(
        self, loop: asyncio.AbstractEventLoop, coro: Coroutine[Any, Any, Any]
    ) -> asyncio.Task[Any]:
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _forget_collections(self) -> None:
        """Wait for in-flight opens, then drop every cached adapter."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._collections.clear()

    @abstractmethod
    def connect(self) -> None:
        """Start establishing the backend; returns without waiting."""
        pass

    @abstractmethod
    async def ready(self) -> None:
        """Wait until the backend is usable."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the backend. Safe to call repeatedly or before connect()."""
        pass

    @abstractmethod
    async def _open_collection(self, name: str, options: dict[str, Any]) -> Any:
        """Open the raw backend collection for ``name``."""
        pass


def running_loop(action: str) -> asyncio.AbstractEventLoop:
    """Return the running loop, or raise UsageError naming ``action``."""
    try:
        return asyncio.get_running_loop()
    except RuntimeError as exc:
        raise UsageError(
            f"{action} requires a running event loop", extra={"action": action}
        ) from exc
