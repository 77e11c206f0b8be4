"""Connection management: pick a backend from a descriptor and hand out collections."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Self

from .base.backends import DriverAdapter
from .descriptor import ConnectionDescriptor
from .embedded import EmbeddedDriver, EmbeddedStoreClient
from .errors import NotConnectedError, UsageError
from .mongo import MongoStoreClient, MotorDriver
from .settings import get_settings

if TYPE_CHECKING:
    from .base.client import BaseClient
    from .base.collection import BaseCollection

logger = logging.getLogger(__name__)


def build_client(
    descriptor: ConnectionDescriptor,
    *,
    driver: DriverAdapter | None = None,
    timestamp: bool = False,
    **options: Any,
) -> BaseClient:
    """Build the client matching ``descriptor``; it is not connected yet.

    Raises:
        UsageError: If ``driver`` lacks the driver adapter methods.
    """
    if driver is not None and not isinstance(driver, DriverAdapter):
        raise UsageError(
            f"{type(driver).__name__} is not a driver adapter",
            extra={"driver": type(driver).__name__},
        )
    if descriptor.is_network:
        return MongoStoreClient(
            driver or MotorDriver(), descriptor, timestamp=timestamp, **options
        )

    settings = get_settings()
    options.setdefault("corrupt_alert_threshold", settings.corrupt_alert_threshold)
    return EmbeddedStoreClient(
        driver or EmbeddedDriver(extension=settings.datafile_extension),
        descriptor,
        timestamp=timestamp,
        **options,
    )


class StoreBridge:
    """Entry point: one backend, chosen by the connection descriptor.

    Args:
        url: ``memory``, ``memory://``, ``dir://<path>`` or a ``mongodb://``
            URL. Defaults to the configured URL, ``memory`` unless overridden.
        driver: Driver adapter to use instead of the default for the backend.
        timestamp: Stamp ``createdAt``/``updatedAt`` on writes. Defaults to
            the configured value.
        **options: Passed unmodified to the backend driver.

    Example:
        >>> async with StoreBridge("memory", timestamp=True) as bridge:
        ...     people = bridge.collection("people")
        ...     await people.insert_one({"name": "a"})
        ...     await people.count_documents({"name": "a"})
        1
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        driver: DriverAdapter | None = None,
        timestamp: bool | None = None,
        **options: Any,
    ) -> None:
        settings = get_settings()
        self.descriptor = ConnectionDescriptor.parse(url or settings.url)
        self.timestamp = settings.timestamp if timestamp is None else timestamp
        self._client = build_client(
            self.descriptor, driver=driver, timestamp=self.timestamp, **options
        )

    def __repr__(self) -> str:
        return f"StoreBridge({self.descriptor.kind.value!r}, state={self._client.state.value!r})"

    @property
    def client(self) -> BaseClient:
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client.is_connected

    def connect(self) -> Self:
        """Start connecting to the backend without waiting for it.

        The MongoDB backend must be connected from within a running event loop.
        """
        self._client.connect()
        return self

    async def ready(self) -> None:
        """Wait until the backend connection is established."""
        if not self.is_connected:
            raise NotConnectedError()
        await self._client.ready()

    def collection(self, name: str, **options: Any) -> BaseCollection[Any]:
        """Return the collection adapter for ``name``.

        Raises:
            NotConnectedError: If connect() has not been called.
        """
        return self._client.get_collection(name, **options)

    async def disconnect(self) -> None:
        """Release the backend. Safe to call when never connected or twice."""
        await self._client.disconnect()

    async def __aenter__(self) -> Self:
        return self.connect()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.disconnect()


_default: StoreBridge | None = None


async def init(url: str | None = None, *, wait: bool = False, **options: Any) -> StoreBridge:
    """
    Initialize the process-wide default connection.

    Args:
        url: Connection descriptor (see StoreBridge)
        wait: Wait for the backend handshake before returning
        **options: Passed to StoreBridge

    Returns:
        The connected default StoreBridge

    Example:
        >>> await init("dir://./data", timestamp=True)
        >>> users = collection("users")

    Raises:
        UsageError: If a default connection already exists
    """
    global _default
    if _default is not None:
        raise UsageError("Already initialized; call close() first")
    bridge = StoreBridge(url, **options).connect()
    _default = bridge
    logger.debug("Default connection initialized: %r", bridge)
    if wait:
        await bridge.ready()
    return bridge


def collection(name: str, **options: Any) -> BaseCollection[Any]:
    """
    Return a collection of the default connection.

    Raises:
        NotConnectedError: If init() has not been called
    """
    if _default is None:
        raise NotConnectedError(f"Cannot open collection {name!r}: call init() first")
    return _default.collection(name, **options)


async def close() -> None:
    """Disconnect and forget the default connection. No-op if there is none."""
    global _default
    bridge, _default = _default, None
    if bridge is not None:
        await bridge.disconnect()


def is_connected() -> bool:
    """Check whether a default connection is active."""
    return _default is not None and _default.is_connected


def reset() -> None:
    """Forget the default connection without disconnecting it."""
    global _default
    _default = None
