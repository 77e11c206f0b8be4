"""One-shot deferred values shared by any number of awaiters."""

from __future__ import annotations

import asyncio
from collections.abc import Generator
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Deferred(Generic[T]):
    """A value that becomes available later, resolved from the outside.

    The first call to ``resolve`` or ``reject`` settles the deferred; later calls
    are ignored. Every awaiter, including ones that arrive after settlement,
    observes the same value or the same exception.

    The underlying future is bound to the running event loop on first use, so a
    deferred may be created outside of a loop.

    Example:
        >>> handle: Deferred[int] = Deferred()
        >>> handle.resolve(42)
        >>> await handle
        42
    """

    __slots__ = ("_future",)

    def __init__(self) -> None:
        self._future: asyncio.Future[T] | None = None

    @property
    def future(self) -> asyncio.Future[T]:
        """The future backing this deferred."""
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
        return self._future

    def resolve(self, value: T) -> None:
        """Settle the deferred with ``value`` unless it is already settled."""
        future = self.future
        if not future.done():
            future.set_result(value)

    def reject(self, error: BaseException) -> None:
        """Settle the deferred with ``error`` unless it is already settled."""
        future = self.future
        if future.done():
            return
        future.set_exception(error)
        # Awaiters still receive the error; this only stops asyncio from
        # reporting it as never retrieved when nobody is waiting yet.
        future.exception()

    def done(self) -> bool:
        """Return True once the deferred has been resolved or rejected."""
        return self._future is not None and self._future.done()

    def __await__(self) -> Generator[Any, None, T]:
        # Shielded so that cancelling one awaiter leaves the shared future intact.
        return asyncio.shield(self.future).__await__()
