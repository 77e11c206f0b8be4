from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from ...descriptor import ConnectionDescriptor

C = TypeVar("C")
R = TypeVar("R", covariant=True)


@runtime_checkable
class DriverAdapter(Protocol[C, R]):
    """Capability interface every storage driver adapter implements.

    ``C`` is the raw client handle returned by ``connect`` and ``R`` the raw
    collection handle a collection adapter operates on.
    """

    async def connect(self, descriptor: ConnectionDescriptor, options: dict[str, Any]) -> C:
        """Establish (or locate) the backend described by ``descriptor``."""
        ...

    def close(self, client: C) -> None:
        """Release the raw client. Best effort."""
        ...

    async def get_raw_collection(self, client: C, name: str, options: dict[str, Any]) -> R:
        """Return the raw collection handle for ``name``."""
        ...
