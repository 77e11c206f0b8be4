from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..errors import UsageError
from .datastore import Datastore

if TYPE_CHECKING:
    from ..descriptor import ConnectionDescriptor

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class EmbeddedLocation:
    """Where the embedded collections of one client live."""

    directory: str | None = None

    @property
    def in_memory(self) -> bool:
        return self.directory is None


def collection_path(directory: str, name: str, extension: str) -> str:
    """Absolute path of the data file holding collection ``name``."""
    if not name or name in (".", "..") or "/" in name or os.sep in name or "\x00" in name:
        raise UsageError(f"Invalid collection name: {name!r}", extra={"collection": name})
    return os.path.join(os.path.abspath(directory), f"{name}.{extension}")


class EmbeddedDriver:
    """Driver adapter for the embedded backend.

    There is no shared connection: ``connect`` only resolves where data lives,
    and every collection is its own Datastore, loaded on first request.
    """

    def __init__(
        self,
        datastore_class: type[Datastore] = Datastore,
        *,
        extension: str = "jsonl",
    ) -> None:
        self.datastore_class = datastore_class
        self.extension = extension.lstrip(".")

    async def connect(
        self, descriptor: ConnectionDescriptor, options: dict[str, Any]
    ) -> EmbeddedLocation:
        if descriptor.in_memory:
            return EmbeddedLocation()
        return EmbeddedLocation(directory=descriptor.location)

    def close(self, client: EmbeddedLocation) -> None:
        logger.debug("Nothing to close for embedded location %s", client)

    async def get_raw_collection(
        self, client: EmbeddedLocation, name: str, options: dict[str, Any]
    ) -> Datastore:
        if client.in_memory:
            datastore = self.datastore_class(in_memory_only=True, **options)
        else:
            assert client.directory is not None
            filename = collection_path(client.directory, name, self.extension)
            datastore = self.datastore_class(filename, **options)
        await datastore.load()
        logger.debug("Loaded %r for collection %r", datastore, name)
        return datastore
