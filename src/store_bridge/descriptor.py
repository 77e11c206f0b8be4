"""Connection descriptor parsing.

Grammar:
    memory | memory://          embedded backend, in-memory only
    dir://<path>                embedded backend, one data file per collection
    <path>                      same as dir://<path>
    mongodb://... | mongodb+srv://...
                                network backend, passed verbatim to the driver
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import InvalidDescriptorError

MEMORY_MARKERS = ("memory", "memory://")
DIRECTORY_PREFIX = "dir://"
NETWORK_SCHEMES = ("mongodb://", "mongodb+srv://")


class BackendKind(str, Enum):
    """Which backend a descriptor selects."""

    MEMORY = "memory"
    DIRECTORY = "dir"
    MONGODB = "mongodb"


@dataclass(slots=True, frozen=True)
class ConnectionDescriptor:
    """Parsed, immutable form of a connection URL."""

    url: str
    kind: BackendKind
    location: str | None = None

    @property
    def is_network(self) -> bool:
        return self.kind is BackendKind.MONGODB

    @property
    def in_memory(self) -> bool:
        return self.kind is BackendKind.MEMORY

    @classmethod
    def parse(cls, url: str | None = None) -> ConnectionDescriptor:
        """Parse ``url`` into a descriptor.

        Args:
            url: Connection URL. ``None`` or an empty string selects the
                in-memory embedded backend.

        Returns:
            The parsed descriptor.

        Raises:
            InvalidDescriptorError: If the URL names an unknown scheme or an
                empty directory.
        """
        if not url or url in MEMORY_MARKERS:
            return cls(url=url or "memory", kind=BackendKind.MEMORY)

        if url.startswith(NETWORK_SCHEMES):
            return cls(url=url, kind=BackendKind.MONGODB, location=url)

        if url.startswith(DIRECTORY_PREFIX):
            path = url[len(DIRECTORY_PREFIX):]
            if not path:
                raise InvalidDescriptorError(
                    f"Missing directory in descriptor: {url!r}", extra={"url": url}
                )
            return cls(url=url, kind=BackendKind.DIRECTORY, location=path)

        if "://" in url:
            scheme = url.split("://", 1)[0]
            raise InvalidDescriptorError(
                f"Unsupported scheme {scheme!r} in descriptor: {url!r}",
                extra={"url": url, "scheme": scheme},
            )

        return cls(url=url, kind=BackendKind.DIRECTORY, location=url)
