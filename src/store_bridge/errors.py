"""Errors raised by the bridge itself.

Backend failures (pymongo errors, duplicate keys, unreachable servers) are never
wrapped; only conditions the bridge detects on its own are typed here.
"""

from __future__ import annotations

from typing import Any


class StoreBridgeError(Exception):
    """Base class for errors raised by store-bridge."""

    error_code: str = "OperationalError"
    default_message: str = "Operational error"

    def __init__(self, message: str | None = None, *, extra: Any = None) -> None:
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error into a JSON-friendly mapping."""
        return {
            "type": "error",
            "error_code": self.error_code,
            "message": self.message,
            "extra": self.extra,
        }


class UsageError(StoreBridgeError):
    """The caller used the API in a way it does not support."""

    error_code = "UsageError"
    default_message = "Invalid usage"


class NotConnectedError(UsageError):
    """An operation was requested before a successful connect()."""

    error_code = "NotConnected"
    default_message = "Not connected; call connect() first"


class InvalidDescriptorError(UsageError):
    """The connection descriptor could not be parsed."""

    error_code = "InvalidDescriptor"
    default_message = "Invalid connection descriptor"


class DatastoreNotLoadedError(StoreBridgeError):
    """An embedded datastore was used before load() completed."""

    error_code = "DatastoreNotLoaded"
    default_message = "Datastore is not loaded"


class CorruptDataError(StoreBridgeError):
    """Too many lines of an embedded data file could not be decoded."""

    error_code = "CorruptData"
    default_message = "Data file is corrupt"
