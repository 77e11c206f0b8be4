"""Driver adapter interface."""

from .base import DriverAdapter

__all__ = [
    "DriverAdapter",
]
