"""Shared fixtures: the same bridge contract against every backend."""

from __future__ import annotations

import os

import pytest

from store_bridge import StoreBridge
from store_bridge.settings import get_settings

from .stubs import StubMotorDriver

LIVE_MONGO_URL = os.environ.get("STORE_BRIDGE_TEST_MONGO_URL")

BACKENDS = ["memory", "memory://", "dir", "mongodb-stub"]
if LIVE_MONGO_URL:
    BACKENDS.append("mongodb-live")


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Keep the process environment from leaking into bridge defaults."""
    for name in list(os.environ):
        if name.startswith("STORE_BRIDGE_") and name != "STORE_BRIDGE_TEST_MONGO_URL":
            monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(params=BACKENDS)
def backend(request):
    return request.param


@pytest.fixture
async def make_bridge(backend, tmp_path):
    """Factory for connected bridges on the selected backend; all are disconnected after the test."""
    bridges: list[StoreBridge] = []

    def factory(**options) -> StoreBridge:
        if backend == "dir":
            bridge = StoreBridge(f"dir://{tmp_path / 'data'}", **options)
        elif backend == "mongodb-stub":
            bridge = StoreBridge("mongodb://localhost:27017/test", driver=StubMotorDriver(), **options)
        elif backend == "mongodb-live":
            bridge = StoreBridge(LIVE_MONGO_URL, **options)
        else:
            bridge = StoreBridge(backend, **options)
        bridges.append(bridge.connect())
        return bridge

    yield factory

    for bridge in bridges:
        if backend == "mongodb-live" and bridge.is_connected:
            for name in bridge.client.collection_names:
                await bridge.collection(name).drop()
        await bridge.disconnect()


@pytest.fixture
async def bridge(make_bridge):
    return make_bridge()
