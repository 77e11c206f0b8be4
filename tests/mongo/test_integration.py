"""Checks against a live MongoDB server; set STORE_BRIDGE_TEST_MONGO_URL to run them."""

import os

import pytest

from store_bridge import StoreBridge

MONGO_URL = os.environ.get("STORE_BRIDGE_TEST_MONGO_URL")

pytestmark = [
    pytest.mark.mongo,
    pytest.mark.skipif(not MONGO_URL, reason="STORE_BRIDGE_TEST_MONGO_URL is not set"),
]


class TestLiveServer:
    async def test_handshake_and_native_index_names(self):
        async with StoreBridge(MONGO_URL) as bridge:
            await bridge.ready()
            users = bridge.collection("store_bridge_integration")
            try:
                assert await users.create_index("email", unique=True) == "email"
                names = [info.name for info in await users.list_indexes()]
                assert "email_1" in names
                await users.drop_index("email_1")
            finally:
                await users.drop()

    async def test_unreachable_server(self):
        bridge = StoreBridge("mongodb://127.0.0.1:1/?serverSelectionTimeoutMS=200").connect()
        with pytest.raises(Exception):
            await bridge.ready()
        with pytest.raises(Exception):
            await bridge.disconnect()
