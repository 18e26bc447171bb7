"""Tests for the view-update connection manager."""

import json

import pytest

from src.monitoring.api.websocket import ConnectionManager


class FakeClient:
    """Stands in for a FastAPI WebSocket."""

    def __init__(self, fail: bool = False) -> None:
        self.accepted = False
        self.sent: list[str] = []
        self._fail = fail

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, payload: str) -> None:
        if self._fail:
            raise RuntimeError("socket closed")
        self.sent.append(payload)


class TestConnectionManager:
    """Tests for connect, disconnect and broadcast."""

    @pytest.mark.asyncio
    async def test_connect_accepts_and_counts(self) -> None:
        manager = ConnectionManager()
        client = FakeClient()

        await manager.connect(client)

        assert client.accepted
        assert manager.connection_count == 1

    @pytest.mark.asyncio
    async def test_broadcast_reaches_every_client(self) -> None:
        manager = ConnectionManager()
        first, second = FakeClient(), FakeClient()
        await manager.connect(first)
        await manager.connect(second)

        await manager.broadcast({"type": "view_update", "data": {"history_depth": 1}})

        assert json.loads(first.sent[0])["type"] == "view_update"
        assert second.sent == first.sent

    @pytest.mark.asyncio
    async def test_failed_send_drops_client(self) -> None:
        manager = ConnectionManager()
        healthy, broken = FakeClient(), FakeClient(fail=True)
        await manager.connect(healthy)
        await manager.connect(broken)

        await manager.broadcast({"type": "view_update"})

        assert manager.connection_count == 1
        assert len(healthy.sent) == 1

    @pytest.mark.asyncio
    async def test_disconnect_unknown_client_is_harmless(self) -> None:
        manager = ConnectionManager()
        await manager.connect(FakeClient())

        await manager.disconnect(FakeClient())

        assert manager.connection_count == 1
