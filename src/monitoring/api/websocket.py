"""WebSocket fan-out of dashboard view updates.

Every client watching the dashboard receives the same display state after
each mutator or transport event. Clients that fail a send are dropped.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Clients subscribed to view updates."""

    def __init__(self) -> None:
        self._clients: list[WebSocket] = []
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a client; it starts receiving view updates immediately."""
        await websocket.accept()
        async with self._lock:
            self._clients.append(websocket)
        logger.info("View client connected (%d watching)", len(self._clients))

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            if websocket in self._clients:
                self._clients.remove(websocket)
        logger.info("View client left (%d watching)", len(self._clients))

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Push one view message to every client, dropping unreachable ones."""
        if not self._clients:
            return

        payload = json.dumps(message)
        async with self._lock:
            stale: list[WebSocket] = []
            for client in self._clients:
                try:
                    await client.send_text(payload)
                except Exception as e:
                    logger.warning("Dropping view client after failed send: %s", e)
                    stale.append(client)
            self._clients = [c for c in self._clients if c not in stale]

    @property
    def connection_count(self) -> int:
        return len(self._clients)
