"""Dashboard API layer.

websocket.py: WebSocket connection management for real-time view updates.
Routes are registered by server.create_app().
"""

from .websocket import ConnectionManager

__all__ = [
    "ConnectionManager",
]
