"""
WebSocket Hub

Owns the accepted WebSocket objects, keyed by connection id. The registry only
stores ids; the hub is the one place that can actually write to a socket.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import WebSocket

from taskflow.core.logging_config import logger
from taskflow.core.types import utcnow


def new_connection_id() -> str:
    return uuid.uuid4().hex


def envelope(event_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": event_type,
        "data": data,
        "timestamp": utcnow().isoformat()
    }


@dataclass
class SocketConnection:
    """An accepted WebSocket and who it belongs to"""
    websocket: WebSocket
    connection_id: str
    user_id: str
    connected_at: datetime = field(default_factory=utcnow)
    last_activity: datetime = field(default_factory=utcnow)


class WebSocketHub:

    def __init__(self):
        self._connections: Dict[str, SocketConnection] = {}
        self._lock = asyncio.Lock()

    async def attach(self, websocket: WebSocket, user_id: str) -> SocketConnection:
        connection = SocketConnection(
            websocket=websocket,
            connection_id=new_connection_id(),
            user_id=user_id
        )
        async with self._lock:
            self._connections[connection.connection_id] = connection
        logger.info(f"WebSocket attached: user {user_id} ({connection.connection_id})")
        return connection

    async def detach(self, connection_id: str) -> Optional[SocketConnection]:
        async with self._lock:
            connection = self._connections.pop(connection_id, None)
        if connection:
            logger.info(f"WebSocket detached: user {connection.user_id} ({connection_id})")
        return connection

    async def send(self, connection_id: str, event_type: str, data: Dict[str, Any]) -> bool:
        """
        Write one envelope to a connection.

        Returns False when the connection is unknown. Transport errors propagate
        to the caller, which decides whether to drop the connection.
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            return False
        await connection.websocket.send_json(envelope(event_type, data))
        connection.last_activity = utcnow()
        return True

    def __len__(self) -> int:
        return len(self._connections)
