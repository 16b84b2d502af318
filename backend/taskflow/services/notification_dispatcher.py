"""
Notification Dispatcher

Pushes named events to connected principals. Delivery is best effort: a
principal without a live connection is skipped, and a connection that fails
on write is dropped from the registry and the hub. Nothing here raises to the
caller.
"""

import asyncio
from enum import Enum
from typing import Any, Dict

from taskflow.core.logging_config import logger
from taskflow.services.connection_registry import ConnectionRegistry
from taskflow.services.websocket_hub import WebSocketHub


class NotificationEvent(str, Enum):
    """Event names pushed to clients"""
    TASK_CREATED = "TASK_CREATED"
    TASK_UPDATED = "TASK_UPDATED"
    TASK_ASSIGNED = "TASK_ASSIGNED"
    TASK_FINISHED = "TASK_FINISHED"
    TASK_DELETED = "TASK_DELETED"

    # Socket-level replies
    PONG = "PONG"
    ERROR = "ERROR"


class NotificationDispatcher:

    def __init__(self, registry: ConnectionRegistry, hub: WebSocketHub):
        self.registry = registry
        self.hub = hub

    async def notify(self, principal_id: str, event: NotificationEvent, payload: Dict[str, Any]) -> bool:
        """Send to one principal's current connection. Returns whether it was delivered."""
        connection_id = self.registry.resolve(principal_id)
        if connection_id is None:
            logger.log_notification(event.value, delivered=0, target=principal_id)
            return False

        delivered = await self._deliver(principal_id, connection_id, event, payload)
        logger.log_notification(event.value, delivered=int(delivered), target=principal_id)
        return delivered

    async def broadcast(self, event: NotificationEvent, payload: Dict[str, Any]) -> int:
        """Send to every registered connection concurrently. Returns the delivered count."""
        results = await asyncio.gather(
            *(
                self._deliver(principal_id, connection_id, event, payload)
                for principal_id, connection_id in self.registry.snapshot().items()
            ),
            return_exceptions=True,
        )
        delivered = sum(1 for result in results if result is True)
        logger.log_notification(event.value, delivered=delivered)
        return delivered

    async def _deliver(self, principal_id: str, connection_id: str,
                       event: NotificationEvent, payload: Dict[str, Any]) -> bool:
        try:
            sent = await self.hub.send(connection_id, event.value, payload)
        except Exception as e:
            logger.warning(f"Dropping connection {connection_id} for user {principal_id}: {e}")
            self.registry.unregister(principal_id, connection_id)
            await self.hub.detach(connection_id)
            return False

        if not sent:
            # Registry entry outlived its socket
            self.registry.unregister(principal_id, connection_id)
        return sent
