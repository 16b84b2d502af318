"""
Push channel

Connection URL: WS /api/v1/ws?token=<jwt>

Server events:
- TASK_CREATED / TASK_UPDATED / TASK_DELETED: broadcast to everyone connected
- TASK_ASSIGNED: to the new assignee only
- TASK_FINISHED: to the task creator only
- PONG: reply to {"type": "ping"}
- ERROR: malformed client message

A principal has at most one live connection; connecting again replaces it.
"""

import json
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from sqlalchemy import select

from taskflow.core.database import get_session_local
from taskflow.core.exceptions import AuthenticationError
from taskflow.core.logging_config import logger
from taskflow.core.security import principal_from_token
from taskflow.core.types import utcnow
from taskflow.models.user import User
from taskflow.services.notification_dispatcher import NotificationEvent


router = APIRouter()


async def get_user_from_token(token: Optional[str]) -> Optional[User]:
    """Validate JWT token and return user."""
    if not token:
        return None
    try:
        user_id = principal_from_token(token)
    except AuthenticationError:
        return None

    async with get_session_local()() as db:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()


@router.websocket("/ws")
async def notifications_websocket(
    websocket: WebSocket,
    token: Optional[str] = Query(None)
):
    user = await get_user_from_token(token)
    if not user:
        await websocket.close(code=4001, reason="Invalid or expired token")
        return

    state = websocket.app.state
    registry, hub = state.registry, state.hub
    user_id = str(user.id)

    await websocket.accept()
    connection = await hub.attach(websocket, user_id)
    replaced = registry.register(user_id, connection.connection_id)
    if replaced:
        logger.info(f"User {user_id} reconnected, superseding connection {replaced}")

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await hub.send(connection.connection_id, NotificationEvent.ERROR.value,
                               {"error": "invalid_json", "message": "Invalid JSON message"})
                continue

            event_type = message.get("type", "") if isinstance(message, dict) else ""
            if event_type == "ping":
                await hub.send(connection.connection_id, NotificationEvent.PONG.value,
                               {"serverTime": utcnow().isoformat()})
            else:
                logger.debug(f"Unknown WebSocket event type: {event_type}")

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for user {user_id}")
    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)
    finally:
        registry.unregister(user_id, connection.connection_id)
        await hub.detach(connection.connection_id)
