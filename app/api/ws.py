"""
WebSocket API Routes - live task change notifications.

A client connects to ``/api/ws?token=<jwt>``. Once authenticated, the
connection is registered with the broadcast channel under the token's owner
id and receives ``task-created`` / ``task-updated`` / ``task-deleted``
frames until it disconnects. There is no replay: a client that reconnects
must re-list its tasks over REST.
"""

import uuid
from datetime import UTC, datetime

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from starlette.websockets import WebSocketState

from app.config import settings
from app.errors import AuthError
from app.services.auth_service import AuthService
from app.services.broadcast import BroadcastChannel
from app.utils.logger import setup_logger

logger = setup_logger("api.ws")

router = APIRouter(prefix=settings.api_prefix)


@router.websocket("/ws")
async def websocket_task_events(
    websocket: WebSocket,
    token: str | None = Query(None, description="Bearer token issued at login"),
):
    """
    Subscribe to task change events for the authenticated owner.

    Invalid tokens are refused with close code 1008. Text frames reading
    ``ping`` are answered with ``pong``; anything else is ignored.
    """
    try:
        owner_id = AuthService().authenticate(token)
    except AuthError:
        logger.info("Rejected WebSocket connection with missing or invalid token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    channel: BroadcastChannel = websocket.app.state.broadcast_channel
    connection_id = str(uuid.uuid4())

    await websocket.accept()
    await channel.registry.add(connection_id, str(owner_id), websocket)

    try:
        await websocket.send_json(
            {
                "type": "connected",
                "connectionId": connection_id,
                "ownerId": str(owner_id),
                "scope": channel.scope,
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )
        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.info(f"[WS {connection_id}] Client disconnected.")
    except Exception as e:
        logger.error(
            f"[WS {connection_id}] Error in event subscription: {e}", exc_info=True
        )
    finally:
        await channel.registry.remove(connection_id)
        if websocket.client_state != WebSocketState.DISCONNECTED:
            try:
                await websocket.close()
            except Exception as e_close:
                logger.warning(
                    f"[WS {connection_id}] Error during WebSocket close: {e_close}"
                )
