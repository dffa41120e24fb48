"""
Broadcast Channel - fan-out of task change events to connected WebSocket sessions.

Connections are tracked by a ``ConnectionRegistry`` keyed by connection id
and tagged with the authenticated owner id. ``BroadcastChannel.publish`` is
fire-and-forget: it schedules delivery on the running event loop and returns
immediately, so mutations never wait on, or fail because of, delivery.
"""

import asyncio
import uuid
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field
from starlette.websockets import WebSocketState
from websockets.exceptions import ConnectionClosed

from app.utils.logger import setup_logger

logger = setup_logger("broadcast")

EVENT_TASK_CREATED = "task-created"
EVENT_TASK_UPDATED = "task-updated"
EVENT_TASK_DELETED = "task-deleted"

EventType = Literal["task-created", "task-updated", "task-deleted"]


class ChangeEvent(BaseModel):
    """Ephemeral notification about one task mutation. Never persisted."""

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: EventType
    owner_id: str
    # Full task for created/updated, bare task id for deleted
    data: dict[str, Any] | str
    version: int | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_message(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "eventId": self.event_id,
            "ownerId": self.owner_id,
            "data": self.data,
            "version": self.version,
            "timestamp": self.timestamp,
        }


class ConnectionRegistry:
    """Currently connected sessions. Guarded by an asyncio lock."""

    def __init__(self):
        self._connections: dict[str, tuple[str, WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def add(self, connection_id: str, owner_id: str, websocket: WebSocket):
        async with self._lock:
            self._connections[connection_id] = (owner_id, websocket)
        logger.info(
            f"[WS {connection_id}] Registered session for owner {owner_id} "
            f"({len(self._connections)} active)"
        )

    async def remove(self, connection_id: str) -> bool:
        async with self._lock:
            removed = self._connections.pop(connection_id, None) is not None
        if removed:
            logger.info(
                f"[WS {connection_id}] Unregistered session ({len(self._connections)} active)"
            )
        return removed

    async def recipients(
        self, owner_id: str | None = None
    ) -> list[tuple[str, WebSocket]]:
        """Snapshot of connections, optionally limited to one owner."""
        async with self._lock:
            return [
                (connection_id, websocket)
                for connection_id, (conn_owner, websocket) in self._connections.items()
                if owner_id is None or conn_owner == owner_id
            ]

    def __len__(self) -> int:
        return len(self._connections)


class BroadcastChannel:
    """
    Publishes change events to registered sessions.

    With ``scope="owner"`` an event reaches only sessions authenticated as the
    event's owner. ``scope="all"`` delivers every event to every session.
    """

    def __init__(self, registry: ConnectionRegistry | None = None, scope: str = "owner"):
        if scope not in ("owner", "all"):
            raise ValueError(f"Unknown broadcast scope: {scope}")
        self.registry = registry or ConnectionRegistry()
        self.scope = scope
        self._pending: set[asyncio.Task] = set()

    def publish(self, event: ChangeEvent) -> None:
        """Schedule delivery of ``event``. Never raises."""
        try:
            loop = asyncio.get_running_loop()
            delivery = loop.create_task(self.deliver(event))
        except Exception as e:
            logger.error(
                f"Failed to schedule {event.type} event {event.event_id}: {e}",
                exc_info=True,
            )
            return
        self._pending.add(delivery)
        delivery.add_done_callback(self._pending.discard)

    async def deliver(self, event: ChangeEvent) -> int:
        """Send ``event`` to its recipients. Returns the number of successful sends."""
        try:
            target_owner = event.owner_id if self.scope == "owner" else None
            recipients = await self.registry.recipients(target_owner)
        except Exception as e:
            logger.error(f"Failed to resolve recipients for {event.type}: {e}", exc_info=True)
            return 0

        message = event.to_message()
        delivered = 0
        for connection_id, websocket in recipients:
            if websocket.client_state != WebSocketState.CONNECTED:
                logger.debug(
                    f"[WS {connection_id}] Not connected, removing from active connections"
                )
                await self.registry.remove(connection_id)
                continue
            try:
                await websocket.send_json(message)
                delivered += 1
            except (WebSocketDisconnect, ConnectionClosed, RuntimeError, OSError) as e:
                logger.warning(
                    f"[WS {connection_id}] Failed to push {event.type} event: {e}"
                )
                await self.registry.remove(connection_id)

        logger.debug(
            f"Delivered {event.type} event {event.event_id} to {delivered}/{len(recipients)} sessions"
        )
        return delivered

    async def drain(self) -> None:
        """Wait for every scheduled delivery to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
