import asyncio
import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from starlette.websockets import WebSocketState

from chatline.errors import DeliverySoftFailure
from chatline.realtime.presence import PresenceRegistry


logger = logging.getLogger(__name__)

ONLINE_USERS_EVENT = "getOnlineUsers"


class WebSocketConnection:
    """Connection handle that emits named JSON events over a WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    async def emit(self, event: str, data: Any) -> None:
        if self.websocket.client_state != WebSocketState.CONNECTED:
            raise DeliverySoftFailure(f"connection closed before {event}")
        try:
            await self.websocket.send_json({"event": event, "data": jsonable_encoder(data)})
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            raise DeliverySoftFailure(f"{event} not delivered: {exc}") from exc


class ConnectionManager:

    def __init__(self, presence: PresenceRegistry) -> None:
        self.presence = presence

    async def connect(self, user_id: str, websocket: WebSocket) -> WebSocketConnection:
        await websocket.accept()
        handle = WebSocketConnection(websocket)
        previous = self.presence.register(user_id, handle)
        if previous is not None:
            logger.info("User %s reconnected; replacing previous connection", user_id)
        else:
            logger.info("User %s connected", user_id)
        await self.broadcast_online_users()
        return handle

    async def disconnect(self, user_id: str, handle: WebSocketConnection) -> None:
        if self.presence.unregister(user_id, handle):
            logger.info("User %s disconnected", user_id)
            await self.broadcast_online_users()

    async def broadcast_online_users(self) -> None:
        handles = self.presence.snapshot()
        online = list(handles)
        results = await asyncio.gather(
            *(handle.emit(ONLINE_USERS_EVENT, online) for handle in handles.values()),
            return_exceptions=True,
        )
        for user_id, result in zip(handles, results):
            if isinstance(result, Exception):
                logger.warning("Presence broadcast to %s failed: %s", user_id, result)
