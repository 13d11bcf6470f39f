from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.websockets import WebSocketDisconnect, WebSocketState

from chatline.errors import DeliverySoftFailure
from chatline.realtime.presence import PresenceRegistry
from chatline.utils.websocket_manager import ONLINE_USERS_EVENT, ConnectionManager, WebSocketConnection
from doubles import ClosedHandle, RecordingHandle


def fake_socket(state=WebSocketState.CONNECTED):
    ws = MagicMock()
    ws.client_state = state
    ws.accept = AsyncMock()
    ws.send_json = AsyncMock()
    return ws


class TestWebSocketConnection:

    @pytest.mark.asyncio
    async def test_emit_sends_named_event(self):
        ws = fake_socket()
        await WebSocketConnection(ws).emit("newMessage", {"text": "hi"})
        ws.send_json.assert_awaited_once_with({"event": "newMessage", "data": {"text": "hi"}})

    @pytest.mark.asyncio
    async def test_emit_on_closed_socket_is_soft_failure(self):
        ws = fake_socket(WebSocketState.DISCONNECTED)
        with pytest.raises(DeliverySoftFailure):
            await WebSocketConnection(ws).emit("newMessage", {})
        ws.send_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_disconnect_during_send_is_soft_failure(self):
        ws = fake_socket()
        ws.send_json.side_effect = WebSocketDisconnect(code=1006)
        with pytest.raises(DeliverySoftFailure):
            await WebSocketConnection(ws).emit("newMessage", {})


class TestConnectionManager:

    @pytest.mark.asyncio
    async def test_connect_registers_and_broadcasts(self):
        presence = PresenceRegistry()
        other = RecordingHandle()
        presence.register("bob", other)
        manager = ConnectionManager(presence)
        ws = fake_socket()

        handle = await manager.connect("alice", ws)

        ws.accept.assert_awaited_once()
        assert presence.lookup("alice") is handle
        assert other.events == [(ONLINE_USERS_EVENT, ["bob", "alice"])]
        ws.send_json.assert_awaited_once_with({"event": ONLINE_USERS_EVENT, "data": ["bob", "alice"]})

    @pytest.mark.asyncio
    async def test_disconnect_of_replaced_connection_keeps_new_one(self):
        presence = PresenceRegistry()
        manager = ConnectionManager(presence)
        old = await manager.connect("alice", fake_socket())
        new = await manager.connect("alice", fake_socket())

        await manager.disconnect("alice", old)

        assert presence.lookup("alice") is new

    @pytest.mark.asyncio
    async def test_broadcast_tolerates_dead_handles(self):
        presence = PresenceRegistry()
        dead, alive = ClosedHandle(), RecordingHandle()
        presence.register("dead", dead)
        presence.register("alive", alive)

        await ConnectionManager(presence).broadcast_online_users()

        assert dead.attempts == 1
        assert alive.events == [(ONLINE_USERS_EVENT, ["dead", "alive"])]
