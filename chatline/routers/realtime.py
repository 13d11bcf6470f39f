import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from motor.motor_asyncio import AsyncIOMotorDatabase

from chatline.database.connection import mongo_db_dependency
from chatline.errors import Unauthorized
from chatline.repositories.user_repository import UserRepository
from chatline.utils.dependencies import get_connection_manager
from chatline.utils.security import decode_access_token
from chatline.utils.websocket_manager import ConnectionManager


logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def live_connection(
    websocket: WebSocket,
    manager: ConnectionManager = Depends(get_connection_manager),
    db: AsyncIOMotorDatabase = Depends(mongo_db_dependency),
):
    # browsers cannot set headers on a WebSocket, so the token travels as ?token=...
    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=4401)
        return
    try:
        payload = decode_access_token(token, websocket.app.state.settings)
    except Unauthorized as exc:
        logger.info("Rejected live connection: %s", exc.message)
        await websocket.close(code=4401)
        return

    user_id = payload["sub"]
    if await UserRepository(db).get_user_by_id(user_id) is None:
        logger.info("Rejected live connection for unknown user %s", user_id)
        await websocket.close(code=4401)
        return

    handle = await manager.connect(user_id, websocket)
    try:
        while True:
            # clients only listen; inbound frames are keepalives
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(user_id, handle)
