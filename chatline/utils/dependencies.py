from typing import Optional

from fastapi import Depends, Header, Request, WebSocket
from motor.motor_asyncio import AsyncIOMotorDatabase

from chatline.config import Settings
from chatline.database.connection import mongo_db_dependency
from chatline.errors import Unauthorized
from chatline.realtime.presence import PresenceRegistry
from chatline.repositories.message_repository import MessageRepository
from chatline.repositories.user_repository import UserRepository
from chatline.services.conversation_service import ConversationService
from chatline.services.delivery_service import DeliveryDispatcher
from chatline.utils.security import decode_access_token
from chatline.utils.uploads import Uploader
from chatline.utils.websocket_manager import ConnectionManager


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_presence(request: Request) -> PresenceRegistry:
    return request.app.state.presence


def get_uploader(request: Request) -> Uploader:
    return request.app.state.uploader


def get_connection_manager(websocket: WebSocket) -> ConnectionManager:
    return websocket.app.state.connections


def _extract_token(token: Optional[str], authorization: Optional[str]) -> Optional[str]:
    if token:
        return token
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


async def get_current_user(
    token: Optional[str] = Header(default=None),
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_app_settings),
    db: AsyncIOMotorDatabase = Depends(mongo_db_dependency),
) -> dict:
    raw = _extract_token(token, authorization)
    if not raw:
        raise Unauthorized("Not authorized, token missing")
    payload = decode_access_token(raw, settings)
    user = await UserRepository(db).get_user_by_id(payload["sub"])
    if not user:
        raise Unauthorized("User not found")
    return user


def get_conversation_service(db: AsyncIOMotorDatabase = Depends(mongo_db_dependency)) -> ConversationService:
    return ConversationService(MessageRepository(db), UserRepository(db))


def get_delivery_dispatcher(
    db: AsyncIOMotorDatabase = Depends(mongo_db_dependency),
    presence: PresenceRegistry = Depends(get_presence),
    uploader: Uploader = Depends(get_uploader),
) -> DeliveryDispatcher:
    return DeliveryDispatcher(MessageRepository(db), presence, uploader, users=UserRepository(db))
