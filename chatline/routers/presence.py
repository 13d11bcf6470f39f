from fastapi import APIRouter, Depends

from chatline.realtime.presence import PresenceRegistry
from chatline.utils.dependencies import get_current_user, get_presence


router = APIRouter(prefix="/api/presence", tags=["presence"])


@router.get("")
async def online_users(current_user: dict = Depends(get_current_user), presence: PresenceRegistry = Depends(get_presence)):
    return {"success": True, "online_users": presence.online_users()}


@router.get("/{user_id}")
async def presence_status(user_id: str, current_user: dict = Depends(get_current_user), presence: PresenceRegistry = Depends(get_presence)):
    """Online status from this process's live connections."""
    return {"success": True, "user_id": user_id, "online": presence.is_online(user_id)}
