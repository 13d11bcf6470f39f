import asyncio
from typing import Any, Dict, List, Optional, Tuple

from chatline.errors import NotFound
from chatline.models.message import MessageDocument
from chatline.repositories.message_repository import MessageRepository
from chatline.repositories.user_repository import UserRepository


class ConversationService:
    # unseen counts are never cached; a cache must be invalidated on send and
    # on mark_seen for the same sender/receiver pair

    def __init__(self, message_repo: MessageRepository, user_repo: Optional[UserRepository] = None) -> None:
        self._message_repo = message_repo
        self._user_repo = user_repo

    async def sidebar(self, viewer_id: str) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        if self._user_repo is None:
            raise RuntimeError("sidebar requires a user repository")
        users = await self._user_repo.list_users_except(viewer_id)
        # the directory may key users differently; never list the viewer
        users = [u for u in users if u["_id"] != viewer_id]
        counts = await asyncio.gather(
            *(self._message_repo.count_unseen(u["_id"], viewer_id) for u in users)
        )
        unseen = {u["_id"]: count for u, count in zip(users, counts) if count > 0}
        return users, unseen

    async def open_conversation(self, viewer_id: str, peer_id: str) -> List[MessageDocument]:
        """Oldest first; the returned `seen` flags predate the mark-seen update."""
        if self._user_repo is not None and await self._user_repo.get_user_by_id(peer_id) is None:
            raise NotFound("User not found")
        messages = await self._message_repo.find_conversation(viewer_id, peer_id)
        await self._message_repo.mark_seen(peer_id, viewer_id)
        return messages

    async def mark_one_seen(self, message_id: str) -> bool:
        return await self._message_repo.mark_seen_by_id(message_id)
