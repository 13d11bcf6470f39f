import logging
from typing import Optional

from chatline.errors import DeliverySoftFailure, NotFound, ValidationError
from chatline.models.message import MessageDocument
from chatline.realtime.presence import PresenceRegistry
from chatline.repositories.message_repository import MessageRepository
from chatline.repositories.user_repository import UserRepository
from chatline.schemas.message import MessagePublic
from chatline.utils.uploads import Uploader


logger = logging.getLogger(__name__)

NEW_MESSAGE_EVENT = "newMessage"


class DeliveryDispatcher:
    """Persist first, then a best-effort push to the receiver's live connection."""

    def __init__(
        self,
        message_repo: MessageRepository,
        presence: PresenceRegistry,
        uploader: Uploader,
        users: Optional[UserRepository] = None,
    ) -> None:
        self._message_repo = message_repo
        self._presence = presence
        self._uploader = uploader
        self._users = users

    async def send(
        self,
        sender_id: str,
        receiver_id: str,
        text: Optional[str] = None,
        image: Optional[str] = None,
    ) -> MessageDocument:
        text = (text or "").strip() or None
        if not text and not image:
            raise ValidationError("Message must contain text or an image")
        if sender_id == receiver_id:
            raise ValidationError("Cannot send a message to yourself")
        if self._users is not None and await self._users.get_user_by_id(receiver_id) is None:
            raise NotFound("Receiver not found")

        image_url = None
        if image:
            image_url = await self._uploader.upload(image)

        message = await self._message_repo.insert(sender_id, receiver_id, text=text, image_url=image_url)
        await self._push(receiver_id, message)
        return message

    async def _push(self, receiver_id: str, message: MessageDocument) -> bool:
        handle = self._presence.lookup(receiver_id)
        if handle is None:
            return False
        payload = MessagePublic.from_document(message).model_dump(mode="json")
        try:
            await handle.emit(NEW_MESSAGE_EVENT, payload)
        except DeliverySoftFailure as exc:
            logger.warning("Push of message %s to %s dropped: %s", message["_id"], receiver_id, exc.message)
            return False
        except Exception:
            logger.exception("Push of message %s to %s failed", message["_id"], receiver_id)
            return False
        logger.debug("Pushed message %s to %s", message["_id"], receiver_id)
        return True
