from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from chatline.models.message import MessageDocument


class SendMessageRequest(BaseModel):

    text: Optional[str] = None
    # data URI or url handed to the upload service
    image: Optional[str] = None


class MessagePublic(BaseModel):

    id: str
    sender_id: str
    receiver_id: str
    text: Optional[str] = None
    image_url: Optional[str] = None
    seen: bool = False
    created_at: datetime

    @classmethod
    def from_document(cls, doc: MessageDocument) -> "MessagePublic":
        return cls(
            id=str(doc["_id"]),
            sender_id=doc["sender_id"],
            receiver_id=doc["receiver_id"],
            text=doc.get("text"),
            image_url=doc.get("image_url"),
            seen=bool(doc.get("seen", False)),
            created_at=doc["created_at"],
        )
