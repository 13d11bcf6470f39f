import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from chatline.errors import StorageError
from chatline.models.message import MessageDocument


logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        logger.error("Message store %s failed: %s", operation, exc)
        raise StorageError() from exc


class MessageRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["messages"]

    async def ensure_indexes(self) -> None:
        with _storage_errors("ensure_indexes"):
            await self.collection.create_index(
                [("sender_id", ASCENDING), ("receiver_id", ASCENDING), ("seen", ASCENDING)]
            )
            await self.collection.create_index(
                [("sender_id", ASCENDING), ("receiver_id", ASCENDING), ("created_at", ASCENDING)]
            )

    async def insert(
        self,
        sender_id: str,
        receiver_id: str,
        text: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> MessageDocument:
        doc: Dict[str, Any] = {
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "text": text,
            "image_url": image_url,
            "seen": False,
            "created_at": datetime.now(timezone.utc),
        }
        with _storage_errors("insert"):
            result = await self.collection.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc  # type: ignore[return-value]

    async def find_conversation(self, user_a: str, user_b: str) -> List[MessageDocument]:
        query = {
            "$or": [
                {"sender_id": user_a, "receiver_id": user_b},
                {"sender_id": user_b, "receiver_id": user_a},
            ]
        }
        with _storage_errors("find_conversation"):
            cursor = self.collection.find(query).sort([("created_at", ASCENDING), ("_id", ASCENDING)])
            items = await cursor.to_list(length=None)
        for it in items:
            it["_id"] = str(it.get("_id"))
        return items

    async def mark_seen(self, from_user: str, to_user: str) -> int:
        with _storage_errors("mark_seen"):
            result = await self.collection.update_many(
                {"sender_id": from_user, "receiver_id": to_user, "seen": False},
                {"$set": {"seen": True}},
            )
        return result.modified_count or 0

    async def mark_seen_by_id(self, message_id: str) -> bool:
        # unknown or malformed ids are a no-op, like any other missing message
        if not ObjectId.is_valid(message_id):
            return False
        with _storage_errors("mark_seen_by_id"):
            result = await self.collection.update_one(
                {"_id": ObjectId(message_id)},
                {"$set": {"seen": True}},
            )
        return bool(result.modified_count)

    async def count_unseen(self, from_user: str, to_user: str) -> int:
        with _storage_errors("count_unseen"):
            return await self.collection.count_documents(
                {"sender_id": from_user, "receiver_id": to_user, "seen": False}
            )
