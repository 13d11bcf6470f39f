from typing import Any, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from chatline.errors import StorageError
from chatline.models.user import UserDocument


# never hand credential material to the messaging layer
_PUBLIC_PROJECTION = {"password": 0, "hashed_password": 0}


class UserRepository:
    """Read-only view over the identity service's ``users`` collection."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._collection = db.get_collection("users")

    @staticmethod
    def _key(user_id: str) -> Any:
        return ObjectId(user_id) if ObjectId.is_valid(user_id) else user_id

    async def get_user_by_id(self, user_id: str) -> Optional[UserDocument]:
        try:
            user = await self._collection.find_one({"_id": self._key(user_id)}, _PUBLIC_PROJECTION)
        except PyMongoError as exc:
            raise StorageError() from exc
        if user:
            user["_id"] = str(user["_id"])  # normalize to string for API layer
        return user

    async def list_users_except(self, user_id: str) -> List[UserDocument]:
        try:
            cursor = self._collection.find({"_id": {"$ne": self._key(user_id)}}, _PUBLIC_PROJECTION)
            users = await cursor.to_list(length=None)
        except PyMongoError as exc:
            raise StorageError() from exc
        for user in users:
            user["_id"] = str(user["_id"])
        return users
