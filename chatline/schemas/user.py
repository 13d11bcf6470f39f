from typing import Any, Dict, Optional

from pydantic import BaseModel


class UserPublic(BaseModel):

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    bio: Optional[str] = None
    profile_pic: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "UserPublic":
        return cls(
            id=str(doc["_id"]),
            email=doc.get("email"),
            full_name=doc.get("full_name"),
            bio=doc.get("bio"),
            profile_pic=doc.get("profile_pic"),
        )
