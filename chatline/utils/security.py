from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from chatline.config import Settings, get_settings
from chatline.errors import Unauthorized


def create_access_token(user_id: str, expires_minutes: int = 60 * 24 * 7, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    payload = {"sub": user_id, "iat": now, "exp": now + timedelta(minutes=expires_minutes)}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings | None = None) -> Dict[str, Any]:
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        raise Unauthorized("Invalid or expired token") from exc
    if not payload.get("sub"):
        raise Unauthorized("Token has no subject")
    return payload
