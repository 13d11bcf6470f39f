import threading
from typing import Any, Dict, List, Optional, Protocol


class ConnectionHandle(Protocol):

    async def emit(self, event: str, data: Any) -> None: ...


class PresenceRegistry:
    """Newest live connection per user; records connections, never closes them."""

    def __init__(self) -> None:
        self._handles: Dict[str, ConnectionHandle] = {}
        self._lock = threading.Lock()

    def register(self, user_id: str, handle: ConnectionHandle) -> Optional[ConnectionHandle]:
        with self._lock:
            previous = self._handles.get(user_id)
            self._handles[user_id] = handle
        return previous

    def unregister(self, user_id: str, handle: Optional[ConnectionHandle] = None) -> bool:
        with self._lock:
            current = self._handles.get(user_id)
            if current is None:
                return False
            # a superseded connection closing late must not evict its replacement
            if handle is not None and current is not handle:
                return False
            del self._handles[user_id]
        return True

    def lookup(self, user_id: str) -> Optional[ConnectionHandle]:
        with self._lock:
            return self._handles.get(user_id)

    def is_online(self, user_id: str) -> bool:
        return self.lookup(user_id) is not None

    def online_users(self) -> List[str]:
        with self._lock:
            return list(self._handles)

    def snapshot(self) -> Dict[str, ConnectionHandle]:
        with self._lock:
            return dict(self._handles)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)
