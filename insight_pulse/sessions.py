"""Server-side session storage.

The browser only ever holds an opaque session id (inside the signed
``SessionMiddleware`` cookie). The authenticated user's projection lives in a
``SessionStore`` that handlers receive through ``deps.get_session_store``.
"""
import abc
import logging
import time
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class SessionStoreError(Exception):
    """Raised when the backing store cannot complete an operation."""


class SessionStore(abc.ABC):
    @abc.abstractmethod
    async def get(self, session_id: str) -> Optional[dict]:
        ...

    @abc.abstractmethod
    async def set(self, session_id: str, user: dict) -> None:
        ...

    @abc.abstractmethod
    async def destroy(self, session_id: str) -> None:
        ...


class MemorySessionStore(SessionStore):
    """Process-local store with a fixed time-to-live per session."""

    def __init__(self, ttl_seconds: int = 60 * 60 * 24, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._data: Dict[str, Tuple[float, dict]] = {}

    async def get(self, session_id: str) -> Optional[dict]:
        entry = self._data.get(session_id)
        if entry is None:
            return None
        expires_at, user = entry
        if self._clock() >= expires_at:
            self._data.pop(session_id, None)
            logger.debug("Session %s... expired", session_id[:8])
            return None
        return dict(user)

    async def set(self, session_id: str, user: dict) -> None:
        self.purge_expired()
        self._data[session_id] = (self._clock() + self.ttl_seconds, dict(user))

    async def destroy(self, session_id: str) -> None:
        self._data.pop(session_id, None)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [sid for sid, (expires_at, _) in self._data.items() if now >= expires_at]
        for sid in expired:
            del self._data[sid]
        return len(expired)

    def __len__(self) -> int:
        return len(self._data)
