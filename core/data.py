"""
Data Layer: Session Store.

The session store is the only persistence the server has. It maps a session id
to the widget catalog the session was started with.

Key principles:
- The store is key-value only: ``put`` and ``get``
- Catalogs are opaque JSON values; the store never inspects them
- Sessions expire after a time-to-live; expired sessions read as absent
- Backends are chosen by configuration and injected, never imported globally
"""

import copy
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """
    Abstract base class for session stores.

    Implementations must treat a read or write for one session id as atomic.
    Callers do no locking of their own.

    Example:
        class RedisSessionStore(SessionStore):
            async def put(self, session_id, catalog):
                await self._redis.set(session_id, json.dumps(catalog), ex=self.ttl_seconds)
    """

    @abstractmethod
    async def put(self, session_id: str, catalog: Any) -> None:
        """
        Store (or overwrite) the catalog for a session.

        Args:
            session_id: The session's unique identifier
            catalog: The widget catalog JSON value

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def get(self, session_id: str) -> Optional[Any]:
        """
        Look up the catalog for a session.

        Args:
            session_id: The session's unique identifier

        Returns:
            The catalog if the session exists and has not expired, None otherwise

        Raises:
            StorageError: If the read fails
        """
        pass

    async def close(self) -> None:
        """Release any backend resources."""
        return None


@dataclass
class _StoredSession:
    catalog: Any
    expires_at: Optional[float]


class InMemorySessionStore(SessionStore):
    """
    Process-local session store.

    Used for local development and tests. Expired entries are evicted when
    they are read and, across the whole store, on every write.
    """

    def __init__(
        self,
        ttl_seconds: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            ttl_seconds: Session lifetime; 0 disables expiry
            clock: Time source in seconds, replaceable in tests
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, _StoredSession] = {}

    def _evict_expired(self, now: float) -> None:
        expired = [
            session_id for session_id, stored in self._sessions.items()
            if stored.expires_at is not None and now >= stored.expires_at
        ]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info(f"Evicted {len(expired)} expired sessions")

    async def put(self, session_id: str, catalog: Any) -> None:
        now = self._clock()
        self._evict_expired(now)
        expires_at = now + self.ttl_seconds if self.ttl_seconds else None
        # Copy so later mutation by the caller cannot change the stored catalog
        self._sessions[session_id] = _StoredSession(copy.deepcopy(catalog), expires_at)
        logger.debug(f"Stored catalog in memory for session ID: {session_id}")

    async def get(self, session_id: str) -> Optional[Any]:
        stored = self._sessions.get(session_id)
        if stored is None:
            logger.warning(f"No session found for ID: {session_id}")
            return None

        if stored.expires_at is not None and self._clock() >= stored.expires_at:
            del self._sessions[session_id]
            logger.info(f"Session {session_id} expired and was evicted")
            return None

        return copy.deepcopy(stored.catalog)

    def __len__(self) -> int:
        return len(self._sessions)
