"""
Session Lifecycle.

Creates sessions by binding a fresh id to a widget catalog in the session
store. A session's catalog never changes after creation; there is no update
operation.
"""

import logging
import uuid
from typing import Any, Callable

from .data import SessionStore
from .errors import RequestValidationError
from .models import StartSessionRequest

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    """Generate a random session id. Collisions are treated as impossible."""
    return str(uuid.uuid4())


class SessionLifecycle:
    """Front end to the session store for starting sessions."""

    def __init__(
        self,
        store: SessionStore,
        id_factory: Callable[[], str] = new_session_id,
    ):
        """
        Initialize the lifecycle helper.

        Args:
            store: The session store to seed
            id_factory: Session id generator (replaceable in tests)
        """
        self.store = store
        self._id_factory = id_factory

    async def start(self, catalog: Any) -> str:
        """
        Start a new session bound to ``catalog``.

        The catalog content is not validated beyond being present.

        Returns:
            The new session id

        Raises:
            RequestValidationError: If the catalog is None
            StorageError: If the store write fails
        """
        if catalog is None:
            # A stored None would read back as an absent session
            raise RequestValidationError("catalog is required")

        logger.info("Starting new session...")
        session_id = self._id_factory()
        logger.debug(f"Generated session ID: {session_id}")

        await self.store.put(session_id, catalog)

        logger.info(f"Successfully started session {session_id}")
        return session_id

    async def start_session(self, request: StartSessionRequest) -> str:
        """Start a session from a StartSession wire request."""
        logger.debug(f"StartSession with protocol version {request.protocol_version}")
        return await self.start(request.catalog)
