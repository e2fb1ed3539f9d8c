"""
Session store backends.

Backends:
- memory: process-local, sessions are lost on restart (default, local dev)
- cosmos: Azure Cosmos DB with per-item time-to-live

Usage:
    from persistence import create_session_store

    store = create_session_store(settings)
"""

import logging

from core.data import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)

SESSION_STORE_BACKENDS = ("memory", "cosmos")


def create_session_store(settings) -> SessionStore:
    """
    Create the session store selected by configuration.

    Args:
        settings: Application settings (see config.Settings)

    Returns:
        The configured SessionStore

    Raises:
        ValueError: If the configured backend is unknown
    """
    backend = settings.session_store_backend.lower()

    if backend == "memory":
        logger.info("Using in-memory session store")
        return InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)

    if backend == "cosmos":
        # Imported lazily so the memory backend works without Azure packages configured
        from persistence.cosmos_store import CosmosSessionStore

        logger.info("Using Cosmos DB session store")
        return CosmosSessionStore(
            ttl_seconds=settings.session_ttl_seconds,
            credential=settings.cosmos_key or None,
        )

    raise ValueError(
        f"Unknown session store backend '{settings.session_store_backend}'. "
        f"Expected one of: {', '.join(SESSION_STORE_BACKENDS)}"
    )
