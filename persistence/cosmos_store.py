"""
Azure Cosmos DB-based session store.

Each session is one document in the sessions container:

    {"id": <session id>, "catalog": <catalog>, "created_at": <iso time>, "ttl": <seconds>}

Expiry is delegated to Cosmos DB's per-item time-to-live. The container must
have TTL enabled (default TTL -1) for the ``ttl`` field to take effect.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from azure.cosmos import CosmosClient
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError
from azure.identity import DefaultAzureCredential

from core.data import SessionStore
from core.errors import StorageError
from shared.cosmos_config import (
    COSMOS_ENDPOINT,
    DATABASE_NAME,
    GENUI_CONTAINER_NAMES,
    get_container_config,
)

logger = logging.getLogger(__name__)


class CosmosSessionStore(SessionStore):
    """
    Azure Cosmos DB-based persistent store for session catalogs.
    """

    def __init__(
        self,
        endpoint: str = COSMOS_ENDPOINT,
        database_name: str = DATABASE_NAME,
        sessions_container: str = GENUI_CONTAINER_NAMES["sessions"],
        ttl_seconds: int = 0,
        credential: Optional[Any] = None,
    ):
        """
        Initialize the Cosmos DB store.

        Args:
            endpoint: Cosmos DB endpoint URL
            database_name: Database name
            sessions_container: Container name for sessions
            ttl_seconds: Session lifetime written to each document; 0 disables expiry
            credential: Account key or token credential (DefaultAzureCredential if omitted)
        """
        self.endpoint = endpoint
        self.database_name = database_name
        self.sessions_container_name = sessions_container
        self.ttl_seconds = ttl_seconds

        logger.info("Initializing Cosmos DB connection...")
        self._owns_credential = credential is None
        if credential is None:
            # Supports managed identity, Azure CLI and environment credentials
            credential = DefaultAzureCredential()
        self._credential = credential
        self._client = CosmosClient(endpoint, credential=self._credential)
        self._database = self._client.get_database_client(database_name)
        logger.info(f"Connected to Cosmos DB: {database_name}")

        self._sessions_container = None

    def _ensure_container(self):
        """Ensure the sessions container exists (lazy initialization)."""
        if self._sessions_container is not None:
            return self._sessions_container

        container = self._database.get_container_client(self.sessions_container_name)
        try:
            container.read()
        except CosmosResourceNotFoundError:
            # Containers are provisioned out of band (Azure CLI or Portal)
            _, partition_key = get_container_config("sessions")
            raise StorageError(
                f"Session container '{self.sessions_container_name}' not found in Cosmos DB. "
                f"Please create it with partition key {partition_key} and time-to-live enabled."
            )
        except CosmosHttpResponseError as exc:
            raise StorageError(f"Failed to open session container: {exc.message}") from exc

        self._sessions_container = container
        return container

    async def put(self, session_id: str, catalog: Any) -> None:
        container = self._ensure_container()

        doc = {
            "id": session_id,
            "catalog": catalog,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        if self.ttl_seconds:
            doc["ttl"] = self.ttl_seconds

        logger.debug(f"Storing catalog in Cosmos DB for session ID: {session_id}")
        try:
            container.upsert_item(doc)
        except CosmosHttpResponseError as exc:
            logger.error(f"Failed to store session {session_id}: {exc.message}")
            raise StorageError(f"Failed to store session {session_id}: {exc.message}") from exc

    async def get(self, session_id: str) -> Optional[Any]:
        container = self._ensure_container()

        logger.debug(f"Retrieving catalog from Cosmos DB for session ID: {session_id}")
        try:
            doc = container.read_item(item=session_id, partition_key=session_id)
        except CosmosResourceNotFoundError:
            logger.warning(f"No session document found for ID: {session_id}")
            return None
        except CosmosHttpResponseError as exc:
            logger.error(f"Failed to read session {session_id}: {exc.message}")
            raise StorageError(f"Failed to read session {session_id}: {exc.message}") from exc

        return doc.get("catalog")

    async def close(self):
        """Close the Cosmos DB connection."""
        # Cosmos DB sync client doesn't need explicit close
        if self._owns_credential:
            self._credential.close()
