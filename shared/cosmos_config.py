"""
Azure Cosmos DB Configuration.

Centralized configuration for the Cosmos DB session store. Shared by the
server and the inspection scripts so both read the same container.

Environment Variables (optional overrides):
    COSMOS_ENDPOINT - Override the default Cosmos DB endpoint
    COSMOS_DATABASE - Override the default database name
    COSMOS_SESSIONS_CONTAINER - Override the sessions container name
"""

import os

# =============================================================================
# COSMOS DB CONNECTION
# =============================================================================

COSMOS_ENDPOINT = os.getenv(
    "COSMOS_ENDPOINT",
    "https://localhost:8081/"
)

DATABASE_NAME = os.getenv(
    "COSMOS_DATABASE",
    "genui"
)

# =============================================================================
# SESSION STORAGE CONTAINERS
# =============================================================================

# Format: logical_name -> (container_name, partition_key_path)
# The sessions container must have time-to-live enabled (default TTL -1)
# so the per-item ``ttl`` written by the store takes effect.
GENUI_CONTAINERS = {
    "sessions": (os.getenv("COSMOS_SESSIONS_CONTAINER", "GenUI_Sessions"), "/id"),
}

GENUI_CONTAINER_NAMES = {
    key: name for key, (name, _) in GENUI_CONTAINERS.items()
}

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_container_config(logical_name: str) -> tuple:
    """Get (container_name, partition_key_path) for a GenUI container."""
    if logical_name in GENUI_CONTAINERS:
        return GENUI_CONTAINERS[logical_name]
    raise ValueError(f"Unknown GenUI container: {logical_name}")
