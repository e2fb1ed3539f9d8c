"""
Shared modules for the GenUI server.

This package contains configuration used by both the server and the scripts.
"""

from shared.cosmos_config import (
    COSMOS_ENDPOINT,
    DATABASE_NAME,
    GENUI_CONTAINERS,
    GENUI_CONTAINER_NAMES,
)

__all__ = [
    "COSMOS_ENDPOINT",
    "DATABASE_NAME",
    "GENUI_CONTAINERS",
    "GENUI_CONTAINER_NAMES",
]
