#!/usr/bin/env python3
"""
View a stored GenUI session.

Prints the session document from the Cosmos DB sessions container and a short
summary of the widgets its catalog declares.

Usage:
    python scripts/view_session.py <session_id>

Example:
    python scripts/view_session.py 3f2b8c1e-6a4d-4f0e-9a57-1c2d3e4f5a6b
"""

import sys
import json
from pathlib import Path

from azure.cosmos import CosmosClient
from azure.cosmos.exceptions import CosmosResourceNotFoundError
from azure.identity import DefaultAzureCredential

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from shared.cosmos_config import COSMOS_ENDPOINT, DATABASE_NAME, GENUI_CONTAINER_NAMES


def widget_names(catalog) -> list:
    """List the widget kinds a catalog's properties declare."""
    if not isinstance(catalog, dict):
        return []
    properties = catalog.get("properties")
    if properties is None and isinstance(catalog.get("schema"), dict):
        properties = catalog["schema"].get("properties")

    if isinstance(properties, dict):
        return list(properties.keys())
    if isinstance(properties, list):
        return [p.get("name", "?") for p in properties if isinstance(p, dict)]
    return []


def view_session(session_id: str):
    """Print the stored document for a session."""
    credential = DefaultAzureCredential()
    client = CosmosClient(COSMOS_ENDPOINT, credential=credential)
    db = client.get_database_client(DATABASE_NAME)
    container = db.get_container_client(GENUI_CONTAINER_NAMES["sessions"])

    try:
        doc = container.read_item(item=session_id, partition_key=session_id)
    except CosmosResourceNotFoundError:
        print(f"Session {session_id} not found (it may have expired)")
        return

    print("=" * 60)
    print("SESSION")
    print("=" * 60)
    print(f"  ID:      {doc.get('id')}")
    print(f"  Created: {doc.get('created_at')}")
    print(f"  TTL:     {doc.get('ttl', 'none')}")

    catalog = doc.get("catalog")
    names = widget_names(catalog)

    print("\n" + "=" * 60)
    print(f"WIDGETS ({len(names)})")
    print("=" * 60)
    for name in names:
        print(f"  - {name}")

    print("\n" + "=" * 60)
    print("CATALOG")
    print("=" * 60)
    print(json.dumps(catalog, indent=2, default=str))


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/view_session.py <session_id>")
        sys.exit(1)

    view_session(sys.argv[1])
