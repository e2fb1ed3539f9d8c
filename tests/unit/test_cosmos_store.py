import asyncio

import pytest
from unittest.mock import MagicMock, patch

from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError

from core.errors import StorageError
from persistence.cosmos_store import CosmosSessionStore


@pytest.fixture
def cosmos():
    """Patch the Cosmos client and credential; yields the container mock."""
    with patch("persistence.cosmos_store.CosmosClient") as mock_client_cls, \
            patch("persistence.cosmos_store.DefaultAzureCredential") as mock_credential_cls:
        container = MagicMock()
        database = mock_client_cls.return_value.get_database_client.return_value
        database.get_container_client.return_value = container
        container.credential_cls = mock_credential_cls
        yield container


def make_store(**kwargs):
    kwargs.setdefault("endpoint", "https://example.documents.azure.com:443/")
    kwargs.setdefault("database_name", "genui")
    kwargs.setdefault("sessions_container", "GenUI_Sessions")
    return CosmosSessionStore(**kwargs)


class TestCosmosSessionStore:

    def test_put_upserts_document_with_ttl(self, cosmos):
        store = make_store(ttl_seconds=3600)

        asyncio.run(store.put("sid", {"version": "1.0"}))

        doc = cosmos.upsert_item.call_args[0][0]
        assert doc["id"] == "sid"
        assert doc["catalog"] == {"version": "1.0"}
        assert doc["ttl"] == 3600
        assert "created_at" in doc

    def test_put_without_ttl_omits_field(self, cosmos):
        store = make_store(ttl_seconds=0)

        asyncio.run(store.put("sid", {"version": "1.0"}))

        assert "ttl" not in cosmos.upsert_item.call_args[0][0]

    def test_get_reads_by_partition_key(self, cosmos):
        cosmos.read_item.return_value = {"id": "sid", "catalog": {"version": "1.0"}}

        catalog = asyncio.run(make_store().get("sid"))

        assert catalog == {"version": "1.0"}
        cosmos.read_item.assert_called_once_with(item="sid", partition_key="sid")

    def test_get_missing_session_returns_none(self, cosmos):
        cosmos.read_item.side_effect = CosmosResourceNotFoundError(status_code=404, message="Not found")

        assert asyncio.run(make_store().get("expired")) is None

    def test_read_failure_raises_storage_error(self, cosmos):
        cosmos.read_item.side_effect = CosmosHttpResponseError(status_code=500, message="Service unavailable")

        with pytest.raises(StorageError):
            asyncio.run(make_store().get("sid"))

    def test_write_failure_raises_storage_error(self, cosmos):
        cosmos.upsert_item.side_effect = CosmosHttpResponseError(status_code=429, message="Too many requests")

        with pytest.raises(StorageError, match="sid"):
            asyncio.run(make_store().put("sid", {"version": "1.0"}))

    def test_missing_container_raises_storage_error(self, cosmos):
        cosmos.read.side_effect = CosmosResourceNotFoundError(status_code=404, message="Not found")

        with pytest.raises(StorageError, match="GenUI_Sessions") as exc_info:
            asyncio.run(make_store().get("sid"))

        assert "partition key /id" in exc_info.value.message

    def test_container_is_checked_once(self, cosmos):
        cosmos.read_item.return_value = {"id": "sid", "catalog": {}}
        store = make_store()

        asyncio.run(store.get("sid"))
        asyncio.run(store.get("sid"))

        cosmos.read.assert_called_once_with()

    def test_close_releases_owned_credential(self, cosmos):
        store = make_store()

        asyncio.run(store.close())

        cosmos.credential_cls.return_value.close.assert_called_once_with()

    def test_close_leaves_account_key_alone(self, cosmos):
        store = make_store(credential="account-key")

        asyncio.run(store.close())

        cosmos.credential_cls.assert_not_called()
