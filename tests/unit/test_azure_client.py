import asyncio

import pytest
from unittest.mock import patch

from azure_client import COGNITIVE_SERVICES_SCOPE, AzureOpenAIClientManager, normalize_endpoint
from config import Settings


@pytest.mark.parametrize("endpoint", [
    "https://genui.openai.azure.com",
    "https://genui.openai.azure.com/",
    "https://genui.openai.azure.com/openai/v1",
    "https://genui.openai.azure.com/openai/v1/",
])
def test_normalize_endpoint(endpoint):
    assert normalize_endpoint(endpoint) == "https://genui.openai.azure.com"


@patch("azure_client.AsyncAzureOpenAI")
def test_api_key_client_is_created_once(mock_client_cls):
    settings = Settings(
        AZURE_OPENAI_ENDPOINT="https://genui.openai.azure.com/",
        AZURE_OPENAI_API_KEY="key",
    )
    manager = AzureOpenAIClientManager()

    with patch("azure_client.settings", settings):
        first = asyncio.run(manager.get_client())
        second = asyncio.run(manager.get_client())

    assert first is second
    mock_client_cls.assert_called_once_with(
        azure_endpoint="https://genui.openai.azure.com",
        api_key="key",
        api_version=settings.azure_openai_api_version,
    )


@patch("azure_client.get_bearer_token_provider")
@patch("azure_client.DefaultAzureCredential")
@patch("azure_client.AsyncAzureOpenAI")
def test_without_key_uses_entra_token_provider(mock_client_cls, mock_credential_cls, mock_provider):
    settings = Settings(AZURE_OPENAI_ENDPOINT="https://genui.openai.azure.com", AZURE_OPENAI_API_KEY="")
    manager = AzureOpenAIClientManager()

    with patch("azure_client.settings", settings):
        asyncio.run(manager.get_client())

    mock_provider.assert_called_once_with(mock_credential_cls.return_value, COGNITIVE_SERVICES_SCOPE)
    assert mock_client_cls.call_args.kwargs["azure_ad_token_provider"] is mock_provider.return_value

    mock_client_cls.return_value.close = _async_noop
    asyncio.run(manager.close())
    mock_credential_cls.return_value.close.assert_called_once_with()


async def _async_noop():
    return None


def test_settings_defaults():
    settings = Settings()

    assert settings.session_store_backend == "memory"
    assert settings.session_ttl_seconds == 86400
    assert settings.genui_max_turns == 10
