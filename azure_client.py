"""
Azure OpenAI Client Manager.
Provides the async Azure OpenAI client used by the streaming model, with an
API key when one is configured and DefaultAzureCredential otherwise.
"""

import logging
from typing import Optional
from openai import AsyncAzureOpenAI
from azure.identity import DefaultAzureCredential, get_bearer_token_provider

from config import settings

logger = logging.getLogger(__name__)

COGNITIVE_SERVICES_SCOPE = "https://cognitiveservices.azure.com/.default"


def normalize_endpoint(endpoint: str) -> str:
    """Strip the /openai/v1 suffix and trailing slash some portals include."""
    for suffix in ("/openai/v1/", "/openai/v1"):
        if endpoint.endswith(suffix):
            endpoint = endpoint[: -len(suffix)]
            break
    return endpoint.rstrip("/")


class AzureOpenAIClientManager:
    """
    Lazily creates and caches one AsyncAzureOpenAI client.

    Authentication, in order of preference:
    - AZURE_OPENAI_API_KEY, when set
    - DefaultAzureCredential (managed identity, Azure CLI, environment variables)
    """

    def __init__(self):
        self._client: Optional[AsyncAzureOpenAI] = None
        self._credential: Optional[DefaultAzureCredential] = None

    async def get_client(self) -> AsyncAzureOpenAI:
        """Get or create the AsyncAzureOpenAI client."""
        if self._client is None:
            azure_endpoint = normalize_endpoint(settings.azure_openai_endpoint)

            if settings.azure_openai_api_key:
                logger.info("Initializing AsyncAzureOpenAI client with API key...")
                self._client = AsyncAzureOpenAI(
                    azure_endpoint=azure_endpoint,
                    api_key=settings.azure_openai_api_key,
                    api_version=settings.azure_openai_api_version,
                )
            else:
                logger.info("Initializing AsyncAzureOpenAI client with DefaultAzureCredential...")
                self._credential = DefaultAzureCredential()
                # Token provider refreshes tokens automatically
                token_provider = get_bearer_token_provider(
                    self._credential,
                    COGNITIVE_SERVICES_SCOPE,
                )
                self._client = AsyncAzureOpenAI(
                    azure_endpoint=azure_endpoint,
                    azure_ad_token_provider=token_provider,
                    api_version=settings.azure_openai_api_version,
                )

            logger.info(f"AsyncAzureOpenAI client initialized: {azure_endpoint}")

        return self._client

    async def close(self):
        """Close the client connection."""
        if self._client:
            await self._client.close()
            self._client = None
        if self._credential:
            self._credential.close()
            self._credential = None


# Global client manager instance
client_manager = AzureOpenAIClientManager()
