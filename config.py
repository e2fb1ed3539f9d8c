"""
Configuration module for the GenUI Server.
Loads settings from environment variables with Azure OpenAI support.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Azure OpenAI Configuration
    azure_openai_endpoint: str = Field(
        default="",
        alias="AZURE_OPENAI_ENDPOINT",
        description="Azure OpenAI endpoint URL"
    )
    azure_openai_deployment: str = Field(
        default="gpt-4o",
        alias="AZURE_OPENAI_DEPLOYMENT",
        description="Azure OpenAI deployment name"
    )
    azure_openai_api_version: str = Field(
        default="2025-03-01-preview",
        alias="AZURE_OPENAI_API_VERSION",
        description="Azure OpenAI API version (requires 2025-03-01-preview or later for Responses API)"
    )
    azure_openai_api_key: str = Field(
        default="",
        alias="AZURE_OPENAI_API_KEY",
        description="API key; when empty, DefaultAzureCredential is used"
    )

    # Generation Configuration
    genui_max_turns: int = Field(
        default=10,
        alias="GENUI_MAX_TURNS",
        description="Maximum model turns per generation call"
    )
    agents_tracing_disabled: bool = Field(
        default=True,
        alias="AGENTS_TRACING_DISABLED",
        description="Disable OpenAI Agents SDK trace export"
    )

    # Session Store Configuration
    session_store_backend: str = Field(
        default="memory",
        alias="SESSION_STORE_BACKEND",
        description="Session store backend: memory or cosmos"
    )
    session_ttl_seconds: int = Field(
        default=86400,
        alias="SESSION_TTL_SECONDS",
        description="Session lifetime in seconds (0 disables expiry)"
    )
    cosmos_key: str = Field(
        default="",
        alias="COSMOS_KEY",
        description="Cosmos DB account key; when empty, DefaultAzureCredential is used"
    )

    # Application Configuration
    app_host: str = Field(
        default="0.0.0.0",
        alias="APP_HOST",
        description="Host to bind the application"
    )
    app_port: int = Field(
        default=8000,
        alias="APP_PORT",
        description="Port to bind the application"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
