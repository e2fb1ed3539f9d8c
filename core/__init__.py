"""
Core of the GenUI Server.

This package holds the session-scoped generation pipeline:

1. Data Layer - SessionStore abstraction and the in-memory backend
2. Session Layer - SessionLifecycle binds new session ids to catalogs
3. Translation Layer - ConversationTranslator builds model-native input
4. Tool Layer - ToolContractRegistry declares the inert surface tools
5. Orchestration Layer - GenerationOrchestrator streams ordered events

Every collaborator is injected; nothing here holds ambient global state.
"""

from .data import SessionStore, InMemorySessionStore
from .errors import (
    GenUiError,
    RequestValidationError,
    InvalidSessionError,
    StorageError,
    ModelError,
    TranslationError,
)
from .models import (
    Message,
    StartSessionRequest,
    GenerateUiRequest,
    ToolInvocationRequest,
    ToolRequestEvent,
    TextEvent,
    GenerationResult,
)
from .session import SessionLifecycle
from .translation import ConversationTranslator
from .tools import ToolContract, ToolContractRegistry
from .streaming import StreamingModel, ModelRun, Fragment, ModelResponse, AgentsStreamingModel
from .orchestration import GenerationOrchestrator, GenerationStream, GenerationState

__all__ = [
    # Data
    "SessionStore",
    "InMemorySessionStore",
    # Errors
    "GenUiError",
    "RequestValidationError",
    "InvalidSessionError",
    "StorageError",
    "ModelError",
    "TranslationError",
    # Models
    "Message",
    "StartSessionRequest",
    "GenerateUiRequest",
    "ToolInvocationRequest",
    "ToolRequestEvent",
    "TextEvent",
    "GenerationResult",
    # Session
    "SessionLifecycle",
    # Translation
    "ConversationTranslator",
    # Tools
    "ToolContract",
    "ToolContractRegistry",
    # Streaming
    "StreamingModel",
    "ModelRun",
    "Fragment",
    "ModelResponse",
    "AgentsStreamingModel",
    # Orchestration
    "GenerationOrchestrator",
    "GenerationStream",
    "GenerationState",
]
