"""
Generation Orchestrator.

Runs one GenerateUi call through its states:

    INIT -> RESOLVING_SESSION -> PROMPTING -> STREAMING -> COMPLETED
                     |               |            |
                     +---------------+------------+--> FAILED

Resolving the session, building the instruction and translating the
conversation happen eagerly in ``GenerationOrchestrator.generate``, so an
unknown session or an untranslatable conversation rejects before any model
call is made and before any event exists.

Streaming happens as the caller iterates the returned ``GenerationStream``.
The stream yields events in the order the model produced the tool requests and
then hands back the aggregated ``GenerationResult``. Events already yielded
stay delivered if the call later fails. Abandoning the stream cancels the
upstream model run.
"""

import json
import logging
from enum import Enum
from typing import Any, AsyncIterator, List, Optional, Sequence

from .data import SessionStore
from .errors import InvalidSessionError, ModelError, TranslationError
from .models import (
    GenerateUiRequest,
    GenerationEvent,
    GenerationResult,
    Message,
    TextEvent,
    ToolInvocationRequest,
    ToolRequestEvent,
)
from .streaming import ModelRun, StreamingModel
from .tools import ToolContractRegistry
from .translation import ConversationTranslator

logger = logging.getLogger(__name__)


class GenerationState(Enum):
    """States of a single generation call."""
    INIT = "init"
    RESOLVING_SESSION = "resolving_session"
    PROMPTING = "prompting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


INSTRUCTION_TEMPLATE = """You build user interfaces by calling tools.

Use the addOrUpdateSurface tool to create a UI surface or replace an existing one, and the deleteSurface tool to remove a surface that is no longer needed. Refer to surfaces by their surfaceId.

The definition argument of every addOrUpdateSurface call MUST conform to the following JSON Schema, which describes the widgets the client can render:

{catalog}
"""


def build_instruction(catalog: Any) -> str:
    """
    Build the schema-constrained instruction for a session's catalog.

    The catalog is serialized with sorted keys so the same catalog always
    produces the same instruction.

    Raises:
        TranslationError: If the catalog is not a JSON value
    """
    try:
        serialized = json.dumps(catalog, sort_keys=True, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise TranslationError(f"Catalog is not valid JSON: {exc}") from exc
    return INSTRUCTION_TEMPLATE.format(catalog=serialized)


class GenerationStream:
    """
    Events and final result of one generation call.

    Usage:
        stream = await orchestrator.generate(session_id, conversation)
        async with stream:
            async for event in stream:
                ...
        result = await stream.result()

    ``result()`` drains any events not yet consumed; they remain available in
    ``events``. Leaving the ``async with`` block or calling ``aclose()`` before
    the stream finishes cancels the upstream model run.
    """

    def __init__(
        self,
        session_id: str,
        model: StreamingModel,
        tools: List[Any],
    ):
        self.session_id = session_id
        self.state = GenerationState.INIT
        self.instruction: str = ""
        self.input_items: List[Any] = []
        self.events: List[GenerationEvent] = []

        self._model = model
        self._tools = tools
        self._run: Optional[ModelRun] = None
        self._result: Optional[GenerationResult] = None
        self._error: Optional[BaseException] = None
        self._iterator = self._stream()

    def transition(self, state: GenerationState):
        logger.debug(f"Generation for session {self.session_id}: {self.state.value} -> {state.value}")
        self.state = state

    def __aiter__(self) -> "GenerationStream":
        return self

    async def __anext__(self) -> GenerationEvent:
        return await self._iterator.__anext__()

    async def __aenter__(self) -> "GenerationStream":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        """Stop consuming; cancels the model run if it is still going."""
        await self._iterator.aclose()
        if self.state is GenerationState.PROMPTING:
            # Closed before the first event was requested
            self.transition(GenerationState.FAILED)

    async def result(self) -> GenerationResult:
        """
        Wait for the aggregated result.

        Raises:
            The error that failed the generation, unchanged
        """
        async for _ in self:
            pass

        if self._error is not None:
            raise self._error
        if self._result is None:
            raise ModelError("Generation was cancelled before it completed")
        return self._result

    async def _stream(self) -> AsyncIterator[GenerationEvent]:
        if self.state is not GenerationState.PROMPTING:
            # Preparation failed or never ran; nothing to stream
            return

        self.transition(GenerationState.STREAMING)
        tool_requests: List[ToolInvocationRequest] = []

        try:
            logger.debug(f"Starting AI generation for session {self.session_id}")
            self._run = await self._model.stream(self.instruction, self.input_items, self._tools)

            async for fragment in self._run.fragments():
                logger.debug(f"Fragment from AI: {fragment}")
                for request in fragment.tool_requests:
                    logger.info(f"Yielding tool request from AI: {request.name}")
                    tool_requests.append(request)
                    event = ToolRequestEvent.from_request(request)
                    self.events.append(event)
                    yield event

            response = await self._run.response()

            if response.text:
                event = TextEvent(text=response.text)
                self.events.append(event)
                yield event

            self._result = GenerationResult(
                text=response.text,
                tool_requests=tool_requests,
                raw=response.raw,
            )
            self.transition(GenerationState.COMPLETED)
            logger.info(
                f"Generation completed for session {self.session_id} "
                f"with {len(tool_requests)} tool requests"
            )

        except Exception as exc:
            self._error = exc
            self.transition(GenerationState.FAILED)
            logger.error(f"An error occurred during AI generation: {exc}", exc_info=True)
            raise

        finally:
            if self.state is not GenerationState.COMPLETED:
                if self._run is not None:
                    self._run.cancel()
                if self.state is not GenerationState.FAILED:
                    logger.info(f"Generation for session {self.session_id} abandoned by caller")
                    self.transition(GenerationState.FAILED)


class GenerationOrchestrator:
    """
    Session-scoped generation pipeline.

    All collaborators are injected; the orchestrator keeps no state between
    calls and never writes to the session store.
    """

    def __init__(
        self,
        store: SessionStore,
        model: StreamingModel,
        registry: Optional[ToolContractRegistry] = None,
        translator: Optional[ConversationTranslator] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            store: Session store to resolve catalogs from
            model: Streaming model provider
            registry: Tool contracts to declare (defaults to the surface tools)
            translator: Conversation translator
        """
        self.store = store
        self.model = model
        self.registry = registry or ToolContractRegistry()
        self.translator = translator or ConversationTranslator()

    async def generate(
        self,
        session_id: str,
        conversation: Sequence[Message],
    ) -> GenerationStream:
        """
        Resolve the session and prepare the model call.

        Returns:
            A GenerationStream that runs the model call as it is iterated

        Raises:
            InvalidSessionError: If the session does not exist
            StorageError: If the session store fails
            TranslationError: If the catalog or conversation cannot be represented
        """
        stream = GenerationStream(session_id, self.model, self.registry.as_function_tools())

        try:
            stream.transition(GenerationState.RESOLVING_SESSION)
            catalog = await self.store.get(session_id)
            if catalog is None:
                logger.error(f"Invalid session ID: {session_id}")
                raise InvalidSessionError(session_id)
            logger.debug("Successfully retrieved catalog from store.")

            stream.transition(GenerationState.PROMPTING)
            stream.instruction = build_instruction(catalog)
            stream.input_items = self.translator.translate(conversation)
        except Exception:
            stream.transition(GenerationState.FAILED)
            raise

        return stream

    async def generate_ui(self, request: GenerateUiRequest) -> GenerationStream:
        """Prepare a generation from a GenerateUi wire request."""
        return await self.generate(request.session_id, request.conversation)

    async def run(
        self,
        session_id: str,
        conversation: Sequence[Message],
    ) -> GenerationResult:
        """Run a generation to completion and return its aggregated result."""
        stream = await self.generate(session_id, conversation)
        return await stream.result()
