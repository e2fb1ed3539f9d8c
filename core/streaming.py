"""
Streaming model provider seam.

The orchestrator talks to the model through ``StreamingModel``: submit an
instruction, the conversation items and the tool declarations, then read an
ordered sequence of ``Fragment`` objects followed by one terminal
``ModelResponse``.

``AgentsStreamingModel`` is the production implementation. It runs an OpenAI
Agents SDK agent against the Azure OpenAI Responses API and turns the run's
stream events into fragments:
- ``tool_called`` run items -> one fragment carrying that tool request
- raw ``response.output_text.delta`` events -> text-only fragments
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

from agents import Agent, RunConfig, Runner, RunResultStreaming
from agents.exceptions import AgentsException
from agents.items import ToolCallItem
from agents.models.openai_responses import OpenAIResponsesModel
from agents.stream_events import RawResponsesStreamEvent, RunItemStreamEvent
from openai import OpenAIError

from .errors import ModelError
from .models import ToolInvocationRequest

logger = logging.getLogger(__name__)


@dataclass
class Fragment:
    """One incremental unit of the model's streamed output."""
    tool_requests: List[ToolInvocationRequest] = field(default_factory=list)
    text: Optional[str] = None


@dataclass
class ModelResponse:
    """The provider's terminal aggregated response."""
    text: Optional[str] = None
    raw: Any = None


class ModelRun(ABC):
    """One in-flight streaming model call."""

    @abstractmethod
    def fragments(self) -> AsyncIterator[Fragment]:
        """Yield fragments in arrival order."""
        pass

    @abstractmethod
    async def response(self) -> ModelResponse:
        """Return the aggregated response once fragments are exhausted."""
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Stop the upstream call. Safe to call more than once."""
        pass


class StreamingModel(ABC):
    """Starts streaming model calls."""

    @abstractmethod
    async def stream(
        self,
        instruction: str,
        input_items: List[Dict[str, Any]],
        tools: List[Any],
    ) -> ModelRun:
        """
        Start a streaming call.

        Args:
            instruction: System instruction for the model
            input_items: Model-native conversation items
            tools: Tool declarations the model may call

        Raises:
            ModelError: If the call cannot be started
        """
        pass


# =============================================================================
# OPENAI AGENTS SDK IMPLEMENTATION
# =============================================================================

def _tool_request_from_item(item: ToolCallItem) -> Optional[ToolInvocationRequest]:
    raw_item = item.raw_item
    if getattr(raw_item, "type", None) != "function_call":
        # Hosted tools (file search, web search) are not surface mutations
        return None

    arguments = raw_item.arguments or "{}"
    try:
        tool_input = json.loads(arguments)
    except json.JSONDecodeError as exc:
        raise ModelError(f"Tool call {raw_item.name} has malformed arguments: {exc}") from exc

    if not isinstance(tool_input, dict):
        raise ModelError(f"Tool call {raw_item.name} arguments are not an object")

    return ToolInvocationRequest(name=raw_item.name, input=tool_input)


def fragment_from_event(event: Any) -> Optional[Fragment]:
    """Convert one Agents SDK stream event into a fragment, if it carries one."""
    if isinstance(event, RunItemStreamEvent):
        if event.name == "tool_called" and isinstance(event.item, ToolCallItem):
            request = _tool_request_from_item(event.item)
            if request is not None:
                return Fragment(tool_requests=[request])
        return None

    if isinstance(event, RawResponsesStreamEvent):
        raw_event = event.data
        if getattr(raw_event, "type", "") == "response.output_text.delta":
            return Fragment(text=raw_event.delta)

    return None


class AgentsModelRun(ModelRun):
    """Wraps a RunResultStreaming as a ModelRun."""

    def __init__(self, result: RunResultStreaming):
        self._result = result

    async def fragments(self) -> AsyncIterator[Fragment]:
        try:
            async for event in self._result.stream_events():
                fragment = fragment_from_event(event)
                if fragment is not None:
                    yield fragment
        except (AgentsException, OpenAIError) as exc:
            logger.error(f"Model stream failed: {exc}", exc_info=True)
            raise ModelError(str(exc)) from exc

    async def response(self) -> ModelResponse:
        final_output = self._result.final_output
        if final_output is None or isinstance(final_output, str):
            text = final_output
        else:
            text = str(final_output)
        return ModelResponse(text=text, raw=self._result)

    def cancel(self) -> None:
        if not self._result.is_complete:
            logger.info("Cancelling upstream model run")
        self._result.cancel()


class AgentsStreamingModel(StreamingModel):
    """
    Streaming model backed by the OpenAI Agents SDK and Azure OpenAI.

    The tool handlers passed in are inert acknowledgments; the agent loop
    still calls them so the model can continue after each tool request.
    """

    def __init__(
        self,
        client_manager: Any,
        deployment: str,
        max_turns: int = 10,
        tracing_disabled: bool = True,
    ):
        """
        Args:
            client_manager: Provides the AsyncAzureOpenAI client via get_client()
            deployment: Azure OpenAI deployment (model) name
            max_turns: Upper bound on model turns in one generation
            tracing_disabled: Disable Agents SDK trace export
        """
        self.client_manager = client_manager
        self.deployment = deployment
        self.max_turns = max_turns
        self.tracing_disabled = tracing_disabled

    async def stream(
        self,
        instruction: str,
        input_items: List[Dict[str, Any]],
        tools: List[Any],
    ) -> ModelRun:
        try:
            client = await self.client_manager.get_client()

            model = OpenAIResponsesModel(
                model=self.deployment,
                openai_client=client,
            )
            agent = Agent(
                name="GenUI Surface Generator",
                instructions=instruction,
                tools=tools,
            )

            result = Runner.run_streamed(
                agent,
                input_items,
                max_turns=self.max_turns,
                run_config=RunConfig(model=model, tracing_disabled=self.tracing_disabled),
            )
        except (AgentsException, OpenAIError) as exc:
            logger.error(f"Failed to start model run: {exc}", exc_info=True)
            raise ModelError(str(exc)) from exc

        logger.debug(f"Started model run with {len(input_items)} input items")
        return AgentsModelRun(result)
