"""
Data model for the GenUI server.

Wire payloads use camelCase field names (``sessionId``, ``surfaceId``,
``mimeType``); the Python attributes are snake_case. Models accept either.

Conversation parts are a closed tagged union on ``type``. Tags the server does
not know parse into ``UnknownPart`` so the translator can drop them explicitly
instead of failing the whole request.
"""

import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    ValidationError,
    field_validator,
)

from .errors import RequestValidationError


# =============================================================================
# CONVERSATION
# =============================================================================

class TextPart(BaseModel):
    """Plain text, preserved verbatim."""
    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    """
    An image given by URL or by inline base64 data.

    Exactly one of ``url`` or ``base64`` is expected. Partially specified
    parts are accepted here and dropped later by the translator.
    """
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["image"] = "image"
    url: Optional[str] = None
    base64: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")


class UiPart(BaseModel):
    """A surface mutation the assistant issued earlier, replayed as context."""
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["ui"] = "ui"
    surface_id: str = Field(alias="surfaceId")
    definition: Any = None


class UnknownPart(BaseModel):
    """Any part whose tag is not recognised. Never sent to the model."""
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None


_KNOWN_PART_TAGS = ("text", "image", "ui")


def _part_tag(value: Any) -> str:
    if isinstance(value, dict):
        tag = value.get("type")
    else:
        tag = getattr(value, "type", None)
    return tag if tag in _KNOWN_PART_TAGS else "unknown"


Part = Annotated[
    Union[
        Annotated[TextPart, Tag("text")],
        Annotated[ImagePart, Tag("image")],
        Annotated[UiPart, Tag("ui")],
        Annotated[UnknownPart, Tag("unknown")],
    ],
    Discriminator(_part_tag),
]


class Message(BaseModel):
    """One conversational turn."""
    role: Literal["user", "assistant", "system"]
    parts: List[Part] = Field(default_factory=list)


# =============================================================================
# REQUESTS
# =============================================================================

class StartSessionRequest(BaseModel):
    """Request to bind a new session to a widget catalog."""
    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str = Field(alias="protocolVersion")
    catalog: Any

    @field_validator("catalog")
    @classmethod
    def _catalog_is_json(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("catalog is required")
        try:
            json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"catalog is not valid JSON: {exc}") from exc
        return value


class GenerateUiRequest(BaseModel):
    """Request to generate UI for a conversation within a session."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    conversation: List[Message] = Field(default_factory=list)


def parse_request(model: type, payload: Any) -> Any:
    """
    Validate a raw payload into ``model``.

    Raises:
        RequestValidationError: If the payload does not match the model
    """
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(
            f"Malformed {model.__name__}: {exc.errors(include_url=False)}"
        ) from exc


# =============================================================================
# TOOL REQUESTS, EVENTS AND RESULTS
# =============================================================================

class ToolInvocationRequest(BaseModel):
    """
    A tool call proposed by the model mid-stream.

    Names are ``addOrUpdateSurface`` or ``deleteSurface``. Later requests for
    the same surface supersede earlier ones at the client; the server only
    preserves arrival order.
    """
    name: str
    input: Dict[str, Any] = Field(default_factory=dict)


class ToolRequestEvent(BaseModel):
    type: Literal["toolRequest"] = "toolRequest"
    name: str
    input: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_request(cls, request: ToolInvocationRequest) -> "ToolRequestEvent":
        return cls(name=request.name, input=request.input)


class TextEvent(BaseModel):
    type: Literal["text"] = "text"
    text: str


GenerationEvent = Union[ToolRequestEvent, TextEvent]


class GenerationResult(BaseModel):
    """The aggregated response of one generation call."""
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    text: Optional[str] = None
    tool_requests: List[ToolInvocationRequest] = Field(
        default_factory=list, alias="toolRequests"
    )
    # Provider's own final object, kept for in-process callers only
    raw: Any = Field(default=None, exclude=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
