"""
Conversation Translator.

Maps the generic multi-part conversation of a GenerateUi request into
Responses API input items, which is what the Agents SDK runner consumes.

Mapping rules:
- Consecutive content parts of one message share one message item
- text -> input_text (output_text for assistant turns), verbatim
- image by URL -> input_image, or input_file when mimeType is not an image type
- image by base64 -> data URI; needs mimeType, otherwise the part is dropped
- images in assistant turns -> dropped
- ui -> a replayed addOrUpdateSurface function call plus its acknowledgment
- unknown parts -> dropped

Part order within a message and message order within the conversation are
preserved exactly.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from .errors import TranslationError
from .models import ImagePart, Message, TextPart, UiPart, UnknownPart
from .tools import ADD_OR_UPDATE_SURFACE_CONTRACT

logger = logging.getLogger(__name__)

InputItem = Dict[str, Any]


def _is_image_type(mime_type: Optional[str]) -> bool:
    return mime_type is None or mime_type.lower().startswith("image/")


def _translate_text(part: TextPart, role: str) -> InputItem:
    content_type = "output_text" if role == "assistant" else "input_text"
    return {"type": content_type, "text": part.text}


def _translate_image(part: ImagePart) -> Optional[InputItem]:
    """Return the native media item, or None when the part must be dropped."""
    if part.url:
        if _is_image_type(part.mime_type):
            return {"type": "input_image", "image_url": part.url, "detail": "auto"}
        return {"type": "input_file", "file_url": part.url}

    if part.base64 and part.mime_type:
        data_uri = f"data:{part.mime_type};base64,{part.base64}"
        if _is_image_type(part.mime_type):
            return {"type": "input_image", "image_url": data_uri, "detail": "auto"}
        return {"type": "input_file", "file_data": data_uri, "filename": "attachment"}

    return None


def _translate_ui(part: UiPart, call_id: str) -> List[InputItem]:
    """Replay a prior surface mutation as a completed tool call."""
    try:
        arguments = json.dumps(
            {"surfaceId": part.surface_id, "definition": part.definition}, allow_nan=False
        )
    except (TypeError, ValueError) as exc:
        raise TranslationError(
            f"Surface definition for {part.surface_id} is not valid JSON: {exc}"
        ) from exc

    return [
        {
            "type": "function_call",
            "call_id": call_id,
            "name": ADD_OR_UPDATE_SURFACE_CONTRACT.name,
            "arguments": arguments,
        },
        {
            "type": "function_call_output",
            "call_id": call_id,
            "output": json.dumps(ADD_OR_UPDATE_SURFACE_CONTRACT.acknowledgment),
        },
    ]


class ConversationTranslator:
    """Stateless translator from conversation messages to model input."""

    def translate(self, conversation: Sequence[Message]) -> List[InputItem]:
        """
        Translate a conversation into model-native input items.

        Args:
            conversation: Messages in turn order

        Returns:
            Input items in the same order

        Raises:
            TranslationError: If a part cannot be represented at all
        """
        items: List[InputItem] = []

        for message_index, message in enumerate(conversation):
            content: List[InputItem] = []

            def flush():
                if content:
                    items.append({"role": message.role, "content": list(content)})
                    content.clear()

            for part_index, part in enumerate(message.parts):
                if isinstance(part, TextPart):
                    content.append(_translate_text(part, message.role))

                elif isinstance(part, ImagePart):
                    if message.role == "assistant":
                        # Assistant content only carries output_text
                        logger.debug(
                            f"Dropping image part {message_index}.{part_index} in assistant turn"
                        )
                        continue
                    media = _translate_image(part)
                    if media is None:
                        logger.debug(
                            f"Dropping image part {message_index}.{part_index}: "
                            f"needs url, or base64 with mimeType"
                        )
                    else:
                        content.append(media)

                elif isinstance(part, UiPart):
                    flush()
                    items.extend(_translate_ui(part, f"ui_{message_index}_{part_index}"))

                elif isinstance(part, UnknownPart):
                    logger.debug(
                        f"Dropping part {message_index}.{part_index} with unknown type {part.type!r}"
                    )

            flush()

        logger.debug(f"Translated {len(conversation)} messages into {len(items)} input items")
        return items


def translate(conversation: Sequence[Message]) -> List[InputItem]:
    """Module-level shortcut for ConversationTranslator().translate."""
    return ConversationTranslator().translate(conversation)
