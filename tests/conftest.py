import pytest

from core.data import InMemorySessionStore
from core.models import ToolInvocationRequest
from core.streaming import Fragment, ModelResponse, ModelRun, StreamingModel


TEST_CATALOG = {
    "schema": {
        "properties": [
            {
                "name": "testWidget",
                "dataSchema": {
                    "type": "object",
                    "properties": {
                        "text": {
                            "type": "string",
                        },
                    },
                },
            },
        ],
    },
}


def tool_fragment(*requests):
    """Build a fragment carrying (name, input) tool requests."""
    return Fragment(
        tool_requests=[ToolInvocationRequest(name=name, input=tool_input) for name, tool_input in requests]
    )


class ScriptedRun(ModelRun):
    """Replays a fixed list of fragments, optionally failing part way."""

    def __init__(self, fragments, text=None, error=None, error_after=None):
        self._fragments = list(fragments)
        self._text = text
        self._error = error
        self._error_after = len(self._fragments) if error_after is None else error_after
        self.cancelled = False
        self.fragments_sent = 0

    async def fragments(self):
        for index, fragment in enumerate(self._fragments):
            if self._error is not None and index == self._error_after:
                raise self._error
            self.fragments_sent += 1
            yield fragment
        if self._error is not None and self._error_after >= len(self._fragments):
            raise self._error

    async def response(self):
        return ModelResponse(text=self._text, raw={"text": self._text})

    def cancel(self):
        self.cancelled = True


class ScriptedStreamingModel(StreamingModel):
    """StreamingModel that records its calls and returns scripted runs."""

    def __init__(self, fragments=(), text=None, error=None, error_after=None):
        self.fragments = fragments
        self.text = text
        self.error = error
        self.error_after = error_after
        self.calls = []
        self.runs = []

    async def stream(self, instruction, input_items, tools):
        self.calls.append({"instruction": instruction, "input_items": input_items, "tools": tools})
        run = ScriptedRun(self.fragments, self.text, self.error, self.error_after)
        self.runs.append(run)
        return run


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def scripted_model():
    return ScriptedStreamingModel()
