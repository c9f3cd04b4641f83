"""
Turn-scoped values for the streaming completion pipeline.

Raw chunks from the completion stream are mapped onto a small closed set of
events (text, tool call start, tool argument fragment, end of stream), which the
orchestrator consumes in arrival order. A ToolInvocation accumulates the
argument fragments of the single tool call a round may carry.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from clinic_agent.config.constants import INTERACTION_REMINDER_REQUIRED
from clinic_agent.models.message_schemas import (
    ReminderRequiredRequest,
    ResponseRequiredRequest,
    Utterance,
)


class ToolArgumentsError(ValueError):
    """Raised when a tool call's streamed arguments are not a JSON object."""


@dataclass(frozen=True)
class TextDelta:
    text: str


@dataclass(frozen=True)
class ToolCallStart:
    invocation_id: str
    name: str
    index: int = 0


@dataclass(frozen=True)
class ToolCallArgumentFragment:
    text: str
    index: int = 0


@dataclass(frozen=True)
class StreamEnd:
    pass


StreamEvent = Union[TextDelta, ToolCallStart, ToolCallArgumentFragment, StreamEnd]


def events_from_chunk(chunk: Any) -> List[StreamEvent]:
    """
    Map one raw completion chunk onto stream events.

    Only the first choice of a chunk is looked at. Every tool call delta in it
    is mapped in order and keeps its ``index``, so fragments can be matched to
    the invocation they belong to. A delta carrying an id opens an invocation;
    argument text in the same delta becomes a fragment of that invocation.

    Args:
        chunk: A ChatCompletionChunk (or any object of the same shape)

    Returns:
        Zero or more events in the order they must be applied
    """
    choices = getattr(chunk, "choices", None) or []
    if not choices:
        return []
    delta = getattr(choices[0], "delta", None)
    if delta is None:
        return []

    events: List[StreamEvent] = []
    tool_calls = getattr(delta, "tool_calls", None) or []
    if tool_calls:
        for tool_call in tool_calls:
            index = getattr(tool_call, "index", None) or 0
            function = getattr(tool_call, "function", None)
            name = getattr(function, "name", None) or ""
            arguments = getattr(function, "arguments", None) or ""
            if getattr(tool_call, "id", None):
                events.append(ToolCallStart(invocation_id=tool_call.id, name=name, index=index))
            if arguments:
                events.append(ToolCallArgumentFragment(text=arguments, index=index))
    elif getattr(delta, "content", None):
        events.append(TextDelta(text=delta.content))
    return events


@dataclass
class ToolInvocation:
    """A model-initiated tool call assembled from streamed fragments."""

    invocation_id: str
    name: str
    index: int = 0
    argument_fragments: List[str] = field(default_factory=list)
    parsed_arguments: Optional[Dict[str, Any]] = None
    result: Optional[str] = None

    def append_fragment(self, text: str) -> None:
        self.argument_fragments.append(text)

    @property
    def raw_arguments(self) -> str:
        return "".join(self.argument_fragments)

    def parse_arguments(self) -> Dict[str, Any]:
        """
        Parse the concatenated fragments once the stream has ended.

        Raises:
            ToolArgumentsError: If the payload is not a JSON object
        """
        try:
            parsed = json.loads(self.raw_arguments)
        except json.JSONDecodeError as e:
            raise ToolArgumentsError(
                f"Malformed arguments for {self.name}: {self.raw_arguments!r}"
            ) from e
        if not isinstance(parsed, dict):
            raise ToolArgumentsError(
                f"Arguments for {self.name} are not an object: {self.raw_arguments!r}"
            )
        self.parsed_arguments = parsed
        return parsed

    def arguments_json(self) -> str:
        """Arguments re-encoded for the wire and for the prompt record."""
        return json.dumps(self.parsed_arguments or {}, ensure_ascii=False)


@dataclass(frozen=True)
class CompletionRequest:
    """One turn: the reply id, the transcript so far and the interaction kind."""

    response_id: int
    transcript: List[Utterance]
    interaction_kind: str

    @property
    def is_reminder(self) -> bool:
        return self.interaction_kind == INTERACTION_REMINDER_REQUIRED

    @classmethod
    def from_message(
        cls, message: Union[ResponseRequiredRequest, ReminderRequiredRequest]
    ) -> "CompletionRequest":
        return cls(
            response_id=message.response_id,
            transcript=list(message.transcript),
            interaction_kind=message.interaction_type,
        )
