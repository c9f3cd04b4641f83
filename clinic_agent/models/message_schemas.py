"""
Pydantic models for the voice platform's custom LLM WebSocket protocol.

This module defines structured data models for all incoming and outgoing messages
exchanged over the per-call WebSocket, plus the lifecycle webhook body, providing
type validation and serialization.
"""

import json
import logging
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from clinic_agent.config.constants import (
    INTERACTION_CALL_DETAILS,
    INTERACTION_PING_PONG,
    INTERACTION_REMINDER_REQUIRED,
    INTERACTION_RESPONSE_REQUIRED,
    INTERACTION_UPDATE_ONLY,
    LOGGER_NAME,
)

logger = logging.getLogger(LOGGER_NAME)

KNOWN_LIFECYCLE_EVENTS = ["call_started", "call_ended", "call_analyzed"]


class UnknownInteractionError(ValueError):
    """Raised when an inbound message carries an interaction type we do not handle."""

    def __init__(self, interaction_type: Optional[str]):
        super().__init__(f"Unknown interaction type: {interaction_type}")
        self.interaction_type = interaction_type


class Utterance(BaseModel):
    """One line of the call transcript."""

    role: Literal["agent", "user"] = Field(..., description="Who spoke: the agent or the caller")
    content: str = Field("", description="What was said")


# Inbound messages
class BaseRequest(BaseModel):
    """Base model for all messages received from the voice platform."""

    interaction_type: str = Field(..., description="Interaction type identifier")


class CallDetailsRequest(BaseRequest):
    """Call metadata, sent once after the config message when requested."""

    interaction_type: Literal["call_details"]
    call: Dict[str, Any] = Field(default_factory=dict, description="Call metadata")


class ResponseRequiredRequest(BaseRequest):
    """The caller finished speaking and the agent must answer."""

    interaction_type: Literal["response_required"]
    response_id: int = Field(..., description="Id the reply must carry")
    transcript: List[Utterance] = Field(default_factory=list)

    @field_validator("response_id")
    def validate_response_id(cls, v):
        """Response ids are never negative."""
        if v < 0:
            raise ValueError(f"Invalid response_id: {v}")
        return v


class ReminderRequiredRequest(ResponseRequiredRequest):
    """The caller has been silent and the agent should continue the conversation."""

    interaction_type: Literal["reminder_required"]


class PingPongRequest(BaseRequest):
    """Keep-alive probe that must be echoed immediately."""

    interaction_type: Literal["ping_pong"]
    timestamp: int = Field(..., description="Sender timestamp in milliseconds")


class UpdateOnlyRequest(BaseRequest):
    """Transcript update that needs no reply."""

    interaction_type: Literal["update_only"]
    transcript: List[Utterance] = Field(default_factory=list)
    turntaking: Optional[str] = None


IncomingMessage = Annotated[
    Union[
        CallDetailsRequest,
        ResponseRequiredRequest,
        ReminderRequiredRequest,
        PingPongRequest,
        UpdateOnlyRequest,
    ],
    Field(discriminator="interaction_type"),
]

INTERACTION_TYPES = [
    INTERACTION_CALL_DETAILS,
    INTERACTION_RESPONSE_REQUIRED,
    INTERACTION_REMINDER_REQUIRED,
    INTERACTION_PING_PONG,
    INTERACTION_UPDATE_ONLY,
]

_incoming_adapter: TypeAdapter = TypeAdapter(IncomingMessage)


def parse_request(data: Union[str, Dict[str, Any]]) -> IncomingMessage:
    """
    Decode an inbound message into its typed model.

    Args:
        data: Raw JSON text or an already decoded dictionary

    Returns:
        The validated request model

    Raises:
        json.JSONDecodeError: If the text is not JSON
        UnknownInteractionError: If the interaction type is not one we handle
        pydantic.ValidationError: If the message is malformed
    """
    message = json.loads(data) if isinstance(data, str) else data
    if not isinstance(message, dict):
        raise UnknownInteractionError(None)
    interaction_type = message.get("interaction_type")
    if interaction_type not in INTERACTION_TYPES:
        raise UnknownInteractionError(interaction_type)
    return _incoming_adapter.validate_python(message)


# Outbound messages
class BaseResponse(BaseModel):
    """Base model for all messages sent to the voice platform."""

    response_type: str = Field(..., description="Response type identifier")


class ConfigOptions(BaseModel):
    """Capabilities declared by the bridge at connection start."""

    auto_reconnect: bool = True
    call_details: bool = True


class ConfigResponse(BaseResponse):
    """First message on every connection."""

    response_type: Literal["config"] = "config"
    config: ConfigOptions = Field(default_factory=ConfigOptions)


class PingPongResponse(BaseResponse):
    """Echo of a ping_pong probe."""

    response_type: Literal["ping_pong"] = "ping_pong"
    timestamp: int


class AgentResponse(BaseResponse):
    """Spoken content: a streamed chunk or the final reply of a turn."""

    response_type: Literal["response"] = "response"
    response_id: int
    content: str = ""
    content_complete: bool = False
    end_call: bool = False


class ToolCallInvocationResponse(BaseResponse):
    """Announces a tool invocation decided by the model."""

    response_type: Literal["tool_call_invocation"] = "tool_call_invocation"
    tool_call_id: str
    name: str
    arguments: str = Field(..., description="JSON encoded arguments")


class ToolCallResultResponse(BaseResponse):
    """Reports the result of a tool invocation."""

    response_type: Literal["tool_call_result"] = "tool_call_result"
    tool_call_id: str
    content: str


OutgoingMessage = Union[
    ConfigResponse,
    PingPongResponse,
    AgentResponse,
    ToolCallInvocationResponse,
    ToolCallResultResponse,
]


def text_chunk(response_id: int, text: str) -> AgentResponse:
    """Build a non-final streamed chunk."""
    return AgentResponse(response_id=response_id, content=text, content_complete=False)


def final_reply(response_id: int, text: str = "", end_call: bool = False) -> AgentResponse:
    """Build the terminal reply of a turn."""
    return AgentResponse(
        response_id=response_id,
        content=text,
        content_complete=True,
        end_call=end_call,
    )


def is_terminal(message: BaseResponse) -> bool:
    """Whether a message closes a turn."""
    return isinstance(message, AgentResponse) and (message.content_complete or message.end_call)


# Lifecycle webhook
class LifecycleEvent(BaseModel):
    """Call lifecycle notification posted to the HTTP webhook."""

    event: str = Field(..., description="Event name, e.g. call_started")
    call: Optional[Dict[str, Any]] = None
    data: Optional[Dict[str, Any]] = None

    @field_validator("event")
    def validate_event(cls, v):
        """Log events outside the documented set; they are still accepted."""
        if v not in KNOWN_LIFECYCLE_EVENTS:
            logger.warning(f"Unknown lifecycle event name: {v}")
        return v

    @property
    def call_id(self) -> Optional[str]:
        payload = self.call or self.data or {}
        return payload.get("call_id")
