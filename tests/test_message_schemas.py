"""
Unit tests for the message schemas.

These tests validate that inbound messages decode into the right models, that
unknown or malformed messages are rejected, and that outbound messages serialize
to the wire format the voice platform expects.
"""

import json

import pytest
from pydantic import ValidationError

from clinic_agent.models.message_schemas import (
    AgentResponse,
    CallDetailsRequest,
    ConfigResponse,
    LifecycleEvent,
    PingPongRequest,
    PingPongResponse,
    ReminderRequiredRequest,
    ResponseRequiredRequest,
    ToolCallInvocationResponse,
    ToolCallResultResponse,
    UnknownInteractionError,
    UpdateOnlyRequest,
    final_reply,
    is_terminal,
    parse_request,
    text_chunk,
)


TRANSCRIPT = [
    {"role": "agent", "content": "Hola, ¿en qué puedo ayudarte?"},
    {"role": "user", "content": "Quiero una cita para el martes."},
]


class TestParseRequest:
    """Tests for decoding inbound messages."""

    def test_call_details(self):
        message = parse_request(
            json.dumps({"interaction_type": "call_details", "call": {"call_id": "abc"}})
        )
        assert isinstance(message, CallDetailsRequest)
        assert message.call["call_id"] == "abc"

    def test_response_required(self):
        message = parse_request(
            {"interaction_type": "response_required", "response_id": 7, "transcript": TRANSCRIPT}
        )
        assert isinstance(message, ResponseRequiredRequest)
        assert message.response_id == 7
        assert [u.role for u in message.transcript] == ["agent", "user"]

    def test_reminder_required(self):
        message = parse_request(
            {"interaction_type": "reminder_required", "response_id": 3, "transcript": []}
        )
        assert isinstance(message, ReminderRequiredRequest)
        assert message.interaction_type == "reminder_required"

    def test_ping_pong(self):
        message = parse_request('{"interaction_type": "ping_pong", "timestamp": 1700000000000}')
        assert isinstance(message, PingPongRequest)
        assert message.timestamp == 1700000000000

    def test_update_only_without_transcript(self):
        message = parse_request('{"interaction_type": "update_only"}')
        assert isinstance(message, UpdateOnlyRequest)
        assert message.transcript == []

    def test_unknown_interaction_type(self):
        with pytest.raises(UnknownInteractionError) as exc_info:
            parse_request('{"interaction_type": "something_new"}')
        assert exc_info.value.interaction_type == "something_new"

    def test_non_object_message(self):
        with pytest.raises(UnknownInteractionError):
            parse_request("[1, 2, 3]")

    def test_invalid_json(self):
        with pytest.raises(json.JSONDecodeError):
            parse_request("{not json")

    def test_missing_response_id(self):
        with pytest.raises(ValidationError):
            parse_request({"interaction_type": "response_required", "transcript": []})

    def test_negative_response_id(self):
        with pytest.raises(ValidationError):
            parse_request({"interaction_type": "response_required", "response_id": -1})

    def test_invalid_role(self):
        with pytest.raises(ValidationError):
            parse_request(
                {
                    "interaction_type": "response_required",
                    "response_id": 1,
                    "transcript": [{"role": "narrator", "content": "..."}],
                }
            )


class TestOutgoingMessages:
    """Tests for the wire format of outbound messages."""

    def test_config(self):
        assert json.loads(ConfigResponse().model_dump_json()) == {
            "response_type": "config",
            "config": {"auto_reconnect": True, "call_details": True},
        }

    def test_ping_pong(self):
        assert json.loads(PingPongResponse(timestamp=42).model_dump_json()) == {
            "response_type": "ping_pong",
            "timestamp": 42,
        }

    def test_text_chunk(self):
        chunk = text_chunk(7, "Claro")
        assert json.loads(chunk.model_dump_json()) == {
            "response_type": "response",
            "response_id": 7,
            "content": "Claro",
            "content_complete": False,
            "end_call": False,
        }
        assert not is_terminal(chunk)

    def test_final_reply(self):
        reply = final_reply(7)
        assert reply.content == ""
        assert reply.content_complete is True
        assert reply.end_call is False
        assert is_terminal(reply)

    def test_end_call_reply(self):
        reply = final_reply(9, "Hasta luego", end_call=True)
        assert reply.end_call is True
        assert reply.content == "Hasta luego"
        assert is_terminal(reply)

    def test_tool_call_messages(self):
        invocation = ToolCallInvocationResponse(
            tool_call_id="call_1", name="check_availability", arguments='{"date": "2024-05-02"}'
        )
        result = ToolCallResultResponse(tool_call_id="call_1", content="Hay espacio a las 10")
        assert json.loads(invocation.model_dump_json())["response_type"] == "tool_call_invocation"
        assert json.loads(result.model_dump_json()) == {
            "response_type": "tool_call_result",
            "tool_call_id": "call_1",
            "content": "Hay espacio a las 10",
        }
        assert not is_terminal(result)

    def test_agent_response_defaults(self):
        response = AgentResponse(response_id=1)
        assert response.content == ""
        assert response.content_complete is False


class TestLifecycleEvent:
    """Tests for the lifecycle webhook body."""

    def test_call_id_from_call(self):
        event = LifecycleEvent(event="call_started", call={"call_id": "c-1"})
        assert event.call_id == "c-1"

    def test_call_id_from_data(self):
        event = LifecycleEvent(event="call_ended", data={"call_id": "c-2"})
        assert event.call_id == "c-2"

    def test_unknown_event_accepted(self):
        event = LifecycleEvent(event="call_transferred")
        assert event.call_id is None

    def test_missing_event(self):
        with pytest.raises(ValidationError):
            LifecycleEvent.model_validate_json('{"call": {}}')
