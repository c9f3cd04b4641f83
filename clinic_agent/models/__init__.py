"""
Models module for data structures and state management in the clinic voice agent.

Key components:
- message_schemas: Pydantic models for the custom LLM WebSocket protocol and the
  lifecycle webhook body.
- completion: Stream events, tool invocations and turn requests used by the
  completion orchestrator.
- conversation: Per-call session state and the registry of live connections.

Usage examples:
```python
from clinic_agent.models.message_schemas import parse_request, final_reply

request = parse_request('{"interaction_type": "ping_pong", "timestamp": 1}')
reply = final_reply(response_id=7, text="Hasta luego", end_call=True)
await session.send(reply)
```
"""

from clinic_agent.models.completion import (
    CompletionRequest,
    StreamEnd,
    StreamEvent,
    TextDelta,
    ToolArgumentsError,
    ToolCallArgumentFragment,
    ToolCallStart,
    ToolInvocation,
    events_from_chunk,
)
from clinic_agent.models.conversation import CallSession, CallSessionManager
from clinic_agent.models.message_schemas import (
    AgentResponse,
    CallDetailsRequest,
    ConfigResponse,
    IncomingMessage,
    LifecycleEvent,
    OutgoingMessage,
    PingPongRequest,
    PingPongResponse,
    ReminderRequiredRequest,
    ResponseRequiredRequest,
    ToolCallInvocationResponse,
    ToolCallResultResponse,
    UnknownInteractionError,
    UpdateOnlyRequest,
    Utterance,
    final_reply,
    parse_request,
    text_chunk,
)
