"""
Handlers module for the clinic voice agent.

Key components:
- interaction_handlers: one handler per interaction type of the custom LLM
  WebSocket (call_details, response_required / reminder_required, ping_pong,
  update_only).
- lifecycle_handlers: processing of verified call lifecycle notifications
  received on the HTTP webhook.

Usage examples:
```python
from clinic_agent.handlers import interaction_handlers
from clinic_agent.models.message_schemas import parse_request

message = parse_request(raw_text)
if message.interaction_type == "ping_pong":
    reply = await interaction_handlers.handle_ping_pong(message, session, orchestrator)
    await session.send(reply)
```
"""
