"""
Bot module: the language-model side of the clinic voice agent.

Key components:
- CompletionOrchestrator: streams chat completions for each response turn,
  relays text to the caller, assembles tool invocations and runs tool rounds.
- tools: the closed set of tool declarations offered to the model.
- prompts: the scripted greeting, system prompt and apology sentences.

Usage examples:
```python
from clinic_agent.bot import CompletionOrchestrator
from clinic_agent.models.completion import CompletionRequest

orchestrator = CompletionOrchestrator(settings, scheduling_client)
await orchestrator.begin_message(session)
await orchestrator.draft(CompletionRequest.from_message(message), session)
```
"""

from clinic_agent.bot.completion_orchestrator import CompletionOrchestrator

__all__ = ["CompletionOrchestrator"]
