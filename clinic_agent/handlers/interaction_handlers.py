"""
Handlers for the interaction types of the custom LLM WebSocket protocol.

Each handler receives the validated message, the call session and the completion
orchestrator. A handler either returns a message for the gateway to send, or
sends its own output through the session and returns None.
"""

import asyncio
import logging
from typing import Optional, Union

from clinic_agent.bot.completion_orchestrator import CompletionOrchestrator
from clinic_agent.config.constants import LOGGER_NAME
from clinic_agent.models.completion import CompletionRequest
from clinic_agent.models.conversation import CallSession
from clinic_agent.models.message_schemas import (
    CallDetailsRequest,
    PingPongRequest,
    PingPongResponse,
    ReminderRequiredRequest,
    ResponseRequiredRequest,
    UpdateOnlyRequest,
)

logger = logging.getLogger(LOGGER_NAME)


async def handle_call_details(
    message: CallDetailsRequest,
    session: CallSession,
    orchestrator: CompletionOrchestrator,
) -> None:
    """
    Handle the call_details message.

    Stores the call metadata on the session and sends the scripted greeting,
    since the platform waits for the agent to speak first.

    Args:
        message: Call metadata from the platform
        session: The call session
        orchestrator: Used to send the greeting
    """
    session.call_details = dict(message.call)
    logger.info(
        f"Call details for {session.call_id}: "
        f"from={message.call.get('from_number')} to={message.call.get('to_number')}"
    )
    await orchestrator.begin_message(session)
    return None


async def handle_response_required(
    message: Union[ResponseRequiredRequest, ReminderRequiredRequest],
    session: CallSession,
    orchestrator: CompletionOrchestrator,
) -> None:
    """
    Handle response_required and reminder_required messages.

    The turn runs in its own task so the receive loop keeps answering pings.
    Turns of the same call take the session's turn lock and therefore run one
    after another in arrival order.

    Args:
        message: The turn-triggering message with the current transcript
        session: The call session
        orchestrator: Drafts the reply
    """
    request = CompletionRequest.from_message(message)
    session.transcript = list(request.transcript)
    logger.info(
        f"{request.interaction_kind} for call {session.call_id}: "
        f"response_id={request.response_id}, transcript_length={len(request.transcript)}"
    )
    task = asyncio.create_task(_run_turn(request, session, orchestrator))
    session.track_turn(task)
    return None


async def _run_turn(
    request: CompletionRequest,
    session: CallSession,
    orchestrator: CompletionOrchestrator,
) -> None:
    async with session.turn_lock:
        await orchestrator.draft(request, session)


async def handle_ping_pong(
    message: PingPongRequest,
    session: CallSession,
    orchestrator: CompletionOrchestrator,
) -> Optional[PingPongResponse]:
    """Echo the keep-alive timestamp."""
    return PingPongResponse(timestamp=message.timestamp)


async def handle_update_only(
    message: UpdateOnlyRequest,
    session: CallSession,
    orchestrator: CompletionOrchestrator,
) -> None:
    """Transcript update; nothing to send."""
    logger.debug(
        f"Transcript update for call {session.call_id}: {len(message.transcript)} utterances"
    )
    return None
