"""
Streaming completion orchestrator for one response turn.

A turn starts from a response_required or reminder_required message. The
orchestrator builds the chat prompt from the transcript, streams a completion
with the clinic's tool declarations, forwards text deltas to the caller as they
arrive, and assembles at most one tool invocation per round. When the model
calls a scheduling tool, the result is fed back into a new round so the model
can narrate it. Rounds are bounded, and every turn ends with exactly one
terminal reply, whatever fails along the way.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from clinic_agent.bot.prompts import (
    ARGUMENTS_APOLOGY,
    BEGIN_SENTENCE,
    DEFAULT_FAREWELL,
    REMINDER_NUDGE,
    ROUND_LIMIT_APOLOGY,
    SYSTEM_PROMPT,
    TURN_FAILED_APOLOGY,
)
from clinic_agent.bot.tools import END_CALL, TOOL_DEFINITIONS
from clinic_agent.config.constants import BEGIN_MESSAGE_RESPONSE_ID, LOGGER_NAME
from clinic_agent.config.settings import Settings
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
from clinic_agent.models.conversation import CallSession
from clinic_agent.models.message_schemas import (
    AgentResponse,
    ToolCallInvocationResponse,
    ToolCallResultResponse,
    final_reply,
    text_chunk,
)
from clinic_agent.services.scheduling_client import SchedulingWebhookClient

logger = logging.getLogger(LOGGER_NAME)


@dataclass
class _RoundState:
    invocation: Optional[ToolInvocation] = None
    abandoned: bool = False
    ended: bool = False


class CompletionOrchestrator:
    """
    Drives the completion stream for each turn of a call.

    The orchestrator holds no per-call state; everything call specific travels
    in the CompletionRequest and the CallSession, so one instance serves all
    connections.
    """

    def __init__(
        self,
        settings: Settings,
        scheduling_client: SchedulingWebhookClient,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.settings = settings
        self.scheduling_client = scheduling_client
        self.max_tool_rounds = settings.max_tool_rounds
        self.system_prompt = settings.load_system_prompt(SYSTEM_PROMPT)
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.settings.openai_api_key)
        return self._client

    async def begin_message(self, session: CallSession) -> None:
        """Send the scripted greeting that opens every call."""
        await session.send(final_reply(BEGIN_MESSAGE_RESPONSE_ID, BEGIN_SENTENCE))
        logger.info(f"Greeting sent for call: {session.call_id}")

    def build_prompt(
        self,
        request: CompletionRequest,
        prior_exchange: Optional[ToolInvocation] = None,
    ) -> List[Dict[str, Any]]:
        """
        Build the chat messages for one completion round.

        Args:
            request: The turn being answered
            prior_exchange: The tool call resolved in the previous round, if any

        Returns:
            Messages in chat completion format
        """
        messages: List[Dict[str, Any]] = [{"role": "system", "content": self.system_prompt}]
        for utterance in request.transcript:
            messages.append(
                {
                    "role": "assistant" if utterance.role == "agent" else "user",
                    "content": utterance.content,
                }
            )

        if prior_exchange is not None:
            messages.append(
                {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": prior_exchange.invocation_id,
                            "type": "function",
                            "function": {
                                "name": prior_exchange.name,
                                "arguments": prior_exchange.arguments_json(),
                            },
                        }
                    ],
                }
            )
            messages.append(
                {
                    "role": "tool",
                    "tool_call_id": prior_exchange.invocation_id,
                    "content": prior_exchange.result or "",
                }
            )

        if request.is_reminder:
            messages.append({"role": "user", "content": REMINDER_NUDGE})

        return messages

    async def draft(self, request: CompletionRequest, session: CallSession) -> None:
        """
        Answer one turn, sending exactly one terminal reply.

        Args:
            request: The turn to answer
            session: The call the reply belongs to
        """
        logger.info(
            f"Drafting {request.interaction_kind} response {request.response_id} "
            f"for call {session.call_id} ({len(request.transcript)} utterances)"
        )
        try:
            terminal = await self._run_rounds(request, session)
        except Exception as e:
            logger.error(
                f"Turn {request.response_id} failed for call {session.call_id}: {e}",
                exc_info=True,
            )
            terminal = final_reply(request.response_id, TURN_FAILED_APOLOGY)
        await session.send(terminal)

    async def _run_rounds(
        self, request: CompletionRequest, session: CallSession
    ) -> AgentResponse:
        """Run completion rounds until the turn can be closed; return the terminal reply."""
        prior_exchange: Optional[ToolInvocation] = None

        for round_number in range(1, self.max_tool_rounds + 1):
            if round_number > 1 and session.closed:
                logger.info(
                    f"Call {session.call_id} closed, skipping continuation round {round_number}"
                )
                return final_reply(request.response_id)

            try:
                invocation = await self._stream_round(request, prior_exchange, session)
            except Exception as e:
                logger.error(f"Error in completion stream: {e}", exc_info=True)
                return final_reply(request.response_id)

            if invocation is None:
                return final_reply(request.response_id)

            try:
                arguments = invocation.parse_arguments()
            except ToolArgumentsError as e:
                logger.error(f"Could not decode tool arguments: {e}")
                return final_reply(request.response_id, ARGUMENTS_APOLOGY)

            logger.info(
                f"Round {round_number}: model invoked {invocation.name} "
                f"({invocation.invocation_id}) for call {session.call_id}"
            )
            await session.send(
                ToolCallInvocationResponse(
                    tool_call_id=invocation.invocation_id,
                    name=invocation.name,
                    arguments=invocation.arguments_json(),
                )
            )

            if invocation.name == END_CALL:
                farewell = arguments.get("message") or DEFAULT_FAREWELL
                return final_reply(request.response_id, str(farewell), end_call=True)

            invocation.result = await self.scheduling_client.execute(invocation.name, arguments)
            await session.send(
                ToolCallResultResponse(
                    tool_call_id=invocation.invocation_id,
                    content=invocation.result,
                )
            )
            session.last_tool_exchange = invocation
            prior_exchange = invocation

        logger.error(
            f"Tool round limit ({self.max_tool_rounds}) reached for response "
            f"{request.response_id} on call {session.call_id}"
        )
        return final_reply(request.response_id, ROUND_LIMIT_APOLOGY)

    async def _stream_round(
        self,
        request: CompletionRequest,
        prior_exchange: Optional[ToolInvocation],
        session: CallSession,
    ) -> Optional[ToolInvocation]:
        """
        Open one completion stream and consume it.

        Returns:
            The tool invocation the round produced, or None for a text-only round
        """
        stream = await self.client.chat.completions.create(
            model=self.settings.openai_model,
            messages=self.build_prompt(request, prior_exchange),
            stream=True,
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
            frequency_penalty=self.settings.frequency_penalty,
            presence_penalty=self.settings.presence_penalty,
            tools=TOOL_DEFINITIONS,
        )

        state = _RoundState()
        async for chunk in stream:
            for event in events_from_chunk(chunk):
                await self._apply_event(event, state, request, session)
                if state.abandoned:
                    break
            if state.abandoned:
                await self._close_stream(stream)
                break
        else:
            await self._apply_event(StreamEnd(), state, request, session)

        logger.debug(
            f"Round for response {request.response_id} finished "
            f"(ended={state.ended}, abandoned={state.abandoned})"
        )
        return state.invocation

    async def _apply_event(
        self,
        event: StreamEvent,
        state: _RoundState,
        request: CompletionRequest,
        session: CallSession,
    ) -> None:
        if isinstance(event, TextDelta):
            await session.send(text_chunk(request.response_id, event.text))
        elif isinstance(event, ToolCallStart):
            if state.invocation is None:
                state.invocation = ToolInvocation(
                    invocation_id=event.invocation_id, name=event.name, index=event.index
                )
            else:
                # First invocation wins; the rest of the stream is dropped.
                logger.warning(
                    f"Ignoring second tool call {event.name} ({event.invocation_id}) "
                    f"while {state.invocation.name} is open"
                )
                state.abandoned = True
        elif isinstance(event, ToolCallArgumentFragment):
            # fragments of any other tool call index are dropped
            if state.invocation is not None and event.index == state.invocation.index:
                state.invocation.append_fragment(event.text)
        elif isinstance(event, StreamEnd):
            state.ended = True
        else:
            raise TypeError(f"Unhandled stream event: {event!r}")

    async def _close_stream(self, stream: Any) -> None:
        """Stop reading an abandoned stream without raising."""
        close = getattr(stream, "close", None) or getattr(stream, "aclose", None)
        if close is None:
            return
        try:
            await close()
        except Exception as e:
            logger.debug(f"Error closing abandoned completion stream: {e}")
