"""
WebSocket connection manager for the voice platform's custom LLM protocol.

This module implements the server side of the per-call WebSocket:
- Accept the connection and declare the bridge's capabilities (config message)
- Route incoming messages to handler functions by interaction type
- Keep keep-alive probes answered while a response turn is being drafted
- Close on protocol violations and release the call session on disconnect

The WebSocketManager class is the central component that orchestrates all
WebSocket communication between the voice platform and the completion pipeline.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from clinic_agent.bot.completion_orchestrator import CompletionOrchestrator
from clinic_agent.config.constants import (
    CLOSE_CODE_INTERNAL_ERROR,
    CLOSE_CODE_UNSUPPORTED_DATA,
    INTERACTION_CALL_DETAILS,
    INTERACTION_PING_PONG,
    INTERACTION_REMINDER_REQUIRED,
    INTERACTION_RESPONSE_REQUIRED,
    INTERACTION_UPDATE_ONLY,
    LOGGER_NAME,
    TURN_DRAIN_TIMEOUT,
)
from clinic_agent.handlers.interaction_handlers import (
    handle_call_details,
    handle_ping_pong,
    handle_response_required,
    handle_update_only,
)
from clinic_agent.models.conversation import CallSession, CallSessionManager
from clinic_agent.models.message_schemas import (
    BaseResponse,
    ConfigResponse,
    UnknownInteractionError,
    parse_request,
)

logger = logging.getLogger(LOGGER_NAME)

# Type hint for handler functions
HandlerFunc = Callable[
    [Any, CallSession, CompletionOrchestrator],
    Awaitable[Optional[BaseResponse]],
]


class WebSocketManager:
    """Manages call WebSockets and routes messages to interaction handlers.

    One connection carries one call. Each message is routed by its
    "interaction_type" field; turn-triggering messages are drafted in the
    background so that ping_pong is always answered immediately.
    """

    def __init__(
        self,
        orchestrator: CompletionOrchestrator,
        drain_timeout: float = TURN_DRAIN_TIMEOUT,
    ):
        self.session_manager = CallSessionManager()
        self.orchestrator = orchestrator
        self.drain_timeout = drain_timeout

        self.handlers: Dict[str, HandlerFunc] = {
            INTERACTION_CALL_DETAILS: handle_call_details,
            INTERACTION_RESPONSE_REQUIRED: handle_response_required,
            INTERACTION_REMINDER_REQUIRED: handle_response_required,
            INTERACTION_PING_PONG: handle_ping_pong,
            INTERACTION_UPDATE_ONLY: handle_update_only,
        }

    async def handle_websocket(self, websocket: WebSocket, call_id: str):
        """Handle a call WebSocket throughout its lifecycle.

        Args:
            websocket: The FastAPI WebSocket connection object
            call_id: Call identifier taken from the connection path

        This method:
        1. Accepts the connection and sends the config message first
        2. Processes incoming frames in a loop, routing text messages to handlers
        3. Closes with 1007 on binary frames and 1011 on unexpected errors
        4. Discards the output of turns still running once the call is gone
        """
        await websocket.accept()
        session = CallSession(call_id, websocket)
        self.session_manager.add_session(session)
        logger.info(f"WebSocket connection established for call: {call_id}")

        disconnected = False
        close_code: Optional[int] = None
        close_reason = ""

        try:
            await session.send(ConfigResponse())

            while True:
                frame = await websocket.receive()
                if frame.get("type") == "websocket.disconnect":
                    disconnected = True
                    break

                if frame.get("bytes") is not None:
                    logger.error(f"Binary message received instead of text on call: {call_id}")
                    close_code = CLOSE_CODE_UNSUPPORTED_DATA
                    close_reason = "Cannot process binary messages."
                    break

                text = frame.get("text")
                if text is not None:
                    await self.dispatch(text, session)

        except WebSocketDisconnect:
            disconnected = True
        except Exception as e:
            logger.error(f"Error in WebSocket connection: {e}", exc_info=True)
            close_code = CLOSE_CODE_INTERNAL_ERROR
            close_reason = "Internal server error"
        finally:
            session.close()
            if not disconnected:
                try:
                    if close_code is None:
                        await websocket.close()
                    else:
                        await websocket.close(code=close_code, reason=close_reason)
                except Exception as e:
                    logger.debug(f"Error closing WebSocket for call {call_id}: {e}")
            await self._drain_turns(session)
            self.session_manager.remove_session(session.connection_id)
            logger.info(f"WebSocket connection closed for call: {call_id}")

    async def dispatch(self, text: str, session: CallSession) -> None:
        """Decode one text frame and run its handler."""
        try:
            message = parse_request(text)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing WebSocket message: {e}")
            return
        except UnknownInteractionError as e:
            logger.warning(f"Unrecognized interaction type received: {e.interaction_type}")
            return
        except ValidationError as e:
            logger.error(f"Message validation error: {e}")
            return

        handler = self.handlers.get(message.interaction_type)
        if handler is None:
            logger.warning(f"Unhandled interaction type received: {message.interaction_type}")
            return

        response = await handler(message, session, self.orchestrator)
        if response is not None:
            await session.send(response)

    async def _drain_turns(self, session: CallSession) -> None:
        """Let in-flight turns finish (their output is discarded), within a bound."""
        pending = list(session.pending_turns)
        if not pending:
            return
        logger.info(
            f"Waiting for {len(pending)} in-flight turn(s) of closed call: {session.call_id}"
        )
        _, still_running = await asyncio.wait(pending, timeout=self.drain_timeout)
        for task in still_running:
            logger.warning(f"Cancelling turn still running for call: {session.call_id}")
            task.cancel()
