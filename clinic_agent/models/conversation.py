"""
Per-call session state for the custom LLM WebSocket.

This module provides the CallSession class, which carries everything a single call
connection needs between the gateway and the completion orchestrator, and the
CallSessionManager registry of live connections. Sessions are owned by the
connection that created them and never shared between calls.
"""

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional, Set

from fastapi import WebSocket

from clinic_agent.config.constants import LOGGER_NAME
from clinic_agent.models.completion import ToolInvocation
from clinic_agent.models.message_schemas import OutgoingMessage, Utterance

logger = logging.getLogger(LOGGER_NAME)


class CallSession:
    """
    State of one call connection.

    Outbound messages go through send(), which serializes writes on the socket
    and silently discards them once the connection is closed.
    """

    def __init__(self, call_id: str, websocket: WebSocket):
        self.connection_id = uuid.uuid4().hex
        self.call_id = call_id
        self.websocket = websocket
        self.call_details: Dict[str, Any] = {}
        self.transcript: List[Utterance] = []
        self.last_tool_exchange: Optional[ToolInvocation] = None
        self.closed = False
        self.turn_lock = asyncio.Lock()
        self.pending_turns: Set[asyncio.Task] = set()
        self._send_lock = asyncio.Lock()

    async def send(self, message: OutgoingMessage) -> bool:
        """
        Send an outbound message to the platform.

        Args:
            message: The outbound message model

        Returns:
            True if the message was written, False if it was discarded
        """
        if self.closed:
            logger.debug(
                f"Discarding {message.response_type} for closed call: {self.call_id}"
            )
            return False
        async with self._send_lock:
            try:
                await self.websocket.send_text(message.model_dump_json())
            except Exception as e:
                logger.warning(f"Send failed for call {self.call_id}, closing session: {e}")
                self.closed = True
                return False
        return True

    def track_turn(self, task: asyncio.Task) -> None:
        """Keep a reference to an in-flight turn until it finishes."""
        self.pending_turns.add(task)
        task.add_done_callback(self.pending_turns.discard)

    def close(self) -> None:
        self.closed = True


class CallSessionManager:
    """Registry of live call sessions keyed by connection id."""

    def __init__(self):
        self.active_sessions: Dict[str, CallSession] = {}

    def add_session(self, session: CallSession) -> None:
        self.active_sessions[session.connection_id] = session

    def get_session(self, connection_id: str) -> Optional[CallSession]:
        return self.active_sessions.get(connection_id)

    def remove_session(self, connection_id: str) -> None:
        if connection_id in self.active_sessions:
            del self.active_sessions[connection_id]

    def get_all_sessions(self) -> Dict[str, CallSession]:
        return self.active_sessions
