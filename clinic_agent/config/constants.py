"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for protocol names and default values.
"""

# Logger name used throughout the application
LOGGER_NAME = "clinic_agent"

# Default OpenAI chat model and sampling parameters
DEFAULT_CHAT_MODEL = "gpt-4-turbo-preview"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 200
DEFAULT_FREQUENCY_PENALTY = 0.5
DEFAULT_PRESENCE_PENALTY = 0.5

# Hard bound on tool rounds within one response turn
DEFAULT_MAX_TOOL_ROUNDS = 5

# Scheduling webhook timeouts (seconds)
DEFAULT_LOOKUP_TIMEOUT = 5.0
DEFAULT_BOOKING_TIMEOUT = 10.0

# How long a closing connection waits for in-flight turns (seconds)
TURN_DRAIN_TIMEOUT = 15.0

# Inbound interaction types
INTERACTION_CALL_DETAILS = "call_details"
INTERACTION_RESPONSE_REQUIRED = "response_required"
INTERACTION_REMINDER_REQUIRED = "reminder_required"
INTERACTION_PING_PONG = "ping_pong"
INTERACTION_UPDATE_ONLY = "update_only"

# Response id used for the scripted greeting
BEGIN_MESSAGE_RESPONSE_ID = 0

# WebSocket close codes
CLOSE_CODE_UNSUPPORTED_DATA = 1007
CLOSE_CODE_INTERNAL_ERROR = 1011

# Lifecycle webhook
SIGNATURE_HEADER = "x-retell-signature"
SIGNATURE_TOLERANCE_MS = 5 * 60 * 1000
