"""
FastAPI server for the dental clinic voice agent.

This module initializes and configures the FastAPI application that the voice
platform talks to:
- ``/llm-websocket/{call_id}``: the custom LLM WebSocket, one connection per call
- ``/webhook``: signed call lifecycle notifications
- ``/health`` and ``/``: liveness and service information

Replies are drafted with OpenAI chat completions; scheduling actions are
forwarded to the clinic's business webhook.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from clinic_agent.bot.completion_orchestrator import CompletionOrchestrator
from clinic_agent.config.constants import SIGNATURE_HEADER
from clinic_agent.config.logging_config import configure_logging
from clinic_agent.config.settings import ConfigurationError, Settings, load_env_file
from clinic_agent.handlers.lifecycle_handlers import handle_lifecycle_event
from clinic_agent.models.message_schemas import LifecycleEvent
from clinic_agent.services.scheduling_client import SchedulingWebhookClient
from clinic_agent.services.webhook_verifier import verify_signature
from clinic_agent.websocket_manager import WebSocketManager

SERVICE_NAME = "Clinic Voice Agent"

# Load environment variables from .env file if it exists
load_env_file()

logger = configure_logging()

settings = Settings.from_env()

scheduling_client = SchedulingWebhookClient(
    settings.scheduling_webhook_url,
    lookup_timeout=settings.lookup_timeout,
    booking_timeout=settings.booking_timeout,
)
orchestrator = CompletionOrchestrator(settings, scheduling_client)
websocket_manager = WebSocketManager(orchestrator)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Refuse to serve without the required configuration."""
    try:
        settings.require()
    except ConfigurationError as e:
        logger.error(str(e))
        raise
    logger.info(f"{SERVICE_NAME} ready (model: {settings.openai_model})")
    yield
    await scheduling_client.aclose()
    logger.info(f"{SERVICE_NAME} stopped")


app = FastAPI(
    title=SERVICE_NAME,
    description="Bridge between the voice platform's custom LLM WebSocket and OpenAI chat completions",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.websocket("/llm-websocket/{call_id}")
async def llm_websocket_endpoint(websocket: WebSocket, call_id: str):
    """Custom LLM WebSocket for one call.

    The platform opens one connection per call; the call id is the last path
    segment. All messages follow the custom LLM WebSocket protocol.
    """
    await websocket_manager.handle_websocket(websocket, call_id)


@app.post("/webhook")
async def lifecycle_webhook(request: Request):
    """Receive a signed call lifecycle notification.

    Returns:
        401 if the signature does not match the raw body, 400 if the body is
        not an event, otherwise ``{"received": true}``.
    """
    raw_body = (await request.body()).decode("utf-8", errors="replace")
    signature = request.headers.get(SIGNATURE_HEADER)
    if not verify_signature(raw_body, settings.retell_api_key, signature):
        logger.error("Invalid signature on lifecycle webhook")
        return JSONResponse(status_code=401, content={"error": "Invalid signature"})

    try:
        event = LifecycleEvent.model_validate_json(raw_body)
    except ValidationError as e:
        logger.error(f"Invalid lifecycle webhook body: {e}")
        return JSONResponse(status_code=400, content={"error": "Invalid event"})

    await handle_lifecycle_event(event)
    return {"received": True}


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Status information, including the number of live call connections.
    """
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "active_calls": len(websocket_manager.session_manager.get_all_sessions()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/")
async def root():
    """Root endpoint to display basic information about the API."""
    return {
        "name": SERVICE_NAME,
        "description": "Dental clinic receptionist voice agent",
        "version": "1.0.0",
        "status": "ok",
        "endpoints": {
            "/llm-websocket/{call_id}": "Custom LLM WebSocket for the voice platform",
            "/webhook": "Call lifecycle notifications",
            "/health": "Health check endpoint",
        },
    }
