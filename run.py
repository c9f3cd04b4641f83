"""
Run script for starting the Clinic Voice Agent server.

This script validates the required configuration and starts the FastAPI server
with uvicorn. The process exits with status 1 if configuration is missing.

Usage:
    python run.py [--port PORT] [--host HOST] [--log-level LEVEL]
"""

import argparse
import os
import sys

import uvicorn

from clinic_agent.config.logging_config import configure_logging
from clinic_agent.config.settings import ConfigurationError, Settings, load_env_file

load_env_file()

logger = configure_logging()


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Start the Clinic Voice Agent server"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "3000")),
        help="Port to run the server on (default: 3000 or PORT env var)",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("HOST", "0.0.0.0"),
        help="Host to bind the server to (default: 0.0.0.0 or HOST env var)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO").upper(),
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO or LOG_LEVEL env var)",
    )
    return parser.parse_args()


def main():
    """Main entry point: validate configuration, then serve."""
    args = parse_args()

    # The app module configures logging again on import; it reads LOG_LEVEL then
    os.environ["LOG_LEVEL"] = args.log_level
    configure_logging(args.log_level)

    try:
        settings = Settings.from_env().require()
    except (ConfigurationError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logger.info(f"Starting server on http://{args.host}:{args.port}")
    logger.info(f"WebSocket endpoint: ws://{args.host}:{args.port}/llm-websocket/{{call_id}}")
    logger.info(f"Log level: {args.log_level}")
    logger.info(f"Chat model: {settings.openai_model}")
    logger.info(f"Scheduling webhook: {settings.scheduling_webhook_url}")

    uvicorn.run(
        "clinic_agent.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        ws="websockets",
        access_log=False,
        reload=os.getenv("ENV", "production").lower() == "development",
    )


if __name__ == "__main__":
    main()
