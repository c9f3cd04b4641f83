"""
Client for the downstream scheduling webhook.

Availability checks, bookings and cancellations requested by the model are
forwarded as JSON POSTs to a single webhook URL, distinguished by an ``action``
field. Every call is bounded by a timeout and every failure is turned into a
sentence the agent can say, so a tool call never raises into the conversation.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from clinic_agent.config.constants import (
    DEFAULT_BOOKING_TIMEOUT,
    DEFAULT_LOOKUP_TIMEOUT,
    LOGGER_NAME,
)

logger = logging.getLogger(LOGGER_NAME)

CONFIGURATION_ERROR_MESSAGE = "Error de configuración del sistema"
UNKNOWN_TOOL_MESSAGE = "Función no reconocida"

AVAILABILITY_OK = "Disponibilidad verificada"
AVAILABILITY_FAILED = "No pude verificar la disponibilidad en este momento. Un momento por favor."
BOOKING_OK = "Cita agendada exitosamente"
BOOKING_FAILED = "Hubo un problema al agendar la cita. Un momento por favor."
CANCELLATION_OK = "Cita cancelada exitosamente"
CANCELLATION_FAILED = "No pude cancelar la cita en este momento. Un momento por favor."


class SchedulingWebhookClient:
    """
    Forwards scheduling tool calls to the business webhook.

    Args:
        webhook_url: URL of the scheduling webhook (may be empty; calls then
            report a configuration error)
        http_client: Optional shared httpx.AsyncClient; one is created lazily otherwise
        lookup_timeout: Seconds allowed for availability checks and cancellations
        booking_timeout: Seconds allowed for bookings
    """

    def __init__(
        self,
        webhook_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT,
        booking_timeout: float = DEFAULT_BOOKING_TIMEOUT,
    ):
        self.webhook_url = webhook_url
        self.lookup_timeout = lookup_timeout
        self.booking_timeout = booking_timeout
        self._http_client = http_client
        self._owns_client = http_client is None
        self._actions: Dict[str, Callable[[Dict[str, Any]], Awaitable[str]]] = {
            "check_availability": self.check_availability,
            "book_appointment": self.book_appointment,
            "cancel_appointment": self.cancel_appointment,
        }

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    async def execute(self, name: str, arguments: Dict[str, Any]) -> str:
        """
        Run the tool named by the model.

        Args:
            name: Tool name
            arguments: Parsed tool arguments

        Returns:
            A human-readable result for the model to narrate
        """
        action = self._actions.get(name)
        if action is None:
            logger.warning(f"Unrecognized scheduling tool: {name}")
            return UNKNOWN_TOOL_MESSAGE
        return await action(arguments)

    async def check_availability(self, args: Dict[str, Any]) -> str:
        payload = {
            "action": "check_availability",
            "date": args.get("date"),
            "time": args.get("time"),
            "service_type": args.get("service_type"),
        }
        return await self._post(payload, self.lookup_timeout, AVAILABILITY_OK, AVAILABILITY_FAILED)

    async def book_appointment(self, args: Dict[str, Any]) -> str:
        payload = {
            "action": "book_appointment",
            "patient_name": args.get("patient_name"),
            "phone": args.get("phone"),
            "date": args.get("date"),
            "time": args.get("time"),
            "service_type": args.get("service_type"),
            "is_new_patient": args.get("is_new_patient"),
        }
        return await self._post(payload, self.booking_timeout, BOOKING_OK, BOOKING_FAILED)

    async def cancel_appointment(self, args: Dict[str, Any]) -> str:
        payload = {
            "action": "cancel_appointment",
            "patient_name": args.get("patient_name"),
            "phone": args.get("phone"),
            "appointment_date": args.get("appointment_date"),
        }
        return await self._post(
            payload, self.lookup_timeout, CANCELLATION_OK, CANCELLATION_FAILED
        )

    async def _post(
        self,
        payload: Dict[str, Any],
        timeout: float,
        success_message: str,
        failure_message: str,
    ) -> str:
        action = payload["action"]
        if not self.webhook_url:
            logger.error(f"Scheduling webhook URL not configured, cannot run {action}")
            return CONFIGURATION_ERROR_MESSAGE

        try:
            response = await asyncio.wait_for(
                self.http_client.post(self.webhook_url, json=payload, timeout=timeout),
                timeout=timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.error(f"Scheduling webhook timed out after {timeout}s for {action}")
            return failure_message
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Scheduling webhook returned {e.response.status_code} for {action}"
            )
            return failure_message
        except httpx.HTTPError as e:
            logger.error(f"Scheduling webhook request failed for {action}: {e}")
            return failure_message
        except ValueError as e:
            logger.error(f"Scheduling webhook sent an invalid body for {action}: {e}")
            return failure_message

        logger.info(f"Scheduling webhook completed {action}")
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return success_message

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
