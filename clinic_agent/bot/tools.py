"""
Tool declarations offered to the model on every completion request.

The set is closed: three scheduling actions forwarded to the business webhook
and ``end_call``, which the bridge handles itself.
"""

from typing import Any, Dict, List

CHECK_AVAILABILITY = "check_availability"
BOOK_APPOINTMENT = "book_appointment"
CANCEL_APPOINTMENT = "cancel_appointment"
END_CALL = "end_call"


def _function(name: str, description: str, properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    _function(
        CHECK_AVAILABILITY,
        "Verificar disponibilidad de citas en fechas específicas",
        {
            "date": {
                "type": "string",
                "description": "Fecha solicitada en formato YYYY-MM-DD",
            },
            "time": {
                "type": "string",
                "description": "Hora preferida en formato HH:MM",
            },
            "service_type": {
                "type": "string",
                "description": "Tipo de consulta: general, limpieza, endodoncia, ortodoncia, implante",
            },
        },
        ["date"],
    ),
    _function(
        BOOK_APPOINTMENT,
        "Agendar una cita dental después de verificar disponibilidad",
        {
            "patient_name": {"type": "string", "description": "Nombre completo del paciente"},
            "phone": {"type": "string", "description": "Teléfono de contacto del paciente"},
            "date": {"type": "string", "description": "Fecha de la cita en formato YYYY-MM-DD"},
            "time": {"type": "string", "description": "Hora de la cita en formato HH:MM"},
            "service_type": {"type": "string", "description": "Tipo de consulta solicitada"},
            "is_new_patient": {
                "type": "boolean",
                "description": "Si es un paciente nuevo o existente",
            },
        },
        ["patient_name", "phone", "date", "time", "service_type"],
    ),
    _function(
        CANCEL_APPOINTMENT,
        "Cancelar una cita existente",
        {
            "patient_name": {"type": "string", "description": "Nombre del paciente"},
            "phone": {
                "type": "string",
                "description": "Teléfono del paciente para verificar identidad",
            },
            "appointment_date": {
                "type": "string",
                "description": "Fecha de la cita a cancelar",
            },
        },
        ["patient_name", "phone"],
    ),
    _function(
        END_CALL,
        "Finalizar la llamada solo cuando el paciente lo solicite explícitamente",
        {
            "message": {
                "type": "string",
                "description": "Mensaje de despedida antes de finalizar la llamada",
            },
        },
        ["message"],
    ),
]
