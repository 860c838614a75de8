import datetime as dt
from typing import Any, Callable

from loguru import logger

from hospital.domain.exceptions import (
    SLOT_FORMAT,
    DuplicateRecordError,
    HospitalError,
    IllegalTransitionError,
    InvalidDateError,
    NotFoundError,
    PersistenceError,
    ReferentialIntegrityError,
    SchedulingConflictError,
    ValidationError,
)
from hospital.domain.models import Appointment, AppointmentStatus
from hospital.services.ports import AbstractSchedulingService

ERROR_KINDS: dict[type[HospitalError], str] = {
    ValidationError: "validation",
    NotFoundError: "not_found",
    InvalidDateError: "invalid_date",
    SchedulingConflictError: "scheduling_conflict",
    IllegalTransitionError: "illegal_transition",
    DuplicateRecordError: "duplicate",
    ReferentialIntegrityError: "referential_integrity",
    PersistenceError: "persistence",
}


def error_kind(exc: HospitalError) -> str:
    """Map an error to a stable kind string, honouring subclasses."""
    for cls in type(exc).__mro__:
        if cls in ERROR_KINDS:
            return ERROR_KINDS[cls]
    return "error"


def _failure(kind: str, message: str) -> dict[str, Any]:
    return {"success": False, "error": True, "error_kind": kind, "message": message}


def _appointment_payload(appointment: Appointment) -> dict[str, Any]:
    return {
        "appointment_id": appointment.id,
        "patient_id": appointment.patient_id,
        "patient_name": appointment.patient_name or "",
        "doctor_id": appointment.doctor_id,
        "doctor_name": appointment.doctor_name or "",
        "scheduled_at": appointment.scheduled_at.isoformat(),
        "slot": appointment.scheduled_at.strftime(SLOT_FORMAT),
        "reason": appointment.reason or "",
        "status": appointment.status.value,
    }


def _parse_id(value: object, field_name: str) -> tuple[int | None, str | None]:
    """Parse a positive integer ID. Returns ``(id, None)`` or ``(None, error_msg)``."""
    if isinstance(value, bool):
        return None, f"Invalid ID for '{field_name}': '{value}'."
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
    else:
        return None, f"Invalid ID for '{field_name}': '{value}'. Expected a positive number."
    if parsed <= 0:
        return None, f"Invalid ID for '{field_name}': '{value}'. Expected a positive number."
    return parsed, None


def _parse_iso_datetime(value: object, field_name: str) -> tuple[dt.datetime | None, str | None]:
    """Parse an ISO 8601 date-time string such as ``2026-03-15T14:30``."""
    if not isinstance(value, str):
        return (
            None,
            f"Invalid date-time for '{field_name}': must be a string in YYYY-MM-DDTHH:MM format.",
        )
    try:
        parsed = dt.datetime.fromisoformat(value.strip())
    except (ValueError, TypeError):
        return None, f"Invalid date-time for '{field_name}': '{value}'. Expected YYYY-MM-DDTHH:MM."
    if parsed.tzinfo is not None:
        return None, f"Invalid date-time for '{field_name}': use clinic local time without offset."
    return parsed, None


def _parse_status(value: object) -> tuple[AppointmentStatus | None, str | None]:
    if not isinstance(value, str):
        return None, "Invalid status: must be one of SCHEDULED, ATTENDED, CANCELLED."
    try:
        return AppointmentStatus(value.strip().upper()), None
    except ValueError:
        return None, f"Invalid status '{value}'. Expected SCHEDULED, ATTENDED or CANCELLED."


class FrontDeskHandlers:
    """Turns raw front-desk input into scheduling calls and result payloads.

    Every handler returns a dict with ``success`` and, on failure, ``error``,
    ``error_kind`` and ``message``. Callers branch on ``error_kind``; the
    message is for display only.
    """

    def __init__(self, scheduling: AbstractSchedulingService) -> None:
        self._scheduling = scheduling

    def handle_schedule_appointment(self, arguments: dict[str, Any]) -> dict[str, Any]:
        required = ("patient_id", "doctor_id", "scheduled_at")
        if not all(arguments.get(name) for name in required):
            return _failure(
                "validation", "'patient_id', 'doctor_id', and 'scheduled_at' are all required."
            )

        patient_id, patient_err = _parse_id(arguments["patient_id"], "patient_id")
        doctor_id, doctor_err = _parse_id(arguments["doctor_id"], "doctor_id")
        scheduled_at, date_err = _parse_iso_datetime(arguments["scheduled_at"], "scheduled_at")
        err = patient_err or doctor_err or date_err
        if err:
            return _failure("validation", err)

        logger.debug("Front desk: schedule_appointment")
        return self._run(
            "schedule_appointment",
            lambda: self._scheduling.schedule_appointment(
                patient_id, doctor_id, scheduled_at, arguments.get("reason") or None
            ),
            "Appointment scheduled successfully.",
        )

    def handle_reschedule_appointment(self, arguments: dict[str, Any]) -> dict[str, Any]:
        appointment_id, err = _parse_id(arguments.get("appointment_id"), "appointment_id")
        if err:
            return _failure("validation", err)

        new_scheduled_at: dt.datetime | None = None
        if arguments.get("scheduled_at"):
            new_scheduled_at, err = _parse_iso_datetime(arguments["scheduled_at"], "scheduled_at")
            if err:
                return _failure("validation", err)

        logger.debug("Front desk: reschedule_appointment")
        return self._run(
            "reschedule_appointment",
            lambda: self._scheduling.reschedule_appointment(
                appointment_id, new_scheduled_at, arguments.get("reason")
            ),
            "Appointment updated successfully.",
        )

    def handle_change_status(self, arguments: dict[str, Any]) -> dict[str, Any]:
        appointment_id, id_err = _parse_id(arguments.get("appointment_id"), "appointment_id")
        status, status_err = _parse_status(arguments.get("status"))
        err = id_err or status_err
        if err:
            return _failure("validation", err)

        logger.debug("Front desk: change_status")
        return self._run(
            "change_status",
            lambda: self._scheduling.change_appointment_status(appointment_id, status),
            "Appointment status updated.",
        )

    def handle_cancel_appointment(self, arguments: dict[str, Any]) -> dict[str, Any]:
        appointment_id, err = _parse_id(arguments.get("appointment_id"), "appointment_id")
        if err:
            return _failure("validation", err)

        logger.debug("Front desk: cancel_appointment")
        try:
            removed = self._scheduling.cancel_appointment(appointment_id)
        except HospitalError as exc:
            return _failure(error_kind(exc), str(exc))
        except Exception:
            logger.exception("Unexpected error in cancel_appointment")
            return _failure(
                "unexpected", "An unexpected error occurred while cancelling the appointment."
            )

        if not removed:
            return _failure("not_found", f"Appointment with ID {appointment_id} was not found")
        return {
            "success": True,
            "appointment_id": appointment_id,
            "message": "Appointment removed successfully.",
        }

    def handle_list_patient_appointments(self, arguments: dict[str, Any]) -> dict[str, Any]:
        patient_id, err = _parse_id(arguments.get("patient_id"), "patient_id")
        if err:
            return _failure("validation", err)

        try:
            appointments = self._scheduling.list_by_patient(patient_id)
        except HospitalError as exc:
            return _failure(error_kind(exc), str(exc))

        return {
            "success": True,
            "appointments": [_appointment_payload(a) for a in appointments],
        }

    def _run(self, name: str, call: Callable[[], Appointment], message: str) -> dict[str, Any]:
        try:
            appointment = call()
        except HospitalError as exc:
            return _failure(error_kind(exc), str(exc))
        except Exception:
            logger.exception("Unexpected error in {}", name)
            return _failure(
                "unexpected", f"An unexpected error occurred while running {name}."
            )

        return {"success": True, **_appointment_payload(appointment), "message": message}
