"""Unit tests for front-desk request handlers."""

from unittest.mock import MagicMock

import pytest

from hospital.domain.exceptions import InvalidEmailError, PersistenceError
from hospital.domain.models import Doctor, Patient
from hospital.frontdesk.handlers import FrontDeskHandlers, error_kind
from hospital.services.scheduling import SchedulingService

# Fixtures (scheduling, patient, doctor, ...) provided by tests/conftest.py


@pytest.fixture
def handlers(scheduling: SchedulingService) -> FrontDeskHandlers:
    return FrontDeskHandlers(scheduling)


@pytest.fixture
def booked(handlers: FrontDeskHandlers, patient: Patient, doctor: Doctor) -> dict:
    result = handlers.handle_schedule_appointment(
        {
            "patient_id": str(patient.id),
            "doctor_id": str(doctor.id),
            "scheduled_at": "2026-03-11T09:00",
            "reason": "checkup",
        }
    )
    assert result["success"] is True
    return result


class TestHandleScheduleAppointment:
    def test_success_payload(self, booked: dict, doctor: Doctor) -> None:
        assert booked["status"] == "SCHEDULED"
        assert booked["doctor_name"] == doctor.name
        assert booked["slot"] == "11/03/2026 09:00"
        assert booked["reason"] == "checkup"

    def test_missing_fields(self, handlers: FrontDeskHandlers) -> None:
        result = handlers.handle_schedule_appointment({"patient_id": "1", "doctor_id": "1"})

        assert result["success"] is False
        assert result["error_kind"] == "validation"

    @pytest.mark.parametrize(
        ("arguments", "fragment"),
        [
            ({"patient_id": "abc", "doctor_id": "1", "scheduled_at": "2026-03-11T09:00"}, "ID"),
            ({"patient_id": "1", "doctor_id": "0", "scheduled_at": "2026-03-11T09:00"}, "ID"),
            ({"patient_id": "1", "doctor_id": "1", "scheduled_at": "tomorrow"}, "date-time"),
            (
                {"patient_id": "1", "doctor_id": "1", "scheduled_at": "2026-03-11T09:00+02:00"},
                "offset",
            ),
        ],
        ids=["non-numeric-id", "zero-id", "bad-datetime", "aware-datetime"],
    )
    def test_unparseable_input(
        self, handlers: FrontDeskHandlers, arguments: dict, fragment: str
    ) -> None:
        result = handlers.handle_schedule_appointment(arguments)

        assert result["error_kind"] == "validation"
        assert fragment in result["message"]

    def test_conflict_kind(
        self, handlers: FrontDeskHandlers, booked: dict, other_patient: Patient, doctor: Doctor
    ) -> None:
        result = handlers.handle_schedule_appointment(
            {
                "patient_id": other_patient.id,
                "doctor_id": doctor.id,
                "scheduled_at": "2026-03-11T09:00",
            }
        )

        assert result["success"] is False
        assert result["error_kind"] == "scheduling_conflict"
        assert "11/03/2026 09:00" in result["message"]

    def test_past_date_kind(
        self, handlers: FrontDeskHandlers, patient: Patient, doctor: Doctor
    ) -> None:
        result = handlers.handle_schedule_appointment(
            {"patient_id": patient.id, "doctor_id": doctor.id, "scheduled_at": "2026-03-09T09:00"}
        )

        assert result["error_kind"] == "invalid_date"

    def test_unknown_doctor_kind(self, handlers: FrontDeskHandlers, patient: Patient) -> None:
        result = handlers.handle_schedule_appointment(
            {"patient_id": patient.id, "doctor_id": 999, "scheduled_at": "2026-03-11T09:00"}
        )

        assert result["error_kind"] == "not_found"

    def test_unexpected_error_is_reported_generically(self) -> None:
        scheduling = MagicMock()
        scheduling.schedule_appointment.side_effect = RuntimeError("boom")
        handlers = FrontDeskHandlers(scheduling)

        result = handlers.handle_schedule_appointment(
            {"patient_id": "1", "doctor_id": "1", "scheduled_at": "2026-03-11T09:00"}
        )

        assert result["error_kind"] == "unexpected"
        assert "boom" not in result["message"]


class TestHandleLifecycle:
    def test_change_status_then_reschedule_is_illegal(
        self, handlers: FrontDeskHandlers, booked: dict
    ) -> None:
        changed = handlers.handle_change_status(
            {"appointment_id": booked["appointment_id"], "status": "attended"}
        )
        assert changed["status"] == "ATTENDED"

        result = handlers.handle_reschedule_appointment(
            {"appointment_id": booked["appointment_id"], "scheduled_at": "2026-03-17T09:00"}
        )
        assert result["error_kind"] == "illegal_transition"

    def test_reschedule_reason_only(self, handlers: FrontDeskHandlers, booked: dict) -> None:
        result = handlers.handle_reschedule_appointment(
            {"appointment_id": booked["appointment_id"], "reason": "follow-up"}
        )

        assert result["success"] is True
        assert result["reason"] == "follow-up"
        assert result["slot"] == booked["slot"]

    def test_unknown_status(self, handlers: FrontDeskHandlers, booked: dict) -> None:
        result = handlers.handle_change_status(
            {"appointment_id": booked["appointment_id"], "status": "postponed"}
        )

        assert result["error_kind"] == "validation"

    def test_cancel_twice(self, handlers: FrontDeskHandlers, booked: dict) -> None:
        first = handlers.handle_cancel_appointment({"appointment_id": booked["appointment_id"]})
        second = handlers.handle_cancel_appointment({"appointment_id": booked["appointment_id"]})

        assert first["success"] is True
        assert second["error_kind"] == "not_found"

    def test_list_patient_appointments(
        self, handlers: FrontDeskHandlers, booked: dict, patient: Patient
    ) -> None:
        result = handlers.handle_list_patient_appointments({"patient_id": patient.id})

        assert result["success"] is True
        assert [a["appointment_id"] for a in result["appointments"]] == [booked["appointment_id"]]


class TestErrorKind:
    def test_subclass_maps_to_parent_kind(self) -> None:
        assert error_kind(InvalidEmailError("x")) == "validation"

    def test_persistence(self) -> None:
        assert error_kind(PersistenceError("save", RuntimeError("x"))) == "persistence"
