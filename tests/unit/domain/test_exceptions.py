import datetime as dt

from hospital.domain.exceptions import (
    HospitalError,
    IllegalTransitionError,
    InvalidDateError,
    NotFoundError,
    PersistenceError,
    SchedulingConflictError,
)


class TestMessages:
    def test_conflict_names_doctor_and_formatted_slot(self) -> None:
        exc = SchedulingConflictError("Dr. Morales", dt.datetime(2026, 3, 11, 9, 0))

        assert exc.doctor_name == "Dr. Morales"
        assert str(exc) == (
            "Doctor Dr. Morales already has an appointment scheduled for 11/03/2026 09:00"
        )

    def test_invalid_date_carries_value(self) -> None:
        value = dt.datetime(2020, 1, 5, 7, 30)
        exc = InvalidDateError(value)

        assert exc.value == value
        assert "05/01/2020 07:30" in str(exc)
        assert "Appointments must be scheduled for future dates" in str(exc)

    def test_not_found_carries_identity(self) -> None:
        exc = NotFoundError("Patient", 42)

        assert exc.entity == "Patient"
        assert exc.identity == 42
        assert str(exc) == "Patient with ID 42 was not found"

    def test_persistence_error_keeps_cause(self) -> None:
        cause = RuntimeError("disk full")
        exc = PersistenceError("schedule appointment", cause)

        assert exc.cause is cause
        assert str(exc) == "Failed to schedule appointment: disk full"

    def test_all_share_a_base(self) -> None:
        assert issubclass(IllegalTransitionError, HospitalError)
        assert issubclass(PersistenceError, HospitalError)
