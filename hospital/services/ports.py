import datetime as dt
from abc import ABC, abstractmethod

from hospital.domain.models import Appointment, AppointmentStatus


class AbstractSchedulingService(ABC):
    """Appointment scheduling with per-doctor slot consistency."""

    @abstractmethod
    def schedule_appointment(
        self,
        patient_id: int | None,
        doctor_id: int | None,
        scheduled_at: dt.datetime | None,
        reason: str | None = None,
    ) -> Appointment:
        """Book a new appointment in state SCHEDULED.

        Args:
            patient_id: The patient's ID.
            doctor_id: The doctor's ID.
            scheduled_at: Exact slot, naive clinic-local time.
            reason: Optional free text, at most 200 characters.

        Returns:
            The created appointment with its assigned ID.

        Raises:
            ValidationError: If an ID or the date-time is missing.
            InvalidDateError: If ``scheduled_at`` is not strictly in the future.
            NotFoundError: If the patient or doctor does not exist.
            SchedulingConflictError: If the doctor already has an active
                appointment at ``scheduled_at``.
            PersistenceError: If the store fails.
        """

    @abstractmethod
    def reschedule_appointment(
        self,
        appointment_id: int | None,
        new_scheduled_at: dt.datetime | None = None,
        new_reason: str | None = None,
    ) -> Appointment:
        """Move an active appointment and/or change its reason.

        Raises:
            NotFoundError: If the appointment does not exist.
            IllegalTransitionError: If the appointment is no longer SCHEDULED.
            InvalidDateError: If a new date-time is not in the future.
            SchedulingConflictError: If the new slot is taken.
        """

    @abstractmethod
    def change_appointment_status(
        self, appointment_id: int | None, new_status: AppointmentStatus | None
    ) -> Appointment:
        """Apply a lifecycle transition.

        Raises:
            NotFoundError: If the appointment does not exist.
            IllegalTransitionError: If the transition is not allowed.
        """

    @abstractmethod
    def cancel_appointment(self, appointment_id: int | None) -> bool:
        """Delete the appointment record.

        Returns:
            True if it existed, False otherwise.
        """

    @abstractmethod
    def has_conflict(
        self, doctor_id: int, scheduled_at: dt.datetime, exclude_id: int | None = None
    ) -> bool:
        """Check whether the doctor's slot is held by an active appointment."""

    @abstractmethod
    def get_appointment(self, appointment_id: int | None) -> Appointment | None:
        """Look up a single appointment by ID."""

    @abstractmethod
    def list_by_patient(self, patient_id: int | None) -> list[Appointment]:
        """All appointments of a patient, newest first."""
