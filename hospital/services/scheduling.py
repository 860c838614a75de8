import datetime as dt

from loguru import logger
from sqlalchemy.exc import IntegrityError

from hospital.domain import lifecycle
from hospital.domain.datetime_helpers import Clock, day_bounds
from hospital.domain.exceptions import NotFoundError, SchedulingConflictError, ValidationError
from hospital.domain.models import Appointment, AppointmentStatus
from hospital.domain.validation import REASON_MAX, max_length, require, require_future
from hospital.services.conflicts import ConflictChecker
from hospital.services.ports import AbstractSchedulingService
from hospital.store.database import Database
from hospital.store.queries import appointments as appointment_queries
from hospital.store.repository import Store
from hospital.store.tables import AppointmentRow, DoctorRow, PatientRow
from hospital.store.unit_of_work import UnitOfWork


def _to_models(rows: list[AppointmentRow]) -> list[Appointment]:
    return [Appointment.model_validate(row) for row in rows]


class SchedulingService(AbstractSchedulingService):
    """Books, moves and closes appointments.

    Each public operation is one unit of work: the conflict check and the
    write that depends on it commit together or not at all. Two safeguards
    keep concurrent bookings from both passing the check: the doctor row is
    locked for the rest of the transaction, and a partial unique index on
    (doctor_id, scheduled_at) for SCHEDULED rows rejects whatever slips past.
    """

    def __init__(
        self,
        database: Database,
        clock: Clock,
        conflicts: ConflictChecker | None = None,
    ) -> None:
        self._db = database
        self._clock = clock
        self._conflicts = conflicts or ConflictChecker()
        self._patients: Store[PatientRow] = Store(PatientRow)
        self._doctors: Store[DoctorRow] = Store(DoctorRow)
        self._appointments: Store[AppointmentRow] = Store(AppointmentRow)

    def schedule_appointment(
        self,
        patient_id: int | None,
        doctor_id: int | None,
        scheduled_at: dt.datetime | None,
        reason: str | None = None,
    ) -> Appointment:
        require(patient_id, "patient_id")
        require(doctor_id, "doctor_id")
        scheduled_at = require(scheduled_at, "scheduled_at")
        max_length(reason, REASON_MAX, "reason")
        require_future(scheduled_at, self._clock())

        logger.info("Scheduling appointment: doctor={}, slot={}", doctor_id, scheduled_at)

        with self._db.unit_of_work("schedule appointment") as uow:
            patient = self._patients.find_by_id(uow, patient_id)
            if patient is None:
                raise NotFoundError("Patient", patient_id)

            doctor = self._doctors.lock_by_id(uow, doctor_id)
            if doctor is None:
                raise NotFoundError("Doctor", doctor_id)

            self._conflicts.ensure_slot_free(uow, doctor, scheduled_at)

            row = AppointmentRow(
                scheduled_at=scheduled_at,
                reason=reason,
                status=lifecycle.INITIAL_STATUS,
                patient=patient,
                doctor=doctor,
            )
            uow.session.add(row)
            self._flush_slot(uow, doctor.id, doctor.name, scheduled_at)

            appointment = Appointment.model_validate(row)
            uow.commit()

        logger.info("Appointment created: id={}", appointment.id)
        return appointment

    def reschedule_appointment(
        self,
        appointment_id: int | None,
        new_scheduled_at: dt.datetime | None = None,
        new_reason: str | None = None,
    ) -> Appointment:
        require(appointment_id, "appointment_id")
        max_length(new_reason, REASON_MAX, "reason")

        with self._db.unit_of_work("reschedule appointment") as uow:
            row = self._appointments.find_by_id(uow, appointment_id)
            if row is None:
                raise NotFoundError("Appointment", appointment_id)

            lifecycle.ensure_modifiable(row.status)

            if new_scheduled_at is not None and new_scheduled_at != row.scheduled_at:
                require_future(new_scheduled_at, self._clock())
                doctor = self._doctors.lock_by_id(uow, row.doctor_id)
                if doctor is None:
                    raise NotFoundError("Doctor", row.doctor_id)
                self._conflicts.ensure_slot_free(uow, doctor, new_scheduled_at, exclude_id=row.id)
                row.scheduled_at = new_scheduled_at
                self._flush_slot(uow, doctor.id, doctor.name, new_scheduled_at)

            if new_reason is not None:
                row.reason = new_reason

            uow.flush()
            appointment = Appointment.model_validate(row)
            uow.commit()

        logger.info("Appointment rescheduled: id={}", appointment.id)
        return appointment

    def change_appointment_status(
        self, appointment_id: int | None, new_status: AppointmentStatus | None
    ) -> Appointment:
        require(appointment_id, "appointment_id")
        require(new_status, "status")

        with self._db.unit_of_work("change appointment status") as uow:
            row = self._appointments.find_by_id(uow, appointment_id)
            if row is None:
                raise NotFoundError("Appointment", appointment_id)

            row.status = lifecycle.transition(row.status, new_status)
            row = self._appointments.merge(uow, row)

            appointment = Appointment.model_validate(row)
            uow.commit()

        logger.info(
            "Appointment status changed: id={}, status={}",
            appointment.id,
            appointment.status.value,
        )
        return appointment

    def cancel_appointment(self, appointment_id: int | None) -> bool:
        if appointment_id is None:
            return False

        with self._db.unit_of_work("cancel appointment") as uow:
            row = self._appointments.find_by_id(uow, appointment_id)
            if row is None:
                logger.info("Nothing to cancel: appointment {} does not exist", appointment_id)
                return False
            self._appointments.remove(uow, row)
            uow.commit()

        logger.info("Appointment removed: id={}", appointment_id)
        return True

    def has_conflict(
        self, doctor_id: int, scheduled_at: dt.datetime, exclude_id: int | None = None
    ) -> bool:
        with self._db.unit_of_work("check slot") as uow:
            return self._conflicts.has_conflict(uow, doctor_id, scheduled_at, exclude_id)

    def get_appointment(self, appointment_id: int | None) -> Appointment | None:
        with self._db.unit_of_work("find appointment") as uow:
            row = self._appointments.find_by_id(uow, appointment_id)
            return Appointment.model_validate(row) if row is not None else None

    def list_appointments(self) -> list[Appointment]:
        with self._db.unit_of_work("list appointments") as uow:
            return _to_models(appointment_queries.all_newest_first(uow))

    def list_by_patient(self, patient_id: int | None) -> list[Appointment]:
        if patient_id is None:
            return []
        with self._db.unit_of_work("list patient appointments") as uow:
            return _to_models(appointment_queries.by_patient(uow, patient_id))

    def list_by_doctor(self, doctor_id: int | None) -> list[Appointment]:
        if doctor_id is None:
            return []
        with self._db.unit_of_work("list doctor appointments") as uow:
            return _to_models(appointment_queries.by_doctor(uow, doctor_id))

    def list_upcoming_by_doctor(self, doctor_id: int | None) -> list[Appointment]:
        if doctor_id is None:
            return []
        with self._db.unit_of_work("list doctor appointments") as uow:
            return _to_models(appointment_queries.upcoming_by_doctor(uow, doctor_id, self._clock()))

    def list_by_date_range(self, start: dt.date | None, end: dt.date | None) -> list[Appointment]:
        if start is None or end is None:
            return []
        if start > end:
            raise ValidationError("Start date must not be after end date", field="start")
        lower, upper = day_bounds(start, end)
        with self._db.unit_of_work("list appointments by date") as uow:
            return _to_models(appointment_queries.by_date_range(uow, lower, upper))

    def list_by_status(self, status: AppointmentStatus | None) -> list[Appointment]:
        if status is None:
            return []
        with self._db.unit_of_work("list appointments by status") as uow:
            return _to_models(appointment_queries.by_status(uow, status))

    def _flush_slot(
        self, uow: UnitOfWork, doctor_id: int, doctor_name: str, scheduled_at: dt.datetime
    ) -> None:
        """Flush pending changes, reporting an active-slot index hit as a conflict.

        A failed flush rolls the session back and expires its rows, so the doctor
        is passed as plain values read before the flush.
        """
        try:
            uow.flush()
        except IntegrityError as exc:
            logger.warning("Slot index rejected write: doctor={}, slot={}", doctor_id, scheduled_at)
            raise SchedulingConflictError(doctor_name, scheduled_at) from exc
