import datetime as dt

from loguru import logger

from hospital.domain.exceptions import SchedulingConflictError
from hospital.domain.validation import require
from hospital.store.queries import appointments as appointment_queries
from hospital.store.tables import DoctorRow
from hospital.store.unit_of_work import UnitOfWork


class ConflictChecker:
    """Decides whether a doctor's slot is already taken.

    A slot is a (doctor, exact date-time) pair. Only SCHEDULED appointments
    occupy it; attended and cancelled ones free it again. The query runs on
    the caller's unit of work so it sees the same snapshot as the write that
    follows it.
    """

    def has_conflict(
        self,
        uow: UnitOfWork,
        doctor_id: int,
        scheduled_at: dt.datetime,
        exclude_id: int | None = None,
    ) -> bool:
        require(doctor_id, "doctor_id")
        require(scheduled_at, "scheduled_at")
        return appointment_queries.exists_scheduled(uow, doctor_id, scheduled_at, exclude_id)

    def ensure_slot_free(
        self,
        uow: UnitOfWork,
        doctor: DoctorRow,
        scheduled_at: dt.datetime,
        exclude_id: int | None = None,
    ) -> None:
        if self.has_conflict(uow, doctor.id, scheduled_at, exclude_id):
            logger.warning("Slot taken: doctor={}, slot={}", doctor.id, scheduled_at)
            raise SchedulingConflictError(doctor.name, scheduled_at)
