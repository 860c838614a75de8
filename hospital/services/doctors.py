from loguru import logger

from hospital.domain.exceptions import (
    DoctorAlreadyExistsError,
    DuplicateRecordError,
    NotFoundError,
    ReferentialIntegrityError,
)
from hospital.domain.datetime_helpers import Clock
from hospital.domain.models import Appointment, Doctor, DoctorAgenda, Specialty
from hospital.domain.validation import LICENSE_MAX, NAME_MAX, require, require_text, validate_email
from hospital.store.database import Database
from hospital.store.queries import appointments as appointment_queries
from hospital.store.queries import people
from hospital.store.repository import Store
from hospital.store.tables import DoctorRow
from hospital.store.unit_of_work import UnitOfWork


class DoctorService:
    """Registration and upkeep of doctor records."""

    def __init__(self, database: Database, clock: Clock) -> None:
        self._db = database
        self._clock = clock
        self._doctors: Store[DoctorRow] = Store(DoctorRow)

    def register_doctor(
        self,
        name: str | None,
        license_number: str | None,
        specialty: Specialty | None,
        email: str | None,
    ) -> Doctor:
        name = require_text(name, NAME_MAX, "name")
        license_number = require_text(license_number, LICENSE_MAX, "license_number")
        specialty = require(specialty, "specialty")
        email = validate_email(email)

        with self._db.unit_of_work("register doctor") as uow:
            self._ensure_unique(uow, license_number=license_number, email=email)
            row = self._doctors.add(
                uow,
                DoctorRow(
                    name=name,
                    license_number=license_number,
                    specialty=specialty,
                    email=email,
                ),
            )
            doctor = Doctor.model_validate(row)
            uow.commit()

        logger.info("Doctor registered: id={}, specialty={}", doctor.id, doctor.specialty.value)
        return doctor

    def update_doctor(
        self,
        doctor_id: int | None,
        *,
        name: str | None = None,
        license_number: str | None = None,
        specialty: Specialty | None = None,
        email: str | None = None,
    ) -> Doctor:
        require(doctor_id, "doctor_id")

        with self._db.unit_of_work("update doctor") as uow:
            row = self._doctors.find_by_id(uow, doctor_id)
            if row is None:
                raise NotFoundError("Doctor", doctor_id)

            if name is not None:
                row.name = require_text(name, NAME_MAX, "name")
            if license_number is not None:
                license_number = require_text(license_number, LICENSE_MAX, "license_number")
                if license_number != row.license_number:
                    self._ensure_unique(uow, license_number=license_number)
                row.license_number = license_number
            if specialty is not None:
                row.specialty = specialty
            if email is not None:
                email = validate_email(email)
                if email != row.email:
                    self._ensure_unique(uow, email=email)
                row.email = email

            row = self._doctors.merge(uow, row)
            doctor = Doctor.model_validate(row)
            uow.commit()

        logger.info("Doctor updated: id={}", doctor.id)
        return doctor

    def get_doctor(self, doctor_id: int | None) -> Doctor | None:
        with self._db.unit_of_work("find doctor") as uow:
            row = self._doctors.find_by_id(uow, doctor_id)
            return Doctor.model_validate(row) if row is not None else None

    def find_by_license(self, license_number: str | None) -> Doctor | None:
        if license_number is None or not license_number.strip():
            return None
        with self._db.unit_of_work("find doctor by license") as uow:
            row = people.doctor_by_license(uow, license_number.strip())
            return Doctor.model_validate(row) if row is not None else None

    def list_doctors(self) -> list[Doctor]:
        with self._db.unit_of_work("list doctors") as uow:
            return [Doctor.model_validate(row) for row in self._doctors.list_all(uow)]

    def list_by_specialty(self, specialty: Specialty | None) -> list[Doctor]:
        if specialty is None:
            return []
        with self._db.unit_of_work("list doctors by specialty") as uow:
            return [Doctor.model_validate(row) for row in people.doctors_by_specialty(uow, specialty)]

    def list_doctors_with_upcoming_appointments(self) -> list[DoctorAgenda]:
        """Every doctor by name, each with the appointments still ahead of them."""
        with self._db.unit_of_work("list doctor agendas") as uow:
            rows = people.doctors_with_upcoming(uow, self._clock())
            return [
                DoctorAgenda(
                    doctor=Doctor.model_validate(row),
                    upcoming=[
                        Appointment.model_validate(appt)
                        for appt in sorted(row.appointments, key=lambda a: a.scheduled_at)
                    ],
                )
                for row in rows
            ]

    def delete_doctor(self, doctor_id: int | None) -> bool:
        """Remove a doctor who holds no appointments.

        Raises:
            ReferentialIntegrityError: If any appointment still references the doctor.
        """
        if doctor_id is None:
            return False
        with self._db.unit_of_work("delete doctor") as uow:
            row = self._doctors.find_by_id(uow, doctor_id)
            if row is None:
                return False
            if appointment_queries.count_by_doctor(uow, row.id) > 0:
                logger.warning("Refusing to delete doctor {} with appointments", doctor_id)
                raise ReferentialIntegrityError(
                    f"Doctor {row.name} cannot be deleted while appointments reference them"
                )
            self._doctors.remove(uow, row)
            uow.commit()

        logger.info("Doctor deleted: id={}", doctor_id)
        return True

    def _ensure_unique(
        self, uow: UnitOfWork, license_number: str | None = None, email: str | None = None
    ) -> None:
        if license_number is not None and people.doctor_by_license(uow, license_number):
            raise DoctorAlreadyExistsError(license_number)
        if email is not None and people.doctor_by_email(uow, email):
            raise DuplicateRecordError(f"A doctor with email {email} is already registered")
